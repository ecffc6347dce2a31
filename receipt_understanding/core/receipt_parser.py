"""
Turn raw OCR text into a structured transaction.

The parser is a pure function of its input: no I/O, no shared state, safe
to call from many threads at once.
"""

import datetime as dt
from decimal import Decimal
from typing import Callable, Optional

from .models import ExtractedFields, FailureReason, ParseResult, ParserConfig, ReceiptData
from .parsers import parse_amount, parse_date, parse_items, parse_merchant
from .categorization import categorize
from .scoring import compute_confidence

GENERIC_DESCRIPTION = "Receipt purchase"
DESCRIPTION_ITEMS = 3


def build_description(merchant: Optional[str], items) -> str:
    """Build 'Purchase at <merchant> - <first items>', or a generic label."""
    if merchant is None:
        return GENERIC_DESCRIPTION
    description = f"Purchase at {merchant}"
    if items:
        description += f" - {', '.join(items[:DESCRIPTION_ITEMS])}"
    return description


class ReceiptParser:
    """Runs the extractors, categorizer and scorer over one receipt text."""

    def __init__(self, config: Optional[ParserConfig] = None,
                 today: Callable[[], dt.date] = dt.date.today):
        """
        Args:
            config: Parser tunables (amount bound, date order, category rules)
            today: Clock used when the receipt has no readable date
        """
        self.config = config or ParserConfig()
        self.today = today

    def extract(self, text: str) -> ExtractedFields:
        """Run the four field extractors independently."""
        return ExtractedFields(
            amount=parse_amount(text, Decimal(self.config.max_amount)),
            date=parse_date(text, self.config.date_order),
            merchant=parse_merchant(text),
            items=parse_items(text),
        )

    def parse(self, text: Optional[str]) -> ParseResult:
        """Parse one receipt text into a success with data, or a failure with a reason."""
        if not text or not text.strip():
            return ParseResult.failed(FailureReason.EMPTY_INPUT)

        fields = self.extract(text)
        category = categorize(fields.merchant or "", fields.items, self.config.rules)
        confidence = compute_confidence(fields)

        if fields.amount is None:
            return ParseResult.failed(FailureReason.AMOUNT_NOT_FOUND, fields)

        data = ReceiptData(
            amount=fields.amount,
            category=category,
            description=build_description(fields.merchant, fields.items),
            date=fields.date or self.today(),
            merchant=fields.merchant,
            items=list(fields.items),
            confidence=confidence,
            date_defaulted=fields.date is None,
        )
        return ParseResult.succeeded(data, fields)


def parse_receipt(text: Optional[str], config: Optional[ParserConfig] = None) -> ParseResult:
    """Parse raw receipt text with a one-off parser."""
    return ReceiptParser(config).parse(text)
