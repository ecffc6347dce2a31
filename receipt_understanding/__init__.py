"""
Receipt Understanding

Turns raw OCR text from a purchase receipt into a structured transaction:
amount, merchant, date, line items, spending category and a confidence score.
"""

__version__ = "1.0.0"
__author__ = "Receipt Understanding Contributors"

from receipt_understanding.core.models import (Category, FailureReason, ParseResult,
                                               ParserConfig, ReceiptData)
from receipt_understanding.core.receipt_parser import ReceiptParser, parse_receipt

__all__ = ["Category", "FailureReason", "ParseResult", "ParserConfig", "ReceiptData",
           "ReceiptParser", "parse_receipt"]
