"""
Parsers for extracting information from receipt text.

Every parser returns None (or an empty list) when nothing plausible is
found; none of them raise on malformed text.
"""

import re
import datetime as dt
from decimal import Decimal
from typing import List, Optional

from .utils import (AMOUNT_PATTERNS, DATE_PATTERNS, PRICE_PATTERN, SUMMARY_LINE_PATTERN,
                    first_match, normalize_amount)

DEFAULT_MAX_AMOUNT = Decimal("100000")
DATE_ORDERS = ("dmy", "mdy")

MERCHANT_SEARCH_LINES = 5
MERCHANT_STOPWORDS = ("receipt", "bill")

_ITEM_NOISE = re.compile(r"₹|(?<![a-z])(?:rs|inr)(?![a-z])\.?|[\d.,:;*#@/\-]", re.IGNORECASE)


def _lines(text: str) -> List[str]:
    return [ln.strip() for ln in text.splitlines() if ln.strip()]


def parse_amount(text: str, max_amount: Decimal = DEFAULT_MAX_AMOUNT) -> Optional[Decimal]:
    """
    Extract the total amount from receipt text.

    Tiers are tried in order (labeled total, currency before the number,
    currency after the number, bare "total"). Only the first match of each
    tier is looked at; a labeled total wins over any larger number found
    by a later tier.
    """
    max_amount = Decimal(max_amount)

    def accept(m):
        val = normalize_amount(m.group(1))
        if val is not None and 0 < val < max_amount:
            return val.quantize(Decimal("0.01"))
        return None

    return first_match(text, AMOUNT_PATTERNS, accept)


def parse_date(text: str, date_order: str = "dmy") -> Optional[dt.date]:
    """
    Extract the transaction date from receipt text.

    Numeric dates are read day-first for "dmy" and month-first for "mdy";
    nothing is guessed from the values themselves. Two-digit years are
    taken as 20YY. An impossible date (e.g. 32/13/2024) sends the search
    on to the next tier.
    """
    if date_order not in DATE_ORDERS:
        raise ValueError(f"Unknown date order: {date_order!r} (expected one of {DATE_ORDERS})")

    def to_date(m):
        first, second, year = m.groups()
        try:
            y = int(year)
            if y < 100:
                y += 2000
            if second.isdigit():
                a, b = int(first), int(second)
                d, mo = (a, b) if date_order == "dmy" else (b, a)
            else:
                # Month name
                d = int(first)
                mo = dt.datetime.strptime(second[:3].title(), "%b").month
            return dt.date(y, mo, d)
        except ValueError:
            return None

    return first_match(text, DATE_PATTERNS, to_date)


def parse_merchant(text: str) -> Optional[str]:
    """
    Extract the merchant name from the heading of the receipt.

    Only the first few non-empty lines are considered; the first one that
    looks like a name (no digits, sensible length, not a "receipt"/"bill"
    caption) is returned unchanged.
    """
    for ln in _lines(text)[:MERCHANT_SEARCH_LINES]:
        if not 3 < len(ln) < 50:
            continue
        if any(c.isdigit() for c in ln):
            continue
        lower = ln.lower()
        if any(word in lower for word in MERCHANT_STOPWORDS):
            continue
        return ln
    return None


def parse_items(text: str) -> List[str]:
    """Extract purchased item descriptions from priced lines, top to bottom."""
    items = []
    for ln in _lines(text):
        if not PRICE_PATTERN.search(ln) or SUMMARY_LINE_PATTERN.match(ln):
            continue
        words = _ITEM_NOISE.sub(" ", ln).split()
        # Length is judged without whitespace; the kept name keeps single spaces
        if len("".join(words)) > 2:
            items.append(" ".join(words))
    return items
