"""
Utility functions and constants for receipt processing.
"""

import hashlib
import re
import datetime as dt
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")

# File type constants
IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp", ".webp"}
PDF_EXTS = {".pdf"}
TEXT_EXTS = {".txt"}
RECEIPT_EXTS = IMAGE_EXTS | PDF_EXTS | TEXT_EXTS

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB

# Pattern building blocks (rupee locale)
HSPACE = r"[^\S\n]"  # whitespace that stays on the same line
NUMBER = r"(\d+(?:,\d+)*(?:\.\d{1,2})?)"
LEADING_CURRENCY = r"(?:₹|\b(?:rs|inr)\.?)"
TRAILING_CURRENCY = r"(?:₹|(?:rs|inr)\b\.?)"
MONTHS = r"(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)"
NUMERIC_DATE = r"(\d{1,2})[-/](\d{1,2})[-/](\d{4}|\d{2})\b"

# Amount tiers, most specific first
AMOUNT_PATTERNS = [
    # Labeled total on one line: "Grand Total: Rs. 1,250.00"
    re.compile(
        r"\b(?:grand" + HSPACE + r"+total|net" + HSPACE + r"+amount|total|amount|payable)"
        + HSPACE + r"*[:\-=]?" + HSPACE + r"*"
        + r"(?:" + LEADING_CURRENCY + HSPACE + r"*)?" + NUMBER,
        re.IGNORECASE,
    ),
    # Currency marker first: "Rs.120", "₹ 99.50"
    re.compile(LEADING_CURRENCY + HSPACE + r"*" + NUMBER, re.IGNORECASE),
    # Currency marker last: "120 Rs", "99.50₹"
    re.compile(NUMBER + HSPACE + r"*" + TRAILING_CURRENCY, re.IGNORECASE),
    # Bare total, value may sit on the next line: "TOTAL\n49.04"
    re.compile(r"\btotal[:\s]+" + NUMBER, re.IGNORECASE),
]

# Date tiers
DATE_PATTERNS = [
    re.compile(r"\b" + NUMERIC_DATE),                                        # 15/03/2024, 15-03-24
    re.compile(r"\b(\d{1,2})\s+" + MONTHS + r"[a-z]*\.?,?\s+(\d{4}|\d{2})\b",  # 15 Mar 2024
               re.IGNORECASE),
    re.compile(r"\b(?:date|dt)\b\.?" + HSPACE + r"*[:\-]?" + HSPACE + r"*" + NUMERIC_DATE,
               re.IGNORECASE),                                               # Date: 15/03/2024
]

# A price on a line, currency on either side
PRICE_PATTERN = re.compile(
    NUMBER + HSPACE + r"*" + TRAILING_CURRENCY + r"|" + LEADING_CURRENCY + HSPACE + r"*" + NUMBER,
    re.IGNORECASE,
)

# Bill summary lines: labels followed only by numbers, punctuation and currency
# ("Total: Rs.120", "CGST 2.5% Rs.5"), never by a product name (use with .match)
SUMMARY_LABEL = (r"(?:sub" + HSPACE + r"*total|grand" + HSPACE + r"+total|net" + HSPACE + r"+amount|total|amount"
                 r"|payable|balance|tax|[csi]?gst|vat|discount|round" + HSPACE + r"*off)\b")
SUMMARY_LINE_PATTERN = re.compile(
    SUMMARY_LABEL + r"(?:[^a-z\n]+" + SUMMARY_LABEL + r")*(?:[^a-z\n]|rs|inr)*$",
    re.IGNORECASE,
)


def first_match(text: str, patterns: Iterable[re.Pattern],
                convert: Callable[[re.Match], Optional[T]]) -> Optional[T]:
    """
    Try each pattern in order on its first match only.
    The first conversion that is not None wins.
    """
    for pat in patterns:
        m = pat.search(text)
        if m is None:
            continue
        value = convert(m)
        if value is not None:
            return value
    return None


def slugify(s: str) -> str:
    """Convert string to filesystem-safe slug."""
    return re.sub(r"[^a-z0-9]+", "-", s.lower()).strip("-")


def normalize_amount(s: str) -> Optional[Decimal]:
    """Normalize amount string to Decimal."""
    if not s:
        return None
    s = s.replace(",", "").replace(" ", "")
    try:
        value = Decimal(s)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def sha1_file(path: Path) -> str:
    """Calculate SHA1 hash of file."""
    h = hashlib.sha1()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def get_current_week() -> str:
    """Return current ISO week: YYYY-Www (e.g., 2025-W43)."""
    year, week, _ = dt.date.today().isocalendar()
    return f"{year}-W{week:02d}"


def money_fmt(v: Optional[float]) -> str:
    """Format amount as rupees."""
    return f"₹{v:,.2f}" if v is not None else ""
