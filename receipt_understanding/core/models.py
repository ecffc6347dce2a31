"""
Data models for receipt understanding.
"""

import datetime as dt
from dataclasses import dataclass, field, asdict
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Sequence, Tuple


class Category(str, Enum):
    """Spending categories a receipt can be filed under."""
    FOOD_AND_DINING = "Food & Dining"
    TRANSPORTATION = "Transportation"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    HEALTHCARE = "Healthcare"
    UTILITIES = "Utilities"
    EDUCATION = "Education"
    TRAVEL = "Travel"
    SALARY = "Salary"
    BUSINESS = "Business"
    INVESTMENT = "Investment"
    OTHERS = "Others"


class FailureReason(str, Enum):
    """Why a receipt could not be turned into a transaction."""
    EMPTY_INPUT = "empty input"
    AMOUNT_NOT_FOUND = "amount not found"


# Ordered (category, keywords) table used by the categorizer
CategoryRules = Sequence[Tuple[Category, Sequence[str]]]


@dataclass(frozen=True)
class ExtractedFields:
    """What the extractors recovered from the text. None means not found."""
    amount: Optional[Decimal] = None
    date: Optional[dt.date] = None
    merchant: Optional[str] = None
    items: List[str] = field(default_factory=list)

    def to_dict(self):
        """Convert to a JSON-ready dictionary."""
        return {
            "amount": float(self.amount) if self.amount is not None else None,
            "date": self.date.isoformat() if self.date else None,
            "merchant": self.merchant,
            "items": list(self.items),
        }


@dataclass(frozen=True)
class ReceiptData:
    """A successfully understood receipt, ready to become a transaction."""
    amount: Decimal
    category: Category
    description: str
    date: dt.date
    merchant: Optional[str]
    items: List[str]
    confidence: int
    date_defaulted: bool = False

    def to_dict(self):
        """Convert to a JSON-ready dictionary."""
        d = asdict(self)
        d["amount"] = float(self.amount)
        d["category"] = self.category.value
        d["date"] = self.date.isoformat()
        return d


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing one receipt: either ``data`` (success) or ``reason``
    (failure), never both. ``fields`` holds the raw extraction when it ran.
    """
    data: Optional[ReceiptData] = None
    reason: Optional[FailureReason] = None
    fields: Optional[ExtractedFields] = None

    def __post_init__(self):
        if (self.data is None) == (self.reason is None):
            raise ValueError("ParseResult needs exactly one of data or reason")

    @classmethod
    def succeeded(cls, data: ReceiptData, fields: ExtractedFields) -> "ParseResult":
        return cls(data=data, fields=fields)

    @classmethod
    def failed(cls, reason: FailureReason,
               fields: Optional[ExtractedFields] = None) -> "ParseResult":
        return cls(reason=reason, fields=fields)

    @property
    def success(self) -> bool:
        return self.data is not None

    def to_dict(self):
        """Convert to a JSON-ready dictionary."""
        return {
            "success": self.success,
            "data": self.data.to_dict() if self.data else None,
            "error": self.reason.value if self.reason else None,
            "parsed": self.fields.to_dict() if self.fields else None,
        }


@dataclass
class ParserConfig:
    """Tunables for the receipt parser."""
    max_amount: Decimal = Decimal("100000")
    date_order: str = "dmy"
    rules: Optional[CategoryRules] = None
