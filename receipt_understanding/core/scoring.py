"""
Confidence scoring for extracted receipt fields.
"""

from .models import ExtractedFields

AMOUNT_POINTS = 40
MERCHANT_POINTS = 30
DATE_POINTS = 20
ITEMS_POINTS = 10
MAX_CONFIDENCE = 100


def compute_confidence(fields: ExtractedFields) -> int:
    """Score 0-100 from which fields were recovered. No partial credit."""
    score = 0
    if fields.amount is not None:
        score += AMOUNT_POINTS
    if fields.merchant is not None:
        score += MERCHANT_POINTS
    if fields.date is not None:
        score += DATE_POINTS
    if fields.items:
        score += ITEMS_POINTS
    return min(score, MAX_CONFIDENCE)
