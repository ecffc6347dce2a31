from datetime import date
from decimal import Decimal

from receipt_understanding.core.models import ExtractedFields
from receipt_understanding.core.scoring import compute_confidence


def test_all_fields_score_100():
    fields = ExtractedFields(Decimal("10"), date(2024, 1, 1), "Shop", ["Tea"])
    assert compute_confidence(fields) == 100


def test_nothing_scores_0():
    assert compute_confidence(ExtractedFields()) == 0


def test_points_per_field():
    assert compute_confidence(ExtractedFields(amount=Decimal("1"))) == 40
    assert compute_confidence(ExtractedFields(merchant="Shop")) == 30
    assert compute_confidence(ExtractedFields(date=date(2024, 1, 1))) == 20
    assert compute_confidence(ExtractedFields(items=["Tea"])) == 10


def test_no_partial_credit_for_poor_merchant():
    assert compute_confidence(ExtractedFields(merchant="x~~")) == compute_confidence(
        ExtractedFields(merchant="Apollo Pharmacy"))
