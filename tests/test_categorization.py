import json

import pytest

from receipt_understanding.core.models import Category
from receipt_understanding.core.categorization import (DEFAULT_RULES, RulesError, categorize,
                                                       describe_rules, load_rules)


def test_merchant_keyword():
    assert categorize("CAFE COFFEE DAY", ["Cappuccino"]) == Category.FOOD_AND_DINING


def test_items_are_searched_too():
    assert categorize(None, ["Paracetamol", "medicine strip"]) == Category.HEALTHCARE


def test_case_insensitive_substring_match():
    assert categorize("INDIAN OIL PETROL PUMP", []) == Category.TRANSPORTATION


@pytest.mark.parametrize("merchant", ["", None, "zzz", "१२३ ॐ", "\n\t"])
def test_fallback_is_others(merchant):
    assert categorize(merchant, []) == Category.OTHERS


def test_declaration_order_breaks_ties():
    # "mobile" is both Shopping and Utilities; Shopping is declared first
    assert categorize("Mobile Recharge", []) == Category.SHOPPING
    # "gas" is both Transportation and Utilities
    assert categorize("Indane Gas", []) == Category.TRANSPORTATION
    # "mall" (Shopping) is reached before "pvr" (Entertainment)
    assert categorize("PVR Cinemas Phoenix Mall", []) == Category.SHOPPING


def test_keyword_order_within_food():
    assert categorize("Uber Eats", []) == Category.FOOD_AND_DINING
    assert categorize("Uber", []) == Category.TRANSPORTATION


def test_default_table_order():
    assert [c for c, _ in DEFAULT_RULES] == [
        Category.FOOD_AND_DINING, Category.TRANSPORTATION, Category.SHOPPING,
        Category.HEALTHCARE, Category.UTILITIES, Category.ENTERTAINMENT,
    ]


def test_custom_rules():
    rules = [(Category.EDUCATION, ["school", "tuition"])]
    assert categorize("DPS School", [], rules) == Category.EDUCATION
    assert categorize("CAFE COFFEE DAY", [], rules) == Category.OTHERS


def test_load_rules_preserves_order(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"categories": [
        {"name": "Travel", "keywords": ["IRCTC", "makemytrip"]},
        {"name": "Transportation", "keywords": ["irctc", "uber"]},
    ]}), encoding="utf-8")

    rules = load_rules(path)

    assert rules == [(Category.TRAVEL, ["irctc", "makemytrip"]),
                     (Category.TRANSPORTATION, ["irctc", "uber"])]
    assert categorize("IRCTC e-ticket", [], rules) == Category.TRAVEL


def test_load_rules_missing_file_uses_defaults(tmp_path):
    assert load_rules(tmp_path / "nope.json") is DEFAULT_RULES


@pytest.mark.parametrize("content", [
    "{not json",
    json.dumps({"matchers": []}),
    json.dumps({"categories": [{"name": "Groceries", "keywords": ["rice"]}]}),
    json.dumps({"categories": [{"name": "Shopping", "keywords": "mall"}]}),
])
def test_load_rules_rejects_bad_files(tmp_path, content):
    path = tmp_path / "rules.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(RulesError):
        load_rules(path)


def test_describe_rules():
    lines = describe_rules([(Category.SHOPPING, ["mall", "store"])])
    assert lines == ["Shopping: 2 keyword(s)"]


def test_load_rules_unreadable_paths(tmp_path):
    with pytest.raises(RulesError):
        load_rules(tmp_path)

    latin1 = tmp_path / "rules.json"
    latin1.write_bytes(b'{"categories": [{"name": "Caf\xe9"}]}')
    with pytest.raises(RulesError):
        load_rules(latin1)
