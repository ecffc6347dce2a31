"""
Categorization logic for receipts based on keyword rules.
"""

import json
from pathlib import Path
from typing import List, Optional, Sequence

from .models import Category, CategoryRules


class RulesError(ValueError):
    """Raised when a rules file cannot be used."""


# Declaration order is the tie-break: the first category with a matching
# keyword wins, even when a later category matches too.
DEFAULT_RULES: CategoryRules = [
    (Category.FOOD_AND_DINING, [
        "restaurant", "cafe", "food", "pizza", "burger", "hotel", "dhaba", "canteen",
        "mcdonald", "kfc", "dominos", "pizza hut", "subway", "cafe coffee day",
        "starbucks", "chai", "tea", "swiggy", "zomato", "uber eats",
    ]),
    (Category.TRANSPORTATION, [
        "uber", "ola", "taxi", "auto", "bus", "metro", "railway", "petrol", "diesel",
        "fuel", "gas", "station", "transport", "parking", "toll", "rapido",
    ]),
    (Category.SHOPPING, [
        "mall", "store", "shop", "market", "bazaar", "amazon", "flipkart", "myntra",
        "clothing", "fashion", "shoes", "electronics", "mobile", "laptop",
    ]),
    (Category.HEALTHCARE, [
        "hospital", "clinic", "doctor", "medical", "pharmacy", "medicine", "health",
        "apollo", "fortis", "max", "aiims", "dental",
    ]),
    (Category.UTILITIES, [
        "electricity", "water", "gas", "internet", "wifi", "mobile", "phone",
        "broadband", "cable", "dish", "airtel", "jio", "vodafone", "bsnl",
    ]),
    (Category.ENTERTAINMENT, [
        "movie", "cinema", "theatre", "pvr", "inox", "game", "park", "mall",
        "netflix", "amazon prime", "hotstar", "spotify", "youtube",
    ]),
]


def load_rules(path: Path) -> CategoryRules:
    """
    Load categorization rules from a JSON file.

    Format (order is significant):
        {
          "categories": [
            {"name": "Food & Dining", "keywords": ["cafe", "pizza"]},
            {"name": "Education", "keywords": ["school", "tuition"]}
          ]
        }

    A missing file means the built-in rules.
    """
    if not path.exists():
        return DEFAULT_RULES
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise RulesError(f"{path}: not valid JSON ({e})") from e
    except UnicodeDecodeError as e:
        raise RulesError(f"{path}: not UTF-8 text ({e})") from e
    except OSError as e:
        raise RulesError(f"{path}: cannot read rules file ({e})") from e

    entries = raw.get("categories") if isinstance(raw, dict) else None
    if not isinstance(entries, list):
        raise RulesError(f"{path}: expected a 'categories' list")

    rules = []
    for entry in entries:
        name = entry.get("name") if isinstance(entry, dict) else None
        try:
            category = Category(name)
        except ValueError:
            raise RulesError(f"{path}: unknown category {name!r}") from None
        keywords = entry.get("keywords", [])
        if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
            raise RulesError(f"{path}: keywords for {name!r} must be a list of strings")
        rules.append((category, [k.lower() for k in keywords if k.strip()]))
    return rules


def categorize(merchant: Optional[str], items: Sequence[str],
               rules: Optional[CategoryRules] = None) -> Category:
    """
    Categorize a receipt from its merchant name and item descriptions.

    Keywords are plain substrings of the lowercased merchant and items.
    Falls back to Others when nothing matches.
    """
    rules = DEFAULT_RULES if rules is None else rules
    search_text = f"{merchant or ''} {' '.join(items or [])}".lower()

    for category, keywords in rules:
        for keyword in keywords:
            if keyword.lower() in search_text:
                return category

    # fallback
    return Category.OTHERS


def describe_rules(rules: CategoryRules) -> List[str]:
    """One summary line per category, in matching order."""
    return [f"{category.value}: {len(keywords)} keyword(s)" for category, keywords in rules]
