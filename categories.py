from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rapidfuzz.distance import Levenshtein

INCOME_CATEGORY_NAME = "Income"
DEFAULT_COLOR = "#7f8c8d"
DEFAULT_ICON = "DollarSign"


@dataclass(frozen=True)
class Category:
    name: str
    color: str
    icon: str


CATEGORIES: tuple[Category, ...] = (
    Category("Food & Dining", "#e74c3c", "Utensils"),
    Category("Transportation", "#3498db", "Car"),
    Category("Shopping", "#9b59b6", "ShoppingCart"),
    Category("Entertainment", "#f39c12", "Gamepad2"),
    Category("Healthcare", "#2ecc71", "Heart"),
    Category("Housing", "#34495e", "Home"),
    Category("Education", "#16a085", "GraduationCap"),
    Category("Personal Care", "#e67e22", "Coffee"),
    Category("Travel", "#8e44ad", "Plane"),
    Category("Gifts & Donations", "#c0392b", "Gift"),
    Category("Clothing", "#d35400", "Shirt"),
    Category(INCOME_CATEGORY_NAME, "#27ae60", "DollarSign"),
    Category("Other", "#7f8c8d", "DollarSign"),
)

EXPENSE_CATEGORIES: tuple[Category, ...] = tuple(
    c for c in CATEGORIES if c.name != INCOME_CATEGORY_NAME
)
INCOME_CATEGORIES: tuple[Category, ...] = tuple(
    c for c in CATEGORIES if c.name == INCOME_CATEGORY_NAME
)

_BY_NAME = {c.name: c for c in CATEGORIES}


def get_category(name: str) -> Optional[Category]:
    return _BY_NAME.get(name)


def category_color(name: str) -> str:
    category = _BY_NAME.get(name)
    return category.color if category else DEFAULT_COLOR


def category_icon(name: str) -> str:
    category = _BY_NAME.get(name)
    return category.icon if category else DEFAULT_ICON


def resolve_category_name(raw: str) -> str:
    """Map free-form input onto a registry name.

    Tries an exact match, then a case-insensitive one, then the single
    registry name within one edit. Input that matches nothing, or is one edit
    away from several names, is returned trimmed but otherwise unchanged,
    since the store does not require a registry name.
    """
    name = raw.strip()
    if name in _BY_NAME:
        return name

    input_lower = name.lower()
    for category in CATEGORIES:
        if category.name.lower() == input_lower:
            return category.name

    close = [
        category.name
        for category in CATEGORIES
        if Levenshtein.distance(input_lower, category.name.lower()) <= 1
    ]
    if len(close) == 1:
        return close[0]
    return name
