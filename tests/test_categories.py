import pytest

from categories import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    category_color,
    category_icon,
    resolve_category_name,
)
from csv_utils import parse_amount, parse_csv, sanitize_csv_value


def test_expense_and_income_categories_are_disjoint():
    expense = {c.name for c in EXPENSE_CATEGORIES}
    income = {c.name for c in INCOME_CATEGORIES}
    assert income == {"Income"}
    assert not expense & income


def test_color_and_icon_fallbacks():
    assert category_color("Travel") == "#8e44ad"
    assert category_icon("Travel") == "Plane"
    assert category_color("Pets") == "#7f8c8d"
    assert category_icon("Pets") == "DollarSign"


def test_resolve_category_name():
    assert resolve_category_name("Housing") == "Housing"
    assert resolve_category_name(" housing ") == "Housing"
    assert resolve_category_name("Housng") == "Housing"
    assert resolve_category_name("Pets") == "Pets"


def test_resolve_category_name_keeps_distant_names():
    assert resolve_category_name("Hosng") == "Hosng"
    assert resolve_category_name(" Pet Care ") == "Pet Care"


def test_parse_amount():
    assert parse_amount("$1,234.56") == 123_456
    assert parse_amount("7") == 700
    with pytest.raises(ValueError):
        parse_amount("0")
    with pytest.raises(ValueError):
        parse_amount("abc")
    for bad in ("inf", "NaN", "1e40", "1000000000000000"):
        with pytest.raises(ValueError):
            parse_amount(bad)


def test_parse_csv_collects_row_errors():
    rows, errors = parse_csv(
        "Date,Type,Amount,Category,Description\n"
        "01/15/2024,,3.00,Travel,Bus\n"
        "2024-01-16,refund,3.00,Travel,Bus\n"
        "2024-01-17,expense,3.00,,Bus\n"
        "2024-01-18,expense,inf,Travel,Bus\n"
        "2024-01-19,expense,NaN,Travel,Bus\n"
        "2024-01-20,expense,1e40,Travel,Bus\n"
    )
    assert len(rows) == 1
    assert rows[0].type.value == "expense"
    assert rows[0].amount_cents == 300
    assert [e.split(":")[0] for e in errors] == ["Row 2", "Row 3", "Row 4", "Row 5", "Row 6"]


def test_sanitize_csv_value():
    assert sanitize_csv_value("@cmd") == "\t@cmd"
    assert sanitize_csv_value("https://example.com") == "\thttps://example.com"
    assert sanitize_csv_value("Groceries") == "Groceries"
