import csv
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from io import StringIO
from typing import Sequence

from models import Transaction, TransactionType
from schemas import MAX_AMOUNT, CSVRow

CSV_HEADER = ["Date", "Type", "Amount", "Category", "Description"]


def sanitize_csv_value(value: str) -> str:
    """
    Prefix values that a spreadsheet would treat as a formula with a tab.
    """
    if not value or value.strip() == "":
        return ""

    value = value.strip()

    formula_triggers = ("=", "+", "-", "@", "\t", "\r")
    if value.startswith(formula_triggers):
        return "\t" + value

    dangerous_patterns = [
        r"^cmd\s*",
        r"^powershell\s*",
        r"^http[s]?://",
    ]
    for pattern in dangerous_patterns:
        if re.match(pattern, value, re.IGNORECASE):
            return "\t" + value

    return value


def parse_date(value: str) -> date:
    value = value.strip()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return datetime.strptime(value, "%m/%d/%Y").date()


def decimal_to_cents(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1")))


def parse_amount(value: str) -> int:
    clean = value.strip().replace("$", "").replace(" ", "").replace(",", "")
    try:
        amount = Decimal(clean)
    except InvalidOperation as exc:
        raise ValueError("Invalid amount") from exc
    if not amount.is_finite():
        raise ValueError("Invalid amount")
    if amount >= MAX_AMOUNT:
        raise ValueError("Amount is too large")
    cents = decimal_to_cents(amount)
    if cents <= 0:
        raise ValueError("Amount must be greater than 0")
    return cents


def parse_csv(content: str) -> tuple[list[CSVRow], list[str]]:
    reader = csv.DictReader(StringIO(content))
    rows: list[CSVRow] = []
    errors: list[str] = []
    for idx, raw in enumerate(reader, start=1):
        try:
            type_raw = (raw.get("Type") or "expense").strip().lower()
            rows.append(
                CSVRow(
                    date=parse_date(raw.get("Date") or ""),
                    type=TransactionType(type_raw),
                    amount_cents=parse_amount(raw.get("Amount") or "0"),
                    category=(raw.get("Category") or "").strip(),
                    description=(raw.get("Description") or "").strip(),
                )
            )
        except ValueError as exc:
            errors.append(f"Row {idx}: {exc}")
    return rows, errors


def export_transactions(transactions: Sequence[Transaction]) -> str:
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADER)
    for txn in transactions:
        writer.writerow(
            [
                txn.date.isoformat(),
                txn.type.value,
                f"{txn.amount_cents / 100:.2f}",
                sanitize_csv_value(txn.category),
                sanitize_csv_value(txn.description),
            ]
        )
    return output.getvalue()
