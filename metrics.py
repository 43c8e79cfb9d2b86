"""Pure aggregation over already-loaded transactions and budgets.

All money is handled in integer cents so totals stay exact; percentages are
floats. Nothing here touches the database.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from categories import category_color
from models import Budget, BudgetStatus, Transaction, TransactionType

MONTHS_IN_SERIES = 6
NEAR_THRESHOLD = 80
OVER_THRESHOLD = 100


@dataclass(frozen=True)
class CategoryBreakdown:
    category: str
    amount_cents: int
    percentage: float
    color: str


@dataclass(frozen=True)
class MonthlyData:
    month: str
    expense_cents: int
    income_cents: int

    @property
    def net_cents(self) -> int:
        return self.income_cents - self.expense_cents


@dataclass(frozen=True)
class DashboardStats:
    total_expense_cents: int
    total_income_cents: int
    transaction_count: int
    category_breakdown: list[CategoryBreakdown]
    monthly_data: list[MonthlyData]

    @property
    def net_cents(self) -> int:
        return self.total_income_cents - self.total_expense_cents


@dataclass(frozen=True)
class BudgetComparison:
    category: str
    budgeted_cents: int
    spent_cents: int
    percentage: float
    status: BudgetStatus

    @property
    def remaining_cents(self) -> int:
        return self.budgeted_cents - self.spent_cents

    @property
    def display_percentage(self) -> float:
        # Progress bars never overflow; status uses the raw value.
        return min(self.percentage, 100.0)


def compute_totals(transactions: Iterable[Transaction]) -> tuple[int, int, int]:
    """Return ``(expense_cents, income_cents, net_cents)``."""
    expenses = 0
    income = 0
    for txn in transactions:
        if txn.type == TransactionType.expense:
            expenses += txn.amount_cents
        elif txn.type == TransactionType.income:
            income += txn.amount_cents
    return expenses, income, income - expenses


def category_breakdown(transactions: Iterable[Transaction]) -> list[CategoryBreakdown]:
    totals: dict[str, int] = {}
    for txn in transactions:
        if txn.type != TransactionType.expense:
            continue
        totals[txn.category] = totals.get(txn.category, 0) + txn.amount_cents

    total = sum(totals.values())
    rows = [
        CategoryBreakdown(
            category=name,
            amount_cents=amount,
            percentage=(amount / total * 100) if total else 0,
            color=category_color(name),
        )
        for name, amount in totals.items()
    ]
    # sorted() is stable, so equal amounts keep first-seen order.
    rows.sort(key=lambda r: r.amount_cents, reverse=True)
    return rows


def monthly_series(
    transactions: Iterable[Transaction], *, months: int = MONTHS_IN_SERIES
) -> list[MonthlyData]:
    expense_by_month: dict[str, int] = {}
    income_by_month: dict[str, int] = {}
    for txn in transactions:
        key = txn.month
        expense_by_month.setdefault(key, 0)
        income_by_month.setdefault(key, 0)
        if txn.type == TransactionType.expense:
            expense_by_month[key] += txn.amount_cents
        else:
            income_by_month[key] += txn.amount_cents

    # YYYY-MM keys sort chronologically as strings.
    keys = sorted(expense_by_month)[-months:] if months > 0 else []
    return [
        MonthlyData(
            month=key,
            expense_cents=expense_by_month[key],
            income_cents=income_by_month[key],
        )
        for key in keys
    ]


def dashboard_stats(transactions: Sequence[Transaction]) -> DashboardStats:
    expenses, income, _net = compute_totals(transactions)
    return DashboardStats(
        total_expense_cents=expenses,
        total_income_cents=income,
        transaction_count=len(transactions),
        category_breakdown=category_breakdown(transactions),
        monthly_data=monthly_series(transactions),
    )


def budget_status(percentage: float) -> BudgetStatus:
    if percentage >= OVER_THRESHOLD:
        return BudgetStatus.over
    if percentage >= NEAR_THRESHOLD:
        return BudgetStatus.near
    return BudgetStatus.under


def compare_budget(budget: Budget) -> BudgetComparison:
    if budget.amount_cents:
        percentage = budget.spent_cents / budget.amount_cents * 100
    else:
        percentage = math.nan
    return BudgetComparison(
        category=budget.category,
        budgeted_cents=budget.amount_cents,
        spent_cents=budget.spent_cents,
        percentage=percentage,
        status=budget_status(percentage),
    )


def compare_budgets(
    budgets: Iterable[Budget], month: Optional[str]
) -> list[BudgetComparison]:
    return [compare_budget(b) for b in budgets if b.month == month]
