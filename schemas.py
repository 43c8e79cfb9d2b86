import datetime as dt
from decimal import Decimal
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from insights import SpendingInsight
from metrics import BudgetComparison, DashboardStats
from models import Budget, BudgetStatus, InsightType, Transaction, TransactionType
from periods import resolve_month

T = TypeVar("T")


def cents_to_amount(cents: int) -> float:
    return cents / 100


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None


# Keeps cents inside a signed 64-bit INTEGER column.
MAX_AMOUNT = Decimal("1e15")


def _check_amount(value: Decimal) -> Decimal:
    if not value.is_finite() or value >= MAX_AMOUNT:
        raise ValueError(f"Amount must be less than {MAX_AMOUNT:,.0f}")
    if value.quantize(Decimal("0.01")) <= 0:
        raise ValueError("Amount must be greater than 0")
    return value


class TransactionIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(..., gt=0)
    date: dt.date
    description: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=100)
    type: TransactionType = TransactionType.expense

    @field_validator("amount")
    @classmethod
    def check_amount(cls, value: Decimal) -> Decimal:
        return _check_amount(value)


class BudgetIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    category: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0)
    month: str = Field(..., min_length=7, max_length=7)

    @field_validator("amount")
    @classmethod
    def check_amount(cls, value: Decimal) -> Decimal:
        return _check_amount(value)

    @field_validator("month")
    @classmethod
    def check_month(cls, value: str) -> str:
        resolve_month(value)
        return value


class CSVRow(BaseModel):
    date: dt.date
    type: TransactionType
    amount_cents: int = Field(..., gt=0)
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=200)


class CategoryOut(BaseModel):
    name: str
    color: str
    icon: str


class CategoryRegistryOut(BaseModel):
    all: list[CategoryOut]
    expense: list[CategoryOut]
    income: list[CategoryOut]


class TransactionOut(BaseModel):
    id: int
    amount: float
    date: dt.date
    description: str
    category: str
    type: TransactionType
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_model(cls, txn: Transaction) -> "TransactionOut":
        return cls(
            id=txn.id,
            amount=cents_to_amount(txn.amount_cents),
            date=txn.date,
            description=txn.description,
            category=txn.category,
            type=txn.type,
            created_at=txn.created_at,
            updated_at=txn.updated_at,
        )


class BudgetOut(BaseModel):
    id: int
    category: str
    amount: float
    month: str
    spent: float
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_model(cls, budget: Budget) -> "BudgetOut":
        return cls(
            id=budget.id,
            category=budget.category,
            amount=cents_to_amount(budget.amount_cents),
            month=budget.month,
            spent=cents_to_amount(budget.spent_cents),
            created_at=budget.created_at,
            updated_at=budget.updated_at,
        )


class CategoryBreakdownOut(BaseModel):
    category: str
    amount: float
    percentage: float
    color: str


class MonthlyDataOut(BaseModel):
    month: str
    expenses: float
    income: float
    net: float


class DashboardStatsOut(BaseModel):
    total_expenses: float
    total_income: float
    net_amount: float
    transaction_count: int
    category_breakdown: list[CategoryBreakdownOut]
    monthly_data: list[MonthlyDataOut]

    @classmethod
    def from_stats(cls, stats: DashboardStats) -> "DashboardStatsOut":
        return cls(
            total_expenses=cents_to_amount(stats.total_expense_cents),
            total_income=cents_to_amount(stats.total_income_cents),
            net_amount=cents_to_amount(stats.net_cents),
            transaction_count=stats.transaction_count,
            category_breakdown=[
                CategoryBreakdownOut(
                    category=row.category,
                    amount=cents_to_amount(row.amount_cents),
                    percentage=row.percentage,
                    color=row.color,
                )
                for row in stats.category_breakdown
            ],
            monthly_data=[
                MonthlyDataOut(
                    month=row.month,
                    expenses=cents_to_amount(row.expense_cents),
                    income=cents_to_amount(row.income_cents),
                    net=cents_to_amount(row.net_cents),
                )
                for row in stats.monthly_data
            ],
        )


class BudgetComparisonOut(BaseModel):
    category: str
    budgeted: float
    spent: float
    remaining: float
    percentage: float
    display_percentage: float
    status: BudgetStatus

    @classmethod
    def from_comparison(cls, row: BudgetComparison) -> "BudgetComparisonOut":
        return cls(
            category=row.category,
            budgeted=cents_to_amount(row.budgeted_cents),
            spent=cents_to_amount(row.spent_cents),
            remaining=cents_to_amount(row.remaining_cents),
            percentage=row.percentage,
            display_percentage=row.display_percentage,
            status=row.status,
        )


class SpendingInsightOut(BaseModel):
    type: InsightType
    title: str
    description: str
    action: Optional[str] = None

    @classmethod
    def from_insight(cls, insight: SpendingInsight) -> "SpendingInsightOut":
        return cls(
            type=insight.type,
            title=insight.title,
            description=insight.description,
            action=insight.action,
        )


class ImportResultOut(BaseModel):
    imported: int
    errors: list[str]
