from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from categories import resolve_category_name
from csv_utils import decimal_to_cents, export_transactions, parse_csv
from insights import SpendingInsight, generate_insights
from metrics import (
    BudgetComparison,
    DashboardStats,
    compare_budgets,
    dashboard_stats,
)
from models import Budget, Transaction, TransactionType
from periods import current_month, month_key, resolve_month
from schemas import BudgetIn, TransactionIn

logger = logging.getLogger(__name__)


class NotFoundError(ValueError):
    pass


class ConflictError(ValueError):
    pass


class TransactionService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self) -> list[Transaction]:
        stmt = select(Transaction).order_by(
            Transaction.date.desc(),
            Transaction.created_at.desc(),
            Transaction.id.desc(),
        )
        return list(self.session.scalars(stmt).all())

    def get(self, transaction_id: int) -> Transaction:
        txn = self.session.get(Transaction, transaction_id)
        if not txn:
            raise NotFoundError("Transaction not found")
        return txn

    def create(self, data: TransactionIn) -> Transaction:
        txn = Transaction(
            amount_cents=decimal_to_cents(data.amount),
            date=data.date,
            description=data.description,
            category=data.category,
            type=data.type,
        )
        self.session.add(txn)
        self.session.flush()
        self._refresh_budgets({(txn.category, txn.month)})
        self.session.commit()
        self.session.refresh(txn)
        logger.info(
            f"transaction_created: id={txn.id} type={txn.type.value} "
            f"category={txn.category} date={txn.date}"
        )
        return txn

    def update(self, transaction_id: int, data: TransactionIn) -> Transaction:
        txn = self.get(transaction_id)
        touched = {(txn.category, txn.month)}

        txn.amount_cents = decimal_to_cents(data.amount)
        txn.date = data.date
        txn.description = data.description
        txn.category = data.category
        txn.type = data.type
        self.session.flush()

        touched.add((txn.category, txn.month))
        self._refresh_budgets(touched)
        self.session.commit()
        self.session.refresh(txn)
        logger.info(f"transaction_updated: id={txn.id}")
        return txn

    def delete(self, transaction_id: int) -> None:
        txn = self.get(transaction_id)
        touched = {(txn.category, txn.month)}
        self.session.delete(txn)
        self.session.flush()
        self._refresh_budgets(touched)
        self.session.commit()
        logger.info(f"transaction_deleted: id={transaction_id}")

    def _refresh_budgets(self, keys: set[tuple[str, str]]) -> None:
        budgets = BudgetService(self.session)
        for category, month in keys:
            budgets.refresh_spent(category, month)


class BudgetService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self) -> list[Budget]:
        stmt = select(Budget).order_by(Budget.month.desc(), Budget.category.asc())
        return list(self.session.scalars(stmt).all())

    def get(self, budget_id: int) -> Budget:
        budget = self.session.get(Budget, budget_id)
        if not budget:
            raise NotFoundError("Budget not found")
        return budget

    def find(self, category: str, month: str) -> Optional[Budget]:
        return self.session.scalar(
            select(Budget).where(Budget.category == category, Budget.month == month)
        )

    def spent_for(self, category: str, month: str) -> int:
        period = resolve_month(month)
        stmt = select(func.coalesce(func.sum(Transaction.amount_cents), 0)).where(
            Transaction.category == category,
            Transaction.type == TransactionType.expense,
            Transaction.date >= period.start,
            Transaction.date < period.end,
        )
        return int(self.session.execute(stmt).scalar_one() or 0)

    def refresh_spent(self, category: str, month: str) -> Optional[Budget]:
        budget = self.find(category, month)
        if budget is None:
            return None
        budget.spent_cents = self.spent_for(category, month)
        logger.debug(
            f"budget_spent_refreshed: id={budget.id} category={category} "
            f"month={month} spent_cents={budget.spent_cents}"
        )
        return budget

    def create(self, data: BudgetIn) -> Budget:
        if self.find(data.category, data.month):
            raise ConflictError("Budget already exists for this category and month")

        budget = Budget(
            category=data.category,
            amount_cents=decimal_to_cents(data.amount),
            month=data.month,
            spent_cents=self.spent_for(data.category, data.month),
        )
        self.session.add(budget)
        self._commit_unique()
        self.session.refresh(budget)
        logger.info(
            f"budget_created: id={budget.id} category={budget.category} "
            f"month={budget.month}"
        )
        return budget

    def update(self, budget_id: int, data: BudgetIn) -> Budget:
        budget = self.get(budget_id)
        other = self.find(data.category, data.month)
        if other is not None and other.id != budget.id:
            raise ConflictError("Budget already exists for this category and month")

        spent = self.spent_for(data.category, data.month)
        budget.category = data.category
        budget.amount_cents = decimal_to_cents(data.amount)
        budget.month = data.month
        budget.spent_cents = spent
        self._commit_unique()
        self.session.refresh(budget)
        logger.info(f"budget_updated: id={budget.id}")
        return budget

    def delete(self, budget_id: int) -> None:
        budget = self.get(budget_id)
        self.session.delete(budget)
        self.session.commit()
        logger.info(f"budget_deleted: id={budget_id}")

    def comparisons(
        self, month: Optional[str] = None, *, today: Optional[date] = None
    ) -> list[BudgetComparison]:
        return compare_budgets(self.list_all(), month or current_month(today))

    def _commit_unique(self) -> None:
        # A concurrent writer can win the race after our existence check; the
        # unique constraint is authoritative.
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError(
                "Budget already exists for this category and month"
            ) from exc


class MetricsService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def dashboard(self) -> DashboardStats:
        transactions = TransactionService(self.session).list_all()
        return dashboard_stats(transactions)

    def insights(
        self, month: Optional[str] = None, *, today: Optional[date] = None
    ) -> list[SpendingInsight]:
        stats = self.dashboard()
        comparisons = BudgetService(self.session).comparisons(month, today=today)
        return generate_insights(stats, comparisons)


class CSVService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def export(self, transactions: list[Transaction]) -> str:
        return export_transactions(transactions)

    def commit(self, content: str) -> tuple[int, list[str]]:
        rows, errors = parse_csv(content)
        count = 0
        touched: set[tuple[str, str]] = set()
        for row in rows:
            category = resolve_category_name(row.category)
            txn = Transaction(
                date=row.date,
                type=row.type,
                amount_cents=row.amount_cents,
                category=category,
                description=row.description,
            )
            self.session.add(txn)
            touched.add((category, month_key(row.date)))
            count += 1
        self.session.flush()
        budgets = BudgetService(self.session)
        for category, month in touched:
            budgets.refresh_spent(category, month)
        self.session.commit()
        logger.info(f"csv_import: imported={count} errors={len(errors)}")
        return count, errors
