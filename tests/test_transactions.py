from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from database import Base
from models import TransactionType
from schemas import TransactionIn
from services import MetricsService, NotFoundError, TransactionService


def _data(description: str, on: date, amount: str = "9.99") -> TransactionIn:
    return TransactionIn(
        amount=Decimal(amount),
        date=on,
        description=description,
        category="Food & Dining",
        type=TransactionType.expense,
    )


def test_create_stores_cents_and_trims_description() -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        txn = TransactionService(session).create(
            _data("  Lunch with team  ", date(2024, 3, 9), amount="12.345")
        )
        assert txn.id is not None
        assert txn.description == "Lunch with team"
        assert txn.amount_cents == 1234
        assert txn.month == "2024-03"


def test_list_orders_by_date_then_creation_desc() -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        service = TransactionService(session)
        service.create(_data("older", date(2024, 1, 1)))
        service.create(_data("same day first", date(2024, 2, 1)))
        service.create(_data("same day second", date(2024, 2, 1)))
        service.create(_data("newest", date(2024, 3, 1)))

        assert [t.description for t in service.list_all()] == [
            "newest",
            "same day second",
            "same day first",
            "older",
        ]


def test_update_and_delete_unknown_ids_raise_not_found() -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        service = TransactionService(session)
        with pytest.raises(NotFoundError):
            service.update(42, _data("nope", date(2024, 1, 1)))
        with pytest.raises(NotFoundError):
            service.delete(42)
        with pytest.raises(NotFoundError):
            service.get(42)


def test_update_and_delete() -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        service = TransactionService(session)
        txn = service.create(_data("Taxi", date(2024, 5, 5)))

        updated = service.update(
            txn.id,
            TransactionIn(
                amount=Decimal("2500"),
                date=date(2024, 5, 31),
                description="Salary",
                category="Income",
                type=TransactionType.income,
            ),
        )
        assert updated.type == TransactionType.income
        assert updated.amount_cents == 250_000
        assert updated.date == date(2024, 5, 31)

        service.delete(txn.id)
        assert service.list_all() == []


def test_dashboard_reads_all_transactions() -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        service = TransactionService(session)
        service.create(_data("Rent", date(2024, 1, 3), amount="1200"))
        service.create(
            TransactionIn(
                amount=Decimal("3000"),
                date=date(2024, 1, 28),
                description="Salary",
                category="Income",
                type=TransactionType.income,
            )
        )

        stats = MetricsService(session).dashboard()
        assert stats.total_expense_cents == 120_000
        assert stats.total_income_cents == 300_000
        assert stats.net_cents == 180_000
        assert stats.transaction_count == 2
        assert [m.month for m in stats.monthly_data] == ["2024-01"]

        insights = MetricsService(session).insights("2024-01")
        assert [i.title for i in insights] == [
            "High Concentration in One Category",
            "Positive Balance",
        ]


def test_transaction_input_validation() -> None:
    with pytest.raises(ValueError):
        _data("zero", date(2024, 1, 1), amount="0")
    with pytest.raises(ValueError):
        _data("rounds to zero", date(2024, 1, 1), amount="0.001")
    with pytest.raises(ValueError):
        _data("   ", date(2024, 1, 1))
    with pytest.raises(ValueError):
        _data("x" * 201, date(2024, 1, 1))
