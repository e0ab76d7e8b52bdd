"""Integration tests for the recurring job entry point"""

import logging
from datetime import date
from decimal import Decimal

import pytest

from paycycle_ledger.domain.models import PaymentMethod, RecurringPattern, RecurringTransaction, TransactionType
from paycycle_ledger.infrastructure.database.models import Base
from paycycle_ledger.infrastructure.database.repositories import SqlLedgerRepository
from paycycle_ledger.infrastructure.database.session import create_session_factory, session_scope
from paycycle_ledger.workers.recurring_job import run_recurring_job

JOB_DATABASE_URL = "sqlite:///./test_job.db"


@pytest.fixture
def session_factory():
    """Fresh job database, with the root logging handlers restored afterwards"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level

    factory = create_session_factory(JOB_DATABASE_URL)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(bind=factory.kw["bind"])
        root.handlers[:] = handlers
        root.setLevel(level)


@pytest.mark.integration
def test_job_fires_and_persists(session_factory):
    with session_scope(session_factory) as db:
        SqlLedgerRepository(db).save_recurring_transaction(
            RecurringTransaction(
                id="phone",
                type=TransactionType.EXPENSE,
                category="Utilities",
                amount=Decimal("55000"),
                merchant="Mobile carrier",
                pattern=RecurringPattern.MONTHLY,
                day_of_month=25,
                payment_method=PaymentMethod.CARD,
            )
        )

    # 2025-11-25 is a Tuesday, no weekend shift
    today = date(2025, 11, 25)
    first = run_recurring_job(today=today, session_factory=session_factory, auto_execute=True)
    second = run_recurring_job(today=today, session_factory=session_factory, auto_execute=True)

    assert [r.id for r in first] == ["phone"]
    assert second == []

    with session_scope(session_factory) as db:
        repository = SqlLedgerRepository(db)
        recorded = repository.list_transactions_in_range(today, today)
        rule = repository.get_recurring_transaction("phone")

    assert [(t.amount, t.payment_method) for t in recorded] == [(Decimal("55000"), PaymentMethod.CARD)]
    assert rule.last_executed_date == today


@pytest.mark.integration
def test_job_with_no_rules(session_factory):
    assert run_recurring_job(today=date(2025, 11, 25), session_factory=session_factory) == []
