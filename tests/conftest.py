"""Pytest fixtures for testing"""

import itertools
import time
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Generator, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from paycycle_ledger.domain.models import (
    BalanceCard,
    GiftCard,
    PaymentMethod,
    RecurringTransaction,
    Transaction,
    TransactionType,
)
from paycycle_ledger.domain.repositories import LedgerRepository
from paycycle_ledger.infrastructure.database.models import Base
from paycycle_ledger.infrastructure.database.repositories import SqlLedgerRepository
from paycycle_ledger.services.ledger import LedgerService

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


class InMemoryLedgerRepository(LedgerRepository):
    """
    Dict-backed repository for thread tests.

    read_delay widens the window between reading a card/rule and writing it
    back, which is where unserialized callers lose updates.
    """

    def __init__(self, read_delay: float = 0.0):
        self.read_delay = read_delay
        self.balance_cards: Dict[str, BalanceCard] = {}
        self.gift_cards: Dict[str, GiftCard] = {}
        self.transactions: List[Transaction] = []
        self.rules: Dict[str, RecurringTransaction] = {}

    def _pause(self) -> None:
        if self.read_delay:
            time.sleep(self.read_delay)

    def get_balance_card(self, card_id: str) -> Optional[BalanceCard]:
        card = self.balance_cards.get(card_id)
        self._pause()
        return card

    def save_balance_card(self, card: BalanceCard) -> None:
        self.balance_cards[card.id] = card

    def list_active_balance_cards(self) -> List[BalanceCard]:
        return [c for c in self.balance_cards.values() if c.is_active]

    def get_gift_card(self, card_id: str) -> Optional[GiftCard]:
        card = self.gift_cards.get(card_id)
        self._pause()
        return card

    def save_gift_card(self, card: GiftCard) -> None:
        self.gift_cards[card.id] = card

    def list_active_gift_cards(self) -> List[GiftCard]:
        return [c for c in self.gift_cards.values() if c.is_active]

    def append_transaction(self, transaction: Transaction) -> None:
        self.transactions.append(transaction)

    def list_transactions_in_range(self, start: date, end: date) -> List[Transaction]:
        return sorted((t for t in self.transactions if start <= t.date <= end), key=lambda t: t.date)

    def get_recurring_transaction(self, rule_id: str) -> Optional[RecurringTransaction]:
        rule = self.rules.get(rule_id)
        self._pause()
        return rule

    def save_recurring_transaction(self, rule: RecurringTransaction) -> None:
        self.rules[rule.id] = rule

    def list_active_recurring_transactions(self) -> List[RecurringTransaction]:
        return [r for r in self.rules.values() if r.is_active]


@pytest.fixture
def memory_repository() -> InMemoryLedgerRepository:
    return InMemoryLedgerRepository(read_delay=0.01)


@pytest.fixture
def repository(db: Session) -> SqlLedgerRepository:
    return SqlLedgerRepository(db)


@pytest.fixture
def ledger(repository: SqlLedgerRepository) -> LedgerService:
    return LedgerService(repository)


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic transaction ids: t1, t2, ..."""
    counter = itertools.count(1)
    return lambda: f"t{next(counter)}"


@pytest.fixture
def base_expense() -> Transaction:
    """Expense template the allocator copies category, merchant and date from"""
    return Transaction(
        id="base",
        amount=Decimal("1"),
        type=TransactionType.EXPENSE,
        category="Groceries",
        memo="weekly shop",
        date=date(2025, 10, 20),
        merchant="Corner Mart",
        payment_method=PaymentMethod.CASH,
    )


@pytest.fixture
def balance_card() -> BalanceCard:
    return BalanceCard(
        id="bc-1",
        name="Convenience store card",
        initial_amount=Decimal("5000"),
        current_balance=Decimal("5000"),
        created_date=date(2025, 10, 1),
    )


@pytest.fixture
def gift_card() -> GiftCard:
    return GiftCard(
        id="gc-1",
        name="Department store voucher",
        total_amount=Decimal("10000"),
        used_amount=Decimal("0"),
        created_date=date(2025, 10, 1),
    )
