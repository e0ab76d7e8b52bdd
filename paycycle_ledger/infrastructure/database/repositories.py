"""Data access layer for ledger entities"""

from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from paycycle_ledger.domain.models import (
    BalanceCard,
    GiftCard,
    IncomeType,
    PaymentMethod,
    RecurringPattern,
    RecurringTransaction,
    Transaction,
    TransactionType,
    WeekendHandling,
)
from paycycle_ledger.domain.repositories import LedgerRepository
from paycycle_ledger.infrastructure.database.models import (
    BalanceCardRecord,
    GiftCardRecord,
    RecurringTransactionRecord,
    TransactionRecord,
)


def _enum_value(member) -> Optional[str]:
    return member.value if member is not None else None


def _to_transaction(row: TransactionRecord) -> Transaction:
    return Transaction(
        id=row.id,
        amount=row.amount,
        type=TransactionType(row.type),
        category=row.category,
        memo=row.memo,
        date=row.date,
        merchant=row.merchant,
        income_type=IncomeType(row.income_type) if row.income_type else None,
        payment_method=PaymentMethod(row.payment_method) if row.payment_method else None,
        instrument_id=row.instrument_id,
        instrument_name=row.instrument_name,
        actual_amount=row.actual_amount,
        settlement_amount=row.settlement_amount,
        is_settlement=row.is_settlement,
    )


def _to_balance_card(row: BalanceCardRecord) -> BalanceCard:
    return BalanceCard(
        id=row.id,
        name=row.name,
        initial_amount=row.initial_amount,
        current_balance=row.current_balance,
        created_date=row.created_date,
        is_active=row.is_active,
    )


def _to_gift_card(row: GiftCardRecord) -> GiftCard:
    return GiftCard(
        id=row.id,
        name=row.name,
        total_amount=row.total_amount,
        used_amount=row.used_amount,
        created_date=row.created_date,
        is_active=row.is_active,
        minimum_usage_rate=row.minimum_usage_rate,
    )


def _to_recurring(row: RecurringTransactionRecord) -> RecurringTransaction:
    return RecurringTransaction(
        id=row.id,
        type=TransactionType(row.type),
        category=row.category,
        amount=row.amount,
        merchant=row.merchant,
        memo=row.memo,
        pattern=RecurringPattern(row.pattern),
        day_of_month=row.day_of_month,
        day_of_week=row.day_of_week,
        weekend_handling=WeekendHandling(row.weekend_handling),
        payment_method=PaymentMethod(row.payment_method) if row.payment_method else None,
        income_type=IncomeType(row.income_type) if row.income_type else None,
        instrument_id=row.instrument_id,
        instrument_name=row.instrument_name,
        is_active=row.is_active,
        last_executed_date=row.last_executed_date,
    )


class SqlLedgerRepository(LedgerRepository):
    """LedgerRepository backed by a SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    def get_balance_card(self, card_id: str) -> Optional[BalanceCard]:
        row = self.db.get(BalanceCardRecord, card_id)
        return _to_balance_card(row) if row else None

    def save_balance_card(self, card: BalanceCard) -> None:
        self.db.merge(
            BalanceCardRecord(
                id=card.id,
                name=card.name,
                initial_amount=card.initial_amount,
                current_balance=card.current_balance,
                created_date=card.created_date,
                is_active=card.is_active,
            )
        )
        self.db.flush()

    def list_active_balance_cards(self) -> List[BalanceCard]:
        rows = (
            self.db.query(BalanceCardRecord)
            .filter(BalanceCardRecord.is_active.is_(True))
            .order_by(BalanceCardRecord.created_date)
            .all()
        )
        return [_to_balance_card(r) for r in rows]

    def get_gift_card(self, card_id: str) -> Optional[GiftCard]:
        row = self.db.get(GiftCardRecord, card_id)
        return _to_gift_card(row) if row else None

    def save_gift_card(self, card: GiftCard) -> None:
        self.db.merge(
            GiftCardRecord(
                id=card.id,
                name=card.name,
                total_amount=card.total_amount,
                used_amount=card.used_amount,
                created_date=card.created_date,
                is_active=card.is_active,
                minimum_usage_rate=card.minimum_usage_rate,
            )
        )
        self.db.flush()

    def list_active_gift_cards(self) -> List[GiftCard]:
        rows = (
            self.db.query(GiftCardRecord)
            .filter(GiftCardRecord.is_active.is_(True))
            .order_by(GiftCardRecord.created_date)
            .all()
        )
        return [_to_gift_card(r) for r in rows]

    def append_transaction(self, transaction: Transaction) -> None:
        self.db.add(
            TransactionRecord(
                id=transaction.id,
                amount=transaction.amount,
                type=transaction.type.value,
                category=transaction.category,
                merchant=transaction.merchant,
                memo=transaction.memo,
                date=transaction.date,
                income_type=_enum_value(transaction.income_type),
                payment_method=_enum_value(transaction.payment_method),
                instrument_id=transaction.instrument_id,
                instrument_name=transaction.instrument_name,
                actual_amount=transaction.actual_amount,
                settlement_amount=transaction.settlement_amount,
                is_settlement=transaction.is_settlement,
            )
        )
        self.db.flush()

    def list_transactions_in_range(self, start: date, end: date) -> List[Transaction]:
        rows = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.date >= start, TransactionRecord.date <= end)
            .order_by(TransactionRecord.date, TransactionRecord.created_at)
            .all()
        )
        return [_to_transaction(r) for r in rows]

    def get_recurring_transaction(self, rule_id: str) -> Optional[RecurringTransaction]:
        row = self.db.get(RecurringTransactionRecord, rule_id)
        return _to_recurring(row) if row else None

    def save_recurring_transaction(self, rule: RecurringTransaction) -> None:
        self.db.merge(
            RecurringTransactionRecord(
                id=rule.id,
                type=rule.type.value,
                category=rule.category,
                amount=rule.amount,
                merchant=rule.merchant,
                memo=rule.memo,
                pattern=rule.pattern.value,
                day_of_month=rule.day_of_month,
                day_of_week=rule.day_of_week,
                weekend_handling=rule.weekend_handling.value,
                payment_method=_enum_value(rule.payment_method),
                income_type=_enum_value(rule.income_type),
                instrument_id=rule.instrument_id,
                instrument_name=rule.instrument_name,
                is_active=rule.is_active,
                last_executed_date=rule.last_executed_date,
            )
        )
        self.db.flush()

    def list_active_recurring_transactions(self) -> List[RecurringTransaction]:
        rows = (
            self.db.query(RecurringTransactionRecord)
            .filter(RecurringTransactionRecord.is_active.is_(True))
            .order_by(RecurringTransactionRecord.id)
            .all()
        )
        return [_to_recurring(r) for r in rows]

    def commit(self) -> None:
        self.db.commit()
