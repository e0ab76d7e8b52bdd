"""Ledger service - wires the pure domain functions to a repository"""

import logging
from datetime import date
from decimal import Decimal

from paycycle_ledger.config import settings
from paycycle_ledger.domain.allocation import (
    allocate_balance_card,
    allocate_gift_card,
    balance_card_from_income,
    gift_card_from_income,
    top_up_balance_card,
    top_up_gift_card,
)
from paycycle_ledger.domain.exceptions import DomainException
from paycycle_ledger.domain.models import (
    BalanceCardAllocation,
    GiftCardAllocation,
    IncomeType,
    InstrumentKind,
    PaymentMethodSummary,
    PayPeriod,
    PayPeriodSummary,
    PaydaySetup,
    Transaction,
    TransactionType,
)
from paycycle_ledger.domain.pay_period import pay_period_for_setup, summarize_pay_period
from paycycle_ledger.domain.payment_methods import analyze_payment_methods
from paycycle_ledger.domain.repositories import LedgerRepository
from paycycle_ledger.infrastructure.observability.logging import log_allocation
from paycycle_ledger.infrastructure.observability.metrics import record_allocation
from paycycle_ledger.services.locks import KeyedLock

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Records transactions and spends stored-value cards.

    Every card spend runs read-allocate-write under a per-card lock, so two
    expenses against the same card never allocate from the same stale
    balance. Share one KeyedLock between services that touch the same store.
    """

    def __init__(self, repository: LedgerRepository, locks: KeyedLock | None = None):
        self.repository = repository
        self.locks = locks or KeyedLock()

    def record_transaction(self, transaction: Transaction) -> None:
        """
        Record a transaction and keep the card it touches in step.

        Card income registers a new card or tops up the existing one.
        Card-paid expenses go through the allocator, so the card balance
        moves and any shortfall or refund is recorded alongside.
        """
        if transaction.type == TransactionType.EXPENSE:
            if transaction.instrument_kind == InstrumentKind.BALANCE_CARD:
                self.spend_with_balance_card(transaction.instrument_id, transaction.amount, transaction)
                return
            if transaction.instrument_kind == InstrumentKind.GIFT_CARD:
                self.spend_with_gift_card(transaction.instrument_id, transaction.amount, transaction)
                return

        if transaction.type == TransactionType.INCOME:
            if transaction.income_type == IncomeType.BALANCE_CARD:
                self._register_balance_card_income(transaction)
                return
            if transaction.income_type == IncomeType.GIFT_CARD:
                self._register_gift_card_income(transaction)
                return

        self.repository.append_transaction(transaction)
        self.repository.commit()

    def _register_balance_card_income(self, transaction: Transaction) -> None:
        card = balance_card_from_income(transaction)
        with self.locks.hold(card.id):
            existing = self.repository.get_balance_card(card.id)
            if existing is not None:
                card = top_up_balance_card(existing, transaction)

            self.repository.append_transaction(transaction)
            self.repository.save_balance_card(card)
            self.repository.commit()

    def _register_gift_card_income(self, transaction: Transaction) -> None:
        card = gift_card_from_income(transaction)
        with self.locks.hold(card.id):
            existing = self.repository.get_gift_card(card.id)
            if existing is not None:
                card = top_up_gift_card(existing, transaction)

            self.repository.append_transaction(transaction)
            self.repository.save_gift_card(card)
            self.repository.commit()

    def spend_with_balance_card(
        self, card_id: str, expense_amount: Decimal, base_transaction: Transaction
    ) -> BalanceCardAllocation:
        """
        Pay an expense from a balance card, cash covering any shortfall.

        Raises the allocator's DomainException subclasses untouched; nothing
        is written in that case.
        """
        with self.locks.hold(card_id):
            card = self.repository.get_balance_card(card_id)
            try:
                allocation = allocate_balance_card(card, expense_amount, base_transaction)
            except DomainException as e:
                logger.warning(f"Balance card allocation rejected: {e}", extra={"instrument_id": card_id})
                raise

            for transaction in allocation.transactions:
                self.repository.append_transaction(transaction)
            self.repository.save_balance_card(allocation.card)
            self.repository.commit()

        self._observe("balance_card", card_id, expense_amount, allocation)
        return allocation

    def spend_with_gift_card(
        self, card_id: str, expense_amount: Decimal, base_transaction: Transaction
    ) -> GiftCardAllocation:
        """Pay an expense with a gift card, retiring it and refunding any surplus"""
        with self.locks.hold(card_id):
            card = self.repository.get_gift_card(card_id)
            try:
                allocation = allocate_gift_card(card, expense_amount, base_transaction)
            except DomainException as e:
                logger.warning(f"Gift card allocation rejected: {e}", extra={"instrument_id": card_id})
                raise

            for transaction in allocation.transactions:
                self.repository.append_transaction(transaction)
            self.repository.save_gift_card(allocation.card)
            self.repository.commit()

        self._observe("gift_card", card_id, expense_amount, allocation)
        return allocation

    def payment_method_summary(self, start: date, end: date) -> PaymentMethodSummary:
        return analyze_payment_methods(
            self.repository.list_transactions_in_range(start, end),
            self.repository.list_active_balance_cards(),
            self.repository.list_active_gift_cards(),
        )

    def current_pay_period(self, today: date, setup: PaydaySetup | None = None) -> PayPeriod:
        """Pay period containing `today`, using the configured payday when the user has none"""
        setup = setup or PaydaySetup(settings.default_payday, settings.default_payday_adjustment)
        return pay_period_for_setup(today, setup)

    def pay_period_summary(self, period: PayPeriod) -> PayPeriodSummary:
        transactions = self.repository.list_transactions_in_range(period.start_date, period.end_date)
        return summarize_pay_period(transactions, period)

    @staticmethod
    def _observe(kind: str, card_id: str, expense_amount: Decimal, allocation) -> None:
        record_allocation(kind, allocation.cash_portion, allocation.refund)
        log_allocation(
            instrument_kind=kind,
            instrument_id=card_id,
            expense_amount=expense_amount,
            instrument_portion=allocation.instrument_portion,
            cash_portion=allocation.cash_portion,
            refund=allocation.refund,
            exhausted=allocation.updated_card is None,
        )
