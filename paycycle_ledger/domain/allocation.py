"""Stored-value allocation - splits an expense between a balance/gift card and cash"""

import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Callable, Optional

from paycycle_ledger.domain.exceptions import (
    InstrumentNotFoundError,
    InstrumentUnavailableError,
    InvalidAmountError,
    InvalidTransactionError,
)
from paycycle_ledger.domain.models import (
    GIFT_CARD_REFUND_CATEGORY,
    ZERO,
    BalanceCard,
    BalanceCardAllocation,
    GiftCard,
    GiftCardAllocation,
    IncomeType,
    PaymentMethod,
    Transaction,
    TransactionType,
)

IdFactory = Callable[[], str]


def _new_id() -> str:
    return uuid.uuid4().hex


def _check_request(card: object, kind: str, expense_amount: Decimal, base_transaction: Transaction) -> None:
    if card is None:
        raise InstrumentNotFoundError(f"{kind} not found")
    if expense_amount <= 0:
        raise InvalidAmountError(f"Expense amount must be positive, got {expense_amount}")
    if base_transaction.type != TransactionType.EXPENSE:
        raise InvalidTransactionError("Only expenses can be paid with a stored-value card")


def _instrument_paid(
    base: Transaction, amount: Decimal, method: PaymentMethod, card_id: str, card_name: str, new_id: IdFactory
) -> Transaction:
    return replace(
        base,
        id=new_id(),
        amount=amount,
        payment_method=method,
        instrument_id=card_id,
        instrument_name=card_name,
    )


def _cash_paid(base: Transaction, amount: Decimal, new_id: IdFactory) -> Transaction:
    return replace(
        base,
        id=new_id(),
        amount=amount,
        payment_method=PaymentMethod.CASH,
        instrument_id=None,
        instrument_name=None,
    )


def allocate_balance_card(
    card: Optional[BalanceCard],
    expense_amount: Decimal,
    base_transaction: Transaction,
    id_factory: IdFactory = _new_id,
) -> BalanceCardAllocation:
    """
    Pay an expense from a balance card, topping up with cash when short.

    Requirements:
    - Balance covers the expense: one card-paid transaction, balance reduced,
      card stays active unless the balance reaches zero
    - Balance falls short: the whole balance is spent and the remainder is
      paid in cash (cash_needed), card exhausted

    base_transaction supplies category, merchant, memo and date; its amount
    and payment method are replaced on every emitted transaction.

    Raises:
        InstrumentNotFoundError: card is None
        InvalidAmountError: expense_amount <= 0
        InstrumentUnavailableError: card is inactive or empty

    The caller persists the returned card and must serialize
    read-allocate-write per card id; concurrent allocations from stale reads
    lose updates.
    """
    _check_request(card, "Balance card", expense_amount, base_transaction)
    if not card.can_use:
        raise InstrumentUnavailableError(f"Balance card {card.id} has no balance left")

    available = card.current_balance

    if available >= expense_amount:
        new_balance = available - expense_amount
        return BalanceCardAllocation(
            transactions=[
                _instrument_paid(
                    base_transaction, expense_amount, PaymentMethod.BALANCE_CARD, card.id, card.name, id_factory
                )
            ],
            card=replace(card, current_balance=new_balance, is_active=new_balance > 0),
            cash_needed=ZERO,
        )

    cash_needed = expense_amount - available
    return BalanceCardAllocation(
        transactions=[
            _instrument_paid(base_transaction, available, PaymentMethod.BALANCE_CARD, card.id, card.name, id_factory),
            _cash_paid(base_transaction, cash_needed, id_factory),
        ],
        card=replace(card, current_balance=ZERO, is_active=False),
        cash_needed=cash_needed,
    )


def allocate_gift_card(
    card: Optional[GiftCard],
    expense_amount: Decimal,
    base_transaction: Transaction,
    id_factory: IdFactory = _new_id,
) -> GiftCardAllocation:
    """
    Pay an expense with a gift card. The card is retired by any use.

    Requirements:
    - Remaining > expense: card pays the expense, the surplus comes back as a
      cash income tagged GIFT_CARD_REFUND_CATEGORY (cash_refund)
    - Remaining < expense: card pays what it has, cash pays the shortfall
    - Remaining == expense: card pays everything

    Same error contract and serialization precondition as
    allocate_balance_card.
    """
    _check_request(card, "Gift card", expense_amount, base_transaction)
    if not card.can_use:
        raise InstrumentUnavailableError(f"Gift card {card.id} is already used")

    available = card.remaining_amount
    card_used = min(available, expense_amount)
    transactions = [
        _instrument_paid(base_transaction, card_used, PaymentMethod.GIFT_CARD, card.id, card.name, id_factory)
    ]

    cash_refund = ZERO
    if available > expense_amount:
        cash_refund = available - expense_amount
        transactions.append(
            Transaction(
                id=id_factory(),
                amount=cash_refund,
                type=TransactionType.INCOME,
                category=GIFT_CARD_REFUND_CATEGORY,
                memo=f"{card.name} refund",
                date=base_transaction.date,
                income_type=IncomeType.CASH,
            )
        )
    elif available < expense_amount:
        transactions.append(_cash_paid(base_transaction, expense_amount - available, id_factory))

    return GiftCardAllocation(
        transactions=transactions,
        card=replace(card, used_amount=card.used_amount + card_used, is_active=False),
        cash_refund=cash_refund,
    )


def balance_card_from_income(transaction: Transaction) -> BalanceCard:
    """Balance card registered by a balance-card income transaction"""
    if (
        transaction.type != TransactionType.INCOME
        or transaction.income_type != IncomeType.BALANCE_CARD
        or transaction.instrument_id is None
        or transaction.instrument_name is None
    ):
        raise InvalidTransactionError(f"Transaction {transaction.id} is not a balance card income")

    return BalanceCard(
        id=transaction.instrument_id,
        name=transaction.instrument_name,
        initial_amount=transaction.amount,
        current_balance=transaction.amount,
        created_date=transaction.date,
    )


def gift_card_from_income(transaction: Transaction) -> GiftCard:
    """Gift card registered by a gift-card income transaction"""
    if (
        transaction.type != TransactionType.INCOME
        or transaction.income_type != IncomeType.GIFT_CARD
        or transaction.instrument_id is None
        or transaction.instrument_name is None
    ):
        raise InvalidTransactionError(f"Transaction {transaction.id} is not a gift card income")

    return GiftCard(
        id=transaction.instrument_id,
        name=transaction.instrument_name,
        total_amount=transaction.amount,
        used_amount=ZERO,
        created_date=transaction.date,
        minimum_usage_rate=ZERO,
    )


def top_up_balance_card(card: BalanceCard, transaction: Transaction) -> BalanceCard:
    """
    Add a balance-card income to a card that already exists.

    The income lands on current_balance and reactivates an exhausted card;
    initial_amount keeps the first load.
    """
    topped_up = balance_card_from_income(transaction)
    if topped_up.id != card.id:
        raise InvalidTransactionError(f"Transaction {transaction.id} belongs to card {topped_up.id}, not {card.id}")

    return replace(card, current_balance=card.current_balance + transaction.amount, is_active=True)


def top_up_gift_card(card: GiftCard, transaction: Transaction) -> GiftCard:
    """
    Apply a gift-card income to a card id that already exists.

    An unused card grows by the income. A retired card is reissued as a fresh
    card, since a spent gift card never comes back into use.
    """
    reissued = gift_card_from_income(transaction)
    if reissued.id != card.id:
        raise InvalidTransactionError(f"Transaction {transaction.id} belongs to card {reissued.id}, not {card.id}")

    if not card.is_active:
        return reissued
    return replace(card, total_amount=card.total_amount + transaction.amount)
