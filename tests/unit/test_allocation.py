"""Unit tests for stored-value card allocation"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from paycycle_ledger.domain.allocation import (
    allocate_balance_card,
    allocate_gift_card,
    balance_card_from_income,
    gift_card_from_income,
    top_up_balance_card,
    top_up_gift_card,
)
from paycycle_ledger.domain.exceptions import (
    InstrumentNotFoundError,
    InstrumentUnavailableError,
    InvalidAmountError,
    InvalidTransactionError,
)
from paycycle_ledger.domain.models import (
    GIFT_CARD_REFUND_CATEGORY,
    IncomeType,
    PaymentMethod,
    Transaction,
    TransactionType,
)


def test_balance_card_covers_expense(balance_card, base_expense, id_factory):
    """Test partial spend keeps the card active with the reduced balance"""
    result = allocate_balance_card(balance_card, Decimal("2000"), base_expense, id_factory)

    assert len(result.transactions) == 1
    spent = result.transactions[0]
    assert spent.id == "t1"
    assert spent.amount == Decimal("2000")
    assert spent.payment_method == PaymentMethod.BALANCE_CARD
    assert spent.instrument_id == "bc-1"
    assert spent.instrument_name == "Convenience store card"
    assert spent.category == "Groceries"
    assert spent.merchant == "Corner Mart"
    assert spent.date == date(2025, 10, 20)

    assert result.card.current_balance == Decimal("3000")
    assert result.card.is_active is True
    assert result.updated_card == result.card
    assert result.cash_needed == Decimal("0")


def test_balance_card_exact_spend_exhausts_card(balance_card, base_expense):
    result = allocate_balance_card(balance_card, Decimal("5000"), base_expense)

    assert len(result.transactions) == 1
    assert result.card.current_balance == Decimal("0")
    assert result.card.is_active is False
    assert result.updated_card is None
    assert result.cash_needed == Decimal("0")


def test_balance_card_shortfall_paid_in_cash(balance_card, base_expense, id_factory):
    """Test balance 5000, expense 8000: 5000 from the card, 3000 cash"""
    result = allocate_balance_card(balance_card, Decimal("8000"), base_expense, id_factory)

    card_part, cash_part = result.transactions
    assert card_part.amount == Decimal("5000")
    assert card_part.payment_method == PaymentMethod.BALANCE_CARD
    assert cash_part.amount == Decimal("3000")
    assert cash_part.payment_method == PaymentMethod.CASH
    assert cash_part.instrument_id is None
    assert cash_part.instrument_name is None
    assert [card_part.id, cash_part.id] == ["t1", "t2"]

    assert result.cash_needed == Decimal("3000")
    assert result.card.current_balance == Decimal("0")
    assert result.card.is_active is False
    assert result.updated_card is None


def test_balance_card_leaves_input_untouched(balance_card, base_expense):
    allocate_balance_card(balance_card, Decimal("2000"), base_expense)

    assert balance_card.current_balance == Decimal("5000")
    assert balance_card.is_active is True


def test_gift_card_surplus_refunded_as_cash(gift_card, base_expense, id_factory):
    """Test total 10000, expense 7000: 7000 card spend, 3000 cash refund, card retired"""
    result = allocate_gift_card(gift_card, Decimal("7000"), base_expense, id_factory)

    spent, refund = result.transactions
    assert spent.amount == Decimal("7000")
    assert spent.payment_method == PaymentMethod.GIFT_CARD
    assert spent.instrument_id == "gc-1"

    assert refund.type == TransactionType.INCOME
    assert refund.income_type == IncomeType.CASH
    assert refund.amount == Decimal("3000")
    assert refund.category == GIFT_CARD_REFUND_CATEGORY
    assert refund.memo == "Department store voucher refund"
    assert refund.date == base_expense.date

    assert result.cash_refund == Decimal("3000")
    assert result.card.is_active is False
    assert result.card.used_amount == Decimal("7000")
    assert result.updated_card is None

    # The whole 10000 leaves the card: 7000 spent, 3000 back as cash
    assert result.instrument_portion == Decimal("10000")
    assert result.cash_portion == Decimal("0")
    assert result.refund == Decimal("3000")
    assert result.instrument_portion + result.cash_portion - result.refund == Decimal("7000")


def test_gift_card_shortfall_paid_in_cash(gift_card, base_expense):
    result = allocate_gift_card(gift_card, Decimal("12000"), base_expense)

    spent, cash = result.transactions
    assert spent.amount == Decimal("10000")
    assert spent.payment_method == PaymentMethod.GIFT_CARD
    assert cash.amount == Decimal("2000")
    assert cash.payment_method == PaymentMethod.CASH

    assert result.cash_refund == Decimal("0")
    assert result.card.is_active is False
    assert result.card.remaining_amount == Decimal("0")


def test_gift_card_exact_spend(gift_card, base_expense):
    result = allocate_gift_card(gift_card, Decimal("10000"), base_expense)

    assert len(result.transactions) == 1
    assert result.transactions[0].amount == Decimal("10000")
    assert result.cash_refund == Decimal("0")
    assert result.card.is_active is False


def test_gift_card_partially_used_before(gift_card, base_expense):
    """Test the refund is based on the remaining amount, not the face value"""
    card = replace(gift_card, used_amount=Decimal("2000"))

    result = allocate_gift_card(card, Decimal("5000"), base_expense)

    assert result.cash_refund == Decimal("3000")
    assert result.card.used_amount == Decimal("7000")


def test_conservation_of_money_every_branch(balance_card, gift_card, base_expense):
    """Test card portion + cash portion - refund == expense for every split"""
    for amount in [Decimal(a) for a in ("0.01", "1", "2500", "4999.99", "5000", "5000.01", "8000", "9999", "10000", "10000.5", "25000")]:
        balance_result = allocate_balance_card(balance_card, amount, base_expense)
        assert balance_result.instrument_portion + balance_result.cash_portion - balance_result.refund == amount
        assert balance_result.cash_needed == balance_result.cash_portion

        gift_result = allocate_gift_card(gift_card, amount, base_expense)
        assert gift_result.instrument_portion + gift_result.cash_portion - gift_result.refund == amount
        assert gift_result.cash_refund == gift_result.refund


def test_gift_card_always_retires(gift_card, base_expense):
    for used in ("0", "3000", "9999"):
        card = replace(gift_card, used_amount=Decimal(used))
        for amount in ("1", "5000", "10000", "20000"):
            result = allocate_gift_card(card, Decimal(amount), base_expense)
            assert result.card.is_active is False
            assert not result.card.can_use


def test_balance_card_active_iff_balance_left(balance_card, base_expense):
    for amount in ("1", "4999", "5000", "6000"):
        result = allocate_balance_card(balance_card, Decimal(amount), base_expense)
        assert result.card.is_active == (result.card.current_balance > 0)


def test_missing_card_rejected(base_expense):
    with pytest.raises(InstrumentNotFoundError):
        allocate_balance_card(None, Decimal("1000"), base_expense)
    with pytest.raises(InstrumentNotFoundError):
        allocate_gift_card(None, Decimal("1000"), base_expense)


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-500")])
def test_non_positive_amount_rejected(balance_card, gift_card, base_expense, amount):
    with pytest.raises(InvalidAmountError):
        allocate_balance_card(balance_card, amount, base_expense)
    with pytest.raises(InvalidAmountError):
        allocate_gift_card(gift_card, amount, base_expense)


def test_retired_cards_rejected(balance_card, gift_card, base_expense):
    empty = replace(balance_card, current_balance=Decimal("0"), is_active=False)
    used = replace(gift_card, used_amount=Decimal("7000"), is_active=False)

    with pytest.raises(InstrumentUnavailableError):
        allocate_balance_card(empty, Decimal("1000"), base_expense)
    with pytest.raises(InstrumentUnavailableError):
        allocate_gift_card(used, Decimal("1000"), base_expense)


def test_income_base_transaction_rejected(balance_card):
    income = Transaction(
        id="x",
        amount=Decimal("1000"),
        type=TransactionType.INCOME,
        category="Salary",
        memo="",
        date=date(2025, 10, 20),
        income_type=IncomeType.CASH,
    )
    with pytest.raises(InvalidTransactionError):
        allocate_balance_card(balance_card, Decimal("1000"), income)


def test_cards_registered_from_income():
    balance_income = Transaction(
        id="i1",
        amount=Decimal("50000"),
        type=TransactionType.INCOME,
        category="Gift",
        memo="",
        date=date(2025, 10, 2),
        income_type=IncomeType.BALANCE_CARD,
        instrument_id="bc-9",
        instrument_name="Cafe card",
    )
    gift_income = replace(balance_income, id="i2", income_type=IncomeType.GIFT_CARD, instrument_id="gc-9")

    balance = balance_card_from_income(balance_income)
    assert balance.id == "bc-9"
    assert balance.initial_amount == balance.current_balance == Decimal("50000")
    assert balance.created_date == date(2025, 10, 2)
    assert balance.is_active

    gift = gift_card_from_income(gift_income)
    assert gift.id == "gc-9"
    assert gift.total_amount == Decimal("50000")
    assert gift.remaining_amount == Decimal("50000")
    assert gift.can_use

    with pytest.raises(InvalidTransactionError):
        balance_card_from_income(gift_income)
    with pytest.raises(InvalidTransactionError):
        gift_card_from_income(balance_income)


def card_income(card_id: str, amount: str, income_type: IncomeType) -> Transaction:
    return Transaction(
        id=f"top-up-{card_id}",
        amount=Decimal(amount),
        type=TransactionType.INCOME,
        category="Top-up",
        memo="",
        date=date(2025, 11, 6),
        income_type=income_type,
        instrument_id=card_id,
        instrument_name="Convenience store card",
    )


def test_balance_card_top_up_keeps_unspent_balance(balance_card):
    """Test 3000 left plus a 5000 top-up gives 8000 and reactivates an exhausted card"""
    card = replace(balance_card, current_balance=Decimal("3000"))

    topped_up = top_up_balance_card(card, card_income("bc-1", "5000", IncomeType.BALANCE_CARD))

    assert topped_up.current_balance == Decimal("8000")
    assert topped_up.initial_amount == Decimal("5000")
    assert topped_up.created_date == balance_card.created_date

    exhausted = replace(balance_card, current_balance=Decimal("0"), is_active=False)
    revived = top_up_balance_card(exhausted, card_income("bc-1", "2000", IncomeType.BALANCE_CARD))
    assert revived.current_balance == Decimal("2000")
    assert revived.can_use


def test_gift_card_top_up(gift_card):
    """Test an unused card grows, a retired one is reissued fresh"""
    grown = top_up_gift_card(gift_card, card_income("gc-1", "5000", IncomeType.GIFT_CARD))
    assert grown.total_amount == Decimal("15000")
    assert grown.remaining_amount == Decimal("15000")

    retired = replace(gift_card, used_amount=Decimal("7000"), is_active=False)
    reissued = top_up_gift_card(retired, card_income("gc-1", "5000", IncomeType.GIFT_CARD))
    assert reissued.total_amount == Decimal("5000")
    assert reissued.used_amount == Decimal("0")
    assert reissued.can_use


def test_top_up_rejects_other_card(balance_card, gift_card):
    with pytest.raises(InvalidTransactionError):
        top_up_balance_card(balance_card, card_income("bc-2", "5000", IncomeType.BALANCE_CARD))
    with pytest.raises(InvalidTransactionError):
        top_up_gift_card(gift_card, card_income("gc-1", "5000", IncomeType.BALANCE_CARD))
