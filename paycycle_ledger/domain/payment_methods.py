"""Payment method analysis - cash, credit card and stored-value card totals"""

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from paycycle_ledger.domain.models import (
    GIFT_CARD_REFUND_CATEGORY,
    ZERO,
    BalanceCard,
    GiftCard,
    IncomeType,
    InstrumentKind,
    InstrumentSummary,
    PaymentMethod,
    PaymentMethodSummary,
    Transaction,
    TransactionType,
)


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def _summarize_instruments(
    transactions: List[Transaction],
    kind: InstrumentKind,
    balances: Dict[str, tuple[str, Decimal]],
) -> List[InstrumentSummary]:
    """
    One summary per card name seen in the window or still holding money.

    balances maps card name -> (id, current balance) for the cards the caller
    knows about. Cards whose current balance is zero are left out even when
    they were used in the window.
    """
    linked = [t for t in transactions if t.instrument_kind == kind and t.instrument_name is not None]

    # dict keeps first-seen order: window activity first, then remaining cards
    names = dict.fromkeys([t.instrument_name for t in linked] + list(balances))

    summaries = []
    for name in names:
        card_transactions = [t for t in linked if t.instrument_name == name]
        card_id, current_balance = balances.get(
            name, (card_transactions[0].instrument_id if card_transactions else "", ZERO)
        )
        if current_balance <= 0:
            continue

        summaries.append(
            InstrumentSummary(
                id=card_id,
                name=name,
                income=_total(t for t in card_transactions if t.type == TransactionType.INCOME),
                expense=_total(t for t in card_transactions if t.type == TransactionType.EXPENSE),
                current_balance=current_balance,
            )
        )
    return summaries


def analyze_payment_methods(
    transactions: Iterable[Transaction],
    balance_cards: Sequence[BalanceCard] = (),
    gift_cards: Sequence[GiftCard] = (),
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> PaymentMethodSummary:
    """
    Aggregate transactions per payment method.

    Requirements:
    - Cash income excludes gift card refunds (they offset a gift card spend)
    - Card actual expense counts dutch-pay rows at the full card charge
    - Settlement income sums what others paid back on dutch-pay expenses
    - Balance/gift card summaries carry the card's current balance, not the
      windowed one, and drop cards that are empty now

    start/end optionally restrict the transactions to an inclusive window.
    """
    window = [
        t
        for t in transactions
        if (start is None or t.date >= start) and (end is None or t.date <= end)
    ]
    incomes = [t for t in window if t.type == TransactionType.INCOME]
    expenses = [t for t in window if t.type == TransactionType.EXPENSE]
    card_expenses = [t for t in expenses if t.payment_method == PaymentMethod.CARD]

    cash_income = _total(
        t for t in incomes if t.income_type == IncomeType.CASH and t.category != GIFT_CARD_REFUND_CATEGORY
    )
    cash_expense = _total(t for t in expenses if t.payment_method == PaymentMethod.CASH)

    card_actual_expense = sum(
        (t.actual_amount if t.is_settlement and t.actual_amount is not None else t.amount for t in card_expenses),
        ZERO,
    )
    settlement_income = sum(
        (t.settlement_amount for t in expenses if t.is_settlement and t.settlement_amount is not None),
        ZERO,
    )

    balance_card_balances = {c.name: (c.id, c.current_balance) for c in balance_cards if c.can_use}
    gift_card_balances = {c.name: (c.id, c.remaining_amount) for c in gift_cards if c.can_use}

    return PaymentMethodSummary(
        cash_income=cash_income,
        cash_expense=cash_expense,
        card_expense=_total(card_expenses),
        card_actual_expense=card_actual_expense,
        settlement_income=settlement_income,
        balance_cards=_summarize_instruments(window, InstrumentKind.BALANCE_CARD, balance_card_balances),
        gift_cards=_summarize_instruments(window, InstrumentKind.GIFT_CARD, gift_card_balances),
    )
