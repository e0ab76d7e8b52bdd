"""Domain models - pure Python dataclasses representing ledger entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from paycycle_ledger.domain.exceptions import (
    InvalidAmountError,
    InvalidPaydayError,
    InvalidRecurringRuleError,
    InvalidTransactionError,
)

# Category of the synthetic cash income emitted when a gift card is refunded
GIFT_CARD_REFUND_CATEGORY = "Gift card refund"

ZERO = Decimal("0")


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class IncomeType(str, Enum):
    CASH = "cash"
    BALANCE_CARD = "balance_card"
    GIFT_CARD = "gift_card"


class PaymentMethod(str, Enum):
    CASH = "cash"  # includes debit cards
    CARD = "card"  # credit card
    BALANCE_CARD = "balance_card"
    GIFT_CARD = "gift_card"


class InstrumentKind(str, Enum):
    BALANCE_CARD = "balance_card"
    GIFT_CARD = "gift_card"


class PaydayAdjustment(str, Enum):
    """Where a payday that falls on a weekend moves to"""

    BEFORE_WEEKEND = "before_weekend"
    AFTER_WEEKEND = "after_weekend"


class WeekendHandling(str, Enum):
    """Where a monthly recurring date that falls on a weekend moves to"""

    AS_IS = "as_is"
    PREVIOUS_WEEKDAY = "previous_weekday"
    NEXT_WEEKDAY = "next_weekday"


class RecurringPattern(str, Enum):
    MONTHLY = "monthly"
    WEEKLY = "weekly"


def _check_type_pairing(
    type: TransactionType,
    income_type: Optional[IncomeType],
    payment_method: Optional[PaymentMethod],
) -> None:
    if type == TransactionType.INCOME:
        if income_type is None or payment_method is not None:
            raise InvalidTransactionError("Income needs an income type and no payment method")
    elif payment_method is None or income_type is not None:
        raise InvalidTransactionError("Expense needs a payment method and no income type")


def _instrument_kind(
    income_type: Optional[IncomeType], payment_method: Optional[PaymentMethod]
) -> Optional[InstrumentKind]:
    if income_type == IncomeType.BALANCE_CARD or payment_method == PaymentMethod.BALANCE_CARD:
        return InstrumentKind.BALANCE_CARD
    if income_type == IncomeType.GIFT_CARD or payment_method == PaymentMethod.GIFT_CARD:
        return InstrumentKind.GIFT_CARD
    return None


@dataclass(frozen=True)
class Transaction:
    """Single ledger entry"""

    id: str
    amount: Decimal
    type: TransactionType
    category: str
    memo: str
    date: date
    merchant: Optional[str] = None
    income_type: Optional[IncomeType] = None  # income only
    payment_method: Optional[PaymentMethod] = None  # expense only
    instrument_id: Optional[str] = None
    instrument_name: Optional[str] = None
    actual_amount: Optional[Decimal] = None  # dutch pay: what the card was charged
    settlement_amount: Optional[Decimal] = None  # dutch pay: what others paid back
    is_settlement: bool = False

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise InvalidAmountError(f"Transaction amount must be positive, got {self.amount}")
        _check_type_pairing(self.type, self.income_type, self.payment_method)

    @property
    def instrument_kind(self) -> Optional[InstrumentKind]:
        if self.instrument_id is None:
            return None
        return _instrument_kind(self.income_type, self.payment_method)


@dataclass(frozen=True)
class BalanceCard:
    """Refillable stored-value instrument, spent down over many expenses"""

    id: str
    name: str
    initial_amount: Decimal
    current_balance: Decimal
    created_date: date
    is_active: bool = True

    @property
    def can_use(self) -> bool:
        return self.is_active and self.current_balance > 0


@dataclass(frozen=True)
class GiftCard:
    """Stored-value instrument retired after a single spend"""

    id: str
    name: str
    total_amount: Decimal
    used_amount: Decimal
    created_date: date
    is_active: bool = True
    minimum_usage_rate: Decimal = Decimal("0.8")

    @property
    def remaining_amount(self) -> Decimal:
        return self.total_amount - self.used_amount

    @property
    def can_use(self) -> bool:
        return self.is_active and self.remaining_amount > 0


@dataclass(frozen=True)
class PaydaySetup:
    """User's payday anchor and weekend adjustment policy"""

    payday: int
    adjustment: PaydayAdjustment = PaydayAdjustment.BEFORE_WEEKEND

    def __post_init__(self) -> None:
        if not 1 <= self.payday <= 31:
            raise InvalidPaydayError(f"Payday must be between 1 and 31, got {self.payday}")


@dataclass(frozen=True)
class PayPeriod:
    """Inclusive date range between two paydays"""

    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        if self.start_date > self.end_date:
            raise ValueError(f"Pay period starts after it ends: {self.start_date} > {self.end_date}")

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def display_text(self) -> str:
        start, end = self.start_date, self.end_date
        if (start.year, start.month) == (end.year, end.month):
            return f"{start.year}.{start.month:02d} ({start.day}~{end.day})"
        if start.year == end.year:
            return f"{start.year}.{start.month:02d}.{start.day:02d} ~ {end.month:02d}.{end.day:02d}"
        return f"{start.isoformat().replace('-', '.')} ~ {end.isoformat().replace('-', '.')}"

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class RecurringTransaction:
    """
    Monthly or weekly rule that produces a transaction on its execution date.

    day_of_month is 1..31 for MONTHLY rules, day_of_week is 1..7 (Monday=1)
    for WEEKLY rules. last_executed_date is stamped by the scheduler once per
    day it fires.
    """

    id: str
    type: TransactionType
    category: str
    amount: Decimal
    merchant: str
    pattern: RecurringPattern
    memo: str = ""
    day_of_month: Optional[int] = None
    day_of_week: Optional[int] = None
    weekend_handling: WeekendHandling = WeekendHandling.AS_IS
    payment_method: Optional[PaymentMethod] = None
    income_type: Optional[IncomeType] = None
    instrument_id: Optional[str] = None
    instrument_name: Optional[str] = None
    is_active: bool = True
    last_executed_date: Optional[date] = None

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise InvalidAmountError(f"Recurring amount must be positive, got {self.amount}")

        if self.type == TransactionType.INCOME and self.income_type is None:
            object.__setattr__(self, "income_type", IncomeType.CASH)
        try:
            _check_type_pairing(self.type, self.income_type, self.payment_method)
        except InvalidTransactionError as e:
            raise InvalidRecurringRuleError(str(e)) from e

        if self.pattern == RecurringPattern.MONTHLY:
            if self.day_of_month is None or not 1 <= self.day_of_month <= 31:
                raise InvalidRecurringRuleError(
                    f"Monthly rule needs day_of_month in 1..31, got {self.day_of_month}"
                )
        elif self.day_of_week is None or not 1 <= self.day_of_week <= 7:
            raise InvalidRecurringRuleError(
                f"Weekly rule needs day_of_week in 1..7, got {self.day_of_week}"
            )


@dataclass(frozen=True)
class BalanceCardAllocation:
    """Outcome of spending against a balance card"""

    transactions: List[Transaction]
    card: BalanceCard
    cash_needed: Decimal = ZERO

    @property
    def updated_card(self) -> Optional[BalanceCard]:
        """Card to keep offering, None once exhausted"""
        return self.card if self.card.is_active else None

    @property
    def instrument_portion(self) -> Decimal:
        return sum(
            (t.amount for t in self.transactions if t.payment_method == PaymentMethod.BALANCE_CARD), ZERO
        )

    @property
    def cash_portion(self) -> Decimal:
        return sum((t.amount for t in self.transactions if t.payment_method == PaymentMethod.CASH), ZERO)

    @property
    def refund(self) -> Decimal:
        return ZERO


@dataclass(frozen=True)
class GiftCardAllocation:
    """Outcome of spending against a gift card"""

    transactions: List[Transaction]
    card: GiftCard
    cash_refund: Decimal = ZERO

    @property
    def updated_card(self) -> Optional[GiftCard]:
        # Gift cards never survive a spend
        return None

    @property
    def instrument_portion(self) -> Decimal:
        """Value drawn from the card: the card-paid row plus any surplus refunded as cash"""
        paid = sum((t.amount for t in self.transactions if t.payment_method == PaymentMethod.GIFT_CARD), ZERO)
        return paid + self.cash_refund

    @property
    def cash_portion(self) -> Decimal:
        return sum((t.amount for t in self.transactions if t.payment_method == PaymentMethod.CASH), ZERO)

    @property
    def refund(self) -> Decimal:
        return sum((t.amount for t in self.transactions if t.type == TransactionType.INCOME), ZERO)


@dataclass(frozen=True)
class InstrumentSummary:
    """Windowed activity and current balance of one balance/gift card"""

    id: str
    name: str
    income: Decimal = ZERO
    expense: Decimal = ZERO
    current_balance: Decimal = ZERO


@dataclass(frozen=True)
class PaymentMethodSummary:
    """Per payment method totals over a set of transactions"""

    cash_income: Decimal = ZERO
    cash_expense: Decimal = ZERO
    card_expense: Decimal = ZERO
    card_actual_expense: Decimal = ZERO  # dutch pay counted at the full card charge
    settlement_income: Decimal = ZERO
    balance_cards: List[InstrumentSummary] = field(default_factory=list)
    gift_cards: List[InstrumentSummary] = field(default_factory=list)


@dataclass(frozen=True)
class PayPeriodSummary:
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    transaction_count: int
