"""Pay period calculation - budgeting ranges anchored to the user's payday"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List

from paycycle_ledger.domain.models import (
    PayPeriod,
    PayPeriodSummary,
    PaydayAdjustment,
    PaydaySetup,
    Transaction,
    TransactionType,
)
from paycycle_ledger.utils.date_utils import add_months, days_in_month, shift_off_weekend

ONE_DAY = timedelta(days=1)

_ADJUSTMENT_STEP = {
    PaydayAdjustment.BEFORE_WEEKEND: -1,
    PaydayAdjustment.AFTER_WEEKEND: 1,
}


def actual_payday(year: int, month: int, payday: int, adjustment: PaydayAdjustment) -> date:
    """
    Resolve the payday of a given month.

    The anchor is clamped to the last day of short months (payday 31 in
    February pays on the 28th/29th), then moved off a weekend according to
    the adjustment policy. Weekday paydays are never moved.
    """
    target = date(year, month, min(payday, days_in_month(year, month)))
    return shift_off_weekend(target, _ADJUSTMENT_STEP[adjustment])


def _payday_month(start: date, payday: int, adjustment: PaydayAdjustment) -> tuple[int, int]:
    """
    Month whose payday falls on `start`.

    Usually start's own month, but a weekend shift can carry a payday across
    a month boundary (payday 1 paid on the previous Friday, payday 31 paid on
    the following Monday).
    """
    for offset in (0, 1, -1):
        year, month = add_months(start.year, start.month, offset)
        if actual_payday(year, month, payday, adjustment) == start:
            return year, month
    return start.year, start.month


def current_pay_period(reference_date: date, payday: int, adjustment: PaydayAdjustment) -> PayPeriod:
    """
    Pay period containing reference_date.

    On or after this month's payday the period runs until the day before next
    month's payday; before it, the period started on last month's payday.
    """
    year, month = reference_date.year, reference_date.month
    start = actual_payday(year, month, payday, adjustment)

    while reference_date < start:
        year, month = add_months(year, month, -1)
        start = actual_payday(year, month, payday, adjustment)

    following = actual_payday(*add_months(year, month, 1), payday, adjustment)
    while reference_date >= following:
        year, month = add_months(year, month, 1)
        start = following
        following = actual_payday(*add_months(year, month, 1), payday, adjustment)

    return PayPeriod(start_date=start, end_date=following - ONE_DAY)


def next_pay_period(period: PayPeriod, payday: int, adjustment: PaydayAdjustment) -> PayPeriod:
    """Period starting the day after `period` ends"""
    start = period.end_date + ONE_DAY
    year, month = _payday_month(start, payday, adjustment)
    end = actual_payday(*add_months(year, month, 1), payday, adjustment) - ONE_DAY
    return PayPeriod(start_date=start, end_date=end)


def previous_pay_period(period: PayPeriod, payday: int, adjustment: PaydayAdjustment) -> PayPeriod:
    """Period ending the day before `period` starts"""
    end = period.start_date - ONE_DAY
    year, month = _payday_month(period.start_date, payday, adjustment)
    start = actual_payday(*add_months(year, month, -1), payday, adjustment)
    return PayPeriod(start_date=start, end_date=end)


def pay_period_for_setup(reference_date: date, setup: PaydaySetup) -> PayPeriod:
    return current_pay_period(reference_date, setup.payday, setup.adjustment)


def recommended_date_for_period(period: PayPeriod, today: date) -> date:
    """Default date for a new entry while browsing `period`"""
    return today if period.contains(today) else period.start_date


def transactions_in_period(transactions: Iterable[Transaction], period: PayPeriod) -> List[Transaction]:
    return [t for t in transactions if period.contains(t.date)]


def summarize_pay_period(transactions: Iterable[Transaction], period: PayPeriod) -> PayPeriodSummary:
    """Income, expense and net balance of the transactions inside `period`"""
    in_period = transactions_in_period(transactions, period)

    total_income = sum((t.amount for t in in_period if t.type == TransactionType.INCOME), Decimal("0"))
    total_expense = sum((t.amount for t in in_period if t.type == TransactionType.EXPENSE), Decimal("0"))

    return PayPeriodSummary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        transaction_count=len(in_period),
    )
