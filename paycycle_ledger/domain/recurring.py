"""Recurring transaction scheduling - decides which rules fire on a given day"""

import uuid
from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional

from paycycle_ledger.domain.models import (
    RecurringPattern,
    RecurringTransaction,
    Transaction,
    WeekendHandling,
)
from paycycle_ledger.utils.date_utils import (
    add_months,
    days_in_month,
    generate_date_range,
    shift_off_weekend,
)

_HANDLING_STEP = {
    WeekendHandling.PREVIOUS_WEEKDAY: -1,
    WeekendHandling.NEXT_WEEKDAY: 1,
}


def monthly_execution_date(rule: RecurringTransaction, year: int, month: int) -> Optional[date]:
    """
    Execution date of a monthly rule in one month, None if the month has no
    such day. Short months are skipped, not rolled over (a day-31 rule does
    not run in April).
    """
    if rule.day_of_month > days_in_month(year, month):
        return None

    candidate = date(year, month, rule.day_of_month)
    if rule.weekend_handling == WeekendHandling.AS_IS:
        return candidate
    return shift_off_weekend(candidate, _HANDLING_STEP[rule.weekend_handling])


def is_due_on(rule: RecurringTransaction, day: date) -> bool:
    """
    Whether `day` is an execution date of `rule`.

    Pure predicate: safe to evaluate any number of times per day. Weekly
    rules ignore weekend handling since their weekday may be a weekend on
    purpose. A weekend shift can move a monthly execution into the adjacent
    month, so the neighbouring months' execution dates are checked as well.
    """
    if not rule.is_active:
        return False

    if rule.pattern == RecurringPattern.WEEKLY:
        return day.isoweekday() == rule.day_of_week

    for offset in (0, -1, 1):
        year, month = add_months(day.year, day.month, offset)
        if monthly_execution_date(rule, year, month) == day:
            return True
    return False


def is_executed_on(rule: RecurringTransaction, day: date) -> bool:
    return rule.last_executed_date == day


def rules_due_on(rules: Iterable[RecurringTransaction], day: date) -> List[RecurringTransaction]:
    """Active rules that are due on `day` and have not fired yet that day"""
    return [r for r in rules if is_due_on(r, day) and not is_executed_on(r, day)]


def due_dates_between(rule: RecurringTransaction, start: date, end: date) -> List[date]:
    """Execution dates of `rule` within [start, end]"""
    return [day for day in generate_date_range(start, end) if is_due_on(rule, day)]


def mark_executed(rule: RecurringTransaction, day: date) -> RecurringTransaction:
    return replace(rule, last_executed_date=day)


def to_transaction(rule: RecurringTransaction, day: date, transaction_id: str | None = None) -> Transaction:
    """Ledger entry produced by `rule` on `day`"""
    return Transaction(
        id=transaction_id or uuid.uuid4().hex,
        amount=rule.amount,
        type=rule.type,
        category=rule.category,
        memo=rule.memo,
        date=day,
        merchant=rule.merchant,
        income_type=rule.income_type,
        payment_method=rule.payment_method,
        instrument_id=rule.instrument_id,
        instrument_name=rule.instrument_name,
    )
