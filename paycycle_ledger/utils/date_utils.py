"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta
from typing import List

SATURDAY = 5
SUNDAY = 6


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(year: int, month: int, months: int) -> tuple[int, int]:
    """Shift a (year, month) pair by a number of months"""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def is_weekend(day: date) -> bool:
    return day.weekday() in (SATURDAY, SUNDAY)


def shift_off_weekend(day: date, step: int) -> date:
    """
    Move a weekend date to the nearest weekday in one direction.

    step=-1 walks backward one day at a time, step=+1 walks forward.
    Weekdays are returned unchanged, so shifting a result again is a no-op.
    """
    if step not in (-1, 1):
        raise ValueError(f"step must be -1 or 1, got {step}")

    while is_weekend(day):
        day += timedelta(days=step)
    return day
