"""
Practice calendar arithmetic.

Practice happens Monday-Friday. Advancing by N practice days skips
Saturdays and Sundays; a new week always starts on the following Monday.
"""

from __future__ import annotations

from datetime import date, timedelta

SATURDAY = 5
MONDAY = 0


def is_weekend(day: date) -> bool:
    return day.weekday() >= SATURDAY


def next_practice_day(day: date) -> date:
    """``day`` itself if it is a weekday, otherwise the following Monday."""
    while is_weekend(day):
        day += timedelta(days=1)
    return day


def add_practice_days(start: date, count: int) -> date:
    """
    Advance ``count`` weekdays from ``start`` (a weekend start rolls to Monday first).

    Raises:
        ValueError: ``count`` is negative
    """
    if count < 0:
        raise ValueError(f"Practice day offset must be non-negative, got {count}")

    current = next_practice_day(start)
    added = 0
    while added < count:
        current += timedelta(days=1)
        if not is_weekend(current):
            added += 1
    return current


def practice_dates(start: date, count: int) -> list[date]:
    """The first ``count`` practice dates beginning at ``start``."""
    return [add_practice_days(start, offset) for offset in range(count)]


def next_week_start(current: date) -> date:
    """The Monday strictly after ``current``."""
    return current + timedelta(days=7 - current.weekday())
