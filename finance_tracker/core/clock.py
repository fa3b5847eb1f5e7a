"""
Time source abstraction.

Everything that needs "now" (default transaction dates, current month for
budgets and spending, the agent's date-aware system prompt) takes a Clock so
tests can pin time with FixedClock.
"""

from datetime import UTC, date, datetime
from typing import Protocol


def utcnow() -> datetime:
    """
    Return timezone-aware UTC datetime.

    Replaces deprecated datetime.utcnow() which is scheduled for removal in Python 3.14.
    """
    return datetime.now(UTC)


def month_key(day: date) -> str:
    """Format a date as its YYYY-MM month key."""
    return f"{day.year:04d}-{day.month:02d}"


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return utcnow()


class FixedClock:
    """Clock pinned to a single instant (tests, replays)."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def today(clock: Clock) -> date:
    """Current calendar date according to the clock."""
    return clock.now().date()


def current_month(clock: Clock) -> str:
    """Current YYYY-MM month according to the clock."""
    return month_key(today(clock))
