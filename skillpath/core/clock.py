"""Injectable time source used for mastered/unlocked/created stamps."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: timezone-aware current UTC time."""
    return datetime.now(UTC)


class FixedClock:
    """
    Deterministic clock for tests and replays.

    Returns the same instant on every call until ``advance`` is used.
    """

    def __init__(self, instant: datetime):
        self.instant = instant

    def __call__(self) -> datetime:
        return self.instant

    def advance(self, **kwargs: float) -> datetime:
        """Move the clock forward by a ``timedelta(**kwargs)``."""
        self.instant = self.instant + timedelta(**kwargs)
        return self.instant
