"""
Core Module - Shared error taxonomy and time source.

All domain modules (graph, progression, planning, drills) import their
exceptions and clock from here rather than defining their own.
"""

from skillpath.core.clock import Clock, FixedClock, utc_now
from skillpath.core.errors import (
    InvalidStateError,
    MaxRetriesExceededError,
    NotFoundError,
    ProgressionError,
    SkillCycleError,
    SkillNotFoundError,
    WeekPlanNotFoundError,
)

__all__ = [
    # Clock
    "Clock",
    "FixedClock",
    "utc_now",
    # Errors
    "ProgressionError",
    "NotFoundError",
    "SkillNotFoundError",
    "WeekPlanNotFoundError",
    "InvalidStateError",
    "MaxRetriesExceededError",
    "SkillCycleError",
]
