"""
Error taxonomy for the progression engine.

Only conditions the caller must act on are raised:
- NotFoundError: a referenced skill or week plan has no backing record
- InvalidStateError: the requested transition is not allowed
- SkillCycleError: strict graph validation found a prerequisite cycle

Unmet prerequisites, empty quests and over-budget drills are reported
as data on the returned results instead.
"""

from __future__ import annotations


class ProgressionError(Exception):
    """Base class for engine errors. ``code`` is a stable machine-readable tag."""

    code = "PROGRESSION_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ProgressionError):
    """Raised when a referenced record does not exist."""

    code = "NOT_FOUND"


class SkillNotFoundError(NotFoundError):
    """Raised when no skill record matches an id."""

    def __init__(self, skill_id: str):
        super().__init__(f"Skill {skill_id} not found")
        self.skill_id = skill_id


class WeekPlanNotFoundError(NotFoundError):
    """Raised when no week plan record matches an id."""

    def __init__(self, week_plan_id: str):
        super().__init__(f"Week plan not found: {week_plan_id}")
        self.week_plan_id = week_plan_id


class InvalidStateError(ProgressionError):
    """Raised when an operation is not valid for the record's current state."""

    code = "INVALID_STATE"


class MaxRetriesExceededError(InvalidStateError):
    """Raised when a drill is retried past the configured attempt cap."""

    code = "MAX_RETRIES_EXCEEDED"

    def __init__(self, max_attempts: int, attempt_number: int):
        super().__init__(
            f"Maximum retry attempts ({max_attempts}) exceeded. Consider skipping this skill."
        )
        self.max_attempts = max_attempts
        self.attempt_number = attempt_number


class SkillCycleError(ProgressionError):
    """Raised by strict ordering when prerequisites form a cycle."""

    code = "CYCLE_DETECTED"

    def __init__(self, cycle: list[str]):
        super().__init__(f"Prerequisite cycle detected: {' -> '.join(cycle)}")
        self.cycle = cycle
