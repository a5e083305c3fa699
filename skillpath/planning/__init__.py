"""
Week planning - day-by-day schedules and week lifecycle.

Components:
- WeekPlanGenerator: skills -> WeekPlan with reviews and catch-up days
- WeekTracker: activation, progress counters, completion and carry-forward
- WeekPlanStore / InMemoryWeekPlanStore: async persistence contract
"""

from skillpath.planning.models import (
    CATCH_UP_TITLE,
    DayPlan,
    DayStatus,
    GoalRef,
    QuestRef,
    WeekPlan,
    WeekPlanContext,
    WeekPlanResult,
    WeekPlanStatus,
    WeekProgressUpdate,
)
from skillpath.planning.store import InMemoryWeekPlanStore, WeekPlanStore
from skillpath.planning.week_plan_generator import WeekPlanConfig, WeekPlanGenerator
from skillpath.planning.week_tracker import (
    WeekCompletionResult,
    WeeklySummary,
    WeekTracker,
)

__all__ = [
    "CATCH_UP_TITLE",
    "DayPlan",
    "DayStatus",
    "GoalRef",
    "QuestRef",
    "WeekPlan",
    "WeekPlanContext",
    "WeekPlanResult",
    "WeekPlanStatus",
    "WeekProgressUpdate",
    "WeekPlanStore",
    "InMemoryWeekPlanStore",
    "WeekPlanConfig",
    "WeekPlanGenerator",
    "WeekTracker",
    "WeekCompletionResult",
    "WeeklySummary",
]
