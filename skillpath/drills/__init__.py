"""Daily drills: warmup/main/stretch composition and retry adaptation."""

from skillpath.drills.daily_drill_engine import (
    RETRY_TIME_MULTIPLIERS,
    DailyDrillEngine,
    DrillEngineConfig,
)
from skillpath.drills.models import (
    DailyDrill,
    DrillContext,
    DrillGenerationResult,
    DrillSection,
    DrillSectionType,
    DrillStatus,
)

__all__ = [
    "DailyDrillEngine",
    "DrillEngineConfig",
    "RETRY_TIME_MULTIPLIERS",
    "DailyDrill",
    "DrillContext",
    "DrillGenerationResult",
    "DrillSection",
    "DrillSectionType",
    "DrillStatus",
]
