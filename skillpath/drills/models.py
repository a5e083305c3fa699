"""
Daily drill data models.

A DailyDrill is one day's practice for one skill:

    WARMUP  (optional) - quick review of a previous-quest skill
    MAIN    (required) - today's skill
    STRETCH (optional) - harder variation, never offered on retries
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from skillpath.graph.models import DrillOutcome, Skill, SkillType
from skillpath.planning.models import DayPlan


class DrillSectionType(str, Enum):
    WARMUP = "warmup"
    MAIN = "main"
    STRETCH = "stretch"


class DrillStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    MISSED = "missed"


@dataclass
class DrillSection:
    """One timed section of a drill."""

    type: DrillSectionType
    title: str
    action: str
    pass_signal: str
    constraint: str
    estimated_minutes: int
    is_optional: bool = False
    source_skill_id: str | None = None
    source_quest_id: str | None = None
    is_from_previous_quest: bool = False

    # Resilience layer (main section only)
    adversarial_element: str | None = None
    failure_mode: str | None = None
    recovery_steps: str | None = None


@dataclass
class DailyDrill:
    """Generated practice for one scheduled skill on one day."""

    id: str
    skill_id: str
    quest_id: str
    goal_id: str
    user_id: str
    main: DrillSection
    warmup: DrillSection | None = None
    stretch: DrillSection | None = None

    skill_type: SkillType = SkillType.FOUNDATION
    is_compound_drill: bool = False
    component_skill_ids: list[str] = field(default_factory=list)
    builds_on_quest_ids: list[str] = field(default_factory=list)
    review_skill_id: str | None = None
    review_quest_id: str | None = None

    day_number: int | None = None
    week_number: int | None = None
    scheduled_date: date | None = None
    status: DrillStatus = DrillStatus.SCHEDULED
    outcome: DrillOutcome | None = None

    # Retry bookkeeping. ``source_*`` hold the unadapted main section so
    # repeated retries scale from the original, not from the last retry.
    attempt_number: int = 1
    previous_failure_reason: str | None = None
    recovery_guidance: str | None = None
    supersedes_drill_id: str | None = None
    source_title: str = ""
    source_action: str = ""
    source_main_minutes: int = 0

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def sections(self) -> list[DrillSection]:
        return [s for s in (self.warmup, self.main, self.stretch) if s is not None]

    @property
    def total_minutes(self) -> int:
        return sum(s.estimated_minutes for s in self.sections)

    @property
    def retry_count(self) -> int:
        return self.attempt_number - 1

    @property
    def is_retry(self) -> bool:
        return self.attempt_number > 1


@dataclass
class DrillContext:
    """
    Inputs for generating one drill.

    The warmup review skill is looked up by ``day_plan.review_skill_id``
    among ``previous_quest_skills``.
    """

    skill: Skill
    day_plan: DayPlan | None = None
    previous_quest_skills: list[Skill] = field(default_factory=list)
    component_skills: list[Skill] = field(default_factory=list)
    daily_minutes: int | None = None  # None = configured default
    attempt_number: int = 1
    previous_failure_reason: str | None = None


@dataclass
class DrillGenerationResult:
    """A generated drill plus non-fatal budget warnings."""

    drill: DailyDrill
    warnings: list[str] = field(default_factory=list)

    @property
    def sections(self) -> list[DrillSection]:
        return self.drill.sections

    @property
    def total_minutes(self) -> int:
        return self.drill.total_minutes

    @property
    def has_warmup(self) -> bool:
        return self.drill.warmup is not None

    @property
    def has_stretch(self) -> bool:
        return self.drill.stretch is not None

    @property
    def builds_on_quest_ids(self) -> list[str]:
        return self.drill.builds_on_quest_ids
