"""Data models for week planning."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from skillpath.graph.models import Skill, SkillType

CATCH_UP_TITLE = "Catch-up / Review"


class WeekPlanStatus(str, Enum):
    """Week lifecycle: pending -> active -> completed."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class DayStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class GoalRef:
    """Opaque goal record supplied by the upstream planner."""

    id: str
    user_id: str
    title: str = ""


@dataclass(frozen=True)
class QuestRef:
    """Opaque quest record; ``practice_days`` is the quest duration."""

    id: str
    goal_id: str
    title: str
    practice_days: int


@dataclass
class DayPlan:
    """One practice day. ``skill_id`` is None on catch-up days."""

    day_number: int  # 1..days_per_week
    day_in_quest: int
    scheduled_date: date
    skill_id: str | None = None
    skill_type: SkillType | None = None
    skill_title: str = CATCH_UP_TITLE
    review_skill_id: str | None = None
    review_quest_id: str | None = None
    status: DayStatus = DayStatus.PENDING
    drill_id: str | None = None

    @property
    def is_catch_up(self) -> bool:
        return self.skill_id is None


@dataclass
class WeekPlan:
    """One week of scheduled practice within one quest."""

    id: str
    goal_id: str
    user_id: str
    quest_id: str
    week_number: int  # Global, within the goal
    week_in_quest: int
    is_first_week_of_quest: bool
    is_last_week_of_quest: bool
    start_date: date
    end_date: date
    status: WeekPlanStatus = WeekPlanStatus.PENDING

    weekly_competence: str = ""
    theme: str = ""
    days: list[DayPlan] = field(default_factory=list)
    scheduled_skill_ids: list[str] = field(default_factory=list)
    carry_forward_skill_ids: list[str] = field(default_factory=list)
    completed_skill_ids: list[str] = field(default_factory=list)
    reviews_from_quest_ids: list[str] = field(default_factory=list)
    builds_on_skill_ids: list[str] = field(default_factory=list)

    foundation_count: int = 0
    building_count: int = 0
    compound_count: int = 0
    has_synthesis: bool = False
    # Scheduling problems found at generation time, e.g. skills without a day
    warnings: list[str] = field(default_factory=list)

    # Progress counters, incremented by the week tracker only
    drills_total: int = 0
    drills_completed: int = 0
    drills_passed: int = 0
    drills_failed: int = 0
    drills_skipped: int = 0
    skills_mastered: int = 0

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def pass_rate(self) -> float:
        attempted = self.drills_passed + self.drills_failed
        return self.drills_passed / attempted if attempted else 0.0

    @property
    def all_skill_ids(self) -> list[str]:
        """Carry-forward ids followed by the regular scheduled ids, deduplicated."""
        seen: list[str] = []
        for skill_id in [*self.carry_forward_skill_ids, *self.scheduled_skill_ids]:
            if skill_id not in seen:
                seen.append(skill_id)
        return seen

    def day_for_skill(self, skill_id: str) -> DayPlan | None:
        return next((d for d in self.days if d.skill_id == skill_id), None)


@dataclass
class WeekPlanContext:
    """Inputs for generating one week."""

    goal: GoalRef
    quest: QuestRef
    week_number: int
    week_in_quest: int
    start_date: date
    week_skills: list[Skill] = field(default_factory=list)
    previous_quest_skills: list[Skill] = field(default_factory=list)
    carry_forward_skills: list[Skill] = field(default_factory=list)


@dataclass
class WeekPlanResult:
    """Generated week plan plus the review skills chosen for warmups."""

    week_plan: WeekPlan
    review_skills: list[Skill] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def day_plans(self) -> list[DayPlan]:
        return self.week_plan.days


@dataclass
class WeekProgressUpdate:
    """Counter deltas reported by the daily completion flow."""

    drills_completed: int = 0
    drills_passed: int = 0
    drills_failed: int = 0
    drills_skipped: int = 0
    skills_mastered: int = 0
