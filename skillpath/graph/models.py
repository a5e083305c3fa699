"""
Skill Graph Model.

A Skill is an atomic, practiceable unit of competence with a binary
pass/fail success signal. Skills reference each other by id only
(prerequisite and component edges), so the graph is an arena of
records indexed by id rather than a web of object pointers.

Design:
- SkillType: position in the quest arc, with an ordering weight
- SkillMastery: progression driven by pass/fail history
- SkillStatus: availability driven by prerequisite mastery
- MasteryThresholds: promotion rule constants
- Skill: the mutable record owned by the mastery and unlock services
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class SkillType(str, Enum):
    """Where a skill sits in a quest; ``weight`` orders scheduling."""

    FOUNDATION = "foundation"
    BUILDING = "building"
    COMPOUND = "compound"
    SYNTHESIS = "synthesis"  # Quest capstone / milestone

    @property
    def weight(self) -> int:
        return _SKILL_TYPE_WEIGHTS[self]


_SKILL_TYPE_WEIGHTS = {
    SkillType.FOUNDATION: 0,
    SkillType.BUILDING: 1,
    SkillType.COMPOUND: 2,
    SkillType.SYNTHESIS: 3,
}


class SkillMastery(str, Enum):
    """Mastery level. Only ever moves forward."""

    NOT_STARTED = "not_started"
    PRACTICING = "practicing"
    MASTERED = "mastered"

    @property
    def rank(self) -> int:
        return _MASTERY_RANKS[self]


_MASTERY_RANKS = {
    SkillMastery.NOT_STARTED: 0,
    SkillMastery.PRACTICING: 1,
    SkillMastery.MASTERED: 2,
}


class SkillStatus(str, Enum):
    """Availability of a skill for scheduling."""

    LOCKED = "locked"
    AVAILABLE = "available"
    IN_PROGRESS = "in_progress"
    MASTERED = "mastered"


class DrillOutcome(str, Enum):
    """
    Drill outcome.

    - pass: success signal met
    - fail: success signal not met (retry tomorrow)
    - partial: some progress, counts as an attempt only
    - skipped: learner chose to skip
    """

    PASS = "pass"
    FAIL = "fail"
    PARTIAL = "partial"
    SKIPPED = "skipped"

    @property
    def counts_as_attempt(self) -> bool:
        return self is not DrillOutcome.SKIPPED


@dataclass(frozen=True)
class MasteryThresholds:
    """Promotion rule: both total and consecutive passes gate mastery."""

    practicing: int = 1
    mastered: int = 3
    consecutive_for_mastery: int = 2

    def evaluate(self, pass_count: int, consecutive_passes: int) -> SkillMastery:
        """Mastery level implied by the counters alone."""
        if pass_count >= self.mastered and consecutive_passes >= self.consecutive_for_mastery:
            return SkillMastery.MASTERED
        if pass_count >= self.practicing:
            return SkillMastery.PRACTICING
        return SkillMastery.NOT_STARTED


DEFAULT_THRESHOLDS = MasteryThresholds()


@dataclass
class Skill:
    """
    Atomic competence unit - what the learner can DO.

    Created by an upstream decomposition step. ``status`` is derived from
    the prerequisite list when not supplied: skills with prerequisites
    start locked, skills without start available.
    """

    id: str
    quest_id: str
    goal_id: str
    user_id: str
    title: str
    action: str = ""
    success_signal: str = ""
    topics: list[str] = field(default_factory=list)
    locked_variables: list[str] = field(default_factory=list)
    estimated_minutes: int = 20

    # Resilience layer carried from the capability stage
    transfer_scenario: str | None = None
    adversarial_element: str | None = None
    failure_mode: str | None = None
    recovery_steps: str | None = None

    # Graph position
    skill_type: SkillType = SkillType.FOUNDATION
    depth: int = 0
    order: int = 0
    prerequisite_skill_ids: list[str] = field(default_factory=list)
    prerequisite_quest_ids: list[str] = field(default_factory=list)
    is_compound: bool = False
    component_skill_ids: list[str] = field(default_factory=list)
    component_quest_ids: list[str] = field(default_factory=list)

    # Scheduled position (written by the week plan generator)
    week_number: int | None = None
    day_in_week: int | None = None
    day_in_quest: int | None = None

    # Mastery state
    mastery: SkillMastery = SkillMastery.NOT_STARTED
    status: SkillStatus | None = None
    pass_count: int = 0
    fail_count: int = 0
    consecutive_passes: int = 0
    last_outcome: DrillOutcome | None = None
    last_practiced_at: datetime | None = None
    mastered_at: datetime | None = None
    unlocked_at: datetime | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        """Coerce enum fields and derive the initial status."""
        self.skill_type = SkillType(self.skill_type)
        self.mastery = SkillMastery(self.mastery)
        if self.status is None:
            self.status = SkillStatus.LOCKED if self.prerequisite_skill_ids else SkillStatus.AVAILABLE
        else:
            self.status = SkillStatus(self.status)

    @property
    def is_synthesis(self) -> bool:
        return self.skill_type is SkillType.SYNTHESIS

    @property
    def is_mastered(self) -> bool:
        return self.mastery is SkillMastery.MASTERED

    @property
    def is_locked(self) -> bool:
        return self.status is SkillStatus.LOCKED

    @property
    def primary_topic(self) -> str | None:
        return self.topics[0] if self.topics else None
