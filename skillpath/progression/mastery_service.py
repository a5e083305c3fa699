"""
Mastery Service - the per-skill mastery state machine.

Flow:
    Drill resolved -> MasteryService.record_outcome()
                   -> counters updated, mastery re-evaluated
                   -> on promotion to mastered: UnlockService.unlock_eligible_skills()

Promotion rule (defaults):
- not_started -> practicing at 1 total pass
- practicing -> mastered at 3 total passes AND 2 consecutive passes

Mastery never regresses; a fail only resets the consecutive streak.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from loguru import logger

from skillpath.core.clock import Clock, utc_now
from skillpath.core.errors import SkillNotFoundError
from skillpath.graph.models import (
    DEFAULT_THRESHOLDS,
    DrillOutcome,
    MasteryThresholds,
    Skill,
    SkillMastery,
    SkillStatus,
)
from skillpath.progression.store import SkillStore
from skillpath.progression.unlock_service import (
    DEFAULT_MILESTONE_MASTERY_PERCENT,
    UnlockService,
)


@dataclass
class OutcomeResult:
    """Result of recording one drill outcome."""

    skill: Skill
    previous_mastery: SkillMastery
    new_mastery: SkillMastery
    previous_status: SkillStatus
    new_status: SkillStatus
    unlocked_skills: list[Skill] = field(default_factory=list)
    milestone_available: bool = False

    @property
    def mastery_changed(self) -> bool:
        return self.previous_mastery is not self.new_mastery

    @property
    def just_mastered(self) -> bool:
        return self.mastery_changed and self.new_mastery is SkillMastery.MASTERED

    @property
    def unlocked_ids(self) -> list[str]:
        return [s.id for s in self.unlocked_skills]


@dataclass
class MasterySummary:
    """Mastery counts and ratios for a set of skills."""

    total: int
    by_mastery: dict[SkillMastery, int]
    mastered_percent: float
    in_progress_percent: float  # practicing + mastered

    @property
    def mastered(self) -> int:
        return self.by_mastery[SkillMastery.MASTERED]

    @property
    def practicing(self) -> int:
        return self.by_mastery[SkillMastery.PRACTICING]

    @property
    def not_started(self) -> int:
        return self.by_mastery[SkillMastery.NOT_STARTED]


class MasteryService:
    """
    Track skill mastery from drill outcomes.

    Each call reads the skill, applies one outcome and writes it back.
    There is no optimistic-concurrency guard: callers must serialize
    outcomes for the same skill.
    """

    def __init__(
        self,
        skill_store: SkillStore,
        unlock_service: UnlockService,
        thresholds: MasteryThresholds = DEFAULT_THRESHOLDS,
        milestone_mastery_percent: float = DEFAULT_MILESTONE_MASTERY_PERCENT,
        clock: Clock = utc_now,
    ):
        self._store = skill_store
        self._unlock = unlock_service
        self.thresholds = thresholds
        self.milestone_mastery_percent = milestone_mastery_percent
        self._clock = clock

    async def record_outcome(
        self,
        skill_id: str,
        outcome: DrillOutcome | str,
        skills: Sequence[Skill] | None = None,
    ) -> OutcomeResult:
        """
        Record a pass or fail and advance mastery.

        Args:
            skill_id: Skill the drill practiced
            outcome: DrillOutcome.PASS or DrillOutcome.FAIL
            skills: Snapshot for unlock checks; loaded from the store by goal if omitted

        Returns:
            OutcomeResult; ``unlocked_skills`` reflects the graph immediately
            after this outcome

        Raises:
            SkillNotFoundError: No skill record matches ``skill_id``
            ValueError: Outcome is neither pass nor fail
        """
        outcome = DrillOutcome(outcome)
        if outcome not in (DrillOutcome.PASS, DrillOutcome.FAIL):
            raise ValueError(f"Only pass/fail outcomes change mastery, got {outcome.value!r}")

        skill = await self._store.get(skill_id)
        if skill is None:
            raise SkillNotFoundError(skill_id)

        previous_mastery = skill.mastery
        previous_status = skill.status
        now = self._clock()

        if outcome is DrillOutcome.PASS:
            pass_count, fail_count = skill.pass_count + 1, skill.fail_count
            consecutive_passes = skill.consecutive_passes + 1
        else:
            pass_count, fail_count = skill.pass_count, skill.fail_count + 1
            consecutive_passes = 0

        evaluated = self.thresholds.evaluate(pass_count, consecutive_passes)
        new_mastery = evaluated if evaluated.rank > previous_mastery.rank else previous_mastery

        new_status = previous_status
        if new_mastery is SkillMastery.MASTERED:
            new_status = SkillStatus.MASTERED
        elif new_mastery is SkillMastery.PRACTICING and previous_status is SkillStatus.AVAILABLE:
            new_status = SkillStatus.IN_PROGRESS

        just_mastered = new_mastery is SkillMastery.MASTERED and previous_mastery is not SkillMastery.MASTERED

        # The fetched record stays untouched until the store accepts the new one
        skill = await self._store.update(
            replace(
                skill,
                pass_count=pass_count,
                fail_count=fail_count,
                consecutive_passes=consecutive_passes,
                mastery=new_mastery,
                status=new_status,
                last_outcome=outcome,
                last_practiced_at=now,
                updated_at=now,
                mastered_at=now if just_mastered else skill.mastered_at,
            )
        )

        result = OutcomeResult(
            skill=skill,
            previous_mastery=previous_mastery,
            new_mastery=new_mastery,
            previous_status=previous_status,
            new_status=skill.status,
        )
        logger.info(
            f'Skill "{skill.title}": {previous_mastery.value} -> {new_mastery.value} ({outcome.value})'
        )

        snapshot = await self._snapshot_with(skill, skills)
        if result.just_mastered:
            unlock = await self._unlock.unlock_eligible_skills(skill.id, snapshot)
            result.unlocked_skills = unlock.unlocked_skills

        result.milestone_available = self._unlock.check_milestone_availability(
            skill.quest_id, snapshot, self.milestone_mastery_percent
        )
        return result

    def get_mastery_summary(self, skills: Sequence[Skill]) -> MasterySummary:
        """Counts by mastery level plus mastered / in-progress ratios."""
        by_mastery = {level: 0 for level in SkillMastery}
        for skill in skills:
            by_mastery[skill.mastery] += 1

        total = len(skills)
        if total == 0:
            return MasterySummary(
                total=0, by_mastery=by_mastery, mastered_percent=0.0, in_progress_percent=0.0
            )

        started = by_mastery[SkillMastery.PRACTICING] + by_mastery[SkillMastery.MASTERED]
        return MasterySummary(
            total=total,
            by_mastery=by_mastery,
            mastered_percent=by_mastery[SkillMastery.MASTERED] / total,
            in_progress_percent=started / total,
        )

    def get_quest_mastery_percent(self, quest_id: str, skills: Sequence[Skill]) -> float:
        """Share of the quest's non-synthesis skills that are mastered (0 when none)."""
        counted = [s for s in skills if s.quest_id == quest_id and not s.is_synthesis]
        if not counted:
            return 0.0
        return sum(1 for s in counted if s.is_mastered) / len(counted)

    async def _snapshot_with(self, skill: Skill, skills: Sequence[Skill] | None) -> list[Skill]:
        """The caller's snapshot (or the goal's skills) with ``skill`` swapped in."""
        if skills is None:
            skills = await self._store.get_by_goal(skill.goal_id)
        snapshot = [s for s in skills if s.id != skill.id]
        snapshot.append(skill)
        return snapshot
