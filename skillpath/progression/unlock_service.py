"""
Unlock Service - prerequisite gating for skills.

Responsibilities:
- Check whether every prerequisite of a skill is mastered
- Flip locked skills to available once their prerequisites clear
- Report quest milestone availability
- Explain why locked skills are still locked

A prerequisite that cannot be found is unmet, never an error.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from skillpath.core.clock import Clock, utc_now
from skillpath.graph.models import Skill, SkillStatus
from skillpath.graph.skill_graph import SkillGraph
from skillpath.progression.store import SkillStore

DEFAULT_MILESTONE_MASTERY_PERCENT = 0.75


@dataclass
class PrerequisiteCheck:
    """Result of checking a skill's prerequisites."""

    all_met: bool
    met_ids: list[str] = field(default_factory=list)
    missing_ids: list[str] = field(default_factory=list)
    missing_from_quests: list[str] = field(default_factory=list)
    reasons: list[str] = field(default_factory=list)
    missing_labels: list[str] = field(default_factory=list)  # title when known, else id


@dataclass
class UnlockResult:
    """Result of one unlock pass."""

    trigger_skill_id: str
    unlocked_skills: list[Skill] = field(default_factory=list)
    still_locked_ids: list[str] = field(default_factory=list)
    milestone_unlocked: bool = False

    @property
    def unlocked_ids(self) -> list[str]:
        return [s.id for s in self.unlocked_skills]

    @property
    def unlocked_count(self) -> int:
        return len(self.unlocked_skills)


@dataclass
class MilestoneProgress:
    """Quest milestone availability with the numbers behind it."""

    quest_id: str
    available: bool
    mastery_percent: float
    mastered_count: int
    counted_skills: int
    required_count: int
    reason: str | None = None


class UnlockService:
    """
    Manage skill unlocks based on prerequisite mastery.

    Status changes are written onto the snapshot's Skill records and
    persisted through the store, so repeated calls over the same snapshot
    never unlock a skill twice.
    """

    def __init__(self, skill_store: SkillStore, clock: Clock = utc_now):
        self._store = skill_store
        self._clock = clock

    async def check_prerequisites(
        self,
        skill: Skill,
        available_skills: Sequence[Skill] | SkillGraph,
    ) -> PrerequisiteCheck:
        """
        Check if all prerequisites are met for a skill.

        Prerequisites missing from ``available_skills`` (typically skills of
        an earlier quest) are looked up in the store.

        Args:
            skill: Skill whose prerequisites to evaluate
            available_skills: Snapshot used before falling back to the store

        Returns:
            PrerequisiteCheck; ``all_met`` is True for an empty prerequisite list
        """
        graph = available_skills if isinstance(available_skills, SkillGraph) else SkillGraph(available_skills)
        check = PrerequisiteCheck(all_met=True)

        for prereq_id in skill.prerequisite_skill_ids:
            prereq = graph.get(prereq_id)
            if prereq is None:
                prereq = await self._store.get(prereq_id)

            if prereq is None:
                check.missing_ids.append(prereq_id)
                check.missing_labels.append(prereq_id)
                check.reasons.append(f"Prerequisite {prereq_id} not found")
            elif prereq.is_mastered:
                check.met_ids.append(prereq_id)
            else:
                check.missing_ids.append(prereq_id)
                check.missing_labels.append(prereq.title)
                check.reasons.append(f'"{prereq.title}" not yet mastered ({prereq.mastery.value})')
                if prereq.quest_id not in check.missing_from_quests:
                    check.missing_from_quests.append(prereq.quest_id)

        check.all_met = not check.missing_ids
        return check

    async def unlock_eligible_skills(
        self,
        trigger_skill_id: str,
        candidate_skills: Sequence[Skill],
    ) -> UnlockResult:
        """
        Unlock every locked candidate whose prerequisites are now all met.

        Only one level is resolved per call: a skill unlocked here is not
        mastered yet, so its own dependents wait for the next mastery event.

        Args:
            trigger_skill_id: Skill whose mastery prompted the check
            candidate_skills: Snapshot to scan (also used for prerequisite lookups)

        Returns:
            UnlockResult with unlocked skills and the ids still locked
        """
        graph = SkillGraph(candidate_skills)
        result = UnlockResult(trigger_skill_id=trigger_skill_id)

        for skill in graph.skills:
            if skill.status is not SkillStatus.LOCKED:
                continue

            check = await self.check_prerequisites(skill, graph)
            if not check.all_met:
                result.still_locked_ids.append(skill.id)
                continue

            now = self._clock()
            skill.status = SkillStatus.AVAILABLE
            skill.unlocked_at = now
            skill.updated_at = now
            await self._store.update(skill)

            result.unlocked_skills.append(skill)
            if skill.is_synthesis:
                result.milestone_unlocked = True
            logger.info(f'Unlocked skill "{skill.title}" (triggered by {trigger_skill_id})')

        if result.unlocked_skills:
            logger.debug(
                f"Unlock pass for {trigger_skill_id}: {result.unlocked_count} unlocked, "
                f"{len(result.still_locked_ids)} still locked"
            )
        return result

    def milestone_progress(
        self,
        quest_id: str,
        skills: Sequence[Skill],
        required_mastery_percent: float = DEFAULT_MILESTONE_MASTERY_PERCENT,
    ) -> MilestoneProgress:
        """
        Compute milestone availability for a quest.

        Synthesis skills are excluded from the denominator: they are the
        milestone, not building blocks toward it.
        """
        counted = [s for s in skills if s.quest_id == quest_id and not s.is_synthesis]
        mastered = sum(1 for s in counted if s.is_mastered)
        required = math.ceil(len(counted) * required_mastery_percent)

        if not counted:
            return MilestoneProgress(
                quest_id=quest_id,
                available=False,
                mastery_percent=0.0,
                mastered_count=0,
                counted_skills=0,
                required_count=0,
                reason="No skills found for quest",
            )

        percent = mastered / len(counted)
        if percent >= required_mastery_percent:
            return MilestoneProgress(
                quest_id=quest_id,
                available=True,
                mastery_percent=percent,
                mastered_count=mastered,
                counted_skills=len(counted),
                required_count=required,
            )

        remaining = required - mastered
        return MilestoneProgress(
            quest_id=quest_id,
            available=False,
            mastery_percent=percent,
            mastered_count=mastered,
            counted_skills=len(counted),
            required_count=required,
            reason=(
                f"Need {remaining} more skill{'' if remaining == 1 else 's'} mastered "
                f"({round(percent * 100)}% / {round(required_mastery_percent * 100)}% required)"
            ),
        )

    def check_milestone_availability(
        self,
        quest_id: str,
        skills: Sequence[Skill],
        required_mastery_percent: float = DEFAULT_MILESTONE_MASTERY_PERCENT,
    ) -> bool:
        """True iff the quest's non-synthesis mastery percent meets the threshold."""
        return self.milestone_progress(quest_id, skills, required_mastery_percent).available

    async def get_locked_skills_with_reasons(
        self,
        scope_id: str,
        skills: Sequence[Skill],
    ) -> dict[str, list[str]]:
        """
        Map each locked skill in a quest or goal to its missing prerequisites.

        Diagnostic only; nothing is written.

        Returns:
            skill id -> missing prerequisite titles (ids when the record is absent)
        """
        graph = SkillGraph(skills)
        reasons: dict[str, list[str]] = {}

        for skill in graph.in_scope(scope_id):
            if skill.status is not SkillStatus.LOCKED:
                continue
            check = await self.check_prerequisites(skill, graph)
            reasons[skill.id] = check.missing_labels

        return reasons
