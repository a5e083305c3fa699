"""
Skill store contract and in-memory implementation.

The engine treats persistence as an async key-value collaborator. Any
backend (Redis, SQL, document store) can satisfy ``SkillStore``; the
in-memory store is used for tests and standalone runs.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from skillpath.core.clock import Clock, utc_now
from skillpath.core.errors import SkillNotFoundError
from skillpath.graph.models import Skill, SkillMastery, SkillStatus, SkillType


class SkillStore(Protocol):
    """Async skill lookup and persistence consumed by the services."""

    async def get(self, skill_id: str) -> Skill | None: ...

    async def get_by_quest(self, quest_id: str) -> list[Skill]: ...

    async def get_by_goal(self, goal_id: str) -> list[Skill]: ...

    async def get_by_status(self, quest_id: str, status: SkillStatus) -> list[Skill]: ...

    async def get_by_type(self, quest_id: str, skill_type: SkillType) -> list[Skill]: ...

    async def save(self, skill: Skill) -> Skill: ...

    async def save_batch(self, skills: Iterable[Skill]) -> list[Skill]: ...

    async def update(self, skill: Skill) -> Skill: ...

    async def update_mastery(
        self,
        skill_id: str,
        mastery: SkillMastery,
        pass_count: int,
        fail_count: int,
        consecutive_passes: int,
    ) -> Skill: ...

    async def update_status(self, skill_id: str, status: SkillStatus) -> Skill: ...

    async def delete(self, skill_id: str) -> None: ...


class InMemorySkillStore:
    """
    Dict-backed SkillStore.

    Stores the caller's Skill objects as-is, so a snapshot obtained from
    the store shares records with it.
    """

    def __init__(self, skills: Iterable[Skill] = (), clock: Clock = utc_now):
        self._skills: dict[str, Skill] = {s.id: s for s in skills}
        self._clock = clock

    async def get(self, skill_id: str) -> Skill | None:
        return self._skills.get(skill_id)

    async def get_by_quest(self, quest_id: str) -> list[Skill]:
        return [s for s in self._skills.values() if s.quest_id == quest_id]

    async def get_by_goal(self, goal_id: str) -> list[Skill]:
        return [s for s in self._skills.values() if s.goal_id == goal_id]

    async def get_by_status(self, quest_id: str, status: SkillStatus) -> list[Skill]:
        return [
            s for s in self._skills.values()
            if s.quest_id == quest_id and s.status == status
        ]

    async def get_by_type(self, quest_id: str, skill_type: SkillType) -> list[Skill]:
        return [
            s for s in self._skills.values()
            if s.quest_id == quest_id and s.skill_type == skill_type
        ]

    async def save(self, skill: Skill) -> Skill:
        self._skills[skill.id] = skill
        return skill

    async def save_batch(self, skills: Iterable[Skill]) -> list[Skill]:
        saved = list(skills)
        for skill in saved:
            self._skills[skill.id] = skill
        return saved

    async def update(self, skill: Skill) -> Skill:
        if skill.id not in self._skills:
            raise SkillNotFoundError(skill.id)
        self._skills[skill.id] = skill
        return skill

    async def update_mastery(
        self,
        skill_id: str,
        mastery: SkillMastery,
        pass_count: int,
        fail_count: int,
        consecutive_passes: int,
    ) -> Skill:
        skill = self._require(skill_id)
        skill.mastery = SkillMastery(mastery)
        skill.pass_count = pass_count
        skill.fail_count = fail_count
        skill.consecutive_passes = consecutive_passes
        skill.updated_at = self._clock()
        return skill

    async def update_status(self, skill_id: str, status: SkillStatus) -> Skill:
        skill = self._require(skill_id)
        skill.status = SkillStatus(status)
        skill.updated_at = self._clock()
        return skill

    async def delete(self, skill_id: str) -> None:
        self._skills.pop(skill_id, None)

    def all(self) -> list[Skill]:
        """Every stored skill (test helper)."""
        return list(self._skills.values())

    def clear(self) -> None:
        self._skills.clear()

    def _require(self, skill_id: str) -> Skill:
        skill = self._skills.get(skill_id)
        if skill is None:
            raise SkillNotFoundError(skill_id)
        return skill
