"""
Skill graph index and dependency ordering.

Determines skill ordering based on:
- Skill type weight (foundation -> building -> compound -> synthesis)
- Order within the same type
- Prerequisite edges inside the indexed set (depth-first, prerequisites first)

Prerequisites are acyclic by convention only. The traversal tracks the
skills currently on the DFS stack; a back edge either raises
SkillCycleError (strict) or is skipped with a warning.
"""
from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from skillpath.core.errors import SkillCycleError
from skillpath.graph.models import Skill


class SkillGraph:
    """
    Id-indexed view over a snapshot of skills.

    The graph never copies skills; lookups return the snapshot's own
    records so that status/mastery writes are visible to the caller.
    """

    def __init__(self, skills: Iterable[Skill]):
        self._skills: list[Skill] = list(skills)
        self._by_id: dict[str, Skill] = {s.id: s for s in self._skills}

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self._by_id

    def get(self, skill_id: str) -> Skill | None:
        return self._by_id.get(skill_id)

    @property
    def skills(self) -> list[Skill]:
        return list(self._skills)

    def in_quest(self, quest_id: str) -> list[Skill]:
        return [s for s in self._skills if s.quest_id == quest_id]

    def in_scope(self, scope_id: str) -> list[Skill]:
        """Skills belonging to a quest or a goal with this id."""
        return [s for s in self._skills if scope_id in (s.quest_id, s.goal_id)]

    def prerequisites_of(self, skill_id: str) -> list[Skill]:
        """Prerequisites present in this graph (absent ids are skipped)."""
        skill = self._by_id.get(skill_id)
        if skill is None:
            return []
        return [self._by_id[p] for p in skill.prerequisite_skill_ids if p in self._by_id]

    def dependents_of(self, skill_id: str) -> list[Skill]:
        """Skills that list ``skill_id`` as a direct prerequisite."""
        return [s for s in self._skills if skill_id in s.prerequisite_skill_ids]

    def dependency_order(self, *, strict: bool = False) -> list[Skill]:
        """
        Order skills so every in-graph prerequisite precedes its dependent.

        Candidates are visited in (type weight, order) sequence; each one
        emits its unvisited prerequisites first. A skill is emitted at most
        once even when reachable along several paths.

        Args:
            strict: Raise SkillCycleError on a cycle instead of breaking it

        Returns:
            Skills in schedulable order
        """
        ranked = sorted(self._by_id.values(), key=lambda s: (s.skill_type.weight, s.order))
        visited: set[str] = set()
        result: list[Skill] = []

        for root in ranked:
            if root.id in visited:
                continue

            # Explicit DFS stack: (skill, iterator over its remaining prerequisite ids)
            stack = [(root, iter(root.prerequisite_skill_ids))]
            path = [root.id]
            while stack:
                skill, prereq_ids = stack[-1]
                for prereq_id in prereq_ids:
                    prereq = self._by_id.get(prereq_id)
                    if prereq is None or prereq.id in visited:
                        continue
                    if prereq.id in path:
                        cycle = path[path.index(prereq.id):] + [prereq.id]
                        if strict:
                            raise SkillCycleError(cycle)
                        logger.warning(f"Breaking prerequisite cycle: {' -> '.join(cycle)}")
                        continue
                    stack.append((prereq, iter(prereq.prerequisite_skill_ids)))
                    path.append(prereq.id)
                    break
                else:
                    stack.pop()
                    path.pop()
                    visited.add(skill.id)
                    result.append(skill)

        return result

    def validate_acyclic(self) -> None:
        """Raise SkillCycleError if any prerequisite cycle exists."""
        self.dependency_order(strict=True)
