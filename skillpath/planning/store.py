"""Week plan store contract and in-memory implementation."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from skillpath.core.clock import Clock, utc_now
from skillpath.core.errors import WeekPlanNotFoundError
from skillpath.planning.models import WeekPlan, WeekPlanStatus


class WeekPlanStore(Protocol):
    """Async week plan persistence consumed by the week tracker."""

    async def get(self, week_plan_id: str) -> WeekPlan | None: ...

    async def get_by_goal(self, goal_id: str) -> list[WeekPlan]: ...

    async def get_active_by_goal(self, goal_id: str) -> WeekPlan | None: ...

    async def get_by_week_number(self, goal_id: str, week_number: int) -> WeekPlan | None: ...

    async def get_by_quest(self, quest_id: str) -> list[WeekPlan]: ...

    async def save(self, week_plan: WeekPlan) -> WeekPlan: ...

    async def update(self, week_plan: WeekPlan) -> WeekPlan: ...

    async def update_status(self, week_plan_id: str, status: WeekPlanStatus) -> WeekPlan: ...

    async def update_progress(
        self,
        week_plan_id: str,
        drills_completed: int,
        drills_passed: int,
        drills_failed: int,
        drills_skipped: int,
        skills_mastered: int,
    ) -> WeekPlan: ...

    async def delete(self, week_plan_id: str) -> None: ...


class InMemoryWeekPlanStore:
    """Dict-backed WeekPlanStore; week plans are returned in week order."""

    def __init__(self, week_plans: Iterable[WeekPlan] = (), clock: Clock = utc_now):
        self._plans: dict[str, WeekPlan] = {p.id: p for p in week_plans}
        self._clock = clock

    async def get(self, week_plan_id: str) -> WeekPlan | None:
        return self._plans.get(week_plan_id)

    async def get_by_goal(self, goal_id: str) -> list[WeekPlan]:
        plans = [p for p in self._plans.values() if p.goal_id == goal_id]
        return sorted(plans, key=lambda p: p.week_number)

    async def get_active_by_goal(self, goal_id: str) -> WeekPlan | None:
        return next(
            (p for p in await self.get_by_goal(goal_id) if p.status is WeekPlanStatus.ACTIVE),
            None,
        )

    async def get_by_week_number(self, goal_id: str, week_number: int) -> WeekPlan | None:
        return next(
            (p for p in await self.get_by_goal(goal_id) if p.week_number == week_number),
            None,
        )

    async def get_by_quest(self, quest_id: str) -> list[WeekPlan]:
        plans = [p for p in self._plans.values() if p.quest_id == quest_id]
        return sorted(plans, key=lambda p: p.week_in_quest)

    async def save(self, week_plan: WeekPlan) -> WeekPlan:
        self._plans[week_plan.id] = week_plan
        return week_plan

    async def update(self, week_plan: WeekPlan) -> WeekPlan:
        self._require(week_plan.id)
        self._plans[week_plan.id] = week_plan
        return week_plan

    async def update_status(self, week_plan_id: str, status: WeekPlanStatus) -> WeekPlan:
        plan = self._require(week_plan_id)
        plan.status = WeekPlanStatus(status)
        plan.updated_at = self._clock()
        return plan

    async def update_progress(
        self,
        week_plan_id: str,
        drills_completed: int,
        drills_passed: int,
        drills_failed: int,
        drills_skipped: int,
        skills_mastered: int,
    ) -> WeekPlan:
        plan = self._require(week_plan_id)
        plan.drills_completed = drills_completed
        plan.drills_passed = drills_passed
        plan.drills_failed = drills_failed
        plan.drills_skipped = drills_skipped
        plan.skills_mastered = skills_mastered
        plan.updated_at = self._clock()
        return plan

    async def delete(self, week_plan_id: str) -> None:
        self._plans.pop(week_plan_id, None)

    def all(self) -> list[WeekPlan]:
        return sorted(self._plans.values(), key=lambda p: p.week_number)

    def _require(self, week_plan_id: str) -> WeekPlan:
        plan = self._plans.get(week_plan_id)
        if plan is None:
            raise WeekPlanNotFoundError(week_plan_id)
        return plan
