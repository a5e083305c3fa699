"""
Week Tracker - week plan lifecycle and progress counters.

Lifecycle:
    pending --activate_week--> active --complete_week--> completed

Progress counters on a WeekPlan are incremented from drill outcomes,
never recomputed from drill history, so callers must serialize updates
to a single week plan.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from skillpath.core.clock import Clock, utc_now
from skillpath.core.errors import InvalidStateError, WeekPlanNotFoundError
from skillpath.graph.models import DrillOutcome, Skill, SkillMastery
from skillpath.planning import calendar
from skillpath.planning.models import (
    GoalRef,
    QuestRef,
    WeekPlan,
    WeekPlanContext,
    WeekPlanResult,
    WeekPlanStatus,
    WeekProgressUpdate,
)
from skillpath.planning.store import WeekPlanStore
from skillpath.planning.week_plan_generator import WeekPlanGenerator
from skillpath.progression.store import SkillStore


@dataclass
class WeeklySummary:
    """End-of-week recap shown to the learner."""

    week_number: int
    theme: str
    skills_mastered: list[str] = field(default_factory=list)  # titles
    skills_in_progress: list[str] = field(default_factory=list)  # titles
    days_practiced: int = 0
    days_total: int = 0
    pass_rate: float = 0.0


@dataclass
class WeekCompletionResult:
    """Outcome of closing a week."""

    completed_week: WeekPlan
    carry_forward_skills: list[Skill]
    next_week_focus: str
    summary: WeeklySummary
    milestone_completed: bool = False

    @property
    def carry_forward_ids(self) -> list[str]:
        return [s.id for s in self.carry_forward_skills]


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


class WeekTracker:
    """Activate, update and complete week plans for a goal."""

    def __init__(
        self,
        week_plan_store: WeekPlanStore,
        skill_store: SkillStore,
        generator: WeekPlanGenerator | None = None,
        clock: Clock = utc_now,
    ):
        self._plans = week_plan_store
        self._skills = skill_store
        self._generator = generator or WeekPlanGenerator(clock=clock)
        self._clock = clock

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_current_week(self, goal_id: str) -> WeekPlan | None:
        """The goal's active week, if any."""
        return await self._plans.get_active_by_goal(goal_id)

    async def get_week_by_number(self, goal_id: str, week_number: int) -> WeekPlan | None:
        return await self._plans.get_by_week_number(goal_id, week_number)

    async def get_all_weeks(self, goal_id: str) -> list[WeekPlan]:
        return await self._plans.get_by_goal(goal_id)

    async def get_weekly_summary(self, week_plan_id: str) -> WeeklySummary:
        week_plan = await self._require(week_plan_id)
        return self._summarize(week_plan, await self._week_skills(week_plan))

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def activate_week(self, week_plan_id: str) -> WeekPlan:
        """
        Move a pending week to active.

        Raises:
            WeekPlanNotFoundError: Unknown week plan id
            InvalidStateError: The week is completed, or another week of the
                goal is already active
        """
        week_plan = await self._require(week_plan_id)

        if week_plan.status is WeekPlanStatus.ACTIVE:
            return week_plan
        if week_plan.status is WeekPlanStatus.COMPLETED:
            raise InvalidStateError("Cannot activate a completed week plan")

        current = await self._plans.get_active_by_goal(week_plan.goal_id)
        if current is not None and current.id != week_plan.id:
            raise InvalidStateError(
                f"Week {current.week_number} is still active for goal {week_plan.goal_id}"
            )

        activated = await self._plans.update_status(week_plan_id, WeekPlanStatus.ACTIVE)
        logger.info(f"Activated week {activated.week_number} ({activated.id})")
        return activated

    async def complete_week(self, week_plan_id: str) -> WeekCompletionResult:
        """
        Close a week and work out what carries forward.

        Every scheduled skill that is not mastered carries forward, including
        skills that were never attempted.
        """
        week_plan = await self._require(week_plan_id)
        if week_plan.status is WeekPlanStatus.COMPLETED:
            raise InvalidStateError(f"Week {week_plan.week_number} is already completed")

        skills = await self._week_skills(week_plan)
        carry_forward = [s for s in skills if not s.is_mastered]
        summary = self._summarize(week_plan, skills)

        week_plan.completed_skill_ids = [s.id for s in skills if s.is_mastered]
        week_plan.updated_at = self._clock()
        await self._plans.update(week_plan)
        completed = await self._plans.update_status(week_plan_id, WeekPlanStatus.COMPLETED)

        milestone_completed = completed.is_last_week_of_quest and any(
            s.is_synthesis and s.is_mastered for s in skills
        )

        logger.info(
            f"Completed week {completed.week_number}: {len(completed.completed_skill_ids)} mastered, "
            f"{len(carry_forward)} carried forward, pass rate {completed.pass_rate:.0%}"
        )
        return WeekCompletionResult(
            completed_week=completed,
            carry_forward_skills=carry_forward,
            next_week_focus=self._next_week_focus(carry_forward),
            summary=summary,
            milestone_completed=milestone_completed,
        )

    async def create_next_week(
        self,
        completed_week: WeekPlan,
        goal: GoalRef,
        quest: QuestRef,
        week_skills: list[Skill],
        previous_quest_skills: list[Skill] | None = None,
    ) -> WeekPlanResult:
        """
        Generate and save the week after ``completed_week``.

        Unmastered skills from the completed week are scheduled first. A new
        quest restarts ``week_in_quest`` at 1.
        """
        carry_forward = [
            s for s in await self._week_skills(completed_week)
            if not s.is_mastered and s.quest_id == quest.id
        ]
        same_quest = completed_week.quest_id == quest.id

        result = self._generator.generate(
            WeekPlanContext(
                goal=goal,
                quest=quest,
                week_number=completed_week.week_number + 1,
                week_in_quest=completed_week.week_in_quest + 1 if same_quest else 1,
                start_date=calendar.next_week_start(completed_week.end_date),
                week_skills=week_skills,
                previous_quest_skills=list(previous_quest_skills or []),
                carry_forward_skills=carry_forward,
            )
        )
        await self._plans.save(result.week_plan)
        await self._skills.save_batch(s for s in [*carry_forward, *week_skills])
        return result

    # =========================================================================
    # Progress
    # =========================================================================

    async def update_progress(self, week_plan_id: str, update: WeekProgressUpdate) -> WeekPlan:
        """Add counter deltas to a week plan."""
        week_plan = await self._require(week_plan_id)
        return await self._plans.update_progress(
            week_plan_id,
            drills_completed=week_plan.drills_completed + update.drills_completed,
            drills_passed=week_plan.drills_passed + update.drills_passed,
            drills_failed=week_plan.drills_failed + update.drills_failed,
            drills_skipped=week_plan.drills_skipped + update.drills_skipped,
            skills_mastered=week_plan.skills_mastered + update.skills_mastered,
        )

    async def record_drill_outcome(
        self,
        week_plan_id: str,
        outcome: DrillOutcome | str,
        skill_mastered: bool = False,
    ) -> WeekPlan:
        """
        Apply a single drill outcome to the week counters.

        Partial outcomes count as completed drills but neither pass nor fail.
        """
        outcome = DrillOutcome(outcome)
        update = WeekProgressUpdate(
            drills_completed=1 if outcome.counts_as_attempt else 0,
            drills_passed=1 if outcome is DrillOutcome.PASS else 0,
            drills_failed=1 if outcome is DrillOutcome.FAIL else 0,
            drills_skipped=1 if outcome is DrillOutcome.SKIPPED else 0,
            skills_mastered=1 if skill_mastered else 0,
        )
        week_plan = await self.update_progress(week_plan_id, update)
        logger.debug(
            f"Week {week_plan.week_number}: {outcome.value} recorded "
            f"({week_plan.drills_completed}/{week_plan.drills_total} drills)"
        )
        return week_plan

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _require(self, week_plan_id: str) -> WeekPlan:
        week_plan = await self._plans.get(week_plan_id)
        if week_plan is None:
            raise WeekPlanNotFoundError(week_plan_id)
        return week_plan

    async def _week_skills(self, week_plan: WeekPlan) -> list[Skill]:
        """Carry-forward and scheduled skills; ids without a record are skipped."""
        skills = []
        for skill_id in week_plan.all_skill_ids:
            skill = await self._skills.get(skill_id)
            if skill is not None:
                skills.append(skill)
        return skills

    @staticmethod
    def _summarize(week_plan: WeekPlan, skills: list[Skill]) -> WeeklySummary:
        return WeeklySummary(
            week_number=week_plan.week_number,
            theme=week_plan.theme or f"Week {week_plan.week_number}",
            skills_mastered=[s.title for s in skills if s.mastery is SkillMastery.MASTERED],
            skills_in_progress=[s.title for s in skills if s.mastery is SkillMastery.PRACTICING],
            days_practiced=week_plan.drills_completed,
            days_total=week_plan.drills_total,
            pass_rate=week_plan.pass_rate,
        )

    @staticmethod
    def _next_week_focus(carry_forward: list[Skill]) -> str:
        if not carry_forward:
            return "Ready to advance! No skills need review."
        if len(carry_forward) == 1:
            return f'Focus: Master "{_truncate(carry_forward[0].action, 50)}" before moving on.'

        names = ", ".join(_truncate(s.action, 30) for s in carry_forward[:3])
        return f"Focus: Complete {len(carry_forward)} skills from this week: {names}..."
