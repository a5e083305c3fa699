"""
Daily Drill Engine - structured practice sessions.

Generates daily drills with:
- Warmup: review of a previous-quest skill (fixed duration)
- Main: today's skill, time-boxed to the remaining daily budget
- Stretch: optional harder variation when time permits

Failed drills are adapted for retry with more time, scaffolding text
and recovery guidance, up to a configured number of attempts.

Section generation is pure; only exceeding the retry cap raises.
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace

from loguru import logger

from skillpath.config import Settings
from skillpath.core.clock import Clock, utc_now
from skillpath.core.errors import MaxRetriesExceededError
from skillpath.drills.models import (
    DailyDrill,
    DrillContext,
    DrillGenerationResult,
    DrillSection,
    DrillSectionType,
    DrillStatus,
)
from skillpath.graph.models import Skill, SkillType

RETRY_TIME_MULTIPLIERS = {
    1: 1.0,
    2: 1.25,  # 25% more time
    3: 1.5,
}
MAX_RETRY_TIME_MULTIPLIER = 1.5

STRETCH_TEMPLATES = {
    SkillType.FOUNDATION: 'Apply "{title}" to a different context without any guidance or references',
    SkillType.BUILDING: 'Combine "{title}" with a previous skill to solve a more complex problem',
    SkillType.COMPOUND: 'Teach "{title}" by explaining it as if to a complete beginner',
    SkillType.SYNTHESIS: 'Speed challenge: Complete "{action}" in half the time',
}

DEFAULT_CONSTRAINT = "Complete the task as specified"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def retry_time_multiplier(attempt_number: int) -> float:
    return RETRY_TIME_MULTIPLIERS.get(attempt_number, MAX_RETRY_TIME_MULTIPLIER)


@dataclass
class DrillEngineConfig:
    """Time budget and retry policy for drill generation."""

    daily_minutes: int = 30
    warmup_minutes: int = 5
    stretch_minutes: int = 5
    min_main_minutes: int = 10
    include_stretch: bool = True
    max_retry_attempts: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> DrillEngineConfig:
        drills = settings.drills
        return cls(
            daily_minutes=drills.daily_minutes,
            warmup_minutes=drills.warmup_minutes,
            stretch_minutes=drills.stretch_minutes,
            min_main_minutes=drills.min_main_minutes,
            include_stretch=drills.include_stretch,
            max_retry_attempts=drills.max_retry_attempts,
        )


class DailyDrillEngine:
    """
    Compose daily drills from a scheduled skill and its context.

    Usage:
        engine = DailyDrillEngine()
        result = engine.generate(DrillContext(skill=skill, day_plan=day))
        if failed:
            retry = engine.adapt_for_retry(result.drill, "Ran out of time")
    """

    def __init__(
        self,
        config: DrillEngineConfig | None = None,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] | None = None,
    ):
        self.config = config or DrillEngineConfig()
        self._clock = clock
        self._new_id = id_factory or (lambda: f"drill-{uuid.uuid4()}")

    # =========================================================================
    # Generation
    # =========================================================================

    def generate(self, context: DrillContext) -> DrillGenerationResult:
        """
        Generate a drill for the context's skill.

        Returns:
            DrillGenerationResult; ``warnings`` notes a drill that exceeds
            the day's budget (the drill is still usable)
        """
        skill = context.skill
        attempt_number = context.attempt_number
        is_retry = attempt_number > 1
        daily_minutes = self._daily_minutes(context)

        logger.info(f'Generating drill for "{skill.title}" (attempt {attempt_number})')

        review_skill = self._resolve_review_skill(context)
        warmup = self.generate_warmup(review_skill, skill) if review_skill else None
        main = self.generate_main(skill, context)

        budget = round_half_up(daily_minutes * retry_time_multiplier(attempt_number)) if is_retry else daily_minutes
        remaining = budget - (warmup.estimated_minutes if warmup else 0) - main.estimated_minutes
        stretch = None
        if not is_retry and self.config.include_stretch and remaining >= self.config.stretch_minutes:
            stretch = self.generate_stretch(skill)

        now = self._clock()
        day_plan = context.day_plan
        drill = DailyDrill(
            id=self._new_id(),
            skill_id=skill.id,
            quest_id=skill.quest_id,
            goal_id=skill.goal_id,
            user_id=skill.user_id,
            main=main,
            warmup=warmup,
            stretch=stretch,
            skill_type=skill.skill_type,
            is_compound_drill=skill.is_compound,
            component_skill_ids=list(skill.component_skill_ids) if skill.is_compound else [],
            builds_on_quest_ids=self._builds_on_quest_ids(skill, review_skill),
            review_skill_id=review_skill.id if review_skill else None,
            review_quest_id=review_skill.quest_id if review_skill else None,
            day_number=day_plan.day_number if day_plan else skill.day_in_week,
            week_number=skill.week_number,
            scheduled_date=day_plan.scheduled_date if day_plan else None,
            attempt_number=attempt_number,
            previous_failure_reason=context.previous_failure_reason if is_retry else None,
            source_title=skill.title,
            source_action=skill.action,
            source_main_minutes=main.estimated_minutes,
            created_at=now,
            updated_at=now,
        )

        warnings = []
        if drill.total_minutes > budget:
            warnings.append(f"Drill exceeds budget: {drill.total_minutes} > {budget} minutes")
            logger.warning(f'"{skill.title}": {warnings[-1]}')

        logger.debug(
            f"Drill {drill.id}: {len(drill.sections)} section(s), {drill.total_minutes} min"
        )
        return DrillGenerationResult(drill=drill, warnings=warnings)

    def generate_warmup(self, review_skill: Skill, today_skill: Skill) -> DrillSection:
        """Lightweight rephrasing of a previous skill; related skills get a tie-in to today's."""
        action = review_skill.action.lower()
        if self._skills_related(review_skill, today_skill):
            action = f'Quick review: {action}. This prepares you for today\'s "{today_skill.title}" skill.'
        else:
            action = f"Quick review: {action}. Aim for speed over perfection."

        return DrillSection(
            type=DrillSectionType.WARMUP,
            title=f"Review: {review_skill.title}",
            action=action,
            pass_signal=(
                f"Completed within {self.config.warmup_minutes} minutes: "
                f"{review_skill.success_signal.lower()}"
            ),
            constraint="Complete quickly without looking up references",
            estimated_minutes=self.config.warmup_minutes,
            source_skill_id=review_skill.id,
            source_quest_id=review_skill.quest_id,
            is_from_previous_quest=review_skill.quest_id != today_skill.quest_id,
        )

    def generate_main(self, skill: Skill, context: DrillContext) -> DrillSection:
        """
        Today's skill, sized to what is left of the budget.

        minutes = max(min_main, min(daily - warmup - stretch, estimated))
        """
        daily_minutes = self._daily_minutes(context)
        has_warmup = self._resolve_review_skill(context) is not None
        warmup_time = self.config.warmup_minutes if has_warmup else 0
        stretch_time = self.config.stretch_minutes if self.config.include_stretch else 0
        available = daily_minutes - warmup_time - stretch_time
        minutes = max(self.config.min_main_minutes, min(available, skill.estimated_minutes))

        action = skill.action
        if skill.is_compound and context.component_skills:
            action = f"{action} (Integrates: {', '.join(c.title for c in context.component_skills)})"
        if context.attempt_number > 1:
            action = self._retry_action(action, context.attempt_number, context.previous_failure_reason)

        return DrillSection(
            type=DrillSectionType.MAIN,
            title=skill.title,
            action=action,
            pass_signal=skill.success_signal,
            constraint="; ".join(skill.locked_variables) or DEFAULT_CONSTRAINT,
            estimated_minutes=minutes,
            source_skill_id=skill.id,
            source_quest_id=skill.quest_id,
            adversarial_element=skill.adversarial_element,
            failure_mode=skill.failure_mode,
            recovery_steps=skill.recovery_steps,
        )

    def generate_stretch(self, skill: Skill) -> DrillSection:
        """Transfer scenario when the skill has one, else the template for its type."""
        if skill.transfer_scenario:
            action = f"Transfer challenge: {skill.transfer_scenario}"
        else:
            action = STRETCH_TEMPLATES[skill.skill_type].format(
                title=skill.title, action=skill.action.lower()
            )

        return DrillSection(
            type=DrillSectionType.STRETCH,
            title=f"Challenge: {skill.title}",
            action=action,
            pass_signal="Successfully applied skill in new context with no errors",
            constraint=skill.transfer_scenario or "Apply in a new context without guidance",
            estimated_minutes=self.config.stretch_minutes,
            is_optional=True,
            source_skill_id=skill.id,
            source_quest_id=skill.quest_id,
        )

    # =========================================================================
    # Retry
    # =========================================================================

    def adapt_for_retry(
        self,
        previous_drill: DailyDrill,
        failure_reason: str,
        attempt_number: int | None = None,
    ) -> DailyDrill:
        """
        Build a retry drill from a failed one.

        The retry keeps only the main section. Its minutes are the original
        main minutes times the attempt's multiplier (1.0, 1.25, 1.5, then
        1.5), rounded half-up.

        Args:
            previous_drill: The drill that was failed
            failure_reason: Learner-reported reason, echoed in the action
            attempt_number: Attempt being prepared (default: previous + 1)

        Raises:
            MaxRetriesExceededError: ``attempt_number`` exceeds max_retry_attempts
        """
        if attempt_number is None:
            attempt_number = previous_drill.attempt_number + 1
        if attempt_number > self.config.max_retry_attempts:
            raise MaxRetriesExceededError(self.config.max_retry_attempts, attempt_number)

        original_minutes = previous_drill.source_main_minutes or previous_drill.main.estimated_minutes
        original_action = previous_drill.source_action or previous_drill.main.action
        original_title = previous_drill.source_title or previous_drill.main.title

        logger.info(f'Adapting drill for retry {attempt_number}: "{original_title}"')

        main = replace(
            previous_drill.main,
            title=f"{original_title} (Retry {attempt_number})",
            action=self._retry_action(original_action, attempt_number, failure_reason),
            estimated_minutes=round_half_up(original_minutes * retry_time_multiplier(attempt_number)),
        )

        now = self._clock()
        return replace(
            previous_drill,
            id=self._new_id(),
            main=main,
            warmup=None,
            stretch=None,
            status=DrillStatus.SCHEDULED,
            outcome=None,
            attempt_number=attempt_number,
            previous_failure_reason=failure_reason,
            recovery_guidance=self.recovery_guidance(failure_reason, attempt_number),
            supersedes_drill_id=previous_drill.id,
            source_title=original_title,
            source_action=original_action,
            source_main_minutes=original_minutes,
            builds_on_quest_ids=list(previous_drill.builds_on_quest_ids),
            component_skill_ids=list(previous_drill.component_skill_ids),
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def retry_scaffolding(attempt_number: int) -> str:
        if attempt_number == 2:
            return "Take more time and break into smaller steps."
        if attempt_number == 3:
            return "Review the fundamentals first, then attempt step-by-step."
        return "Focus on the core concepts and simplify where possible."

    @staticmethod
    def recovery_guidance(failure_reason: str, attempt_number: int) -> str:
        lines = [f"Failure reason: {failure_reason}", "", "Recovery steps:"]
        if attempt_number == 2:
            lines += [
                "1. Re-read the success signal carefully",
                "2. Identify exactly where you got stuck",
                "3. Break the task into smaller sub-tasks",
                "4. Complete one sub-task at a time",
            ]
        elif attempt_number == 3:
            lines += [
                "1. Review prerequisite skills first",
                "2. Look at similar examples or references",
                "3. Focus on the minimum viable solution",
                "4. Ask for help if still stuck after 10 minutes",
            ]
        else:
            lines += [
                "1. Consider simplifying the approach",
                "2. Review foundational concepts",
                "3. Take a break and return with fresh perspective",
            ]
        return "\n".join(lines)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _daily_minutes(self, context: DrillContext) -> int:
        if context.daily_minutes is None:
            return self.config.daily_minutes
        return context.daily_minutes

    def _retry_action(self, action: str, attempt_number: int, failure_reason: str | None) -> str:
        callout = f'Previous attempt failed: "{failure_reason}". ' if failure_reason else ""
        return f"{callout}{self.retry_scaffolding(attempt_number)} {action}"

    @staticmethod
    def _resolve_review_skill(context: DrillContext) -> Skill | None:
        review_id = context.day_plan.review_skill_id if context.day_plan else None
        if review_id is None:
            return None
        return next((s for s in context.previous_quest_skills if s.id == review_id), None)

    @staticmethod
    def _builds_on_quest_ids(skill: Skill, review_skill: Skill | None) -> list[str]:
        quest_ids = list(skill.prerequisite_quest_ids)
        quest_ids += [q for q in skill.component_quest_ids if q != skill.quest_id]
        if review_skill is not None and review_skill.quest_id != skill.quest_id:
            quest_ids.append(review_skill.quest_id)
        return list(dict.fromkeys(quest_ids))

    @staticmethod
    def _skills_related(review_skill: Skill, today_skill: Skill) -> bool:
        return (
            bool(set(review_skill.topics) & set(today_skill.topics))
            or review_skill.id in today_skill.prerequisite_skill_ids
            or review_skill.id in today_skill.component_skill_ids
        )
