"""
Week Plan Generator - weekly scheduling with cross-quest context.

Generates week plans from skills with:
- Day-by-day scheduling respecting prerequisites
- Review skills from previous quests for warmups (spaced repetition)
- Carry-forward skills scheduled ahead of new ones
- Synthesis (milestone) skills placed in the quest's final week

Randomness (review sampling and shuffling) comes from an injected
``random.Random`` so a seeded generator is fully reproducible.
"""

from __future__ import annotations

import math
import random
import uuid
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date

from loguru import logger

from skillpath.config import Settings
from skillpath.core.clock import Clock, utc_now
from skillpath.graph.models import Skill, SkillMastery, SkillType
from skillpath.graph.skill_graph import SkillGraph
from skillpath.planning import calendar
from skillpath.planning.models import (
    DayPlan,
    GoalRef,
    QuestRef,
    WeekPlan,
    WeekPlanContext,
    WeekPlanResult,
)

# Review warmups go to the day types that lean on earlier skills
_REVIEW_RECEIVING_TYPES = (SkillType.BUILDING, SkillType.COMPOUND)


@dataclass
class WeekPlanConfig:
    """Configuration for week plan generation."""

    days_per_week: int = 5
    max_review_skills_per_week: int = 3
    review_probability: float = 0.4
    shuffle_reviews: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> WeekPlanConfig:
        scheduling = settings.scheduling
        return cls(
            days_per_week=scheduling.days_per_week,
            max_review_skills_per_week=scheduling.max_review_skills_per_week,
            review_probability=scheduling.cross_quest_review_probability,
            shuffle_reviews=scheduling.shuffle_reviews,
        )


class WeekPlanGenerator:
    """
    Build week plans with day-by-day scheduling.

    The generator is synchronous and does no I/O; persisting the plans
    is the caller's job (see WeekTracker).
    """

    def __init__(
        self,
        config: WeekPlanConfig | None = None,
        rng: random.Random | None = None,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] | None = None,
    ):
        self.config = config or WeekPlanConfig()
        self._rng = rng or random.Random()
        self._clock = clock
        self._new_id = id_factory or (lambda: f"week-{uuid.uuid4()}")

    # =========================================================================
    # Public API
    # =========================================================================

    def generate(self, context: WeekPlanContext) -> WeekPlanResult:
        """
        Generate a single week plan.

        Carry-forward skills consume day slots first. Skills that do not fit
        into the week get no day but stay on the plan's skill ids, so an
        unmastered one is carried into the next week; they are reported in
        ``warnings``. Synthesis skills always keep a day.
        """
        quest = context.quest
        days_per_week = self.config.days_per_week
        total_weeks = self._weeks_in_quest(quest)
        is_last_week = context.week_in_quest == total_weeks

        logger.info(
            f'Generating week {context.week_number} (week {context.week_in_quest} of quest "{quest.title}")'
        )
        logger.debug(
            f"{len(context.week_skills)} skills, {len(context.carry_forward_skills)} carry-forward, "
            f"{len(context.previous_quest_skills)} prior skills available"
        )

        warnings: list[str] = []
        week_skills = self._prioritize(context.week_skills, context.carry_forward_skills)
        review_skills = self.identify_review_skills(context.week_skills, context.previous_quest_skills)

        assignments = self._assign_with_carry_forward(week_skills, context.carry_forward_skills, days_per_week)
        scheduled = [s for s in assignments if s is not None]
        scheduled_ids = {s.id for s in scheduled}
        overflow = [s for s in week_skills if s.id not in scheduled_ids]
        if overflow:
            warnings.append(
                f"{len(overflow)} skill(s) did not fit into {days_per_week} days "
                f"and will be carried forward: " + ", ".join(s.id for s in overflow)
            )
            logger.warning(warnings[-1])

        days = self._build_day_plans(assignments, review_skills, context)
        carry_forward_ids = {s.id for s in context.carry_forward_skills}
        type_counts = Counter(s.skill_type for s in scheduled)
        now = self._clock()

        week_plan = WeekPlan(
            id=self._new_id(),
            goal_id=context.goal.id,
            user_id=context.goal.user_id,
            quest_id=quest.id,
            week_number=context.week_number,
            week_in_quest=context.week_in_quest,
            is_first_week_of_quest=context.week_in_quest == 1,
            is_last_week_of_quest=is_last_week,
            start_date=days[0].scheduled_date if days else calendar.next_practice_day(context.start_date),
            end_date=days[-1].scheduled_date if days else calendar.next_practice_day(context.start_date),
            weekly_competence=self._weekly_competence(scheduled, is_last_week),
            theme=self._theme(scheduled, context.week_in_quest, quest.title),
            days=days,
            scheduled_skill_ids=[s.id for s in [*scheduled, *overflow] if s.id not in carry_forward_ids],
            carry_forward_skill_ids=[s.id for s in [*scheduled, *overflow] if s.id in carry_forward_ids],
            reviews_from_quest_ids=list(dict.fromkeys(
                d.review_quest_id for d in days if d.review_quest_id is not None
            )),
            builds_on_skill_ids=self._builds_on_skill_ids(context.week_skills, context.previous_quest_skills),
            foundation_count=type_counts[SkillType.FOUNDATION],
            building_count=type_counts[SkillType.BUILDING],
            compound_count=type_counts[SkillType.COMPOUND],
            has_synthesis=type_counts[SkillType.SYNTHESIS] > 0,
            drills_total=len(scheduled),
            warnings=list(warnings),
            created_at=now,
            updated_at=now,
        )

        logger.info(
            f"Week {week_plan.week_number}: {len(scheduled)} skill day(s), "
            f"{len(days) - len(scheduled)} catch-up day(s), {len(review_skills)} review skill(s)"
        )
        return WeekPlanResult(week_plan=week_plan, review_skills=review_skills, warnings=warnings)

    def generate_for_quest(
        self,
        quest: QuestRef,
        skills: Sequence[Skill],
        previous_quest_skills: Sequence[Skill],
        goal: GoalRef,
        start_week_number: int,
        start_date: date,
    ) -> list[WeekPlan]:
        """
        Generate every week plan for a quest.

        Skills are bucketed evenly by ``order`` into
        ``ceil(practice_days / days_per_week)`` weeks, at most
        ``days_per_week`` per week; synthesis skills go to the final week,
        which keeps a day free for each of them. Every skill ends up in some
        week's skill ids. Skills beyond the quest's capacity are reported in
        the ``warnings`` of the week plan that holds them.

        Raises:
            ValueError: The quest has no practice days
        """
        total_weeks = self._weeks_in_quest(quest)
        logger.info(
            f'Generating {total_weeks} week(s) for quest "{quest.title}" '
            f"({quest.practice_days} practice days, starting week {start_week_number})"
        )

        buckets = self._distribute_across_weeks(
            sorted(skills, key=lambda s: s.order), total_weeks, self.config.days_per_week
        )
        week_plans: list[WeekPlan] = []
        week_start = start_date

        for week_in_quest, week_skills in enumerate(buckets, start=1):
            result = self.generate(
                WeekPlanContext(
                    goal=goal,
                    quest=quest,
                    week_number=start_week_number + week_in_quest - 1,
                    week_in_quest=week_in_quest,
                    start_date=week_start,
                    week_skills=week_skills,
                    previous_quest_skills=list(previous_quest_skills),
                )
            )
            week_plans.append(result.week_plan)
            week_start = calendar.next_week_start(result.week_plan.end_date)

        return week_plans

    def identify_review_skills(
        self,
        week_skills: Sequence[Skill],
        previous_quest_skills: Sequence[Skill],
    ) -> list[Skill]:
        """
        Choose previous-quest skills to review in this week's warmups.

        1. Every previous-quest skill that is a direct prerequisite or a
           compound component of a week skill.
        2. Mastered previous-quest skills sampled for spaced repetition.

        The combined list is deduplicated, optionally shuffled, then capped.
        """
        if not previous_quest_skills:
            return []

        previous = SkillGraph(previous_quest_skills)
        candidates: list[Skill] = []

        for skill in week_skills:
            linked_ids = list(skill.prerequisite_skill_ids)
            if skill.is_compound:
                linked_ids += skill.component_skill_ids
            candidates.extend(previous.get(i) for i in linked_ids if i in previous)

        already_included = {s.id for s in candidates}
        for skill in previous_quest_skills:
            if skill.mastery is not SkillMastery.MASTERED or skill.id in already_included:
                continue
            if self._rng.random() < self.config.review_probability:
                candidates.append(skill)

        unique = list({s.id: s for s in candidates}.values())
        if self.config.shuffle_reviews:
            self._rng.shuffle(unique)

        return unique[: self.config.max_review_skills_per_week]

    def assign_skills_to_days(
        self,
        skills: Sequence[Skill],
        days_available: int,
    ) -> list[Skill | None]:
        """
        Assign skills to days so prerequisites come first.

        Args:
            skills: Candidates for the week
            days_available: Number of practice days

        Returns:
            One entry per day; None marks a catch-up day

        Raises:
            ValueError: ``days_available`` is negative
        """
        if days_available < 0:
            raise ValueError(f"days_available must be non-negative, got {days_available}")

        ordered = SkillGraph(skills).dependency_order()
        assignments: list[Skill | None] = list(ordered[:days_available])
        assignments.extend([None] * (days_available - len(assignments)))
        return assignments

    # =========================================================================
    # Skill distribution
    # =========================================================================

    def _weeks_in_quest(self, quest: QuestRef) -> int:
        if quest.practice_days < 1:
            raise ValueError(f'Quest "{quest.title}" must have at least one practice day')
        return math.ceil(quest.practice_days / self.config.days_per_week)

    @staticmethod
    def _distribute_across_weeks(skills: list[Skill], total_weeks: int, days_per_week: int) -> list[list[Skill]]:
        """
        Bucket skills across weeks in ``order``, synthesis last.

        Each week takes an even share of what is left, capped at its free
        days. Whatever exceeds the quest's capacity is appended to the last
        week ahead of the synthesis skills.
        """
        regular = [s for s in skills if not s.is_synthesis]
        synthesis = [s for s in skills if s.is_synthesis]

        capacity = [days_per_week] * total_weeks
        capacity[-1] = max(0, capacity[-1] - len(synthesis))

        weeks: list[list[Skill]] = []
        start = 0
        for index in range(total_weeks):
            remaining = len(regular) - start
            take = min(capacity[index], math.ceil(remaining / (total_weeks - index)))
            weeks.append(regular[start : start + take])
            start += take

        weeks[-1].extend(regular[start:])
        weeks[-1].extend(synthesis)
        return weeks

    @staticmethod
    def _prioritize(week_skills: Sequence[Skill], carry_forward: Sequence[Skill]) -> list[Skill]:
        """Carry-forward skills first (they need more practice), then the rest."""
        carry_ids = {s.id for s in carry_forward}
        return [*carry_forward, *(s for s in week_skills if s.id not in carry_ids)]

    def _assign_with_carry_forward(
        self,
        week_skills: list[Skill],
        carry_forward: Sequence[Skill],
        days_available: int,
    ) -> list[Skill | None]:
        """
        Dependency-order carry-forward and new skills separately so carry-forward
        claims the first days. A synthesis skill past the last day takes the
        day of the latest non-synthesis skill instead.
        """
        carry_ids = {s.id for s in carry_forward}
        ordered = [
            *SkillGraph(s for s in week_skills if s.id in carry_ids).dependency_order(),
            *SkillGraph(s for s in week_skills if s.id not in carry_ids).dependency_order(),
        ]

        kept = ordered[:days_available]
        for skill in ordered[days_available:]:
            if not skill.is_synthesis:
                continue
            evict = next((i for i in reversed(range(len(kept))) if not kept[i].is_synthesis), None)
            if evict is None:
                break
            del kept[evict]
            kept.append(skill)

        assignments: list[Skill | None] = list(kept)
        assignments.extend([None] * (days_available - len(assignments)))
        return assignments

    # =========================================================================
    # Day plans
    # =========================================================================

    def _build_day_plans(
        self,
        assignments: list[Skill | None],
        review_skills: list[Skill],
        context: WeekPlanContext,
    ) -> list[DayPlan]:
        """Pair each day with its skill and, for building/compound days, a review skill."""
        days: list[DayPlan] = []
        pending_reviews = list(review_skills)
        dates = calendar.practice_dates(context.start_date, len(assignments))

        for day_number, (skill, scheduled_date) in enumerate(zip(assignments, dates), start=1):
            day_in_quest = (context.week_in_quest - 1) * self.config.days_per_week + day_number

            if skill is None:
                days.append(DayPlan(day_number=day_number, day_in_quest=day_in_quest, scheduled_date=scheduled_date))
                continue

            review = None
            if skill.skill_type in _REVIEW_RECEIVING_TYPES:
                review = next((r for r in pending_reviews if r.quest_id != skill.quest_id), None)
                if review is not None:
                    pending_reviews.remove(review)

            skill.week_number = context.week_number
            skill.day_in_week = day_number
            skill.day_in_quest = day_in_quest

            days.append(
                DayPlan(
                    day_number=day_number,
                    day_in_quest=day_in_quest,
                    scheduled_date=scheduled_date,
                    skill_id=skill.id,
                    skill_type=skill.skill_type,
                    skill_title=skill.title,
                    review_skill_id=review.id if review else None,
                    review_quest_id=review.quest_id if review else None,
                )
            )

        return days

    @staticmethod
    def _builds_on_skill_ids(week_skills: Sequence[Skill], previous_quest_skills: Sequence[Skill]) -> list[str]:
        """Previous-quest skills this week depends on directly or as components."""
        previous_ids = {s.id for s in previous_quest_skills}
        builds_on: list[str] = []
        for skill in week_skills:
            for linked_id in [*skill.prerequisite_skill_ids, *skill.component_skill_ids]:
                if linked_id in previous_ids and linked_id not in builds_on:
                    builds_on.append(linked_id)
        return builds_on

    # =========================================================================
    # Text
    # =========================================================================

    @staticmethod
    def _weekly_competence(skills: Sequence[Skill], is_last_week: bool) -> str:
        if not skills:
            return "Review and practice"

        if is_last_week:
            synthesis = next((s for s in skills if s.is_synthesis), None)
            if synthesis is not None:
                return f"Complete milestone: {synthesis.title.removeprefix('Milestone: ')}"

        actions = ", ".join(" ".join(s.action.split()[:3]) for s in skills[:3])
        return f"Master: {actions}"

    @staticmethod
    def _theme(skills: Sequence[Skill], week_in_quest: int, quest_title: str) -> str:
        """Most common topic tag (first seen wins ties), title-cased."""
        topics = Counter(topic for s in skills for topic in s.topics)
        if not topics:
            return f"{quest_title} - Week {week_in_quest}"
        main_topic = topics.most_common(1)[0][0]
        return " ".join(word.capitalize() for word in main_topic.replace("-", " ").split())
