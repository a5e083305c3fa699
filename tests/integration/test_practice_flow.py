"""
Integration test: plan a quest, drill it, and watch skills unlock.

Everything runs over in-memory stores with a fixed clock and seed.
"""

import random
from datetime import date

import pytest

from skillpath import build_engine
from skillpath.config import Settings
from skillpath.drills.models import DrillContext, DrillStatus
from skillpath.graph.models import DrillOutcome, SkillMastery, SkillStatus, SkillType
from skillpath.planning.models import QuestRef, WeekPlanStatus
from skillpath.progression.store import InMemorySkillStore

MONDAY = date(2026, 3, 2)


@pytest.fixture
def quest_skills(skill_factory):
    return [
        skill_factory("bin", order=1, title="Binary", estimated_minutes=15),
        skill_factory("mask", order=2, title="Masks", prerequisite_skill_ids=["bin"]),
        skill_factory(
            "final",
            order=3,
            title="Milestone: Subnet a campus",
            skill_type=SkillType.SYNTHESIS,
            prerequisite_skill_ids=["mask"],
        ),
    ]


@pytest.fixture
def engine(quest_skills, clock):
    store = InMemorySkillStore(quest_skills, clock=clock)
    return build_engine(store, settings=Settings(_env_file=None), rng=random.Random(3), clock=clock)


class TestPracticeFlow:
    @pytest.mark.asyncio
    async def test_passing_drills_unlock_the_next_skill(self, engine, quest_skills, goal):
        quest = QuestRef(id="quest-1", goal_id="goal-1", title="Subnetting", practice_days=5)
        weeks = engine.week_plan_generator.generate_for_quest(quest, quest_skills, [], goal, 1, MONDAY)
        week = await engine.week_plan_store.save(weeks[0])
        await engine.week_tracker.activate_week(week.id)

        assert [d.skill_id for d in week.days[:3]] == ["bin", "mask", "final"]

        binary = await engine.skill_store.get("bin")
        results = []
        for _ in range(3):
            drill = engine.drill_engine.generate(DrillContext(skill=binary, day_plan=week.days[0])).drill
            results.append(await engine.record_drill_result(drill, DrillOutcome.PASS, week.id))

        assert results[-1].just_mastered
        assert results[-1].unlocked_ids == ["mask"]
        assert (await engine.skill_store.get("mask")).status is SkillStatus.AVAILABLE
        assert (await engine.skill_store.get("final")).status is SkillStatus.LOCKED

        current = await engine.week_tracker.get_current_week("goal-1")
        assert current.drills_passed == 3
        assert current.skills_mastered == 1

    @pytest.mark.asyncio
    async def test_skipped_drill_only_touches_week_counters(self, engine, quest_skills, goal):
        quest = QuestRef(id="quest-1", goal_id="goal-1", title="Subnetting", practice_days=5)
        week = await engine.week_plan_store.save(
            engine.week_plan_generator.generate_for_quest(quest, quest_skills, [], goal, 1, MONDAY)[0]
        )
        drill = engine.drill_engine.generate(DrillContext(skill=quest_skills[0])).drill

        result = await engine.record_drill_result(drill, DrillOutcome.SKIPPED, week.id)

        assert result is None
        assert drill.status is DrillStatus.MISSED
        assert (await engine.skill_store.get("bin")).mastery is SkillMastery.NOT_STARTED
        assert (await engine.week_plan_store.get(week.id)).drills_skipped == 1

    @pytest.mark.asyncio
    async def test_week_completion_carries_unmastered_skills(self, engine, quest_skills, goal):
        quest = QuestRef(id="quest-1", goal_id="goal-1", title="Subnetting", practice_days=5)
        week = await engine.week_plan_store.save(
            engine.week_plan_generator.generate_for_quest(quest, quest_skills, [], goal, 1, MONDAY)[0]
        )
        await engine.week_tracker.activate_week(week.id)
        await engine.mastery_service.record_outcome("bin", DrillOutcome.PASS)

        completion = await engine.week_tracker.complete_week(week.id)

        assert completion.completed_week.status is WeekPlanStatus.COMPLETED
        assert completion.carry_forward_ids == ["bin", "mask", "final"]
        assert completion.summary.skills_in_progress == ["Binary"]
