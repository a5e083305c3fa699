"""
Unit tests for DailyDrillEngine.

Tests:
- Time budget allocation across warmup/main/stretch
- Warmup only when the day's review skill is a known previous-quest skill
- Stretch content (transfer scenario or type template)
- Retry adaptation (multipliers, scaffolding, cap)
"""

from datetime import date

import pytest

from skillpath.core.errors import MaxRetriesExceededError
from skillpath.drills.daily_drill_engine import DailyDrillEngine, DrillEngineConfig
from skillpath.drills.models import DrillContext, DrillSectionType
from skillpath.graph.models import SkillType
from skillpath.planning.models import DayPlan


@pytest.fixture
def engine(clock):
    return DailyDrillEngine(clock=clock)


@pytest.fixture
def review_skill(skill_factory):
    return skill_factory(
        "old1",
        quest_id="quest-0",
        title="Binary basics",
        action="Convert 192 to binary",
        success_signal="All 8 bits correct",
        topics=["binary"],
    )


@pytest.fixture
def day_with_review():
    return DayPlan(
        day_number=2,
        day_in_quest=2,
        scheduled_date=date(2026, 3, 3),
        skill_id="a",
        review_skill_id="old1",
        review_quest_id="quest-0",
    )


class TestTimeBudget:
    def test_default_budget_with_review_and_stretch(self, engine, skill_factory, review_skill, day_with_review):
        skill = skill_factory("a", estimated_minutes=25)

        result = engine.generate(
            DrillContext(skill=skill, day_plan=day_with_review, previous_quest_skills=[review_skill])
        )

        assert result.drill.warmup.estimated_minutes == 5
        assert result.drill.main.estimated_minutes == 20
        assert result.drill.stretch.estimated_minutes == 5
        assert result.total_minutes == 30
        assert result.warnings == []

    def test_short_skill_keeps_its_estimate(self, engine, skill_factory):
        result = engine.generate(DrillContext(skill=skill_factory("a", estimated_minutes=15)))

        assert result.drill.main.estimated_minutes == 15
        assert result.has_warmup is False
        assert result.has_stretch is True

    def test_main_never_below_floor(self, engine, skill_factory, review_skill, day_with_review):
        skill = skill_factory("a", estimated_minutes=3)

        result = engine.generate(
            DrillContext(skill=skill, day_plan=day_with_review, previous_quest_skills=[review_skill])
        )

        assert result.drill.main.estimated_minutes == 10

    def test_over_budget_is_a_warning(self, engine, skill_factory, review_skill, day_with_review):
        skill = skill_factory("a", estimated_minutes=20)

        result = engine.generate(
            DrillContext(
                skill=skill,
                day_plan=day_with_review,
                previous_quest_skills=[review_skill],
                daily_minutes=12,
            )
        )

        # warmup 5 + main floor 10 > 12
        assert result.total_minutes == 15
        assert result.has_stretch is False
        assert result.warnings == ["Drill exceeds budget: 15 > 12 minutes"]

    def test_zero_budget_is_not_the_default(self, engine, skill_factory):
        result = engine.generate(DrillContext(skill=skill_factory("a", estimated_minutes=15), daily_minutes=0))

        assert result.drill.main.estimated_minutes == 10
        assert result.has_stretch is False
        assert result.warnings == ["Drill exceeds budget: 10 > 0 minutes"]

    def test_stretch_disabled(self, clock, skill_factory):
        engine = DailyDrillEngine(DrillEngineConfig(include_stretch=False), clock=clock)

        result = engine.generate(DrillContext(skill=skill_factory("a", estimated_minutes=40)))

        assert result.drill.main.estimated_minutes == 30
        assert result.drill.stretch is None


class TestWarmup:
    def test_unknown_review_skill_means_no_warmup(self, engine, skill_factory, day_with_review):
        result = engine.generate(DrillContext(skill=skill_factory("a"), day_plan=day_with_review))

        assert result.drill.warmup is None

    def test_related_review_mentions_todays_skill(self, engine, skill_factory, review_skill, day_with_review):
        skill = skill_factory("a", title="Subnet masks", topics=["binary"])

        warmup = engine.generate(
            DrillContext(skill=skill, day_plan=day_with_review, previous_quest_skills=[review_skill])
        ).drill.warmup

        assert warmup.type is DrillSectionType.WARMUP
        assert warmup.title == "Review: Binary basics"
        assert warmup.action == 'Quick review: convert 192 to binary. This prepares you for today\'s "Subnet masks" skill.'
        assert warmup.pass_signal == "Completed within 5 minutes: all 8 bits correct"
        assert warmup.is_from_previous_quest is True

    def test_unrelated_review_asks_for_speed(self, engine, skill_factory, review_skill):
        warmup = engine.generate_warmup(review_skill, skill_factory("a", topics=["routing"]))

        assert warmup.action.endswith("Aim for speed over perfection.")


class TestMainAndStretch:
    def test_compound_lists_components(self, engine, skill_factory):
        components = [skill_factory("x", title="Binary"), skill_factory("y", title="Masks")]
        skill = skill_factory(
            "c", skill_type=SkillType.COMPOUND, is_compound=True, component_skill_ids=["x", "y"], action="Subnet a /24"
        )

        drill = engine.generate(DrillContext(skill=skill, component_skills=components)).drill

        assert drill.main.action == "Subnet a /24 (Integrates: Binary, Masks)"
        assert drill.is_compound_drill
        assert drill.component_skill_ids == ["x", "y"]

    def test_constraint_from_locked_variables(self, engine, skill_factory):
        skill = skill_factory("a", locked_variables=["No calculator", "Class C only"])

        drill = engine.generate(DrillContext(skill=skill)).drill

        assert drill.main.constraint == "No calculator; Class C only"

    def test_transfer_scenario_stretch(self, engine, skill_factory):
        skill = skill_factory("a", transfer_scenario="Plan an office VLAN layout")

        stretch = engine.generate_stretch(skill)

        assert stretch.action == "Transfer challenge: Plan an office VLAN layout"
        assert stretch.is_optional

    @pytest.mark.parametrize(
        "skill_type, prefix",
        [
            (SkillType.FOUNDATION, "Apply"),
            (SkillType.BUILDING, "Combine"),
            (SkillType.COMPOUND, "Teach"),
            (SkillType.SYNTHESIS, "Speed challenge"),
        ],
    )
    def test_stretch_template_by_type(self, engine, skill_factory, skill_type, prefix):
        stretch = engine.generate_stretch(skill_factory("a", skill_type=skill_type))

        assert stretch.action.startswith(prefix)

    def test_builds_on_quests(self, engine, skill_factory, review_skill, day_with_review):
        skill = skill_factory(
            "a",
            prerequisite_quest_ids=["quest-p"],
            component_quest_ids=["quest-1", "quest-c"],
        )

        drill = engine.generate(
            DrillContext(skill=skill, day_plan=day_with_review, previous_quest_skills=[review_skill])
        ).drill

        assert drill.builds_on_quest_ids == ["quest-p", "quest-c", "quest-0"]
        assert drill.review_quest_id == "quest-0"
        assert drill.day_number == 2
        assert drill.scheduled_date == date(2026, 3, 3)


class TestRetry:
    def test_attempt_three_has_main_only(self, engine, skill_factory, review_skill, day_with_review):
        skill = skill_factory("a", estimated_minutes=25)
        original = engine.generate(
            DrillContext(skill=skill, day_plan=day_with_review, previous_quest_skills=[review_skill])
        ).drill

        retry = engine.adapt_for_retry(original, "Mixed up host bits", attempt_number=3)

        assert retry.warmup is None
        assert retry.stretch is None
        assert retry.main.estimated_minutes == 30
        assert retry.total_minutes == 30
        assert retry.retry_count == 2
        assert retry.supersedes_drill_id == original.id
        assert retry.id != original.id

    def test_default_attempt_is_previous_plus_one(self, engine, skill_factory):
        original = engine.generate(DrillContext(skill=skill_factory("a", estimated_minutes=18))).drill

        retry = engine.adapt_for_retry(original, "Too slow")

        assert retry.attempt_number == 2
        # 18 * 1.25 = 22.5 rounds half-up
        assert retry.main.estimated_minutes == 23
        assert retry.main.title == "Skill a (Retry 2)"
        assert retry.main.action == (
            'Previous attempt failed: "Too slow". Take more time and break into smaller steps. '
            "Practice a step by step"
        )
        assert "Break the task into smaller sub-tasks" in retry.recovery_guidance

    def test_retries_scale_from_original(self, engine, skill_factory):
        original = engine.generate(DrillContext(skill=skill_factory("a", estimated_minutes=20))).drill

        second = engine.adapt_for_retry(original, "first")
        third = engine.adapt_for_retry(second, "second")

        assert third.attempt_number == 3
        assert third.main.estimated_minutes == 30
        assert third.main.title == "Skill a (Retry 3)"
        assert third.main.action.count("Previous attempt failed") == 1
        assert "Review the fundamentals first" in third.main.action

    def test_beyond_cap_raises(self, engine, skill_factory):
        original = engine.generate(DrillContext(skill=skill_factory("a"))).drill

        with pytest.raises(MaxRetriesExceededError) as exc_info:
            engine.adapt_for_retry(original, "again", attempt_number=4)

        assert exc_info.value.code == "MAX_RETRIES_EXCEEDED"

    def test_generate_retry_context_drops_stretch(self, engine, skill_factory):
        result = engine.generate(
            DrillContext(skill=skill_factory("a"), attempt_number=2, previous_failure_reason="Off by one")
        )

        assert result.has_stretch is False
        assert result.drill.previous_failure_reason == "Off by one"
        assert result.drill.main.action.startswith('Previous attempt failed: "Off by one".')
