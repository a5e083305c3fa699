"""
Practice engine wiring.

``build_engine`` constructs every service explicitly from settings and
the caller's stores; nothing is held in module-level state. Each call
returns an independent engine.

Example:
    store = InMemorySkillStore(skills)
    engine = build_engine(store, settings=Settings(random_seed=7))
    result = await engine.record_drill_result(drill, DrillOutcome.PASS, week_plan_id)
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from loguru import logger

from skillpath.config import Settings, get_settings
from skillpath.core.clock import Clock, utc_now
from skillpath.drills.daily_drill_engine import DailyDrillEngine, DrillEngineConfig
from skillpath.drills.models import DailyDrill, DrillStatus
from skillpath.graph.models import DrillOutcome, MasteryThresholds
from skillpath.planning.store import InMemoryWeekPlanStore, WeekPlanStore
from skillpath.planning.week_plan_generator import WeekPlanConfig, WeekPlanGenerator
from skillpath.planning.week_tracker import WeekTracker
from skillpath.progression.mastery_service import MasteryService, OutcomeResult
from skillpath.progression.store import SkillStore
from skillpath.progression.unlock_service import UnlockService


@dataclass
class PracticeEngine:
    """The wired set of services for one caller."""

    settings: Settings
    skill_store: SkillStore
    week_plan_store: WeekPlanStore
    unlock_service: UnlockService
    mastery_service: MasteryService
    week_plan_generator: WeekPlanGenerator
    week_tracker: WeekTracker
    drill_engine: DailyDrillEngine
    clock: Clock = utc_now

    async def record_drill_result(
        self,
        drill: DailyDrill,
        outcome: DrillOutcome | str,
        week_plan_id: str | None = None,
    ) -> OutcomeResult | None:
        """
        Apply a resolved drill to mastery and the week counters.

        Pass and fail go through the mastery service; partial and skipped
        only touch the week counters.

        Returns:
            OutcomeResult for pass/fail, otherwise None
        """
        outcome = DrillOutcome(outcome)
        drill.outcome = outcome
        drill.status = DrillStatus.COMPLETED if outcome.counts_as_attempt else DrillStatus.MISSED
        drill.updated_at = self.clock()

        result = None
        if outcome in (DrillOutcome.PASS, DrillOutcome.FAIL):
            result = await self.mastery_service.record_outcome(drill.skill_id, outcome)

        if week_plan_id is not None:
            await self.week_tracker.record_drill_outcome(
                week_plan_id,
                outcome,
                skill_mastered=result is not None and result.just_mastered,
            )

        logger.debug(f"Drill {drill.id} resolved as {outcome.value}")
        return result


def build_engine(
    skill_store: SkillStore,
    week_plan_store: WeekPlanStore | None = None,
    settings: Settings | None = None,
    rng: random.Random | None = None,
    clock: Clock | None = None,
) -> PracticeEngine:
    """
    Wire up a PracticeEngine.

    Args:
        skill_store: Skill persistence
        week_plan_store: Week plan persistence (in-memory if omitted)
        settings: Engine settings (cached environment settings if omitted)
        rng: Random source for review sampling (seeded from settings if omitted)
        clock: Time source (UTC now if omitted)
    """
    settings = settings or get_settings()
    clock = clock or utc_now
    rng = rng or random.Random(settings.random_seed)
    week_plan_store = week_plan_store or InMemoryWeekPlanStore(clock=clock)

    thresholds = MasteryThresholds(
        practicing=settings.mastery.practicing_threshold,
        mastered=settings.mastery.mastered_threshold,
        consecutive_for_mastery=settings.mastery.consecutive_for_mastery,
    )
    unlock_service = UnlockService(skill_store, clock=clock)
    mastery_service = MasteryService(
        skill_store,
        unlock_service,
        thresholds=thresholds,
        milestone_mastery_percent=settings.mastery.milestone_mastery_percent,
        clock=clock,
    )
    generator = WeekPlanGenerator(WeekPlanConfig.from_settings(settings), rng=rng, clock=clock)

    logger.debug(f"Practice engine built (seed={settings.random_seed})")
    return PracticeEngine(
        settings=settings,
        skill_store=skill_store,
        week_plan_store=week_plan_store,
        unlock_service=unlock_service,
        mastery_service=mastery_service,
        week_plan_generator=generator,
        week_tracker=WeekTracker(week_plan_store, skill_store, generator, clock=clock),
        drill_engine=DailyDrillEngine(DrillEngineConfig.from_settings(settings), clock=clock),
        clock=clock,
    )
