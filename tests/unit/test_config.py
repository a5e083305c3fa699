"""Unit tests for settings loading and component config mapping."""

import pytest
from loguru import logger
from pydantic import ValidationError

from skillpath.config import Settings, configure_logging
from skillpath.drills.daily_drill_engine import DrillEngineConfig
from skillpath.planning.week_plan_generator import WeekPlanConfig


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SKILLPATH_RANDOM_SEED", raising=False)
        settings = Settings(_env_file=None)

        assert settings.mastery.mastered_threshold == 3
        assert settings.mastery.consecutive_for_mastery == 2
        assert settings.scheduling.days_per_week == 5
        assert settings.scheduling.cross_quest_review_probability == pytest.approx(0.4)
        assert settings.drills.daily_minutes == 30
        assert settings.drills.max_retry_attempts == 3
        assert settings.random_seed is None

    def test_nested_env_override(self, monkeypatch):
        monkeypatch.setenv("SKILLPATH_DRILLS__WARMUP_MINUTES", "3")
        monkeypatch.setenv("SKILLPATH_RANDOM_SEED", "11")

        settings = Settings(_env_file=None)

        assert settings.drills.warmup_minutes == 3
        assert settings.random_seed == 11

    def test_invalid_probability_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, scheduling={"cross_quest_review_probability": 1.5})


class TestComponentConfig:
    def test_week_plan_config_from_settings(self):
        settings = Settings(_env_file=None, scheduling={"days_per_week": 4, "shuffle_reviews": False})

        config = WeekPlanConfig.from_settings(settings)

        assert config.days_per_week == 4
        assert config.shuffle_reviews is False
        assert config.max_review_skills_per_week == 3

    def test_drill_config_from_settings(self):
        settings = Settings(_env_file=None, drills={"include_stretch": False, "min_main_minutes": 15})

        config = DrillEngineConfig.from_settings(settings)

        assert config.include_stretch is False
        assert config.min_main_minutes == 15
        assert config.stretch_minutes == 5


def test_configure_logging_accepts_file_sink(tmp_path):
    log_file = tmp_path / "skillpath.log"

    configure_logging(Settings(_env_file=None, log_level="DEBUG", log_file=str(log_file)))

    logger.debug("configured")
    logger.remove()
    assert log_file.exists()
