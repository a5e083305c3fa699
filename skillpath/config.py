"""
Configuration settings for the skillpath progression engine.

Uses Pydantic Settings for environment variable management with .env file support.
Nested sections can be overridden with a double underscore, e.g.
``SKILLPATH_DRILLS__WARMUP_MINUTES=3``.
"""
from __future__ import annotations

import sys
from functools import lru_cache
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MasterySettings(BaseModel):
    """Mastery state machine thresholds."""

    practicing_threshold: int = Field(
        default=1,
        ge=1,
        description="Total passes required to begin practicing",
    )
    mastered_threshold: int = Field(
        default=3,
        ge=1,
        description="Total passes required for mastery",
    )
    consecutive_for_mastery: int = Field(
        default=2,
        ge=1,
        description="Consecutive passes required for mastery",
    )
    milestone_mastery_percent: float = Field(
        default=0.75,
        ge=0.0,
        le=1.0,
        description="Share of non-synthesis skills mastered before the milestone opens",
    )


class SchedulingSettings(BaseModel):
    """Week plan generation."""

    days_per_week: int = Field(
        default=5,
        ge=1,
        le=7,
        description="Practice days per week (Monday-Friday)",
    )
    max_review_skills_per_week: int = Field(
        default=3,
        ge=0,
        description="Cap on cross-quest review skills per week",
    )
    cross_quest_review_probability: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Inclusion probability for spaced-repetition review sampling",
    )
    shuffle_reviews: bool = Field(
        default=True,
        description="Shuffle review candidates before applying the cap",
    )


class DrillSettings(BaseModel):
    """Daily drill composition and time budgeting."""

    daily_minutes: int = Field(
        default=30,
        ge=1,
        description="Default daily practice budget",
    )
    warmup_minutes: int = Field(default=5, ge=0, description="Warmup section duration")
    stretch_minutes: int = Field(default=5, ge=0, description="Stretch section duration")
    min_main_minutes: int = Field(default=10, ge=1, description="Floor for the main section")
    include_stretch: bool = Field(default=True, description="Offer stretch challenges")
    max_retry_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts allowed before the learner should skip the skill",
    )


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SKILLPATH_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Progression
    # ========================================
    mastery: MasterySettings = Field(default_factory=MasterySettings)
    scheduling: SchedulingSettings = Field(default_factory=SchedulingSettings)
    drills: DrillSettings = Field(default_factory=DrillSettings)

    # ========================================
    # Determinism
    # ========================================
    random_seed: int | None = Field(
        default=None,
        description="Seed for review sampling and shuffling (None = nondeterministic)",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Replace loguru's default sink with the configured level and format."""
    settings = settings or get_settings()

    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level=settings.log_level,
            rotation="10 MB",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )
