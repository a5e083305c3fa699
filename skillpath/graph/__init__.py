"""
Skill Graph - the Skill entity, its enums and dependency ordering.
"""

from skillpath.graph.models import (
    DEFAULT_THRESHOLDS,
    DrillOutcome,
    MasteryThresholds,
    Skill,
    SkillMastery,
    SkillStatus,
    SkillType,
)
from skillpath.graph.skill_graph import SkillGraph

__all__ = [
    "Skill",
    "SkillGraph",
    "SkillType",
    "SkillMastery",
    "SkillStatus",
    "DrillOutcome",
    "MasteryThresholds",
    "DEFAULT_THRESHOLDS",
]
