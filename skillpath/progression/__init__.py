"""
Skill Progression - unlock and mastery services over a skill store.

Components:
- SkillStore / InMemorySkillStore: async persistence contract
- UnlockService: prerequisite gating and milestone availability
- MasteryService: pass/fail state machine that triggers unlocks
"""

from skillpath.progression.mastery_service import (
    MasteryService,
    MasterySummary,
    OutcomeResult,
)
from skillpath.progression.store import InMemorySkillStore, SkillStore
from skillpath.progression.unlock_service import (
    MilestoneProgress,
    PrerequisiteCheck,
    UnlockResult,
    UnlockService,
)

__all__ = [
    "SkillStore",
    "InMemorySkillStore",
    "UnlockService",
    "MasteryService",
    "PrerequisiteCheck",
    "UnlockResult",
    "MilestoneProgress",
    "OutcomeResult",
    "MasterySummary",
]
