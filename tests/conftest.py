"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import UTC, date, datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from skillpath.core.clock import FixedClock  # noqa: E402
from skillpath.graph.models import Skill  # noqa: E402
from skillpath.planning.models import GoalRef, QuestRef  # noqa: E402
from skillpath.progression.store import InMemorySkillStore  # noqa: E402

# A Monday
MONDAY = date(2026, 3, 2)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Multi-service flows over in-memory stores")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def make_skill(skill_id: str, quest_id: str = "quest-1", **overrides) -> Skill:
    """Build a Skill with sensible defaults for tests."""
    fields = {
        "id": skill_id,
        "quest_id": quest_id,
        "goal_id": "goal-1",
        "user_id": "user-1",
        "title": f"Skill {skill_id}",
        "action": f"Practice {skill_id} step by step",
        "success_signal": f"Finished {skill_id} without help",
    }
    fields.update(overrides)
    return Skill(**fields)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def skill_factory():
    """Provide the make_skill factory."""
    return make_skill


@pytest.fixture
def clock():
    """Deterministic clock pinned to a Monday morning."""
    return FixedClock(datetime(2026, 3, 2, 9, 0, tzinfo=UTC))


@pytest.fixture
def goal():
    return GoalRef(id="goal-1", user_id="user-1", title="Learn networking")


@pytest.fixture
def quest():
    return QuestRef(id="quest-1", goal_id="goal-1", title="Subnetting", practice_days=10)


@pytest.fixture
def skill_store(clock):
    """Empty in-memory skill store sharing the fixed clock."""
    return InMemorySkillStore(clock=clock)
