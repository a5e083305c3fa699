"""
skillpath - skill progression and practice scheduling engine.

Skill dependency graph with a mastery state machine, week plan
generation with cross-quest review, and daily drill composition.
"""

from skillpath.engine import PracticeEngine, build_engine

__version__ = "0.1.0"

__all__ = ["PracticeEngine", "build_engine", "__version__"]
