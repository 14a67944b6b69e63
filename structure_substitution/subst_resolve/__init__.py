"""
Resolution: orchestrate identification, recognition and substitution.

- orchestrator.py: ConstraintResolver state machine and structure_substitution()
- collaborators.py: shortcut store and unknown-structure trackers
- config.py: ResolutionConfig and JSON loading
- logs.py: handler setup for command-line runs
- cli.py: `subst-resolve` entry point
"""

from .collaborators import (
    JsonlTracker,
    LoggingTracker,
    NoShortcutStore,
    ShortcutStore,
    UnknownStructureTracker,
)
from .config import ResolutionConfig, load_config
from .orchestrator import ConstraintResolver, Outcome, ResolutionOutcome, structure_substitution

__all__ = [
    "ConstraintResolver",
    "JsonlTracker",
    "LoggingTracker",
    "NoShortcutStore",
    "Outcome",
    "ResolutionConfig",
    "ResolutionOutcome",
    "ShortcutStore",
    "UnknownStructureTracker",
    "load_config",
    "structure_substitution",
]
