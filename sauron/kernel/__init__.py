"""
Sauron Kernel — the build-state engine.

Components:
  types          — part model, build state, actions, results
  reducer        — (state, action) → ReduceResult  (pure, deterministic)
  validation     — structural checks on action payloads
  middleware     — validation + logging around the reducer
  compatibility  — rule evaluation over a build
  builder        — stateful facade: actions, selectors, validate_build
  storage        — versioned snapshot persistence
"""

from sauron.kernel.builder import Builder, check_assembly_integrity
from sauron.kernel.catalog import Catalog, MemoryCatalog
from sauron.kernel.compatibility import CompatibilityRule, CompatibleWith, check_compatibility
from sauron.kernel.middleware import compose, logging_middleware, validation_middleware
from sauron.kernel.reducer import empty_state, reduce, replay
from sauron.kernel.types import (
    AssemblyPart,
    BuildState,
    StandalonePart,
    SubcomponentConfig,
    SubcomponentPart,
    parse_part,
)
from sauron.kernel.validation import validate_action

__all__ = [
    "Builder",
    "check_assembly_integrity",
    "Catalog",
    "MemoryCatalog",
    "CompatibilityRule",
    "CompatibleWith",
    "check_compatibility",
    "compose",
    "logging_middleware",
    "validation_middleware",
    "empty_state",
    "reduce",
    "replay",
    "AssemblyPart",
    "BuildState",
    "StandalonePart",
    "SubcomponentConfig",
    "SubcomponentPart",
    "parse_part",
    "validate_action",
]
