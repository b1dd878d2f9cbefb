"""
Sauron Kernel — Compatibility Rules

A rule names a category and the categories its occupant must get along with.
Each pairing may carry a predicate over the two occupants. Pairings without
one only document a relationship; they never produce errors.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Literal

from sauron.kernel.types import BuildState, CategoryId, Part, ValidationError

Condition = Callable[[Part, Part], bool]


@dataclass(frozen=True)
class CompatibleWith:
    category_id: CategoryId
    condition: Condition | None = None
    severity: Literal["ERROR", "WARNING"] = "ERROR"
    message: str | None = None  # default: "Incompatible with {other part name}"


@dataclass(frozen=True)
class CompatibilityRule:
    category_id: CategoryId
    compatible_with: tuple[CompatibleWith, ...] = field(default_factory=tuple)


def check_compatibility(
    state: BuildState,
    rules: Sequence[CompatibilityRule],
) -> list[ValidationError]:
    """
    Evaluate rules against the build.
    Empty slots satisfy every rule that mentions them. Errors come out in
    rule order, then pairing order, without deduplication.
    """
    errors: list[ValidationError] = []

    for rule in rules:
        part_a = state.occupant(rule.category_id)
        if part_a is None:
            continue

        for pairing in rule.compatible_with:
            part_b = state.occupant(pairing.category_id)
            if part_b is None:
                continue
            if pairing.condition is None or pairing.condition(part_a, part_b):
                continue
            errors.append(
                ValidationError(
                    category_id=rule.category_id,
                    message=pairing.message or f"Incompatible with {part_b.name}",
                    severity=pairing.severity,
                )
            )

    return errors
