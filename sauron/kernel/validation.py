"""
Sauron Kernel — Action Validation

Validates action payloads before they reach the reducer.
Validation is structural (well-formed?) not semantic (will it apply?).
The reducer handles semantic checks (is the slot occupied? is it replaceable?).

Only assembly payloads are gated here: a malformed assembly would leave the
build with slots that point nowhere, so it never reaches the reducer.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from sauron.kernel.types import ACTION_TYPES, Action

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_action(action: Action) -> list[str]:
    """
    Validate an action's type and payload structure.
    Returns a list of error strings. Empty list = valid.
    """
    errors: list[str] = []

    if action.type not in ACTION_TYPES:
        errors.append(f"Unknown action type: {action.type}")
        return errors

    if not isinstance(action.payload, dict):
        errors.append("Payload must be a non-null object")
        return errors

    validator = _VALIDATORS.get(action.type)
    if validator:
        errors.extend(validator(action.payload))

    return errors


def validate_assembly(assembly: Any) -> list[str]:
    """
    Structural check of an assembly payload (model or dict, snake_case or camelCase).
    Requires non-empty id, category and type, and a subcomponents list whose
    entries each carry a non-empty category, non-empty part id and a boolean
    replaceability flag.
    """
    if isinstance(assembly, BaseModel):
        assembly = assembly.model_dump()
    if not isinstance(assembly, dict):
        return ["assembly must be an object"]

    errors: list[str] = []
    for key in ("id", "category_id", "type"):
        if not _non_empty_str(_get(assembly, key)):
            errors.append(f"assembly requires '{key}'")

    subcomponents = _get(assembly, "subcomponents")
    if not isinstance(subcomponents, list):
        errors.append("assembly requires 'subcomponents' list")
        return errors

    for i, sub in enumerate(subcomponents):
        if isinstance(sub, BaseModel):
            sub = sub.model_dump()
        if not isinstance(sub, dict):
            errors.append(f"subcomponents[{i}] must be an object")
            continue
        if not _non_empty_str(_get(sub, "category_id")):
            errors.append(f"subcomponents[{i}] requires 'category_id'")
        if not _non_empty_str(_get(sub, "part_id")):
            errors.append(f"subcomponents[{i}] requires 'part_id'")
        if not isinstance(_get(sub, "is_replaceable"), bool):
            errors.append(f"subcomponents[{i}] requires boolean 'is_replaceable'")

    return errors


def is_assembly_payload(part: Any) -> bool:
    if isinstance(part, BaseModel):
        return getattr(part, "type", None) == "ASSEMBLY"
    return isinstance(part, dict) and part.get("type") == "ASSEMBLY"


# ---------------------------------------------------------------------------
# Per-action validators
# ---------------------------------------------------------------------------


def _validate_assembly_add(p: dict) -> list[str]:
    if "assembly" not in p:
        return ["assembly.add requires 'assembly'"]
    return validate_assembly(p["assembly"])


def _validate_part_add(p: dict) -> list[str]:
    # An assembly added through part.add gets the same gate as assembly.add
    part = p.get("part")
    if is_assembly_payload(part):
        return validate_assembly(part)
    return []


_VALIDATORS = {
    "assembly.add": _validate_assembly_add,
    "part.add": _validate_part_add,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get(d: dict, snake_key: str) -> Any:
    """Read a key in snake_case, falling back to its camelCase spelling."""
    if snake_key in d:
        return d[snake_key]
    head, *rest = snake_key.split("_")
    return d.get(head + "".join(w.capitalize() for w in rest))


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""
