"""
Sauron Kernel — Reducer

Pure function: (state, action) → ReduceResult
No side effects. No IO. Deterministic.

The only collaborator is the catalog, consulted while adding an assembly to
resolve a subcomponent template per slot. Catalog lookups are pure queries.
Given the same catalog and the same sequence of actions, produces the same
build state every time.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PartValidationError

from sauron.kernel.catalog import Catalog
from sauron.kernel.types import (
    Action,
    AssemblyConfig,
    AssemblyPart,
    BuildState,
    CategoryId,
    Part,
    ReduceResult,
    SubcomponentPart,
    Warning,
    instance_id,
    now_iso,
    parse_part,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def empty_state() -> BuildState:
    """The initial build: nothing selected."""
    return BuildState()


def reduce(
    state: BuildState,
    action: Action,
    catalog: Catalog | None = None,
    *,
    strict: bool = False,
) -> ReduceResult:
    """
    Apply one action to the current build state.
    Returns new state + applied flag + warnings/errors.

    The input state is never modified. On rejection the result carries the
    input state object itself. With strict=True an assembly with any slot
    that fails template resolution is rejected as a whole.
    """
    handler = _HANDLERS.get(action.type)
    if handler is None:
        return ReduceResult(
            state=state,
            applied=False,
            error=f"UNKNOWN_ACTION: {action.type}",
        )

    # Deep copy so we never mutate the input
    working = copy.deepcopy(state)
    result = handler(working, action, _Env(catalog=catalog, strict=strict))
    if not result.applied:
        result.state = state
    return result


def replay(
    actions: list[Action],
    catalog: Catalog | None = None,
    *,
    strict: bool = False,
) -> BuildState:
    """
    Rebuild state from scratch by reducing over all actions.
    Rejected actions are skipped.
    """
    state = empty_state()
    for action in actions:
        result = reduce(state, action, catalog, strict=strict)
        if result.applied:
            state = result.state
    return state


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


@dataclass
class _Env:
    catalog: Catalog | None
    strict: bool


def _reject(state: BuildState, code: str, msg: str) -> ReduceResult:
    return ReduceResult(state=state, applied=False, error=f"{code}: {msg}")


def _ok(state: BuildState, warnings: list[Warning] | None = None) -> ReduceResult:
    return ReduceResult(state=state, applied=True, warnings=warnings or [])


def _coerce_part(data: Any) -> tuple[Part | None, str | None]:
    """Parse a payload part. Returns (part, error_message)."""
    if data is None:
        return None, "missing part"
    try:
        return parse_part(data), None
    except PartValidationError as e:
        return None, f"{e.error_count()} validation error(s)"


def _select(state: BuildState, category_id: CategoryId, part: Part) -> None:
    state.selected_parts[category_id] = part.id
    state.part_details[part.id] = part


def _remove_assembly(state: BuildState, category_id: CategoryId, assembly: AssemblyPart) -> None:
    """
    Drop an assembly and everything it owns: its own slot and detail, its
    membership record, every slot still held by one of its subcomponents,
    and every detail entry (including replaced-out predecessors) it owns.
    """
    if state.selected_parts.get(category_id) == assembly.id:
        del state.selected_parts[category_id]
    state.part_details.pop(assembly.id, None)

    config = state.assemblies.pop(assembly.id, None)
    if config is not None:
        included = config.included_parts
    else:
        included = [
            sub.model_copy(update={"part_id": instance_id(assembly.id, sub.category_id)})
            for sub in assembly.subcomponents
        ]

    for sub in included:
        occupant = state.occupant(sub.category_id)
        if isinstance(occupant, SubcomponentPart) and occupant.parent_assembly_id == assembly.id:
            del state.selected_parts[sub.category_id]
            state.part_details.pop(occupant.id, None)
        state.part_details.pop(sub.part_id, None)

    owned = [
        pid
        for pid, part in state.part_details.items()
        if isinstance(part, SubcomponentPart) and part.parent_assembly_id == assembly.id
    ]
    for pid in owned:
        del state.part_details[pid]


def _apply_replacement(
    state: BuildState,
    category_id: CategoryId,
    old: SubcomponentPart,
    new: SubcomponentPart,
    timestamp: str,
) -> ReduceResult:
    record = new.model_copy(update={
        "original_part_id": old.original_part_id or old.id,
        "replacement_date": timestamp or now_iso(),
        "parent_assembly_id": old.parent_assembly_id,
    })
    _select(state, category_id, record)
    return _ok(state)


# ---------------------------------------------------------------------------
# Action handlers
# ---------------------------------------------------------------------------


def _handle_part_add(state: BuildState, action: Action, env: _Env) -> ReduceResult:
    p = action.payload
    category_id = p.get("category_id")
    if not category_id:
        return _reject(state, "MISSING_CATEGORY", "part.add requires 'category_id'")

    part, err = _coerce_part(p.get("part"))
    if part is None:
        return _reject(state, "INVALID_PART", err or "unparseable part")

    if part.category_id != category_id:
        return _reject(
            state,
            "CATEGORY_MISMATCH",
            f"{part.id} belongs to '{part.category_id}', not '{category_id}'",
        )

    if isinstance(part, AssemblyPart):
        return _add_assembly(state, part, env)

    if isinstance(part, SubcomponentPart):
        existing = state.occupant(category_id)
        if isinstance(existing, SubcomponentPart) and existing.is_replaceable:
            return _apply_replacement(state, category_id, existing, part, action.timestamp)

    # Overwrites the slot only; anything the old occupant owned stays put
    _select(state, category_id, part)
    return _ok(state)


def _handle_part_remove(state: BuildState, action: Action, env: _Env) -> ReduceResult:
    category_id = action.payload.get("category_id")
    if not category_id:
        return _reject(state, "MISSING_CATEGORY", "part.remove requires 'category_id'")

    part_id = state.selected_parts.get(category_id)
    if part_id is None:
        return _reject(state, "NOT_FOUND", f"nothing selected in '{category_id}'")

    part = state.part_details.get(part_id)
    if part is None:
        # Slot points at a missing detail entry; clearing it is all there is to do
        del state.selected_parts[category_id]
        return _ok(state)

    if isinstance(part, AssemblyPart):
        _remove_assembly(state, category_id, part)
        return _ok(state)

    if isinstance(part, SubcomponentPart) and part.parent_assembly_id:
        return _reject(
            state,
            "SUBCOMPONENT_OWNED",
            f"{part.id} belongs to assembly {part.parent_assembly_id}; replace it or remove the assembly",
        )

    del state.selected_parts[category_id]
    state.part_details.pop(part_id, None)
    return _ok(state)


def _handle_subcomponent_replace(state: BuildState, action: Action, env: _Env) -> ReduceResult:
    p = action.payload
    category_id = p.get("category_id")
    if not category_id:
        return _reject(state, "MISSING_CATEGORY", "subcomponent.replace requires 'category_id'")

    new_part, err = _coerce_part(p.get("new_part"))
    if new_part is None:
        return _reject(state, "INVALID_PART", err or "unparseable part")
    if not isinstance(new_part, SubcomponentPart):
        return _reject(state, "NOT_SUBCOMPONENT", f"replacement {new_part.id} is {new_part.type}")
    if new_part.category_id != category_id:
        return _reject(
            state,
            "CATEGORY_MISMATCH",
            f"{new_part.id} belongs to '{new_part.category_id}', not '{category_id}'",
        )

    old = state.occupant(category_id)
    if old is None:
        return _reject(state, "NOT_FOUND", f"nothing selected in '{category_id}'")
    if not isinstance(old, SubcomponentPart):
        return _reject(state, "NOT_SUBCOMPONENT", f"'{category_id}' holds a {old.type} part")
    if not old.is_replaceable:
        return _reject(state, "NOT_REPLACEABLE", f"{old.id} cannot be replaced")

    return _apply_replacement(state, category_id, old, new_part, action.timestamp)


def _handle_assembly_add(state: BuildState, action: Action, env: _Env) -> ReduceResult:
    part, err = _coerce_part(action.payload.get("assembly"))
    if part is None:
        return _reject(state, "INVALID_PART", err or "unparseable assembly")
    if not isinstance(part, AssemblyPart):
        return _reject(state, "NOT_ASSEMBLY", f"{part.id} is {part.type}")
    return _add_assembly(state, part, env)


def _add_assembly(state: BuildState, assembly: AssemblyPart, env: _Env) -> ReduceResult:
    """
    1. Register the assembly in its own slot.
    2. Resolve a template per declared slot, in declared order.
    3. Instantiate it as "{assembly}-{slot}", owned by the assembly, with the
       assembly's per-slot replaceability.
    4. Select the instance.
    5. Record membership with the synthesized ids.
    Slots without a template are skipped with a warning.
    """
    warnings: list[Warning] = []
    included = []

    _select(state, assembly.category_id, assembly)

    for config in assembly.subcomponents:
        iid = instance_id(assembly.id, config.category_id)
        included.append(config.model_copy(update={"part_id": iid}))

        template = env.catalog.resolve_subcomponent_template(config.category_id) if env.catalog else None
        if template is None:
            warnings.append(
                Warning(
                    code="UNRESOLVED_SUBCOMPONENT",
                    message=f"No template for '{config.category_id}' in assembly {assembly.id}",
                    details={"assembly_id": assembly.id, "category_id": config.category_id},
                )
            )
            continue

        instance = SubcomponentPart(
            id=iid,
            name=template.name,
            category_id=config.category_id,
            price=template.price,
            description=template.description,
            parent_assembly_id=assembly.id,
            is_replaceable=config.is_replaceable,
        )
        _select(state, config.category_id, instance)

    if warnings and env.strict:
        missing = ", ".join(w.details["category_id"] for w in warnings if w.details)
        return _reject(state, "UNRESOLVED_SUBCOMPONENT", f"{assembly.id}: {missing}")

    state.assemblies[assembly.id] = AssemblyConfig(main_part_id=assembly.id, included_parts=included)
    return _ok(state, warnings)


def _handle_build_clear(state: BuildState, action: Action, env: _Env) -> ReduceResult:
    return _ok(empty_state())


# ---------------------------------------------------------------------------
# Handler dispatch table
# ---------------------------------------------------------------------------

_HANDLERS = {
    "part.add": _handle_part_add,
    "part.remove": _handle_part_remove,
    "subcomponent.replace": _handle_subcomponent_replace,
    "assembly.add": _handle_assembly_add,
    "build.clear": _handle_build_clear,
}
