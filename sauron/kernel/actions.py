"""
Sauron Kernel — Action Construction

Factory functions for creating well-formed actions.
Used by the builder facade to wrap caller requests before feeding them
through the middleware pipeline, and by tests to build actions concisely.
"""

from __future__ import annotations

from typing import Any

from sauron.kernel.types import Action, CategoryId, now_iso


def make_action(type: str, payload: dict[str, Any] | None = None, *, timestamp: str | None = None) -> Action:
    """Build an Action, stamping it with the current time unless one is given."""
    return Action(type=type, payload=payload or {}, timestamp=timestamp or now_iso())


def add_part(category_id: CategoryId, part: Any, *, timestamp: str | None = None) -> Action:
    return make_action("part.add", {"category_id": category_id, "part": part}, timestamp=timestamp)


def remove_part(category_id: CategoryId, *, timestamp: str | None = None) -> Action:
    return make_action("part.remove", {"category_id": category_id}, timestamp=timestamp)


def replace_subcomponent(category_id: CategoryId, new_part: Any, *, timestamp: str | None = None) -> Action:
    return make_action(
        "subcomponent.replace",
        {"category_id": category_id, "new_part": new_part},
        timestamp=timestamp,
    )


def add_assembly(assembly: Any, *, timestamp: str | None = None) -> Action:
    """
    `assembly` may be an AssemblyPart or a raw dict. Raw dicts are checked
    structurally by the validation middleware before the reducer sees them.
    """
    return make_action("assembly.add", {"assembly": assembly}, timestamp=timestamp)


def clear_build(*, timestamp: str | None = None) -> Action:
    return make_action("build.clear", timestamp=timestamp)
