"""
Sauron Kernel — Catalog Lookup

The reducer needs to resolve a subcomponent template for each slot of an
assembly it adds. The catalog is injected, never a module-level global, so
tests can run against fixture catalogs.
"""

from __future__ import annotations

from collections.abc import Iterable

from sauron.kernel.types import (
    CategoryId,
    Part,
    PartId,
    SubcomponentPart,
    parse_part,
)


class Catalog:
    """
    Abstract catalog interface.
    Implement against the remote catalog service in production, or in-memory for tests.
    Lookups are synchronous and total: they return None instead of raising.
    """

    def resolve_part_by_id(self, part_id: PartId) -> Part | None:
        raise NotImplementedError

    def resolve_subcomponent_template(self, category_id: CategoryId) -> SubcomponentPart | None:
        raise NotImplementedError

    def parts_for_category(self, category_id: CategoryId) -> list[Part]:
        raise NotImplementedError


class MemoryCatalog(Catalog):
    """In-memory catalog. Parts may be models or JSON-like dicts."""

    def __init__(self, parts: Iterable[Part | dict] = ()) -> None:
        self._parts: dict[PartId, Part] = {}
        for p in parts:
            self.add(p)

    def add(self, part: Part | dict) -> Part:
        model = parse_part(part)
        self._parts[model.id] = model
        return model

    def resolve_part_by_id(self, part_id: PartId) -> Part | None:
        return self._parts.get(part_id)

    def resolve_subcomponent_template(self, category_id: CategoryId) -> SubcomponentPart | None:
        """
        First subcomponent declared for the category that belongs to an
        assembly; otherwise the first subcomponent for the category at all.
        """
        fallback: SubcomponentPart | None = None
        for part in self._parts.values():
            if not isinstance(part, SubcomponentPart) or part.category_id != category_id:
                continue
            if part.parent_assembly_id:
                return part
            if fallback is None:
                fallback = part
        return fallback

    def parts_for_category(self, category_id: CategoryId) -> list[Part]:
        return [p for p in self._parts.values() if p.category_id == category_id]

    def replacement_parts(self, category_id: CategoryId) -> list[SubcomponentPart]:
        """Loose subcomponents for a slot, i.e. ones not shipped inside an assembly."""
        return [
            p
            for p in self._parts.values()
            if isinstance(p, SubcomponentPart)
            and p.category_id == category_id
            and not p.parent_assembly_id
        ]
