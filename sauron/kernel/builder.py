"""
Sauron Kernel — Builder Facade

Owns one build and coordinates the pipeline around it:
middleware → reducer → new state, then answers queries against the latest
state. Callers may ignore the ReduceResult each operation returns, or check
`applied` and `error` to see whether a request took effect.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import partial

from sauron.config import settings
from sauron.kernel import actions
from sauron.kernel.catalog import Catalog, MemoryCatalog
from sauron.kernel.compatibility import CompatibilityRule, check_compatibility
from sauron.kernel.middleware import DEFAULT_MIDDLEWARES, Middleware, compose
from sauron.kernel.reducer import empty_state, reduce
from sauron.kernel.storage import (
    BuildStorage,
    load_build,
    save_build,
    state_from_dict,
    state_to_dict,
)
from sauron.kernel.types import (
    Action,
    AssemblyConfig,
    AssemblyMember,
    AssemblyPart,
    BuildState,
    CategoryId,
    Part,
    PartId,
    ReduceResult,
    SubcomponentPart,
    ValidationError,
    ValidationResult,
)

logger = logging.getLogger(__name__)


class Builder:
    """
    Stateful wrapper around the reducer pipeline for a single build.
    The state is replaced wholesale after every applied action; nothing else
    writes to it.
    """

    def __init__(
        self,
        catalog: Catalog | None = None,
        rules: Sequence[CompatibilityRule] = (),
        *,
        middlewares: Sequence[Middleware] | None = None,
        strict: bool | None = None,
        state: BuildState | None = None,
    ):
        self._catalog = catalog
        self._rules = tuple(rules)
        self._strict = settings.STRICT_ASSEMBLIES if strict is None else strict
        self._state = state if state is not None else empty_state()

        chain = DEFAULT_MIDDLEWARES if middlewares is None else tuple(middlewares)
        base = partial(reduce, catalog=self._catalog, strict=self._strict)
        self._pipeline = compose(*chain)(base)

    # -- state --

    @property
    def state(self) -> BuildState:
        return self._state

    @property
    def selected_parts(self) -> dict[CategoryId, PartId]:
        return self._state.selected_parts

    @property
    def part_details(self) -> dict[PartId, Part]:
        return self._state.part_details

    @property
    def assemblies(self) -> dict[PartId, AssemblyConfig]:
        return self._state.assemblies

    @property
    def rules(self) -> tuple[CompatibilityRule, ...]:
        return self._rules

    # -- actions --

    def dispatch(self, action: Action) -> ReduceResult:
        result = self._pipeline(self._state, action)
        if result.applied:
            self._state = result.state
        return result

    def add_part(self, category_id: CategoryId, part: Part | dict) -> ReduceResult:
        return self.dispatch(actions.add_part(category_id, part))

    def remove_part(self, category_id: CategoryId) -> ReduceResult:
        return self.dispatch(actions.remove_part(category_id))

    def replace_subcomponent(self, category_id: CategoryId, new_part: SubcomponentPart | dict) -> ReduceResult:
        return self.dispatch(actions.replace_subcomponent(category_id, new_part))

    def add_assembly(self, assembly: AssemblyPart | dict) -> ReduceResult:
        """Warnings on the result list slots whose template did not resolve."""
        return self.dispatch(actions.add_assembly(assembly))

    def clear_build(self) -> ReduceResult:
        return self.dispatch(actions.clear_build())

    # -- selectors --

    def get_part_by_category(self, category_id: CategoryId) -> Part | None:
        return self._state.occupant(category_id)

    def is_part_replaceable(self, category_id: CategoryId) -> bool:
        part = self.get_part_by_category(category_id)
        return isinstance(part, SubcomponentPart) and part.is_replaceable

    def get_original_part(self, category_id: CategoryId) -> Part | None:
        part = self.get_part_by_category(category_id)
        if not isinstance(part, SubcomponentPart) or not part.original_part_id:
            return None
        return self._state.part_details.get(part.original_part_id)

    def get_assembly_parts(self, assembly_id: PartId) -> list[AssemblyMember]:
        """
        Slots as the assembly part itself declares them. Part ids come from
        that declaration, not from the live membership record; read
        `assemblies[assembly_id]` for the synthesized instance ids.
        """
        assembly = self._state.part_details.get(assembly_id)
        if not isinstance(assembly, AssemblyPart):
            return []
        return [
            AssemblyMember(
                category_id=config.category_id,
                part=self._state.part_details.get(config.part_id),
                is_replaceable=config.is_replaceable,
            )
            for config in assembly.subcomponents
        ]

    def get_replacement_options(self, category_id: CategoryId) -> list[SubcomponentPart]:
        """Loose catalog subcomponents that could go into a slot."""
        if isinstance(self._catalog, MemoryCatalog):
            return self._catalog.replacement_parts(category_id)
        if self._catalog is None:
            return []
        return [
            p
            for p in self._catalog.parts_for_category(category_id)
            if isinstance(p, SubcomponentPart) and not p.parent_assembly_id
        ]

    # -- validation --

    def validate_build(self) -> ValidationResult:
        errors = check_compatibility(self._state, self._rules)
        errors.extend(check_assembly_integrity(self._state))
        # WARNING-severity entries are reported but never invalidate the build
        return ValidationResult(
            is_valid=not any(e.severity == "ERROR" for e in errors),
            errors=errors,
        )

    # -- persistence --

    def to_snapshot(self) -> dict:
        return state_to_dict(self._state)

    @classmethod
    def from_snapshot(
        cls,
        data: dict,
        catalog: Catalog | None = None,
        rules: Sequence[CompatibilityRule] = (),
        **kwargs,
    ) -> Builder:
        """Rebuild from a snapshot dict. Raises SnapshotParseError or VersionNotSupported."""
        return cls(catalog, rules, state=state_from_dict(data), **kwargs)

    def save(self, storage: BuildStorage, key: str | None = None) -> None:
        save_build(storage, self._state, key)

    @classmethod
    def load(
        cls,
        storage: BuildStorage,
        catalog: Catalog | None = None,
        rules: Sequence[CompatibilityRule] = (),
        *,
        key: str | None = None,
        **kwargs,
    ) -> Builder:
        """Restore a saved build, or start empty if none is stored."""
        state = load_build(storage, key)
        if state is None:
            logger.info("builder: no saved build, starting empty")
        return cls(catalog, rules, state=state, **kwargs)


def check_assembly_integrity(state: BuildState) -> list[ValidationError]:
    """
    - every owned subcomponent must point at an assembly that is present
    - every slot an assembly recorded must still hold one of its subcomponents
    """
    errors: list[ValidationError] = []

    for part in state.part_details.values():
        if isinstance(part, SubcomponentPart) and part.parent_assembly_id:
            parent = state.part_details.get(part.parent_assembly_id)
            if not isinstance(parent, AssemblyPart):
                errors.append(ValidationError(category_id=part.category_id, message="Orphaned subcomponent"))

    for assembly_id, config in state.assemblies.items():
        for sub in config.included_parts:
            occupant = state.occupant(sub.category_id)
            if not (isinstance(occupant, SubcomponentPart) and occupant.parent_assembly_id == assembly_id):
                errors.append(ValidationError(category_id=sub.category_id, message="Missing subcomponent"))

    return errors
