"""
Sauron Kernel — Shared Types

Data classes used across the reducer, middleware, builder, and storage.
These are the contracts that bind the kernel together.

Parts are a closed union discriminated by `type`:
- STANDALONE   — selected and removed on its own
- ASSEMBLY     — pre-built bundle that declares one subcomponent per slot
- SUBCOMPONENT — constituent of an assembly, optionally swappable

Parts are frozen pydantic models. Everything else (build state, actions,
results) is a plain dataclass, like the rest of the kernel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter
from pydantic.alias_generators import to_camel

CategoryId = str
PartId = str

# Bump when the persisted snapshot shape changes
SNAPSHOT_VERSION = 1


# ---------------------------------------------------------------------------
# Action type registry
# ---------------------------------------------------------------------------

ACTION_TYPES: set[str] = {
    "part.add",
    "part.remove",
    "subcomponent.replace",
    "assembly.add",
    "build.clear",
}


# ---------------------------------------------------------------------------
# Part model
# ---------------------------------------------------------------------------

_MODEL_CONFIG = {
    "frozen": True,
    "populate_by_name": True,
    "alias_generator": to_camel,
}


class SubcomponentConfig(BaseModel):
    """Which subcomponent occupies a child slot of an assembly."""

    model_config = _MODEL_CONFIG

    category_id: CategoryId
    part_id: PartId
    is_replaceable: bool


class AssemblyConfig(BaseModel):
    """Live membership record for an assembly in the build."""

    model_config = _MODEL_CONFIG

    main_part_id: PartId
    included_parts: list[SubcomponentConfig] = Field(default_factory=list)


class BasePart(BaseModel):
    model_config = _MODEL_CONFIG

    id: PartId
    name: str
    category_id: CategoryId
    price: float = 0.0
    description: str | None = None


class StandalonePart(BasePart):
    type: Literal["STANDALONE"] = "STANDALONE"


class AssemblyPart(BasePart):
    type: Literal["ASSEMBLY"] = "ASSEMBLY"
    subcomponents: list[SubcomponentConfig] = Field(default_factory=list)


class SubcomponentPart(BasePart):
    type: Literal["SUBCOMPONENT"] = "SUBCOMPONENT"
    is_replaceable: bool = False
    parent_assembly_id: PartId | None = None
    original_part_id: PartId | None = None
    replacement_date: str | None = None  # ISO 8601 UTC


Part = Annotated[
    StandalonePart | AssemblyPart | SubcomponentPart,
    Field(discriminator="type"),
]

_PART_ADAPTER: TypeAdapter[Part] = TypeAdapter(Part)


def parse_part(data: Any) -> Part:
    """
    Coerce a part model or a JSON-like dict into the right Part variant.
    Accepts snake_case or camelCase keys. Raises pydantic.ValidationError.
    """
    if isinstance(data, BasePart):
        return data
    return _PART_ADAPTER.validate_python(data)


def dump_part(part: Part) -> dict[str, Any]:
    return part.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Build state
# ---------------------------------------------------------------------------


@dataclass
class BuildState:
    """
    The build aggregate.

    - selected_parts: category → part id currently occupying that slot
    - part_details: part id → Part (may hold entries no slot references,
      e.g. the predecessors of a replaced subcomponent)
    - assemblies: assembly part id → AssemblyConfig with synthesized ids
    """

    selected_parts: dict[CategoryId, PartId] = field(default_factory=dict)
    part_details: dict[PartId, Part] = field(default_factory=dict)
    assemblies: dict[PartId, AssemblyConfig] = field(default_factory=dict)

    def occupant(self, category_id: CategoryId) -> Part | None:
        part_id = self.selected_parts.get(category_id)
        if part_id is None:
            return None
        return self.part_details.get(part_id)

    def is_empty(self) -> bool:
        return not (self.selected_parts or self.part_details or self.assemblies)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": SNAPSHOT_VERSION,
            "selected_parts": dict(self.selected_parts),
            "part_details": {pid: dump_part(p) for pid, p in self.part_details.items()},
            "assemblies": {
                aid: cfg.model_dump(mode="json") for aid, cfg in self.assemblies.items()
            },
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> BuildState:
        return cls(
            selected_parts=dict(d.get("selected_parts", {})),
            part_details={pid: parse_part(p) for pid, p in d.get("part_details", {}).items()},
            assemblies={
                aid: AssemblyConfig.model_validate(cfg)
                for aid, cfg in d.get("assemblies", {}).items()
            },
        )


# ---------------------------------------------------------------------------
# Actions and results
# ---------------------------------------------------------------------------


@dataclass
class Action:
    """
    A requested state transition.
    The reducer reads `type`, `payload`, and `timestamp` (used to stamp
    replacements so the reducer itself never reads the clock).
    """

    type: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: str = ""


@dataclass
class Warning:
    """A non-fatal issue encountered during reduction."""

    code: str
    message: str
    details: dict[str, Any] | None = None


@dataclass
class ReduceResult:
    """
    Result of applying one action to a build state.
    The reducer never throws — it always returns one of these.
    On rejection `state` is the unchanged input.
    """

    state: BuildState
    applied: bool
    warnings: list[Warning] = field(default_factory=list)
    error: str | None = None


# ---------------------------------------------------------------------------
# Validation results
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """One problem found in a build. Data, not an exception."""

    category_id: CategoryId
    message: str
    severity: Literal["ERROR", "WARNING"] = "ERROR"


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)


@dataclass
class AssemblyMember:
    """One declared slot of an assembly, resolved against part_details."""

    category_id: CategoryId
    part: Part | None
    is_replaceable: bool


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def instance_id(assembly_id: PartId, category_id: CategoryId) -> PartId:
    """Id of the subcomponent instance an assembly places in a slot."""
    return f"{assembly_id}-{category_id}"


def now_iso() -> str:
    """Current UTC time as ISO 8601 string."""
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
