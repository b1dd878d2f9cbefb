"""
Sauron Kernel — Sample Catalog

A small AR-15 catalog: a mil-spec bolt carrier group assembly with its five
subcomponents, a barrel and handguard, and aftermarket bolt/carrier
replacements. Plus the two rules the builder ships with. Used by tests and
demos.
"""

from __future__ import annotations

import re

from sauron.kernel.catalog import MemoryCatalog
from sauron.kernel.compatibility import CompatibilityRule, CompatibleWith
from sauron.kernel.types import (
    AssemblyPart,
    Part,
    StandalonePart,
    SubcomponentConfig,
    SubcomponentPart,
)

BCG_ASSEMBLY = AssemblyPart(
    id="bcg-complete-mil-spec",
    name="Complete Mil-Spec BCG",
    category_id="bcg",
    price=129.99,
    description="Military specification bolt carrier group",
    subcomponents=[
        SubcomponentConfig(category_id="bolt", part_id="bcg-bolt-mil-spec", is_replaceable=True),
        SubcomponentConfig(category_id="carrier", part_id="bcg-carrier-mil-spec", is_replaceable=True),
        SubcomponentConfig(category_id="gas-key", part_id="bcg-gas-key-mil-spec", is_replaceable=True),
        SubcomponentConfig(category_id="firing-pin", part_id="bcg-firing-pin-mil-spec", is_replaceable=True),
        SubcomponentConfig(category_id="cam-pin", part_id="bcg-cam-pin-mil-spec", is_replaceable=True),
    ],
)


def _bcg_sub(category_id: str, name: str, price: float) -> SubcomponentPart:
    return SubcomponentPart(
        id=f"bcg-{category_id}-mil-spec",
        name=name,
        category_id=category_id,
        price=price,
        is_replaceable=True,
        parent_assembly_id=BCG_ASSEMBLY.id,
    )


BCG_SUBCOMPONENTS: list[SubcomponentPart] = [
    _bcg_sub("bolt", "Mil-Spec Bolt", 39.99),
    _bcg_sub("carrier", "Mil-Spec Carrier", 49.99),
    _bcg_sub("gas-key", "Mil-Spec Gas Key", 14.99),
    _bcg_sub("firing-pin", "Mil-Spec Firing Pin", 9.99),
    _bcg_sub("cam-pin", "Mil-Spec Cam Pin", 7.99),
]

STANDALONE_PARTS: list[StandalonePart] = [
    StandalonePart(
        id="barrel-16-556",
        name='16" 5.56 NATO Barrel',
        category_id="barrel",
        price=199.99,
        description="16 inch chrome-lined barrel for 5.56 NATO",
    ),
    StandalonePart(
        id="handguard-15-mlok",
        name='15" M-LOK Handguard',
        category_id="handguard",
        price=159.99,
        description="15 inch free-float M-LOK handguard",
    ),
]

REPLACEMENT_PARTS: list[SubcomponentPart] = [
    SubcomponentPart(
        id="bcg-bolt-enhanced",
        name="Enhanced Bolt",
        category_id="bolt",
        price=79.99,
        is_replaceable=True,
        description="Enhanced bolt with improved material and coating",
    ),
    SubcomponentPart(
        id="bcg-carrier-lightweight",
        name="Lightweight Carrier",
        category_id="carrier",
        price=89.99,
        is_replaceable=True,
        description="Lightweight carrier for competition use",
    ),
]

# Handguard must leave this much barrel exposed, in inches
HANDGUARD_CLEARANCE = 0.75

_LENGTH = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*"')


def part_length(part: Part) -> float | None:
    """Length in inches from a name like '16" 5.56 NATO Barrel'."""
    m = _LENGTH.match(part.name)
    return float(m.group(1)) if m else None


def handguard_fits_barrel(barrel: Part, handguard: Part) -> bool:
    barrel_len = part_length(barrel)
    handguard_len = part_length(handguard)
    if barrel_len is None or handguard_len is None:
        return True  # unknown lengths can't be judged
    return handguard_len <= barrel_len - HANDGUARD_CLEARANCE


def bolt_matches_carrier(bolt: Part, carrier: Part) -> bool:
    """Mil-spec bolts go with mil-spec carriers, aftermarket with aftermarket."""
    return ("mil-spec" in bolt.name.lower()) == ("mil-spec" in carrier.name.lower())


DEFAULT_RULES: tuple[CompatibilityRule, ...] = (
    CompatibilityRule(
        category_id="barrel",
        compatible_with=(CompatibleWith(category_id="handguard", condition=handguard_fits_barrel),),
    ),
    CompatibilityRule(
        category_id="bolt",
        compatible_with=(CompatibleWith(category_id="carrier", condition=bolt_matches_carrier),),
    ),
)


def sample_parts() -> list[Part]:
    return [BCG_ASSEMBLY, *BCG_SUBCOMPONENTS, *STANDALONE_PARTS, *REPLACEMENT_PARTS]


def sample_catalog() -> MemoryCatalog:
    return MemoryCatalog(sample_parts())
