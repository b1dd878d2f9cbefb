"""
Kernel test fixtures.

A two-slot "bcg" assembly (bolt + carrier) backed by a fixture catalog,
plus a few standalone and replacement parts.
"""

import pytest

from sauron.kernel.catalog import MemoryCatalog
from sauron.kernel.reducer import empty_state
from sauron.kernel.types import (
    AssemblyPart,
    StandalonePart,
    SubcomponentConfig,
    SubcomponentPart,
)


@pytest.fixture
def bcg():
    return AssemblyPart(
        id="bcg",
        name="Bolt Carrier Group",
        category_id="bcg-category",
        price=129.99,
        subcomponents=[
            SubcomponentConfig(category_id="bolt", part_id="bolt-mil-spec", is_replaceable=True),
            SubcomponentConfig(category_id="carrier", part_id="carrier-mil-spec", is_replaceable=False),
        ],
    )


@pytest.fixture
def bolt_template():
    return SubcomponentPart(
        id="bolt-mil-spec",
        name="Mil-Spec Bolt",
        category_id="bolt",
        price=39.99,
        is_replaceable=False,
        parent_assembly_id="bcg",
    )


@pytest.fixture
def carrier_template():
    return SubcomponentPart(
        id="carrier-mil-spec",
        name="Mil-Spec Carrier",
        category_id="carrier",
        price=49.99,
        is_replaceable=True,
        parent_assembly_id="bcg",
    )


@pytest.fixture
def enhanced_bolt():
    return SubcomponentPart(
        id="bolt-enhanced",
        name="Enhanced Bolt",
        category_id="bolt",
        price=79.99,
        is_replaceable=True,
    )


@pytest.fixture
def nitride_bolt():
    return SubcomponentPart(
        id="bolt-nitride",
        name="Nitride Bolt",
        category_id="bolt",
        price=59.99,
        is_replaceable=True,
    )


@pytest.fixture
def barrel():
    return StandalonePart(id="barrel-16", name='16" 5.56 NATO Barrel', category_id="barrel", price=199.99)


@pytest.fixture
def catalog(bcg, bolt_template, carrier_template, enhanced_bolt, nitride_bolt, barrel):
    return MemoryCatalog([bcg, bolt_template, carrier_template, enhanced_bolt, nitride_bolt, barrel])


@pytest.fixture
def empty():
    return empty_state()
