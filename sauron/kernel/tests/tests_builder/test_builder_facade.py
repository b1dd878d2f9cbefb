"""
Sauron Builder — Facade Tests

The builder owns one build, dispatches actions through the middleware
pipeline, and answers queries against the latest state.

Covers:
  - actions update state only when applied
  - basic assembly lifecycle through the facade
  - malformed assembly rejected by the default pipeline
  - selectors: get_part_by_category, is_part_replaceable,
    get_original_part, get_assembly_parts, get_replacement_options
  - clear_build from any state
  - strict mode from the constructor
"""

import pytest

from sauron.kernel.builder import Builder
from sauron.kernel.catalog import MemoryCatalog
from sauron.kernel.reducer import empty_state
from sauron.kernel.types import SubcomponentPart


@pytest.fixture
def builder(catalog):
    return Builder(catalog)


@pytest.fixture
def built(builder, bcg):
    r = builder.add_assembly(bcg)
    assert r.applied
    return builder


# ============================================================================
# Actions
# ============================================================================


class TestActions:
    def test_starts_empty(self, builder):
        assert builder.state == empty_state()
        assert builder.selected_parts == {}

    def test_basic_assembly_lifecycle(self, built):
        assert built.selected_parts == {
            "bcg-category": "bcg",
            "bolt": "bcg-bolt",
            "carrier": "bcg-carrier",
        }
        assert [c.part_id for c in built.assemblies["bcg"].included_parts] == ["bcg-bolt", "bcg-carrier"]

    def test_remove_assembly_restores_empty(self, built):
        r = built.remove_part("bcg-category")
        assert r.applied
        assert built.state == empty_state()

    def test_rejected_action_keeps_state_object(self, built):
        before = built.state
        r = built.remove_part("bolt")
        assert not r.applied
        assert built.state is before

    def test_malformed_assembly_dropped(self, builder, barrel):
        builder.add_part("barrel", barrel)
        before = builder.state.to_dict()
        r = builder.add_assembly({
            "id": "bcg",
            "type": "ASSEMBLY",
            "name": "Bolt Carrier Group",
            "category_id": "bcg-category",
            "subcomponents": [{"category_id": "bolt", "is_replaceable": True}],
        })
        assert not r.applied
        assert "INVALID_ASSEMBLY" in r.error
        assert builder.state.to_dict() == before

    def test_clear_build(self, built, barrel):
        built.add_part("barrel", barrel)
        r = built.clear_build()
        assert r.applied
        assert built.state == empty_state()
        built.clear_build()
        assert built.state == empty_state()

    def test_strict_mode(self, bcg, bolt_template):
        b = Builder(MemoryCatalog([bolt_template]), strict=True)
        r = b.add_assembly(bcg)
        assert not r.applied
        assert b.state == empty_state()

    def test_custom_middlewares_replace_defaults(self, catalog, bcg):
        seen = []

        def spy(state, action, next):
            seen.append(action.type)
            return next(state, action)

        b = Builder(catalog, middlewares=[spy])
        b.add_assembly(bcg)
        b.clear_build()
        assert seen == ["assembly.add", "build.clear"]


# ============================================================================
# Selectors
# ============================================================================


class TestSelectors:
    def test_get_part_by_category(self, built, bcg):
        assert built.get_part_by_category("bcg-category") == bcg
        assert built.get_part_by_category("bolt").id == "bcg-bolt"
        assert built.get_part_by_category("barrel") is None

    def test_is_part_replaceable(self, built, barrel):
        built.add_part("barrel", barrel)
        assert built.is_part_replaceable("bolt") is True
        assert built.is_part_replaceable("carrier") is False
        assert built.is_part_replaceable("barrel") is False
        assert built.is_part_replaceable("bcg-category") is False
        assert built.is_part_replaceable("stock") is False

    def test_get_original_part_none_before_replacement(self, built):
        assert built.get_original_part("bolt") is None
        assert built.get_original_part("stock") is None

    def test_get_original_part_follows_chain_root(self, built, enhanced_bolt, nitride_bolt):
        built.replace_subcomponent("bolt", enhanced_bolt)
        built.replace_subcomponent("bolt", nitride_bolt)
        original = built.get_original_part("bolt")
        assert original.id == "bcg-bolt"
        assert built.get_part_by_category("bolt").original_part_id == "bcg-bolt"

    def test_replacement_refused_on_fixed_slot(self, built):
        before = built.state
        r = built.replace_subcomponent(
            "carrier",
            SubcomponentPart(id="carrier-lite", name="Lite Carrier", category_id="carrier", is_replaceable=True),
        )
        assert not r.applied
        assert built.state == before

    def test_get_assembly_parts_reads_declaration(self, built, bcg):
        members = built.get_assembly_parts("bcg")
        assert [(m.category_id, m.is_replaceable) for m in members] == [("bolt", True), ("carrier", False)]
        # declared ids are catalog ids, which the build never stores
        assert [m.part for m in members] == [None, None]

    def test_get_assembly_parts_unknown_or_not_assembly(self, built):
        assert built.get_assembly_parts("nope") == []
        assert built.get_assembly_parts("bcg-bolt") == []

    def test_get_replacement_options(self, built):
        options = built.get_replacement_options("bolt")
        assert [p.id for p in options] == ["bolt-enhanced", "bolt-nitride"]
        assert built.get_replacement_options("carrier") == []

    def test_get_replacement_options_without_catalog(self):
        assert Builder().get_replacement_options("bolt") == []
