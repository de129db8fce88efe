"""
Assembly model and insulation stack tests.

Tests:
1-6.   Layer slot operations (add / remove / thickness / master flag)
7-10.  Option validation against the system catalog
11-13. Fastener length parsing
14-19. Insulation summary (thickness, R-value, skipped layers)
20-22. Catalog validation
"""

import pytest

from backend.assembly import (
    AUTO,
    MAX_INSULATION_LAYERS,
    Explicit,
    InsulationLayer,
    assembly_from_dict,
    default_assembly,
    parse_fastener_length,
)
from backend.database import (
    Category,
    ROOF_SYSTEMS,
    SINGLE_PLY_CATEGORIES,
    _build_products,
    get_system,
)
from backend.insulation import summarize_insulation


# =============================================================================
# Layer slots
# =============================================================================

def test_default_assembly(carlisle):
    """New assembly starts with one 2.0" layer and auto fastener lengths."""
    assembly = default_assembly(carlisle)
    assert len(assembly.insulation_layers) == MAX_INSULATION_LAYERS
    assert assembly.insulation_layers[0] == InsulationLayer("2.0", True)
    assert all(not layer.enabled for layer in assembly.insulation_layers[1:])
    assert assembly.fastener_type == "sfs-dekfast"
    assert assembly.insulation_fastener_length == AUTO
    assert assembly.membrane_fastener_length == AUTO
    assert not assembly.is_mechanically_attached


def test_add_layer_fills_first_free_slot(carlisle):
    assembly = default_assembly(carlisle)
    assert assembly.add_insulation_layer("1.5") == 1
    assert assembly.add_insulation_layer("1.5") == 2
    assert assembly.add_insulation_layer("1.0") == 3
    assert assembly.add_insulation_layer("1.0") is None


def test_remove_layer_keeps_other_slots(carlisle):
    """Removing a middle layer never shifts the layers after it."""
    assembly = default_assembly(carlisle)
    assembly.add_insulation_layer("1.5")
    assembly.add_insulation_layer("3.0")
    assembly.remove_insulation_layer(1)
    assert assembly.insulation_layers[1] == InsulationLayer("none", False)
    assert assembly.insulation_layers[2] == InsulationLayer("3.0", True)
    # next add reuses the freed slot
    assert assembly.add_insulation_layer("1.0") == 1


def test_set_thickness_none_disables_slot(carlisle):
    assembly = default_assembly(carlisle)
    assembly.set_layer_thickness(0, "none")
    assert assembly.insulation_layers[0] == InsulationLayer("none", False)


def test_layer_index_out_of_range(carlisle):
    assembly = default_assembly(carlisle)
    with pytest.raises(ValueError):
        assembly.remove_insulation_layer(MAX_INSULATION_LAYERS)


def test_master_flag_preserves_layers(carlisle):
    """Switching insulation off and on brings back the same stack."""
    assembly = default_assembly(carlisle)
    assembly.add_insulation_layer("1.5")
    before = list(assembly.insulation_layers)

    assembly.set_insulation_enabled(False)
    off = summarize_insulation(assembly.insulation_layers, assembly.insulation_enabled, 5.6)
    assert off.total_thickness == 0
    assert off.total_r_value == 0
    assert assembly.insulation_layers == before

    assembly.set_insulation_enabled(True)
    on = summarize_insulation(assembly.insulation_layers, assembly.insulation_enabled, 5.6)
    assert on.total_thickness == pytest.approx(3.5)


# =============================================================================
# Option validation
# =============================================================================

def test_rejects_unknown_options(carlisle):
    assembly = default_assembly(carlisle)
    with pytest.raises(ValueError):
        assembly.set_deck_type("granite")
    with pytest.raises(ValueError):
        assembly.set_membrane_thickness("100mil")
    with pytest.raises(ValueError):
        assembly.set_attachment_method("ballasted")
    with pytest.raises(ValueError):
        assembly.add_insulation_layer("9.9")


def test_cover_board_options_are_per_system(carlisle, gaf):
    """Securock is a GAF option only."""
    assembly = default_assembly(gaf)
    assembly.set_cover_board(gaf, "securock-half")
    assert assembly.cover_board == "securock-half"
    with pytest.raises(ValueError):
        default_assembly(carlisle).set_cover_board(carlisle, "securock-half")


def test_fastener_length_must_be_stocked(carlisle):
    assembly = default_assembly(carlisle)
    assembly.set_fastener_length("insulation", "5in")
    assert assembly.insulation_fastener_length == Explicit(5.0)
    with pytest.raises(ValueError):
        assembly.set_fastener_length("insulation", "9in")
    with pytest.raises(ValueError):
        assembly.set_fastener_length("membrane", "4in")
    with pytest.raises(ValueError):
        assembly.set_fastener_length("deck", "auto")


def test_assembly_dict_round_trip(carlisle):
    assembly = default_assembly(carlisle)
    assembly.add_insulation_layer("1.5")
    assembly.set_attachment_method("mechanically-attached")
    assembly.set_fastener_length("insulation", "6in")
    restored = assembly_from_dict(carlisle, assembly.to_dict())
    assert restored == assembly


# =============================================================================
# Fastener length parsing
# =============================================================================

def test_parse_auto():
    assert parse_fastener_length("auto") is AUTO
    assert parse_fastener_length(" AUTO ") is AUTO
    assert str(AUTO) == "auto"


def test_parse_explicit():
    assert parse_fastener_length("4in") == Explicit(4.0)
    assert parse_fastener_length('3"') == Explicit(3.0)
    assert parse_fastener_length(2) == Explicit(2.0)
    assert str(Explicit(4.0)) == "4in"


@pytest.mark.parametrize("bad", ["", "long", "-2in", "0in", True, None])
def test_parse_rejects_garbage(bad):
    with pytest.raises(ValueError):
        parse_fastener_length(bad)


# =============================================================================
# Insulation summary
# =============================================================================

def test_single_layer_r_value():
    """2.0" polyiso at R-5.6/in is R-11.2."""
    summary = summarize_insulation([InsulationLayer("2.0", True)], True, 5.6)
    assert summary.total_thickness == pytest.approx(2.0)
    assert summary.total_r_value == pytest.approx(11.2)
    assert summary.layer_count == 1


def test_multi_layer_totals():
    layers = [
        InsulationLayer("2.0", True),
        InsulationLayer("none", False),
        InsulationLayer("1.5", True),
        InsulationLayer("none", False),
    ]
    summary = summarize_insulation(layers, True, 5.6)
    assert summary.total_thickness == pytest.approx(3.5)
    assert summary.total_r_value == pytest.approx(19.6)
    assert [layer.slot for layer in summary.active_layers] == [0, 2]


def test_disabled_layer_ignored():
    layers = [InsulationLayer("2.0", True), InsulationLayer("3.0", False)]
    assert summarize_insulation(layers, True, 5.6).total_thickness == pytest.approx(2.0)


def test_unparseable_thickness_contributes_zero():
    layers = [InsulationLayer("abc", True), InsulationLayer("1.0", True)]
    summary = summarize_insulation(layers, True, 5.6)
    assert summary.total_thickness == pytest.approx(1.0)
    assert summary.layer_count == 1


def test_master_flag_off_is_empty():
    summary = summarize_insulation([InsulationLayer("2.0", True)], False, 5.6)
    assert summary.active_layers == ()


def test_layer_label():
    summary = summarize_insulation([InsulationLayer("2.0", True)], True, 5.6)
    assert summary.active_layers[0].label == '2.0" Polyiso (R-11.2)'


# =============================================================================
# Catalog validation
# =============================================================================

def test_catalog_ids_unique_and_priced():
    for system in ROOF_SYSTEMS.values():
        for product in system.products.values():
            assert product.coverage > 0
            assert product.default_price >= 0
            assert product.category in system.categories


def test_catalog_rejects_bad_rows():
    row = ("x", "X", Category.MEMBRANE, "Roll", 1000, 10, "area", "")
    with pytest.raises(ValueError):
        _build_products([row, row], SINGLE_PLY_CATEGORIES)
    with pytest.raises(ValueError):
        _build_products([("y", "Y", Category.MEMBRANE, "Roll", 0, 10, "area", "")], SINGLE_PLY_CATEGORIES)
    with pytest.raises(ValueError):
        _build_products([("z", "Z", Category.MEMBRANE, "Roll", 10, -1, "area", "")], SINGLE_PLY_CATEGORIES)
    with pytest.raises(ValueError):
        _build_products([("w", "W", Category.PRIMER, "Pail", 10, 1, "area", "")], SINGLE_PLY_CATEGORIES)


def test_unknown_system():
    with pytest.raises(ValueError):
        get_system("firestone-epdm")
