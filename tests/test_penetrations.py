"""
Penetrations & additions tests - kit materials, sheet metal pricing, labor time.
"""

import pytest

from backend.penetrations import (
    FLASHING_PROFILES,
    METAL_TYPES,
    PENETRATION_CATEGORIES,
    PENETRATION_TYPES,
    SheetMetalState,
    estimate_additions,
    estimate_penetrations,
    estimate_sheet_metal,
    format_labor_time,
    get_flashing_price_per_lf,
    penetrations_by_category,
)


# =============================================================================
# Penetration catalog
# =============================================================================

def test_every_type_listed_under_its_category():
    grouped = penetrations_by_category()
    assert list(grouped) == list(PENETRATION_CATEGORIES)
    assert sum(len(types) for types in grouped.values()) == len(PENETRATION_TYPES)
    assert all(types for types in grouped.values())


def test_every_type_has_materials_and_labor():
    for pen in PENETRATION_TYPES.values():
        assert pen.materials
        assert pen.labor_minutes > 0
        assert all(m.qty_per_unit > 0 and m.unit_price >= 0 for m in pen.materials)


# =============================================================================
# Penetration estimate
# =============================================================================

def test_small_pipe_kit_for_four_pipes():
    """Four 1"-3" pipes: fractional primer/caulk round up within the type."""
    estimate = estimate_penetrations({"pipe-1-3": 4})
    quantities = {m.material: m.quantity for m in estimate.materials}

    assert quantities['TPO Pipe Boot (1"-6")'] == 4
    assert quantities["TPO Primer"] == 1          # 4 x 0.25
    assert quantities["Sealant Caulk"] == 2       # 4 x 0.5
    assert estimate.total_material_cost == pytest.approx(112 + 34 + 32 + 24 + 18)
    assert estimate.total_labor_minutes == 120


def test_rounding_is_per_type_not_pooled():
    estimate = estimate_penetrations({"pipe-1-3": 1, "plumbing-vent-stack": 1})
    primer = [m for m in estimate.materials if m.material == "TPO Primer"]
    assert [m.quantity for m in primer] == [1, 1]
    assert len({m.row_id for m in estimate.materials}) == len(estimate.materials)


@pytest.mark.parametrize("counts", [
    {"unknown-thing": 3},
    {"pipe-1-3": 0},
    {"pipe-1-3": -2},
    {"pipe-1-3": "3"},
    {},
])
def test_skipped_counts(counts):
    estimate = estimate_penetrations(counts)
    assert estimate.materials == ()
    assert estimate.total_material_cost == 0
    assert estimate.total_labor_minutes == 0
    assert estimate.counts == {}


# =============================================================================
# Sheet metal
# =============================================================================

def test_price_scales_with_developed_width():
    coping = FLASHING_PROFILES["coping-cap"]          # 12" girth
    drip = FLASHING_PROFILES["drip-edge"]             # 4" girth
    assert get_flashing_price_per_lf("galvanized-steel", "24ga", coping) == pytest.approx(5.25)
    assert get_flashing_price_per_lf("galvanized-steel", "24ga", drip) == pytest.approx(1.75)
    assert get_flashing_price_per_lf("copper", "20oz", drip) == pytest.approx(7.0)


def test_unknown_metal_or_gauge_prices_zero():
    coping = FLASHING_PROFILES["coping-cap"]
    assert get_flashing_price_per_lf("titanium", "24ga", coping) == 0
    assert get_flashing_price_per_lf("aluminum", "24ga", coping) == 0


def test_metal_switch_resets_gauge():
    state = SheetMetalState()
    state.set_metal_type("aluminum")
    assert state.gauge_id == METAL_TYPES["aluminum"].default_gauge_id == "040"
    with pytest.raises(ValueError):
        state.set_gauge("24ga")
    state.set_gauge("063")
    assert state.gauge_id == "063"


def test_set_length_zero_removes_profile():
    state = SheetMetalState()
    state.set_length("coping-cap", 100)
    state.set_length("coping-cap", 0)
    assert state.lengths == {}
    with pytest.raises(ValueError):
        state.set_length("gutter", 10)


def test_sheet_metal_sorted_by_cost():
    state = SheetMetalState()
    state.set_length("parapet-cap", 10)     # 10 x 7.00 = 70
    state.set_length("drip-edge", 200)      # 200 x 1.75 = 350
    state.set_length("coping-cap", 100)     # 100 x 5.25 = 525
    estimate = estimate_sheet_metal(state)

    assert [item.profile_id for item in estimate.items] == ["coping-cap", "drip-edge", "parapet-cap"]
    assert estimate.total_material_cost == pytest.approx(945)
    assert estimate.total_labor_minutes == 80 + 100 + 10
    assert estimate.metal_type == "Galvanized Steel"
    assert estimate.gauge == "24 Gauge"


# =============================================================================
# Combined additions
# =============================================================================

def test_additions_roll_up():
    state = SheetMetalState()
    state.set_length("coping-cap", 100)
    additions = estimate_additions({"pipe-1-3": 4}, state)
    assert additions.total_material_cost == pytest.approx(220 + 525)
    assert additions.total_labor_minutes == 200
    assert additions.labor_time == "3 hr 20 min"
    assert additions.to_dict()["sheet_metal"]["items"][0]["id"] == "sm-coping-cap"


def test_no_additions():
    additions = estimate_additions(None)
    assert additions.total_material_cost == 0
    assert additions.labor_time == "0 min"


@pytest.mark.parametrize("minutes,text", [
    (0, "0 min"),
    (45, "45 min"),
    (120, "2 hr"),
    (90, "1 hr 30 min"),
    (59.6, "1 hr"),
])
def test_format_labor_time(minutes, text):
    assert format_labor_time(minutes) == text
