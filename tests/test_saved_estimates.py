"""
Saved estimate tests - serialize a session, load it back, reject bad records.
"""

import json

import pytest

from backend.breakdown import BreakdownRow
from backend.saved_estimates import (
    SavedEstimate,
    deserialize_estimate,
    restore_session,
    serialize_estimate,
    to_record,
)


@pytest.fixture
def edited_session(tpo_session):
    """A Carlisle session with something changed in every part of the record."""
    tpo_session.name = "Warehouse 4 reroof"
    tpo_session.assembly.add_insulation_layer("1.5")
    tpo_session.assembly.set_attachment_method("mechanically-attached")
    tpo_session.assembly.set_fastener_length("insulation", "6in")
    tpo_session.prices.edit("membrane-60mil", 900)
    tpo_session.labor_equipment.set_rate("tpo-labor-membrane", 1.4)
    tpo_session.set_penetration_count("curb-small", 2)
    tpo_session.sheet_metal.set_metal_type("aluminum")
    tpo_session.sheet_metal.set_length("drip-edge", 350)

    breakdown = tpo_session.compute().breakdown
    breakdown.section("materials").set_tax(True)
    breakdown.section("materials").set_enabled("acc-coverstrip", False)
    breakdown.section("equipment").add_row(BreakdownRow("dumpster", "Dumpster", quantity=2, unit_price=525))
    tpo_session.capture_breakdown(breakdown)
    return tpo_session


# =============================================================================
# Round trip
# =============================================================================

def test_round_trip_restores_everything(edited_session):
    expected = edited_session.compute()
    record = deserialize_estimate(serialize_estimate(edited_session), "carlisle-tpo")
    assert record is not None

    restored = restore_session(record)
    assert restored.name == "Warehouse 4 reroof"
    assert restored.assembly == edited_session.assembly
    assert restored.measurements == edited_session.measurements
    assert restored.prices.user_edited == {"membrane-60mil": 900}
    assert restored.penetrations == {"curb-small": 2}
    assert restored.sheet_metal == edited_session.sheet_metal
    assert restored.labor_equipment.get_item("tpo-labor-membrane").rate == 1.4

    result = restored.compute()
    assert result.dropped_edits == []
    assert result.breakdown.grand_total == pytest.approx(expected.breakdown.grand_total)
    assert not result.breakdown.section("materials").get_row("acc-coverstrip").enabled
    assert result.breakdown.section("equipment").get_row("dumpster").custom


def test_measurements_stored_as_strings(tpo_session):
    record = to_record(tpo_session)
    assert record.version == 1
    assert record.measurements.roof_area_sqft == "10000.0"
    assert record.measurements.base_flashing_lf == "400.0"


def test_coating_round_trip(coating_session, record_body):
    coating_session.prices.edit("404", 179)
    body = record_body(coating_session)
    assert body["assembly"] is None

    record = deserialize_estimate(json.dumps(body), "karnak-metal-kynar")
    restored = restore_session(record)
    assert restored.assembly is None
    assert restored.compute().estimate == coating_session.compute().estimate


def test_persisted_prices_sit_under_restored_edits(edited_session):
    record = to_record(edited_session)
    restored = restore_session(record, persisted_prices={"membrane-60mil": 1100, "acc-caulk": 9})
    result = restored.compute()
    prices = {item.product.id: item.unit_price for item in result.estimate.line_items}
    assert prices["membrane-60mil"] == 900
    assert restored.prices.persisted["acc-caulk"] == 9


# =============================================================================
# Rejected records
# =============================================================================

def _raw(body):
    return json.dumps(body)


def test_wrong_system_rejected(edited_session):
    assert deserialize_estimate(serialize_estimate(edited_session), "gaf-tpo") is None


def test_malformed_json_rejected():
    assert deserialize_estimate("{not json", "carlisle-tpo") is None
    assert deserialize_estimate("", "carlisle-tpo") is None


def test_unknown_version_rejected(tpo_session, record_body):
    body = record_body(tpo_session)
    body["version"] = 2
    assert deserialize_estimate(_raw(body), "carlisle-tpo") is None


def test_extra_field_rejected(tpo_session, record_body):
    body = record_body(tpo_session)
    body["notes"] = "call the GC"
    assert deserialize_estimate(_raw(body), "carlisle-tpo") is None

    body = record_body(tpo_session)
    body["assembly"]["color"] = "white"
    assert deserialize_estimate(_raw(body), "carlisle-tpo") is None


def test_wrong_types_rejected(tpo_session, record_body):
    body = record_body(tpo_session)
    body["measurements"]["roof_area_sqft"] = 10000
    assert deserialize_estimate(_raw(body), "carlisle-tpo") is None

    body = record_body(tpo_session)
    body["custom_prices"] = {"membrane-60mil": -5}
    assert deserialize_estimate(_raw(body), "carlisle-tpo") is None

    body = record_body(tpo_session)
    body["penetrations"] = {"pipe-1-3": -1}
    assert deserialize_estimate(_raw(body), "carlisle-tpo") is None


@pytest.mark.parametrize("field,value", [
    ("deck_type", "granite"),
    ("cover_board", "securock-half"),      # GAF-only board
    ("insulation_fastener_length", "9in"),
    ("membrane_thickness", "100mil"),
])
def test_options_not_offered_rejected(tpo_session, record_body, field, value):
    body = record_body(tpo_session)
    body["assembly"][field] = value
    assert deserialize_estimate(_raw(body), "carlisle-tpo") is None


def test_assembly_presence_must_match_system(tpo_session, coating_session, record_body):
    tpo = record_body(tpo_session)
    tpo["assembly"] = None
    assert deserialize_estimate(_raw(tpo), "carlisle-tpo") is None

    coating = record_body(coating_session)
    coating["assembly"] = record_body(tpo_session)["assembly"]
    assert deserialize_estimate(_raw(coating), "karnak-metal-kynar") is None


def test_unknown_metal_rejected(tpo_session, record_body):
    body = record_body(tpo_session)
    body["sheet_metal"]["metal_type_id"] = "titanium"
    assert deserialize_estimate(_raw(body), "carlisle-tpo") is None


def test_duplicate_rate_ids_rejected(tpo_session, record_body):
    body = record_body(tpo_session)
    labor = body["labor_equipment"]["labor_items"]
    labor.append(dict(labor[0]))
    assert deserialize_estimate(_raw(body), "carlisle-tpo") is None


def test_stale_custom_price_dropped_not_fatal(tpo_session, record_body):
    body = record_body(tpo_session)
    body["custom_prices"] = {"membrane-90mil": 1200, "acc-caulk": 9.5}
    record = deserialize_estimate(_raw(body), "carlisle-tpo")
    assert record is not None
    assert restore_session(record).prices.user_edited == {"acc-caulk": 9.5}


def test_minimal_record_uses_defaults():
    record = SavedEstimate.model_validate_json(json.dumps({"version": 1, "system": "karnak-metal-kynar"}))
    session = restore_session(record)
    assert session.measurements.roof_area_sqft == 0
    assert session.penetrations == {}
    assert session.compute().breakdown.grand_total >= 0
