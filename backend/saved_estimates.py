"""
Saved estimate records: serialize an estimating session to JSON and load it back.

A record is versioned and validated strictly on the way in. Anything that
does not fit the session's system (wrong system, unknown fields, options the
system does not offer) is a failed load, reported as None. A load either
restores everything or nothing.
"""

from __future__ import annotations

import json
import logging
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from backend.assembly import assembly_from_dict
from backend.database import get_system
from backend.labor_equipment import LaborEquipmentState
from backend.penetrations import SheetMetalState
from backend.roof_estimator import RoofMeasurements
from backend.session import EstimatorSession

logger = logging.getLogger(__name__)

SAVE_FORMAT_VERSION = 1

Price = Annotated[float, Field(ge=0, allow_inf_nan=False)]


class _Record(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid")


# ---------------------------------------------------------------------------
# Record schema
# ---------------------------------------------------------------------------

class MeasurementsRecord(_Record):
    roof_area_sqft: str = "0"
    wall_lf: str = "0"
    wall_height_ft: str = "0"
    base_flashing_lf: str = "0"
    horizontal_seam_lf: str = "0"
    vertical_seam_lf: str = "0"


class InsulationLayerRecord(_Record):
    thickness: str
    enabled: bool


class AssemblyRecord(_Record):
    deck_type: str
    vapor_barrier: str
    insulation_enabled: bool
    insulation_layers: list[InsulationLayerRecord]
    cover_board: str
    membrane_thickness: str
    attachment_method: str
    fastener_type: str
    insulation_fastener_length: str
    membrane_fastener_length: str
    plate_type: str
    membrane_plate_type: str


class RateItemRecord(_Record):
    id: str
    label: str
    description: str = ""
    rate_type: Literal["per_sqft", "per_lf", "per_hour", "per_day", "flat"]
    rate: Price
    quantity: Price = 1
    enabled: bool = True


class LaborEquipmentRecord(_Record):
    labor_items: list[RateItemRecord]
    equipment_items: list[RateItemRecord]


class SheetMetalRecord(_Record):
    metal_type_id: str
    gauge_id: str
    lengths: dict[str, Price] = {}


class TaxProfitRecord(_Record):
    tax_enabled: bool
    tax_percent: Price
    profit_enabled: bool
    profit_percent: Price


class RowEditRecord(_Record):
    enabled: bool = True
    quantity: Price | None = None
    unit_price: Price | None = None


class CustomRowRecord(_Record):
    id: str
    name: str
    description: str = ""
    unit: str = ""
    quantity: Price
    unit_price: Price
    enabled: bool = True


class SectionEditsRecord(_Record):
    tax_profit: TaxProfitRecord | None = None
    rows: dict[str, RowEditRecord] = {}
    custom_rows: list[CustomRowRecord] = []


class BreakdownEditsRecord(_Record):
    materials: SectionEditsRecord | None = None
    penetrations: SectionEditsRecord | None = None
    labor: SectionEditsRecord | None = None
    equipment: SectionEditsRecord | None = None


class SavedEstimate(_Record):
    version: Literal[1]
    system: str
    name: str = ""
    measurements: MeasurementsRecord = MeasurementsRecord()
    custom_prices: dict[str, Price] = {}
    labor_equipment: LaborEquipmentRecord | None = None
    assembly: AssemblyRecord | None = None
    penetrations: dict[str, Annotated[int, Field(ge=0)]] = {}
    sheet_metal: SheetMetalRecord | None = None
    breakdown: BreakdownEditsRecord | None = None


# ---------------------------------------------------------------------------
# Session <-> record
# ---------------------------------------------------------------------------

def to_record(session: EstimatorSession) -> SavedEstimate:
    payload = {
        "version": SAVE_FORMAT_VERSION,
        "system": session.system_id,
        "name": session.name,
        "measurements": session.measurements.to_strings(),
        "custom_prices": dict(session.prices.user_edited),
        "labor_equipment": session.labor_equipment.to_dict(),
        "assembly": session.assembly.to_dict() if session.assembly else None,
        "penetrations": dict(session.penetrations),
        "sheet_metal": session.sheet_metal.to_dict(),
        "breakdown": session.breakdown_edits or None,
    }
    # strict validation is done on the JSON form, same as a record read back from storage
    return SavedEstimate.model_validate_json(json.dumps(payload))


def serialize_estimate(session: EstimatorSession) -> str:
    return to_record(session).model_dump_json()


def restore_session(
    record: SavedEstimate,
    persisted_prices: dict | None = None,
    **session_kwargs,
) -> EstimatorSession:
    """
    Rebuild a session from a validated record.

    Raises ValueError / KeyError when the record does not fit its system;
    deserialize_estimate() has already screened records it returns.
    """
    system = get_system(record.system)
    session = EstimatorSession(system.id, persisted_prices, **session_kwargs)
    session.name = record.name
    session.measurements = RoofMeasurements.from_raw(record.measurements.model_dump())

    if system.kind == "single-ply":
        if record.assembly is None:
            raise ValueError(f"{system.id} record has no assembly")
        session.assembly = assembly_from_dict(system, record.assembly.model_dump())
    elif record.assembly is not None:
        raise ValueError(f"{system.id} does not take an assembly")

    for product_id, price in record.custom_prices.items():
        if product_id not in system.products:
            logger.warning(f"Dropping saved price for unknown product {system.id}/{product_id}")
            continue
        session.prices.edit(product_id, price)

    if record.labor_equipment is not None:
        session.labor_equipment = LaborEquipmentState.from_dict(record.labor_equipment.model_dump())

    for penetration_id, count in record.penetrations.items():
        session.set_penetration_count(penetration_id, count)

    if record.sheet_metal is not None:
        sheet_metal = SheetMetalState()
        sheet_metal.set_metal_type(record.sheet_metal.metal_type_id)
        sheet_metal.set_gauge(record.sheet_metal.gauge_id)
        for profile_id, length in record.sheet_metal.lengths.items():
            sheet_metal.set_length(profile_id, length)
        session.sheet_metal = sheet_metal

    if record.breakdown is not None:
        session.breakdown_edits = record.breakdown.model_dump(exclude_none=True)
        # exclude_none also drops unedited quantity/price, which reads as "keep computed"
    return session


def deserialize_estimate(raw: str | bytes, expected_system: str) -> SavedEstimate | None:
    """Parse and screen a saved record. None means the load failed; nothing is restored."""
    try:
        record = SavedEstimate.model_validate_json(raw)
    except ValidationError as exc:
        logger.info(f"Saved estimate rejected: {exc.error_count()} validation error(s)")
        return None

    if record.system != expected_system:
        logger.info(f"Saved estimate is for {record.system}, expected {expected_system}")
        return None

    try:
        restore_session(record).compute()
    except (ValueError, KeyError, TypeError) as exc:
        logger.info(f"Saved estimate does not fit {record.system}: {exc}")
        return None
    return record
