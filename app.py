"""
Roof Assembly Estimator - FastAPI Web Application

JSON API over the estimating engine. Every request builds its own session
from the posted estimate record; the price database and saved estimates are
the only state shared between requests.

Run with: python app.py
Or:       uvicorn app:app --reload
Opens at: http://127.0.0.1:8000
"""

import logging
import sys
from pathlib import Path
from uuid import uuid4

# Ensure project directory is on sys.path for local module imports
_BASE_DIR = Path(__file__).resolve().parent
if str(_BASE_DIR) not in sys.path:
    sys.path.insert(0, str(_BASE_DIR))

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field, ValidationError

load_dotenv()

from backend.config import settings
from backend.database import (
    ATTACHMENT_METHODS,
    DECK_TYPES,
    INSULATION_PLATE_TYPES,
    INSULATION_THICKNESSES,
    MEMBRANE_PLATE_TYPES,
    MEMBRANE_THICKNESSES,
    ROOF_SYSTEMS,
    RoofSystem,
    get_system,
)
from backend.assembly import default_assembly
from backend.export import export_csv
from backend.fasteners import INSULATION_LENGTHS_IN, MEMBRANE_LENGTHS_IN
from backend.penetrations import FLASHING_PROFILES, METAL_TYPES, penetrations_by_category
from backend.pricing import JsonPriceStore, PriceOverrideState, load_persisted_prices, resolve_price
from backend.saved_estimates import SavedEstimate, deserialize_estimate, restore_session

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Roof Assembly Estimator")

# Saved estimate records (serialized JSON), keyed by id
SAVED_ESTIMATES: dict[str, str] = {}


def get_price_store() -> JsonPriceStore:
    return JsonPriceStore(settings.PRICE_DB_PATH)


def _system_or_404(system_id: str) -> RoofSystem:
    try:
        return get_system(system_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


async def _read_record(request: Request) -> SavedEstimate:
    raw = await request.body()
    try:
        return SavedEstimate.model_validate_json(raw)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_input=False))


def _session_for(record: SavedEstimate, store: JsonPriceStore):
    try:
        system = get_system(record.system)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    persisted = load_persisted_prices(store, system)
    try:
        return restore_session(record, persisted)
    except (ValueError, KeyError) as e:
        raise HTTPException(status_code=422, detail=f"Estimate does not fit {system.id}: {e}")


def _compute(session):
    try:
        return session.compute()
    except Exception as e:
        logger.error(f"Estimate FAILED for {session.system_id}: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Estimate calculation failed")


# ---------------------------------------------------------------------------
# Systems & catalog
# ---------------------------------------------------------------------------

def _system_options(system: RoofSystem) -> dict:
    if system.kind != "single-ply":
        return {}
    return {
        "deck_types": DECK_TYPES,
        "vapor_barriers": ["none", *system.vapor_barriers],
        "insulation_thicknesses": [t for t, _price in INSULATION_THICKNESSES],
        "cover_boards": ["none", *system.cover_boards],
        "membrane_thicknesses": MEMBRANE_THICKNESSES,
        "attachment_methods": ATTACHMENT_METHODS,
        "fastener_types": system.fastener_types,
        "insulation_screw_lengths": list(INSULATION_LENGTHS_IN),
        "membrane_screw_lengths": list(MEMBRANE_LENGTHS_IN),
        "plate_types": list(INSULATION_PLATE_TYPES),
        "membrane_plate_types": list(MEMBRANE_PLATE_TYPES),
        "default_assembly": default_assembly(system).to_dict(),
    }


@app.get("/api/systems")
def list_systems():
    return {
        "default_system": settings.DEFAULT_SYSTEM,
        "systems": [
            {
                "id": system.id,
                "name": system.name,
                "manufacturer": system.manufacturer,
                "kind": system.kind,
                "categories": [c.value for c in system.categories],
                "options": _system_options(system),
            }
            for system in ROOF_SYSTEMS.values()
        ],
        "penetrations": {
            category: [
                {"id": p.id, "name": p.name, "size": p.size_label, "labor_minutes": p.labor_minutes}
                for p in types
            ]
            for category, types in penetrations_by_category().items()
        },
        "sheet_metal": {
            "metal_types": [
                {"id": m.id, "name": m.name, "default_gauge": m.default_gauge_id,
                 "gauges": [{"id": g.id, "label": g.label} for g in m.gauges]}
                for m in METAL_TYPES.values()
            ],
            "profiles": [{"id": p.id, "name": p.name} for p in FLASHING_PROFILES.values()],
        },
    }


@app.get("/api/systems/{system_id}/catalog")
def system_catalog(system_id: str, store: JsonPriceStore = Depends(get_price_store)):
    system = _system_or_404(system_id)
    prices = PriceOverrideState(persisted=load_persisted_prices(store, system))
    return {
        "system_id": system.id,
        "products": [
            {
                "id": p.id,
                "name": p.name,
                "category": p.category.value,
                "unit": p.unit,
                "coverage": p.coverage,
                "description": p.description,
                "default_price": p.default_price,
                "price": resolve_price(p.id, prices, system),
                "source": prices.source(p.id),
            }
            for p in system.products.values()
        ],
    }


class PriceUpdate(BaseModel):
    price: float = Field(ge=0, allow_inf_nan=False)


@app.put("/api/prices/{system_id}/{product_id}")
def update_price(system_id: str, product_id: str, body: PriceUpdate,
                 store: JsonPriceStore = Depends(get_price_store)):
    system = _system_or_404(system_id)
    if system.get_product(product_id) is None:
        raise HTTPException(status_code=404, detail=f"Unknown product {system_id}/{product_id}")
    store.set_price(system.id, product_id, body.price)
    return {"system_id": system.id, "product_id": product_id, "price": round(body.price, 2)}


@app.delete("/api/prices/{system_id}/{product_id}")
def delete_price(system_id: str, product_id: str, store: JsonPriceStore = Depends(get_price_store)):
    system = _system_or_404(system_id)
    if not store.delete_price(system.id, product_id):
        raise HTTPException(status_code=404, detail=f"No stored price for {system_id}/{product_id}")
    return {"system_id": system.id, "product_id": product_id, "deleted": True}


# ---------------------------------------------------------------------------
# Estimates
# ---------------------------------------------------------------------------

@app.post("/api/estimate")
async def run_estimate(request: Request, store: JsonPriceStore = Depends(get_price_store)):
    record = await _read_record(request)
    session = _session_for(record, store)
    result = _compute(session)
    logger.info(f"/api/estimate {session.system_id}: grand total ${result.breakdown.grand_total:,.2f}")
    return result.to_dict()


@app.post("/api/estimate/export")
async def export_estimate(request: Request, store: JsonPriceStore = Depends(get_price_store)):
    record = await _read_record(request)
    session = _session_for(record, store)
    result = _compute(session)
    filename = f"{session.system_id}-estimate.csv"
    return Response(
        content=export_csv(result.breakdown),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/api/estimates", status_code=201)
async def save_estimate(request: Request):
    record = await _read_record(request)
    raw = record.model_dump_json()
    if deserialize_estimate(raw, record.system) is None:
        raise HTTPException(status_code=422, detail=f"Estimate does not fit {record.system}")
    estimate_id = uuid4().hex
    SAVED_ESTIMATES[estimate_id] = raw
    logger.info(f"Saved estimate {estimate_id} ({record.system}, '{record.name}')")
    return {"id": estimate_id, "system": record.system, "name": record.name}


@app.get("/api/estimates/{estimate_id}")
def load_estimate(estimate_id: str, system: str, store: JsonPriceStore = Depends(get_price_store)):
    raw = SAVED_ESTIMATES.get(estimate_id)
    if raw is None:
        raise HTTPException(status_code=404, detail=f"No saved estimate {estimate_id}")
    record = deserialize_estimate(raw, system)
    if record is None:
        raise HTTPException(status_code=422, detail=f"Saved estimate {estimate_id} cannot be loaded as {system}")
    session = _session_for(record, store)
    result = _compute(session)
    return {
        "id": estimate_id,
        "record": record.model_dump(),
        "estimate": result.to_dict(),
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="127.0.0.1", port=8000, reload=True)
