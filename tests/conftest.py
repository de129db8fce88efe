"""
Shared test fixtures - roof systems, estimating sessions, temp price store, API client.
"""

import json

import pytest
from fastapi.testclient import TestClient

import app as app_module
from backend.database import get_system
from backend.pricing import JsonPriceStore
from backend.roof_estimator import RoofMeasurements
from backend.saved_estimates import to_record
from backend.session import EstimatorSession


@pytest.fixture
def carlisle():
    return get_system("carlisle-tpo")


@pytest.fixture
def gaf():
    return get_system("gaf-tpo")


@pytest.fixture
def karnak():
    return get_system("karnak-metal-kynar")


@pytest.fixture
def tpo_session():
    """Carlisle session on a 10,000 sq ft roof with 400 LF of base flashing."""
    session = EstimatorSession("carlisle-tpo")
    session.measurements = RoofMeasurements(roof_area_sqft=10_000, base_flashing_lf=400)
    return session


@pytest.fixture
def coating_session():
    session = EstimatorSession("karnak-metal-kynar")
    session.measurements = RoofMeasurements(
        roof_area_sqft=20_000, horizontal_seam_lf=1_200, vertical_seam_lf=4_000,
    )
    return session


@pytest.fixture
def price_store(tmp_path):
    """Price database in a temp file."""
    return JsonPriceStore(tmp_path / "prices.json")


@pytest.fixture
def client(price_store):
    """FastAPI test client wired to the temp price store."""
    app_module.app.dependency_overrides[app_module.get_price_store] = lambda: price_store
    app_module.SAVED_ESTIMATES.clear()
    yield TestClient(app_module.app)
    app_module.app.dependency_overrides.clear()
    app_module.SAVED_ESTIMATES.clear()


@pytest.fixture
def record_body():
    """Build a JSON-ready estimate record from a session."""
    def _build(session):
        return json.loads(to_record(session).model_dump_json())
    return _build
