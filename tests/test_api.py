"""
API endpoint tests.

Tests:
1-3.   System listing and catalog
4-7.   Persisted price updates
8-11.  Estimate and CSV export
12-16. Saving and loading estimates
"""


# =============================================================================
# Systems & catalog
# =============================================================================

def test_list_systems(client):
    """All three systems are listed, coatings without assembly options."""
    data = client.get("/api/systems").json()
    systems = {s["id"]: s for s in data["systems"]}
    assert set(systems) == {"carlisle-tpo", "gaf-tpo", "karnak-metal-kynar"}
    assert data["default_system"] in systems
    assert systems["karnak-metal-kynar"]["options"] == {}
    assert "securock-half" in systems["gaf-tpo"]["options"]["cover_boards"]
    assert systems["carlisle-tpo"]["options"]["default_assembly"]["insulation_fastener_length"] == "auto"
    assert len(data["penetrations"]) == 7
    assert any(m["id"] == "copper" for m in data["sheet_metal"]["metal_types"])


def test_catalog_defaults(client):
    data = client.get("/api/systems/carlisle-tpo/catalog").json()
    membrane = next(p for p in data["products"] if p["id"] == "membrane-60mil")
    assert membrane["price"] == 987
    assert membrane["source"] == "default"


def test_catalog_unknown_system(client):
    assert client.get("/api/systems/firestone-epdm/catalog").status_code == 404


# =============================================================================
# Persisted prices
# =============================================================================

def test_put_price_shows_in_catalog(client):
    res = client.put("/api/prices/carlisle-tpo/membrane-60mil", json={"price": 1010.456})
    assert res.status_code == 200
    assert res.json()["price"] == 1010.46

    data = client.get("/api/systems/carlisle-tpo/catalog").json()
    membrane = next(p for p in data["products"] if p["id"] == "membrane-60mil")
    assert membrane["price"] == 1010.46
    assert membrane["source"] == "persisted"

    # other systems keep their own prices
    gaf = client.get("/api/systems/gaf-tpo/catalog").json()
    assert next(p for p in gaf["products"] if p["id"] == "membrane-60mil")["source"] == "default"


def test_put_price_validation(client):
    assert client.put("/api/prices/carlisle-tpo/membrane-60mil", json={"price": -1}).status_code == 422
    assert client.put("/api/prices/carlisle-tpo/membrane-90mil", json={"price": 5}).status_code == 404
    assert client.put("/api/prices/nope/membrane-60mil", json={"price": 5}).status_code == 404


def test_delete_price(client):
    client.put("/api/prices/gaf-tpo/acc-caulk", json={"price": 11})
    assert client.delete("/api/prices/gaf-tpo/acc-caulk").status_code == 200
    assert client.delete("/api/prices/gaf-tpo/acc-caulk").status_code == 404


def test_price_store_written(client, price_store):
    client.put("/api/prices/karnak-metal-kynar/404", json={"price": 179})
    assert price_store.get_price_map("karnak-metal-kynar") == {"404": 179}


# =============================================================================
# Estimate & export
# =============================================================================

def test_estimate(client, tpo_session, record_body):
    res = client.post("/api/estimate", json=record_body(tpo_session))
    assert res.status_code == 200
    data = res.json()
    assert data["system_id"] == "carlisle-tpo"
    assert data["line_items"]
    assert data["grand_total"] == data["breakdown"]["grand_total"]
    assert data["total_material_cost"] > 0
    assert data["insulation"]["total_r_value"] == 11.2
    assert [s["key"] for s in data["breakdown"]["sections"]] == [
        "materials", "penetrations", "labor", "equipment",
    ]


def test_estimate_uses_persisted_then_custom_prices(client, tpo_session, record_body):
    client.put("/api/prices/carlisle-tpo/membrane-60mil", json={"price": 1000})
    client.put("/api/prices/carlisle-tpo/acc-coverstrip", json={"price": 90})
    tpo_session.prices.edit("acc-coverstrip", 80)

    items = {i["id"]: i for i in client.post("/api/estimate", json=record_body(tpo_session)).json()["line_items"]}
    assert items["membrane-60mil"]["unit_price"] == 1000
    assert items["acc-coverstrip"]["unit_price"] == 80


def test_estimate_rejects_bad_records(client, tpo_session, record_body):
    assert client.post("/api/estimate", content="not json").status_code == 422

    body = record_body(tpo_session)
    body["system"] = "firestone-epdm"
    assert client.post("/api/estimate", json=body).status_code == 422

    body = record_body(tpo_session)
    body["assembly"]["deck_type"] = "granite"
    assert client.post("/api/estimate", json=body).status_code == 422


def test_export_csv(client, coating_session, record_body):
    res = client.post("/api/estimate/export", json=record_body(coating_session))
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert "karnak-metal-kynar-estimate.csv" in res.headers["content-disposition"]
    lines = res.text.splitlines()
    assert lines[0] == "Category,Item,Description,Unit,Quantity,Unit Price,Total,Included"
    assert lines[-1].startswith(",Grand Total,")


# =============================================================================
# Saved estimates
# =============================================================================

def test_save_and_load(client, tpo_session, record_body):
    tpo_session.name = "Dock B"
    res = client.post("/api/estimates", json=record_body(tpo_session))
    assert res.status_code == 201
    saved = res.json()
    assert saved["name"] == "Dock B"

    loaded = client.get(f"/api/estimates/{saved['id']}", params={"system": "carlisle-tpo"})
    assert loaded.status_code == 200
    data = loaded.json()
    assert data["record"]["name"] == "Dock B"
    assert data["estimate"]["system_id"] == "carlisle-tpo"


def test_load_as_other_system_rejected(client, tpo_session, record_body):
    saved = client.post("/api/estimates", json=record_body(tpo_session)).json()
    res = client.get(f"/api/estimates/{saved['id']}", params={"system": "gaf-tpo"})
    assert res.status_code == 422


def test_load_unknown_id(client):
    assert client.get("/api/estimates/deadbeef", params={"system": "gaf-tpo"}).status_code == 404


def test_load_requires_system(client, tpo_session, record_body):
    saved = client.post("/api/estimates", json=record_body(tpo_session)).json()
    assert client.get(f"/api/estimates/{saved['id']}").status_code == 422


def test_save_rejects_record_that_does_not_fit(client, coating_session, tpo_session, record_body):
    body = record_body(coating_session)
    body["assembly"] = record_body(tpo_session)["assembly"]
    assert client.post("/api/estimates", json=body).status_code == 422

    body = record_body(tpo_session)
    body["extra"] = 1
    assert client.post("/api/estimates", json=body).status_code == 422
