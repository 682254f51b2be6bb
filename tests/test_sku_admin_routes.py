from config import SKU_MAX_SEQUENCE


def _create(client, catalog, **extra):
    body = {"equipmentModel": catalog["model"], "brand": catalog["chauvet"]}
    body.update(extra)
    return client.post("/equipment-units", json=body)


def test_healthz(client):
    assert client.get("/healthz").status_code == 200


def test_preview(client):
    resp = client.get("/sku-admin/preview?category=lt&brand=CHV")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["nextSKU"] == "EPG-LT-CHV-00001"
    assert data["category"] == "LT"
    assert data["brand"] == "CHV"
    assert "timestamp" in data


def test_preview_requires_params(client):
    resp = client.get("/sku-admin/preview?category=LT")
    assert resp.status_code == 400
    assert "required" in resp.get_json()["error"]


def test_preview_rejects_bad_prefix(client):
    resp = client.get("/sku-admin/preview?category=LT&brand=CHAUVET")
    assert resp.status_code == 400


def test_statistics(client, catalog):
    _create(client, catalog)
    _create(client, catalog, brand="shure")
    _create(client, catalog)

    data = client.get("/sku-admin/statistics").get_json()
    assert data["totalInstances"] == 3
    rows = {r["brandPrefix"]: r for r in data["sequencesByCategory"]["LT"]}
    assert rows["CHV"]["currentSequence"] == 3
    assert rows["CHV"]["remainingCapacity"] == SKU_MAX_SEQUENCE - 3
    assert rows["SHU"]["currentSequence"] == 2
    assert "lastUpdated" in data


def test_validate_available(client):
    resp = client.post("/sku-admin/validate", json={"sku": "rent-42"})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data == {
        "success": True,
        "message": "SKU is valid and available",
        "sku": "RENT-42",
        "isAvailable": True,
    }


def test_validate_taken_and_malformed(client, catalog):
    _create(client, catalog, sku="RENT-42")

    data = client.post("/sku-admin/validate", json={"sku": "Rent-42"}).get_json()
    assert data["success"] is False
    assert data["isAvailable"] is False
    assert "already exists" in data["message"]

    data = client.post("/sku-admin/validate", json={"sku": "ab"}).get_json()
    assert data["success"] is False
    assert "at least 3" in data["message"]


def test_validate_requires_sku(client):
    assert client.post("/sku-admin/validate", json={}).status_code == 400
    assert client.post("/sku-admin/validate", data="nope").status_code == 400


def test_reset_sequence(client, catalog):
    _create(client, catalog)
    _create(client, catalog)

    resp = client.post(
        "/sku-admin/reset-sequence",
        json={"category": "LT", "brand": "CHV", "newSequence": 50},
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["oldSequence"] == 3
    assert data["newSequence"] == 50
    assert data["nextSKU"] == "EPG-LT-CHV-00050"
    assert _create(client, catalog).get_json()["sku"] == "EPG-LT-CHV-00050"


def test_reset_sequence_errors(client, catalog):
    _create(client, catalog)
    url = "/sku-admin/reset-sequence"
    assert client.post(url, json={"category": "LT", "brand": "CHV"}).status_code == 400
    assert (
        client.post(url, json={"category": "LT", "brand": "CHV", "newSequence": "5"}).status_code
        == 400
    )
    resp = client.post(url, json={"category": "LT", "brand": "CHV", "newSequence": 0})
    assert resp.status_code == 400
    assert "between 1 and" in resp.get_json()["error"]
    resp = client.post(url, json={"category": "AU", "brand": "CHV", "newSequence": 5})
    assert resp.status_code == 404


def test_list_sequences(client, catalog):
    _create(client, catalog)
    _create(client, catalog, brand="unheard of")

    data = client.get("/sku-admin/sequences").get_json()
    assert data["totalSequences"] == 2
    chv, gen = data["sequences"]
    assert chv["categoryName"] == "Lighting"
    assert chv["brandName"] == "chauvet"
    assert chv["nextSKU"] == "EPG-LT-CHV-00002"
    assert chv["remaining"] == SKU_MAX_SEQUENCE - 2
    assert chv["lastUsed"] is not None
    assert gen["brandPrefix"] == "GEN"
    assert gen["brandName"] == "generic"


def test_list_sequences_unknown_names(client, session):
    from services import sequence_store

    sequence_store.get_next(session, "ZZ", "QQQ")
    row = client.get("/sku-admin/sequences").get_json()["sequences"][0]
    assert row["categoryName"] == "Unknown"
    assert row["brandName"] == "Unknown"


def test_toggle_auto_generation(client, catalog):
    resp = client.post("/sku-admin/toggle-auto-generation", json={"enabled": False})
    assert resp.status_code == 200
    assert resp.get_json()["autoGenerationEnabled"] is False

    status = client.get("/sku-admin/auto-generation-status").get_json()
    assert status["autoGenerationEnabled"] is False
    assert status["isDisabled"] is True

    resp = _create(client, catalog)
    assert resp.status_code == 400
    assert "disabled" in resp.get_json()["error"]

    client.post("/sku-admin/toggle-auto-generation", json={"enabled": True})
    assert client.get("/sku-admin/auto-generation-status").get_json()["isDisabled"] is False
    assert _create(client, catalog).status_code == 201


def test_toggle_requires_boolean(client):
    resp = client.post("/sku-admin/toggle-auto-generation", json={"enabled": "yes"})
    assert resp.status_code == 400


def test_environment_overrides_stored_toggle(client, monkeypatch):
    client.post("/sku-admin/toggle-auto-generation", json={"enabled": True})
    monkeypatch.setenv("DISABLE_AUTO_SKU_GENERATION", "true")
    status = client.get("/sku-admin/auto-generation-status").get_json()
    assert status["isDisabled"] is True
    assert status["overriddenByEnvironment"] is True


def test_brand_admin(client):
    resp = client.post("/sku-admin/brands", json={"brandName": "Robe", "prefix": "rob"})
    assert resp.status_code == 201
    brand = resp.get_json()
    assert brand["brandName"] == "robe"
    assert brand["prefix"] == "ROB"

    resp = client.post("/sku-admin/brands", json={"brandName": "Robe Lighting", "prefix": "ROB"})
    assert resp.status_code == 409
    resp = client.post("/sku-admin/brands", json={"brandName": "Robe", "prefix": "RBE"})
    assert resp.status_code == 409
    resp = client.post("/sku-admin/brands", json={"brandName": "Ayrton", "prefix": "AY"})
    assert resp.status_code == 400

    resp = client.put(f"/sku-admin/brands/{brand['id']}", json={"isActive": False})
    assert resp.get_json()["isActive"] is False
    assert client.put("/sku-admin/brands/999", json={}).status_code == 404

    names = [b["brandName"] for b in client.get("/sku-admin/brands?active=1").get_json()["brands"]]
    assert "robe" not in names


def test_initialize_brands(client):
    from utils.catalog import DEFAULT_BRANDS

    data = client.post("/sku-admin/brands/initialize").get_json()
    # chauvet, shure and generic already exist in the test catalog
    assert data["skipped"] == 3
    assert data["created"] == len(DEFAULT_BRANDS) - 3
    again = client.post("/sku-admin/brands/initialize").get_json()
    assert again["created"] == 0


def test_categories(client):
    cats = client.get("/sku-admin/categories").get_json()["categories"]
    assert {c["name"]: c["skuPrefix"] for c in cats}["Lighting"] == "LT"


def _brand_id(client, name):
    brands = client.get("/sku-admin/brands").get_json()["brands"]
    return next(b["id"] for b in brands if b["brandName"] == name)


def test_update_alias_keeping_shared_prefix(client):
    client.post("/sku-admin/brands/initialize")
    martin = _brand_id(client, "martin")

    resp = client.put(f"/sku-admin/brands/{martin}", json={"prefix": "MAR", "description": "x"})
    assert resp.status_code == 200
    assert resp.get_json()["prefix"] == "MAR"
    assert resp.get_json()["description"] == "x"

    resp = client.put(f"/sku-admin/brands/{martin}", json={"prefix": "CHV"})
    assert resp.status_code == 409


def test_rename_to_existing_brand_is_a_conflict(client, catalog):
    resp = client.put(f"/sku-admin/brands/{catalog['shure']}", json={"brandName": "Chauvet"})
    assert resp.status_code == 409
    assert "already exists" in resp.get_json()["error"]

    resp = client.put(f"/sku-admin/brands/{catalog['shure']}", json={"brandName": "Shure Inc"})
    assert resp.status_code == 200
    assert resp.get_json()["brandName"] == "shure inc"


def test_exhausted_counter_in_preview_and_listing(client, catalog, session):
    from services import sequence_store

    _create(client, catalog)
    sequence_store.reset(session, "LT", "CHV", SKU_MAX_SEQUENCE)

    resp = client.get("/sku-admin/preview?category=LT&brand=CHV")
    assert resp.status_code == 409
    assert "limit exceeded" in resp.get_json()["error"]

    row = client.get("/sku-admin/sequences").get_json()["sequences"][0]
    assert row["nextSKU"] is None
    assert row["exhausted"] is True
    assert row["remaining"] == 0

    resp = client.post(
        "/sku-admin/reset-sequence",
        json={"category": "LT", "brand": "CHV", "newSequence": SKU_MAX_SEQUENCE},
    )
    assert resp.get_json()["nextSKU"] is None
    assert _create(client, catalog).status_code == 409
