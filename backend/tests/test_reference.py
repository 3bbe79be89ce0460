import uuid

import pytest


@pytest.mark.parametrize("path", ["/api/categories", "/api/suppliers", "/api/locations"])
async def test_reference_writes_are_admin_only(staff_client, path):
    assert (await staff_client.get(path)).status_code == 200

    resp = await staff_client.post(path, json={"name": "Anything"})
    assert resp.status_code == 403
    assert resp.json() == {"error": "Admin access required"}


async def test_category_lifecycle(admin_client, staff_client, create_item):
    created = await admin_client.post("/api/categories", json={"name": " Produce ", "color": "#a1b2c3"})
    assert created.status_code == 201
    cat = created.json()
    assert (cat["name"], cat["color"], cat["isActive"]) == ("Produce", "#A1B2C3", True)

    dup = await admin_client.post("/api/categories", json={"name": "produce"})
    assert dup.status_code == 409

    bad = await admin_client.post("/api/categories", json={"name": "Dairy", "color": "red"})
    assert bad.status_code == 400

    renamed = await admin_client.put(f"/api/categories/{cat['id']}", json={"name": "Fresh produce", "isActive": False})
    assert renamed.json()["name"] == "Fresh produce"
    assert (await admin_client.get("/api/categories")).json() == []
    listed = await admin_client.get("/api/categories", params={"includeInactive": "true"})
    assert [c["name"] for c in listed.json()] == ["Fresh produce"]

    item = await create_item(categoryId=cat["id"])
    deleted = await admin_client.delete(f"/api/categories/{cat['id']}")
    assert deleted.json() == {"success": True}

    # The item survives with its category link cleared.
    fetched = (await staff_client.get(f"/api/items/{item['id']}")).json()
    assert fetched["categoryId"] is None
    assert fetched["category"] is None

    assert (await admin_client.delete(f"/api/categories/{cat['id']}")).status_code == 404


async def test_supplier_validation_and_update(admin_client):
    bad_type = await admin_client.post("/api/suppliers", json={"name": "Bev Co", "supplierType": "FRIEND"})
    assert bad_type.status_code == 400

    bad_email = await admin_client.post("/api/suppliers", json={"name": "Bev Co", "email": "nope"})
    assert bad_email.status_code == 400

    created = await admin_client.post(
        "/api/suppliers",
        json={
            "name": "Bev Co",
            "supplierType": "DISTRIBUTOR",
            "minOrderType": "PRICE",
            "minOrderValue": 150,
            "website": "https://bev.example.org",
        },
    )
    assert created.status_code == 201
    sup = created.json()
    assert sup["minOrderValue"] == 150.0

    other = (await admin_client.post("/api/suppliers", json={"name": "Fizz Ltd"})).json()
    clash = await admin_client.put(f"/api/suppliers/{other['id']}", json={"name": "BEV CO"})
    assert clash.status_code == 409

    updated = await admin_client.put(f"/api/suppliers/{sup['id']}", json={"contactName": "Dana"})
    assert updated.json()["contactName"] == "Dana"
    assert updated.json()["supplierType"] == "DISTRIBUTOR"


async def test_location_crud(admin_client):
    created = (await admin_client.post("/api/locations", json={"name": "Walk-in fridge"})).json()
    updated = await admin_client.put(f"/api/locations/{created['id']}", json={"description": "Back room"})
    assert updated.json()["description"] == "Back room"
    assert (await admin_client.put(f"/api/locations/{uuid.uuid4()}", json={"name": "x"})).status_code == 404
    assert (await admin_client.delete(f"/api/locations/{created['id']}")).json() == {"success": True}


async def test_system_settings(admin_client, staff_client):
    put = await admin_client.put("/api/settings/low_stock_email", json={"value": "ops@acme.io"})
    assert put.status_code == 200
    assert put.json()["key"] == "low_stock_email"

    again = await admin_client.put(
        "/api/settings/low_stock_email", json={"value": "team@acme.io", "description": "Alert inbox"}
    )
    assert again.json()["id"] == put.json()["id"]
    assert again.json()["value"] == "team@acme.io"

    got = await admin_client.get("/api/settings/low_stock_email")
    assert got.json()["description"] == "Alert inbox"
    assert [s["key"] for s in (await admin_client.get("/api/settings")).json()] == ["low_stock_email"]

    assert (await staff_client.get("/api/settings/low_stock_email")).status_code == 403

    assert (await admin_client.delete("/api/settings/low_stock_email")).status_code == 200
    assert (await admin_client.get("/api/settings/low_stock_email")).status_code == 404


async def test_transaction_log(staff_client, create_item):
    cola = await create_item(baseName="Cola", currentStock=3)
    lime = await create_item(baseName="Lime")
    await staff_client.post(f"/api/items/{cola['id']}/stock", json={"type": "REMOVE", "quantity": 2, "reason": "sold"})

    resp = await staff_client.get("/api/transactions")
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"]["total"] == 3
    assert all(tx["userName"] == "Sam Staff" for tx in body["transactions"])

    only_cola = await staff_client.get("/api/transactions", params={"itemId": cola["id"]})
    assert {tx["itemDisplayName"] for tx in only_cola.json()["transactions"]} == {"Cola"}
    assert only_cola.json()["pagination"]["total"] == 2

    outs = await staff_client.get("/api/transactions", params={"type": "STOCK_OUT"})
    assert [(tx["amount"], tx["stockAfter"]) for tx in outs.json()["transactions"]] == [(-2, 1)]

    only_lime = await staff_client.get("/api/transactions", params={"itemId": lime["id"]})
    assert [tx["notes"] for tx in only_lime.json()["transactions"]] == ["Item created"]


async def test_user_administration(admin_client, admin_user, client):
    created = await admin_client.post("/api/users", json={"email": "New.Hire@acme.io", "fullName": "Nia"})
    assert created.status_code == 201
    user = created.json()
    assert user["email"] == "new.hire@acme.io"
    assert (user["role"], user["isActive"], user["hasPassword"]) == ("STAFF", True, False)

    assert (await admin_client.post("/api/users", json={"email": "new.hire@acme.io"})).status_code == 409

    check = await client.post("/api/auth/check-email", json={"email": "new.hire@acme.io"})
    assert check.json()["needsPasswordSetup"] is True

    promoted = await admin_client.patch(f"/api/users/{user['id']}", json={"role": "ADMIN"})
    assert promoted.json()["role"] == "ADMIN"

    deactivated = await admin_client.patch(f"/api/users/{user['id']}", json={"isActive": False})
    assert deactivated.json()["isActive"] is False

    listed = await admin_client.get("/api/users")
    assert [u["email"] for u in listed.json()] == ["admin@acme.io", "new.hire@acme.io"]


async def test_admin_cannot_lock_themselves_out(admin_client, admin_user):
    resp = await admin_client.patch(f"/api/users/{admin_user.id}", json={"isActive": False})
    assert resp.status_code == 400
    resp = await admin_client.patch(f"/api/users/{admin_user.id}", json={"role": "STAFF"})
    assert resp.status_code == 400

    renamed = await admin_client.patch(f"/api/users/{admin_user.id}", json={"fullName": "Ada L."})
    assert renamed.status_code == 200
    assert renamed.json()["fullName"] == "Ada L."


async def test_deactivated_user_loses_access(admin_client, staff_client, staff_user):
    assert (await staff_client.get("/api/items")).status_code == 200
    await admin_client.patch(f"/api/users/{staff_user.id}", json={"isActive": False})
    assert (await staff_client.get("/api/items")).status_code == 401


async def test_user_admin_is_admin_only(staff_client):
    assert (await staff_client.get("/api/users")).status_code == 403


@pytest.mark.parametrize(
    "path, body",
    [
        ("/api/categories", {"name": "Drinks"}),
        ("/api/locations", {"name": "Cellar"}),
        ("/api/suppliers", {"name": "Bev Co"}),
    ],
)
async def test_reference_update_rejects_null_required_fields(admin_client, path, body):
    created = (await admin_client.post(path, json=body)).json()

    for payload in ({"isActive": None}, {"name": None}):
        resp = await admin_client.put(f"{path}/{created['id']}", json=payload)
        assert resp.status_code == 400, payload
        assert resp.json()["error"] == "Validation error"

    listed = await admin_client.get(path)
    assert [(r["name"], r["isActive"]) for r in listed.json()] == [(body["name"], True)]


async def test_supplier_website_is_normalized(admin_client):
    created = await admin_client.post("/api/suppliers", json={"name": "Bev Co", "website": "HTTPS://Bev.Example.org"})
    assert created.status_code == 201
    assert created.json()["website"] == "https://bev.example.org/"

    bad = await admin_client.post("/api/suppliers", json={"name": "Fizz", "website": "bev.example.org"})
    assert bad.status_code == 400
