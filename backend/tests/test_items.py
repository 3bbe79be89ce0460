import uuid

from sqlalchemy import func, select

from db.inventory.batch import ItemBatch
from db.inventory.transaction import Transaction


async def test_create_item_derives_display_name(staff_client, create_item, session_maker):
    item = await create_item(brand=" Coke ", baseName="Cola", size="500ml", qtyWeight=None)

    assert item["displayName"] == "Coke Cola 500ml"
    assert item["brand"] == "Coke"
    assert item["reorderQty"] == 10
    assert item["currentStock"] == 0
    assert item["isLowStock"] is True
    assert item["hasExpiry"] is False
    assert item["batches"] == []

    async with session_maker() as session:
        rows = (await session.execute(select(Transaction))).scalars().all()
    assert len(rows) == 1
    assert rows[0].amount == 0
    assert rows[0].notes == "Item created"


async def test_create_item_validation(staff_client):
    missing = await staff_client.post("/api/items", json={"brand": "Coke"})
    assert missing.status_code == 400
    assert missing.json()["details"][0]["field"] == "baseName"

    blank = await staff_client.post("/api/items", json={"baseName": "   "})
    assert blank.status_code == 400

    negative = await staff_client.post("/api/items", json={"baseName": "Cola", "currentStock": -1})
    assert negative.status_code == 400

    bad_url = await staff_client.post("/api/items", json={"baseName": "Cola", "imageUrl": "ftp://x"})
    assert bad_url.status_code == 400


async def test_create_item_with_unknown_reference(staff_client):
    resp = await staff_client.post("/api/items", json={"baseName": "Cola", "categoryId": str(uuid.uuid4())})
    assert resp.status_code == 400
    assert resp.json()["details"][0]["message"] == "Category not found"


async def test_create_item_with_references(admin_client, staff_client):
    cat = (await admin_client.post("/api/categories", json={"name": "Drinks", "color": "#00aa00"})).json()
    loc = (await admin_client.post("/api/locations", json={"name": "Cellar"})).json()
    sup = (await admin_client.post("/api/suppliers", json={"name": "Bev Co"})).json()

    resp = await staff_client.post(
        "/api/items",
        json={"baseName": "Cola", "categoryId": cat["id"], "storageLocationId": loc["id"], "supplierId": sup["id"]},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["category"] == {"id": cat["id"], "name": "Drinks", "color": "#00AA00"}
    assert body["storageLocation"]["name"] == "Cellar"
    assert body["supplier"] == {"id": sup["id"], "name": "Bev Co"}


async def test_get_unknown_item(staff_client):
    resp = await staff_client.get(f"/api/items/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Item not found"}


async def test_list_items_search_filters_and_order(staff_client, create_item):
    await create_item(brand="Coke", baseName="Cola", currentStock=50)
    await create_item(baseName="Apple juice", isCritical=True, currentStock=50)
    await create_item(baseName="Lemons", hasExpiry=True, currentStock=1)

    resp = await staff_client.get("/api/items")
    assert resp.status_code == 200
    names = [it["displayName"] for it in resp.json()["items"]]
    assert names == ["Apple juice", "Coke Cola", "Lemons"]
    assert resp.json()["pagination"] == {"page": 1, "limit": 20, "total": 3, "totalPages": 1}

    resp = await staff_client.get("/api/items", params={"search": "COKE"})
    assert [it["displayName"] for it in resp.json()["items"]] == ["Coke Cola"]

    resp = await staff_client.get("/api/items", params={"hasExpiry": "true"})
    assert [it["displayName"] for it in resp.json()["items"]] == ["Lemons"]

    resp = await staff_client.get("/api/items", params={"lowStock": "true"})
    assert [it["displayName"] for it in resp.json()["items"]] == ["Lemons"]


async def test_list_items_pagination(staff_client, create_item):
    for n in range(5):
        await create_item(baseName=f"Item {n}")

    resp = await staff_client.get("/api/items", params={"page": 2, "limit": 2})
    body = resp.json()
    assert [it["displayName"] for it in body["items"]] == ["Item 2", "Item 3"]
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "totalPages": 3}

    too_big = await staff_client.get("/api/items", params={"limit": 101})
    assert too_big.status_code == 400


async def test_low_stock_endpoint(staff_client, create_item):
    await create_item(baseName="Plenty", currentStock=50)
    await create_item(baseName="Edge", currentStock=10, reorderQty=10)
    await create_item(baseName="Empty", currentStock=0, isCritical=True)

    resp = await staff_client.get("/api/items/low-stock")
    assert resp.status_code == 200
    assert [it["displayName"] for it in resp.json()] == ["Empty", "Edge"]
    assert all(it["isLowStock"] for it in resp.json())


async def test_update_item_recomputes_display_name(staff_client, create_item, session_maker):
    item = await create_item(brand="Coke", baseName="Cola", size="500ml", currentStock=7)

    resp = await staff_client.put(f"/api/items/{item['id']}", json={"size": "1L", "isCritical": True})
    assert resp.status_code == 200
    assert resp.json()["displayName"] == "Coke Cola 1L"
    assert resp.json()["isCritical"] is True

    cleared = await staff_client.put(f"/api/items/{item['id']}", json={"brand": None})
    assert cleared.json()["displayName"] == "Cola 1L"
    assert cleared.json()["brand"] is None

    async with session_maker() as session:
        notes = (
            await session.execute(
                select(Transaction.notes).where(Transaction.item_id == uuid.UUID(item["id"]))
            )
        ).scalars().all()
    assert sorted(notes) == ["Item created", "Item updated", "Item updated"]


async def test_update_item_does_not_touch_stock(staff_client, create_item):
    item = await create_item(currentStock=7)
    resp = await staff_client.put(f"/api/items/{item['id']}", json={"currentStock": 100, "reorderQty": 3})
    assert resp.status_code == 200
    assert resp.json()["currentStock"] == 7
    assert resp.json()["reorderQty"] == 3


async def test_update_item_rejects_null_required_fields(staff_client, create_item):
    item = await create_item()
    resp = await staff_client.put(f"/api/items/{item['id']}", json={"baseName": None})
    assert resp.status_code == 400
    resp = await staff_client.put(f"/api/items/{item['id']}", json={"reorderQty": None})
    assert resp.status_code == 400


async def test_update_unknown_item(staff_client):
    resp = await staff_client.put(f"/api/items/{uuid.uuid4()}", json={"size": "1L"})
    assert resp.status_code == 404


async def test_delete_item_removes_batches_and_transactions(staff_client, create_item, session_maker):
    item = await create_item(hasExpiry=True)
    await staff_client.post(
        f"/api/items/{item['id']}/stock",
        json={"type": "ADD", "quantity": 3, "reason": "delivery", "batchCode": "L1", "expiryDate": "2030-01-01T00:00:00"},
    )

    resp = await staff_client.delete(f"/api/items/{item['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    assert (await staff_client.get(f"/api/items/{item['id']}")).status_code == 404
    async with session_maker() as session:
        item_id = uuid.UUID(item["id"])
        batches = (await session.execute(select(func.count(ItemBatch.id)).where(ItemBatch.item_id == item_id))).scalar_one()
        txs = (await session.execute(select(func.count(Transaction.id)).where(Transaction.item_id == item_id))).scalar_one()
    assert (batches, txs) == (0, 0)

    again = await staff_client.delete(f"/api/items/{item['id']}")
    assert again.status_code == 404


async def test_item_batches_endpoint(staff_client, create_item):
    item = await create_item(hasExpiry=True)
    for code, expiry in (("LATE", "2031-01-01T00:00:00"), ("SOON", "2030-01-01T00:00:00")):
        await staff_client.post(
            f"/api/items/{item['id']}/stock",
            json={"type": "ADD", "quantity": 2, "reason": "delivery", "batchCode": code, "expiryDate": expiry},
        )

    resp = await staff_client.get(f"/api/items/{item['id']}/batches")
    assert resp.status_code == 200
    assert [b["batchCode"] for b in resp.json()] == ["SOON", "LATE"]


async def test_search_treats_wildcards_literally(staff_client, create_item):
    await create_item(baseName="Cola")
    await create_item(baseName="Lemons")
    await create_item(baseName="Juice 100%")
    await create_item(baseName="Olive_oil")

    async def names(term):
        resp = await staff_client.get("/api/items", params={"search": term})
        return [it["displayName"] for it in resp.json()["items"]]

    assert await names("%") == ["Juice 100%"]
    assert await names("_") == ["Olive_oil"]
    assert await names("100%") == ["Juice 100%"]
    assert await names("e_o") == ["Olive_oil"]
    assert await names("o_a") == []
