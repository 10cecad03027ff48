from bson import ObjectId


def test_root_and_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    body = client.get("/").json()
    assert body["endpoints"]["products"] == "/api/products"


def test_database_check(client):
    body = client.get("/test").json()
    assert body["connection_status"] == "Connected"
    assert "users" in body["collections"]


def test_create_product_missing_name(client, product_payload):
    del product_payload["name"]
    resp = client.post("/api/products", json=product_payload)
    assert resp.status_code == 400
    assert {"field": "name", "message": "name is required"} in resp.json()["errors"]


def test_create_product(client, product_payload):
    resp = client.post("/api/products", json=product_payload)
    assert resp.status_code == 201
    body = resp.json()
    assert ObjectId.is_valid(body["id"])
    assert body["createdAt"]
    assert body["isAvailable"] is False
    assert "updatedAt" not in body

    fetched = client.get(f"/api/products/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == body
    assert [p["id"] for p in client.get("/api/products").json()] == [body["id"]]


def test_product_with_invalid_supplier_reference(client, product_payload):
    product_payload["supplierId"] = "12345"
    resp = client.post("/api/products", json=product_payload)
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "supplierId"


def test_products_by_supplier(client, product_payload, supplier_payload):
    supplier = client.post("/api/suppliers", json=supplier_payload).json()
    product = client.post("/api/products", json={**product_payload, "supplierId": supplier["id"]}).json()
    client.post("/api/products", json={**product_payload, "name": "Unlinked product"})

    resp = client.get(f"/api/products/supplier/{supplier['id']}")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [product["id"]]
    assert resp.json()[0]["supplierId"] == supplier["id"]

    assert client.get("/api/products/supplier/not-an-id").status_code == 400


def test_update_product(client, product_payload):
    created = client.post("/api/products", json=product_payload).json()
    resp = client.put(f"/api/products/{created['id']}", json={**product_payload, "stock": 25, "isAvailable": True})
    assert resp.status_code == 200
    body = resp.json()
    assert body["stock"] == 25
    assert body["isAvailable"] is True
    assert body["createdAt"] == created["createdAt"]
    assert body["updatedAt"] >= created["createdAt"]


def test_update_product_rejects_invalid_payload(client, product_payload):
    created = client.post("/api/products", json=product_payload).json()
    resp = client.put(f"/api/products/{created['id']}", json={**product_payload, "price": -3})
    assert resp.status_code == 400
    assert resp.json()["errors"] == [{"field": "price", "message": "Price must be a non-negative number"}]


def test_update_missing_product(client, product_payload):
    resp = client.put(f"/api/products/{ObjectId()}", json=product_payload)
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Product not found"}


def test_invalid_product_id(client):
    resp = client.get("/api/products/xyz")
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid product ID"}
    assert client.delete("/api/products/xyz").status_code == 400


def test_get_missing_supplier(client):
    resp = client.get(f"/api/suppliers/{ObjectId()}")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Supplier not found"}


def test_supplier_crud(client, supplier_payload):
    created = client.post("/api/suppliers", json=supplier_payload)
    assert created.status_code == 201
    supplier_id = created.json()["id"]

    updated = client.put(f"/api/suppliers/{supplier_id}", json={**supplier_payload, "paymentTerms": "Net 60"})
    assert updated.status_code == 200
    assert updated.json()["paymentTerms"] == "Net 60"

    assert client.get("/api/suppliers").json()[0]["paymentTerms"] == "Net 60"

    first = client.delete(f"/api/suppliers/{supplier_id}")
    assert first.status_code == 200
    assert first.json() == {"message": "Supplier deleted successfully"}
    second = client.delete(f"/api/suppliers/{supplier_id}")
    assert second.status_code == 404


def test_create_supplier_validation(client, supplier_payload):
    supplier_payload["address"] = {"street": "1 Main St"}
    resp = client.post("/api/suppliers", json=supplier_payload)
    assert resp.status_code == 400
    assert {e["field"] for e in resp.json()["errors"]} == {"address.city", "address.state", "address.zipCode"}


def test_non_object_body(client):
    resp = client.post("/api/products", json=["name"])
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Validation failed"


def test_store_failure_is_opaque(client, db, monkeypatch):
    from pymongo.errors import ServerSelectionTimeoutError

    def broken_find(filter_dict=None):
        raise ServerSelectionTimeoutError("localhost:27017: [Errno 111] Connection refused")

    monkeypatch.setattr(db["products"], "find", broken_find)
    resp = client.get("/api/products")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}
    assert "27017" not in resp.text
