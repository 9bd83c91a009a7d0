import types
import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient


PRODUCT = {
    "id": 1,
    "title": '4x 18" BMW Rims',
    "description": "Four rims.",
    "price": 1200.0,
    "category": "rim",
    "in_stock": True,
    "featured": False,
    "vehicle_brand": "BMW",
    "rim_size": "18",
    "created_at": "2025-01-01T00:00:00Z",
    "updated_at": None,
    "images": [{"id": 1, "image_url": "staging/a.jpg", "position": 0}],
}


@pytest.fixture
def app(monkeypatch):
    # Stub products service BEFORE importing the app/router
    fake_products_service = types.SimpleNamespace()
    calls = []

    def _missing(product_id):
        if product_id != 1:
            raise HTTPException(status_code=404, detail="Product not found")

    def list_products(db, **kwargs):
        calls.append(("list", kwargs))
        return [PRODUCT]

    def get_product(db, product_id: int):
        _missing(product_id)
        return PRODUCT

    def create_product(db, storage, payload):
        calls.append(("create", payload))
        data = payload.model_dump(exclude={"images", "images_to_delete"})
        return {
            **PRODUCT,
            **data,
            "id": 2,
            "image_deletions": [
                {"path": p, "success": True} for p in payload.images_to_delete
            ],
        }

    def replace_product(db, storage, product_id: int, payload):
        _missing(product_id)
        return {**PRODUCT, "title": payload.title}

    def delete_product(db, storage, product_id: int):
        return {"id": product_id, "deleted": True, "image_deletions": []}

    def duplicate_product(db, storage, product_id: int):
        return {**PRODUCT, "id": 3}

    def mark_sold(db, storage, product_id: int):
        if product_id == 2:
            raise HTTPException(status_code=400, detail="Only rim products can be marked as sold")
        return {"id": product_id, "sold_product_id": 10}

    def toggle_status(db, product_id: int, payload):
        if payload.field not in {"in_stock", "featured"}:
            raise HTTPException(status_code=400, detail="Invalid field")
        return {**PRODUCT, payload.field: payload.value}

    for fn in (
        list_products,
        get_product,
        create_product,
        replace_product,
        delete_product,
        duplicate_product,
        mark_sold,
        toggle_status,
    ):
        setattr(fake_products_service, fn.__name__, fn)

    monkeypatch.setitem(
        __import__("sys").modules,
        "wheelstore.app.features.products.service",
        fake_products_service,
    )

    # Ensure a fresh import of the app and router with stubs applied
    sys_modules = __import__("sys").modules
    for mod in [
        "wheelstore.app.main",
        "wheelstore.app.features.products.api",
    ]:
        sys_modules.pop(mod, None)

    from wheelstore.app.main import app as fastapi_app
    from wheelstore.app.core.dependencies import get_image_storage
    from wheelstore.db.session import get_db

    fastapi_app.dependency_overrides[get_db] = lambda: None
    fastapi_app.dependency_overrides[get_image_storage] = lambda: None
    fastapi_app.state.calls = calls
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


def test_list_products(app):
    client = TestClient(app)
    res = client.get("/products", params={"category": "rim", "in_stock": "true", "search": "bmw"})
    assert res.status_code == 200
    data = res.json()
    assert data[0]["title"] == PRODUCT["title"]
    assert data[0]["images"][0]["image_url"] == "staging/a.jpg"
    kind, kwargs = app.state.calls[0]
    assert kwargs["category"] == "rim"
    assert kwargs["in_stock"] is True
    assert kwargs["search"] == "bmw"


def test_get_product_found(app):
    client = TestClient(app)
    res = client.get("/products/1")
    assert res.status_code == 200
    assert res.json()["id"] == 1


def test_get_product_not_found(app):
    client = TestClient(app)
    res = client.get("/products/999")
    assert res.status_code == 404
    assert res.json() == {"detail": "Product not found"}


def test_create_product(app):
    client = TestClient(app)
    payload = {
        "title": "4x 225/45R17 Tyres",
        "price": 320,
        "category": "tyre",
        "tyre_size": "225/45R17",
        "images": [{"image_url": "staging/t.jpg", "position": 0}],
        "images_to_delete": ["staging/old.jpg"],
    }
    res = client.post("/products", json=payload)
    assert res.status_code == 201
    data = res.json()
    assert data["title"] == payload["title"]
    assert data["image_deletions"] == [{"path": "staging/old.jpg", "success": True}]
    _, received = app.state.calls[-1]
    assert [img.image_url for img in received.images] == ["staging/t.jpg"]


def test_create_product_rejects_non_positive_price(app):
    client = TestClient(app)
    res = client.post("/products", json={"title": "x", "price": 0, "category": "rim"})
    assert res.status_code == 422


def test_replace_product(app):
    client = TestClient(app)
    payload = {"title": "Renamed", "price": 100, "category": "rim"}
    res = client.put("/products/1", json=payload)
    assert res.status_code == 200
    assert res.json()["title"] == "Renamed"


def test_delete_product(app):
    client = TestClient(app)
    res = client.delete("/products/3")
    assert res.status_code == 200
    assert res.json() == {"id": 3, "deleted": True, "image_deletions": []}


def test_duplicate_product(app):
    client = TestClient(app)
    res = client.post("/products/1/duplicate")
    assert res.status_code == 201
    assert res.json()["id"] == 3


def test_mark_sold(app):
    client = TestClient(app)
    res = client.post("/products/1/mark-sold")
    assert res.status_code == 200
    assert res.json()["sold_product_id"] == 10
    assert client.post("/products/2/mark-sold").status_code == 400


def test_toggle_status(app):
    client = TestClient(app)
    res = client.patch("/products/1/toggle-status", json={"field": "featured", "value": True})
    assert res.status_code == 200
    assert res.json()["featured"] is True

    bad = client.patch("/products/1/toggle-status", json={"field": "price", "value": True})
    assert bad.status_code == 400
