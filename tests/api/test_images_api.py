import pytest
from fastapi.testclient import TestClient

from conftest import FakeStorage


@pytest.fixture
def storage():
    return FakeStorage(fail_delete=["staging/locked.jpg"])


@pytest.fixture
def app(storage):
    from wheelstore.app.main import app as fastapi_app
    from wheelstore.app.core.dependencies import get_image_storage

    fastapi_app.dependency_overrides[get_image_storage] = lambda: storage
    yield fastapi_app
    fastapi_app.dependency_overrides.pop(get_image_storage, None)


def test_upload_image(app, storage):
    client = TestClient(app)
    res = client.post(
        "/images",
        data={"path": "staging/1-abc.jpg", "include_url": "true"},
        files={"file": ("1-abc.jpg", b"jpegbytes", "image/jpeg")},
    )
    assert res.status_code == 201
    assert res.json() == {
        "path": "staging/1-abc.jpg",
        "url": "https://signed.example/staging/1-abc.jpg",
    }
    assert storage.objects["staging/1-abc.jpg"] == b"jpegbytes"


def test_upload_existing_key_conflicts(app, storage):
    storage.objects["staging/dup.jpg"] = b"old"
    client = TestClient(app)
    res = client.post(
        "/images",
        data={"path": "staging/dup.jpg"},
        files={"file": ("dup.jpg", b"new", "image/jpeg")},
    )
    assert res.status_code == 409
    assert storage.objects["staging/dup.jpg"] == b"old"


def test_delete_image_from_full_url(app, storage):
    client = TestClient(app)
    res = client.post(
        "/images/delete",
        json={
            "path": "https://cdn.test/storage/v1/object/public/test-bucket/staging/a.jpg",
            "full_url": True,
        },
    )
    assert res.status_code == 200
    assert storage.deleted == ["staging/a.jpg"]


def test_delete_image_failure_is_502(app):
    client = TestClient(app)
    res = client.post("/images/delete", json={"path": "staging/locked.jpg"})
    assert res.status_code == 502


def test_cleanup_reports_each_path(app):
    client = TestClient(app)
    res = client.post(
        "/images/cleanup", json={"image_urls": ["staging/a.jpg", "staging/locked.jpg"]}
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Processed 2 images"
    assert [r["success"] for r in body["results"]] == [True, False]


def test_cleanup_requires_paths(app):
    client = TestClient(app)
    assert client.post("/images/cleanup", json={"image_urls": []}).status_code == 400
