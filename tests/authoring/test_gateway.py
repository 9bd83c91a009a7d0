import json

import httpx
import pytest

from wheelstore.authoring.errors import ProductSaveError, StorageError
from wheelstore.authoring.gateway import HttpImageStorage, HttpProductGateway


def _client(handler):
    return httpx.Client(base_url="http://api.test", transport=httpx.MockTransport(handler))


def test_create_posts_payload():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"id": 3, "title": "x"})

    product = HttpProductGateway(_client(handler)).create({"title": "x"})

    assert product == {"id": 3, "title": "x"}
    assert seen == {"method": "POST", "path": "/products", "body": {"title": "x"}}


def test_update_error_becomes_product_save_error():
    def handler(request):
        assert request.method == "PUT"
        assert request.url.path == "/products/9"
        return httpx.Response(404, json={"detail": "Product not found"})

    with pytest.raises(ProductSaveError) as exc:
        HttpProductGateway(_client(handler)).update(9, {"title": "x"})
    assert exc.value.status_code == 404
    assert str(exc.value) == "Product not found"


def test_image_upload_sends_multipart_with_path():
    def handler(request):
        assert request.url.path == "/images"
        body = request.content
        assert b'name="path"' in body
        assert b"staging/1-abc.jpg" in body
        assert b"JPEGDATA" in body
        return httpx.Response(201, json={"path": "staging/1-abc.jpg"})

    storage = HttpImageStorage(_client(handler))
    assert storage.upload("staging/1-abc.jpg", b"JPEGDATA", content_type="image/jpeg") == (
        "staging/1-abc.jpg"
    )


def test_image_upload_conflict_raises_storage_error():
    def handler(request):
        return httpx.Response(409, json={"detail": "exists"})

    with pytest.raises(StorageError) as exc:
        HttpImageStorage(_client(handler)).upload("staging/a.jpg", b"x")
    assert exc.value.path == "staging/a.jpg"


def test_image_delete_uses_cleanup_results():
    def handler(request):
        assert json.loads(request.content) == {"image_urls": ["a", "b"]}
        return httpx.Response(
            200,
            json={
                "message": "Processed 2 images",
                "results": [
                    {"path": "a", "success": True},
                    {"path": "b", "success": False, "error": "denied"},
                ],
            },
        )

    results = HttpImageStorage(_client(handler)).delete(["a", "b"])
    assert [(r.path, r.success, r.error) for r in results] == [
        ("a", True, None),
        ("b", False, "denied"),
    ]


def test_image_delete_transport_failure_marks_every_path_failed():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    results = HttpImageStorage(_client(handler)).delete(["a", "b"])
    assert [r.success for r in results] == [False, False]


def test_create_with_empty_success_body_raises_product_save_error():
    gateway = HttpProductGateway(_client(lambda request: httpx.Response(200, content=b"")))
    with pytest.raises(ProductSaveError) as exc:
        gateway.create({"title": "x"})
    assert exc.value.status_code == 200


def test_create_with_unencodable_payload_raises_product_save_error():
    def handler(request):
        raise AssertionError("request should not be sent")

    with pytest.raises(ProductSaveError):
        HttpProductGateway(_client(handler)).create({"title": "x", "price": float("nan")})
