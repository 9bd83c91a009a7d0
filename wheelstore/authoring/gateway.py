# wheelstore/authoring/gateway.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx

from wheelstore.services.storage_service import DeletionResult

from .errors import ProductSaveError, StorageError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return str(body)


def client_from_settings(settings) -> httpx.Client:
    return httpx.Client(base_url=settings.API_BASE_URL, timeout=DEFAULT_TIMEOUT)


class HttpProductGateway:
    """Product persistence API over HTTP (`POST /products`, `PUT /products/{id}`)."""

    def __init__(self, client: httpx.Client):
        self._client = client

    def _send(self, method: str, url: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.request(method, url, json=dict(payload))
        except httpx.HTTPError as exc:
            raise ProductSaveError(f"Could not reach the product API: {exc}") from exc
        except (TypeError, ValueError) as exc:
            # payload not JSON encodable (e.g. NaN price)
            raise ProductSaveError(f"Invalid product payload: {exc}") from exc
        if response.is_error:
            raise ProductSaveError(_error_detail(response), response.status_code)
        try:
            body = response.json()
        except ValueError as exc:
            raise ProductSaveError(
                "The product API returned an unreadable response", response.status_code
            ) from exc
        if not isinstance(body, dict):
            raise ProductSaveError(
                "The product API returned an unexpected response", response.status_code
            )
        return body

    def create(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return self._send("POST", "/products", payload)

    def update(self, product_id: int, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return self._send("PUT", f"/products/{product_id}", payload)


class HttpImageStorage:
    """Durable image storage reached through the backend's `/images` endpoints."""

    def __init__(self, client: httpx.Client):
        self._client = client

    def upload(
        self,
        path: str,
        data: bytes,
        *,
        content_type: Optional[str] = None,
    ) -> str:
        name = path.rsplit("/", 1)[-1]
        files = {"file": (name, data, content_type or "application/octet-stream")}
        try:
            response = self._client.post("/images", data={"path": path}, files=files)
        except httpx.HTTPError as exc:
            raise StorageError(path, str(exc)) from exc
        if response.is_error:
            raise StorageError(path, _error_detail(response))
        return response.json()["path"]

    def delete(self, paths: Sequence[str]) -> List[DeletionResult]:
        paths = list(paths)
        try:
            response = self._client.post("/images/cleanup", json={"image_urls": paths})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Image cleanup request failed: %s", exc)
            return [DeletionResult(path=p, success=False, error=str(exc)) for p in paths]
        return [DeletionResult(**item) for item in response.json()["results"]]
