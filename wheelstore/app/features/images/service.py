from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from fastapi import HTTPException

from wheelstore.authoring.errors import StorageError
from wheelstore.services.storage_service import DeletionResult, storage_path_from_url

from .schemas import CleanupResult, StoredImage

logger = logging.getLogger(__name__)


async def upload_image(
    storage,
    *,
    path: str,
    data: bytes,
    content_type: Optional[str] = None,
    include_url: bool = False,
) -> StoredImage:
    path = path.strip().lstrip("/")
    if not path:
        raise HTTPException(status_code=400, detail="Path is required")
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    try:
        exists = await asyncio.to_thread(storage.exists, path)
    except StorageError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    if exists:
        raise HTTPException(
            status_code=409, detail=f"An image already exists at '{path}'"
        )

    try:
        stored = await asyncio.to_thread(
            storage.upload, path, data, content_type=content_type, overwrite=True
        )
    except StorageError as exc:
        logger.error("Image upload to %s failed: %s", path, exc)
        raise HTTPException(status_code=502, detail=str(exc))

    url = await asyncio.to_thread(storage.presigned_url, stored) if include_url else None
    return StoredImage(path=stored, url=url)


async def delete_image(storage, *, path: str, full_url: bool = False) -> DeletionResult:
    if not path:
        raise HTTPException(status_code=400, detail="Path is required")
    key = storage_path_from_url(path, storage.bucket) if full_url else path
    results = await asyncio.to_thread(storage.delete, [key])
    result = results[0]
    if not result.success:
        raise HTTPException(status_code=502, detail=result.error or "Failed to delete image")
    return result


async def cleanup_images(storage, image_urls: List[str]) -> CleanupResult:
    if not image_urls:
        raise HTTPException(status_code=400, detail="No image URLs provided")
    logger.info("Cleaning up %d staged image(s)", len(image_urls))
    results = await asyncio.to_thread(storage.delete, image_urls)
    return CleanupResult(message=f"Processed {len(image_urls)} images", results=results)
