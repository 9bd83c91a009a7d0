# wheelstore/authoring/upload_pipeline.py
from __future__ import annotations

import asyncio
import logging
import secrets
import time
from typing import Callable, List, Optional, Sequence

from .errors import StorageError, UploadBatchFailed
from .image_compressor import DEFAULT_MAX_WIDTH, DEFAULT_QUALITY, LocalImageFile, compress_image
from .staged_images import ImageRef

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def staging_path(prefix: str, extension: str) -> str:
    """`{prefix}/{epoch_ms}-{token}{ext}`; unique enough for one admin session."""
    token = secrets.token_hex(4)
    return f"{prefix}/{int(time.time() * 1000)}-{token}{extension or '.jpg'}"


class ImageUploadPipeline:
    """Promotes pending images to durable storage and removes marked ones.

    `storage` is anything exposing `upload(path, data, content_type=...)` and
    `delete(paths)`; both are blocking and run in a worker thread.
    """

    def __init__(
        self,
        storage,
        *,
        staging_prefix: str = "staging",
        max_width: int = DEFAULT_MAX_WIDTH,
        quality: float = DEFAULT_QUALITY,
        rollback_on_failure: bool = True,
    ):
        self._storage = storage
        self.staging_prefix = staging_prefix.rstrip("/")
        self.max_width = max_width
        self.quality = quality
        self.rollback_on_failure = rollback_on_failure

    async def upload_pending(
        self,
        files: Sequence[LocalImageFile],
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[ImageRef]:
        files = list(files)
        if not files:
            return []

        total_steps = len(files) * 2
        steps = 0
        uploaded: List[ImageRef] = []

        def advance() -> None:
            nonlocal steps
            steps += 1
            if on_progress is not None:
                on_progress(steps / total_steps)

        for index, file in enumerate(files):
            try:
                compressed = await asyncio.to_thread(
                    compress_image, file, self.max_width, self.quality
                )
                advance()
                path = staging_path(self.staging_prefix, file.extension)
                stored = await asyncio.to_thread(
                    self._storage.upload,
                    path,
                    compressed.data,
                    content_type=compressed.content_type,
                )
                advance()
            except Exception as exc:
                logger.error("Upload batch aborted at %s: %s", file.name, exc)
                orphaned = await self._rollback(uploaded)
                raise UploadBatchFailed(file.name, exc, orphaned) from exc

            uploaded.append(
                ImageRef(
                    id=f"temp-{file.correlation_id}",
                    url=stored,
                    position=index,
                    pending=False,
                    correlation_id=file.correlation_id,
                )
            )
        logger.info("Uploaded %d image(s) to %s", len(uploaded), self.staging_prefix)
        return uploaded

    async def _rollback(self, uploaded: Sequence[ImageRef]) -> List[str]:
        paths = [ref.url for ref in uploaded]
        if not paths:
            return []
        if not self.rollback_on_failure:
            return paths
        try:
            results = await self.delete_marked(paths)
        except StorageError as exc:
            logger.warning("Could not roll back uploaded images: %s", exc)
            return paths
        orphaned = [result.path for result in results if not result.success]
        if orphaned:
            logger.warning("Left %d orphaned image(s) in storage: %s", len(orphaned), orphaned)
        return orphaned

    async def delete_marked(self, paths: Sequence[str]):
        """Delete every path independently; failures are reported, not raised."""
        paths = list(paths)
        if not paths:
            return []
        results = await asyncio.to_thread(self._storage.delete, paths)
        for result in results:
            if not result.success:
                logger.warning("Failed to delete image %s: %s", result.path, result.error)
        return results
