# wheelstore/authoring/staged_images.py
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from .errors import CapacityExceeded, StorageError
from .image_compressor import LocalImageFile

logger = logging.getLogger(__name__)

MAX_IMAGES = 6


@dataclass
class ImageRef:
    """One product image, either pending (local preview) or committed (storage path)."""

    id: str
    url: str
    position: int
    pending: bool = False
    marked_for_deletion: bool = False
    file: Optional[LocalImageFile] = field(default=None, repr=False)
    correlation_id: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return {"id": self.id, "image_url": self.url, "position": self.position}

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "ImageRef":
        return cls(
            id=str(data.get("id") or uuid.uuid4()),
            url=data["image_url"],
            position=int(data.get("position") or 0),
        )


class MoveDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class PreviewAllocator(Protocol):
    def create_preview(self, file: LocalImageFile) -> str: ...

    def release_preview(self, handle: str) -> None: ...


class InMemoryPreviewAllocator:
    """Session-scoped preview handles backed by the selected file's bytes."""

    def __init__(self):
        self._previews: Dict[str, LocalImageFile] = {}

    def create_preview(self, file: LocalImageFile) -> str:
        handle = f"preview:{uuid.uuid4().hex}"
        self._previews[handle] = file
        return handle

    def release_preview(self, handle: str) -> None:
        self._previews.pop(handle, None)

    def get(self, handle: str) -> Optional[LocalImageFile]:
        return self._previews.get(handle)

    @property
    def live_handles(self) -> List[str]:
        return list(self._previews)


class StagedImageStore:
    """Ordered, capacity-bounded image list for the draft being authored.

    Positions are always `0..len-1` in display order. In edit mode, removing a
    committed image only queues its storage path; the delete happens when the
    product is saved.
    """

    def __init__(
        self,
        previews: PreviewAllocator,
        *,
        storage=None,
        editing: bool = False,
        max_images: int = MAX_IMAGES,
        images: Iterable[ImageRef] = (),
    ):
        self._previews = previews
        self._storage = storage
        self.editing = editing
        self.max_images = max_images
        self._images: List[ImageRef] = sorted(images, key=lambda ref: ref.position)
        self._deletion_queue: List[ImageRef] = []
        self._renumber()

    def __len__(self) -> int:
        return len(self._images)

    @property
    def images(self) -> List[ImageRef]:
        return list(self._images)

    @property
    def pending_images(self) -> List[ImageRef]:
        return [ref for ref in self._images if ref.pending]

    @property
    def pending_files(self) -> List[LocalImageFile]:
        return [ref.file for ref in self.pending_images]

    @property
    def committed_paths(self) -> List[str]:
        return [ref.url for ref in self._images if not ref.pending]

    @property
    def deletion_queue(self) -> List[str]:
        return [ref.url for ref in self._deletion_queue]

    def _renumber(self) -> None:
        for position, ref in enumerate(self._images):
            ref.position = position

    def add(self, files: Sequence[LocalImageFile]) -> List[ImageRef]:
        files = list(files)
        current = len(self._images)
        if current + len(files) > self.max_images:
            raise CapacityExceeded(current, len(files), self.max_images)

        added = []
        for offset, file in enumerate(files):
            # one id per selection, even when the same file is picked twice
            file = replace(file, correlation_id=uuid.uuid4().hex)
            ref = ImageRef(
                id=f"temp-{uuid.uuid4()}",
                url=self._previews.create_preview(file),
                position=current + offset,
                pending=True,
                file=file,
                correlation_id=file.correlation_id,
            )
            added.append(ref)
        self._images.extend(added)
        return added

    async def remove(self, index: int) -> ImageRef:
        if not 0 <= index < len(self._images):
            raise IndexError(f"No image at position {index}")
        ref = self._images[index]

        if ref.pending:
            self._previews.release_preview(ref.url)
        elif self.editing:
            ref.marked_for_deletion = True
            self._deletion_queue.append(ref)
            logger.info("Image %s marked for removal on save", ref.url)
        else:
            await self._delete_now(ref)

        del self._images[index]
        self._renumber()
        return ref

    async def _delete_now(self, ref: ImageRef) -> None:
        if self._storage is None:
            raise RuntimeError("Image storage is required to remove uploaded images")
        results = await asyncio.to_thread(self._storage.delete, [ref.url])
        failed = [result for result in results if not result.success]
        if failed:
            raise StorageError(ref.url, failed[0].error or "delete failed")
        logger.info("Image %s removed from storage", ref.url)

    def move(self, index: int, direction: MoveDirection) -> None:
        direction = MoveDirection(direction)
        target = index - 1 if direction is MoveDirection.UP else index + 1
        if not 0 <= index < len(self._images) or not 0 <= target < len(self._images):
            return
        self._images[index], self._images[target] = (
            self._images[target],
            self._images[index],
        )
        self._renumber()

    def commit_uploads(self, uploaded: Sequence[ImageRef]) -> None:
        """Swap pending refs for their uploaded counterparts, keeping display order."""
        by_correlation = {ref.correlation_id: ref for ref in uploaded}
        for index, ref in enumerate(self._images):
            if not ref.pending:
                continue
            committed = by_correlation.get(ref.correlation_id)
            if committed is None:
                continue
            self._previews.release_preview(ref.url)
            self._images[index] = committed
        self._renumber()

    def clear_deletion_queue(self) -> None:
        self._deletion_queue = []

    def release_previews(self) -> None:
        for ref in self.pending_images:
            self._previews.release_preview(ref.url)

    def reset(self) -> None:
        self.release_previews()
        self._images = []
        self._deletion_queue = []
