# wheelstore/authoring/image_compressor.py
from __future__ import annotations

import io
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .errors import EncodeError, ImageDecodeError

DEFAULT_MAX_WIDTH = 1200
DEFAULT_QUALITY = 0.8


@dataclass(frozen=True)
class LocalImageFile:
    """An image selected on the authoring side, held in memory until upload.

    `correlation_id` ties the file to the pending ImageRef created for it;
    the staged image store assigns a fresh one per selection.
    """

    name: str
    data: bytes = field(repr=False)
    content_type: Optional[str] = None
    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return Path(self.name).suffix.lower()

    @classmethod
    def from_path(cls, path) -> "LocalImageFile":
        path = Path(path)
        return cls(name=path.name, data=path.read_bytes())


def compress_image(
    source: LocalImageFile,
    max_width: int = DEFAULT_MAX_WIDTH,
    quality: float = DEFAULT_QUALITY,
) -> LocalImageFile:
    """Downscale to `max_width` (never upscale) and re-encode.

    `.png` sources stay PNG; everything else becomes JPEG at `quality` (0..1).
    The returned file keeps the source name and correlation id.
    """
    try:
        with Image.open(io.BytesIO(source.data)) as opened:
            opened.load()
            image = opened.copy()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageDecodeError(source.name, f"Failed to load image ({exc})") from exc

    width, height = image.size
    if width > max_width:
        height = max(1, round(height * max_width / width))
        width = max_width
        image = image.resize((width, height), Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    try:
        if source.extension == ".png":
            content_type = "image/png"
            image.save(buffer, format="PNG", optimize=True)
        else:
            content_type = "image/jpeg"
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            image.save(buffer, format="JPEG", quality=round(quality * 100))
    except (OSError, ValueError) as exc:
        raise EncodeError(source.name, f"Could not encode image ({exc})") from exc

    data = buffer.getvalue()
    if not data:
        raise EncodeError(source.name, "Could not create image data")

    return LocalImageFile(
        name=source.name,
        data=data,
        content_type=content_type,
        correlation_id=source.correlation_id,
    )
