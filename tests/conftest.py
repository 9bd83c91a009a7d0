import io
import os
import sys
from pathlib import Path
from typing import List

import pytest
from PIL import Image

# Ensure repository root is on sys.path so `import wheelstore.*` works
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Provide safe default env vars for tests (overridden by real .env if present)
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_S3_PRODUCT_IMAGES_BUCKET", "test-bucket")

from wheelstore.authoring.errors import StorageError  # noqa: E402
from wheelstore.authoring.image_compressor import LocalImageFile  # noqa: E402
from wheelstore.services.storage_service import DeletionResult  # noqa: E402


def make_image_bytes(width=64, height=32, fmt="JPEG", mode="RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color="red").save(buffer, format=fmt)
    return buffer.getvalue()


def make_file(name="wheel.jpg", **kwargs) -> LocalImageFile:
    fmt = "PNG" if name.lower().endswith(".png") else "JPEG"
    return LocalImageFile(name=name, data=make_image_bytes(fmt=fmt, **kwargs))


class FakeStorage:
    """In-memory stand-in for S3ImageStorage / HttpImageStorage."""

    bucket = "test-bucket"

    def __init__(self, fail_upload_on: int = None, fail_delete: List[str] = ()):
        self.objects = {}
        self.uploads = []
        self.deleted = []
        self.fail_upload_on = fail_upload_on
        self.fail_delete = set(fail_delete)

    def exists(self, path):
        return path in self.objects

    def upload(self, path, data, *, content_type=None, overwrite=False):
        if self.fail_upload_on is not None and len(self.uploads) + 1 == self.fail_upload_on:
            self.uploads.append(path)
            raise StorageError(path, "simulated upload failure")
        self.uploads.append(path)
        self.objects[path] = data
        return path

    def delete(self, paths):
        results = []
        for path in paths:
            if path in self.fail_delete:
                results.append(DeletionResult(path=path, success=False, error="boom"))
                continue
            self.deleted.append(path)
            self.objects.pop(path, None)
            results.append(DeletionResult(path=path, success=True))
        return results

    def copy(self, source, destination):
        if source not in self.objects:
            raise StorageError(source, "missing source")
        self.objects[destination] = self.objects[source]
        return destination

    def presigned_url(self, path, expires_in=3600):
        return f"https://signed.example/{path}"


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def jpeg_file():
    return make_file("wheel.jpg")
