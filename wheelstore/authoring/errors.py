# wheelstore/authoring/errors.py
from __future__ import annotations

from typing import List, Optional, Sequence


class AuthoringError(Exception):
    """Base class for every error raised by the product authoring core."""


class ValidationError(AuthoringError):
    """The draft cannot be submitted yet; the user can fix it."""

    def __init__(self, messages: Sequence[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class CapacityExceeded(AuthoringError):
    def __init__(self, current: int, requested: int, limit: int):
        self.current = current
        self.requested = requested
        self.limit = limit
        remaining = max(limit - current, 0)
        super().__init__(
            f"You can only upload up to {limit} images per product "
            f"({remaining} more allowed, {requested} selected)"
        )


class CompressionError(AuthoringError):
    def __init__(self, file_name: str, reason: str):
        self.file_name = file_name
        super().__init__(f"{file_name}: {reason}")


class ImageDecodeError(CompressionError):
    pass


class EncodeError(CompressionError):
    pass


class StorageError(AuthoringError):
    """Durable storage rejected or failed an operation."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class UploadBatchFailed(AuthoringError):
    """One file of a pending-upload batch failed; the whole batch is void.

    `orphaned_paths` lists objects from earlier files in the batch that could
    not be cleaned up and are left in storage.
    """

    def __init__(
        self,
        file_name: str,
        cause: Exception,
        orphaned_paths: Optional[List[str]] = None,
    ):
        self.file_name = file_name
        self.cause = cause
        self.orphaned_paths = list(orphaned_paths or [])
        super().__init__(f"Failed to upload {file_name}: {cause}")


class DeletionPartialFailure(AuthoringError):
    """Some marked images could not be removed from storage. Never fatal."""

    def __init__(self, failures):
        self.failures = list(failures)
        paths = ", ".join(f.path for f in self.failures)
        super().__init__(f"Could not delete {len(self.failures)} image(s): {paths}")


class ProductSaveError(AuthoringError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class InvalidTransition(AuthoringError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move the form from {current.value} to {target.value}")
