import logging
from typing import List, Optional, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, Field

from wheelstore.authoring.errors import StorageError

logger = logging.getLogger(__name__)

_PUBLIC_MARKER = "storage/v1/object/public/"


class DeletionResult(BaseModel):
    path: str = Field(..., description="Storage key that was targeted")
    success: bool = Field(..., description="Whether the object was removed")
    error: Optional[str] = Field(None, description="Failure reason when not removed")


def _is_not_found(exc: ClientError) -> bool:
    # 404 means not found; other errors bubble up to caller
    return exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode") == 404 or (
        exc.response.get("Error", {}).get("Code") in {"404", "NotFound", "NoSuchKey"}
    )


def storage_path_from_url(url: str, bucket: str) -> str:
    """Reduce a public object URL to its key inside `bucket`.

    Plain keys are returned unchanged.
    """
    path = url
    if _PUBLIC_MARKER in path:
        path = path.split(_PUBLIC_MARKER, 1)[1]
    marker = f"{bucket}/"
    if path.startswith("http") or path.startswith(marker):
        parts = path.split(marker, 1)
        if len(parts) > 1:
            path = parts[1]
    return path


class S3ImageStorage:
    """Durable product image storage on an S3-compatible bucket.

    The boto3 client is injected so the hosting process owns its lifecycle.
    """

    def __init__(self, client, bucket: str):
        self._client = client
        self.bucket = bucket

    @classmethod
    def from_settings(cls, settings) -> "S3ImageStorage":
        client = boto3.client(
            "s3",
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            region_name=settings.AWS_REGION,
            endpoint_url=settings.AWS_S3_ENDPOINT_URL,
        )
        return cls(client, settings.AWS_S3_PRODUCT_IMAGES_BUCKET)

    def exists(self, path: str) -> bool:
        """Check whether an object exists without downloading it."""
        try:
            self._client.head_object(Bucket=self.bucket, Key=path)
            return True
        except ClientError as exc:
            if _is_not_found(exc):
                return False
            raise StorageError(path, str(exc)) from exc

    def upload(
        self,
        path: str,
        data: bytes,
        *,
        content_type: Optional[str] = None,
        overwrite: bool = False,
    ) -> str:
        if not overwrite and self.exists(path):
            raise StorageError(path, "object already exists")
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=path,
                Body=data,
                CacheControl="max-age=3600",
                **extra,
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(path, str(exc)) from exc
        return path

    def delete(self, paths: Sequence[str]) -> List[DeletionResult]:
        """Delete every path independently and report the outcome of each."""
        results: List[DeletionResult] = []
        for path in paths:
            key = storage_path_from_url(path, self.bucket)
            try:
                self._client.delete_object(Bucket=self.bucket, Key=key)
                results.append(DeletionResult(path=key, success=True))
            except (ClientError, BotoCoreError) as exc:
                logger.warning("Error deleting %s from storage: %s", key, exc)
                results.append(DeletionResult(path=key, success=False, error=str(exc)))
        return results

    def copy(self, source: str, destination: str) -> str:
        try:
            self._client.copy_object(
                Bucket=self.bucket,
                Key=destination,
                CopySource={"Bucket": self.bucket, "Key": source},
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(source, str(exc)) from exc
        return destination

    def presigned_url(self, path: str, expires_in: int = 3600) -> str:
        return self._client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": path},
            ExpiresIn=expires_in,
        )
