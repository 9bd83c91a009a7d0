from typing import List, Optional

from pydantic import BaseModel, Field

from wheelstore.services.storage_service import DeletionResult


class StoredImage(BaseModel):
    path: str = Field(..., description="Storage key the image was written to")
    url: Optional[str] = Field(None, description="Presigned download URL")


class DeleteImageRequest(BaseModel):
    path: str = Field(..., description="Storage key, or a public URL when full_url is set")
    full_url: bool = Field(False, description="Treat `path` as a public object URL")


class CleanupRequest(BaseModel):
    image_urls: List[str] = Field(..., description="Storage keys or public URLs")


class CleanupResult(BaseModel):
    message: str
    results: List[DeletionResult]
