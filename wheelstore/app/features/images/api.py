from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from wheelstore.app.core.dependencies import get_image_storage
from wheelstore.services.storage_service import DeletionResult

from .schemas import CleanupRequest, CleanupResult, DeleteImageRequest, StoredImage
from .service import (
    upload_image as svc_upload_image,
    delete_image as svc_delete_image,
    cleanup_images as svc_cleanup_images,
)

router = APIRouter()


@router.post(
    "/images",
    response_model=StoredImage,
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
    summary="Upload a product image to storage",
    tags=["images"],
)
async def upload_image(
    file: UploadFile = File(..., description="Image bytes (already compressed)"),
    path: str = Form(..., description="Destination storage key, e.g. staging/<name>.jpg"),
    include_url: bool = Form(False, description="Include a presigned URL"),
    storage=Depends(get_image_storage),
):
    """Stores the file at `path`. Existing keys are never overwritten (409)."""
    data = await file.read()
    return await svc_upload_image(
        storage,
        path=path,
        data=data,
        content_type=file.content_type,
        include_url=include_url,
    )


@router.post(
    "/images/delete",
    response_model=DeletionResult,
    response_model_exclude_none=True,
    summary="Delete one image from storage",
    tags=["images"],
)
async def delete_image(payload: DeleteImageRequest, storage=Depends(get_image_storage)):
    return await svc_delete_image(storage, path=payload.path, full_url=payload.full_url)


@router.post(
    "/images/cleanup",
    response_model=CleanupResult,
    summary="Delete staged images that were never saved with a product",
    tags=["images"],
)
async def cleanup_images(payload: CleanupRequest, storage=Depends(get_image_storage)):
    """Each path is attempted independently; failures are reported per path."""
    return await svc_cleanup_images(storage, payload.image_urls)
