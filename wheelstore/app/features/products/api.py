import asyncio
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from wheelstore.app.core.dependencies import get_image_storage
from wheelstore.db.session import get_db

from .schemas import DeleteResult, ProductOut, ProductWrite, SoldResult, ToggleStatus
from .service import (
    list_products as svc_list_products,
    get_product as svc_get_product,
    create_product as svc_create_product,
    replace_product as svc_replace_product,
    delete_product as svc_delete_product,
    duplicate_product as svc_duplicate_product,
    mark_sold as svc_mark_sold,
    toggle_status as svc_toggle_status,
)

router = APIRouter()


@router.get(
    "/products",
    response_model=List[ProductOut],
    response_model_exclude_none=True,
    summary="List products",
    tags=["products"],
)
async def get_products(
    category: Optional[str] = Query(None, description="rim or tyre"),
    in_stock: Optional[bool] = Query(None, description="Filter by stock status"),
    featured: Optional[bool] = Query(None, description="Filter by featured flag"),
    search: Optional[str] = Query(
        None, description="Case-insensitive search over title, description and brand"
    ),
    limit: int = Query(100, ge=1, le=500, description="Max items to return"),
    offset: int = Query(0, ge=0, description="Items to skip before collecting results"),
    db: Session = Depends(get_db),
):
    return await asyncio.to_thread(
        svc_list_products,
        db,
        category=category,
        in_stock=in_stock,
        featured=featured,
        search=search,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/products/{product_id}",
    response_model=ProductOut,
    response_model_exclude_none=True,
    summary="Get a product by id",
    tags=["products"],
)
async def get_product(
    product_id: int = Path(..., ge=1, description="Product id"),
    db: Session = Depends(get_db),
):
    return await asyncio.to_thread(svc_get_product, db, product_id)


@router.post(
    "/products",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
    summary="Create a new product",
    tags=["products"],
)
async def create_product(
    payload: ProductWrite,
    db: Session = Depends(get_db),
    storage=Depends(get_image_storage),
):
    """Creates the product and its image rows (position = list index).

    Paths in `images_to_delete` are removed from storage afterwards; their
    per-path outcome is returned in `image_deletions` and never fails the save.
    """
    return await asyncio.to_thread(svc_create_product, db, storage, payload)


@router.put(
    "/products/{product_id}",
    response_model=ProductOut,
    response_model_exclude_none=True,
    summary="Replace a product (full update)",
    tags=["products"],
)
async def replace_product(
    product_id: int = Path(..., ge=1, description="Product id"),
    payload: ProductWrite = ...,
    db: Session = Depends(get_db),
    storage=Depends(get_image_storage),
):
    return await asyncio.to_thread(
        svc_replace_product, db, storage, product_id, payload
    )


@router.delete(
    "/products/{product_id}",
    response_model=DeleteResult,
    summary="Delete a product and its image files",
    tags=["products"],
)
async def delete_product(
    product_id: int = Path(..., ge=1, description="Product id"),
    db: Session = Depends(get_db),
    storage=Depends(get_image_storage),
):
    return await asyncio.to_thread(svc_delete_product, db, storage, product_id)


@router.post(
    "/products/{product_id}/duplicate",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
    summary="Duplicate a product and copy its images",
    tags=["products"],
)
async def duplicate_product(
    product_id: int = Path(..., ge=1, description="Product id"),
    db: Session = Depends(get_db),
    storage=Depends(get_image_storage),
):
    return await asyncio.to_thread(svc_duplicate_product, db, storage, product_id)


@router.post(
    "/products/{product_id}/mark-sold",
    response_model=SoldResult,
    summary="Archive a rim product as sold and remove it",
    tags=["products"],
)
async def mark_sold(
    product_id: int = Path(..., ge=1, description="Product id"),
    db: Session = Depends(get_db),
    storage=Depends(get_image_storage),
):
    return await asyncio.to_thread(svc_mark_sold, db, storage, product_id)


@router.patch(
    "/products/{product_id}/toggle-status",
    response_model=ProductOut,
    response_model_exclude_none=True,
    summary="Set in_stock or featured",
    tags=["products"],
)
async def toggle_status(
    product_id: int = Path(..., ge=1, description="Product id"),
    payload: ToggleStatus = ...,
    db: Session = Depends(get_db),
):
    return await asyncio.to_thread(svc_toggle_status, db, product_id, payload)
