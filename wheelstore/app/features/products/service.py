from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import List, Optional, Sequence

from fastapi import HTTPException
from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from wheelstore.authoring.errors import StorageError
from wheelstore.authoring.upload_pipeline import staging_path
from wheelstore.services.storage_service import DeletionResult
from wheelstore.settings import settings

from .models import Product, ProductImage, SoldProduct
from .schemas import DeleteResult, ProductOut, ProductWrite, SoldResult, ToggleStatus

logger = logging.getLogger(__name__)

TOGGLEABLE_FIELDS = {"in_stock", "featured"}
_WRITE_ONLY = {"images", "images_to_delete"}


def _load(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _product_to_out(
    product: Product, deletions: Optional[List[DeletionResult]] = None
) -> ProductOut:
    out = ProductOut.model_validate(product)
    out.image_deletions = deletions
    return out


def _apply(product: Product, data: ProductWrite) -> None:
    values = data.model_dump(exclude=_WRITE_ONLY)
    if values.get("center_bore") == "None":
        values["center_bore"] = None
    for name, value in values.items():
        setattr(product, name, value)
    product.images = [
        ProductImage(image_url=image.image_url, position=index)
        for index, image in enumerate(data.images)
    ]


def _delete_files(storage, paths: Sequence[str]) -> List[DeletionResult]:
    paths = [path for path in paths if path]
    if not paths or storage is None:
        return []
    results = storage.delete(paths)
    failed = [r for r in results if not r.success]
    if failed:
        logger.warning("%d of %d image deletions failed", len(failed), len(results))
    return results


def list_products(
    db: Session,
    *,
    category: Optional[str] = None,
    in_stock: Optional[bool] = None,
    featured: Optional[bool] = None,
    search: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[ProductOut]:
    query = select(Product).options(selectinload(Product.images))

    if category:
        query = query.where(Product.category == category)
    if in_stock is not None:
        query = query.where(Product.in_stock == in_stock)
    if featured is not None:
        query = query.where(Product.featured == featured)
    if search:
        like = f"%{search}%"
        query = query.where(
            or_(
                Product.title.ilike(like),
                Product.description.ilike(like),
                Product.vehicle_brand.ilike(like),
            )
        )

    query = (
        query.order_by(Product.created_at.desc(), Product.id.desc())
        .offset(offset)
        .limit(limit)
    )
    products = db.execute(query).scalars().all()
    return [_product_to_out(p) for p in products]


def get_product(db: Session, product_id: int) -> ProductOut:
    return _product_to_out(_load(db, product_id))


def create_product(db: Session, storage, data: ProductWrite) -> ProductOut:
    product = Product()
    _apply(product, data)
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Created product %s with %d image(s)", product.id, len(product.images))

    deletions = _delete_files(storage, data.images_to_delete)
    return _product_to_out(product, deletions)


def replace_product(
    db: Session, storage, product_id: int, data: ProductWrite
) -> ProductOut:
    product = _load(db, product_id)
    _apply(product, data)
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Updated product %s", product_id)

    deletions = _delete_files(storage, data.images_to_delete)
    return _product_to_out(product, deletions)


def delete_product(db: Session, storage, product_id: int) -> DeleteResult:
    product = _load(db, product_id)
    paths = [image.image_url for image in product.images]
    db.delete(product)
    db.commit()
    deletions = _delete_files(storage, paths)
    return DeleteResult(id=product_id, deleted=True, image_deletions=deletions)


def duplicate_product(db: Session, storage, product_id: int) -> ProductOut:
    """Copy a product row and its images; images that fail to copy are skipped."""
    original = _load(db, product_id)
    columns = [
        column.key
        for column in Product.__table__.columns
        if column.key not in {"id", "created_at", "updated_at"}
    ]
    copy = Product(**{name: getattr(original, name) for name in columns})

    for image in original.images:
        extension = PurePosixPath(image.image_url).suffix
        destination = staging_path(settings.STAGING_PREFIX, extension)
        try:
            storage.copy(image.image_url, destination)
        except StorageError as exc:
            logger.warning("Skipping image %s while duplicating: %s", image.image_url, exc)
            continue
        copy.images.append(ProductImage(image_url=destination, position=image.position))

    db.add(copy)
    db.commit()
    db.refresh(copy)
    logger.info("Duplicated product %s as %s", product_id, copy.id)
    return _product_to_out(copy)


def mark_sold(db: Session, storage, product_id: int) -> SoldResult:
    product = _load(db, product_id)
    if product.category != "rim":
        raise HTTPException(
            status_code=400, detail="Only rim products can be marked as sold"
        )

    sold = SoldProduct(
        original_product_id=product.id,
        title=product.title,
        brand=product.vehicle_brand or product.custom_brand or "Unknown",
        rim_size=product.rim_size or "Unknown",
        price=product.price,
        category=product.category,
    )
    paths = [image.image_url for image in product.images]
    db.add(sold)
    db.delete(product)
    db.commit()
    db.refresh(sold)

    _delete_files(storage, paths)
    return SoldResult(id=product_id, sold_product_id=sold.id)


def toggle_status(db: Session, product_id: int, data: ToggleStatus) -> ProductOut:
    if data.field not in TOGGLEABLE_FIELDS:
        raise HTTPException(
            status_code=400,
            detail="Invalid field. Only 'in_stock' and 'featured' can be toggled.",
        )
    product = _load(db, product_id)
    setattr(product, data.field, data.value)
    db.add(product)
    db.commit()
    db.refresh(product)
    return _product_to_out(product)
