from __future__ import annotations

import math
from typing import Callable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from wheelstore.app.features.products.models import Product
from wheelstore.app.features.products.schemas import ProductOut

from .schemas import ALL, CatalogPage, CatalogQuery, SortOption


def _selected(value: Optional[str]) -> bool:
    return bool(value) and value != ALL


def _matches(query: CatalogQuery) -> List[Callable[[ProductOut], bool]]:
    checks = []
    if query.search:
        needle = query.search.casefold()

        def search(p: ProductOut) -> bool:
            fields = (p.title, p.description, p.vehicle_brand)
            return any(needle in (value or "").casefold() for value in fields)

        checks.append(search)
    if _selected(query.category):
        checks.append(lambda p: p.category == query.category)
    if _selected(query.stud_pattern):
        checks.append(lambda p: p.stud_pattern == query.stud_pattern)
    if _selected(query.rim_size):
        checks.append(lambda p: p.rim_size == query.rim_size)
    if query.is_staggered is not None:
        checks.append(lambda p: bool(p.is_staggered) == query.is_staggered)
    if _selected(query.vehicle_brand) and query.vehicle_brand != "All Brands":
        checks.append(lambda p: p.vehicle_brand == query.vehicle_brand)
    if query.in_stock is not None:
        checks.append(lambda p: p.in_stock == query.in_stock)
    return checks


def _sorted(products: List[ProductOut], sort: SortOption) -> List[ProductOut]:
    if sort is SortOption.PRICE_LOW:
        return sorted(products, key=lambda p: p.price)
    if sort is SortOption.PRICE_HIGH:
        return sorted(products, key=lambda p: p.price, reverse=True)
    if sort is SortOption.NAME_ASC:
        return sorted(products, key=lambda p: p.title.casefold())
    if sort is SortOption.NAME_DESC:
        return sorted(products, key=lambda p: p.title.casefold(), reverse=True)
    return sorted(products, key=lambda p: p.created_at, reverse=True)


def browse(products: Sequence[ProductOut], query: CatalogQuery) -> CatalogPage:
    """Search, filter, sort and paginate an in-memory product list."""
    checks = _matches(query)
    matched = [p for p in products if all(check(p) for check in checks)]
    ordered = _sorted(matched, query.sort)

    total_pages = max(1, math.ceil(len(ordered) / query.page_size))
    page = min(max(query.page, 1), total_pages)
    start = (page - 1) * query.page_size
    return CatalogPage(
        items=ordered[start : start + query.page_size],
        page=page,
        page_size=query.page_size,
        total=len(ordered),
        total_pages=total_pages,
        available=len(products),
    )


def catalog_page(db: Session, query: CatalogQuery) -> CatalogPage:
    rows = db.execute(
        select(Product)
        .options(selectinload(Product.images))
        .order_by(Product.created_at.desc())
    ).scalars()
    return browse([ProductOut.model_validate(row) for row in rows], query)
