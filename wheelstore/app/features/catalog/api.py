import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from wheelstore.db.session import get_db

from .schemas import CatalogPage, CatalogQuery, SortOption
from .service import catalog_page as svc_catalog_page

router = APIRouter()


@router.get(
    "/catalog",
    response_model=CatalogPage,
    response_model_exclude_none=True,
    summary="Browse the public catalog",
    tags=["catalog"],
)
async def get_catalog(
    search: Optional[str] = Query(None, description="Title, description or brand"),
    category: Optional[str] = Query(None, description="rim, tyre or all"),
    stud_pattern: Optional[str] = Query(None),
    rim_size: Optional[str] = Query(None),
    is_staggered: Optional[bool] = Query(None),
    vehicle_brand: Optional[str] = Query(None),
    in_stock: Optional[bool] = Query(None),
    sort: SortOption = Query(SortOption.NEWEST),
    page: int = Query(1, description="1-based page number"),
    db: Session = Depends(get_db),
):
    query = CatalogQuery(
        search=search,
        category=category,
        stud_pattern=stud_pattern,
        rim_size=rim_size,
        is_staggered=is_staggered,
        vehicle_brand=vehicle_brand,
        in_stock=in_stock,
        sort=sort,
        page=page,
    )
    return await asyncio.to_thread(svc_catalog_page, db, query)
