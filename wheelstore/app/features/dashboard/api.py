import asyncio
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from wheelstore.db.session import get_db

from .schemas import DashboardStats, RecentActivity, SalesSummary
from .service import (
    recent_activity as svc_recent_activity,
    sales_summary as svc_sales_summary,
    stock_counts as svc_stock_counts,
)

router = APIRouter()


@router.get(
    "/dashboard/stats",
    response_model=DashboardStats,
    summary="In-stock and out-of-stock product counts",
    tags=["dashboard"],
)
async def get_stats(db: Session = Depends(get_db)):
    return await asyncio.to_thread(svc_stock_counts, db)


@router.get(
    "/dashboard/sales",
    response_model=SalesSummary,
    summary="Sold rim totals, top size and the last six months of sales",
    tags=["dashboard"],
)
async def get_sales(db: Session = Depends(get_db)):
    return await asyncio.to_thread(svc_sales_summary, db)


@router.get(
    "/dashboard/recent-activity",
    response_model=List[RecentActivity],
    summary="Most recently updated products",
    tags=["dashboard"],
)
async def get_recent_activity(
    limit: int = Query(5, ge=1, le=50, description="Max items to return"),
    db: Session = Depends(get_db),
):
    return await asyncio.to_thread(svc_recent_activity, db, limit)
