from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from wheelstore.app.features.products.models import Product, SoldProduct

from .schemas import DashboardStats, MonthlySales, RecentActivity, SalesSummary

SALES_WINDOW_MONTHS = 6
RECENT_ACTIVITY_LIMIT = 5


def stock_counts(db: Session) -> DashboardStats:
    rows = db.execute(
        select(Product.in_stock, func.count(Product.id)).group_by(Product.in_stock)
    ).all()
    counts = {bool(in_stock): int(count) for in_stock, count in rows}
    return DashboardStats(
        in_stock_count=counts.get(True, 0),
        out_of_stock_count=counts.get(False, 0),
    )


def _month_label(year: int, month: int) -> str:
    return datetime(year, month, 1).strftime("%b %Y")


def _recent_months(now: datetime, count: int) -> List[str]:
    """Labels for the last `count` months, oldest first, ending with `now`'s month."""
    labels = []
    for back in range(count - 1, -1, -1):
        index = now.year * 12 + (now.month - 1) - back
        labels.append(_month_label(index // 12, index % 12 + 1))
    return labels


def sales_summary(db: Session, now: Optional[datetime] = None) -> SalesSummary:
    """Aggregate the sold rim archive: totals, top size and monthly buckets.

    The last six months are always present (zero-filled); sales older than
    that get their own bucket after them.
    """
    sold = (
        db.execute(
            select(SoldProduct)
            .where(SoldProduct.category == "rim")
            .order_by(SoldProduct.sold_at.desc(), SoldProduct.id.desc())
        )
        .scalars()
        .all()
    )
    if not sold:
        return SalesSummary(
            total_sales=0,
            total_revenue=0.0,
            average_price=0.0,
            top_selling_size="N/A",
            monthly_sales=[],
            is_empty=True,
        )

    total_revenue = sum(item.price or 0 for item in sold)
    sizes = Counter(item.rim_size or "Unknown" for item in sold)
    top_size = sizes.most_common(1)[0][0]

    buckets: Dict[str, MonthlySales] = {
        label: MonthlySales(month=label)
        for label in _recent_months(now or datetime.now(timezone.utc), SALES_WINDOW_MONTHS)
    }
    for item in sold:
        if item.sold_at is None:
            continue
        label = _month_label(item.sold_at.year, item.sold_at.month)
        bucket = buckets.setdefault(label, MonthlySales(month=label))
        bucket.sales += 1
        bucket.revenue += item.price or 0

    return SalesSummary(
        total_sales=len(sold),
        total_revenue=total_revenue,
        average_price=total_revenue / len(sold),
        top_selling_size=top_size,
        monthly_sales=list(buckets.values()),
        is_empty=False,
    )


def recent_activity(db: Session, limit: int = RECENT_ACTIVITY_LIMIT) -> List[RecentActivity]:
    # rows never updated sort by their creation time
    touched = func.coalesce(Product.updated_at, Product.created_at)
    products = (
        db.execute(select(Product).order_by(touched.desc(), Product.id.desc()).limit(limit))
        .scalars()
        .all()
    )
    return [RecentActivity.model_validate(product) for product in products]
