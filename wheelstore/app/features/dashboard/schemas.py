from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DashboardStats(BaseModel):
    in_stock_count: int = Field(..., description="Products currently in stock")
    out_of_stock_count: int = Field(..., description="Products marked out of stock")


class MonthlySales(BaseModel):
    month: str = Field(..., description="Month label, e.g. 'Mar 2026'")
    sales: int = 0
    revenue: float = 0.0


class SalesSummary(BaseModel):
    total_sales: int = Field(..., description="Sold rim products")
    total_revenue: float = Field(..., description="Sum of sold prices")
    average_price: float = Field(..., description="Revenue / sales, 0 when empty")
    top_selling_size: str = Field(..., description="Most sold rim size, 'N/A' when empty")
    monthly_sales: List[MonthlySales] = Field(default_factory=list)
    is_empty: bool = Field(..., description="True when nothing has been sold yet")


class RecentActivity(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    in_stock: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
