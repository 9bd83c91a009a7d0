from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from wheelstore.app.features.products.schemas import ProductOut

PAGE_SIZE = 10
ALL = "all"


class SortOption(str, Enum):
    NEWEST = "newest"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"


class CatalogQuery(BaseModel):
    search: Optional[str] = Field(None, description="Matches title, description or brand")
    category: Optional[str] = None
    stud_pattern: Optional[str] = None
    rim_size: Optional[str] = None
    is_staggered: Optional[bool] = None
    vehicle_brand: Optional[str] = None
    in_stock: Optional[bool] = None
    sort: SortOption = SortOption.NEWEST
    page: int = Field(1, description="1-based; clamped to the last page")
    page_size: int = Field(PAGE_SIZE, ge=1, le=100)


class CatalogPage(BaseModel):
    items: List[ProductOut]
    page: int
    page_size: int
    total: int = Field(..., description="Products matching the filters")
    total_pages: int
    available: int = Field(..., description="Products before filtering")
