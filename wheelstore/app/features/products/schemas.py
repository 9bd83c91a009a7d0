from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
from datetime import datetime

from wheelstore.services.storage_service import DeletionResult


class ProductImageIn(BaseModel):
    image_url: str = Field(..., description="Storage key of the image")
    position: Optional[int] = Field(
        None, description="Ignored on write; list order decides the position"
    )


class ProductImageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    image_url: str
    position: int


class ProductBase(BaseModel):
    title: str = Field(..., description="Listing title")
    description: Optional[str] = Field(None, description="Listing description")
    price: float = Field(..., gt=0, description="Price in the store currency")
    category: Literal["rim", "tyre"] = Field(..., description="rim or tyre")
    in_stock: bool = True
    featured: bool = False

    vehicle_year: Optional[str] = None
    vehicle_brand: Optional[str] = None
    custom_brand: Optional[str] = None
    vehicle_model: Optional[str] = None
    rim_size: Optional[str] = None
    rim_quantity: Optional[str] = None
    stud_pattern: Optional[str] = None
    center_bore: Optional[str] = None
    custom_center_bore: Optional[str] = None
    rim_width: Optional[str] = Field(None, description="Rear width on staggered sets")
    front_rim_width: Optional[str] = None
    is_staggered: bool = False
    front_offset: Optional[str] = None
    rear_offset: Optional[str] = None
    paint_condition: Optional[str] = None
    tyre_quantity: Optional[str] = None
    tyre_size: Optional[str] = None
    front_tyre_size: Optional[str] = None
    rear_tyre_size: Optional[str] = None
    tyre_condition: Optional[str] = None
    has_staggered_tyres: bool = False
    is_staggered_tyres: bool = False


class ProductWrite(ProductBase):
    """Payload to create or fully replace a product."""

    images: List[ProductImageIn] = Field(default_factory=list)
    images_to_delete: List[str] = Field(
        default_factory=list, description="Storage keys to remove after saving"
    )


class ProductOut(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Database identifier")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: Optional[datetime] = Field(
        None, description="Last update timestamp (UTC) if updated"
    )
    images: List[ProductImageOut] = Field(default_factory=list)
    image_deletions: Optional[List[DeletionResult]] = Field(
        None, description="Outcome of each requested image deletion"
    )


class ToggleStatus(BaseModel):
    field: str = Field(..., description="in_stock or featured")
    value: bool


class DeleteResult(BaseModel):
    id: int = Field(..., description="Deleted product id")
    deleted: bool = Field(..., description="Whether the product was deleted")
    image_deletions: List[DeletionResult] = Field(default_factory=list)


class SoldResult(BaseModel):
    id: int = Field(..., description="Archived product id")
    sold_product_id: int = Field(..., description="sold_products record id")
    message: str = "Product marked as sold and archived"
