from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False, index=True)
    description = Column(Text)
    price = Column(Float, nullable=False)
    category = Column(String, nullable=False, index=True)  # rim, tyre
    in_stock = Column(Boolean, nullable=False, default=True, index=True)
    featured = Column(Boolean, nullable=False, default=False)

    vehicle_year = Column(String)
    vehicle_brand = Column(String, index=True)
    custom_brand = Column(String)
    vehicle_model = Column(String)
    rim_size = Column(String, index=True)
    rim_quantity = Column(String)
    stud_pattern = Column(String, index=True)
    center_bore = Column(String)
    custom_center_bore = Column(String)
    rim_width = Column(String)  # rear width on staggered sets
    front_rim_width = Column(String)
    is_staggered = Column(Boolean, default=False)
    front_offset = Column(String)
    rear_offset = Column(String)
    paint_condition = Column(String)
    tyre_quantity = Column(String)
    tyre_size = Column(String)
    front_tyre_size = Column(String)
    rear_tyre_size = Column(String)
    tyre_condition = Column(String)
    has_staggered_tyres = Column(Boolean, default=False)
    is_staggered_tyres = Column(Boolean, default=False)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, onupdate=func.now())

    images = relationship(
        "ProductImage",
        back_populates="product",
        order_by="ProductImage.position",
        cascade="all, delete-orphan",
    )


class ProductImage(Base):
    __tablename__ = "product_images"

    id = Column(Integer, primary_key=True)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url = Column(String, nullable=False)  # storage key, e.g. staging/1700000000000-ab12cd34.jpg
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    product = relationship("Product", back_populates="images")


class SoldProduct(Base):
    __tablename__ = "sold_products"

    id = Column(Integer, primary_key=True)
    original_product_id = Column(Integer, index=True)
    title = Column(String, nullable=False)
    brand = Column(String)
    rim_size = Column(String)
    price = Column(Float, nullable=False)
    category = Column(String)
    sold_at = Column(DateTime, server_default=func.now(), nullable=False)
