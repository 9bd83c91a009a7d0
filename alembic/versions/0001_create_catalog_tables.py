"""Create products, product_images and sold_products tables

Revision ID: 0001_create_catalog_tables
Revises:
Create Date: 2025-03-02 10:15:00.000000

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_create_catalog_tables"
down_revision = None
branch_labels = None
depends_on = None

_TEXT_ATTRIBUTES = [
    "vehicle_year",
    "vehicle_brand",
    "custom_brand",
    "vehicle_model",
    "rim_size",
    "rim_quantity",
    "stud_pattern",
    "center_bore",
    "custom_center_bore",
    "rim_width",
    "front_rim_width",
    "front_offset",
    "rear_offset",
    "paint_condition",
    "tyre_quantity",
    "tyre_size",
    "front_tyre_size",
    "rear_tyre_size",
    "tyre_condition",
]


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("in_stock", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        *[sa.Column(name, sa.String(), nullable=True) for name in _TEXT_ATTRIBUTES],
        sa.Column("is_staggered", sa.Boolean(), nullable=True),
        sa.Column("has_staggered_tyres", sa.Boolean(), nullable=True),
        sa.Column("is_staggered_tyres", sa.Boolean(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("title", "category", "in_stock", "vehicle_brand", "rim_size", "stud_pattern"):
        op.create_index(op.f(f"ix_products_{column}"), "products", [column], unique=False)

    op.create_table(
        "product_images",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("image_url", sa.String(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_product_images_product_id"), "product_images", ["product_id"], unique=False
    )

    op.create_table(
        "sold_products",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("original_product_id", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("brand", sa.String(), nullable=True),
        sa.Column("rim_size", sa.String(), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column(
            "sold_at",
            sa.DateTime(),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_sold_products_original_product_id"),
        "sold_products",
        ["original_product_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_sold_products_original_product_id"), table_name="sold_products")
    op.drop_table("sold_products")
    op.drop_index(op.f("ix_product_images_product_id"), table_name="product_images")
    op.drop_table("product_images")
    for column in ("title", "category", "in_stock", "vehicle_brand", "rim_size", "stud_pattern"):
        op.drop_index(op.f(f"ix_products_{column}"), table_name="products")
    op.drop_table("products")
