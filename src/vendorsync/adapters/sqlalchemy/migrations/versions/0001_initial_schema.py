"""create vendor registry, master catalog and vendor mapping tables

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "supported_vendor",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("priority_rank", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_supported_vendor"),
        sa.UniqueConstraint("slug", name="uq_supported_vendor_slug"),
    )

    op.create_table(
        "product",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("upc", sa.String(12), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("source", sa.String(100), nullable=True),
        sa.Column("brand", sa.String(255), nullable=True),
        sa.Column("model", sa.String(255), nullable=True),
        sa.Column("manufacturer_part_number", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("image_source", sa.String(100), nullable=True),
        sa.Column("category", sa.String(255), nullable=True),
        sa.Column("subcategory1", sa.String(255), nullable=True),
        sa.Column("subcategory2", sa.String(255), nullable=True),
        sa.Column("subcategory3", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_product"),
        sa.UniqueConstraint("upc", name="uq_product_upc"),
    )

    op.create_table(
        "vendor_product_mapping",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("product_id", sa.Uuid(), nullable=False),
        sa.Column("vendor_slug", sa.String(100), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=True),
        sa.Column("vendor_sku", sa.String(255), nullable=True),
        sa.Column("vendor_cost", sa.String(32), nullable=True),
        sa.Column("map_price", sa.String(32), nullable=True),
        sa.Column("msrp_price", sa.String(32), nullable=True),
        sa.Column("quantity_available", sa.Integer(), nullable=True),
        sa.Column("last_price_update", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_vendor_product_mapping"),
        sa.UniqueConstraint(
            "product_id",
            "vendor_slug",
            "company_id",
            name="uq_vendor_product_mapping_product_id",
        ),
    )
    op.create_index(
        "ix_vendor_product_mapping_vendor_scope",
        "vendor_product_mapping",
        ["vendor_slug", "company_id"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_vendor_product_mapping_vendor_scope", table_name="vendor_product_mapping"
    )
    op.drop_table("vendor_product_mapping")
    op.drop_table("product")
    op.drop_table("supported_vendor")
