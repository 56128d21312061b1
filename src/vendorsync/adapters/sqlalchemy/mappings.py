"""SQLAlchemy mapping metadata for the vendorsync domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from vendorsync.domain.model import MasterProduct, Vendor, VendorMapping

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class DecimalString(TypeDecorator[Decimal]):
    """Store prices as exact decimal strings regardless of backend numeric support."""

    impl = String(32)
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> Decimal | None:
        _ = dialect
        if value is None:
            return None
        return Decimal(value)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Tables -----------------------------------------------------------------------

vendor_table = Table(
    "supported_vendor",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("slug", String(100), nullable=False, unique=True),
    Column("display_name", String(255), nullable=False),
    Column("priority_rank", Integer, nullable=True),
)

product_table = Table(
    "product",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("upc", String(12), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("source", String(100), nullable=True),
    Column("brand", String(255), nullable=True),
    Column("model", String(255), nullable=True),
    Column("manufacturer_part_number", String(255), nullable=True),
    Column("description", Text, nullable=True),
    Column("image_url", String, nullable=True),
    Column("image_source", String(100), nullable=True),
    Column("category", String(255), nullable=True),
    Column("subcategory1", String(255), nullable=True),
    Column("subcategory2", String(255), nullable=True),
    Column("subcategory3", String(255), nullable=True),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
)

vendor_mapping_table = Table(
    "vendor_product_mapping",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("product_id", UUIDColumnType, nullable=False),
    Column("vendor_slug", String(100), nullable=False),
    Column("company_id", Integer, nullable=True),
    Column("vendor_sku", String(255), nullable=True),
    Column("vendor_cost", DecimalString(), nullable=True),
    Column("map_price", DecimalString(), nullable=True),
    Column("msrp_price", DecimalString(), nullable=True),
    Column("quantity_available", Integer, nullable=True),
    Column("last_price_update", UTCDateTime(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
    UniqueConstraint("product_id", "vendor_slug", "company_id"),
    Index("ix_vendor_product_mapping_vendor_scope", "vendor_slug", "company_id"),
)


@cache
def start_mappers() -> orm.registry:
    """Map domain dataclasses onto their tables exactly once per process."""

    mapper_registry.map_imperatively(Vendor, vendor_table)
    mapper_registry.map_imperatively(MasterProduct, product_table)
    mapper_registry.map_imperatively(VendorMapping, vendor_mapping_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
