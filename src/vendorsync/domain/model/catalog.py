"""Master catalog and per-vendor mapping records."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from datetime import datetime
    from decimal import Decimal


@dataclass(frozen=True, slots=True, kw_only=True)
class MasterFields:
    """Non-pricing product fields owned by exactly one vendor at a time.

    ``None`` means "not proposed": applying a proposal leaves those fields untouched.
    """

    name: str | None = None
    brand: str | None = None
    model: str | None = None
    manufacturer_part_number: str | None = None
    description: str | None = None
    image_url: str | None = None
    image_source: str | None = None
    category: str | None = None
    subcategory1: str | None = None
    subcategory2: str | None = None
    subcategory3: str | None = None

    def proposed(self) -> dict[str, str]:
        values = {item.name: getattr(self, item.name) for item in fields(self)}
        return {name: value for name, value in values.items() if value is not None}

    def is_empty(self) -> bool:
        return not self.proposed()


@dataclass(eq=False, kw_only=True)
class MasterProduct:
    """Canonical product keyed by a normalised 12-digit UPC."""

    upc: str
    name: str
    source: str | None = None
    brand: str | None = None
    model: str | None = None
    manufacturer_part_number: str | None = None
    description: str | None = None
    image_url: str | None = None
    image_source: str | None = None
    category: str | None = None
    subcategory1: str | None = None
    subcategory2: str | None = None
    subcategory3: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)

    def differs_from(self, proposal: MasterFields, source: str) -> bool:
        """Whether applying ``proposal`` on behalf of ``source`` would change anything."""
        if self.source != source:
            return True
        return any(getattr(self, name) != value for name, value in proposal.proposed().items())

    def apply(self, proposal: MasterFields, *, source: str, at: datetime) -> None:
        for name, value in proposal.proposed().items():
            setattr(self, name, value)
        self.source = source
        self.updated_at = at

    def __repr__(self) -> str:
        return f"MasterProduct(upc={self.upc!r}, source={self.source!r})"


@dataclass(frozen=True, slots=True, kw_only=True)
class MappingFields:
    """Vendor-specific, non-authoritative fields compared on every sync."""

    vendor_sku: str | None = None
    vendor_cost: Decimal | None = None
    map_price: Decimal | None = None
    msrp_price: Decimal | None = None
    quantity_available: int | None = None


@dataclass(eq=False, kw_only=True)
class VendorMapping:
    """One vendor's SKU, pricing and stock for a master product.

    ``company_id`` is ``None`` for the admin/global mapping and set for store-specific
    pricing overrides.
    """

    product_id: UUID
    vendor_slug: str
    company_id: int | None = None
    vendor_sku: str | None = None
    vendor_cost: Decimal | None = None
    map_price: Decimal | None = None
    msrp_price: Decimal | None = None
    quantity_available: int | None = None
    last_price_update: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)

    @classmethod
    def create(
        cls,
        *,
        product_id: UUID,
        vendor_slug: str,
        company_id: int | None,
        values: MappingFields,
        at: datetime,
    ) -> VendorMapping:
        mapping = cls(product_id=product_id, vendor_slug=vendor_slug, company_id=company_id)
        mapping.apply(values, at=at)
        mapping.created_at = at
        return mapping

    @property
    def values(self) -> MappingFields:
        return MappingFields(
            vendor_sku=self.vendor_sku,
            vendor_cost=self.vendor_cost,
            map_price=self.map_price,
            msrp_price=self.msrp_price,
            quantity_available=self.quantity_available,
        )

    def apply(self, values: MappingFields, *, at: datetime) -> None:
        self.vendor_sku = values.vendor_sku
        self.vendor_cost = values.vendor_cost
        self.map_price = values.map_price
        self.msrp_price = values.msrp_price
        self.quantity_available = values.quantity_available
        self.last_price_update = at
        self.updated_at = at

    def __repr__(self) -> str:
        return (
            f"VendorMapping(product_id={self.product_id!s}, vendor_slug={self.vendor_slug!r}, "
            f"company_id={self.company_id!r})"
        )
