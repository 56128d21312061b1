"""Parsed vendor feed rows as handed over by the column-mapping layer."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Final

from vendorsync.domain.errors import RowValidationError
from vendorsync.domain.model.catalog import MappingFields, MasterFields

MAX_QUANTITY_DIGITS: Final[int] = 18

type RawValue = str | int | float | Decimal | None


@dataclass(frozen=True, slots=True, kw_only=True)
class VendorRow:
    """One changed feed row with fields already named but not yet typed.

    Values stay raw until reconciliation extracts them, so a malformed price on a
    single row is counted as a row error instead of failing the whole parse.
    """

    upc: RawValue = None
    vendor_sku: RawValue = None
    vendor_cost: RawValue = None
    map_price: RawValue = None
    msrp_price: RawValue = None
    quantity_available: RawValue = None
    master_fields: MasterFields | None = None

    def mapping_fields(self) -> MappingFields:
        """Extract typed mapping values, raising ``RowValidationError`` on bad input."""

        sku = str(self.vendor_sku).strip() if self.vendor_sku is not None else None
        return MappingFields(
            vendor_sku=sku or None,
            vendor_cost=parse_price(self.vendor_cost, field="vendor_cost"),
            map_price=parse_price(self.map_price, field="map_price"),
            msrp_price=parse_price(self.msrp_price, field="msrp_price"),
            quantity_available=parse_quantity(self.quantity_available),
        )


def _as_decimal(value: RawValue, *, field: str) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise RowValidationError(f"{field} must be numeric, got {value!r}", field=field)
    if isinstance(value, Decimal):
        number = value
    else:
        text = str(value).strip().replace("$", "").replace(",", "")
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation as exc:
            raise RowValidationError(
                f"{field} must be numeric, got {value!r}", field=field
            ) from exc
    if not number.is_finite():
        raise RowValidationError(f"{field} must be finite, got {value!r}", field=field)
    return number


def parse_price(value: RawValue, *, field: str = "price") -> Decimal | None:
    """Parse a vendor price; blank and zero prices mean "not supplied"."""

    number = _as_decimal(value, field=field)
    if number is None or number == 0:
        return None
    if number < 0:
        raise RowValidationError(f"{field} must not be negative, got {value!r}", field=field)
    try:
        return number.quantize(Decimal("0.01"))
    except InvalidOperation as exc:
        raise RowValidationError(f"{field} is out of range: {value!r}", field=field) from exc


def parse_quantity(value: RawValue) -> int | None:
    number = _as_decimal(value, field="quantity_available")
    if number is None:
        return None
    if number.adjusted() >= MAX_QUANTITY_DIGITS:
        raise RowValidationError(
            f"quantity_available is out of range: {value!r}", field="quantity_available"
        )
    if number != number.to_integral_value():
        raise RowValidationError(
            f"quantity_available must be a whole number, got {value!r}",
            field="quantity_available",
        )
    if number < 0:
        raise RowValidationError(
            f"quantity_available must not be negative, got {value!r}",
            field="quantity_available",
        )
    return int(number)
