from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from tests.helpers.catalog import DEFAULT_NOW, make_product
from vendorsync.domain.errors import RowValidationError
from vendorsync.domain.model import (
    MappingFields,
    MasterFields,
    SyncScope,
    Vendor,
    VendorMapping,
    VendorRow,
    parse_price,
    parse_quantity,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("12.5", Decimal("12.50")),
        ("$1,299.99", Decimal("1299.99")),
        (Decimal("3.456"), Decimal("3.46")),
        (7, Decimal("7.00")),
        ("0", None),
        ("0.00", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_price(raw: object, expected: Decimal | None) -> None:
    assert parse_price(raw) == expected  # type: ignore[arg-type]


@pytest.mark.parametrize("raw", ["-1", "abc", "NaN", "Infinity", True])
def test_parse_price_rejects_invalid_values(raw: object) -> None:
    with pytest.raises(RowValidationError):
        parse_price(raw, field="vendor_cost")  # type: ignore[arg-type]


def test_parse_quantity() -> None:
    assert parse_quantity("12") == 12
    assert parse_quantity("3.0") == 3
    assert parse_quantity("") is None
    with pytest.raises(RowValidationError):
        parse_quantity("2.5")
    with pytest.raises(RowValidationError):
        parse_quantity("-1")


def test_parse_quantity_rejects_huge_exponents() -> None:
    assert parse_quantity("1e17") == 10**17
    with pytest.raises(RowValidationError, match="out of range"):
        parse_quantity("1e18")
    with pytest.raises(RowValidationError, match="out of range"):
        parse_quantity("1e999999999")


def test_vendor_row_coerces_numeric_sku() -> None:
    row = VendorRow(upc="012345678905", vendor_sku=12345)

    assert row.mapping_fields().vendor_sku == "12345"


def test_vendor_row_mapping_fields() -> None:
    row = VendorRow(
        upc="012345678905",
        vendor_sku="  SKU-9 ",
        vendor_cost="10",
        map_price="0",
        msrp_price=None,
        quantity_available="5",
    )

    assert row.mapping_fields() == MappingFields(
        vendor_sku="SKU-9",
        vendor_cost=Decimal("10.00"),
        quantity_available=5,
    )


def test_vendor_mapping_create_and_apply() -> None:
    values = MappingFields(vendor_sku="A", vendor_cost=Decimal("1.00"))
    mapping = VendorMapping.create(
        product_id=uuid4(), vendor_slug="lipseys", company_id=None, values=values, at=DEFAULT_NOW
    )

    assert mapping.values == values
    assert mapping.created_at == mapping.last_price_update == DEFAULT_NOW


def test_master_fields_only_propose_supplied_values() -> None:
    proposal = MasterFields(name="Widget", brand=None)

    assert proposal.proposed() == {"name": "Widget"}
    assert MasterFields().is_empty()


def test_master_product_apply_keeps_unproposed_fields() -> None:
    product = make_product("012345678905", source="chattanooga", name="Old")
    product.brand = "Keep"

    assert product.differs_from(MasterFields(name="Old"), "chattanooga") is False
    assert product.differs_from(MasterFields(name="Old"), "lipseys") is True

    product.apply(MasterFields(name="New"), source="lipseys", at=DEFAULT_NOW)

    assert product.name == "New"
    assert product.brand == "Keep"
    assert product.source == "lipseys"
    assert product.updated_at == DEFAULT_NOW


def test_vendor_lookup_keys() -> None:
    vendor = Vendor(slug="Lipseys", display_name=" Lipsey's ")

    assert vendor.lookup_keys == ("lipseys", "lipsey's")


def test_sync_scope_label() -> None:
    assert SyncScope("lipseys").label == "admin"
    assert SyncScope("lipseys", company_id=4).label == "company_4"
    assert SyncScope("lipseys").is_admin
    assert not SyncScope("lipseys", company_id=0).is_admin
    with pytest.raises(ValueError, match="blank"):
        SyncScope("  ")
