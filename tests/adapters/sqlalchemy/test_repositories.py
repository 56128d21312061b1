"""Exercise SQLAlchemy catalog repositories against in-memory SQLite."""

from __future__ import annotations

from decimal import Decimal
from typing import Never, cast

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from vendorsync.adapters.sqlalchemy.repositories import (
    IN_CLAUSE_CHUNK_SIZE,
    SqlAlchemyProductRepository,
    SqlAlchemyVendorMappingRepository,
    SqlAlchemyVendorRepository,
)
from vendorsync.domain.errors import BackingStoreError
from vendorsync.domain.model import MasterProduct, Vendor, VendorMapping


class _FailingSession:
    """Session stub whose queries fail like an unreachable database."""

    def execute(self, *_args: object, **_kwargs: object) -> Never:
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))


def test_find_by_key_matches_slug_then_display_name(sqlite_session: Session) -> None:
    repo = SqlAlchemyVendorRepository(sqlite_session)
    repo.add(Vendor(slug="alpha", display_name="Beta Supply", priority_rank=2))
    repo.add(Vendor(slug="beta", display_name="Beta", priority_rank=1))
    repo.add(Vendor(slug="lipseys", display_name="Lipsey's", priority_rank=3))

    by_slug = repo.find_by_key("  BETA ")
    by_name = repo.find_by_key("lipsey's")

    assert by_slug is not None
    assert by_slug.slug == "beta"
    assert by_name is not None
    assert by_name.slug == "lipseys"
    assert repo.find_by_key("unknown") is None
    assert repo.find_by_key("   ") is None


def test_list_all_orders_by_rank_with_nulls_last(sqlite_session: Session) -> None:
    repo = SqlAlchemyVendorRepository(sqlite_session)
    repo.add(Vendor(slug="c", display_name="C"))
    repo.add(Vendor(slug="b", display_name="B", priority_rank=2))
    repo.add(Vendor(slug="a", display_name="A", priority_rank=1))

    assert [vendor.slug for vendor in repo.list_all()] == ["a", "b", "c"]


def test_get_by_upcs_returns_only_known_products(sqlite_session: Session) -> None:
    repo = SqlAlchemyProductRepository(sqlite_session)
    repo.add(MasterProduct(upc="012345678905", name="Widget"))
    repo.add(MasterProduct(upc="098765432109", name="Gadget"))

    found = repo.get_by_upcs(["012345678905", "111111111111", "012345678905"])

    assert list(found) == ["012345678905"]
    assert found["012345678905"].name == "Widget"
    assert repo.get_by_upcs([]) == {}


def test_get_by_upcs_chunks_large_requests(sqlite_session: Session) -> None:
    repo = SqlAlchemyProductRepository(sqlite_session)
    upcs = [f"{index:012d}" for index in range(1, IN_CLAUSE_CHUNK_SIZE * 2 + 5)]
    for upc in upcs[::7]:
        repo.add(MasterProduct(upc=upc, name=upc))

    found = repo.get_by_upcs(upcs)

    assert set(found) == set(upcs[::7])


def test_for_vendor_scope_separates_admin_and_company(sqlite_session: Session) -> None:
    products = SqlAlchemyProductRepository(sqlite_session)
    product = MasterProduct(upc="012345678905", name="Widget")
    products.add(product)
    repo = SqlAlchemyVendorMappingRepository(sqlite_session)
    admin = VendorMapping(product_id=product.id, vendor_slug="lipseys", vendor_sku="ADMIN")
    company = VendorMapping(
        product_id=product.id, vendor_slug="lipseys", company_id=5, vendor_sku="CO"
    )
    other_vendor = VendorMapping(product_id=product.id, vendor_slug="chattanooga")
    repo.add_all([admin, company, other_vendor])

    admin_scope = repo.for_vendor_scope("lipseys", None)
    company_scope = repo.for_vendor_scope("lipseys", 5)

    assert admin_scope[product.id].vendor_sku == "ADMIN"
    assert company_scope[product.id].vendor_sku == "CO"
    assert repo.for_vendor_scope("lipseys", 6) == {}


def test_update_persists_changes(sqlite_session: Session) -> None:
    product = MasterProduct(upc="012345678905", name="Widget")
    SqlAlchemyProductRepository(sqlite_session).add(product)
    repo = SqlAlchemyVendorMappingRepository(sqlite_session)
    mapping = VendorMapping(product_id=product.id, vendor_slug="lipseys")
    repo.add(mapping)
    sqlite_session.commit()

    mapping.vendor_cost = Decimal("4.20")
    repo.update(mapping)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    reloaded = repo.for_vendor_scope("lipseys", None)[product.id]
    assert reloaded.vendor_cost == Decimal("4.20")


def test_duplicate_scope_mapping_raises_backing_store_error(sqlite_session: Session) -> None:
    product = MasterProduct(upc="012345678905", name="Widget")
    SqlAlchemyProductRepository(sqlite_session).add(product)
    repo = SqlAlchemyVendorMappingRepository(sqlite_session)
    repo.add(VendorMapping(product_id=product.id, vendor_slug="lipseys", company_id=1))

    with pytest.raises(BackingStoreError):
        repo.add_all([VendorMapping(product_id=product.id, vendor_slug="lipseys", company_id=1)])


def test_database_errors_are_translated() -> None:
    session = cast(Session, _FailingSession())

    with pytest.raises(BackingStoreError, match="database is locked"):
        SqlAlchemyVendorRepository(session).find_by_key("lipseys")
    with pytest.raises(BackingStoreError):
        SqlAlchemyProductRepository(session).get_by_upcs(["012345678905"])
    with pytest.raises(BackingStoreError):
        SqlAlchemyVendorMappingRepository(session).for_vendor_scope("lipseys", None)
