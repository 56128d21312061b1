"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Final, cast

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from vendorsync.adapters.sqlalchemy.mappings import (
    product_table,
    vendor_mapping_table,
    vendor_table,
)
from vendorsync.domain.errors import BackingStoreError
from vendorsync.domain.model import MasterProduct, Vendor, VendorMapping

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator, Sequence
    from uuid import UUID

    from sqlalchemy.orm import Session

# keeps each IN clause below SQLite's bound parameter limit
IN_CLAUSE_CHUNK_SIZE: Final[int] = 500


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Re-raise driver and ORM failures as ``BackingStoreError``."""

    try:
        yield
    except SQLAlchemyError as exc:
        raise BackingStoreError(f"Failed to {action}: {exc}") from exc


def _chunks[T](items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class SqlAlchemyVendorRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Vendor) -> None:
        with translate_errors("add vendor"):
            self.session.add(entity)
            self.session.flush()

    def find_by_key(self, key: str) -> Vendor | None:
        normalized = key.strip().lower()
        if not normalized:
            return None
        with translate_errors(f"look up vendor {key!r}"):
            for column in (vendor_table.c.slug, vendor_table.c.display_name):
                stmt = (
                    select(Vendor)
                    .where(func.lower(func.trim(column)) == normalized)
                    .order_by(vendor_table.c.slug)
                    .limit(1)
                )
                vendor = self.session.execute(stmt).scalar_one_or_none()
                if vendor is not None:
                    return vendor
        return None

    def list_all(self) -> list[Vendor]:
        stmt = select(Vendor).order_by(
            vendor_table.c.priority_rank.is_(None),
            vendor_table.c.priority_rank,
            vendor_table.c.slug,
        )
        with translate_errors("list vendors"):
            return list(self.session.execute(stmt).scalars())


class SqlAlchemyProductRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: MasterProduct) -> None:
        with translate_errors("add product"):
            self.session.add(entity)
            self.session.flush()

    def get_by_upcs(self, upcs: Collection[str]) -> dict[str, MasterProduct]:
        unique = sorted(set(upcs))
        results: dict[str, MasterProduct] = {}
        with translate_errors("load products by UPC"):
            for chunk in _chunks(unique, IN_CLAUSE_CHUNK_SIZE):
                stmt = select(MasterProduct).where(product_table.c.upc.in_(chunk))
                for product in self.session.execute(stmt).scalars():
                    results[product.upc] = product
        return results


class SqlAlchemyVendorMappingRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: VendorMapping) -> None:
        self.add_all([entity])

    def add_all(self, mappings: Sequence[VendorMapping]) -> None:
        with translate_errors(f"insert {len(mappings)} vendor mappings"):
            self.session.add_all(mappings)
            self.session.flush()

    def update(self, mapping: VendorMapping) -> None:
        with translate_errors("update vendor mapping"):
            # merge keeps detached instances working; attached ones are returned as-is
            self.session.merge(mapping)

    def for_vendor_scope(
        self, vendor_slug: str, company_id: int | None
    ) -> dict[UUID, VendorMapping]:
        company_clause = (
            vendor_mapping_table.c.company_id.is_(None)
            if company_id is None
            else vendor_mapping_table.c.company_id == company_id
        )
        stmt = (
            select(VendorMapping)
            .where(vendor_mapping_table.c.vendor_slug == vendor_slug)
            .where(company_clause)
        )
        with translate_errors(f"load mappings for {vendor_slug}"):
            return {
                mapping.product_id: mapping for mapping in self.session.execute(stmt).scalars()
            }


if TYPE_CHECKING:
    from vendorsync.domain.ports.persistence import (
        ProductRepository,
        VendorMappingRepository,
        VendorRepository,
    )

    _session_stub = cast("Session", object())
    _vendor_repo: VendorRepository = SqlAlchemyVendorRepository(_session_stub)
    _product_repo: ProductRepository = SqlAlchemyProductRepository(_session_stub)
    _mapping_repo: VendorMappingRepository = SqlAlchemyVendorMappingRepository(_session_stub)
