"""Reusable fakes and builders for catalog reconciliation tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Literal

from vendorsync.domain.errors import BackingStoreError
from vendorsync.domain.model import MasterProduct, SyncScope, Vendor, VendorMapping
from vendorsync.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping, Sequence
    from types import TracebackType
    from uuid import UUID

DEFAULT_NOW = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = DEFAULT_NOW) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def make_vendor(slug: str, rank: int | None = None, *, name: str | None = None) -> Vendor:
    display_name = name or slug.replace("-", " ").title()
    return Vendor(slug=slug, display_name=display_name, priority_rank=rank)


def make_product(upc: str, *, source: str | None = None, name: str | None = None) -> MasterProduct:
    return MasterProduct(upc=upc, name=name or f"Product {upc}", source=source)


class InMemoryVendorDirectory:
    """``VendorDirectory`` over a plain list with a switchable outage."""

    def __init__(self, vendors: Iterable[Vendor] = ()) -> None:
        self.vendors: list[Vendor] = list(vendors)
        self.failing = False
        self.lookups: list[str] = []
        self.assigned: list[dict[UUID, int]] = []

    def _check(self) -> None:
        if self.failing:
            raise BackingStoreError("vendor store unavailable")

    def find_vendor(self, key: str) -> Vendor | None:
        self._check()
        self.lookups.append(key)
        return _match_vendor(self.vendors, key)

    def list_vendors(self) -> list[Vendor]:
        self._check()
        return list(self.vendors)

    def assign_priority_ranks(self, ranks: Mapping[UUID, int]) -> None:
        self._check()
        self.assigned.append(dict(ranks))
        for vendor in self.vendors:
            if vendor.id in ranks:
                vendor.priority_rank = ranks[vendor.id]


def _match_vendor(vendors: Sequence[Vendor], key: str) -> Vendor | None:
    normalized = key.strip().lower()
    for vendor in vendors:
        if vendor.slug.strip().lower() == normalized:
            return vendor
    for vendor in vendors:
        if vendor.display_name.strip().lower() == normalized:
            return vendor
    return None


@dataclass
class CatalogState:
    """Committed contents shared by every fake unit of work."""

    vendors: list[Vendor] = field(default_factory=list[Vendor])
    products: dict[str, MasterProduct] = field(default_factory=dict[str, MasterProduct])
    mappings: list[VendorMapping] = field(default_factory=list[VendorMapping])
    commits: int = 0
    rollbacks: int = 0
    failing_commits: set[int] = field(default_factory=set[int])
    product_queries: int = 0
    mapping_queries: int = 0

    def add_products(self, *products: MasterProduct) -> None:
        for product in products:
            self.products[product.upc] = product

    def mappings_for(self, vendor_slug: str, company_id: int | None = None) -> list[VendorMapping]:
        return [
            mapping
            for mapping in self.mappings
            if mapping.vendor_slug == vendor_slug and mapping.company_id == company_id
        ]


class FakeVendorRepository:
    def __init__(self, state: CatalogState) -> None:
        self.state = state

    def add(self, entity: Vendor) -> None:
        self.state.vendors.append(entity)

    def find_by_key(self, key: str) -> Vendor | None:
        return _match_vendor(self.state.vendors, key)

    def list_all(self) -> list[Vendor]:
        return list(self.state.vendors)


class FakeProductRepository:
    def __init__(self, state: CatalogState) -> None:
        self.state = state

    def add(self, entity: MasterProduct) -> None:
        self.state.products[entity.upc] = entity

    def get_by_upcs(self, upcs: Collection[str]) -> dict[str, MasterProduct]:
        self.state.product_queries += 1
        return {upc: self.state.products[upc] for upc in upcs if upc in self.state.products}


class FakeVendorMappingRepository:
    def __init__(self, state: CatalogState) -> None:
        self.state = state
        self.pending: list[VendorMapping] = []
        self.updated: list[VendorMapping] = []

    def add(self, entity: VendorMapping) -> None:
        self.pending.append(entity)

    def add_all(self, mappings: Sequence[VendorMapping]) -> None:
        self.pending.extend(mappings)

    def update(self, mapping: VendorMapping) -> None:
        self.updated.append(mapping)

    def for_vendor_scope(
        self, vendor_slug: str, company_id: int | None
    ) -> dict[UUID, VendorMapping]:
        self.state.mapping_queries += 1
        return {
            mapping.product_id: mapping
            for mapping in self.state.mappings_for(vendor_slug, company_id)
        }


class FakeCatalogUnitOfWork:
    """Stages inserted mappings until commit; commit numbers in ``failing_commits`` raise."""

    def __init__(self, state: CatalogState) -> None:
        self.state = state
        self._mappings = FakeVendorMappingRepository(state)
        self._repositories = CatalogRepositories(
            vendors=FakeVendorRepository(state),
            products=FakeProductRepository(state),
            mappings=self._mappings,
        )

    @property
    def repositories(self) -> CatalogRepositories:
        return self._repositories

    def __enter__(self) -> FakeCatalogUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.state.commits += 1
        if self.state.commits in self.state.failing_commits:
            raise BackingStoreError(f"commit {self.state.commits} rejected")
        self.state.mappings.extend(self._mappings.pending)
        self._mappings.pending.clear()
        self._mappings.updated.clear()

    def rollback(self) -> None:
        self.state.rollbacks += 1
        self._mappings.pending.clear()
        self._mappings.updated.clear()


class InMemorySnapshotStore:
    def __init__(self) -> None:
        self.snapshots: dict[SyncScope, str] = {}
        self.saves: list[SyncScope] = []

    def load(self, scope: SyncScope) -> str | None:
        return self.snapshots.get(scope)

    def save(self, scope: SyncScope, content: str) -> None:
        self.saves.append(scope)
        self.snapshots[scope] = content


if TYPE_CHECKING:
    from vendorsync.domain.ports import SnapshotStore, VendorDirectory
    from vendorsync.domain.ports.unit_of_work import CatalogUnitOfWork

    _directory_check: VendorDirectory = InMemoryVendorDirectory()
    _uow_check: CatalogUnitOfWork = FakeCatalogUnitOfWork(CatalogState())
    _store_check: SnapshotStore = InMemorySnapshotStore()
