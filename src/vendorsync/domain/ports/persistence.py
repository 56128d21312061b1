"""Ports for persisting the vendor registry, master catalog and vendor mappings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from vendorsync.domain.model import MasterProduct, SyncScope, Vendor, VendorMapping

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, Sequence
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class VendorRepository(Repository[Vendor], Protocol):
    """Persistence contract for the vendor registry."""

    def find_by_key(self, key: str) -> Vendor | None:
        """Match ``key`` against slugs first, then display names (case-insensitive)."""
        ...

    def list_all(self) -> Sequence[Vendor]: ...


@runtime_checkable
class ProductRepository(Repository[MasterProduct], Protocol):
    """Persistence contract for master catalog products."""

    def get_by_upcs(self, upcs: Collection[str]) -> dict[str, MasterProduct]: ...


@runtime_checkable
class VendorMappingRepository(Repository[VendorMapping], Protocol):
    """Persistence contract for vendor mappings."""

    def for_vendor_scope(
        self, vendor_slug: str, company_id: int | None
    ) -> dict[UUID, VendorMapping]:
        """Return every mapping of ``vendor_slug`` in the given scope keyed by product id."""
        ...

    def add_all(self, mappings: Sequence[VendorMapping]) -> None: ...

    def update(self, mapping: VendorMapping) -> None: ...


@runtime_checkable
class VendorDirectory(Protocol):
    """Session-independent access to vendors for the long-lived priority registry."""

    def find_vendor(self, key: str) -> Vendor | None: ...

    def list_vendors(self) -> Sequence[Vendor]: ...

    def assign_priority_ranks(self, ranks: Mapping[UUID, int]) -> None: ...


@runtime_checkable
class SnapshotStore(Protocol):
    """Storage for the last successfully reconciled feed snapshot per sync scope."""

    def load(self, scope: SyncScope) -> str | None: ...

    def save(self, scope: SyncScope, content: str) -> None: ...

