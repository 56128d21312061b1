"""Bulk reconciliation of changed vendor rows into vendor mappings.

The procedure never creates master products; rows whose UPC is not in the
master catalog are skipped. Mapping inserts are written and committed as one
batch, then all in-place updates run inside a single transaction. A failing
update batch therefore rolls back only the updates, never the inserts that
were already committed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from vendorsync.domain.clock import utcnow
from vendorsync.domain.errors import BackingStoreError, BulkWriteError
from vendorsync.domain.model import (
    MappingFields,
    MasterFields,
    MasterProduct,
    VendorMapping,
    VendorRow,
    try_normalize_upc,
)
from vendorsync.domain.replacement import decide_replacement

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from vendorsync.domain.clock import Clock
    from vendorsync.domain.ports.unit_of_work import CatalogUnitOfWork
    from vendorsync.domain.priority import PriorityRegistry

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconciliationStats:
    """Counters returned to the caller; no row-level detail is kept."""

    records_added: int = 0
    records_updated: int = 0
    records_skipped: int = 0
    records_errors: int = 0
    master_records_updated: int = 0

    @property
    def records_processed(self) -> int:
        return (
            self.records_added + self.records_updated + self.records_skipped + self.records_errors
        )


@dataclass(slots=True)
class _MappingPlan:
    inserts: list[VendorMapping] = field(default_factory=list[VendorMapping])
    updates: list[tuple[VendorMapping, MappingFields]] = field(
        default_factory=list[tuple[VendorMapping, MappingFields]]
    )
    master_updates: list[tuple[MasterProduct, MasterFields]] = field(
        default_factory=list[tuple[MasterProduct, MasterFields]]
    )


def reconcile_vendor_rows(
    vendor_slug: str,
    rows: Sequence[VendorRow],
    *,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    company_id: int | None = None,
    registry: PriorityRegistry | None = None,
    manual_override: bool = False,
    clock: Clock = utcnow,
) -> ReconciliationStats:
    """Apply ``rows`` from ``vendor_slug`` to the vendor mappings of one scope.

    Rows proposing master fields are only applied to the master product when
    ``registry`` is given and the replacement decision allows it. Raises
    ``BulkWriteError`` when a batched insert or update fails.
    """

    stats = ReconciliationStats()
    rows_by_upc = _rows_by_upc(rows, stats)
    if not rows_by_upc:
        log.info("No rows with a valid UPC for %s (skipped=%s)", vendor_slug, stats.records_skipped)
        return stats

    now = clock()
    with unit_of_work_factory() as uow:
        products = uow.repositories.products.get_by_upcs(list(rows_by_upc))
        existing = uow.repositories.mappings.for_vendor_scope(vendor_slug, company_id)
        log.info(
            "Reconciling %s rows for %s (company=%s): %s products, %s existing mappings",
            len(rows_by_upc),
            vendor_slug,
            company_id,
            len(products),
            len(existing),
        )

        plan = _MappingPlan()
        for upc, row in rows_by_upc.items():
            product = products.get(upc)
            if product is None:
                log.debug("UPC %s not in master catalog; skipping", upc)
                stats.records_skipped += 1
                continue
            try:
                values = row.mapping_fields()
            except (ValueError, TypeError, ArithmeticError) as exc:
                # RowValidationError is a ValueError
                log.warning("Row for UPC %s rejected: %s", upc, exc)
                stats.records_errors += 1
                continue

            mapping = existing.get(product.id)
            if mapping is None:
                plan.inserts.append(
                    VendorMapping.create(
                        product_id=product.id,
                        vendor_slug=vendor_slug,
                        company_id=company_id,
                        values=values,
                        at=now,
                    )
                )
            elif mapping.values != values:
                plan.updates.append((mapping, values))
            else:
                stats.records_skipped += 1

            if row.master_fields is not None and registry is not None:
                proposal = row.master_fields
                if product.differs_from(proposal, vendor_slug) and decide_replacement(
                    product,
                    vendor_slug,
                    registry=registry,
                    manual_override=manual_override,
                ):
                    plan.master_updates.append((product, proposal))

        log.info(
            "Executing bulk operations: %s inserts, %s updates, %s master updates",
            len(plan.inserts),
            len(plan.updates),
            len(plan.master_updates),
        )
        _insert_mappings(uow, plan.inserts)
        stats.records_added = len(plan.inserts)
        _apply_updates(uow, plan, vendor_slug=vendor_slug, at=now)
        stats.records_updated = len(plan.updates)
        stats.master_records_updated = len(plan.master_updates)

    log.info(
        "Reconciled %s: added=%s updated=%s skipped=%s errors=%s master_updated=%s",
        vendor_slug,
        stats.records_added,
        stats.records_updated,
        stats.records_skipped,
        stats.records_errors,
        stats.master_records_updated,
    )
    return stats


def _rows_by_upc(rows: Sequence[VendorRow], stats: ReconciliationStats) -> dict[str, VendorRow]:
    """Key rows by normalised UPC; invalid UPCs and earlier duplicates count as skipped."""

    by_upc: dict[str, VendorRow] = {}
    for row in rows:
        upc = try_normalize_upc(row.upc)
        if upc is None:
            stats.records_skipped += 1
            continue
        if upc in by_upc:
            # last occurrence in the feed wins
            stats.records_skipped += 1
        by_upc[upc] = row
    return by_upc


def _insert_mappings(uow: CatalogUnitOfWork, inserts: list[VendorMapping]) -> None:
    if not inserts:
        return
    try:
        uow.repositories.mappings.add_all(inserts)
        uow.commit()
    except BackingStoreError as exc:
        uow.rollback()
        raise BulkWriteError("insert", len(inserts), cause=exc) from exc


def _apply_updates(
    uow: CatalogUnitOfWork, plan: _MappingPlan, *, vendor_slug: str, at: datetime
) -> None:
    if not plan.updates and not plan.master_updates:
        return
    try:
        for mapping, values in plan.updates:
            mapping.apply(values, at=at)
            uow.repositories.mappings.update(mapping)
        for product, proposal in plan.master_updates:
            product.apply(proposal, source=vendor_slug, at=at)
        uow.commit()
    except BackingStoreError as exc:
        uow.rollback()
        raise BulkWriteError("update", len(plan.updates), cause=exc) from exc
