"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from vendorsync.adapters.feeds import DEFAULT_FEED_COLUMNS, CsvFeedParser
from vendorsync.adapters.snapshots import FileSnapshotStore
from vendorsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from vendorsync.config import get_storage_config, get_sync_config
from vendorsync.domain.model import SyncScope, Vendor
from vendorsync.domain.ports.unit_of_work import CatalogUnitOfWork
from vendorsync.domain.priority import (
    PriorityCache,
    PriorityRegistry,
    UnitOfWorkVendorDirectory,
    is_valid_rank,
)
from vendorsync.domain.sync import DifferentialSyncResult, SyncGuard, run_differential_sync

if TYPE_CHECKING:
    from vendorsync.adapters.feeds import FeedColumns
    from vendorsync.domain.ports.persistence import SnapshotStore
    from vendorsync.domain.priority import ConsistencyReport

UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]


log = getLogger(__name__)


@dataclass(slots=True)
class _AppState:
    guard: SyncGuard
    registry: PriorityRegistry | None = None
    registry_factory: UnitOfWorkFactory | None = None


_STATE = _AppState(guard=SyncGuard())


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyCatalogUnitOfWork


def get_priority_registry(
    *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> PriorityRegistry:
    """Return the process-wide registry, building it on first use.

    The registry is rebuilt whenever ``unit_of_work_factory`` differs from the one
    it was built with (``None`` meaning the default SQLAlchemy store), so ranks
    always come from the store being reconciled.
    """

    if _STATE.registry is None or unit_of_work_factory is not _STATE.registry_factory:
        effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
        config = get_sync_config()
        _STATE.registry = PriorityRegistry(
            UnitOfWorkVendorDirectory(effective_uow),
            cache=PriorityCache(ttl=timedelta(seconds=config.priority_cache_ttl_seconds)),
            unknown_rank=config.unknown_vendor_rank,
        )
        _STATE.registry_factory = unit_of_work_factory
    return _STATE.registry


def reset_app_state() -> None:
    """Drop the shared registry and sync guard (primarily for tests)."""

    _STATE.registry = None
    _STATE.registry_factory = None
    _STATE.guard = SyncGuard()


def sync_vendor_feed(
    vendor_slug: str,
    snapshot: str,
    *,
    company_id: int | None = None,
    columns: FeedColumns = DEFAULT_FEED_COLUMNS,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    snapshot_store: SnapshotStore | None = None,
) -> DifferentialSyncResult:
    """Reconcile the changed rows of one vendor feed snapshot for one scope."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    effective_store = snapshot_store or FileSnapshotStore(get_storage_config().snapshot_dir())
    scope = SyncScope(vendor_slug=vendor_slug, company_id=company_id)
    log.info("Starting differential sync for %s", scope)

    result = run_differential_sync(
        scope,
        snapshot,
        parse_rows=CsvFeedParser(columns),
        snapshot_store=effective_store,
        unit_of_work_factory=effective_uow,
        guard=_STATE.guard,
        registry=get_priority_registry(unit_of_work_factory=unit_of_work_factory),
    )

    log.info(
        "Finished sync for %s: status=%s, total=%s, added=%s, updated=%s, skipped=%s, errors=%s",
        scope,
        result.status,
        result.total_records,
        result.stats.records_added,
        result.stats.records_updated,
        result.stats.records_skipped,
        result.stats.records_errors,
    )
    return result


def lookup_vendor_priority(
    vendor_slug: str, *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> int:
    """Return the authority rank of ``vendor_slug`` (999 when unknown)."""

    return get_priority_registry(unit_of_work_factory=unit_of_work_factory).rank(vendor_slug)


def validate_vendor_priorities(
    *, unit_of_work_factory: UnitOfWorkFactory | None = None, strict: bool = False
) -> ConsistencyReport:
    """Report rank inconsistencies; with ``strict`` raise ``PriorityConsistencyError``."""

    registry = get_priority_registry(unit_of_work_factory=unit_of_work_factory)
    report = registry.validate_consistency()
    if strict:
        report.raise_for_issues()
    return report


def fix_vendor_priorities(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> int:
    """Resequence vendor ranks to ``1..N``; returns the number of vendors changed."""

    return get_priority_registry(unit_of_work_factory=unit_of_work_factory).auto_fix()


def register_vendor(
    slug: str,
    display_name: str,
    *,
    priority_rank: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Vendor:
    """Persist a new supported vendor and drop any cached rank for its keys."""

    if not slug.strip() or not display_name.strip():
        raise ValueError("Vendor slug and display name must not be blank")
    if priority_rank is not None and not is_valid_rank(priority_rank):
        raise ValueError(f"Priority rank must be a positive integer, got {priority_rank!r}")

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    vendor = Vendor(
        slug=slug.strip(), display_name=display_name.strip(), priority_rank=priority_rank
    )
    with effective_uow() as uow:
        uow.repositories.vendors.add(vendor)
        uow.commit()

    registry = get_priority_registry(unit_of_work_factory=unit_of_work_factory)
    for key in vendor.lookup_keys:
        registry.invalidate(key)
    log.info("Registered vendor %s with priority %s", vendor.slug, vendor.priority_rank)
    return vendor
