"""Per-feed differential sync: guard, diff, reconcile, persist the snapshot."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from vendorsync.domain.differential import ChangeSet, diff_snapshots
from vendorsync.domain.reconciliation import ReconciliationStats, reconcile_vendor_rows

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from vendorsync.domain.model import SyncScope
    from vendorsync.domain.ports.feeds import FeedRowParser
    from vendorsync.domain.ports.persistence import SnapshotStore
    from vendorsync.domain.ports.unit_of_work import CatalogUnitOfWork
    from vendorsync.domain.priority import PriorityRegistry

log = logging.getLogger(__name__)


class JobState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"


class SyncGuard:
    """Per-scope ``IDLE -> RUNNING -> IDLE`` state machine with atomic transitions.

    A second caller for a scope that is already running is refused instead of
    queued.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._states: dict[SyncScope, JobState] = {}

    def state(self, scope: SyncScope) -> JobState:
        with self._lock:
            return self._states.get(scope, JobState.IDLE)

    def try_acquire(self, scope: SyncScope) -> bool:
        with self._lock:
            if self._states.get(scope, JobState.IDLE) is JobState.RUNNING:
                return False
            self._states[scope] = JobState.RUNNING
            return True

    def release(self, scope: SyncScope) -> None:
        with self._lock:
            if self._states.get(scope, JobState.IDLE) is not JobState.RUNNING:
                raise RuntimeError(f"Sync job {scope} is not running")
            self._states[scope] = JobState.IDLE

    @contextmanager
    def hold(self, scope: SyncScope) -> Iterator[bool]:
        """Yield whether the guard was acquired; release it on exit if so."""

        acquired = self.try_acquire(scope)
        try:
            yield acquired
        finally:
            if acquired:
                self.release(scope)


class SyncStatus(StrEnum):
    SUCCESS = "success"
    NO_CHANGES = "no_changes"
    ALREADY_RUNNING = "already_running"


@dataclass(slots=True)
class DifferentialSyncResult:
    """Outcome of one differential sync run."""

    scope: SyncScope
    status: SyncStatus
    total_records: int = 0
    change_set: ChangeSet | None = None
    stats: ReconciliationStats = field(default_factory=ReconciliationStats)


def run_differential_sync(
    scope: SyncScope,
    snapshot: str,
    *,
    parse_rows: FeedRowParser,
    snapshot_store: SnapshotStore,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    guard: SyncGuard,
    registry: PriorityRegistry | None = None,
) -> DifferentialSyncResult:
    """Reconcile only the rows of ``snapshot`` that changed since the last success.

    The snapshot becomes the next baseline only after reconciliation returns;
    any exception leaves the previous baseline in place and propagates.
    """

    with guard.hold(scope) as acquired:
        if not acquired:
            log.info("Sync for %s already running; skipping", scope)
            return DifferentialSyncResult(scope=scope, status=SyncStatus.ALREADY_RUNNING)

        change_set = diff_snapshots(snapshot_store.load(scope), snapshot)
        total_records = max(change_set.stats.total_lines - 1, 0)

        if not change_set.has_changes:
            snapshot_store.save(scope, snapshot)
            return DifferentialSyncResult(
                scope=scope,
                status=SyncStatus.NO_CHANGES,
                total_records=total_records,
                change_set=change_set,
                stats=ReconciliationStats(records_skipped=total_records),
            )

        rows = parse_rows(change_set.changed_lines)
        log.info("Parsed %s changed rows for %s", len(rows), scope)
        stats = reconcile_vendor_rows(
            scope.vendor_slug,
            rows,
            unit_of_work_factory=unit_of_work_factory,
            company_id=scope.company_id,
            registry=registry,
        )
        snapshot_store.save(scope, snapshot)

    return DifferentialSyncResult(
        scope=scope,
        status=SyncStatus.SUCCESS,
        total_records=total_records,
        change_set=change_set,
        stats=stats,
    )
