"""Vendor priority registry.

Resolves a vendor identifier to an integer authority rank (1 = highest) and
keeps the ``1..N`` rank sequence honest:

- ``PriorityRegistry.rank`` answers from a TTL cache and degrades to stale
  cache entries, then to ``UNKNOWN_VENDOR_RANK``, when the backing store fails
- ``validate_consistency`` reports null, duplicate, gapped and invalid ranks
- ``auto_fix`` is the only mutating operation and is never called implicitly
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from vendorsync.config.sync import DEFAULT_PRIORITY_CACHE_TTL_SECONDS, UNKNOWN_VENDOR_RANK
from vendorsync.domain.clock import utcnow
from vendorsync.domain.errors import (
    BackingStoreError,
    InvalidVendorSlugError,
    PriorityConsistencyError,
    VendorSyncError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence
    from uuid import UUID

    from vendorsync.domain.clock import Clock
    from vendorsync.domain.model import Vendor
    from vendorsync.domain.ports.persistence import VendorDirectory
    from vendorsync.domain.ports.unit_of_work import CatalogUnitOfWork

log = logging.getLogger(__name__)


def vendor_cache_key(slug: object) -> str:
    """Normalise a vendor slug or display name for lookups and cache keys."""

    if not isinstance(slug, str):
        raise InvalidVendorSlugError(f"Vendor slug must be a string, got {slug!r}")
    key = slug.strip().lower()
    if not key:
        raise InvalidVendorSlugError("Vendor slug must not be blank")
    return key


def is_valid_rank(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


# Cache -----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PriorityCacheEntry:
    slug: str
    rank: int
    cached_at: datetime


@dataclass(frozen=True, slots=True)
class CacheEntryStats:
    slug: str
    rank: int
    age_seconds: int
    fresh: bool


class PriorityCache:
    """Thread-safe TTL cache of resolved vendor ranks.

    Expired entries are kept until ``purge_expired`` or ``clear`` so lookups can
    fall back to them when the backing store is unavailable.
    """

    def __init__(
        self,
        *,
        ttl: timedelta = timedelta(seconds=DEFAULT_PRIORITY_CACHE_TTL_SECONDS),
        clock: Clock = utcnow,
    ) -> None:
        if ttl < timedelta(0):
            raise ValueError("Cache TTL must be non-negative")
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, PriorityCacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> PriorityCacheEntry | None:
        with self._lock:
            return self._entries.get(key)

    def is_fresh(self, entry: PriorityCacheEntry) -> bool:
        return self._clock() - entry.cached_at < self.ttl

    def put(self, key: str, rank: int) -> PriorityCacheEntry:
        entry = PriorityCacheEntry(slug=key, rank=rank, cached_at=self._clock())
        with self._lock:
            self._entries[key] = entry
        return entry

    def pop(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        return removed

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [
                key for key, entry in self._entries.items() if now - entry.cached_at >= self.ttl
            ]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def stats(self) -> list[CacheEntryStats]:
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())
        return [
            CacheEntryStats(
                slug=entry.slug,
                rank=entry.rank,
                age_seconds=int((now - entry.cached_at).total_seconds()),
                fresh=now - entry.cached_at < self.ttl,
            )
            for entry in entries
        ]


# Consistency -----------------------------------------------------------------


@dataclass(slots=True)
class ConsistencyReport:
    """Outcome of a ``1..N`` rank sequence check."""

    total_vendors: int
    issues: list[str] = field(default_factory=list[str])
    recommendations: list[str] = field(default_factory=list[str])

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def raise_for_issues(self) -> None:
        if self.issues:
            raise PriorityConsistencyError(self.issues)


def check_rank_consistency(vendors: Sequence[Vendor]) -> ConsistencyReport:
    """Inspect ``vendors`` for null, duplicate, gapped, overflowing and invalid ranks."""

    report = ConsistencyReport(total_vendors=len(vendors))
    if not vendors:
        return report

    unranked = [vendor for vendor in vendors if vendor.priority_rank is None]
    if unranked:
        names = ", ".join(vendor.display_name for vendor in unranked)
        report.issues.append(f"Found {len(unranked)} vendors with null priorities: {names}")
        report.recommendations.append("Run priority auto-fix to assign missing priorities")

    ranked = [vendor for vendor in vendors if vendor.priority_rank is not None]

    names_by_rank: dict[int, list[str]] = defaultdict(list)
    for vendor in ranked:
        rank = vendor.priority_rank
        if rank is not None:
            names_by_rank[rank].append(vendor.display_name)
    duplicates = {rank: names for rank, names in names_by_rank.items() if len(names) > 1}
    for rank in sorted(duplicates):
        report.issues.append(
            f"Priority {rank} is assigned to multiple vendors: {', '.join(duplicates[rank])}"
        )
    if duplicates:
        report.recommendations.append(
            "Reassign duplicate priorities to maintain a unique 1-N sequence"
        )

    if ranked:
        present = set(names_by_rank)
        expected = range(1, len(ranked) + 1)
        missing = [rank for rank in expected if rank not in present]
        overflow = sorted(
            rank for rank in (vendor.priority_rank for vendor in ranked)
            if rank is not None and rank > len(ranked)
        )
        if missing:
            report.issues.append(
                f"Missing priorities in 1-N sequence: {', '.join(map(str, missing))}"
            )
            report.recommendations.append(
                "Re-sequence priorities to fill gaps and keep a continuous 1-N order"
            )
        if overflow:
            report.issues.append(
                f"Priorities exceed vendor count ({len(ranked)}): {', '.join(map(str, overflow))}"
            )
            report.recommendations.append("Compress the priority sequence to fit the 1-N range")

    invalid = [vendor for vendor in ranked if not is_valid_rank(vendor.priority_rank)]
    if invalid:
        details = ", ".join(f"{vendor.display_name}({vendor.priority_rank})" for vendor in invalid)
        report.issues.append(
            f"Found {len(invalid)} vendors with invalid priority values: {details}"
        )
        report.recommendations.append("Priority values must be positive integers starting from 1")

    return report


def resequence_ranks(vendors: Sequence[Vendor]) -> dict[UUID, int]:
    """Return the ``1..N`` rank each vendor should hold, keyed by vendor id.

    Vendors keep their relative order; unranked vendors go last in their
    original order.
    """

    def _sort_key(vendor: Vendor) -> tuple[bool, float]:
        rank = vendor.priority_rank
        return (rank is None, float(rank) if rank is not None else 0.0)

    ordered = sorted(vendors, key=_sort_key)
    return {vendor.id: position for position, vendor in enumerate(ordered, start=1)}


# Registry --------------------------------------------------------------------


class PriorityRegistry:
    """Resolve vendor authority ranks with caching and stale-on-error fallback."""

    def __init__(
        self,
        directory: VendorDirectory,
        *,
        cache: PriorityCache | None = None,
        unknown_rank: int = UNKNOWN_VENDOR_RANK,
    ) -> None:
        self._directory = directory
        self.cache = cache or PriorityCache()
        self.unknown_rank = unknown_rank

    def rank(self, slug: str) -> int:
        """Return the rank for ``slug`` (vendor short code or display name).

        Unknown vendors and vendors without a valid rank resolve to
        ``unknown_rank``. Raises ``InvalidVendorSlugError`` for non-string or
        blank input.
        """

        key = vendor_cache_key(slug)
        cached = self.cache.get(key)
        if cached is not None and self.cache.is_fresh(cached):
            log.debug("Priority cache hit for %r -> %s", key, cached.rank)
            return cached.rank

        try:
            vendor = self._directory.find_vendor(key)
        except BackingStoreError as exc:
            if cached is not None:
                log.warning(
                    "Priority lookup for %r failed (%s); using stale cached rank %s",
                    key,
                    exc,
                    cached.rank,
                )
                return cached.rank
            log.warning(
                "Priority lookup for %r failed (%s); using default rank %s",
                key,
                exc,
                self.unknown_rank,
            )
            return self.unknown_rank

        rank = self._rank_for(vendor, key)
        self.cache.put(key, rank)
        return rank

    def cached_rank(self, slug: object) -> int | None:
        """Return the cached rank for ``slug`` without touching the backing store.

        Stale entries are returned as-is; ``None`` means "never resolved".
        """

        try:
            key = vendor_cache_key(slug)
        except InvalidVendorSlugError:
            return None
        cached = self.cache.get(key)
        if cached is None:
            return None
        if not self.cache.is_fresh(cached):
            log.debug("Using stale cached rank %s for %r", cached.rank, key)
        return cached.rank

    def invalidate(self, slug: str) -> bool:
        """Drop the cached rank for ``slug``; returns whether an entry was present."""

        try:
            key = vendor_cache_key(slug)
        except InvalidVendorSlugError:
            log.warning("Ignoring cache invalidation for invalid vendor slug %r", slug)
            return False
        removed = self.cache.pop(key)
        if removed:
            log.info("Priority cache invalidated for %r", key)
        return removed

    def clear(self) -> int:
        removed = self.cache.clear()
        log.info("Priority cache cleared (%s entries removed)", removed)
        return removed

    def cleanup_expired(self) -> int:
        removed = self.cache.purge_expired()
        if removed:
            log.info("Removed %s expired priority cache entries", removed)
        return removed

    def cache_stats(self) -> list[CacheEntryStats]:
        return self.cache.stats()

    def preload(self, slugs: Iterable[str]) -> int:
        """Warm the cache for ``slugs``; failures are logged and skipped.

        Returns the number of slugs resolved.
        """

        loaded = 0
        for slug in slugs:
            try:
                self.rank(slug)
            except VendorSyncError as exc:
                log.warning("Failed to preload priority for %r: %s", slug, exc)
                continue
            loaded += 1
        log.info("Preloaded priorities for %s vendors", loaded)
        return loaded

    def validate_consistency(self) -> ConsistencyReport:
        try:
            vendors = self._directory.list_vendors()
        except BackingStoreError as exc:
            log.exception("Vendor priority validation could not read vendors")
            return ConsistencyReport(
                total_vendors=0,
                issues=[f"Database error during validation: {exc}"],
                recommendations=["Check database connection and schema"],
            )
        report = check_rank_consistency(vendors)
        if report.is_valid:
            log.info("Vendor priorities are consistent (%s vendors)", report.total_vendors)
        else:
            log.warning("Vendor priority issues: %s", "; ".join(report.issues))
        return report

    def auto_fix(self) -> int:
        """Reassign ranks to ``1..N`` in current order; returns the number of vendors changed.

        Backing-store errors propagate: a half-applied repair must be visible.
        """

        vendors = self._directory.list_vendors()
        target = resequence_ranks(vendors)
        changed = [
            (vendor, vendor.priority_rank, target[vendor.id])
            for vendor in vendors
            if vendor.priority_rank != target[vendor.id]
        ]
        if not changed:
            log.info("Vendor priorities already form 1-%s; nothing to fix", len(vendors))
            return 0

        self._directory.assign_priority_ranks({vendor.id: new for vendor, _old, new in changed})
        for vendor, old, new in changed:
            log.info("Vendor %s priority %s -> %s", vendor.slug, old, new)
            for key in vendor.lookup_keys:
                self.cache.pop(key)
        return len(changed)

    def _rank_for(self, vendor: Vendor | None, key: str) -> int:
        if vendor is None:
            log.info("Vendor %r not registered; using default rank %s", key, self.unknown_rank)
            return self.unknown_rank
        raw = vendor.priority_rank
        if raw is None:
            log.info("Vendor %r has no priority; using default rank %s", key, self.unknown_rank)
            return self.unknown_rank
        if not is_valid_rank(raw):
            log.warning(
                "Vendor %r has invalid priority %r; using default rank %s",
                key,
                raw,
                self.unknown_rank,
            )
            return self.unknown_rank
        return raw


class UnitOfWorkVendorDirectory:
    """``VendorDirectory`` opening a short unit of work per call."""

    def __init__(self, unit_of_work_factory: Callable[[], CatalogUnitOfWork]) -> None:
        self._unit_of_work_factory = unit_of_work_factory

    def find_vendor(self, key: str) -> Vendor | None:
        with self._unit_of_work_factory() as uow:
            return uow.repositories.vendors.find_by_key(key)

    def list_vendors(self) -> list[Vendor]:
        with self._unit_of_work_factory() as uow:
            return list(uow.repositories.vendors.list_all())

    def assign_priority_ranks(self, ranks: Mapping[UUID, int]) -> None:
        with self._unit_of_work_factory() as uow:
            for vendor in uow.repositories.vendors.list_all():
                if vendor.id in ranks:
                    vendor.priority_rank = ranks[vendor.id]
            uow.commit()

