"""Decide whether a vendor's data may overwrite a master record.

Rules are evaluated in order and the first match wins:

1. a manual override (operator re-ranking tool) always replaces
2. a vendor may always refresh data it already owns
3. otherwise the strictly better (lower) rank replaces; ties keep the
   existing owner so two equal-priority vendors never flap
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from vendorsync.domain.priority import vendor_cache_key

if TYPE_CHECKING:
    from vendorsync.domain.priority import PriorityRegistry

log = logging.getLogger(__name__)


class SourcedRecord(Protocol):
    """Anything carrying the slug of the vendor that owns its master fields."""

    @property
    def source(self) -> str | None: ...


class ReplacementReason(StrEnum):
    MANUAL_OVERRIDE = "manual_override"
    SAME_SOURCE = "same_source"
    HIGHER_PRIORITY = "higher_priority"
    EQUAL_PRIORITY = "equal_priority"
    LOWER_PRIORITY = "lower_priority"
    RANK_NOT_CACHED = "rank_not_cached"


@dataclass(frozen=True, slots=True)
class ReplacementDecision:
    replace: bool
    reason: ReplacementReason
    existing_rank: int | None = None
    candidate_rank: int | None = None

    def __bool__(self) -> bool:
        return self.replace


def _compare(existing_rank: int, candidate_rank: int) -> ReplacementDecision:
    if candidate_rank < existing_rank:
        reason, replace = ReplacementReason.HIGHER_PRIORITY, True
    elif candidate_rank == existing_rank:
        reason, replace = ReplacementReason.EQUAL_PRIORITY, False
    else:
        reason, replace = ReplacementReason.LOWER_PRIORITY, False
    return ReplacementDecision(
        replace=replace,
        reason=reason,
        existing_rank=existing_rank,
        candidate_rank=candidate_rank,
    )


def _short_circuit(
    existing: SourcedRecord, candidate_vendor_slug: str, *, manual_override: bool
) -> ReplacementDecision | None:
    if manual_override:
        return ReplacementDecision(replace=True, reason=ReplacementReason.MANUAL_OVERRIDE)
    if existing.source == candidate_vendor_slug:
        return ReplacementDecision(replace=True, reason=ReplacementReason.SAME_SOURCE)
    return None


def decide_replacement(
    existing: SourcedRecord,
    candidate_vendor_slug: str,
    *,
    registry: PriorityRegistry,
    manual_override: bool = False,
) -> ReplacementDecision:
    """Return the full decision for ``candidate_vendor_slug`` against ``existing``.

    Raises ``InvalidVendorSlugError`` when the candidate slug is not usable. A
    record without a source ranks as an unknown vendor.
    """

    vendor_cache_key(candidate_vendor_slug)
    decision = _short_circuit(existing, candidate_vendor_slug, manual_override=manual_override)
    if decision is None:
        existing_rank = (
            registry.rank(existing.source)
            if existing.source and existing.source.strip()
            else registry.unknown_rank
        )
        decision = _compare(existing_rank, registry.rank(candidate_vendor_slug))
    log.debug(
        "Replacement of %s-owned record by %s: %s (%s)",
        existing.source,
        candidate_vendor_slug,
        decision.replace,
        decision.reason,
    )
    return decision


def should_replace(
    existing: SourcedRecord,
    candidate_vendor_slug: str,
    *,
    registry: PriorityRegistry,
    manual_override: bool = False,
) -> bool:
    return decide_replacement(
        existing,
        candidate_vendor_slug,
        registry=registry,
        manual_override=manual_override,
    ).replace


def decide_replacement_cached(
    existing: SourcedRecord,
    candidate_vendor_slug: str,
    *,
    registry: PriorityRegistry,
    manual_override: bool = False,
) -> ReplacementDecision:
    """Cache-only variant: any rank not already cached keeps the existing record."""

    decision = _short_circuit(existing, candidate_vendor_slug, manual_override=manual_override)
    if decision is not None:
        return decision
    existing_rank = registry.cached_rank(existing.source)
    candidate_rank = registry.cached_rank(candidate_vendor_slug)
    if existing_rank is None or candidate_rank is None:
        log.debug(
            "Ranks for %s/%s not cached; keeping existing record",
            existing.source,
            candidate_vendor_slug,
        )
        return ReplacementDecision(
            replace=False,
            reason=ReplacementReason.RANK_NOT_CACHED,
            existing_rank=existing_rank,
            candidate_rank=candidate_rank,
        )
    return _compare(existing_rank, candidate_rank)


def should_replace_cached(
    existing: SourcedRecord,
    candidate_vendor_slug: str,
    *,
    registry: PriorityRegistry,
    manual_override: bool = False,
) -> bool:
    return decide_replacement_cached(
        existing,
        candidate_vendor_slug,
        registry=registry,
        manual_override=manual_override,
    ).replace
