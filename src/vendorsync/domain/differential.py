"""Line-level differential change detection for vendor feed snapshots.

A row counts as changed when its full text does not occur verbatim in the
previous snapshot. This catches additions and modifications alike without
parsing unchanged rows. Reordered columns or whitespace-only edits are
reported as changes; removals are counted but never acted on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ChangeStats:
    total_lines: int = 0
    changed_lines: int = 0
    added_lines: int = 0
    removed_lines: int = 0

    @property
    def reduction_percent(self) -> int:
        """Share of lines that do not need reprocessing."""
        if self.total_lines == 0:
            return 0
        return round((1 - self.changed_lines / self.total_lines) * 100)


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """Header-first list of lines to reprocess plus counters for observability."""

    has_changes: bool
    changed_lines: list[str] = field(default_factory=list[str])
    stats: ChangeStats = field(default_factory=ChangeStats)

    @property
    def header(self) -> str | None:
        return self.changed_lines[0] if self.changed_lines else None

    @property
    def data_lines(self) -> list[str]:
        return self.changed_lines[1:]


def snapshot_lines(snapshot: str) -> list[str]:
    """Split ``snapshot`` on newlines, dropping blank lines and keeping the rest verbatim."""

    return [line for line in snapshot.split("\n") if line.strip()]


def diff_snapshots(previous: str | None, new: str) -> ChangeSet:
    """Return the lines of ``new`` that are absent from ``previous``.

    Without a previous snapshot every line is reported and ``has_changes`` is
    always true (first sync). The header
    of ``new`` always leads ``changed_lines``; ``stats.changed_lines`` counts data
    rows only, except on a first sync where it equals ``stats.total_lines``.
    """

    new_lines = snapshot_lines(new)

    if previous is None:
        log.info("No previous snapshot; processing all %s lines", len(new_lines))
        return ChangeSet(
            has_changes=True,
            changed_lines=new_lines,
            stats=ChangeStats(
                total_lines=len(new_lines),
                changed_lines=len(new_lines),
                added_lines=len(new_lines),
                removed_lines=0,
            ),
        )

    previous_set = set(snapshot_lines(previous))
    new_set = set(new_lines)

    changed: list[str] = []
    if new_lines:
        changed.append(new_lines[0])
        changed.extend(line for line in new_lines[1:] if line not in previous_set)

    stats = ChangeStats(
        total_lines=len(new_lines),
        changed_lines=max(len(changed) - 1, 0),
        added_lines=sum(1 for line in new_lines if line not in previous_set),
        removed_lines=sum(1 for line in previous_set if line not in new_set),
    )
    has_changes = len(changed) > 1

    if has_changes:
        log.info(
            "Found %s changed lines out of %s (added=%s, removed=%s, %s%% skipped)",
            stats.changed_lines,
            stats.total_lines,
            stats.added_lines,
            stats.removed_lines,
            stats.reduction_percent,
        )
    else:
        log.info("No changes detected across %s lines", stats.total_lines)

    return ChangeSet(has_changes=has_changes, changed_lines=changed, stats=stats)
