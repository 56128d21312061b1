"""File-backed storage of the last reconciled feed snapshot per sync scope."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, cast

if TYPE_CHECKING:
    from pathlib import Path

    from vendorsync.domain.model import SyncScope

log = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-z0-9_.-]+")


class FileSnapshotStore:
    """Keep one ``<vendor>_<scope>_previous.csv`` file per scope under ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, scope: SyncScope) -> Path:
        vendor = _UNSAFE_CHARS.sub("-", scope.vendor_slug.strip().lower()).strip("-")
        return self.directory / f"{vendor}_{scope.label}_previous.csv"

    def load(self, scope: SyncScope) -> str | None:
        path = self.path_for(scope)
        if not path.exists():
            return None
        with path.open(encoding="utf-8", newline="") as handle:
            return handle.read()

    def save(self, scope: SyncScope, content: str) -> None:
        path = self.path_for(scope)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(content, encoding="utf-8", newline="")
        tmp_path.replace(path)
        log.debug("Stored snapshot for %s at %s", scope, path)


if TYPE_CHECKING:
    from vendorsync.domain.ports.persistence import SnapshotStore

    _store_check: SnapshotStore = FileSnapshotStore(cast("Path", object()))
