"""Ports for turning changed feed lines into vendor rows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from vendorsync.domain.model import VendorRow


@runtime_checkable
class FeedRowParser(Protocol):
    """Callable port mapping header-first feed lines to ``VendorRow`` objects."""

    def __call__(self, lines: Sequence[str]) -> list[VendorRow]: ...


__all__ = ["FeedRowParser"]
