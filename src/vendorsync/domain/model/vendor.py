"""Vendor registry records."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4


@dataclass(eq=False, kw_only=True)
class Vendor:
    """A supported vendor and its authority rank for master-record fields.

    ``priority_rank`` is expected to form ``1..N`` across all vendors, but may
    transiently be ``None`` or duplicated; see ``PriorityRegistry.validate_consistency``.
    """

    slug: str
    display_name: str
    priority_rank: int | None = None
    id: UUID = field(default_factory=uuid4)

    @property
    def lookup_keys(self) -> tuple[str, ...]:
        """Normalised keys under which this vendor can be resolved."""
        keys = [self.slug.strip().lower()]
        name_key = self.display_name.strip().lower()
        if name_key and name_key not in keys:
            keys.append(name_key)
        return tuple(keys)

    def __repr__(self) -> str:
        return f"Vendor(slug={self.slug!r}, priority_rank={self.priority_rank!r})"
