"""Identity of one vendor sync job."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SyncScope:
    """A vendor feed, either admin/global (``company_id is None``) or store-specific."""

    vendor_slug: str
    company_id: int | None = None

    def __post_init__(self) -> None:
        if not self.vendor_slug.strip():
            raise ValueError("vendor_slug must not be blank")

    @property
    def is_admin(self) -> bool:
        return self.company_id is None

    @property
    def label(self) -> str:
        return "admin" if self.is_admin else f"company_{self.company_id}"

    def __str__(self) -> str:
        return f"{self.vendor_slug}/{self.label}"
