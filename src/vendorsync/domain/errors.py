"""Error taxonomy shared by the reconciliation core.

Per-row problems (``RowValidationError``) are accumulated into counters by the
bulk procedures; whole-batch problems (``BulkWriteError``) abort the current
operation and propagate to the caller. Nothing in the core retries.
"""

from __future__ import annotations


class VendorSyncError(Exception):
    """Base class for reconciliation errors."""


class RowValidationError(VendorSyncError, ValueError):
    """Raised when a feed row carries a missing or malformed field."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class PriorityConsistencyError(VendorSyncError):
    """Raised on request when vendor priority ranks do not form ``1..N``."""

    def __init__(self, issues: list[str]) -> None:
        super().__init__("; ".join(issues) or "vendor priority ranks are inconsistent")
        self.issues = list(issues)


class LookupMissError(VendorSyncError, LookupError):
    """Raised when a vendor or product cannot be looked up."""


class InvalidVendorSlugError(LookupMissError):
    """Raised when a caller passes a slug that cannot name any vendor."""


class BackingStoreError(VendorSyncError):
    """Raised when the storage layer is unavailable or rejects an operation."""


class BulkWriteError(BackingStoreError):
    """Raised when a batched insert or update fails as a whole."""

    def __init__(self, operation: str, count: int, *, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Bulk {operation} of {count} vendor mappings failed{detail}")
        self.operation = operation
        self.count = count
