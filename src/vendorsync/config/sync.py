"""Synchronization defaults for vendor feed reconciliation."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_float_env
from .errors import ConfigurationError

DEFAULT_PRIORITY_CACHE_TTL_SECONDS = 5 * 60
UNKNOWN_VENDOR_RANK = 999


@dataclass(frozen=True, slots=True)
class SyncConfig:
    priority_cache_ttl_seconds: float = DEFAULT_PRIORITY_CACHE_TTL_SECONDS
    unknown_vendor_rank: int = UNKNOWN_VENDOR_RANK


def get_sync_config() -> SyncConfig:
    ttl = optional_float_env("VENDORSYNC_PRIORITY_CACHE_TTL")
    if ttl is None:
        return SyncConfig()
    if ttl < 0:
        raise ConfigurationError("VENDORSYNC_PRIORITY_CACHE_TTL must be non-negative")
    return SyncConfig(priority_cache_ttl_seconds=ttl)
