"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import (
    DEFAULT_PRIORITY_CACHE_TTL_SECONDS,
    UNKNOWN_VENDOR_RANK,
    SyncConfig,
    get_sync_config,
)

__all__ = [
    "DEFAULT_PRIORITY_CACHE_TTL_SECONDS",
    "UNKNOWN_VENDOR_RANK",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "get_database_config",
    "get_storage_config",
    "get_sync_config",
    "require_env_vars",
]
