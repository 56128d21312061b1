"""Domain port definitions for adapters."""

from __future__ import annotations

from .feeds import FeedRowParser
from .persistence import (
    ProductRepository,
    Repository,
    SnapshotStore,
    VendorDirectory,
    VendorMappingRepository,
    VendorRepository,
)
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "FeedRowParser",
    "ProductRepository",
    "Repository",
    "RepositoryCollection",
    "SnapshotStore",
    "UnitOfWork",
    "VendorDirectory",
    "VendorMappingRepository",
    "VendorRepository",
]
