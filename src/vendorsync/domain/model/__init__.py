"""Domain model for the master catalog and vendor registry."""

from __future__ import annotations

from .catalog import MappingFields, MasterFields, MasterProduct, VendorMapping
from .feed import RawValue, VendorRow, parse_price, parse_quantity
from .scope import SyncScope
from .upc import UPC_LENGTH, normalize_upc, try_normalize_upc
from .vendor import Vendor

__all__ = [
    "UPC_LENGTH",
    "MappingFields",
    "MasterFields",
    "MasterProduct",
    "RawValue",
    "SyncScope",
    "Vendor",
    "VendorMapping",
    "VendorRow",
    "normalize_upc",
    "parse_price",
    "parse_quantity",
    "try_normalize_upc",
]
