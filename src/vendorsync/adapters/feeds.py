"""CSV feed rows: header aliases and a minimal Pydantic schema.

Column choice stays with the caller: ``FeedColumns`` lists the header names
tried, in order, for each field. The first non-blank value wins.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from vendorsync.domain.model import VendorRow

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FeedColumns:
    upc: tuple[str, ...] = ("universal_product_code", "UPC", "upc")
    vendor_sku: tuple[str, ...] = ("vendor_sku", "SKU", "sku")
    vendor_cost: tuple[str, ...] = ("product_price", "cost", "COST", "price")
    map_price: tuple[str, ...] = ("map_price", "MAP", "map")
    msrp_price: tuple[str, ...] = ("msrp", "MSRP", "retail")
    quantity_available: tuple[str, ...] = ("quantity_available", "qty", "QTY", "quantity")

    def extract(self, record: Mapping[str | None, Any]) -> dict[str, str | None]:
        return {
            name: _first_present(record, getattr(self, name))
            for name in (
                "upc",
                "vendor_sku",
                "vendor_cost",
                "map_price",
                "msrp_price",
                "quantity_available",
            )
        }


DEFAULT_FEED_COLUMNS = FeedColumns()


class FeedRowModel(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, frozen=True)

    upc: str | None = None
    vendor_sku: str | None = None
    vendor_cost: str | None = None
    map_price: str | None = None
    msrp_price: str | None = None
    quantity_available: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_vendor_row(self) -> VendorRow:
        return VendorRow(
            upc=self.upc,
            vendor_sku=self.vendor_sku,
            vendor_cost=self.vendor_cost,
            map_price=self.map_price,
            msrp_price=self.msrp_price,
            quantity_available=self.quantity_available,
        )


def _first_present(record: Mapping[str | None, Any], aliases: Sequence[str]) -> str | None:
    for alias in aliases:
        value = record.get(alias)
        if isinstance(value, str) and value.strip():
            return value
    return None


def parse_feed_lines(
    lines: Sequence[str], columns: FeedColumns = DEFAULT_FEED_COLUMNS
) -> list[VendorRow]:
    """Parse header-first CSV ``lines`` into vendor rows.

    Records that fail schema validation are logged and dropped.
    """

    if not lines:
        return []
    text = "\n".join(line.rstrip("\r") for line in lines)
    reader = csv.DictReader(io.StringIO(text, newline=""))
    rows: list[VendorRow] = []
    for line_number, record in enumerate(reader, start=2):
        try:
            model = FeedRowModel.model_validate(columns.extract(record))
        except ValidationError as exc:
            log.warning("Dropping feed record %s: %s", line_number, exc)
            continue
        rows.append(model.to_vendor_row())
    return rows


class CsvFeedParser:
    """``FeedRowParser`` bound to one column alias map."""

    def __init__(self, columns: FeedColumns = DEFAULT_FEED_COLUMNS) -> None:
        self.columns = columns

    def __call__(self, lines: Sequence[str]) -> list[VendorRow]:
        return parse_feed_lines(lines, self.columns)


if TYPE_CHECKING:
    from vendorsync.domain.ports.feeds import FeedRowParser

    _parser_check: FeedRowParser = CsvFeedParser()
