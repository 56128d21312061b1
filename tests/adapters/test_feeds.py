from __future__ import annotations

from vendorsync.adapters.feeds import CsvFeedParser, FeedColumns, parse_feed_lines
from vendorsync.domain.model import VendorRow


def test_parse_feed_lines_uses_default_aliases() -> None:
    lines = [
        "UPC,SKU,COST,MAP,MSRP,QTY,Description",
        '012345678905,A-1,"1,299.00",,1499.99,3,"Rifle, bolt action"',
    ]

    rows = parse_feed_lines(lines)

    assert rows == [
        VendorRow(
            upc="012345678905",
            vendor_sku="A-1",
            vendor_cost="1,299.00",
            map_price=None,
            msrp_price="1499.99",
            quantity_available="3",
        )
    ]


def test_first_non_blank_alias_wins() -> None:
    columns = FeedColumns(vendor_cost=("dealer_price", "price"))
    lines = ["upc,dealer_price,price", "012345678905,,8.25", "098765432109,7.10,8.25"]

    rows = CsvFeedParser(columns)(lines)

    assert [row.vendor_cost for row in rows] == ["8.25", "7.10"]


def test_blank_cells_and_whitespace_are_normalised() -> None:
    rows = parse_feed_lines(["upc,sku,qty", "  012345678905 ,   ,  "])

    assert rows[0].upc == "012345678905"
    assert rows[0].vendor_sku is None
    assert rows[0].quantity_available is None


def test_carriage_returns_are_stripped() -> None:
    rows = parse_feed_lines(["upc,sku\r", "012345678905,A-1\r"])

    assert rows[0].vendor_sku == "A-1"


def test_header_only_or_empty_input_yields_no_rows() -> None:
    assert parse_feed_lines([]) == []
    assert parse_feed_lines(["upc,sku"]) == []
