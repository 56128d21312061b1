from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from vendorsync.app import (
    fix_vendor_priorities,
    lookup_vendor_priority,
    register_vendor,
    sync_vendor_feed,
    validate_vendor_priorities,
)
from vendorsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile vendor feeds into the master catalog")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Reconcile the changed rows of a feed snapshot")
    sync.add_argument(
        "--vendor",
        type=str,
        required=True,
        help="Slug of the vendor that produced the snapshot",
    )
    sync.add_argument(
        "--file",
        type=Path,
        required=True,
        help="Path to the downloaded CSV snapshot",
    )
    sync.add_argument(
        "--company-id",
        type=int,
        help="Company scope for the mappings (omit for the admin scope)",
    )

    priority = subparsers.add_parser("priority", help="Vendor priority commands")
    priority_sub = priority.add_subparsers(dest="priority_command", required=True)
    priority_show = priority_sub.add_parser("show", help="Show the rank of a vendor")
    priority_show.add_argument("vendor", type=str, help="Vendor slug or display name")
    priority_validate = priority_sub.add_parser(
        "validate", help="Check that vendor ranks form a continuous 1-N sequence"
    )
    priority_validate.add_argument(
        "--strict",
        action="store_true",
        help="Fail with a consistency error instead of only reporting issues",
    )
    priority_sub.add_parser("fix", help="Resequence vendor ranks to 1-N in current order")

    vendor = subparsers.add_parser("vendor", help="Vendor registry commands")
    vendor_sub = vendor.add_subparsers(dest="vendor_command", required=True)
    vendor_add = vendor_sub.add_parser("add", help="Register a supported vendor")
    vendor_add.add_argument("--slug", type=str, required=True, help="Vendor short code")
    vendor_add.add_argument("--name", type=str, required=True, help="Vendor display name")
    vendor_add.add_argument("--rank", type=int, help="Optional priority rank (1 = highest)")

    args = parser.parse_args(list(argv))
    if args.command == "sync" and args.company_id is not None and args.company_id < 0:
        raise ValueError("Company id must be non-negative")
    return args


def _read_snapshot(path: Path) -> str:
    with path.open(encoding="utf-8", newline="") as handle:
        return handle.read()


def _run(parsed_args: argparse.Namespace) -> int:
    if parsed_args.command == "sync":
        result = sync_vendor_feed(
            parsed_args.vendor,
            _read_snapshot(parsed_args.file),
            company_id=parsed_args.company_id,
        )
        log.info(
            "Sync %s: added=%s, updated=%s, skipped=%s, errors=%s, master_updated=%s",
            result.status,
            result.stats.records_added,
            result.stats.records_updated,
            result.stats.records_skipped,
            result.stats.records_errors,
            result.stats.master_records_updated,
        )
        return 0

    if parsed_args.command == "priority":
        if parsed_args.priority_command == "show":
            rank = lookup_vendor_priority(parsed_args.vendor)
            log.info("Vendor %s has priority %s", parsed_args.vendor, rank)
            return 0
        if parsed_args.priority_command == "validate":
            report = validate_vendor_priorities(strict=parsed_args.strict)
            if report.is_valid:
                log.info("Vendor priorities are valid (%s vendors)", report.total_vendors)
                return 0
            for issue in report.issues:
                log.warning("Issue: %s", issue)
            for recommendation in report.recommendations:
                log.info("Recommendation: %s", recommendation)
            return 1
        if parsed_args.priority_command == "fix":
            updated = fix_vendor_priorities()
            log.info("Updated priorities for %s vendors", updated)
            return 0

    if parsed_args.command == "vendor" and parsed_args.vendor_command == "add":
        vendor = register_vendor(
            parsed_args.slug,
            parsed_args.name,
            priority_rank=parsed_args.rank,
        )
        log.info("Registered vendor %s (%s)", vendor.slug, vendor.id)
        return 0

    raise ValueError(f"Unsupported command: {parsed_args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    if parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    try:
        exit_code = _run(parsed_args)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)
    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point: load ``.env`` and install the SIGINT handler."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
