from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from econcal.app import (
    backfill_jblanked_range,
    detect_stale,
    import_generated_events,
    repair_reschedules,
    sync_jblanked_actuals,
    sync_nfs_schedule,
)
from econcal.config import JBLANKED_FEEDS, configure_logging
from econcal.domain.time_windows import TimeWindow

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile economic calendar events")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    nfs = subparsers.add_parser("nfs", help="Sync this week's NFS schedule")
    nfs.add_argument(
        "--skip-stale",
        action="store_true",
        help="Do not run stale detection after the sync",
    )

    actuals = subparsers.add_parser("actuals", help="Merge today's JBlanked actuals")
    actuals.add_argument(
        "--provider",
        action="append",
        choices=sorted(JBLANKED_FEEDS),
        help="JBlanked feed to sync; repeat for several (defaults to JBLANKED_PROVIDERS)",
    )

    backfill = subparsers.add_parser("backfill", help="Backfill a Forex Factory date range")
    backfill.add_argument(
        "--from",
        dest="start",
        type=str,
        help="ISO-8601 timestamp (UTC) marking the inclusive start of the range",
    )
    backfill.add_argument(
        "--to",
        dest="end",
        type=str,
        help="ISO-8601 timestamp (UTC) marking the inclusive end of the range",
    )
    backfill.add_argument(
        "--lookback-days",
        type=float,
        help="Relative lookback window in days (overrides --from if larger)",
    )

    generated = subparsers.add_parser(
        "generated", help="Merge a JSON file of generated events as a fallback source"
    )
    generated.add_argument("path", type=Path, help="JSON list of generated events")

    stale = subparsers.add_parser("detect-stale", help="Cancel events NFS stopped listing")
    stale.add_argument("--dry-run", action="store_true", help="Report without writing")
    stale.add_argument(
        "--stale-days",
        type=int,
        default=None,
        help="Days without confirmation before cancelling (defaults to config)",
    )

    repair = subparsers.add_parser(
        "repair-reschedules",
        help="Clear reschedule markers that are weekly recurrences",
    )
    repair.add_argument("--dry-run", action="store_true", help="Report without writing")

    return parser.parse_args(list(argv))


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _build_time_window(args: argparse.Namespace) -> TimeWindow:
    start = _parse_iso_datetime(args.start) if args.start else None
    end = _parse_iso_datetime(args.end) if args.end else None
    lookback = None
    if args.lookback_days is not None:
        if args.lookback_days < 0:
            raise ValueError("Lookback days must be non-negative")
        lookback = timedelta(days=args.lookback_days)
    if start is None and lookback is None:
        raise ValueError("Backfill needs --from or --lookback-days")
    window = TimeWindow(start=start, end=end, lookback=lookback)
    window.resolve()
    return window


def _run(args: argparse.Namespace, window: TimeWindow | None) -> None:
    if args.command == "nfs":
        sync_nfs_schedule(detect_stale=not args.skip_stale)
    elif args.command == "actuals":
        sync_jblanked_actuals(providers=args.provider)
    elif args.command == "backfill":
        if window is None:
            raise ValueError("Backfill needs a time window")
        backfill_jblanked_range(window=window)
    elif args.command == "generated":
        import_generated_events(path=args.path)
    elif args.command == "detect-stale":
        detect_stale(dry_run=args.dry_run, stale_days=args.stale_days)
    elif args.command == "repair-reschedules":
        repair_reschedules(dry_run=args.dry_run)
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    window: TimeWindow | None = None
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(verbose=parsed_args.verbose)
        if parsed_args.command == "backfill":
            window = _build_time_window(parsed_args)
        if parsed_args.command == "detect-stale" and (parsed_args.stale_days or 0) < 0:
            raise ValueError("--stale-days must be non-negative")  # noqa: TRY301
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _run(parsed_args, window)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point: load ``.env`` and install the SIGINT handler."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
