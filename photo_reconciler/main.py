import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import config
from .core import PhotoReconcilerApp
from .exceptions import InputError, ScanCancelled
from .reporting import ReportPresenter


def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """Logs to stderr (stdout carries the report) and optionally to a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format=config.LOG_FORMAT,
        handlers=handlers
    )


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Photo Reconciler: group import sessions and check them against an archive")

    p.add_argument("src", type=Path, help="Source directory to scan (e.g. a camera dump)")
    p.add_argument("dest", type=Path, nargs="?", default=None, help="Destination archive root")

    p.add_argument("--gap-hours", type=int, default=config.GROUP_GAP_HOURS,
                   help=f"Hours between directories that start a new session (default: {config.GROUP_GAP_HOURS})")
    p.add_argument("--hash", action="store_true", help="Compare content fingerprints when both sides have them (slower)")
    p.add_argument("--incremental", action="store_true",
                   help="Index only destination directories newer than the oldest source photo; look up unseen names in older ones")
    p.add_argument("--details", action="store_true", help="List missing and mismatched files under each group")
    p.add_argument("--report-csv", type=Path, default=None, help="Write a per-file CSV of the classifications")
    p.add_argument("--no-progress", action="store_true", help="Disable progress bars")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")

    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    logging.info("=== Photo Reconciler Started ===")
    logging.info(f"Source: {args.src}")
    if args.dest:
        logging.info(f"Dest:   {args.dest}")

    app = PhotoReconcilerApp(
        gap_hours=args.gap_hours,
        use_hash=args.hash,
        incremental=args.incremental,
        progress=not args.no_progress,
    )

    try:
        reports = app.run(args.src, args.dest)
    except InputError as e:
        logging.error(str(e))
        sys.exit(1)
    except (KeyboardInterrupt, ScanCancelled):
        logging.warning("Operation cancelled by user.")
        sys.exit(1)
    except Exception:
        logging.exception("Fatal error during reconciliation.")
        sys.exit(1)

    presenter = ReportPresenter(details=args.details)
    presenter.present(reports)

    if args.report_csv:
        if args.dest is None:
            logging.warning("--report-csv needs a destination; no report written.")
        else:
            presenter.write_csv(reports, args.report_csv)

    return 0


if __name__ == "__main__":
    main()
