"""Command-line entry point for shinypenny."""

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from shinypenny import __version__
from shinypenny.domain.record import RECORD_FIELDS


def _print_error(error: str) -> None:
    for line in error.splitlines():
        print(line)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shinypenny",
        description="Compose an expense reimbursement application as one PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Records:
  date,description,company,netto,tax,brutto,receipts
  Amounts are EUR unless a currency is given, e.g. "12.50 USD" or
  "12.50 USD @ 0.92". Tax accepts "7%", "7" or "0.07".
  Receipts are comma separated paths to PDF or image files.

Configuration:
  ~/.config/shinypenny.toml (or $SHINYPENNY_CONFIG, or --config)
""",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", type=Path, help="CSV file with one expense record per line")
    source.add_argument(
        "--record",
        nargs=len(RECORD_FIELDS),
        action="append",
        metavar=tuple(field.upper() for field in RECORD_FIELDS),
        help="A single expense record (repeatable)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Configuration file (TOML)")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Output PDF path")
    parser.add_argument("--title", default=None, help="Heading of the summary page")
    parser.add_argument(
        "--learning-budget", action="store_true", help="Mark the application as learning budget expenses"
    )
    parser.add_argument(
        "--lenient", action="store_true", help="Warn instead of failing when tax and amounts disagree"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    from shinypenny.application.reimbursement import ReimbursementRequest, build_reimbursement
    from shinypenny.pdf import DEFAULT_TITLE
    from shinypenny.runtime import configure_logging, set_config_override, set_log_level

    configure_logging()
    if args.verbose:
        set_log_level(logging.DEBUG)
    if args.config is not None:
        set_config_override(args.config)

    result = build_reimbursement(
        ReimbursementRequest(
            csv_file=args.csv,
            records=tuple(tuple(values) for values in args.record or ()),
            output=args.output,
            config_file=args.config,
            title=args.title or DEFAULT_TITLE,
            learning_budget=args.learning_budget,
            strict=not args.lenient,
        )
    )
    if result.status == "error":
        assert result.error is not None
        _print_error(result.error)
        return 1

    print(f"Wrote {result.output_path} ({result.page_count} pages)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
