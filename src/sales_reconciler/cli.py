"""Command-line interface for the sales-call reconciler."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date

from .runner import run_reconciliation


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Fill the outlet ledger from invoice text or PDF invoices"
    )
    parser.add_argument(
        "--workbook",
        help="Excel workbook containing the outlet (total calls) list",
    )
    parser.add_argument(
        "--outlets-paste",
        help="Text file of Name<TAB>Contact rows copied from a spreadsheet",
    )
    parser.add_argument(
        "--source",
        action="append",
        required=True,
        help="Invoice text or PDF file; repeat for several sources",
    )
    parser.add_argument("--config", help="Optional YAML configuration file")
    parser.add_argument("--output", help="Optional JSON report path")
    parser.add_argument("--ledger", help="Optional path for the updated ledger workbook")
    parser.add_argument("--f2", help="Optional path for the F2 daily sales workbook")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Report date as YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--summary", action="store_true", help="Print the daily text summary"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    if not args.workbook and not args.outlets_paste:
        parser.error("one of --workbook or --outlets-paste is required")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    path = run_reconciliation(
        args.workbook,
        args.source,
        config_path=args.config,
        output_path=args.output,
        ledger_path=args.ledger,
        paste_path=args.outlets_paste,
        f2_path=args.f2,
        report_date=args.date,
    )
    print(f"Report written to {path}")

    if args.summary:
        with path.open("r", encoding="utf-8") as f:
            summary = json.load(f).get("daily_summary")
        if summary:
            print(summary)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
