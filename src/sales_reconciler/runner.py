from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Iterable, List

from sales_reconciler import excel_reader, sources
from sales_reconciler.config import ReportingConfig, load_config
from sales_reconciler.ledger import parse_bulk_paste
from sales_reconciler.model import Outlet, ReconcileResult
from sales_reconciler.reconcile import reconcile
from sales_reconciler.report import (
    build_error_payload,
    write_f2_workbook,
    write_ledger_workbook,
    write_payload,
    write_report_to_json,
)

logger = logging.getLogger(__name__)

DEFAULT_REPORT_NAME = "reconciliation_report.json"


def load_outlets(
    workbook_path: str | Path | None,
    paste_path: str | Path | None,
    config: ReportingConfig,
) -> List[Outlet]:
    """Outlets from the workbook followed by any pasted ``Name<TAB>Contact`` rows."""

    if workbook_path is None and paste_path is None:
        raise ValueError("An outlet workbook or a pasted outlet list is required")

    outlets: List[Outlet] = []
    if workbook_path is not None:
        outlets.extend(excel_reader.extract_outlets(Path(workbook_path), config))
    if paste_path is not None:
        text = Path(paste_path).read_text(encoding="utf-8")
        outlets.extend(parse_bulk_paste(text, config))
    return outlets


def run_reconciliation(
    workbook_path: str | Path | None,
    source_paths: Iterable[str | Path],
    *,
    config_path: str | Path | None = None,
    output_path: str | Path | None = None,
    ledger_path: str | Path | None = None,
    paste_path: str | Path | None = None,
    f2_path: str | Path | None = None,
    report_date: date | None = None,
) -> Path:
    """Reconcile invoice sources against an outlet list and write a JSON report.

    Any failure (missing workbook, unreadable PDF, bad config) produces an
    error report instead and no workbook is written.
    """

    report_path = Path(output_path) if output_path else Path(DEFAULT_REPORT_NAME)
    report_date = report_date or date.today()

    try:
        # 1. Configuration (catalog, policies)
        config = load_config(config_path)

        # 2. Outlet ledger from Excel and/or pasted rows
        outlets = load_outlets(workbook_path, paste_path, config)

        # 3. Raw invoice text from every source, in order
        raw_text = sources.read_sources(source_paths)

        # 4. Merge the text into the ledger
        result: ReconcileResult = reconcile(raw_text, outlets, config)

        # 5. Write the updated ledger and daily sheet, then the report
        if ledger_path:
            write_ledger_workbook(result.outlets, config, Path(ledger_path))
        if f2_path:
            write_f2_workbook(result.outlets, config, report_date, Path(f2_path))
        write_report_to_json(result, config, report_path, report_date)

    except Exception as exc:
        logger.error("Reconciliation failed: %s", exc)
        write_payload(build_error_payload(exc), report_path)

    return report_path


__all__ = ["run_reconciliation", "load_outlets", "DEFAULT_REPORT_NAME"]
