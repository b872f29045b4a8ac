from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from openpyxl import Workbook

from sales_reconciler.config import ReportingConfig
from sales_reconciler.model import Outlet, ReconcileResult
from sales_reconciler.quantity import round_half_up

logger = logging.getLogger(__name__)

LEDGER_HEADERS = [
    "Outlet ID",
    "Name",
    "Contact No.",
    "DB Name",
    "Beat Name",
    "Contact Person",
    "Productive",
]  # Followed by one column per SKU label


def iso_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def outlet_totals(outlet: Outlet, config: ReportingConfig) -> Tuple[float, int]:
    """Total cases (two decimals) and total value (whole currency) of an outlet."""
    total_qty = sum(outlet.quantities.get(sku.sku_id, 0.0) for sku in config.catalog)
    total_value = sum(
        outlet.quantities.get(sku.sku_id, 0.0) * sku.price for sku in config.catalog
    )
    return round_half_up(total_qty, 2), int(round_half_up(total_value, 0))


def _serialise_outlet(outlet: Outlet, config: ReportingConfig) -> Dict[str, Any]:
    total_qty, total_value = outlet_totals(outlet, config)
    return {
        "outlet_id": outlet.outlet_id,
        "name": outlet.name,
        "contact_no": outlet.contact_no,
        "is_productive": outlet.is_productive,
        "db_name": outlet.db_name,
        "beat_name": outlet.beat_name,
        "contact_person": outlet.contact_person,
        "quantities": dict(outlet.quantities),
        "total_quantity": total_qty,
        "total_value": total_value,
    }


def build_report_payload(
    result: ReconcileResult,
    config: ReportingConfig,
    report_date: Optional[date] = None,
) -> Dict[str, Any]:
    """Build the JSON payload describing one successful run."""

    report_date = report_date or date.today()
    return {
        "status": "success",
        "timestamp": iso_timestamp(),
        "report_date": format_report_date(report_date),
        "sales_person": config.sales_person,
        "merge_policy": config.merge_policy,
        "ledger_rounding": config.ledger_rounding,
        "matched_count": result.matched_count,
        "new_outlet_count": result.new_outlet_count,
        "total_calls": len(result.outlets),
        "productive_calls": sum(1 for o in result.outlets if o.is_productive),
        "outlets": [_serialise_outlet(o, config) for o in result.outlets],
        "daily_summary": build_daily_summary(result.outlets, config, report_date),
        "error": None,
    }


def build_error_payload(error: Exception | str) -> Dict[str, Any]:
    return {
        "status": "error",
        "timestamp": iso_timestamp(),
        "matched_count": 0,
        "new_outlet_count": 0,
        "outlets": [],
        "error": str(error),
    }


def write_payload(payload: Dict[str, Any], output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    return output_path


def write_report_to_json(
    result: ReconcileResult,
    config: ReportingConfig,
    output_path: Path,
    report_date: Optional[date] = None,
) -> Path:
    payload = build_report_payload(result, config, report_date)
    return write_payload(payload, output_path)


def write_ledger_workbook(
    outlets: Iterable[Outlet], config: ReportingConfig, output_path: Path
) -> Path:
    """Save the ledger as a plain ``outlets`` sheet readable by ``extract_outlets``."""

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "outlets"
    sheet.append(LEDGER_HEADERS + [sku.label for sku in config.catalog])

    count = 0
    for outlet in outlets:
        row: List[Any] = [
            outlet.outlet_id,
            outlet.name,
            outlet.contact_no,
            outlet.db_name,
            outlet.beat_name,
            outlet.contact_person,
            outlet.is_productive,
        ]
        row.extend(outlet.quantities.get(sku.sku_id, 0.0) for sku in config.catalog)
        sheet.append(row)
        count += 1

    output_path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output_path)
    logger.info("Wrote %d outlets to %s", count, output_path)
    return output_path


# --------------------------------------------------------------------
# Daily sales (F2) sheet and text summary
# --------------------------------------------------------------------
F2_SHEET_TITLE = "F2 Daily Sales"

F2_IDENTITY_HEADERS = [
    "Date",
    "Name of Sales Person",
    "Desig.",
    "Reporting Manager Name",
    "City Name",
    "SS Name",
    "DB Name",
    "Beat Name",
]  # Filled on the first row only
F2_OUTLET_HEADERS = ["Name of Out Let", "Contact Person Name", "Contact No."]
F2_TOTAL_HEADERS = ["Total Order Quantity (in )", "Total Order Value ( in Amount)"]


def format_report_date(day: date) -> str:
    """Day/month/year, as the daily report is dated."""
    return day.strftime("%d/%m/%Y")


def f2_sku_columns(config: ReportingConfig) -> List[str]:
    """Report columns in catalog order; SKUs sharing a column appear once."""
    columns: List[str] = []
    for sku in config.catalog:
        if sku.column not in columns:
            columns.append(sku.column)
    return columns


def f2_headers(config: ReportingConfig) -> List[str]:
    return F2_IDENTITY_HEADERS + F2_OUTLET_HEADERS + f2_sku_columns(config) + F2_TOTAL_HEADERS


def build_f2_rows(
    outlets: Iterable[Outlet], config: ReportingConfig, report_date: date
) -> List[Dict[str, Any]]:
    """One row per outlet of the daily sales report, keyed by header."""

    rows: List[Dict[str, Any]] = []
    for index, outlet in enumerate(outlets):
        first = index == 0
        identity = [
            format_report_date(report_date),
            config.sales_person,
            config.designation,
            config.manager,
            config.city,
            config.ss_name,
            outlet.db_name,
            outlet.beat_name,
        ]
        row: Dict[str, Any] = {
            header: (value if first else "")
            for header, value in zip(F2_IDENTITY_HEADERS, identity)
        }
        row["Name of Out Let"] = outlet.name
        row["Contact Person Name"] = outlet.contact_person
        row["Contact No."] = outlet.contact_no

        for column in f2_sku_columns(config):
            row[column] = 0.0
        for sku in config.catalog:
            row[sku.column] += outlet.quantities.get(sku.sku_id, 0.0)
        for column in f2_sku_columns(config):
            row[column] = round_half_up(row[column], 2)

        total_qty, total_value = outlet_totals(outlet, config)
        row[F2_TOTAL_HEADERS[0]] = total_qty
        row[F2_TOTAL_HEADERS[1]] = total_value
        rows.append(row)
    return rows


def write_f2_workbook(
    outlets: Iterable[Outlet],
    config: ReportingConfig,
    report_date: date,
    output_path: Path,
) -> Path:
    """Save the daily sales rows as an unformatted ``F2 Daily Sales`` sheet."""

    headers = f2_headers(config)
    rows = build_f2_rows(outlets, config, report_date)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = F2_SHEET_TITLE
    sheet.append(headers)
    for row in rows:
        sheet.append([row[header] for header in headers])

    output_path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output_path)
    logger.info("Wrote %d daily sales rows to %s", len(rows), output_path)
    return output_path


def build_daily_summary(
    outlets: Iterable[Outlet], config: ReportingConfig, report_date: date
) -> str:
    """Short text summary of the day: total calls, productive calls and value."""

    outlets = list(outlets)
    total_calls = len(outlets)
    productive_calls = sum(1 for o in outlets if o.is_productive)
    total_value = sum(outlet_totals(o, config)[1] for o in outlets)
    return (
        "*DAILY SALES REPORT*\n"
        f"Date: {format_report_date(report_date)}\n"
        f"SO: {config.sales_person}\n"
        "\n"
        f"*Calls:* TC: {total_calls} | PC: {productive_calls}\n"
        f"*Value:* ₹{total_value:,}"
    )


__all__ = [
    "iso_timestamp",
    "outlet_totals",
    "build_report_payload",
    "build_error_payload",
    "write_report_to_json",
    "write_ledger_workbook",
    "format_report_date",
    "f2_headers",
    "build_f2_rows",
    "write_f2_workbook",
    "build_daily_summary",
]
