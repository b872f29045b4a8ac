"""Excel import of the total-calls outlet list.

This module reads the outlet list from an Excel workbook using ``openpyxl``
and converts rows into :class:`Outlet` objects. The ``outlets`` worksheet is
used when present, otherwise the first worksheet. Columns are located by
header, so workbooks written by :func:`sales_reconciler.report.write_ledger_workbook`
(which add a productive flag and one column per SKU label) read back too.
"""

from __future__ import annotations

import logging
from pathlib import Path  # Filesystem path management
from typing import Any, Dict, List, Optional  # Concrete list type for return value

from openpyxl import load_workbook  # Excel file loader

from sales_reconciler.config import ReportingConfig
from sales_reconciler.ledger import new_outlet
from sales_reconciler.model import Outlet  # Domain model used as output

logger = logging.getLogger(__name__)

SHEET_NAME = "outlets"

# Accepted header spellings per field, compared case-insensitively
HEADER_ALIASES: Dict[str, tuple[str, ...]] = {
    "outlet_id": ("outlet id", "id"),
    "name": ("name", "name of out let", "name of outlet", "outlet name"),
    "contact_no": ("contact", "contact no.", "contact no", "contact number"),
    "db_name": ("db name",),
    "beat_name": ("beat name", "beat"),
    "contact_person": ("contact person", "contact person name"),
    "is_productive": ("productive",),
}

_TRUE_VALUES = {"true", "yes", "y", "1", "productive"}


def _cell_text(value: Any) -> str:
    """Render a cell as text; whole floats lose their ``.0`` (phone numbers)."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _to_quantity(value: Any) -> float:
    try:
        return max(0.0, float(value))
    except (TypeError, ValueError):
        return 0.0


def extract_outlets(
    workbook_path: Path | str, config: Optional[ReportingConfig] = None
) -> List[Outlet]:
    """Return outlets parsed from the Excel workbook.

    Rows without a name are skipped; a missing contact becomes ``""``
    (outlets minted from invoice text have none). Raises
    :class:`FileNotFoundError` if the workbook cannot be located and
    :class:`ValueError` if it has no recognisable name column.
    """

    config = config or ReportingConfig()
    workbook_path = Path(workbook_path)  # Ensure we have a Path instance
    if not workbook_path.exists():  # Validate the file exists
        raise FileNotFoundError(f"Workbook not found: {workbook_path}")

    # Open in read-only mode for performance and safety; use cell values only
    workbook = load_workbook(filename=workbook_path, read_only=True, data_only=True)
    try:
        if SHEET_NAME in workbook.sheetnames:
            sheet = workbook[SHEET_NAME]
        else:
            sheet = workbook[workbook.sheetnames[0]]

        rows = sheet.iter_rows(values_only=True)  # Iterate rows as tuples of raw values
        headers_row = next(rows, None)  # First row should contain column headers
        if headers_row is None:  # Empty sheet edge case
            return []

        headers = [_cell_text(h).lower() for h in headers_row]
        header_index = {header: idx for idx, header in enumerate(headers) if header}

        field_index: Dict[str, int] = {}
        for field_name, aliases in HEADER_ALIASES.items():
            for alias in aliases:
                if alias in header_index:
                    field_index[field_name] = header_index[alias]
                    break
        if "name" not in field_index:
            raise ValueError(f"No outlet name column found in {workbook_path.name}")

        sku_index = {
            sku.sku_id: header_index[sku.label.lower()]
            for sku in config.catalog
            if sku.label.lower() in header_index
        }

        def _value(row, field_name: str):  # Helper to safely access a column
            idx = field_index.get(field_name)
            if idx is None or idx >= len(row):
                return None
            return row[idx]

        outlets: List[Outlet] = []
        for row in rows:  # Iterate over each data row
            name = _cell_text(_value(row, "name"))
            contact = _cell_text(_value(row, "contact_no"))
            if not name:
                continue  # Skip rows without a name

            outlet = new_outlet(
                name,
                contact,
                config,
                db_name=_cell_text(_value(row, "db_name")) or None,
                beat_name=_cell_text(_value(row, "beat_name")) or None,
                contact_person=_cell_text(_value(row, "contact_person")) or None,
            )
            outlet_id = _cell_text(_value(row, "outlet_id"))
            if outlet_id:
                outlet.outlet_id = outlet_id  # Keep ids from a saved ledger
            outlet.is_productive = (
                _cell_text(_value(row, "is_productive")).lower() in _TRUE_VALUES
            )
            for sku_id, idx in sku_index.items():
                if idx < len(row):
                    outlet.quantities[sku_id] = _to_quantity(row[idx])
            outlets.append(outlet)
    finally:
        workbook.close()  # Always close the workbook handle

    logger.info("Read %d outlets from %s", len(outlets), workbook_path)
    return outlets


__all__ = ["extract_outlets"]  # Public API
