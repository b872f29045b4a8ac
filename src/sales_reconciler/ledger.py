"""Outlet ledger helpers: creating, pasting, editing and removing outlets."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import List

from sales_reconciler.config import ReportingConfig
from sales_reconciler.model import Outlet

logger = logging.getLogger(__name__)

_HEADER_NAMES = {"name", "name of out let", "name of outlet", "outlet name"}


def new_outlet(
    name: str,
    contact_no: str,
    config: ReportingConfig,
    *,
    db_name: str | None = None,
    beat_name: str | None = None,
    contact_person: str | None = None,
) -> Outlet:
    """Create an outlet with a fresh id and every catalog SKU at zero."""
    return Outlet(
        outlet_id=uuid.uuid4().hex,
        name=name.strip(),
        contact_no=(contact_no or "").strip(),
        is_productive=False,
        quantities={sku_id: 0.0 for sku_id in config.sku_ids},
        db_name=db_name or config.ss_name,
        beat_name=beat_name or config.default_beat,
        contact_person=contact_person or config.default_contact_person,
    )


def copy_outlet(outlet: Outlet) -> Outlet:
    """Independent copy, including the quantities mapping."""
    return replace(outlet, quantities=dict(outlet.quantities))


def add_outlet(
    outlets: List[Outlet], name: str, contact_no: str, config: ReportingConfig
) -> Outlet:
    """Append a manually entered outlet; name and contact are mandatory."""
    if not (name or "").strip() or not (contact_no or "").strip():
        raise ValueError("Outlet name and contact number are mandatory")
    outlet = new_outlet(name, contact_no, config)
    outlets.append(outlet)
    return outlet


def parse_bulk_paste(text: str, config: ReportingConfig) -> List[Outlet]:
    """Parse ``Name<TAB>Contact`` rows copied from a spreadsheet.

    Pipe-separated rows are accepted when a row has no tab. Header rows and
    rows without a name are skipped; a missing contact becomes ``""``.
    """

    outlets: List[Outlet] = []
    for row in (text or "").splitlines():
        parts = row.split("\t")
        if len(parts) < 2 and "|" in row:
            parts = row.split("|")

        name = parts[0].strip() if parts else ""
        contact = parts[1].strip() if len(parts) > 1 else ""
        if not name or name.lower() in _HEADER_NAMES:
            continue
        outlets.append(new_outlet(name, contact, config))

    logger.info("Parsed %d outlets from pasted text", len(outlets))
    return outlets


def remove_outlet(outlets: List[Outlet], outlet_id: str) -> List[Outlet]:
    """Return ``outlets`` without the outlet carrying ``outlet_id``."""
    return [o for o in outlets if o.outlet_id != outlet_id]


def set_quantity(outlet: Outlet, sku_id: str, value: float | str | None) -> float:
    """Manual quantity edit, clamped at zero; a positive value marks the outlet productive."""
    try:
        quantity = max(0.0, float(value or 0))
    except (TypeError, ValueError):
        quantity = 0.0
    outlet.quantities[sku_id] = quantity
    if quantity > 0:
        outlet.is_productive = True
    return quantity


__all__ = [
    "new_outlet",
    "copy_outlet",
    "add_outlet",
    "parse_bulk_paste",
    "remove_outlet",
    "set_quantity",
]
