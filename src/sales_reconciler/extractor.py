"""Per-SKU quantity extraction from a transaction block.

For every catalog product the block is scanned for its label followed by
the nearest quantity (``"30"`` or ``"30 + 3"``) and an optional pack unit.
All occurrences are summed after unit conversion. The function is pure: it
returns a delta and never touches an outlet.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from sales_reconciler.model import QuantityDelta, SkuDefinition
from sales_reconciler.quantity import UNIT_PATTERN, parse_quantity, round_half_up, to_cases

logger = logging.getLogger(__name__)

_QUANTITY_GROUP = r"(\d+(?:\s*\+\s*\d+)?)"
_UNIT_GROUP = rf"(?:\s*({UNIT_PATTERN})\b)?"


def sku_pattern(sku: SkuDefinition) -> re.Pattern[str]:
    """Regex anchored on the SKU label capturing (quantity, unit)."""
    label = sku.label.strip()
    if not label:
        raise ValueError(f"SKU {sku.sku_id} has an empty label")
    return re.compile(rf"{re.escape(label)}.*?{_QUANTITY_GROUP}{_UNIT_GROUP}", re.IGNORECASE)


def extract_sku_quantity(block: str, sku: SkuDefinition) -> float:
    """Total cases of ``sku`` mentioned in ``block`` (unrounded)."""
    total = 0.0
    for match in sku_pattern(sku).finditer(block):
        raw_qty = parse_quantity(match.group(1))
        total += to_cases(raw_qty, match.group(2), sku)
    return total


def extract_skus(block: str, catalog: Iterable[SkuDefinition]) -> QuantityDelta:
    """Return ``{sku_id: cases}`` for every catalog product found in ``block``.

    Quantities are rounded to two decimals; products with no positive total
    are left out. A product whose pattern fails is logged and skipped so the
    remaining products are still extracted.
    """

    delta: QuantityDelta = {}
    for sku in catalog:
        try:
            total = extract_sku_quantity(block, sku)
        except (re.error, ValueError) as exc:
            logger.warning("Skipping SKU %s: %s", sku.sku_id, exc)
            continue
        if total > 0:
            delta[sku.sku_id] = round_half_up(total, 2)
    return delta


__all__ = ["extract_skus", "extract_sku_quantity", "sku_pattern"]
