"""Quantity parsing and pack-unit conversion.

Invoices record split shipments as ``"primary + bonus"`` on one line
(``"30 + 3"``), and some products are invoiced in bottles or pieces rather
than cases. Everything here is lenient: unreadable input counts as zero.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from sales_reconciler.model import SkuDefinition

_NON_QUANTITY = re.compile(r"[^\d+]")

# Unit words accepted after a quantity, longest spellings first so the
# alternation does not stop at a prefix ("Btl" before "Bt").
UNIT_WORDS = (
    "Boxes", "Box", "Cases", "Case", "Cs",
    "Bottles", "Bottle", "Btls", "Btl", "Bt",
    "Pieces", "Piece", "Pcs", "Pc",
    "Units", "Unit",
    "Litres", "Liters", "Litre", "Liter", "Ltr",
)
UNIT_PATTERN = "|".join(UNIT_WORDS)

BOTTLE_UNITS = frozenset(
    {"bottles", "bottle", "btls", "btl", "bt", "pieces", "piece", "pcs", "pc"}
)


def parse_quantity(fragment: str | None) -> int:
    """Parse ``"30"``, ``"30 + 3"`` or ``"30+3"`` into a count; 0 when unreadable."""
    if not fragment:
        return 0
    sanitized = _NON_QUANTITY.sub("", str(fragment))
    if "+" in sanitized:
        return sum(_to_int(term) for term in sanitized.split("+"))
    return _to_int(sanitized)


def _to_int(term: str) -> int:
    try:
        return int(term)
    except ValueError:
        return 0


def is_bottle_unit(unit: str | None) -> bool:
    return (unit or "").strip().lower() in BOTTLE_UNITS


def to_cases(raw_quantity: float, unit: str | None, sku: SkuDefinition) -> float:
    """Convert ``raw_quantity`` expressed in ``unit`` into cases of ``sku``.

    Bottle/piece units are divided by the SKU's bottles-per-case ratio. Box and
    case units, any other unit word, or no unit at all are already cases.
    """
    if is_bottle_unit(unit) and sku.bottles_per_case > 1:
        return raw_quantity / sku.bottles_per_case
    return float(raw_quantity)


def round_half_up(value: float, places: int = 2) -> float:
    """Round ``value`` to ``places`` decimals, halves away from zero."""
    try:
        exponent = Decimal(1).scaleb(-places)
        return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return 0.0


__all__ = [
    "parse_quantity",
    "to_cases",
    "is_bottle_unit",
    "round_half_up",
    "UNIT_PATTERN",
]
