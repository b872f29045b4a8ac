"""Domain models for sales-call reconciliation.

These dataclasses represent the core entities shared throughout the tool:
outlets in the call ledger, catalog SKUs, and the outcome of one
reconciliation run.
"""

from __future__ import annotations  # Postponed evaluation of annotations (PEP 563)

from dataclasses import dataclass, field  # Dataclass utilities
from typing import Dict, Literal  # Constrained string types for clarity

MergePolicy = Literal["overwrite", "accumulate"]  # How run totals meet stored ones
RoundingPolicy = Literal["two_decimal", "whole_case"]  # Ledger rounding granularity

QuantityDelta = Dict[str, float]  # sku_id -> cases found in one block


@dataclass(slots=True)
class SkuDefinition:
    """A catalog product and its case-conversion ratio."""

    sku_id: str  # Stable identifier (e.g., "sku_mc2")
    label: str  # Literal text used as the match anchor in invoices
    price: float  # Unit price per case
    bottles_per_case: int = 1  # Bottles/pieces making up one case
    report_column: str = ""  # Daily sales column it rolls into; empty = own label

    @property
    def column(self) -> str:
        return self.report_column or self.label

    def __str__(self) -> str:
        return f"sku(id={self.sku_id}, label={self.label}, price={self.price})"


@dataclass(slots=True)
class Outlet:
    """An outlet in the call ledger with its accumulated sales state."""

    outlet_id: str  # Opaque identifier assigned at creation
    name: str  # Outlet name as entered or extracted
    contact_no: str = ""  # Contact number, may be empty
    is_productive: bool = False  # True once any transaction is attributed
    quantities: dict[str, float] = field(default_factory=dict)  # sku_id -> cases
    db_name: str = ""  # Distributor name
    beat_name: str = ""  # Sales beat / route
    contact_person: str = ""  # Person spoken to

    def __str__(self) -> str:
        return (
            f"outlet(id={self.outlet_id}, name={self.name}, "
            f"contact={self.contact_no}, productive={self.is_productive})"
        )


@dataclass(slots=True)
class ReconcileResult:
    """Groups the outcome of one reconciliation run."""

    outlets: list[Outlet] = field(default_factory=list)  # Updated ledger
    matched_count: int = 0  # Existing outlets matched by the text
    new_outlet_count: int = 0  # Outlets minted from unmatched blocks
    touched_ids: list[str] = field(default_factory=list)  # Ids updated this run


__all__ = [
    "Outlet",
    "SkuDefinition",
    "ReconcileResult",
    "QuantityDelta",
    "MergePolicy",
    "RoundingPolicy",
]
