"""Reconciliation engine: merge invoice text into the outlet ledger.

One run segments the text, extracts each block's SKU quantities and
resolves the block to an outlet: an existing one, or one minted from the
block's first name-like line. Only blocks that carry SKU quantities may mint
an outlet, so header fragments between markers never become phantom calls.
Quantities are summed per outlet, and only after every block has been
processed are the run totals merged into the ledger according to the
configured merge and rounding policies.

Merge policies:

* ``overwrite`` (default) - each touched outlet has every catalog SKU reset
  to zero before the run totals are applied, so replaying the same text
  gives the same ledger.
* ``accumulate`` - run totals are added to what the outlet already holds,
  so replaying the same text counts it again.

Rounding policies:

* ``two_decimal`` (default) - broken cases such as 1.5 survive.
* ``whole_case`` - quantities are rounded to the nearest whole case.

The extractor already rounds each block's delta to two decimals; the ledger
policy is applied once, to the merged value.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from sales_reconciler.config import (
    MERGE_ACCUMULATE,
    ROUND_TWO_DECIMAL,
    ROUND_WHOLE_CASE,
    ConfigError,
    ReportingConfig,
)
from sales_reconciler.extractor import extract_skus
from sales_reconciler.ledger import copy_outlet, new_outlet
from sales_reconciler.matcher import (
    NewOutletRegistry,
    OutletMatcher,
    SubstringMatcher,
    extract_outlet_name,
)
from sales_reconciler.model import Outlet, QuantityDelta, ReconcileResult
from sales_reconciler.quantity import round_half_up
from sales_reconciler.segmenter import segment

logger = logging.getLogger(__name__)


def apply_rounding(value: float, policy: str) -> float:
    """Round a ledger quantity according to ``policy``."""
    if policy == ROUND_WHOLE_CASE:
        return round_half_up(value, 0)
    if policy == ROUND_TWO_DECIMAL:
        return round_half_up(value, 2)
    raise ConfigError(f"Unknown rounding policy: {policy!r}")


def merge_delta(totals: QuantityDelta, delta: QuantityDelta) -> QuantityDelta:
    """Add ``delta`` into ``totals`` in place and return ``totals``."""
    for sku_id, qty in delta.items():
        totals[sku_id] = totals.get(sku_id, 0.0) + qty
    return totals


def _commit(outlet: Outlet, run_totals: QuantityDelta, config: ReportingConfig) -> None:
    """Write one outlet's run totals into its quantities."""
    if config.merge_policy == MERGE_ACCUMULATE:
        merged = dict(outlet.quantities)
        for sku_id in config.sku_ids:
            merged.setdefault(sku_id, 0.0)
        merge_delta(merged, run_totals)
    else:
        merged = {sku_id: 0.0 for sku_id in config.sku_ids}
        merged.update(
            {k: v for k, v in outlet.quantities.items() if k not in merged}
        )  # Keep SKUs the current catalog does not know about
        merge_delta(merged, run_totals)

    outlet.quantities = {
        sku_id: max(0.0, apply_rounding(qty, config.ledger_rounding))
        for sku_id, qty in merged.items()
    }
    outlet.is_productive = True


def reconcile(
    raw_text: str | None,
    outlets: List[Outlet],
    config: Optional[ReportingConfig] = None,
    matcher: Optional[OutletMatcher] = None,
) -> ReconcileResult:
    """Merge the transactions found in ``raw_text`` into a copy of ``outlets``.

    The input list and its outlets are left untouched; the returned
    :class:`ReconcileResult` carries the updated ledger, the number of
    existing outlets matched and the number of outlets created. An invalid
    ``config`` raises :class:`ConfigError` before anything is read.
    """

    config = (config or ReportingConfig()).validate()
    matcher = matcher or SubstringMatcher()
    ledger: List[Outlet] = [copy_outlet(o) for o in outlets]

    blocks = segment(raw_text, config)
    if not blocks:
        logger.info("No transaction blocks found; ledger unchanged")
        return ReconcileResult(outlets=ledger)

    registry = NewOutletRegistry()
    run_totals: Dict[str, QuantityDelta] = {}  # outlet_id -> summed deltas
    touched: Dict[str, Outlet] = {}  # Insertion order = first time seen
    matched_ids: set[str] = set()

    for index, block in enumerate(blocks):
        delta = extract_skus(block, config.catalog)
        outlet = matcher.match(block, ledger)
        if outlet is not None:
            matched_ids.add(outlet.outlet_id)
        elif not delta:
            logger.debug("Block %d matched no outlet and carries no SKUs", index)
            continue
        else:
            outlet = _resolve_new_outlet(block, registry, config)
            if outlet is None:
                logger.debug("Block %d matched no outlet", index)
                continue

        logger.debug("Block %d -> %s: %s", index, outlet.name, delta)
        touched.setdefault(outlet.outlet_id, outlet)
        merge_delta(run_totals.setdefault(outlet.outlet_id, {}), delta)

    for outlet_id, outlet in touched.items():
        _commit(outlet, run_totals[outlet_id], config)

    created = registry.outlets
    ledger.extend(created)

    logger.info(
        "Reconciled %d blocks: %d outlets matched, %d new outlets",
        len(blocks),
        len(matched_ids),
        len(created),
    )
    return ReconcileResult(
        outlets=ledger,
        matched_count=len(matched_ids),
        new_outlet_count=len(created),
        touched_ids=list(touched),
    )


def _resolve_new_outlet(
    block: str, registry: NewOutletRegistry, config: ReportingConfig
) -> Optional[Outlet]:
    """Outlet minted earlier in this run for the block's name, or a new one."""
    if not config.create_missing_outlets:
        return None

    name = extract_outlet_name(block, config.catalog)
    if name is None:
        return None

    existing = registry.get(name)
    if existing is not None:
        return existing
    return registry.add(new_outlet(name, "", config))


__all__ = ["reconcile", "merge_delta", "apply_rounding"]
