"""Sales-call reconciliation toolkit.

Exposes the ``reconcile`` engine and the high-level ``run_reconciliation``
API for programmatic use.
"""

from .reconcile import reconcile  # Core text-to-ledger engine
from .runner import run_reconciliation  # Public API for file-based runs

__all__ = ["reconcile", "run_reconciliation"]  # Re-exported symbols
