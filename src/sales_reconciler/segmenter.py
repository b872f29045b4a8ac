"""Split raw invoice / WhatsApp text into transaction blocks.

Each occurrence of an invoice boundary marker starts a new block: the
invoice-number prefix (``FY25-`` by default), the word ``Invoice`` or the
phrase ``Bill No``. Markers are dropped and the spans between them become
blocks in source order. Text with missing or malformed markers will be
over- or under-segmented; that is accepted.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from sales_reconciler.config import ReportingConfig

logger = logging.getLogger(__name__)

_FIXED_MARKERS = (r"Invoice", r"Bill\s+No")


def boundary_pattern(invoice_prefix_pattern: str) -> re.Pattern[str]:
    """Compile the case-insensitive block boundary regex."""
    alternatives = [invoice_prefix_pattern, *_FIXED_MARKERS]
    return re.compile("|".join(f"(?:{alt})" for alt in alternatives), re.IGNORECASE)


def _spans_between(pattern: re.Pattern[str], text: str) -> List[str]:
    """Text between marker matches; capture groups in a configured prefix are ignored."""
    spans: List[str] = []
    start = 0
    for match in pattern.finditer(text):
        spans.append(text[start : match.start()])
        start = match.end()
    spans.append(text[start:])
    return spans


def segment(raw_text: str | None, config: Optional[ReportingConfig] = None) -> List[str]:
    """Return the blocks of ``raw_text`` that are long enough to carry data."""
    config = (config or ReportingConfig()).validate()

    if not raw_text or not raw_text.strip():
        return []

    pattern = boundary_pattern(config.invoice_prefix_pattern)
    blocks: List[str] = []
    for span in _spans_between(pattern, raw_text):
        if len(span.strip()) < config.min_block_length:
            continue  # Noise between adjacent markers
        blocks.append(span)

    logger.debug("Segmented %d characters into %d blocks", len(raw_text), len(blocks))
    return blocks


__all__ = ["segment", "boundary_pattern"]
