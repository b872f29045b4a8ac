"""Resolve a transaction block to an outlet.

Matching is a plain substring test on normalised text: a block belongs to
an outlet when it contains the outlet's contact number or name. The first
outlet that matches wins; there is no ranking between candidates. The
``OutletMatcher`` protocol lets a stricter matcher replace this one without
touching the engine.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Protocol

from sales_reconciler.model import Outlet, SkuDefinition
from sales_reconciler.normalize import normalize

logger = logging.getLogger(__name__)

MIN_CONTACT_LENGTH = 5  # Contacts must be longer than this to match
MIN_NAME_LENGTH = 3  # Names (and extracted names) must be longer than this

_KEYWORD_LINE = re.compile(
    r"\binvoice\b|\bbill\b|\binv\b|\bgstin\b|\bgst\b|\btotal\b|\bdate\b", re.IGNORECASE
)
_DATE_LIKE = re.compile(
    r"\b\d{1,4}[/.\-]\d{1,2}[/.\-]\d{1,4}\b"
    r"|\b\d{1,2}\s+(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\b",
    re.IGNORECASE,
)
_PAGE_MARKER = re.compile(r"^-+\s*\[PDF Page \d+\]\s*-+$", re.IGNORECASE)
_HAS_LETTER = re.compile(r"[^\W\d_]")


class OutletMatcher(Protocol):
    """Anything able to pick the outlet a block belongs to."""

    def match(self, block: str, outlets: Iterable[Outlet]) -> Optional[Outlet]:
        ...


class SubstringMatcher:
    """First-match-wins matcher on normalised contact numbers and names."""

    def match(self, block: str, outlets: Iterable[Outlet]) -> Optional[Outlet]:
        norm_block = normalize(block)
        if not norm_block:
            return None

        for outlet in outlets:
            norm_contact = normalize(outlet.contact_no)
            if len(norm_contact) > MIN_CONTACT_LENGTH and norm_contact in norm_block:
                return outlet
            norm_name = normalize(outlet.name)
            if len(norm_name) > MIN_NAME_LENGTH and norm_name in norm_block:
                return outlet
        return None


def _mentions_product(line: str, catalog: Iterable[SkuDefinition]) -> bool:
    norm_line = normalize(line)
    for sku in catalog:
        norm_label = normalize(sku.label)
        if norm_label and norm_label in norm_line:
            return True
    return False


def extract_outlet_name(block: str, catalog: Iterable[SkuDefinition]) -> Optional[str]:
    """Guess the outlet name of a block that matched no known outlet.

    Lines are scanned in order; lines carrying invoice/bill keywords, dates,
    product labels, page markers, or no letters at all are skipped. The
    first remaining line longer than three characters is the name. Contact
    numbers are not extracted.
    """

    catalog = list(catalog)
    for raw_line in block.splitlines():
        line = raw_line.strip()
        if len(line) <= MIN_NAME_LENGTH:
            continue
        if _PAGE_MARKER.match(line) or not _HAS_LETTER.search(line):
            continue
        if _KEYWORD_LINE.search(line) or _DATE_LIKE.search(line):
            continue
        if _mentions_product(line, catalog):
            continue
        return line
    return None


class NewOutletRegistry:
    """Outlets minted during one run, keyed by normalised name."""

    def __init__(self) -> None:
        self._by_name: dict[str, Outlet] = {}

    def get(self, name: str) -> Optional[Outlet]:
        return self._by_name.get(normalize(name))

    def add(self, outlet: Outlet) -> Outlet:
        key = normalize(outlet.name)
        if not key:
            raise ValueError("Cannot register an outlet without a name")
        self._by_name.setdefault(key, outlet)
        return self._by_name[key]

    @property
    def outlets(self) -> List[Outlet]:
        return list(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)


__all__ = [
    "OutletMatcher",
    "SubstringMatcher",
    "NewOutletRegistry",
    "extract_outlet_name",
    "MIN_CONTACT_LENGTH",
    "MIN_NAME_LENGTH",
]
