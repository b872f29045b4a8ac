"""Read raw invoice text from pasted-text files and PDF invoices.

Reading a source is a single step: it either returns the whole text or
raises :class:`SourceReadError`; there are no partial results and no
retries.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

import pdfplumber

logger = logging.getLogger(__name__)

PDF_SUFFIXES = {".pdf"}


class SourceReadError(RuntimeError):
    """Raised when a text source cannot be read."""


def page_marker(page_number: int) -> str:
    return f"--- [PDF Page {page_number}] ---"


def extract_pdf_text(path: Path) -> str:
    """Concatenate the text of every page, each preceded by a page marker."""

    try:
        with pdfplumber.open(path) as pdf:
            chunks: List[str] = []
            for number, page in enumerate(pdf.pages, start=1):
                page_text = page.extract_text() or ""
                chunks.append(f"\n{page_marker(number)}\n{page_text}")
            page_count = len(chunks)
    except Exception as exc:
        raise SourceReadError(f"Could not read PDF {path}: {exc}") from exc

    logger.info("Extracted %d pages from %s", page_count, path)
    return "".join(chunks)


def read_source_text(path: Path | str) -> str:
    """Return the text of one source file (PDF or UTF-8 text)."""

    source_path = Path(path)
    if not source_path.exists():
        raise SourceReadError(f"Source not found: {source_path}")

    if source_path.suffix.lower() in PDF_SUFFIXES:
        return extract_pdf_text(source_path)

    try:
        return source_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceReadError(f"Could not read {source_path}: {exc}") from exc


def read_sources(paths: Iterable[Path | str]) -> str:
    """Read several sources and join them with newlines, in order."""
    return "\n".join(read_source_text(p) for p in paths)


__all__ = [
    "SourceReadError",
    "extract_pdf_text",
    "read_source_text",
    "read_sources",
    "page_marker",
]
