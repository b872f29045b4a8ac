"""Identity normalisation for outlet names and contact numbers."""

from __future__ import annotations

import re

_STRIP_PATTERN = re.compile(r"[\s\-_.]")  # Whitespace, hyphens, underscores, periods


def normalize(text: str | None) -> str:
    """Return the canonical comparison form of ``text``.

    Lower-cases and removes whitespace, hyphens, underscores and periods, so
    ``"Om Sai-Ram Shop."`` and ``"om sai ram_shop"`` compare equal. ``None``
    and empty input give ``""``, which callers must never treat as a match.
    """
    if not text:
        return ""
    return _STRIP_PATTERN.sub("", str(text).lower())


__all__ = ["normalize"]
