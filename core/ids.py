"""Identifier normalisation shared by every lookup table."""

from __future__ import annotations

import re
from typing import Any

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def to_id(text: Any) -> str:
    """Return the comparison-safe identifier for ``text``.

    ``"[Gen 7] OU"`` becomes ``"gen7ou"`` and ``"Kommonium Z"`` becomes
    ``"kommoniumz"``.  Non-string values are stringified first and ``None``
    maps to the empty identifier.
    """

    if text is None:
        return ""
    return _NON_ALNUM.sub("", str(text).lower())


__all__ = ["to_id"]
