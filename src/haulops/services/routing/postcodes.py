"""UK postcode canonicalisation."""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")


def postcode_key(raw: str | None) -> str:
    """Lookup key: all whitespace removed, upper-cased. ``"wn5 0lr"`` -> ``"WN50LR"``."""
    return _WHITESPACE.sub("", raw or "").upper()


def format_postcode(raw: str | None) -> str:
    """Display form with a single space before the inward code.

    ``"wn50lr"`` -> ``"WN5 0LR"``. Keys of three characters or fewer are
    returned unchanged.
    """
    key = postcode_key(raw)
    if len(key) <= 3:
        return key
    return f"{key[:-3]} {key[-3:]}"
