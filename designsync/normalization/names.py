"""Token name and type canonicalisation."""

from __future__ import annotations

import re
from typing import Dict, Iterable

from ..models import TOKEN_TYPES

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

UNNAMED_TOKEN = "unnamed-token"

TYPE_SYNONYMS: Dict[str, str] = {
    "colour": "color",
    "colors": "color",
    "fill": "color",
    "text": "typography",
    "font": "typography",
    "fonts": "typography",
    "space": "spacing",
    "margin": "spacing",
    "padding": "spacing",
    "gap": "spacing",
    "size": "sizing",
    "dimension": "sizing",
    "dimensions": "sizing",
    "effect": "shadow",
    "drop-shadow": "shadow",
    "box-shadow": "shadow",
    "stroke": "border",
    "border-radius": "border",
    "alpha": "opacity",
    "transparency": "opacity",
}


def normalize_name(raw: object) -> str:
    """Return a lower-kebab-case identifier that starts with a letter."""
    text = "" if raw is None else str(raw).strip()
    text = _CAMEL_BOUNDARY.sub(r"\1-\2", text).lower()
    text = _NON_ALNUM.sub("-", text).strip("-")
    if not text:
        return UNNAMED_TOKEN
    if not text[0].isalpha():
        text = f"token-{text}"
    return text


def normalize_type(raw: object) -> str:
    """Fold synonyms into the closed token type set; unknown types become ``other``."""
    if raw is None:
        return "other"
    key = str(raw).strip().lower().replace("_", "-").replace(" ", "-")
    if not key:
        return "other"
    if key in TYPE_SYNONYMS:
        return TYPE_SYNONYMS[key]
    if key in TOKEN_TYPES:
        return key
    return "other"


def unique_names(names: Iterable[str]) -> list[str]:
    """Suffix repeated names with ``-2``, ``-3`` ... preserving first occurrence."""
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        candidate = name
        counter = 2
        while candidate in seen:
            candidate = f"{name}-{counter}"
            counter += 1
        seen.add(candidate)
        result.append(candidate)
    return result


__all__ = ["TYPE_SYNONYMS", "UNNAMED_TOKEN", "normalize_name", "normalize_type", "unique_names"]
