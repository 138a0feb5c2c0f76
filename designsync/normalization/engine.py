"""Normalization pipeline: raw extracted tokens to canonical collections."""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Optional

from ..errors import NormalizationError
from ..logging import get_logger
from ..models import DEFAULT_CATEGORIES, DesignToken, TokenCollection
from .colors import canonical_color, color_metrics, format_hex, luminance, parse_color, scale_color
from .names import normalize_name, normalize_type, unique_names
from .values import (
    dimension_magnitude,
    dimension_unit,
    normalize_border,
    normalize_dimension,
    normalize_opacity,
    normalize_shadow,
    normalize_typography,
)

_VERSION_PATTERN = re.compile(r"^\d+(?:\.\d+)*$")

SEMANTIC_KEYWORDS: Dict[str, str] = {
    "primary": "primary",
    "secondary": "secondary",
    "accent": "accent",
    "success": "success",
    "warning": "warning",
    "error": "error",
    "danger": "error",
    "info": "info",
    "small": "small",
    "medium": "medium",
    "large": "large",
    "xl": "xl",
}

DARK_MODE_SUFFIX = "-dark"
DARKEN_FACTOR = 0.3
LIGHTEN_FACTOR = 1.7

_UNIT_TO_PX = {"px": 1.0, "rem": 16.0, "em": 16.0, "pt": 4.0 / 3.0}


class Normalizer:
    """Converts raw token collections into their canonical form."""

    def __init__(self, *, enable_dark_mode: bool = False, color_cache: Optional[Any] = None) -> None:
        self.enable_dark_mode = enable_dark_mode
        self.color_cache = color_cache
        self.logger = get_logger("normalization")
        self._value_handlers: Dict[str, Callable[[Any], Any]] = {
            "color": lambda value: canonical_color(value, self.color_cache),
            "typography": normalize_typography,
            "spacing": normalize_dimension,
            "sizing": normalize_dimension,
            "shadow": lambda value: normalize_shadow(value, color_cache=self.color_cache),
            "border": lambda value: normalize_border(value, color_cache=self.color_cache),
            "opacity": normalize_opacity,
            "other": _passthrough,
        }

    def normalize(self, collection: TokenCollection) -> TokenCollection:
        """Return a new, sorted collection with canonical names, types and values."""
        self.logger.info(
            "Normalizing %d tokens from %s", len(collection.tokens), collection.source or "unknown source"
        )
        normalized: List[DesignToken] = []
        skipped: List[str] = []
        for raw in collection.tokens:
            try:
                normalized.append(self.normalize_token(raw))
            except (TypeError, ValueError, OverflowError) as exc:
                label = getattr(raw, "name", None) or "<unnamed>"
                self.logger.warning("Skipping malformed token %s: %s", label, exc)
                skipped.append(str(label))

        for token, name in zip(normalized, unique_names(token.name for token in normalized)):
            if token.name != name:
                self.logger.debug("Renamed duplicate token %s to %s", token.name, name)
                token.name = name

        if self.enable_dark_mode:
            normalized.extend(self.derive_dark_mode_tokens(normalized))

        if not normalized:
            raise NormalizationError(
                f"Normalization produced no valid tokens ({len(skipped)} skipped)"
            )

        normalized.sort(key=lambda token: (token.category, token.name))
        metadata = dict(collection.metadata)
        if skipped:
            metadata["skipped_tokens"] = skipped
        self.logger.info("Normalized %d tokens (%d skipped)", len(normalized), len(skipped))
        return TokenCollection(
            name=collection.name,
            version=self._normalize_version(collection.version),
            source=collection.source,
            tokens=normalized,
            metadata=metadata,
        )

    def normalize_token(self, token: DesignToken) -> DesignToken:
        """Canonicalise a single token; raises ``ValueError`` when it is malformed."""
        token_type = normalize_type(token.type)
        if token.value is None:
            raise ValueError("token has no value")
        value = self._value_handlers[token_type](token.value)
        name = normalize_name(token.name)
        category = str(token.category or "").strip().lower() or DEFAULT_CATEGORIES[token_type]
        description = (token.description or "").strip() or None
        tags = {str(tag).strip().lower() for tag in token.tags if str(tag).strip()}
        attributes = dict(token.attributes)

        result = DesignToken(
            name=name,
            type=token_type,
            value=value,
            category=category,
            description=description,
            tags=tags,
            attributes=attributes,
        )
        self._apply_derived_attributes(result)
        return result

    def derive_dark_mode_tokens(self, tokens: List[DesignToken]) -> List[DesignToken]:
        """Emit a ``<name>-dark`` sibling for every base color token."""
        existing = {token.name for token in tokens}
        derived: List[DesignToken] = []
        for token in tokens:
            if token.type != "color" or "computed" in token.tags:
                continue
            dark_name = f"{token.name}{DARK_MODE_SUFFIX}"
            if dark_name in existing:
                continue
            rgba = parse_color(token.value)
            factor = DARKEN_FACTOR if luminance(rgba) > 0.5 else LIGHTEN_FACTOR
            dark = DesignToken(
                name=dark_name,
                type="color",
                value=format_hex(scale_color(rgba, factor)),
                category=token.category,
                description=f"Dark mode variant of {token.name}",
                tags={"dark-mode", "computed"},
                attributes={"base_token": token.name},
            )
            self._apply_derived_attributes(dark)
            existing.add(dark_name)
            derived.append(dark)
        if derived:
            self.logger.debug("Derived %d dark mode tokens", len(derived))
        return derived

    def _apply_derived_attributes(self, token: DesignToken) -> None:
        token.tags.update(semantic_tags(token.name))
        if token.type == "color":
            token.attributes.update(color_metrics(token.value))
        elif token.type == "typography":
            category = font_size_category(token.value["fontSize"])
            if category is not None:
                token.attributes["font_size_category"] = category

    def _normalize_version(self, version: str) -> str:
        text = str(version or "").strip().lstrip("vV")
        if _VERSION_PATTERN.match(text):
            return text
        self.logger.warning("Invalid collection version %r; defaulting to 1.0.0", version)
        return "1.0.0"


def semantic_tags(name: str) -> set[str]:
    return {tag for keyword, tag in SEMANTIC_KEYWORDS.items() if keyword in name}


def font_size_category(font_size: str) -> Optional[str]:
    """Bucket a font size (converted to px) into a named category."""
    try:
        magnitude = dimension_magnitude(font_size)
    except ValueError:
        return None
    scale = _UNIT_TO_PX.get(dimension_unit(font_size))
    if scale is None:
        return None
    size = magnitude * scale
    if size < 12:
        return "extra-small"
    if size < 16:
        return "small"
    if size < 20:
        return "medium"
    if size < 24:
        return "large"
    if size < 32:
        return "extra-large"
    return "display"


def _passthrough(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool, list, dict)):
        return value
    return str(value)


__all__ = ["Normalizer", "font_size_category", "semantic_tags"]
