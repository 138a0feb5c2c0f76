"""Normalization engine: canonical names, types and values for design tokens."""

from .colors import ColorParseError, canonical_color, color_metrics, parse_color
from .engine import Normalizer, font_size_category, semantic_tags
from .names import normalize_name, normalize_type
from .values import (
    normalize_border,
    normalize_dimension,
    normalize_opacity,
    normalize_shadow,
    normalize_typography,
)

__all__ = [
    "ColorParseError",
    "Normalizer",
    "canonical_color",
    "color_metrics",
    "font_size_category",
    "normalize_border",
    "normalize_dimension",
    "normalize_name",
    "normalize_opacity",
    "normalize_shadow",
    "normalize_type",
    "normalize_typography",
    "parse_color",
    "semantic_tags",
]
