"""Kotlin / Jetpack Compose generator."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Sequence

from ..normalization.values import dimension_magnitude, dimension_unit, format_number
from .base import ArtifactSpec, PlatformConfig, PlatformGenerator, hex_channels, pascal_case, primary_family

_GENERIC_FAMILIES = {
    "serif": "FontFamily.Serif",
    "sans-serif": "FontFamily.SansSerif",
    "monospace": "FontFamily.Monospace",
    "cursive": "FontFamily.Cursive",
}

_REM_TO_DP = 16.0

_KOTLIN_KEYWORDS = frozenset(
    {
        "as", "break", "class", "continue", "do", "else", "false", "for", "fun", "if", "in",
        "interface", "is", "null", "object", "package", "return", "super", "this", "throw",
        "true", "try", "typealias", "typeof", "val", "var", "when", "while",
    }
)


def color_literal(hex_value: str) -> str:
    """``#RRGGBB[AA]`` to a packed ARGB ``Color(0xAARRGGBB)`` literal."""
    r, g, b, a = hex_channels(hex_value)
    return f"Color(0x{a:02X}{r:02X}{g:02X}{b:02X})"


def dp_literal(dimension: str) -> str:
    return f"{_density_number(dimension)}.dp"


def sp_literal(dimension: str) -> str:
    return f"{_density_number(dimension)}.sp"


def font_weight_literal(weight: int) -> str:
    return f"FontWeight.W{int(weight)}"


def font_family_literal(family: str) -> str:
    return _GENERIC_FAMILIES.get(primary_family(family).lower(), "FontFamily.Default")


def text_style_literal(value: Mapping[str, Any]) -> str:
    font_size = value["fontSize"]
    parts = [
        f"fontFamily = {font_family_literal(value['fontFamily'])}",
        f"fontSize = {sp_literal(font_size)}",
        f"fontWeight = {font_weight_literal(value['fontWeight'])}",
    ]
    line_height = value.get("lineHeight")
    if line_height:
        if dimension_unit(line_height):
            parts.append(f"lineHeight = {sp_literal(line_height)}")
        else:
            size = _to_dp(font_size) * float(line_height)
            parts.append(f"lineHeight = {format_number(size)}.sp")
    letter_spacing = value.get("letterSpacing")
    if letter_spacing:
        parts.append(f"letterSpacing = {sp_literal(letter_spacing)}")
    return "TextStyle(" + ", ".join(parts) + ")"


def float_literal(value: Any) -> str:
    return f"{format_number(float(value))}f"


def _to_dp(dimension: str) -> float:
    magnitude = dimension_magnitude(dimension)
    if dimension_unit(dimension) in ("rem", "em"):
        return magnitude * _REM_TO_DP
    return magnitude


def _density_number(dimension: str) -> str:
    number = format_number(_to_dp(dimension))
    return f"({number})" if number.startswith("-") else number


class AndroidGenerator(PlatformGenerator):
    """Emits ``Colors.kt``, ``Typography.kt``, ``Spacing.kt`` and ``Theme.kt``."""

    platform = "android"
    reserved_words = _KOTLIN_KEYWORDS

    def artifacts(self, config: PlatformConfig) -> Sequence[ArtifactSpec]:
        return (
            ArtifactSpec("colors", "Colors.kt", "Colors.kt.j2", ("color",), "kotlin"),
            ArtifactSpec("typography", "Typography.kt", "Typography.kt.j2", ("typography",), "kotlin"),
            ArtifactSpec("spacing", "Spacing.kt", "Spacing.kt.j2", ("spacing", "sizing"), "kotlin"),
            ArtifactSpec(
                "theme",
                "Theme.kt",
                "Theme.kt.j2",
                ("color", "typography", "spacing", "sizing", "shadow", "border", "opacity"),
                "kotlin",
            ),
        )

    def filters(self) -> Dict[str, Callable[..., Any]]:
        return {
            "type_name": pascal_case,
            "color_literal": color_literal,
            "dp": dp_literal,
            "sp": sp_literal,
            "text_style": text_style_literal,
            "float_literal": float_literal,
        }


__all__ = ["AndroidGenerator", "color_literal", "dp_literal", "sp_literal", "text_style_literal"]
