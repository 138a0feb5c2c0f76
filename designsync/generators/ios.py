"""Swift / SwiftUI generator."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Sequence

from ..normalization.values import dimension_magnitude, dimension_unit, format_number
from .base import ArtifactSpec, PlatformConfig, PlatformGenerator, hex_channels, pascal_case, primary_family

_WEIGHT_NAMES = {
    100: ".ultraLight",
    200: ".thin",
    300: ".light",
    400: ".regular",
    500: ".medium",
    600: ".semibold",
    700: ".bold",
    800: ".heavy",
    900: ".black",
}

_SYSTEM_FAMILIES = {"inherit", "system", "system-ui", "-apple-system", "sans-serif"}

_REM_TO_POINTS = 16.0

_SWIFT_KEYWORDS = frozenset(
    {
        "Any", "Self", "as", "associatedtype", "break", "case", "catch", "class", "continue",
        "default", "defer", "deinit", "do", "else", "enum", "extension", "fallthrough", "false",
        "fileprivate", "for", "func", "guard", "if", "import", "in", "init", "inout", "internal",
        "is", "let", "nil", "open", "operator", "private", "protocol", "public", "repeat",
        "rethrows", "return", "self", "static", "struct", "subscript", "super", "switch",
        "throw", "throws", "true", "try", "typealias", "var", "where", "while",
    }
)


def _channel(value: int) -> str:
    return f"{value / 255.0:.4f}"


def color_literal(hex_value: str) -> str:
    """``#RRGGBB[AA]`` to a SwiftUI ``Color(red:green:blue:opacity:)`` literal."""
    r, g, b, a = hex_channels(hex_value)
    return (
        f"Color(red: {_channel(r)}, green: {_channel(g)}, "
        f"blue: {_channel(b)}, opacity: {_channel(a)})"
    )


def points(dimension: str) -> str:
    magnitude = dimension_magnitude(dimension)
    if dimension_unit(dimension) in ("rem", "em"):
        magnitude *= _REM_TO_POINTS
    return format_number(magnitude)


def cgfloat_literal(dimension: str) -> str:
    return f"CGFloat({points(dimension)})"


def font_literal(value: Mapping[str, Any]) -> str:
    size = points(value["fontSize"])
    weight = _WEIGHT_NAMES.get(int(value["fontWeight"]), ".regular")
    family = primary_family(value["fontFamily"])
    if family.lower() in _SYSTEM_FAMILIES:
        return f"Font.system(size: {size}, weight: {weight})"
    escaped = family.replace("\\", "\\\\").replace('"', '\\"')
    return f'Font.custom("{escaped}", size: {size}).weight({weight})'


def double_literal(value: Any) -> str:
    text = format_number(float(value))
    return text if "." in text else f"{text}.0"


class IOSGenerator(PlatformGenerator):
    """Emits ``Colors.swift``, ``Typography.swift``, ``Spacing.swift`` and ``Theme.swift``."""

    platform = "ios"
    reserved_words = _SWIFT_KEYWORDS

    def artifacts(self, config: PlatformConfig) -> Sequence[ArtifactSpec]:
        return (
            ArtifactSpec("colors", "Colors.swift", "Colors.swift.j2", ("color",), "swift"),
            ArtifactSpec("typography", "Typography.swift", "Typography.swift.j2", ("typography",), "swift"),
            ArtifactSpec("spacing", "Spacing.swift", "Spacing.swift.j2", ("spacing", "sizing"), "swift"),
            ArtifactSpec(
                "theme",
                "Theme.swift",
                "Theme.swift.j2",
                ("color", "typography", "spacing", "sizing", "shadow", "border", "opacity"),
                "swift",
            ),
        )

    def filters(self) -> Dict[str, Callable[..., Any]]:
        return {
            "type_name": pascal_case,
            "color_literal": color_literal,
            "cgfloat": cgfloat_literal,
            "points": points,
            "font": font_literal,
            "double_literal": double_literal,
        }


__all__ = ["IOSGenerator", "cgfloat_literal", "color_literal", "font_literal"]
