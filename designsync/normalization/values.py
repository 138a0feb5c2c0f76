"""Canonical value shapes for non-color token types."""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Mapping, Optional

from .colors import ColorParseError, canonical_color

_DIMENSION_PATTERN = re.compile(r"^(?P<number>[-+]?(?:\d+\.?\d*|\.\d+))\s*(?P<unit>[a-zA-Z%]*)$")
_COLOR_FRAGMENT = re.compile(r"(rgba?\([^)]*\)|#[0-9a-fA-F]{3,8}\b)")
_FONT_SHORTHAND = re.compile(
    r"^(?:(?P<weight>[a-zA-Z]+|\d{3})\s+)?"
    r"(?P<size>[\d.]+[a-zA-Z%]*)"
    r"(?:\s*/\s*(?P<line_height>[\d.]+[a-zA-Z%]*))?"
    r"\s+(?P<family>.+)$"
)

FONT_WEIGHTS: Dict[str, int] = {
    "thin": 100,
    "hairline": 100,
    "extralight": 200,
    "ultralight": 200,
    "light": 300,
    "normal": 400,
    "regular": 400,
    "book": 400,
    "medium": 500,
    "semibold": 600,
    "demibold": 600,
    "bold": 700,
    "extrabold": 800,
    "ultrabold": 800,
    "black": 900,
    "heavy": 900,
}

BORDER_STYLES = (
    "none",
    "hidden",
    "dotted",
    "dashed",
    "solid",
    "double",
    "groove",
    "ridge",
    "inset",
    "outset",
)

DEFAULT_FONT_FAMILY = "inherit"
DEFAULT_FONT_SIZE = "16px"
DEFAULT_FONT_WEIGHT = 400


def format_number(value: float) -> str:
    """Render ``value`` without a trailing ``.0`` and with at most four decimals."""
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Number must be finite: {value!r}")
    rounded = round(number, 4)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.4f}".rstrip("0").rstrip(".")


def normalize_dimension(value: Any, *, default_unit: str = "px") -> str:
    """Return a dimension string that always carries a unit."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid dimension: {value!r}")
    if isinstance(value, (int, float)):
        return f"{format_number(value)}{default_unit}"
    if isinstance(value, Mapping):
        number = value.get("value")
        unit = value.get("unit") or default_unit
        if number is None:
            raise ValueError(f"Dimension object requires 'value': {dict(value)!r}")
        return normalize_dimension(f"{number}{unit}", default_unit=default_unit)
    if not isinstance(value, str):
        raise ValueError(f"Invalid dimension: {value!r}")
    match = _DIMENSION_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid dimension: {value!r}")
    unit = match.group("unit").lower() or default_unit
    return f"{format_number(float(match.group('number')))}{unit}"


def dimension_magnitude(dimension: str) -> float:
    match = _DIMENSION_PATTERN.match(dimension)
    if not match:
        raise ValueError(f"Invalid dimension: {dimension!r}")
    return float(match.group("number"))


def dimension_unit(dimension: str) -> str:
    match = _DIMENSION_PATTERN.match(dimension)
    return match.group("unit") if match else ""


def normalize_font_weight(value: Any) -> int:
    if value is None or value == "":
        return DEFAULT_FONT_WEIGHT
    if isinstance(value, str):
        key = value.strip().lower().replace("-", "").replace(" ", "").replace("_", "")
        if key in FONT_WEIGHTS:
            return FONT_WEIGHTS[key]
        try:
            numeric = float(key)
        except ValueError:
            return DEFAULT_FONT_WEIGHT
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        numeric = float(value)
    else:
        return DEFAULT_FONT_WEIGHT
    if not math.isfinite(numeric):
        return DEFAULT_FONT_WEIGHT
    stepped = int(round(numeric / 100.0)) * 100
    return max(100, min(900, stepped))


def normalize_typography(value: Any) -> Dict[str, Any]:
    """Return ``{fontFamily, fontSize, fontWeight[, lineHeight][, letterSpacing]}``."""
    if isinstance(value, str):
        value = _parse_font_shorthand(value)
    if not isinstance(value, Mapping):
        raise ValueError(f"Invalid typography value: {value!r}")

    family = _first(value, "fontFamily", "font_family", "family")
    size = _first(value, "fontSize", "font_size", "size")
    weight = _first(value, "fontWeight", "font_weight", "weight")
    line_height = _first(value, "lineHeight", "line_height", "lineHeightPx")
    letter_spacing = _first(value, "letterSpacing", "letter_spacing")

    result: Dict[str, Any] = {
        "fontFamily": _unquote_family(str(family)) if family else DEFAULT_FONT_FAMILY,
        "fontSize": normalize_dimension(size) if size not in (None, "") else DEFAULT_FONT_SIZE,
        "fontWeight": normalize_font_weight(weight),
    }
    if line_height not in (None, ""):
        result["lineHeight"] = _normalize_line_height(line_height)
    if letter_spacing not in (None, ""):
        result["letterSpacing"] = normalize_dimension(letter_spacing)
    return result


def normalize_shadow(value: Any, *, color_cache: Optional[Any] = None) -> Dict[str, str]:
    """Return ``{offsetX, offsetY, blur, spread, color}``."""
    if isinstance(value, list) and value:
        value = value[0]
    if isinstance(value, str):
        value = _parse_shadow_shorthand(value)
    if not isinstance(value, Mapping):
        raise ValueError(f"Invalid shadow value: {value!r}")

    offset = value.get("offset") if isinstance(value.get("offset"), Mapping) else {}
    offset_x = _first(value, "offsetX", "offset_x", "x")
    offset_y = _first(value, "offsetY", "offset_y", "y")
    if offset_x is None:
        offset_x = offset.get("x")
    if offset_y is None:
        offset_y = offset.get("y")
    blur = _first(value, "blur", "radius", "blurRadius")
    spread = _first(value, "spread", "spreadRadius")
    color = value.get("color")

    return {
        "offsetX": normalize_dimension(offset_x if offset_x is not None else 0),
        "offsetY": normalize_dimension(offset_y if offset_y is not None else 0),
        "blur": normalize_dimension(blur if blur is not None else 0),
        "spread": normalize_dimension(spread if spread is not None else 0),
        "color": canonical_color(color if color is not None else "#000000", color_cache),
    }


def normalize_border(value: Any, *, color_cache: Optional[Any] = None) -> Dict[str, str]:
    """Return ``{width, style, color}``."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = {"width": value}
    if isinstance(value, str):
        value = _parse_border_shorthand(value)
    if not isinstance(value, Mapping):
        raise ValueError(f"Invalid border value: {value!r}")

    width = _first(value, "width", "strokeWeight", "weight")
    style = _first(value, "style", "strokeStyle")
    color = _first(value, "color", "strokeColor")
    style_text = str(style).strip().lower() if style else "solid"
    if style_text not in BORDER_STYLES:
        style_text = "solid"
    return {
        "width": normalize_dimension(width if width is not None else 1),
        "style": style_text,
        "color": canonical_color(color if color is not None else "#000000", color_cache),
    }


def normalize_opacity(value: Any) -> float:
    """Return a float in [0, 1]; values above 1 are read as percentages."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid opacity: {value!r}")
    percent = False
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("%"):
            percent = True
            text = text[:-1]
        try:
            number = float(text)
        except ValueError as exc:
            raise ValueError(f"Invalid opacity: {value!r}") from exc
    elif isinstance(value, (int, float)):
        number = float(value)
    else:
        raise ValueError(f"Invalid opacity: {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"Opacity must be finite: {value!r}")
    if percent or number > 1.0:
        number = number / 100.0
    return round(max(0.0, min(1.0, number)), 4)


# ----------------------------------------------------------------------
# Helpers


def _unquote_family(text: str) -> str:
    """Drop the quotes around a single family name; leave font stacks intact."""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        inner = text[1:-1]
        if "," not in inner and "'" not in inner and '"' not in inner:
            return inner.strip()
    return text


def _first(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in mapping and mapping[key] is not None:
            return mapping[key]
    return None


def _normalize_line_height(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(value)
    text = str(value).strip()
    match = _DIMENSION_PATTERN.match(text)
    if not match:
        return text.lower()
    unit = match.group("unit").lower()
    return f"{format_number(float(match.group('number')))}{unit}"


def _parse_font_shorthand(text: str) -> Dict[str, Any]:
    match = _FONT_SHORTHAND.match(text.strip())
    if not match:
        return {"fontFamily": text.strip()}
    parsed: Dict[str, Any] = {
        "fontFamily": match.group("family"),
        "fontSize": match.group("size"),
    }
    if match.group("weight"):
        parsed["fontWeight"] = match.group("weight")
    if match.group("line_height"):
        parsed["lineHeight"] = match.group("line_height")
    return parsed


def _parse_shadow_shorthand(text: str) -> Dict[str, Any]:
    first = _split_top_level(text)[0]
    color: Optional[str] = None
    color_match = _COLOR_FRAGMENT.search(first)
    if color_match:
        color = color_match.group(1)
        first = first[: color_match.start()] + first[color_match.end():]
    lengths: List[str] = []
    for part in first.split():
        if part.lower() == "inset":
            continue
        if _DIMENSION_PATTERN.match(part):
            lengths.append(part)
        elif color is None:
            color = part
    if len(lengths) < 2:
        raise ValueError(f"Shadow shorthand needs at least two lengths: {text!r}")
    keys = ("offsetX", "offsetY", "blur", "spread")
    parsed: Dict[str, Any] = dict(zip(keys, lengths))
    if color is not None:
        parsed["color"] = color
    return parsed


def _parse_border_shorthand(text: str) -> Dict[str, Any]:
    parsed: Dict[str, Any] = {}
    remaining = text
    color_match = _COLOR_FRAGMENT.search(remaining)
    if color_match:
        parsed["color"] = color_match.group(1)
        remaining = remaining[: color_match.start()] + remaining[color_match.end():]
    for part in remaining.split():
        lowered = part.lower()
        if _DIMENSION_PATTERN.match(part) and "width" not in parsed:
            parsed["width"] = part
        elif lowered in BORDER_STYLES and "style" not in parsed:
            parsed["style"] = lowered
        elif "color" not in parsed:
            try:
                canonical_color(part)
            except ColorParseError:
                continue
            parsed["color"] = part
    return parsed


def _split_top_level(text: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(0, depth - 1)
        if char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return [part for part in parts if part] or [text]


__all__ = [
    "FONT_WEIGHTS",
    "dimension_magnitude",
    "dimension_unit",
    "format_number",
    "normalize_border",
    "normalize_dimension",
    "normalize_font_weight",
    "normalize_opacity",
    "normalize_shadow",
    "normalize_typography",
]
