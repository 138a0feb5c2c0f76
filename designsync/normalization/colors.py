"""Color parsing, canonical hex formatting and contrast metrics."""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Mapping, Optional, Tuple

RGBA = Tuple[int, int, int, int]

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNCTION_PATTERN = re.compile(r"^rgba?\((?P<args>[^)]*)\)$", re.IGNORECASE)

CSS_NAMED_COLORS: Dict[str, str] = {
    "aliceblue": "F0F8FF", "antiquewhite": "FAEBD7", "aqua": "00FFFF",
    "aquamarine": "7FFFD4", "azure": "F0FFFF", "beige": "F5F5DC",
    "bisque": "FFE4C4", "black": "000000", "blanchedalmond": "FFEBCD",
    "blue": "0000FF", "blueviolet": "8A2BE2", "brown": "A52A2A",
    "burlywood": "DEB887", "cadetblue": "5F9EA0", "chartreuse": "7FFF00",
    "chocolate": "D2691E", "coral": "FF7F50", "cornflowerblue": "6495ED",
    "cornsilk": "FFF8DC", "crimson": "DC143C", "cyan": "00FFFF",
    "darkblue": "00008B", "darkcyan": "008B8B", "darkgoldenrod": "B8860B",
    "darkgray": "A9A9A9", "darkgreen": "006400", "darkgrey": "A9A9A9",
    "darkkhaki": "BDB76B", "darkmagenta": "8B008B", "darkolivegreen": "556B2F",
    "darkorange": "FF8C00", "darkorchid": "9932CC", "darkred": "8B0000",
    "darksalmon": "E9967A", "darkseagreen": "8FBC8F", "darkslateblue": "483D8B",
    "darkslategray": "2F4F4F", "darkslategrey": "2F4F4F", "darkturquoise": "00CED1",
    "darkviolet": "9400D3", "deeppink": "FF1493", "deepskyblue": "00BFFF",
    "dimgray": "696969", "dimgrey": "696969", "dodgerblue": "1E90FF",
    "firebrick": "B22222", "floralwhite": "FFFAF0", "forestgreen": "228B22",
    "fuchsia": "FF00FF", "gainsboro": "DCDCDC", "ghostwhite": "F8F8FF",
    "gold": "FFD700", "goldenrod": "DAA520", "gray": "808080",
    "green": "008000", "greenyellow": "ADFF2F", "grey": "808080",
    "honeydew": "F0FFF0", "hotpink": "FF69B4", "indianred": "CD5C5C",
    "indigo": "4B0082", "ivory": "FFFFF0", "khaki": "F0E68C",
    "lavender": "E6E6FA", "lavenderblush": "FFF0F5", "lawngreen": "7CFC00",
    "lemonchiffon": "FFFACD", "lightblue": "ADD8E6", "lightcoral": "F08080",
    "lightcyan": "E0FFFF", "lightgoldenrodyellow": "FAFAD2", "lightgray": "D3D3D3",
    "lightgreen": "90EE90", "lightgrey": "D3D3D3", "lightpink": "FFB6C1",
    "lightsalmon": "FFA07A", "lightseagreen": "20B2AA", "lightskyblue": "87CEFA",
    "lightslategray": "778899", "lightslategrey": "778899", "lightsteelblue": "B0C4DE",
    "lightyellow": "FFFFE0", "lime": "00FF00", "limegreen": "32CD32",
    "linen": "FAF0E6", "magenta": "FF00FF", "maroon": "800000",
    "mediumaquamarine": "66CDAA", "mediumblue": "0000CD", "mediumorchid": "BA55D3",
    "mediumpurple": "9370DB", "mediumseagreen": "3CB371", "mediumslateblue": "7B68EE",
    "mediumspringgreen": "00FA9A", "mediumturquoise": "48D1CC", "mediumvioletred": "C71585",
    "midnightblue": "191970", "mintcream": "F5FFFA", "mistyrose": "FFE4E1",
    "moccasin": "FFE4B5", "navajowhite": "FFDEAD", "navy": "000080",
    "oldlace": "FDF5E6", "olive": "808000", "olivedrab": "6B8E23",
    "orange": "FFA500", "orangered": "FF4500", "orchid": "DA70D6",
    "palegoldenrod": "EEE8AA", "palegreen": "98FB98", "paleturquoise": "AFEEEE",
    "palevioletred": "DB7093", "papayawhip": "FFEFD5", "peachpuff": "FFDAB9",
    "peru": "CD853F", "pink": "FFC0CB", "plum": "DDA0DD",
    "powderblue": "B0E0E6", "purple": "800080", "rebeccapurple": "663399",
    "red": "FF0000", "rosybrown": "BC8F8F", "royalblue": "4169E1",
    "saddlebrown": "8B4513", "salmon": "FA8072", "sandybrown": "F4A460",
    "seagreen": "2E8B57", "seashell": "FFF5EE", "sienna": "A0522D",
    "silver": "C0C0C0", "skyblue": "87CEEB", "slateblue": "6A5ACD",
    "slategray": "708090", "slategrey": "708090", "snow": "FFFAFA",
    "springgreen": "00FF7F", "steelblue": "4682B4", "tan": "D2B48C",
    "teal": "008080", "thistle": "D8BFD8", "tomato": "FF6347",
    "turquoise": "40E0D0", "violet": "EE82EE", "wheat": "F5DEB3",
    "white": "FFFFFF", "whitesmoke": "F5F5F5", "yellow": "FFFF00",
    "yellowgreen": "9ACD32", "transparent": "00000000",
}


class ColorParseError(ValueError):
    """Raised when a value cannot be interpreted as a color."""


def parse_color(value: Any) -> RGBA:
    """Return ``(r, g, b, a)`` channels in 0..255 for any supported encoding."""
    if isinstance(value, Mapping):
        return _parse_channel_mapping(value)
    if not isinstance(value, str):
        raise ColorParseError(f"Unsupported color value: {value!r}")

    text = value.strip()
    named = CSS_NAMED_COLORS.get(text.lower())
    if named is not None:
        return _parse_hex(named)

    hex_match = _HEX_PATTERN.match(text)
    if hex_match:
        return _parse_hex(hex_match.group(1))

    func_match = _FUNCTION_PATTERN.match(text)
    if func_match:
        return _parse_rgb_function(func_match.group("args"))

    raise ColorParseError(f"Unrecognised color: {value!r}")


def format_hex(rgba: RGBA) -> str:
    r, g, b, a = rgba
    if a >= 255:
        return f"#{r:02X}{g:02X}{b:02X}"
    return f"#{r:02X}{g:02X}{b:02X}{a:02X}"


def canonical_color(value: Any, cache: Optional[Any] = None) -> str:
    """Return the canonical ``#RRGGBB`` / ``#RRGGBBAA`` form of ``value``."""
    cache_key = value if isinstance(value, str) else None
    if cache is not None and cache_key is not None:
        cached = cache.get(cache_key)
        if cached is not None:
            return cached
    result = format_hex(parse_color(value))
    if cache is not None and cache_key is not None:
        cache.set(cache_key, result)
    return result


def luminance(rgba: RGBA) -> float:
    """Perceived luminance in 0..1."""
    r, g, b, _ = rgba
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255.0


def contrast_ratio(first: float, second: float) -> float:
    lighter, darker = max(first, second), min(first, second)
    return (lighter + 0.05) / (darker + 0.05)


def color_metrics(hex_value: str) -> Dict[str, Any]:
    """Luminance, contrast against white/black and the WCAG AA verdict."""
    level = luminance(parse_color(hex_value))
    against_white = contrast_ratio(1.0, level)
    against_black = contrast_ratio(level, 0.0)
    return {
        "luminance": round(level, 4),
        "contrast_white": round(against_white, 2),
        "contrast_black": round(against_black, 2),
        "wcag_aa_normal": against_white >= 4.5 or against_black >= 4.5,
    }


def scale_color(rgba: RGBA, factor: float) -> RGBA:
    """Multiply RGB channels by ``factor`` clamped to 0..255; alpha untouched."""
    r, g, b, a = rgba
    return (_clamp_channel(r * factor), _clamp_channel(g * factor), _clamp_channel(b * factor), a)


# ----------------------------------------------------------------------
# Helpers


def _parse_hex(digits: str) -> RGBA:
    digits = digits.lstrip("#")
    if len(digits) in (3, 4):
        digits = "".join(char * 2 for char in digits)
    r = int(digits[0:2], 16)
    g = int(digits[2:4], 16)
    b = int(digits[4:6], 16)
    a = int(digits[6:8], 16) if len(digits) == 8 else 255
    return (r, g, b, a)


def _parse_rgb_function(args: str) -> RGBA:
    alpha_part: Optional[str] = None
    if "/" in args:
        args, alpha_part = args.split("/", 1)
    parts = [part for part in re.split(r"[\s,]+", args.strip()) if part]
    if alpha_part is not None:
        parts.append(alpha_part.strip())
    if len(parts) not in (3, 4):
        raise ColorParseError(f"rgb() expects 3 or 4 components, got {len(parts)}")
    channels = [_parse_rgb_channel(part) for part in parts[:3]]
    alpha = _parse_alpha(parts[3]) if len(parts) == 4 else 255
    return (channels[0], channels[1], channels[2], alpha)


def _parse_rgb_channel(part: str) -> int:
    try:
        if part.endswith("%"):
            return _clamp_channel(float(part[:-1]) * 255.0 / 100.0)
        return _clamp_channel(float(part))
    except ValueError as exc:
        raise ColorParseError(f"Invalid rgb channel: {part!r}") from exc


def _parse_alpha(part: str) -> int:
    try:
        if part.endswith("%"):
            return _clamp_channel(float(part[:-1]) * 255.0 / 100.0)
        return _clamp_channel(float(part) * 255.0)
    except ValueError as exc:
        raise ColorParseError(f"Invalid alpha value: {part!r}") from exc


def _parse_channel_mapping(value: Mapping[str, Any]) -> RGBA:
    try:
        channels = [float(value[key]) for key in ("r", "g", "b")]
    except (KeyError, TypeError, ValueError) as exc:
        raise ColorParseError(f"Color object requires numeric r, g, b: {dict(value)!r}") from exc
    alpha_raw = value.get("a", 1.0)
    try:
        alpha = float(alpha_raw) if alpha_raw is not None else 1.0
    except (TypeError, ValueError) as exc:
        raise ColorParseError(f"Invalid alpha channel: {alpha_raw!r}") from exc
    # Figma style objects use 0..1 floats; tolerate 0..255 integers.
    scale = 255.0 if all(channel <= 1.0 for channel in channels) else 1.0
    r, g, b = (_clamp_channel(channel * scale) for channel in channels)
    a = _clamp_channel(alpha * 255.0 if alpha <= 1.0 else alpha)
    return (r, g, b, a)


def _clamp_channel(value: float) -> int:
    if not math.isfinite(value):
        raise ColorParseError(f"Color channel must be finite: {value!r}")
    return max(0, min(255, int(round(value))))


__all__ = [
    "CSS_NAMED_COLORS",
    "ColorParseError",
    "canonical_color",
    "color_metrics",
    "contrast_ratio",
    "format_hex",
    "luminance",
    "parse_color",
    "scale_color",
]
