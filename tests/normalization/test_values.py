"""Tests for dimension, typography, shadow, border and opacity values."""

from __future__ import annotations

import pytest

from designsync.normalization.values import (
    format_number,
    normalize_border,
    normalize_dimension,
    normalize_font_weight,
    normalize_opacity,
    normalize_shadow,
    normalize_typography,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (8, "8px"),
        (1.5, "1.5px"),
        ("24", "24px"),
        ("1rem", "1rem"),
        ("1.50REM", "1.5rem"),
        ("-4px", "-4px"),
        (" 12 px ", "12px"),
        ({"value": 2, "unit": "em"}, "2em"),
        ("50%", "50%"),
    ],
)
def test_normalize_dimension(raw: object, expected: str) -> None:
    assert normalize_dimension(raw) == expected


@pytest.mark.parametrize("raw", ["large", True, None, {"unit": "px"}])
def test_normalize_dimension_rejects_invalid(raw: object) -> None:
    with pytest.raises(ValueError):
        normalize_dimension(raw)


def test_format_number_trims_trailing_zeros() -> None:
    assert format_number(2.0) == "2"
    assert format_number(0.123456) == "0.1235"
    assert format_number(-1.25) == "-1.25"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("thin", 100),
        ("Semi Bold", 600),
        ("black", 900),
        ("660", 700),
        (420, 400),
        (1200, 900),
        (None, 400),
        ("unknown", 400),
        ("inf", 400),
        (float("nan"), 400),
    ],
)
def test_normalize_font_weight(raw: object, expected: int) -> None:
    assert normalize_font_weight(raw) == expected


def test_normalize_typography_applies_defaults() -> None:
    assert normalize_typography({}) == {
        "fontFamily": "inherit",
        "fontSize": "16px",
        "fontWeight": 400,
    }


def test_normalize_typography_reads_aliases() -> None:
    value = normalize_typography(
        {"font_family": "'Inter'", "size": 14, "weight": "medium", "line_height": 1.4, "letterSpacing": 0.5}
    )

    assert value == {
        "fontFamily": "Inter",
        "fontSize": "14px",
        "fontWeight": 500,
        "lineHeight": "1.4",
        "letterSpacing": "0.5px",
    }


def test_normalize_typography_parses_font_shorthand() -> None:
    value = normalize_typography("bold 18px/1.2 \"Helvetica Neue\", sans-serif")

    assert value["fontWeight"] == 700
    assert value["fontSize"] == "18px"
    assert value["lineHeight"] == "1.2"
    assert value["fontFamily"] == "\"Helvetica Neue\", sans-serif"


@pytest.mark.parametrize(
    ("family", "expected"),
    [
        ("'Open Sans'", "Open Sans"),
        ("\"Inter\"", "Inter"),
        ("'Inter', sans-serif", "'Inter', sans-serif"),
        ("Inter, \"Helvetica Neue\", Arial", "Inter, \"Helvetica Neue\", Arial"),
    ],
)
def test_normalize_typography_keeps_quoted_font_stacks(family: str, expected: str) -> None:
    assert normalize_typography({"fontFamily": family, "fontSize": 16})["fontFamily"] == expected


def test_normalize_typography_shorthand_keeps_quoted_stack() -> None:
    value = normalize_typography("14px 'Inter', sans-serif")

    assert value["fontFamily"] == "'Inter', sans-serif"


def test_normalize_shadow_from_css_shorthand() -> None:
    assert normalize_shadow("0 2px 4px rgba(0,0,0,0.5)") == {
        "offsetX": "0px",
        "offsetY": "2px",
        "blur": "4px",
        "spread": "0px",
        "color": "#00000080",
    }


def test_normalize_shadow_from_offset_object_and_list() -> None:
    value = normalize_shadow(
        [{"offset": {"x": 1, "y": 3}, "radius": 6, "color": {"r": 0, "g": 0, "b": 0, "a": 0.25}}]
    )

    assert value == {
        "offsetX": "1px",
        "offsetY": "3px",
        "blur": "6px",
        "spread": "0px",
        "color": "#00000040",
    }


def test_normalize_shadow_requires_two_lengths() -> None:
    with pytest.raises(ValueError):
        normalize_shadow("red")


def test_normalize_border_shorthand_and_defaults() -> None:
    assert normalize_border("2px dashed #ff0000") == {"width": "2px", "style": "dashed", "color": "#FF0000"}
    assert normalize_border(3) == {"width": "3px", "style": "solid", "color": "#000000"}
    assert normalize_border({"width": 1, "style": "wavy", "color": "navy"})["style"] == "solid"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("50", 0.5),
        ("0.75", 0.75),
        ("150", 1.0),
        ("40%", 0.4),
        (1, 1.0),
        (-0.2, 0.0),
    ],
)
def test_normalize_opacity(raw: object, expected: float) -> None:
    assert normalize_opacity(raw) == expected


def test_normalize_opacity_rejects_text() -> None:
    with pytest.raises(ValueError):
        normalize_opacity("half")


@pytest.mark.parametrize("raw", [float("inf"), float("-inf"), float("nan"), {"value": float("inf")}])
def test_normalize_dimension_rejects_non_finite_numbers(raw: object) -> None:
    with pytest.raises(ValueError):
        normalize_dimension(raw)


def test_format_number_rejects_infinity() -> None:
    with pytest.raises(ValueError):
        format_number(float("inf"))


@pytest.mark.parametrize("raw", [float("inf"), "nan", float("nan")])
def test_normalize_opacity_rejects_non_finite(raw: object) -> None:
    with pytest.raises(ValueError):
        normalize_opacity(raw)
