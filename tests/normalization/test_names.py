"""Tests for token name and type canonicalisation."""

from __future__ import annotations

import pytest

from designsync.normalization.names import normalize_name, normalize_type, unique_names


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Brand/Primary", "brand-primary"),
        ("buttonBackgroundHover", "button-background-hover"),
        ("space__md..large", "space-md-large"),
        ("  --Heading 1--  ", "heading-1"),
        ("2xl", "token-2xl"),
        ("", "unnamed-token"),
        ("///", "unnamed-token"),
        (None, "unnamed-token"),
    ],
)
def test_normalize_name(raw: object, expected: str) -> None:
    assert normalize_name(raw) == expected


def test_normalize_name_is_stable_on_canonical_names() -> None:
    assert normalize_name(normalize_name("Card Shadow/Elevated")) == "card-shadow-elevated"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("colour", "color"),
        ("Fill", "color"),
        ("text", "typography"),
        ("margin", "spacing"),
        ("dimension", "sizing"),
        ("drop_shadow", "shadow"),
        ("border radius", "border"),
        ("transparency", "opacity"),
        ("color", "color"),
        ("gradient", "other"),
        ("", "other"),
        (None, "other"),
    ],
)
def test_normalize_type_folds_synonyms(raw: object, expected: str) -> None:
    assert normalize_type(raw) == expected


def test_unique_names_suffixes_duplicates_in_order() -> None:
    assert unique_names(["a", "b", "a", "a"]) == ["a", "b", "a-2", "a-3"]


def test_unique_names_skips_suffix_already_taken() -> None:
    assert unique_names(["a", "a-2", "a"]) == ["a", "a-2", "a-3"]
