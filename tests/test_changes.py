"""Tests for designsync.changes."""

from __future__ import annotations

import copy

import pytest

from designsync.changes import ChangeDetector, canonical_json, tokens_equal
from designsync.models import DesignToken, TokenCollection


def _reordered(collection: TokenCollection) -> TokenCollection:
    clone = copy.deepcopy(collection)
    clone.tokens.reverse()
    return clone


def test_first_run_without_snapshot_is_changed(normalized_tokens: TokenCollection) -> None:
    summary = ChangeDetector().diff(None, normalized_tokens)

    assert summary.changed is True
    assert summary.reason == "no previous snapshot"
    assert len(summary.added) == len(normalized_tokens.tokens)


def test_reordering_identical_tokens_is_not_a_change(normalized_tokens: TokenCollection) -> None:
    detector = ChangeDetector()

    assert detector.has_changes(normalized_tokens, _reordered(normalized_tokens)) is False


def test_tag_order_does_not_matter(normalized_tokens: TokenCollection) -> None:
    current = copy.deepcopy(normalized_tokens)
    current.tokens[0].tags = set(sorted(current.tokens[0].tags, reverse=True))

    assert ChangeDetector().has_changes(normalized_tokens, current) is False


def test_adding_a_token_is_a_change(normalized_tokens: TokenCollection) -> None:
    current = copy.deepcopy(normalized_tokens)
    current.tokens.append(DesignToken(name="new-token", type="spacing", value="2px", category="spacing"))

    summary = ChangeDetector().diff(normalized_tokens, current)

    assert summary.changed is True
    assert summary.added == ["new-token"]
    assert summary.reason.startswith("token count changed")


def test_renaming_a_token_is_a_change(normalized_tokens: TokenCollection) -> None:
    current = copy.deepcopy(normalized_tokens)
    current.tokens[0].name = "renamed"

    summary = ChangeDetector().diff(normalized_tokens, current)

    assert summary.changed is True
    assert summary.reason == "token names changed"
    assert summary.added == ["renamed"]


def test_mutating_one_attribute_is_a_change(normalized_tokens: TokenCollection) -> None:
    current = copy.deepcopy(normalized_tokens)
    target = next(token for token in current.tokens if token.type == "color")
    target.attributes["luminance"] = 0.123

    summary = ChangeDetector().diff(normalized_tokens, current)

    assert summary.changed is True
    assert summary.modified == [target.name]


@pytest.mark.parametrize("field", ["type", "category", "description"])
def test_scalar_field_changes_are_detected(normalized_tokens: TokenCollection, field: str) -> None:
    current = copy.deepcopy(normalized_tokens)
    setattr(current.tokens[0], field, "changed")

    assert ChangeDetector().has_changes(normalized_tokens, current) is True


def test_value_comparison_ignores_key_order() -> None:
    first = DesignToken(name="a", type="border", value={"width": "1px", "style": "solid", "color": "#000000"})
    second = DesignToken(name="a", type="border", value={"color": "#000000", "style": "solid", "width": "1px"})

    assert tokens_equal(first, second) is True
    assert canonical_json(first.value) == canonical_json(second.value)


def test_extra_attribute_key_is_a_change() -> None:
    first = DesignToken(name="a", type="other", value="x", attributes={"k": 1})
    second = DesignToken(name="a", type="other", value="x", attributes={"k": 1, "extra": 2})

    assert tokens_equal(first, second) is False


def test_comparison_errors_fail_open(
    normalized_tokens: TokenCollection, monkeypatch: pytest.MonkeyPatch
) -> None:
    detector = ChangeDetector()

    def _boom(previous: TokenCollection, current: TokenCollection) -> None:
        raise KeyError("broken snapshot")

    monkeypatch.setattr(detector, "_compare", _boom)

    summary = detector.diff(normalized_tokens, normalized_tokens)

    assert summary.changed is True
    assert summary.reason.startswith("comparison error")
