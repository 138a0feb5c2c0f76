"""Tests for designsync.tagging."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from designsync.errors import ConfigError, ExitCode
from designsync.tagging import (
    DEFAULT_TAG_TEMPLATE,
    TagContext,
    TagTemplateEngine,
    detect_vertical,
    parse_version,
    repository_name,
    sanitize_component,
    sanitize_tag,
    validate_template,
)

FIXED_NOW = datetime(2024, 5, 6, 7, 8, 9, tzinfo=UTC)


def _engine(**environ: str) -> TagTemplateEngine:
    return TagTemplateEngine(environ=environ, clock=lambda: FIXED_NOW, user_lookup=lambda: "local-dev")


def _context(**overrides: str) -> TagContext:
    values = {
        "branch": "main",
        "repository_url": "https://github.com/acme/photo-app.git",
        "version": "1.0.0",
        "design_platform": "Figma",
        "target_platform": "android",
    }
    values.update(overrides)
    return TagContext(**values)


def test_default_template_renders_branch_repo_and_version() -> None:
    result = _engine().generate(None, _context())

    assert result.template == DEFAULT_TAG_TEMPLATE
    assert result.generated_tag == "main/photo-app/tokens/1.0.0"
    assert result.generated_at == FIXED_NOW
    assert result.metadata["sanitized"] is False


def test_branch_slashes_are_flattened_inside_components() -> None:
    result = _engine().generate("{branch}/{version}", _context(branch="refs/heads/feature/new-ui"))

    assert result.generated_tag == "feature-new-ui/1.0.0"
    assert result.token_values["branch"] == "feature-new-ui"


def test_all_placeholders_resolve_from_environment_and_clock() -> None:
    engine = _engine(GITHUB_SHA="abcdef1234567890", GITHUB_RUN_ID="42", GITHUB_ACTOR="octo cat")

    values = engine.resolve_tokens(_context(version="v2.5"))

    assert values["version"] == "2.5.0"
    assert (values["major"], values["minor"], values["patch"]) == ("2", "5", "0")
    assert values["date"] == "2024-05-06"
    assert values["datetime"] == "2024-05-06-070809"
    assert values["commit-hash"] == "abcdef1"
    assert values["commit-hash-full"] == "abcdef1234567890"
    assert values["build-number"] == "42"
    assert values["user"] == "octo-cat"
    assert values["design-platform"] == "figma"
    assert values["platform"] == "android"
    assert values["vertical"] == "photography"


def test_missing_ci_values_fall_back_to_timestamp_and_local_user() -> None:
    values = _engine().resolve_tokens(_context())

    assert values["commit-hash"] == "20240506070809"
    assert values["build-number"] == "20240506070809"
    assert values["user"] == "local-dev"


def test_user_lookup_failure_falls_back_to_system() -> None:
    def _no_user() -> str:
        raise KeyError("no passwd entry")

    engine = TagTemplateEngine(environ={}, clock=lambda: FIXED_NOW, user_lookup=_no_user)

    assert engine.resolve_tokens(_context())["user"] == "system"


def test_placeholders_are_case_insensitive() -> None:
    result = _engine().generate("{Platform}-{MAJOR}", _context())

    assert result.generated_tag == "android-1"


def test_unknown_placeholder_is_a_configuration_error() -> None:
    with pytest.raises(ConfigError) as excinfo:
        _engine().generate("{branch}/{unknown-token}", _context())

    assert excinfo.value.exit_code == ExitCode.INVALID_CONFIGURATION
    assert "{unknown-token}" in str(excinfo.value)


@pytest.mark.parametrize(
    "template",
    ["", "   ", "{branch", "branch}", "{{branch}}", "{bra{nch}}"],
)
def test_malformed_templates_are_rejected(template: str) -> None:
    with pytest.raises(ConfigError):
        validate_template(template)


def test_sanitize_tag_applies_ref_rules() -> None:
    assert sanitize_tag("release//v1..2 beta") == "release/v1.2-beta"
    assert sanitize_tag("tokens/main.lock") == "tokens/main-lock"
    assert sanitize_tag("-/.leading/trailing.-") == "leading/trailing"
    assert sanitize_tag("   ") == "unknown-tag"


def test_sanitize_component() -> None:
    assert sanitize_component("a b/c\\d:e") == "a-b-c-d-e"
    assert sanitize_component("", "fallback") == "fallback"
    assert sanitize_component("build.lock") == "build-lock"


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://github.com/acme/photo-app.git", "photo-app"),
        ("git@github.com:acme/weather.git", "weather"),
        ("https://dev.azure.com/org/project/_git/shop-ui/", "shop-ui"),
        ("", ""),
    ],
)
def test_repository_name(url: str, expected: str) -> None:
    assert repository_name(url) == expected


@pytest.mark.parametrize(
    ("version", "expected"),
    [("1.2.3", (1, 2, 3)), ("v4", (4, 0, 0)), ("latest", (1, 0, 0)), (None, (1, 0, 0))],
)
def test_parse_version(version: str | None, expected: tuple[int, int, int]) -> None:
    assert parse_version(version) == expected


def test_detect_vertical_prefers_first_match_and_custom_keywords() -> None:
    assert detect_vertical("acme-maps", "photo-app") == "location"
    assert detect_vertical("", "nothing-here") == "tokens"
    assert detect_vertical("rocket-app", keywords=[("rocket", "space")]) == "space"


def test_custom_vertical_keywords_feed_the_placeholder() -> None:
    engine = TagTemplateEngine(
        environ={},
        clock=lambda: FIXED_NOW,
        user_lookup=lambda: "dev",
        vertical_keywords=[("photo", "imaging")],
    )

    assert engine.generate("{vertical}/{version}", _context()).generated_tag == "imaging/1.0.0"
