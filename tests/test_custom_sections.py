"""Tests for custom section extraction and merging."""

from __future__ import annotations

from pathlib import Path

import pytest

from designsync.custom_sections import (
    CONVENTIONS,
    CustomSectionEngine,
    is_rule_line,
    strip_comment_syntax,
)
from designsync.models import CustomSection, GeneratedFile

KOTLIN = CONVENTIONS["kotlin"]
CSS = CONVENTIONS["css"]

GENERATED_KOTLIN = """// Auto-generated header
package com.example.tokens

import androidx.compose.ui.graphics.Color

object DesignColors {
    val primary = Color(0xFFFF0000)
}
"""

GENERATED_CSS = """/* Auto-generated header */
:root {
  --primary: #FF0000;
}
"""


def _pairs(sections: list[CustomSection]) -> list[tuple[str, str]]:
    return [(section.name, section.content) for section in sections]


@pytest.mark.parametrize(
    ("convention", "generated"),
    [(KOTLIN, GENERATED_KOTLIN), (CSS, GENERATED_CSS)],
)
def test_merge_then_extract_round_trips(convention, generated: str) -> None:
    engine = CustomSectionEngine()
    sections = [
        CustomSection(name="Brand overrides", content="val accent = Color(0xFF00FF00)\n\n    val spare = 1"),
        CustomSection(name="Custom", content="// keep me"),
    ]

    merged = engine.merge(generated, sections, convention)

    assert _pairs(engine.extract(merged)) == _pairs(sections)


def test_merge_inserts_before_first_anchor_line() -> None:
    engine = CustomSectionEngine()
    section = CustomSection(name="Extras", content="val extra = 1")

    merged = engine.merge(GENERATED_KOTLIN, [section], KOTLIN).split("\n")

    anchor = merged.index("import androidx.compose.ui.graphics.Color")
    assert merged[anchor - 1] == ""
    assert merged[anchor - 2] == KOTLIN.rule
    assert merged[anchor - 3] == "// End Custom Section"
    assert "// Extras - Preserved Custom Section" in merged[:anchor]
    assert merged[0] == "// Auto-generated header"


def test_merge_is_stable_across_regeneration() -> None:
    engine = CustomSectionEngine()
    sections = [CustomSection(name="Extras", content="val extra = 1")]

    first = engine.merge(GENERATED_KOTLIN, sections, KOTLIN)
    second = engine.merge(GENERATED_KOTLIN, engine.extract(first), KOTLIN)

    assert first == second


def test_extract_reads_name_and_line_numbers() -> None:
    content = "\n".join(
        [
            "package x",
            "// ==================================================",
            "// Legacy-Preserved Custom Section",
            "// ==================================================",
            "val legacy = 1",
            "// ==================================================",
            "// End Custom Section",
            "// ==================================================",
        ]
    )

    (section,) = CustomSectionEngine().extract(content)

    assert section.name == "Legacy"
    assert section.content == "val legacy = 1"
    assert section.start_line == 2
    assert section.end_line == 7


def test_extract_defaults_section_name() -> None:
    content = "\n".join(["// =====", "// Preserved", "body", "// End Custom Section"])

    (section,) = CustomSectionEngine().extract(content)

    assert section.name == "Custom"
    assert section.content == "body"


def test_extract_drops_unterminated_section(caplog: pytest.LogCaptureFixture) -> None:
    content = "\n".join(
        [
            "// =====",
            "// Done - Preserved Custom Section",
            "// =====",
            "kept",
            "// =====",
            "// End Custom Section",
            "// =====",
            "// =====",
            "// Open - Preserved Custom Section",
            "// =====",
            "lost",
        ]
    )

    with caplog.at_level("WARNING", logger="designsync"):
        sections = CustomSectionEngine().extract(content)

    assert _pairs(sections) == [("Done", "kept")]
    assert "unterminated" in caplog.text


def test_merge_without_anchor_leaves_content_untouched(caplog: pytest.LogCaptureFixture) -> None:
    generated = "object Only {}\n"

    with caplog.at_level("WARNING", logger="designsync"):
        merged = CustomSectionEngine().merge(
            generated, [CustomSection(name="X", content="y")], KOTLIN
        )

    assert merged == generated
    assert "No insertion point" in caplog.text


def test_overwrite_strategy_discards_sections() -> None:
    engine = CustomSectionEngine("overwrite")

    merged = engine.merge(GENERATED_KOTLIN, [CustomSection(name="X", content="y")], KOTLIN)

    assert merged == GENERATED_KOTLIN


def test_prompt_strategy_falls_back_to_preserve(caplog: pytest.LogCaptureFixture) -> None:
    engine = CustomSectionEngine("prompt")

    with caplog.at_level("WARNING", logger="designsync"):
        merged = engine.merge(GENERATED_KOTLIN, [CustomSection(name="X", content="y")], KOTLIN)

    assert _pairs(engine.extract(merged)) == [("X", "y")]
    assert "not supported" in caplog.text


def test_unknown_strategy_is_rejected() -> None:
    with pytest.raises(ValueError):
        CustomSectionEngine("merge-everything")


def test_conflicts_are_reported_but_not_fatal() -> None:
    engine = CustomSectionEngine()
    sections = [
        CustomSection(name="Shared", content="a"),
        CustomSection(name="Shared", content="b"),
        CustomSection(name="Unique", content="c"),
        CustomSection(name="Unique", content="c"),
    ]

    conflicts = engine.detect_conflicts(sections)

    assert [conflict.name for conflict in conflicts] == ["Shared"]
    assert len(conflicts[0].hashes) == 2


def test_read_sections_handles_missing_file(tmp_path: Path) -> None:
    assert CustomSectionEngine().read_sections(tmp_path / "missing.kt") == []


def test_build_inventory_summarises_files() -> None:
    engine = CustomSectionEngine()
    files = [
        GeneratedFile(
            file_path="Colors.kt",
            content="",
            has_custom_sections=True,
            custom_sections=[CustomSection(name="Brand", content="one\ntwo", start_line=3, end_line=8)],
        ),
        GeneratedFile(file_path="Spacing.kt", content=""),
    ]

    inventory = engine.build_inventory(files)

    assert inventory["strategy"] == "preserve-custom"
    assert inventory["total_sections"] == 1
    assert inventory["files"][0]["sections"][0]["name"] == "Brand"
    assert inventory["files"][0]["sections"][0]["lines"] == 2
    assert inventory["files"][1]["sections"] == []
    assert inventory["conflicts"] == []


def test_comment_helpers() -> None:
    assert strip_comment_syntax("/* Brand - Preserved Custom Section */") == "Brand - Preserved Custom Section"
    assert is_rule_line("// =====")
    assert is_rule_line("/* ===== */")
    assert not is_rule_line("// ==")
    assert not is_rule_line("val x = 1")
