"""Preservation of hand-written regions across regenerated artifact files.

A custom section is wrapped in a three-line opening and closing delimiter
written in the target language's comment syntax::

    // ==================================================
    // Brand overrides - Preserved Custom Section
    // ==================================================
    ...hand-written code...
    // ==================================================
    // End Custom Section
    // ==================================================

Extraction is a single forward scan; merging inserts every extracted section,
in original order, directly before the first anchor line of the freshly
generated content.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence

from .logging import get_logger
from .models import CustomSection, GeneratedFile

PRESERVED_MARKER = "Preserved"
END_MARKER = "End Custom Section"
DEFAULT_SECTION_NAME = "Custom"

STRATEGY_PRESERVE = "preserve-custom"
STRATEGY_OVERWRITE = "overwrite"
STRATEGY_PROMPT = "prompt"
MERGE_STRATEGIES = (STRATEGY_PRESERVE, STRATEGY_OVERWRITE, STRATEGY_PROMPT)

_OUTSIDE = "outside"
_INSIDE = "inside"


@dataclass(frozen=True)
class CommentStyle:
    """Single-line comment syntax of a target language."""

    prefix: str
    suffix: str = ""

    def line(self, text: str) -> str:
        return f"{self.prefix} {text}{self.suffix}".rstrip()


@dataclass(frozen=True)
class DelimiterConvention:
    """How one platform wraps preserved sections and where it inserts them."""

    comment: CommentStyle
    is_anchor: Callable[[str], bool]
    rule_width: int = 50

    @property
    def rule(self) -> str:
        return self.comment.line("=" * self.rule_width)

    def opening(self, name: str) -> List[str]:
        return [self.rule, self.comment.line(f"{name} - {PRESERVED_MARKER} Custom Section"), self.rule]

    def closing(self) -> List[str]:
        return [self.rule, self.comment.line(END_MARKER), self.rule]

    def wrap(self, section: CustomSection) -> List[str]:
        return [*self.opening(section.name), *section.content.split("\n"), *self.closing()]


@dataclass
class SectionConflict:
    """Two or more preserved sections share a name but differ in content."""

    name: str
    hashes: List[str]


def strip_comment_syntax(line: str) -> str:
    text = line.strip()
    for prefix in ("//", "/*", "#", "*"):
        if text.startswith(prefix):
            text = text[len(prefix):]
            break
    if text.endswith("*/"):
        text = text[:-2]
    return text.strip()


def is_rule_line(line: str) -> bool:
    text = strip_comment_syntax(line)
    return len(text) >= 3 and set(text) == {"="}


def content_hash(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def _native_anchor(line: str) -> bool:
    return line.lstrip().startswith("import ")


def _css_anchor(line: str) -> bool:
    text = line.lstrip()
    return text.startswith(("@import", "/*", ":root"))


def _scss_anchor(line: str) -> bool:
    text = line.lstrip()
    return text.startswith(("@use", "@import", "//", "/*", ":root"))


def _module_anchor(line: str) -> bool:
    text = line.lstrip()
    return text.startswith(("//", "/*", "module.exports"))


CONVENTIONS: Dict[str, DelimiterConvention] = {
    "kotlin": DelimiterConvention(CommentStyle("//"), _native_anchor),
    "swift": DelimiterConvention(CommentStyle("//"), _native_anchor),
    "css": DelimiterConvention(CommentStyle("/*", " */"), _css_anchor),
    "scss": DelimiterConvention(CommentStyle("//"), _scss_anchor),
    "javascript": DelimiterConvention(CommentStyle("//"), _module_anchor),
}


class CustomSectionEngine:
    """Extracts preserved sections from existing files and merges them back."""

    def __init__(self, strategy: str = STRATEGY_PRESERVE) -> None:
        if strategy not in MERGE_STRATEGIES:
            raise ValueError(f"Unknown merge strategy: {strategy}")
        self.strategy = strategy
        self.logger = get_logger("custom_sections")

    def read_sections(self, path: Path) -> List[CustomSection]:
        """Extract sections from ``path``; a missing file has none."""
        if not path.exists():
            return []
        return self.extract(path.read_text(encoding="utf-8"))

    def extract(self, content: str) -> List[CustomSection]:
        lines = content.split("\n")
        sections: List[CustomSection] = []
        state = _OUTSIDE
        name = DEFAULT_SECTION_NAME
        start_line = 0
        buffer: List[str] = []
        index = 0
        while index < len(lines):
            line = lines[index]
            if state == _OUTSIDE:
                if (
                    is_rule_line(line)
                    and index + 1 < len(lines)
                    and PRESERVED_MARKER in lines[index + 1]
                ):
                    name = self._section_name(lines[index + 1])
                    start_line = index + 1
                    buffer = []
                    state = _INSIDE
                    index += 2
                    continue
            elif END_MARKER in line:
                sections.append(
                    CustomSection(
                        name=name,
                        content="\n".join(buffer).strip(),
                        start_line=start_line,
                        end_line=index + 1,
                    )
                )
                state = _OUTSIDE
            elif not is_rule_line(line):
                buffer.append(line)
            index += 1

        if state == _INSIDE:
            self.logger.warning(
                "Dropping unterminated custom section %r starting at line %d", name, start_line
            )
        return sections

    def merge(
        self,
        generated: str,
        sections: Sequence[CustomSection],
        convention: DelimiterConvention,
    ) -> str:
        """Insert ``sections`` into ``generated`` according to the merge strategy."""
        if self.strategy == STRATEGY_OVERWRITE:
            if sections:
                self.logger.info("Discarding %d custom section(s) (overwrite strategy)", len(sections))
            return generated
        if self.strategy == STRATEGY_PROMPT:
            self.logger.warning("Interactive merge is not supported; preserving custom sections")
        if not sections:
            return generated

        lines = generated.split("\n")
        anchor = next((i for i, line in enumerate(lines) if convention.is_anchor(line)), None)
        if anchor is None:
            self.logger.warning(
                "No insertion point found; %d custom section(s) were not re-inserted",
                len(sections),
            )
            return generated

        block: List[str] = []
        for section in sections:
            block.extend(convention.wrap(section))
            block.append("")
        lines[anchor:anchor] = block
        return "\n".join(lines)

    def detect_conflicts(self, sections: Iterable[CustomSection]) -> List[SectionConflict]:
        hashes: Dict[str, List[str]] = {}
        for section in sections:
            digest = content_hash(section.content)
            bucket = hashes.setdefault(section.name, [])
            if digest not in bucket:
                bucket.append(digest)
        conflicts = [
            SectionConflict(name=name, hashes=digests)
            for name, digests in hashes.items()
            if len(digests) > 1
        ]
        for conflict in conflicts:
            self.logger.warning(
                "Custom section %r has %d differing versions", conflict.name, len(conflict.hashes)
            )
        return conflicts

    def build_inventory(self, files: Sequence[GeneratedFile]) -> Dict[str, object]:
        """Summarise preserved sections per file for the inventory report."""
        entries = []
        all_sections: List[CustomSection] = []
        for generated in files:
            all_sections.extend(generated.custom_sections)
            entries.append(
                {
                    "file": generated.file_path,
                    "sections": [
                        {
                            "name": section.name,
                            "hash": content_hash(section.content),
                            "lines": len(section.content.splitlines()),
                            "start_line": section.start_line,
                            "end_line": section.end_line,
                        }
                        for section in generated.custom_sections
                    ],
                }
            )
        conflicts = self.detect_conflicts(all_sections)
        return {
            "strategy": self.strategy,
            "total_sections": len(all_sections),
            "files": entries,
            "conflicts": [{"name": c.name, "hashes": c.hashes} for c in conflicts],
        }

    @staticmethod
    def _section_name(marker_line: str) -> str:
        text = strip_comment_syntax(marker_line)
        separator = f" - {PRESERVED_MARKER}"
        if separator in text:
            name = text.split(separator, 1)[0]
        elif "-" in text:
            name = text.split("-", 1)[0]
        else:
            name = ""
        name = name.strip()
        if not name or PRESERVED_MARKER in name:
            return DEFAULT_SECTION_NAME
        return name


__all__ = [
    "CONVENTIONS",
    "CommentStyle",
    "CustomSectionEngine",
    "DelimiterConvention",
    "MERGE_STRATEGIES",
    "STRATEGY_OVERWRITE",
    "STRATEGY_PRESERVE",
    "STRATEGY_PROMPT",
    "SectionConflict",
    "content_hash",
    "is_rule_line",
    "strip_comment_syntax",
]
