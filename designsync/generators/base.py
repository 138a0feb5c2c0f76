"""Shared machinery for platform artifact generators."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, TemplateError, pass_context

from ..custom_sections import CONVENTIONS, CustomSectionEngine, DelimiterConvention
from ..logging import get_logger
from ..models import DesignToken, GeneratedFile, GenerationResult, TokenCollection

_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")


@dataclass
class PlatformConfig:
    """Per-run generator settings."""

    output_dir: Path
    package_name: str = "com.designsync.tokens"
    type_prefix: str = "Design"
    web_template: str = "css"
    templates_dir: Optional[Path] = None
    write_files: bool = True


@dataclass(frozen=True)
class ArtifactSpec:
    """One logical output file of a platform."""

    key: str
    file_name: str
    template: str
    token_types: Tuple[str, ...]
    convention: str


class PlatformGenerator(ABC):
    """Renders canonical tokens into a platform's artifact files."""

    platform: str = ""
    reserved_words: FrozenSet[str] = frozenset()

    def __init__(self, section_engine: CustomSectionEngine | None = None) -> None:
        self.section_engine = section_engine or CustomSectionEngine()
        self.logger = get_logger(f"generators.{self.platform}")
        self._env_cache: Dict[Optional[Path], Environment] = {}

    @abstractmethod
    def artifacts(self, config: PlatformConfig) -> Sequence[ArtifactSpec]:
        """Describe the files this platform emits."""

    @abstractmethod
    def filters(self) -> Dict[str, Callable[..., Any]]:
        """Value formatters exposed to the platform's templates."""

    def generate(self, tokens: TokenCollection, config: PlatformConfig) -> GenerationResult:
        """Render every artifact; files written before a failure stay on disk."""
        result = GenerationResult(platform=self.platform)
        env = self._environment(config.templates_dir)
        try:
            specs = list(self.artifacts(config))
        except ValueError as exc:
            return GenerationResult(platform=self.platform, success=False, error_message=str(exc))
        for spec in specs:
            try:
                generated = self._generate_artifact(env, spec, tokens, config)
            except (OSError, TemplateError, ValueError, KeyError) as exc:
                self.logger.error("Failed to generate %s: %s", spec.file_name, exc)
                result.success = False
                result.error_message = f"{spec.file_name}: {exc}"
                break
            result.files.append(generated)

        result.metadata = {
            "token_count": len(tokens.tokens),
            "files_generated": len(result.files),
            "files_with_custom_sections": sum(1 for f in result.files if f.has_custom_sections),
            "written": config.write_files,
        }
        result.metadata.update(self.describe(config))
        return result

    def describe(self, config: PlatformConfig) -> Dict[str, Any]:
        """Extra generation report fields for this platform."""
        return {}

    def identifier(self, name: str) -> str:
        """Source identifier for a token name, escaped when it is a keyword."""
        return escape_keyword(camel_case(name), self.reserved_words)

    def render(self, spec: ArtifactSpec, tokens: TokenCollection, config: PlatformConfig) -> str:
        """Render a single artifact without custom sections."""
        return self._render(self._environment(config.templates_dir), spec, tokens, config)

    # ------------------------------------------------------------------
    # Helpers

    def _generate_artifact(
        self,
        env: Environment,
        spec: ArtifactSpec,
        tokens: TokenCollection,
        config: PlatformConfig,
    ) -> GeneratedFile:
        path = config.output_dir / spec.file_name
        sections = self.section_engine.read_sections(path)
        rendered = self._render(env, spec, tokens, config)
        convention = self._convention(spec)
        content = self.section_engine.merge(rendered, sections, convention)
        if not content.endswith("\n"):
            content += "\n"
        preserved = sections if content.rstrip("\n") != rendered.rstrip("\n") else []

        if config.write_files:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            self.logger.debug("Wrote %s (%d custom sections)", path, len(preserved))
        else:
            self.logger.debug("Rendered %s without writing", path)

        return GeneratedFile(
            file_path=str(path),
            content=content,
            has_custom_sections=bool(preserved),
            custom_sections=list(preserved),
        )

    def _render(
        self,
        env: Environment,
        spec: ArtifactSpec,
        tokens: TokenCollection,
        config: PlatformConfig,
    ) -> str:
        selected = sorted(
            (token for token in tokens.tokens if token.type in spec.token_types),
            key=lambda token: token.name,
        )
        template = env.get_template(spec.template)
        return template.render(
            collection=tokens,
            config=config,
            tokens=selected,
            tokens_by_type=_group_by_type(selected),
            identifiers=unique_identifiers((token.name for token in selected), self.reserved_words),
            artifact=spec,
        )

    def _identifier_filter(self) -> Callable[..., str]:
        @pass_context
        def identifier(context: Any, name: str) -> str:
            identifiers = context.get("identifiers") or {}
            return identifiers.get(name) or self.identifier(name)

        return identifier

    def _convention(self, spec: ArtifactSpec) -> DelimiterConvention:
        return CONVENTIONS[spec.convention]

    def _environment(self, templates_dir: Path | None) -> Environment:
        cached = self._env_cache.get(templates_dir)
        if cached is not None:
            return cached
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir / self.platform))
        directories.append(str(Path(__file__).with_name("templates") / self.platform))
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        env.filters.update(self.filters())
        env.filters["comment_text"] = comment_text
        env.filters["identifier"] = self._identifier_filter()
        self._env_cache[templates_dir] = env
        return env


def camel_case(name: str) -> str:
    parts = [part for part in _WORD_SPLIT.split(name) if part]
    if not parts:
        return "token"
    head, *rest = parts
    return head.lower() + "".join(part[:1].upper() + part[1:].lower() for part in rest)


def pascal_case(name: str) -> str:
    identifier = camel_case(name)
    return identifier[:1].upper() + identifier[1:]


def escape_keyword(identifier: str, reserved_words: Iterable[str]) -> str:
    return f"`{identifier}`" if identifier in reserved_words else identifier


def unique_identifiers(names: Iterable[str], reserved_words: Iterable[str] = ()) -> Dict[str, str]:
    """Map token names to identifiers that are distinct within one artifact.

    Names are visited in order; a name whose camel-cased form is already
    taken gets the first free ``_2``, ``_3``, ... suffix.
    """
    reserved = frozenset(reserved_words)
    identifiers: Dict[str, str] = {}
    taken: set = set()
    for name in names:
        if name in identifiers:
            continue
        base = camel_case(name)
        candidate = base
        suffix = 2
        while candidate in taken:
            candidate = f"{base}_{suffix}"
            suffix += 1
        taken.add(candidate)
        identifiers[name] = escape_keyword(candidate, reserved)
    return identifiers


def primary_family(family: str) -> str:
    """First family of a CSS font stack, without quotes."""
    first = str(family).split(",", 1)[0].strip()
    if len(first) >= 2 and first[0] == first[-1] and first[0] in "'\"":
        first = first[1:-1].strip()
    return first


def comment_text(text: Optional[str]) -> str:
    """Flatten a description so it is safe inside a one-line comment."""
    if not text:
        return ""
    return " ".join(str(text).split()).replace("*/", "* /")


def hex_channels(hex_value: str) -> Tuple[int, int, int, int]:
    digits = hex_value.lstrip("#")
    r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
    a = int(digits[6:8], 16) if len(digits) == 8 else 255
    return r, g, b, a


def _group_by_type(tokens: Sequence[DesignToken]) -> Dict[str, List[DesignToken]]:
    grouped: Dict[str, List[DesignToken]] = {}
    for token in tokens:
        grouped.setdefault(token.type, []).append(token)
    return grouped


__all__ = [
    "ArtifactSpec",
    "PlatformConfig",
    "PlatformGenerator",
    "camel_case",
    "comment_text",
    "escape_keyword",
    "hex_channels",
    "pascal_case",
    "primary_family",
    "unique_identifiers",
]
