"""Version-control tag generation from placeholder templates."""

from __future__ import annotations

import getpass
import os
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import ConfigError, DesignSyncError, ExitCode
from .logging import get_logger
from .models import TagTemplateResult

SUPPORTED_PLACEHOLDERS = (
    "branch",
    "repo",
    "version",
    "major",
    "minor",
    "patch",
    "date",
    "datetime",
    "commit-hash",
    "commit-hash-full",
    "build-number",
    "user",
    "design-platform",
    "platform",
    "vertical",
)

DEFAULT_TAG_TEMPLATE = "{branch}/{repo}/tokens/{version}"
DEFAULT_VERSION = "1.0.0"
DEFAULT_VERTICAL = "tokens"

COMMIT_HASH_ENV = (
    "BUILD_SOURCEVERSION",
    "GITHUB_SHA",
    "CI_COMMIT_SHA",
    "GIT_COMMIT",
    "BUILDKITE_COMMIT",
    "CIRCLE_SHA1",
    "TRAVIS_COMMIT",
)
BUILD_NUMBER_ENV = (
    "BUILD_BUILDID",
    "GITHUB_RUN_ID",
    "CI_PIPELINE_ID",
    "BUILD_NUMBER",
    "BUILDKITE_BUILD_NUMBER",
    "TRAVIS_BUILD_NUMBER",
    "CIRCLE_BUILD_NUM",
)
USER_ENV = (
    "BUILD_REQUESTEDFOR",
    "GITHUB_ACTOR",
    "GITLAB_USER_LOGIN",
    "USER",
    "USERNAME",
    "LOGNAME",
)

VERTICAL_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("photo", "photography"),
    ("camera", "photography"),
    ("location", "location"),
    ("map", "location"),
    ("weather", "weather"),
    ("shop", "commerce"),
    ("store", "commerce"),
    ("commerce", "commerce"),
    ("pay", "finance"),
    ("bank", "finance"),
    ("finance", "finance"),
    ("health", "health"),
    ("fitness", "health"),
    ("social", "social"),
    ("chat", "social"),
    ("travel", "travel"),
    ("learn", "education"),
    ("edu", "education"),
)

_PLACEHOLDER = re.compile(r"\{([^{}]*)\}")
_COMPONENT_INVALID = re.compile(r"[\s/\\~^:?*\[\]{}]+")
_TAG_INVALID = re.compile(r"[\s\\~^:?*\[\]]+")
_REPEATED_HYPHENS = re.compile(r"-{2,}")
_REPEATED_DOTS = re.compile(r"\.{2,}")
_REPEATED_SLASHES = re.compile(r"/{2,}")


@dataclass
class TagContext:
    """Build and runtime facts the tag placeholders are resolved from."""

    branch: str = ""
    repository_url: str = ""
    version: str = DEFAULT_VERSION
    design_platform: str = ""
    target_platform: str = ""
    target_repo: str = ""


def find_placeholders(template: str) -> List[str]:
    return [match.group(1) for match in _PLACEHOLDER.finditer(template)]


def validate_template(template: Optional[str]) -> List[str]:
    """Fail fast on empty templates, bad braces and unsupported placeholders."""
    if template is None or not template.strip():
        raise ConfigError("Tag template cannot be empty")
    if template.count("{") != template.count("}"):
        raise ConfigError("Mismatched braces in tag template")
    if re.search(r"\{[^}]*\{", template):
        raise ConfigError("Nested braces are not supported in tag templates")
    placeholders = find_placeholders(template)
    unknown = [name for name in placeholders if name.strip().lower() not in SUPPORTED_PLACEHOLDERS]
    if unknown:
        supported = ", ".join(f"{{{name}}}" for name in SUPPORTED_PLACEHOLDERS)
        found = ", ".join(f"{{{name}}}" for name in unknown)
        raise ConfigError(f"Unsupported tag placeholders: {found}. Supported: {supported}")
    return placeholders


def sanitize_component(value: Optional[str], fallback: str = "unknown") -> str:
    """Make a single placeholder value safe to embed in a tag."""
    text = _COMPONENT_INVALID.sub("-", (value or "").strip())
    text = _collapse(text)
    return text or fallback


def sanitize_tag(tag: Optional[str], fallback: str = "unknown-tag") -> str:
    """Apply git ref-name rules to a fully substituted tag."""
    text = _TAG_INVALID.sub("-", (tag or "").strip())
    text = _REPEATED_SLASHES.sub("/", text)
    segments = [_collapse(segment) for segment in text.split("/")]
    text = "/".join(segment for segment in segments if segment)
    return text or fallback


def strip_branch_prefix(branch: str) -> str:
    text = branch.strip()
    for prefix in ("refs/heads/", "origin/"):
        if text.startswith(prefix):
            text = text[len(prefix):]
    return text


def repository_name(repository_url: str) -> str:
    """Last non-empty path segment of ``repository_url`` without ``.git``."""
    segments = [segment for segment in re.split(r"[/\\:]", repository_url.strip()) if segment]
    if not segments:
        return ""
    name = segments[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return name


def parse_version(version: Optional[str]) -> Tuple[int, int, int]:
    parts = (version or "").strip().lstrip("vV").split(".")
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        return (1, 0, 0)
    if not numbers or any(number < 0 for number in numbers):
        return (1, 0, 0)
    numbers.extend([0] * (3 - len(numbers)))
    return (numbers[0], numbers[1], numbers[2])


def detect_vertical(*names: str, keywords: Sequence[Tuple[str, str]] = VERTICAL_KEYWORDS) -> str:
    for name in names:
        lowered = (name or "").lower()
        if not lowered:
            continue
        for keyword, vertical in keywords:
            if keyword in lowered:
                return vertical
    return DEFAULT_VERTICAL


class TagTemplateEngine:
    """Resolves placeholder values and renders sanitized tags."""

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        clock: Callable[[], datetime] | None = None,
        user_lookup: Callable[[], str] | None = None,
        vertical_keywords: Sequence[Tuple[str, str]] | None = None,
    ) -> None:
        self._environ = environ if environ is not None else os.environ
        self._clock = clock or (lambda: datetime.now(UTC))
        self._user_lookup = user_lookup or getpass.getuser
        self._vertical_keywords = tuple(vertical_keywords) if vertical_keywords else VERTICAL_KEYWORDS
        self.logger = get_logger("tagging")

    def validate(self, template: Optional[str]) -> List[str]:
        return validate_template(template)

    def resolve_tokens(self, context: TagContext) -> Dict[str, str]:
        now = self._clock()
        timestamp = now.strftime("%Y%m%d%H%M%S")
        major, minor, patch = parse_version(context.version)
        version = f"{major}.{minor}.{patch}"
        full_hash = self._first_env(COMMIT_HASH_ENV)
        repo = repository_name(context.repository_url)

        return {
            "branch": sanitize_component(strip_branch_prefix(context.branch), "unknown"),
            "repo": sanitize_component(repo, "unknown-repo"),
            "version": version,
            "major": str(major),
            "minor": str(minor),
            "patch": str(patch),
            "date": now.strftime("%Y-%m-%d"),
            "datetime": now.strftime("%Y-%m-%d-%H%M%S"),
            "commit-hash": sanitize_component(full_hash[:7] if full_hash else timestamp),
            "commit-hash-full": sanitize_component(full_hash or timestamp),
            "build-number": sanitize_component(self._first_env(BUILD_NUMBER_ENV) or timestamp),
            "user": sanitize_component(self._first_env(USER_ENV) or self._local_user(), "system"),
            "design-platform": sanitize_component(context.design_platform.lower(), "unknown-platform"),
            "platform": sanitize_component(context.target_platform.lower(), "unknown-platform"),
            "vertical": sanitize_component(
                detect_vertical(context.target_repo, repo, keywords=self._vertical_keywords),
                DEFAULT_VERTICAL,
            ),
        }

    def generate(self, template: Optional[str], context: TagContext) -> TagTemplateResult:
        effective = template if template and template.strip() else DEFAULT_TAG_TEMPLATE
        self.validate(effective)
        values = self.resolve_tokens(context)

        def _replace(match: "re.Match[str]") -> str:
            key = match.group(1).strip().lower()
            return values.get(key, match.group(0))

        substituted = _PLACEHOLDER.sub(_replace, effective)
        leftover = find_placeholders(substituted)
        if leftover:
            raise DesignSyncError(
                ExitCode.INVALID_CONFIGURATION,
                f"Unresolved tag placeholders after substitution: {', '.join(leftover)}",
            )
        tag = sanitize_tag(substituted)
        self.logger.info("Generated tag %s from template %s", tag, effective)
        return TagTemplateResult(
            template=effective,
            generated_tag=tag,
            token_values=values,
            generated_at=self._clock(),
            metadata={"original_tag": substituted, "sanitized": tag != substituted},
        )

    def _first_env(self, keys: Sequence[str]) -> str:
        for key in keys:
            value = self._environ.get(key)
            if value and value.strip():
                return value.strip()
        return ""

    def _local_user(self) -> str:
        try:
            return self._user_lookup()
        except (KeyError, OSError):
            return ""


def _collapse(text: str) -> str:
    text = _REPEATED_HYPHENS.sub("-", text)
    text = _REPEATED_DOTS.sub(".", text)
    text = text.strip("-.")
    if text.endswith(".lock"):
        text = text[: -len(".lock")] + "-lock"
    return text


__all__ = [
    "DEFAULT_TAG_TEMPLATE",
    "SUPPORTED_PLACEHOLDERS",
    "TagContext",
    "TagTemplateEngine",
    "detect_vertical",
    "find_placeholders",
    "parse_version",
    "repository_name",
    "sanitize_component",
    "sanitize_tag",
    "strip_branch_prefix",
    "validate_template",
]
