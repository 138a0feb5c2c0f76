"""Configuration loading for designsync (environment + optional .designsync.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .custom_sections import MERGE_STRATEGIES, STRATEGY_PRESERVE
from .errors import ConfigError
from .generators.web import WEB_TEMPLATES
from .tagging import DEFAULT_TAG_TEMPLATE, validate_template

CONFIG_FILE_NAME = ".designsync.yml"

DESIGN_PLATFORMS = ("figma", "sketch", "adobe-xd", "zeplin", "abstract", "penpot")
TARGET_PLATFORMS = ("android", "ios", "web")
MODES = ("sync", "analyze")


@dataclass
class LicenseConfig:
    """License server settings; no server means licensing is disabled."""

    server_url: Optional[str] = None
    tool_name: str = "designsync"
    timeout_seconds: float = 30.0
    heartbeat_seconds: float = 120.0


@dataclass
class VaultConfig:
    """Secret vault settings resolved before extraction."""

    vault_type: Optional[str] = None
    url: Optional[str] = None
    pat_secret_name: Optional[str] = None
    design_token_secret_name: Optional[str] = None


@dataclass
class GitConfig:
    """Version-control behaviour for sync runs."""

    repo_url: str = ""
    branch: str = ""
    target_repo: str = ""
    pat_token: Optional[str] = None
    user_name: str = "designsync"
    user_email: str = "designsync@example.com"
    branch_prefix: str = "design-tokens/"
    create_pull_request: bool = False
    pull_request_base: Optional[str] = None
    push: bool = True


@dataclass
class GenerationConfig:
    """Generator and normalization options."""

    output_dir: Path = Path("design-system")
    web_template: str = "css"
    package_name: str = "com.designsync.tokens"
    type_prefix: str = "Design"
    templates_dir: Optional[Path] = None
    enable_dark_mode: bool = False
    merge_strategy: str = STRATEGY_PRESERVE


@dataclass
class DesignSyncConfig:
    """Effective settings for one pipeline run."""

    root: Path
    design_platforms: List[str] = field(default_factory=list)
    target_platforms: List[str] = field(default_factory=list)
    mode: str = "sync"
    validate_only: bool = False
    no_op: bool = False
    tag_template: str = DEFAULT_TAG_TEMPLATE
    state_dir: Path = Path(".designsync")
    tokens_file: Optional[Path] = None
    design_token: Optional[str] = None
    log_level: str = "INFO"
    vertical_keywords: List[Tuple[str, str]] = field(default_factory=list)
    license: LicenseConfig = field(default_factory=LicenseConfig)
    vault: VaultConfig = field(default_factory=VaultConfig)
    git: GitConfig = field(default_factory=GitConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)

    @property
    def design_platform(self) -> str:
        return self.design_platforms[0] if len(self.design_platforms) == 1 else ""

    @property
    def target_platform(self) -> str:
        return self.target_platforms[0] if len(self.target_platforms) == 1 else ""

    @property
    def platform_output_dir(self) -> Path:
        return self.generation.output_dir / self.target_platform


def load_config(
    root: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> DesignSyncConfig:
    """Build configuration from ``.designsync.yml`` (if present) overlaid by environment."""
    env = environ if environ is not None else os.environ
    root_path = Path(root or env.get("REPO_PATH") or ".").expanduser().resolve()
    data = _read_config_file(root_path / CONFIG_FILE_NAME)

    def setting(env_key: str, file_key: str | None = None) -> Any:
        value = env.get(env_key)
        if value is not None and value != "":
            return value
        return data.get(file_key or env_key.lower())

    design_platforms = _selected(env, "DESIGN_PLATFORM_", DESIGN_PLATFORMS) or _as_str_list(
        data.get("design_platform")
    )
    target_platforms = _selected(env, "TARGET_PLATFORM_", TARGET_PLATFORMS) or _as_str_list(
        data.get("target_platform")
    )

    output_dir = _as_path(root_path, setting("GENERATED_DIR", "output_dir")) or root_path / "design-system"
    state_dir = _as_path(root_path, setting("OUTPUT_DIR", "state_dir")) or root_path / ".designsync"

    license_config = LicenseConfig(
        server_url=_as_str(setting("LICENSE_SERVER")),
        tool_name=_as_str(setting("TOOL_NAME")) or "designsync",
        timeout_seconds=_as_float(setting("LICENSE_TIMEOUT")) or 30.0,
        heartbeat_seconds=_as_float(setting("LICENSE_HEARTBEAT_SECONDS")) or 120.0,
    )
    vault = VaultConfig(
        vault_type=_as_str(setting("VAULT_TYPE")),
        url=_as_str(setting("VAULT_URL")),
        pat_secret_name=_as_str(setting("PAT_SECRET_NAME")),
        design_token_secret_name=_as_str(setting("DESIGN_TOKEN_SECRET_NAME")),
    )
    git = GitConfig(
        repo_url=_as_str(setting("REPO_URL")) or "",
        branch=_as_str(setting("BRANCH")) or "",
        target_repo=_as_str(setting("TARGET_REPO")) or "",
        pat_token=_as_str(setting("PAT_TOKEN")),
        user_name=_as_str(setting("GIT_USER_NAME")) or "designsync",
        user_email=_as_str(setting("GIT_USER_EMAIL")) or "designsync@example.com",
        branch_prefix=_as_str(setting("BRANCH_PREFIX")) or "design-tokens/",
        create_pull_request=_as_bool(setting("CREATE_PULL_REQUEST")) or False,
        pull_request_base=_as_str(setting("PR_BASE_BRANCH")),
        push=_as_bool(setting("GIT_PUSH")) is not False,
    )
    templates_dir = _as_path(root_path, setting("TEMPLATES_DIR"))
    generation = GenerationConfig(
        output_dir=output_dir,
        web_template=(_as_str(setting("WEB_TEMPLATE")) or "css").lower(),
        package_name=_as_str(setting("ANDROID_PACKAGE", "package_name")) or "com.designsync.tokens",
        type_prefix=_as_str(setting("TYPE_PREFIX")) or "Design",
        templates_dir=templates_dir,
        enable_dark_mode=_as_bool(setting("ENABLE_DARK_MODE")) or False,
        merge_strategy=(_as_str(setting("MERGE_STRATEGY")) or STRATEGY_PRESERVE).lower(),
    )

    return DesignSyncConfig(
        root=root_path,
        design_platforms=[name.lower() for name in design_platforms],
        target_platforms=[name.lower() for name in target_platforms],
        mode=(_as_str(setting("MODE")) or "sync").lower(),
        validate_only=_as_bool(setting("VALIDATE_ONLY")) or False,
        no_op=_as_bool(setting("NO_OP")) or False,
        tag_template=_as_str(setting("TAG_TEMPLATE")) or DEFAULT_TAG_TEMPLATE,
        state_dir=state_dir,
        tokens_file=_as_path(root_path, setting("DESIGN_TOKENS_FILE", "tokens_file")),
        design_token=_as_str(setting("DESIGN_TOKEN")),
        log_level=(_as_str(setting("LOG_LEVEL")) or "INFO").upper(),
        vertical_keywords=_as_keyword_pairs(setting("VERTICAL_KEYWORDS")),
        license=license_config,
        vault=vault,
        git=git,
        generation=generation,
    )


def validate_config(config: DesignSyncConfig) -> None:
    """Raise ``ConfigError`` listing every problem; performs no I/O."""
    errors: List[str] = []

    if len(config.design_platforms) != 1:
        errors.append(
            "Exactly one design platform must be selected "
            f"(found {len(config.design_platforms)}). Set one of: "
            + ", ".join(_env_flag("DESIGN_PLATFORM_", name) for name in DESIGN_PLATFORMS)
        )
    unknown_design = [name for name in config.design_platforms if name not in DESIGN_PLATFORMS]
    if unknown_design:
        errors.append(f"Unknown design platform(s): {', '.join(unknown_design)}")

    if len(config.target_platforms) != 1:
        errors.append(
            "Exactly one target platform must be selected "
            f"(found {len(config.target_platforms)}). Set one of: "
            + ", ".join(_env_flag("TARGET_PLATFORM_", name) for name in TARGET_PLATFORMS)
        )
    unknown_target = [name for name in config.target_platforms if name not in TARGET_PLATFORMS]
    if unknown_target:
        errors.append(f"Unknown target platform(s): {', '.join(unknown_target)}")

    if not config.git.repo_url:
        errors.append("REPO_URL is required.")
    if not config.git.branch:
        errors.append("BRANCH is required.")
    if config.mode not in MODES:
        errors.append(f"MODE must be one of: {', '.join(MODES)}")
    if config.generation.merge_strategy not in MERGE_STRATEGIES:
        errors.append(f"MERGE_STRATEGY must be one of: {', '.join(MERGE_STRATEGIES)}")
    if config.generation.web_template not in WEB_TEMPLATES:
        errors.append(f"WEB_TEMPLATE must be one of: {', '.join(WEB_TEMPLATES)}")
    if config.license.heartbeat_seconds <= 0:
        errors.append("LICENSE_HEARTBEAT_SECONDS must be positive.")

    try:
        validate_template(config.tag_template)
    except ConfigError as exc:
        errors.append(f"TAG_TEMPLATE: {exc}")

    if errors:
        raise ConfigError("Invalid configuration:\n  - " + "\n  - ".join(errors))


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return {str(key).lower(): value for key, value in loaded.items()}


def _env_flag(prefix: str, name: str) -> str:
    return prefix + name.upper().replace("-", "_")


def _selected(env: Mapping[str, str], prefix: str, names: Sequence[str]) -> List[str]:
    return [name for name in names if _as_bool(env.get(_env_flag(prefix, name)))]


def _as_path(root: Path, value: Any) -> Optional[Path]:
    text = _as_str(value)
    if not text:
        return None
    path = Path(text).expanduser()
    return path if path.is_absolute() else root / path


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (str, int, float)):
        text = str(value).strip()
        return text or None
    return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off"}:
            return False
    return None


def _as_keyword_pairs(value: Any) -> List[Tuple[str, str]]:
    """Parse ``keyword:vertical`` pairs from a comma list or a YAML mapping."""
    if isinstance(value, dict):
        return [(str(key).lower(), str(item).lower()) for key, item in value.items()]
    pairs: List[Tuple[str, str]] = []
    for entry in _as_str_list(value.split(",") if isinstance(value, str) else value):
        keyword, sep, vertical = entry.partition(":")
        if sep and keyword.strip() and vertical.strip():
            pairs.append((keyword.strip().lower(), vertical.strip().lower()))
    return pairs


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILE_NAME",
    "DESIGN_PLATFORMS",
    "DesignSyncConfig",
    "GenerationConfig",
    "GitConfig",
    "LicenseConfig",
    "MODES",
    "TARGET_PLATFORMS",
    "VaultConfig",
    "load_config",
    "validate_config",
]
