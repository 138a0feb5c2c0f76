"""Pipeline orchestration for a design-token sync run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from .changes import ChangeDetector, ChangeSummary
from .collaborators.license import LicenseHeartbeat
from .collaborators.protocols import (
    DesignPlatformConnector,
    LicenseClient,
    LicenseSession,
    SecretResolver,
    VersionControl,
)
from .config import DesignSyncConfig, validate_config
from .custom_sections import CustomSectionEngine
from .errors import DesignSyncError, ExitCode, GenerationError
from .generators import PlatformConfig, create_generator
from .logging import get_logger
from .models import GenerationResult, TagTemplateResult, TokenCollection
from .normalization import Normalizer
from .stores import SnapshotStore, TTLCache
from .stores.snapshots import CUSTOM_SECTIONS_REPORT, GENERATION_REPORT, TAG_PATTERNS_REPORT
from .tagging import SUPPORTED_PLACEHOLDERS, TagContext, TagTemplateEngine

T = TypeVar("T")

MODE_FULL = "full"
MODE_NOOP = "noop"

HeartbeatFactory = Callable[[LicenseClient, LicenseSession, float], LicenseHeartbeat]


@dataclass
class SyncOutcome:
    """Result of one pipeline run."""

    exit_code: ExitCode
    message: str = ""
    run_mode: str = MODE_FULL
    changes: Optional[ChangeSummary] = None
    generation: Optional[GenerationResult] = None
    tag: Optional[TagTemplateResult] = None
    reports: Dict[str, Path] = field(default_factory=dict)
    committed: bool = False
    pull_request: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code in (ExitCode.SUCCESS, ExitCode.NO_DESIGN_CHANGES)

    def summary_lines(self) -> List[str]:
        lines = [f"Result: {self.exit_code.name} ({int(self.exit_code)})"]
        if self.message:
            lines.append(f"Message: {self.message}")
        lines.append(f"Run mode: {self.run_mode}")
        if self.changes is not None:
            lines.append(f"Changes: {self.changes.reason}")
        if self.generation is not None:
            lines.append(
                f"Generated {len(self.generation.files)} {self.generation.platform} file(s)"
                + ("" if self.generation.metadata.get("written", True) else " (not written)")
            )
        if self.tag is not None:
            lines.append(f"Tag: {self.tag.generated_tag}")
        if self.committed:
            lines.append("Committed and tagged changes")
        if self.pull_request:
            lines.append("Opened pull request")
        return lines


class SyncOrchestrator:
    """Runs the sync stages in order and always performs license cleanup."""

    def __init__(
        self,
        connector: DesignPlatformConnector,
        *,
        license_client: LicenseClient | None = None,
        secret_resolver: SecretResolver | None = None,
        version_control: VersionControl | None = None,
        change_detector: ChangeDetector | None = None,
        tag_engine: TagTemplateEngine | None = None,
        color_cache: TTLCache | None = None,
        heartbeat_factory: HeartbeatFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.connector = connector
        self.license_client = license_client
        self.secret_resolver = secret_resolver
        self.version_control = version_control
        self.change_detector = change_detector or ChangeDetector()
        self.tag_engine = tag_engine
        self.color_cache = color_cache if color_cache is not None else TTLCache(max_entries=2048)
        self.heartbeat_factory = heartbeat_factory or _default_heartbeat
        self._clock = clock or (lambda: datetime.now(UTC))
        self.logger = get_logger("orchestrator")

    def run(self, config: DesignSyncConfig) -> SyncOutcome:
        """Execute the pipeline; failures are reported through ``SyncOutcome.exit_code``."""
        try:
            validate_config(config)
        except DesignSyncError as exc:
            self.logger.error("%s", exc)
            return SyncOutcome(exit_code=exc.exit_code, message=str(exc))

        session: Optional[LicenseSession] = None
        heartbeat: Optional[LicenseHeartbeat] = None
        outcome = SyncOutcome(exit_code=ExitCode.SUCCESS)
        try:
            if self.secret_resolver is not None:
                config = self._stage(
                    ExitCode.KEY_VAULT_ACCESS_FAILURE, self.secret_resolver.resolve_secrets, config
                )

            session, licensed = self._acquire_license(config)
            noop = config.no_op or not licensed
            outcome.run_mode = MODE_NOOP if noop else MODE_FULL
            if noop:
                self.logger.warning("Running in NOOP mode: analysis and reports only")

            if session is not None and self.license_client is not None:
                heartbeat = self.heartbeat_factory(
                    self.license_client, session, config.license.heartbeat_seconds
                )
                heartbeat.start()

            mutate = self._should_mutate(config, noop)
            self._prepare_version_control(config, mutate)

            raw = self._stage(ExitCode.DESIGN_PLATFORM_API_FAILURE, self.connector.extract_tokens, config)
            normalizer = Normalizer(
                enable_dark_mode=config.generation.enable_dark_mode, color_cache=self.color_cache
            )
            tokens = self._stage(ExitCode.TOKEN_EXTRACTION_FAILURE, normalizer.normalize, raw)

            store = SnapshotStore(config.state_dir)
            store.save_raw(raw)

            previous = store.load_processed()
            outcome.changes = self.change_detector.diff(previous, tokens)
            self.logger.info("Change detection: %s", outcome.changes.reason)
            if not outcome.changes.changed and config.mode == "sync" and not config.validate_only:
                outcome.exit_code = ExitCode.NO_DESIGN_CHANGES
                outcome.message = "No design changes detected"
                return outcome

            write_files = not noop and not config.validate_only
            outcome.generation = self._generate(config, tokens, write_files)

            section_engine = self._section_engine(config)
            inventory = section_engine.build_inventory(outcome.generation.files)
            outcome.reports["custom_sections"] = store.write_report(CUSTOM_SECTIONS_REPORT, inventory)

            outcome.tag = self._stage(
                ExitCode.INVALID_CONFIGURATION,
                self._tag_engine(config).generate,
                config.tag_template,
                TagContext(
                    branch=config.git.branch,
                    repository_url=config.git.repo_url,
                    version=tokens.version,
                    design_platform=config.design_platform,
                    target_platform=config.target_platform,
                    target_repo=config.git.target_repo,
                ),
            )

            outcome.reports.update(self._write_reports(store, config, tokens, outcome, write_files))

            if mutate:
                self._apply_version_control(config, tokens, outcome)

            outcome.message = outcome.message or "Sync completed"
            return outcome
        except DesignSyncError as exc:
            self.logger.error("%s", exc)
            outcome.exit_code = exc.exit_code
            outcome.message = str(exc)
            return outcome
        finally:
            self._cleanup(heartbeat, session)
            for line in outcome.summary_lines():
                self.logger.info("%s", line)

    # ------------------------------------------------------------------
    # Stages

    def _acquire_license(self, config: DesignSyncConfig) -> tuple[Optional[LicenseSession], bool]:
        if self.license_client is None:
            self.logger.info("No license server configured; licensing disabled")
            return None, True
        try:
            session = self.license_client.acquire(config.license.tool_name)
        except Exception as exc:  # pragma: no cover - third-party client guard
            self.logger.warning("License acquisition failed: %s", exc)
            return None, False
        if session is None:
            self.logger.warning("No license available for %s", config.license.tool_name)
            return None, False
        self.logger.info("Acquired license session %s", session.session_id)
        return session, True

    @staticmethod
    def _should_mutate(config: DesignSyncConfig, noop: bool) -> bool:
        return config.mode == "sync" and not config.validate_only and not noop

    def _prepare_version_control(self, config: DesignSyncConfig, mutate: bool) -> None:
        vcs = self.version_control
        if vcs is None or config.mode != "sync":
            return
        valid = self._stage(ExitCode.REPOSITORY_ACCESS_FAILURE, vcs.is_valid_repo, config.root)
        if not valid:
            raise DesignSyncError(
                ExitCode.REPOSITORY_ACCESS_FAILURE, f"{config.root} is not a git working copy"
            )
        if mutate:
            self._stage(ExitCode.AUTHENTICATION_FAILURE, vcs.configure_auth, config.root, config)

    def _generate(
        self, config: DesignSyncConfig, tokens: TokenCollection, write_files: bool
    ) -> GenerationResult:
        platform_config = PlatformConfig(
            output_dir=config.platform_output_dir,
            package_name=config.generation.package_name,
            type_prefix=config.generation.type_prefix,
            web_template=config.generation.web_template,
            templates_dir=config.generation.templates_dir,
            write_files=write_files,
        )
        generator = self._stage(
            ExitCode.PLATFORM_GENERATION_FAILURE,
            create_generator,
            config.target_platform,
            self._section_engine(config),
        )
        result = self._stage(
            ExitCode.PLATFORM_GENERATION_FAILURE, generator.generate, tokens, platform_config
        )
        if not result.success:
            raise GenerationError(
                f"{config.target_platform} generation failed: {result.error_message or 'unknown error'}"
            )
        self.logger.info(
            "Generated %d %s file(s) in %s", len(result.files), result.platform, platform_config.output_dir
        )
        return result

    def _write_reports(
        self,
        store: SnapshotStore,
        config: DesignSyncConfig,
        tokens: TokenCollection,
        outcome: SyncOutcome,
        write_files: bool,
    ) -> Dict[str, Path]:
        reports: Dict[str, Path] = {}
        if write_files:
            reports["processed"] = store.save_processed(tokens)
        else:
            self.logger.info("Artifacts not written; keeping previous processed snapshot")

        generation = outcome.generation
        assert generation is not None
        reports["generation"] = store.write_report(
            GENERATION_REPORT,
            {
                "generated_at": _timestamp(self._clock()),
                "design_platform": config.design_platform,
                "target_platform": config.target_platform,
                "run_mode": outcome.run_mode,
                "validate_only": config.validate_only,
                "collection": {
                    "name": tokens.name,
                    "version": tokens.version,
                    "source": tokens.source,
                    "token_count": len(tokens.tokens),
                    "skipped_tokens": tokens.metadata.get("skipped_tokens", []),
                },
                "changes": outcome.changes.to_dict() if outcome.changes else None,
                "success": generation.success,
                "files": [
                    {
                        "path": generated.file_path,
                        "has_custom_sections": generated.has_custom_sections,
                        "custom_sections": [section.name for section in generated.custom_sections],
                    }
                    for generated in generation.files
                ],
                "metadata": generation.metadata,
            },
        )

        tag = outcome.tag
        assert tag is not None
        reports["tag_patterns"] = store.write_report(
            TAG_PATTERNS_REPORT,
            {
                "template": tag.template,
                "generated_tag": tag.generated_tag,
                "token_values": tag.token_values,
                "generated_at": _timestamp(tag.generated_at),
                "supported_placeholders": list(SUPPORTED_PLACEHOLDERS),
                "metadata": tag.metadata,
            },
        )
        return reports

    def _apply_version_control(
        self, config: DesignSyncConfig, tokens: TokenCollection, outcome: SyncOutcome
    ) -> None:
        vcs = self.version_control
        if vcs is None:
            self.logger.info("No version control configured; skipping commit")
            return
        generation = outcome.generation
        tag = outcome.tag
        assert generation is not None and tag is not None

        git_failure = ExitCode.GIT_OPERATION_FAILURE
        repo = config.root
        push_branch = config.git.branch
        if config.git.create_pull_request:
            push_branch = f"{config.git.branch_prefix}{tag.generated_tag}"
            self._stage(git_failure, vcs.create_branch, repo, push_branch, config.git.branch)

        files: List[Path | str] = [Path(generated.file_path) for generated in generation.files]
        message = (
            f"chore(tokens): sync {tokens.name or 'design tokens'} {tokens.version} "
            f"for {config.target_platform}"
        )
        if not self._stage(git_failure, vcs.commit_changes, repo, files, message):
            self.logger.info("Generated files unchanged in git; skipping tag and push")
            return
        outcome.committed = True

        self._stage(git_failure, vcs.create_tag, repo, tag.generated_tag, message)
        if config.git.push:
            self._stage(git_failure, partial(vcs.push, tags=True), repo, push_branch)
        if config.git.create_pull_request:
            outcome.pull_request = self._stage(
                git_failure,
                partial(
                    vcs.create_pull_request,
                    branch_name=push_branch,
                    base_branch=config.git.pull_request_base or config.git.branch,
                    title=f"Design tokens {tokens.version} ({config.target_platform})",
                    body=_pull_request_body(tokens, outcome),
                ),
                repo,
            )

    def _cleanup(self, heartbeat: Optional[LicenseHeartbeat], session: Optional[LicenseSession]) -> None:
        if heartbeat is not None:
            heartbeat.stop()
        if session is not None and self.license_client is not None:
            try:
                self.license_client.release(session)
            except Exception as exc:  # pragma: no cover - cleanup must not mask the run result
                self.logger.warning("License release failed: %s", exc)

    # ------------------------------------------------------------------
    # Helpers

    def _stage(self, code: ExitCode, func: Callable[..., T], *args: Any) -> T:
        """Run one stage call, mapping unexpected exceptions to ``code``."""
        try:
            return func(*args)
        except DesignSyncError:
            raise
        except OSError as exc:
            raise DesignSyncError(ExitCode.FILE_SYSTEM_ERROR, str(exc)) from exc
        except Exception as exc:
            raise DesignSyncError(code, f"{type(exc).__name__}: {exc}") from exc

    @staticmethod
    def _section_engine(config: DesignSyncConfig) -> CustomSectionEngine:
        return CustomSectionEngine(config.generation.merge_strategy)

    def _tag_engine(self, config: DesignSyncConfig) -> TagTemplateEngine:
        if self.tag_engine is not None:
            return self.tag_engine
        return TagTemplateEngine(vertical_keywords=config.vertical_keywords or None)


def _default_heartbeat(client: LicenseClient, session: LicenseSession, interval: float) -> LicenseHeartbeat:
    return LicenseHeartbeat(client, session, interval=interval)


def _timestamp(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def _pull_request_body(tokens: TokenCollection, outcome: SyncOutcome) -> str:
    lines = [f"Automated design token sync for `{tokens.name or 'design tokens'}` {tokens.version}.", ""]
    changes = outcome.changes
    if changes is not None:
        for label, names in (("Added", changes.added), ("Removed", changes.removed), ("Modified", changes.modified)):
            if names:
                lines.append(f"- {label}: {', '.join(names)}")
    if outcome.tag is not None:
        lines.append(f"- Tag: `{outcome.tag.generated_tag}`")
    return "\n".join(lines)


__all__ = ["MODE_FULL", "MODE_NOOP", "SyncOrchestrator", "SyncOutcome"]
