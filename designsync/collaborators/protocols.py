"""Contracts for the external systems the pipeline talks to."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Protocol, Sequence

from ..config import DesignSyncConfig
from ..models import TokenCollection


@dataclass
class LicenseSession:
    """A granted license held for the duration of a run."""

    session_id: str
    tool_name: str
    expires_at: Optional[datetime] = None
    metadata: Dict[str, str] = field(default_factory=dict)


class DesignPlatformConnector(Protocol):
    def extract_tokens(self, config: DesignSyncConfig) -> TokenCollection:
        """Return the raw token collection from the design tool."""


class LicenseClient(Protocol):
    def acquire(self, tool_name: str) -> Optional[LicenseSession]:
        """Return a session, or ``None`` when no license is available."""

    def heartbeat(self, session: LicenseSession) -> bool:
        ...

    def release(self, session: LicenseSession) -> None:
        ...


class SecretResolver(Protocol):
    def resolve_secrets(self, config: DesignSyncConfig) -> DesignSyncConfig:
        """Fill credential fields of ``config`` from the configured vault."""


class VersionControl(Protocol):
    def is_valid_repo(self, repo_path: Path) -> bool:
        ...

    def configure_auth(self, repo_path: Path, config: DesignSyncConfig) -> None:
        ...

    def create_branch(self, repo_path: Path, branch_name: str, base_branch: Optional[str] = None) -> None:
        ...

    def commit_changes(self, repo_path: Path, files: Sequence[Path | str], message: str) -> bool:
        ...

    def create_tag(self, repo_path: Path, tag: str, message: str) -> None:
        ...

    def push(self, repo_path: Path, branch_name: str, *, tags: bool = True) -> None:
        ...

    def create_pull_request(
        self,
        repo_path: Path,
        *,
        branch_name: str,
        base_branch: Optional[str],
        title: str,
        body: str,
    ) -> bool:
        ...


__all__ = [
    "DesignPlatformConnector",
    "LicenseClient",
    "LicenseSession",
    "SecretResolver",
    "VersionControl",
]
