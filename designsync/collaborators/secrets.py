"""Secret resolution backed by environment variables."""

from __future__ import annotations

import os
from dataclasses import replace
from typing import Mapping, Optional

from ..config import DesignSyncConfig
from ..errors import DesignSyncError, ExitCode
from ..logging import get_logger


class EnvironmentSecretResolver:
    """Looks up ``*_SECRET_NAME`` settings as environment variable names.

    Values already present on the config win. When no vault is configured and
    nothing names a secret, resolution is a no-op.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ
        self.logger = get_logger("collaborators.secrets")

    def resolve_secrets(self, config: DesignSyncConfig) -> DesignSyncConfig:
        vault = config.vault
        if not vault.pat_secret_name and not vault.design_token_secret_name:
            self.logger.debug("No secrets requested; skipping vault lookup")
            return config

        pat_token = config.git.pat_token or self._lookup(vault.pat_secret_name)
        design_token = config.design_token or self._lookup(vault.design_token_secret_name)
        self.logger.info("Resolved secrets from %s", vault.vault_type or "environment")
        return replace(
            config,
            design_token=design_token,
            git=replace(config.git, pat_token=pat_token),
        )

    def _lookup(self, name: Optional[str]) -> Optional[str]:
        if not name:
            return None
        value = self._environ.get(name) or self._environ.get(_env_key(name))
        if not value:
            raise DesignSyncError(ExitCode.KEY_VAULT_ACCESS_FAILURE, f"Secret {name!r} not found")
        return value


def _env_key(name: str) -> str:
    return name.upper().replace("-", "_").replace(".", "_")


__all__ = ["EnvironmentSecretResolver"]
