from __future__ import annotations

from pathlib import Path

import pytest

from designsync.collaborators import EnvironmentSecretResolver
from designsync.config import DesignSyncConfig, GitConfig, VaultConfig
from designsync.errors import DesignSyncError, ExitCode


def test_no_secret_names_is_a_noop(tmp_path: Path) -> None:
    config = DesignSyncConfig(root=tmp_path)

    assert EnvironmentSecretResolver(environ={}).resolve_secrets(config) is config


def test_resolves_named_secrets(tmp_path: Path) -> None:
    config = DesignSyncConfig(
        root=tmp_path,
        vault=VaultConfig(vault_type="azure", pat_secret_name="git-pat", design_token_secret_name="FIGMA_TOKEN"),
    )
    resolver = EnvironmentSecretResolver(environ={"GIT_PAT": "pat-value", "FIGMA_TOKEN": "figma-value"})

    resolved = resolver.resolve_secrets(config)

    assert resolved.git.pat_token == "pat-value"
    assert resolved.design_token == "figma-value"
    assert config.git.pat_token is None


def test_existing_values_win(tmp_path: Path) -> None:
    config = DesignSyncConfig(
        root=tmp_path,
        design_token="already",
        git=GitConfig(pat_token="kept"),
        vault=VaultConfig(pat_secret_name="missing", design_token_secret_name="missing-too"),
    )

    resolved = EnvironmentSecretResolver(environ={}).resolve_secrets(config)

    assert (resolved.git.pat_token, resolved.design_token) == ("kept", "already")


def test_missing_secret_is_vault_failure(tmp_path: Path) -> None:
    config = DesignSyncConfig(root=tmp_path, vault=VaultConfig(pat_secret_name="absent"))

    with pytest.raises(DesignSyncError) as excinfo:
        EnvironmentSecretResolver(environ={}).resolve_secrets(config)

    assert excinfo.value.exit_code == ExitCode.KEY_VAULT_ACCESS_FAILURE
