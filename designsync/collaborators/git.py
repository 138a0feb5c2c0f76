"""Git / GitHub CLI adapter used for sync-mode mutations."""

from __future__ import annotations

import base64
import os
import subprocess
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from ..config import DesignSyncConfig
from ..errors import DesignSyncError, ExitCode
from ..logging import get_logger


class GitVersionControl:
    """Runs ``git`` and ``gh`` commands against a working copy."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner
        self._env: dict[str, str] | None = None
        self.logger = get_logger("collaborators.git")

    def is_valid_repo(self, repo_path: Path) -> bool:
        if not (Path(repo_path) / ".git").exists():
            return False
        try:
            output = self._run(
                ["git", "rev-parse", "--is-inside-work-tree"], cwd=repo_path, capture_output=True
            )
        except subprocess.CalledProcessError:
            return False
        return output.strip() == "true"

    def configure_auth(self, repo_path: Path, config: DesignSyncConfig) -> None:
        """Set the commit identity and, when a PAT is known, an auth header."""
        env = os.environ.copy()
        env.setdefault("GIT_AUTHOR_NAME", config.git.user_name)
        env.setdefault("GIT_AUTHOR_EMAIL", config.git.user_email)
        env.setdefault("GIT_COMMITTER_NAME", env["GIT_AUTHOR_NAME"])
        env.setdefault("GIT_COMMITTER_EMAIL", env["GIT_AUTHOR_EMAIL"])
        if config.git.pat_token:
            env.setdefault("GH_TOKEN", config.git.pat_token)
        self._env = env

        if not config.git.pat_token:
            return
        credentials = base64.b64encode(f"x-access-token:{config.git.pat_token}".encode("utf-8"))
        header = f"AUTHORIZATION: basic {credentials.decode('ascii')}"
        try:
            self._run(["git", "config", "--local", "http.extraheader", header], cwd=repo_path)
        except subprocess.CalledProcessError as exc:
            raise DesignSyncError(
                ExitCode.AUTHENTICATION_FAILURE, f"Unable to configure git credentials: {exc}"
            ) from exc

    def create_branch(self, repo_path: Path, branch_name: str, base_branch: Optional[str] = None) -> None:
        args = ["git", "checkout", "-B", branch_name]
        if base_branch:
            args.append(base_branch)
        self._checked(args, repo_path, f"create branch {branch_name}")

    def commit_changes(self, repo_path: Path, files: Sequence[Path | str], message: str) -> bool:
        """Stage ``files`` and commit; returns ``False`` when nothing changed."""
        repo = Path(repo_path)
        for rel in (self._to_relative(repo, Path(file)) for file in files):
            self._checked(["git", "add", "--", rel], repo, f"stage {rel}")

        status = self._checked(
            ["git", "status", "--porcelain"], repo, "read status", capture_output=True
        )
        if not status.strip():
            self.logger.info("Working tree clean; nothing to commit")
            return False
        self._checked(["git", "commit", "-m", message], repo, "commit")
        return True

    def create_tag(self, repo_path: Path, tag: str, message: str) -> None:
        self._checked(["git", "tag", "-a", tag, "-m", message], repo_path, f"tag {tag}")

    def push(self, repo_path: Path, branch_name: str, *, tags: bool = True) -> None:
        self._checked(["git", "push", "-u", "origin", branch_name], repo_path, f"push {branch_name}")
        if tags:
            self._checked(["git", "push", "origin", "--tags"], repo_path, "push tags")

    def create_pull_request(
        self,
        repo_path: Path,
        *,
        branch_name: str,
        base_branch: Optional[str],
        title: str,
        body: str,
    ) -> bool:
        args = ["gh", "pr", "create", "--title", title, "--body", body]
        if base_branch:
            args.extend(["--base", base_branch])
        args.extend(["--head", branch_name])
        try:
            self._run(args, cwd=repo_path)
        except (subprocess.CalledProcessError, OSError) as exc:
            self.logger.warning("Pull request creation failed: %s", exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Helpers

    def _checked(
        self,
        args: Sequence[str],
        repo_path: Path,
        action: str,
        *,
        capture_output: bool = False,
    ) -> str:
        try:
            return self._run(args, cwd=repo_path, capture_output=capture_output)
        except (subprocess.CalledProcessError, OSError) as exc:
            raise DesignSyncError(ExitCode.GIT_OPERATION_FAILURE, f"git failed to {action}: {exc}") from exc

    @staticmethod
    def _to_relative(repo: Path, file_path: Path) -> str:
        try:
            return file_path.relative_to(repo).as_posix()
        except ValueError:
            return file_path.as_posix()

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        return self._runner(args, cwd=Path(cwd), env=self._env, capture_output=capture_output)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            env=env,
            check=True,
            text=True,
            capture_output=capture_output,
        )
        if capture_output:
            return completed.stdout
        return ""


__all__ = ["GitVersionControl"]
