"""Thin wrapper around the git command line for a single project directory."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping

from .errors import GitxError

logger = logging.getLogger(__name__)


class GitCommandError(GitxError):
    """Raised when a git invocation exits with a non-zero status."""

    def __init__(self, args: tuple[str, ...], returncode: int, stderr: str) -> None:
        self.args_display = " ".join(args)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"git {self.args_display} failed (exit {returncode}): {stderr}"
        )


class GitSync:
    """Run git commands inside ``repo_path`` and interpret their exit status."""

    def __init__(self, repo_path: Path) -> None:
        self.repo_path = repo_path.expanduser()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def is_repository(self) -> bool:
        return self.succeeds("rev-parse", "--git-dir")

    def top_level(self) -> Path:
        return Path(self.run("rev-parse", "--show-toplevel").strip())

    def current_branch(self) -> str | None:
        """Return the checked-out branch name, or ``None`` for a detached HEAD."""

        try:
            name = self.run("symbolic-ref", "--short", "HEAD").strip()
        except GitCommandError:
            return None
        return name or None

    def has_commits(self) -> bool:
        return self.succeeds("rev-parse", "--verify", "--quiet", "HEAD")

    def branch_exists(self, name: str) -> bool:
        return self.succeeds("show-ref", "--verify", "--quiet", f"refs/heads/{name}")

    def rebase_in_progress(self) -> bool:
        for name in ("rebase-merge", "rebase-apply"):
            path = Path(self.run("rev-parse", "--git-path", name).strip())
            if not path.is_absolute():
                path = self.repo_path / path
            if path.exists():
                return True
        return False

    def has_staged_changes(self) -> bool:
        # `diff --quiet` exits 1 when the index differs from HEAD.
        return not self.succeeds("diff", "--cached", "--quiet")

    def get_config(self, key: str, *, global_scope: bool = False) -> str | None:
        scope = ("--global",) if global_scope else ()
        try:
            value = self.run("config", *scope, "--get", key).strip()
        except GitCommandError:
            return None
        return value or None

    def get_config_all(self, key: str, *, global_scope: bool = False) -> list[str]:
        scope = ("--global",) if global_scope else ()
        try:
            output = self.run("config", *scope, "--get-all", key)
        except GitCommandError:
            return []
        return [line.strip() for line in output.splitlines() if line.strip()]

    def get_remote_url(self, remote_name: str) -> str | None:
        """Return the configured URL of ``remote_name`` without insteadOf rewriting."""

        return self.get_config(f"remote.{remote_name}.url")

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def run(self, *args: str, env: Mapping[str, str] | None = None) -> str:
        process = self._execute(args, env)
        if process.returncode != 0:
            stderr = process.stderr.strip() or process.stdout.strip()
            raise GitCommandError(args, process.returncode, stderr)
        return process.stdout

    def succeeds(self, *args: str, env: Mapping[str, str] | None = None) -> bool:
        """Return True when git exits with status 0."""

        return self._execute(args, env).returncode == 0

    def _execute(
        self, args: tuple[str, ...], env: Mapping[str, str] | None
    ) -> subprocess.CompletedProcess[str]:
        logger.debug("+ git %s (cwd=%s)", " ".join(args), self.repo_path)
        full_env = None
        if env:
            full_env = os.environ.copy()
            full_env.update(env)
        try:
            process = subprocess.run(
                ["git", *args],
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                check=False,
                env=full_env,
            )
        except FileNotFoundError as exc:
            if exc.filename == "git":
                raise GitxError("Missing required command: git") from exc
            raise GitxError(f"Unable to run git in {self.repo_path}: {exc}") from exc
        except OSError as exc:
            raise GitxError(f"Unable to run git in {self.repo_path}: {exc}") from exc
        logger.debug("  exit %s", process.returncode)
        return process
