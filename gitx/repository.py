"""Bring the working directory into a single-branch git repository state."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .errors import RepositoryError
from .git_sync import GitCommandError, GitSync

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RepositoryChanges:
    """What ``ensure_repository`` had to do; empty when nothing changed."""

    initialized: bool = False
    branch_from: str | None = None
    branch_to: str | None = None
    trusted: bool = False
    notes: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.initialized or self.branch_to is not None or self.trusted


def ensure_repository(git: GitSync, default_branch: str) -> RepositoryChanges:
    """Initialize the repository if needed and put it on ``default_branch``.

    An existing branch with another name is renamed rather than a second
    branch being created. A detached HEAD is moved onto ``default_branch``
    when that never drops a commit from either side; otherwise it is an
    error. Calling this twice performs no further mutation.
    """

    changes = RepositoryChanges()

    if not git.is_repository():
        _mutate(git, "init")
        changes.initialized = True
        changes.notes.append(f"Initialized git repository in {git.repo_path}")

    current = git.current_branch()
    if current is None:
        _reattach_head(git, default_branch)
        changes.branch_to = default_branch
        changes.notes.append(f"Checked out branch '{default_branch}'")
    elif current != default_branch:
        if git.has_commits():
            _mutate(git, "branch", "-M", default_branch)
        else:
            # Unborn branch right after `git init`: only HEAD needs repointing.
            _mutate(git, "symbolic-ref", "HEAD", f"refs/heads/{default_branch}")
        changes.branch_from = current
        changes.branch_to = default_branch
        changes.notes.append(f"Renamed branch '{current}' to '{default_branch}'")

    changes.trusted = ensure_safe_directory(git)
    return changes


def ensure_safe_directory(git: GitSync) -> bool:
    """Register the repository root in git's global ``safe.directory`` list.

    Returns True when the entry was added. A git that refuses the setting is
    tolerated: the failure is logged and the pipeline continues.
    """

    try:
        root = str(git.top_level())
    except GitCommandError as exc:
        raise RepositoryError(f"Unable to locate repository root: {exc}") from exc

    trusted = git.get_config_all("safe.directory", global_scope=True)
    if root in trusted or "*" in trusted:
        return False

    try:
        git.run("config", "--global", "--add", "safe.directory", root)
    except GitCommandError as exc:
        logger.warning("Could not register %s as a safe directory: %s", root, exc)
        return False
    logger.debug("Registered %s as a safe directory", root)
    return True


def _reattach_head(git: GitSync, default_branch: str) -> None:
    if not git.branch_exists(default_branch):
        _mutate(git, "checkout", "-b", default_branch)
        return
    # Checking out the branch must not orphan commits made on the detached HEAD.
    if not git.succeeds("merge-base", "--is-ancestor", "HEAD", default_branch):
        raise RepositoryError(
            f"HEAD is detached at commits that are not on '{default_branch}'. "
            f"Merge them into '{default_branch}' or check it out, then retry."
        )
    _mutate(git, "checkout", default_branch)


def _mutate(git: GitSync, *args: str) -> None:
    try:
        git.run(*args)
    except GitCommandError as exc:
        raise RepositoryError(str(exc)) from exc
