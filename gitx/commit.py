"""Capture the working tree into a commit when its content changed."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import RepositoryError
from .git_sync import GitCommandError, GitSync


@dataclass(slots=True, frozen=True)
class CommitResult:
    committed: bool
    message: str | None = None


def stage_and_commit(git: GitSync, message: str) -> CommitResult:
    """Stage everything and commit only if the index differs from HEAD.

    An unborn branch with nothing to stage still receives an empty root
    commit, otherwise there would be no branch to upload.
    """

    try:
        git.run("add", "-A")
        if git.has_staged_changes():
            git.run("commit", "-m", message)
            return CommitResult(committed=True, message=message)
        if not git.has_commits():
            git.run("commit", "--allow-empty", "-m", message)
            return CommitResult(committed=True, message=message)
    except GitCommandError as exc:
        raise RepositoryError(str(exc)) from exc
    return CommitResult(committed=False)
