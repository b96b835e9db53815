"""Reconcile the forge repository and the local remote binding."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import RemoteError, RepositoryError
from .forge import ForgeClient, json_body
from .git_sync import GitCommandError, GitSync

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_NOT_FOUND = 404
HTTP_UNPROCESSABLE = 422


@dataclass(slots=True, frozen=True)
class RemoteRepositoryRecord:
    """Forge-side repository identified by ``(account, name)``."""

    account: str
    name: str
    private: bool
    created: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.account}/{self.name}"


class BindingChange(str, Enum):
    ADDED = "added"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


def repo_name_for(path: Path) -> str:
    """Derive the forge repository name from the project directory name."""

    name = path.expanduser().resolve().name
    if not name:
        raise RepositoryError(f"Cannot derive a repository name from '{path}'")
    return name


def canonical_url(forge_host: str, account: str, repo_name: str) -> str:
    return f"https://{forge_host}/{account}/{repo_name}.git"


def ensure_remote_repository(
    forge: ForgeClient, account: str, repo_name: str, *, private: bool
) -> RemoteRepositoryRecord:
    """Return the forge repository, creating it when it does not exist.

    The lookup and the creation are not atomic; a creation answered with 422
    means another process created the repository in between, which counts as
    success.
    """

    response = forge.get_repository(account, repo_name)
    if response.status_code == HTTP_OK:
        visibility = json_body(response).get("private")
        return RemoteRepositoryRecord(
            account=account,
            name=repo_name,
            private=visibility if isinstance(visibility, bool) else private,
        )
    if response.status_code != HTTP_NOT_FOUND:
        raise RemoteError(
            f"Unexpected answer looking up {account}/{repo_name}", response.status_code
        )

    response = forge.create_repository(repo_name, private=private)
    if response.status_code == HTTP_CREATED:
        logger.info("Created forge repository %s/%s", account, repo_name)
        return RemoteRepositoryRecord(account, repo_name, private, created=True)
    if response.status_code == HTTP_UNPROCESSABLE:
        logger.info("Forge repository %s/%s already exists", account, repo_name)
        return RemoteRepositoryRecord(account, repo_name, private)
    raise RemoteError(
        f"Failed to create repository {account}/{repo_name}", response.status_code
    )


def ensure_remote_binding(
    git: GitSync,
    account: str,
    repo_name: str,
    *,
    forge_host: str,
    remote_name: str,
) -> BindingChange:
    """Point ``remote_name`` at the canonical URL, adding or rewriting it."""

    url = canonical_url(forge_host, account, repo_name)
    current = git.get_remote_url(remote_name)
    try:
        if current is None:
            git.run("remote", "add", remote_name, url)
            return BindingChange.ADDED
        if current != url:
            logger.info("Rebinding %s from %s to %s", remote_name, current, url)
            git.run("remote", "set-url", remote_name, url)
            return BindingChange.UPDATED
    except GitCommandError as exc:
        raise RepositoryError(str(exc)) from exc
    return BindingChange.UNCHANGED
