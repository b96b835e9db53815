"""Upload local history to the forge or integrate the remote branch locally."""

from __future__ import annotations

import base64
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from .credentials import Credential
from .errors import SyncError
from .git_sync import GitCommandError, GitSync

logger = logging.getLogger(__name__)


class PullOutcome(str, Enum):
    FAST_FORWARD = "fast-forward"
    REBASED = "rebased"
    CONFLICT = "conflict"
    REFUSED = "refused"


@dataclass(slots=True, frozen=True)
class PullResult:
    """Outcome of ``sync_down``; ``detail`` carries git's message on failure."""

    outcome: PullOutcome
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome in (PullOutcome.FAST_FORWARD, PullOutcome.REBASED)


def git_auth_env(credential: Credential, forge_host: str) -> dict[str, str]:
    """Environment that authenticates git's HTTPS transport to ``forge_host``.

    The header is passed through ``GIT_CONFIG_*`` variables, appended after any
    the caller already set, so the token never shows up in argv.
    """

    offset = int(os.environ.get("GIT_CONFIG_COUNT", "0") or 0)
    basic = base64.b64encode(
        f"{credential.account}:{credential.token}".encode("utf-8")
    ).decode("ascii")
    return {
        "GIT_TERMINAL_PROMPT": "0",
        "GIT_CONFIG_COUNT": str(offset + 1),
        f"GIT_CONFIG_KEY_{offset}": f"http.https://{forge_host}/.extraheader",
        f"GIT_CONFIG_VALUE_{offset}": f"Authorization: Basic {basic}",
    }


def sync_up(
    git: GitSync,
    branch: str,
    *,
    remote_name: str,
    auth_env: Mapping[str, str] | None = None,
) -> None:
    """Push ``branch`` and record upstream tracking. Never forces."""

    try:
        git.run("push", "-u", remote_name, branch, env=auth_env)
    except GitCommandError as exc:
        raise SyncError(
            f"Push to {remote_name}/{branch} was rejected: {exc.stderr}"
        ) from exc


def sync_down(
    git: GitSync,
    branch: str,
    *,
    remote_name: str,
    auth_env: Mapping[str, str] | None = None,
) -> PullResult:
    """Fetch ``remote_name/branch`` then fast-forward, falling back to rebase.

    A failed fetch raises ``SyncError``. Integration failures are reported in
    the returned ``PullResult`` instead: ``CONFLICT`` when a rebase stopped
    part-way and is left in place for the user, ``REFUSED`` when git would not
    start it (for example over uncommitted changes).
    """

    upstream = f"{remote_name}/{branch}"
    try:
        git.run("fetch", remote_name, branch, env=auth_env)
    except GitCommandError as exc:
        raise SyncError(f"Fetching {upstream} failed: {exc.stderr}") from exc

    if git.succeeds("merge", "--ff-only", upstream):
        return PullResult(PullOutcome.FAST_FORWARD)

    logger.debug("Fast-forward to %s refused; rebasing local commits", upstream)
    try:
        git.run("rebase", upstream)
    except GitCommandError as exc:
        if git.rebase_in_progress():
            return PullResult(PullOutcome.CONFLICT, exc.stderr)
        return PullResult(PullOutcome.REFUSED, exc.stderr)
    return PullResult(PullOutcome.REBASED)
