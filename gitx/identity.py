"""Committer identity and forge account checks run before any mutation."""

from __future__ import annotations

from dataclasses import dataclass

from .credentials import TOKEN_ENV_VAR, Credential
from .errors import IdentityError
from .git_sync import GitSync


@dataclass(slots=True, frozen=True)
class Identity:
    committer_name: str
    committer_email: str
    account_name: str


def resolve_identity(git: GitSync, credential: Credential) -> Identity:
    """Return the committer identity and account, or raise ``IdentityError``.

    Nothing is prompted for and the token is not re-validated against the
    forge; both happen once when the credential is provisioned.
    """

    name = git.get_config("user.name")
    if not name:
        raise IdentityError(
            "Git user.name is not set. Run: git config --global user.name <name>"
        )
    email = git.get_config("user.email")
    if not email:
        raise IdentityError(
            "Git user.email is not set. Run: git config --global user.email <email>"
        )
    if not credential.token:
        raise IdentityError(
            f"{TOKEN_ENV_VAR} is not set. "
            "Export a personal access token with 'repo' scope."
        )
    if not credential.account:
        raise IdentityError("Unable to determine the forge account for the token.")
    return Identity(
        committer_name=name,
        committer_email=email,
        account_name=credential.account,
    )
