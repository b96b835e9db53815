"""Error taxonomy shared by every gitx stage."""

from __future__ import annotations


class GitxError(RuntimeError):
    """Base error for every fatal gitx failure."""


class UsageError(GitxError):
    """Raised for an unknown verb or an invalid flag combination."""


class ConfigError(GitxError):
    """Base error for configuration related issues."""


class CredentialError(GitxError):
    """Raised when the persisted credential store cannot be read."""


class IdentityError(GitxError):
    """Raised when the committer identity or forge account is incomplete."""


class RepositoryError(GitxError):
    """Raised when preparing the local repository fails."""


class RemoteError(GitxError):
    """Raised when the forge answers with an unexpected status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        super().__init__(message)
        self.status_code = status_code


class SyncError(GitxError):
    """Raised when uploading or integrating history fails."""
