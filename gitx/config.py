"""Configuration management for gitx."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigError

DEFAULT_CONFIG_DIR = Path("~/.config/gitx").expanduser()
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"
DEFAULT_ENV_FILE = DEFAULT_CONFIG_DIR / ".env"

DEFAULT_BRANCH = "main"
DEFAULT_REMOTE_NAME = "origin"
DEFAULT_FORGE_HOST = "github.com"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_PUBLISH_MESSAGE = "chore: initial commit via gitx"
DEFAULT_PUSH_MESSAGE = "chore: update via gitx"

CONFIG_ENV_VAR = "GITX_CONFIG"
BRANCH_ENV_VAR = "GITX_DEFAULT_BRANCH"


class MissingConfigError(ConfigError):
    """Raised when an explicitly requested configuration file cannot be found."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Configuration file not found at {path}")
        self.path = path


class InvalidConfigError(ConfigError):
    """Raised when the configuration file holds malformed values."""


@dataclass(slots=True, frozen=True)
class GitxConfig:
    """In-memory representation of the gitx configuration."""

    default_branch: str = DEFAULT_BRANCH
    remote_name: str = DEFAULT_REMOTE_NAME
    forge_host: str = DEFAULT_FORGE_HOST
    api_url: str = DEFAULT_API_URL
    publish_message: str = DEFAULT_PUBLISH_MESSAGE
    push_message: str = DEFAULT_PUSH_MESSAGE
    env_file: Path = DEFAULT_ENV_FILE
    source_path: Path | None = None


def load_config(
    path: Path | None = None, environ: Mapping[str, str] | None = None
) -> GitxConfig:
    """Load configuration from ``path``, ``$GITX_CONFIG`` or the default location.

    Parameters
    ----------
    path:
        Optional location of the configuration file. When ``None`` the
        ``GITX_CONFIG`` variable is consulted, then the default path
        (``~/.config/gitx/config.toml``).
    environ:
        Environment used for overrides; defaults to ``os.environ``.

    Raises
    ------
    MissingConfigError
        If an explicitly requested file cannot be found. A missing default
        file simply yields the default settings.
    InvalidConfigError
        If the file or one of its settings is malformed.
    """

    env = os.environ if environ is None else environ

    explicit = path
    if explicit is None and env.get(CONFIG_ENV_VAR):
        explicit = Path(env[CONFIG_ENV_VAR])

    config_path = (explicit or DEFAULT_CONFIG_PATH).expanduser()
    section: dict[str, Any] = {}
    source_path: Path | None = None

    if config_path.exists():
        try:
            with config_path.open("rb") as fh:
                raw = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise InvalidConfigError(f"Invalid TOML in {config_path}: {exc}") from exc

        gitx_section = raw.get("gitx", {})
        if not isinstance(gitx_section, dict):
            raise InvalidConfigError("'gitx' section must be a table")
        section = gitx_section
        source_path = config_path
    elif explicit is not None:
        raise MissingConfigError(config_path)

    values = {
        key: _string_setting(section, key, default)
        for key, default in (
            ("default_branch", DEFAULT_BRANCH),
            ("remote_name", DEFAULT_REMOTE_NAME),
            ("forge_host", DEFAULT_FORGE_HOST),
            ("api_url", DEFAULT_API_URL),
            ("publish_message", DEFAULT_PUBLISH_MESSAGE),
            ("push_message", DEFAULT_PUSH_MESSAGE),
        )
    }

    branch_override = env.get(BRANCH_ENV_VAR, "").strip()
    if branch_override:
        values["default_branch"] = branch_override

    # Relative env_file paths are resolved against the configuration directory.
    env_file = DEFAULT_ENV_FILE
    env_file_raw = _string_setting(section, "env_file", "")
    if env_file_raw:
        candidate = Path(env_file_raw).expanduser()
        if not candidate.is_absolute():
            candidate = config_path.parent / candidate
        env_file = candidate

    return GitxConfig(
        default_branch=values["default_branch"],
        remote_name=values["remote_name"],
        forge_host=values["forge_host"].strip("/"),
        api_url=values["api_url"].rstrip("/"),
        publish_message=values["publish_message"],
        push_message=values["push_message"],
        env_file=env_file,
        source_path=source_path,
    )


def _string_setting(section: Mapping[str, Any], key: str, default: str) -> str:
    value = section.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise InvalidConfigError(f"'{key}' must be a string when provided")
    value = value.strip()
    if not value:
        raise InvalidConfigError(f"'{key}' must be a non-empty string")
    return value
