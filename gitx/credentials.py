"""Read-only access to the forge credential supplied by the installer."""

from __future__ import annotations

import logging
import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping

from .config import GitxConfig
from .errors import CredentialError
from .forge import ForgeClient

logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "GITHUB_TOKEN"
ACCOUNT_ENV_VARS = ("GITX_ACCOUNT", "GITHUB_USER")

# `export KEY="value"` (bash/zsh) or `set -gx KEY "value"` (fish).
_ASSIGNMENT = re.compile(
    r"^\s*(?:export\s+(?P<sh_key>[A-Za-z_][A-Za-z0-9_]*)=(?P<sh_value>.*)"
    r"|set\s+-gx\s+(?P<fish_key>[A-Za-z_][A-Za-z0-9_]*)\s+(?P<fish_value>.*))\s*$"
)


@dataclass(slots=True, frozen=True)
class Credential:
    """Account name and access token borrowed for one invocation."""

    account: str
    token: str = field(repr=False)


def read_env_file(path: Path) -> dict[str, str]:
    """Parse the shell environment file persisted by the installer.

    Comments and lines that are not plain assignments are ignored. A missing
    file yields an empty mapping.
    """

    if not path.is_file():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CredentialError(f"Unable to read credential file {path}: {exc}") from exc

    values: dict[str, str] = {}
    for line in text.splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        match = _ASSIGNMENT.match(line)
        if match is None:
            continue
        key = match.group("sh_key") or match.group("fish_key")
        raw_value = match.group("sh_value")
        if raw_value is None:
            raw_value = match.group("fish_value")
        try:
            parts = shlex.split(raw_value)
        except ValueError as exc:
            raise CredentialError(f"Malformed entry for {key} in {path}") from exc
        values[key] = parts[0] if parts else ""
    return values


def load_credential(
    config: GitxConfig,
    environ: Mapping[str, str],
    forge_factory: Callable[[str], ForgeClient],
) -> Credential:
    """Resolve the token and account name without prompting.

    The token comes from ``$GITHUB_TOKEN`` or the persisted env file. The
    account comes from ``$GITX_ACCOUNT``/``$GITHUB_USER``; failing that, the
    forge is asked once who the token belongs to. Missing values are returned
    empty and rejected later by the identity resolver.
    """

    token = environ.get(TOKEN_ENV_VAR, "").strip()
    if not token:
        token = read_env_file(config.env_file).get(TOKEN_ENV_VAR, "").strip()
        if token:
            logger.debug("Using %s from %s", TOKEN_ENV_VAR, config.env_file)

    account = ""
    for name in ACCOUNT_ENV_VARS:
        account = environ.get(name, "").strip()
        if account:
            break

    if token and not account:
        with forge_factory(token) as forge:
            account = forge.get_authenticated_login()

    return Credential(account=account, token=token)
