"""Shared fixtures: an isolated git environment and an in-memory forge."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Callable

import httpx
import pytest
from gitx import config as config_module
from gitx.credentials import Credential
from gitx.forge import ForgeClient

TOKEN = "ghp_testtoken"
ACCOUNT = "alice"
API_URL = "https://api.github.test"

RunGit = Callable[..., str]

_ISOLATED_VARS = (
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_CONFIG_COUNT",
    "GITHUB_TOKEN",
    "GITHUB_USER",
    "GITX_ACCOUNT",
    "GITX_CONFIG",
    "GITX_DEBUG",
    "GITX_DEFAULT_BRANCH",
)


def _git(cwd: Path, *args: str) -> str:
    process = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=False
    )
    assert process.returncode == 0, f"git {' '.join(args)}: {process.stderr}"
    return process.stdout.strip()


class FakeForge:
    """Forge API double backed by bare repositories under ``remotes_dir``."""

    def __init__(self, remotes_dir: Path, account: str = ACCOUNT) -> None:
        self.remotes_dir = remotes_dir
        self.account = account
        self.repos: dict[str, bool] = {}
        self.requests: list[tuple[str, str]] = []
        self.lookup_status: int | None = None
        self.create_status: int | None = None

    @property
    def mutations(self) -> list[tuple[str, str]]:
        return [req for req in self.requests if req[0] != "GET"]

    def add_repository(self, name: str, *, private: bool = False) -> Path:
        self.repos[name] = private
        return self._init_bare(name)

    def bare_path(self, name: str) -> Path:
        return self.remotes_dir / self.account / f"{name}.git"

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))
        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return httpx.Response(401, json={"message": "Bad credentials"})

        if request.method == "GET" and path == "/user":
            return httpx.Response(200, json={"login": self.account})

        if request.method == "GET" and path.startswith("/repos/"):
            if self.lookup_status is not None:
                return httpx.Response(self.lookup_status)
            _, _, owner, name = path.split("/", 3)
            if owner == self.account and name in self.repos:
                return httpx.Response(
                    200, json={"name": name, "private": self.repos[name]}
                )
            return httpx.Response(404, json={"message": "Not Found"})

        if request.method == "POST" and path == "/user/repos":
            body = json.loads(request.content)
            if self.create_status is not None:
                return httpx.Response(self.create_status)
            if body["name"] in self.repos:
                return httpx.Response(422, json={"message": "name already exists"})
            self.add_repository(body["name"], private=body["private"])
            return httpx.Response(201, json=body)

        return httpx.Response(405)

    def factory(self, token: str) -> ForgeClient:
        return ForgeClient(token, API_URL, transport=httpx.MockTransport(self.handler))

    def _init_bare(self, name: str) -> Path:
        bare = self.bare_path(name)
        if not bare.exists():
            bare.mkdir(parents=True)
            _git(bare, "init", "--bare", "--quiet", "-b", "main")
        return bare


@pytest.fixture(autouse=True)
def _reset_gitx_logger():
    yield
    logger = logging.getLogger("gitx")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def git_home(tmp_path: Path, monkeypatch) -> Path:
    """Isolated HOME and global git config; https://github.com/ maps to disk."""

    home = tmp_path / "home"
    home.mkdir()
    remotes = tmp_path / "remotes"
    remotes.mkdir(exist_ok=True)
    gitconfig = home / ".gitconfig"
    gitconfig.write_text(
        "[user]\n"
        "\tname = Test User\n"
        "\temail = test@example.com\n"
        "[init]\n"
        "\tdefaultBranch = master\n"
        f'[url "file://{remotes}/"]\n'
        "\tinsteadOf = https://github.com/\n",
        encoding="utf-8",
    )

    for name in _ISOLATED_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))

    config_dir = home / ".config" / "gitx"
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_DIR", config_dir)
    monkeypatch.setattr(
        config_module, "DEFAULT_CONFIG_PATH", config_dir / "config.toml"
    )
    monkeypatch.setattr(config_module, "DEFAULT_ENV_FILE", config_dir / ".env")
    return gitconfig


@pytest.fixture
def run_git() -> RunGit:
    return _git


@pytest.fixture
def project(tmp_path: Path, git_home: Path, monkeypatch) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


@pytest.fixture
def forge(tmp_path: Path) -> FakeForge:
    return FakeForge(tmp_path / "remotes")


@pytest.fixture
def token() -> str:
    return TOKEN


@pytest.fixture
def credential() -> Credential:
    return Credential(account=ACCOUNT, token=TOKEN)
