"""Application bootstrap and the publish/push/pull pipelines."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping

import httpx

from .commit import CommitResult, stage_and_commit
from .config import GitxConfig, load_config
from .credentials import Credential, load_credential
from .errors import SyncError, UsageError
from .forge import ForgeClient
from .git_sync import GitSync
from .identity import Identity, resolve_identity
from .remote import (
    BindingChange,
    RemoteRepositoryRecord,
    canonical_url,
    ensure_remote_binding,
    ensure_remote_repository,
    repo_name_for,
)
from .repository import RepositoryChanges, ensure_repository
from .sync import PullOutcome, PullResult, git_auth_env, sync_down, sync_up


ForgeFactory = Callable[[str], ForgeClient]


@dataclass(slots=True, frozen=True)
class CommandContext:
    """Resolved, read-only settings for a single invocation."""

    verb: str
    private: bool = False
    message: str | None = None
    debug: bool = False
    default_branch: str = "main"


@dataclass(slots=True)
class AppContext:
    """Aggregates the services shared by every pipeline stage."""

    config: GitxConfig
    credential: Credential
    git: GitSync
    forge_factory: ForgeFactory

    @property
    def repo_name(self) -> str:
        return repo_name_for(self.git.repo_path)

    def auth_env(self) -> dict[str, str]:
        return git_auth_env(self.credential, self.config.forge_host)


@dataclass(slots=True)
class PipelineReport:
    """What a pipeline run did, for the CLI to present."""

    identity: Identity
    repository: RepositoryChanges
    url: str
    remote: RemoteRepositoryRecord | None = None
    binding: BindingChange | None = None
    commit: CommitResult | None = None
    pull: PullResult | None = None
    warnings: list[str] = field(default_factory=list)


def default_forge_factory(
    api_url: str, transport: httpx.BaseTransport | None = None
) -> ForgeFactory:
    def factory(token: str) -> ForgeClient:
        return ForgeClient(token, api_url, transport=transport)

    return factory


def bootstrap(
    config_path: Path | None = None,
    *,
    cwd: Path | None = None,
    environ: Mapping[str, str] | None = None,
    forge_factory: ForgeFactory | None = None,
) -> AppContext:
    """Load configuration and the credential, and bind git to ``cwd``."""

    env = os.environ if environ is None else environ
    config = load_config(config_path, env)
    factory = forge_factory or default_forge_factory(config.api_url)
    credential = load_credential(config, env, factory)
    git = GitSync(cwd or Path.cwd())
    return AppContext(
        config=config, credential=credential, git=git, forge_factory=factory
    )


def validate_command(
    verb: str, *, private: bool = False, message: str | None = None
) -> None:
    """Reject flag combinations the verb does not accept."""

    if verb not in PIPELINES:
        raise UsageError(f"Unknown command: {verb}")
    if private and verb != "publish":
        raise UsageError("--private only applies to 'publish'.")
    if message is not None and (verb != "push" or not message.strip()):
        raise UsageError("--msg requires a non-empty message for 'push'.")


def build_command_context(
    config: GitxConfig,
    verb: str,
    *,
    private: bool = False,
    message: str | None = None,
    debug: bool = False,
) -> CommandContext:
    """Validate the verb and its flags and freeze them for the pipeline."""

    validate_command(verb, private=private, message=message)
    return CommandContext(
        verb=verb,
        private=private,
        message=message,
        debug=debug,
        default_branch=config.default_branch,
    )


def run_publish(app: AppContext, command: CommandContext) -> PipelineReport:
    """Create the forge repository if needed, bind, commit and upload."""

    identity = resolve_identity(app.git, app.credential)
    changes = ensure_repository(app.git, command.default_branch)
    account, repo_name = identity.account_name, app.repo_name

    with app.forge_factory(app.credential.token) as forge:
        record = ensure_remote_repository(
            forge, account, repo_name, private=command.private
        )
    binding = _bind(app, account, repo_name)
    commit = stage_and_commit(
        app.git, command.message or app.config.publish_message
    )
    sync_up(
        app.git,
        command.default_branch,
        remote_name=app.config.remote_name,
        auth_env=app.auth_env(),
    )
    return PipelineReport(
        identity=identity,
        repository=changes,
        url=_web_url(app, account, repo_name),
        remote=record,
        binding=binding,
        commit=commit,
    )


def run_push(app: AppContext, command: CommandContext) -> PipelineReport:
    """Commit the working tree and upload, creating the forge repository on
    first use when no remote is bound yet."""

    identity = resolve_identity(app.git, app.credential)
    changes = ensure_repository(app.git, command.default_branch)
    account, repo_name = identity.account_name, app.repo_name

    record = None
    if app.git.get_remote_url(app.config.remote_name) is None:
        with app.forge_factory(app.credential.token) as forge:
            record = ensure_remote_repository(forge, account, repo_name, private=False)
    binding = _bind(app, account, repo_name)
    commit = stage_and_commit(app.git, command.message or app.config.push_message)
    sync_up(
        app.git,
        command.default_branch,
        remote_name=app.config.remote_name,
        auth_env=app.auth_env(),
    )
    return PipelineReport(
        identity=identity,
        repository=changes,
        url=_web_url(app, account, repo_name),
        remote=record,
        binding=binding,
        commit=commit,
    )


def run_pull(app: AppContext, command: CommandContext) -> PipelineReport:
    """Fetch the default branch and integrate it (fast-forward, then rebase)."""

    identity = resolve_identity(app.git, app.credential)
    changes = ensure_repository(app.git, command.default_branch)
    account, repo_name = identity.account_name, app.repo_name
    remote_name = app.config.remote_name

    if app.git.get_remote_url(remote_name) is None:
        raise SyncError(
            f"No remote '{remote_name}' configured. Run 'gitx publish' first."
        )
    binding = _bind(app, account, repo_name)

    result = sync_down(
        app.git,
        command.default_branch,
        remote_name=remote_name,
        auth_env=app.auth_env(),
    )
    upstream = f"{remote_name}/{command.default_branch}"
    if result.outcome is PullOutcome.CONFLICT:
        raise SyncError(
            f"Rebase onto {upstream} stopped on conflicts; resolve them and run "
            f"'git rebase --continue' (or 'git rebase --abort'). {result.detail}"
        )
    if not result.ok:
        raise SyncError(f"Cannot integrate {upstream}: {result.detail}")

    report = PipelineReport(
        identity=identity,
        repository=changes,
        url=_web_url(app, account, repo_name),
        binding=binding,
        pull=result,
    )
    if result.outcome is PullOutcome.REBASED:
        report.warnings.append(
            "Fast-forward failed; local commits were rebased onto "
            f"{remote_name}/{command.default_branch}."
        )
    return report


PIPELINES: dict[str, Callable[[AppContext, CommandContext], PipelineReport]] = {
    "publish": run_publish,
    "push": run_push,
    "pull": run_pull,
}


def _bind(app: AppContext, account: str, repo_name: str) -> BindingChange:
    return ensure_remote_binding(
        app.git,
        account,
        repo_name,
        forge_host=app.config.forge_host,
        remote_name=app.config.remote_name,
    )


def _web_url(app: AppContext, account: str, repo_name: str) -> str:
    return canonical_url(app.config.forge_host, account, repo_name).removesuffix(
        ".git"
    )
