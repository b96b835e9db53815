"""Shared helpers for gitx CLI commands."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable

import click

from ..app import (
    PIPELINES,
    AppContext,
    PipelineReport,
    bootstrap,
    build_command_context,
    validate_command,
)
from ..errors import GitxError

CONTEXT_SETTINGS: dict[str, Any] = {"help_option_names": ["-h", "--help"]}
DEBUG_ENV_VAR = "GITX_DEBUG"
LOG_FORMAT = "gitx: %(levelname)s %(name)s: %(message)s"


class GitxCliError(click.ClickException):
    """Shared Click exception wrapper for CLI failures."""


def env_debug_enabled() -> bool:
    value = os.environ.get(DEBUG_ENV_VAR, "").strip().lower()
    return value in {"1", "true", "yes", "on"}


def configure_logging(debug: bool) -> None:
    """Send gitx log records to stderr; ``debug`` traces every git/HTTP call."""

    root = logging.getLogger("gitx")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.WARNING)
    root.propagate = False


def debug_option(func: Callable[..., Any]) -> Callable[..., Any]:
    """``--debug`` flag accepted after the verb as well as before it."""

    return click.option(
        "--debug",
        is_flag=True,
        default=False,
        help="Trace every git command and forge request.",
    )(func)


def get_app(ctx: click.Context) -> AppContext:
    """Return a cached AppContext for the current CLI invocation."""

    app: AppContext | None = ctx.obj.get("app")
    if app is not None:
        return app

    config_path_opt: Path | None = ctx.obj.get("config_path")
    try:
        app = bootstrap(config_path_opt, forge_factory=ctx.obj.get("forge_factory"))
    except GitxError as exc:
        raise GitxCliError(str(exc)) from exc

    ctx.obj["app"] = app
    return app


def run_verb(
    ctx: click.Context, verb: str, *, debug: bool, **options: Any
) -> PipelineReport:
    """Run ``verb`` through its pipeline and map failures to a CLI error."""

    debug = debug or ctx.obj.get("debug", False)
    configure_logging(debug)

    # Flag errors are reported before any config, credential or forge access.
    try:
        validate_command(verb, **options)
    except GitxError as exc:
        raise GitxCliError(str(exc)) from exc

    app = get_app(ctx)
    try:
        command = build_command_context(app.config, verb, debug=debug, **options)
        report = PIPELINES[verb](app, command)
    except GitxError as exc:
        raise GitxCliError(str(exc)) from exc

    for line in report.repository.notes:
        click.echo(line)
    for warning in report.warnings:
        click.echo(f"Warning: {warning}", err=True)
    return report
