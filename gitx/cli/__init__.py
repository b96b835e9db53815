"""gitx CLI package."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import click

from .. import __version__
from . import publish, pull, push
from ._common import CONTEXT_SETTINGS, GitxCliError, env_debug_enabled

__all__ = ["cli", "main", "GitxCliError"]


@click.group(context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.option(
    "-c",
    "--config",
    "config_path_opt",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to configuration TOML file.",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Trace every git command and forge request.",
)
@click.version_option(version=__version__, prog_name="gitx")
@click.pass_context
def cli(ctx: click.Context, config_path_opt: Path | None, debug: bool) -> None:
    """Publish, push and pull this directory to its GitHub repository.

    \b
    Environment:
      GITHUB_TOKEN         personal access token with 'repo' scope
      GITX_ACCOUNT         forge account (looked up from the token if unset)
      GITX_DEFAULT_BRANCH  default branch (default: main)
      GITX_DEBUG           set to 1 to trace commands
    """

    ctx.ensure_object(dict)
    invoked = ctx.invoked_subcommand

    if invoked is None:
        click.echo(ctx.command.get_help(ctx))
        ctx.exit(0)

    ctx.obj["config_path"] = config_path_opt
    ctx.obj["debug"] = debug or env_debug_enabled()


@click.command(name="help")
@click.pass_context
def help_(ctx: click.Context) -> None:
    """Show this message and exit."""

    root = ctx.find_root()
    click.echo(root.command.get_help(root))


cli.add_command(help_)

for register_command in (
    publish.register,
    push.register,
    pull.register,
):
    register_command(cli)


def main(argv: Sequence[str] | None = None) -> int:
    args = list(argv) if argv is not None else None
    try:
        rv = cli.main(args=args, prog_name="gitx", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return 1
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    return rv if isinstance(rv, int) else 0
