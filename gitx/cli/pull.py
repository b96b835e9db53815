"""Pull command for gitx CLI."""

from __future__ import annotations

import click

from ..remote import BindingChange
from ._common import debug_option, run_verb


@click.command(name="pull")
@debug_option
@click.pass_context
def pull(ctx: click.Context, debug: bool) -> None:
    """Download the remote branch and integrate it into the local one."""

    report = run_verb(ctx, "pull", debug=debug)

    if report.binding is BindingChange.UPDATED:
        click.echo(f"Updated remote -> {report.url}.git")
    app = ctx.obj["app"]
    click.echo(
        f"Local branch is up-to-date with "
        f"{app.config.remote_name}/{app.config.default_branch}."
    )


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(pull)
