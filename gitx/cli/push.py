"""Push command for gitx CLI."""

from __future__ import annotations

import click

from ..remote import BindingChange
from ._common import debug_option, run_verb


@click.command(name="push")
@click.option(
    "-m",
    "--msg",
    "message",
    default=None,
    help="Commit message (default: 'chore: update via gitx').",
)
@debug_option
@click.pass_context
def push(ctx: click.Context, message: str | None, debug: bool) -> None:
    """Commit every change in the working tree and upload it."""

    report = run_verb(ctx, "push", debug=debug, message=message)

    if report.remote is not None and report.remote.created:
        click.echo(f"Created repository {report.remote.full_name}")
    if report.binding is BindingChange.UPDATED:
        click.echo(f"Updated remote -> {report.url}.git")
    if report.commit is not None and not report.commit.committed:
        click.echo("Nothing changed; pushing current branch state.")
    app = ctx.obj["app"]
    click.echo(f"Pushed to {app.config.remote_name}/{app.config.default_branch}")


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(push)
