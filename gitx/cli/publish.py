"""Publish command for gitx CLI."""

from __future__ import annotations

import click

from ..remote import BindingChange
from ._common import debug_option, run_verb


@click.command(name="publish")
@click.option("--private", is_flag=True, help="Create the forge repository as private.")
@debug_option
@click.pass_context
def publish(ctx: click.Context, private: bool, debug: bool) -> None:
    """Create the forge repository for this directory and upload it."""

    report = run_verb(ctx, "publish", debug=debug, private=private)

    record = report.remote
    if record is not None:
        if record.created:
            visibility = "private" if record.private else "public"
            click.echo(f"Created {visibility} repository {record.full_name}")
        else:
            click.echo(f"Repository {record.full_name} already exists")
    if report.binding is BindingChange.ADDED:
        click.echo(f"Added remote -> {report.url}.git")
    elif report.binding is BindingChange.UPDATED:
        click.echo(f"Updated remote -> {report.url}.git")
    if report.commit is not None and not report.commit.committed:
        click.echo("Nothing to commit.")
    click.echo(f"Published to {report.url}")


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(publish)
