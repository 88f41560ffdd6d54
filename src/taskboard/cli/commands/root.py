"""Root CLI command registration."""

from __future__ import annotations

import click

from taskboard import __version__

from .add import add
from .config import config
from .show import show
from .timer import timer
from .tui import tui


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version and exit")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """Kanban task board for small teams."""
    if version:
        click.echo(f"taskboard {__version__}")
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        ctx.invoke(tui)


cli.add_command(show)
cli.add_command(add)
cli.add_command(tui)
cli.add_command(config)
cli.add_command(timer)
