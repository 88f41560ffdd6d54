"""Inspect or initialize the config file."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from taskboard.config import BoardConfig
from taskboard.constants import DEFAULT_CONFIG_PATH
from taskboard.core.errors import PersistenceError


@click.command()
@click.option("--path", "config_path", default=DEFAULT_CONFIG_PATH, help="Path to config.toml")
@click.option("--init", is_flag=True, help="Write a config file with the defaults")
@click.option("--force", is_flag=True, help="Overwrite an existing file with --init")
def config(config_path: str, init: bool, force: bool) -> None:
    """Print the config path and contents."""
    path = Path(config_path)
    if init:
        if path.exists() and not force:
            raise click.ClickException(f"{path} already exists (use --force to overwrite)")
        try:
            asyncio.run(BoardConfig().save(path))
        except PersistenceError as exc:
            raise click.ClickException(str(exc)) from exc
        click.secho(f"Wrote default config to {path}", fg="green")
        return

    click.echo(f"Config: {path}")
    if not path.exists():
        click.secho("No config file; using defaults.", fg="yellow")
        return
    click.echo(path.read_text(encoding="utf-8"))
