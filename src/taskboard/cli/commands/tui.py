"""TUI command."""

from __future__ import annotations

import click

from taskboard.constants import DEFAULT_DB_PATH

from ..session import load_config


@click.command()
@click.option("--db", default=DEFAULT_DB_PATH, help="Path to SQLite database")
@click.option("--config", "config_path", default=None, help="Path to config.toml")
@click.option("--project", default=None, help="Project id (default from config)")
def tui(db: str, config_path: str | None, project: str | None) -> None:
    """Run the board TUI (default command)."""
    config = load_config(config_path)

    from taskboard.tui.app import TaskboardApp

    app = TaskboardApp(db_path=db, config=config, project_id=project)
    app.run()
