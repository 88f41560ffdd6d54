"""Time tracking commands."""

from __future__ import annotations

import asyncio
import getpass
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from taskboard.constants import DEFAULT_DB_PATH
from taskboard.core.errors import TimerConflictError
from taskboard.core.store import JsonFileStateStore
from taskboard.core.timers import TimeTracker, format_duration
from taskboard.paths import get_state_path

from ..session import load_config, open_board

_user_option = click.option(
    "--user", default=getpass.getuser, show_default="current user", help="Whose timer"
)
_state_option = click.option(
    "--state",
    "state_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=get_state_path,
    help="Path to the state file",
)


def _tracker(state_path: Path, user: str) -> TimeTracker:
    return TimeTracker(JsonFileStateStore(state_path), user)


async def _lookup(
    db_path: str, config_path: str | None, project: str | None, task_id: str
) -> tuple[str, str]:
    config = load_config(config_path)
    project_id = project or config.board.default_project_id
    async with open_board(db_path, config, project_id) as board:
        task = board.get_task(task_id)
        if task is None:
            raise click.BadParameter(f"No task {task_id} in project {project_id}", param_hint="TASK_ID")
        return task.title, project_id


@click.group()
def timer() -> None:
    """Track time spent on tasks."""


@timer.command()
@click.argument("task_id")
@click.option("--db", default=DEFAULT_DB_PATH, help="Path to SQLite database")
@click.option("--config", "config_path", default=None, help="Path to config.toml")
@click.option("--project", default=None, help="Project id (default from config)")
@_user_option
@_state_option
def start(
    task_id: str,
    db: str,
    config_path: str | None,
    project: str | None,
    user: str,
    state_path: Path,
) -> None:
    """Start a timer on TASK_ID."""
    title, project_id = asyncio.run(_lookup(db, config_path, project, task_id))
    tracker = _tracker(state_path, user)
    try:
        tracker.start(task_id, title, project_id)
    except TimerConflictError as exc:
        raise click.ClickException(
            f"A timer is already running on {exc.running_task_id}; stop it first"
        ) from exc
    click.secho(f"Timer started on {title}", fg="green")


@timer.command()
@click.option("--message", "-m", "description", default="", help="What you worked on")
@_user_option
@_state_option
def stop(description: str, user: str, state_path: Path) -> None:
    """Stop the running timer and log the time."""
    entry = _tracker(state_path, user).stop(description)
    if entry is None:
        click.echo("No timer running.")
        return
    click.secho(
        f"Logged {format_duration(entry.duration_seconds)} on {entry.task_title or entry.task_id}",
        fg="green",
    )


@timer.command()
@_user_option
@_state_option
def status(user: str, state_path: Path) -> None:
    """Show the running timer and today's total."""
    tracker = _tracker(state_path, user)
    active = tracker.active
    if active is None:
        click.echo("No timer running.")
    else:
        elapsed = int(tracker.elapsed().total_seconds())
        click.echo(f"Running: {active.task_title or active.task_id} ({format_duration(elapsed)})")
    click.echo(f"Today: {format_duration(tracker.total_today())}")


@timer.command("log")
@click.option("--limit", default=20, show_default=True, help="Entries to show")
@_user_option
@_state_option
def log_entries(limit: int, user: str, state_path: Path) -> None:
    """List logged time entries, newest first."""
    tracker = _tracker(state_path, user)
    if not tracker.entries:
        click.echo("No time logged yet.")
        return
    table = Table(show_lines=False)
    table.add_column("Ended")
    table.add_column("Task")
    table.add_column("Time", justify="right")
    table.add_column("Note")
    for entry in tracker.entries[:limit]:
        table.add_row(
            entry.ended_at.strftime("%Y-%m-%d %H:%M"),
            entry.task_title or entry.task_id,
            format_duration(entry.duration_seconds),
            entry.description,
        )
    Console().print(table)
