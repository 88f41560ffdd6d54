"""Print the board as a table."""

from __future__ import annotations

import asyncio
from datetime import datetime
from itertools import zip_longest
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from taskboard.constants import DEFAULT_DB_PATH
from taskboard.core.models.entities import FilterCriteria
from taskboard.core.models.enums import DueBucket, TaskPriority

from ..session import load_config, open_board

if TYPE_CHECKING:
    from taskboard.core.models.entities import Column, Task

_PRIORITY_STYLES = {
    TaskPriority.LOW: "green",
    TaskPriority.MEDIUM: "yellow",
    TaskPriority.HIGH: "dark_orange",
    TaskPriority.URGENT: "bold red",
}


def _card(task: Task) -> Text:
    text = Text()
    text.append(f"{task.short_id} ", style="dim")
    text.append(task.title, style="bold")
    text.append(f"\n[{task.priority_label}]", style=_PRIORITY_STYLES[task.priority])
    if task.due_date is not None:
        text.append(f" due {task.due_date.isoformat()}")
    if task.assignee_name or task.assignee_id:
        text.append(f" @{task.assignee_name or task.assignee_id}", style="cyan")
    if task.tags:
        text.append("\n" + " ".join(f"#{tag}" for tag in sorted(task.tags)), style="magenta")
    return text


def render_board(columns: tuple[Column, ...]) -> Table:
    table = Table(show_lines=True, expand=True)
    for column in columns:
        table.add_column(f"{column.name} ({len(column)})", style=None, header_style=column.color)
    for row in zip_longest(*(column.tasks for column in columns)):
        table.add_row(*(_card(task) if task is not None else "" for task in row))
    return table


async def _show(db_path: str, config_path: str | None, project: str | None, criteria: FilterCriteria) -> None:
    config = load_config(config_path)
    async with open_board(db_path, config, project) as board:
        board.set_filter(criteria)
        Console().print(render_board(board.columns))


@click.command()
@click.option("--db", default=DEFAULT_DB_PATH, help="Path to SQLite database")
@click.option("--config", "config_path", default=None, help="Path to config.toml")
@click.option("--project", default=None, help="Project id (default from config)")
@click.option("--text", default=None, help="Match title or description")
@click.option(
    "--priority",
    type=click.Choice([p.value for p in TaskPriority], case_sensitive=False),
    default=None,
)
@click.option("--status", default=None, help="Only this column id")
@click.option("--assignee", default=None, help="Only tasks assigned to this id")
@click.option(
    "--due",
    type=click.Choice([b.value for b in DueBucket], case_sensitive=False),
    default=DueBucket.NONE.value,
    show_default=True,
)
@click.option("--due-from", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--due-to", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
def show(
    db: str,
    config_path: str | None,
    project: str | None,
    text: str | None,
    priority: str | None,
    status: str | None,
    assignee: str | None,
    due: str,
    due_from: datetime | None,
    due_to: datetime | None,
) -> None:
    """Print the board, optionally filtered."""
    criteria = FilterCriteria(
        text=text,
        priority=TaskPriority(priority.upper()) if priority else None,
        status=status,
        assignee_id=assignee,
        due_bucket=DueBucket(due.lower()),
        due_from=due_from.date() if due_from else None,
        due_to=due_to.date() if due_to else None,
    )
    asyncio.run(_show(db, config_path, project, criteria))
