"""Create a task from the command line."""

from __future__ import annotations

import asyncio
from datetime import datetime

import click

from taskboard.constants import DEFAULT_DB_PATH
from taskboard.core.errors import ValidationError
from taskboard.core.models.entities import TaskDraft
from taskboard.core.models.enums import TaskPriority, TaskType

from ..session import load_config, open_board


async def _add(db_path: str, config_path: str | None, project: str | None, draft: TaskDraft) -> str:
    config = load_config(config_path)
    project_id = project or config.board.default_project_id
    draft = draft.model_copy(update={"project_id": project_id})
    async with open_board(db_path, config, project_id) as board:
        try:
            task = await board.create_task(draft)
        except ValidationError as exc:
            raise click.BadParameter(str(exc), param_hint=exc.field) from exc
        if task is None:
            raise click.ClickException("Could not save the task")
        return task.id


@click.command()
@click.argument("title")
@click.option("--db", default=DEFAULT_DB_PATH, help="Path to SQLite database")
@click.option("--config", "config_path", default=None, help="Path to config.toml")
@click.option("--project", default=None, help="Project id (default from config)")
@click.option("--description", "-d", default="", help="Task description")
@click.option(
    "--priority",
    "-p",
    type=click.Choice([p.value for p in TaskPriority], case_sensitive=False),
    default=TaskPriority.MEDIUM.value,
    show_default=True,
)
@click.option("--status", "-s", default=None, help="Column id (default: first column)")
@click.option("--bug", is_flag=True, help="Create a bug instead of a task")
@click.option("--due", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--assignee", default=None, help="Assignee id")
@click.option("--assignee-name", default=None, help="Assignee display name")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
def add(
    title: str,
    db: str,
    config_path: str | None,
    project: str | None,
    description: str,
    priority: str,
    status: str | None,
    bug: bool,
    due: datetime | None,
    assignee: str | None,
    assignee_name: str | None,
    tags: tuple[str, ...],
) -> None:
    """Add a task titled TITLE."""
    draft = TaskDraft(
        title=title,
        description=description,
        priority=TaskPriority(priority.upper()),
        status=status,
        task_type=TaskType.BUG if bug else TaskType.TASK,
        due_date=due.date() if due else None,
        assignee_id=assignee,
        assignee_name=assignee_name,
        tags=list(tags),
    )
    task_id = asyncio.run(_add(db, config_path, project, draft))
    click.secho(f"Created task {task_id}", fg="green")
