"""Column model: ordered columns of task references.

Every function here is pure. It takes a layout (a tuple of columns), returns
a new one and never mutates its input. A task lives in the column whose id
equals its ``status``. Nothing in this module may duplicate or drop a task.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from taskboard.constants import DEFAULT_COLUMN_COLOR, DONE_COLUMN_ID
from taskboard.core.errors import (
    ColumnNotFoundError,
    DuplicateTaskIdError,
    TaskNotFoundError,
    ValidationError,
)
from taskboard.core.filters import apply_filters
from taskboard.core.models.entities import Column, FilterCriteria, Task

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

type Layout = tuple[Column, ...]


def _new_column_id() -> str:
    return f"column-{uuid4().hex[:8]}"


def column_title(column_id: str) -> str:
    """Display name for a column created on the fly from a task status."""
    return column_id.replace("_", " ").replace("-", " ").strip().title() or column_id


def make_columns(specs: Iterable[tuple[str, str, str]]) -> Layout:
    """Build empty columns from ``(id, name, color)`` triples."""
    return tuple(Column(id=cid, name=name, color=color) for cid, name, color in specs)


def column_ids(columns: Sequence[Column]) -> tuple[str, ...]:
    return tuple(column.id for column in columns)


def column_index(columns: Sequence[Column], column_id: str) -> int:
    for index, column in enumerate(columns):
        if column.id == column_id:
            return index
    raise ColumnNotFoundError(column_id)


def find_column(columns: Sequence[Column], column_id: str) -> Column:
    return columns[column_index(columns, column_id)]


def all_tasks(columns: Iterable[Column]) -> list[Task]:
    return [task for column in columns for task in column.tasks]


def task_count(columns: Iterable[Column]) -> int:
    return sum(len(column.tasks) for column in columns)


def find_task(columns: Sequence[Column], task_id: str) -> tuple[Column, int, Task] | None:
    """Locate the first task with ``task_id``: ``(column, index, task)`` or None."""
    for column in columns:
        for index, task in enumerate(column.tasks):
            if task.id == task_id:
                return column, index, task
    return None


def duplicate_task_ids(columns: Iterable[Column]) -> set[str]:
    counts = Counter(task.id for column in columns for task in column.tasks)
    return {task_id for task_id, count in counts.items() if count > 1}


def _replace_column(columns: Layout, index: int, column: Column) -> Layout:
    return (*columns[:index], column, *columns[index + 1 :])


def _with_tasks(column: Column, tasks: Sequence[Task]) -> Column:
    return column.model_copy(update={"tasks": tuple(tasks)})


def _clamp(index: int | None, upper: int) -> int:
    if index is None:
        return upper
    return max(0, min(index, upper))


def distribute(
    tasks: Iterable[Task],
    criteria: FilterCriteria,
    columns: Sequence[Column],
    *,
    now: date | datetime,
    done_column_id: str = DONE_COLUMN_ID,
) -> Layout:
    """Filter ``tasks`` and partition them by status into ``columns``.

    Relative order within each bucket follows the input order. A status with
    no matching column gets a column appended after the known ones.
    """
    visible = apply_filters(tasks, criteria, now, done_column_id=done_column_id)
    buckets: dict[str, list[Task]] = {column.id: [] for column in columns}
    extra: dict[str, list[Task]] = {}
    for task in visible:
        if task.status in buckets:
            buckets[task.status].append(task)
        else:
            extra.setdefault(task.status, []).append(task)

    distributed = [_with_tasks(column, buckets[column.id]) for column in columns]
    distributed.extend(
        Column(id=status, name=column_title(status), tasks=tuple(bucket))
        for status, bucket in extra.items()
    )
    return tuple(distributed)


def build_layout(tasks: Iterable[Task], columns: Sequence[Column]) -> Layout:
    """Place every task into its column, ignoring filters."""
    return distribute(tasks, FilterCriteria(), columns, now=date.today())


def move_task(
    columns: Layout,
    task_id: str,
    from_column_id: str,
    to_column_id: str,
    target_index: int | None = None,
) -> Layout:
    """Move exactly one task from one column to a position in another.

    ``target_index`` is a position in the target column after the task has
    been taken out of its source, clamped to the valid range. ``None``
    appends. Moving a task onto its own position returns ``columns`` itself.
    """
    source_index = column_index(columns, from_column_id)
    target_column_index = column_index(columns, to_column_id)
    source = columns[source_index]

    positions = [index for index, task in enumerate(source.tasks) if task.id == task_id]
    if not positions:
        raise TaskNotFoundError(task_id)
    if len(positions) > 1:
        raise DuplicateTaskIdError(task_id, from_column_id)

    position = positions[0]
    task = source.tasks[position]
    remaining = source.tasks[:position] + source.tasks[position + 1 :]

    if source_index == target_column_index:
        index = _clamp(target_index, len(remaining))
        if index == position:
            return columns
        reordered = (*remaining[:index], task, *remaining[index:])
        return _replace_column(columns, source_index, _with_tasks(source, reordered))

    target = columns[target_column_index]
    if any(existing.id == task_id for existing in target.tasks):
        raise DuplicateTaskIdError(task_id, to_column_id)

    moved = task if task.status == to_column_id else task.model_copy(update={"status": to_column_id})
    index = _clamp(target_index, len(target.tasks))
    inserted = (*target.tasks[:index], moved, *target.tasks[index:])

    result = _replace_column(columns, source_index, _with_tasks(source, remaining))
    return _replace_column(result, target_column_index, _with_tasks(target, inserted))


def reorder_columns(columns: Layout, dragged_column_id: str, target_column_id: str) -> Layout:
    """Move the dragged column to the target's position, shifting the rest."""
    dragged_index = column_index(columns, dragged_column_id)
    target_index = column_index(columns, target_column_id)
    if dragged_index == target_index:
        return columns
    remaining = [*columns[:dragged_index], *columns[dragged_index + 1 :]]
    remaining.insert(target_index, columns[dragged_index])
    return tuple(remaining)


def rename_column(columns: Layout, column_id: str, name: str) -> Layout:
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("Column name cannot be empty", field="name")
    index = column_index(columns, column_id)
    if columns[index].name == cleaned:
        return columns
    return _replace_column(columns, index, columns[index].model_copy(update={"name": cleaned}))


def add_column(
    columns: Layout,
    name: str,
    *,
    column_id: str | None = None,
    color: str = DEFAULT_COLUMN_COLOR,
) -> Layout:
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("Column name cannot be empty", field="name")
    new_id = column_id or _new_column_id()
    if new_id in column_ids(columns):
        raise ValidationError(f"Column {new_id} already exists", field="id")
    return (*columns, Column(id=new_id, name=cleaned, color=color))


def _ensure_column(columns: Layout, column_id: str) -> tuple[Layout, int]:
    for index, column in enumerate(columns):
        if column.id == column_id:
            return columns, index
    created = Column(id=column_id, name=column_title(column_id))
    return (*columns, created), len(columns)


def insert_task(columns: Layout, task: Task, index: int | None = None) -> Layout:
    """Insert a new task into the column named by its status."""
    if find_task(columns, task.id) is not None:
        raise DuplicateTaskIdError(task.id, task.status)
    columns, target_index = _ensure_column(columns, task.status)
    target = columns[target_index]
    position = _clamp(index, len(target.tasks))
    inserted = (*target.tasks[:position], task, *target.tasks[position:])
    return _replace_column(columns, target_index, _with_tasks(target, inserted))


def remove_task(columns: Layout, task_id: str) -> Layout:
    found = find_task(columns, task_id)
    if found is None:
        raise TaskNotFoundError(task_id)
    column, position, _task = found
    index = column_index(columns, column.id)
    kept = column.tasks[:position] + column.tasks[position + 1 :]
    return _replace_column(columns, index, _with_tasks(column, kept))


def replace_task(columns: Layout, task: Task) -> Layout:
    """Swap in a new version of a task.

    The task keeps its position unless its status changed, in which case it
    is appended to the column of the new status.
    """
    found = find_task(columns, task.id)
    if found is None:
        raise TaskNotFoundError(task.id)
    column, position, current = found
    if current.status == task.status:
        index = column_index(columns, column.id)
        updated = (*column.tasks[:position], task, *column.tasks[position + 1 :])
        return _replace_column(columns, index, _with_tasks(column, updated))
    return insert_task(remove_task(columns, task.id), task)


def resolve_insert_index(
    full_column: Column,
    visible_task_ids: Sequence[str],
    visible_index: int | None,
    *,
    moving_task_id: str,
) -> int:
    """Map a drop position in the filtered column onto the full column.

    The result is an index into the full column with the moving task taken
    out, which is what :func:`move_task` expects. Dropping past the last
    visible card lands right after it, ahead of any hidden tasks that follow.
    """
    others = [task.id for task in full_column.tasks if task.id != moving_task_id]
    visible = [task_id for task_id in visible_task_ids if task_id != moving_task_id]
    if not visible:
        return len(others)
    if visible_index is None or visible_index >= len(visible):
        return others.index(visible[-1]) + 1
    return others.index(visible[max(visible_index, 0)])


__all__ = [
    "Layout",
    "add_column",
    "all_tasks",
    "build_layout",
    "column_ids",
    "column_index",
    "column_title",
    "distribute",
    "duplicate_task_ids",
    "find_column",
    "find_task",
    "insert_task",
    "make_columns",
    "move_task",
    "remove_task",
    "rename_column",
    "reorder_columns",
    "replace_task",
    "resolve_insert_index",
    "task_count",
]
