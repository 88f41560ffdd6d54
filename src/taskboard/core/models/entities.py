"""Core domain entities.

These models are intentionally light on persistence concerns. Adapters map
to/from them. All of them are frozen: a change to a task or column produces
a new record, never an in-place edit.
"""

from __future__ import annotations

from datetime import date, datetime  # noqa: TC003 - Pydantic needs runtime access
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskboard.constants import DEFAULT_COLUMN_COLOR, DEFAULT_PROJECT_ID
from taskboard.core.models.enums import DueBucket, TaskPriority, TaskType


class DomainModel(BaseModel):
    """Base model with common config."""

    model_config = ConfigDict(from_attributes=True, frozen=True)


def _normalize_tags(value: object) -> object:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(str(tag).strip() for tag in value if str(tag).strip())
    return value


class Task(DomainModel):
    """Unit of work (kanban card).

    ``status`` is the id of the column the task belongs to.
    """

    id: str
    project_id: str = DEFAULT_PROJECT_ID
    title: str
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    status: str
    task_type: TaskType = TaskType.TASK
    due_date: date | None = None
    assignee_id: str | None = None
    assignee_name: str | None = None
    tags: frozenset[str] = Field(default_factory=frozenset)
    comment_count: int = Field(default=0, ge=0)
    attachment_count: int = Field(default=0, ge=0)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: object) -> object:
        return _normalize_tags(value)

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def short_id(self) -> str:
        """Return shortened ID for display."""
        return self.id[:8]

    @property
    def priority_label(self) -> str:
        return self.priority.label

    def apply(self, patch: TaskPatch) -> Task:
        """Return a copy with the explicitly-set fields of ``patch`` applied."""
        changes = patch.changes()
        if not changes:
            return self
        return self.model_copy(update=changes)


class TaskDraft(DomainModel):
    """Fields for a task that does not exist yet (no id)."""

    project_id: str = DEFAULT_PROJECT_ID
    title: str
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    status: str | None = None
    task_type: TaskType = TaskType.TASK
    due_date: date | None = None
    assignee_id: str | None = None
    assignee_name: str | None = None
    tags: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: object) -> object:
        return _normalize_tags(value)


class TaskPatch(DomainModel):
    """Partial update of a task.

    Only fields that were explicitly passed are applied, so ``due_date=None``
    clears the due date while omitting ``due_date`` leaves it alone.
    """

    title: str | None = None
    description: str | None = None
    priority: TaskPriority | None = None
    status: str | None = None
    task_type: TaskType | None = None
    due_date: date | None = None
    assignee_id: str | None = None
    assignee_name: str | None = None
    tags: frozenset[str] | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: object) -> object:
        if value is None:
            return None
        return _normalize_tags(value)

    def changes(self) -> dict[str, Any]:
        """Explicitly-set fields, keyed by task attribute name."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    @classmethod
    def reverting(cls, task: Task, patch: TaskPatch) -> TaskPatch:
        """Build the patch that restores ``task``'s values for the fields ``patch`` sets."""
        return cls(**{name: getattr(task, name) for name in patch.model_fields_set})


class Column(DomainModel):
    """Ordered bucket of tasks for one workflow status."""

    id: str
    name: str
    color: str = DEFAULT_COLUMN_COLOR
    tasks: tuple[Task, ...] = ()

    @property
    def task_ids(self) -> tuple[str, ...]:
        return tuple(task.id for task in self.tasks)

    def __len__(self) -> int:
        return len(self.tasks)


class FilterCriteria(DomainModel):
    """Independently optional predicates; unset ones always pass."""

    text: str | None = None
    priority: TaskPriority | None = None
    status: str | None = None
    assignee_id: str | None = None
    due_bucket: DueBucket = DueBucket.NONE
    due_from: date | None = None
    due_to: date | None = None

    @property
    def is_empty(self) -> bool:
        return (
            not (self.text and self.text.strip())
            and self.priority is None
            and self.status is None
            and self.assignee_id is None
            and self.due_bucket is DueBucket.NONE
            and self.due_from is None
            and self.due_to is None
        )

    def with_changes(self, **changes: Any) -> FilterCriteria:
        """Return validated criteria with ``changes`` applied."""
        return FilterCriteria.model_validate({**self.model_dump(), **changes})
