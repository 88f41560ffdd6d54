"""SQLModel schema for persisted tasks."""

# NOTE: Avoid `from __future__ import annotations` because SQLModel evaluates
# field annotations at class creation time.

from datetime import date, datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from taskboard.constants import DEFAULT_PROJECT_ID
from taskboard.core.models.entities import Task, TaskDraft
from taskboard.core.models.enums import TaskPriority, TaskType


class TaskRecord(SQLModel, table=True):
    """Row of the ``tasks`` table.

    ``position`` orders tasks inside one status; new and moved tasks go last.
    """

    __tablename__ = "tasks"  # type: ignore[bad-override]

    id: str = Field(primary_key=True)
    project_id: str = Field(default=DEFAULT_PROJECT_ID, index=True)
    title: str = Field(index=True)
    description: str = Field(default="")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, index=True)
    status: str = Field(index=True)
    task_type: TaskType = Field(default=TaskType.TASK)
    due_date: date | None = Field(default=None)
    assignee_id: str | None = Field(default=None, index=True)
    assignee_name: str | None = Field(default=None)
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    comment_count: int = Field(default=0)
    attachment_count: int = Field(default=0)
    position: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @classmethod
    def from_draft(cls, task_id: str, draft: TaskDraft, status: str, position: int) -> "TaskRecord":
        data = draft.model_dump(exclude={"status", "tags"})
        return cls(
            id=task_id,
            status=status,
            tags=sorted(draft.tags),
            position=position,
            **data,
        )

    def to_domain(self) -> Task:
        return Task(
            id=self.id,
            project_id=self.project_id,
            title=self.title,
            description=self.description,
            priority=self.priority,
            status=self.status,
            task_type=self.task_type,
            due_date=self.due_date,
            assignee_id=self.assignee_id,
            assignee_name=self.assignee_name,
            tags=self.tags or [],
            comment_count=self.comment_count,
            attachment_count=self.attachment_count,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


__all__ = ["TaskRecord"]
