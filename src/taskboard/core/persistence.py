"""Ports to the outside world: task persistence and chat channels."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from uuid import uuid4

from taskboard.constants import DEFAULT_COLUMNS
from taskboard.core.errors import TaskNotFoundError
from taskboard.core.models.entities import Task

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from taskboard.core.models.entities import TaskDraft, TaskPatch

log = logging.getLogger(__name__)


def new_task_id() -> str:
    return uuid4().hex[:8]


class PersistenceAdapter(Protocol):
    """Protocol boundary for task storage.

    Every method may fail; failures raise ``PersistenceError`` (or
    ``TaskNotFoundError`` for ids the store does not know).
    """

    async def list_tasks(self, project_id: str) -> list[Task]: ...

    async def create_task(self, draft: TaskDraft) -> Task: ...

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task: ...

    async def delete_task(self, task_id: str) -> None: ...


class ChannelNotifier(Protocol):
    """Protocol boundary for posting task summaries to a chat channel."""

    async def send_tasks(self, channel_id: str, message: str, tasks: Sequence[Task]) -> None: ...


def format_channel_message(tasks: Iterable[Task]) -> str:
    """Chat-friendly summary of ``tasks``."""
    lines = [
        f"• {task.title} ({task.priority.value.lower()} priority) - "
        f"{task.assignee_name or 'Unassigned'}"
        for task in tasks
    ]
    return "Task Update from Kanban Board:\n\n" + "\n".join(lines)


class InMemoryPersistenceAdapter:
    """Dict-backed adapter; insertion order is list order."""

    def __init__(self, tasks: Iterable[Task] = (), *, default_status: str | None = None) -> None:
        self._tasks: dict[str, Task] = {task.id: task for task in tasks}
        self._default_status = default_status or DEFAULT_COLUMNS[0][0]
        self._lock = asyncio.Lock()

    async def list_tasks(self, project_id: str) -> list[Task]:
        return [task for task in self._tasks.values() if task.project_id == project_id]

    async def create_task(self, draft: TaskDraft) -> Task:
        now = datetime.now()
        async with self._lock:
            task_id = new_task_id()
            while task_id in self._tasks:
                task_id = new_task_id()
            task = Task(
                id=task_id,
                **draft.model_dump(exclude={"status"}),
                status=draft.status or self._default_status,
                created_at=now,
                updated_at=now,
            )
            self._tasks[task.id] = task
        log.debug("Created task %s in memory", task.id)
        return task

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        async with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                raise TaskNotFoundError(task_id)
            updated = current.apply(patch).model_copy(update={"updated_at": datetime.now()})
            self._tasks[task_id] = updated
        return updated

    async def delete_task(self, task_id: str) -> None:
        async with self._lock:
            if self._tasks.pop(task_id, None) is None:
                raise TaskNotFoundError(task_id)


@dataclass(frozen=True, slots=True)
class SentMessage:
    channel_id: str
    message: str
    task_ids: tuple[str, ...]


class InMemoryChannelNotifier:
    """Notifier that records what would have been posted."""

    def __init__(self) -> None:
        self.sent: list[SentMessage] = []

    async def send_tasks(self, channel_id: str, message: str, tasks: Sequence[Task]) -> None:
        self.sent.append(SentMessage(channel_id, message, tuple(task.id for task in tasks)))
        log.info("Posted %d task(s) to #%s", len(tasks), channel_id)


__all__ = [
    "ChannelNotifier",
    "InMemoryChannelNotifier",
    "InMemoryPersistenceAdapter",
    "PersistenceAdapter",
    "SentMessage",
    "format_channel_message",
    "new_task_id",
]
