"""Persistence adapters with scripted failures."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from taskboard.core.errors import PersistenceError
from taskboard.core.persistence import InMemoryPersistenceAdapter

if TYPE_CHECKING:
    from taskboard.core.models.entities import Task, TaskDraft, TaskPatch


class FlakyAdapter(InMemoryPersistenceAdapter):
    """In-memory adapter that fails or stalls on request.

    ``hold(task_id)`` makes the next updates of that task wait until the
    returned event is set.
    """

    def __init__(self, tasks: list[Task] | None = None) -> None:
        super().__init__(tasks or ())
        self.fail_list = False
        self.fail_create = False
        self.fail_updates: set[str] = set()
        self.fail_deletes: set[str] = set()
        self.crash_updates: set[str] = set()
        self.update_calls: list[tuple[str, TaskPatch]] = []
        self._gates: dict[str, asyncio.Event] = {}

    def hold(self, task_id: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[task_id] = gate
        return gate

    def seed(self, *tasks: Task) -> None:
        for task in tasks:
            self._tasks[task.id] = task

    def stored(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    async def list_tasks(self, project_id: str) -> list[Task]:
        if self.fail_list:
            raise PersistenceError("list failed", operation="list_tasks")
        return await super().list_tasks(project_id)

    async def create_task(self, draft: TaskDraft) -> Task:
        if self.fail_create:
            raise PersistenceError("create failed", operation="create_task")
        return await super().create_task(draft)

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        self.update_calls.append((task_id, patch))
        gate = self._gates.get(task_id)
        if gate is not None:
            await gate.wait()
        if task_id in self.crash_updates:
            raise RuntimeError(f"adapter bug on {task_id}")
        if task_id in self.fail_updates:
            raise PersistenceError("update failed", operation="update_task", task_id=task_id)
        return await super().update_task(task_id, patch)

    async def delete_task(self, task_id: str) -> None:
        if task_id in self.fail_deletes:
            raise PersistenceError("delete failed", operation="delete_task", task_id=task_id)
        await super().delete_task(task_id)
