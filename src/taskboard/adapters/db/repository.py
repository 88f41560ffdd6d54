"""SQLite-backed persistence adapter."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import col, select

from taskboard.adapters.db.engine import MEMORY_DATABASE, open_database
from taskboard.adapters.db.schema import TaskRecord
from taskboard.constants import DEFAULT_COLUMNS
from taskboard.core.errors import PersistenceError, TaskNotFoundError
from taskboard.core.persistence import new_task_id
from taskboard.paths import get_database_path

if TYPE_CHECKING:
    from taskboard.core.models.entities import Task, TaskDraft, TaskPatch

log = logging.getLogger(__name__)


class RepositoryClosing(Exception):
    """Raised when a DB operation is attempted during repository shutdown."""


class ClosingAwareSessionFactory:
    """Wrapper around ``async_sessionmaker`` with a shared closing flag."""

    def __init__(self, inner: async_sessionmaker[AsyncSession]) -> None:
        self._inner = inner
        self._closing = False

    def mark_closing(self) -> None:
        self._closing = True

    @property
    def closing(self) -> bool:
        return self._closing

    def __call__(self) -> AsyncSession:
        if self._closing:
            raise RepositoryClosing("Repository is shutting down")
        return self._inner()


class SqlitePersistenceAdapter:
    """Async task store on SQLite; writes are serialized by one lock."""

    def __init__(
        self, db_path: str | Path | None = None, *, default_status: str | None = None
    ) -> None:
        if db_path == MEMORY_DATABASE:
            self.db_path: str | Path = db_path
        else:
            self.db_path = Path(db_path or get_database_path())
        self._engine: AsyncEngine | None = None
        self._session_factory: ClosingAwareSessionFactory | None = None
        self._lock = asyncio.Lock()
        self._default_status = default_status or DEFAULT_COLUMNS[0][0]

    async def initialize(self) -> None:
        """Open the database and create the tasks table."""
        self._engine = await open_database(self.db_path)
        raw_factory = async_sessionmaker(self._engine, class_=AsyncSession, expire_on_commit=False)
        self._session_factory = ClosingAwareSessionFactory(raw_factory)

    async def close(self) -> None:
        """Close engine and release resources."""
        if self._session_factory is not None:
            self._session_factory.mark_closing()
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    async def __aenter__(self) -> SqlitePersistenceAdapter:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _get_session(self, operation: str) -> AsyncSession:
        if self._session_factory is None:
            raise PersistenceError("Repository not initialized", operation=operation)
        try:
            return self._session_factory()
        except RepositoryClosing as exc:
            raise PersistenceError(str(exc), operation=operation) from exc

    @staticmethod
    async def _next_position(session: AsyncSession, project_id: str, status: str) -> int:
        result = await session.execute(
            select(func.max(col(TaskRecord.position))).where(
                TaskRecord.project_id == project_id, TaskRecord.status == status
            )
        )
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def list_tasks(self, project_id: str) -> list[Task]:
        try:
            async with self._get_session("list_tasks") as session:
                result = await session.execute(
                    select(TaskRecord)
                    .where(TaskRecord.project_id == project_id)
                    .order_by(col(TaskRecord.position).asc(), col(TaskRecord.created_at).asc())
                )
                return [record.to_domain() for record in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not list tasks: {exc}", operation="list_tasks") from exc

    async def list_project_ids(self) -> list[str]:
        try:
            async with self._get_session("list_projects") as session:
                result = await session.execute(
                    select(TaskRecord.project_id).distinct().order_by(col(TaskRecord.project_id))
                )
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Could not list projects: {exc}", operation="list_projects"
            ) from exc

    async def create_task(self, draft: TaskDraft) -> Task:
        status = draft.status or self._default_status
        try:
            async with self._lock, self._get_session("create_task") as session:
                task_id = new_task_id()
                while await session.get(TaskRecord, task_id) is not None:
                    task_id = new_task_id()
                position = await self._next_position(session, draft.project_id, status)
                record = TaskRecord.from_draft(task_id, draft, status, position)
                session.add(record)
                await session.commit()
                await session.refresh(record)
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Could not create task: {exc}", operation="create_task"
            ) from exc
        log.debug("Created task %s in %s", record.id, status)
        return record.to_domain()

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        changes: dict[str, Any] = patch.changes()
        if "tags" in changes:
            changes["tags"] = sorted(changes["tags"] or ())
        try:
            async with self._lock, self._get_session("update_task") as session:
                record = await session.get(TaskRecord, task_id)
                if record is None:
                    raise TaskNotFoundError(task_id)
                if "status" in changes and changes["status"] != record.status:
                    changes["position"] = await self._next_position(
                        session, record.project_id, changes["status"]
                    )
                if changes:
                    record.sqlmodel_update(changes)
                record.updated_at = datetime.now()
                session.add(record)
                await session.commit()
                await session.refresh(record)
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Could not update task {task_id}: {exc}", operation="update_task", task_id=task_id
            ) from exc
        return record.to_domain()

    async def delete_task(self, task_id: str) -> None:
        try:
            async with self._lock, self._get_session("delete_task") as session:
                record = await session.get(TaskRecord, task_id)
                if record is None:
                    raise TaskNotFoundError(task_id)
                await session.delete(record)
                await session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Could not delete task {task_id}: {exc}", operation="delete_task", task_id=task_id
            ) from exc
        log.debug("Deleted task %s", task_id)


__all__ = ["ClosingAwareSessionFactory", "RepositoryClosing", "SqlitePersistenceAdapter"]
