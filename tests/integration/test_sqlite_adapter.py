"""Integration tests for the SQLite persistence adapter."""

from __future__ import annotations

from datetime import date

import pytest

from taskboard.adapters.db import SqlitePersistenceAdapter
from taskboard.adapters.db.engine import MEMORY_DATABASE, open_database, resolve_database_file
from taskboard.core.board import BoardController
from taskboard.core.errors import PersistenceError, TaskNotFoundError
from taskboard.core.models.entities import TaskDraft, TaskPatch
from taskboard.core.models.enums import TaskPriority, TaskType
from tests.helpers.factories import NOW, ids_by_column

pytestmark = pytest.mark.integration


class TestCrud:
    async def test_create_assigns_id_and_default_status(self, sqlite_adapter):
        task = await sqlite_adapter.create_task(
            TaskDraft(title="Write docs", tags=["docs", "ui"], due_date=date(2024, 6, 20))
        )

        assert task.id
        assert task.status == "TODO"
        assert task.tags == frozenset({"docs", "ui"})
        assert await sqlite_adapter.list_tasks("default") == [task]

    async def test_update_returns_persisted_task(self, sqlite_adapter):
        task = await sqlite_adapter.create_task(TaskDraft(title="Fix login"))

        updated = await sqlite_adapter.update_task(
            task.id,
            TaskPatch(priority=TaskPriority.URGENT, task_type=TaskType.BUG, assignee_name="Ana"),
        )

        assert updated.priority is TaskPriority.URGENT
        assert updated.task_type is TaskType.BUG
        assert updated.title == "Fix login"
        assert (await sqlite_adapter.list_tasks("default"))[0] == updated

    async def test_patch_can_clear_fields(self, sqlite_adapter):
        task = await sqlite_adapter.create_task(
            TaskDraft(title="x", due_date=date(2024, 1, 1), tags=["a"])
        )

        updated = await sqlite_adapter.update_task(task.id, TaskPatch(due_date=None, tags=[]))

        assert updated.due_date is None
        assert updated.tags == frozenset()

    async def test_delete(self, sqlite_adapter):
        task = await sqlite_adapter.create_task(TaskDraft(title="x"))

        await sqlite_adapter.delete_task(task.id)

        assert await sqlite_adapter.list_tasks("default") == []

    async def test_missing_task_raises_not_found(self, sqlite_adapter):
        with pytest.raises(TaskNotFoundError):
            await sqlite_adapter.update_task("nope", TaskPatch(title="x"))
        with pytest.raises(TaskNotFoundError):
            await sqlite_adapter.delete_task("nope")


class TestOrderingAndProjects:
    async def test_moved_tasks_go_last_in_their_column(self, sqlite_adapter):
        first = await sqlite_adapter.create_task(TaskDraft(title="first", status="DONE"))
        second = await sqlite_adapter.create_task(TaskDraft(title="second"))

        await sqlite_adapter.update_task(second.id, TaskPatch(status="DONE"))

        done = [t.id for t in await sqlite_adapter.list_tasks("default") if t.status == "DONE"]
        assert done == [first.id, second.id]

    async def test_projects_are_isolated(self, sqlite_adapter):
        await sqlite_adapter.create_task(TaskDraft(title="a", project_id="alpha"))
        await sqlite_adapter.create_task(TaskDraft(title="b", project_id="beta"))

        assert [t.title for t in await sqlite_adapter.list_tasks("alpha")] == ["a"]
        assert await sqlite_adapter.list_project_ids() == ["alpha", "beta"]


class TestLifecycle:
    async def test_uninitialized_adapter_raises_persistence_error(self, tmp_path):
        adapter = SqlitePersistenceAdapter(tmp_path / "board.db")

        with pytest.raises(PersistenceError):
            await adapter.list_tasks("default")

    async def test_closed_adapter_raises_persistence_error(self, tmp_path):
        adapter = SqlitePersistenceAdapter(tmp_path / "board.db")
        await adapter.initialize()
        await adapter.close()

        with pytest.raises(PersistenceError):
            await adapter.create_task(TaskDraft(title="x"))

    async def test_data_survives_reopen(self, tmp_path):
        path = tmp_path / "board.db"
        async with SqlitePersistenceAdapter(path) as adapter:
            task = await adapter.create_task(TaskDraft(title="keep me"))

        async with SqlitePersistenceAdapter(path) as adapter:
            assert [t.id for t in await adapter.list_tasks("default")] == [task.id]


class TestOpenDatabase:
    def test_resolves_memory_and_explicit_paths(self, tmp_path):
        assert resolve_database_file(MEMORY_DATABASE) is None
        path = tmp_path / "deep" / "board.db"

        assert resolve_database_file(path) == path
        assert path.parent.is_dir()

    async def test_file_database_uses_wal(self, tmp_path):
        engine = await open_database(tmp_path / "board.db")
        try:
            async with engine.connect() as conn:
                mode = (await conn.exec_driver_sql("PRAGMA journal_mode")).scalar_one()
        finally:
            await engine.dispose()

        assert mode == "wal"

    async def test_unopenable_path_raises_persistence_error(self, tmp_path):
        adapter = SqlitePersistenceAdapter(tmp_path)

        with pytest.raises(PersistenceError) as excinfo:
            await adapter.initialize()
        assert excinfo.value.operation == "initialize"


class TestBoardOverSqlite:
    async def test_move_persists_status(self, sqlite_adapter):
        task = await sqlite_adapter.create_task(TaskDraft(title="ship it"))
        board = BoardController(sqlite_adapter, clock=lambda: NOW)
        await board.load("default")

        assert await board.move_task(task.id, "REVIEW")

        reloaded = BoardController(sqlite_adapter, clock=lambda: NOW)
        await reloaded.load("default")
        assert ids_by_column(reloaded.columns)["REVIEW"] == [task.id]

    async def test_deleted_upstream_task_cannot_be_updated(self, sqlite_adapter):
        task = await sqlite_adapter.create_task(TaskDraft(title="gone"))
        board = BoardController(sqlite_adapter, clock=lambda: NOW)
        await board.load("default")
        await sqlite_adapter.delete_task(task.id)

        assert await board.update_task(task.id, TaskPatch(title="renamed")) is None
        assert board.get_task(task.id).title == "gone"
