"""Engine construction for the SQLite task store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from taskboard.adapters.db.schema import TaskRecord
from taskboard.core.errors import PersistenceError
from taskboard.paths import ensure_directories, get_database_path

log = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"
BUSY_TIMEOUT_MS = 5000


def resolve_database_file(db_path: str | Path | None) -> Path | None:
    """Return the database file for ``db_path``; ``None`` means in-memory.

    With no explicit path the file lives in the platform data directory,
    which is created on demand.
    """
    if db_path is not None and str(db_path) == MEMORY_DATABASE:
        return None
    if not db_path:
        ensure_directories()
        return get_database_path()
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _pragma_listener(on_disk: bool):
    pragmas = [f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}"]
    if on_disk:
        # WAL lets the CLI read while a TUI session holds the write lock.
        pragmas.append("PRAGMA journal_mode=WAL")

    def on_connect(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        try:
            for pragma in pragmas:
                cursor.execute(pragma)
        finally:
            cursor.close()

    return on_connect


async def open_database(db_path: str | Path | None = None) -> AsyncEngine:
    """Build an engine for ``db_path`` and ensure the ``tasks`` table exists.

    An in-memory database is pinned to one connection so every session sees
    the same tables.
    """
    database_file = resolve_database_file(db_path)
    if database_file is None:
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{MEMORY_DATABASE}",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{database_file}",
            connect_args={"check_same_thread": False},
        )
    event.listen(engine.sync_engine, "connect", _pragma_listener(database_file is not None))

    try:
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all, tables=[TaskRecord.__table__])
    except SQLAlchemyError as exc:
        await engine.dispose()
        raise PersistenceError(
            f"Could not open database {database_file or MEMORY_DATABASE}: {exc}",
            operation="initialize",
        ) from exc

    log.debug("Opened task database at %s", database_file or MEMORY_DATABASE)
    return engine


__all__ = ["MEMORY_DATABASE", "open_database", "resolve_database_file"]
