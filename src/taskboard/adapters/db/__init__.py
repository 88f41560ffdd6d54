"""SQLite persistence adapter."""

from taskboard.adapters.db.repository import SqlitePersistenceAdapter

__all__ = ["SqlitePersistenceAdapter"]
