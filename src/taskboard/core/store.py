"""Key/value state store ports for small pieces of ambient UI state."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Protocol

from taskboard.atomic import atomic_write

if TYPE_CHECKING:
    from pathlib import Path

log = logging.getLogger(__name__)

type JsonValue = dict[str, Any] | list[Any] | str | int | float | bool | None


class StateStore(Protocol):
    """Load/save port for JSON-compatible values keyed by string."""

    def load(self, key: str) -> JsonValue: ...

    def save(self, key: str, value: JsonValue) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStateStore:
    """Process-local store, mainly for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, JsonValue] | None = None) -> None:
        self._data: dict[str, JsonValue] = dict(initial or {})

    def load(self, key: str) -> JsonValue:
        return self._data.get(key)

    def save(self, key: str, value: JsonValue) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStateStore:
    """Whole-file JSON store; every save rewrites the file atomically."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._data: dict[str, JsonValue] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, JsonValue]:
        if self._data is not None:
            return self._data
        if not self._path.exists():
            self._data = {}
            return self._data
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("Ignoring unreadable state file %s: %s", self._path, exc)
            raw = {}
        self._data = raw if isinstance(raw, dict) else {}
        return self._data

    def _commit(self, data: dict[str, JsonValue]) -> None:
        """Write ``data`` and adopt it as the cache only once it is on disk."""
        atomic_write(
            self._path, json.dumps(data, indent=2, sort_keys=True), operation="save_state"
        )
        self._data = data

    def load(self, key: str) -> JsonValue:
        return self._read().get(key)

    def save(self, key: str, value: JsonValue) -> None:
        self._commit({**self._read(), key: value})

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            self._commit({k: v for k, v in data.items() if k != key})


__all__ = ["JsonFileStateStore", "JsonValue", "MemoryStateStore", "StateStore"]
