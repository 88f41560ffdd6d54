"""Board events and the in-memory event bus.

Handlers registered with :meth:`InMemoryEventBus.add_handler` run
synchronously in the same event turn as the mutation that produced the
event. Async subscribers receive events through a bounded queue.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from uuid import uuid4

from taskboard.core.models.enums import NoticeSeverity

if TYPE_CHECKING:
    from taskboard.core.models.entities import Column
    from taskboard.core.overlay import OverlayState

log = logging.getLogger(__name__)


def _new_event_id() -> str:
    return uuid4().hex


def _now() -> datetime:
    return datetime.now()


class DomainEvent(Protocol):
    """Base protocol for all board events."""

    @property
    def event_id(self) -> str: ...

    @property
    def occurred_at(self) -> datetime: ...


EventHandler = Callable[[DomainEvent], None]


@dataclass(frozen=True)
class ColumnsChanged:
    columns: tuple[Column, ...]
    event_id: str = field(default_factory=_new_event_id)
    occurred_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class SelectionChanged:
    selected_ids: frozenset[str]
    event_id: str = field(default_factory=_new_event_id)
    occurred_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class TaskActivated:
    task_id: str
    event_id: str = field(default_factory=_new_event_id)
    occurred_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class OverlayChanged:
    state: OverlayState
    event_id: str = field(default_factory=_new_event_id)
    occurred_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class BoardNotice:
    """Non-blocking toast for the surrounding application."""

    message: str
    severity: NoticeSeverity = NoticeSeverity.INFORMATION
    event_id: str = field(default_factory=_new_event_id)
    occurred_at: datetime = field(default_factory=_now)


class EventBus(Protocol):
    """Fan-out bus for board events."""

    def emit(self, event: DomainEvent) -> None:
        """Deliver an event to handlers and subscribers without awaiting."""
        ...

    def subscribe(self, event_type: type[DomainEvent] | None = None) -> AsyncIterator[DomainEvent]:
        """Subscribe to events (optionally filtered by type)."""
        ...

    def add_handler(
        self,
        handler: EventHandler,
        event_type: type[DomainEvent] | None = None,
    ) -> None:
        """Register a sync handler for events (UI bridges use this)."""
        ...

    def remove_handler(self, handler: EventHandler) -> None:
        """Remove a previously registered handler."""
        ...


class InMemoryEventBus:
    """Simple event bus with fan-out to sync handlers and async subscribers.

    This implementation is suitable for single-process use. Events are not
    persisted or replayed; new subscribers only receive future events.
    """

    def __init__(self) -> None:
        self._handlers: list[tuple[type[DomainEvent] | None, EventHandler]] = []
        self._queues: list[tuple[type[DomainEvent] | None, asyncio.Queue[DomainEvent]]] = []

    def emit(self, event: DomainEvent) -> None:
        """Deliver event to all matching handlers and subscribers."""
        for filter_type, handler in list(self._handlers):
            if filter_type is None or isinstance(event, filter_type):
                try:
                    handler(event)
                except Exception:
                    log.exception("Event handler %r failed for %s", handler, type(event).__name__)

        for filter_type, queue in list(self._queues):
            if filter_type is None or isinstance(event, filter_type):
                with contextlib.suppress(asyncio.QueueFull):
                    queue.put_nowait(event)

    async def publish(self, event: DomainEvent) -> None:
        """Async-friendly alias of :meth:`emit`."""
        self.emit(event)

    def add_handler(
        self,
        handler: EventHandler,
        event_type: type[DomainEvent] | None = None,
    ) -> None:
        """Register a synchronous handler for events."""
        self._handlers.append((event_type, handler))

    def remove_handler(self, handler: EventHandler) -> None:
        """Remove a previously registered handler."""
        self._handlers = [(t, h) for t, h in self._handlers if h is not handler]

    async def subscribe(
        self, event_type: type[DomainEvent] | None = None
    ) -> AsyncIterator[DomainEvent]:
        """Subscribe to events, yielding them as they arrive."""
        queue: asyncio.Queue[DomainEvent] = asyncio.Queue(maxsize=100)
        self._queues.append((event_type, queue))
        try:
            while True:
                event = await queue.get()
                yield event
        finally:
            self._queues = [(t, q) for t, q in self._queues if q is not queue]


__all__ = [
    "BoardNotice",
    "ColumnsChanged",
    "DomainEvent",
    "EventBus",
    "EventHandler",
    "InMemoryEventBus",
    "OverlayChanged",
    "SelectionChanged",
    "TaskActivated",
]
