"""Drag-and-drop state machines.

Two machines share one slot, so at most one drag is active at a time:

- task drag: Idle -> DraggingTask -> HoveringColumn* -> Dropped | Cancelled -> Idle
- column drag: Idle -> DraggingColumn -> Dropped | Cancelled -> Idle

:func:`reduce_drag` is a pure reducer over discrete events. It never touches
the columns. It returns the request the caller should apply. The toolkit
layer only translates raw pointer/key input into these events.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import TYPE_CHECKING

from taskboard.core.errors import DragReconciliationError
from taskboard.core.models.enums import DragKind, DragOutcome

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator

log = logging.getLogger(__name__)


class DragPhase(Enum):
    IDLE = auto()
    DRAGGING_TASK = auto()
    HOVERING_COLUMN = auto()
    DRAGGING_COLUMN = auto()


@dataclass(frozen=True, slots=True)
class DragSession:
    """The one in-flight drag gesture."""

    kind: DragKind
    source_id: str
    source_column_id: str | None = None
    hover_column_id: str | None = None

    @property
    def phase(self) -> DragPhase:
        if self.kind is DragKind.COLUMN:
            return DragPhase.DRAGGING_COLUMN
        if self.hover_column_id is not None:
            return DragPhase.HOVERING_COLUMN
        return DragPhase.DRAGGING_TASK


@dataclass(frozen=True, slots=True)
class DragStart:
    kind: DragKind
    source_id: str
    source_column_id: str | None = None


@dataclass(frozen=True, slots=True)
class HoverColumn:
    column_id: str


@dataclass(frozen=True, slots=True)
class LeaveColumn:
    column_id: str | None = None


@dataclass(frozen=True, slots=True)
class Drop:
    target_column_id: str | None
    target_index: int | None = None


@dataclass(frozen=True, slots=True)
class Cancel:
    pass


@dataclass(frozen=True, slots=True)
class DragEnd:
    pass


type DragEvent = DragStart | HoverColumn | LeaveColumn | Drop | Cancel | DragEnd


@dataclass(frozen=True, slots=True)
class MoveTaskRequest:
    task_id: str
    from_column_id: str
    to_column_id: str
    target_index: int | None


@dataclass(frozen=True, slots=True)
class ReorderColumnsRequest:
    dragged_column_id: str
    target_column_id: str


type DragEffect = MoveTaskRequest | ReorderColumnsRequest


@dataclass(frozen=True, slots=True)
class DragTransition:
    session: DragSession | None
    outcome: DragOutcome
    effect: DragEffect | None = None
    error: DragReconciliationError | None = None


def _start(
    session: DragSession | None,
    event: DragStart,
    column_ids: Collection[str],
) -> DragTransition:
    if session is not None:
        return DragTransition(session, DragOutcome.REJECTED)
    if event.kind is DragKind.TASK:
        if event.source_column_id is None or event.source_column_id not in column_ids:
            error = DragReconciliationError(
                f"Task {event.source_id} has no source column",
                target_id=event.source_column_id,
            )
            return DragTransition(None, DragOutcome.REJECTED, error=error)
        return DragTransition(
            DragSession(DragKind.TASK, event.source_id, event.source_column_id),
            DragOutcome.STARTED,
        )
    if event.source_id not in column_ids:
        error = DragReconciliationError(
            f"Column {event.source_id} is not on the board", target_id=event.source_id
        )
        return DragTransition(None, DragOutcome.REJECTED, error=error)
    return DragTransition(DragSession(DragKind.COLUMN, event.source_id), DragOutcome.STARTED)


def _drop(session: DragSession, event: Drop, column_ids: Collection[str]) -> DragTransition:
    target = event.target_column_id
    if target is None or target not in column_ids:
        error = DragReconciliationError(
            f"Drop target {target!r} is not a column on the board", target_id=target
        )
        return DragTransition(None, DragOutcome.CANCELLED, error=error)

    if session.kind is DragKind.COLUMN:
        if target == session.source_id:
            return DragTransition(None, DragOutcome.CANCELLED)
        return DragTransition(
            None,
            DragOutcome.DROPPED,
            effect=ReorderColumnsRequest(session.source_id, target),
        )

    assert session.source_column_id is not None
    if target == session.source_column_id:
        return DragTransition(None, DragOutcome.CANCELLED)
    return DragTransition(
        None,
        DragOutcome.DROPPED,
        effect=MoveTaskRequest(
            task_id=session.source_id,
            from_column_id=session.source_column_id,
            to_column_id=target,
            target_index=event.target_index,
        ),
    )


def reduce_drag(
    session: DragSession | None,
    event: DragEvent,
    column_ids: Collection[str],
) -> DragTransition:
    """Feed one event to the drag machines.

    Every terminal transition (drop, cancel, drag-end, failed reconciliation)
    returns ``session=None``, which also clears the hover highlight.
    """
    match event:
        case DragStart():
            return _start(session, event, column_ids)
        case HoverColumn(column_id=column_id):
            if session is None or session.kind is not DragKind.TASK:
                return DragTransition(session, DragOutcome.IGNORED)
            if column_id not in column_ids or column_id == session.hover_column_id:
                return DragTransition(session, DragOutcome.IGNORED)
            return DragTransition(
                replace(session, hover_column_id=column_id), DragOutcome.HOVERED
            )
        case LeaveColumn(column_id=column_id):
            if session is None or session.hover_column_id is None:
                return DragTransition(session, DragOutcome.IGNORED)
            if column_id is not None and column_id != session.hover_column_id:
                return DragTransition(session, DragOutcome.IGNORED)
            return DragTransition(replace(session, hover_column_id=None), DragOutcome.HOVERED)
        case Drop():
            if session is None:
                return DragTransition(None, DragOutcome.IGNORED)
            return _drop(session, event, column_ids)
        case Cancel() | DragEnd():
            if session is None:
                return DragTransition(None, DragOutcome.IGNORED)
            return DragTransition(None, DragOutcome.CANCELLED)
    return DragTransition(session, DragOutcome.IGNORED)


class DragController:
    """Holds the single drag slot and runs events through :func:`reduce_drag`."""

    def __init__(self) -> None:
        self._session: DragSession | None = None

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def phase(self) -> DragPhase:
        return self._session.phase if self._session is not None else DragPhase.IDLE

    @property
    def hover_column_id(self) -> str | None:
        return self._session.hover_column_id if self._session is not None else None

    def dispatch(self, event: DragEvent, column_ids: Collection[str]) -> DragTransition:
        transition = reduce_drag(self._session, event, column_ids)
        self._session = transition.session
        if transition.error is not None:
            log.info("Drag cancelled: %s", transition.error)
        elif transition.outcome is DragOutcome.REJECTED:
            log.debug("Drag start rejected while another drag is active: %s", event)
        return transition

    def reset(self) -> None:
        self._session = None

    @contextmanager
    def released(self) -> Iterator[None]:
        """Guarantee the slot is empty when the block exits, however it exits."""
        try:
            yield
        finally:
            self._session = None


__all__ = [
    "Cancel",
    "DragController",
    "DragEffect",
    "DragEnd",
    "DragEvent",
    "DragPhase",
    "DragSession",
    "DragStart",
    "DragTransition",
    "Drop",
    "HoverColumn",
    "LeaveColumn",
    "MoveTaskRequest",
    "ReorderColumnsRequest",
    "reduce_drag",
]
