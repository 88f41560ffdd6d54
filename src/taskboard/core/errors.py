"""Board error taxonomy.

Every error carries a machine-readable ``code``. None of them is fatal: the
controller either rejects the request before mutating (validation), cancels
quietly (not found, drag reconciliation) or rolls back and notifies
(persistence).
"""

from __future__ import annotations

from collections.abc import Iterable


class BoardError(Exception):
    """Base for board domain errors with a machine-readable code."""

    def __init__(self, message: str, *, code: str) -> None:
        super().__init__(message)
        self.code = code


class ValidationError(BoardError):
    """Raised before any mutation when user input is unacceptable."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_FAILED")
        self.field = field


class NotFoundError(BoardError):
    """Raised when an operation references something no longer on the board."""


class TaskNotFoundError(NotFoundError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} not found", code="TASK_NOT_FOUND")
        self.task_id = task_id


class ColumnNotFoundError(NotFoundError):
    def __init__(self, column_id: str) -> None:
        super().__init__(f"Column {column_id} not found", code="COLUMN_NOT_FOUND")
        self.column_id = column_id


class DuplicateTaskIdError(BoardError):
    """Raised when a task id occurs more than once where it must be unique."""

    def __init__(self, task_id: str, column_id: str) -> None:
        super().__init__(
            f"Task id {task_id} appears more than once in column {column_id}",
            code="DUPLICATE_TASK_ID",
        )
        self.task_id = task_id
        self.column_id = column_id


class PersistenceError(BoardError):
    """Raised by persistence adapters when a call fails."""

    def __init__(self, message: str, *, operation: str, task_id: str | None = None) -> None:
        super().__init__(message, code="PERSISTENCE_FAILED")
        self.operation = operation
        self.task_id = task_id


class BulkActionError(PersistenceError):
    """Aggregated failure of a bulk action; no task in the set was changed."""

    def __init__(self, action: str, failed_ids: Iterable[str], causes: Iterable[BaseException]):
        failed = tuple(failed_ids)
        super().__init__(
            f"{action} failed for {len(failed)} task(s)",
            operation=action,
        )
        self.failed_ids = failed
        self.causes = tuple(causes)


class TimerConflictError(BoardError):
    """Raised when a timer is started while another one is running."""

    def __init__(self, running_task_id: str) -> None:
        super().__init__(
            f"A timer is already running for task {running_task_id}", code="TIMER_CONFLICT"
        )
        self.running_task_id = running_task_id


class DragReconciliationError(BoardError):
    """Raised when a drop target does not resolve to a valid column."""

    def __init__(self, message: str, *, target_id: str | None = None) -> None:
        super().__init__(message, code="DRAG_RECONCILIATION_FAILED")
        self.target_id = target_id


__all__ = [
    "BoardError",
    "BulkActionError",
    "ColumnNotFoundError",
    "DragReconciliationError",
    "DuplicateTaskIdError",
    "NotFoundError",
    "PersistenceError",
    "TaskNotFoundError",
    "TimerConflictError",
    "ValidationError",
]
