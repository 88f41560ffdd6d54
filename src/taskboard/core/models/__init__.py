"""Board domain models and enums."""

from taskboard.core.models.entities import Column, FilterCriteria, Task, TaskDraft, TaskPatch
from taskboard.core.models.enums import (
    ContextAction,
    DragKind,
    DragOutcome,
    DueBucket,
    NoticeSeverity,
    QuickMenu,
    TaskPriority,
    TaskType,
)

__all__ = [
    "Column",
    "ContextAction",
    "DragKind",
    "DragOutcome",
    "DueBucket",
    "FilterCriteria",
    "NoticeSeverity",
    "QuickMenu",
    "Task",
    "TaskDraft",
    "TaskPatch",
    "TaskPriority",
    "TaskType",
]
