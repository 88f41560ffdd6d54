"""Core domain enums."""

from __future__ import annotations

from enum import Enum, StrEnum, auto


class TaskPriority(StrEnum):
    """Task priority levels."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def label(self) -> str:
        """Short display label."""
        return {
            TaskPriority.LOW: "LOW",
            TaskPriority.MEDIUM: "MED",
            TaskPriority.HIGH: "HIGH",
            TaskPriority.URGENT: "URG",
        }[self]

    @property
    def css_class(self) -> str:
        """CSS class name for styling."""
        return self.value.lower()


class TaskType(StrEnum):
    """Kind of work item shown on a card."""

    TASK = "TASK"
    BUG = "BUG"

    def toggled(self) -> TaskType:
        """Return the other type (TASK <-> BUG)."""
        return TaskType.BUG if self is TaskType.TASK else TaskType.TASK


class DueBucket(StrEnum):
    """Relative due-date windows understood by the filter pipeline."""

    NONE = "none"
    OVERDUE = "overdue"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class DragKind(StrEnum):
    TASK = "task"
    COLUMN = "column"


class DragOutcome(Enum):
    """Result of feeding one event to the drag reducer."""

    STARTED = auto()
    HOVERED = auto()
    DROPPED = auto()
    CANCELLED = auto()
    REJECTED = auto()
    IGNORED = auto()


class QuickMenu(StrEnum):
    """Sub-menus of the quick-action overlay."""

    ASSIGN = "assign"
    DUE_DATE = "due_date"
    TAGS = "tags"


class ContextAction(StrEnum):
    """Actions offered by the card context menu."""

    TOGGLE_TYPE = "toggle_type"
    DELETE = "delete"


class NoticeSeverity(StrEnum):
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"
