"""Board widgets."""

from taskboard.tui.widgets.card import TaskCard
from taskboard.tui.widgets.column import KanbanColumn
from taskboard.tui.widgets.quick_actions import QuickActionPanel

__all__ = ["KanbanColumn", "QuickActionPanel", "TaskCard"]
