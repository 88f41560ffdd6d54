"""Floating quick-action panel anchored next to the hovered card."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from textual.containers import Vertical
from textual.message import Message
from textual.widgets import Input, Label

from taskboard.core.models.enums import QuickMenu

if TYPE_CHECKING:
    from textual.app import ComposeResult

    from taskboard.core.models.entities import Task
    from taskboard.core.overlay import OverlayOpen

MENU_TITLES: dict[QuickMenu, str] = {
    QuickMenu.ASSIGN: "Assign to (id or id:Name, empty to unassign)",
    QuickMenu.DUE_DATE: "Due date (YYYY-MM-DD, empty to clear)",
    QuickMenu.TAGS: "Tags (comma separated)",
}


def initial_value(menu: QuickMenu, task: Task | None) -> str:
    if task is None:
        return ""
    match menu:
        case QuickMenu.ASSIGN:
            if task.assignee_id is None:
                return ""
            if task.assignee_name:
                return f"{task.assignee_id}:{task.assignee_name}"
            return task.assignee_id
        case QuickMenu.DUE_DATE:
            return task.due_date.isoformat() if task.due_date else ""
        case QuickMenu.TAGS:
            return ", ".join(sorted(task.tags))
    return ""


class QuickActionPanel(Vertical):
    """Shows one quick menu; hidden while the overlay is closed."""

    @dataclass
    class Submitted(Message):
        menu: QuickMenu
        value: str

    def __init__(self, **kwargs) -> None:
        super().__init__(id="quick-actions", **kwargs)
        self._menu: QuickMenu | None = None

    @property
    def menu(self) -> QuickMenu | None:
        return self._menu

    def compose(self) -> ComposeResult:
        yield Label("", id="quick-actions-title")
        yield Input(id="quick-actions-input")

    def on_mount(self) -> None:
        self.display = False

    def show(self, state: OverlayOpen, task: Task | None) -> None:
        self._menu = state.menu
        self.styles.offset = (int(state.position.left), int(state.position.top))
        self.query_one("#quick-actions-title", Label).update(MENU_TITLES[state.menu])
        field = self.query_one("#quick-actions-input", Input)
        field.value = initial_value(state.menu, task)
        self.display = True
        field.focus()

    def move_to(self, state: OverlayOpen) -> None:
        self.styles.offset = (int(state.position.left), int(state.position.top))

    def hide(self) -> None:
        self._menu = None
        self.display = False

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        if self._menu is not None:
            self.post_message(self.Submitted(self._menu, event.value))
