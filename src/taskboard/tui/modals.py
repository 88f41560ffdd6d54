"""Modal screens for the board."""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label, OptionList, Static
from textual.widgets.option_list import Option

from taskboard.core.models.enums import ContextAction

if TYPE_CHECKING:
    from textual.app import ComposeResult

    from taskboard.core.models.entities import Task

CONTEXT_ACTION_LABELS: dict[ContextAction, str] = {
    ContextAction.TOGGLE_TYPE: "Toggle type (Task/Bug)",
    ContextAction.DELETE: "Delete task",
}


class TaskDetailsModal(ModalScreen[None]):
    BINDINGS = [
        Binding("escape", "dismiss_modal", "Close"),
        Binding("enter", "dismiss_modal", "Close", show=False),
    ]

    def __init__(self, task: Task) -> None:
        super().__init__()
        self._task_model = task

    def compose(self) -> ComposeResult:
        task = self._task_model
        lines = [
            f"[b]{task.title}[/b]  #{task.short_id}",
            f"{task.task_type.value} · {task.priority.value} · {task.status}",
            "",
            task.description or "[dim]No description[/dim]",
            "",
            f"Assignee: {task.assignee_name or task.assignee_id or 'Unassigned'}",
            f"Due: {task.due_date.isoformat() if task.due_date else '-'}",
            f"Tags: {', '.join(sorted(task.tags)) or '-'}",
            f"Comments: {task.comment_count}  Attachments: {task.attachment_count}",
        ]
        with Vertical(id="details-container", classes="modal-container"):
            yield Static("\n".join(lines), markup=True)

    def action_dismiss_modal(self) -> None:
        self.dismiss(None)


class NewTaskModal(ModalScreen[str | None]):
    """Asks for a title; dismisses with the raw text or None."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, column_name: str) -> None:
        super().__init__()
        self._column_name = column_name

    def compose(self) -> ComposeResult:
        with Vertical(id="new-task-container", classes="modal-container"):
            yield Label(f"New task in {self._column_name}")
            yield Input(placeholder="Title", id="new-task-title")

    def on_mount(self) -> None:
        self.query_one("#new-task-title", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss(None)


class ContextMenuModal(ModalScreen[ContextAction | None]):
    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, task_title: str, actions: tuple[ContextAction, ...]) -> None:
        super().__init__()
        self._task_title = task_title
        self._actions = actions

    def compose(self) -> ComposeResult:
        with Vertical(id="context-menu-container", classes="modal-container"):
            yield Label(self._task_title)
            yield OptionList(
                *(Option(CONTEXT_ACTION_LABELS[action], id=action.value) for action in self._actions),
                id="context-menu-options",
            )

    def on_mount(self) -> None:
        self.query_one("#context-menu-options", OptionList).focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        option_id = event.option.id
        self.dismiss(ContextAction(option_id) if option_id else None)

    def action_cancel(self) -> None:
        self.dismiss(None)
