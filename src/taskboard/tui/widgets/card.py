"""TaskCard widget for displaying a kanban task."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.reactive import reactive, var
from textual.widget import Widget
from textual.widgets import Label

from taskboard.constants import CARD_DESC_MAX_LENGTH, CARD_TITLE_LINE_WIDTH
from taskboard.core.models.enums import TaskType
from taskboard.tui.formatting import format_due, format_tags, safe_dom_id, truncate_text

if TYPE_CHECKING:
    from textual import events
    from textual.app import ComposeResult

    from taskboard.core.models.entities import Task


class TaskCard(Widget):
    """A card widget representing a single task on the board."""

    can_focus = True

    task_model: reactive[Task | None] = reactive(None)
    is_selected: var[bool] = var(False, toggle_class="-selected")
    is_dragging: var[bool] = var(False, toggle_class="-dragging")

    @dataclass
    class Activated(Message):
        task_id: str

    @dataclass
    class Hovered(Message):
        card: TaskCard

    @dataclass
    class Unhovered(Message):
        task_id: str

    @dataclass
    class DragStarted(Message):
        task_id: str

    @dataclass
    class ContextMenuRequested(Message):
        task_id: str

    def __init__(self, task: Task, **kwargs) -> None:
        super().__init__(id=safe_dom_id("card", task.id), **kwargs)
        self._title_label: Label | None = None
        self._task_id_label: Label | None = None
        self._description_label: Label | None = None
        self._meta_label: Label | None = None
        self._type_label: Label | None = None
        self._priority_label: Label | None = None
        self.task_model = task

    @property
    def task_id(self) -> str:
        assert self.task_model is not None
        return self.task_model.id

    def compose(self) -> ComposeResult:
        with Vertical():
            with Horizontal(classes="card-row"):
                self._title_label = Label("", classes="card-title")
                self._task_id_label = Label("", classes="card-id")
                yield self._title_label
                yield self._task_id_label

            with Horizontal(classes="card-row"):
                self._description_label = Label("", classes="card-desc")
                yield self._description_label

            with Horizontal(classes="card-row"):
                self._meta_label = Label("", classes="card-meta")
                yield self._meta_label

            with Horizontal(classes="card-row card-badge-row"):
                self._type_label = Label("", classes="card-badge card-badge-type")
                self._priority_label = Label("", classes="card-badge card-badge-priority")
                yield self._type_label
                yield Label("", classes="card-spacer")
                yield self._priority_label

    def on_mount(self) -> None:
        self._render_task_model()

    def on_click(self, event: events.Click) -> None:
        """Single-click focuses, double-click opens details."""
        if event.chain == 1:
            self.focus()
        elif event.chain >= 2 and self.task_model:
            self.post_message(self.Activated(self.task_model.id))

    def on_mouse_down(self, event: events.MouseDown) -> None:
        """Primary button starts a drag, secondary opens the context menu."""
        if self.task_model is None:
            return
        if event.button == 1:
            self.post_message(self.DragStarted(self.task_model.id))
        elif event.button == 3:
            event.stop()
            self.focus()
            self.post_message(self.ContextMenuRequested(self.task_model.id))

    def on_enter(self, event: events.Enter) -> None:
        del event
        self.post_message(self.Hovered(self))

    def on_leave(self, event: events.Leave) -> None:
        del event
        if self.task_model and not self.has_focus:
            self.post_message(self.Unhovered(self.task_model.id))

    def on_focus(self) -> None:
        self.post_message(self.Hovered(self))

    def on_blur(self) -> None:
        if self.task_model:
            self.post_message(self.Unhovered(self.task_model.id))

    def watch_task_model(self, task: Task | None) -> None:
        del task
        self._render_task_model()

    def _render_task_model(self) -> None:
        if self.task_model is None or not self._labels_ready():
            return

        assert self._title_label is not None
        assert self._task_id_label is not None
        assert self._description_label is not None
        assert self._meta_label is not None
        assert self._type_label is not None
        assert self._priority_label is not None

        task = self.task_model
        self._task_id_label.update(f"#{task.short_id}")
        self._title_label.update(truncate_text(task.title, CARD_TITLE_LINE_WIDTH))

        desc = task.description.strip()
        if desc:
            self._description_label.update(truncate_text(desc, CARD_DESC_MAX_LENGTH))
            self._description_label.remove_class("card-desc-empty")
        else:
            self._description_label.update("No description...")
            self._description_label.add_class("card-desc-empty")

        meta = [
            part
            for part in (
                format_due(task.due_date, date.today()),
                f"@{task.assignee_name or task.assignee_id}" if task.assignee_id else "",
                format_tags(task.tags),
                f"{task.comment_count}c" if task.comment_count else "",
                f"{task.attachment_count}a" if task.attachment_count else "",
            )
            if part
        ]
        self._meta_label.update(" ".join(meta))

        self._type_label.update(task.task_type.value)
        self.set_class(task.task_type is TaskType.BUG, "-bug")

        self._priority_label.update(task.priority.label)
        for css_class in ("low", "medium", "high", "urgent"):
            self._priority_label.remove_class(f"priority-{css_class}")
        self._priority_label.add_class(f"priority-{task.priority.css_class}")

    def _labels_ready(self) -> bool:
        return all(
            (
                self._title_label is not None,
                self._task_id_label is not None,
                self._description_label is not None,
                self._meta_label is not None,
                self._type_label is not None,
                self._priority_label is not None,
            )
        )
