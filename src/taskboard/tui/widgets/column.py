"""KanbanColumn widget for displaying one board column."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import pairwise
from typing import TYPE_CHECKING

from textual.containers import Container, ScrollableContainer, Vertical
from textual.css.query import NoMatches
from textual.message import Message
from textual.reactive import var
from textual.widget import Widget
from textual.widgets import Label

from taskboard.tui.formatting import safe_dom_id
from taskboard.tui.widgets.card import TaskCard

if TYPE_CHECKING:
    from textual import events
    from textual.app import ComposeResult

    from taskboard.core.models.entities import Column, Task


class _NSLabel(Label):
    ALLOW_SELECT = False
    can_focus = False


class _NSVertical(Vertical):
    ALLOW_SELECT = False
    can_focus = False


class _NSContainer(Container):
    ALLOW_SELECT = False
    can_focus = False


class ColumnContent(ScrollableContainer, inherit_bindings=False):
    """Scrollable card list that reports its own scrolling."""

    ALLOW_SELECT = False
    can_focus = False

    @dataclass
    class Scrolled(Message):
        source_id: str

    def watch_scroll_y(self, old_value: float, new_value: float) -> None:
        super().watch_scroll_y(old_value, new_value)
        if old_value != new_value and self.id is not None:
            self.post_message(self.Scrolled(self.id))


class ColumnHeader(_NSVertical):
    @dataclass
    class DragStarted(Message):
        column_id: str

    def __init__(self, column_id: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self._column_id = column_id

    def on_mouse_down(self, event: events.MouseDown) -> None:
        if event.button == 1:
            event.stop()
            self.post_message(self.DragStarted(self._column_id))


class KanbanColumn(Widget):
    ALLOW_SELECT = False
    can_focus = False

    is_drop_target: var[bool] = var(False, toggle_class="-drop-target")

    @dataclass
    class Hovered(Message):
        column_id: str

    @dataclass
    class Left(Message):
        column_id: str

    @dataclass
    class Dropped(Message):
        column_id: str
        index: int | None

    def __init__(self, column: Column, **kwargs) -> None:
        super().__init__(id=safe_dom_id("column", column.id), **kwargs)
        self.column_id = column.id
        self._column = column

    @property
    def content_id(self) -> str:
        return safe_dom_id("content", self.column_id)

    @property
    def signature(self) -> tuple[str, str, str]:
        return (self._column.id, self._column.name, self._column.color)

    def compose(self) -> ComposeResult:
        with _NSVertical():
            with ColumnHeader(self.column_id, classes="column-header"):
                yield _NSLabel(
                    self._header_text(),
                    id=safe_dom_id("header", self.column_id),
                    classes="column-header-text",
                )
            with ColumnContent(classes="column-content", id=self.content_id):
                if self._column.tasks:
                    for task in self._column.tasks:
                        yield TaskCard(task)
                else:
                    with _NSContainer(classes="column-empty", id=safe_dom_id("empty", self.column_id)):
                        yield _NSLabel("No tasks", classes="empty-message")

    def on_mount(self) -> None:
        self.styles.border_top = ("heavy", self._column.color)

    def get_cards(self) -> list[TaskCard]:
        return list(self.query(TaskCard))

    def get_focused_card_index(self) -> int | None:
        for i, card in enumerate(self.get_cards()):
            if card.has_focus:
                return i
        return None

    def focus_card(self, index: int) -> bool:
        cards = self.get_cards()
        if not cards:
            return False
        cards[max(0, min(index, len(cards) - 1))].focus()
        return True

    def find_card(self, task_id: str) -> TaskCard | None:
        for card in self.get_cards():
            if card.task_model is not None and card.task_model.id == task_id:
                return card
        return None

    def drop_index_at(self, screen_y: int) -> int | None:
        """Visible index a drop at ``screen_y`` lands on; None appends."""
        for index, card in enumerate(self.get_cards()):
            region = card.region
            if screen_y < region.y + region.height // 2:
                return index
        return None

    def on_enter(self, event: events.Enter) -> None:
        del event
        self.post_message(self.Hovered(self.column_id))

    def on_leave(self, event: events.Leave) -> None:
        del event
        self.post_message(self.Left(self.column_id))

    def on_mouse_up(self, event: events.MouseUp) -> None:
        event.stop()
        self.post_message(self.Dropped(self.column_id, self.drop_index_at(event.screen_y)))

    def update_column(self, column: Column) -> None:
        """Update tasks with minimal DOM changes - no full recompose."""
        self._column = column
        new_tasks: tuple[Task, ...] = column.tasks

        try:
            header = self.query_one(f"#{safe_dom_id('header', self.column_id)}", _NSLabel)
            header.update(self._header_text())
        except NoMatches:
            pass

        current_cards = {card.task_model.id: card for card in self.get_cards() if card.task_model}
        new_tasks_by_id = {t.id: t for t in new_tasks}
        current_ids = set(current_cards)

        try:
            content = self.query_one(f"#{self.content_id}", ColumnContent)
        except NoMatches:
            return
        if not content.is_attached:
            return

        for task_id in current_ids - set(new_tasks_by_id):
            current_cards.pop(task_id).remove()

        for task_id in current_ids & set(new_tasks_by_id):
            current_cards[task_id].task_model = new_tasks_by_id[task_id]

        for task in new_tasks:
            if task.id not in current_cards:
                card = TaskCard(task)
                current_cards[task.id] = card
                content.mount(card)

        # Keep existing card widgets but make the visual order match the task order.
        ordered_cards = [current_cards[task.id] for task in new_tasks]
        attached_cards = [card for card in ordered_cards if card in content.children]
        if attached_cards:
            first_task_card = next(
                (child for child in content.children if isinstance(child, TaskCard)),
                None,
            )
            if first_task_card is not None and first_task_card is not attached_cards[0]:
                content.move_child(attached_cards[0], before=first_task_card)
            for previous, card in pairwise(attached_cards):
                content.move_child(card, after=previous)

        empty_id = safe_dom_id("empty", self.column_id)
        has_empty = False
        try:
            empty_container = self.query_one(f"#{empty_id}", _NSContainer)
            has_empty = True
            if new_tasks:
                empty_container.remove()
        except NoMatches:
            pass

        if not new_tasks and not has_empty:
            content.mount(
                _NSContainer(
                    _NSLabel("No tasks", classes="empty-message"),
                    classes="column-empty",
                    id=empty_id,
                )
            )

    def _header_text(self) -> str:
        return f"{self._column.name} ({len(self._column.tasks)})"
