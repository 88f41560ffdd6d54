"""Main board screen.

The screen owns no board rules. It turns keys, clicks and pointer movement
into :class:`BoardController` calls and re-renders from the events the
controller publishes.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from textual.containers import Horizontal
from textual.screen import Screen
from textual.widgets import Footer, Input

from taskboard.core.errors import ValidationError
from taskboard.core.events import OverlayChanged
from taskboard.core.models.entities import TaskDraft, TaskPatch
from taskboard.core.models.enums import ContextAction, DragKind, QuickMenu, TaskPriority
from taskboard.core.overlay import Rect, Viewport
from taskboard.core.shortcuts import KeyPress
from taskboard.tui.keybindings import BOARD_BINDINGS
from taskboard.tui.modals import ContextMenuModal, NewTaskModal, TaskDetailsModal
from taskboard.tui.widgets.card import TaskCard
from taskboard.tui.widgets.column import ColumnContent, ColumnHeader, KanbanColumn
from taskboard.tui.widgets.quick_actions import QuickActionPanel

if TYPE_CHECKING:
    from textual import events
    from textual.app import ComposeResult

    from taskboard.core.board import BoardController
    from taskboard.core.events import DomainEvent, EventHandler
    from taskboard.core.models.entities import Column

log = logging.getLogger(__name__)


class BoardScreen(Screen):
    BINDINGS = BOARD_BINDINGS
    # Cards take focus once the first load lands.
    AUTO_FOCUS = None

    def __init__(self, board: BoardController) -> None:
        super().__init__()
        self.board = board
        self._handlers: list[EventHandler] = []
        self._refresh_scheduled = False
        self._refocus_task_id: str | None = None
        self._overlay_task_id: str | None = None
        self._column_target: str | None = None

    def compose(self) -> ComposeResult:
        yield Input(placeholder="Filter tasks...", id="filter-input")
        with Horizontal(id="board-columns"):
            for column in self.board.columns:
                yield KanbanColumn(column)
        yield QuickActionPanel()
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#filter-input", Input).display = False
        self._handlers = [
            self.board.on_columns_changed(self._on_columns_changed),
            self.board.on_selection_changed(self._on_selection_changed),
            self.board.on_task_activated(self._on_task_activated),
        ]
        overlay_handler = self._on_overlay_changed
        self.board.events.add_handler(overlay_handler, OverlayChanged)
        self._handlers.append(overlay_handler)
        self.call_after_refresh(self._focus_first_card)

    def on_unmount(self) -> None:
        for handler in self._handlers:
            self.board.events.remove_handler(handler)
        self._handlers.clear()

    # ── board events ───────────────────────────────────────────────────

    def _on_columns_changed(self, columns: tuple[Column, ...]) -> None:
        del columns
        if not self._refresh_scheduled:
            self._refresh_scheduled = True
            self.call_later(self._refresh_columns)

    def _on_selection_changed(self, selected: frozenset[str]) -> None:
        del selected
        self._sync_card_state()

    def _on_task_activated(self, task_id: str) -> None:
        task = self.board.get_task(task_id)
        if task is not None:
            self.app.push_screen(TaskDetailsModal(task))

    def _on_overlay_changed(self, event: DomainEvent) -> None:
        assert isinstance(event, OverlayChanged)
        panel = self.query_one(QuickActionPanel)
        state = event.state
        if state is None:
            was_open = panel.menu is not None
            panel.hide()
            if was_open:
                self._focus_task(self._overlay_task_id)
            return
        if panel.display and panel.menu is state.menu:
            panel.move_to(state)
            return
        self._overlay_task_id = state.anchor_task_id
        panel.show(state, self.board.get_task(state.anchor_task_id))

    async def _refresh_columns(self) -> None:
        self._refresh_scheduled = False
        columns = self.board.columns
        container = self.query_one("#board-columns", Horizontal)
        widgets = list(container.query(KanbanColumn))
        wanted = [(column.id, column.name, column.color) for column in columns]
        if [widget.signature for widget in widgets] != wanted:
            await container.remove_children()
            await container.mount_all([KanbanColumn(column) for column in columns])
        else:
            for widget, column in zip(widgets, columns, strict=True):
                widget.update_column(column)
        self._sync_card_state()
        task_id, self._refocus_task_id = self._refocus_task_id, None
        if self.board.overlay.is_open:
            return
        if task_id is not None:
            self.call_after_refresh(self._focus_task, task_id)
        elif self.focused is None:
            self.call_after_refresh(self._focus_first_card)

    def _sync_card_state(self) -> None:
        session = self.board.drag.session
        dragged = session.source_id if session is not None and session.kind is DragKind.TASK else None
        for card in self.query(TaskCard):
            if card.task_model is None:
                continue
            card.is_selected = card.task_model.id in self.board.selection
            card.is_dragging = card.task_model.id == dragged
        hover = self.board.drag.hover_column_id
        if session is not None and session.kind is DragKind.COLUMN:
            hover = self._column_target
        for column in self.query(KanbanColumn):
            column.is_drop_target = column.column_id == hover

    # ── helpers ────────────────────────────────────────────────────────

    def _viewport(self) -> Viewport:
        return Viewport(self.size.width, self.size.height)

    def _column_widgets(self) -> list[KanbanColumn]:
        return list(self.query(KanbanColumn))

    def _column_widget(self, column_id: str) -> KanbanColumn | None:
        for column in self._column_widgets():
            if column.column_id == column_id:
                return column
        return None

    def _focused_card(self) -> TaskCard | None:
        focused = self.focused
        if isinstance(focused, TaskCard) and focused.task_model is not None:
            return focused
        return None

    def _focused_task_id(self) -> str | None:
        card = self._focused_card()
        return card.task_model.id if card is not None and card.task_model else None

    def _current_column_id(self) -> str | None:
        card = self._focused_card()
        if card is not None and card.task_model is not None:
            return card.task_model.status
        columns = self.board.columns
        return columns[0].id if columns else None

    def _neighbor_column_id(self, column_id: str | None, step: int) -> str | None:
        ids = [column.id for column in self.board.columns]
        if column_id not in ids:
            return None
        index = ids.index(column_id) + step
        return ids[index] if 0 <= index < len(ids) else None

    def _focus_first_card(self) -> None:
        for column in self._column_widgets():
            if column.focus_card(0):
                return

    def _focus_task(self, task_id: str | None) -> None:
        if task_id is None:
            return
        for column in self._column_widgets():
            card = column.find_card(task_id)
            if card is not None:
                card.focus()
                return

    def _card_rect(self, card: TaskCard) -> Rect:
        region = card.region
        return Rect.from_size(region.x, region.y, region.width, region.height)

    # ── hover and quick actions ────────────────────────────────────────

    def on_task_card_hovered(self, message: TaskCard.Hovered) -> None:
        card = message.card
        if card.task_model is None:
            return
        column = self._column_widget(card.task_model.status)
        self.board.hover_task(
            card.task_model.id,
            self._card_rect(card),
            scroll_ancestors=(column.content_id,) if column is not None else (),
        )

    def on_task_card_unhovered(self, message: TaskCard.Unhovered) -> None:
        if self._focused_task_id() != message.task_id:
            self.board.unhover_task(message.task_id)

    def on_key(self, event: events.Key) -> None:
        *modifiers, key = event.key.split("+")
        press = KeyPress(
            key=key,
            ctrl="ctrl" in modifiers,
            alt="alt" in modifiers,
            meta="meta" in modifiers or "super" in modifiers,
            shift="shift" in modifiers,
            in_text_input=isinstance(self.focused, Input),
        )
        if self.board.handle_key(press, self._viewport()) is not None:
            event.stop()
            event.prevent_default()

    def on_column_content_scrolled(self, message: ColumnContent.Scrolled) -> None:
        anchor_id = self.board.overlay.anchor_task_id
        if anchor_id is None:
            return
        for column in self._column_widgets():
            card = column.find_card(anchor_id)
            if card is not None:
                self.board.scroll(message.source_id, self._card_rect(card), self._viewport())
                return

    async def on_quick_action_panel_submitted(self, message: QuickActionPanel.Submitted) -> None:
        value = message.value.strip()
        match message.menu:
            case QuickMenu.ASSIGN:
                if not value:
                    await self.board.quick_assign(None)
                else:
                    assignee_id, _, name = value.partition(":")
                    await self.board.quick_assign(assignee_id.strip(), name.strip() or None)
            case QuickMenu.DUE_DATE:
                if not value:
                    await self.board.quick_set_due_date(None)
                    return
                try:
                    due = date.fromisoformat(value)
                except ValueError:
                    self.notify(f"Not a date: {value}", severity="error")
                    return
                await self.board.quick_set_due_date(due)
            case QuickMenu.TAGS:
                await self.board.quick_set_tags(value.split(","))

    # ── pointer drag and drop ──────────────────────────────────────────

    def on_task_card_drag_started(self, message: TaskCard.DragStarted) -> None:
        if self.board.start_task_drag(message.task_id):
            self._sync_card_state()

    def on_column_header_drag_started(self, message: ColumnHeader.DragStarted) -> None:
        if self.board.start_column_drag(message.column_id):
            self._column_target = message.column_id
            self._sync_card_state()

    def on_kanban_column_hovered(self, message: KanbanColumn.Hovered) -> None:
        session = self.board.drag.session
        if session is None:
            return
        if session.kind is DragKind.COLUMN:
            self._column_target = message.column_id
        else:
            self.board.hover_column(message.column_id)
        self._sync_card_state()

    def on_kanban_column_left(self, message: KanbanColumn.Left) -> None:
        if self.board.drag.is_active:
            self.board.leave_column(message.column_id)
            self._sync_card_state()

    async def on_kanban_column_dropped(self, message: KanbanColumn.Dropped) -> None:
        if not self.board.drag.is_active:
            return
        self._refocus_task_id = self._focused_task_id()
        await self.board.drop(message.column_id, message.index)
        self._column_target = None
        self._sync_card_state()

    def on_mouse_up(self, event: events.MouseUp) -> None:
        del event
        if self.board.drag.is_active:
            self.board.end_drag()
            self._column_target = None
            self._sync_card_state()

    # ── keyboard actions ───────────────────────────────────────────────

    def _move_focus(self, step: int) -> None:
        columns = self._column_widgets()
        card = self._focused_card()
        if card is None:
            self._focus_first_card()
            return
        current = self._column_widget(card.task_model.status) if card.task_model else None
        if current is None:
            return
        index = current.get_focused_card_index() or 0
        position = columns.index(current) + step
        while 0 <= position < len(columns):
            if columns[position].focus_card(index):
                return
            position += step

    def _drag_step(self, step: int) -> None:
        session = self.board.drag.session
        if session is None:
            return
        if session.kind is DragKind.COLUMN:
            self._column_target = self._neighbor_column_id(self._column_target, step) or self._column_target
        else:
            origin = self.board.drag.hover_column_id or session.source_column_id
            target = self._neighbor_column_id(origin, step)
            if target is not None:
                self.board.hover_column(target)
        self._sync_card_state()

    def action_focus_left(self) -> None:
        if self.board.drag.is_active:
            self._drag_step(-1)
        else:
            self._move_focus(-1)

    def action_focus_right(self) -> None:
        if self.board.drag.is_active:
            self._drag_step(1)
        else:
            self._move_focus(1)

    def _step_within_column(self, step: int) -> None:
        card = self._focused_card()
        if card is None or card.task_model is None:
            self._focus_first_card()
            return
        column = self._column_widget(card.task_model.status)
        if column is not None:
            column.focus_card((column.get_focused_card_index() or 0) + step)

    def action_focus_up(self) -> None:
        self._step_within_column(-1)

    def action_focus_down(self) -> None:
        self._step_within_column(1)

    def action_grab_task(self) -> None:
        task_id = self._focused_task_id()
        if task_id is not None and self.board.start_task_drag(task_id):
            self.notify("Dragging: ←/→ to pick a column, Enter to drop, Esc to cancel")
            self._sync_card_state()

    def action_grab_column(self) -> None:
        column_id = self._current_column_id()
        if column_id is not None and self.board.start_column_drag(column_id):
            self._column_target = column_id
            self.notify("Moving column: ←/→ to pick a spot, Enter to drop, Esc to cancel")
            self._sync_card_state()

    async def action_activate(self) -> None:
        session = self.board.drag.session
        if session is not None:
            self._refocus_task_id = self._focused_task_id()
            target = (
                self._column_target
                if session.kind is DragKind.COLUMN
                else self.board.drag.hover_column_id
            )
            await self.board.drop(target)
            self._column_target = None
            self._sync_card_state()
            return
        task_id = self._focused_task_id()
        if task_id is not None:
            self.board.activate_task(task_id)

    def action_escape(self) -> None:
        if self.board.overlay.is_open:
            self.board.close_overlay()
            return
        if self.board.drag.is_active:
            self.board.cancel_drag()
            self._column_target = None
            self._sync_card_state()
            return
        search = self.query_one("#filter-input", Input)
        if search.display:
            search.value = ""
            search.display = False
            self.board.clear_filters()
            self._focus_first_card()
            return
        self.board.clear_selection()

    def action_toggle_search(self) -> None:
        search = self.query_one("#filter-input", Input)
        search.display = not search.display
        if search.display:
            search.focus()
        else:
            self._focus_first_card()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "filter-input":
            self.board.update_filter(text=event.value or None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "filter-input":
            event.stop()
            self._focus_first_card()

    def action_toggle_select(self) -> None:
        task_id = self._focused_task_id()
        if task_id is not None:
            self.board.toggle_selection(task_id)

    def action_select_all(self) -> None:
        self.board.select_all()

    async def _move_focused(self, step: int) -> None:
        card = self._focused_card()
        if card is None or card.task_model is None:
            return
        target = self._neighbor_column_id(card.task_model.status, step)
        if target is None:
            return
        self._refocus_task_id = card.task_model.id
        await self.board.move_task(card.task_model.id, target)

    async def action_move_left(self) -> None:
        await self._move_focused(-1)

    async def action_move_right(self) -> None:
        await self._move_focused(1)

    async def _bulk_move(self, step: int) -> None:
        if self.board.selection.is_empty:
            self.notify("Select tasks first (space)", severity="warning")
            return
        target = self._neighbor_column_id(self._current_column_id(), step)
        if target is None:
            return
        await self.board.bulk_move(target)

    async def action_bulk_move_left(self) -> None:
        await self._bulk_move(-1)

    async def action_bulk_move_right(self) -> None:
        await self._bulk_move(1)

    async def action_set_priority(self, priority: str) -> None:
        value = TaskPriority(priority)
        if not self.board.selection.is_empty:
            await self.board.bulk_set_priority(value)
            return
        task_id = self._focused_task_id()
        if task_id is not None:
            self._refocus_task_id = task_id
            await self.board.update_task(task_id, TaskPatch(priority=value))

    async def action_toggle_type(self) -> None:
        task_id = self._focused_task_id()
        if task_id is not None:
            self._refocus_task_id = task_id
            await self.board.toggle_task_type(task_id)

    async def action_delete_task(self) -> None:
        task_id = self._focused_task_id()
        if task_id is not None:
            self._refocus_task_id = None
            await self.board.delete_task(task_id)
            self.call_after_refresh(self._focus_first_card)

    def action_context_menu(self) -> None:
        task_id = self._focused_task_id()
        if task_id is not None:
            self._open_context_menu(task_id)

    def on_task_card_context_menu_requested(self, message: TaskCard.ContextMenuRequested) -> None:
        self._open_context_menu(message.task_id)

    def _open_context_menu(self, task_id: str) -> None:
        task = self.board.get_task(task_id)
        if task is None:
            return
        actions = self.board.context_menu_actions(task.id)

        async def run(action: ContextAction | None) -> None:
            if action is not None:
                self._refocus_task_id = task.id if action is ContextAction.TOGGLE_TYPE else None
                await self.board.run_context_action(task.id, action)

        self.app.push_screen(ContextMenuModal(task.title, actions), run)

    def action_new_task(self) -> None:
        column_id = self._current_column_id()
        if column_id is None:
            return
        try:
            column_name = next(c.name for c in self.board.columns if c.id == column_id)
        except StopIteration:
            column_name = column_id

        async def create(title: str | None) -> None:
            if title is None:
                return
            try:
                task = await self.board.create_task(TaskDraft(title=title, status=column_id))
            except ValidationError as exc:
                self.notify(str(exc), severity="error")
                return
            if task is not None:
                self._refocus_task_id = task.id

        self.app.push_screen(NewTaskModal(column_name), create)

