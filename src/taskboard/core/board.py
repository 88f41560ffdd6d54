"""Board controller: the in-memory board model and its mutation rules.

The controller keeps two layouts. ``confirmed`` is what persistence has
acknowledged, plus memory-only column metadata. The local layout is
``confirmed`` with every still-pending optimistic mutation replayed on top.
When a persistence call fails, only its own mutation is dropped from the
pending list and the view is recomputed. Concurrent operations that did
succeed are kept.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from taskboard.constants import DEFAULT_COLUMNS, DONE_COLUMN_ID, NOTIFICATION_TITLE_MAX_LENGTH
from taskboard.core import columns as column_model
from taskboard.core.drag import (
    Cancel,
    DragController,
    DragEnd,
    DragStart,
    DragTransition,
    Drop,
    HoverColumn,
    LeaveColumn,
    MoveTaskRequest,
    ReorderColumnsRequest,
)
from taskboard.core.errors import (
    BoardError,
    BulkActionError,
    ColumnNotFoundError,
    DuplicateTaskIdError,
    NotFoundError,
    PersistenceError,
    TaskNotFoundError,
    ValidationError,
)
from taskboard.core.events import (
    BoardNotice,
    ColumnsChanged,
    InMemoryEventBus,
    OverlayChanged,
    SelectionChanged,
    TaskActivated,
)
from taskboard.core.models.entities import Column, FilterCriteria, Task, TaskDraft, TaskPatch
from taskboard.core.models.enums import (
    ContextAction,
    DragKind,
    DragOutcome,
    NoticeSeverity,
    TaskType,
)
from taskboard.core.overlay import OverlaySize, QuickActionOverlay
from taskboard.core.persistence import format_channel_message
from taskboard.core.selection import BulkActionResult, SelectionManager
from taskboard.core.shortcuts import CONTEXT_MENU_ACTIONS, resolve_shortcut

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import date

    from taskboard.config import BoardConfig
    from taskboard.core.columns import Layout
    from taskboard.core.events import EventHandler
    from taskboard.core.models.enums import QuickMenu, TaskPriority
    from taskboard.core.overlay import OverlayState, Rect, Viewport
    from taskboard.core.persistence import ChannelNotifier, PersistenceAdapter
    from taskboard.core.shortcuts import KeyPress

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Pending:
    token: int
    label: str
    apply: Callable[[Layout], Layout]


@dataclass(frozen=True, slots=True)
class _Hover:
    task_id: str
    anchor: Rect
    scroll_ancestors: tuple[str, ...]


def _confirm_task(layout: Layout, task: Task) -> Layout:
    """Fold the persisted version of ``task`` into ``layout`` if it is still there."""
    if column_model.find_task(layout, task.id) is None:
        return layout
    return column_model.replace_task(layout, task)


def _short_title(task: Task) -> str:
    return task.title[:NOTIFICATION_TITLE_MAX_LENGTH]


class BoardController:
    """Owns one project's board: columns, filter, drag, selection, overlay."""

    def __init__(
        self,
        adapter: PersistenceAdapter,
        *,
        columns: Sequence[Column] | None = None,
        event_bus: InMemoryEventBus | None = None,
        notifier: ChannelNotifier | None = None,
        clock: Callable[[], datetime] = datetime.now,
        done_column_id: str = DONE_COLUMN_ID,
        overlay_size: OverlaySize | None = None,
        notify_on_move: bool = True,
    ) -> None:
        self._adapter = adapter
        self._notifier = notifier
        self._bus = event_bus or InMemoryEventBus()
        self._clock = clock
        self._done_column_id = done_column_id
        self._notify_on_move = notify_on_move

        base = tuple(columns) if columns is not None else column_model.make_columns(DEFAULT_COLUMNS)
        self._base_columns: Layout = tuple(column.model_copy(update={"tasks": ()}) for column in base)
        self._confirmed: Layout = self._base_columns
        self._pending: list[_Pending] = []
        self._tokens = itertools.count(1)
        self._layout: Layout = self._confirmed
        self._view: Layout = self._confirmed
        self._criteria = FilterCriteria()
        self._project_id: str | None = None
        self._load_generation = 0

        self._drag = DragController()
        self._selection = SelectionManager(on_change=self._on_selection_changed)
        self._overlay = QuickActionOverlay(overlay_size)
        self._hovered: _Hover | None = None

    @classmethod
    def from_config(
        cls,
        config: BoardConfig,
        adapter: PersistenceAdapter,
        **kwargs: Any,
    ) -> BoardController:
        options: dict[str, Any] = {
            "columns": config.board.build_columns(),
            "done_column_id": config.board.done_column_id,
            "overlay_size": config.overlay.to_size(),
            "notify_on_move": config.ui.notify_on_move,
        }
        options.update(kwargs)
        return cls(adapter, **options)

    # ── read-only views ────────────────────────────────────────────────

    @property
    def events(self) -> InMemoryEventBus:
        return self._bus

    @property
    def project_id(self) -> str | None:
        return self._project_id

    @property
    def columns(self) -> Layout:
        """Visible (filtered) columns, in display order."""
        return self._view

    @property
    def layout(self) -> Layout:
        """All columns with every task, pending mutations included."""
        return self._layout

    @property
    def confirmed_layout(self) -> Layout:
        return self._confirmed

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def selection(self) -> SelectionManager:
        return self._selection

    @property
    def drag(self) -> DragController:
        return self._drag

    @property
    def overlay(self) -> QuickActionOverlay:
        return self._overlay

    @property
    def hovered_task_id(self) -> str | None:
        return self._hovered.task_id if self._hovered is not None else None

    def tasks(self) -> list[Task]:
        return column_model.all_tasks(self._layout)

    def get_task(self, task_id: str) -> Task | None:
        found = column_model.find_task(self._layout, task_id)
        return found[2] if found is not None else None

    def visible_task_ids(self) -> tuple[str, ...]:
        return tuple(task.id for column in self._view for task in column.tasks)

    def column_ids(self) -> tuple[str, ...]:
        return column_model.column_ids(self._layout)

    # ── event plumbing ─────────────────────────────────────────────────

    def on_columns_changed(self, callback: Callable[[tuple[Column, ...]], None]) -> EventHandler:
        def handler(event: object) -> None:
            assert isinstance(event, ColumnsChanged)
            callback(event.columns)

        self._bus.add_handler(handler, ColumnsChanged)
        return handler

    def on_selection_changed(self, callback: Callable[[frozenset[str]], None]) -> EventHandler:
        def handler(event: object) -> None:
            assert isinstance(event, SelectionChanged)
            callback(event.selected_ids)

        self._bus.add_handler(handler, SelectionChanged)
        return handler

    def on_task_activated(self, callback: Callable[[str], None]) -> EventHandler:
        def handler(event: object) -> None:
            assert isinstance(event, TaskActivated)
            callback(event.task_id)

        self._bus.add_handler(handler, TaskActivated)
        return handler

    def _on_selection_changed(self, selected: frozenset[str]) -> None:
        self._bus.emit(SelectionChanged(selected))

    def _notify(self, message: str, severity: NoticeSeverity = NoticeSeverity.INFORMATION) -> None:
        self._bus.emit(BoardNotice(message, severity))

    def _emit_overlay(self, state: OverlayState) -> None:
        self._bus.emit(OverlayChanged(state))

    # ── layout bookkeeping ─────────────────────────────────────────────

    def _recompute(self) -> None:
        layout = self._confirmed
        for pending in self._pending:
            try:
                layout = pending.apply(layout)
            except BoardError as exc:
                log.warning("Pending mutation %r no longer applies: %s", pending.label, exc)
        self._layout = layout
        view = column_model.distribute(
            column_model.all_tasks(layout),
            self._criteria,
            layout,
            now=self._clock(),
            done_column_id=self._done_column_id,
        )
        if view == self._view:
            return
        self._view = view
        self._bus.emit(ColumnsChanged(view))

    def _push(self, label: str, apply: Callable[[Layout], Layout]) -> _Pending:
        pending = _Pending(next(self._tokens), label, apply)
        self._pending.append(pending)
        self._recompute()
        return pending

    def _settle(self, pending: _Pending, confirm: Callable[[Layout], Layout] | None) -> None:
        """Retire a pending mutation, folding ``confirm`` into the confirmed layout."""
        if pending not in self._pending:
            # The board was reloaded while the call was in flight.
            return
        self._pending.remove(pending)
        if confirm is not None:
            try:
                self._confirmed = confirm(self._confirmed)
            except BoardError as exc:
                log.warning("Could not fold confirmed %r: %s", pending.label, exc)
        self._recompute()

    def _rollback(self, pending: _Pending, exc: PersistenceError, message: str) -> None:
        log.warning("Rolling back %r: %s", pending.label, exc)
        self._settle(pending, None)
        self._notify(message, NoticeSeverity.ERROR)

    def refresh(self) -> None:
        """Re-derive the view, e.g. after the clock crossed midnight."""
        self._recompute()

    # ── loading ────────────────────────────────────────────────────────

    async def load(self, project_id: str) -> bool:
        """Replace the board with ``project_id``'s tasks from persistence."""
        self._load_generation += 1
        generation = self._load_generation
        try:
            tasks = await self._adapter.list_tasks(project_id)
        except PersistenceError as exc:
            log.warning("Loading project %s failed: %s", project_id, exc)
            self._notify("Could not load tasks", NoticeSeverity.ERROR)
            return False
        if generation != self._load_generation:
            log.debug("Discarding stale load of project %s", project_id)
            return False

        if project_id != self._project_id:
            self._confirmed = self._base_columns
            self._criteria = FilterCriteria()
            self._drag.reset()
            self._hovered = None
            if self._overlay.close():
                self._emit_overlay(None)
            self._selection.clear()
        self._project_id = project_id
        self._pending.clear()

        empty_columns = tuple(column.model_copy(update={"tasks": ()}) for column in self._confirmed)
        self._confirmed = column_model.build_layout(tasks, empty_columns)
        duplicates = column_model.duplicate_task_ids(self._confirmed)
        if duplicates:
            log.warning("Project %s has duplicate task ids: %s", project_id, sorted(duplicates))
            self._notify(
                f"{len(duplicates)} task id(s) appear more than once; moves of them are disabled",
                NoticeSeverity.WARNING,
            )
        self._selection.prune({task.id for task in tasks})
        self._recompute()
        log.info("Loaded %d task(s) for project %s", len(tasks), project_id)
        return True

    # ── filtering ──────────────────────────────────────────────────────

    def set_filter(self, criteria: FilterCriteria) -> None:
        if criteria == self._criteria:
            return
        self._criteria = criteria
        self._recompute()

    def update_filter(self, **changes: Any) -> None:
        self.set_filter(self._criteria.with_changes(**changes))

    def clear_filters(self) -> None:
        self.set_filter(FilterCriteria())

    # ── task mutations ─────────────────────────────────────────────────

    async def create_task(self, draft: TaskDraft) -> Task | None:
        title = draft.title.strip()
        if not title:
            raise ValidationError("Task title cannot be empty", field="title")
        status = draft.status or (self.column_ids()[0] if self.column_ids() else None)
        if status is None or status not in self.column_ids():
            raise ValidationError(f"Unknown column {status!r}", field="status")
        updates: dict[str, Any] = {"title": title, "status": status}
        if "project_id" not in draft.model_fields_set and self._project_id is not None:
            updates["project_id"] = self._project_id
        draft = draft.model_copy(update=updates)

        try:
            task = await self._adapter.create_task(draft)
        except PersistenceError as exc:
            log.warning("Creating task %r failed: %s", title, exc)
            self._notify("Could not create task", NoticeSeverity.ERROR)
            return None
        try:
            self._confirmed = column_model.insert_task(self._confirmed, task)
        except DuplicateTaskIdError as exc:
            log.error("Persistence issued an id already on the board: %s", exc)
            self._notify(f"Task id {task.id} is already on the board", NoticeSeverity.ERROR)
            return None
        self._recompute()
        return task

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task | None:
        if patch.title is not None and not patch.title.strip():
            raise ValidationError("Task title cannot be empty", field="title")
        if self.get_task(task_id) is None:
            log.info("Update of %s cancelled: task is no longer on the board", task_id)
            return None
        if patch.status is not None and patch.status not in self.column_ids():
            log.info("Update of %s cancelled: column %s does not exist", task_id, patch.status)
            return None

        def apply(layout: Layout) -> Layout:
            found = column_model.find_task(layout, task_id)
            if found is None:
                raise TaskNotFoundError(task_id)
            return column_model.replace_task(layout, found[2].apply(patch))

        pending = self._push(f"update {task_id}", apply)
        try:
            updated = await self._adapter.update_task(task_id, patch)
        except NotFoundError as exc:
            log.info("Update of %s cancelled: %s", task_id, exc)
            self._settle(pending, None)
            return None
        except PersistenceError as exc:
            self._rollback(pending, exc, "Could not save task changes")
            return None
        except BaseException:
            self._settle(pending, None)
            raise
        self._settle(pending, lambda layout: _confirm_task(apply(layout), updated))
        return updated

    async def move_task(
        self,
        task_id: str,
        to_column_id: str,
        target_index: int | None = None,
        *,
        from_column_id: str | None = None,
    ) -> bool:
        """Move a task to ``target_index`` of the visible ``to_column_id``.

        ``target_index`` counts visible cards, so a drop between two cards of
        a filtered column lands between the same two cards of the full one.
        """
        found = column_model.find_task(self._layout, task_id)
        if found is None:
            log.info("Move of %s cancelled: task is no longer on the board", task_id)
            return False
        source = found[0]
        if from_column_id is not None and from_column_id != source.id:
            log.info(
                "Move of %s cancelled: expected it in %s, found it in %s",
                task_id,
                from_column_id,
                source.id,
            )
            return False
        try:
            target_full = column_model.find_column(self._layout, to_column_id)
            target_view = column_model.find_column(self._view, to_column_id)
        except ColumnNotFoundError as exc:
            log.info("Move of %s cancelled: %s", task_id, exc)
            return False

        index = column_model.resolve_insert_index(
            target_full,
            target_view.task_ids,
            target_index,
            moving_task_id=task_id,
        )
        try:
            preview = column_model.move_task(self._layout, task_id, source.id, to_column_id, index)
        except DuplicateTaskIdError as exc:
            log.error("Move refused: %s", exc)
            self._notify(str(exc), NoticeSeverity.ERROR)
            return False
        if preview is self._layout:
            return False

        def apply(layout: Layout) -> Layout:
            current = column_model.find_task(layout, task_id)
            if current is None:
                raise TaskNotFoundError(task_id)
            return column_model.move_task(layout, task_id, current[0].id, to_column_id, index)

        pending = self._push(f"move {task_id}", apply)
        task = found[2]
        if source.id == to_column_id:
            # Order inside a column is memory-only.
            self._settle(pending, apply)
            return True

        if self._notify_on_move:
            self._notify(f'Task "{_short_title(task)}" moved to {target_full.name}')
        try:
            updated = await self._adapter.update_task(task_id, TaskPatch(status=to_column_id))
        except NotFoundError as exc:
            log.info("Move of %s cancelled: %s", task_id, exc)
            self._settle(pending, None)
            return False
        except PersistenceError as exc:
            self._rollback(pending, exc, f'Could not move "{_short_title(task)}"')
            return False
        except BaseException:
            self._settle(pending, None)
            raise
        self._settle(pending, lambda layout: _confirm_task(apply(layout), updated))
        return True

    async def delete_task(self, task_id: str) -> bool:
        task = self.get_task(task_id)
        if task is None:
            log.info("Delete of %s cancelled: task is no longer on the board", task_id)
            return False

        def apply(layout: Layout) -> Layout:
            if column_model.find_task(layout, task_id) is None:
                return layout
            return column_model.remove_task(layout, task_id)

        if self._overlay.anchor_task_id == task_id and self._overlay.close():
            self._emit_overlay(None)
        if self.hovered_task_id == task_id:
            self._hovered = None

        pending = self._push(f"delete {task_id}", apply)
        try:
            await self._adapter.delete_task(task_id)
        except NotFoundError:
            log.info("Task %s was already deleted upstream", task_id)
        except PersistenceError as exc:
            self._rollback(pending, exc, f'Could not delete "{_short_title(task)}"')
            return False
        except BaseException:
            self._settle(pending, None)
            raise
        self._settle(pending, apply)
        self._selection.prune({existing.id for existing in self.tasks()})
        self._notify(f'Task "{_short_title(task)}" deleted')
        return True

    async def toggle_task_type(self, task_id: str) -> Task | None:
        task = self.get_task(task_id)
        if task is None:
            log.info("Type toggle of %s cancelled: task is no longer on the board", task_id)
            return None
        new_type = task.task_type.toggled()
        updated = await self.update_task(task_id, TaskPatch(task_type=new_type))
        if updated is not None:
            self._notify(f"Task marked as {'Bug' if new_type is TaskType.BUG else 'Task'}")
        return updated

    # ── column metadata (memory only) ──────────────────────────────────

    def reorder_columns(self, dragged_column_id: str, target_column_id: str) -> bool:
        try:
            reordered = column_model.reorder_columns(
                self._confirmed, dragged_column_id, target_column_id
            )
        except ColumnNotFoundError as exc:
            log.info("Column reorder cancelled: %s", exc)
            return False
        if reordered is self._confirmed:
            return False
        self._confirmed = reordered
        self._recompute()
        self._notify("Column order updated")
        return True

    def rename_column(self, column_id: str, name: str) -> bool:
        try:
            renamed = column_model.rename_column(self._confirmed, column_id, name)
        except ColumnNotFoundError as exc:
            log.info("Column rename cancelled: %s", exc)
            return False
        if renamed is self._confirmed:
            return False
        self._confirmed = renamed
        self._recompute()
        self._notify("Column renamed successfully")
        return True

    def add_column(self, name: str, *, column_id: str | None = None, color: str | None = None) -> Column:
        kwargs: dict[str, Any] = {"column_id": column_id}
        if color is not None:
            kwargs["color"] = color
        self._confirmed = column_model.add_column(self._confirmed, name, **kwargs)
        self._recompute()
        self._notify("Column added successfully")
        return self._confirmed[-1]

    # ── drag and drop ──────────────────────────────────────────────────

    def start_task_drag(self, task_id: str) -> bool:
        found = column_model.find_task(self._layout, task_id)
        if found is None:
            log.info("Drag of %s ignored: task is no longer on the board", task_id)
            return False
        transition = self._drag.dispatch(
            DragStart(DragKind.TASK, task_id, found[0].id), self.column_ids()
        )
        return transition.outcome is DragOutcome.STARTED

    def start_column_drag(self, column_id: str) -> bool:
        transition = self._drag.dispatch(DragStart(DragKind.COLUMN, column_id), self.column_ids())
        return transition.outcome is DragOutcome.STARTED

    def hover_column(self, column_id: str) -> DragTransition:
        return self._drag.dispatch(HoverColumn(column_id), self.column_ids())

    def leave_column(self, column_id: str | None = None) -> DragTransition:
        return self._drag.dispatch(LeaveColumn(column_id), self.column_ids())

    def cancel_drag(self) -> DragTransition:
        return self._drag.dispatch(Cancel(), self.column_ids())

    def end_drag(self) -> DragTransition:
        return self._drag.dispatch(DragEnd(), self.column_ids())

    async def drop(self, target_column_id: str | None, target_index: int | None = None) -> DragTransition:
        """Finish the active drag on ``target_column_id``.

        The drag slot is released before any persistence call is awaited, so
        a new drag may start while the move is being saved.
        """
        with self._drag.released():
            transition = self._drag.dispatch(
                Drop(target_column_id, target_index), self.column_ids()
            )
        match transition.effect:
            case MoveTaskRequest() as request:
                await self.move_task(
                    request.task_id,
                    request.to_column_id,
                    request.target_index,
                    from_column_id=request.from_column_id,
                )
            case ReorderColumnsRequest() as request:
                self.reorder_columns(request.dragged_column_id, request.target_column_id)
        return transition

    # ── selection and bulk actions ─────────────────────────────────────

    def toggle_selection(self, task_id: str) -> bool:
        """Toggle a visible task; hidden tasks can only be deselected."""
        if task_id not in self._selection and task_id not in self.visible_task_ids():
            log.debug("Selection of hidden task %s ignored", task_id)
            return False
        return self._selection.toggle(task_id)

    def select_all(self) -> None:
        self._selection.select_all(self.visible_task_ids())

    def clear_selection(self) -> None:
        self._selection.clear()

    async def bulk_assign(
        self, assignee_id: str | None, assignee_name: str | None = None
    ) -> BulkActionResult:
        return await self._selection.bulk_assign(self, assignee_id, assignee_name)

    async def bulk_set_priority(self, priority: TaskPriority) -> BulkActionResult:
        return await self._selection.bulk_set_priority(self, priority)

    async def bulk_move(self, column_id: str) -> BulkActionResult:
        return await self._selection.bulk_move(self, column_id)

    async def bulk_set_due_date(self, due_date: date | None) -> BulkActionResult:
        return await self._selection.bulk_set_due_date(self, due_date)

    async def bulk_send_to_channel(self, channel_id: str) -> BulkActionResult:
        return await self._selection.bulk_send_to_channel(self, channel_id)

    async def commit_bulk_patch(
        self, action: str, task_ids: Sequence[str], patch: TaskPatch
    ) -> BulkActionResult:
        """Apply ``patch`` to every task in ``task_ids``, all or nothing."""
        if patch.status is not None and patch.status not in self.column_ids():
            raise ValidationError(f"Unknown column {patch.status!r}", field="status")

        originals: dict[str, Task] = {}
        for task_id in task_ids:
            task = self.get_task(task_id)
            if task is None:
                log.info("Bulk %s skips %s: task is no longer on the board", action, task_id)
                continue
            originals[task_id] = task
        if not originals:
            return BulkActionResult(action=action, ok=True)
        present = tuple(originals)

        def apply(layout: Layout) -> Layout:
            for task_id in present:
                found = column_model.find_task(layout, task_id)
                if found is not None:
                    layout = column_model.replace_task(layout, found[2].apply(patch))
            return layout

        pending = self._push(f"bulk {action}", apply)
        try:
            results = await asyncio.gather(
                *(self._adapter.update_task(task_id, patch) for task_id in present),
                return_exceptions=True,
            )
        except BaseException:
            self._settle(pending, None)
            raise
        failures = [
            (task_id, result)
            for task_id, result in zip(present, results, strict=True)
            if isinstance(result, BaseException)
        ]
        if failures:
            succeeded = [
                task_id
                for task_id, result in zip(present, results, strict=True)
                if not isinstance(result, BaseException)
            ]
            await self._revert_remote(succeeded, originals, patch)
            self._settle(pending, None)
            for _task_id, result in failures:
                if not isinstance(result, BoardError):
                    raise result
            error = BulkActionError(
                action,
                [task_id for task_id, _ in failures],
                [result for _, result in failures],
            )
            log.warning("Bulk %s rolled back: %s", action, error)
            self._notify(f"{error}; no tasks were changed", NoticeSeverity.ERROR)
            return BulkActionResult(
                action=action, ok=False, failed_ids=error.failed_ids, error=error
            )

        updated = [result for result in results if isinstance(result, Task)]

        def confirm(layout: Layout) -> Layout:
            layout = apply(layout)
            for task in updated:
                layout = _confirm_task(layout, task)
            return layout

        self._settle(pending, confirm)
        self._notify(f"Updated {len(present)} task(s)")
        return BulkActionResult(action=action, ok=True, task_ids=present)

    async def _revert_remote(
        self, task_ids: Iterable[str], originals: dict[str, Task], patch: TaskPatch
    ) -> None:
        """Best-effort compensation for the part of a bulk action that did persist."""
        ids = list(task_ids)
        if not ids:
            return
        reverts = await asyncio.gather(
            *(
                self._adapter.update_task(task_id, TaskPatch.reverting(originals[task_id], patch))
                for task_id in ids
            ),
            return_exceptions=True,
        )
        for task_id, result in zip(ids, reverts, strict=True):
            if isinstance(result, BaseException):
                log.error("Could not revert %s after failed bulk action: %s", task_id, result)

    async def send_tasks_to_channel(
        self, channel_id: str, task_ids: Sequence[str]
    ) -> BulkActionResult:
        action = "send_to_channel"
        tasks = [task for task_id in task_ids if (task := self.get_task(task_id)) is not None]
        if not tasks:
            return BulkActionResult(action=action, ok=True)
        ids = tuple(task.id for task in tasks)
        if self._notifier is None:
            error = BulkActionError(action, ids, [PersistenceError("No chat channel configured", operation=action)])
            self._notify("No chat channel is configured", NoticeSeverity.ERROR)
            return BulkActionResult(action=action, ok=False, failed_ids=ids, error=error)
        try:
            await self._notifier.send_tasks(channel_id, format_channel_message(tasks), tasks)
        except BoardError as exc:
            log.warning("Sending %d task(s) to #%s failed: %s", len(tasks), channel_id, exc)
            error = BulkActionError(action, ids, [exc])
            self._notify("Failed to send tasks to chat channel", NoticeSeverity.ERROR)
            return BulkActionResult(action=action, ok=False, failed_ids=ids, error=error)
        self._notify(f"{len(tasks)} task(s) sent to #{channel_id} channel")
        return BulkActionResult(action=action, ok=True, task_ids=ids)

    # ── hover, shortcuts, quick-action overlay ─────────────────────────

    def hover_task(self, task_id: str, anchor: Rect, *, scroll_ancestors: Iterable[str] = ()) -> None:
        if self.get_task(task_id) is None:
            return
        self._hovered = _Hover(task_id, anchor, tuple(scroll_ancestors))

    def unhover_task(self, task_id: str | None = None) -> None:
        if self._hovered is None:
            return
        if task_id is None or self._hovered.task_id == task_id:
            self._hovered = None

    def handle_key(self, press: KeyPress, viewport: Viewport) -> QuickMenu | None:
        """Open the quick-action overlay if ``press`` is a hover shortcut."""
        hovered = self._hovered
        menu = resolve_shortcut(press, hovered_task_id=hovered.task_id if hovered else None)
        if menu is None or hovered is None:
            return None
        state = self._overlay.open(
            hovered.task_id,
            menu,
            hovered.anchor,
            viewport,
            scroll_ancestors=hovered.scroll_ancestors,
        )
        self._emit_overlay(state)
        return menu

    def scroll(self, source_id: str, anchor: Rect, viewport: Viewport) -> bool:
        """Report a scroll; the overlay follows its anchor if the source encloses it."""
        if self._hovered is not None and self._hovered.task_id == self._overlay.anchor_task_id:
            self._hovered = _Hover(self._hovered.task_id, anchor, self._hovered.scroll_ancestors)
        if not self._overlay.on_scroll(source_id, anchor, viewport):
            return False
        self._emit_overlay(self._overlay.state)
        return True

    def close_overlay(self) -> None:
        if self._overlay.close():
            self._emit_overlay(None)

    async def _quick_update(self, patch: TaskPatch) -> Task | None:
        task_id = self._overlay.anchor_task_id
        if task_id is None:
            return None
        self.close_overlay()
        return await self.update_task(task_id, patch)

    async def quick_assign(self, assignee_id: str | None, assignee_name: str | None = None) -> Task | None:
        updated = await self._quick_update(
            TaskPatch(assignee_id=assignee_id, assignee_name=assignee_name)
        )
        if updated is not None:
            self._notify(f"Assigned to {assignee_name or assignee_id or 'nobody'}")
        return updated

    async def quick_set_due_date(self, due_date: date | None) -> Task | None:
        updated = await self._quick_update(TaskPatch(due_date=due_date))
        if updated is not None:
            self._notify("Due date updated")
        return updated

    async def quick_set_tags(self, tags: Iterable[str]) -> Task | None:
        updated = await self._quick_update(TaskPatch(tags=frozenset(tags)))
        if updated is not None:
            self._notify("Tags updated")
        return updated

    # ── context menu and activation ────────────────────────────────────

    def context_menu_actions(self, task_id: str) -> tuple[ContextAction, ...]:
        if self.get_task(task_id) is None:
            return ()
        return CONTEXT_MENU_ACTIONS

    async def run_context_action(self, task_id: str, action: ContextAction) -> bool:
        match action:
            case ContextAction.TOGGLE_TYPE:
                return await self.toggle_task_type(task_id) is not None
            case ContextAction.DELETE:
                return await self.delete_task(task_id)
        return False

    def activate_task(self, task_id: str) -> bool:
        if self.get_task(task_id) is None:
            log.info("Activation of %s ignored: task is no longer on the board", task_id)
            return False
        self._bus.emit(TaskActivated(task_id))
        return True


__all__ = ["BoardController"]
