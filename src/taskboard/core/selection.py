"""Multi-select set and the bulk actions it drives."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from taskboard.core.models.entities import TaskPatch

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterable, Sequence
    from datetime import date

    from taskboard.core.errors import BulkActionError
    from taskboard.core.models.enums import TaskPriority

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BulkActionResult:
    action: str
    ok: bool
    task_ids: tuple[str, ...] = ()
    failed_ids: tuple[str, ...] = ()
    error: BulkActionError | None = None


class BulkCommitter(Protocol):
    """What the selection needs from the board to run a bulk action.

    Both calls are all-or-nothing: on failure nothing stays changed.
    """

    async def commit_bulk_patch(
        self, action: str, task_ids: Sequence[str], patch: TaskPatch
    ) -> BulkActionResult: ...

    async def send_tasks_to_channel(
        self, channel_id: str, task_ids: Sequence[str]
    ) -> BulkActionResult: ...


class SelectionManager:
    """Ordered set of selected task ids.

    Ids are only added from the visible (filtered) view, but once selected
    they stay selected when filters change.
    """

    def __init__(self, on_change: Callable[[frozenset[str]], None] | None = None) -> None:
        self._ids: dict[str, None] = {}
        self._on_change = on_change

    @property
    def selected(self) -> frozenset[str]:
        return frozenset(self._ids)

    @property
    def ordered(self) -> tuple[str, ...]:
        return tuple(self._ids)

    @property
    def is_empty(self) -> bool:
        return not self._ids

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self.selected)

    def toggle(self, task_id: str) -> bool:
        """Flip membership of ``task_id``; returns whether it is now selected."""
        if task_id in self._ids:
            del self._ids[task_id]
            selected = False
        else:
            self._ids[task_id] = None
            selected = True
        self._changed()
        return selected

    def select_all(self, visible_ids: Iterable[str]) -> None:
        ids = dict.fromkeys(visible_ids)
        if ids == self._ids:
            return
        self._ids = ids
        self._changed()

    def clear(self) -> None:
        if not self._ids:
            return
        self._ids = {}
        self._changed()

    def prune(self, existing_ids: Collection[str]) -> None:
        """Drop ids of tasks that no longer exist."""
        kept = {task_id: None for task_id in self._ids if task_id in existing_ids}
        if len(kept) == len(self._ids):
            return
        log.debug("Pruned %d stale id(s) from selection", len(self._ids) - len(kept))
        self._ids = kept
        self._changed()

    def discard(self, task_ids: Iterable[str]) -> None:
        """Deselect ``task_ids``; ids selected since are left alone."""
        dropped = set(task_ids)
        kept = {task_id: None for task_id in self._ids if task_id not in dropped}
        if len(kept) == len(self._ids):
            return
        self._ids = kept
        self._changed()

    async def _run(self, committer: BulkCommitter, action: str, patch: TaskPatch) -> BulkActionResult:
        if not self._ids:
            return BulkActionResult(action=action, ok=True)
        committed = self.ordered
        result = await committer.commit_bulk_patch(action, committed, patch)
        if result.ok:
            self.discard(committed)
        return result

    async def bulk_assign(
        self,
        committer: BulkCommitter,
        assignee_id: str | None,
        assignee_name: str | None = None,
    ) -> BulkActionResult:
        patch = TaskPatch(assignee_id=assignee_id, assignee_name=assignee_name)
        return await self._run(committer, "assign", patch)

    async def bulk_set_priority(
        self, committer: BulkCommitter, priority: TaskPriority
    ) -> BulkActionResult:
        return await self._run(committer, "set_priority", TaskPatch(priority=priority))

    async def bulk_move(self, committer: BulkCommitter, column_id: str) -> BulkActionResult:
        return await self._run(committer, "move", TaskPatch(status=column_id))

    async def bulk_set_due_date(
        self, committer: BulkCommitter, due_date: date | None
    ) -> BulkActionResult:
        return await self._run(committer, "set_due_date", TaskPatch(due_date=due_date))

    async def bulk_send_to_channel(
        self, committer: BulkCommitter, channel_id: str
    ) -> BulkActionResult:
        if not self._ids:
            return BulkActionResult(action="send_to_channel", ok=True)
        sent = self.ordered
        result = await committer.send_tasks_to_channel(channel_id, sent)
        if result.ok:
            self.discard(sent)
        return result


__all__ = ["BulkActionResult", "BulkCommitter", "SelectionManager"]
