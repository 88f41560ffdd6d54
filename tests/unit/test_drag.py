"""Tests for the drag-and-drop reducer and its single-slot controller."""

from __future__ import annotations

import pytest
from hypothesis import strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, precondition, rule

from taskboard.core.drag import (
    Cancel,
    DragController,
    DragEnd,
    DragPhase,
    DragStart,
    Drop,
    HoverColumn,
    LeaveColumn,
    MoveTaskRequest,
    ReorderColumnsRequest,
    reduce_drag,
)
from taskboard.core.errors import DragReconciliationError
from taskboard.core.models.enums import DragKind, DragOutcome

pytestmark = pytest.mark.unit

COLUMNS = ("TODO", "IN_PROGRESS", "REVIEW", "DONE")


def _task_drag(controller: DragController, task_id: str = "T1", column_id: str = "TODO"):
    return controller.dispatch(DragStart(DragKind.TASK, task_id, column_id), COLUMNS)


class TestTaskDrag:
    def test_start_hover_drop_emits_one_move(self):
        controller = DragController()

        assert _task_drag(controller).outcome is DragOutcome.STARTED
        assert controller.dispatch(HoverColumn("DONE"), COLUMNS).outcome is DragOutcome.HOVERED
        assert controller.phase is DragPhase.HOVERING_COLUMN
        transition = controller.dispatch(Drop("DONE", 2), COLUMNS)

        assert transition.outcome is DragOutcome.DROPPED
        assert transition.effect == MoveTaskRequest("T1", "TODO", "DONE", 2)
        assert controller.phase is DragPhase.IDLE
        assert controller.hover_column_id is None

    def test_drop_on_own_column_is_a_no_op(self):
        controller = DragController()
        _task_drag(controller)

        transition = controller.dispatch(Drop("TODO", 0), COLUMNS)

        assert transition.outcome is DragOutcome.CANCELLED
        assert transition.effect is None
        assert not controller.is_active

    def test_drop_on_unknown_column_reconciles_to_idle(self):
        controller = DragController()
        _task_drag(controller)

        transition = controller.dispatch(Drop("GONE"), COLUMNS)

        assert transition.outcome is DragOutcome.CANCELLED
        assert isinstance(transition.error, DragReconciliationError)
        assert transition.error.target_id == "GONE"
        assert controller.phase is DragPhase.IDLE

    def test_drop_outside_any_column(self):
        controller = DragController()
        _task_drag(controller)

        transition = controller.dispatch(Drop(None), COLUMNS)

        assert transition.effect is None
        assert not controller.is_active

    def test_start_without_source_column_is_rejected(self):
        controller = DragController()

        transition = _task_drag(controller, column_id="GONE")

        assert transition.outcome is DragOutcome.REJECTED
        assert transition.error is not None
        assert not controller.is_active

    def test_leave_clears_hover_only_for_that_column(self):
        controller = DragController()
        _task_drag(controller)
        controller.dispatch(HoverColumn("REVIEW"), COLUMNS)

        assert controller.dispatch(LeaveColumn("DONE"), COLUMNS).outcome is DragOutcome.IGNORED
        assert controller.hover_column_id == "REVIEW"
        controller.dispatch(LeaveColumn("REVIEW"), COLUMNS)
        assert controller.hover_column_id is None
        assert controller.phase is DragPhase.DRAGGING_TASK

    @pytest.mark.parametrize("event", [Cancel(), DragEnd()])
    def test_cancel_and_drag_end_return_to_idle(self, event):
        controller = DragController()
        _task_drag(controller)
        controller.dispatch(HoverColumn("DONE"), COLUMNS)

        transition = controller.dispatch(event, COLUMNS)

        assert transition.outcome is DragOutcome.CANCELLED
        assert controller.phase is DragPhase.IDLE


class TestColumnDrag:
    def test_drop_on_other_column_reorders(self):
        controller = DragController()
        controller.dispatch(DragStart(DragKind.COLUMN, "DONE"), COLUMNS)

        transition = controller.dispatch(Drop("TODO"), COLUMNS)

        assert transition.effect == ReorderColumnsRequest("DONE", "TODO")

    def test_hover_is_ignored_for_column_drags(self):
        controller = DragController()
        controller.dispatch(DragStart(DragKind.COLUMN, "DONE"), COLUMNS)

        assert controller.dispatch(HoverColumn("TODO"), COLUMNS).outcome is DragOutcome.IGNORED
        assert controller.phase is DragPhase.DRAGGING_COLUMN

    def test_drop_on_itself_cancels(self):
        controller = DragController()
        controller.dispatch(DragStart(DragKind.COLUMN, "DONE"), COLUMNS)

        assert controller.dispatch(Drop("DONE"), COLUMNS).effect is None


class TestSingleSlot:
    def test_second_start_is_rejected(self):
        controller = DragController()
        _task_drag(controller, "T1")

        transition = _task_drag(controller, "T2")

        assert transition.outcome is DragOutcome.REJECTED
        assert controller.session.source_id == "T1"

    def test_events_without_session_are_ignored(self):
        for event in (HoverColumn("TODO"), LeaveColumn(), Drop("TODO"), Cancel(), DragEnd()):
            assert reduce_drag(None, event, COLUMNS).outcome is DragOutcome.IGNORED

    def test_released_frees_the_slot_on_error(self):
        controller = DragController()
        _task_drag(controller)

        with pytest.raises(RuntimeError), controller.released():
            raise RuntimeError("boom")

        assert not controller.is_active


class DragMachine(RuleBasedStateMachine):
    """Random event sequences never leave more than one drag or a stray hover."""

    def __init__(self) -> None:
        super().__init__()
        self.controller = DragController()
        self.moves = 0

    @rule(
        kind=st.sampled_from(list(DragKind)),
        source=st.sampled_from([*COLUMNS, "GONE"]),
    )
    def start(self, kind: DragKind, source: str) -> None:
        was_active = self.controller.is_active
        if kind is DragKind.TASK:
            transition = self.controller.dispatch(DragStart(kind, "T1", source), COLUMNS)
        else:
            transition = self.controller.dispatch(DragStart(kind, source), COLUMNS)
        if was_active:
            assert transition.outcome is DragOutcome.REJECTED

    @rule(column=st.sampled_from([*COLUMNS, "GONE"]))
    def hover(self, column: str) -> None:
        self.controller.dispatch(HoverColumn(column), COLUMNS)

    @rule(column=st.one_of(st.none(), st.sampled_from(COLUMNS)))
    def leave(self, column: str | None) -> None:
        self.controller.dispatch(LeaveColumn(column), COLUMNS)

    @precondition(lambda self: self.controller.is_active)
    @rule(
        target_column=st.one_of(st.none(), st.sampled_from([*COLUMNS, "GONE"])),
        index=st.one_of(st.none(), st.integers(min_value=0, max_value=5)),
    )
    def drop(self, target_column: str | None, index: int | None) -> None:
        session = self.controller.session
        transition = self.controller.dispatch(Drop(target_column, index), COLUMNS)
        assert transition.session is None
        if transition.effect is not None:
            self.moves += 1
            assert session is not None
            if isinstance(transition.effect, MoveTaskRequest):
                assert transition.effect.to_column_id != session.source_column_id
            assert target_column in COLUMNS

    @rule()
    def cancel(self) -> None:
        self.controller.dispatch(Cancel(), COLUMNS)
        assert self.controller.phase is DragPhase.IDLE

    @invariant()
    def hover_only_while_dragging_task(self) -> None:
        session = self.controller.session
        if session is None:
            assert self.controller.hover_column_id is None
            return
        if session.kind is DragKind.COLUMN:
            assert session.hover_column_id is None
        if session.hover_column_id is not None:
            assert session.hover_column_id in COLUMNS


TestDragMachine = DragMachine.TestCase
