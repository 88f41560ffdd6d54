"""Tests for the pure column model."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from taskboard.core import columns as column_model
from taskboard.core.errors import (
    ColumnNotFoundError,
    DuplicateTaskIdError,
    TaskNotFoundError,
    ValidationError,
)
from taskboard.core.models.entities import Column, FilterCriteria
from tests.helpers.factories import NOW, default_columns, ids_by_column, make_layout, make_task
from tests.strategies import COLUMN_IDS, task_lists

pytestmark = pytest.mark.unit


class TestMoveTask:
    def test_move_between_columns(self):
        """A task taken from TODO lands at the requested index of IN_PROGRESS."""
        t1, t2, t3 = make_task("T1"), make_task("T2"), make_task("T3", "DONE")
        layout = make_layout(TODO=[t1, t2], DONE=[t3])

        moved = column_model.move_task(layout, "T1", "TODO", "IN_PROGRESS", 0)

        assert ids_by_column(moved) == {
            "TODO": ["T2"],
            "IN_PROGRESS": ["T1"],
            "REVIEW": [],
            "DONE": ["T3"],
        }

    def test_moved_task_takes_target_status(self):
        layout = make_layout(TODO=[make_task("T1")])

        moved = column_model.move_task(layout, "T1", "TODO", "REVIEW")

        _column, _index, task = column_model.find_task(moved, "T1")
        assert task.status == "REVIEW"

    def test_input_layout_is_not_mutated(self):
        layout = make_layout(TODO=[make_task("T1"), make_task("T2")])
        before = ids_by_column(layout)

        column_model.move_task(layout, "T1", "TODO", "DONE")

        assert ids_by_column(layout) == before

    def test_index_is_clamped(self):
        layout = make_layout(TODO=[make_task("T1")], DONE=[make_task("D1", "DONE")])

        low = column_model.move_task(layout, "T1", "TODO", "DONE", -5)
        high = column_model.move_task(layout, "T1", "TODO", "DONE", 99)

        assert ids_by_column(low)["DONE"] == ["T1", "D1"]
        assert ids_by_column(high)["DONE"] == ["D1", "T1"]

    def test_reorder_within_column(self):
        layout = make_layout(TODO=[make_task("A"), make_task("B"), make_task("C")])

        moved = column_model.move_task(layout, "A", "TODO", "TODO", 2)

        assert ids_by_column(moved)["TODO"] == ["B", "C", "A"]

    def test_move_onto_own_position_returns_same_layout(self):
        layout = make_layout(TODO=[make_task("A"), make_task("B")])

        assert column_model.move_task(layout, "B", "TODO", "TODO", 1) is layout

    def test_unknown_task_raises(self):
        layout = make_layout(TODO=[make_task("A")])

        with pytest.raises(TaskNotFoundError):
            column_model.move_task(layout, "missing", "TODO", "DONE")

    def test_unknown_column_raises(self):
        layout = make_layout(TODO=[make_task("A")])

        with pytest.raises(ColumnNotFoundError):
            column_model.move_task(layout, "A", "TODO", "NOPE")

    def test_duplicate_in_source_is_refused(self):
        duplicate = make_task("A")
        layout = (Column(id="TODO", name="To Do", tasks=(duplicate, duplicate)),)

        with pytest.raises(DuplicateTaskIdError):
            column_model.move_task(layout, "A", "TODO", "TODO", 0)

    def test_duplicate_in_target_is_refused(self):
        layout = (
            Column(id="TODO", name="To Do", tasks=(make_task("A"),)),
            Column(id="DONE", name="Done", tasks=(make_task("A", "DONE"),)),
        )

        with pytest.raises(DuplicateTaskIdError):
            column_model.move_task(layout, "A", "TODO", "DONE")

    @given(
        task_lists(min_size=1),
        st.data(),
    )
    def test_move_conserves_tasks(self, tasks, data):
        """Moving never drops or duplicates a task."""
        layout = column_model.build_layout(tasks, default_columns())
        task = data.draw(st.sampled_from(tasks))
        target = data.draw(st.sampled_from(COLUMN_IDS))
        index = data.draw(st.one_of(st.none(), st.integers(min_value=-2, max_value=15)))

        moved = column_model.move_task(layout, task.id, task.status, target, index)

        before = sorted(t.id for t in column_model.all_tasks(layout))
        after = sorted(t.id for t in column_model.all_tasks(moved))
        assert before == after
        owners = [column.id for column in moved if task.id in column.task_ids]
        assert owners == [target]


class TestDistribute:
    def test_partition_follows_status_and_input_order(self):
        tasks = [make_task("A"), make_task("B", "DONE"), make_task("C")]

        layout = column_model.distribute(tasks, FilterCriteria(), default_columns(), now=NOW)

        assert ids_by_column(layout)["TODO"] == ["A", "C"]
        assert ids_by_column(layout)["DONE"] == ["B"]

    def test_unknown_status_gets_its_own_column(self):
        tasks = [make_task("A", "BLOCKED_ON_QA")]

        layout = column_model.distribute(tasks, FilterCriteria(), default_columns(), now=NOW)

        assert layout[-1].id == "BLOCKED_ON_QA"
        assert layout[-1].name == "Blocked On Qa"
        assert layout[-1].task_ids == ("A",)

    def test_filters_are_applied(self):
        tasks = [make_task("A", title="login bug"), make_task("B", title="docs")]

        layout = column_model.distribute(
            tasks, FilterCriteria(text="bug"), default_columns(), now=NOW
        )

        assert ids_by_column(layout)["TODO"] == ["A"]

    @given(task_lists())
    def test_every_task_lands_exactly_once(self, tasks):
        layout = column_model.build_layout(tasks, default_columns())

        placed = [task.id for task in column_model.all_tasks(layout)]
        assert sorted(placed) == sorted(task.id for task in tasks)
        for column in layout:
            assert all(task.status == column.id for task in column.tasks)


class TestColumnMetadata:
    def test_reorder_columns(self):
        layout = default_columns()

        reordered = column_model.reorder_columns(layout, "DONE", "TODO")

        assert column_model.column_ids(reordered) == ("DONE", "TODO", "IN_PROGRESS", "REVIEW")

    def test_reorder_onto_itself_is_identity(self):
        layout = default_columns()

        assert column_model.reorder_columns(layout, "REVIEW", "REVIEW") is layout

    def test_rename_strips_and_rejects_blank(self):
        layout = default_columns()

        renamed = column_model.rename_column(layout, "TODO", "  Backlog ")

        assert column_model.find_column(renamed, "TODO").name == "Backlog"
        with pytest.raises(ValidationError):
            column_model.rename_column(layout, "TODO", "   ")

    def test_add_column_rejects_duplicate_id(self):
        layout = default_columns()

        added = column_model.add_column(layout, "Blocked", column_id="BLOCKED")

        assert added[-1].id == "BLOCKED"
        with pytest.raises(ValidationError):
            column_model.add_column(added, "Again", column_id="BLOCKED")

    def test_add_column_generates_id(self):
        added = column_model.add_column(default_columns(), "QA")

        assert added[-1].id.startswith("column-")
        assert added[-1].tasks == ()


class TestTaskEdits:
    def test_insert_remove_replace(self):
        layout = make_layout(TODO=[make_task("A")])

        inserted = column_model.insert_task(layout, make_task("B"), 0)
        assert ids_by_column(inserted)["TODO"] == ["B", "A"]

        replaced = column_model.replace_task(inserted, make_task("B", title="renamed"))
        assert column_model.find_task(replaced, "B")[2].title == "renamed"
        assert ids_by_column(replaced)["TODO"] == ["B", "A"]

        removed = column_model.remove_task(replaced, "A")
        assert ids_by_column(removed)["TODO"] == ["B"]

    def test_replace_with_new_status_moves_to_end_of_column(self):
        layout = make_layout(TODO=[make_task("A")], DONE=[make_task("D", "DONE")])

        replaced = column_model.replace_task(layout, make_task("A", "DONE"))

        assert ids_by_column(replaced)["DONE"] == ["D", "A"]
        assert ids_by_column(replaced)["TODO"] == []

    def test_insert_duplicate_is_refused(self):
        layout = make_layout(TODO=[make_task("A")])

        with pytest.raises(DuplicateTaskIdError):
            column_model.insert_task(layout, make_task("A", "DONE"))

    def test_duplicate_ids_are_reported(self):
        layout = (
            Column(id="TODO", name="To Do", tasks=(make_task("A"),)),
            Column(id="DONE", name="Done", tasks=(make_task("A", "DONE"), make_task("B", "DONE"))),
        )

        assert column_model.duplicate_task_ids(layout) == {"A"}


class TestResolveInsertIndex:
    def test_maps_visible_index_onto_full_column(self):
        # Full column: A h1 B h2 C, where h1/h2 are hidden by a filter.
        column = Column(
            id="TODO",
            name="To Do",
            tasks=tuple(make_task(task_id) for task_id in ("A", "h1", "B", "h2", "C")),
        )

        assert column_model.resolve_insert_index(column, ["A", "B", "C"], 1, moving_task_id="X") == 2
        assert column_model.resolve_insert_index(column, ["A", "B", "C"], 0, moving_task_id="X") == 0

    def test_past_the_end_lands_after_last_visible(self):
        column = Column(
            id="TODO",
            name="To Do",
            tasks=tuple(make_task(task_id) for task_id in ("A", "B", "hidden")),
        )

        assert column_model.resolve_insert_index(column, ["A", "B"], None, moving_task_id="X") == 2
        assert column_model.resolve_insert_index(column, ["A", "B"], 7, moving_task_id="X") == 2

    def test_empty_visible_column_appends(self):
        column = Column(id="TODO", name="To Do", tasks=(make_task("hidden"),))

        assert column_model.resolve_insert_index(column, [], 0, moving_task_id="X") == 1

    def test_moving_task_is_excluded(self):
        column = Column(
            id="TODO", name="To Do", tasks=tuple(make_task(i) for i in ("A", "B", "C"))
        )

        assert column_model.resolve_insert_index(column, ["A", "B", "C"], 2, moving_task_id="A") == 2
