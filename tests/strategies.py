"""Hypothesis strategies for board models."""

from __future__ import annotations

from datetime import date, timedelta

from hypothesis import strategies as st

from taskboard.constants import DEFAULT_COLUMNS
from taskboard.core.models.entities import FilterCriteria, Task
from taskboard.core.models.enums import DueBucket, TaskPriority, TaskType

COLUMN_IDS = [column_id for column_id, _name, _color in DEFAULT_COLUMNS]

priorities = st.sampled_from(list(TaskPriority))
task_types = st.sampled_from(list(TaskType))
statuses = st.sampled_from(COLUMN_IDS)
due_buckets = st.sampled_from(list(DueBucket))
assignees = st.one_of(st.none(), st.sampled_from(["ana", "bo", "cy"]))
due_dates = st.one_of(
    st.none(),
    st.dates(min_value=date(2024, 5, 1), max_value=date(2024, 8, 1)),
)
words = st.sampled_from(["bug", "login", "export", "Refactor", "release", "docs", "UI"])
titles = st.lists(words, min_size=1, max_size=4).map(" ".join)


@st.composite
def tasks(draw: st.DrawFn, task_id: str | None = None) -> Task:
    return Task(
        id=task_id or draw(st.text("abcdef0123456789", min_size=4, max_size=8)),
        title=draw(titles),
        description=draw(st.one_of(st.just(""), titles)),
        priority=draw(priorities),
        status=draw(statuses),
        task_type=draw(task_types),
        due_date=draw(due_dates),
        assignee_id=draw(assignees),
    )


@st.composite
def task_lists(draw: st.DrawFn, min_size: int = 0, max_size: int = 12) -> list[Task]:
    """Tasks with unique ids."""
    count = draw(st.integers(min_value=min_size, max_value=max_size))
    return [draw(tasks(task_id=f"t{index}")) for index in range(count)]


@st.composite
def criteria(draw: st.DrawFn) -> FilterCriteria:
    due_from = draw(st.one_of(st.none(), due_dates.filter(lambda d: d is not None)))
    due_to = None
    if draw(st.booleans()):
        base = due_from or date(2024, 6, 10)
        due_to = base + timedelta(days=draw(st.integers(min_value=0, max_value=40)))
    return FilterCriteria(
        text=draw(st.one_of(st.none(), words)),
        priority=draw(st.one_of(st.none(), priorities)),
        status=draw(st.one_of(st.none(), statuses)),
        assignee_id=draw(assignees),
        due_bucket=draw(due_buckets),
        due_from=due_from,
        due_to=due_to,
    )
