"""Filter pipeline: pure AND-composition of optional task predicates."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from taskboard.constants import DONE_COLUMN_ID, DUE_MONTH_DAYS, DUE_WEEK_DAYS
from taskboard.core.models.enums import DueBucket

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from taskboard.core.models.entities import FilterCriteria, Task

type TaskPredicate = Callable[[Task], bool]


def as_day(now: date | datetime) -> date:
    """Truncate ``now`` to its calendar day."""
    if isinstance(now, datetime):
        return now.date()
    return now


def matches_text(task: Task, text: str) -> bool:
    needle = text.strip().casefold()
    if not needle:
        return True
    return needle in task.title.casefold() or needle in task.description.casefold()


def matches_due_bucket(
    task: Task,
    bucket: DueBucket,
    today: date,
    *,
    done_column_id: str = DONE_COLUMN_ID,
) -> bool:
    if bucket is DueBucket.NONE:
        return True
    due = task.due_date
    if due is None:
        return False
    match bucket:
        case DueBucket.OVERDUE:
            return due < today and task.status != done_column_id
        case DueBucket.TODAY:
            return due == today
        case DueBucket.WEEK:
            return today <= due <= today + timedelta(days=DUE_WEEK_DAYS)
        case DueBucket.MONTH:
            return today <= due <= today + timedelta(days=DUE_MONTH_DAYS)
    return True


def matches_due_range(task: Task, due_from: date | None, due_to: date | None) -> bool:
    if due_from is None and due_to is None:
        return True
    due = task.due_date
    if due is None:
        return False
    if due_from is not None and due < due_from:
        return False
    return not (due_to is not None and due > due_to)


def build_predicates(
    criteria: FilterCriteria,
    now: date | datetime,
    *,
    done_column_id: str = DONE_COLUMN_ID,
) -> list[TaskPredicate]:
    """Return one predicate per criterion that is set."""
    today = as_day(now)
    predicates: list[TaskPredicate] = []

    if criteria.text is not None and criteria.text.strip():
        text = criteria.text
        predicates.append(lambda task: matches_text(task, text))
    if criteria.priority is not None:
        priority = criteria.priority
        predicates.append(lambda task: task.priority == priority)
    if criteria.status is not None:
        status = criteria.status
        predicates.append(lambda task: task.status == status)
    if criteria.assignee_id is not None:
        assignee_id = criteria.assignee_id
        predicates.append(lambda task: task.assignee_id == assignee_id)
    if criteria.due_bucket is not DueBucket.NONE:
        bucket = criteria.due_bucket
        predicates.append(
            lambda task: matches_due_bucket(task, bucket, today, done_column_id=done_column_id)
        )
    if criteria.due_from is not None or criteria.due_to is not None:
        due_from, due_to = criteria.due_from, criteria.due_to
        predicates.append(lambda task: matches_due_range(task, due_from, due_to))
    return predicates


def apply_filters(
    tasks: Iterable[Task],
    criteria: FilterCriteria,
    now: date | datetime,
    *,
    done_column_id: str = DONE_COLUMN_ID,
) -> list[Task]:
    """Return the tasks that pass every set criterion, in their original order."""
    predicates = build_predicates(criteria, now, done_column_id=done_column_id)
    if not predicates:
        return list(tasks)
    return [task for task in tasks if all(predicate(task) for predicate in predicates)]


__all__ = [
    "apply_filters",
    "as_day",
    "build_predicates",
    "matches_due_bucket",
    "matches_due_range",
    "matches_text",
]
