"""Per-user task time tracking on top of a :class:`StateStore`.

A user has at most one running timer. Stopping it turns it into a time
entry. Both live in the state store under ``active_timer:<user>`` and
``time_entries:<user>``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING
from uuid import uuid4

from pydantic import Field, ValidationError as PydanticValidationError

from taskboard.constants import ACTIVE_TIMER_MAX_AGE_HOURS
from taskboard.core.errors import TimerConflictError
from taskboard.core.models.entities import DomainModel

if TYPE_CHECKING:
    from collections.abc import Callable

    from taskboard.core.store import StateStore

log = logging.getLogger(__name__)


class ActiveTimer(DomainModel):
    id: str = Field(default_factory=lambda: f"timer-{uuid4().hex[:8]}")
    user_id: str
    task_id: str
    task_title: str = ""
    project_id: str | None = None
    started_at: datetime


class TimeEntry(DomainModel):
    id: str = Field(default_factory=lambda: f"entry-{uuid4().hex[:8]}")
    user_id: str
    task_id: str
    task_title: str = ""
    project_id: str | None = None
    started_at: datetime
    ended_at: datetime
    duration_seconds: int = Field(ge=0)
    description: str = ""


def format_duration(seconds: int) -> str:
    """Render ``seconds`` as ``H:MM:SS`` or ``M:SS``."""
    hours, remainder = divmod(max(seconds, 0), 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class TimeTracker:
    """Timer and time entries of one user."""

    def __init__(
        self,
        store: StateStore,
        user_id: str,
        *,
        clock: Callable[[], datetime] = datetime.now,
        max_age: timedelta = timedelta(hours=ACTIVE_TIMER_MAX_AGE_HOURS),
    ) -> None:
        self._store = store
        self._user_id = user_id
        self._clock = clock
        self._max_age = max_age
        self._active = self._load_active()
        self._entries = self._load_entries()

    @property
    def timer_key(self) -> str:
        return f"active_timer:{self._user_id}"

    @property
    def entries_key(self) -> str:
        return f"time_entries:{self._user_id}"

    @property
    def active(self) -> ActiveTimer | None:
        return self._active

    @property
    def entries(self) -> tuple[TimeEntry, ...]:
        return tuple(self._entries)

    def _load_active(self) -> ActiveTimer | None:
        raw = self._store.load(self.timer_key)
        if raw is None:
            return None
        try:
            timer = ActiveTimer.model_validate(raw)
        except PydanticValidationError as exc:
            log.warning("Discarding unreadable active timer for %s: %s", self._user_id, exc)
            self._store.delete(self.timer_key)
            return None
        if self._clock() - timer.started_at >= self._max_age:
            log.info("Discarding stale timer for task %s", timer.task_id)
            self._store.delete(self.timer_key)
            return None
        return timer

    def _load_entries(self) -> list[TimeEntry]:
        raw = self._store.load(self.entries_key)
        if not isinstance(raw, list):
            return []
        entries: list[TimeEntry] = []
        for item in raw:
            try:
                entries.append(TimeEntry.model_validate(item))
            except PydanticValidationError as exc:
                log.warning("Skipping unreadable time entry: %s", exc)
        return entries

    def _save_entries(self) -> None:
        self._store.save(
            self.entries_key, [entry.model_dump(mode="json") for entry in self._entries]
        )

    def start(self, task_id: str, task_title: str = "", project_id: str | None = None) -> ActiveTimer:
        if self._active is not None:
            raise TimerConflictError(self._active.task_id)
        self._active = ActiveTimer(
            user_id=self._user_id,
            task_id=task_id,
            task_title=task_title,
            project_id=project_id,
            started_at=self._clock(),
        )
        self._store.save(self.timer_key, self._active.model_dump(mode="json"))
        log.debug("Timer started for task %s", task_id)
        return self._active

    def stop(self, description: str = "") -> TimeEntry | None:
        """Stop the running timer and log its time; None when nothing runs."""
        timer = self._active
        if timer is None:
            return None
        ended_at = self._clock()
        entry = TimeEntry(
            user_id=self._user_id,
            task_id=timer.task_id,
            task_title=timer.task_title,
            project_id=timer.project_id,
            started_at=timer.started_at,
            ended_at=ended_at,
            duration_seconds=max(int((ended_at - timer.started_at).total_seconds()), 0),
            description=description,
        )
        self._entries.insert(0, entry)
        self._active = None
        self._store.delete(self.timer_key)
        self._save_entries()
        log.debug("Logged %ss on task %s", entry.duration_seconds, entry.task_id)
        return entry

    def elapsed(self) -> timedelta:
        if self._active is None:
            return timedelta(0)
        return self._clock() - self._active.started_at

    def delete_entry(self, entry_id: str) -> bool:
        kept = [entry for entry in self._entries if entry.id != entry_id]
        if len(kept) == len(self._entries):
            return False
        self._entries = kept
        self._save_entries()
        return True

    def task_total(self, task_id: str) -> int:
        return sum(entry.duration_seconds for entry in self._entries if entry.task_id == task_id)

    def project_total(self, project_id: str) -> int:
        return sum(
            entry.duration_seconds for entry in self._entries if entry.project_id == project_id
        )

    def total_today(self, now: date | datetime | None = None) -> int:
        """Seconds logged on entries that ended on ``now``'s calendar day."""
        moment = now if now is not None else self._clock()
        today = moment.date() if isinstance(moment, datetime) else moment
        return sum(
            entry.duration_seconds for entry in self._entries if entry.ended_at.date() == today
        )


__all__ = ["ActiveTimer", "TimeEntry", "TimeTracker", "format_duration"]
