"""Logging setup with an in-app log buffer.

Records from the ``logging`` module are captured into a ring buffer that the
TUI log panel reads and that can be exported to a file.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from taskboard.constants import LOG_BUFFER_SIZE

if TYPE_CHECKING:
    from taskboard.config import LoggingSettings

MAX_LOG_MESSAGE_LENGTH = 4000
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(slots=True)
class LogEntry:
    """A captured log entry."""

    group: str  # Level name (DEBUG, INFO, WARNING, ERROR, etc.)
    logger: str
    message: str
    timestamp: float


# Global log buffer (ring buffer)
log_buffer: deque[LogEntry] = deque(maxlen=LOG_BUFFER_SIZE)

# Track generation to detect buffer clears
_buffer_generation: int = 0


class BufferLogHandler(logging.Handler):
    """Logging handler that captures records into :data:`log_buffer`."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            if len(msg) > MAX_LOG_MESSAGE_LENGTH:
                msg = msg[:MAX_LOG_MESSAGE_LENGTH] + "... [truncated]"
            log_buffer.append(
                LogEntry(
                    group=record.levelname,
                    logger=record.name,
                    message=msg,
                    timestamp=record.created,
                )
            )
        except Exception:
            self.handleError(record)


_handlers: list[logging.Handler] = []


def setup_logging(settings: LoggingSettings | None = None) -> None:
    """Attach the buffer handler (and optional file handler) to the package logger.

    This is idempotent - calling it again replaces the handlers installed by
    the previous call instead of stacking new ones.
    """
    global log_buffer

    level = settings.level_number if settings is not None else logging.INFO
    buffer_size = settings.buffer_size if settings is not None else LOG_BUFFER_SIZE
    log_file = settings.file if settings is not None else None

    logger = logging.getLogger("taskboard")
    for handler in _handlers:
        logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    if log_buffer.maxlen != buffer_size:
        log_buffer = deque(log_buffer, maxlen=buffer_size)

    buffer_handler = BufferLogHandler()
    buffer_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    _handlers.append(buffer_handler)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _handlers.append(file_handler)

    for handler in _handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.debug("Logging initialized at %s", logging.getLevelName(level))


def clear_log_buffer() -> None:
    """Clear the log buffer."""
    global _buffer_generation
    log_buffer.clear()
    _buffer_generation += 1


def get_buffer_generation() -> int:
    """Get the current buffer generation (incremented on clear)."""
    return _buffer_generation


def get_log_entries() -> list[LogEntry]:
    return list(log_buffer)


def export_logs_to_file(file_path: str | Path) -> int:
    """Export all logs from the buffer to a file.

    Args:
        file_path: Path to write the log file to

    Returns:
        Number of log entries written
    """
    output_path = Path(file_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    entries = list(log_buffer)
    with output_path.open("w", encoding="utf-8") as f:
        f.write("# Taskboard Log Export\n")
        f.write(f"# Total entries: {len(entries)}\n")
        f.write(f"# Buffer generation: {_buffer_generation}\n")
        f.write("# " + "=" * 76 + "\n\n")

        for entry in entries:
            ts = datetime.fromtimestamp(entry.timestamp).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
            f.write(f"{ts} [{entry.group}] {entry.message}\n")

    return len(entries)


__all__ = [
    "BufferLogHandler",
    "LogEntry",
    "clear_log_buffer",
    "export_logs_to_file",
    "get_buffer_generation",
    "get_log_entries",
    "log_buffer",
    "setup_logging",
]
