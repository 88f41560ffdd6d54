"""Board-wide constants."""

from __future__ import annotations

from taskboard.paths import get_config_path, get_database_path

DEFAULT_DB_PATH = str(get_database_path())
DEFAULT_CONFIG_PATH = str(get_config_path())

DEFAULT_PROJECT_ID = "default"
DEFAULT_COLUMN_COLOR = "#6B7280"
DONE_COLUMN_ID = "DONE"

# (id, name, color)
DEFAULT_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("TODO", "To Do", "#EF4444"),
    ("IN_PROGRESS", "In Progress", "#F59E0B"),
    ("REVIEW", "Review", "#3B82F6"),
    ("DONE", "Done", "#10B981"),
)

OVERLAY_WIDTH = 320
OVERLAY_HEIGHT = 400
OVERLAY_GAP = 8
OVERLAY_MARGIN = 8

DUE_WEEK_DAYS = 7
DUE_MONTH_DAYS = 30

ACTIVE_TIMER_MAX_AGE_HOURS = 24

NOTIFICATION_TITLE_MAX_LENGTH = 40
CARD_TITLE_LINE_WIDTH = 28
CARD_DESC_MAX_LENGTH = 28

LOG_BUFFER_SIZE = 2000
