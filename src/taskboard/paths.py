"""XDG-compliant path helpers for taskboard data storage."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir


def get_data_dir() -> Path:
    """Get the data directory (database, state store, log exports)."""
    override = os.environ.get("TASKBOARD_DATA_DIR")
    if override:
        return Path(override)
    return Path(user_data_dir("taskboard"))


def get_config_dir() -> Path:
    """Get the config directory (config.toml)."""
    override = os.environ.get("TASKBOARD_CONFIG_DIR")
    if override:
        return Path(override)
    return Path(user_config_dir("taskboard"))


def get_database_path() -> Path:
    """Get the path to the SQLite database."""
    return get_data_dir() / "taskboard.db"


def get_config_path() -> Path:
    """Get the path to the TOML config file."""
    return get_config_dir() / "config.toml"


def get_state_path() -> Path:
    """Get the path to the JSON key/value state store."""
    return get_data_dir() / "state.json"


def get_debug_log_path() -> Path:
    """Get the path log exports are written to."""
    return get_data_dir() / "taskboard-debug.log"


def ensure_directories() -> None:
    """Create data and config directories if missing."""
    get_data_dir().mkdir(parents=True, exist_ok=True)
    get_config_dir().mkdir(parents=True, exist_ok=True)
