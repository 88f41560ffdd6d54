"""Configuration loader for taskboard."""

from __future__ import annotations

import asyncio
import logging
import tomllib
from typing import TYPE_CHECKING

import tomlkit
from pydantic import BaseModel, Field, field_validator, model_validator

from taskboard.atomic import atomic_write
from taskboard.constants import (
    DEFAULT_COLUMN_COLOR,
    DEFAULT_COLUMNS,
    DEFAULT_PROJECT_ID,
    DONE_COLUMN_ID,
    LOG_BUFFER_SIZE,
    OVERLAY_GAP,
    OVERLAY_HEIGHT,
    OVERLAY_MARGIN,
    OVERLAY_WIDTH,
)
from taskboard.core.models.entities import Column
from taskboard.core.overlay import OverlaySize
from taskboard.paths import ensure_directories, get_config_path

if TYPE_CHECKING:
    from pathlib import Path

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class ColumnConfig(BaseModel):
    """One configured board column."""

    id: str
    name: str
    color: str = Field(default=DEFAULT_COLUMN_COLOR)

    @field_validator("id", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("must not be blank")
        return cleaned


def _default_columns() -> list[ColumnConfig]:
    return [ColumnConfig(id=cid, name=name, color=color) for cid, name, color in DEFAULT_COLUMNS]


class BoardSettings(BaseModel):
    """Board layout and workflow settings."""

    columns: list[ColumnConfig] = Field(default_factory=_default_columns)
    done_column_id: str = Field(
        default=DONE_COLUMN_ID,
        description="Tasks in this column are never overdue",
    )
    default_project_id: str = Field(default=DEFAULT_PROJECT_ID)

    @model_validator(mode="after")
    def _unique_column_ids(self) -> BoardSettings:
        ids = [column.id for column in self.columns]
        if len(ids) != len(set(ids)):
            raise ValueError("column ids must be unique")
        return self

    def build_columns(self) -> tuple[Column, ...]:
        return tuple(
            Column(id=column.id, name=column.name, color=column.color) for column in self.columns
        )


class OverlaySettings(BaseModel):
    """Quick-action overlay geometry, in the toolkit's units."""

    width: float = Field(default=OVERLAY_WIDTH, gt=0)
    height: float = Field(default=OVERLAY_HEIGHT, gt=0)
    gap: float = Field(default=OVERLAY_GAP, ge=0)
    margin: float = Field(default=OVERLAY_MARGIN, ge=0)

    def to_size(self) -> OverlaySize:
        return OverlaySize(width=self.width, height=self.height, gap=self.gap, margin=self.margin)


class LoggingSettings(BaseModel):
    """Logging setup."""

    level: str = Field(default="INFO")
    file: str | None = Field(default=None, description="Optional log file path")
    buffer_size: int = Field(default=LOG_BUFFER_SIZE, gt=0)

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, value: object) -> str:
        """Gracefully coerce unknown levels to INFO."""
        if isinstance(value, str) and value.upper() in _LOG_LEVELS:
            return value.upper()
        return "INFO"

    @property
    def level_number(self) -> int:
        return logging.getLevelNamesMapping()[self.level]


class UISettings(BaseModel):
    """UI-related user preferences."""

    notify_on_move: bool = Field(default=True, description="Toast when a task changes column")


class BoardConfig(BaseModel):
    """Root configuration model."""

    board: BoardSettings = Field(default_factory=BoardSettings)
    overlay: OverlaySettings = Field(default_factory=OverlaySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    ui: UISettings = Field(default_factory=UISettings)

    @classmethod
    def load(cls, config_path: Path | None = None) -> BoardConfig:
        """Load configuration from TOML file or use defaults."""
        ensure_directories()
        if config_path is None:
            config_path = get_config_path()

        if config_path.exists():
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
            return cls.model_validate(data)

        return cls()

    async def save(self, path: Path) -> None:
        """Serialize current config to TOML file.

        Args:
            path: Path to write config file (created if missing)
        """
        doc = tomlkit.document()

        board_table = tomlkit.table()
        board_table["done_column_id"] = self.board.done_column_id
        board_table["default_project_id"] = self.board.default_project_id
        columns = tomlkit.aot()
        for column in self.board.columns:
            column_table = tomlkit.table()
            for key, value in column.model_dump().items():
                column_table[key] = value
            columns.append(column_table)
        board_table["columns"] = columns
        doc["board"] = board_table

        for name, section in (
            ("overlay", self.overlay),
            ("logging", self.logging),
            ("ui", self.ui),
        ):
            table = tomlkit.table()
            for key, value in section.model_dump().items():
                if value is not None:
                    table[key] = value
            doc[name] = table

        content = tomlkit.dumps(doc)
        await asyncio.to_thread(atomic_write, path, content, operation="save_config")


__all__ = [
    "BoardConfig",
    "BoardSettings",
    "ColumnConfig",
    "LoggingSettings",
    "OverlaySettings",
    "UISettings",
]
