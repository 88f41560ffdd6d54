"""Shared wiring for CLI commands that open a board."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import click

from taskboard.adapters.db import SqlitePersistenceAdapter
from taskboard.config import BoardConfig
from taskboard.core.board import BoardController
from taskboard.debug_log import setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


def load_config(config_path: str | None) -> BoardConfig:
    try:
        config = BoardConfig.load(Path(config_path) if config_path else None)
    except (OSError, ValueError) as exc:
        raise click.ClickException(f"Invalid config: {exc}") from exc
    setup_logging(config.logging)
    return config


@asynccontextmanager
async def open_board(
    db_path: str, config: BoardConfig, project_id: str | None
) -> AsyncIterator[BoardController]:
    """Yield a controller loaded with ``project_id`` from the SQLite store."""
    async with SqlitePersistenceAdapter(
        db_path, default_status=config.board.columns[0].id if config.board.columns else None
    ) as adapter:
        board = BoardController.from_config(config, adapter)
        if not await board.load(project_id or config.board.default_project_id):
            raise click.ClickException(f"Could not read tasks from {db_path}")
        yield board
