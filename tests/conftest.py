"""Pytest fixtures for taskboard tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from hypothesis import Phase, Verbosity, settings

_TEST_BASE_DIR = Path(tempfile.mkdtemp(prefix="taskboard-tests-"))
os.environ["TASKBOARD_DATA_DIR"] = str(_TEST_BASE_DIR / "data")
os.environ["TASKBOARD_CONFIG_DIR"] = str(_TEST_BASE_DIR / "config")

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from taskboard.adapters.db import SqlitePersistenceAdapter
    from taskboard.core.board import BoardController
    from taskboard.core.persistence import InMemoryPersistenceAdapter
    from tests.helpers.events import EventRecorder


settings.register_profile(
    "ci",
    max_examples=100,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)
settings.register_profile(
    "dev",
    max_examples=20,
    deadline=500,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture
def memory_adapter() -> InMemoryPersistenceAdapter:
    """Empty in-memory persistence adapter."""
    from taskboard.core.persistence import InMemoryPersistenceAdapter

    return InMemoryPersistenceAdapter()


@pytest.fixture
def board(memory_adapter: InMemoryPersistenceAdapter) -> BoardController:
    """Controller over the in-memory adapter with a frozen clock."""
    from taskboard.core.board import BoardController
    from tests.helpers.factories import NOW

    return BoardController(memory_adapter, clock=lambda: NOW)


@pytest.fixture
def recorder(board: BoardController) -> EventRecorder:
    """Record every event the board publishes."""
    from tests.helpers.events import EventRecorder

    return EventRecorder.attach(board.events)


@pytest.fixture
async def sqlite_adapter(tmp_path: Path) -> AsyncGenerator[SqlitePersistenceAdapter, None]:
    """Initialized SQLite adapter on a temporary database file."""
    from taskboard.adapters.db import SqlitePersistenceAdapter

    adapter = SqlitePersistenceAdapter(tmp_path / "board.db")
    await adapter.initialize()
    yield adapter
    await adapter.close()
