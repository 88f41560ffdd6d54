"""Fixtures for board-level unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from taskboard.core.board import BoardController
from tests.helpers.adapters import FlakyAdapter
from tests.helpers.factories import NOW

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from taskboard.core.models.entities import Task


@pytest.fixture
def flaky() -> FlakyAdapter:
    return FlakyAdapter()


@pytest.fixture
def make_board(flaky: FlakyAdapter) -> Callable[..., Awaitable[BoardController]]:
    """Seed ``flaky`` with tasks and return a loaded controller over it."""

    async def _make(*tasks: Task, **kwargs) -> BoardController:
        flaky.seed(*tasks)
        kwargs.setdefault("clock", lambda: NOW)
        board = BoardController(flaky, **kwargs)
        assert await board.load("default")
        return board

    return _make
