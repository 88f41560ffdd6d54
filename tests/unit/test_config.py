"""Tests for TOML configuration loading and saving."""

from __future__ import annotations

import pydantic
import pytest

from taskboard.config import BoardConfig, ColumnConfig, LoggingSettings
from taskboard.constants import DEFAULT_COLUMNS
from taskboard.core.board import BoardController
from taskboard.core.persistence import InMemoryPersistenceAdapter

pytestmark = pytest.mark.unit


class TestLoad:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = BoardConfig.load(tmp_path / "missing.toml")

        assert [column.id for column in config.board.columns] == [cid for cid, _, _ in DEFAULT_COLUMNS]
        assert config.ui.notify_on_move is True

    def test_partial_file_keeps_other_defaults(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[ui]\nnotify_on_move = false\n\n[logging]\nlevel = "debug"\n')

        config = BoardConfig.load(path)

        assert config.ui.notify_on_move is False
        assert config.logging.level == "DEBUG"
        assert config.board.done_column_id == "DONE"

    def test_unknown_log_level_falls_back_to_info(self):
        assert LoggingSettings(level="chatty").level == "INFO"
        assert LoggingSettings(level="warning").level_number == 30

    def test_duplicate_column_ids_are_rejected(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[[board.columns]]\nid = "A"\nname = "One"\n\n[[board.columns]]\nid = "A"\nname = "Two"\n'
        )

        with pytest.raises(pydantic.ValidationError):
            BoardConfig.load(path)

    def test_blank_column_name_is_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            ColumnConfig(id="A", name="  ")


class TestSave:
    async def test_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "config.toml"
        config = BoardConfig.model_validate(
            {
                "board": {
                    "columns": [
                        {"id": "BACKLOG", "name": "Backlog", "color": "#123456"},
                        {"id": "SHIPPED", "name": "Shipped"},
                    ],
                    "done_column_id": "SHIPPED",
                },
                "overlay": {"width": 40, "height": 9},
                "logging": {"level": "ERROR", "file": "/tmp/taskboard.log"},
            }
        )

        await config.save(path)

        assert BoardConfig.load(path) == config

    async def test_saved_file_is_readable_toml(self, tmp_path):
        path = tmp_path / "config.toml"

        await BoardConfig().save(path)

        text = path.read_text()
        assert "[[board.columns]]" in text
        assert "[overlay]" in text


class TestControllerFromConfig:
    def test_columns_and_options_come_from_config(self):
        config = BoardConfig.model_validate(
            {
                "board": {
                    "columns": [{"id": "A", "name": "Alpha"}, {"id": "B", "name": "Beta"}],
                    "done_column_id": "B",
                },
                "ui": {"notify_on_move": False},
            }
        )

        board = BoardController.from_config(config, InMemoryPersistenceAdapter())

        assert board.column_ids() == ("A", "B")
        assert [column.name for column in board.columns] == ["Alpha", "Beta"]
