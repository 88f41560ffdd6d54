"""Main taskboard TUI application."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from textual.app import App

from taskboard.adapters.db import SqlitePersistenceAdapter
from taskboard.config import BoardConfig
from taskboard.constants import DEFAULT_DB_PATH
from taskboard.core.board import BoardController
from taskboard.core.events import BoardNotice
from taskboard.core.overlay import OverlaySize
from taskboard.debug_log import export_logs_to_file, setup_logging
from taskboard.paths import ensure_directories, get_debug_log_path
from taskboard.tui.keybindings import APP_BINDINGS
from taskboard.tui.screen import BoardScreen

if TYPE_CHECKING:
    from taskboard.core.events import DomainEvent
    from taskboard.core.persistence import ChannelNotifier, PersistenceAdapter

log = logging.getLogger(__name__)

# Terminal cells, not pixels.
TUI_OVERLAY_SIZE = OverlaySize(width=34, height=7, gap=1, margin=1)


class TaskboardApp(App):
    """Kanban board TUI backed by the SQLite store."""

    TITLE = "taskboard"
    CSS_PATH = "styles/taskboard.tcss"

    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        db_path: str = DEFAULT_DB_PATH,
        *,
        config: BoardConfig | None = None,
        project_id: str | None = None,
        adapter: PersistenceAdapter | None = None,
        notifier: ChannelNotifier | None = None,
    ) -> None:
        super().__init__()
        self.db_path = db_path
        self.config = config or BoardConfig()
        self.project_id = project_id or self.config.board.default_project_id
        self._adapter = adapter
        self._owned_adapter: SqlitePersistenceAdapter | None = None
        self._notifier = notifier
        self._board: BoardController | None = None

    @property
    def board(self) -> BoardController:
        if self._board is None:
            raise RuntimeError("Board not initialized")
        return self._board

    async def on_mount(self) -> None:
        """Open the store, build the board and load the project."""
        setup_logging(self.config.logging)

        adapter = self._adapter
        if adapter is None:
            columns = self.config.board.columns
            self._owned_adapter = SqlitePersistenceAdapter(
                self.db_path, default_status=columns[0].id if columns else None
            )
            await self._owned_adapter.initialize()
            adapter = self._owned_adapter

        board = BoardController.from_config(
            self.config, adapter, notifier=self._notifier, overlay_size=TUI_OVERLAY_SIZE
        )
        notice_handler = self._on_notice
        board.events.add_handler(notice_handler, BoardNotice)
        self._board = board

        await self.push_screen(BoardScreen(board))
        if not await board.load(self.project_id):
            self.notify(f"Could not load project {self.project_id}", severity="error")
        log.info("Board ready for project %s", self.project_id)

    async def on_unmount(self) -> None:
        """Close the store if this app opened it."""
        if self._owned_adapter is not None:
            await self._owned_adapter.close()
            self._owned_adapter = None

    def _on_notice(self, event: DomainEvent) -> None:
        assert isinstance(event, BoardNotice)
        self.notify(event.message, severity=event.severity.value)

    def action_export_logs(self) -> None:
        """Write the in-memory log buffer to the data directory."""
        try:
            ensure_directories()
            log_path = get_debug_log_path()
            count = export_logs_to_file(log_path)
        except OSError as exc:
            self.notify(f"Failed to export logs: {exc}", severity="error")
            return
        self.notify(f"Exported {count} log entries to {log_path}")
