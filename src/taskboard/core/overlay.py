"""Quick-action overlay: a floating menu anchored to the hovered card."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from taskboard.constants import OVERLAY_GAP, OVERLAY_HEIGHT, OVERLAY_MARGIN, OVERLAY_WIDTH

if TYPE_CHECKING:
    from collections.abc import Iterable

    from taskboard.core.models.enums import QuickMenu

log = logging.getLogger(__name__)

WINDOW_SCROLL_SOURCE = "window"


@dataclass(frozen=True, slots=True)
class Rect:
    """Anchor bounds in viewport coordinates."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @classmethod
    def from_size(cls, left: float, top: float, width: float, height: float) -> Rect:
        return cls(left=left, top=top, right=left + width, bottom=top + height)


@dataclass(frozen=True, slots=True)
class Viewport:
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class OverlaySize:
    width: float = OVERLAY_WIDTH
    height: float = OVERLAY_HEIGHT
    gap: float = OVERLAY_GAP
    margin: float = OVERLAY_MARGIN


@dataclass(frozen=True, slots=True)
class OverlayPosition:
    top: float
    left: float


def compute_overlay_position(
    anchor: Rect,
    viewport: Viewport,
    size: OverlaySize | None = None,
) -> OverlayPosition:
    """Place the overlay beside the anchor card.

    Right of the card first, then left of it, then below it. The top is
    finally pulled up so the overlay's bottom stays inside the viewport.
    """
    size = size or OverlaySize()
    left = anchor.right + size.gap
    top = anchor.top

    if left + size.width > viewport.width:
        left = anchor.left - size.width - size.gap

    if left < 0:
        left = anchor.left
        top = anchor.bottom + size.gap

    if top + size.height > viewport.height:
        top = max(size.margin, viewport.height - size.height - size.margin)

    return OverlayPosition(top=top, left=left)


@dataclass(frozen=True, slots=True)
class OverlayOpen:
    anchor_task_id: str
    menu: QuickMenu
    position: OverlayPosition
    scroll_sources: frozenset[str] = field(default_factory=frozenset)


type OverlayState = OverlayOpen | None


class QuickActionOverlay:
    """Single-instance overlay state: closed, or open on one anchor task."""

    def __init__(self, size: OverlaySize | None = None) -> None:
        self._size = size or OverlaySize()
        self._state: OverlayState = None

    @property
    def state(self) -> OverlayState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is not None

    @property
    def anchor_task_id(self) -> str | None:
        return self._state.anchor_task_id if self._state is not None else None

    def open(
        self,
        task_id: str,
        menu: QuickMenu,
        anchor: Rect,
        viewport: Viewport,
        *,
        scroll_ancestors: Iterable[str] = (),
    ) -> OverlayOpen:
        """Open on ``task_id``, replacing whatever overlay was open before."""
        if self._state is not None and self._state.anchor_task_id != task_id:
            log.debug("Closing overlay for %s to open on %s", self._state.anchor_task_id, task_id)
        self._state = OverlayOpen(
            anchor_task_id=task_id,
            menu=menu,
            position=compute_overlay_position(anchor, viewport, self._size),
            scroll_sources=frozenset((*scroll_ancestors, WINDOW_SCROLL_SOURCE)),
        )
        return self._state

    def on_scroll(self, source_id: str, anchor: Rect, viewport: Viewport) -> bool:
        """Recompute the position for a scroll of one of the anchor's ancestors.

        Returns True when the position changed.
        """
        state = self._state
        if state is None or source_id not in state.scroll_sources:
            return False
        position = compute_overlay_position(anchor, viewport, self._size)
        if position == state.position:
            return False
        self._state = OverlayOpen(
            anchor_task_id=state.anchor_task_id,
            menu=state.menu,
            position=position,
            scroll_sources=state.scroll_sources,
        )
        return True

    def close(self) -> bool:
        was_open = self._state is not None
        self._state = None
        return was_open


__all__ = [
    "WINDOW_SCROLL_SOURCE",
    "OverlayOpen",
    "OverlayPosition",
    "OverlaySize",
    "OverlayState",
    "QuickActionOverlay",
    "Rect",
    "Viewport",
    "compute_overlay_position",
]
