"""Tests for quick-action overlay placement and state."""

from __future__ import annotations

import pytest

from taskboard.core.models.enums import QuickMenu
from taskboard.core.overlay import (
    WINDOW_SCROLL_SOURCE,
    OverlayPosition,
    OverlaySize,
    QuickActionOverlay,
    Rect,
    Viewport,
    compute_overlay_position,
)

pytestmark = pytest.mark.unit

SIZE = OverlaySize(width=320, height=400, gap=8, margin=8)
VIEWPORT = Viewport(1280, 800)


class TestPlacement:
    def test_right_of_anchor_when_it_fits(self):
        anchor = Rect.from_size(100, 50, 200, 80)

        assert compute_overlay_position(anchor, VIEWPORT, SIZE) == OverlayPosition(top=50, left=308)

    def test_left_of_anchor_when_right_overflows(self):
        anchor = Rect.from_size(900, 50, 200, 80)

        position = compute_overlay_position(anchor, VIEWPORT, SIZE)

        assert position == OverlayPosition(top=50, left=900 - 320 - 8)

    def test_below_anchor_when_neither_side_fits(self):
        viewport = Viewport(500, 800)
        anchor = Rect.from_size(100, 50, 300, 80)

        position = compute_overlay_position(anchor, viewport, SIZE)

        assert position == OverlayPosition(top=50 + 80 + 8, left=100)

    def test_bottom_overflow_pulls_top_up(self):
        anchor = Rect.from_size(100, 600, 200, 80)

        position = compute_overlay_position(anchor, VIEWPORT, SIZE)

        assert position.top == 800 - 400 - 8
        assert position.left == 308

    def test_top_never_goes_above_margin(self):
        anchor = Rect.from_size(100, 200, 200, 80)

        position = compute_overlay_position(anchor, Viewport(1280, 300), SIZE)

        assert position.top == 8


class TestOverlayState:
    def test_single_instance_follows_latest_anchor(self):
        overlay = QuickActionOverlay(SIZE)
        overlay.open("A", QuickMenu.ASSIGN, Rect.from_size(0, 0, 100, 50), VIEWPORT)

        state = overlay.open("B", QuickMenu.TAGS, Rect.from_size(0, 100, 100, 50), VIEWPORT)

        assert overlay.anchor_task_id == "B"
        assert state.menu is QuickMenu.TAGS

    def test_scroll_of_unrelated_source_is_ignored(self):
        overlay = QuickActionOverlay(SIZE)
        overlay.open(
            "A", QuickMenu.ASSIGN, Rect.from_size(0, 0, 100, 50), VIEWPORT, scroll_ancestors=["col"]
        )

        assert not overlay.on_scroll("other", Rect.from_size(0, 30, 100, 50), VIEWPORT)

    def test_scroll_of_ancestor_or_window_repositions(self):
        overlay = QuickActionOverlay(SIZE)
        overlay.open(
            "A", QuickMenu.ASSIGN, Rect.from_size(0, 0, 100, 50), VIEWPORT, scroll_ancestors=["col"]
        )

        assert overlay.on_scroll("col", Rect.from_size(0, 30, 100, 50), VIEWPORT)
        assert overlay.state.position.top == 30
        assert overlay.on_scroll(WINDOW_SCROLL_SOURCE, Rect.from_size(0, 10, 100, 50), VIEWPORT)
        assert overlay.state.position.top == 10

    def test_close_reports_whether_it_was_open(self):
        overlay = QuickActionOverlay(SIZE)

        assert not overlay.close()
        overlay.open("A", QuickMenu.DUE_DATE, Rect.from_size(0, 0, 10, 10), VIEWPORT)
        assert overlay.close()
        assert overlay.state is None
