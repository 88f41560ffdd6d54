"""Pure formatting functions for task cards."""

from __future__ import annotations

from datetime import date


def truncate_text(text: str, max_length: int) -> str:
    """Truncate text if too long.

    Args:
        text: Text to truncate
        max_length: Maximum length including ellipsis

    Returns:
        Truncated text with ellipsis if needed
    """
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def format_due(due: date | None, today: date) -> str:
    if due is None:
        return ""
    delta = (due - today).days
    if delta < 0:
        return f"overdue {due:%b %d}"
    if delta == 0:
        return "due today"
    if delta == 1:
        return "due tomorrow"
    return f"due {due:%b %d}"


def format_tags(tags: frozenset[str], limit: int = 3) -> str:
    ordered = sorted(tags)
    shown = " ".join(f"#{tag}" for tag in ordered[:limit])
    if len(ordered) > limit:
        shown += f" +{len(ordered) - limit}"
    return shown


def safe_dom_id(prefix: str, value: str) -> str:
    """Build a Textual-safe DOM id from an arbitrary column or task id."""
    cleaned = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in value)
    return f"{prefix}-{cleaned}"
