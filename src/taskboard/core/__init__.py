"""Board state engine: models, events, and mutation rules."""

from taskboard.core import events
from taskboard.core.models import entities, enums

__all__ = [
    "entities",
    "enums",
    "events",
]
