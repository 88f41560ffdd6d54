"""Taskboard: kanban board state engine with a Textual front-end."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("taskboard")
except PackageNotFoundError:
    # Running from a source checkout without installed metadata.
    __version__ = "dev"

__all__ = ["__version__"]
