"""Replace small state and config files without leaving torn writes."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from taskboard.core.errors import PersistenceError

TEMP_PREFIX = ".tmp_"


def atomic_write(path: Path, content: str, *, operation: str = "write_file") -> None:
    """Swap ``content`` into ``path`` in one rename.

    The target keeps its permission bits when it already exists. Any OS
    failure surfaces as :class:`PersistenceError` tagged with ``operation``
    and leaves both the old file and the directory untouched.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else None
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=TEMP_PREFIX)
    except OSError as exc:
        raise PersistenceError(f"Could not write {path}: {exc}", operation=operation) from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        if mode is not None:
            tmp_path.chmod(mode)
        tmp_path.replace(path)
    except BaseException as exc:
        tmp_path.unlink(missing_ok=True)
        if isinstance(exc, OSError):
            raise PersistenceError(f"Could not write {path}: {exc}", operation=operation) from exc
        raise


__all__ = ["TEMP_PREFIX", "atomic_write"]
