from __future__ import annotations

import stat

import pytest

from taskboard.atomic import TEMP_PREFIX, atomic_write
from taskboard.core.errors import PersistenceError

pytestmark = pytest.mark.unit


def test_creates_parents_and_replaces_content(tmp_path):
    path = tmp_path / "nested" / "file.txt"

    atomic_write(path, "one")
    atomic_write(path, "two")

    assert path.read_text(encoding="utf-8") == "two"
    assert not [p for p in path.parent.iterdir() if p.name.startswith(TEMP_PREFIX)]


def test_keeps_existing_permissions(tmp_path):
    path = tmp_path / "shared.json"
    path.write_text("{}")
    path.chmod(0o644)

    atomic_write(path, '{"a": 1}')

    assert stat.S_IMODE(path.stat().st_mode) == 0o644


def test_os_failure_becomes_persistence_error(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    with pytest.raises(PersistenceError) as excinfo:
        atomic_write(blocker / "file.txt", "x", operation="save_state")

    assert excinfo.value.operation == "save_state"
    assert excinfo.value.code == "PERSISTENCE_FAILED"


def test_failed_replace_leaves_old_file_and_no_temp(tmp_path, monkeypatch):
    path = tmp_path / "file.txt"
    path.write_text("old")

    def refuse(self, target):
        raise PermissionError("read-only")

    monkeypatch.setattr("pathlib.Path.replace", refuse)

    with pytest.raises(PersistenceError):
        atomic_write(path, "new")
    assert path.read_text() == "old"
    assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]
