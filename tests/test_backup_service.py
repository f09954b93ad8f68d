# tests/test_backup_service.py
from __future__ import annotations

import sqlite3
from datetime import date
from pathlib import Path

import pytest

from todoapp.models.entities import Task
from todoapp.models.errors import StorageError, ValidationError
from todoapp.repositories.db import Database
from todoapp.services.backup_service import backup, backup_name, prune_backups

TODAY = date(2026, 10, 19)


def _touch(directory: Path, name: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    p = directory / name
    p.write_bytes(b"")
    return p


def test_backup_writes_a_readable_snapshot(task_repo, db: Database, tmp_path: Path):
    task_repo.create(Task(id=None, title="survives backup"))
    out = tmp_path / "backups"

    written = backup(db, out, 30, today=TODAY)

    assert written == out / "backup-2026-10-19.db"
    # no temp files left next to the snapshot
    assert sorted(p.name for p in out.iterdir()) == ["backup-2026-10-19.db"]
    con = sqlite3.connect(written)
    try:
        rows = con.execute("SELECT title FROM tasks").fetchall()
    finally:
        con.close()
    assert rows == [("survives backup",)]


def test_backup_creates_nested_directory(db: Database, tmp_path: Path):
    out = tmp_path / "a" / "b" / "c"
    assert backup(db, out, 30, today=TODAY) is not None
    assert (out / backup_name(TODAY)).is_file()


def test_second_backup_same_day_skips_snapshot_but_still_prunes(db: Database, tmp_path: Path):
    out = tmp_path / "backups"
    assert backup(db, out, 7, today=TODAY) is not None
    stale = _touch(out, "backup-2026-10-01.db")

    assert backup(db, out, 7, today=TODAY) is None
    assert not stale.exists()
    assert [p.name for p in out.iterdir()] == ["backup-2026-10-19.db"]


def test_prune_keeps_recent_and_unrelated_files(tmp_path: Path):
    out = tmp_path / "backups"
    old = _touch(out, "backup-2026-10-09.db")        # 10 days
    edge = _touch(out, "backup-2026-10-12.db")       # exactly 7 days
    recent = _touch(out, "backup-2026-10-17.db")     # 2 days
    notes = _touch(out, "notes.txt")
    odd = _touch(out, "backup-latest.db")
    bogus = _touch(out, "backup-2026-02-30.db")

    removed = prune_backups(out, 7, today=TODAY)

    assert removed == [old]
    assert not old.exists()
    for p in (edge, recent, notes, odd, bogus):
        assert p.exists()


def test_prune_reports_every_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    out = tmp_path / "backups"
    locked = _touch(out, "backup-2026-09-01.db")
    other = _touch(out, "backup-2026-09-02.db")
    real_unlink = Path.unlink

    def _unlink(self, missing_ok=False):
        if self.name == locked.name:
            raise PermissionError("denied")
        return real_unlink(self, missing_ok=missing_ok)

    monkeypatch.setattr(Path, "unlink", _unlink)

    with pytest.raises(StorageError) as exc:
        prune_backups(out, 7, today=TODAY)

    assert [p for p, _ in exc.value.failures] == [locked]
    assert locked.exists()
    assert not other.exists()


def test_snapshot_failure_leaves_no_file(tmp_path: Path):
    closed = Database(tmp_path / "closed.db")
    closed.close()
    out = tmp_path / "backups"

    with pytest.raises(StorageError):
        backup(closed, out, 30, today=TODAY)
    assert list(out.iterdir()) == []


def test_negative_retention_is_rejected_before_any_write(db: Database, tmp_path: Path):
    out = tmp_path / "backups"
    with pytest.raises(ValidationError):
        backup(db, out, -1, today=TODAY)
    assert not out.exists()

    _touch(out, backup_name(TODAY))
    with pytest.raises(ValidationError):
        prune_backups(out, -1, today=TODAY)
    assert (out / backup_name(TODAY)).exists()


def test_zero_retention_keeps_todays_snapshot(db: Database, tmp_path: Path):
    out = tmp_path / "backups"
    _touch(out, backup_name(date(2026, 10, 18)))

    written = backup(db, out, 0, today=TODAY)

    assert written == out / backup_name(TODAY)
    assert [p.name for p in out.iterdir()] == [backup_name(TODAY)]
