# tests/test_migrate_tool.py
from __future__ import annotations

from pathlib import Path

import pytest

from todoapp.app_context import AppContext
from todoapp.repositories.db import Database
from todoapp.tools.migrate import main


def test_up_then_verify(tmp_path: Path, capsys):
    db = tmp_path / "todo.db"
    assert main(["up", "--db", str(db)]) == 0
    assert main(["verify", "--db", str(db)]) == 0
    assert "Verification passed" in capsys.readouterr().out


def test_up_uses_env_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    target = tmp_path / "env.db"
    monkeypatch.setenv("TODOAPP_DB", str(target))
    assert main(["up"]) == 0
    assert target.exists()


def test_verify_missing_file(tmp_path: Path, capsys):
    assert main(["verify", "--db", str(tmp_path / "absent.db")]) == 1
    assert "No database" in capsys.readouterr().out


def test_verify_reports_missing_tables(tmp_path: Path, capsys):
    path = tmp_path / "bare.db"
    Database(path).close()
    assert main(["verify", "--db", str(path)]) == 2
    assert "Missing tables" in capsys.readouterr().out


def test_context_closes_database(tmp_path: Path):
    with AppContext.create(tmp_path / "ctx.db") as ctx:
        assert not ctx.db.closed
    assert ctx.db.closed
