# Rev 0.2.0

"""Pytest fixtures for todo-app (Rev 0.2.0)"""
from __future__ import annotations
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from todoapp.app_context import AppContext
from todoapp.repositories.db import Database
from todoapp.repositories.sqlite_focus_repository import SQLiteFocusRepository
from todoapp.repositories.sqlite_journal_repository import SQLiteJournalRepository
from todoapp.repositories.sqlite_task_repository import SQLiteTaskRepository


class FakeClock:
    """Callable stand-in for datetime.now that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    # keep every test away from the real ~/.todo-app and log dir
    monkeypatch.setenv("TODOAPP_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.delenv("TODOAPP_DB", raising=False)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 19, 9, 30, 0))


@pytest.fixture()
def db(tmp_path: Path):
    database = Database(tmp_path / "todo.db")
    try:
        yield database
    finally:
        database.close()


@pytest.fixture()
def task_repo(db: Database, clock: FakeClock) -> SQLiteTaskRepository:
    return SQLiteTaskRepository(db, clock=clock)


@pytest.fixture()
def journal_repo(db: Database, clock: FakeClock) -> SQLiteJournalRepository:
    return SQLiteJournalRepository(db, clock=clock)


@pytest.fixture()
def focus_repo(db: Database, clock: FakeClock) -> SQLiteFocusRepository:
    return SQLiteFocusRepository(db, clock=clock)


@pytest.fixture()
def ctx(tmp_path: Path):
    context = AppContext.create(tmp_path / "ctx" / "todo.db")
    try:
        yield context
    finally:
        context.close()
