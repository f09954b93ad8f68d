# tests/test_migrations.py
from __future__ import annotations

import pytest

from todoapp.models.entities import Task
from todoapp.models.errors import StorageError
from todoapp.repositories import sqlite_task_repository
from todoapp.repositories.db import Database
from todoapp.repositories.migrations import migrate
from todoapp.repositories.sqlite_focus_repository import SQLiteFocusRepository
from todoapp.repositories.sqlite_journal_repository import SQLiteJournalRepository
from todoapp.repositories.sqlite_task_repository import SQLiteTaskRepository


def test_schemas_are_idempotent(db: Database):
    for _ in range(2):
        SQLiteTaskRepository(db)
        SQLiteJournalRepository(db)
        SQLiteFocusRepository(db)
    assert {
        "tasks", "subtasks", "tags", "journal_notes", "journal_entries", "focus_sessions",
    } <= db.table_names()


def test_reapplying_keeps_existing_rows(db: Database):
    repo = SQLiteTaskRepository(db)
    repo.create(Task(id=None, title="keep me"))
    migrate(db, "tasks", sqlite_task_repository.SCHEMA)
    assert [t.title for t in repo.list()] == ["keep me"]


def test_failed_migration_applies_nothing(db: Database):
    statements = [
        "CREATE TABLE IF NOT EXISTS first_half (x INTEGER)",
        "CREATE TABLE broken (",
    ]
    with pytest.raises(StorageError):
        migrate(db, "broken", statements)
    assert "first_half" not in db.table_names()
