# todo-app application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .repositories.db import Database, open_database
from .repositories.sqlite_focus_repository import SQLiteFocusRepository
from .repositories.sqlite_journal_repository import SQLiteJournalRepository
from .repositories.sqlite_task_repository import SQLiteTaskRepository
from .utils.logging_setup import get_logger


@dataclass
class AppContext:
    """Central container for shared app resources.

    Owns the single Database handle; the repositories only borrow it.
    Use as a context manager so the handle is released on every exit path.
    """
    db: Database
    tasks: SQLiteTaskRepository
    journal: SQLiteJournalRepository
    focus: SQLiteFocusRepository

    @classmethod
    def create(cls, db_path: Optional[Path] = None, *, clock: Callable[[], datetime] = datetime.now) -> "AppContext":
        """Open the DB, then run each repository's schema."""
        log = get_logger("AppContext")
        db = open_database(db_path)
        try:
            ctx = cls(
                db=db,
                tasks=SQLiteTaskRepository(db, clock=clock),
                journal=SQLiteJournalRepository(db, clock=clock),
                focus=SQLiteFocusRepository(db, clock=clock),
            )
        except BaseException:
            db.close()
            raise
        log.info("AppContext initialized with DB=%s", db.path)
        return ctx

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
