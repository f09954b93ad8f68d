# Rev 0.2.0
from __future__ import annotations

import sqlite3
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List

from todoapp.models.entities import FocusSession
from todoapp.models.errors import NotFoundError, ValidationError
from todoapp.utils.logging_setup import get_logger

from .db import Database
from .migrations import migrate
from .rows import format_ts, parse_date, parse_ts

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS focus_sessions (
        id           INTEGER PRIMARY KEY AUTOINCREMENT,
        task_id      INTEGER NOT NULL DEFAULT 0,
        duration_s   INTEGER NOT NULL,
        started_at   TEXT NOT NULL,
        completed_at TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_focus_sessions_task ON focus_sessions(task_id)",
    "CREATE INDEX IF NOT EXISTS idx_focus_sessions_completed ON focus_sessions(completed_at)",
]

_COLUMNS = "id, task_id, duration_s, started_at, completed_at"


class SQLiteFocusRepository:
    """Pomodoro sessions: lifecycle, per-task history, per-day completion counts."""

    def __init__(self, db: Database, *, clock: Callable[[], datetime] = datetime.now):
        self._db = db
        self._clock = clock
        self._log = get_logger("focus")
        migrate(db, "focus", SCHEMA)

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> FocusSession:
        return FocusSession(
            id=int(row["id"]),
            task_id=int(row["task_id"]),
            duration=timedelta(seconds=int(row["duration_s"])),
            started_at=parse_ts(row["started_at"]),
            completed_at=parse_ts(row["completed_at"]),
        )

    def _now(self) -> datetime:
        return self._clock().replace(microsecond=0)

    def create(self, session: FocusSession) -> int:
        if session.duration <= timedelta(0):
            raise ValidationError("focus session duration must be positive")
        if session.completed_at is not None and session.completed_at < session.started_at:
            raise ValidationError("focus session cannot complete before it starts")
        cur = self._db.execute(
            "INSERT INTO focus_sessions (task_id, duration_s, started_at, completed_at) VALUES (?, ?, ?, ?)",
            (
                int(session.task_id or 0),
                int(session.duration.total_seconds()),
                format_ts(session.started_at),
                format_ts(session.completed_at) if session.completed_at else None,
            ),
            op="create focus session",
        )
        session.id = int(cur.lastrowid)
        self._log.info("started focus session %d (task %s)", session.id, session.task_id or "-")
        return session.id

    def get(self, session_id: int) -> FocusSession:
        row = self._db.query_one(
            f"SELECT {_COLUMNS} FROM focus_sessions WHERE id = ?", (session_id,), op="get focus session"
        )
        if row is None:
            raise NotFoundError("focus session", session_id)
        return self._row_to_session(row)

    def complete(self, session_id: int) -> datetime:
        """Stamp completion; a second call on the same session raises NotFoundError."""
        # MAX() keeps completed_at from ever landing before started_at
        cur = self._db.execute(
            """
            UPDATE focus_sessions
               SET completed_at = MAX(?, started_at)
             WHERE id = ? AND completed_at IS NULL
            """,
            (format_ts(self._now()), session_id),
            op="complete focus session",
        )
        if cur.rowcount == 0:
            raise NotFoundError("focus session", session_id)
        return self.get(session_id).completed_at

    def list_by_task(self, task_id: int) -> List[FocusSession]:
        rows = self._db.query_all(
            f"SELECT {_COLUMNS} FROM focus_sessions WHERE task_id = ? ORDER BY started_at DESC, id DESC",
            (task_id,),
            op="list focus sessions",
        )
        return [self._row_to_session(r) for r in rows]

    def today_count(self) -> int:
        row = self._db.query_one(
            "SELECT COUNT(*) FROM focus_sessions WHERE completed_at IS NOT NULL AND DATE(completed_at) = ?",
            (self._clock().date().isoformat(),),
            op="focus today count",
        )
        return int(row[0])

    def completions_by_day(self, window_days: int) -> Dict[date, int]:
        """Completed sessions per local calendar day over the trailing window."""
        cutoff = self._now() - timedelta(days=window_days)
        rows = self._db.query_all(
            """
            SELECT DATE(completed_at) AS day, COUNT(*) AS n
              FROM focus_sessions
             WHERE completed_at IS NOT NULL AND completed_at >= ?
             GROUP BY day
            """,
            (format_ts(cutoff),),
            op="focus completions by day",
        )
        return {parse_date(r["day"]): int(r["n"]) for r in rows}
