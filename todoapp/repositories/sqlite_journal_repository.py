# Rev 0.2.0
from __future__ import annotations

import sqlite3
from datetime import date, datetime
from typing import Callable, Dict, List, Optional

from todoapp.models.entities import JournalEntry, JournalNote
from todoapp.models.errors import ConflictError, NotFoundError, StorageError, ValidationError
from todoapp.utils.logging_setup import get_logger

from .db import Database
from .migrations import migrate
from .rows import chunked, format_ts, parse_date, parse_ts, placeholders

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS journal_notes (
        id         INTEGER PRIMARY KEY AUTOINCREMENT,
        date       TEXT NOT NULL UNIQUE,
        hidden     INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS journal_entries (
        id         INTEGER PRIMARY KEY AUTOINCREMENT,
        note_id    INTEGER NOT NULL REFERENCES journal_notes(id) ON DELETE CASCADE,
        body       TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_journal_entries_note ON journal_entries(note_id)",
    "CREATE INDEX IF NOT EXISTS idx_journal_notes_date ON journal_notes(date)",
]

_NOTE_COLUMNS = "id, date, hidden, created_at, updated_at"
_ENTRY_COLUMNS = "id, note_id, body, created_at"


class SQLiteJournalRepository:
    """
    One note per calendar day, each owning a time-ordered list of entries.
    The UNIQUE constraint on journal_notes.date is the single source of truth
    for "one note per day".
    """

    def __init__(self, db: Database, *, clock: Callable[[], datetime] = datetime.now):
        self._db = db
        self._clock = clock
        self._log = get_logger("journal")
        migrate(db, "journal", SCHEMA)

    @staticmethod
    def _row_to_note(row: sqlite3.Row) -> JournalNote:
        return JournalNote(
            id=int(row["id"]),
            date=parse_date(row["date"]),
            hidden=bool(row["hidden"]),
            created_at=parse_ts(row["created_at"]),
            updated_at=parse_ts(row["updated_at"]),
        )

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> JournalEntry:
        return JournalEntry(
            id=int(row["id"]),
            note_id=int(row["note_id"]),
            body=row["body"],
            created_at=parse_ts(row["created_at"]),
        )

    def _now(self) -> datetime:
        return self._clock().replace(microsecond=0)

    @staticmethod
    def _check_body(body: str) -> str:
        if not body or not body.strip():
            raise ValidationError("journal entry must not be empty")
        return body

    # --------------- notes ---------------
    def get_note_by_date(self, day: date) -> Optional[JournalNote]:
        row = self._db.query_one(
            f"SELECT {_NOTE_COLUMNS} FROM journal_notes WHERE date = ?",
            (day.isoformat(),),
            op="get note",
        )
        if row is None:
            return None
        note = self._row_to_note(row)
        note.entries = self.list_entries(note.id)
        return note

    def create_note(self, day: date) -> JournalNote:
        """Insert the note for `day`; raises ConflictError when it already exists."""
        stamp = format_ts(self._now())
        cur = self._db.execute(
            "INSERT INTO journal_notes (date, hidden, created_at, updated_at) VALUES (?, 0, ?, ?)",
            (day.isoformat(), stamp, stamp),
            op="create note",
        )
        self._log.info("created journal note for %s", day.isoformat())
        return JournalNote(
            id=int(cur.lastrowid),
            date=day,
            created_at=parse_ts(stamp),
            updated_at=parse_ts(stamp),
        )

    def get_or_create_today(self) -> JournalNote:
        today = self._clock().date()
        with self._db.transaction(op="get or create today"):
            note = self.get_note_by_date(today)
            if note is not None:
                return note
            try:
                return self.create_note(today)
            except ConflictError:
                self._log.debug("note for %s appeared concurrently; re-reading", today)
        # the conflicting insert came from elsewhere; the stored row wins
        note = self.get_note_by_date(today)
        if note is None:
            raise StorageError(f"get or create today: note for {today} vanished after conflict")
        return note

    def list_notes(self, include_hidden: bool = False) -> List[JournalNote]:
        """Notes newest first, entries loaded in batched queries keyed by note id."""
        sql = f"SELECT {_NOTE_COLUMNS} FROM journal_notes"
        if not include_hidden:
            sql += " WHERE hidden = 0"
        sql += " ORDER BY date DESC"
        notes = [self._row_to_note(r) for r in self._db.query_all(sql, op="list notes")]
        if notes:
            entries = self._entries_for([n.id for n in notes])
            for n in notes:
                n.entries = entries.get(n.id, [])
        return notes

    def _set_hidden(self, note_id: int, hidden: bool) -> None:
        cur = self._db.execute(
            "UPDATE journal_notes SET hidden = ? WHERE id = ?",
            (int(hidden), note_id),
            op="hide note" if hidden else "restore note",
        )
        if cur.rowcount == 0:
            raise NotFoundError("note", note_id)

    def hide(self, note_id: int) -> None:
        self._set_hidden(note_id, True)

    def restore(self, note_id: int) -> None:
        self._set_hidden(note_id, False)

    def toggle_hidden(self, note_id: int) -> bool:
        with self._db.transaction(op="toggle note"):
            cur = self._db.execute(
                "UPDATE journal_notes SET hidden = NOT hidden WHERE id = ?", (note_id,), op="toggle note"
            )
            if cur.rowcount == 0:
                raise NotFoundError("note", note_id)
            row = self._db.query_one("SELECT hidden FROM journal_notes WHERE id = ?", (note_id,))
        return bool(row["hidden"])

    # --------------- entries ---------------
    def _touch_note(self, note_id: int, stamp: str, op: str) -> None:
        self._db.execute("UPDATE journal_notes SET updated_at = ? WHERE id = ?", (stamp, note_id), op=op)

    def _note_for_entry(self, entry_id: int, op: str) -> int:
        row = self._db.query_one("SELECT note_id FROM journal_entries WHERE id = ?", (entry_id,), op=op)
        if row is None:
            raise NotFoundError("entry", entry_id)
        return int(row["note_id"])

    def add_entry(self, note_id: int, body: str, *, created_at: Optional[datetime] = None) -> int:
        body = self._check_body(body)
        stamp = format_ts(self._now())
        with self._db.transaction(op="add entry"):
            if self._db.query_one("SELECT 1 FROM journal_notes WHERE id = ?", (note_id,), op="add entry") is None:
                raise NotFoundError("note", note_id)
            cur = self._db.execute(
                "INSERT INTO journal_entries (note_id, body, created_at) VALUES (?, ?, ?)",
                (note_id, body, format_ts(created_at) if created_at else stamp),
                op="add entry",
            )
            self._touch_note(note_id, stamp, "add entry")
        return int(cur.lastrowid)

    def restore_entry(self, note_id: int, body: str, created_at: datetime) -> int:
        """Re-insert a previously deleted entry with its original timestamp."""
        return self.add_entry(note_id, body, created_at=created_at)

    def edit_entry(self, entry_id: int, body: str) -> None:
        body = self._check_body(body)
        with self._db.transaction(op="edit entry"):
            note_id = self._note_for_entry(entry_id, "edit entry")
            self._db.execute("UPDATE journal_entries SET body = ? WHERE id = ?", (body, entry_id), op="edit entry")
            self._touch_note(note_id, format_ts(self._now()), "edit entry")

    def delete_entry(self, entry_id: int) -> JournalEntry:
        """Remove an entry and return it so callers can offer an undo."""
        with self._db.transaction(op="delete entry"):
            row = self._db.query_one(
                f"SELECT {_ENTRY_COLUMNS} FROM journal_entries WHERE id = ?", (entry_id,), op="delete entry"
            )
            if row is None:
                raise NotFoundError("entry", entry_id)
            entry = self._row_to_entry(row)
            self._db.execute("DELETE FROM journal_entries WHERE id = ?", (entry_id,), op="delete entry")
            self._touch_note(entry.note_id, format_ts(self._now()), "delete entry")
        return entry

    def list_entries(self, note_id: int) -> List[JournalEntry]:
        rows = self._db.query_all(
            f"SELECT {_ENTRY_COLUMNS} FROM journal_entries WHERE note_id = ? ORDER BY created_at ASC, id ASC",
            (note_id,),
            op="list entries",
        )
        return [self._row_to_entry(r) for r in rows]

    def _entries_for(self, note_ids: List[int]) -> Dict[int, List[JournalEntry]]:
        result: Dict[int, List[JournalEntry]] = {}
        for ids in chunked(note_ids):
            rows = self._db.query_all(
                f"SELECT {_ENTRY_COLUMNS} FROM journal_entries WHERE note_id IN ({placeholders(ids)}) "
                f"ORDER BY created_at ASC, id ASC",
                ids,
                op="batch list entries",
            )
            for r in rows:
                entry = self._row_to_entry(r)
                result.setdefault(entry.note_id, []).append(entry)
        return result
