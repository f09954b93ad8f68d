# Rev 0.2.0
from __future__ import annotations

from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from todoapp.models.entities import JournalEntry, JournalNote
from todoapp.models.errors import TodoAppError
from todoapp.utils.logging_setup import get_logger


class JournalViewModel(QObject):
    todayLoaded = Signal(object)
    notesReloaded = Signal(object)
    errorRaised = Signal(str)

    def __init__(self, journal_repo):
        super().__init__()
        self._journal = journal_repo
        self._log = get_logger("ui.journal")
        self._today: Optional[JournalNote] = None
        self._last_deleted: Optional[JournalEntry] = None

    @property
    def today(self) -> Optional[JournalNote]:
        return self._today

    @property
    def can_undo(self) -> bool:
        return self._last_deleted is not None

    # ---- queries
    def load_today(self) -> Optional[JournalNote]:
        try:
            self._today = self._journal.get_or_create_today()
        except TodoAppError as exc:
            self._report("load today", exc)
            return None
        self.todayLoaded.emit(self._today)
        return self._today

    def reload_notes(self, include_hidden: bool = False) -> List[JournalNote]:
        try:
            notes = self._journal.list_notes(include_hidden=include_hidden)
        except TodoAppError as exc:
            self._report("list notes", exc)
            return []
        self.notesReloaded.emit(notes)
        return notes

    # ---- commands
    def add_entry(self, body: str) -> Optional[int]:
        # re-resolve every time: a window left open past midnight must write to the new day
        note = self.load_today()
        if note is None:
            return None
        try:
            eid = self._journal.add_entry(note.id, body)
        except TodoAppError as exc:
            self._report("add entry", exc)
            return None
        self.load_today()
        return eid

    def edit_entry(self, entry_id: int, body: str) -> bool:
        try:
            self._journal.edit_entry(entry_id, body)
        except TodoAppError as exc:
            self._report("edit entry", exc)
            return False
        self.load_today()
        return True

    def delete_entry(self, entry_id: int) -> bool:
        try:
            self._last_deleted = self._journal.delete_entry(entry_id)
        except TodoAppError as exc:
            self._report("delete entry", exc)
            return False
        self.load_today()
        return True

    def undo_delete(self) -> Optional[int]:
        """Put back the most recently deleted entry with its original timestamp."""
        entry = self._last_deleted
        if entry is None:
            return None
        try:
            eid = self._journal.restore_entry(entry.note_id, entry.body, entry.created_at)
        except TodoAppError as exc:
            self._report("undo delete", exc)
            return None
        self._last_deleted = None
        self.load_today()
        return eid

    def toggle_hidden(self, note_id: int) -> Optional[bool]:
        try:
            hidden = self._journal.toggle_hidden(note_id)
        except TodoAppError as exc:
            self._report("toggle note", exc)
            return None
        self.reload_notes()
        return hidden

    def _report(self, op: str, exc: TodoAppError) -> None:
        self._log.warning("%s failed: %s", op, exc)
        self.errorRaised.emit(f"{op}: {exc}")
