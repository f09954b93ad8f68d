# Rev 0.1.0
"""Entities for the three domains sharing one store: tasks, journal, focus."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import IntEnum
from typing import List, Optional


class Status(IntEnum):
    PENDING = 0
    IN_PROGRESS = 1
    DONE = 2

    @property
    def label(self) -> str:
        return {Status.IN_PROGRESS: "In Progress", Status.DONE: "Done"}.get(self, "Pending")

    def next(self) -> "Status":
        return {Status.PENDING: Status.IN_PROGRESS, Status.IN_PROGRESS: Status.DONE}.get(self, Status.PENDING)


class Priority(IntEnum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2
    URGENT = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def short(self) -> str:
        return {Priority.MEDIUM: "MED", Priority.HIGH: "HIGH", Priority.URGENT: "URG!"}.get(self, "LOW")

    @classmethod
    def parse(cls, text: str) -> "Priority":
        """Accepts names and the common "med" shorthand, case-insensitive."""
        key = text.strip().lower()
        if key == "med":
            key = "medium"
        for p in cls:
            if p.name.lower() == key:
                return p
        raise ValueError(f"invalid priority {text!r}: must be low, medium, high, or urgent")


@dataclass
class Subtask:
    id: int | None
    task_id: int | None
    title: str
    completed: bool = False
    position: int = 0


@dataclass
class Task:
    id: int | None
    title: str
    description: str = ""
    status: Status = Status.PENDING
    priority: Priority = Priority.LOW
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None      # assigned once by the repository
    updated_at: Optional[datetime] = None
    subtasks: List[Subtask] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)


@dataclass
class JournalEntry:
    id: int | None
    note_id: int
    body: str
    created_at: datetime


@dataclass
class JournalNote:
    id: int | None
    date: date
    hidden: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    entries: List[JournalEntry] = field(default_factory=list)


DEFAULT_DURATION = timedelta(minutes=25)


@dataclass
class FocusSession:
    id: int | None
    task_id: int = 0                            # 0 = not attached to a task
    duration: timedelta = DEFAULT_DURATION
    started_at: datetime = field(default_factory=lambda: datetime.now().replace(microsecond=0))
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def elapsed(self, now: datetime) -> timedelta:
        """Time since start, clamped to [0, duration]."""
        spent = now - self.started_at
        if spent < timedelta(0):
            return timedelta(0)
        return max(min(spent, self.duration), timedelta(0))

    def remaining(self, now: datetime) -> timedelta:
        return max(self.duration - self.elapsed(now), timedelta(0))


def format_timer(duration: timedelta) -> str:
    """Render as zero-padded MM:SS; minutes may exceed 59, negatives read 00:00."""
    total = max(int(duration.total_seconds()), 0)
    minutes, seconds = divmod(total, 60)
    return f"{minutes:02d}:{seconds:02d}"
