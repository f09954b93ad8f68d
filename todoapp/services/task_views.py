# Rev 0.1.0

"""Read-time views over already-loaded tasks (Rev 0.1.0)
Pure functions: nothing here touches the database.
"""
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from todoapp.models.entities import Priority, Status, Task
from todoapp.models.types import DueLevel, SortMode, StatusFilter

SOON_DAYS = 3

_STATUS_ALIASES: Dict[str, Optional[Status]] = {
    "all": None,
    "pending": Status.PENDING,
    "active": Status.IN_PROGRESS,
    "in-progress": Status.IN_PROGRESS,
    "inprogress": Status.IN_PROGRESS,
    "done": Status.DONE,
}


def parse_status_filter(text: str) -> Optional[Status]:
    key = text.strip().lower()
    if key not in _STATUS_ALIASES:
        raise ValueError(f"invalid status {text!r}: must be pending, active, done, or all")
    return _STATUS_ALIASES[key]


def filter_by_status(tasks: Iterable[Task], status: StatusFilter | str) -> List[Task]:
    wanted = parse_status_filter(status)
    return [t for t in tasks if wanted is None or t.status == wanted]


def matches(task: Task, query: str) -> bool:
    """Case-insensitive substring match over title, description and tags."""
    q = query.strip().lower()
    if not q:
        return True
    if q in task.title.lower() or q in (task.description or "").lower():
        return True
    return any(q in tag.lower() for tag in task.tags)


def search(tasks: Iterable[Task], query: str) -> List[Task]:
    return [t for t in tasks if matches(t, query)]


def _sort_key(mode: SortMode):
    if mode == "created":
        return lambda t: (t.id,)
    if mode == "due":
        # undated tasks sink to the bottom
        return lambda t: (t.due_date is None, t.due_date or date.max, t.id)
    if mode == "priority":
        return lambda t: (-int(t.priority), t.id)
    if mode == "status":
        return lambda t: (int(t.status), t.id)
    raise ValueError(f"invalid sort mode {mode!r}: must be created, due, priority, or status")


def sort_tasks(tasks: Iterable[Task], mode: SortMode = "created") -> List[Task]:
    """Return a new, totally ordered list; the input is left untouched."""
    return sorted(tasks, key=_sort_key(mode))


def due_level(due: Optional[date], today: Optional[date] = None) -> DueLevel:
    if due is None:
        return "none"
    today = today or date.today()
    days = (due - today).days
    if days < 0:
        return "overdue"
    if days == 0:
        return "today"
    if days <= SOON_DAYS:
        return "soon"
    return "far"


def overdue(tasks: Iterable[Task], today: Optional[date] = None) -> List[Task]:
    return [
        t for t in tasks
        if t.status != Status.DONE and due_level(t.due_date, today) == "overdue"
    ]


@dataclass
class TaskStats:
    total: int
    by_status: Dict[Status, int]
    by_priority: Dict[Priority, int]
    tags: List[Tuple[str, int]]
    subtasks_done: int
    subtasks_total: int

    @property
    def completion_rate(self) -> float:
        return self.by_status[Status.DONE] / self.total if self.total else 0.0


def task_stats(tasks: Sequence[Task]) -> TaskStats:
    by_status = {s: 0 for s in Status}
    by_priority = {p: 0 for p in Priority}
    tag_counts: Counter = Counter()
    sub_done = sub_total = 0
    for t in tasks:
        by_status[t.status] += 1
        by_priority[t.priority] += 1
        tag_counts.update(t.tags)
        sub_total += len(t.subtasks)
        sub_done += sum(1 for st in t.subtasks if st.completed)
    # most used first, then alphabetical
    tags = sorted(tag_counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return TaskStats(len(tasks), by_status, by_priority, tags, sub_done, sub_total)


def daily_series(counts: Mapping[date, int], days: int, today: Optional[date] = None) -> List[int]:
    """Counts for the last `days` days, oldest first, zero-filled."""
    today = today or date.today()
    return [counts.get(today - timedelta(days=days - 1 - i), 0) for i in range(days)]


def streaks(counts: Mapping[date, int], days: int = 30, today: Optional[date] = None) -> Tuple[int, int]:
    """(current, longest) runs of active days within the window.

    The current streak still counts when today is empty but yesterday was active.
    """
    if days <= 0:
        days = 30
    data = daily_series(counts, days, today)

    current = 0
    for i in range(days - 1, -1, -1):
        if data[i] > 0:
            current += 1
        elif i == days - 1 and i > 0 and data[i - 1] > 0:
            continue
        else:
            break

    longest = run = 0
    for v in data:
        run = run + 1 if v > 0 else 0
        longest = max(longest, run)
    return current, longest
