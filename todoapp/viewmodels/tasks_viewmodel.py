# Rev 0.2.0: filters + sort applied at read time
from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from PySide6.QtCore import QObject, Signal

from todoapp.models.entities import Priority, Status, Subtask, Task
from todoapp.models.errors import TodoAppError
from todoapp.models.types import SortMode, StatusFilter
from todoapp.services.task_views import parse_status_filter, search, sort_tasks, task_stats
from todoapp.utils.logging_setup import get_logger


class TasksViewModel(QObject):
    tasksReloaded = Signal(object)
    statsChanged = Signal(object)
    errorRaised = Signal(str)

    def __init__(self, tasks_repo):
        super().__init__()
        self._tasks = tasks_repo
        self._log = get_logger("ui.tasks")
        self._status: StatusFilter = "all"
        self._sort: SortMode = "created"
        self._search: str = ""
        self._rows: List[Task] = []

    # ---- filters
    def set_filters(
        self,
        *,
        status: Optional[StatusFilter] = None,
        sort: Optional[SortMode] = None,
        query: Optional[str] = None,
    ) -> None:
        if status is not None:
            parse_status_filter(status)
            self._status = status
        if sort is not None:
            sort_tasks([], sort)
            self._sort = sort
        if query is not None:
            self._search = query

    @property
    def rows(self) -> List[Task]:
        return list(self._rows)

    def task_at(self, row: int) -> Optional[Task]:
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None

    # ---- queries
    def reload(self) -> List[Task]:
        try:
            tasks = self._tasks.list(status=parse_status_filter(self._status))
        except TodoAppError as exc:
            self._report("reload tasks", exc)
            return self.rows
        if self._search:
            tasks = search(tasks, self._search)
        self._rows = sort_tasks(tasks, self._sort)
        self.tasksReloaded.emit(self.rows)
        self.statsChanged.emit(task_stats(self._rows))
        return self.rows

    # ---- commands
    def create_task(
        self,
        *,
        title: str,
        description: str = "",
        priority: Priority = Priority.LOW,
        due_date: Optional[date] = None,
        tags: Iterable[str] = (),
        subtasks: Iterable[str] = (),
    ) -> Optional[int]:
        task = Task(
            id=None,
            title=title,
            description=description,
            priority=priority,
            due_date=due_date,
            tags=list(tags),
            subtasks=[Subtask(None, None, s) for s in subtasks],
        )
        try:
            tid = self._tasks.create(task)
        except TodoAppError as exc:
            self._report("create task", exc)
            return None
        self.reload()
        return tid

    def cycle_status(self, task_id: int) -> Optional[Status]:
        """Pending → In Progress → Done → Pending."""
        try:
            task = self._tasks.get_by_id(task_id)
            new_status = task.status.next()
            self._tasks.set_status(task_id, new_status)
        except TodoAppError as exc:
            self._report("change status", exc)
            return None
        self.reload()
        return new_status

    def delete_task(self, task_id: int) -> bool:
        try:
            self._tasks.delete(task_id)
        except TodoAppError as exc:
            self._report("delete task", exc)
            return False
        self.reload()
        return True

    def add_subtask(self, task_id: int, title: str) -> Optional[int]:
        try:
            sid = self._tasks.add_subtask(task_id, title)
        except TodoAppError as exc:
            self._report("add subtask", exc)
            return None
        self.reload()
        return sid

    def toggle_subtask(self, task_id: int, subtask_id: int) -> Optional[bool]:
        try:
            done = self._tasks.toggle_subtask(task_id, subtask_id)
        except TodoAppError as exc:
            self._report("toggle subtask", exc)
            return None
        self.reload()
        return done

    # ---- internals
    def _report(self, op: str, exc: TodoAppError) -> None:
        self._log.warning("%s failed: %s", op, exc)
        self.errorRaised.emit(f"{op}: {exc}")
