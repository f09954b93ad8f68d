# Rev 0.2.0
from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from todoapp.models.entities import Priority, Status, Subtask, Task
from todoapp.models.errors import NotFoundError, ValidationError
from todoapp.models.types import SortMode
from todoapp.services.task_views import sort_tasks
from todoapp.utils.logging_setup import get_logger

from .db import Database
from .migrations import migrate
from .rows import chunked, format_ts, parse_date, parse_ts, placeholders

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        title       TEXT NOT NULL CHECK (length(trim(title)) > 0),
        description TEXT NOT NULL DEFAULT '',
        status      INTEGER NOT NULL DEFAULT 0,
        priority    INTEGER NOT NULL DEFAULT 0,
        due_date    TEXT,
        created_at  TEXT NOT NULL,
        updated_at  TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS subtasks (
        id         INTEGER PRIMARY KEY AUTOINCREMENT,
        task_id    INTEGER NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
        title      TEXT NOT NULL,
        completed  INTEGER NOT NULL DEFAULT 0,
        position   INTEGER NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tags (
        id      INTEGER PRIMARY KEY AUTOINCREMENT,
        task_id INTEGER NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
        name    TEXT NOT NULL,
        UNIQUE (task_id, name)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_subtasks_task ON subtasks(task_id)",
    "CREATE INDEX IF NOT EXISTS idx_tags_task ON tags(task_id)",
]

_TASK_COLUMNS = "id, title, description, status, priority, due_date, created_at, updated_at"


class SQLiteTaskRepository:
    """
    Task CRUD + subtask/tag mutations.
    Subtasks and tags are owned rows: they cascade with their task and are
    loaded in one batched query per child table for any listing.
    """

    def __init__(self, db: Database, *, clock: Callable[[], datetime] = datetime.now):
        self._db = db
        self._clock = clock
        self._log = get_logger("tasks")
        migrate(db, "tasks", SCHEMA)

    # -------------------------
    # Row decoding
    # -------------------------
    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            title=row["title"],
            description=row["description"] or "",
            status=Status(row["status"]),
            priority=Priority(row["priority"]),
            due_date=parse_date(row["due_date"]),
            created_at=parse_ts(row["created_at"]),
            updated_at=parse_ts(row["updated_at"]),
        )

    @staticmethod
    def _row_to_subtask(row: sqlite3.Row) -> Subtask:
        return Subtask(
            id=int(row["id"]),
            task_id=int(row["task_id"]),
            title=row["title"],
            completed=bool(row["completed"]),
            position=int(row["position"]),
        )

    @staticmethod
    def _clean_tags(tags: Iterable[str]) -> List[str]:
        out: List[str] = []
        for tag in tags:
            tag = tag.strip()
            if tag and tag not in out:
                out.append(tag)
        return out

    @staticmethod
    def _check_title(title: str, what: str = "task") -> str:
        if not title or not title.strip():
            raise ValidationError(f"{what} title must not be empty")
        return title.strip()

    def _now(self) -> datetime:
        return self._clock().replace(microsecond=0)

    def _require_task(self, task_id: int, op: str) -> None:
        row = self._db.query_one("SELECT 1 FROM tasks WHERE id = ?", (task_id,), op=op)
        if row is None:
            raise NotFoundError("task", task_id)

    def _touch(self, task_id: int, op: str) -> None:
        self._db.execute(
            "UPDATE tasks SET updated_at = ? WHERE id = ?",
            (format_ts(self._now()), task_id),
            op=op,
        )

    # -------------------------
    # CRUD
    # -------------------------
    def create(self, task: Task) -> int:
        title = self._check_title(task.title)
        subtask_titles = [self._check_title(st.title, "subtask") for st in task.subtasks]
        tags = self._clean_tags(task.tags)
        now = self._now()
        stamp = format_ts(now)

        with self._db.transaction(op="create task"):
            cur = self._db.execute(
                """
                INSERT INTO tasks (title, description, status, priority, due_date, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    title,
                    task.description or "",
                    int(task.status),
                    int(task.priority),
                    task.due_date.isoformat() if task.due_date else None,
                    stamp,
                    stamp,
                ),
                op="create task",
            )
            task_id = int(cur.lastrowid)
            for pos, st_title in enumerate(subtask_titles):
                self._db.execute(
                    "INSERT INTO subtasks (task_id, title, completed, position) VALUES (?, ?, ?, ?)",
                    (task_id, st_title, int(task.subtasks[pos].completed), pos),
                    op="create task subtasks",
                )
            for tag in tags:
                self._db.execute(
                    "INSERT INTO tags (task_id, name) VALUES (?, ?)",
                    (task_id, tag),
                    op="create task tags",
                )

        task.id = task_id
        task.title = title
        task.tags = tags
        task.created_at = task.updated_at = now
        self._log.info("created task %d (%d subtasks, %d tags)", task_id, len(subtask_titles), len(tags))
        return task_id

    def get_by_id(self, task_id: int) -> Task:
        row = self._db.query_one(
            f"SELECT {_TASK_COLUMNS} FROM tasks WHERE id = ?", (task_id,), op="get task"
        )
        if row is None:
            raise NotFoundError("task", task_id)
        task = self._row_to_task(row)
        self._attach_children([task])
        return task

    def list(self, *, status: Optional[Status] = None, sort: SortMode = "created") -> List[Task]:
        """Tasks with subtasks and tags populated, creation order unless `sort` says otherwise."""
        sql = f"SELECT {_TASK_COLUMNS} FROM tasks"
        params: list = []
        if status is not None:
            sql += " WHERE status = ?"
            params.append(int(status))
        sql += " ORDER BY id ASC"
        tasks = [self._row_to_task(r) for r in self._db.query_all(sql, params, op="list tasks")]
        self._attach_children(tasks)
        if sort != "created":
            tasks = sort_tasks(tasks, sort)
        return tasks

    def update(self, task: Task) -> None:
        """Replace the task's own fields; subtasks and tags are left alone."""
        if task.id is None:
            raise ValidationError("task has no id")
        title = self._check_title(task.title)
        now = self._now()
        cur = self._db.execute(
            """
            UPDATE tasks
               SET title = ?, description = ?, status = ?, priority = ?, due_date = ?, updated_at = ?
             WHERE id = ?
            """,
            (
                title,
                task.description or "",
                int(task.status),
                int(task.priority),
                task.due_date.isoformat() if task.due_date else None,
                format_ts(now),
                task.id,
            ),
            op="update task",
        )
        if cur.rowcount == 0:
            raise NotFoundError("task", task.id)
        task.title = title
        task.updated_at = now

    def set_status(self, task_id: int, status: Status) -> None:
        cur = self._db.execute(
            "UPDATE tasks SET status = ?, updated_at = ? WHERE id = ?",
            (int(status), format_ts(self._now()), task_id),
            op="set task status",
        )
        if cur.rowcount == 0:
            raise NotFoundError("task", task_id)

    def delete(self, task_id: int) -> None:
        with self._db.transaction(op="delete task"):
            self._require_task(task_id, "delete task")
            # foreign keys cascade to subtasks and tags inside this transaction
            self._db.execute("DELETE FROM tasks WHERE id = ?", (task_id,), op="delete task")
        self._log.info("deleted task %d", task_id)

    # -------------------------
    # Subtasks
    # -------------------------
    def add_subtask(self, task_id: int, title: str) -> int:
        title = self._check_title(title, "subtask")
        with self._db.transaction(op="add subtask"):
            self._require_task(task_id, "add subtask")
            row = self._db.query_one(
                "SELECT COALESCE(MAX(position), -1) FROM subtasks WHERE task_id = ?",
                (task_id,),
                op="add subtask",
            )
            cur = self._db.execute(
                "INSERT INTO subtasks (task_id, title, position) VALUES (?, ?, ?)",
                (task_id, title, int(row[0]) + 1),
                op="add subtask",
            )
            self._touch(task_id, "add subtask")
        return int(cur.lastrowid)

    def toggle_subtask(self, task_id: int, subtask_id: int) -> bool:
        """Flip the completed flag; returns the new value."""
        with self._db.transaction(op="toggle subtask"):
            self._require_task(task_id, "toggle subtask")
            cur = self._db.execute(
                "UPDATE subtasks SET completed = NOT completed WHERE id = ? AND task_id = ?",
                (subtask_id, task_id),
                op="toggle subtask",
            )
            if cur.rowcount == 0:
                raise NotFoundError("subtask", subtask_id)
            row = self._db.query_one(
                "SELECT completed FROM subtasks WHERE id = ?", (subtask_id,), op="toggle subtask"
            )
            self._touch(task_id, "toggle subtask")
        return bool(row["completed"])

    def remove_subtask(self, task_id: int, subtask_id: int) -> None:
        with self._db.transaction(op="remove subtask"):
            self._require_task(task_id, "remove subtask")
            cur = self._db.execute(
                "DELETE FROM subtasks WHERE id = ? AND task_id = ?",
                (subtask_id, task_id),
                op="remove subtask",
            )
            if cur.rowcount == 0:
                raise NotFoundError("subtask", subtask_id)
            self._touch(task_id, "remove subtask")

    # -------------------------
    # Tags
    # -------------------------
    def add_tag(self, task_id: int, name: str) -> None:
        """Adding a tag the task already carries is a no-op."""
        name = name.strip()
        if not name:
            raise ValidationError("tag must not be empty")
        with self._db.transaction(op="add tag"):
            self._require_task(task_id, "add tag")
            self._db.execute(
                "INSERT OR IGNORE INTO tags (task_id, name) VALUES (?, ?)",
                (task_id, name),
                op="add tag",
            )
            self._touch(task_id, "add tag")

    def remove_tag(self, task_id: int, name: str) -> None:
        with self._db.transaction(op="remove tag"):
            self._require_task(task_id, "remove tag")
            cur = self._db.execute(
                "DELETE FROM tags WHERE task_id = ? AND name = ?",
                (task_id, name.strip()),
                op="remove tag",
            )
            if cur.rowcount == 0:
                raise NotFoundError("tag", name)
            self._touch(task_id, "remove tag")

    # -------------------------
    # Batched child loading
    # -------------------------
    def _attach_children(self, tasks: List[Task]) -> None:
        if not tasks:
            return
        by_id: Dict[int, Task] = {t.id: t for t in tasks}
        for ids in chunked(by_id):
            marks = placeholders(ids)
            for row in self._db.query_all(
                f"SELECT id, task_id, title, completed, position FROM subtasks "
                f"WHERE task_id IN ({marks}) ORDER BY task_id, position, id",
                ids,
                op="list subtasks",
            ):
                by_id[int(row["task_id"])].subtasks.append(self._row_to_subtask(row))

            for row in self._db.query_all(
                f"SELECT task_id, name FROM tags WHERE task_id IN ({marks}) ORDER BY task_id, id",
                ids,
                op="list tags",
            ):
                by_id[int(row["task_id"])].tags.append(row["name"])
