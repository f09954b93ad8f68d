# Rev 0.1.0
# File: todoapp/cli.py
# Usage examples:
#   todo add "Write report" --priority high --due 2026-11-01 --tags work,q4
#   todo list --status pending --sort due
#   todo done 3
#   todo journal "Shipped the backup job"
#   todo export --format json --journal --output dump.json
#   todo focus start --task 3
#   todo backup --retention-days 14
#
# Every repository error ends the process with a non-zero status.

from __future__ import annotations

import argparse
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .app_context import AppContext
from .models.entities import FocusSession, Priority, Status, Subtask, Task, format_timer
from .models.errors import NotFoundError, TodoAppError
from .services import export_service
from .services.backup_service import backup
from .services.task_views import parse_status_filter, search, sort_tasks, streaks
from .utils.config import default_settings
from .utils.paths import backup_dir


def _parse_due(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid due date {text!r}: expected YYYY-MM-DD") from e


def _parse_priority(text: str) -> Priority:
    try:
        return Priority.parse(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _parse_status(text: str) -> str:
    try:
        parse_status_filter(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    return text.lower()


def _non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid number {text!r}") from e
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or more, got {value}")
    return value


def _split_tags(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return [t.strip() for t in text.split(",") if t.strip()]


# ---------------- tasks ----------------

def cmd_add(ns: argparse.Namespace, ctx: AppContext, settings: Dict[str, Any]) -> int:
    task = Task(
        id=None,
        title=ns.title,
        description=ns.description or "",
        priority=ns.priority,
        due_date=ns.due,
        tags=_split_tags(ns.tags),
        subtasks=[Subtask(id=None, task_id=None, title=s) for s in (ns.subtask or [])],
    )
    task_id = ctx.tasks.create(task)
    print(f"Created task #{task_id}: {task.title}")
    return 0


def cmd_done(ns: argparse.Namespace, ctx: AppContext, settings: Dict[str, Any]) -> int:
    try:
        task = ctx.tasks.get_by_id(ns.task_id)
    except NotFoundError:
        print("task not found", file=sys.stderr)
        return 1
    task.status = Status.DONE
    ctx.tasks.update(task)
    print(f"Marked task #{task.id} as done: {task.title}")
    return 0


def _print_table(tasks: Sequence[Task]) -> None:
    header = ("ID", "STATUS", "PRIORITY", "TITLE", "DUE", "TAGS")
    rows = [
        (
            str(t.id),
            t.status.label,
            t.priority.label,
            t.title,
            t.due_date.isoformat() if t.due_date else "-",
            ", ".join(t.tags) if t.tags else "-",
        )
        for t in tasks
    ]
    widths = [max(len(r[i]) for r in [header, *rows]) for i in range(len(header))]
    for r in [header, tuple("-" * len(h) for h in header), *rows]:
        print("  ".join(cell.ljust(w) for cell, w in zip(r, widths)).rstrip())


def cmd_list(ns: argparse.Namespace, ctx: AppContext, settings: Dict[str, Any]) -> int:
    tasks = ctx.tasks.list(status=parse_status_filter(ns.status))
    if ns.search:
        tasks = search(tasks, ns.search)
    tasks = sort_tasks(tasks, ns.sort)
    if ns.format == "json":
        export_service.write_json(sys.stdout, tasks)
    else:
        _print_table(tasks)
    return 0


# ---------------- journal / export ----------------

def cmd_journal(ns: argparse.Namespace, ctx: AppContext, settings: Dict[str, Any]) -> int:
    note = ctx.journal.get_or_create_today()
    ctx.journal.add_entry(note.id, " ".join(ns.text))
    print(f"Added journal entry to {note.date.isoformat()}")
    return 0


def cmd_export(ns: argparse.Namespace, ctx: AppContext, settings: Dict[str, Any]) -> int:
    tasks = ctx.tasks.list()
    notes = ctx.journal.list_notes(include_hidden=False) if ns.journal else None
    writer = export_service.write_json if ns.format == "json" else export_service.write_markdown
    if ns.output:
        out = Path(ns.output).expanduser()
        try:
            with out.open("w", encoding="utf-8") as f:
                writer(f, tasks, notes)
        except OSError as exc:
            print(f"error: cannot write {out}: {exc}", file=sys.stderr)
            return 1
        print(f"Exported to {out}", file=sys.stderr)
    else:
        writer(sys.stdout, tasks, notes)
    return 0


# ---------------- focus ----------------

def cmd_focus_start(ns: argparse.Namespace, ctx: AppContext, settings: Dict[str, Any]) -> int:
    if ns.task:
        ctx.tasks.get_by_id(ns.task)
    minutes = ns.minutes or settings["focus_minutes"]
    session = FocusSession(id=None, task_id=ns.task or 0, duration=timedelta(minutes=minutes))
    ctx.focus.create(session)
    print(f"Started focus session #{session.id} ({format_timer(session.duration)})")
    return 0


def cmd_focus_complete(ns: argparse.Namespace, ctx: AppContext, settings: Dict[str, Any]) -> int:
    ctx.focus.complete(ns.session_id)
    print(f"Completed focus session #{ns.session_id}; {ctx.focus.today_count()} today")
    return 0


def cmd_focus_history(ns: argparse.Namespace, ctx: AppContext, settings: Dict[str, Any]) -> int:
    sessions = ctx.focus.list_by_task(ns.task_id)
    if not sessions:
        print("No focus sessions.")
    for s in sessions:
        state = "done" if s.is_completed else "open"
        print(f"#{s.id}  {s.started_at:%Y-%m-%d %H:%M}  {format_timer(s.duration)}  {state}")
    return 0


def cmd_focus_stats(ns: argparse.Namespace, ctx: AppContext, settings: Dict[str, Any]) -> int:
    counts = ctx.focus.completions_by_day(ns.days)
    current, longest = streaks(counts, ns.days)
    print(f"Today: {ctx.focus.today_count()}")
    print(f"Last {ns.days} days: {sum(counts.values())}")
    print(f"Current streak: {current} days  Longest: {longest} days")
    return 0


# ---------------- backup ----------------

def cmd_backup(ns: argparse.Namespace, ctx: AppContext, settings: Dict[str, Any]) -> int:
    directory = Path(ns.dir).expanduser() if ns.dir else backup_dir()
    retention = settings["backup_retention_days"] if ns.retention_days is None else ns.retention_days
    written = backup(ctx.db, directory, retention)
    if written:
        print(f"Backup written: {written}")
    else:
        print(f"Backup for today already present in {directory}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="todo", description="Tasks, a daily journal and focus sessions in one SQLite file.")
    p.add_argument("--db", help="Path to SQLite DB (default: ~/.todo-app/todo.db or TODOAPP_DB env var)")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("add", help="Add a new task.")
    s.add_argument("title")
    s.add_argument("-d", "--description")
    s.add_argument("-p", "--priority", type=_parse_priority, default=Priority.LOW, help="low, medium, high, urgent")
    s.add_argument("--due", type=_parse_due, help="Due date (YYYY-MM-DD)")
    s.add_argument("--tags", help="Comma-separated tags")
    s.add_argument("--subtask", action="append", help="Subtask title (repeatable)")
    s.set_defaults(func=cmd_add)

    s = sub.add_parser("done", help="Mark a task as done.")
    s.add_argument("task_id", type=int)
    s.set_defaults(func=cmd_done)

    s = sub.add_parser("list", help="List tasks.")
    s.add_argument("--status", type=_parse_status, default="all", help="pending, active, done, all")
    s.add_argument("--sort", choices=("created", "due", "priority", "status"), default="created")
    s.add_argument("--search", help="Case-insensitive match on title, description, tags")
    s.add_argument("--format", choices=("table", "json"), default="table")
    s.set_defaults(func=cmd_list)

    s = sub.add_parser("journal", help="Add an entry to today's journal note.")
    s.add_argument("text", nargs="+")
    s.set_defaults(func=cmd_journal)

    s = sub.add_parser("export", help="Export tasks (and optionally the journal).")
    s.add_argument("--format", choices=("md", "markdown", "json"), default="md")
    s.add_argument("--output", help="Output file path (default: stdout)")
    s.add_argument("--journal", action="store_true", help="Include journal notes")
    s.set_defaults(func=cmd_export)

    s = sub.add_parser("focus", help="Focus (Pomodoro) sessions.")
    fsub = s.add_subparsers(dest="focus_cmd", required=True)
    f = fsub.add_parser("start")
    f.add_argument("--task", type=int, default=0)
    f.add_argument("--minutes", type=int)
    f.set_defaults(func=cmd_focus_start)
    f = fsub.add_parser("complete")
    f.add_argument("session_id", type=int)
    f.set_defaults(func=cmd_focus_complete)
    f = fsub.add_parser("history")
    f.add_argument("task_id", type=int)
    f.set_defaults(func=cmd_focus_history)
    f = fsub.add_parser("stats")
    f.add_argument("--days", type=int, default=30)
    f.set_defaults(func=cmd_focus_stats)

    s = sub.add_parser("backup", help="Snapshot the database and prune old snapshots.")
    s.add_argument("--dir", help="Backup directory (default: ~/.todo-app/backups)")
    s.add_argument("--retention-days", type=_non_negative_int, help="Keep snapshots this many days (default: from settings)")
    s.set_defaults(func=cmd_backup)

    return p


def run(ns: argparse.Namespace, ctx: AppContext, settings: Optional[Dict[str, Any]] = None) -> int:
    """Dispatch a parsed command against an open context."""
    try:
        return int(ns.func(ns, ctx, settings or default_settings()))
    except TodoAppError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
