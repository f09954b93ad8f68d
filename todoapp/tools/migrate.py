# File: todoapp/tools/migrate.py
# Usage examples:
#   python -m todoapp.tools.migrate up
#   python -m todoapp.tools.migrate verify
#   python -m todoapp.tools.migrate up --db /path/to/todo.db
#
# Notes:
# - DB path defaults to env TODOAPP_DB or ~/.todo-app/todo.db
# - Each repository owns its schema; `up` applies all of them idempotently
# - `verify` checks tables and pragmas without changing anything

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from todoapp.app_context import AppContext
from todoapp.models.errors import TodoAppError
from todoapp.repositories.db import Database
from todoapp.utils.paths import db_path

REQUIRED_TABLES = [
    "tasks",
    "subtasks",
    "tags",
    "journal_notes",
    "journal_entries",
    "focus_sessions",
]


def cmd_up(db: Path) -> int:
    with AppContext.create(db) as ctx:
        tables = ctx.db.table_names()
    print(f"✓ Database is up to date: {db} ({len(tables)} tables)")
    return 0


def cmd_verify(db: Path) -> int:
    if not db.exists():
        print(f"❌ No database at {db}")
        return 1
    with Database(db) as conn:
        names = set(conn.table_names())
        missing = [t for t in REQUIRED_TABLES if t not in names]
        if missing:
            print("❌ Missing tables:", ", ".join(missing))
            return 2

        mode = conn.pragma("journal_mode")
        if str(mode).lower() != "wal":
            print(f"❌ journal_mode is not WAL (got {mode})")
            return 4

        fk = conn.pragma("foreign_keys")
        if int(fk) != 1:
            print(f"❌ foreign_keys is off (got {fk})")
            return 5

    print("✓ Verification passed.")
    return 0


def parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="todo-migrate", description="Schema runner for todo-app")
    sub = p.add_subparsers(dest="cmd", required=True)

    for name, help_text in (("up", "Apply every repository schema"), ("verify", "Lightweight structural verification")):
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("--db", type=Path, default=None, help="Path to SQLite DB (default: TODOAPP_DB or ~/.todo-app/todo.db)")

    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        db = ns.db or db_path()
        if ns.cmd == "up":
            return cmd_up(db)
        if ns.cmd == "verify":
            return cmd_verify(db)
    except TodoAppError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    raise SystemExit(1)


if __name__ == "__main__":
    raise SystemExit(main())
