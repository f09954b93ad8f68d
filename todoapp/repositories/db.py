# Rev 0.2.0

"""SQLite connection manager (Rev 0.2.0)
- exactly one physical connection per process, shared by every repository
- WAL mode, foreign_keys=ON
- explicit BEGIN/COMMIT/ROLLBACK; the connection itself runs in autocommit
- one re-entrant lock serializes statements issued from any thread
"""
from __future__ import annotations
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from todoapp.models.errors import ConflictError, StorageError
from todoapp.utils.logging_setup import get_logger
from todoapp.utils.paths import db_path as default_db_path


def wrap_engine_error(op: str, exc: sqlite3.Error) -> Exception:
    """Translate an engine error into the app taxonomy, keeping op context."""
    if isinstance(exc, sqlite3.IntegrityError) and "UNIQUE" in str(exc).upper():
        return ConflictError(f"{op}: {exc}")
    return StorageError(f"{op}: {exc}")


class Database:
    def __init__(self, path: Path | str) -> None:
        self._log = get_logger("db")
        self.path = Path(path)
        self._lock = threading.RLock()
        self._depth = 0
        self.conn: Optional[sqlite3.Connection] = None

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"create dir {self.path.parent}: {exc}") from exc

        try:
            self.conn = sqlite3.connect(self.path, isolation_level=None, check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
            (mode,) = self.conn.execute("PRAGMA journal_mode=WAL;").fetchone()
            if str(mode).lower() != "wal":
                raise sqlite3.OperationalError(f"journal_mode is {mode}, expected wal")
            self.conn.execute("PRAGMA foreign_keys=ON;")
        except sqlite3.Error as exc:
            self.close()
            raise StorageError(f"open db {self.path}: {exc}") from exc
        self._log.info("SQLite open %s", self.path)

    # ---------------- lifetime ----------------
    def close(self) -> None:
        if self.conn is None:
            return
        with self._lock:
            try:
                self.conn.close()
            except sqlite3.Error as exc:
                raise StorageError(f"close db {self.path}: {exc}") from exc
            finally:
                self.conn = None
        self._log.info("SQLite closed %s", self.path)

    @property
    def closed(self) -> bool:
        return self.conn is None

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _require_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise StorageError(f"database {self.path} is closed")
        return self.conn

    # ---------------- statements ----------------
    def execute(self, sql: str, params: Sequence[Any] = (), *, op: str = "execute") -> sqlite3.Cursor:
        with self._lock:
            conn = self._require_conn()
            try:
                return conn.execute(sql, params)
            except sqlite3.Error as exc:
                self._log.error("%s failed: %s", op, exc)
                raise wrap_engine_error(op, exc) from exc

    def query_all(self, sql: str, params: Sequence[Any] = (), *, op: str = "query") -> list[sqlite3.Row]:
        with self._lock:
            return self.execute(sql, params, op=op).fetchall()

    def query_one(self, sql: str, params: Sequence[Any] = (), *, op: str = "query") -> Optional[sqlite3.Row]:
        with self._lock:
            return self.execute(sql, params, op=op).fetchone()

    @contextmanager
    def transaction(self, op: str = "transaction") -> Iterator["Database"]:
        """All statements inside commit together or not at all.

        Nested use joins the outer transaction.
        """
        with self._lock:
            conn = self._require_conn()
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            try:
                conn.execute("BEGIN IMMEDIATE;")
            except sqlite3.Error as exc:
                raise StorageError(f"{op}: begin: {exc}") from exc
            self._depth = 1
            try:
                yield self
            except BaseException:
                self._depth = 0
                try:
                    conn.execute("ROLLBACK;")
                except sqlite3.Error as exc:
                    self._log.error("%s: rollback failed: %s", op, exc)
                    raise StorageError(f"{op}: rollback: {exc}") from exc
                raise
            self._depth = 0
            try:
                conn.execute("COMMIT;")
            except sqlite3.Error as exc:
                try:
                    conn.execute("ROLLBACK;")
                except sqlite3.Error as rb_exc:
                    self._log.error("%s: rollback after failed commit: %s", op, rb_exc)
                raise StorageError(f"{op}: commit: {exc}") from exc

    # ---------------- introspection ----------------
    def pragma(self, name: str) -> Any:
        row = self.query_one(f"PRAGMA {name};", op=f"pragma {name}")
        return row[0] if row else None

    def table_names(self) -> set[str]:
        rows = self.query_all(
            "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'",
            op="list tables",
        )
        return {r[0] for r in rows}


def open_database(path: Path | str | None = None) -> Database:
    """Open the shared store; the caller owns the returned handle and must close it."""
    return Database(path if path is not None else default_db_path())
