# Rev 0.1.0

"""Daily snapshot + retention pruning (Rev 0.1.0)
- backup-YYYY-MM-DD.db, at most one per calendar day
- VACUUM INTO a temp name, then rename: the final name never holds a partial file
- prune attempts every expired file and reports all failures together
"""
from __future__ import annotations
import os
import re
from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional, Tuple

from todoapp.models.errors import StorageError, TodoAppError, ValidationError
from todoapp.repositories.db import Database
from todoapp.utils.logging_setup import get_logger

BACKUP_RE = re.compile(r"^backup-(\d{4}-\d{2}-\d{2})\.db$")

_log = get_logger("backup")


def backup_name(day: date) -> str:
    return f"backup-{day.isoformat()}.db"


def _check_retention(retention_days: int) -> int:
    if retention_days < 0:
        raise ValidationError(f"retention_days must be >= 0, got {retention_days}")
    return retention_days


def backup(db: Database, directory: Path | str, retention_days: int, *, today: Optional[date] = None) -> Optional[Path]:
    """Snapshot the live database into `directory` and prune expired snapshots.

    Returns the path of the snapshot written by this call, or None when today's
    snapshot already existed.
    """
    _check_retention(retention_days)
    today = today or date.today()
    directory = Path(directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(f"create backup dir {directory}: {exc}") from exc

    dest = directory / backup_name(today)
    written: Optional[Path] = None
    if dest.exists():
        _log.debug("backup %s already present; skipping snapshot", dest.name)
    else:
        _snapshot(db, dest)
        written = dest

    prune_backups(directory, retention_days, today=today)
    return written


def _snapshot(db: Database, dest: Path) -> None:
    tmp = dest.with_name(f".{dest.name}.tmp")
    try:
        tmp.unlink(missing_ok=True)
        # holds the connection only for this one statement
        db.execute("VACUUM INTO ?", (str(tmp),), op=f"vacuum into {tmp}")
        os.replace(tmp, dest)
    except (OSError, TodoAppError) as exc:
        try:
            tmp.unlink(missing_ok=True)
        except OSError as cleanup_exc:
            _log.warning("could not remove partial snapshot %s: %s", tmp, cleanup_exc)
        raise StorageError(f"snapshot {dest}: {exc}") from exc
    _log.info("backup written: %s", dest)


def prune_backups(directory: Path | str, retention_days: int, *, today: Optional[date] = None) -> List[Path]:
    """Delete backup-<date>.db files dated strictly before today - retention_days.

    Names that do not match the pattern, or carry an impossible date, are left alone.
    """
    _check_retention(retention_days)
    today = today or date.today()
    cutoff = today - timedelta(days=retention_days)
    removed: List[Path] = []
    failures: List[Tuple[Path, Exception]] = []

    for path in sorted(Path(directory).iterdir()):
        if not path.is_file():
            continue
        m = BACKUP_RE.match(path.name)
        if not m:
            continue
        try:
            stamp = date.fromisoformat(m.group(1))
        except ValueError:
            continue
        if stamp >= cutoff:
            continue
        try:
            path.unlink()
        except OSError as exc:
            _log.warning("failed to prune %s: %s", path.name, exc)
            failures.append((path, exc))
            continue
        _log.info("pruned backup %s", path.name)
        removed.append(path)

    if failures:
        detail = "; ".join(f"{p.name}: {e}" for p, e in failures)
        raise StorageError(f"prune backups: {len(failures)} file(s) not removed ({detail})", failures)
    return removed
