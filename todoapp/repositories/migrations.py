# Rev 0.2.0

"""Idempotent schema application (Rev 0.2.0)
Each repository owns an ordered list of CREATE ... IF NOT EXISTS statements and
applies them once at construction. The whole list runs in one transaction, so
a failure leaves the schema exactly as it was before the call.
"""
from __future__ import annotations
from typing import Sequence

from todoapp.models.errors import StorageError, TodoAppError
from todoapp.utils.logging_setup import get_logger

from .db import Database

_log = get_logger("migrations")


def migrate(db: Database, name: str, statements: Sequence[str]) -> None:
    try:
        with db.transaction(op=f"{name} migrate"):
            for stmt in statements:
                db.execute(stmt, op=f"{name} migrate")
    except StorageError:
        raise
    except TodoAppError as exc:
        raise StorageError(f"{name} migrate: {exc}") from exc
    _log.debug("schema %s applied (%d statements)", name, len(statements))
