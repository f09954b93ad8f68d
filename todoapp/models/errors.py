# todoapp error taxonomy
# Rev 0.1.0

from __future__ import annotations
from typing import Any


class TodoAppError(Exception):
    """Base class for every error surfaced by the storage core."""


class ConfigError(TodoAppError):
    """Environment or location resolution failed."""


class StorageError(TodoAppError):
    """Engine-level failure: open, migrate, statement, commit/rollback, backup."""

    def __init__(self, message: str, failures: list[tuple[Any, Exception]] | None = None):
        super().__init__(message)
        self.failures = list(failures or [])


class NotFoundError(TodoAppError):
    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(TodoAppError):
    """A uniqueness constraint rejected the write."""


class ValidationError(TodoAppError):
    """Caller-supplied data violates a precondition."""
