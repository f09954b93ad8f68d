# Rev 0.2.0

"""Paths and XDG helpers (Rev 0.2.0)
- App data (DB, backups, settings) lives under ~/.todo-app
- Logs remain under the XDG state dir
- TODOAPP_HOME / TODOAPP_DB override the defaults
"""
from __future__ import annotations
import os
from pathlib import Path

from todoapp.models.errors import ConfigError


APP_NAME = "todo-app"
APP_DIR_NAME = ".todo-app"
DB_FILENAME = "todo.db"
CONFIG_FILENAME = "config.json"
BACKUP_DIRNAME = "backups"


def home_dir() -> Path:
    try:
        home = Path.home()
    except (KeyError, RuntimeError) as exc:
        raise ConfigError(f"home dir: {exc}") from exc
    if not str(home) or str(home) == ".":
        raise ConfigError("home dir: could not be resolved")
    return home


def app_dir() -> Path:
    env = os.environ.get("TODOAPP_HOME")
    if env:
        return Path(env).expanduser()
    return home_dir() / APP_DIR_NAME


def db_path() -> Path:
    env = os.environ.get("TODOAPP_DB")
    if env:
        return Path(env).expanduser()
    return app_dir() / DB_FILENAME


def backup_dir() -> Path:
    return app_dir() / BACKUP_DIRNAME


def config_path() -> Path:
    return app_dir() / CONFIG_FILENAME


def logs_dir() -> Path:
    base = os.environ.get("XDG_STATE_HOME")
    state = Path(base) if base else home_dir() / ".local" / "state"
    return state / APP_NAME / "logs"
