# Rev 0.2.0

# todo-app – logging setup (Rev 0.2.0)
from __future__ import annotations
import logging, os, sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .paths import APP_NAME, logs_dir

LOGGER_ROOT = "todoapp"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured_logfile: Path | None = None


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")


def setup_logging(app_name: str = APP_NAME, default_level: str = "WARNING") -> Path:
    global _configured_logfile
    if _configured_logfile is not None:
        return _configured_logfile

    # Level via env (DEBUG/INFO/WARNING/ERROR)
    level_name = os.environ.get("TODOAPP_LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.WARNING)

    log_dir = logs_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / f"{app_name}.log"

    root = logging.getLogger()
    root.setLevel(level)

    # File: rotate at 5MB, keep 7 backups
    fh = RotatingFileHandler(logfile, maxBytes=5_000_000, backupCount=7, encoding="utf-8")
    fh.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    fh.setLevel(level)
    root.addHandler(fh)

    # Console goes to stderr so command output on stdout stays parseable
    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    ch.setLevel(level)
    root.addHandler(ch)

    # Uncaught exceptions → log as ERROR
    def _excepthook(exctype, value, tb):
        logging.getLogger("unhandled").exception("Uncaught exception", exc_info=(exctype, value, tb))
        sys.__excepthook__(exctype, value, tb)
    sys.excepthook = _excepthook

    _configured_logfile = logfile
    get_logger("logging").info("Logging initialized at %s; file: %s", level_name, logfile)
    return logfile
