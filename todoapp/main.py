# Rev 0.2.0

# todoapp/main.py  (Rev 0.2.0)
from __future__ import annotations
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from todoapp.app_context import AppContext
from todoapp.cli import build_parser, run
from todoapp.models.errors import TodoAppError
from todoapp.services.backup_service import backup
from todoapp.utils.config import load_settings
from todoapp.utils.logging_setup import get_logger, setup_logging
from todoapp.utils.paths import backup_dir


def startup_backup(ctx: AppContext, settings: Dict[str, Any]) -> None:
    """Daily snapshot on launch; a failure is logged and never blocks the command."""
    log = get_logger("main")
    try:
        backup(ctx.db, backup_dir(), settings["backup_retention_days"])
    except TodoAppError as exc:
        log.warning("startup backup failed: %s", exc)


def main(argv: Optional[List[str]] = None) -> int:
    ns = build_parser().parse_args(argv)
    try:
        logfile = setup_logging()
        get_logger("main").debug("[logging] Writing to: %s", logfile)
        settings = load_settings()
        with AppContext.create(Path(ns.db).expanduser() if ns.db else None) as ctx:
            if settings["backup_enabled"] and ns.cmd != "backup":
                startup_backup(ctx, settings)
            return run(ns, ctx, settings)
    except TodoAppError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
