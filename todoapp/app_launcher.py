# Rev 0.2.0

# todoapp/app_launcher.py  (Rev 0.2.0)
from __future__ import annotations
import sys
from typing import List, Optional

from PySide6.QtCore import QCoreApplication
from PySide6.QtWidgets import QApplication, QMessageBox

from todoapp.app_context import AppContext
from todoapp.main import startup_backup
from todoapp.models.errors import TodoAppError
from todoapp.ui.main_window import MainWindow
from todoapp.utils.config import load_settings
from todoapp.utils.logging_setup import get_logger, setup_logging
from todoapp.utils.paths import APP_NAME


def main(argv: Optional[List[str]] = None) -> int:
    app = QApplication(sys.argv if argv is None else argv)
    QCoreApplication.setApplicationName(APP_NAME)

    logfile = setup_logging()
    log = get_logger("launcher")
    log.info("[logging] Writing to: %s", logfile)
    settings = load_settings()

    try:
        ctx = AppContext.create()
    except TodoAppError as exc:
        log.error("startup failed: %s", exc)
        QMessageBox.critical(None, "todo-app", f"Could not open the database:\n{exc}")
        return 1

    with ctx:
        if settings["backup_enabled"]:
            startup_backup(ctx, settings)
        win = MainWindow(ctx=ctx, settings=settings, logfile=logfile)
        win.show()
        return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
