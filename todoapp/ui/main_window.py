# Rev 0.2.0
# todo-app main window: tasks | journal side by side, focus timer in the status bar

from __future__ import annotations
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel, QMainWindow, QPushButton, QSplitter

from todoapp.app_context import AppContext
from todoapp.models.entities import format_timer
from todoapp.models.errors import TodoAppError
from todoapp.services.task_views import TaskStats
from todoapp.ui.journal_view import JournalView
from todoapp.ui.tasks_view import TasksView
from todoapp.ui.window_mode import fit_to_screen
from todoapp.utils.config import save_settings, validate_settings
from todoapp.utils.logging_setup import get_logger
from todoapp.viewmodels.focus_viewmodel import FocusViewModel

_SPLIT_TOTAL = 1000


class MainWindow(QMainWindow):
    def __init__(
        self,
        *,
        ctx: AppContext,
        settings: Dict[str, Any],
        logfile: Path | None = None,
        parent=None,
    ):
        super().__init__(parent)
        self._log = get_logger("ui.main")
        self._settings = dict(settings)
        self._logfile = logfile

        self.setWindowTitle("todo-app")
        fit_to_screen(self, width_ratio=0.75, height_ratio=0.8)

        # ---- central: tasks | journal ----
        self._tasks_view = TasksView(ctx.tasks, self)
        self._journal_view = JournalView(ctx.journal, self)

        self._split = QSplitter(Qt.Horizontal, self)
        self._split.addWidget(self._tasks_view)
        self._split.addWidget(self._journal_view)
        self._split.setChildrenCollapsible(False)
        self.setCentralWidget(self._split)
        self._apply_panel_ratio(self._settings["panel_ratio"])

        # ---- status bar: stats + focus timer ----
        self._lbl_stats = QLabel("")
        self._lbl_timer = QLabel(format_timer(timedelta(minutes=self._settings["focus_minutes"])))
        self._btn_focus = QPushButton("Start Focus")
        self._btn_focus.setCheckable(True)
        sb = self.statusBar()
        sb.addWidget(self._lbl_stats, 1)
        sb.addPermanentWidget(self._lbl_timer)
        sb.addPermanentWidget(self._btn_focus)

        self._focus_vm = FocusViewModel(ctx.focus, minutes=self._settings["focus_minutes"], parent=self)
        self._focus_vm.ticked.connect(self._lbl_timer.setText)
        self._focus_vm.sessionCompleted.connect(self._on_focus_completed)
        self._focus_vm.errorRaised.connect(lambda msg: sb.showMessage(msg, 5000))
        self._btn_focus.toggled.connect(self._on_focus_toggled)

        self._tasks_view.viewmodel.statsChanged.connect(self._on_stats_changed)

        # initial load
        self._tasks_view.reload()
        self._journal_view.reload()

    # -------------------- panel ratio --------------------

    def _apply_panel_ratio(self, ratio: float) -> None:
        left = int(_SPLIT_TOTAL * ratio)
        self._split.setSizes([left, _SPLIT_TOTAL - left])

    def panel_ratio(self) -> float:
        sizes = self._split.sizes()
        total = sum(sizes)
        if total <= 0:
            return float(self._settings["panel_ratio"])
        return round(sizes[0] / total, 2)

    # -------------------- focus --------------------

    def _on_focus_toggled(self, on: bool) -> None:
        if on:
            task_id = self._tasks_view.selected_task_id() or 0
            if self._focus_vm.start(task_id) is None:
                self._btn_focus.setChecked(False)
                return
            self._btn_focus.setText("Stop Focus")
        else:
            if self._focus_vm.running:
                self._focus_vm.cancel()
            self._btn_focus.setText("Start Focus")

    def _on_focus_completed(self, session_id: int, today: int) -> None:
        self._btn_focus.blockSignals(True)
        self._btn_focus.setChecked(False)
        self._btn_focus.blockSignals(False)
        self._btn_focus.setText("Start Focus")
        self.statusBar().showMessage(f"Focus session #{session_id} complete, {today} today", 10000)

    def _on_stats_changed(self, stats: TaskStats) -> None:
        self._lbl_stats.setText(
            f"{stats.total} tasks · {stats.completion_rate:.0%} done · "
            f"{self._focus_vm.today_count()} focus sessions today"
        )

    # -------------------- lifecycle --------------------

    def closeEvent(self, ev):
        self._settings["panel_ratio"] = self.panel_ratio()
        try:
            save_settings(validate_settings(self._settings))
        except (OSError, TodoAppError) as exc:
            self._log.warning("could not save settings: %s", exc)
        if self._focus_vm.running:
            self._focus_vm.cancel()
        super().closeEvent(ev)
