# Rev 0.2.0
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from todoapp.models.entities import FocusSession, format_timer
from todoapp.models.errors import TodoAppError
from todoapp.utils.logging_setup import get_logger


class FocusViewModel(QObject):
    """Drives one running Pomodoro at a time; the repository is the record of truth."""

    ticked = Signal(str)
    sessionStarted = Signal(int)
    sessionCompleted = Signal(int, int)
    errorRaised = Signal(str)

    def __init__(
        self,
        focus_repo,
        *,
        minutes: int = 25,
        clock: Callable[[], datetime] = datetime.now,
        interval_ms: int = 1000,
        parent=None,
    ):
        super().__init__(parent)
        self._focus = focus_repo
        self._log = get_logger("ui.focus")
        self._duration = timedelta(minutes=minutes)
        self._clock = clock
        self._session: Optional[FocusSession] = None

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_tick)

    @property
    def running(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> Optional[FocusSession]:
        return self._session

    def start(self, task_id: int = 0) -> Optional[int]:
        if self._session is not None:
            return self._session.id
        session = FocusSession(
            id=None,
            task_id=task_id,
            duration=self._duration,
            started_at=self._clock().replace(microsecond=0),
        )
        try:
            sid = self._focus.create(session)
        except TodoAppError as exc:
            self._report("start focus", exc)
            return None
        self._session = session
        self._timer.start()
        self.sessionStarted.emit(sid)
        self.ticked.emit(format_timer(session.duration))
        return sid

    def cancel(self) -> None:
        """Stop the timer; the session stays in the store as not completed."""
        self._timer.stop()
        if self._session is not None:
            self._log.info("focus session %d abandoned", self._session.id)
        self._session = None
        self.ticked.emit(format_timer(self._duration))

    def complete(self) -> bool:
        session = self._session
        if session is None:
            return False
        self._timer.stop()
        self._session = None
        try:
            self._focus.complete(session.id)
            count = self._focus.today_count()
        except TodoAppError as exc:
            self._report("complete focus", exc)
            return False
        self.sessionCompleted.emit(session.id, count)
        self.ticked.emit(format_timer(self._duration))
        return True

    def today_count(self) -> int:
        try:
            return self._focus.today_count()
        except TodoAppError as exc:
            self._report("focus count", exc)
            return 0

    def _on_tick(self) -> None:
        if self._session is None:
            return
        left = self._session.remaining(self._clock())
        self.ticked.emit(format_timer(left))
        if left <= timedelta(0):
            self.complete()

    def _report(self, op: str, exc: TodoAppError) -> None:
        self._log.warning("%s failed: %s", op, exc)
        self.errorRaised.emit(f"{op}: {exc}")
