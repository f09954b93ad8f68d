# tests/test_focus_repository.py
from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone

import pytest

from todoapp.models.entities import FocusSession
from todoapp.models.errors import NotFoundError, ValidationError
from todoapp.repositories.rows import format_ts
from todoapp.repositories.sqlite_focus_repository import SQLiteFocusRepository


def _session(clock, task_id: int = 0, ago: timedelta = timedelta(0), **kwargs) -> FocusSession:
    return FocusSession(id=None, task_id=task_id, started_at=clock.now - ago, **kwargs)


def test_create_and_get(focus_repo: SQLiteFocusRepository, clock):
    s = _session(clock, task_id=7, duration=timedelta(minutes=50))
    session_id = focus_repo.create(s)
    assert s.id == session_id

    got = focus_repo.get(session_id)
    assert got.task_id == 7
    assert got.duration == timedelta(minutes=50)
    assert got.started_at == clock.now
    assert got.completed_at is None


@pytest.mark.parametrize("duration", [timedelta(0), timedelta(minutes=-5)])
def test_create_rejects_non_positive_duration(focus_repo: SQLiteFocusRepository, clock, duration):
    with pytest.raises(ValidationError):
        focus_repo.create(_session(clock, duration=duration))


def test_list_by_task_is_newest_first(focus_repo: SQLiteFocusRepository, clock):
    old = focus_repo.create(_session(clock, task_id=1, ago=timedelta(hours=2)))
    new = focus_repo.create(_session(clock, task_id=1, ago=timedelta(hours=1)))
    focus_repo.create(_session(clock, task_id=2))

    assert [s.id for s in focus_repo.list_by_task(1)] == [new, old]
    assert focus_repo.list_by_task(3) == []


def test_complete_only_once(focus_repo: SQLiteFocusRepository, clock):
    session_id = focus_repo.create(_session(clock, ago=timedelta(minutes=25)))
    assert focus_repo.complete(session_id) == clock.now
    assert focus_repo.get(session_id).is_completed

    with pytest.raises(NotFoundError):
        focus_repo.complete(session_id)
    with pytest.raises(NotFoundError):
        focus_repo.complete(9999)


def test_completion_never_precedes_start(focus_repo: SQLiteFocusRepository, clock):
    future = clock.now + timedelta(hours=1)
    session_id = focus_repo.create(FocusSession(id=None, started_at=future))
    assert focus_repo.complete(session_id) == future


def test_today_count(focus_repo: SQLiteFocusRepository, clock):
    assert focus_repo.today_count() == 0
    session_id = focus_repo.create(_session(clock))
    assert focus_repo.today_count() == 0
    focus_repo.complete(session_id)
    assert focus_repo.today_count() == 1

    clock.advance(days=1)
    assert focus_repo.today_count() == 0


def test_completions_by_day(focus_repo: SQLiteFocusRepository, clock):
    today = clock.now.date()
    yesterday = today - timedelta(days=1)

    focus_repo.create(_session(clock, ago=timedelta(days=1, minutes=25), completed_at=clock.now - timedelta(days=1)))
    focus_repo.create(_session(clock, ago=timedelta(days=40, minutes=25), completed_at=clock.now - timedelta(days=40)))
    for _ in range(2):
        focus_repo.complete(focus_repo.create(_session(clock, ago=timedelta(minutes=25))))
    focus_repo.create(_session(clock))  # still running

    assert focus_repo.completions_by_day(30) == {yesterday: 1, today: 2}


@pytest.fixture()
def eastern_tz(monkeypatch: pytest.MonkeyPatch):
    """Pin the process zone to UTC-5 (no DST) for the duration of a test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is POSIX-only")
    monkeypatch.setenv("TZ", "EST+5")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_aware_start_is_stored_as_local_wall_clock(focus_repo: SQLiteFocusRepository, eastern_tz):
    # 02:30 UTC on the 19th is still the evening of the 18th in UTC-5
    started = datetime(2026, 10, 19, 2, 30, tzinfo=timezone.utc)
    assert format_ts(started) == "2026-10-18T21:30:00"

    sid = focus_repo.create(FocusSession(id=None, task_id=4, started_at=started))
    assert focus_repo.get(sid).started_at == datetime(2026, 10, 18, 21, 30)


def test_naive_timestamps_are_stored_unchanged():
    assert format_ts(datetime(2026, 10, 19, 9, 30, 15, 999)) == "2026-10-19T09:30:15"
