# tests/test_viewmodels.py
# Qt viewmodels against real repositories; needs QtCore only (no display)

from __future__ import annotations

from datetime import date, timedelta

import pytest
from PySide6.QtCore import QCoreApplication

from todoapp.models.entities import Priority, Status
from todoapp.viewmodels.focus_viewmodel import FocusViewModel
from todoapp.viewmodels.journal_viewmodel import JournalViewModel
from todoapp.viewmodels.tasks_viewmodel import TasksViewModel


@pytest.fixture(scope="module")
def qcore():
    return QCoreApplication.instance() or QCoreApplication([])


def _collect(signal) -> list:
    seen: list = []
    signal.connect(lambda *args: seen.append(args))
    return seen


# ---------------- tasks ----------------

def test_tasks_reload_applies_filters(qcore, task_repo):
    vm = TasksViewModel(task_repo)
    reloaded = _collect(vm.tasksReloaded)

    a = vm.create_task(title="Buy milk", tags=["home"])
    b = vm.create_task(title="Fix bug", priority=Priority.URGENT)
    assert a is not None and b is not None
    assert len(reloaded) == 2

    vm.set_filters(sort="priority")
    assert [t.id for t in vm.reload()] == [b, a]

    vm.set_filters(query="home")
    assert [t.id for t in vm.reload()] == [a]
    assert vm.task_at(0).title == "Buy milk"
    assert vm.task_at(5) is None


def test_tasks_rejects_unknown_filter(qcore, task_repo):
    vm = TasksViewModel(task_repo)
    with pytest.raises(ValueError):
        vm.set_filters(sort="random")
    with pytest.raises(ValueError):
        vm.set_filters(status="blocked")


def test_tasks_cycle_status_and_stats(qcore, task_repo):
    vm = TasksViewModel(task_repo)
    stats = _collect(vm.statsChanged)
    tid = vm.create_task(title="Ship")

    assert vm.cycle_status(tid) is Status.IN_PROGRESS
    assert vm.cycle_status(tid) is Status.DONE
    assert stats[-1][0].completion_rate == 1.0
    assert vm.cycle_status(tid) is Status.PENDING


def test_tasks_errors_are_reported(qcore, task_repo):
    vm = TasksViewModel(task_repo)
    errors = _collect(vm.errorRaised)

    assert vm.create_task(title="  ") is None
    assert vm.delete_task(404) is False
    assert vm.cycle_status(404) is None
    assert len(errors) == 3
    assert "task 404 not found" in errors[1][0]


def test_tasks_subtasks(qcore, task_repo):
    vm = TasksViewModel(task_repo)
    tid = vm.create_task(title="Parent", subtasks=["one"])
    sid = vm.add_subtask(tid, "two")
    assert vm.toggle_subtask(tid, sid) is True
    (task,) = vm.rows
    assert [(s.title, s.completed) for s in task.subtasks] == [("one", False), ("two", True)]


# ---------------- journal ----------------

def test_journal_add_delete_undo(qcore, journal_repo, clock):
    vm = JournalViewModel(journal_repo)
    loaded = _collect(vm.todayLoaded)

    first = vm.add_entry("first")
    clock.advance(minutes=5)
    vm.add_entry("second")
    assert [e.body for e in vm.today.entries] == ["first", "second"]

    assert vm.delete_entry(first) is True
    assert vm.can_undo
    assert [e.body for e in vm.today.entries] == ["second"]

    assert vm.undo_delete() is not None
    assert not vm.can_undo
    assert [e.body for e in vm.today.entries] == ["first", "second"]
    assert loaded[-1][0].date == clock.now.date()


def test_journal_toggle_hidden(qcore, journal_repo):
    vm = JournalViewModel(journal_repo)
    note = vm.load_today()
    assert vm.toggle_hidden(note.id) is True
    assert vm.reload_notes() == []
    assert [n.id for n in vm.reload_notes(include_hidden=True)] == [note.id]


def test_journal_errors_are_reported(qcore, journal_repo):
    vm = JournalViewModel(journal_repo)
    errors = _collect(vm.errorRaised)
    assert vm.add_entry("   ") is None
    assert vm.edit_entry(999, "x") is False
    assert vm.undo_delete() is None
    assert len(errors) == 2


# ---------------- focus ----------------

def test_focus_runs_to_completion(qcore, focus_repo, clock):
    vm = FocusViewModel(focus_repo, minutes=25, clock=clock)
    ticks = _collect(vm.ticked)
    done = _collect(vm.sessionCompleted)

    sid = vm.start(task_id=3)
    assert vm.running
    assert vm.start() == sid  # one session at a time
    assert ticks[-1] == ("25:00",)

    clock.advance(minutes=10, seconds=30)
    vm._on_tick()
    assert ticks[-1] == ("14:30",)

    clock.advance(minutes=20)
    vm._on_tick()
    assert not vm.running
    assert done == [(sid, 1)]
    assert focus_repo.get(sid).is_completed
    assert [s.id for s in focus_repo.list_by_task(3)] == [sid]


def test_focus_cancel_leaves_session_open(qcore, focus_repo, clock):
    vm = FocusViewModel(focus_repo, minutes=5, clock=clock)
    sid = vm.start()
    clock.advance(minutes=1)
    vm.cancel()

    assert not vm.running
    assert vm.complete() is False
    assert not focus_repo.get(sid).is_completed
    assert vm.today_count() == 0


def test_focus_manual_complete(qcore, focus_repo, clock):
    vm = FocusViewModel(focus_repo, minutes=25, clock=clock)
    sid = vm.start()
    clock.advance(minutes=3)
    assert vm.complete() is True
    assert focus_repo.get(sid).completed_at - focus_repo.get(sid).started_at == timedelta(minutes=3)


def test_journal_add_after_midnight_goes_to_the_new_day(qcore, journal_repo, clock):
    vm = JournalViewModel(journal_repo)
    vm.load_today()
    vm.add_entry("late night")

    clock.advance(days=1)
    vm.add_entry("next morning")

    notes = [(n.date, [e.body for e in n.entries]) for n in journal_repo.list_notes()]
    assert notes == [
        (date(2026, 10, 20), ["next morning"]),
        (date(2026, 10, 19), ["late night"]),
    ]
    assert vm.today.date == date(2026, 10, 20)
