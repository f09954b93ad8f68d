# tests/test_export_service.py
from __future__ import annotations

import io
import json
from datetime import date, datetime

from todoapp.models.entities import JournalEntry, JournalNote, Priority, Status, Subtask, Task
from todoapp.services.export_service import write_json, write_markdown


def _task() -> Task:
    return Task(
        id=1,
        title="Ship",
        description="release notes",
        status=Status.DONE,
        priority=Priority.HIGH,
        due_date=date(2026, 10, 20),
        created_at=datetime(2026, 10, 19, 9, 30, 0),
        tags=["work"],
        subtasks=[Subtask(1, 1, "draft", completed=True), Subtask(2, 1, "review")],
    )


def _note() -> JournalNote:
    return JournalNote(
        id=1,
        date=date(2026, 10, 19),
        entries=[JournalEntry(1, 1, "Shipped it", datetime(2026, 10, 19, 17, 5, 0))],
    )


def test_markdown_tasks_only():
    buf = io.StringIO()
    write_markdown(buf, [_task()])
    assert buf.getvalue() == (
        "# Tasks\n\n"
        "- [x] **Ship** (High | Done | due 2026-10-20 | tags: work)\n"
        "  > release notes\n"
        "  - [x] draft\n"
        "  - [ ] review\n"
    )


def test_markdown_with_journal():
    buf = io.StringIO()
    write_markdown(buf, [], [_note()])
    assert buf.getvalue() == (
        "# Tasks\n\n_No tasks._\n"
        "\n# Journal\n\n"
        "## 2026-10-19\n\n"
        "- **17:05** Shipped it\n"
    )


def test_markdown_empty_journal_section():
    buf = io.StringIO()
    write_markdown(buf, [], [])
    assert buf.getvalue().endswith("# Journal\n\n_No journal entries._\n")


def test_json_export():
    buf = io.StringIO()
    write_json(buf, [_task()], [_note()])
    data = json.loads(buf.getvalue())

    (task,) = data["tasks"]
    assert task["status"] == "Done"
    assert task["priority"] == "High"
    assert task["due_date"] == "2026-10-20"
    assert task["created_at"] == "2026-10-19T09:30:00"
    assert task["subtasks"] == [
        {"id": 1, "title": "draft", "completed": True},
        {"id": 2, "title": "review", "completed": False},
    ]
    assert data["journal"] == [
        {"date": "2026-10-19", "entries": [{"body": "Shipped it", "created_at": "2026-10-19T17:05:00"}]}
    ]


def test_json_omits_journal_unless_requested():
    buf = io.StringIO()
    write_json(buf, [])
    assert json.loads(buf.getvalue()) == {"tasks": []}
