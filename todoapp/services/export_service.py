# Rev 0.1.0
"""Markdown / JSON renderings of already-loaded tasks and journal notes."""
from __future__ import annotations
import json
from typing import Any, Dict, Optional, Sequence, TextIO

from todoapp.models.entities import JournalNote, Status, Task

TS_FORMAT = "%Y-%m-%dT%H:%M:%S"


def write_tasks_markdown(out: TextIO, tasks: Sequence[Task]) -> None:
    out.write("# Tasks\n\n")
    if not tasks:
        out.write("_No tasks._\n")
        return
    for t in tasks:
        box = "[x]" if t.status == Status.DONE else "[ ]"
        meta = [t.priority.label, t.status.label]
        if t.due_date:
            meta.append(f"due {t.due_date.isoformat()}")
        if t.tags:
            meta.append("tags: " + ", ".join(t.tags))
        out.write(f"- {box} **{t.title}** ({' | '.join(meta)})\n")
        if t.description:
            out.write(f"  > {t.description}\n")
        for st in t.subtasks:
            out.write(f"  - {'[x]' if st.completed else '[ ]'} {st.title}\n")


def write_notes_markdown(out: TextIO, notes: Sequence[JournalNote]) -> None:
    out.write("# Journal\n\n")
    if not notes:
        out.write("_No journal entries._\n")
        return
    for i, n in enumerate(notes):
        out.write(f"## {n.date.isoformat()}\n\n")
        if not n.entries:
            out.write("_No entries._\n")
        for e in n.entries:
            out.write(f"- **{e.created_at.strftime('%H:%M')}** {e.body}\n")
        if i < len(notes) - 1:
            out.write("\n")


def write_markdown(out: TextIO, tasks: Sequence[Task], notes: Optional[Sequence[JournalNote]] = None) -> None:
    write_tasks_markdown(out, tasks)
    if notes is not None:
        out.write("\n")
        write_notes_markdown(out, notes)


def task_to_dict(t: Task) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "status": t.status.label,
        "priority": t.priority.label,
        "due_date": t.due_date.isoformat() if t.due_date else None,
        "created_at": t.created_at.strftime(TS_FORMAT) if t.created_at else None,
        "tags": list(t.tags),
        "subtasks": [
            {"id": st.id, "title": st.title, "completed": st.completed} for st in t.subtasks
        ],
    }
    return d


def note_to_dict(n: JournalNote) -> Dict[str, Any]:
    return {
        "date": n.date.isoformat(),
        "entries": [
            {"body": e.body, "created_at": e.created_at.strftime(TS_FORMAT)} for e in n.entries
        ],
    }


def export_dict(tasks: Sequence[Task], notes: Optional[Sequence[JournalNote]] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {"tasks": [task_to_dict(t) for t in tasks]}
    if notes is not None:
        data["journal"] = [note_to_dict(n) for n in notes]
    return data


def write_json(out: TextIO, tasks: Sequence[Task], notes: Optional[Sequence[JournalNote]] = None) -> None:
    json.dump(export_dict(tasks, notes), out, indent=2, ensure_ascii=False)
    out.write("\n")
