# todoapp/ui/task_editor_dialog.py
# Rev 0.2.0
from __future__ import annotations
from typing import Any, Dict

from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QCheckBox, QComboBox, QDateEdit, QDialog, QDialogButtonBox, QFormLayout,
    QHBoxLayout, QLabel, QLineEdit, QTextEdit, QVBoxLayout, QWidget
)

from todoapp.models.entities import Priority
from todoapp.ui.window_mode import fit_to_screen


class TaskEditorDialog(QDialog):
    """
    Values returned (see values()):
      title: str
      description: str
      priority: Priority
      due_date: date | None
      tags: list[str]
      subtasks: list[str]   (one per non-empty line)
    """

    def __init__(self, parent: QWidget | None = None, *, title: str = "New Task"):
        super().__init__(parent)
        self.setWindowTitle(title)

        # --- fields
        self._title = QLineEdit()
        self._title.setPlaceholderText("What needs doing?")

        self._desc = QTextEdit()
        self._desc.setAcceptRichText(False)

        self._cmb_priority = QComboBox()
        for p in Priority:
            self._cmb_priority.addItem(p.label, int(p))

        self._chk_due = QCheckBox("Due")
        self._due = QDateEdit(QDate.currentDate())
        self._due.setCalendarPopup(True)
        self._due.setDisplayFormat("yyyy-MM-dd")
        self._due.setEnabled(False)
        self._chk_due.toggled.connect(self._due.setEnabled)
        due_row = QHBoxLayout()
        due_row.addWidget(self._chk_due)
        due_row.addWidget(self._due, 1)

        self._tags = QLineEdit()
        self._tags.setPlaceholderText("comma, separated, tags")

        self._subtasks = QTextEdit()
        self._subtasks.setAcceptRichText(False)
        self._subtasks.setPlaceholderText("One subtask per line")

        # --- layout
        form = QFormLayout()
        form.addRow("Title:", self._title)
        form.addRow("Description:", self._desc)
        form.addRow(QLabel("<hr/>"))
        form.addRow("Priority:", self._cmb_priority)
        form.addRow("Due date:", due_row)
        form.addRow("Tags:", self._tags)
        form.addRow("Subtasks:", self._subtasks)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addWidget(btns)

        fit_to_screen(self, width_ratio=0.4, height_ratio=0.6, fixed=True)
        self._title.setFocus(Qt.OtherFocusReason)

    def values(self) -> Dict[str, Any]:
        return {
            "title": self._title.text().strip(),
            "description": self._desc.toPlainText().strip(),
            "priority": Priority(int(self._cmb_priority.currentData())),
            "due_date": self._due.date().toPython() if self._chk_due.isChecked() else None,
            "tags": [t.strip() for t in self._tags.text().split(",") if t.strip()],
            "subtasks": [s.strip() for s in self._subtasks.toPlainText().splitlines() if s.strip()],
        }
