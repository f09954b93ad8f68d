# todoapp/ui/tasks_view.py
# Rev 0.2.0: status filter, sort and search bar above the task table
from __future__ import annotations

from datetime import date

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import (
    QComboBox, QDialog, QHBoxLayout, QHeaderView, QLineEdit, QMessageBox,
    QPushButton, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget
)

from todoapp.models.entities import Status, Task
from todoapp.services.task_views import due_level
from todoapp.ui.task_editor_dialog import TaskEditorDialog
from todoapp.viewmodels.tasks_viewmodel import TasksViewModel

_DUE_COLORS = {"overdue": "#d9534f", "today": "#f0ad4e", "soon": "#5bc0de"}


class TasksView(QWidget):
    taskSelected = Signal(int)

    def __init__(self, tasks_repo, parent=None):
        super().__init__(parent)
        self._vm = TasksViewModel(tasks_repo)

        # ---------- Controls ----------
        self._btn_new = QPushButton("New Task")
        self._btn_status = QPushButton("Next Status")
        self._btn_delete = QPushButton("Delete")
        self._btn_status.setEnabled(False)
        self._btn_delete.setEnabled(False)

        self._cmb_status = QComboBox()
        for label, key in (("All", "all"), ("Pending", "pending"), ("In Progress", "active"), ("Done", "done")):
            self._cmb_status.addItem(label, key)

        self._cmb_sort = QComboBox()
        for label, key in (("Created", "created"), ("Due date", "due"), ("Priority", "priority"), ("Status", "status")):
            self._cmb_sort.addItem(label, key)

        self._search = QLineEdit()
        self._search.setPlaceholderText("Search title, description, tags")
        self._search.setClearButtonEnabled(True)

        # ---------- Table: ID | Title | Status | Priority | Due | Tags | Subtasks ----------
        self._table = QTableWidget(0, 7)
        self._table.setHorizontalHeaderLabels(["ID", "Title", "Status", "Priority", "Due", "Tags", "Subtasks"])
        self._table.setEditTriggers(QTableWidget.NoEditTriggers)
        self._table.setSelectionBehavior(QTableWidget.SelectRows)
        self._table.setSelectionMode(QTableWidget.SingleSelection)
        self._table.setAlternatingRowColors(True)
        self._table.verticalHeader().setVisible(False)

        hdr = self._table.horizontalHeader()
        hdr.setSectionResizeMode(QHeaderView.ResizeToContents)
        hdr.setSectionResizeMode(1, QHeaderView.Stretch)

        # ---------- Layout ----------
        top_bar = QHBoxLayout()
        top_bar.addWidget(self._btn_new)
        top_bar.addWidget(self._btn_status)
        top_bar.addWidget(self._btn_delete)
        top_bar.addStretch(1)

        filter_bar = QHBoxLayout()
        filter_bar.addWidget(self._cmb_status)
        filter_bar.addWidget(self._cmb_sort)
        filter_bar.addWidget(self._search, 1)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.addLayout(top_bar)
        root.addLayout(filter_bar)
        root.addWidget(self._table, 1)

        # ---------- Wiring ----------
        self._btn_new.clicked.connect(self._on_new_clicked)
        self._btn_status.clicked.connect(self._on_status_clicked)
        self._btn_delete.clicked.connect(self._on_delete_clicked)
        self._cmb_status.currentIndexChanged.connect(self._on_filters_changed)
        self._cmb_sort.currentIndexChanged.connect(self._on_filters_changed)
        self._search.textChanged.connect(self._on_filters_changed)
        self._table.itemSelectionChanged.connect(self._on_selection_changed)

        self._vm.tasksReloaded.connect(self._render)
        self._vm.errorRaised.connect(self._show_error)

    # ---------- Public API ----------
    @property
    def viewmodel(self) -> TasksViewModel:
        return self._vm

    def reload(self) -> None:
        self._vm.reload()

    def selected_task_id(self) -> int | None:
        task = self._vm.task_at(self._table.currentRow())
        if task is None or not self._table.selectedItems():
            return None
        return task.id

    # ---------- Internals ----------
    def _render(self, tasks: list[Task]) -> None:
        today = date.today()
        self._table.setRowCount(len(tasks))
        for r, t in enumerate(tasks):
            done = sum(1 for s in t.subtasks if s.completed)
            cells = [
                str(t.id),
                t.title,
                t.status.label,
                t.priority.label,
                t.due_date.isoformat() if t.due_date else "",
                ", ".join(t.tags),
                f"{done}/{len(t.subtasks)}" if t.subtasks else "",
            ]
            for c, text in enumerate(cells):
                item = QTableWidgetItem(text)
                item.setData(Qt.UserRole, t.id)
                self._table.setItem(r, c, item)

            color = _DUE_COLORS.get(due_level(t.due_date, today))
            if color and t.status != Status.DONE:
                self._table.item(r, 4).setForeground(QBrush(QColor(color)))
        self._on_selection_changed()

    def _on_filters_changed(self, *_args) -> None:
        self._vm.set_filters(
            status=self._cmb_status.currentData(),
            sort=self._cmb_sort.currentData(),
            query=self._search.text(),
        )
        self._vm.reload()

    def _on_selection_changed(self) -> None:
        tid = self.selected_task_id()
        self._btn_status.setEnabled(tid is not None)
        self._btn_delete.setEnabled(tid is not None)
        if tid is not None:
            self.taskSelected.emit(tid)

    def _on_new_clicked(self) -> None:
        dlg = TaskEditorDialog(self, title="New Task")
        if dlg.exec() != int(QDialog.DialogCode.Accepted):
            return
        values = dlg.values()
        if not values["title"]:
            QMessageBox.warning(self, "Missing title", "Please provide a task title.")
            return
        self._vm.create_task(**values)

    def _on_status_clicked(self) -> None:
        tid = self.selected_task_id()
        if tid is not None:
            self._vm.cycle_status(tid)

    def _on_delete_clicked(self) -> None:
        tid = self.selected_task_id()
        if tid is None:
            return
        if QMessageBox.question(
            self, "Delete Task", f"Delete task #{tid} with its subtasks and tags?",
            QMessageBox.Yes | QMessageBox.No
        ) == QMessageBox.Yes:
            self._vm.delete_task(tid)

    def _show_error(self, message: str) -> None:
        QMessageBox.warning(self, "Tasks", message)
