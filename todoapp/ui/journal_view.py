# todoapp/ui/journal_view.py
# Rev 0.2.0
from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QHBoxLayout, QLabel, QLineEdit, QListWidget, QListWidgetItem, QMessageBox,
    QPushButton, QVBoxLayout, QWidget
)

from todoapp.models.entities import JournalNote
from todoapp.viewmodels.journal_viewmodel import JournalViewModel


class JournalView(QWidget):
    """Today's note: time-stamped entries, quick add, delete with one-step undo."""

    def __init__(self, journal_repo, parent=None):
        super().__init__(parent)
        self._vm = JournalViewModel(journal_repo)

        self._lbl_date = QLabel("Journal")
        self._lbl_date.setStyleSheet("font-weight: bold;")

        self._list = QListWidget()
        self._list.setWordWrap(True)

        self._input = QLineEdit()
        self._input.setPlaceholderText("Write an entry and press Enter")
        self._btn_add = QPushButton("Add")
        self._btn_delete = QPushButton("Delete")
        self._btn_undo = QPushButton("Undo")
        self._btn_delete.setEnabled(False)
        self._btn_undo.setEnabled(False)

        add_bar = QHBoxLayout()
        add_bar.addWidget(self._input, 1)
        add_bar.addWidget(self._btn_add)

        action_bar = QHBoxLayout()
        action_bar.addWidget(self._btn_delete)
        action_bar.addWidget(self._btn_undo)
        action_bar.addStretch(1)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.addWidget(self._lbl_date)
        root.addWidget(self._list, 1)
        root.addLayout(add_bar)
        root.addLayout(action_bar)

        self._input.returnPressed.connect(self._on_add)
        self._btn_add.clicked.connect(self._on_add)
        self._btn_delete.clicked.connect(self._on_delete)
        self._btn_undo.clicked.connect(self._on_undo)
        self._list.itemSelectionChanged.connect(
            lambda: self._btn_delete.setEnabled(bool(self._list.selectedItems()))
        )

        self._vm.todayLoaded.connect(self._render)
        self._vm.errorRaised.connect(lambda msg: QMessageBox.warning(self, "Journal", msg))

    @property
    def viewmodel(self) -> JournalViewModel:
        return self._vm

    def reload(self) -> None:
        self._vm.load_today()

    def _render(self, note: JournalNote) -> None:
        self._lbl_date.setText(f"Journal: {note.date:%A, %Y-%m-%d}")
        self._list.clear()
        for e in note.entries:
            item = QListWidgetItem(f"{e.created_at:%H:%M}  {e.body}")
            item.setData(Qt.UserRole, e.id)
            self._list.addItem(item)
        self._btn_undo.setEnabled(self._vm.can_undo)

    def _on_add(self) -> None:
        body = self._input.text().strip()
        if not body:
            return
        if self._vm.add_entry(body) is not None:
            self._input.clear()

    def _on_delete(self) -> None:
        items = self._list.selectedItems()
        if items:
            self._vm.delete_entry(int(items[0].data(Qt.UserRole)))

    def _on_undo(self) -> None:
        self._vm.undo_delete()
