"""File list view for the active session's folder or index results."""

from __future__ import annotations

from typing import Optional, Sequence

from PySide6.QtCore import QModelIndex, Qt, Signal
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QAbstractItemView,
    QLabel,
    QListView,
    QMenu,
    QStackedLayout,
    QWidget,
)

from ..models.file_list_model import ENTRY_ROLE, Entry, FileListModel


class FileListView(QWidget):
    """List of entries with an empty-state label in place of an empty list.

    A single click reports the entry (copy). Double-click or Enter activates
    it (enter folder or copy file). The first entry is selected whenever the
    entries change, so the search field can drive the list from the keyboard.
    """

    entry_clicked = Signal(object)  # FileEntry | IndexEntry
    entry_activated = Signal(object)
    copy_path_requested = Signal(str)
    open_in_new_tab_requested = Signal(str)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        self._model = FileListModel(self)

        self._list = QListView(self)
        self._list.setModel(self._model)
        self._list.setSelectionMode(QAbstractItemView.SingleSelection)
        self._list.setUniformItemSizes(False)
        self._list.setContextMenuPolicy(Qt.CustomContextMenu)
        self._list.setEditTriggers(QAbstractItemView.NoEditTriggers)

        self._empty_label = QLabel(self)
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty_label.setEnabled(False)

        self._stack = QStackedLayout(self)
        self._stack.setContentsMargins(0, 0, 0, 0)
        self._stack.addWidget(self._list)
        self._stack.addWidget(self._empty_label)

        self._list.clicked.connect(self._on_click)
        self._list.activated.connect(self._on_activated)
        self._list.customContextMenuRequested.connect(self._on_context_menu)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def model(self) -> FileListModel:
        return self._model

    def set_entries(self, entries: Sequence[Entry], grouped: bool = False, empty_text: str = "") -> None:
        self._model.set_entries(entries, grouped)
        self._empty_label.setText(empty_text)
        self._stack.setCurrentWidget(self._list if entries else self._empty_label)
        self._select_row(self._model.first_entry_row())

    def set_loading(self, loading: bool) -> None:
        self._list.setEnabled(not loading)

    def set_show_paths(self, enabled: bool) -> None:
        self._model.set_show_paths(enabled)

    def set_copied_path(self, path: Optional[str]) -> None:
        self._model.set_copied_path(path)

    def move_selection(self, delta: int) -> None:
        self._select_row(self._model.step_entry_row(self._list.currentIndex().row(), delta))

    def activate_current(self) -> None:
        index = self._list.currentIndex()
        if index.isValid():
            self._on_activated(index)

    def _select_row(self, row: int) -> None:
        if row < 0:
            return
        index = self._model.index(row)
        self._list.setCurrentIndex(index)
        self._list.scrollTo(index)

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def _on_click(self, index: QModelIndex) -> None:
        entry = index.data(ENTRY_ROLE)
        if entry is not None:
            self.entry_clicked.emit(entry)

    def _on_activated(self, index: QModelIndex) -> None:
        entry = index.data(ENTRY_ROLE)
        if entry is not None:
            self.entry_activated.emit(entry)

    def _on_context_menu(self, pos) -> None:
        index = self._list.indexAt(pos)
        if not index.isValid():
            return
        entry = index.data(ENTRY_ROLE)
        if entry is None:
            return

        menu = QMenu(self)

        copy_path = QAction("Copy Path", menu)
        copy_path.triggered.connect(lambda: self.copy_path_requested.emit(entry.path))
        menu.addAction(copy_path)

        if entry.is_directory:
            open_tab = QAction("Open in New Tab", menu)
            open_tab.triggered.connect(lambda: self.open_in_new_tab_requested.emit(entry.path))
            menu.addAction(open_tab)

        menu.exec(self._list.viewport().mapToGlobal(pos))
