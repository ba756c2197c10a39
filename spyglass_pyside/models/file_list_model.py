"""Qt list model for a folder listing or grouped index results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from PySide6.QtCore import QAbstractListModel, QModelIndex, Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import QApplication, QStyle

from ..utils.index_service import FileEntry, IndexEntry

Entry = Union[FileEntry, IndexEntry]

# Custom roles
ENTRY_ROLE = Qt.UserRole
IS_HEADER_ROLE = Qt.UserRole + 1


@dataclass(frozen=True)
class _Row:
    text: str
    entry: Optional[Entry] = None

    @property
    def is_header(self) -> bool:
        return self.entry is None


def _build_rows(entries: Sequence[Entry], grouped: bool) -> list[_Row]:
    if not grouped:
        return [_Row(e.name, e) for e in entries]
    folders = [e for e in entries if e.is_directory]
    files = [e for e in entries if not e.is_directory]
    rows: list[_Row] = []
    if folders:
        rows.append(_Row(f"Folders ({len(folders)})"))
        rows.extend(_Row(e.name, e) for e in folders)
    if files:
        rows.append(_Row(f"Files ({len(files)})"))
        rows.extend(_Row(e.name, e) for e in files)
    return rows


class FileListModel(QAbstractListModel):
    """Flat list of entries, optionally split under Folders / Files headers.

    Header rows carry no entry and are not selectable.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self._rows: list[_Row] = []
        self._show_paths = False
        self._copied_path: Optional[str] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def set_entries(self, entries: Sequence[Entry], grouped: bool = False) -> None:
        self.beginResetModel()
        self._rows = _build_rows(entries, grouped)
        self.endResetModel()

    def set_show_paths(self, enabled: bool) -> None:
        if enabled == self._show_paths:
            return
        self._show_paths = enabled
        self._emit_all_changed()

    def set_copied_path(self, path: Optional[str]) -> None:
        self._copied_path = path
        self._emit_all_changed()

    def entry_at(self, row: int) -> Optional[Entry]:
        if 0 <= row < len(self._rows):
            return self._rows[row].entry
        return None

    def header_count(self) -> int:
        return sum(1 for r in self._rows if r.is_header)

    def first_entry_row(self) -> int:
        for i, row in enumerate(self._rows):
            if not row.is_header:
                return i
        return -1

    def step_entry_row(self, current: int, delta: int) -> int:
        """Row reached by moving *delta* entries from *current*, skipping headers.

        Stops at the first and last entry; with no current row the first
        entry is returned.
        """
        if current < 0 or current >= len(self._rows):
            return self.first_entry_row()
        step = 1 if delta > 0 else -1
        target = current
        for _ in range(abs(delta)):
            row = target + step
            while 0 <= row < len(self._rows) and self._rows[row].is_header:
                row += step
            if not 0 <= row < len(self._rows):
                break
            target = row
        return target

    # ------------------------------------------------------------------
    # QAbstractListModel interface
    # ------------------------------------------------------------------

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # noqa: N802
        if parent.isValid():
            return 0
        return len(self._rows)

    def flags(self, index: QModelIndex) -> Qt.ItemFlags:
        if not index.isValid():
            return Qt.NoItemFlags
        if self._rows[index.row()].is_header:
            return Qt.ItemIsEnabled
        return Qt.ItemIsEnabled | Qt.ItemIsSelectable

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:
        if not index.isValid() or index.row() >= len(self._rows):
            return None
        row = self._rows[index.row()]

        if role == Qt.DisplayRole:
            if row.entry is None:
                return row.text
            if row.entry.path == self._copied_path:
                return f"{row.text}  (copied)"
            if self._show_paths:
                return f"{row.text}\n{row.entry.path}"
            if isinstance(row.entry, IndexEntry):
                return f"{row.text}  {row.entry.parent_folder}"
            return row.text

        if role == Qt.ToolTipRole and row.entry is not None:
            return row.entry.path

        if role == Qt.DecorationRole and row.entry is not None:
            style = QApplication.style()
            if style is None:
                return None
            icon = QStyle.SP_DirIcon if row.entry.is_directory else QStyle.SP_FileIcon
            return style.standardIcon(icon)

        if role == Qt.FontRole and row.is_header:
            font = QFont()
            font.setBold(True)
            return font

        if role == ENTRY_ROLE:
            return row.entry

        if role == IS_HEADER_ROLE:
            return row.is_header

        return None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _emit_all_changed(self) -> None:
        if self._rows:
            self.dataChanged.emit(self.index(0), self.index(len(self._rows) - 1))
