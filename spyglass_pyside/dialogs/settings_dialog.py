"""Settings dialog for Spyglass."""

from __future__ import annotations

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QCheckBox,
    QPushButton, QFileDialog, QDialogButtonBox, QGroupBox, QFormLayout,
)

from ..utils.config import AppConfig


class SettingsDialog(QDialog):
    """Display, focus-mode and index settings."""

    reindex_requested = Signal()

    def __init__(self, config: AppConfig, index_status: str = "", parent=None):
        super().__init__(parent)
        self.setWindowTitle("Spyglass Settings")
        self.setMinimumSize(460, 300)
        self._config = config

        layout = QVBoxLayout(self)

        # Display
        display_group = QGroupBox("Display")
        display_layout = QFormLayout(display_group)
        self._show_paths_check = QCheckBox("Show full paths under entry names")
        self._show_paths_check.setChecked(config.show_paths)
        display_layout.addRow(self._show_paths_check)
        layout.addWidget(display_group)

        # Focus mode
        focus_group = QGroupBox("Focus Mode")
        focus_layout = QFormLayout(focus_group)
        self._reset_pinned_check = QCheckBox("Return to the pinned folder when a card collapses")
        self._reset_pinned_check.setChecked(config.reset_to_pinned_on_collapse)
        focus_layout.addRow(self._reset_pinned_check)
        layout.addWidget(focus_group)

        # Sessions and index
        index_group = QGroupBox("Sessions && Index")
        index_layout = QFormLayout(index_group)
        root_row = QHBoxLayout()
        self._root_edit = QLineEdit(config.projects_root or "")
        self._root_edit.setPlaceholderText("Home directory")
        root_browse = QPushButton("Browse...")
        root_browse.clicked.connect(self._browse_root)
        root_row.addWidget(self._root_edit, 1)
        root_row.addWidget(root_browse)
        index_layout.addRow("Projects root:", root_row)
        index_layout.addRow(QLabel("Used to create the first tabs when none are saved."))

        reindex_row = QHBoxLayout()
        self._index_status = QLabel(index_status)
        self._reindex_btn = QPushButton("Re-index")
        self._reindex_btn.clicked.connect(self.reindex_requested)
        reindex_row.addWidget(self._index_status, 1)
        reindex_row.addWidget(self._reindex_btn)
        index_layout.addRow("Global index:", reindex_row)
        layout.addWidget(index_group)

        layout.addStretch()

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def set_index_status(self, text: str, building: bool) -> None:
        self._index_status.setText(text)
        self._reindex_btn.setEnabled(not building)

    def get_config_updates(self) -> dict:
        return {
            "show_paths": self._show_paths_check.isChecked(),
            "reset_to_pinned_on_collapse": self._reset_pinned_check.isChecked(),
            "projects_root": self._root_edit.text().strip() or None,
        }

    def _browse_root(self):
        path = QFileDialog.getExistingDirectory(self, "Select Projects Root", self._root_edit.text())
        if path:
            self._root_edit.setText(path)
