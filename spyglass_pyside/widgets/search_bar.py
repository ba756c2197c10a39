"""SearchBar widget: query field plus the local / indexed mode toggle."""

from PySide6.QtCore import QEvent, QObject, Qt, Signal
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLineEdit,
    QToolButton,
    QWidget,
)

from ..controllers.search import SearchMode

_TOGGLE_STYLE = """
QToolButton {
    border: 1px solid palette(mid);
    border-radius: 3px;
    padding: 2px 8px;
    font-size: 12px;
    background-color: palette(button);
    color: palette(button-text);
}
QToolButton:checked {
    border: 2px solid #60a5fa;
    font-weight: bold;
}
"""


class SearchBar(QWidget):
    """Horizontal bar with the search field and a mode toggle button."""

    query_changed = Signal(str)
    mode_toggle_requested = Signal()
    selection_step_requested = Signal(int)  # -1 up, +1 down
    submit_requested = Signal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(4)

        self._search_edit = QLineEdit()
        self._search_edit.setClearButtonEnabled(True)
        layout.addWidget(self._search_edit, 1)

        self._mode_button = QToolButton()
        self._mode_button.setCheckable(True)
        self._mode_button.setToolButtonStyle(Qt.ToolButtonStyle.ToolButtonTextOnly)
        self._mode_button.setStyleSheet(_TOGGLE_STYLE)
        self._mode_button.setToolTip("Toggle search mode (Ctrl+I)")
        layout.addWidget(self._mode_button)

        self._search_edit.textChanged.connect(self.query_changed.emit)
        self._search_edit.returnPressed.connect(self.submit_requested)
        self._search_edit.installEventFilter(self)
        # The button reflects the coordinator's mode; clicks only request a change.
        self._mode_button.clicked.connect(self._on_mode_clicked)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def search_text(self) -> str:
        return self._search_edit.text()

    @search_text.setter
    def search_text(self, value: str) -> None:
        if value != self._search_edit.text():
            self._search_edit.setText(value)

    def set_placeholder(self, text: str) -> None:
        self._search_edit.setPlaceholderText(text)

    def set_mode(self, mode: SearchMode) -> None:
        indexed = mode is SearchMode.INDEXED
        self._mode_button.setChecked(indexed)
        self._mode_button.setText("All files" if indexed else "This folder")

    def focus_search(self) -> None:
        self._search_edit.setFocus()
        self._search_edit.selectAll()

    def clear_search(self) -> None:
        self._search_edit.clear()

    def _on_mode_clicked(self) -> None:
        # Undo the button's own toggle until the coordinator confirms.
        self._mode_button.setChecked(not self._mode_button.isChecked())
        self.mode_toggle_requested.emit()

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802
        # Up / Down in the field move the result selection instead of the cursor.
        if watched is self._search_edit and event.type() == QEvent.Type.KeyPress:
            if event.key() == Qt.Key.Key_Down:
                self.selection_step_requested.emit(1)
                return True
            if event.key() == Qt.Key.Key_Up:
                self.selection_step_requested.emit(-1)
                return True
        return super().eventFilter(watched, event)
