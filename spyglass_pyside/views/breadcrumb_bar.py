"""BreadcrumbBar widget: back button plus the trailing path segments."""

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QToolButton,
    QWidget,
)

from ..controllers.navigation import BreadcrumbSegment

_SEGMENT_STYLE = """
QToolButton {
    border: none;
    padding: 2px 4px;
    color: palette(button-text);
}
QToolButton:hover {
    text-decoration: underline;
}
"""


class BreadcrumbBar(QWidget):
    """Horizontal bar showing where the active session is browsing."""

    back_requested = Signal()
    segment_activated = Signal(str)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)

        self._layout = QHBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(2)

        self._back_button = QToolButton()
        self._back_button.setArrowType(Qt.ArrowType.LeftArrow)
        self._back_button.setToolTip("Back (Backspace)")
        self._back_button.clicked.connect(self.back_requested)
        self._layout.addWidget(self._back_button)

        self._segments_host = QWidget()
        self._segments_layout = QHBoxLayout(self._segments_host)
        self._segments_layout.setContentsMargins(0, 0, 0, 0)
        self._segments_layout.setSpacing(0)
        self._layout.addWidget(self._segments_host, 1)

        self._segments: list[BreadcrumbSegment] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def segments(self) -> list[BreadcrumbSegment]:
        return list(self._segments)

    def set_segments(self, segments: list[BreadcrumbSegment]) -> None:
        self._segments = list(segments)
        self._clear_segment_widgets()
        for i, segment in enumerate(self._segments):
            if i:
                sep = QLabel("/")
                sep.setEnabled(False)
                self._segments_layout.addWidget(sep)
            button = QToolButton()
            button.setText(segment.name)
            button.setToolTip(segment.path)
            button.setStyleSheet(_SEGMENT_STYLE)
            button.clicked.connect(
                lambda _checked=False, p=segment.path: self.segment_activated.emit(p)
            )
            self._segments_layout.addWidget(button)
        self._segments_layout.addStretch()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _clear_segment_widgets(self) -> None:
        while self._segments_layout.count():
            item = self._segments_layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
