"""Session card bar: one coloured card per session, click and drag to reorder."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QPoint, Qt, Signal
from PySide6.QtGui import QAction, QColor, QContextMenuEvent, QIcon, QMouseEvent, QPixmap
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QMenu,
    QVBoxLayout,
    QWidget,
)

from ..controllers.pointer import CardPointerTracker, PointerGesture
from ..models.sessions import TAB_COLORS, Session

_CARD_STYLE = """
QFrame#sessionCard {{
    border: 1px solid palette(mid);
    border-left: 4px solid {color};
    border-radius: 4px;
    background-color: {background};
}}
"""


def _color_icon(color: str) -> QIcon:
    pixmap = QPixmap(12, 12)
    pixmap.fill(QColor(color))
    return QIcon(pixmap)


class _SessionCard(QFrame):
    """Passive card; the bar handles all pointer input."""

    def __init__(self, session: Session, active: bool, show_path: bool, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.session_id = session.id
        self.session_path = session.path
        self.setObjectName("sessionCard")
        self.setAttribute(Qt.WA_TransparentForMouseEvents)
        background = "palette(highlight)" if active else "palette(button)"
        self.setStyleSheet(_CARD_STYLE.format(color=session.color, background=background))
        self.setToolTip(session.path)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)
        layout.setSpacing(0)

        name = QLabel(session.name)
        font = name.font()
        font.setBold(active)
        name.setFont(font)
        layout.addWidget(name)

        if show_path:
            path = QLabel(session.path)
            path.setEnabled(False)
            layout.addWidget(path)


class SessionCardBar(QWidget):
    """Row of session cards.

    Emits ``gesture_completed`` with a click or drop gesture decided by
    :class:`CardPointerTracker`; a drop on the empty area carries no target.
    """

    gesture_completed = Signal(object)  # PointerGesture
    copy_path_requested = Signal(str)
    recolor_requested = Signal(str, str)
    close_requested = Signal(str)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._tracker = CardPointerTracker()
        self._cards: list[_SessionCard] = []
        self._show_paths = False

        self._layout = QHBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(4)
        self._layout.addStretch()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def tracker(self) -> CardPointerTracker:
        return self._tracker

    def card_ids(self) -> list[str]:
        return [c.session_id for c in self._cards]

    def set_show_paths(self, enabled: bool) -> None:
        self._show_paths = enabled

    def set_sessions(self, sessions: list[Session], active_id: str) -> None:
        # Rebuilding mid-drag would orphan the pressed card.
        self._tracker.cancel()
        for card in self._cards:
            self._layout.removeWidget(card)
            card.deleteLater()
        self._cards = []
        for i, session in enumerate(sessions):
            card = _SessionCard(session, session.id == active_id, self._show_paths, self)
            self._layout.insertWidget(i, card)
            self._cards.append(card)

    # ------------------------------------------------------------------
    # Pointer handling
    # ------------------------------------------------------------------

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if event.button() != Qt.LeftButton:
            super().mousePressEvent(event)
            return
        card = self._card_at(event.position().toPoint())
        if card is not None:
            pos = event.position().toPoint()
            self._tracker.press(card.session_id, pos.x(), pos.y())
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        pos = event.position().toPoint()
        if self._tracker.move(pos.x(), pos.y()):
            self.setCursor(Qt.ClosedHandCursor)
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if event.button() != Qt.LeftButton:
            super().mouseReleaseEvent(event)
            return
        self.unsetCursor()
        card = self._card_at(event.position().toPoint())
        gesture: Optional[PointerGesture] = self._tracker.release(
            card.session_id if card is not None else None
        )
        if gesture is not None:
            self.gesture_completed.emit(gesture)
        event.accept()

    def contextMenuEvent(self, event: QContextMenuEvent) -> None:  # noqa: N802
        card = self._card_at(event.pos())
        if card is None:
            return
        session_id, path = card.session_id, card.session_path

        menu = QMenu(self)

        copy_path = QAction("Copy Path", menu)
        copy_path.triggered.connect(lambda: self.copy_path_requested.emit(path))
        menu.addAction(copy_path)

        colors = menu.addMenu("Color")
        for color in TAB_COLORS:
            action = QAction(_color_icon(color), color, colors)
            action.triggered.connect(
                lambda _checked=False, c=color: self.recolor_requested.emit(session_id, c)
            )
            colors.addAction(action)

        menu.addSeparator()

        close = QAction("Close", menu)
        close.setEnabled(len(self._cards) > 1)
        close.triggered.connect(lambda: self.close_requested.emit(session_id))
        menu.addAction(close)

        menu.exec(event.globalPos())

    def _card_at(self, pos: QPoint) -> Optional[_SessionCard]:
        for card in self._cards:
            if card.geometry().contains(pos):
                return card
        return None
