"""Copy-path action with a short-lived "copied" marker."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ..utils.telemetry import log_exception, log_info

COPIED_INDICATOR_MS = 200


class CopyPathAction(QObject):
    copied_changed = Signal(object)  # str | None

    def __init__(
        self,
        write_text: Callable[[str], None],
        indicator_ms: int = COPIED_INDICATOR_MS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._write_text = write_text
        self._copied_path: Optional[str] = None

        self._reset_timer = QTimer(self)
        self._reset_timer.setSingleShot(True)
        self._reset_timer.setInterval(indicator_ms)
        self._reset_timer.timeout.connect(self._clear_marker)

    @property
    def copied_path(self) -> Optional[str]:
        return self._copied_path

    def copy(self, path: str) -> bool:
        try:
            self._write_text(path)
        except Exception:
            log_exception("copy to clipboard failed", path=path)
            return False
        log_info("path copied", path=path)
        self._copied_path = path
        self.copied_changed.emit(path)
        self._reset_timer.stop()
        self._reset_timer.start()
        return True

    def shutdown(self) -> None:
        self._reset_timer.stop()

    def _clear_marker(self) -> None:
        self._copied_path = None
        self.copied_changed.emit(None)
