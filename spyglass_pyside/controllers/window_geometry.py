"""Window layout modes and the per-mode size memory behind them."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional, Protocol

from PySide6.QtCore import QObject, QSize, QTimer, Signal

from ..models.sessions import TabSessionStore
from ..utils.telemetry import log_debug, log_info

if TYPE_CHECKING:
    from .navigation import NavigationController

RESIZE_DEBOUNCE_MS = 500
COLLAPSE_DELAY_MS = 250


class LayoutMode(str, Enum):
    NORMAL = "normal"
    FOCUS_COLLAPSED = "focus_collapsed"
    FOCUS_EXPANDED = "focus_expanded"


DEFAULT_GEOMETRY: dict[LayoutMode, tuple[int, int]] = {
    LayoutMode.NORMAL: (700, 600),
    LayoutMode.FOCUS_COLLAPSED: (700, 96),
    LayoutMode.FOCUS_EXPANDED: (700, 600),
}


class HostWindow(Protocol):
    def size(self) -> QSize: ...

    def resize(self, width: int, height: int) -> None: ...


class GeometryStore(Protocol):
    def get_persisted_geometry(self, mode_key: str, default: tuple[int, int]) -> tuple[int, int]: ...

    def set_persisted_geometry(self, mode_key: str, width: int, height: int) -> None: ...


class WindowGeometryStateMachine(QObject):
    """Normal / FocusCollapsed / FocusExpanded with a remembered size per mode.

    The size of the mode being left is always read before the window is
    resized for the mode being entered. Manual resizes are recorded into
    the memory of the mode they happened in, after a debounce.
    """

    mode_changed = Signal(object)  # LayoutMode

    def __init__(
        self,
        window: HostWindow,
        geometry_store: GeometryStore,
        store: TabSessionStore,
        navigation: Optional[NavigationController] = None,
        reset_to_pinned_on_collapse: bool = True,
        resize_debounce_ms: int = RESIZE_DEBOUNCE_MS,
        collapse_delay_ms: int = COLLAPSE_DELAY_MS,
        defaults: Optional[dict[LayoutMode, tuple[int, int]]] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._window = window
        self._geometry_store = geometry_store
        self._store = store
        self._navigation = navigation
        self.reset_to_pinned_on_collapse = reset_to_pinned_on_collapse
        self._defaults = dict(DEFAULT_GEOMETRY)
        if defaults:
            self._defaults.update(defaults)
        self._mode = LayoutMode.NORMAL
        self._pinned_paths: dict[str, str] = {}
        self._resize_mode: Optional[LayoutMode] = None

        self._resize_debounce = QTimer(self)
        self._resize_debounce.setSingleShot(True)
        self._resize_debounce.setInterval(resize_debounce_ms)
        self._resize_debounce.timeout.connect(self._on_resize_settled)

        self._collapse_timer = QTimer(self)
        self._collapse_timer.setSingleShot(True)
        self._collapse_timer.setInterval(collapse_delay_ms)
        self._collapse_timer.timeout.connect(self.collapse)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def mode(self) -> LayoutMode:
        return self._mode

    @property
    def in_focus_mode(self) -> bool:
        return self._mode is not LayoutMode.NORMAL

    @property
    def pinned_paths(self) -> dict[str, str]:
        return dict(self._pinned_paths)

    def remembered_size(self, mode: LayoutMode) -> tuple[int, int]:
        return self._geometry_store.get_persisted_geometry(mode.value, self._defaults[mode])

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def restore(self) -> None:
        """Apply the remembered Normal size, e.g. at start-up."""
        if self._mode is LayoutMode.NORMAL:
            self._apply(self.remembered_size(LayoutMode.NORMAL))

    def enter_focus_mode(self) -> bool:
        if self._mode is not LayoutMode.NORMAL:
            return False
        self._remember(LayoutMode.NORMAL)
        self._pinned_paths = {s.id: s.path for s in self._store.sessions}
        self._set_mode(LayoutMode.FOCUS_COLLAPSED)
        self._apply(self.remembered_size(LayoutMode.FOCUS_COLLAPSED))
        return True

    def exit_focus_mode(self) -> bool:
        if self._mode is LayoutMode.NORMAL:
            return False
        self._collapse_timer.stop()
        self._pinned_paths = {}
        self._set_mode(LayoutMode.NORMAL)
        self._apply(self.remembered_size(LayoutMode.NORMAL))
        return True

    def toggle_focus_mode(self) -> LayoutMode:
        if self._mode is LayoutMode.NORMAL:
            self.enter_focus_mode()
        else:
            self.exit_focus_mode()
        return self._mode

    def expand(self, session_id: str) -> bool:
        """Open *session_id*'s card into the full listing."""
        if self._store.index_of(session_id) == -1:
            return False
        if self._mode is LayoutMode.FOCUS_COLLAPSED:
            self._collapse_timer.stop()
            if self.reset_to_pinned_on_collapse:
                self._reset_to_pinned(session_id)
            self._set_mode(LayoutMode.FOCUS_EXPANDED)
            self._store.switch_to(session_id)
            self._apply(self.remembered_size(LayoutMode.FOCUS_EXPANDED))
            return True
        if self._mode is LayoutMode.FOCUS_EXPANDED:
            # Already expanded: swap content, keep the window as it is.
            self._collapse_timer.stop()
            if session_id != self._store.active_id:
                self._store.switch_to(session_id)
            return True
        return False

    def collapse(self) -> bool:
        self._collapse_timer.stop()
        if self._mode is not LayoutMode.FOCUS_EXPANDED:
            return False
        self._remember(LayoutMode.FOCUS_EXPANDED)
        if self.reset_to_pinned_on_collapse:
            self._reset_active_to_pinned()
        self._set_mode(LayoutMode.FOCUS_COLLAPSED)
        self._apply(self.remembered_size(LayoutMode.FOCUS_COLLAPSED))
        return True

    # ------------------------------------------------------------------
    # Window events
    # ------------------------------------------------------------------

    def on_pointer_left(self) -> None:
        if self._mode is LayoutMode.FOCUS_EXPANDED:
            self._collapse_timer.start()

    def on_pointer_entered(self) -> None:
        self._collapse_timer.stop()

    def on_window_deactivated(self) -> None:
        if self._mode is LayoutMode.FOCUS_EXPANDED:
            self.collapse()

    def on_window_resized(self) -> None:
        self._resize_mode = self._mode
        self._resize_debounce.stop()
        self._resize_debounce.start()

    def shutdown(self) -> None:
        self._resize_debounce.stop()
        self._collapse_timer.stop()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _on_resize_settled(self) -> None:
        mode = self._resize_mode
        self._resize_mode = None
        if mode is None or mode is not self._mode:
            return
        self._remember(mode)

    def _remember(self, mode: LayoutMode) -> None:
        size = self._window.size()
        self._geometry_store.set_persisted_geometry(mode.value, size.width(), size.height())
        log_debug("geometry remembered", mode=mode.value, width=size.width(), height=size.height())

    def _apply(self, size: tuple[int, int]) -> None:
        self._window.resize(size[0], size[1])

    def _set_mode(self, mode: LayoutMode) -> None:
        # Pending resize observations belong to the mode being left.
        self._resize_debounce.stop()
        self._resize_mode = None
        log_info("layout mode changed", previous=self._mode.value, mode=mode.value)
        self._mode = mode
        self.mode_changed.emit(mode)

    def _reset_active_to_pinned(self) -> None:
        session = self._store.active_session
        if session is None:
            return
        pinned = self._pinned_paths.get(session.id)
        if pinned and pinned != session.path and self._navigation is not None:
            self._navigation.navigate_to(pinned)

    def _reset_to_pinned(self, session_id: str) -> None:
        # Cards left drilled-down while another card was open reopen at their pin.
        session = self._store.get(session_id)
        pinned = self._pinned_paths.get(session_id)
        if session is not None and pinned and pinned != session.path:
            self._store.set_path(session_id, pinned)
