"""Wires the coordination components together behind one user-facing surface."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional, Union

from PySide6.QtCore import QObject

from ..models.sessions import TAB_COLORS, Session, TabSessionStore
from ..utils.config import ConfigSync
from ..utils.index_service import FileEntry, IndexEntry, IndexService
from ..utils.telemetry import log_info, log_warning
from .clipboard import CopyPathAction
from .index_monitor import IndexLifecycleMonitor
from .navigation import NavigationController
from .pointer import PointerGesture
from .search import SearchCoordinator, SearchMode
from .window_geometry import HostWindow, LayoutMode, WindowGeometryStateMachine


class SpyglassCore(QObject):
    """Owns one instance of every coordination component.

    The desktop shell talks to this object only; each method maps to one
    action of the user surface.
    """

    def __init__(
        self,
        config_sync: ConfigSync,
        service: IndexService,
        worker: Any,
        window: HostWindow,
        write_text: Callable[[str], None],
        home_dir: Optional[str] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._config_sync = config_sync
        self._service = service
        self._worker = worker
        self._home_dir = home_dir or str(Path.home())
        config = config_sync.config

        try:
            initial_mode = SearchMode(config.search_mode)
        except ValueError:
            initial_mode = SearchMode.INDEXED

        self.store = TabSessionStore(persist=config_sync.persist_sessions, parent=self)
        self.index_monitor = IndexLifecycleMonitor(service, worker, parent=self)
        self.search = SearchCoordinator(
            service,
            worker,
            listing_provider=lambda: self.navigation.listing,
            index_monitor=self.index_monitor,
            mode=initial_mode,
            parent=self,
        )
        self.navigation = NavigationController(self.store, service, worker, search=self.search, parent=self)
        self.geometry = WindowGeometryStateMachine(
            window,
            config_sync,
            self.store,
            navigation=self.navigation,
            reset_to_pinned_on_collapse=config.reset_to_pinned_on_collapse,
            parent=self,
        )
        self.clipboard = CopyPathAction(write_text, parent=self)

        self.search.mode_changed.connect(self._on_search_mode_changed)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        restored = self._config_sync.load_persisted_sessions()
        if restored is not None:
            sessions, active_id = restored
            self.store.restore(sessions, active_id)
        else:
            self._seed_sessions()
        self.geometry.restore()
        self.index_monitor.start()

    def shutdown(self) -> None:
        self.search.shutdown()
        self.index_monitor.shutdown()
        self.geometry.shutdown()
        self.clipboard.shutdown()
        shutdown = getattr(self._worker, "shutdown", None)
        if shutdown is not None:
            shutdown()
        log_info("core shut down")

    def _seed_sessions(self) -> None:
        root = self._config_sync.config.projects_root
        if not root:
            self._open_home()
            return
        self._worker.submit(
            self._service.list_directory,
            root,
            on_finished=self._on_projects_listed,
            on_error=self._on_projects_failed,
        )

    def _on_projects_listed(self, entries: list[FileEntry]) -> None:
        if len(self.store):
            return
        folders = [e for e in entries if e.is_directory]
        if not folders:
            self._open_home()
            return
        sessions = [
            Session(path=f.path, name=f.name, color=TAB_COLORS[i % len(TAB_COLORS)])
            for i, f in enumerate(folders)
        ]
        log_info("sessions seeded from projects root", count=len(sessions))
        self.store.restore(sessions, sessions[0].id)
        self._config_sync.persist_sessions(self.store.sessions, self.store.active_id)

    def _on_projects_failed(self, message: str) -> None:
        log_warning("projects root unavailable", error=message)
        if not len(self.store):
            self._open_home()

    def _open_home(self) -> None:
        self.store.open(self._home_dir, TAB_COLORS[0])

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def open_in_new_tab(self, path: Optional[str] = None, color: Optional[str] = None) -> Optional[Session]:
        path = path or self.navigation.current_path
        if not path:
            return None
        return self.store.open(path, color)

    def close_tab(self, session_id: Optional[str] = None) -> bool:
        return self.store.close(session_id or self.store.active_id)

    def switch_tab(self, session_id: str) -> bool:
        return self.store.switch_to(session_id)

    def select_card(self, session_id: str) -> bool:
        if self.geometry.in_focus_mode:
            return self.geometry.expand(session_id)
        return self.store.switch_to(session_id)

    def reorder_tab(self, from_id: str, to_id: str) -> bool:
        return self.store.reorder(from_id, to_id)

    def move_tab_to_end(self, session_id: str) -> bool:
        return self.store.move_to_end(session_id)

    def recolor_tab(self, session_id: str, color: str) -> bool:
        return self.store.recolor(session_id, color)

    def apply_gesture(self, gesture: Optional[PointerGesture]) -> None:
        if gesture is None:
            return
        if gesture.kind == "click":
            self.select_card(gesture.source_id)
        elif gesture.target_id is None:
            self.move_tab_to_end(gesture.source_id)
        else:
            self.reorder_tab(gesture.source_id, gesture.target_id)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def navigate_into(self, path: str) -> None:
        self.navigation.navigate_to(path)

    def navigate_back(self) -> None:
        self.navigation.navigate_back()

    def open_breadcrumb(self, path: str) -> bool:
        if path == self.navigation.current_path:
            return False
        self.navigation.navigate_to(path)
        return True

    def activate_entry(self, entry: Union[FileEntry, IndexEntry]) -> None:
        if entry.is_directory:
            self.navigation.navigate_to(entry.path)
        else:
            self.clipboard.copy(entry.path)

    def copy_path(self, path: str) -> bool:
        return self.clipboard.copy(path)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def set_query(self, text: str) -> None:
        self.search.set_query(text)

    def clear_search(self) -> None:
        self.search.clear_query()

    def toggle_search_mode(self) -> SearchMode:
        return self.search.toggle_mode()

    def _on_search_mode_changed(self, mode: SearchMode) -> None:
        self._config_sync.config.search_mode = mode.value
        self._config_sync.save()

    # ------------------------------------------------------------------
    # Focus mode
    # ------------------------------------------------------------------

    def toggle_focus_mode(self) -> LayoutMode:
        return self.geometry.toggle_focus_mode()

    def collapse_focus_card(self) -> bool:
        return self.geometry.collapse()

    def set_reset_to_pinned_on_collapse(self, enabled: bool) -> None:
        self.geometry.reset_to_pinned_on_collapse = enabled
        self._config_sync.config.reset_to_pinned_on_collapse = enabled
        self._config_sync.save()

    # ------------------------------------------------------------------
    # Index
    # ------------------------------------------------------------------

    def reindex(self) -> bool:
        return self.index_monitor.rebuild()
