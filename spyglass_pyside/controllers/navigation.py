"""Directory loading, breadcrumbs and back navigation for the active session."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any, Optional

from PySide6.QtCore import QObject, Signal

from ..models.sessions import TabSessionStore
from ..utils.index_service import FileEntry, IndexService
from ..utils.telemetry import log_debug, log_info, log_warning

if TYPE_CHECKING:
    from .search import SearchCoordinator

BREADCRUMB_WINDOW = 4


@dataclass(frozen=True)
class DirectoryListing:
    """Immutable snapshot of what is displayed for the active session."""
    path: str = ""
    entries: tuple[FileEntry, ...] = ()
    is_loading: bool = False
    error_message: Optional[str] = None


@dataclass(frozen=True)
class BreadcrumbSegment:
    name: str
    path: str


def breadcrumb_segments(path: str) -> list[BreadcrumbSegment]:
    """Cumulative prefixes of *path*, keeping only the last four.

    Backslash paths keep their own separator in the segment paths.
    """
    sep = "\\" if "\\" in path else "/"
    prefix = sep if path.startswith(("/", "\\")) else ""
    segments: list[BreadcrumbSegment] = []
    for part in path.replace("\\", "/").split("/"):
        if not part:
            continue
        prefix = f"{prefix}{sep}{part}" if segments else f"{prefix}{part}"
        segments.append(BreadcrumbSegment(name=part, path=prefix))
    return segments[-BREADCRUMB_WINDOW:]


class NavigationController(QObject):
    """Drives directory loads and owns the single materialized listing.

    The listing is replaced wholesale on every change, never mutated.
    """

    listing_changed = Signal(object)  # DirectoryListing

    def __init__(
        self,
        store: TabSessionStore,
        service: IndexService,
        worker: Any,
        search: Optional[SearchCoordinator] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._service = service
        self._worker = worker
        self._search = search
        self._listing = DirectoryListing()
        # Guards against an older listing landing after a newer request.
        self._load_epoch = 0

        self._store.session_activated.connect(self._on_session_activated)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def listing(self) -> DirectoryListing:
        return self._listing

    @property
    def current_path(self) -> str:
        session = self._store.active_session
        return session.path if session is not None else ""

    def breadcrumbs(self) -> list[BreadcrumbSegment]:
        return breadcrumb_segments(self.current_path)

    def load_directory(self, path: str) -> None:
        self._load_epoch += 1
        epoch = self._load_epoch
        if self._search is not None:
            self._search.clear_query()
        self._set_listing(DirectoryListing(
            path=path, entries=self._listing.entries, is_loading=True,
        ))
        log_debug("loading directory", path=path)
        self._worker.submit(
            self._service.list_directory,
            path,
            on_finished=partial(self._on_listing_loaded, epoch, path),
            on_error=partial(self._on_listing_failed, epoch, path),
        )

    def navigate_to(self, path: str) -> None:
        session = self._store.active_session
        if session is None:
            return
        self._store.set_path(session.id, path)
        self.load_directory(path)

    def navigate_back(self) -> None:
        session = self._store.active_session
        if session is None or not session.path:
            return
        self._worker.submit(
            self._service.parent_of,
            session.path,
            on_finished=partial(self._on_parent_resolved, session.id),
            on_error=partial(self._on_parent_failed, session.path),
        )

    # ------------------------------------------------------------------
    # Completions
    # ------------------------------------------------------------------

    def _on_session_activated(self, session_id: str) -> None:
        session = self._store.get(session_id)
        if session is not None:
            self.load_directory(session.path)

    def _on_listing_loaded(self, epoch: int, path: str, entries: list[FileEntry]) -> None:
        self._finish_load(epoch, path, tuple(entries), None)

    def _on_listing_failed(self, epoch: int, path: str, message: str) -> None:
        log_warning("directory listing failed", path=path, error=message)
        self._finish_load(epoch, path, (), message)

    def _finish_load(
        self, epoch: int, path: str, entries: tuple[FileEntry, ...], error: Optional[str]
    ) -> None:
        if epoch != self._load_epoch:
            log_debug("stale listing dropped", path=path)
            return
        self._set_listing(DirectoryListing(
            path=path, entries=entries, is_loading=False, error_message=error,
        ))

    def _on_parent_resolved(self, session_id: str, parent: Optional[str]) -> None:
        if not parent:
            return
        if self._store.active_id != session_id:
            log_debug("back navigation dropped: session switched", session_id=session_id)
            return
        log_info("navigating back", path=parent)
        self.navigate_to(parent)

    def _on_parent_failed(self, path: str, message: str) -> None:
        log_warning("navigate back failed", path=path, error=message)

    def _set_listing(self, listing: DirectoryListing) -> None:
        self._listing = listing
        self.listing_changed.emit(listing)
