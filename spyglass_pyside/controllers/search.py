"""Query state, local fuzzy filtering and debounced global-index search."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence, Union

from PySide6.QtCore import QObject, QTimer, Signal

from ..utils.fuzzy import fuzzy_filter
from ..utils.index_service import FileEntry, IndexEntry, IndexService
from ..utils.telemetry import log_debug, log_error

if TYPE_CHECKING:
    from .index_monitor import IndexLifecycleMonitor
    from .navigation import DirectoryListing

SEARCH_DEBOUNCE_MS = 100
MIN_INDEXED_QUERY_LENGTH = 2

Entry = Union[FileEntry, IndexEntry]


class SearchMode(str, Enum):
    LOCAL = "local"
    INDEXED = "indexed"


@dataclass(frozen=True)
class IndexedGroups:
    """Indexed hits split into folders and files, service order kept."""
    folders: tuple[IndexEntry, ...] = ()
    files: tuple[IndexEntry, ...] = ()

    @property
    def ordered(self) -> tuple[IndexEntry, ...]:
        return self.folders + self.files

    @classmethod
    def from_results(cls, results: Sequence[IndexEntry]) -> IndexedGroups:
        return cls(
            folders=tuple(e for e in results if e.is_directory),
            files=tuple(e for e in results if not e.is_directory),
        )


class SearchCoordinator(QObject):
    """Owns query text and search mode.

    Indexed searches are trailing-edge debounced. Every dispatch and every
    reset bumps ``generation``; a response is applied only if its
    generation is still current when it arrives.
    """

    query_changed = Signal(str)
    mode_changed = Signal(object)  # SearchMode
    results_changed = Signal()

    def __init__(
        self,
        service: IndexService,
        worker: Any,
        listing_provider: Callable[[], DirectoryListing],
        index_monitor: Optional[IndexLifecycleMonitor] = None,
        mode: SearchMode = SearchMode.INDEXED,
        debounce_ms: int = SEARCH_DEBOUNCE_MS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._service = service
        self._worker = worker
        self._listing_provider = listing_provider
        self._index_monitor = index_monitor
        self._query = ""
        self._mode = mode
        self._generation = 0
        self._groups = IndexedGroups()

        self._debounce = QTimer(self)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(debounce_ms)
        self._debounce.timeout.connect(self._dispatch_indexed)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def query(self) -> str:
        return self._query

    @property
    def mode(self) -> SearchMode:
        return self._mode

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def results(self) -> tuple[IndexEntry, ...]:
        """Indexed results, folders first."""
        return self._groups.ordered

    @property
    def groups(self) -> IndexedGroups:
        return self._groups

    def is_dispatch_pending(self) -> bool:
        return self._debounce.isActive()

    def set_index_monitor(self, monitor: IndexLifecycleMonitor) -> None:
        self._index_monitor = monitor

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def set_query(self, text: str) -> None:
        if text == self._query:
            return
        self._query = text
        self.query_changed.emit(text)
        if not text:
            self._reset()
        elif self._mode is SearchMode.INDEXED:
            self._debounce.stop()
            self._debounce.start()
        else:
            self.results_changed.emit()

    def clear_query(self) -> None:
        if self._query:
            self._query = ""
            self.query_changed.emit("")
        self._reset()

    def set_mode(self, mode: SearchMode) -> None:
        if mode is self._mode:
            return
        self._mode = mode
        self.mode_changed.emit(mode)
        if mode is SearchMode.LOCAL:
            self._reset()
        elif self._query:
            self._debounce.stop()
            self._debounce.start()
        self.results_changed.emit()

    def toggle_mode(self) -> SearchMode:
        self.set_mode(SearchMode.LOCAL if self._mode is SearchMode.INDEXED else SearchMode.INDEXED)
        return self._mode

    def shutdown(self) -> None:
        self._debounce.stop()
        self._generation += 1

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def local_results(self) -> list[FileEntry]:
        entries = self._listing_provider().entries
        if not self._query:
            return list(entries)
        return fuzzy_filter(self._query, entries, key=lambda e: e.name)

    def visible_entries(self) -> list[Entry]:
        if not self._query:
            return list(self._listing_provider().entries)
        if self._mode is SearchMode.INDEXED:
            return list(self._groups.ordered)
        return list(self.local_results())

    def placeholder_text(self) -> str:
        if self._mode is SearchMode.LOCAL:
            return "Search folder..."
        monitor = self._index_monitor
        if monitor is not None and monitor.is_building:
            return "Indexing files..."
        count = monitor.file_count if monitor is not None else 0
        return f"Search {count:,} files..."

    def empty_text(self) -> str:
        if not self._query:
            return "Empty folder"
        if self._mode is SearchMode.INDEXED and len(self._query) < MIN_INDEXED_QUERY_LENGTH:
            return "Type at least 2 characters..."
        return "No matches"

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        """Invalidate in-flight requests and clear results synchronously."""
        self._debounce.stop()
        self._generation += 1
        self._set_groups(IndexedGroups())

    def _dispatch_indexed(self) -> None:
        query = self._query
        if self._mode is not SearchMode.INDEXED or not query:
            return
        self._generation += 1
        if len(query) < MIN_INDEXED_QUERY_LENGTH:
            self._set_groups(IndexedGroups())
            return
        generation = self._generation
        log_debug("index search dispatched", query=query, generation=generation)
        self._worker.submit(
            self._service.search_index,
            query,
            on_finished=partial(self._on_search_finished, generation),
            on_error=partial(self._on_search_failed, generation, query),
        )

    def _on_search_finished(self, generation: int, results: Sequence[IndexEntry]) -> None:
        if generation != self._generation:
            log_debug("stale search results dropped", generation=generation, current=self._generation)
            return
        self._set_groups(IndexedGroups.from_results(results))

    def _on_search_failed(self, generation: int, query: str, message: str) -> None:
        if generation != self._generation:
            return
        log_error("index search failed", query=query, error=message)

    def _set_groups(self, groups: IndexedGroups) -> None:
        self._groups = groups
        self.results_changed.emit()
