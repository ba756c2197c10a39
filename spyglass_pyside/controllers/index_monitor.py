"""Tracks the background index build: Idle -> Building -> Ready."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ..utils.index_service import IndexProgress, IndexService
from ..utils.telemetry import log_debug, log_error, log_info, log_warning

INDEX_POLL_INTERVAL_MS = 500


class IndexState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    READY = "ready"


class IndexLifecycleMonitor(QObject):
    """Loads or builds the global index and mirrors its progress.

    The poll timer runs only while the state is ``BUILDING``; completion is
    acted upon exactly once, after which the authoritative file count is
    fetched.
    """

    state_changed = Signal(object)  # IndexState
    progress_changed = Signal(object)  # IndexProgress
    file_count_changed = Signal(int)

    def __init__(
        self,
        service: IndexService,
        worker: Any,
        poll_interval_ms: int = INDEX_POLL_INTERVAL_MS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._service = service
        self._worker = worker
        self._state = IndexState.IDLE
        self._progress = IndexProgress()
        self._file_count = 0
        self._poll_in_flight = False
        self._loading = False

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(poll_interval_ms)
        self._poll_timer.timeout.connect(self._poll)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> IndexState:
        return self._state

    @property
    def progress(self) -> IndexProgress:
        return self._progress

    @property
    def file_count(self) -> int:
        return self._file_count

    @property
    def is_building(self) -> bool:
        return self._state is IndexState.BUILDING

    @property
    def is_ready(self) -> bool:
        return self._state is IndexState.READY

    def is_polling(self) -> bool:
        return self._poll_timer.isActive()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Use a persisted index if there is one, else build a fresh one."""
        if self._state is not IndexState.IDLE or self._loading:
            return
        self._loading = True
        self._worker.submit(
            self._service.load_persisted_index,
            on_finished=self._on_persisted_index_checked,
            on_error=self._on_persisted_index_failed,
        )

    def rebuild(self) -> bool:
        """User-triggered re-index; ignored while a build is running."""
        if self._state is IndexState.BUILDING or self._loading:
            return False
        self._begin_build()
        return True

    def shutdown(self) -> None:
        self._poll_timer.stop()

    # ------------------------------------------------------------------
    # Completions
    # ------------------------------------------------------------------

    def _on_persisted_index_checked(self, found: bool) -> None:
        self._loading = False
        if not found:
            log_info("no persisted index; starting build")
            self._begin_build()
            return
        self._worker.submit(
            self._service.get_indexed_file_count,
            on_finished=self._on_cached_count,
            on_error=self._on_count_failed,
        )

    def _on_persisted_index_failed(self, message: str) -> None:
        self._loading = False
        log_error("loading persisted index failed", error=message)

    def _on_cached_count(self, count: int) -> None:
        if self._state is IndexState.BUILDING:
            return
        self._set_progress(IndexProgress(total_files=count, is_complete=True))
        self._set_file_count(count)
        self._set_state(IndexState.READY)

    def _begin_build(self) -> None:
        previous = self._state
        self._set_state(IndexState.BUILDING)
        self._poll_in_flight = False
        self._worker.submit(
            self._service.start_index_build,
            on_error=lambda message: self._on_build_start_failed(previous, message),
        )
        self._poll_timer.start()

    def _on_build_start_failed(self, previous: IndexState, message: str) -> None:
        log_error("index build could not start", error=message)
        if self._state is IndexState.BUILDING:
            self._poll_timer.stop()
            self._set_state(previous)

    def _poll(self) -> None:
        if self._state is not IndexState.BUILDING:
            self._poll_timer.stop()
            return
        if self._poll_in_flight:
            return
        self._poll_in_flight = True
        self._worker.submit(
            self._service.get_index_progress,
            on_finished=self._on_progress,
            on_error=self._on_progress_failed,
        )

    def _on_progress(self, progress: IndexProgress) -> None:
        self._poll_in_flight = False
        if self._state is not IndexState.BUILDING:
            log_debug("late progress sample dropped")
            return
        self._set_progress(progress)
        if progress.is_complete:
            self._poll_timer.stop()
            self._set_state(IndexState.READY)
            self._worker.submit(
                self._service.get_indexed_file_count,
                on_finished=self._set_file_count,
                on_error=self._on_count_failed,
            )

    def _on_progress_failed(self, message: str) -> None:
        self._poll_in_flight = False
        log_warning("index progress poll failed", error=message)

    def _on_count_failed(self, message: str) -> None:
        log_warning("index file count unavailable", error=message)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _set_state(self, state: IndexState) -> None:
        if state is self._state:
            return
        log_info("index state changed", previous=self._state.value, state=state.value)
        self._state = state
        if state is not IndexState.BUILDING:
            self._poll_timer.stop()
        self.state_changed.emit(state)

    def _set_progress(self, progress: IndexProgress) -> None:
        self._progress = progress
        self.progress_changed.emit(progress)

    def _set_file_count(self, count: int) -> None:
        self._file_count = int(count)
        self.file_count_changed.emit(self._file_count)
