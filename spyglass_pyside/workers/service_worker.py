"""Background worker for running Index Service calls off the GUI thread."""

from __future__ import annotations

from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot

from ..utils.telemetry import log_debug, log_warning

FinishedCallback = Callable[[Any], None]
ErrorCallback = Callable[[str], None]


class _CallSignals(QObject):
    """Lives on the GUI thread so emissions from the pool arrive queued."""

    finished = Signal(int, object)
    error = Signal(int, str)


class _ServiceCall(QRunnable):
    def __init__(self, call_id: int, fn: Callable[..., Any], args: tuple, signals: _CallSignals) -> None:
        super().__init__()
        self._call_id = call_id
        self._fn = fn
        self._args = args
        self._signals = signals

    def run(self) -> None:
        try:
            result = self._fn(*self._args)
        except Exception as e:
            self._signals.error.emit(self._call_id, str(e) or type(e).__name__)
            return
        self._signals.finished.emit(self._call_id, result)


class ServiceWorker(QObject):
    """Uses a QThreadPool for non-blocking service invocation.

    Callbacks always run on the thread that owns the worker. There is no
    cancellation of a running call; callers drop stale results themselves.
    """

    def __init__(self, pool: Optional[QThreadPool] = None, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._pool = pool or QThreadPool.globalInstance()
        self._signals = _CallSignals(self)
        self._signals.finished.connect(self._on_finished)
        self._signals.error.connect(self._on_error)
        self._pending: dict[int, tuple[Optional[FinishedCallback], Optional[ErrorCallback], str]] = {}
        self._next_id = 0
        self._closed = False

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        on_finished: Optional[FinishedCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """Run ``fn(*args)`` on the pool and report back through the callbacks."""
        if self._closed:
            log_debug("submit ignored after shutdown", call=_call_name(fn))
            return
        self._next_id += 1
        call_id = self._next_id
        self._pending[call_id] = (on_finished, on_error, _call_name(fn))
        self._pool.start(_ServiceCall(call_id, fn, args, self._signals))

    def pending_count(self) -> int:
        return len(self._pending)

    def shutdown(self) -> None:
        """Drop all callbacks; calls still running finish into the void."""
        self._closed = True
        self._pending.clear()

    @Slot(int, object)
    def _on_finished(self, call_id: int, result: object) -> None:
        entry = self._pending.pop(call_id, None)
        if entry is None:
            return
        on_finished, _, _ = entry
        if on_finished is not None:
            on_finished(result)

    @Slot(int, str)
    def _on_error(self, call_id: int, message: str) -> None:
        entry = self._pending.pop(call_id, None)
        if entry is None:
            return
        _, on_error, name = entry
        if on_error is not None:
            on_error(message)
        else:
            log_warning("service call failed", call=name, error=message)


def _call_name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__name__", repr(fn))
