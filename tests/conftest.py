"""Shared fixtures and test doubles."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import pytest
from PySide6.QtCore import QCoreApplication, QSize
from PySide6.QtTest import QTest

from spyglass_pyside.utils.index_service import (
    FileEntry,
    IndexEntry,
    IndexProgress,
    IndexServiceError,
)


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Spin the Qt event loop until *predicate* holds or *timeout* elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        QTest.qWait(5)
    return predicate()


# ---------------------------------------------------------------------------
# Worker double
# ---------------------------------------------------------------------------


@dataclass
class PendingCall:
    fn: Callable[..., Any]
    args: tuple
    on_finished: Optional[Callable[[Any], None]]
    on_error: Optional[Callable[[str], None]]

    @property
    def name(self) -> str:
        return getattr(self.fn, "__name__", repr(self.fn))


class DeferredWorker:
    """Holds submitted calls so tests decide when, and in which order, they finish."""

    def __init__(self) -> None:
        self.calls: list[PendingCall] = []
        self.closed = False

    def submit(self, fn, *args, on_finished=None, on_error=None) -> None:
        if self.closed:
            return
        self.calls.append(PendingCall(fn, args, on_finished, on_error))

    def shutdown(self) -> None:
        self.closed = True
        self.calls.clear()

    def names(self) -> list[str]:
        return [c.name for c in self.calls]

    def find(self, name: str) -> list[PendingCall]:
        return [c for c in self.calls if c.name == name]

    def take(self, name: str) -> PendingCall:
        for call in self.calls:
            if call.name == name:
                self.calls.remove(call)
                return call
        raise AssertionError(f"no pending call named {name!r}; pending: {self.names()}")

    def complete(self, call: PendingCall, result: Any = None) -> None:
        if call in self.calls:
            self.calls.remove(call)
        if call.on_finished is not None:
            call.on_finished(result)

    def fail(self, call: PendingCall, message: str) -> None:
        if call in self.calls:
            self.calls.remove(call)
        if call.on_error is not None:
            call.on_error(message)

    def run(self, call: PendingCall) -> None:
        try:
            result = call.fn(*call.args)
        except Exception as exc:
            self.fail(call, str(exc))
            return
        self.complete(call, result)

    def run_all(self) -> None:
        while self.calls:
            self.run(self.calls[0])


@pytest.fixture
def worker() -> DeferredWorker:
    return DeferredWorker()


# ---------------------------------------------------------------------------
# Index Service double
# ---------------------------------------------------------------------------


class FakeIndexService:
    """In-memory Index Service; records every call it receives."""

    def __init__(self) -> None:
        self.listings: dict[str, list[FileEntry]] = {}
        self.search_results: dict[str, list[IndexEntry]] = {}
        self.progress = IndexProgress()
        self.file_count = 0
        self.has_persisted_index = False
        self.received: list[tuple] = []

    def list_directory(self, path: str) -> list[FileEntry]:
        self.received.append(("list_directory", path))
        if path not in self.listings:
            raise IndexServiceError(f"Path does not exist: {path}")
        return list(self.listings[path])

    def parent_of(self, path: str) -> Optional[str]:
        self.received.append(("parent_of", path))
        parent = path.rstrip("/").rsplit("/", 1)[0]
        return parent or None

    def search_index(self, query: str) -> list[IndexEntry]:
        self.received.append(("search_index", query))
        return list(self.search_results.get(query, []))

    def start_index_build(self) -> None:
        self.received.append(("start_index_build",))

    def get_index_progress(self) -> IndexProgress:
        self.received.append(("get_index_progress",))
        return self.progress

    def get_indexed_file_count(self) -> int:
        self.received.append(("get_indexed_file_count",))
        return self.file_count

    def load_persisted_index(self) -> bool:
        self.received.append(("load_persisted_index",))
        return self.has_persisted_index


@pytest.fixture
def service() -> FakeIndexService:
    return FakeIndexService()


# ---------------------------------------------------------------------------
# Window and geometry doubles
# ---------------------------------------------------------------------------


class FakeWindow:
    def __init__(self, width: int = 800, height: int = 600) -> None:
        self._size = QSize(width, height)
        self.resizes: list[tuple[int, int]] = []

    def size(self) -> QSize:
        return QSize(self._size)

    def resize(self, width: int, height: int) -> None:
        self._size = QSize(width, height)
        self.resizes.append((width, height))


@dataclass
class MemoryGeometryStore:
    saved: dict[str, tuple[int, int]] = field(default_factory=dict)

    def get_persisted_geometry(self, mode_key: str, default: tuple[int, int]) -> tuple[int, int]:
        return self.saved.get(mode_key, default)

    def set_persisted_geometry(self, mode_key: str, width: int, height: int) -> None:
        self.saved[mode_key] = (width, height)


@pytest.fixture
def window() -> FakeWindow:
    return FakeWindow()


@pytest.fixture
def geometry_store() -> MemoryGeometryStore:
    return MemoryGeometryStore()


# ---------------------------------------------------------------------------
# Entry helpers
# ---------------------------------------------------------------------------


def file_entry(name: str, folder: str = "/home/me", is_directory: bool = False) -> FileEntry:
    return FileEntry(name=name, path=f"{folder}/{name}", is_directory=is_directory)


def index_entry(name: str, folder: str = "/home/me", is_directory: bool = False) -> IndexEntry:
    return IndexEntry(
        name=name,
        path=f"{folder}/{name}",
        is_directory=is_directory,
        parent_folder=folder.rsplit("/", 1)[-1] or "~",
    )
