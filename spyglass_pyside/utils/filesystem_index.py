"""Local Index Service: directory listings plus a flat, persisted file index."""

from __future__ import annotations

import json
import os
import threading
from dataclasses import replace
from pathlib import Path
from typing import Optional

from .index_service import FileEntry, IndexEntry, IndexProgress, IndexServiceError
from .telemetry import log_exception, log_info, log_warning

SKIPPED_FOLDERS = frozenset({
    "node_modules", "target", ".git", "dist", "build", ".next", "vendor",
    "__pycache__", ".venv", "venv", ".cargo", "Library", ".Trash", "Applications",
})

MAX_SEARCH_RESULTS = 100


def _score(entry: IndexEntry, name_lower: str, query: str) -> int:
    score = 0
    if name_lower == query:
        score += 1000
    elif name_lower.startswith(query):
        score += 500
    elif f"-{query}" in name_lower or f"_{query}" in name_lower:
        score += 300
    if entry.is_directory:
        score += 200
    score += 50 - min(len(entry.name), 50)
    if "/projects/" in entry.path:
        score += 100
    return score


class FilesystemIndexService:
    """Index Service backed by the local filesystem.

    The index is built by walking *index_root* on a background thread and
    is saved as JSON at *index_path* once complete.
    """

    def __init__(self, index_path: Path, index_root: Optional[Path] = None, skip_hidden: bool = True) -> None:
        self._index_path = index_path
        self._index_root = index_root or Path.home()
        self._skip_hidden = skip_hidden
        self._lock = threading.Lock()
        self._entries: list[IndexEntry] = []
        self._lower_names: list[str] = []
        self._progress = IndexProgress()
        self._build_thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Directory browsing
    # ------------------------------------------------------------------

    def list_directory(self, path: str) -> list[FileEntry]:
        target = Path(path)
        if not target.exists():
            raise IndexServiceError(f"Path does not exist: {target}")
        if not target.is_dir():
            raise IndexServiceError(f"Path is not a directory: {target}")
        entries: list[FileEntry] = []
        try:
            with os.scandir(target) as it:
                for item in it:
                    if item.name.startswith("."):
                        continue
                    entries.append(FileEntry(
                        name=item.name,
                        path=str(target / item.name),
                        is_directory=item.is_dir(),
                    ))
        except OSError as exc:
            raise IndexServiceError(f"Failed to read directory: {exc}") from exc
        entries.sort(key=lambda e: (not e.is_directory, e.name.lower()))
        return entries

    def parent_of(self, path: str) -> Optional[str]:
        current = Path(path)
        parent = current.parent
        if parent == current:
            return None
        return str(parent)

    @staticmethod
    def relative_path(full_path: str, base_path: str) -> str:
        try:
            return str(Path(full_path).relative_to(base_path))
        except ValueError:
            return full_path

    # ------------------------------------------------------------------
    # Index lifecycle
    # ------------------------------------------------------------------

    def is_building(self) -> bool:
        thread = self._build_thread
        return thread is not None and thread.is_alive()

    def start_index_build(self) -> None:
        with self._lock:
            if self.is_building():
                return
            self._progress = IndexProgress(total_folders=1)
            self._build_thread = threading.Thread(
                target=self._build, name="spyglass-index", daemon=True,
            )
            self._build_thread.start()
        log_info("index build started", root=str(self._index_root))

    def wait_for_build(self, timeout: Optional[float] = None) -> bool:
        thread = self._build_thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def get_index_progress(self) -> IndexProgress:
        with self._lock:
            return replace(self._progress)

    def get_indexed_file_count(self) -> int:
        with self._lock:
            return len(self._entries)

    def load_persisted_index(self) -> bool:
        if not self._index_path.exists():
            return False
        try:
            raw = json.loads(self._index_path.read_text())
            entries = [IndexEntry.from_dict(item) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            log_warning("persisted index unreadable", path=str(self._index_path), error=str(exc))
            return False
        with self._lock:
            self._entries = entries
            self._lower_names = [e.name.lower() for e in entries]
            self._progress = IndexProgress(total_files=len(entries), is_complete=True)
        log_info("persisted index loaded", entries=len(entries))
        return True

    def search_index(self, query: str) -> list[IndexEntry]:
        if not query:
            return []
        query = query.lower()
        with self._lock:
            pairs = list(zip(self._entries, self._lower_names))
        scored = [
            (_score(entry, name_lower, query), entry)
            for entry, name_lower in pairs
            if query in name_lower
        ]
        scored.sort(key=lambda item: item[0], reverse=True)
        return [entry for _, entry in scored[:MAX_SEARCH_RESULTS]]

    # ------------------------------------------------------------------
    # Build thread
    # ------------------------------------------------------------------

    def _build(self) -> None:
        entries: list[IndexEntry] = []
        try:
            self._index_folder(self._index_root, entries)
        except Exception:
            log_exception("index build aborted", root=str(self._index_root))
        with self._lock:
            self._entries = entries
            self._lower_names = [e.name.lower() for e in entries]
            self._progress = replace(self._progress, total_files=len(entries), is_complete=True)
        log_info("index build complete", entries=len(entries))
        self._save(entries)

    def _index_folder(self, root: Path, entries: list[IndexEntry]) -> None:
        pending = [root]
        while pending:
            folder = pending.pop()
            with self._lock:
                self._progress = replace(self._progress, current_folder=str(folder))
            try:
                with os.scandir(folder) as it:
                    items = list(it)
            except OSError:
                items = []
            parent_folder = folder.name or "~"
            subfolders: list[Path] = []
            for item in items:
                if self._skip_hidden and item.name.startswith("."):
                    continue
                try:
                    is_dir = item.is_dir()
                except OSError:
                    is_dir = False
                entries.append(IndexEntry(
                    name=item.name,
                    path=str(folder / item.name),
                    is_directory=is_dir,
                    parent_folder=parent_folder,
                ))
                if is_dir and item.name not in SKIPPED_FOLDERS:
                    subfolders.append(folder / item.name)
            with self._lock:
                self._progress = replace(
                    self._progress,
                    total_folders=self._progress.total_folders + len(subfolders),
                    indexed_folders=self._progress.indexed_folders + 1,
                    total_files=len(entries),
                )
            # Depth-first in listing order.
            pending.extend(reversed(subfolders))

    def _save(self, entries: list[IndexEntry]) -> None:
        try:
            self._index_path.parent.mkdir(parents=True, exist_ok=True)
            self._index_path.write_text(json.dumps([e.to_dict() for e in entries]))
        except OSError as exc:
            log_warning("index save failed", path=str(self._index_path), error=str(exc))
