"""Index Service contract: the remote calls the coordination core consumes."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional, Protocol


class IndexServiceError(RuntimeError):
    """A service call failed; the message is suitable for display."""


@dataclass(frozen=True)
class FileEntry:
    """One row of a directory listing."""
    name: str
    path: str
    is_directory: bool


@dataclass(frozen=True)
class IndexEntry:
    """A search hit from the global index; may live outside any session."""
    name: str
    path: str
    is_directory: bool
    parent_folder: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> IndexEntry:
        return cls(
            name=data["name"],
            path=data["path"],
            is_directory=bool(data["is_directory"]),
            parent_folder=data.get("parent_folder", ""),
        )


@dataclass(frozen=True)
class IndexProgress:
    """Snapshot of a background build, mirrored locally by polling."""
    total_folders: int = 0
    indexed_folders: int = 0
    total_files: int = 0
    current_folder: str = ""
    is_complete: bool = False

    @property
    def fraction(self) -> float:
        if self.is_complete:
            return 1.0
        if self.total_folders <= 0:
            return 0.0
        return min(self.indexed_folders / self.total_folders, 1.0)


class IndexService(Protocol):
    """Blocking calls; the core only ever runs them through a worker."""

    def list_directory(self, path: str) -> list[FileEntry]: ...

    def parent_of(self, path: str) -> Optional[str]: ...

    def search_index(self, query: str) -> list[IndexEntry]: ...

    def start_index_build(self) -> None: ...

    def get_index_progress(self) -> IndexProgress: ...

    def get_indexed_file_count(self) -> int: ...

    def load_persisted_index(self) -> bool: ...
