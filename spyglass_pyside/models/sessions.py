"""Session (tab) model and the ordered session store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from ..utils.telemetry import log_debug, log_info

TAB_COLORS = [
    "#4ade80",
    "#60a5fa",
    "#f472b6",
    "#fbbf24",
    "#a78bfa",
    "#f87171",
    "#2dd4bf",
    "#fb923c",
    "#a3e635",
    "#22d3ee",
]

ROOT_MARKER = "~"


def display_name_for(path: str) -> str:
    """Return the last path segment, or the root marker when there is none."""
    segments = [part for part in path.replace("\\", "/").split("/") if part]
    return segments[-1] if segments else ROOT_MARKER


def _new_session_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Session:
    """A pinned folder plus the current browsing location inside it.

    ``name`` is derived from the path the session was opened on and is
    not recomputed when ``path`` changes.
    """

    path: str
    name: str
    color: str = TAB_COLORS[0]
    id: str = field(default_factory=_new_session_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "path": self.path, "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict) -> Session:
        path = str(data["path"])
        return cls(
            id=str(data.get("id") or _new_session_id()),
            path=path,
            name=str(data.get("name") or display_name_for(path)),
            color=str(data.get("color") or TAB_COLORS[0]),
        )


PersistCallback = Callable[[list[Session], str], None]


class TabSessionStore(QObject):
    """Ordered sessions plus the active pointer.

    Every mutation persists through *persist*. Operations naming an
    unknown id are silent no-ops so late drag or click events can never
    raise.
    """

    sessions_changed = Signal()
    # Emitted whenever a session becomes (or is re-selected as) active and
    # its directory should be loaded.
    session_activated = Signal(str)

    def __init__(self, persist: Optional[PersistCallback] = None, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._persist_cb = persist
        self._sessions: list[Session] = []
        self._active_id: str = ""

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def sessions(self) -> list[Session]:
        return [replace(s) for s in self._sessions]

    @property
    def active_id(self) -> str:
        return self._active_id

    @property
    def active_session(self) -> Optional[Session]:
        return self.get(self._active_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> Optional[Session]:
        for s in self._sessions:
            if s.id == session_id:
                return replace(s)
        return None

    def index_of(self, session_id: str) -> int:
        for i, s in enumerate(self._sessions):
            if s.id == session_id:
                return i
        return -1

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def restore(self, sessions: list[Session], active_id: str = "") -> None:
        """Replace the whole collection, e.g. from persisted config."""
        if not sessions:
            return
        self._sessions = [replace(s) for s in sessions]
        if self.index_of(active_id) == -1:
            active_id = self._sessions[0].id
        self._active_id = active_id
        log_info("sessions restored", count=len(self._sessions), active_id=active_id)
        self.sessions_changed.emit()
        self.session_activated.emit(self._active_id)

    def open(self, path: str, color: Optional[str] = None) -> Session:
        session = Session(
            path=path,
            name=display_name_for(path),
            color=color or TAB_COLORS[len(self._sessions) % len(TAB_COLORS)],
        )
        self._sessions.append(session)
        self._active_id = session.id
        log_info("session opened", session_id=session.id, path=path)
        self._persist()
        self.sessions_changed.emit()
        self.session_activated.emit(session.id)
        return replace(session)

    def close(self, session_id: str) -> bool:
        """Close *session_id*. The last remaining session is never closed."""
        idx = self.index_of(session_id)
        if idx == -1 or len(self._sessions) <= 1:
            return False
        del self._sessions[idx]
        was_active = session_id == self._active_id
        if was_active:
            # The neighbour sliding into the closed slot, else the new tail.
            self._active_id = self._sessions[min(idx, len(self._sessions) - 1)].id
        log_info("session closed", session_id=session_id, active_id=self._active_id)
        self._persist()
        self.sessions_changed.emit()
        if was_active:
            self.session_activated.emit(self._active_id)
        return True

    def switch_to(self, session_id: str) -> bool:
        if self.index_of(session_id) == -1:
            log_debug("switch ignored: unknown session", session_id=session_id)
            return False
        self._active_id = session_id
        self._persist()
        self.sessions_changed.emit()
        self.session_activated.emit(session_id)
        return True

    def recolor(self, session_id: str, color: str) -> bool:
        idx = self.index_of(session_id)
        if idx == -1:
            return False
        self._sessions[idx].color = color
        self._persist()
        self.sessions_changed.emit()
        return True

    def set_path(self, session_id: str, path: str) -> bool:
        """Move a session's current location; its name stays pinned."""
        idx = self.index_of(session_id)
        if idx == -1:
            return False
        self._sessions[idx].path = path
        self._persist()
        self.sessions_changed.emit()
        return True

    def reorder(self, from_id: str, to_id: str) -> bool:
        """Move *from_id* into the slot *to_id* occupies before the move.

        Moving forward lands the session just after *to_id*, moving
        backward just before it, so ``reorder(a, b)`` followed by
        ``reorder(b, a)`` restores adjacent pairs.
        """
        from_idx = self.index_of(from_id)
        to_idx = self.index_of(to_id)
        if from_idx == -1 or to_idx == -1 or from_idx == to_idx:
            return False
        moved = self._sessions.pop(from_idx)
        self._sessions.insert(to_idx, moved)
        self._persist()
        self.sessions_changed.emit()
        return True

    def move_to_end(self, from_id: str) -> bool:
        idx = self.index_of(from_id)
        if idx == -1 or idx == len(self._sessions) - 1:
            return False
        self._sessions.append(self._sessions.pop(idx))
        self._persist()
        self.sessions_changed.emit()
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _persist(self) -> None:
        if self._persist_cb is not None:
            self._persist_cb(self.sessions, self._active_id)
