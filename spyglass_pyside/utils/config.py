"""Application configuration management."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from ..models.sessions import Session
from .telemetry import log_debug, log_warning


def config_dir() -> Path:
    """Return the directory holding config, index and logs."""
    override = os.environ.get("SPYGLASS_CONFIG_DIR")
    if override:
        return Path(override)
    return Path.home() / ".config" / "spyglass"


def _default_config_path() -> Path:
    """Return the default config file path."""
    return config_dir() / "pyside.json"


@dataclass
class AppConfig:
    """Application configuration."""

    theme: str = "system"
    show_paths: bool = False
    projects_root: Optional[str] = None
    reset_to_pinned_on_collapse: bool = True
    search_mode: str = "indexed"
    sessions: list[dict] = field(default_factory=list)
    active_session_id: Optional[str] = None
    window_geometry: dict = field(default_factory=dict)
    _config_file: Optional[str] = field(default=None, repr=False)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> AppConfig:
        """Load config from disk, or create default."""
        path = path or _default_config_path()
        if path.exists():
            try:
                data = json.loads(path.read_text())
                config = cls(
                    theme=data.get("theme", "system"),
                    show_paths=bool(data.get("show_paths", False)),
                    projects_root=data.get("projects_root"),
                    reset_to_pinned_on_collapse=bool(
                        data.get("reset_to_pinned_on_collapse", True)
                    ),
                    search_mode=data.get("search_mode", "indexed"),
                    sessions=data.get("sessions") or [],
                    active_session_id=data.get("active_session_id"),
                    window_geometry=data.get("window_geometry") or {},
                )
                config._config_file = str(path)
                return config
            except (OSError, json.JSONDecodeError, AttributeError) as exc:
                log_warning("config unreadable, using defaults", path=str(path), error=str(exc))
        config = cls()
        config._config_file = str(path)
        return config

    @property
    def config_file(self) -> Path:
        return Path(self._config_file or str(_default_config_path()))

    def save(self) -> None:
        """Persist config to disk."""
        path = self.config_file
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "theme": self.theme,
            "show_paths": self.show_paths,
            "projects_root": self.projects_root,
            "reset_to_pinned_on_collapse": self.reset_to_pinned_on_collapse,
            "search_mode": self.search_mode,
            "sessions": self.sessions,
            "active_session_id": self.active_session_id,
            "window_geometry": self.window_geometry,
        }
        path.write_text(json.dumps(data, indent=2))


class ConfigSync:
    """Best-effort persistence of sessions and window geometry.

    Write failures are logged and never propagate to the caller.
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config

    @property
    def config(self) -> AppConfig:
        return self._config

    def save(self) -> bool:
        try:
            self._config.save()
        except (OSError, TypeError, ValueError) as exc:
            log_warning("config save failed", path=str(self._config.config_file), error=str(exc))
            return False
        return True

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def load_persisted_sessions(self) -> Optional[tuple[list[Session], str]]:
        sessions: list[Session] = []
        for raw in self._config.sessions:
            try:
                sessions.append(Session.from_dict(raw))
            except (KeyError, TypeError, AttributeError):
                log_warning("dropping malformed persisted session", raw=repr(raw))
        if not sessions:
            return None
        return sessions, self._config.active_session_id or sessions[0].id

    def persist_sessions(self, sessions: Sequence[Session], active_id: str) -> None:
        self._config.sessions = [s.to_dict() for s in sessions]
        self._config.active_session_id = active_id or None
        if self.save():
            log_debug("sessions persisted", count=len(sessions), active_id=active_id)

    # ------------------------------------------------------------------
    # Window geometry
    # ------------------------------------------------------------------

    def get_persisted_geometry(self, mode_key: str, default: tuple[int, int]) -> tuple[int, int]:
        entry = self._config.window_geometry.get(mode_key)
        if isinstance(entry, dict):
            width, height = entry.get("width"), entry.get("height")
            if isinstance(width, int) and isinstance(height, int) and width > 0 and height > 0:
                return width, height
        return default

    def set_persisted_geometry(self, mode_key: str, width: int, height: int) -> None:
        self._config.window_geometry[mode_key] = {"width": int(width), "height": int(height)}
        if self.save():
            log_debug("geometry persisted", mode=mode_key, width=width, height=height)
