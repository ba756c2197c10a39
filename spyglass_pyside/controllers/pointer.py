"""Press / drag / click disambiguation for session cards."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DRAG_THRESHOLD_PX = 5


class PointerPhase(Enum):
    IDLE = "idle"
    PRESS_STARTED = "press_started"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class PointerGesture:
    """Outcome of a completed press: ``click`` or ``drop``.

    ``target_id`` is ``None`` for a drop on the open background area.
    """
    kind: str
    source_id: str
    target_id: Optional[str] = None


class CardPointerTracker:
    """Idle -> PressStarted -> (Dragging | Clicked), gated by distance.

    A press only becomes a drag once the pointer has travelled more than
    *threshold* pixels (Manhattan length), so the two outcomes can never
    both fire for one press.
    """

    def __init__(self, threshold: int = DRAG_THRESHOLD_PX) -> None:
        self._threshold = threshold
        self._phase = PointerPhase.IDLE
        self._source_id: Optional[str] = None
        self._origin = (0, 0)

    @property
    def phase(self) -> PointerPhase:
        return self._phase

    @property
    def source_id(self) -> Optional[str]:
        return self._source_id

    @property
    def is_dragging(self) -> bool:
        return self._phase is PointerPhase.DRAGGING

    def press(self, card_id: str, x: int, y: int) -> None:
        self._phase = PointerPhase.PRESS_STARTED
        self._source_id = card_id
        self._origin = (x, y)

    def move(self, x: int, y: int) -> bool:
        """Track movement; True on the move that starts a drag."""
        if self._phase is not PointerPhase.PRESS_STARTED:
            return False
        distance = abs(x - self._origin[0]) + abs(y - self._origin[1])
        if distance > self._threshold:
            self._phase = PointerPhase.DRAGGING
            return True
        return False

    def release(self, target_id: Optional[str] = None) -> Optional[PointerGesture]:
        phase, source = self._phase, self._source_id
        self.cancel()
        if source is None:
            return None
        if phase is PointerPhase.PRESS_STARTED:
            return PointerGesture(kind="click", source_id=source)
        if phase is PointerPhase.DRAGGING:
            if target_id == source:
                return None
            return PointerGesture(kind="drop", source_id=source, target_id=target_id)
        return None

    def cancel(self) -> None:
        self._phase = PointerPhase.IDLE
        self._source_id = None
        self._origin = (0, 0)
