"""Per-tick input snapshot built from an edge-detected event queue.

Front ends push button transitions as they arrive; once per tick the queue
is drained into a :class:`TickInput` carrying "pressed this tick" and
"released this tick" flags plus the current pointer hit.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

import numpy as np

from .geometry import vec3


class InputEvent(Enum):
    APPLY_DOWN = "apply_down"
    APPLY_UP = "apply_up"
    CANCEL = "cancel"
    FIXED_PREVIEW_DOWN = "fixed_preview_down"   # modifier + primary
    FIXED_PREVIEW_UP = "fixed_preview_up"
    CONTINUE_DOWN = "continue_down"             # continuation modifier + primary


@dataclass
class TickInput:
    """Input seen during one update tick."""
    hit_position: Optional[np.ndarray] = None   # None: pointer is off the terrain
    apply_pressed: bool = False
    apply_released: bool = False
    cancel_pressed: bool = False
    fixed_preview_pressed: bool = False
    fixed_preview_released: bool = False
    continue_pressed: bool = False

    @classmethod
    def from_events(
        cls,
        events: Iterable[InputEvent],
        hit_position: Optional[Iterable[float]] = None,
    ) -> TickInput:
        seen = set(events)
        return cls(
            hit_position=None if hit_position is None else vec3(hit_position),
            apply_pressed=InputEvent.APPLY_DOWN in seen,
            apply_released=InputEvent.APPLY_UP in seen,
            cancel_pressed=InputEvent.CANCEL in seen,
            fixed_preview_pressed=InputEvent.FIXED_PREVIEW_DOWN in seen,
            fixed_preview_released=InputEvent.FIXED_PREVIEW_UP in seen,
            continue_pressed=InputEvent.CONTINUE_DOWN in seen,
        )


class InputQueue:
    """Collects input events between ticks."""

    def __init__(self):
        self._events: list[InputEvent] = []

    def push(self, event: InputEvent) -> None:
        self._events.append(event)

    def __len__(self) -> int:
        return len(self._events)

    def drain(self, hit_position: Optional[Iterable[float]] = None) -> TickInput:
        """Build this tick's input and empty the queue."""
        tick = TickInput.from_events(self._events, hit_position)
        self._events.clear()
        return tick
