"""Core path data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np


class LineMode(Enum):
    """Shape of the placement path."""
    STRAIGHT = "straight"
    SIMPLE_CURVE = "simple_curve"
    CIRCLE = "circle"


class ControlRole(Enum):
    """Role of a control point within its path."""
    START = "start"
    END = "end"
    ELBOW = "elbow"          # curve only
    CENTER = "center"        # circle only
    RADIUS = "radius"        # circle only


class DragMode(Enum):
    """Which control point, if any, is being dragged."""
    NONE = "none"
    START = "start"
    END = "end"
    ELBOW = "elbow"
    CENTER = "center"
    RADIUS = "radius"

    @property
    def role(self) -> Optional[ControlRole]:
        if self is DragMode.NONE:
            return None
        return ControlRole(self.value)

    @classmethod
    def for_role(cls, role: ControlRole) -> DragMode:
        return cls(role.value)


# Click order per mode; the last role is set by the commit click
ROLE_SEQUENCE: dict[LineMode, tuple[ControlRole, ...]] = {
    LineMode.STRAIGHT: (ControlRole.START, ControlRole.END),
    LineMode.SIMPLE_CURVE: (ControlRole.START, ControlRole.ELBOW, ControlRole.END),
    LineMode.CIRCLE: (ControlRole.CENTER, ControlRole.RADIUS),
}


class TooltipKind(Enum):
    LENGTH = "length"
    SPACING = "spacing"
    RADIUS = "radius"
    ANGLE = "angle"


class GuideStyle(Enum):
    PATH = "path"                  # the placement path itself
    CONSTRUCTION = "construction"  # helper lines between control points


@dataclass
class PointData:
    """One generated placement: world position and yaw in degrees [0, 360)."""
    position: np.ndarray
    rotation: float = 0.0

    def as_tuple(self) -> tuple[float, float, float]:
        return (float(self.position[0]), float(self.position[1]), float(self.position[2]))


@dataclass
class TooltipInfo:
    """A single on-screen measurement."""
    kind: TooltipKind
    position: np.ndarray
    direction: np.ndarray
    value: float

    @property
    def text(self) -> str:
        if self.kind is TooltipKind.ANGLE:
            return f"{self.value:.0f}°"
        return f"{self.value:.1f} m"


@dataclass
class GuideLine:
    start: np.ndarray
    end: np.ndarray
    style: GuideStyle = GuideStyle.PATH


@dataclass
class ControlMarker:
    """A draggable control point drawn while the preview is fixed."""
    drag_mode: DragMode
    position: np.ndarray
    radius: float


@dataclass
class PathState:
    """Control points of the active path, tagged by its mode."""
    kind: LineMode = LineMode.STRAIGHT
    points: dict[ControlRole, np.ndarray] = field(default_factory=dict)
    committed: bool = False                 # commit click seen, awaiting items_placed
    last_endpoint: Optional[np.ndarray] = None

    @property
    def roles(self) -> tuple[ControlRole, ...]:
        return ROLE_SEQUENCE[self.kind]

    @property
    def first_role(self) -> ControlRole:
        return self.roles[0]

    @property
    def terminal_role(self) -> ControlRole:
        return self.roles[-1]

    @property
    def has_start(self) -> bool:
        return self.first_role in self.points

    @property
    def has_all_points(self) -> bool:
        """Every role that must be clicked before the commit click is present."""
        return all(r in self.points for r in self.roles[:-1])

    def get(self, role: ControlRole) -> Optional[np.ndarray]:
        return self.points.get(role)


@dataclass
class PathResult:
    """Output of one recomputation."""
    points: list[PointData] = field(default_factory=list)
    length: float = 0.0          # arc length, or circumference for a circle
    spacing: float = 0.0         # spacing actually used
    angle_step: float = 0.0      # degrees between circle points

    @property
    def is_empty(self) -> bool:
        return len(self.points) == 0


@dataclass
class Overlay:
    guides: list[GuideLine] = field(default_factory=list)
    tooltips: list[TooltipInfo] = field(default_factory=list)
