"""Path modes and point generation package."""

from .base import (
    ControlRole,
    DragMode,
    LineMode,
    PathResult,
    PathState,
    PointData,
    TooltipInfo,
)

__all__ = [
    "ControlRole",
    "DragMode",
    "LineMode",
    "PathResult",
    "PathState",
    "PointData",
    "TooltipInfo",
]
