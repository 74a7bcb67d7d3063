"""Path mode operations, dispatched on the :class:`PathState` tag.

Click order
-----------
STRAIGHT      start, commit(end)
SIMPLE_CURVE  start, elbow, commit(end)
CIRCLE        centre, commit(radius point)

Until the commit click, the terminal point of every mode is the live (or
frozen) pointer position passed into :func:`calculate_points`.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from ...config.defaults import DRAG_PICK_RADIUS
from ..geometry import HeightSampler, planar_distance
from ..spacing import SpacingPolicy
from .base import (
    ControlMarker,
    ControlRole,
    DragMode,
    LineMode,
    Overlay,
    PathResult,
    PathState,
)
from .circle import calculate_circle_points, circle_overlay
from .curve import calculate_curve_points, curve_overlay
from .straight import calculate_straight_points, straight_overlay


def switch_mode(state: PathState, kind: LineMode) -> PathState:
    """Return a fresh path of *kind* that keeps the current start point.

    A path with no start yet is seeded from the last placed end point, so
    switching shape between commits carries on from where the chain stopped.
    """
    if kind is state.kind:
        return state
    new = PathState(kind=kind, last_endpoint=state.last_endpoint)
    start = state.get(state.first_role)
    if start is None:
        start = state.last_endpoint
    if start is not None:
        new.points[new.first_role] = start.copy()
    return new


def handle_click(state: PathState, position: np.ndarray) -> bool:
    """Advance the click sequence by one role; True on the commit click."""
    if state.committed:
        return False
    position = np.array(position, dtype=np.float64)
    for role in state.roles[:-1]:
        if role not in state.points:
            state.points[role] = position
            return False
    state.points[state.terminal_role] = position
    state.committed = True
    return True


def handle_drag(state: PathState, drag_mode: DragMode, position: np.ndarray) -> None:
    """Move the dragged control point to *position*."""
    role = drag_mode.role
    if role is None or role not in state.roles:
        return
    state.points[role] = np.array(position, dtype=np.float64)


def check_drag_hit(
    state: PathState,
    position: np.ndarray,
    terminal: Optional[np.ndarray] = None,
    radius: float = DRAG_PICK_RADIUS,
) -> DragMode:
    """Closest control point within *radius* of *position*.

    *terminal* stands in for the uncommitted end (or radius) point, usually
    the frozen preview position.  Equal distances resolve in click order.
    """
    candidates = dict(state.points)
    if terminal is not None:
        candidates[state.terminal_role] = terminal

    best: Optional[ControlRole] = None
    best_distance = math.inf
    for role in state.roles:
        point = candidates.get(role)
        if point is None:
            continue
        d = planar_distance(point, position)
        if d <= radius and d < best_distance:
            best, best_distance = role, d

    return DragMode.NONE if best is None else DragMode.for_role(best)


def reset(state: PathState, continuation: bool = False) -> None:
    """Clear every control point.

    With *continuation* the previous end point (or circle centre) becomes
    the new start.
    """
    carry = None
    if continuation:
        if state.kind is LineMode.CIRCLE:
            carry = state.get(ControlRole.CENTER)
        else:
            carry = state.get(ControlRole.END)
            if carry is None:
                carry = state.get(ControlRole.START)

    state.points.clear()
    state.committed = False
    if carry is not None:
        state.points[state.first_role] = carry


def items_placed(state: PathState, position: np.ndarray) -> None:
    """Prepare for the next path after a commit at *position*."""
    position = np.array(position, dtype=np.float64)
    state.last_endpoint = position.copy()
    state.committed = False
    if state.kind is LineMode.CIRCLE:
        # Keep the centre so the next click sets a new radius
        state.points.pop(ControlRole.RADIUS, None)
    else:
        state.points = {ControlRole.START: position}


def calculate_points(
    state: PathState,
    current_pos: np.ndarray,
    policy: SpacingPolicy,
    sampler: HeightSampler,
) -> PathResult:
    """Generate the placement points for the path ending at *current_pos*."""
    if not state.has_start:
        return PathResult()

    current_pos = np.asarray(current_pos, dtype=np.float64)
    if state.kind is LineMode.STRAIGHT:
        return calculate_straight_points(
            state.points[ControlRole.START], current_pos, policy, sampler)
    if state.kind is LineMode.SIMPLE_CURVE:
        return calculate_curve_points(
            state.points[ControlRole.START], state.get(ControlRole.ELBOW),
            current_pos, policy, sampler)
    return calculate_circle_points(
        state.points[ControlRole.CENTER], current_pos, policy, sampler)


def draw_overlay(
    state: PathState,
    current_pos: np.ndarray,
    result: Optional[PathResult] = None,
) -> Overlay:
    """Guide lines and measurement tooltips for the current path."""
    if not state.has_start:
        return Overlay()

    current_pos = np.asarray(current_pos, dtype=np.float64)
    if state.kind is LineMode.STRAIGHT:
        return straight_overlay(state.points[ControlRole.START], current_pos, result)
    if state.kind is LineMode.SIMPLE_CURVE:
        return curve_overlay(
            state.points[ControlRole.START], state.get(ControlRole.ELBOW),
            current_pos, result)
    return circle_overlay(state.points[ControlRole.CENTER], current_pos, result)


def draw_point_overlays(
    state: PathState,
    current_pos: np.ndarray,
    radius: float = DRAG_PICK_RADIUS,
) -> list[ControlMarker]:
    """Markers for every draggable control point, terminal included."""
    markers: list[ControlMarker] = []
    for role in state.roles[:-1]:
        point = state.get(role)
        if point is not None:
            markers.append(ControlMarker(DragMode.for_role(role), point, radius))
    if state.has_start:
        markers.append(ControlMarker(
            DragMode.for_role(state.terminal_role),
            np.asarray(current_pos, dtype=np.float64), radius))
    return markers
