"""Three-point curve: a quadratic bezier from start, bent by the elbow.

The elbow is the bezier control point, so the curve leaves the start
heading towards the elbow and arrives at the end heading away from it.
Until the elbow is placed the curve previews as a straight segment.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from ...config.defaults import CURVE_RESOLUTION, OVERLAY_CURVE_SEGMENTS
from ..geometry import (
    EPSILON,
    HeightSampler,
    planar,
    planar_direction,
)
from ..spacing import SpacingPolicy, jitter_amplitude, linear_offsets
from .base import GuideLine, GuideStyle, Overlay, PathResult, TooltipInfo, TooltipKind
from .straight import calculate_straight_points, straight_overlay
from .utils import (
    arc_length_table,
    bezier_points,
    bezier_tangent,
    jitter_offsets,
    materialize,
    parameter_at,
)


def _unit_tangent(
    start: np.ndarray,
    elbow: np.ndarray,
    end: np.ndarray,
    t: float,
) -> np.ndarray:
    d = planar(bezier_tangent(start, elbow, end, t))
    n = float(np.linalg.norm(d))
    if n < EPSILON:
        # Elbow coincides with an end point: the chord gives the direction
        return planar_direction(start, end)
    return d / n


def included_angle(start: np.ndarray, elbow: np.ndarray, end: np.ndarray) -> float:
    """Angle in degrees at the elbow between its two legs."""
    a = planar_direction(elbow, start)
    b = planar_direction(elbow, end)
    cos_angle = max(-1.0, min(1.0, float(np.dot(a, b))))
    return math.degrees(math.acos(cos_angle))


def calculate_curve_points(
    start: np.ndarray,
    elbow: Optional[np.ndarray],
    end: np.ndarray,
    policy: SpacingPolicy,
    sampler: HeightSampler,
    resolution: int = CURVE_RESOLUTION,
) -> PathResult:
    """Walk the curve by arc length at the policy's spacing."""
    if elbow is None:
        return calculate_straight_points(start, end, policy, sampler)

    t_table, cumulative = arc_length_table(start, elbow, end, resolution)
    length = float(cumulative[-1])
    offsets, spacing = linear_offsets(length, policy)
    if not offsets:
        return PathResult()

    def position_at(d: float) -> np.ndarray:
        t = parameter_at(d, t_table, cumulative)
        return bezier_points(start, elbow, end, np.array([t]))[0]

    offsets = jitter_offsets(
        offsets, length, jitter_amplitude(policy, spacing), position_at)

    points = []
    for d in offsets:
        t = parameter_at(d, t_table, cumulative)
        position = bezier_points(start, elbow, end, np.array([t]))[0]
        tangent = _unit_tangent(start, elbow, end, t)
        points.append(materialize(position, tangent, policy, sampler))

    return PathResult(points=points, length=length, spacing=spacing)


def curve_overlay(
    start: np.ndarray,
    elbow: Optional[np.ndarray],
    end: np.ndarray,
    result: Optional[PathResult] = None,
) -> Overlay:
    if elbow is None:
        return straight_overlay(start, end, result)

    overlay = Overlay(guides=[
        GuideLine(start, elbow, GuideStyle.CONSTRUCTION),
        GuideLine(elbow, end, GuideStyle.CONSTRUCTION),
    ])

    samples = bezier_points(
        start, elbow, end, np.linspace(0.0, 1.0, OVERLAY_CURVE_SEGMENTS + 1))
    for a, b in zip(samples[:-1], samples[1:]):
        overlay.guides.append(GuideLine(a, b, GuideStyle.PATH))

    if result is not None and result.length > EPSILON:
        mid = bezier_points(start, elbow, end, np.array([0.5]))[0]
        overlay.tooltips.append(TooltipInfo(
            TooltipKind.LENGTH, mid, _unit_tangent(start, elbow, end, 0.5), result.length))
        if len(result.points) >= 2:
            first, second = result.points[0].position, result.points[1].position
            overlay.tooltips.append(TooltipInfo(
                TooltipKind.SPACING, (first + second) / 2.0,
                planar_direction(first, second), result.spacing))

    overlay.tooltips.append(TooltipInfo(
        TooltipKind.ANGLE, elbow, planar_direction(start, end),
        included_angle(start, elbow, end)))
    return overlay
