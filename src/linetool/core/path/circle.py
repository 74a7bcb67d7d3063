"""Full circle around a centre, starting at the pointer's angle.

Points are laid counter-clockwise (increasing angle) and never wrap past
the starting angle, so the first point is not duplicated.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from ...config.defaults import OVERLAY_CIRCLE_SEGMENTS
from ..geometry import (
    EPSILON,
    HeightSampler,
    heading,
    perpendicular,
    planar_direction,
    planar_distance,
)
from ..spacing import SpacingPolicy, circle_point_count, jitter_amplitude
from .base import GuideLine, GuideStyle, Overlay, PathResult, TooltipInfo, TooltipKind
from .utils import jitter_offsets, materialize


def _on_circle(center: np.ndarray, radius: float, angle: float) -> np.ndarray:
    return center + np.array([math.cos(angle), 0.0, math.sin(angle)]) * radius


def calculate_circle_points(
    center: np.ndarray,
    radius_point: np.ndarray,
    policy: SpacingPolicy,
    sampler: HeightSampler,
) -> PathResult:
    """Spread points evenly around the circle through *radius_point*."""
    radius = planar_distance(center, radius_point)
    if radius < EPSILON:
        return PathResult()

    circumference = 2.0 * math.pi * radius
    n = circle_point_count(circumference, policy.effective_spacing, policy.mode)
    spacing = circumference / n
    start_angle = heading(planar_direction(center, radius_point))

    def position_at(d: float) -> np.ndarray:
        return _on_circle(center, radius, start_angle + d / radius)

    offsets = jitter_offsets(
        [i * spacing for i in range(n)], circumference,
        jitter_amplitude(policy, spacing), position_at)

    points = []
    for d in offsets:
        angle = start_angle + d / radius
        radial = np.array([math.cos(angle), 0.0, math.sin(angle)])
        points.append(materialize(
            center + radial * radius, perpendicular(radial), policy, sampler))

    return PathResult(
        points=points,
        length=circumference,
        spacing=spacing,
        angle_step=360.0 / n,
    )


def circle_overlay(
    center: np.ndarray,
    radius_point: np.ndarray,
    result: Optional[PathResult] = None,
) -> Overlay:
    overlay = Overlay(guides=[GuideLine(center, radius_point, GuideStyle.CONSTRUCTION)])
    radius = planar_distance(center, radius_point)
    if radius < EPSILON:
        return overlay

    start_angle = heading(planar_direction(center, radius_point))
    angles = start_angle + np.linspace(0.0, 2.0 * math.pi, OVERLAY_CIRCLE_SEGMENTS + 1)
    ring = [_on_circle(center, radius, float(a)) for a in angles]
    for a, b in zip(ring[:-1], ring[1:]):
        overlay.guides.append(GuideLine(a, b, GuideStyle.PATH))

    direction = planar_direction(center, radius_point)
    overlay.tooltips.append(TooltipInfo(
        TooltipKind.RADIUS, (center + radius_point) / 2.0, direction, radius))

    if result is not None and not result.is_empty:
        overlay.tooltips.append(TooltipInfo(
            TooltipKind.LENGTH, _on_circle(center, radius, start_angle + math.pi),
            -direction, result.length))
        overlay.tooltips.append(TooltipInfo(
            TooltipKind.ANGLE, center, direction, result.angle_step))
        if len(result.points) >= 2:
            first, second = result.points[0].position, result.points[1].position
            overlay.tooltips.append(TooltipInfo(
                TooltipKind.SPACING, (first + second) / 2.0,
                planar_direction(first, second), result.spacing))
    return overlay
