"""Straight segment from the start point to the pointer."""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..geometry import EPSILON, HeightSampler, planar_direction, planar_distance
from ..spacing import SpacingPolicy, jitter_amplitude, linear_offsets
from .base import GuideLine, GuideStyle, Overlay, PathResult, TooltipInfo, TooltipKind
from .utils import jitter_offsets, materialize


def calculate_straight_points(
    start: np.ndarray,
    end: np.ndarray,
    policy: SpacingPolicy,
    sampler: HeightSampler,
) -> PathResult:
    """Walk from *start* towards *end* at the policy's spacing."""
    length = planar_distance(start, end)
    offsets, spacing = linear_offsets(length, policy)
    if not offsets:
        return PathResult()

    direction = planar_direction(start, end)

    def position_at(d: float) -> np.ndarray:
        return start + direction * d

    offsets = jitter_offsets(
        offsets, length, jitter_amplitude(policy, spacing), position_at)
    points = [materialize(position_at(d), direction, policy, sampler) for d in offsets]
    return PathResult(points=points, length=length, spacing=spacing)


def straight_overlay(
    start: np.ndarray,
    end: np.ndarray,
    result: Optional[PathResult] = None,
) -> Overlay:
    overlay = Overlay(guides=[GuideLine(start, end, GuideStyle.PATH)])
    length = planar_distance(start, end)
    if length < EPSILON:
        return overlay

    direction = planar_direction(start, end)
    overlay.tooltips.append(TooltipInfo(
        TooltipKind.LENGTH, (start + end) / 2.0, direction, length))
    if result is not None and len(result.points) >= 2:
        first, second = result.points[0].position, result.points[1].position
        overlay.tooltips.append(TooltipInfo(
            TooltipKind.SPACING, (first + second) / 2.0, direction, result.spacing))
    return overlay
