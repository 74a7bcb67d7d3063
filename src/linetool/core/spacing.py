"""Spacing policies and the arithmetic that turns a path length into offsets.

Rounding rules
--------------
* ``FULL_LENGTH`` fits a whole number of gaps into the path, choosing the
  count whose spacing is closest to the requested value.
* Any other policy on a closed circle rounds the point count *up*, so the
  gap around the loop never exceeds the requested spacing.
* Open paths under any other policy walk at the exact spacing and stop
  before the end; the last gap to the end may be shorter.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from ..config.defaults import DEFAULT_SPACING, MIN_SPACING
from .footprint import ObjectFootprint
from .geometry import EPSILON

# Slack when comparing a ratio against an integer boundary
_RATIO_TOLERANCE = 1e-9


class SpacingMode(Enum):
    MANUAL = "manual"            # user distance, floored to the footprint length
    FENCE = "fence"              # objects touch end-to-end
    WALL = "wall"                # objects touch side-to-side
    FULL_LENGTH = "full_length"  # whole objects spread evenly over the path

    @property
    def spacing_is_editable(self) -> bool:
        """Fence and wall spacing is dictated by the footprint."""
        return self not in (SpacingMode.FENCE, SpacingMode.WALL)


class RotationMode(Enum):
    ABSOLUTE = "absolute"  # rotation is a world angle
    RELATIVE = "relative"  # rotation is measured from the path tangent
    RANDOM = "random"      # per-point random angle


@dataclass
class SpacingPolicy:
    """Everything the point generator needs to know about spacing and rotation."""

    spacing: float = DEFAULT_SPACING
    mode: SpacingMode = SpacingMode.MANUAL
    random_spacing: float = 0.0   # max along-path jitter
    random_offset: float = 0.0    # max lateral jitter
    rotation: float = 0.0         # degrees
    rotation_mode: RotationMode = RotationMode.RELATIVE
    footprint: ObjectFootprint = field(
        default_factory=lambda: ObjectFootprint(name="(none)"))

    def __post_init__(self) -> None:
        if self.spacing <= 0:
            raise ValueError("spacing must be positive")
        if self.random_spacing < 0:
            raise ValueError("random_spacing must not be negative")
        if self.random_offset < 0:
            raise ValueError("random_offset must not be negative")

    @property
    def effective_spacing(self) -> float:
        return effective_spacing(self)

    @property
    def spacing_is_editable(self) -> bool:
        return self.mode.spacing_is_editable


def effective_spacing(policy: SpacingPolicy) -> float:
    """Spacing implied by *policy* before any fitting to a path length."""
    footprint = policy.footprint
    if policy.mode is SpacingMode.FENCE:
        spacing = footprint.length
    elif policy.mode is SpacingMode.WALL:
        spacing = footprint.width
    else:
        spacing = max(policy.spacing, footprint.length)
    return max(spacing, MIN_SPACING)


def fit_segment_count(length: float, spacing: float) -> int:
    """Number of equal gaps spanning *length* whose size is closest to *spacing*.

    Only the two counts either side of ``length / spacing`` can be closest;
    on an exact tie the denser count wins.
    """
    ratio = length / spacing
    low = max(1, math.floor(ratio))
    high = max(1, math.ceil(ratio))
    if low == high:
        return low
    if abs(length / high - spacing) <= abs(length / low - spacing):
        return high
    return low


def circle_point_count(circumference: float, spacing: float, mode: SpacingMode) -> int:
    """Number of points around a closed loop under *mode*."""
    if mode is SpacingMode.FULL_LENGTH:
        return fit_segment_count(circumference, spacing)
    return max(1, math.ceil(circumference / spacing - _RATIO_TOLERANCE))


def linear_offsets(length: float, policy: SpacingPolicy) -> tuple[list[float], float]:
    """Arc-length offsets along an open path, plus the spacing actually used.

    Returns ``([], 0.0)`` for a degenerate (zero-length) path.
    """
    if length < EPSILON:
        return [], 0.0

    spacing = policy.effective_spacing
    if policy.mode is SpacingMode.FULL_LENGTH:
        n = fit_segment_count(length, spacing)
        spacing = length / n
        offsets = [i * spacing for i in range(n)]
        offsets.append(length)
        return offsets, spacing

    count = max(1, math.ceil(length / spacing - _RATIO_TOLERANCE))
    return [i * spacing for i in range(count)], spacing


def jitter_amplitude(policy: SpacingPolicy, spacing: float) -> float:
    """Along-path jitter, capped so neighbouring points never swap order."""
    return min(policy.random_spacing, spacing * 0.49)
