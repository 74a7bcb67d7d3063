"""Helpers shared by the path variants: seeding, rotation, bezier sampling."""

from __future__ import annotations

import math
from typing import Callable, Sequence

import numpy as np

from ..geometry import (
    HeightSampler,
    heading,
    normalize_degrees,
    perpendicular,
    snap_to_ground,
)
from ..spacing import RotationMode, SpacingPolicy
from .base import PointData

# Salts keep the along-path and lateral streams independent
SALT_SPACING = 1
SALT_OFFSET = 2


def position_seed(position: np.ndarray, salt: int = 0) -> int:
    """Deterministic 32-bit seed from a position rounded to millimetres."""
    ix = int(round(float(position[0]) * 1000))
    iz = int(round(float(position[2]) * 1000))
    return ((ix * 73856093) ^ (iz * 19349663) ^ (salt * 83492791)) & 0xFFFFFFFF


def seeded_uniform(position: np.ndarray, salt: int, amplitude: float) -> float:
    """Uniform sample in [-amplitude, amplitude] keyed by *position*."""
    if amplitude <= 0.0:
        return 0.0
    rng = np.random.default_rng(position_seed(position, salt))
    return float(rng.uniform(-amplitude, amplitude))


def random_rotation(position: np.ndarray) -> float:
    """Integer yaw in [0, 360) seeded by the point's own final position."""
    seed = int((abs(position[0]) + abs(position[1]) + abs(position[2])) * 1000)
    rng = np.random.default_rng(seed)
    return float(rng.integers(360))


def resolve_rotation(policy: SpacingPolicy, tangent: np.ndarray, position: np.ndarray) -> float:
    """Yaw in degrees for a point at *position* walking along *tangent*."""
    if policy.rotation_mode is RotationMode.RANDOM:
        return random_rotation(position)
    if policy.rotation_mode is RotationMode.ABSOLUTE:
        return normalize_degrees(policy.rotation)
    return normalize_degrees(policy.rotation - math.degrees(heading(tangent)))


def jitter_offsets(
    offsets: Sequence[float],
    length: float,
    amplitude: float,
    position_at: Callable[[float], np.ndarray],
) -> list[float]:
    """Perturb every offset but the first, keyed by its nominal position."""
    if amplitude <= 0.0:
        return list(offsets)
    out: list[float] = []
    for i, d in enumerate(offsets):
        if i > 0:
            d += seeded_uniform(position_at(d), SALT_SPACING, amplitude)
            d = min(max(d, 0.0), length)
        out.append(d)
    return out


def materialize(
    position: np.ndarray,
    tangent: np.ndarray,
    policy: SpacingPolicy,
    sampler: HeightSampler,
) -> PointData:
    """Apply lateral jitter, ground snapping and rotation to a path position."""
    if policy.random_offset > 0.0:
        lateral = seeded_uniform(position, SALT_OFFSET, policy.random_offset)
        position = position + perpendicular(tangent) * lateral
    position = snap_to_ground(position, sampler)
    return PointData(position=position, rotation=resolve_rotation(policy, tangent, position))


# ----------------------------------------------------------------------
# Quadratic bezier (start, control, end)
# ----------------------------------------------------------------------


def bezier_points(p0: np.ndarray, p1: np.ndarray, p2: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Evaluate the curve at each parameter in *t*; returns (N, 3)."""
    t = np.asarray(t, dtype=np.float64)[:, None]
    u = 1.0 - t
    return u * u * p0 + 2.0 * u * t * p1 + t * t * p2


def bezier_tangent(p0: np.ndarray, p1: np.ndarray, p2: np.ndarray, t: float) -> np.ndarray:
    """First derivative at parameter *t* (not normalised)."""
    return 2.0 * (1.0 - t) * (p1 - p0) + 2.0 * t * (p2 - p1)


def arc_length_table(
    p0: np.ndarray,
    p1: np.ndarray,
    p2: np.ndarray,
    resolution: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Sample parameters and cumulative planar chord lengths along the curve."""
    t = np.linspace(0.0, 1.0, resolution + 1)
    pts = bezier_points(p0, p1, p2, t)
    chords = np.hypot(np.diff(pts[:, 0]), np.diff(pts[:, 2]))
    cumulative = np.concatenate([[0.0], np.cumsum(chords)])
    return t, cumulative


def parameter_at(distance: float, t: np.ndarray, cumulative: np.ndarray) -> float:
    """Bezier parameter at arc length *distance* (linear in each chord)."""
    return float(np.interp(distance, cumulative, t))
