"""Vector helpers, terrain height contract and angle conventions.

World space is Y-up.  Paths are laid out in the XZ plane and every placed
point takes its Y from a :class:`HeightSampler`.
"""

from __future__ import annotations

import math
from typing import Iterable, Protocol

import numpy as np

# Below this planar distance two positions are treated as coincident
EPSILON = 1e-6


class HeightSampler(Protocol):
    """Ground height lookup supplied by the host environment."""

    def __call__(self, x: float, z: float) -> float: ...


class FlatTerrain:
    """Constant-height terrain, used headless and by the GUI canvas."""

    def __init__(self, height: float = 0.0):
        self.height = height

    def __call__(self, x: float, z: float) -> float:
        return self.height


def vec3(value: Iterable[float]) -> np.ndarray:
    """Coerce *value* to a float64 (3,) array.

    Two-component input is read as (x, z) with y = 0.
    """
    arr = np.asarray(list(value), dtype=np.float64)
    if arr.shape == (2,):
        return np.array([arr[0], 0.0, arr[1]])
    if arr.shape != (3,):
        raise ValueError(f"Expected 2 or 3 coordinates, got {arr.shape[0]}")
    return arr


def planar(v: np.ndarray) -> np.ndarray:
    """Project *v* onto the XZ plane (drop Y)."""
    return np.array([v[0], 0.0, v[2]])


def planar_distance(a: np.ndarray, b: np.ndarray) -> float:
    return math.hypot(float(b[0] - a[0]), float(b[2] - a[2]))


def planar_direction(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Unit XZ direction from *a* to *b*; +X when the points coincide."""
    d = planar(b - a)
    n = float(np.linalg.norm(d))
    if n < EPSILON:
        return np.array([1.0, 0.0, 0.0])
    return d / n


def perpendicular(direction: np.ndarray) -> np.ndarray:
    """Rotate a planar direction +90 degrees about the vertical axis."""
    return np.array([-direction[2], 0.0, direction[0]])


def heading(direction: np.ndarray) -> float:
    """Angle (radians) of a planar direction measured from +X towards +Z."""
    return math.atan2(float(direction[2]), float(direction[0]))


def normalize_degrees(angle: float) -> float:
    """Wrap *angle* into [0, 360)."""
    wrapped = math.fmod(angle, 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    # fmod of e.g. -1e-15 lands exactly on 360.0 after the shift
    return 0.0 if wrapped >= 360.0 else wrapped


def snap_to_ground(position: np.ndarray, sampler: HeightSampler) -> np.ndarray:
    """Return a copy of *position* with Y replaced by the terrain height."""
    out = np.array(position, dtype=np.float64)
    out[1] = float(sampler(float(out[0]), float(out[2])))
    return out
