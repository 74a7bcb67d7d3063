"""Tests for geometry.py."""

import math

import numpy as np
import pytest

from linetool.core.geometry import (
    FlatTerrain,
    heading,
    normalize_degrees,
    perpendicular,
    planar_direction,
    planar_distance,
    snap_to_ground,
    vec3,
)


class TestVec3:
    def test_two_values_are_x_and_z(self):
        np.testing.assert_allclose(vec3((3, 4)), [3.0, 0.0, 4.0])

    def test_three_values_pass_through(self):
        np.testing.assert_allclose(vec3([1, 2, 3]), [1.0, 2.0, 3.0])

    def test_wrong_length_raises(self):
        with pytest.raises(ValueError, match="2 or 3"):
            vec3([1, 2, 3, 4])


class TestPlanar:
    def test_distance_ignores_height(self):
        a = np.array([0.0, 0.0, 0.0])
        b = np.array([3.0, 50.0, 4.0])
        assert planar_distance(a, b) == pytest.approx(5.0)

    def test_direction_is_unit_and_flat(self):
        d = planar_direction(np.zeros(3), np.array([10.0, 7.0, 0.0]))
        np.testing.assert_allclose(d, [1.0, 0.0, 0.0])

    def test_degenerate_direction_defaults_to_x(self):
        p = np.array([5.0, 1.0, 5.0])
        np.testing.assert_allclose(planar_direction(p, p), [1.0, 0.0, 0.0])

    def test_perpendicular_turns_x_into_z(self):
        np.testing.assert_allclose(perpendicular(np.array([1.0, 0.0, 0.0])), [0.0, 0.0, 1.0])


class TestAngles:
    def test_heading_of_axes(self):
        assert heading(np.array([1.0, 0.0, 0.0])) == pytest.approx(0.0)
        assert heading(np.array([0.0, 0.0, 1.0])) == pytest.approx(math.pi / 2)

    @pytest.mark.parametrize("angle, expected", [
        (0.0, 0.0),
        (-90.0, 270.0),
        (360.0, 0.0),
        (725.0, 5.0),
        (-1e-15, 0.0),
    ])
    def test_normalize_degrees(self, angle, expected):
        result = normalize_degrees(angle)
        assert result == pytest.approx(expected)
        assert 0.0 <= result < 360.0


class TestTerrain:
    def test_flat_terrain_height(self):
        assert FlatTerrain(2.5)(100.0, -3.0) == 2.5

    def test_snap_replaces_y_only(self):
        snapped = snap_to_ground(np.array([1.0, 99.0, 2.0]), lambda x, z: x + z)
        np.testing.assert_allclose(snapped, [1.0, 3.0, 2.0])

    def test_snap_returns_copy(self):
        p = np.array([1.0, 5.0, 2.0])
        snap_to_ground(p, FlatTerrain(0.0))
        assert p[1] == 5.0
