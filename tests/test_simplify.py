"""Tests for Ramer-Douglas-Peucker simplification."""
from __future__ import annotations

import math

import numpy as np
import pytest

from cluster_track.core.exceptions import EmptyClusterError, ValidationError
from cluster_track.shape.simplify import perpendicular_distance, perpendicular_distances, simplify


class TestPerpendicularDistance:

    def test_point_above_horizontal_chord(self):
        assert perpendicular_distance((1.0, 2.0), (0.0, 0.0), (4.0, 0.0)) == pytest.approx(2.0)

    def test_point_on_line_extension(self):
        assert perpendicular_distance((10.0, 10.0), (0.0, 0.0), (1.0, 1.0)) == pytest.approx(0.0)

    def test_diagonal_chord(self):
        d = perpendicular_distance((0.0, 1.0), (0.0, 0.0), (1.0, 1.0))
        assert d == pytest.approx(math.sqrt(2) / 2)

    def test_zero_length_chord_falls_back_to_point_distance(self):
        d = perpendicular_distance((3.0, 4.0), (0.0, 0.0), (0.0, 0.0))
        assert d == pytest.approx(5.0)

    def test_vectorised_matches_scalar(self, rng):
        points = rng.uniform(-5, 5, size=(20, 2))
        start, end = np.array([-1.0, 0.5]), np.array([2.0, 3.0])
        batch = perpendicular_distances(points, start, end)
        scalar = [perpendicular_distance(p, start, end) for p in points]
        np.testing.assert_allclose(batch, scalar)


class TestSimplify:

    def test_fewer_than_three_points_unchanged(self):
        np.testing.assert_array_equal(simplify([(0, 0), (1, 1)], 0.1), [[0, 0], [1, 1]])
        np.testing.assert_array_equal(simplify([(2, 3)], 0.1), [[2, 3]])

    def test_collinear_points_collapse_to_endpoints(self):
        points = [(x, 0.5 * x) for x in np.linspace(0, 5, 11)]
        result = simplify(points, 0.1)
        np.testing.assert_allclose(result, [points[0], points[-1]])

    def test_points_within_epsilon_collapse(self):
        points = [(0, 0), (1, 0.05), (2, -0.05), (3, 0.02), (4, 0)]
        np.testing.assert_array_equal(simplify(points, 0.1), [[0, 0], [4, 0]])

    def test_corner_is_kept(self):
        points = [(0, 0), (1, 0), (2, 0), (2, 1), (2, 2)]
        np.testing.assert_array_equal(simplify(points, 0.1), [[0, 0], [2, 0], [2, 2]])

    def test_zigzag_keeps_four_vertices(self, zigzag_cluster):
        result = simplify(zigzag_cluster, 0.1)
        np.testing.assert_array_equal(result, [[0, 0], [1, 1], [2, 0], [3, 1]])

    def test_closed_outline_with_coincident_endpoints(self):
        points = [(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)]
        result = simplify(points, 0.1)
        assert len(result) >= 2
        np.testing.assert_array_equal(result[0], [0, 0])
        np.testing.assert_array_equal(result[-1], [0, 0])

    def test_large_epsilon_keeps_only_endpoints(self, rng):
        points = rng.uniform(0, 1, size=(30, 2))
        result = simplify(points, 10.0)
        np.testing.assert_array_equal(result, points[[0, -1]])

    def test_zero_epsilon_keeps_every_off_chord_point(self):
        points = [(0, 0), (1, 1), (2, 0), (3, 1), (4, 0)]
        assert len(simplify(points, 0.0)) == 5

    @pytest.mark.parametrize("epsilon", [0.01, 0.1, 0.5])
    def test_endpoints_and_length_bounds(self, rng, epsilon):
        points = np.cumsum(rng.normal(size=(40, 2)), axis=0)
        result = simplify(points, epsilon)
        np.testing.assert_array_equal(result[0], points[0])
        np.testing.assert_array_equal(result[-1], points[-1])
        assert 2 <= len(result) <= len(points)

    @pytest.mark.parametrize("epsilon", [0.05, 0.3, 1.0])
    def test_idempotent(self, rng, epsilon):
        points = np.cumsum(rng.normal(size=(60, 2)), axis=0)
        once = simplify(points, epsilon)
        np.testing.assert_array_equal(simplify(once, epsilon), once)

    def test_output_is_subsequence_of_input(self, rng):
        points = np.cumsum(rng.normal(size=(25, 2)), axis=0)
        result = simplify(points, 0.2)
        rows = [tuple(p) for p in points]
        indices = [rows.index(tuple(p)) for p in result]
        assert indices == sorted(indices)

    def test_input_not_modified(self, zigzag_cluster):
        before = zigzag_cluster.points.copy()
        simplify(zigzag_cluster, 0.1)
        np.testing.assert_array_equal(zigzag_cluster.points, before)

    def test_empty_input_rejected(self):
        with pytest.raises(EmptyClusterError):
            simplify([], 0.1)

    def test_negative_epsilon_rejected(self):
        with pytest.raises(ValidationError):
            simplify([(0, 0), (1, 1), (2, 0)], -0.1)

    def test_long_zigzag_beyond_recursion_limit(self):
        """Every vertex of a long zigzag survives; splits nest about as deep as the point count."""
        n = 3000
        points = np.column_stack([np.arange(n, dtype=float), np.arange(n) % 2])
        result = simplify(points, 0.1)
        np.testing.assert_array_equal(result, points)
