"""Ramer-Douglas-Peucker polyline simplification for scan clusters."""
from __future__ import annotations

import numpy as np

from cluster_track.core.exceptions import (
    EmptyClusterError,
    SimplificationAssemblyError,
    ValidationError,
)
from cluster_track.core.types import PointsLike, as_points_array


def perpendicular_distances(
    points: np.ndarray,
    line_start: np.ndarray,
    line_end: np.ndarray,
) -> np.ndarray:
    """Distances from each point to the infinite line through two points.

    Each point is projected onto the normalized chord direction and the
    magnitude of the residual is returned. A zero-length chord degenerates
    to the distance from ``line_start``.

    Args:
        points: Array of shape (N, 2).
        line_start: First chord endpoint, shape (2,).
        line_end: Second chord endpoint, shape (2,).

    Returns:
        Array of shape (N,) with non-negative distances.
    """
    points = np.atleast_2d(np.asarray(points, dtype=np.float64))
    start = np.asarray(line_start, dtype=np.float64)
    direction = np.asarray(line_end, dtype=np.float64) - start
    offsets = points - start

    length = np.hypot(direction[0], direction[1])
    if length == 0.0:
        return np.hypot(offsets[:, 0], offsets[:, 1])

    direction = direction / length
    projections = offsets @ direction
    residuals = offsets - np.outer(projections, direction)
    return np.hypot(residuals[:, 0], residuals[:, 1])


def perpendicular_distance(point, line_start, line_end) -> float:
    """Distance from a single point to the line through ``line_start`` and ``line_end``."""
    return float(perpendicular_distances(np.asarray(point), line_start, line_end)[0])


def _simplify(points: np.ndarray, epsilon: float) -> np.ndarray:
    n = len(points)
    if n < 3:
        return points.copy()

    # split points are shared by both halves of a span
    keep = np.zeros(n, dtype=bool)
    keep[[0, -1]] = True
    spans = [(0, n - 1)]
    while spans:
        start, end = spans.pop()
        if end - start < 2:
            continue
        distances = perpendicular_distances(points[start + 1 : end], points[start], points[end])
        offset = int(np.argmax(distances))
        if distances[offset] > epsilon:
            index = start + 1 + offset
            keep[index] = True
            spans.append((index, end))
            spans.append((start, index))

    result = points[keep]
    if len(result) < 2:
        raise SimplificationAssemblyError(
            "Simplification produced fewer than two vertices",
            context={"input_points": n, "output_points": len(result)},
        )
    return result


def simplify(points: PointsLike, epsilon: float) -> np.ndarray:
    """Simplify an ordered point sequence with Ramer-Douglas-Peucker.

    The first and last input points are always kept. Interior points survive
    only where their deviation from the current chord exceeds ``epsilon``.

    Args:
        points: Ordered points (cluster, (N, 2) array or sequence of pairs).
        epsilon: Maximum perpendicular deviation that may be discarded.

    Returns:
        Array of shape (M, 2) with M <= N, and M >= 2 whenever N >= 2.

    Raises:
        EmptyClusterError: If ``points`` is empty.
        ValidationError: If ``epsilon`` is negative or not finite.
    """
    arr = as_points_array(points)
    if len(arr) == 0:
        raise EmptyClusterError("Cannot simplify an empty cluster")
    if not np.isfinite(epsilon) or epsilon < 0:
        raise ValidationError(
            f"epsilon must be a non-negative finite number, got {epsilon}",
            context={"epsilon": epsilon},
        )
    return _simplify(arr, float(epsilon))
