"""Centroid and finite-difference velocity estimation."""
from __future__ import annotations

import numpy as np

from cluster_track.core.exceptions import EmptyClusterError, InvalidTimestepError
from cluster_track.core.types import Point, PointsLike, Velocity, as_points_array


def compute_mean(cluster: PointsLike) -> Point:
    """Compute the centroid of a point cluster.

    Each axis is averaged independently over all points of the cluster.

    Args:
        cluster: Points of a single scan.

    Returns:
        Centroid as a Point.

    Raises:
        EmptyClusterError: If the cluster has no points.
    """
    points = as_points_array(cluster)
    if len(points) == 0:
        raise EmptyClusterError("Cannot compute the mean of an empty cluster")
    mean_x, mean_y = points.mean(axis=0)
    return Point(float(mean_x), float(mean_y))


def validate_timestep(dt: float, track_id: int | None = None) -> float:
    """Return ``dt`` as float, rejecting non-positive or non-finite values."""
    dt = float(dt)
    if not np.isfinite(dt) or dt <= 0:
        raise InvalidTimestepError(dt, track_id=track_id)
    return dt


def compute_velocity(current: Point, previous: Point, dt: float) -> Velocity:
    """Finite-difference velocity between two consecutive centroids.

    Args:
        current: Centroid of the latest scan.
        previous: Centroid of the scan before it.
        dt: Time elapsed between the two scans.

    Returns:
        Velocity with matching per-axis differences divided by ``dt``.

    Raises:
        InvalidTimestepError: If ``dt <= 0``.
    """
    dt = validate_timestep(dt)
    return Velocity(
        vx=(current.x - previous.x) / dt,
        vy=(current.y - previous.y) / dt,
    )
