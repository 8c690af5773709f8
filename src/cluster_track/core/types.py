"""Type definitions for cluster tracking."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence, Union

import numpy as np


@dataclass(frozen=True)
class Point:
    """A 2D point.

    Attributes:
        x: X coordinate.
        y: Y coordinate.
    """
    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def as_tuple(self) -> tuple[float, float]:
        """Return coordinates as (x, y) tuple."""
        return (self.x, self.y)


@dataclass(frozen=True)
class Velocity:
    """Planar velocity.

    Attributes:
        vx: Velocity along x (units per second).
        vy: Velocity along y (units per second).
    """
    vx: float
    vy: float

    @property
    def speed(self) -> float:
        """Velocity magnitude."""
        return math.hypot(self.vx, self.vy)

    def as_tuple(self) -> tuple[float, float]:
        """Return components as (vx, vy) tuple."""
        return (self.vx, self.vy)


PointsLike = Union["PointCluster", np.ndarray, Sequence[Point], Sequence[Sequence[float]]]


def as_points_array(points: PointsLike) -> np.ndarray:
    """Normalise any supported point container to a float array of shape (N, 2).

    Args:
        points: PointCluster, (N, 2) array, or sequence of Point / (x, y) pairs.

    Returns:
        Float64 array with shape (N, 2). Empty input yields shape (0, 2).
    """
    if isinstance(points, PointCluster):
        return points.points
    if isinstance(points, np.ndarray):
        arr = points.astype(np.float64, copy=False)
    else:
        rows = [p.as_tuple() if isinstance(p, Point) else tuple(p) for p in points]
        if not rows:
            return np.empty((0, 2), dtype=np.float64)
        arr = np.asarray(rows, dtype=np.float64)
    if arr.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"points must have shape (N, 2), got {arr.shape}")
    return arr


@dataclass
class PointCluster:
    """One scan's observation of a tracked object.

    Points are kept in scan order. Zero points are allowed here; consumers
    that need at least one point raise ``EmptyClusterError``.

    Attributes:
        points: Array of (x, y) coordinates with shape (N, 2).
    """
    points: np.ndarray

    def __post_init__(self) -> None:
        """Validate cluster data."""
        self.points = np.asarray(self.points, dtype=np.float64)
        if self.points.size == 0:
            self.points = np.empty((0, 2), dtype=np.float64)
        if self.points.ndim != 2 or self.points.shape[1] != 2:
            raise ValueError(f"points must have shape (N, 2), got {self.points.shape}")

    @classmethod
    def from_points(cls, points: Iterable[Point] | Iterable[Sequence[float]]) -> "PointCluster":
        """Build a cluster from Point objects or (x, y) pairs."""
        return cls(points=as_points_array(list(points)))

    def __len__(self) -> int:
        """Return number of points in the cluster."""
        return len(self.points)

    def __iter__(self):
        return (Point(float(x), float(y)) for x, y in self.points)

    def is_empty(self) -> bool:
        return len(self.points) == 0

    def to_list(self) -> list[list[float]]:
        """Return points as nested lists (for YAML/JSON output)."""
        return self.points.tolist()


@dataclass(frozen=True)
class Odometry:
    """Position and velocity estimate expressed in one frame.

    Attributes:
        position: Estimated position.
        velocity: Estimated velocity.
        frame_id: Frame the estimate is expressed in.
    """
    position: Point
    velocity: Velocity
    frame_id: str


RGB = tuple[float, float, float]
