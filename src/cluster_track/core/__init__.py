"""Core utilities and base types for cluster tracking."""
from cluster_track.core.exceptions import (
    ClusterTrackError,
    ConfigurationError,
    ValidationError,
    EmptyClusterError,
    InvalidTimestepError,
    TrackingError,
    FilterDivergedError,
    ShapeError,
    SimplificationAssemblyError,
    FrameTransformUnavailable,
)
from cluster_track.core.types import (
    Odometry,
    Point,
    PointCluster,
    Velocity,
    as_points_array,
)

__all__ = [
    # Exceptions
    "ClusterTrackError",
    "ConfigurationError",
    "ValidationError",
    "EmptyClusterError",
    "InvalidTimestepError",
    "TrackingError",
    "FilterDivergedError",
    "ShapeError",
    "SimplificationAssemblyError",
    "FrameTransformUnavailable",
    # Types
    "Odometry",
    "Point",
    "PointCluster",
    "Velocity",
    "as_points_array",
]
