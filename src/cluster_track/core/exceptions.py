"""Custom exception hierarchy for cluster tracking."""
from __future__ import annotations

from typing import Any


class ClusterTrackError(Exception):
    """Base exception for cluster tracking.

    All custom exceptions inherit from this class.

    Args:
        message: Human-readable error message.
        context: Additional context dictionary for structured logging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | Context: {self.context}"
        return self.message


class ConfigurationError(ClusterTrackError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(ClusterTrackError):
    """Raised when input data fails validation."""
    pass


class EmptyClusterError(ValidationError):
    """Raised when a point cluster with zero points is supplied.

    Args:
        message: Error message.
        track_id: Track the cluster was meant for, if any.
        context: Additional context.
    """

    def __init__(
        self,
        message: str = "Point cluster is empty",
        track_id: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if track_id is not None:
            ctx["track_id"] = track_id
        super().__init__(message, ctx)
        self.track_id = track_id


class InvalidTimestepError(ValidationError):
    """Raised when a timestep is not strictly positive.

    Args:
        dt: The rejected timestep.
        track_id: Track the timestep was meant for, if any.
        context: Additional context.
    """

    def __init__(
        self,
        dt: float,
        track_id: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx["dt"] = dt
        if track_id is not None:
            ctx["track_id"] = track_id
        super().__init__(f"Timestep must be > 0, got {dt}", ctx)
        self.dt = dt
        self.track_id = track_id


class TrackingError(ClusterTrackError):
    """Raised when a track update fails."""
    pass


class FilterDivergedError(TrackingError):
    """Raised when the Kalman innovation covariance cannot be inverted safely."""
    pass


class ShapeError(ClusterTrackError):
    """Raised when shape extraction fails."""
    pass


class SimplificationAssemblyError(ShapeError):
    """Raised when a recursive polyline merge yields fewer than two vertices."""
    pass


class FrameTransformUnavailable(ClusterTrackError):
    """Raised when a pose cannot currently be transformed between two frames.

    Args:
        target_frame: Requested output frame.
        source_frame: Frame the pose is expressed in.
        context: Additional context.
    """

    def __init__(
        self,
        target_frame: str,
        source_frame: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx["target_frame"] = target_frame
        ctx["source_frame"] = source_frame
        super().__init__(
            f"No transform available from '{source_frame}' to '{target_frame}'", ctx
        )
        self.target_frame = target_frame
        self.source_frame = source_frame
