"""State estimation for cluster tracks.

This module provides:
- compute_mean: Centroid of a single scan's cluster
- compute_velocity: Finite-difference velocity between centroids
- KalmanTracker: Constant-velocity Kalman filter over (x, y, vx, vy)
"""
from cluster_track.estimation.centroid import compute_mean, compute_velocity, validate_timestep
from cluster_track.estimation.kalman import KalmanState, KalmanTracker, transition_matrix

__all__ = [
    "compute_mean",
    "compute_velocity",
    "validate_timestep",
    "KalmanState",
    "KalmanTracker",
    "transition_matrix",
]
