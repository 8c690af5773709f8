"""Constant-velocity Kalman filter for a single cluster track.

State vector: [x, y, vx, vy]^T

The measurement model observes all four states directly. Position comes
from the cluster centroid and velocity from the finite-difference estimate
between consecutive centroids, so H is the 4x4 identity.

Prediction:
    x_pred = F(dt) x
    P_pred = F(dt) P F(dt)^T + Q

Correction:
    y = z - H x_pred
    S = H P_pred H^T + R
    K = P_pred H^T S^-1
    x = x_pred + K y
    P = (I - K H) P_pred (I - K H)^T + K R K^T   (Joseph form)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from cluster_track.core.config import KalmanConfig
from cluster_track.core.exceptions import FilterDivergedError, TrackingError
from cluster_track.core.logging import get_logger
from cluster_track.core.types import Point, Velocity
from cluster_track.estimation.centroid import validate_timestep

logger = get_logger(__name__)

STATE_DIM = 4
MEASUREMENT_DIM = 4


@dataclass
class KalmanState:
    """Kalman filter state for a track.

    Attributes:
        mean: State mean vector [x, y, vx, vy].
        covariance: State covariance matrix (4, 4).
    """
    mean: np.ndarray
    covariance: np.ndarray

    def __post_init__(self) -> None:
        """Validate Kalman state."""
        if self.mean.shape != (STATE_DIM,):
            raise ValueError(f"mean must have shape (4,), got {self.mean.shape}")
        if self.covariance.shape != (STATE_DIM, STATE_DIM):
            raise ValueError(f"covariance must have shape (4, 4), got {self.covariance.shape}")

    @property
    def position(self) -> Point:
        return Point(float(self.mean[0]), float(self.mean[1]))

    @property
    def velocity(self) -> Velocity:
        return Velocity(float(self.mean[2]), float(self.mean[3]))

    def copy(self) -> "KalmanState":
        return KalmanState(mean=self.mean.copy(), covariance=self.covariance.copy())

    @classmethod
    def from_position(cls, position: Point, initial_covariance: float = 1.0) -> "KalmanState":
        """Seed a state at ``position`` with zero velocity.

        Args:
            position: Initial centroid.
            initial_covariance: Scale of the identity error covariance.

        Returns:
            Initialized KalmanState.
        """
        mean = np.array([position.x, position.y, 0.0, 0.0], dtype=np.float64)
        covariance = np.eye(STATE_DIM) * initial_covariance
        return cls(mean=mean, covariance=covariance)


def transition_matrix(dt: float) -> np.ndarray:
    """State transition F for the constant-velocity model.

    | 1  0  dt  0 |
    | 0  1  0  dt |
    | 0  0  1   0 |
    | 0  0  0   1 |
    """
    return np.array(
        [[1, 0, dt, 0], [0, 1, 0, dt], [0, 0, 1, 0], [0, 0, 0, 1]], dtype=np.float64
    )


class KalmanTracker:
    """Owns the Kalman state of one track and runs one predict/correct cycle per scan.

    Steps must arrive strictly in time order, at most once per scan. The
    internal state is only replaced after a successful correction, so a
    raised FilterDivergedError leaves the previous estimate in place.

    Args:
        track_id: Identifier of the owning track (used in logs and errors).
        initial_position: Centroid of the first observation.
        dt: Initial timestep.
        config: Filter noise configuration.

    Example:
        >>> kf = KalmanTracker(1, Point(0.0, 0.0), dt=0.1)
        >>> kf.step((0.1, 0.0, 1.0, 0.0), dt=0.1)
    """

    def __init__(
        self,
        track_id: int,
        initial_position: Point,
        dt: float,
        config: KalmanConfig | None = None,
    ) -> None:
        self.track_id = track_id
        self.config = config or KalmanConfig()
        self.dt = validate_timestep(dt, track_id=track_id)
        self.t = 0.0
        self.steps = 0

        self.H = np.eye(MEASUREMENT_DIM, STATE_DIM)
        self.Q = np.eye(STATE_DIM) * self.config.process_noise
        self.R = np.eye(MEASUREMENT_DIM) * self.config.measurement_noise

        self._state: KalmanState | None = None
        self.initialize(initial_position)

    def initialize(self, position: Point) -> None:
        """Seed the filter at ``position`` with zero velocity.

        Raises:
            TrackingError: If the filter has already processed a measurement.
        """
        if self.steps > 0:
            raise TrackingError(
                "Kalman filter cannot be re-initialized after updates",
                context={"track_id": self.track_id, "steps": self.steps},
            )
        self._state = KalmanState.from_position(position, self.config.initial_covariance)
        self.t = 0.0

    def predict(self, state: KalmanState, dt: float) -> KalmanState:
        """Time update. Pure: ``state`` is not modified."""
        dt = validate_timestep(dt, track_id=self.track_id)
        F = transition_matrix(dt)
        mean = F @ state.mean
        covariance = F @ state.covariance @ F.T + self.Q
        return KalmanState(mean=mean, covariance=covariance)

    def correct(self, state: KalmanState, measurement: Sequence[float]) -> KalmanState:
        """Measurement update. Pure: ``state`` is not modified.

        Raises:
            FilterDivergedError: If the innovation covariance is singular,
                ill-conditioned, or the result is not finite.
        """
        z = np.asarray(measurement, dtype=np.float64)
        if z.shape != (MEASUREMENT_DIM,):
            raise ValueError(f"measurement must have shape (4,), got {z.shape}")
        if not np.all(np.isfinite(z)):
            raise FilterDivergedError(
                "Measurement contains non-finite values",
                context={"track_id": self.track_id, "measurement": z.tolist()},
            )

        innovation = z - self.H @ state.mean
        S = self.H @ state.covariance @ self.H.T + self.R

        # written as "not <=" so a NaN condition number also counts as diverged
        if not np.all(np.isfinite(S)) or not np.linalg.cond(S) <= self.config.max_condition_number:
            raise FilterDivergedError(
                "Innovation covariance is ill-conditioned",
                context={"track_id": self.track_id, "steps": self.steps},
            )
        try:
            # K = P H^T S^-1, solved as S^T K^T = (P H^T)^T
            K = np.linalg.solve(S.T, (state.covariance @ self.H.T).T).T
        except np.linalg.LinAlgError as e:
            raise FilterDivergedError(
                f"Innovation covariance is singular: {e}",
                context={"track_id": self.track_id, "steps": self.steps},
            ) from e

        mean = state.mean + K @ innovation
        I_KH = np.eye(STATE_DIM) - K @ self.H
        covariance = I_KH @ state.covariance @ I_KH.T + K @ self.R @ K.T

        if not (np.all(np.isfinite(mean)) and np.all(np.isfinite(covariance))):
            raise FilterDivergedError(
                "Filter produced non-finite state",
                context={"track_id": self.track_id, "steps": self.steps},
            )
        return KalmanState(mean=mean, covariance=covariance)

    def step(self, measurement: Sequence[float], dt: float) -> np.ndarray:
        """Run one predict/correct cycle and commit the result.

        Args:
            measurement: (x, y, vx, vy) measurement vector.
            dt: Time since the previous step.

        Returns:
            Copy of the filtered state vector [x, y, vx, vy].
        """
        predicted = self.predict(self._state, dt)
        try:
            corrected = self.correct(predicted, measurement)
        except FilterDivergedError as e:
            logger.error("Kalman filter diverged", track_id=self.track_id, error=e.message)
            raise

        self._state = corrected
        self.dt = float(dt)
        self.t += self.dt
        self.steps += 1
        return corrected.mean.copy()

    @property
    def state(self) -> np.ndarray:
        """Latest filtered state vector [x, y, vx, vy] (a copy)."""
        return self._state.mean.copy()

    @property
    def covariance(self) -> np.ndarray:
        """Latest error covariance (a copy)."""
        return self._state.covariance.copy()
