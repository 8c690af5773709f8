"""Per-object track record orchestrating estimation and shape classification."""
from __future__ import annotations

import math
from collections import deque

import numpy as np

from cluster_track.core.config import Config
from cluster_track.core.exceptions import EmptyClusterError, FrameTransformUnavailable
from cluster_track.core.logging import get_logger
from cluster_track.core.types import (
    RGB,
    Odometry,
    Point,
    PointCluster,
    PointsLike,
    Velocity,
    as_points_array,
)
from cluster_track.estimation.centroid import compute_mean, compute_velocity, validate_timestep
from cluster_track.estimation.kalman import KalmanTracker
from cluster_track.shape.motion import MotionClassifier
from cluster_track.shape.simplify import simplify
from cluster_track.tracking.trajectory import FrameTransformer, Pose, TrackTrajectory

logger = get_logger(__name__)


def _as_cluster(observation: PointsLike) -> PointCluster:
    if isinstance(observation, PointCluster):
        return observation
    return PointCluster(points=as_points_array(observation))


class TrackRecord:
    """State of one tracked object across scans.

    Each ``update`` recomputes the centroid of the new cluster, derives a
    finite-difference velocity against the previous centroid, runs one
    Kalman cycle on (centroid, velocity), and re-classifies the object from
    the simplified outline of the cluster.

    The ``moving`` flag starts True and can only ever change to False. A
    single scan whose outline looks static freezes the track as stationary
    for the rest of its life.

    Updates are validated before any state is touched, so a rejected update
    (empty cluster, non-positive dt, diverged filter) leaves the record as
    it was.

    Args:
        track_id: Externally assigned identifier, fixed for the track's lifetime.
        first_observation: Cluster of the scan that created the track.
        dt: Initial timestep.
        config: Configuration; defaults are used when omitted.
        color: Display colour (r, g, b) in [0, 1]. Drawn from ``rng`` when omitted.
        rng: Generator for the display colour. Seeded from ``config.seed`` and
            the track id when omitted.
    """

    def __init__(
        self,
        track_id: int,
        first_observation: PointsLike,
        dt: float,
        config: Config | None = None,
        color: RGB | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or Config()
        cluster = _as_cluster(first_observation)
        if cluster.is_empty():
            raise EmptyClusterError("Cannot create a track from an empty cluster", track_id=track_id)

        self._id = int(track_id)
        self.dt = validate_timestep(dt, track_id=self._id)

        if color is None:
            rng = rng or np.random.default_rng([self.config.seed, self._id])
            color = tuple(float(c) for c in rng.random(3))
        self.color: RGB = color

        self.history: deque[PointCluster] = deque(
            [cluster], maxlen=self.config.track.history_size
        )
        self.mean = compute_mean(cluster)
        self.previous_mean: Point | None = None
        self.velocity = Velocity(0.0, 0.0)
        self.moving = True

        self.kf = KalmanTracker(self._id, self.mean, self.dt, self.config.kalman)
        self.classifier = MotionClassifier(self.config.shape)
        self.polyline = simplify(cluster, self.config.shape.epsilon)

        self._trajectory = TrackTrajectory(
            self.config.track.target_frame, self.config.track.trajectory_size
        )

        logger.info(
            "Track created",
            track_id=self._id,
            points=len(cluster),
            mean_x=self.mean.x,
            mean_y=self.mean.y,
        )

    @classmethod
    def create(
        cls,
        track_id: int,
        first_observation: PointsLike,
        dt: float,
        config: Config | None = None,
        **kwargs,
    ) -> "TrackRecord":
        """Create a track seeded from its first observation."""
        return cls(track_id, first_observation, dt, config=config, **kwargs)

    @property
    def id(self) -> int:
        return self._id

    def update(self, new_observation: PointsLike, dt: float) -> np.ndarray:
        """Fold one scan into the track.

        Args:
            new_observation: Cluster assigned to this track for the current scan.
            dt: Time since the previous scan.

        Returns:
            Filtered state vector [x, y, vx, vy].

        Raises:
            EmptyClusterError: If the cluster has no points.
            InvalidTimestepError: If ``dt <= 0``.
            FilterDivergedError: If the Kalman correction is numerically unstable.
        """
        cluster = _as_cluster(new_observation)
        if cluster.is_empty():
            raise EmptyClusterError("Cannot update a track with an empty cluster", track_id=self._id)
        dt = validate_timestep(dt, track_id=self._id)

        mean = compute_mean(cluster)
        velocity = compute_velocity(mean, self.mean, dt)
        polyline = simplify(cluster, self.config.shape.epsilon)
        filtered = self.kf.step((mean.x, mean.y, velocity.vx, velocity.vy), dt)

        self.history.append(cluster)
        self.previous_mean = self.mean
        self.mean = mean
        self.dt = dt
        self.velocity = velocity
        self.polyline = polyline

        stationary = self.classifier.classify(polyline, stationary=not self.moving)
        if self.moving and stationary:
            logger.info(
                "Track classified stationary",
                track_id=self._id,
                vertices=len(polyline),
            )
        self.moving = not stationary

        logger.debug(
            "Track updated",
            track_id=self._id,
            dt=dt,
            mean_x=mean.x,
            mean_y=mean.y,
            vx=velocity.vx,
            vy=velocity.vy,
            moving=self.moving,
            position_variance=float(np.trace(self.kf.covariance[:2, :2])),
        )
        return filtered

    def update_trajectory(self, transformer: FrameTransformer) -> bool:
        """Append the filtered position, expressed in the target frame, to the trajectory.

        Transform failures are logged and skipped.

        Returns:
            True if a pose was appended.
        """
        source = self.config.track.source_frame
        target = self.config.track.target_frame
        position = self.filtered_position

        try:
            if not transformer.can_transform(target, source):
                raise FrameTransformUnavailable(target, source)
            pose = transformer.transform_pose(
                target, Pose(position.x, position.y, frame_id=source)
            )
        except FrameTransformUnavailable as e:
            logger.warning("Skipping trajectory update", track_id=self._id, error=e.message)
            return False

        self._trajectory.append(pose)
        return True

    @property
    def trajectory(self) -> TrackTrajectory:
        """Accumulated trajectory; empty while the track is stationary."""
        if not self.moving:
            return self._trajectory.empty_copy()
        return self._trajectory

    @property
    def filtered_state(self) -> np.ndarray:
        return self.kf.state

    @property
    def filtered_position(self) -> Point:
        x, y, _, _ = self.kf.state
        return Point(float(x), float(y))

    @property
    def filtered_velocity(self) -> Velocity:
        _, _, vx, vy = self.kf.state
        return Velocity(float(vx), float(vy))

    @property
    def latest_observation(self) -> PointCluster:
        return self.history[-1]

    @property
    def bearing(self) -> float:
        """Angle of the current centroid seen from the sensor origin (radians)."""
        return math.atan2(self.mean.y, self.mean.x)

    def raw_odometry(self) -> Odometry:
        return Odometry(self.mean, self.velocity, self.config.track.source_frame)

    def filtered_odometry(self) -> Odometry:
        return Odometry(
            self.filtered_position, self.filtered_velocity, self.config.track.source_frame
        )

    def __repr__(self) -> str:
        return (
            f"TrackRecord(id={self._id}, mean=({self.mean.x:.3f}, {self.mean.y:.3f}), "
            f"moving={self.moving})"
        )
