"""Trajectory accumulation in a target frame."""
from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Iterator, Protocol, runtime_checkable

import numpy as np

from cluster_track.core.exceptions import FrameTransformUnavailable


@dataclass(frozen=True)
class Pose:
    """Planar pose.

    Attributes:
        x: X coordinate.
        y: Y coordinate.
        yaw: Heading in radians.
        frame_id: Frame the pose is expressed in.
    """
    x: float
    y: float
    yaw: float = 0.0
    frame_id: str = ""


@runtime_checkable
class FrameTransformer(Protocol):
    """Boundary to an external frame-transform service."""

    def can_transform(self, target_frame: str, source_frame: str) -> bool:
        ...

    def transform_pose(self, target_frame: str, pose: Pose) -> Pose:
        """Express ``pose`` in ``target_frame``.

        Raises:
            FrameTransformUnavailable: If no transform is currently known.
        """
        ...


class RigidTransformer:
    """In-memory 2D transformer over named frame pairs.

    Each registered transform maps coordinates of ``source`` into ``target``
    by a rotation of ``yaw`` followed by a translation ``(tx, ty)``. Inverse
    lookups are derived automatically.

    Example:
        >>> tf = RigidTransformer()
        >>> tf.set_transform("map", "laser", tx=1.0, ty=2.0, yaw=0.0)
        >>> tf.transform_pose("map", Pose(0.0, 0.0, frame_id="laser"))
        Pose(x=1.0, y=2.0, yaw=0.0, frame_id='map')
    """

    def __init__(self) -> None:
        self._transforms: dict[tuple[str, str], tuple[float, float, float]] = {}

    def set_transform(
        self, target_frame: str, source_frame: str, tx: float, ty: float, yaw: float = 0.0
    ) -> None:
        self._transforms[(target_frame, source_frame)] = (float(tx), float(ty), float(yaw))

    def _lookup(self, target_frame: str, source_frame: str) -> tuple[float, float, float] | None:
        if target_frame == source_frame:
            return (0.0, 0.0, 0.0)
        if (target_frame, source_frame) in self._transforms:
            return self._transforms[(target_frame, source_frame)]
        if (source_frame, target_frame) in self._transforms:
            tx, ty, yaw = self._transforms[(source_frame, target_frame)]
            c, s = math.cos(yaw), math.sin(yaw)
            # inverse of p' = R p + t is p = R^T (p' - t)
            return (-(c * tx + s * ty), -(-s * tx + c * ty), -yaw)
        return None

    def can_transform(self, target_frame: str, source_frame: str) -> bool:
        return self._lookup(target_frame, source_frame) is not None

    def transform_pose(self, target_frame: str, pose: Pose) -> Pose:
        transform = self._lookup(target_frame, pose.frame_id)
        if transform is None:
            raise FrameTransformUnavailable(target_frame, pose.frame_id)
        tx, ty, yaw = transform
        c, s = math.cos(yaw), math.sin(yaw)
        return Pose(
            x=c * pose.x - s * pose.y + tx,
            y=s * pose.x + c * pose.y + ty,
            yaw=pose.yaw + yaw,
            frame_id=target_frame,
        )


class TrackTrajectory:
    """Bounded sequence of poses for one track, all in one frame.

    Args:
        frame_id: Frame all stored poses are expressed in.
        max_length: Oldest poses are dropped beyond this many.
    """

    def __init__(self, frame_id: str, max_length: int = 500) -> None:
        self.frame_id = frame_id
        self.max_length = max_length
        self._poses: deque[Pose] = deque(maxlen=max_length)

    def append(self, pose: Pose) -> None:
        if pose.frame_id != self.frame_id:
            raise ValueError(
                f"pose frame '{pose.frame_id}' does not match trajectory frame '{self.frame_id}'"
            )
        self._poses.append(pose)

    @property
    def poses(self) -> list[Pose]:
        return list(self._poses)

    def to_numpy(self) -> np.ndarray:
        """Return positions as an array of shape (N, 2)."""
        if not self._poses:
            return np.empty((0, 2))
        return np.array([(p.x, p.y) for p in self._poses], dtype=np.float64)

    def empty_copy(self) -> "TrackTrajectory":
        return TrackTrajectory(self.frame_id, self.max_length)

    def __len__(self) -> int:
        return len(self._poses)

    def __iter__(self) -> Iterator[Pose]:
        return iter(list(self._poses))
