"""Tests for frame transforms and trajectory accumulation."""
from __future__ import annotations

import math

import numpy as np
import pytest

from cluster_track.core.config import Config, TrackConfig
from cluster_track.core.exceptions import FrameTransformUnavailable
from cluster_track.tracking.track import TrackRecord
from cluster_track.tracking.trajectory import FrameTransformer, Pose, RigidTransformer, TrackTrajectory


@pytest.fixture
def transformer() -> RigidTransformer:
    tf = RigidTransformer()
    tf.set_transform("map", "laser", tx=10.0, ty=-2.0, yaw=math.pi / 2)
    return tf


class TestRigidTransformer:

    def test_satisfies_protocol(self, transformer):
        assert isinstance(transformer, FrameTransformer)

    def test_forward_transform(self, transformer):
        pose = transformer.transform_pose("map", Pose(1.0, 0.0, frame_id="laser"))
        assert pose.x == pytest.approx(10.0)
        assert pose.y == pytest.approx(-1.0)
        assert pose.yaw == pytest.approx(math.pi / 2)
        assert pose.frame_id == "map"

    def test_inverse_round_trip(self, transformer):
        original = Pose(3.0, -4.0, yaw=0.3, frame_id="laser")
        back = transformer.transform_pose("laser", transformer.transform_pose("map", original))
        assert back.x == pytest.approx(original.x)
        assert back.y == pytest.approx(original.y)
        assert back.yaw == pytest.approx(original.yaw)

    def test_identity_for_same_frame(self):
        tf = RigidTransformer()
        assert tf.can_transform("laser", "laser")
        assert tf.transform_pose("laser", Pose(1.0, 2.0, frame_id="laser")) == Pose(1.0, 2.0, 0.0, "laser")

    def test_unknown_frames(self, transformer):
        assert not transformer.can_transform("odom", "laser")
        with pytest.raises(FrameTransformUnavailable) as exc_info:
            transformer.transform_pose("odom", Pose(0.0, 0.0, frame_id="laser"))
        assert exc_info.value.context == {"target_frame": "odom", "source_frame": "laser"}


class TestTrackTrajectory:

    def test_bounded(self):
        trajectory = TrackTrajectory("map", max_length=3)
        for i in range(5):
            trajectory.append(Pose(float(i), 0.0, frame_id="map"))
        assert len(trajectory) == 3
        np.testing.assert_array_equal(trajectory.to_numpy()[:, 0], [2.0, 3.0, 4.0])

    def test_rejects_foreign_frame(self):
        with pytest.raises(ValueError):
            TrackTrajectory("map").append(Pose(0.0, 0.0, frame_id="laser"))

    def test_empty_to_numpy(self):
        assert TrackTrajectory("map").to_numpy().shape == (0, 2)


class TestTrackTrajectoryUpdates:

    def test_appends_transformed_filtered_position(self, make_blob, transformer):
        track = TrackRecord.create(1, make_blob(1.0, 0.0), dt=0.1)
        assert track.update_trajectory(transformer) is True
        (pose,) = track.trajectory.poses
        assert pose.frame_id == "map"
        assert pose.x == pytest.approx(10.0)
        assert pose.y == pytest.approx(-1.0)

    def test_unavailable_transform_is_skipped(self, make_blob):
        track = TrackRecord.create(1, make_blob(0.0, 0.0), dt=0.1)
        assert track.update_trajectory(RigidTransformer()) is False
        assert len(track.trajectory) == 0

    def test_transform_raising_is_skipped(self, make_blob):
        class FlakyTransformer:
            def can_transform(self, target_frame, source_frame):
                return True

            def transform_pose(self, target_frame, pose):
                raise FrameTransformUnavailable(target_frame, pose.frame_id)

        track = TrackRecord.create(1, make_blob(0.0, 0.0), dt=0.1)
        assert track.update_trajectory(FlakyTransformer()) is False

    def test_trajectory_hidden_while_stationary(self, make_blob, zigzag_cluster, transformer):
        track = TrackRecord.create(1, make_blob(0.0, 0.0), dt=0.1)
        track.update_trajectory(transformer)
        track.update(zigzag_cluster, dt=0.1)
        track.update_trajectory(transformer)
        assert track.moving is False
        assert len(track.trajectory) == 0
        assert len(track._trajectory) == 2

    def test_trajectory_size_from_config(self, make_blob, transformer):
        config = Config(track=TrackConfig(trajectory_size=2))
        track = TrackRecord.create(1, make_blob(0.0, 0.0), dt=0.1, config=config)
        for k in range(1, 5):
            track.update(make_blob(0.01 * k, 0.0), dt=0.1)
            track.update_trajectory(transformer)
        assert len(track.trajectory) == 2
