"""Single-object track records.

This module provides:
- TrackRecord: Per-track estimation, classification and lifecycle
- TrackTrajectory: Bounded pose history in a target frame
- FrameTransformer / RigidTransformer: Frame-transform boundary
- replay_scenario: Feed a recorded scan sequence through one track
"""

from cluster_track.tracking.replay import Scenario, load_scenario, parse_scenario, replay_scenario
from cluster_track.tracking.track import TrackRecord
from cluster_track.tracking.trajectory import (
    FrameTransformer,
    Pose,
    RigidTransformer,
    TrackTrajectory,
)

__all__ = [
    "TrackRecord",
    "TrackTrajectory",
    "FrameTransformer",
    "Pose",
    "RigidTransformer",
    "Scenario",
    "load_scenario",
    "parse_scenario",
    "replay_scenario",
]
