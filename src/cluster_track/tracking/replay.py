"""Replay of recorded scan sequences through a single track."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from cluster_track.core.config import Config
from cluster_track.core.exceptions import ConfigurationError, TrackingError, ValidationError
from cluster_track.core.logging import get_logger
from cluster_track.core.types import PointCluster, as_points_array
from cluster_track.tracking.track import TrackRecord
from cluster_track.tracking.trajectory import RigidTransformer

logger = get_logger(__name__)


@dataclass
class Scan:
    """One recorded scan: the cluster and the time since the previous scan."""
    cluster: PointCluster
    dt: float


@dataclass
class Scenario:
    """A recorded sequence of clusters belonging to one object.

    Attributes:
        track_id: Identifier to give the replayed track.
        scans: Scans in time order; the first one creates the track.
        transform: Optional (tx, ty, yaw) from the source to the target frame.
    """
    track_id: int
    scans: list[Scan]
    transform: tuple[float, float, float] | None = None

    def __post_init__(self) -> None:
        if not self.scans:
            raise ValidationError("Scenario contains no scans", context={"track_id": self.track_id})


@dataclass
class ScanResult:
    """Estimates after processing one scan."""
    index: int
    points: int
    mean: tuple[float, float]
    velocity: tuple[float, float]
    filtered: tuple[float, float, float, float]
    vertices: int
    moving: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "index": self.index,
            "points": self.points,
            "mean": list(self.mean),
            "velocity": list(self.velocity),
            "filtered": list(self.filtered),
            "vertices": self.vertices,
            "moving": self.moving,
            "error": self.error,
        }


def _parse_scan(index: int, entry: Any, default_dt: float) -> Scan:
    if isinstance(entry, dict):
        points, dt = entry.get("points", []), entry.get("dt", default_dt)
    else:
        points, dt = entry, default_dt
    try:
        cluster = PointCluster(points=as_points_array(points))
        dt = float(dt)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid scan {index}: {e}", context={"scan": index}) from e
    return Scan(cluster=cluster, dt=dt)


def parse_scenario(data: dict[str, Any]) -> Scenario:
    """Build a Scenario from its YAML/JSON mapping.

    Expected keys: ``dt`` (default timestep), ``scans`` (each either a list
    of [x, y] pairs or a mapping with ``points`` and an optional ``dt``),
    optional ``track_id`` and ``transform`` ({tx, ty, yaw}).

    Raises:
        ValidationError: If the mapping does not have that shape.
    """
    if not isinstance(data, dict) or not isinstance(data.get("scans"), list):
        raise ValidationError("Scenario must be a mapping with a 'scans' list")

    transform = data.get("transform")
    if transform is not None and not isinstance(transform, dict):
        raise ValidationError("Scenario transform must be a mapping of tx, ty, yaw")

    try:
        default_dt = float(data.get("dt", 0.1))
        track_id = int(data.get("track_id", 0))
        if transform:
            transform = tuple(float(transform.get(k, 0.0)) for k in ("tx", "ty", "yaw"))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid scenario header: {e}") from e

    scans = [_parse_scan(i, entry, default_dt) for i, entry in enumerate(data["scans"])]
    return Scenario(track_id=track_id, scans=scans, transform=transform or None)


def load_scenario(path: Path) -> Scenario:
    """Load a scenario from a YAML (or JSON) file.

    Raises:
        ConfigurationError: If the file cannot be read or is not valid YAML.
        ValidationError: If its content is not a scenario.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Failed to load scenario: {e}", context={"path": str(path)}
        ) from e
    return parse_scenario(data)


def _result(index: int, track: TrackRecord, points: int, error: str | None = None) -> ScanResult:
    x, y, vx, vy = (float(v) for v in track.filtered_state)
    return ScanResult(
        index=index,
        points=points,
        mean=track.mean.as_tuple(),
        velocity=track.velocity.as_tuple(),
        filtered=(x, y, vx, vy),
        vertices=len(track.polyline),
        moving=track.moving,
        error=error,
    )


def replay_scenario(scenario: Scenario, config: Config | None = None) -> tuple[TrackRecord, list[ScanResult]]:
    """Feed every scan of a scenario through one TrackRecord.

    Scans rejected by validation are reported in their result row and
    skipped. A diverged filter ends the replay.

    Returns:
        The final track and one result per processed scan.
    """
    config = config or Config()
    first = scenario.scans[0]
    track = TrackRecord.create(scenario.track_id, first.cluster, first.dt, config=config)

    transformer = None
    if scenario.transform is not None:
        transformer = RigidTransformer()
        transformer.set_transform(
            config.track.target_frame, config.track.source_frame, *scenario.transform
        )
        track.update_trajectory(transformer)

    results = [_result(0, track, len(first.cluster))]
    for index, scan in enumerate(scenario.scans[1:], start=1):
        try:
            track.update(scan.cluster, scan.dt)
        except ValidationError as e:
            logger.warning("Scan rejected", scan=index, error=e.message)
            results.append(_result(index, track, len(scan.cluster), error=e.message))
            continue
        except TrackingError as e:
            logger.error("Replay aborted", scan=index, error=e.message)
            results.append(_result(index, track, len(scan.cluster), error=e.message))
            break

        if transformer is not None:
            track.update_trajectory(transformer)
        results.append(_result(index, track, len(scan.cluster)))

    return track, results
