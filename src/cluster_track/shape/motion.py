"""Moving/stationary heuristic over a simplified cluster outline."""
from __future__ import annotations

import numpy as np

from cluster_track.core.config import ShapeConfig
from cluster_track.core.types import PointsLike, as_points_array


class MotionClassifier:
    """Classifies a track as stationary from the shape of its latest scan.

    A simplified outline with many vertices looks like static structure
    (e.g. a wall corner), and a single long straight segment looks like a
    static surface. Anything else keeps the prior classification: there is
    no rule that turns a stationary track back into a moving one.

    Args:
        config: Shape configuration (vertex limit and segment length threshold).
    """

    def __init__(self, config: ShapeConfig | None = None) -> None:
        self.config = config or ShapeConfig()

    def is_static_shape(self, polyline: PointsLike) -> bool:
        """Whether this outline on its own indicates a static object."""
        vertices = as_points_array(polyline)
        if len(vertices) > self.config.max_moving_vertices:
            return True
        if len(vertices) == 2:
            length = float(np.linalg.norm(vertices[1] - vertices[0]))
            return length > self.config.segment_length_threshold
        return False

    def classify(self, polyline: PointsLike, stationary: bool = False) -> bool:
        """Update a stationary decision with the current scan's outline.

        Args:
            polyline: Simplified outline of the current scan.
            stationary: Prior decision for the track.

        Returns:
            True if the track is (or remains) stationary.
        """
        return stationary or self.is_static_shape(polyline)
