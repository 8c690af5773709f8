"""Cluster shape extraction.

This module provides:
- simplify: Ramer-Douglas-Peucker polyline simplification
- perpendicular_distance: Point-to-line distance used by simplify
- MotionClassifier: Moving/stationary heuristic over simplified outlines
"""
from cluster_track.shape.motion import MotionClassifier
from cluster_track.shape.simplify import perpendicular_distance, perpendicular_distances, simplify

__all__ = [
    "MotionClassifier",
    "perpendicular_distance",
    "perpendicular_distances",
    "simplify",
]
