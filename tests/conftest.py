"""Pytest configuration and shared fixtures for cluster_track tests."""
from __future__ import annotations

import logging

import numpy as np
import pytest
import structlog

from cluster_track.core.config import Config, ShapeConfig
from cluster_track.core.logging import remove_handlers
from cluster_track.core.types import PointCluster


@pytest.fixture
def config() -> Config:
    """Default configuration, independent of CLUSTER_TRACK_* environment variables."""
    return Config()


@pytest.fixture
def shape_config() -> ShapeConfig:
    return ShapeConfig()


@pytest.fixture
def square_cluster() -> PointCluster:
    """Four corners of a 2x2 square centred on (1, 1)."""
    return PointCluster.from_points([(0, 0), (2, 0), (0, 2), (2, 2)])


@pytest.fixture
def segment_cluster() -> PointCluster:
    """Two points one unit apart on the x axis."""
    return PointCluster.from_points([(0, 0), (1, 0)])


@pytest.fixture
def zigzag_cluster() -> PointCluster:
    """Outline that keeps four vertices at epsilon 0.1."""
    return PointCluster.from_points([(0, 0), (1, 1), (2, 0), (3, 1)])


@pytest.fixture
def short_segment_cluster() -> PointCluster:
    """Straight run of points shorter than the default segment threshold."""
    return PointCluster.from_points([(0.0, 0.0), (0.1, 0.0), (0.2, 0.0), (0.3, 0.0)])


@pytest.fixture
def make_blob():
    """Factory for a small compact cluster centred on (cx, cy).

    Usage:
        cluster = make_blob(1.0, 2.0)
    """
    offsets = np.array([[-0.02, -0.02], [0.02, -0.02], [0.02, 0.02], [-0.02, 0.02]])

    def _make(cx: float, cy: float) -> PointCluster:
        return PointCluster(points=offsets + np.array([cx, cy]))

    return _make


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(7)


@pytest.fixture(autouse=True)
def reset_random_seed():
    """Reset numpy random seed before each test for reproducibility."""
    np.random.seed(42)
    yield


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any logging configuration made by a test (e.g. through the CLI)."""
    yield
    remove_handlers()
    logging.getLogger().setLevel(logging.WARNING)
    structlog.reset_defaults()
