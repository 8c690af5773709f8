"""Single-object cluster tracking: centroid, Kalman smoothing, outline and motion state."""

__version__ = "0.1.0"
