"""Configuration management for cluster tracking."""
from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cluster_track.core.exceptions import ConfigurationError


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "console"  # console or json
    file: Path | None = None

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate renderer name."""
        allowed = {"console", "json"}
        if v not in allowed:
            raise ValueError(f"format must be one of {allowed}, got {v}")
        return v


class KalmanConfig(BaseModel):
    """Constant-velocity Kalman filter configuration.

    Each noise value scales a 4x4 identity matrix.
    """
    process_noise: float = Field(default=1.0, gt=0)
    measurement_noise: float = Field(default=1.0, gt=0)
    initial_covariance: float = Field(default=1.0, gt=0)
    max_condition_number: float = Field(default=1e12, gt=1)


class ShapeConfig(BaseModel):
    """Polyline simplification and motion classification configuration."""
    epsilon: float = Field(default=0.1, gt=0)
    segment_length_threshold: float = Field(default=0.8, gt=0)
    max_moving_vertices: int = Field(default=3, ge=2)


class TrackConfig(BaseModel):
    """Per-track bookkeeping configuration."""
    history_size: int = Field(default=10, ge=1)
    trajectory_size: int = Field(default=500, ge=1)
    source_frame: str = "laser"
    target_frame: str = "map"


class Config(BaseSettings):
    """Main configuration class."""
    model_config = SettingsConfigDict(
        env_prefix="CLUSTER_TRACK_",
        env_nested_delimiter="__",
    )

    project_name: str = "cluster-track"
    seed: int = 42

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    kalman: KalmanConfig = Field(default_factory=KalmanConfig)
    shape: ShapeConfig = Field(default_factory=ShapeConfig)
    track: TrackConfig = Field(default_factory=TrackConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            return cls(**data)
        except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
            raise ConfigurationError(
                f"Failed to load configuration: {e}", context={"path": str(path)}
            ) from e

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(mode="json"), f, default_flow_style=False)


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from file or use defaults."""
    if config_path and config_path.exists():
        return Config.from_yaml(config_path)
    return Config()
