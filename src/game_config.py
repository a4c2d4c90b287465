"""
Tunable constants for the simulation and the pygame host.
"""
import json
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class ConfigurationError(ValueError):
    """Raised when the game is configured with values it cannot run with."""


class GameConfig(BaseModel):
    """
    Component: Configuration
    Mechanism: Frozen pydantic model, validated once at construction.
    Defaults match the tuning of the original desktop game.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Bird physics (units per tick)
    gravity: float = Field(default=0.7, gt=0)
    jump_force: float = Field(default=-10.0)
    bird_size: int = Field(default=45, gt=0)

    # Scroll speed and difficulty ramp
    base_pipe_speed: float = Field(default=7.0, gt=0)
    speed_increase_per_5_points: float = Field(default=0.5, ge=0)
    points_per_speed_step: int = Field(default=5, gt=0)
    max_speed_multiplier: float = Field(default=3.0, ge=1.0)

    # Pipe geometry
    pipe_gap: int = Field(default=200, gt=0)
    pipe_spacing: int = Field(default=400, gt=0)
    pipe_width: int = Field(default=60, gt=0)
    pipe_height: int = Field(default=350, gt=0)
    cap_width: int = Field(default=80, gt=0)
    cap_height: int = Field(default=40, gt=0)
    cap_overlap: int = Field(default=20, ge=0)
    max_offset: int = Field(default=60, ge=0)
    pipe_pairs: int = Field(default=2, gt=0)

    # Host
    screen_width: int = Field(default=800, gt=0)
    screen_height: int = Field(default=600, gt=0)
    tick_interval_ms: int = Field(default=20, gt=0)
    render_fps: int = Field(default=60, gt=0)

    @model_validator(mode="after")
    def _check_geometry(self) -> "GameConfig":
        if self.jump_force >= 0:
            raise ValueError("jump_force must be negative (screen y grows downwards)")
        if self.cap_width < self.pipe_width:
            raise ValueError("cap_width must be at least pipe_width")
        if self.pipe_spacing <= self.cap_width:
            raise ValueError("pipe_spacing must exceed cap_width or neighbouring pairs overlap")
        return self

    @property
    def cap_overhang(self) -> float:
        """How far a cap sticks out on each side of its pipe."""
        return (self.cap_width - self.pipe_width) / 2


def build_config(**values: Any) -> GameConfig:
    """Validate raw values into a GameConfig, translating pydantic errors."""
    try:
        return GameConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


def load_config(path: Optional[Union[str, Path]] = None, **overrides: Any) -> GameConfig:
    """
    Load a GameConfig from an optional JSON file, then apply overrides.
    Overrides set to None are ignored so CLI flags can be passed straight through.
    """
    values = {}
    if path is not None:
        try:
            with open(path, "r") as f:
                values = json.load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Config file {path} not found") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Config file {path} is not valid JSON: {e}") from e
        if not isinstance(values, dict):
            raise ConfigurationError(f"Config file {path} must contain a JSON object")

    values.update({k: v for k, v in overrides.items() if v is not None})
    return build_config(**values)


def require_positive(**values: Any) -> None:
    """Fail fast on zero, negative or non-integer dimensions and counts."""
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if value <= 0:
            raise ConfigurationError(f"{name} must be positive, got {value}")
