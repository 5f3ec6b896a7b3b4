from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator


DEFAULT_CONFIG_NAME = "step_counter.yaml"


class ColumnRange(BaseModel):
    """Half-open [start, end) column range holding one sensor's x, y, z axes."""

    start: int = Field(0, ge=0)
    end: int = 3

    @model_validator(mode="after")
    def _three_axes(self) -> "ColumnRange":
        if self.end - self.start != 3:
            raise ValueError(
                f"column range [{self.start}, {self.end}) must span exactly 3 columns"
            )
        return self

    def as_tuple(self) -> tuple[int, int]:
        return self.start, self.end


class HysteresisParams(BaseModel):
    drop_coefficient: float = Field(
        0.8, gt=0.0, le=1.0,
        description="A step is credited once the signal drops below this fraction of the peak",
    )


class AdaptiveWindowParams(BaseModel):
    window_size: int = Field(1000, ge=1, description="Half window in samples around each index")
    std_multiplier: float = Field(0.4, ge=0.0, description="Threshold = window mean + k * window std")
    spacing: int = Field(25, ge=0, description="Samples skipped after a counted step")
    skip_after_any_peak: bool = Field(
        False, description="Also skip `spacing` samples after a local peak that is not counted",
    )


DEFAULT_ADAPTIVE_PARAMS = AdaptiveWindowParams()
NARROW_ADAPTIVE_PARAMS = AdaptiveWindowParams(
    window_size=100, std_multiplier=0.5, spacing=15, skip_after_any_peak=True,
)

StrategyKey = Literal[
    "simple_peak", "hysteresis", "peak_trough",
    "adaptive_window", "adaptive_narrow", "dual_sensor",
]


class StepCounterConfig(BaseModel):
    strategy: StrategyKey = Field("simple_peak", description="Detector key, see step_detection.Strategy")
    accel_columns: ColumnRange = Field(default_factory=lambda: ColumnRange(start=0, end=3))
    gyro_columns: ColumnRange = Field(default_factory=lambda: ColumnRange(start=3, end=6))
    hysteresis: HysteresisParams = Field(default_factory=HysteresisParams)
    adaptive: AdaptiveWindowParams = Field(default_factory=AdaptiveWindowParams)
    adaptive_narrow: AdaptiveWindowParams = Field(
        default_factory=lambda: NARROW_ADAPTIVE_PARAMS.model_copy()
    )
    time_column: int = Field(0, ge=0, description="CSV column holding elapsed time")
    has_header: bool = Field(True, description="First CSV row holds column names")
    log_level: str = "INFO"

    @staticmethod
    def load(config_path: Optional[Path] = None) -> "StepCounterConfig":
        if config_path is None:
            default_path = Path(DEFAULT_CONFIG_NAME)
            config_path = default_path if default_path.exists() else None

        if config_path is None:
            return StepCounterConfig()

        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid {config_path.name}: expected a mapping at top level")
        try:
            return StepCounterConfig(**raw)
        except ValidationError as ve:
            raise ValueError(f"Invalid {config_path.name}: {ve}")


def load_config(config_path: Optional[Path] = None) -> StepCounterConfig:
    """Load configuration from an optional YAML file, falling back to defaults."""

    return StepCounterConfig.load(config_path)
