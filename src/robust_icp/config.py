"""Configuration schema and loader for the registration pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from robust_icp.alignment.correspondence import available_matchers


class OptimizerConfig(BaseModel):
    iterations: int = Field(1, ge=0)
    translation_step: float = Field(1.0, gt=0.0)
    translation_rate: float = Field(1e-3, ge=0.0)
    rotation_step: float = Field(1e-3, gt=0.0)
    rotation_rate: float = Field(1e-10, ge=0.0)


class RobustLossConfig(BaseModel):
    tuning_constant: float = Field(1e7, gt=0.0)


class MatchingConfig(BaseModel):
    strategy: str = Field("brute_force")

    @field_validator("strategy")
    @classmethod
    def ensure_known_strategy(cls, value: str) -> str:
        value = value.lower()
        if value not in available_matchers():
            raise ValueError(f"Unknown matching strategy '{value}', expected one of {available_matchers()}")
        return value


class AlignmentConfig(BaseModel):
    outer_iterations: int = Field(2, ge=0)
    optimizer: OptimizerConfig = Field(default_factory=OptimizerConfig)
    robust_loss: RobustLossConfig = Field(default_factory=RobustLossConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)


class RenderConfig(BaseModel):
    enabled: bool = True
    resolution: List[int] = Field(default_factory=lambda: [1000, 1000], min_length=2, max_length=2)
    margin_px: int = Field(50, ge=0)
    point_radius_px: int = Field(4, ge=1)
    arrow_thickness_px: int = Field(1, ge=1)
    source_color_bgr: List[int] = Field(default_factory=lambda: [0, 255, 0], min_length=3, max_length=3)
    target_color_bgr: List[int] = Field(default_factory=lambda: [0, 0, 255], min_length=3, max_length=3)
    transformed_color_bgr: List[int] = Field(default_factory=lambda: [64, 128, 255], min_length=3, max_length=3)
    correspondence_color_bgr: List[int] = Field(default_factory=lambda: [255, 0, 0], min_length=3, max_length=3)
    box_color_bgr: List[int] = Field(default_factory=lambda: [131, 7, 140], min_length=3, max_length=3)
    output_dir: Optional[Path] = None

    @property
    def width(self) -> int:
        return self.resolution[0]

    @property
    def height(self) -> int:
        return self.resolution[1]

    @field_validator("output_dir", mode="before")
    @classmethod
    def ensure_output_dir(cls, value: Optional[str | Path]) -> Optional[Path]:
        if value is None:
            return None
        path = Path(value)
        path.mkdir(parents=True, exist_ok=True)
        return path


class LoggingConfig(BaseModel):
    level: str = Field("INFO")
    output: str = Field("stdout")


class RegistrationConfig(BaseModel):
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    alignment: AlignmentConfig = Field(default_factory=AlignmentConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)


def load_config(path: str | Path) -> RegistrationConfig:
    """Load configuration from YAML file."""
    with open(path, "r", encoding="utf-8") as handle:
        raw: Optional[Dict[str, object]] = yaml.safe_load(handle)
    return RegistrationConfig.model_validate(raw or {})
