"""
Configuration system with validation and environment awareness.
Based on Pydantic Settings for robust configuration management.
"""
import logging
from pathlib import Path
from typing import Optional, Literal, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from pydantic_settings import BaseSettings

from soilflow.core.constants import (
    DEFAULT_TEXTURE,
    DEFAULT_N_LAYERS,
    DEFAULT_LAYER_THICKNESS_M,
    DEFAULT_INITIAL_MOISTURE,
    DEFAULT_SURFACE_MOISTURE,
    DEFAULT_TIME_STEP_S,
    DEFAULT_NUM_STEPS,
    DEFAULT_STEADY_STATE_DECIMALS,
    DEPTH_TOLERANCE_M,
)


class LoggingConfig(BaseModel):
    """Configuration for logging"""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


class SimulationConfig(BaseSettings):
    """Main configuration for a soil column simulation"""

    # Soil column
    texture: str = Field(DEFAULT_TEXTURE, description="Texture name in the parameter table")
    texture_table: Optional[Path] = Field(None, description="Alternative texture table (CSV)")
    n_layers: int = Field(DEFAULT_N_LAYERS, ge=1, description="Number of soil layers")
    layer_thickness_m: float = Field(DEFAULT_LAYER_THICKNESS_M, gt=0, description="Layer thickness dz (m)")
    depth_m: Optional[float] = Field(None, gt=0, description="Column depth (m), defaults to n_layers * dz")

    # Initial condition
    initial_moisture: float = Field(DEFAULT_INITIAL_MOISTURE, ge=0, le=1, description="Initial soil moisture (m³/m³)")
    surface_moisture: float = Field(DEFAULT_SURFACE_MOISTURE, ge=0, description="Initial surface (ponding) moisture")

    # Time stepping
    time_step_seconds: float = Field(DEFAULT_TIME_STEP_S, gt=0)
    num_steps: int = Field(DEFAULT_NUM_STEPS, ge=1)

    # Summary
    steady_state_decimals: int = Field(DEFAULT_STEADY_STATE_DECIMALS, ge=0)

    log: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(
        env_prefix="SOILFLOW_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    @field_validator("texture", mode="before")
    @classmethod
    def normalize_texture(cls, v):
        """Table keys are lower snake case"""
        return str(v).strip().lower().replace(" ", "_").replace("-", "_")

    @model_validator(mode="after")
    def validate_config(self):
        """Cross-field validation"""
        if self.depth_m is None:
            self.depth_m = self.n_layers * self.layer_thickness_m
        elif abs(self.depth_m - self.n_layers * self.layer_thickness_m) > DEPTH_TOLERANCE_M:
            raise ValueError(
                f"depth_m ({self.depth_m}) must equal n_layers * layer_thickness_m "
                f"({self.n_layers} * {self.layer_thickness_m})"
            )
        return self

    @property
    def duration_seconds(self) -> float:
        return self.time_step_seconds * self.num_steps

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "SimulationConfig":
        """Load configuration from YAML file"""
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}

        return cls(**yaml_config)

    def to_yaml(self, yaml_path: Union[str, Path]):
        """Save configuration to YAML file"""
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)


def configure_logging(config: Optional[SimulationConfig] = None):
    """Apply logging settings; meant for scripts, not library code"""
    config = config or get_config()
    logging.basicConfig(
        level=getattr(logging, config.log.log_level),
        format=config.log.log_format,
    )


# Global configuration instance
_config: Optional[SimulationConfig] = None


def get_config(config_path: Optional[Path] = None) -> SimulationConfig:
    """Get or create configuration instance (singleton pattern)"""
    global _config

    if _config is None:
        if config_path and Path(config_path).exists():
            _config = SimulationConfig.from_yaml(config_path)
        else:
            # Try to load from environment
            _config = SimulationConfig()

    return _config


def set_config(config: Optional[SimulationConfig]):
    """Set configuration (useful for testing)"""
    global _config
    _config = config
