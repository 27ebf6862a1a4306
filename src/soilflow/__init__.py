"""
soilflow: explicit one-dimensional unsaturated soil-moisture flow.
"""
from soilflow.core.config import SimulationConfig, get_config, set_config
from soilflow.core.exceptions import (
    SoilflowError,
    ConfigurationError,
    DimensionError,
    WaterBalanceError,
)
from soilflow.physics import (
    DarcyFlowSimulation,
    SoilProfile,
    TextureParameters,
    get_texture,
    load_texture_table,
)
from soilflow.validation import find_steady_state, SteadyStateSummary, water_balance

__version__ = "0.1.0"

__all__ = [
    "SimulationConfig",
    "get_config",
    "set_config",
    "SoilflowError",
    "ConfigurationError",
    "DimensionError",
    "WaterBalanceError",
    "DarcyFlowSimulation",
    "SoilProfile",
    "TextureParameters",
    "get_texture",
    "load_texture_table",
    "find_steady_state",
    "SteadyStateSummary",
    "water_balance",
]
