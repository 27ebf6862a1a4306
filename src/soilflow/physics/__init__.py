"""Physics modules for the soil column model."""
from soilflow.physics.texture import (
    TextureParameters,
    get_texture,
    load_texture_table,
    available_textures,
)
from soilflow.physics.soil_profile import SoilProfile
from soilflow.physics.darcy_flow import DarcyFlowSimulation

__all__ = [
    "TextureParameters",
    "get_texture",
    "load_texture_table",
    "available_textures",
    "SoilProfile",
    "DarcyFlowSimulation",
]
