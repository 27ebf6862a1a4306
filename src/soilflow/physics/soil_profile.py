"""
Soil profile configuration: column geometry plus texture parameters.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from soilflow.core.constants import DEPTH_TOLERANCE_M
from soilflow.core.exceptions import ConfigurationError, ErrorContext
from soilflow.core.types import LayerRole
from soilflow.physics.texture import TextureParameters, get_texture

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SoilProfile:
    """
    Immutable description of a discretized soil column.

    Storage row 0 is the surface (ponding) layer, rows 1..N are the soil
    layers. Row i sits at depth i × dz, so the surface row is at 0 and the
    deepest row at the column depth.
    """
    depth_m: float
    n_layers: int
    layer_thickness_m: float
    texture: TextureParameters

    def __post_init__(self) -> None:
        context = ErrorContext(component="SoilProfile", operation="validate")

        if isinstance(self.n_layers, bool) or not isinstance(self.n_layers, (int, np.integer)):
            raise ConfigurationError(f"n_layers must be an integer, got {self.n_layers!r}", context)
        if self.n_layers < 1:
            raise ConfigurationError(f"n_layers must be at least 1, got {self.n_layers}", context)

        for field_name in ("depth_m", "layer_thickness_m"):
            value = getattr(self, field_name)
            if value is None or not np.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{field_name} must be positive, got {value!r}", context)

        if not isinstance(self.texture, TextureParameters):
            raise ConfigurationError("texture must be TextureParameters", context)

        expected = self.n_layers * self.layer_thickness_m
        if abs(self.depth_m - expected) > DEPTH_TOLERANCE_M:
            raise ConfigurationError(
                f"Inconsistent geometry: depth {self.depth_m} m != "
                f"{self.n_layers} layers x {self.layer_thickness_m} m",
                context,
            )

    @classmethod
    def from_texture_name(
        cls,
        texture: str,
        depth_m: float,
        n_layers: int,
        layer_thickness_m: Optional[float] = None,
        table: Optional[pd.DataFrame] = None,
    ) -> "SoilProfile":
        """
        Build a profile from a row of the texture table.

        Args:
            texture: Texture name, e.g. "loamy_sand"
            depth_m: Column depth (m)
            n_layers: Number of soil layers
            layer_thickness_m: dz; depth / n_layers when None
            table: Texture table; the bundled table when None
        """
        if layer_thickness_m is None:
            if not n_layers or n_layers < 1:
                raise ConfigurationError(
                    f"n_layers must be at least 1, got {n_layers}",
                    ErrorContext(component="SoilProfile", operation="from_texture_name"),
                )
            layer_thickness_m = depth_m / n_layers

        return cls(
            depth_m=depth_m,
            n_layers=n_layers,
            layer_thickness_m=layer_thickness_m,
            texture=get_texture(texture, table),
        )

    @property
    def n_rows(self) -> int:
        """Storage rows including the surface row"""
        return self.n_layers + 1

    @property
    def layer_depths_m(self) -> np.ndarray:
        """Depth of each storage row (m), row 0 at the surface"""
        return np.arange(self.n_rows, dtype=float) * self.layer_thickness_m

    @property
    def gravitational_potential(self) -> np.ndarray:
        """Elevation head h[0..N] (m), negative below the surface"""
        return -self.layer_depths_m

    def role(self, row: int) -> LayerRole:
        return LayerRole.of(row, self.n_layers)

    def describe(self) -> dict:
        return {
            "texture": self.texture.name,
            "depth_m": self.depth_m,
            "n_layers": self.n_layers,
            "layer_thickness_m": self.layer_thickness_m,
            "k_sat_m_s": self.texture.k_sat,
            "theta_sat": self.texture.theta_sat,
            "b": self.texture.b,
            "psi_sat_m": self.texture.psi_sat,
            "theta_dry": self.texture.theta_dry,
        }
