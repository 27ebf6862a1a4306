"""
Soil texture parameters for the Campbell / Clapp-Hornberger hydraulic model.

The parameter table is a row-per-texture CSV with columns:
    texture     texture name (lower snake case)
    psi_sat_m   saturated (air-entry) suction magnitude (m of water)
    theta_sat   saturated volumetric moisture (m³/m³)
    k_sat_m_s   saturated hydraulic conductivity (m/s)
    b           Clapp-Hornberger pore size exponent
    theta_dry   dry-soil moisture threshold (m³/m³)

References:
- Clapp, R.B. and Hornberger, G.M. (1978). Empirical equations for some soil
  hydraulic properties. Water Resources Research, 14(4):601-604.
- Rawls, W.J., Brakensiek, D.L. and Saxton, K.E. (1982). Estimation of soil
  water properties. Transactions of the ASAE, 25(5):1316-1320.
"""
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
import pandas as pd

from soilflow.core.constants import TEXTURE_TABLE_PATH, TEXTURE_TABLE_COLUMNS
from soilflow.core.exceptions import ConfigurationError, ErrorContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextureParameters:
    """
    Hydraulic parameters of one soil texture.

    Units:
        - k_sat: m/s
        - psi_sat: m of water, stored as a positive suction magnitude
        - theta_sat, theta_dry: m³/m³
        - b: dimensionless
    """
    name: str
    k_sat: float
    theta_sat: float
    b: float
    psi_sat: float
    theta_dry: float

    def __post_init__(self) -> None:
        context = ErrorContext(component="TextureParameters", operation="validate",
                               details={"texture": self.name})
        for field_name in ("k_sat", "theta_sat", "b", "psi_sat", "theta_dry"):
            value = getattr(self, field_name)
            if value is None or not np.isfinite(value):
                raise ConfigurationError(
                    f"TextureParameters.{field_name} must be finite, got {value!r}", context)
            if value <= 0:
                raise ConfigurationError(
                    f"TextureParameters.{field_name} must be positive, got {value}", context)

        if self.theta_sat > 1:
            raise ConfigurationError(
                f"theta_sat ({self.theta_sat}) cannot exceed 1", context)

        if self.theta_dry >= self.theta_sat:
            raise ConfigurationError(
                f"theta_dry ({self.theta_dry}) must be below theta_sat ({self.theta_sat})",
                context,
            )

    @property
    def conductivity_exponent(self) -> float:
        """Exponent 2b + 3 of the Campbell K(θ) curve"""
        return 2 * self.b + 3


def normalize_texture_name(name: str) -> str:
    """Map 'Loamy Sand' / 'loamy-sand' onto the table key 'loamy_sand'"""
    return str(name).strip().lower().replace(" ", "_").replace("-", "_")


@lru_cache(maxsize=8)
def _read_table(path: Path) -> pd.DataFrame:
    table = pd.read_csv(path, skipinitialspace=True)
    missing = [c for c in TEXTURE_TABLE_COLUMNS if c not in table.columns]
    if missing:
        raise ConfigurationError(
            f"Texture table {path} is missing columns: {missing}",
            ErrorContext(component="texture", operation="load_texture_table"),
        )
    table["texture"] = table["texture"].map(normalize_texture_name)
    if table["texture"].duplicated().any():
        dupes = table.loc[table["texture"].duplicated(), "texture"].tolist()
        raise ConfigurationError(
            f"Texture table {path} has duplicate textures: {dupes}",
            ErrorContext(component="texture", operation="load_texture_table"),
        )
    return table.set_index("texture")


def load_texture_table(path: Optional[Union[str, Path]] = None) -> pd.DataFrame:
    """
    Load the texture parameter table.

    Args:
        path: CSV file; the bundled Clapp & Hornberger table when None

    Returns:
        DataFrame indexed by texture name
    """
    path = Path(path) if path is not None else TEXTURE_TABLE_PATH
    if not path.exists():
        raise ConfigurationError(
            f"Texture table not found: {path}",
            ErrorContext(component="texture", operation="load_texture_table"),
        )
    logger.debug("Loading texture table from %s", path)
    return _read_table(path.resolve()).copy()


def available_textures(table: Optional[pd.DataFrame] = None) -> List[str]:
    """Texture names present in the table"""
    if table is None:
        table = load_texture_table()
    return list(table.index)


def get_texture(name: str, table: Optional[pd.DataFrame] = None) -> TextureParameters:
    """
    Select one texture row and map it onto TextureParameters.

    Raises:
        ConfigurationError: unknown texture name or invalid row values
    """
    if table is None:
        table = load_texture_table()

    key = normalize_texture_name(name)
    if key != name:
        logger.debug("Texture name '%s' normalized to '%s'", name, key)

    if key not in table.index:
        raise ConfigurationError(
            f"Unknown texture '{name}'. Available: {', '.join(table.index)}",
            ErrorContext(component="texture", operation="get_texture"),
        )

    row = table.loc[key]
    return TextureParameters(
        name=key,
        k_sat=float(row["k_sat_m_s"]),
        theta_sat=float(row["theta_sat"]),
        b=float(row["b"]),
        psi_sat=float(row["psi_sat_m"]),
        theta_dry=float(row["theta_dry"]),
    )
