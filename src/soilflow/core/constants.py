"""
Physical constants, default values, and system-wide constants.
"""
from pathlib import Path
from typing import Final

# Numerical tolerances
DEPTH_TOLERANCE_M: Final[float] = 1e-6  # |depth - N*dz| allowed mismatch
MASS_BALANCE_TOLERANCE: Final[float] = 1e-9

# Steady-state detection
DEFAULT_STEADY_STATE_DECIMALS: Final[int] = 4

# Default column (8 layers of 25 cm, 36 hours at 10 s)
DEFAULT_TEXTURE: Final[str] = "loamy_sand"
DEFAULT_N_LAYERS: Final[int] = 8
DEFAULT_LAYER_THICKNESS_M: Final[float] = 0.25
DEFAULT_INITIAL_MOISTURE: Final[float] = 0.3  # m³/m³
DEFAULT_SURFACE_MOISTURE: Final[float] = 0.0
DEFAULT_TIME_STEP_S: Final[float] = 10.0
DEFAULT_NUM_STEPS: Final[int] = 12960

# Texture table shipped with the package
TEXTURE_TABLE_PATH: Final[Path] = Path(__file__).parent.parent / "data" / "clapp_hornberger.csv"
TEXTURE_TABLE_COLUMNS: Final[tuple] = (
    "texture", "psi_sat_m", "theta_sat", "k_sat_m_s", "b", "theta_dry"
)

# Unit conversion factors
UNIT_CONVERSIONS: Final[dict] = {
    "seconds_per_hour": 3600.0,
}
