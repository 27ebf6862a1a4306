"""
Type definitions and type aliases for soilflow.
"""
from enum import Enum
from typing import Literal

import numpy as np
from typing_extensions import TypeAlias


# Type aliases for clarity
MoistureVWC: TypeAlias = float  # m³/m³
Seconds: TypeAlias = float

# Array types. Layer on axis 0, time on axis 1.
MoistureArray: TypeAlias = np.ndarray  # Shape: (n_layers + 1, n_steps + 1)
InterfaceArray: TypeAlias = np.ndarray  # Shape: (n_layers, n_steps)
PotentialArray: TypeAlias = np.ndarray  # Shape: (n_layers + 1, n_steps)

StateVariable = Literal["theta", "k", "psi", "flux", "vol"]


class LayerRole(str, Enum):
    """Role a storage row plays in the moisture update"""
    SURFACE = "surface"  # row 0, ponding layer above ground
    INTERIOR = "interior"  # rows 1..N-1, gain from above, lose below
    TERMINAL = "terminal"  # row N, only gains (deep drainage store)

    @classmethod
    def of(cls, row: int, n_layers: int) -> "LayerRole":
        if row == 0:
            return cls.SURFACE
        if row == n_layers:
            return cls.TERMINAL
        return cls.INTERIOR
