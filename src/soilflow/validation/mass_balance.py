"""
Mass balance validation for a column simulation.

Rebuilds, at every completed time index, the moisture held by the surface
and the draining soil rows plus the cumulative drainage delivered to the
terminal row, and compares it with what the column held at t=0.
"""
import logging
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from soilflow.core.constants import MASS_BALANCE_TOLERANCE
from soilflow.core.exceptions import WaterBalanceError, ErrorContext

if TYPE_CHECKING:
    from soilflow.physics.darcy_flow import DarcyFlowSimulation

logger = logging.getLogger(__name__)


def water_balance(simulation: "DarcyFlowSimulation") -> pd.DataFrame:
    """
    Water balance table of a (partially) completed run.

    Columns:
        surface_storage  moisture in the surface row
        soil_storage     moisture in soil rows 1..N-1
        drainage         cumulative moisture delivered to the terminal row
        total            surface + soil + drainage
        balance_error    total minus the t=0 total

    Index is the time step.
    """
    n = simulation.completed_steps
    theta = simulation.theta[:, :n + 1]
    vol = simulation.vol[:, :n]

    surface = theta[0]
    soil = theta[1:-1].sum(axis=0)
    drainage = np.concatenate([[0.0], np.cumsum(vol[-1])])
    total = surface + soil + drainage

    df = pd.DataFrame(
        {
            "surface_storage": surface,
            "soil_storage": soil,
            "drainage": drainage,
            "total": total,
            "balance_error": total - total[0],
        },
        index=pd.RangeIndex(n + 1, name="step"),
    )
    return df


def check_mass_balance(
    simulation: "DarcyFlowSimulation",
    tolerance: float = MASS_BALANCE_TOLERANCE
) -> float:
    """
    Verify conservation over the completed run.

    Returns:
        Largest absolute balance error

    Raises:
        WaterBalanceError: error above ``tolerance`` at any step
    """
    balance = water_balance(simulation)
    errors = balance["balance_error"].abs()
    max_error = float(errors.max())

    if max_error > tolerance:
        worst = int(errors.idxmax())
        raise WaterBalanceError(
            f"Mass balance error {max_error:.3e} exceeds tolerance {tolerance:.1e}",
            ErrorContext(component="mass_balance", operation="check_mass_balance",
                         time_step=worst),
        )

    logger.debug("Mass balance closed, max error %.3e", max_error)
    return max_error
