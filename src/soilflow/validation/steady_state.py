"""
Steady-state detection over a completed moisture time series.

A layer reaches steady state at the earliest time index whose moisture,
rounded to a fixed number of decimals, equals the rounded final value. A
layer whose only match is the final index has not converged.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from soilflow.core.constants import DEFAULT_STEADY_STATE_DECIMALS
from soilflow.core.exceptions import DimensionError, ErrorContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SteadyStateSummary:
    """Result of a steady-state scan"""
    layer_steps: pd.Series  # Int64, <NA> for layers that never matched early
    steady_step: Optional[int]
    steady_time_seconds: Optional[float]
    decimals: int
    final_step: int

    @property
    def converged(self) -> bool:
        """True when every layer matched its final value before the last step"""
        return not self.layer_steps.isna().any()

    @property
    def unconverged_layers(self) -> List[str]:
        return [str(label) for label in self.layer_steps.index[self.layer_steps.isna()]]

    def to_dict(self) -> Dict:
        return {
            "layer_steps": {
                str(k): (None if pd.isna(v) else int(v)) for k, v in self.layer_steps.items()
            },
            "steady_step": self.steady_step,
            "steady_time_seconds": self.steady_time_seconds,
            "decimals": self.decimals,
            "final_step": self.final_step,
        }


def find_steady_state(
    theta: np.ndarray,
    time_step_seconds: Optional[float] = None,
    decimals: int = DEFAULT_STEADY_STATE_DECIMALS,
    labels: Optional[Sequence[str]] = None
) -> SteadyStateSummary:
    """
    Scan a layer x time moisture array for the steady-state index of each layer.

    Args:
        theta: Moisture array, layer on axis 0, time on axis 1
        time_step_seconds: dt, used to express the overall index in seconds
        decimals: Rounding precision used for the equality test
        labels: Layer labels; row numbers when None

    Returns:
        SteadyStateSummary. The overall steady step is the maximum over
        the layers that converged, or None if none did.
    """
    theta = np.asarray(theta, dtype=float)
    if theta.ndim != 2 or theta.shape[1] == 0:
        raise DimensionError(
            f"Expected a non-empty (layer, time) array, got shape {theta.shape}",
            ErrorContext(component="steady_state", operation="find_steady_state"),
        )
    if np.isnan(theta).any():
        raise DimensionError(
            "Moisture series contains unsimulated (NaN) entries",
            ErrorContext(component="steady_state", operation="find_steady_state"),
        )
    if labels is None:
        labels = list(range(theta.shape[0]))

    final_step = theta.shape[1] - 1
    rounded = np.round(theta, decimals)
    matches = rounded == rounded[:, -1:]

    first_match = matches.argmax(axis=1)

    steps = [None if idx >= final_step else int(idx) for idx in first_match]
    layer_steps = pd.Series(steps, index=list(labels), dtype="Int64", name="steady_step")

    converged_steps = [step for step in steps if step is not None]
    steady_step = max(converged_steps) if converged_steps else None
    if len(converged_steps) < len(steps):
        logger.warning(
            "Steady state not reached before step %d for layers: %s",
            final_step,
            [str(label) for label, step in zip(labels, steps) if step is None],
        )

    steady_time = None
    if steady_step is not None and time_step_seconds is not None:
        steady_time = steady_step * float(time_step_seconds)

    return SteadyStateSummary(
        layer_steps=layer_steps,
        steady_step=steady_step,
        steady_time_seconds=steady_time,
        decimals=decimals,
        final_step=final_step,
    )
