"""Read-only checks and summaries over completed simulations."""
from soilflow.validation.steady_state import SteadyStateSummary, find_steady_state
from soilflow.validation.mass_balance import water_balance, check_mass_balance

__all__ = [
    "SteadyStateSummary",
    "find_steady_state",
    "water_balance",
    "check_mass_balance",
]
