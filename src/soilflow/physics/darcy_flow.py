"""
Explicit finite-difference model of one-dimensional unsaturated flow.

The column is stored as N+1 rows: row 0 is a surface (ponding) layer and
rows 1..N are soil layers. Each call to ``step`` reads time column t and
writes column t+1:

1. Conductivity k[i] = K(θ[i+1]) for the N interfaces i = 0..N-1
2. Potential ψ[0] = θ[0] (ponding depth), ψ[i] = h[i] + ψ_m(θ[i]) otherwise
3. Darcy flux q[i] = -k[i] (ψ[i+1] - ψ[i]) / dz, positive downward
4. Transfer volume vol[i] = max(0, min(q[i] dt, source supply, receiver room))
5. Moisture update: the surface only loses, interior rows gain from above
   and lose below, the terminal row only gains (deep drainage store)

Every value of ``vol`` leaves exactly one row and enters the row below in the
same step, so the column total is conserved.
"""
import logging
from typing import Optional, List

import numpy as np
import pandas as pd

from soilflow.core.config import SimulationConfig
from soilflow.core.exceptions import ConfigurationError, DimensionError, ErrorContext
from soilflow.core.types import (
    LayerRole,
    StateVariable,
    MoistureVWC,
    Seconds,
    MoistureArray,
    InterfaceArray,
    PotentialArray,
)
from soilflow.physics.soil_hydraulics import (
    campbell_conductivity,
    water_potential,
    darcy_flux,
    limit_transfer_volume,
)
from soilflow.physics.soil_profile import SoilProfile
from soilflow.physics.texture import load_texture_table
from soilflow.validation.steady_state import SteadyStateSummary, find_steady_state

logger = logging.getLogger(__name__)


_MOISTURE_VARIABLES = ("theta",)
_VARIABLES = ("theta", "k", "psi", "flux", "vol")


class DarcyFlowSimulation:
    """
    Time-stepping engine for a single soil column.

    The engine owns all state arrays. They are allocated once by
    ``initialize`` with layer on axis 0 and time on axis 1:

        theta  (N+1, nt+1)  moisture, one snapshot per completed step
        psi    (N+1, nt)    water potential at the start of each step
        k      (N, nt)      conductivity of interface i (row i -> row i+1)
        flux   (N, nt)      Darcy flux through interface i
        vol    (N, nt)      moisture moved through interface i

    Columns that have not been simulated yet hold NaN.

    Example:
        >>> profile = SoilProfile.from_texture_name("loamy_sand", 2.0, 8)
        >>> sim = DarcyFlowSimulation().initialize(profile, 0.3, 10.0, 100)
        >>> sim.run().theta.shape
        (9, 101)
    """

    def __init__(self):
        self._setup_logging()
        self.profile: Optional[SoilProfile] = None
        self.time_step_seconds: float = 0.0
        self.num_steps: int = 0
        self._t = 0
        self._roles: List[LayerRole] = []
        self._h = None
        self._dz = 0.0

        self._theta = None
        self._k = None
        self._psi = None
        self._flux = None
        self._vol = None

    def _setup_logging(self):
        """Configure model-specific logging"""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @classmethod
    def from_config(
        cls,
        config: SimulationConfig,
        table: Optional[pd.DataFrame] = None
    ) -> "DarcyFlowSimulation":
        """Build the profile named by ``config`` and initialize a simulation"""
        if table is None:
            table = load_texture_table(config.texture_table)

        profile = SoilProfile.from_texture_name(
            config.texture,
            depth_m=config.depth_m,
            n_layers=config.n_layers,
            layer_thickness_m=config.layer_thickness_m,
            table=table,
        )
        return cls().initialize(
            profile,
            initial_moisture=config.initial_moisture,
            time_step_seconds=config.time_step_seconds,
            num_steps=config.num_steps,
            surface_moisture=config.surface_moisture,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(
        self,
        profile: SoilProfile,
        initial_moisture: MoistureVWC,
        time_step_seconds: Seconds,
        num_steps: int,
        surface_moisture: Optional[MoistureVWC] = None
    ) -> "DarcyFlowSimulation":
        """
        Allocate the state arrays and seed the initial condition.

        Args:
            profile: Column geometry and texture
            initial_moisture: θ of every soil layer at t=0 (m³/m³)
            time_step_seconds: dt (s)
            num_steps: Number of steps nt to allocate
            surface_moisture: θ of the surface row at t=0; defaults to
                ``initial_moisture``

        Returns:
            self, for chaining

        Raises:
            ConfigurationError: any argument outside its valid range
        """
        context = ErrorContext(component="DarcyFlowSimulation", operation="initialize")

        if not isinstance(profile, SoilProfile):
            raise ConfigurationError("profile must be a SoilProfile", context)

        texture = profile.texture
        if surface_moisture is None:
            surface_moisture = initial_moisture

        if initial_moisture is None or not np.isfinite(initial_moisture):
            raise ConfigurationError(f"initial_moisture must be finite, got {initial_moisture!r}", context)
        if not texture.theta_dry <= initial_moisture <= texture.theta_sat:
            raise ConfigurationError(
                f"initial_moisture {initial_moisture} outside "
                f"[{texture.theta_dry}, {texture.theta_sat}] for texture '{texture.name}'",
                context,
            )
        if not np.isfinite(surface_moisture) or surface_moisture < 0:
            raise ConfigurationError(
                f"surface_moisture must be non-negative, got {surface_moisture!r}", context)
        if time_step_seconds is None or not np.isfinite(time_step_seconds) or time_step_seconds <= 0:
            raise ConfigurationError(
                f"time_step_seconds must be positive, got {time_step_seconds!r}", context)
        if isinstance(num_steps, bool) or not isinstance(num_steps, (int, np.integer)) or num_steps < 1:
            raise ConfigurationError(f"num_steps must be an integer >= 1, got {num_steps!r}", context)

        n_rows = profile.n_rows
        n_interfaces = profile.n_layers

        self.profile = profile
        self.time_step_seconds = float(time_step_seconds)
        self.num_steps = int(num_steps)
        self._t = 0
        self._roles = [profile.role(row) for row in range(n_rows)]

        self._theta = np.full((n_rows, self.num_steps + 1), np.nan)
        self._psi = np.full((n_rows, self.num_steps), np.nan)
        self._k = np.full((n_interfaces, self.num_steps), np.nan)
        self._flux = np.full((n_interfaces, self.num_steps), np.nan)
        self._vol = np.full((n_interfaces, self.num_steps), np.nan)

        self._theta[0, 0] = surface_moisture
        self._theta[1:, 0] = initial_moisture

        # Static per-step inputs
        self._h = profile.gravitational_potential
        self._dz = profile.layer_thickness_m

        self.logger.info(
            "Initialized %s column: %d layers x %.3g m, dt=%.3g s, %d steps, "
            "theta0=%.3g, surface=%.3g",
            texture.name, profile.n_layers, self._dz, self.time_step_seconds,
            self.num_steps, initial_moisture, surface_moisture,
        )
        return self

    def _require_initialized(self, operation: str):
        if self._theta is None:
            raise ConfigurationError(
                "Simulation has not been initialized",
                ErrorContext(component="DarcyFlowSimulation", operation=operation),
            )

    # ------------------------------------------------------------------
    # Time stepping
    # ------------------------------------------------------------------

    def step(self) -> None:
        """Advance one time step: read column t, write column t+1."""
        self._require_initialized("step")
        t = self._t
        if t >= self.num_steps:
            raise DimensionError(
                f"All {self.num_steps} allocated steps have been simulated",
                ErrorContext(component="DarcyFlowSimulation", operation="step", time_step=t),
            )

        texture = self.profile.texture
        theta = self._theta[:, t]

        # Interface i depends on the moisture of the row below it
        k = campbell_conductivity(theta[1:], texture)

        psi = np.empty_like(theta)
        psi[0] = theta[0]
        psi[1:] = water_potential(theta[1:], self._h[1:], texture)

        flux = darcy_flux(k, psi[:-1], psi[1:], self._dz)

        source_available = theta[:-1] - texture.theta_dry
        source_available[0] = theta[0]
        receiver_capacity = texture.theta_sat - theta[1:]
        vol = limit_transfer_volume(flux * self.time_step_seconds, source_available, receiver_capacity)

        self._k[:, t] = k
        self._psi[:, t] = psi
        self._flux[:, t] = flux
        self._vol[:, t] = vol
        self._theta[:, t + 1] = self._update_moisture(theta, vol)
        self._t = t + 1

    def _update_moisture(self, theta: np.ndarray, vol: np.ndarray) -> np.ndarray:
        """Move each transferred volume from its source row to the row below"""
        updated = np.empty_like(theta)
        for row, role in enumerate(self._roles):
            if role is LayerRole.SURFACE:
                updated[row] = theta[row] - vol[row]
            elif role is LayerRole.TERMINAL:
                updated[row] = theta[row] + vol[row - 1]
            else:
                updated[row] = theta[row] + vol[row - 1] - vol[row]
        return updated

    def run(self, num_steps: Optional[int] = None) -> "DarcyFlowSimulation":
        """
        Repeat ``step``.

        Args:
            num_steps: Steps to advance; all remaining steps when None

        Returns:
            self, for chaining
        """
        self._require_initialized("run")
        remaining = self.num_steps - self._t
        if num_steps is None:
            num_steps = remaining
        if isinstance(num_steps, bool) or not isinstance(num_steps, (int, np.integer)):
            raise ConfigurationError(
                f"num_steps must be an integer, got {num_steps!r}",
                ErrorContext(component="DarcyFlowSimulation", operation="run", time_step=self._t),
            )
        if num_steps < 0 or num_steps > remaining:
            raise DimensionError(
                f"Cannot run {num_steps} steps, {remaining} remaining",
                ErrorContext(component="DarcyFlowSimulation", operation="run", time_step=self._t),
            )

        self.logger.info("Running %d steps from step %d", num_steps, self._t)
        for _ in range(num_steps):
            self.step()

        self.logger.info(
            "Completed %d/%d steps; surface theta=%.4g, drainage=%.4g",
            self._t, self.num_steps, self._theta[0, self._t], self.cumulative_drainage(),
        )
        return self

    def reset(self) -> "DarcyFlowSimulation":
        """Rewind to t=0 keeping the initial condition"""
        self._require_initialized("reset")
        return self.initialize(
            self.profile,
            initial_moisture=float(self._theta[1, 0]),
            time_step_seconds=self.time_step_seconds,
            num_steps=self.num_steps,
            surface_moisture=float(self._theta[0, 0]),
        )

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def completed_steps(self) -> int:
        return self._t

    @property
    def is_complete(self) -> bool:
        return self._theta is not None and self._t == self.num_steps

    @staticmethod
    def _read_only(array: np.ndarray) -> np.ndarray:
        view = array.view()
        view.flags.writeable = False
        return view

    @property
    def theta(self) -> MoistureArray:
        """Moisture (N+1, nt+1)"""
        self._require_initialized("theta")
        return self._read_only(self._theta)

    @property
    def k(self) -> InterfaceArray:
        """Conductivity (N, nt), m/s"""
        self._require_initialized("k")
        return self._read_only(self._k)

    @property
    def psi(self) -> PotentialArray:
        """Water potential (N+1, nt), m"""
        self._require_initialized("psi")
        return self._read_only(self._psi)

    @property
    def flux(self) -> InterfaceArray:
        """Darcy flux (N, nt), m/s"""
        self._require_initialized("flux")
        return self._read_only(self._flux)

    @property
    def vol(self) -> InterfaceArray:
        """Transferred moisture (N, nt)"""
        self._require_initialized("vol")
        return self._read_only(self._vol)

    def _array(self, variable: StateVariable) -> np.ndarray:
        if variable not in _VARIABLES:
            raise ValueError(f"Unknown variable '{variable}', expected one of {_VARIABLES}")
        return getattr(self, f"_{variable}")

    def value(self, variable: StateVariable, layer: int, t: int) -> float:
        """
        Bounds-checked read of one array element.

        Raises:
            DimensionError: layer outside the array, or time step not yet
                simulated
        """
        self._require_initialized("value")
        array = self._array(variable)
        context = ErrorContext(component="DarcyFlowSimulation", operation=f"value({variable})",
                               layer=layer, time_step=t)

        n_layers = array.shape[0]
        if not 0 <= layer < n_layers:
            raise DimensionError(f"{variable} layer index {layer} outside [0, {n_layers - 1}]", context)

        last = self._t if variable in _MOISTURE_VARIABLES else self._t - 1
        if not 0 <= t < array.shape[1]:
            raise DimensionError(
                f"{variable} time index {t} outside [0, {array.shape[1] - 1}]", context)
        if t > last:
            raise DimensionError(
                f"{variable} time index {t} has not been simulated "
                f"({self._t} steps completed)", context)

        return float(array[layer, t])

    def moisture(self, layer: int, t: int) -> float:
        return self.value("theta", layer, t)

    def time_axis_seconds(self, variable: StateVariable = "theta") -> np.ndarray:
        """Elapsed time of each completed column of ``variable``"""
        self._require_initialized("time_axis_seconds")
        n = self._t + 1 if variable in _MOISTURE_VARIABLES else self._t
        return np.arange(n) * self.time_step_seconds

    def layer_labels(self, variable: StateVariable = "theta") -> List[str]:
        """Row labels: 'surface', 'layer_1', ... (interfaces use the source row)"""
        self._require_initialized("layer_labels")
        n = self._array(variable).shape[0]
        return ["surface"] + [f"layer_{i}" for i in range(1, n)]

    def to_dataframe(self, variable: StateVariable = "theta") -> pd.DataFrame:
        """
        Completed part of one state array as a time x layer table.

        Index is elapsed seconds; columns are layer labels.
        """
        times = self.time_axis_seconds(variable)
        data = self._array(variable)[:, :len(times)]
        df = pd.DataFrame(data.T, index=pd.Index(times, name="time_s"),
                          columns=self.layer_labels(variable))
        df.columns.name = variable
        return df

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def cumulative_drainage(self) -> float:
        """Total moisture delivered to the terminal row so far"""
        self._require_initialized("cumulative_drainage")
        return float(self._vol[-1, :self._t].sum())

    def steady_state(self, decimals: Optional[int] = None) -> SteadyStateSummary:
        """Steady-state scan over the completed moisture time series"""
        self._require_initialized("steady_state")
        kwargs = {} if decimals is None else {"decimals": decimals}
        return find_steady_state(
            self._theta[:, :self._t + 1],
            time_step_seconds=self.time_step_seconds,
            labels=self.layer_labels("theta"),
            **kwargs,
        )
