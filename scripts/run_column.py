#!/usr/bin/env python
"""
Run a soil column simulation and write the results to CSV.

Settings come from a YAML file (optional) and SOILFLOW_* environment
variables; command line flags override both.

Run from the project root with:
    python scripts/run_column.py --texture loamy_sand --surface-moisture 0.3
"""
import argparse
import json
import logging
from pathlib import Path

from soilflow.core.config import SimulationConfig, configure_logging
from soilflow.core.constants import UNIT_CONVERSIONS
from soilflow.physics import DarcyFlowSimulation
from soilflow.validation import check_mass_balance, water_balance

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Explicit 1D soil moisture flow")
    parser.add_argument("--config", type=Path, help="YAML settings file")
    parser.add_argument("--texture", help="Texture name, e.g. loamy_sand")
    parser.add_argument("--n-layers", type=int)
    parser.add_argument("--dz", type=float, help="Layer thickness (m)")
    parser.add_argument("--initial-moisture", type=float)
    parser.add_argument("--surface-moisture", type=float)
    parser.add_argument("--dt", type=float, help="Time step (s)")
    parser.add_argument("--steps", type=int)
    parser.add_argument("--output-dir", type=Path, default=Path("results"))
    return parser.parse_args()


def build_config(args) -> SimulationConfig:
    base = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    overrides = {
        "texture": args.texture,
        "n_layers": args.n_layers,
        "layer_thickness_m": args.dz,
        "initial_moisture": args.initial_moisture,
        "surface_moisture": args.surface_moisture,
        "time_step_seconds": args.dt,
        "num_steps": args.steps,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if not overrides:
        return base

    settings = base.model_dump()
    settings.update(overrides)
    if "n_layers" in overrides or "layer_thickness_m" in overrides:
        settings["depth_m"] = None
    return SimulationConfig(**settings)


def main():
    args = parse_args()
    config = build_config(args)
    configure_logging(config)

    simulation = DarcyFlowSimulation.from_config(config)
    logger.info("Column: %s", simulation.profile.describe())
    simulation.run()
    max_error = check_mass_balance(simulation)
    summary = simulation.steady_state(config.steady_state_decimals)

    output_dir = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    for variable in ("theta", "k", "psi", "flux", "vol"):
        simulation.to_dataframe(variable).to_csv(output_dir / f"{variable}.csv")
    water_balance(simulation).to_csv(output_dir / "water_balance.csv")
    config.to_yaml(output_dir / "config.yaml")

    with open(output_dir / "profile.json", "w", encoding="utf-8") as f:
        json.dump(simulation.profile.describe(), f, indent=2)
    with open(output_dir / "steady_state.json", "w", encoding="utf-8") as f:
        json.dump(summary.to_dict(), f, indent=2)

    logger.info("Mass balance max error: %.3e", max_error)
    if summary.steady_step is not None:
        logger.info("Steady state at step %d (%.1f h)",
                    summary.steady_step,
                    summary.steady_time_seconds / UNIT_CONVERSIONS["seconds_per_hour"])
    if not summary.converged:
        logger.info("Steady state not reached for: %s", summary.unconverged_layers)
    logger.info("Results written to %s", output_dir)


if __name__ == "__main__":
    main()
