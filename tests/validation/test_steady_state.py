"""
Tests for the steady-state scan.
"""
import numpy as np
import pandas as pd
import pytest

from soilflow.core.exceptions import DimensionError
from soilflow.physics.darcy_flow import DarcyFlowSimulation
from soilflow.physics.soil_profile import SoilProfile
from soilflow.validation.steady_state import find_steady_state


def test_layer_indices_and_overall_maximum():
    theta = np.array([
        [0.30, 0.20, 0.10, 0.10, 0.10],
        [0.30, 0.25, 0.22, 0.21, 0.21],
        [0.10, 0.10, 0.10, 0.10, 0.10],
    ])
    summary = find_steady_state(theta, time_step_seconds=10.0, decimals=2)

    assert summary.layer_steps.tolist() == [2, 3, 0]
    assert summary.steady_step == 3
    assert summary.steady_time_seconds == pytest.approx(30.0)
    assert summary.converged
    assert summary.final_step == 4


def test_earliest_match_counts_even_if_value_moves_again():
    # Reaches the final value at index 1, leaves it, then returns
    theta = np.array([[0.30, 0.20, 0.25, 0.20, 0.20]])
    summary = find_steady_state(theta, decimals=2)

    assert summary.layer_steps.iloc[0] == 1
    assert summary.steady_step == 1


def test_rounding_tolerance():
    theta = np.array([[0.3, 0.20004, 0.20001, 0.2]])

    assert find_steady_state(theta, decimals=4).layer_steps.iloc[0] == 1
    assert find_steady_state(theta, decimals=6).layer_steps.iloc[0] is pd.NA


def test_not_converged():
    theta = np.array([
        [0.30, 0.29, 0.28, 0.27],
        [0.10, 0.11, 0.12, 0.13],
    ])
    summary = find_steady_state(theta, time_step_seconds=10.0, labels=["a", "b"], decimals=3)

    assert summary.steady_step is None
    assert summary.steady_time_seconds is None
    assert not summary.converged
    assert summary.unconverged_layers == ["a", "b"]


def test_overall_step_is_maximum_over_converged_layers():
    theta = np.array([
        [0.30, 0.29, 0.28, 0.27],
        [0.20, 0.10, 0.10, 0.10],
        [0.40, 0.35, 0.30, 0.30],
    ])
    summary = find_steady_state(theta, time_step_seconds=10.0, labels=["a", "b", "c"], decimals=3)

    assert summary.steady_step == 2
    assert summary.steady_time_seconds == pytest.approx(20.0)
    assert not summary.converged
    assert summary.unconverged_layers == ["a"]
    assert summary.to_dict()["layer_steps"] == {"a": None, "b": 1, "c": 2}


def test_rejects_nan_and_bad_shapes():
    with pytest.raises(DimensionError):
        find_steady_state(np.array([[0.3, np.nan]]))
    with pytest.raises(DimensionError):
        find_steady_state(np.array([0.3, 0.2]))


def test_simulation_query_is_idempotent():
    profile = SoilProfile.from_texture_name("sand", depth_m=1.0, n_layers=4)
    sim = DarcyFlowSimulation().initialize(profile, 0.2, 60.0, 2000, surface_moisture=0.05).run()

    first = sim.steady_state(decimals=3)
    second = sim.steady_state(decimals=3)

    assert first.layer_steps.equals(second.layer_steps)
    assert first.steady_step == second.steady_step
    assert list(first.layer_steps.index) == ["surface", "layer_1", "layer_2", "layer_3", "layer_4"]


def test_simulation_query_covers_completed_steps_only():
    profile = SoilProfile.from_texture_name("sand", depth_m=1.0, n_layers=4)
    sim = DarcyFlowSimulation().initialize(profile, 0.2, 60.0, 100).run(10)

    assert sim.steady_state().final_step == 10
