import numpy as np
import pytest
from diffrax import Dopri5, Tsit5  # type: ignore
from pydantic import ValidationError

import seirsvbh.config as config


def test_solver_params_defaults():
    params = config.SolverParams()
    assert params.ode_solver_rel_tolerance == 1e-5
    assert params.ode_solver_abs_tolerance == 1e-6
    assert params.constant_step_size == 0
    assert params.cache_key() == config.SolverParams().cache_key()
    assert (
        params.cache_key()
        != config.SolverParams(solver_method=Tsit5()).cache_key()
    )


def test_solver_params_cache_key_tracks_solver_settings():
    default = config.SolverParams(solver_method=Dopri5())
    tuned = config.SolverParams(solver_method=Dopri5(scan_kind="bounded"))
    assert default.cache_key() == config.SolverParams(
        solver_method=Dopri5()
    ).cache_key()
    assert default.cache_key() != tuned.cache_key()
    assert hash(default.cache_key()) == hash(
        config.SolverParams(solver_method=Dopri5()).cache_key()
    )


def test_solver_params_invalid():
    with pytest.raises(ValidationError):
        config.SolverParams(ode_solver_rel_tolerance=0)
    with pytest.raises(ValidationError):
        config.SolverParams(constant_step_size=-0.1)


def test_check_h():
    config.check_h(1.0)
    for h in [0.5, 2.0, 0.999999]:
        with pytest.raises(ValueError):
            config.check_h(h)


@pytest.mark.parametrize(
    "xi_list, c_list",
    [
        ([0.0], [0.0, 0.1]),  # too short to define a step
        ([0.0, 1.5], [0.0, 0.1]),  # xi out of range
        ([0.0, 1.0], [-0.3, 0.1]),  # c out of range
        ([1.0, 0.0], [0.0, 0.1]),  # negative step
        ([0.5, 0.5], [0.0, 0.1]),  # zero step
        (["a", "b"], [0.0, 0.1]),  # not numeric
    ],
)
def test_check_input_params_invalid(xi_list, c_list):
    with pytest.raises(ValueError):
        config.check_input_params(xi_list, c_list)


def test_check_input_params_valid():
    config.check_input_params([0.0, 0.5, 1.0], [-0.25, 0.0, 0.25])


def test_colon_range():
    values = config.colon_range(0.0, 0.1, 1.0)
    assert len(values) == 11
    assert values[0] == 0.0 and values[-1] == 1.0
    values = config.colon_range(-0.25, 0.05, 0.25)
    assert len(values) == 11
    assert max(values) <= 0.25
    with pytest.raises(ValueError):
        config.colon_range(0.0, 0.0, 1.0)


def test_grid_config_validation():
    grid = config.GridConfig(xi_list=[0.0, 1.0], c_list=[-0.1, 0.1])
    assert grid.shape == (2, 2)
    assert grid.h == 1.0
    assert grid.orientation == "auto"
    with pytest.raises(ValidationError):
        config.GridConfig(xi_list=[0.0, 1.0], c_list=[-0.1, 0.1], h=0.5)
    with pytest.raises(ValidationError):
        config.GridConfig(xi_list=[0.0, 2.0], c_list=[-0.1, 0.1])
    with pytest.raises(ValidationError, match="less than or equal to 0.25"):
        config.GridConfig(xi_list=[0.0, 1.0], c_list=[0.1, 0.3])
    with pytest.raises(ValidationError):
        config.GridConfig(
            xi_list=[0.0, 1.0], c_list=[-0.1, 0.1], orientation="diagonal"
        )
    with pytest.raises(ValidationError):
        config.GridConfig(xi_list=[0.0, 1.0], c_list=[-0.1, 0.1], max_workers=-1)


def test_grid_config_from_steps():
    grid = config.GridConfig.from_steps(0.5, 0.25, max_workers=0)
    np.testing.assert_allclose(grid.xi_list, [0.0, 0.5, 1.0])
    np.testing.assert_allclose(grid.c_list, [-0.25, 0.0, 0.25])
    assert grid.max_workers == 0


def test_idp_params_default_guard():
    assert config.IDPParams().guard_empty_compartments


def test_error_hierarchy():
    assert issubclass(config.AlignmentError, config.SeirsvbhError)
    assert issubclass(config.AlignmentError, ValueError)
    assert issubclass(config.LengthMismatchError, ValueError)
    assert issubclass(config.ArtifactError, KeyError)
