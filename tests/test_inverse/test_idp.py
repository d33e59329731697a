import numpy as np
import pytest

import seirsvbh.config as config
import seirsvbh.inverse as inverse
import seirsvbh.simulation as simulation

TRUE_RATES = {
    "Lambda": 0.0001,
    "theta": 0.0001,
    "omega": 0.2,
    "lambda_": 0.01,
    "nu": 0.01,
    "mu": 0.05,
    "phi": 0.5,
    "alpha": 0.002,
    "beta": np.linspace(0.35, 0.25, 9),
    "gamma": 0.1,
    "rho": 0.02,
    "sigma": 0.1,
    "tau": 0.01,
}
# S, E, I, R, V, B, H on day 1
TRUE_INITIAL_STATE = [9000.0, 50.0, 30.0, 10.0, 500.0, 100.0, 5.0]


@pytest.fixture
def scenario_data():
    """Three reported days with no hospital, vaccination or deaths."""
    return config.ReportedData(
        Lambda=[0.0, 0.0],
        theta=[0.0, 0.0],
        omega=[0.2, 0.2],
        lambda_=[0.0, 0.0],
        nu=[0.0, 0.0],
        mu=[0.0, 0.0],
        phi=[0.0, 0.0],
        A=[10.0, 15.0, 18.0],
        H=[0.0, 0.0, 0.0],
        Rtotal=[0.0, 0.0, 0.0],
        Htotal=[0.0, 0.0, 0.0],
        Vtotal=[0.0, 0.0, 0.0],
        Dtotal=[0.0, 0.0, 0.0],
        N1=1000.0,
        I1=10.0,
        R1=0.0,
    )


@pytest.fixture
def seir_data(scenario_data):
    return scenario_data.replace(
        A=[20.0, 25.0, 28.0],
        Rtotal=[0.0, 2.0, 5.0],
        Dtotal=[0.0, 0.0, 1.0],
    )


@pytest.mark.parametrize("c", [0.0, 0.1, -0.2])
def test_idp_recovers_synthetic_rates(c):
    reported, states = simulation.generate_reported_data(
        TRUE_RATES, TRUE_INITIAL_STATE, days=10, c=c
    )
    solution = inverse.solve_idp(
        1.0, 1.0, c, simulation.psi_quadratic, reported
    )
    assert solution.psi_h == pytest.approx(1.0 - c)
    for name in ("alpha", "gamma", "rho", "sigma", "tau"):
        np.testing.assert_allclose(
            getattr(solution, name), TRUE_RATES[name], rtol=1e-8
        )
    np.testing.assert_allclose(solution.beta, TRUE_RATES["beta"], rtol=1e-8)
    for name in ("S", "E", "I", "R", "V", "B"):
        np.testing.assert_allclose(
            getattr(solution, name), states[name], rtol=1e-8
        )
    assert not [d for d in solution.diagnostics if d.severity == "warning"]


def test_idp_scenario(scenario_data):
    solution = inverse.solve_idp(
        0.5, 1.0, 0.0, simulation.psi_quadratic, scenario_data
    )
    assert solution.beta.shape == (2,)
    assert solution.gamma.shape == (2,)
    assert solution.S.shape == (3,)
    assert np.all(np.isfinite(solution.beta)) and np.all(solution.beta >= 0)
    assert np.all(np.isfinite(solution.gamma)) and np.all(solution.gamma >= 0)
    np.testing.assert_allclose(
        solution.beta,
        [1000.0 * 5.0 / 990.0 / 10.0, 1000.0 * 3.0 / 985.0 / 10.5],
    )
    np.testing.assert_allclose(solution.I, [10.0, 10.0, 11.0])
    np.testing.assert_allclose(solution.E, [0.0, 5.0, 7.0])
    np.testing.assert_allclose(solution.N, 1000.0)
    # nothing leaves an empty hospital, rates are 0 instead of NaN
    np.testing.assert_array_equal(solution.sigma, [0.0, 0.0])
    np.testing.assert_array_equal(solution.tau, [0.0, 0.0])
    assert {d.severity for d in solution.diagnostics} == {"info"}


def test_idp_unguarded_empty_hospital(scenario_data):
    solution = inverse.solve_idp(
        0.5,
        1.0,
        0.0,
        simulation.psi_quadratic,
        scenario_data,
        config.IDPParams(guard_empty_compartments=False),
    )
    assert np.all(np.isnan(solution.sigma))
    assert np.all(np.isnan(solution.tau))
    messages = [d.message for d in solution.diagnostics if d.severity == "warning"]
    assert any(m.startswith("sigma") for m in messages)


@pytest.mark.parametrize("xi", [0.0, 1.0])
def test_idp_xi_boundaries_finite(scenario_data, xi):
    solution = inverse.solve_idp(
        xi, 1.0, 0.0, simulation.psi_quadratic, scenario_data
    )
    for name in ("alpha", "beta", "gamma", "rho", "sigma", "tau"):
        assert np.all(np.isfinite(getattr(solution, name)))


def test_idp_invalid_arguments(scenario_data):
    with pytest.raises(ValueError):
        inverse.solve_idp(1.5, 1.0, 0.0, simulation.psi_quadratic, scenario_data)
    with pytest.raises(ValueError):
        inverse.solve_idp(0.5, 0.0, 0.0, simulation.psi_quadratic, scenario_data)
    with pytest.raises(config.AlignmentError):
        inverse.solve_idp(
            0.5,
            1.0,
            0.0,
            simulation.psi_quadratic,
            scenario_data.replace(A=[10.0]),
        )


def test_idp_aligns_to_shortest_series(scenario_data):
    solution = inverse.solve_idp(
        0.5,
        1.0,
        0.0,
        simulation.psi_quadratic,
        scenario_data.replace(Vtotal=[0.0, 0.0]),
    )
    assert solution.beta.shape == (1,)
    assert solution.S.shape == (2,)


def test_idp_active_cases_split_into_exposed_and_infectious(scenario_data):
    reported = scenario_data.replace(H=[1.0, 2.0, 2.0], Htotal=[1.0, 2.0, 3.0])
    solution = inverse.solve_idp(
        0.5, 1.0, 0.0, simulation.psi_quadratic, reported
    )
    np.testing.assert_allclose(solution.E + solution.I, reported.G)
    np.testing.assert_allclose(reported.G, [9.0, 13.0, 16.0])


def test_idp_warns_on_non_positive_step(scenario_data):
    solution = inverse.solve_idp(
        0.5, 1.0, 1.0, simulation.psi_quadratic, scenario_data
    )
    assert solution.diagnostics[0].severity == "warning"
    assert "not positive" in solution.diagnostics[0].message


def test_idp_dataframes(scenario_data):
    solution = inverse.solve_idp(
        0.5, 1.0, 0.0, simulation.psi_quadratic, scenario_data
    )
    parameters = solution.parameters_dataframe()
    assert list(parameters.columns) == [
        "alpha",
        "beta",
        "gamma",
        "rho",
        "sigma",
        "tau",
    ]
    assert len(parameters) == 2
    assert len(solution.states_dataframe()) == 3


def test_idp_seir(seir_data):
    solution = inverse.solve_idp_seir(seir_data)
    np.testing.assert_allclose(solution.R, [0.0, 2.0, 6.0])
    np.testing.assert_allclose(solution.S, [980.0, 973.0, 966.0])
    np.testing.assert_allclose(solution.I, [10.0, 10.0, 9.0])
    np.testing.assert_allclose(solution.E, [10.0, 15.0, 19.0])
    np.testing.assert_allclose(
        solution.beta, [7000.0 / 980.0 / 10.0, 7000.0 / 973.0 / 10.0]
    )
    np.testing.assert_allclose(solution.gamma, [0.2, 0.4])
    np.testing.assert_array_equal(solution.omega, [0.2, 0.2])
    assert solution.N == 1000.0
    assert not solution.diagnostics


def test_idp_seir_zero_infectious(seir_data):
    solution = inverse.solve_idp_seir(seir_data.replace(I1=0.0))
    assert np.isnan(solution.beta[0]) and np.isnan(solution.gamma[0])
    assert any("I(k) = 0" in d.message for d in solution.diagnostics)


def test_idp_seir_length_mismatch(seir_data):
    with pytest.raises(config.LengthMismatchError):
        inverse.solve_idp_seir(seir_data.replace(Rtotal=[0.0, 2.0]))


def test_idp_to_dataframe(scenario_data, seir_data):
    frame = inverse.solve_idp(
        0.5, 1.0, 0.0, simulation.psi_quadratic, scenario_data
    ).to_dataframe()
    assert frame.shape == (3, 13)
    assert np.isnan(frame.loc[3, "beta"])
    frame = inverse.solve_idp_seir(seir_data).to_dataframe()
    assert list(frame.columns) == ["S", "E", "I", "R", "beta", "gamma", "omega"]
