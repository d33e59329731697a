import numpy as np
import pytest

import seirsvbh.analysis as analysis
import seirsvbh.config as config
import seirsvbh.inverse as inverse
import seirsvbh.simulation as simulation


@pytest.fixture
def scenario_data():
    return config.ReportedData(
        Lambda=[0.0, 0.0],
        theta=[0.0, 0.0],
        omega=[0.2, 0.2],
        lambda_=[0.0, 0.0],
        nu=[0.0, 0.0],
        mu=[0.0, 0.0],
        phi=[0.0, 0.0],
        A=[10.0, 15.0, 18.0],
        H=[1.0, 1.0, 1.0],
        Rtotal=[1.0, 2.0, 3.0],
        Htotal=[1.0, 1.5, 2.0],
        Vtotal=[1.0, 1.0, 1.0],
        Dtotal=[1.0, 1.0, 1.2],
        N1=1000.0,
        I1=8.0,
        R1=0.0,
    )


def test_relative_errors_non_negative(scenario_data):
    for xi in [0.0, 0.5, 1.0]:
        rel_l2, rel_linf = analysis.compute_relative_errors(
            xi, 0.0, 1.0, simulation.psi_quadratic, scenario_data
        )
        assert np.isfinite(rel_l2) and rel_l2 >= 0
        assert np.isfinite(rel_linf) and rel_linf >= 0


def test_relative_errors_breakdown_sums(scenario_data):
    result = analysis.evaluate_relative_errors(
        0.5, 0.0, 1.0, simulation.psi_quadratic, scenario_data
    )
    assert list(result.breakdown.index) == [
        series.value for series in config.SEIRSVBH_TRACKED
    ]
    assert result.l2 == pytest.approx(result.breakdown["l2"].sum())
    assert result.linf == pytest.approx(result.breakdown["linf"].sum())
    assert result.as_tuple() == (result.l2, result.linf)


def test_relative_errors_empty_series(scenario_data):
    with pytest.raises(config.AlignmentError):
        analysis.compute_relative_errors(
            0.5,
            0.0,
            1.0,
            simulation.psi_quadratic,
            scenario_data.replace(Htotal=[]),
        )


def test_breakdown_aligns_to_shortest_series():
    model = simulation.ModelSolution(
        kind="seir",
        t=np.arange(4.0),
        S=np.array([970.0, 965.0, 960.0, 955.0]),
        E=np.array([10.0, 12.0, 14.0, 16.0]),
        I=np.array([10.0, 11.0, 12.0, 13.0]),
        R=np.array([10.0, 12.0, 14.0, 16.0]),
    )
    reported = config.ReportedData(
        Lambda=[0.0],
        theta=[0.0],
        omega=[0.2],
        lambda_=[0.0],
        nu=[0.0],
        mu=[0.0],
        phi=[0.0],
        A=[20.0, 24.0, 25.0],
        H=[0.0, 0.0, 0.0],
        Rtotal=[10.0, 11.0],
        Htotal=[0.0, 0.0, 0.0],
        Vtotal=[0.0, 0.0, 0.0],
        Dtotal=[0.0, 1.0, 2.0],
        N1=1000.0,
        I1=10.0,
    )
    frame = analysis.relative_error_breakdown(
        model, reported, config.SEIR_TRACKED
    )
    # removed has two entries, so everything is compared on two days
    a_residual = np.array([20.0, 24.0]) - np.array([20.0, 23.0])
    assert frame.loc["A", "l2"] == pytest.approx(
        np.linalg.norm(a_residual) / np.linalg.norm([20.0, 24.0])
    )
    assert frame.loc["A", "linf"] == pytest.approx(1.0 / 24.0)
    assert frame.loc["R", "l2"] == pytest.approx(0.0)


def test_breakdown_empty_alignment():
    model = simulation.ModelSolution(
        kind="seir",
        t=np.arange(2.0),
        S=np.ones(2),
        E=np.ones(2),
        I=np.ones(2),
        R=np.ones(2),
    )
    reported = config.ReportedData(
        Lambda=[0.0],
        theta=[0.0],
        omega=[0.2],
        lambda_=[0.0],
        nu=[0.0],
        mu=[0.0],
        phi=[0.0],
        A=[],
        H=[0.0],
        Rtotal=[0.0],
        Htotal=[0.0],
        Vtotal=[0.0],
        Dtotal=[0.0],
        N1=4.0,
        I1=1.0,
    )
    with pytest.raises(config.AlignmentError):
        analysis.relative_error_breakdown(model, reported, config.SEIR_TRACKED)


def test_relative_errors_seir(scenario_data):
    data = scenario_data.replace(
        A=[20.0, 25.0, 28.0],
        Rtotal=[0.0, 2.0, 5.0],
        Dtotal=[0.0, 0.0, 1.0],
        I1=10.0,
    )
    idp_seir = inverse.solve_idp_seir(data)
    result = analysis.evaluate_relative_errors_seir(idp_seir, 1.0, data)
    assert list(result.breakdown.index) == ["A", "R"]
    rel_l2, rel_linf = analysis.compute_relative_errors_seir(
        idp_seir, 1.0, data
    )
    assert rel_l2 == pytest.approx(result.l2)
    assert np.isfinite(rel_l2) and rel_l2 >= 0
    assert np.isfinite(rel_linf) and rel_linf >= 0
