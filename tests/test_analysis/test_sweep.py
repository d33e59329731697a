import json
import logging
from multiprocessing.pool import ThreadPool

import numpy as np
import pytest
from sweep_workers import psi_exiting_in_workers, psi_failing_above_zero

import seirsvbh.analysis as analysis
import seirsvbh.config as config
import seirsvbh.simulation as simulation

XI_LIST = [0.0, 0.5, 1.0]
C_LIST = [-0.1, 0.0, 0.1, 0.2]


@pytest.fixture
def reported_data():
    return config.ReportedData(
        Lambda=[0.0, 0.0, 0.0],
        theta=[0.0, 0.0, 0.0],
        omega=[0.2, 0.2, 0.2],
        lambda_=[0.0, 0.0, 0.0],
        nu=[0.0, 0.0, 0.0],
        mu=[0.0, 0.0, 0.0],
        phi=[0.0, 0.0, 0.0],
        A=[10.0, 15.0, 18.0, 20.0],
        H=[1.0, 1.0, 1.0, 1.5],
        Rtotal=[1.0, 2.0, 3.0, 4.0],
        Htotal=[1.0, 1.5, 2.0, 2.5],
        Vtotal=[1.0, 1.0, 1.0, 1.0],
        Dtotal=[1.0, 1.0, 1.2, 1.2],
        N1=1000.0,
        I1=8.0,
        R1=0.0,
    )


@pytest.fixture
def serial_result(reported_data):
    return analysis.sweep_relative_errors(
        XI_LIST,
        C_LIST,
        1.0,
        simulation.psi_quadratic,
        reported_data,
        max_workers=0,
    )


def broken_pool(processes):
    raise RuntimeError("no workers available")


def test_serial_sweep(serial_result):
    l2mat, linfmat, used_parallel, workers_used = serial_result
    assert l2mat.shape == (len(XI_LIST), len(C_LIST))
    assert linfmat.shape == (len(XI_LIST), len(C_LIST))
    assert not used_parallel and workers_used == 0
    assert np.all(np.isfinite(l2mat)) and np.all(l2mat >= 0)
    assert np.all(np.isfinite(linfmat)) and np.all(linfmat >= 0)


def test_cells_match_single_evaluation(reported_data, serial_result):
    l2mat, linfmat, _, _ = serial_result
    rel_l2, rel_linf = analysis.compute_relative_errors(
        XI_LIST[1], C_LIST[2], 1.0, simulation.psi_quadratic, reported_data
    )
    assert l2mat[1, 2] == rel_l2
    assert linfmat[1, 2] == rel_linf


@pytest.mark.parametrize("orientation", ["rows", "columns", "ii", "jj", "auto"])
def test_parallel_matches_serial(reported_data, serial_result, orientation):
    l2mat, linfmat, used_parallel, workers_used = (
        analysis.sweep_relative_errors(
            XI_LIST,
            C_LIST,
            1.0,
            simulation.psi_quadratic,
            reported_data,
            max_workers=2,
            orientation=orientation,
            pool_factory=ThreadPool,
        )
    )
    assert used_parallel
    assert 1 <= workers_used <= 2
    np.testing.assert_array_equal(l2mat, serial_result[0])
    np.testing.assert_array_equal(linfmat, serial_result[1])


def test_backend_failure_falls_back_to_serial(reported_data, serial_result):
    l2mat, linfmat, used_parallel, workers_used = (
        analysis.sweep_relative_errors(
            XI_LIST,
            C_LIST,
            1.0,
            simulation.psi_quadratic,
            reported_data,
            max_workers=2,
            pool_factory=broken_pool,
        )
    )
    assert not used_parallel and workers_used == 0
    np.testing.assert_array_equal(l2mat, serial_result[0])
    np.testing.assert_array_equal(linfmat, serial_result[1])


def test_failed_cells_are_nan(reported_data):
    l2mat, linfmat, _, _ = analysis.sweep_relative_errors(
        XI_LIST,
        C_LIST,
        1.0,
        psi_failing_above_zero,
        reported_data,
        max_workers=0,
    )
    failed = np.array(C_LIST) > 0
    assert np.all(np.isnan(l2mat[:, failed]))
    assert np.all(np.isnan(linfmat[:, failed]))
    assert np.all(np.isfinite(l2mat[:, ~failed]))



def test_process_pool_failures_logged(reported_data, caplog):
    with caplog.at_level(logging.WARNING, logger="seirsvbh"):
        l2mat, _, used_parallel, _ = analysis.sweep_relative_errors(
            XI_LIST,
            C_LIST,
            1.0,
            psi_failing_above_zero,
            reported_data,
            max_workers=2,
        )
    assert used_parallel
    failed = np.array(C_LIST) > 0
    assert np.all(np.isnan(l2mat[:, failed]))
    assert np.all(np.isfinite(l2mat[:, ~failed]))
    assert caplog.text.count("Relative error failed at") == (
        len(XI_LIST) * int(failed.sum())
    )
    assert "ArithmeticError: unsupported shape parameter" in caplog.text


def test_dead_worker_falls_back_to_serial(reported_data, serial_result, caplog):
    with caplog.at_level(logging.WARNING, logger="seirsvbh"):
        l2mat, linfmat, used_parallel, workers_used = (
            analysis.sweep_relative_errors(
                XI_LIST,
                C_LIST,
                1.0,
                psi_exiting_in_workers,
                reported_data,
                max_workers=2,
            )
        )
    assert not used_parallel and workers_used == 0
    assert "re-running serially" in caplog.text
    assert np.all(np.isfinite(l2mat)) and np.all(np.isfinite(linfmat))
    np.testing.assert_array_equal(l2mat, serial_result[0])
    np.testing.assert_array_equal(linfmat, serial_result[1])

def test_unknown_orientation(reported_data):
    with pytest.raises(ValueError):
        analysis.sweep_relative_errors(
            XI_LIST,
            C_LIST,
            1.0,
            simulation.psi_quadratic,
            reported_data,
            max_workers=0,
            orientation="diagonal",
        )


def test_run_grid_sweep(reported_data):
    grid_config = config.GridConfig(
        xi_list=XI_LIST, c_list=C_LIST, max_workers=0
    )
    grid = analysis.run_grid_sweep(grid_config, reported_data)
    assert grid.shape == (3, 4)
    assert grid.Xi.shape == (3, 4) and grid.C.shape == (3, 4)
    np.testing.assert_array_equal(grid.Xi[:, 0], XI_LIST)
    np.testing.assert_array_equal(grid.C[0, :], C_LIST)
    assert not grid.used_parallel


def test_error_grid_save_and_load(tmp_path):
    l2mat = np.array([[0.5, np.nan], [0.25, 1.0]])
    grid = analysis.ErrorGrid(
        xi=[0.0, 1.0], c=[-0.1, 0.1], l2mat=l2mat, linfmat=l2mat * 2
    )
    path = tmp_path / "errors.json"
    grid.save(str(path))
    # overwriting is allowed
    grid.save(str(path))
    loaded = analysis.ErrorGrid.load(str(path))
    np.testing.assert_array_equal(loaded.l2mat, l2mat)
    np.testing.assert_array_equal(loaded.linfmat, l2mat * 2)
    np.testing.assert_array_equal(loaded.xi, [0.0, 1.0])
    artifact = json.loads(path.read_text())
    assert {"xi", "c", "Xi", "C", "l2mat", "linfmat"} <= set(artifact)


def test_error_grid_load_from_grids_only(tmp_path):
    path = tmp_path / "grids.json"
    path.write_text(
        json.dumps(
            {
                "Xi": [[0.0, 0.0], [1.0, 1.0]],
                "C": [[-0.1, 0.1], [-0.1, 0.1]],
                "l2mat": [[1.0, 2.0], [3.0, 4.0]],
                "linfmat": [[1.0, 2.0], [3.0, 4.0]],
            }
        )
    )
    loaded = analysis.ErrorGrid.load(str(path))
    np.testing.assert_array_equal(loaded.xi, [0.0, 1.0])
    np.testing.assert_array_equal(loaded.c, [-0.1, 0.1])


def test_error_grid_load_missing_matrix(tmp_path):
    path = tmp_path / "partial.json"
    path.write_text(json.dumps({"xi": [0.0, 1.0], "c": [0.0, 0.1]}))
    with pytest.raises(config.ArtifactError):
        analysis.ErrorGrid.load(str(path))
    with pytest.raises(KeyError):
        analysis.ErrorGrid.load(str(path))


def test_error_grid_shape_mismatch():
    with pytest.raises(ValueError):
        analysis.ErrorGrid(
            xi=[0.0, 0.5, 1.0],
            c=[-0.1, 0.1],
            l2mat=np.zeros((2, 2)),
            linfmat=np.zeros((2, 2)),
        )
