"""Sweep relative errors over a (xi, c) grid, optionally in worker processes.

Each task owns one row (fixed xi) or one column (fixed c) of the result
matrices, so workers never share output cells. Any failure of the
parallel backend falls back to a full serial sweep.
"""

import json
import logging
import multiprocessing as mp
import os
from concurrent.futures import ProcessPoolExecutor
from datetime import datetime
from typing import Any, Callable, NamedTuple, Optional, Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Self

from ..config import (
    ArtifactError,
    GridConfig,
    IDPParams,
    ReportedData,
    SolverParams,
)
from ..simulation import resolve_psi
from ..typing import PsiFunction, SweepOrientation
from ..utils import log_decorator, logging_level_name, use_logging
from .errors import compute_relative_errors

logger = logging.getLogger("seirsvbh")

# pool_factory(n_workers) -> context manager with a map(fn, iterable) method,
# e.g. concurrent.futures.ProcessPoolExecutor or multiprocessing.pool.ThreadPool
PoolFactory = Callable[[int], Any]

_ORIENTATION_ALIASES = {"ii": "rows", "jj": "columns"}


class ErrorGrid(BaseModel):
    """Relative error matrices of a sweep, rows indexed by xi, columns by c."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)
    xi: np.ndarray
    c: np.ndarray
    l2mat: np.ndarray = Field(description="""|xi| x |c|, NaN on failure.""")
    linfmat: np.ndarray = Field(description="""|xi| x |c|, NaN on failure.""")
    used_parallel: bool = False
    workers_used: int = 0

    @model_validator(mode="before")
    @classmethod
    def _as_arrays(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            for key in ("xi", "c"):
                if key in data:
                    data[key] = np.asarray(data[key], dtype=np.float64).reshape(-1)
            for key in ("l2mat", "linfmat"):
                if key in data:
                    data[key] = np.atleast_2d(
                        np.asarray(data[key], dtype=np.float64)
                    )
        return data

    @model_validator(mode="after")
    def _check_shapes(self) -> Self:
        expected = (len(self.xi), len(self.c))
        for name in ("l2mat", "linfmat"):
            shape = getattr(self, name).shape
            if shape != expected:
                raise ValueError(
                    f"Expected l2mat/linfmat size {list(expected)}, "
                    f"got {name}={list(shape)}."
                )
        return self

    @property
    def shape(self) -> tuple[int, int]:
        return (len(self.xi), len(self.c))

    @property
    def Xi(self) -> np.ndarray:
        """xi value of every cell, |xi| x |c|."""
        return np.meshgrid(self.c, self.xi)[1]

    @property
    def C(self) -> np.ndarray:
        """c value of every cell, |xi| x |c|."""
        return np.meshgrid(self.c, self.xi)[0]

    def save(self, path: str) -> None:
        """Write xi, c, Xi, C, l2mat and linfmat as JSON, overwriting `path`.

        NaN cells are written as the JSON extension `NaN`.
        """
        artifact = {
            "xi": self.xi.tolist(),
            "c": self.c.tolist(),
            "Xi": self.Xi.tolist(),
            "C": self.C.tolist(),
            "l2mat": self.l2mat.tolist(),
            "linfmat": self.linfmat.tolist(),
            "used_parallel": self.used_parallel,
            "workers_used": self.workers_used,
        }
        with open(path, "w") as f:
            json.dump(artifact, f, indent=4)

    @classmethod
    def load(cls, path: str) -> Self:
        """Read an artifact written by `save`.

        Coordinates come from the xi and c vectors, or from the first
        column of Xi and the first row of C when only the grids are stored.

        Raises
        ------
        ArtifactError
            if l2mat, linfmat or every form of coordinates is missing.
        ValueError
            if matrix shapes do not match the coordinates.
        """
        with open(path, "r") as f:
            artifact = json.load(f)
        for key in ("l2mat", "linfmat"):
            if key not in artifact:
                raise ArtifactError(f'artifact must contain "{key}".')
        if "xi" in artifact and "c" in artifact:
            xi, c = artifact["xi"], artifact["c"]
        elif "Xi" in artifact and "C" in artifact:
            xi = [row[0] for row in artifact["Xi"]]
            c = artifact["C"][0]
        else:
            raise ArtifactError(
                'artifact must contain either "xi" and "c" or "Xi" and "C".'
            )
        return cls(
            xi=xi,
            c=c,
            l2mat=artifact["l2mat"],
            linfmat=artifact["linfmat"],
            used_parallel=artifact.get("used_parallel", False),
            workers_used=artifact.get("workers_used", 0),
        )


class _LineTask(NamedTuple):
    """One row (fixed xi) or one column (fixed c) of the grid."""

    index: int
    rows: bool
    fixed: float
    values: tuple[float, ...]
    h: float
    psi: PsiFunction
    reported_data: ReportedData
    solver_params: Optional[SolverParams]
    idp_params: Optional[IDPParams]


def _sweep_line(
    task: _LineTask,
) -> tuple[int, np.ndarray, np.ndarray, list[str]]:
    """Evaluate every cell of one line; failed cells become NaN.

    Failures are returned as messages so the calling process logs them,
    whichever process evaluated the line.
    """
    failures: list[str] = []
    l2 = np.full(len(task.values), np.nan)
    linf = np.full(len(task.values), np.nan)
    for position, value in enumerate(task.values):
        xi, c = (task.fixed, value) if task.rows else (value, task.fixed)
        try:
            l2[position], linf[position] = compute_relative_errors(
                xi,
                c,
                task.h,
                task.psi,
                task.reported_data,
                task.solver_params,
                task.idp_params,
            )
        except Exception as ex:
            failures.append(
                f"Relative error failed at (xi={xi:.6g}, c={c:.6g}): "
                f"{type(ex).__name__}: {ex}"
            )
    return task.index, l2, linf, failures


def _init_worker_logging(level: Optional[str]) -> None:
    if level is not None:
        use_logging(level=level, output="console")


def _spawn_pool(processes: int) -> ProcessPoolExecutor:
    # jax is multithreaded, forked children may deadlock. A worker that dies
    # breaks the executor, so map raises BrokenProcessPool instead of hanging.
    return ProcessPoolExecutor(
        max_workers=processes,
        mp_context=mp.get_context("spawn"),
        initializer=_init_worker_logging,
        initargs=(logging_level_name(),),
    )


def _resolve_orientation(
    orientation: SweepOrientation, n_xi: int, n_c: int
) -> str:
    orientation = _ORIENTATION_ALIASES.get(orientation, orientation)
    if orientation == "auto":
        return "rows" if n_xi >= n_c else "columns"
    if orientation not in ("rows", "columns"):
        raise ValueError(f"unknown sweep orientation {orientation!r}.")
    return orientation


def _worker_count(max_workers: Optional[int], num_tasks: int) -> int:
    available = os.cpu_count() or 1
    requested = available if max_workers is None else max_workers
    return max(0, min(requested, available, num_tasks))


def sweep_relative_errors(
    xi_list: Sequence[float],
    c_list: Sequence[float],
    h: float,
    psi: PsiFunction,
    reported_data: ReportedData,
    max_workers: Optional[int] = None,
    orientation: SweepOrientation = "auto",
    pool_factory: Optional[PoolFactory] = None,
    solver_params: Optional[SolverParams] = None,
    idp_params: Optional[IDPParams] = None,
) -> tuple[np.ndarray, np.ndarray, bool, int]:
    """Compute the relative error matrices over the (xi, c) grid.

    Parameters
    ----------
    xi_list, c_list : Sequence[float]
        grid coordinates, matrix rows and columns respectively.
    h : float
        day length.
    psi : PsiFunction
        step transform, must be picklable for the parallel path.
    reported_data : ReportedData
        data passed to every cell evaluation.
    max_workers : int, optional
        desired worker count; None means one per CPU and 0 a serial
        sweep. Never more than the CPU count or the number of lines.
    orientation : SweepOrientation
        "rows" distributes xi values, "columns" c values and "auto" picks
        rows when |xi| >= |c|. "ii" and "jj" are aliases.
    pool_factory : PoolFactory, optional
        builds the worker pool, by default a spawn-context
        `ProcessPoolExecutor`. A worker that dies breaks the pool and the
        sweep re-runs serially.

    Returns
    -------
    tuple[np.ndarray, np.ndarray, bool, int]
        l2mat, linfmat, whether the parallel backend was used and with
        how many workers (0 when serial).
    """
    xi_values = tuple(float(x) for x in np.asarray(xi_list).reshape(-1))
    c_values = tuple(float(x) for x in np.asarray(c_list).reshape(-1))
    n_xi, n_c = len(xi_values), len(c_values)
    rows = _resolve_orientation(orientation, n_xi, n_c) == "rows"
    outer, inner = (xi_values, c_values) if rows else (c_values, xi_values)
    tasks = [
        _LineTask(
            index,
            rows,
            fixed,
            inner,
            h,
            psi,
            reported_data,
            solver_params,
            idp_params,
        )
        for index, fixed in enumerate(outer)
    ]

    workers = _worker_count(max_workers, len(tasks))
    results = None
    used_parallel = False
    if workers > 0:
        pool_factory = pool_factory or _spawn_pool
        try:
            with pool_factory(workers) as pool:
                results = list(pool.map(_sweep_line, tasks))
            used_parallel = True
        except Exception as ex:
            logger.warning(
                "Parallel sweep failed (%s: %s), re-running serially.",
                type(ex).__name__,
                ex,
            )
            results = None
    if results is None:
        workers = 0
        results = [_sweep_line(task) for task in tasks]

    l2mat = np.full((n_xi, n_c), np.nan)
    linfmat = np.full((n_xi, n_c), np.nan)
    for index, l2, linf, failures in results:
        for message in failures:
            logger.warning(message)
        if rows:
            l2mat[index, :], linfmat[index, :] = l2, linf
        else:
            l2mat[:, index], linfmat[:, index] = l2, linf
    return l2mat, linfmat, used_parallel, workers


@log_decorator
def run_grid_sweep(
    grid_config: GridConfig,
    reported_data: ReportedData,
    pool_factory: Optional[PoolFactory] = None,
) -> ErrorGrid:
    """Sweep the grid described by `grid_config` and collect an `ErrorGrid`."""
    psi = resolve_psi(grid_config.psi_name)
    n_xi, n_c = grid_config.shape
    logger.info(
        "Starting relative error sweep over %d x %d grid (%d cells).",
        n_xi,
        n_c,
        n_xi * n_c,
    )
    start_time = datetime.now()
    l2mat, linfmat, used_parallel, workers_used = sweep_relative_errors(
        grid_config.xi_list,
        grid_config.c_list,
        grid_config.h,
        psi,
        reported_data,
        max_workers=grid_config.max_workers,
        orientation=grid_config.orientation,
        pool_factory=pool_factory,
        solver_params=grid_config.solver_params,
        idp_params=grid_config.idp_params,
    )
    logger.info(
        "Sweep finished in %s, parallel=%s with %d worker(s).",
        datetime.now() - start_time,
        used_parallel,
        workers_used,
    )
    return ErrorGrid(
        xi=grid_config.xi_list,
        c=grid_config.c_list,
        l2mat=l2mat,
        linfmat=linfmat,
        used_parallel=used_parallel,
        workers_used=workers_used,
    )
