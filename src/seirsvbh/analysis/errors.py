"""Relative error evaluators comparing a forward model run with reported data."""

from typing import Iterable, Optional

import numpy as np
import pandas as pd  # type: ignore
from pydantic import BaseModel, ConfigDict, Field

from ..config import (
    SEIR_TRACKED,
    SEIRSVBH_TRACKED,
    AlignmentError,
    IDPParams,
    ReportedData,
    SolverParams,
    TrackedSeries,
    reported_series,
)
from ..inverse import IDPSolutionSeir, solve_idp
from ..simulation import (
    ModelSolution,
    model_solution_from_idp,
    model_solution_from_idp_seir,
)
from ..typing import PsiFunction
from ..utils import Diagnostic


class RelativeErrors(BaseModel):
    """Summed relative errors of one forward run plus the per-series terms."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)
    l2: float = Field(description="""Sum of relative l2 errors.""")
    linf: float = Field(description="""Sum of relative linf errors.""")
    breakdown: pd.DataFrame = Field(
        description="""One row per tracked series, columns l2 and linf."""
    )
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    def as_tuple(self) -> tuple[float, float]:
        return self.l2, self.linf


def relative_error_breakdown(
    model_solution: ModelSolution,
    reported_data: ReportedData,
    tracked: Iterable[TrackedSeries],
) -> pd.DataFrame:
    """Relative l2 and linf error of each tracked series.

    Every reported and modeled series is cut to the shortest length m
    among them before comparing. Errors are ||rep - mod|| / ||rep|| with
    no special case for a zero reported norm.

    Raises
    ------
    AlignmentError
        if m is 0.
    """
    tracked = tuple(tracked)
    pairs = {
        series: (
            reported_series(reported_data, series),
            model_solution.series(series),
        )
        for series in tracked
    }
    m = min(len(values) for pair in pairs.values() for values in pair)
    if m == 0:
        raise AlignmentError("Empty alignment lengths.")
    rows = {}
    with np.errstate(divide="ignore", invalid="ignore"):
        for series, (reported, modeled) in pairs.items():
            residual = reported[:m] - modeled[:m]
            rows[series.value] = {
                "l2": np.linalg.norm(residual, 2)
                / np.linalg.norm(reported[:m], 2),
                "linf": np.linalg.norm(residual, np.inf)
                / np.linalg.norm(reported[:m], np.inf),
            }
    frame = pd.DataFrame.from_dict(rows, orient="index")
    frame.index.name = "series"
    return frame


def _summed(
    model_solution: ModelSolution,
    reported_data: ReportedData,
    tracked: tuple[TrackedSeries, ...],
    diagnostics: list[Diagnostic],
) -> RelativeErrors:
    breakdown = relative_error_breakdown(model_solution, reported_data, tracked)
    return RelativeErrors(
        l2=float(breakdown["l2"].sum(skipna=False)),
        linf=float(breakdown["linf"].sum(skipna=False)),
        breakdown=breakdown,
        diagnostics=diagnostics,
    )


def evaluate_relative_errors(
    xi: float,
    c: float,
    h: float,
    psi: PsiFunction,
    reported_data: ReportedData,
    solver_params: Optional[SolverParams] = None,
    idp_params: Optional[IDPParams] = None,
) -> RelativeErrors:
    """Run IDP then the forward model at (xi, c) and compare six series.

    The tracked series are A, H, Rtotal, Vtotal, Htotal and Dtotal.
    """
    idp_solution = solve_idp(xi, h, c, psi, reported_data, idp_params)
    model_solution = model_solution_from_idp(
        idp_solution, reported_data, h, solver_params
    )
    return _summed(
        model_solution,
        reported_data,
        SEIRSVBH_TRACKED,
        idp_solution.diagnostics + model_solution.diagnostics,
    )


def compute_relative_errors(
    xi: float,
    c: float,
    h: float,
    psi: PsiFunction,
    reported_data: ReportedData,
    solver_params: Optional[SolverParams] = None,
    idp_params: Optional[IDPParams] = None,
) -> tuple[float, float]:
    """Summed relative (l2, linf) errors of the SEIRSVBH model at (xi, c).

    Parameters
    ----------
    xi : float
        IDP interpolation weight in [0, 1].
    c : float
        psi shape parameter.
    h : float
        day length.
    psi : PsiFunction
        step transform.
    reported_data : ReportedData
        the data the model is fitted to and compared against.
    solver_params : SolverParams, optional
        diffrax settings of the forward run.
    idp_params : IDPParams, optional
        zero-denominator policy of the inverse run.

    Returns
    -------
    tuple[float, float]
        (rel_l2, rel_linf), each the sum over the six tracked series.

    Raises
    ------
    AlignmentError
        if some series is empty.
    """
    return evaluate_relative_errors(
        xi, c, h, psi, reported_data, solver_params, idp_params
    ).as_tuple()


def evaluate_relative_errors_seir(
    idp_seir: IDPSolutionSeir,
    h: float,
    reported_data: ReportedData,
    solver_params: Optional[SolverParams] = None,
) -> RelativeErrors:
    """Forward SEIR run from `idp_seir` compared on A and R = Rtotal + Dtotal."""
    model_solution = model_solution_from_idp_seir(
        idp_seir, h, reported_data, solver_params
    )
    return _summed(
        model_solution,
        reported_data,
        SEIR_TRACKED,
        list(idp_seir.diagnostics) + model_solution.diagnostics,
    )


def compute_relative_errors_seir(
    idp_seir: IDPSolutionSeir,
    h: float,
    reported_data: ReportedData,
    solver_params: Optional[SolverParams] = None,
) -> tuple[float, float]:
    """Summed relative (l2, linf) errors of the SEIR reference model."""
    return evaluate_relative_errors_seir(
        idp_seir, h, reported_data, solver_params
    ).as_tuple()
