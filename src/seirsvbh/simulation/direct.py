"""Forward problems driven by rates recovered from the inverse solvers."""

from typing import Optional

import numpy as np

from ..config import PARAMETER_FIELDS, ReportedData, SolverParams
from ..inverse import IDPSolution, IDPSolutionSeir
from ..utils import DiagnosticLog, log_decorator
from .cauchy import SEIRCauchySolver, SEIRSVBHCauchySolver
from .odes import SEIR_COMPARTMENTS, SEIRSVBH_COMPARTMENTS, SEIRSVBHParams
from .solution import ModelSolution

# rates produced by the SEIRSVBH inverse solver
IDP_RATE_FIELDS = ("alpha", "beta", "gamma", "rho", "sigma", "tau")


def initial_state_seirsvbh(reported_data: ReportedData) -> np.ndarray:
    """Day 1 state [S, E, I, R, V, B, H, Rt, Ht, Vt, Dt] from reported data.

    H1 and the cumulative totals are read from the first reported day,
    E1 = A(1) - I1 - H1 and S1 closes the population N1.
    """
    d = reported_data
    H1 = d.H[0]
    E1 = d.A[0] - d.I1 - H1
    S1 = d.N1 - (E1 + d.I1 + d.R1 + d.V1 + d.B1 + H1)
    return np.array(
        [
            S1,
            E1,
            d.I1,
            d.R1,
            d.V1,
            d.B1,
            H1,
            d.Rtotal[0],
            d.Htotal[0],
            d.Vtotal[0],
            d.Dtotal[0],
        ],
        dtype=np.float64,
    )


def initial_state_seir(
    reported_data: ReportedData, diagnostics: Optional[DiagnosticLog] = None
) -> np.ndarray:
    """Day 1 SEIR state [S, E, I, R] with R1 = Rtotal(1) + Dtotal(1)."""
    d = reported_data
    E1 = d.A[0] - d.I1
    if E1 < 0 and diagnostics is not None:
        diagnostics.warning(f"E1 < 0 (value {E1:.6g}).", 1)
    R1 = d.Rtotal[0] + d.Dtotal[0]
    S1 = d.N1 - (E1 + d.I1 + R1)
    return np.array([S1, E1, d.I1, R1], dtype=np.float64)


def merge_rates(
    idp_solution: IDPSolution, reported_data: ReportedData
) -> SEIRSVBHParams:
    """Combine recovered rates with the known reported parameters."""
    rates = {name: getattr(idp_solution, name) for name in IDP_RATE_FIELDS}
    rates.update(
        {name: getattr(reported_data, name) for name in PARAMETER_FIELDS}
    )
    return SEIRSVBHParams(**rates)


def model_solution_from_idp(
    idp_solution: IDPSolution,
    reported_data: ReportedData,
    h: float = 1.0,
    solver_params: Optional[SolverParams] = None,
) -> ModelSolution:
    """Integrate the SEIRSVBH model with rates from the inverse problem.

    Parameters
    ----------
    idp_solution : IDPSolution
        recovered alpha, beta, gamma, rho, sigma and tau.
    reported_data : ReportedData
        known parameters and the day 1 initial state.
    h : float
        day length, by default 1.0.
    solver_params : SolverParams, optional
        diffrax settings of each day's solve.

    Returns
    -------
    ModelSolution
        len(idp_solution.beta) + 1 day-end states.

    Raises
    ------
    AlignmentError
        if a known parameter series is shorter than the recovered rates.
    """
    result = SEIRSVBHCauchySolver(solver_params).solve(
        merge_rates(idp_solution, reported_data),
        initial_state_seirsvbh(reported_data),
        h,
    )
    return ModelSolution.from_day_end_states(
        "seirsvbh",
        result.t,
        result.ys,
        SEIRSVBH_COMPARTMENTS,
        result.diagnostics,
    )


def model_solution_from_idp_seir(
    idp_seir: IDPSolutionSeir,
    h: float,
    reported_data: ReportedData,
    solver_params: Optional[SolverParams] = None,
) -> ModelSolution:
    """Integrate the SEIR reference model with rates from `solve_idp_seir`.

    The population stays at N1 for the whole run.
    """
    diagnostics = DiagnosticLog("direct_problem_seir")
    y0 = initial_state_seir(reported_data, diagnostics)
    result = SEIRCauchySolver(solver_params).solve(
        idp_seir.beta,
        idp_seir.gamma,
        idp_seir.omega,
        y0,
        h,
        N=reported_data.N1,
    )
    diagnostics.extend(result.diagnostics)
    return ModelSolution.from_day_end_states(
        "seir",
        result.t,
        result.ys,
        SEIR_COMPARTMENTS,
        diagnostics.records,
    )


@log_decorator
def solve_direct_problem(
    idp_solution: IDPSolution,
    reported_data: ReportedData,
    h: float = 1.0,
    solver_params: Optional[SolverParams] = None,
) -> ModelSolution:
    """Timed entry point for `model_solution_from_idp`."""
    return model_solution_from_idp(
        idp_solution, reported_data, h, solver_params
    )


@log_decorator
def solve_direct_problem_seir(
    idp_seir: IDPSolutionSeir,
    h: float,
    reported_data: ReportedData,
    solver_params: Optional[SolverParams] = None,
) -> ModelSolution:
    """Timed entry point for `model_solution_from_idp_seir`."""
    return model_solution_from_idp_seir(
        idp_seir, h, reported_data, solver_params
    )
