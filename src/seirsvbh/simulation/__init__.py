"""Forward simulation of the SEIRSVBH and SEIR reference models."""

from .cauchy import (
    CauchyProblemSolver,
    DayEndStates,
    SEIRCauchySolver,
    SEIRSVBHCauchySolver,
    solve_cauchy_problem,
    solve_cauchy_problem_seir,
)
from .direct import (
    initial_state_seir,
    initial_state_seirsvbh,
    merge_rates,
    model_solution_from_idp,
    model_solution_from_idp_seir,
    solve_direct_problem,
    solve_direct_problem_seir,
)
from .odes import (
    SEIR_COMPARTMENTS,
    SEIRSVBH_COMPARTMENTS,
    SEIRParams,
    SEIRSVBHParams,
    seir_ode,
    seirsvbh_ode,
)
from .psi import PSI_FUNCTIONS, psi_quadratic, resolve_psi
from .solution import MODEL_SERIES, ModelSolution
from .synthetic import SYNTHETIC_RATE_FIELDS, generate_reported_data

__all__ = [
    "CauchyProblemSolver",
    "DayEndStates",
    "SEIRCauchySolver",
    "SEIRSVBHCauchySolver",
    "solve_cauchy_problem",
    "solve_cauchy_problem_seir",
    "initial_state_seir",
    "initial_state_seirsvbh",
    "merge_rates",
    "model_solution_from_idp",
    "model_solution_from_idp_seir",
    "solve_direct_problem",
    "solve_direct_problem_seir",
    "SEIR_COMPARTMENTS",
    "SEIRSVBH_COMPARTMENTS",
    "SEIRParams",
    "SEIRSVBHParams",
    "seir_ode",
    "seirsvbh_ode",
    "PSI_FUNCTIONS",
    "psi_quadratic",
    "resolve_psi",
    "MODEL_SERIES",
    "ModelSolution",
    "SYNTHETIC_RATE_FIELDS",
    "generate_reported_data",
]
