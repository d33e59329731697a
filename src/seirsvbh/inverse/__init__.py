"""Inverse data problem solvers recovering daily rates from reported data."""

from .idp import solve_idp, solve_idp_seir
from .solution import IDPSolution, IDPSolutionSeir

__all__ = [
    "solve_idp",
    "solve_idp_seir",
    "IDPSolution",
    "IDPSolutionSeir",
]
