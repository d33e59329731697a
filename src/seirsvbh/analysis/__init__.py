"""Relative error evaluation, grid sweeps and extrema summaries."""

from .errors import (
    RelativeErrors,
    compute_relative_errors,
    compute_relative_errors_seir,
    evaluate_relative_errors,
    evaluate_relative_errors_seir,
    relative_error_breakdown,
)
from .extrema import (
    Extremum,
    ExtremaSummary,
    GridPoint,
    find_exact_extrema,
    summarize_error_grid,
    summarize_relative_errors,
)
from .sweep import ErrorGrid, PoolFactory, run_grid_sweep, sweep_relative_errors

__all__ = [
    "RelativeErrors",
    "compute_relative_errors",
    "compute_relative_errors_seir",
    "evaluate_relative_errors",
    "evaluate_relative_errors_seir",
    "relative_error_breakdown",
    "ErrorGrid",
    "PoolFactory",
    "run_grid_sweep",
    "sweep_relative_errors",
    "GridPoint",
    "Extremum",
    "ExtremaSummary",
    "find_exact_extrema",
    "summarize_relative_errors",
    "summarize_error_grid",
]
