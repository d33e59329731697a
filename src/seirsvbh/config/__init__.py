"""seirsvbh configuration module."""

from .errors import (
    AlignmentError,
    ArtifactError,
    LengthMismatchError,
    SeirsvbhError,
)
from .params import (
    GridConfig,
    IDPParams,
    SolverParams,
    check_h,
    check_input_params,
    colon_range,
)
from .reported_data import OBSERVED_FIELDS, PARAMETER_FIELDS, ReportedData
from .series import (
    REPORTED_SERIES,
    SEIR_TRACKED,
    SEIRSVBH_TRACKED,
    TrackedSeries,
    reported_series,
)

__all__ = [
    "ReportedData",
    "OBSERVED_FIELDS",
    "PARAMETER_FIELDS",
    "SolverParams",
    "IDPParams",
    "GridConfig",
    "check_h",
    "check_input_params",
    "colon_range",
    "TrackedSeries",
    "REPORTED_SERIES",
    "SEIRSVBH_TRACKED",
    "SEIR_TRACKED",
    "reported_series",
    "SeirsvbhError",
    "AlignmentError",
    "LengthMismatchError",
    "ArtifactError",
]
