"""A module for typing utilities in seirsvbh."""

from .typing import (
    ErrorMetric,
    FloatSeries,
    ODE_Eqns,
    PositiveStep,
    PsiFunction,
    PsiShapeFloat,
    StateTimeseries,
    StateVector,
    SweepOrientation,
    UnitIntervalFloat,
)

__all__ = [
    "StateVector",
    "StateTimeseries",
    "FloatSeries",
    "UnitIntervalFloat",
    "PsiShapeFloat",
    "PositiveStep",
    "PsiFunction",
    "ODE_Eqns",
    "SweepOrientation",
    "ErrorMetric",
]
