"""Module for declaring types used across seirsvbh."""

from typing import Annotated, Callable, Literal

import jax
import numpy as np
import numpy.typing as npt
from annotated_types import Ge, Gt, Le
from jaxtyping import PyTree

# one row of an 11 (SEIRSVBH) or 4 (SEIR) compartment state
StateVector = jax.Array
# (days + 1, compartments) matrix of day-end states
StateTimeseries = jax.Array
FloatSeries = npt.NDArray[np.float64]

UnitIntervalFloat = Annotated[float, Ge(0.0), Le(1.0)]
# shape parameter of psi, restricted to the range the grid checks accept
PsiShapeFloat = Annotated[float, Ge(-0.25), Le(0.25)]
PositiveStep = Annotated[float, Gt(0.0)]

# psi(h, c) -> effective sub-step used by the inverse recursion
PsiFunction = Callable[[float, float], float]

ODE_Eqns = Callable[
    [jax.typing.ArrayLike, StateVector, PyTree],
    StateVector,
]

SweepOrientation = Literal["auto", "rows", "columns", "ii", "jj"]
ErrorMetric = Literal["l2", "linf", "sum"]
