"""Module containing Parameter classes for configuring seirsvbh runs."""

from typing import Optional

import numpy as np
from diffrax import AbstractSolver, Dopri5  # type: ignore
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveInt,
    PositiveFloat,
    field_validator,
    model_validator,
)
from typing_extensions import Self

from ..typing import (
    PositiveStep,
    PsiShapeFloat,
    SweepOrientation,
    UnitIntervalFloat,
)

# admissible range of the psi shape parameter c on a sweep grid
C_RANGE = (-0.25, 0.25)
# admissible range of the interpolation weight xi
XI_RANGE = (0.0, 1.0)


class SolverParams(BaseModel):
    """Parameters used by the ODE solver of each single-day integration."""

    model_config = ConfigDict(arbitrary_types_allowed=True)
    solver_method: AbstractSolver = Field(
        default_factory=lambda: Dopri5(),
        description="""Differential equation solver used within each day,
        defaults to Dopri5(), the Dormand-Prince 5(4) explicit Runge-Kutta
        method. For more information on picking a solver see:
        https://docs.kidger.site/diffrax/usage/how-to-choose-a-solver/""",
    )
    ode_solver_rel_tolerance: PositiveFloat = Field(
        default=1e-5,
        description="""Solver relative tolerance, used by the adaptive step
        sizer to decide the size of a subsequent step. Use
        constant_step_size to switch to constant solver mode.""",
    )
    ode_solver_abs_tolerance: PositiveFloat = Field(
        default=1e-6,
        description="""Solver absolute tolerance, used by the adaptive step
        sizer to decide the size of a subsequent step.""",
    )
    max_steps: PositiveInt = Field(
        default=4096,
        description="""The maximum number of steps the solver may take
        within one day. A day that needs more is marked as failed and its
        state becomes NaN.""",
    )
    constant_step_size: NonNegativeFloat = Field(
        default=0,
        description="""If non-zero, solver will use constant step size
        equal to the value set. If 0 solver will use adaptive step size with
        ode_solver_rel/abs_tolerance""",
    )

    def cache_key(self) -> tuple:
        """Hashable summary used to reuse compiled integrators.

        The solver object itself is part of the key, so two instances of
        one solver class with different settings do not share code.
        """
        return (
            self.solver_method,
            self.ode_solver_rel_tolerance,
            self.ode_solver_abs_tolerance,
            self.max_steps,
            self.constant_step_size,
        )


class IDPParams(BaseModel):
    """Parameters controlling the inverse data problem recursion."""

    guard_empty_compartments: bool = Field(
        default=True,
        description="""If True a rate whose flow and denominator are both
        exactly zero is reported as 0 instead of NaN, since nothing leaves
        an empty compartment. Any other zero denominator still propagates
        Inf/NaN. If False every division follows IEEE semantics.""",
    )


def check_h(h: float) -> None:
    """Verify the step length describes exactly one day.

    Raises
    ------
    ValueError
        if `h` is not exactly 1.0.
    """
    if h != 1.0:
        raise ValueError(
            f"h must be exactly 1.0 to match the daily data grid, got {h}."
        )


def check_input_params(xi_list, c_list) -> None:
    """Sanity checks for the (xi, c) sweep grid.

    Checks that both lists are numeric, hold at least two values, lie in
    [0, 1] for xi and [-0.25, 0.25] for c, and increase with a finite
    positive mean step.

    Raises
    ------
    ValueError
        describing the first failed check.
    """
    try:
        xi = np.asarray(xi_list, dtype=np.float64).reshape(-1)
        c = np.asarray(c_list, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as ex:
        raise ValueError(
            "xi_list and c_list must be numeric vectors."
        ) from ex
    if xi.size < 2 or c.size < 2:
        raise ValueError(
            "xi_list and c_list need at least two values to define a step."
        )
    if np.any((xi < XI_RANGE[0]) | (xi > XI_RANGE[1])):
        raise ValueError("All elements of xi_list must be between 0 and 1.")
    if np.any((c < C_RANGE[0]) | (c > C_RANGE[1])):
        raise ValueError(
            "All elements of c_list must be between -0.25 and +0.25."
        )
    xi_step = np.mean(np.diff(xi))
    c_step = np.mean(np.diff(c))
    if not (np.isfinite(xi_step) and np.isfinite(c_step)):
        raise ValueError("Step size of xi_list or c_list is invalid.")
    if xi_step <= 0 or c_step <= 0:
        raise ValueError("Step sizes must be positive and non-zero.")


def colon_range(start: float, step: float, stop: float) -> list[float]:
    """Values start, start + step, ... up to and including `stop`."""
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}.")
    # tolerate float error so 0:0.1:1 still ends at 1
    count = int(np.floor((stop - start) / step + 1e-10)) + 1
    values = np.clip(start + step * np.arange(count), start, stop)
    return [float(v) for v in values]


class GridConfig(BaseModel):
    """Everything needed to sweep relative errors over a (xi, c) grid."""

    model_config = ConfigDict(arbitrary_types_allowed=True)
    xi_list: list[UnitIntervalFloat] = Field(
        description="""Interpolation weights, one matrix row each."""
    )
    c_list: list[PsiShapeFloat] = Field(
        description="""psi shape parameters, one matrix column each."""
    )
    h: PositiveStep = Field(
        default=1.0, description="""Day length, must be exactly 1.0."""
    )
    psi_name: str = Field(
        default="psi_quadratic",
        description="""Name of the psi function in PSI_FUNCTIONS.""",
    )
    max_workers: Optional[NonNegativeInt] = Field(
        default=None,
        description="""Desired worker count. None uses one worker per CPU,
        0 forces a serial sweep. Capped at the CPU count.""",
    )
    orientation: SweepOrientation = Field(
        default="auto",
        description="""Dimension distributed over workers: rows (xi),
        columns (c) or auto for the longer one.""",
    )
    solver_params: SolverParams = Field(default_factory=SolverParams)
    idp_params: IDPParams = Field(default_factory=IDPParams)

    @field_validator("h", mode="after")
    @classmethod
    def _validate_h(cls, h: float) -> float:
        check_h(h)
        return h

    @model_validator(mode="after")
    def _validate_grid(self) -> Self:
        check_input_params(self.xi_list, self.c_list)
        return self

    @classmethod
    def from_steps(cls, xi_step: float, c_step: float, **kwargs) -> Self:
        """Build the grid 0:xi_step:1 by -0.25:c_step:0.25."""
        return cls(
            xi_list=colon_range(XI_RANGE[0], xi_step, XI_RANGE[1]),
            c_list=colon_range(C_RANGE[0], c_step, C_RANGE[1]),
            **kwargs,
        )

    @property
    def shape(self) -> tuple[int, int]:
        return (len(self.xi_list), len(self.c_list))
