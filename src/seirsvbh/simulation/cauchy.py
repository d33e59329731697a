"""Day-by-day Cauchy problem solvers with piecewise constant parameters.

Each day d is an independent initial value problem on [(d - 1) h, d h],
started from the previous day-end state, with that day's rates held
constant. Only day-end states are kept.
"""

from functools import partial
from typing import NamedTuple, Optional, Sequence

import jax
import jax.numpy as jnp
import numpy as np
from diffrax import (  # type: ignore
    RESULTS,
    AbstractStepSizeController,
    ConstantStepSize,
    ODETerm,
    PIDController,
    SaveAt,
    diffeqsolve,
)

from ..config import AlignmentError, LengthMismatchError, SolverParams
from ..typing import FloatSeries, ODE_Eqns, StateTimeseries, StateVector
from ..utils import Diagnostic, DiagnosticLog
from .odes import (
    SEIR_COMPARTMENTS,
    SEIRSVBH_COMPARTMENTS,
    SEIRParams,
    SEIRSVBHParams,
    seir_ode,
    seirsvbh_ode,
)

jax.config.update("jax_enable_x64", True)


class DayEndStates(NamedTuple):
    """Output of a Cauchy solve."""

    # (K + 1,) day-end times 0, h, ..., K h
    t: FloatSeries
    # (K + 1, n_states) states, row 0 is the initial state
    ys: FloatSeries
    diagnostics: list[Diagnostic]


class CauchyProblemSolver:
    """A base class integrating an ODE one day at a time."""

    compartments: tuple[str, ...] = ()
    ode: Optional[ODE_Eqns] = None

    def __init__(self, solver_parameters: Optional[SolverParams] = None):
        """Create a solver.

        Parameters
        ----------
        solver_parameters : SolverParams, optional
            diffrax solver settings, by default `SolverParams()` which
            integrates each day with adaptive Dormand-Prince steps.
        """
        self.solver_parameters = solver_parameters or SolverParams()

    # solvers with equal settings share compiled code under jax.jit
    def __hash__(self) -> int:
        return hash((type(self), self.solver_parameters.cache_key()))

    def __eq__(self, other) -> bool:
        return (
            type(self) is type(other)
            and self.solver_parameters.cache_key()
            == other.solver_parameters.cache_key()
        )

    def __call__(self, t, y: StateVector, p) -> StateVector:
        """Calculate the instantaneous state gradients for day rates `p`."""
        if self.ode is None:
            raise NotImplementedError(
                "Set the ode class attribute to the right-hand side to integrate"
            )
        return self.ode(t, y, p)

    def _stepsize_controller(self) -> tuple[AbstractStepSizeController, Optional[float]]:
        params = self.solver_parameters
        if params.constant_step_size > 0.0:
            return ConstantStepSize(), params.constant_step_size
        # first step size determined automatically
        return (
            PIDController(
                rtol=params.ode_solver_rel_tolerance,
                atol=params.ode_solver_abs_tolerance,
            ),
            None,
        )

    @partial(jax.jit, static_argnums=(0,))
    def _integrate_days(
        self, y0: StateVector, day_params, h
    ) -> tuple[StateTimeseries, jax.Array]:
        """Scan over days, solving one autonomous ODE per day.

        Returns the (K, n) day-end states and a (K,) success mask. A day
        whose solve fails is filled with NaN, so every later day is NaN too.
        """
        term = ODETerm(self.__call__)
        stepsize_controller, dt0 = self._stepsize_controller()
        solver = self.solver_parameters.solver_method
        max_steps = self.solver_parameters.max_steps

        def one_day(y, inputs):
            day, p = inputs
            t0 = day * h
            solution = diffeqsolve(
                term,
                solver,
                t0,
                t0 + h,
                dt0,
                y,
                args=p,
                stepsize_controller=stepsize_controller,
                saveat=SaveAt(t1=True),
                max_steps=max_steps,
                throw=False,
            )
            succeeded = solution.result == RESULTS.successful
            y_end = jnp.where(succeeded, solution.ys[-1], jnp.nan)
            return y_end, (y_end, succeeded)

        num_days = jax.tree_util.tree_leaves(day_params)[0].shape[0]
        _, (ys, succeeded) = jax.lax.scan(
            one_day, y0, (jnp.arange(num_days), day_params)
        )
        return ys, succeeded

    def _solve(self, day_params, y0: Sequence[float], h: float, context: str) -> DayEndStates:
        diagnostics = DiagnosticLog(context)
        y_init = jnp.asarray(np.asarray(y0, dtype=np.float64).reshape(-1))
        if y_init.shape[0] != len(self.compartments):
            raise LengthMismatchError(
                f"{context}: initial state needs {len(self.compartments)} "
                f"values, got {y_init.shape[0]}."
            )
        num_days = jax.tree_util.tree_leaves(day_params)[0].shape[0]
        t_days = h * np.arange(num_days + 1, dtype=np.float64)
        if num_days == 0:
            return DayEndStates(
                t_days, np.asarray(y_init)[np.newaxis, :], diagnostics.records
            )
        ys, succeeded = self._integrate_days(y_init, day_params, float(h))
        succeeded = np.asarray(succeeded)
        if not succeeded.all():
            first_failure = int(np.argmin(succeeded)) + 1
            diagnostics.warning(
                f"ODE solve failed on {int((~succeeded).sum())} of "
                f"{num_days} days, states are NaN from day {first_failure}.",
                first_failure,
            )
        y_days = np.vstack([np.asarray(y_init), np.asarray(ys)])
        return DayEndStates(t_days, y_days, diagnostics.records)


def _day_series(name: str, values, num_days: int) -> jax.Array:
    array = np.asarray(values, dtype=np.float64).reshape(-1)
    if array.shape[0] < num_days:
        raise AlignmentError(
            f"parameter {name} has {array.shape[0]} entries, "
            f"{num_days} days requested."
        )
    return jnp.asarray(array[:num_days])


class SEIRSVBHCauchySolver(CauchyProblemSolver):
    """11-state SEIRSVBH day-by-day solver."""

    compartments = SEIRSVBH_COMPARTMENTS
    ode = staticmethod(seirsvbh_ode)

    def solve(
        self, params: SEIRSVBHParams, y0: Sequence[float], h: float = 1.0
    ) -> DayEndStates:
        """Integrate for K = len(params.beta) days.

        Parameters
        ----------
        params : SEIRSVBHParams
            per-day rates. Arrays longer than K are truncated to K.
        y0 : Sequence[float]
            [S, E, I, R, V, B, H, Rtotal, Htotal, Vtotal, Dtotal] at t=0.
        h : float
            day length.

        Raises
        ------
        AlignmentError
            if any rate array is shorter than `params.beta`.
        """
        num_days = int(np.asarray(params.beta).reshape(-1).shape[0])
        day_params = SEIRSVBHParams(
            **{
                name: _day_series(name, value, num_days)
                for name, value in params.items()
            }
        )
        return self._solve(day_params, y0, h, "cauchy_problem_solver")


class SEIRCauchySolver(CauchyProblemSolver):
    """4-state SEIR day-by-day solver with a constant population."""

    compartments = SEIR_COMPARTMENTS
    ode = staticmethod(seir_ode)

    def solve(
        self,
        beta,
        gamma,
        omega,
        y0: Sequence[float],
        h: float = 1.0,
        N: Optional[float] = None,
    ) -> DayEndStates:
        """Integrate for K = len(beta) days.

        `N` defaults to sum(y0) and stays constant for the whole run.

        Raises
        ------
        LengthMismatchError
            if beta, gamma and omega differ in length.
        """
        beta, gamma, omega = (
            np.asarray(x, dtype=np.float64).reshape(-1)
            for x in (beta, gamma, omega)
        )
        num_days = beta.shape[0]
        if gamma.shape[0] != num_days or omega.shape[0] != num_days:
            raise LengthMismatchError(
                "cauchy_problem_solver_seir: beta, gamma, omega must have "
                f"same length, got {num_days}, {gamma.shape[0]}, "
                f"{omega.shape[0]}."
            )
        population = (
            float(np.sum(np.asarray(y0, dtype=np.float64)))
            if N is None
            else float(N)
        )
        day_params = SEIRParams(
            beta=jnp.asarray(beta),
            gamma=jnp.asarray(gamma),
            omega=jnp.asarray(omega),
            N=jnp.full((num_days,), population),
        )
        return self._solve(day_params, y0, h, "cauchy_problem_solver_seir")


def solve_cauchy_problem(
    params: SEIRSVBHParams,
    y0: Sequence[float],
    h: float = 1.0,
    solver_parameters: Optional[SolverParams] = None,
) -> DayEndStates:
    """Solve the SEIRSVBH model day by day, see `SEIRSVBHCauchySolver.solve`."""
    return SEIRSVBHCauchySolver(solver_parameters).solve(params, y0, h)


def solve_cauchy_problem_seir(
    beta,
    gamma,
    omega,
    y0: Sequence[float],
    h: float = 1.0,
    N: Optional[float] = None,
    solver_parameters: Optional[SolverParams] = None,
) -> DayEndStates:
    """Solve the SEIR model day by day, see `SEIRCauchySolver.solve`."""
    return SEIRCauchySolver(solver_parameters).solve(
        beta, gamma, omega, y0, h, N
    )
