"""Right-hand sides of the SEIRSVBH and SEIR models with per-day constant rates."""

import chex
import jax
import jax.numpy as jnp

from ..typing import StateVector

# column order of the SEIRSVBH state vector
SEIRSVBH_COMPARTMENTS = (
    "S",
    "E",
    "I",
    "R",
    "V",
    "B",
    "H",
    "Rt",
    "Ht",
    "Vt",
    "Dt",
)
# column order of the SEIR state vector
SEIR_COMPARTMENTS = ("S", "E", "I", "R")


@chex.dataclass
class SEIRSVBHParams:
    """Rates of the SEIRSVBH model, one entry per day.

    Every field holds an array with a leading day axis while being scanned
    over, and a scalar inside the right-hand side of a single day.
    """

    Lambda: chex.ArrayDevice  # birth / replenishment
    theta: chex.ArrayDevice  # natural death
    omega: chex.ArrayDevice  # E -> I
    lambda_: chex.ArrayDevice  # R -> S waning
    nu: chex.ArrayDevice  # B -> S waning
    mu: chex.ArrayDevice  # V -> B
    alpha: chex.ArrayDevice  # S -> V vaccination
    beta: chex.ArrayDevice  # transmission
    gamma: chex.ArrayDevice  # I -> R
    rho: chex.ArrayDevice  # I -> H
    sigma: chex.ArrayDevice  # H -> R
    tau: chex.ArrayDevice  # H -> death
    phi: chex.ArrayDevice  # vaccination reporting split


@chex.dataclass
class SEIRParams:
    """Rates of the SEIR reference model, one entry per day."""

    beta: chex.ArrayDevice
    gamma: chex.ArrayDevice
    omega: chex.ArrayDevice
    N: chex.ArrayDevice  # constant population, repeated for every day


@jax.jit
def seirsvbh_ode(t, y: StateVector, p: SEIRSVBHParams) -> StateVector:
    """SEIRSVBH flows plus cumulative totals for constant day rates `p`.

    Parameters
    ----------
    t : ArrayLike
        current time in days, unused since rates are constant per day.
    y : jax.Array
        state [S, E, I, R, V, B, H, Rtotal, Htotal, Vtotal, Dtotal].
    p : SEIRSVBHParams
        scalar rates of the current day.

    Returns
    -------
    jax.Array
        gradients of `y`, same shape.
    """
    s, e, i, r, v, b, h = y[0], y[1], y[2], y[3], y[4], y[5], y[6]
    n = s + e + i + r + v + b + h
    force_of_infection = p.beta * i / n
    # vaccinations are reported as alpha / phi of the population, none if phi is 0
    safe_phi = jnp.where(p.phi == 0, 1.0, p.phi)
    reported_vaccination = jnp.where(p.phi == 0, 0.0, p.alpha / safe_phi)

    ds = (
        -(p.alpha + p.theta + force_of_infection) * s
        + p.Lambda * n
        + p.lambda_ * r
        + p.nu * b
    )
    de = -(p.omega + p.theta) * e + force_of_infection * (s + v)
    di = -(p.gamma + p.rho + p.theta) * i + p.omega * e
    dr = -(p.lambda_ + p.theta) * r + p.gamma * i + p.sigma * h
    dv = -(p.mu + p.theta + force_of_infection) * v + p.alpha * s
    db = -(p.nu + p.theta) * b + p.mu * v
    dh = -(p.sigma + p.theta + p.tau) * h + p.rho * i

    d_rtotal = p.gamma * i + p.sigma * h
    d_htotal = p.rho * i
    d_vtotal = reported_vaccination * n
    d_dtotal = p.tau * h
    return jnp.stack(
        [ds, de, di, dr, dv, db, dh, d_rtotal, d_htotal, d_vtotal, d_dtotal]
    )


@jax.jit
def seir_ode(t, y: StateVector, p: SEIRParams) -> StateVector:
    """Plain SEIR flows with a constant population `p.N`."""
    s, e, i = y[0], y[1], y[2]
    s_to_e = p.beta * s * i / p.N
    e_to_i = p.omega * e
    i_to_r = p.gamma * i
    return jnp.stack([-s_to_e, s_to_e - e_to_i, e_to_i - i_to_r, i_to_r])
