"""Generate fake reported data from known rates.

The recursion below is the explicit scheme the inverse solver inverts:
with interpolation weight xi = 1 and the same psi step, `solve_idp`
recovers the generating rates up to round-off. Useful for testing and for
checking a fit end to end.
"""

from typing import Mapping, Sequence, Union

import numpy as np
import pandas as pd  # type: ignore

from ..config import ReportedData
from ..typing import PsiFunction
from .psi import psi_quadratic

# every rate the generator needs, known parameters and unknown rates alike
SYNTHETIC_RATE_FIELDS = (
    "Lambda",
    "theta",
    "omega",
    "lambda_",
    "nu",
    "mu",
    "phi",
    "alpha",
    "beta",
    "gamma",
    "rho",
    "sigma",
    "tau",
)


def _per_day(name: str, value, num_intervals: int) -> np.ndarray:
    array = np.asarray(value, dtype=np.float64).reshape(-1)
    if array.size == 1:
        return np.full(num_intervals, array[0])
    if array.size < num_intervals:
        raise ValueError(
            f"rate {name} has {array.size} entries, {num_intervals} needed."
        )
    return array[:num_intervals]


def generate_reported_data(
    rates: Mapping[str, Union[float, Sequence[float]]],
    initial_state: Sequence[float],
    days: int,
    h: float = 1.0,
    c: float = 0.0,
    psi: PsiFunction = psi_quadratic,
) -> tuple[ReportedData, pd.DataFrame]:
    """Simulate `days` days of reported SEIRSVBH data.

    Parameters
    ----------
    rates : Mapping[str, float | Sequence[float]]
        every name in SYNTHETIC_RATE_FIELDS, either a scalar held for the
        whole run or one value per day interval.
    initial_state : Sequence[float]
        day 1 compartments [S, E, I, R, V, B, H]. Cumulative totals start
        at 0 and N1 is their sum.
    days : int
        number of reported days, at least 2.
    h, c : float
        step length and psi shape parameter.
    psi : PsiFunction
        step transform, by default `psi_quadratic`.

    Returns
    -------
    tuple[ReportedData, pd.DataFrame]
        the reported record and the hidden compartments, one row per day.
    """
    if days < 2:
        raise ValueError(f"days must be at least 2, got {days}.")
    missing = [name for name in SYNTHETIC_RATE_FIELDS if name not in rates]
    if missing:
        raise ValueError(f"missing rates: {missing}")
    K = days - 1
    p = {name: _per_day(name, rates[name], K) for name in SYNTHETIC_RATE_FIELDS}
    psi_h = psi(h, c)

    S, E, I, R, V, B, H = (np.zeros(days) for _ in range(7))
    Rtotal, Htotal, Vtotal, Dtotal = (np.zeros(days) for _ in range(4))
    S[0], E[0], I[0], R[0], V[0], B[0], H[0] = np.asarray(
        initial_state, dtype=np.float64
    )

    for k in range(1, days):
        j = k - 1
        N = S[j] + E[j] + I[j] + R[j] + V[j] + B[j] + H[j]
        G = E[j] + I[j]
        i_beta = p["beta"][j] * I[j] / N
        i_gamma = p["gamma"][j] * I[j]
        i_rho = p["rho"][j] * I[j]
        h_sigma = p["sigma"][j] * H[j]
        h_tau = p["tau"][j] * H[j]
        theta = p["theta"][j]
        # vaccinations are reported as alpha / phi of the population
        if p["phi"][j] != 0:
            Vtotal[k] = Vtotal[j] + psi_h * p["alpha"][j] / p["phi"][j] * N
        else:
            Vtotal[k] = Vtotal[j]
        Dtotal[k] = Dtotal[j] + psi_h * h_tau
        Htotal[k] = Htotal[j] + psi_h * i_rho
        Rtotal[k] = Rtotal[j] + psi_h * (i_gamma + h_sigma)
        H[k] = H[j] + psi_h * (i_rho - h_sigma - h_tau - theta * H[j])
        G_next = G + psi_h * (
            i_beta * (S[j] + V[j]) - theta * G - i_gamma - i_rho
        )

        R[k] = (1 - psi_h * (p["lambda_"][j] + theta)) * R[j] + psi_h * (
            i_gamma + h_sigma
        )
        B[k] = (1 - psi_h * (p["nu"][j] + theta)) * B[j] + psi_h * p["mu"][
            j
        ] * V[j]
        S[k] = (1 - psi_h * (p["alpha"][j] + theta + i_beta)) * S[
            j
        ] + psi_h * (
            p["Lambda"][j] * N + p["lambda_"][j] * R[j] + p["nu"][j] * B[j]
        )
        V[k] = (1 - psi_h * (p["mu"][j] + theta + i_beta)) * V[
            j
        ] + psi_h * p["alpha"][j] * S[j]
        I[k] = (1 - (theta + p["omega"][j]) * psi_h) * I[j] + psi_h * (
            p["omega"][j] * G - i_gamma - i_rho
        )
        E[k] = G_next - I[k]

    reported = ReportedData(
        Lambda=p["Lambda"],
        theta=p["theta"],
        omega=p["omega"],
        lambda_=p["lambda_"],
        nu=p["nu"],
        mu=p["mu"],
        phi=p["phi"],
        A=E + I + H,
        H=H,
        Rtotal=Rtotal,
        Htotal=Htotal,
        Vtotal=Vtotal,
        Dtotal=Dtotal,
        N1=float(np.sum(np.asarray(initial_state, dtype=np.float64))),
        I1=I[0],
        R1=R[0],
        V1=V[0],
        B1=B[0],
    )
    states = pd.DataFrame(
        {"S": S, "E": E, "I": I, "R": R, "V": V, "B": B, "H": H},
        index=pd.RangeIndex(1, days + 1, name="day"),
    )
    return reported, states
