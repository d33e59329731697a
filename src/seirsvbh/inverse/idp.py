"""Inverse data problem (IDP) solvers.

The SEIRSVBH solver backs out daily flows from the reported cumulative
totals by finite differences with step psi(h, c), rebuilds the unobserved
compartments with a semi-implicit recursion and finally turns flows into
rates. Negative intermediate values are reported as diagnostics and used
as they are.
"""

from typing import Optional

import numpy as np

from ..config import (
    AlignmentError,
    IDPParams,
    LengthMismatchError,
    ReportedData,
)
from ..typing import PsiFunction
from ..utils import DiagnosticLog
from .solution import IDPSolution, IDPSolutionSeir


class _GuardedDivision:
    """Divides flows by compartment sizes following the zero-denominator policy."""

    def __init__(self, diagnostics: DiagnosticLog, guard: bool):
        self.diagnostics = diagnostics
        self.guard = guard

    def __call__(
        self,
        name: str,
        numerator: np.ndarray,
        denominator: np.ndarray,
        step: int = 1,
    ) -> np.ndarray:
        """Divide elementwise, `step` is the 1-based day of the first element."""
        numerator = np.asarray(numerator, dtype=np.float64)
        denominator = np.asarray(denominator, dtype=np.float64)
        with np.errstate(divide="ignore", invalid="ignore"):
            result = numerator / denominator
        zero = denominator == 0
        if self.guard:
            empty = zero & (numerator == 0)
            if np.any(empty):
                result = np.where(empty, 0.0, result)
                steps = np.flatnonzero(empty) + step
                self.diagnostics.info(
                    f"{name}: zero flow out of an empty compartment on "
                    f"{steps.size} step(s), rate set to 0.",
                    int(steps[0]),
                )
            zero = zero & ~empty
        if np.any(zero):
            first = int(np.flatnonzero(zero)[0])
            steps = np.flatnonzero(zero) + step
            self.diagnostics.warning(
                f"{name}: division by zero on {steps.size} step(s) "
                f"gives {np.atleast_1d(result)[first]}.",
                int(steps[0]),
            )
        return result


def solve_idp(
    xi: float,
    h: float,
    c: float,
    psi: PsiFunction,
    reported_data: ReportedData,
    idp_params: Optional[IDPParams] = None,
) -> IDPSolution:
    """Solve the SEIRSVBH inverse data problem.

    Parameters
    ----------
    xi : float
        interpolation weight in [0, 1]; rates divide flows by
        xi * I(k-1) + (1 - xi) * I(k).
    h : float
        nominal step length, h > 0.
    c : float
        psi shape parameter.
    psi : PsiFunction
        step transform, e.g. `psi_quadratic`.
    reported_data : ReportedData
        reported series, aligned internally to a common number of days.
    idp_params : IDPParams, optional
        zero-denominator policy, by default `IDPParams()`.

    Returns
    -------
    IDPSolution
        rates alpha, beta, gamma, rho, sigma, tau (length L - 1) and
        states S, E, I, R, V, B, N (length L).

    Raises
    ------
    ValueError
        if `xi` is outside [0, 1] or `h` is not positive.
    AlignmentError
        if fewer than two aligned days are available.
    """
    if not 0.0 <= xi <= 1.0:
        raise ValueError(f"xi must lie in [0, 1], got {xi}.")
    if not h > 0:
        raise ValueError(f"h must be positive, got {h}.")
    idp_params = idp_params or IDPParams()
    diagnostics = DiagnosticLog("idp_solver")
    divide = _GuardedDivision(diagnostics, idp_params.guard_empty_compartments)

    psi_h = float(psi(h, c))
    if not psi_h > 0:
        diagnostics.warning(
            f"psi(h={h:.6g}, c={c:.6g}) = {psi_h:.6g} is not positive."
        )

    L = reported_data.aligned_length()
    if L < 2:
        raise AlignmentError(
            f"the inverse problem needs at least 2 aligned days, got {L}."
        )
    d = reported_data
    A, H = d.A[:L], d.H[:L]
    Rtotal, Htotal = d.Rtotal[:L], d.Htotal[:L]
    Vtotal, Dtotal = d.Vtotal[:L], d.Dtotal[:L]
    Lambda, theta, omega = d.Lambda[: L - 1], d.theta[: L - 1], d.omega[: L - 1]
    lam, nu, mu, phi = (
        d.lambda_[: L - 1],
        d.nu[: L - 1],
        d.mu[: L - 1],
        d.phi[: L - 1],
    )

    # step 1, non-hospitalized active cases
    G = d.G[:L]

    S, E, I, R, V, B, N = (np.zeros(L) for _ in range(7))
    h_tau, i_rho, h_sigma, i_gamma, alpha, i_beta = (
        np.zeros(L - 1) for _ in range(6)
    )

    N[0] = d.N1
    I[0] = d.I1
    V[0] = d.V1
    B[0] = d.B1
    R[0] = d.R1
    E[0] = A[0] - I[0] - H[0]
    S[0] = N[0] - E[0] - I[0] - R[0] - V[0] - B[0] - H[0]

    # psi_h may be 0, which is reported above and left to propagate
    with np.errstate(divide="ignore", invalid="ignore"):
        for k in range(1, L):
            j = k - 1
            step = k  # 1-based index of the interval start, day j + 1
            # step 2, flows out of the hospital and the recovery split
            h_tau[j] = (Dtotal[k] - Dtotal[j]) / psi_h
            i_rho[j] = (Htotal[k] - Htotal[j]) / psi_h
            h_sigma[j] = (
                i_rho[j] - (H[k] - H[j]) / psi_h - h_tau[j] - theta[j] * H[j]
            )
            i_gamma[j] = (Rtotal[k] - Rtotal[j]) / psi_h - h_sigma[j]
            alpha[j] = phi[j] * divide(
                "alpha", Vtotal[k] - Vtotal[j], psi_h * N[j], step
            )
            i_beta[j] = divide(
                "Ibeta",
                (G[k] - G[j]) / psi_h + theta[j] * G[j] + i_gamma[j] + i_rho[j],
                S[j] + V[j],
                step,
            )
            diagnostics.warn_if_negative("Hsigma", h_sigma[j], step)
            diagnostics.warn_if_negative("Igamma", i_gamma[j], step)
            diagnostics.warn_if_negative("alpha", alpha[j], step)
            diagnostics.warn_if_negative("Ibeta", i_beta[j], step)
    
            # step 3, semi-implicit update in the order R, B, S, V, I, E, N
            R[k] = (1 - psi_h * (lam[j] + theta[j])) * R[j] + psi_h * (
                i_gamma[j] + h_sigma[j]
            )
            B[k] = (1 - psi_h * (nu[j] + theta[j])) * B[j] + psi_h * mu[j] * V[j]
            S[k] = (1 - psi_h * (alpha[j] + theta[j] + i_beta[j])) * S[
                j
            ] + psi_h * (Lambda[j] * N[j] + lam[j] * R[j] + nu[j] * B[j])
            V[k] = (1 - psi_h * (mu[j] + theta[j] + i_beta[j])) * V[
                j
            ] + psi_h * alpha[j] * S[j]
            I[k] = (1 - (theta[j] + omega[j]) * psi_h) * I[j] + psi_h * (
                omega[j] * G[j] - i_gamma[j] - i_rho[j]
            )
            E[k] = G[k] - I[k]
            N[k] = S[k] + E[k] + I[k] + R[k] + V[k] + B[k] + H[k]
    
            for name, value in (
                ("S", S[k]),
                ("E", E[k]),
                ("I", I[k]),
                ("R", R[k]),
                ("V", V[k]),
                ("B", B[k]),
                ("N", N[k]),
            ):
                diagnostics.warn_if_negative(name, value, k + 1)

    # step 4, flows to rates
    weighted_i = xi * I[:-1] + (1 - xi) * I[1:]
    beta = divide("beta", N[:-1] * i_beta, weighted_i)
    gamma = divide("gamma", i_gamma, weighted_i)
    rho = divide("rho", i_rho, weighted_i)
    sigma = divide("sigma", h_sigma, H[:-1])
    tau = divide("tau", h_tau, H[:-1])
    for name, rate in (
        ("beta", beta),
        ("gamma", gamma),
        ("rho", rho),
        ("sigma", sigma),
        ("tau", tau),
    ):
        if np.any(rate < 0):
            diagnostics.warning(f"Negative {name} values found.")

    return IDPSolution(
        xi=xi,
        h=h,
        c=c,
        psi_h=psi_h,
        alpha=alpha,
        beta=beta,
        gamma=gamma,
        rho=rho,
        sigma=sigma,
        tau=tau,
        S=S,
        E=E,
        I=I,
        R=R,
        V=V,
        B=B,
        N=N,
        diagnostics=diagnostics.records,
    )


def solve_idp_seir(reported_data: ReportedData) -> IDPSolutionSeir:
    """Solve the inverse problem of the time-dependent SEIR reference model.

    The removed compartment is R = Rtotal + Dtotal and susceptibles follow
    directly from S = N - A - R. Transmission and recovery flows are
    differences of S and R, infectious counts follow the incubation
    recursion and rates divide flows by I(k).

    Raises
    ------
    LengthMismatchError
        if A, Rtotal and Dtotal differ in length.
    AlignmentError
        if fewer than two days are reported or omega is too short.
    """
    diagnostics = DiagnosticLog("idp_solver_seir")
    A = reported_data.A
    L = len(A)
    if len(reported_data.Rtotal) != L or len(reported_data.Dtotal) != L:
        raise LengthMismatchError(
            "idp_solver_seir: A and (Rtotal + Dtotal) must have the same "
            f"length, got {L}, {len(reported_data.Rtotal)} and "
            f"{len(reported_data.Dtotal)}."
        )
    if L < 2:
        raise AlignmentError(
            f"the inverse problem needs at least 2 days, got {L}."
        )
    if len(reported_data.omega) < L - 1:
        raise AlignmentError(
            f"omega has {len(reported_data.omega)} entries, {L - 1} needed."
        )
    omega = reported_data.omega[: L - 1]
    R = reported_data.removed
    N = reported_data.N1
    S = N - A - R

    I = np.zeros(L)  # noqa: E741
    i_beta = np.zeros(L - 1)
    i_gamma = np.zeros(L - 1)
    I[0] = reported_data.I1

    with np.errstate(divide="ignore", invalid="ignore"):
        for k in range(1, L):
            j = k - 1
            if S[j] == 0:
                diagnostics.warning(
                    f"S(k-1) = 0 at k={k + 1}; division by zero.", k + 1
                )
            i_beta[j] = (-N * (S[k] - S[j])) / S[j]
            i_gamma[j] = R[k] - R[j]
            I[k] = (1 - omega[j]) * I[j] + omega[j] * A[j] - i_gamma[j]
            if I[k] < 0:
                diagnostics.warning(f"I(k) < 0 ({I[k]:.6g}).", k + 1)

    E = A - I
    for name, values in (("S", S), ("E", E), ("I", I), ("R", R)):
        if np.any(values < 0):
            diagnostics.warning(
                f"{name}(k) < 0 at some k (min {name} = {np.min(values):.6g})."
            )

    beta = np.full(L - 1, np.nan)
    gamma = np.full(L - 1, np.nan)
    for j in range(L - 1):
        if I[j] == 0:
            diagnostics.warning(
                f"I(k) = 0 at k={j + 1}; beta, gamma set to NaN.", j + 1
            )
            continue
        beta[j] = i_beta[j] / I[j]
        gamma[j] = i_gamma[j] / I[j]
        diagnostics.warn_if_negative("beta", beta[j], j + 1)
        diagnostics.warn_if_negative("gamma", gamma[j], j + 1)

    return IDPSolutionSeir(
        beta=beta,
        gamma=gamma,
        omega=np.array(omega),
        S=np.array(S),
        E=E,
        I=I,
        R=np.array(R),
        N=N,
        diagnostics=diagnostics.records,
    )
