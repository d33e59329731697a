"""Step transforms psi(h, c) used by the inverse recursion."""

import logging

from ..typing import PsiFunction

logger = logging.getLogger("seirsvbh")


def psi_quadratic(h: float, c: float) -> float:
    """Quadratic step function psi(h, c) = h - c * h**2.

    Parameters
    ----------
    h : float
        nominal step length, 0 < h <= 1.
    c : float
        shape parameter, c > -1. c = 0 returns `h` unchanged.

    Returns
    -------
    float
        effective sub-step used for every finite difference of the
        inverse recursion. Positivity is not enforced here.
    """
    return h - c * h**2


PSI_FUNCTIONS: dict[str, PsiFunction] = {
    "psi_quadratic": psi_quadratic,
}


def resolve_psi(name: str | None = None) -> PsiFunction:
    """Look up a psi function by name, falling back to `psi_quadratic`."""
    if name is None:
        return psi_quadratic
    try:
        return PSI_FUNCTIONS[name]
    except KeyError:
        logger.warning(
            "Unknown psi function %r, using psi_quadratic. Known: %s",
            name,
            sorted(PSI_FUNCTIONS),
        )
        return psi_quadratic
