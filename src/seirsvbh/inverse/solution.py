"""Records returned by the inverse data problem solvers."""

import numpy as np
import pandas as pd  # type: ignore
from pydantic import BaseModel, ConfigDict, Field

from ..utils import Diagnostic


class IDPSolution(BaseModel):
    """Reconstructed SEIRSVBH states and daily rates.

    Rates are indexed by day interval (length L - 1), states by day
    (length L).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)
    xi: float = Field(description="""Interpolation weight used.""")
    h: float = Field(description="""Nominal step length used.""")
    c: float = Field(description="""psi shape parameter used.""")
    psi_h: float = Field(description="""Effective step psi(h, c).""")
    alpha: np.ndarray
    beta: np.ndarray
    gamma: np.ndarray
    rho: np.ndarray
    sigma: np.ndarray
    tau: np.ndarray
    S: np.ndarray
    E: np.ndarray
    I: np.ndarray  # noqa: E741
    R: np.ndarray
    V: np.ndarray
    B: np.ndarray
    N: np.ndarray
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def num_days(self) -> int:
        return len(self.S)

    def parameters_dataframe(self) -> pd.DataFrame:
        """Daily rates, one row per day interval."""
        return pd.DataFrame(
            {
                name: getattr(self, name)
                for name in ("alpha", "beta", "gamma", "rho", "sigma", "tau")
            },
            index=pd.RangeIndex(1, self.num_days, name="day"),
        )

    def states_dataframe(self) -> pd.DataFrame:
        """Reconstructed compartments, one row per day."""
        return pd.DataFrame(
            {
                name: getattr(self, name)
                for name in ("S", "E", "I", "R", "V", "B", "N")
            },
            index=pd.RangeIndex(1, self.num_days + 1, name="day"),
        )

    def to_dataframe(self) -> pd.DataFrame:
        """States and rates side by side, rates are NaN on the last day."""
        return self.states_dataframe().join(self.parameters_dataframe())


class IDPSolutionSeir(BaseModel):
    """Reconstructed SEIR reference states and daily rates."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)
    beta: np.ndarray
    gamma: np.ndarray
    omega: np.ndarray = Field(
        description="""Incubation rates passed through, one per interval."""
    )
    S: np.ndarray
    E: np.ndarray
    I: np.ndarray  # noqa: E741
    R: np.ndarray
    N: float
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    def parameters_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            {"beta": self.beta, "gamma": self.gamma, "omega": self.omega},
            index=pd.RangeIndex(1, len(self.S), name="day"),
        )

    def states_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            {"S": self.S, "E": self.E, "I": self.I, "R": self.R},
            index=pd.RangeIndex(1, len(self.S) + 1, name="day"),
        )

    def to_dataframe(self) -> pd.DataFrame:
        return self.states_dataframe().join(self.parameters_dataframe())
