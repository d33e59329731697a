"""Day-end trajectories produced by the forward (direct) problem."""

from typing import Callable, Literal, Optional

import numpy as np
import pandas as pd  # type: ignore
from pydantic import BaseModel, ConfigDict, Field

from ..config import TrackedSeries
from ..utils import Diagnostic


class ModelSolution(BaseModel):
    """Compartment trajectories sampled at the end of every day.

    SEIRSVBH solutions fill every field; SEIR solutions leave the
    vaccination, hospital and cumulative-total fields as None.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)
    kind: Literal["seirsvbh", "seir"]
    t: np.ndarray = Field(description="""Day-end times 0, h, ..., K h.""")
    S: np.ndarray
    E: np.ndarray
    I: np.ndarray  # noqa: E741
    R: np.ndarray
    V: Optional[np.ndarray] = None
    B: Optional[np.ndarray] = None
    H: Optional[np.ndarray] = None
    Rt: Optional[np.ndarray] = Field(
        default=None, description="""Cumulative recovered."""
    )
    Ht: Optional[np.ndarray] = Field(
        default=None, description="""Cumulative hospitalized."""
    )
    Vt: Optional[np.ndarray] = Field(
        default=None, description="""Cumulative vaccinated."""
    )
    Dt: Optional[np.ndarray] = Field(
        default=None, description="""Cumulative deaths."""
    )
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @classmethod
    def from_day_end_states(
        cls,
        kind: Literal["seirsvbh", "seir"],
        t: np.ndarray,
        ys: np.ndarray,
        compartments: tuple[str, ...],
        diagnostics: Optional[list[Diagnostic]] = None,
    ) -> "ModelSolution":
        columns = {name: ys[:, idx] for idx, name in enumerate(compartments)}
        return cls(
            kind=kind, t=t, diagnostics=diagnostics or [], **columns
        )

    @property
    def A(self) -> np.ndarray:
        """Active cases: E + I + H, or E + I for SEIR."""
        if self.H is None:
            return self.E + self.I
        return self.E + self.I + self.H

    def series(self, series: TrackedSeries) -> np.ndarray:
        """Modeled counterpart of a reported series.

        Raises
        ------
        ValueError
            if this model does not produce `series`.
        """
        values = MODEL_SERIES[series](self)
        if values is None:
            raise ValueError(
                f"series {series.value} is not modeled by the {self.kind} model."
            )
        return values

    def to_dataframe(self) -> pd.DataFrame:
        """One column per modeled series, indexed by day-end time."""
        columns = {
            name: getattr(self, name)
            for name in ("S", "E", "I", "R", "V", "B", "H", "Rt", "Ht", "Vt", "Dt")
            if getattr(self, name) is not None
        }
        columns["A"] = self.A
        return pd.DataFrame(columns, index=pd.Index(self.t, name="t"))


def _removed(solution: ModelSolution) -> Optional[np.ndarray]:
    if solution.kind == "seir":
        return solution.R
    return solution.Rt + solution.Dt


# how each tracked series is read from a model solution
MODEL_SERIES: dict[
    TrackedSeries, Callable[[ModelSolution], Optional[np.ndarray]]
] = {
    TrackedSeries.A: lambda solution: solution.A,
    TrackedSeries.H: lambda solution: solution.H,
    TrackedSeries.RTOTAL: lambda solution: solution.Rt,
    TrackedSeries.HTOTAL: lambda solution: solution.Ht,
    TrackedSeries.VTOTAL: lambda solution: solution.Vt,
    TrackedSeries.DTOTAL: lambda solution: solution.Dt,
    TrackedSeries.REMOVED: _removed,
}
