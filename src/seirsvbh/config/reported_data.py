"""The reported epidemiological data record consumed by every solver."""

from typing import Annotated, Any, Mapping

import numpy as np
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from typing_extensions import Self

from .errors import AlignmentError


def _as_series(value: Any) -> np.ndarray:
    """Coerce a list, tuple or (1, n) / (n, 1) matrix to a read-only 1-D float array."""
    array = np.array(value, dtype=np.float64).reshape(-1)
    array.setflags(write=False)
    return array


def _as_scalar(value: Any) -> float:
    array = np.asarray(value, dtype=np.float64)
    if array.size != 1:
        raise ValueError(
            f"expected a scalar, got an array with shape {array.shape}"
        )
    return float(array.reshape(-1)[0])


Series = Annotated[np.ndarray, BeforeValidator(_as_series)]
Scalar = Annotated[float, BeforeValidator(_as_scalar)]

# names of the series observed on every day (length L)
OBSERVED_FIELDS = ("A", "H", "Rtotal", "Htotal", "Vtotal", "Dtotal")
# names of the known parameter series (length L or L-1)
PARAMETER_FIELDS = ("Lambda", "theta", "omega", "lambda_", "nu", "mu", "phi")


class ReportedData(BaseModel):
    """Daily reported series and known parameters of one epidemic.

    Observed series are indexed by day, parameter series by day interval.
    Series of unequal length are never an error on their own: every
    computation aligns them to a common number of days, see
    `aligned_length`.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True, frozen=True, populate_by_name=True
    )
    # known parameters
    Lambda: Series = Field(description="""Birth/replenishment rate Λ.""")
    theta: Series = Field(description="""Natural death rate θ.""")
    omega: Series = Field(description="""Incubation rate ω, E -> I.""")
    lambda_: Series = Field(
        alias="lambda", description="""Recovered waning rate λ, R -> S."""
    )
    nu: Series = Field(
        description="""Vaccine-immune waning rate ν, B -> S."""
    )
    mu: Series = Field(
        description="""Vaccine-derived immunity rate μ, V -> B."""
    )
    phi: Series = Field(
        description="""Vaccination reporting split factor φ."""
    )
    # observed series
    A: Series = Field(description="""Active cases, E + I + H.""")
    H: Series = Field(description="""Currently hospitalized.""")
    Rtotal: Series = Field(description="""Cumulative recovered.""")
    Htotal: Series = Field(description="""Cumulative hospitalized.""")
    Vtotal: Series = Field(description="""Cumulative vaccinated.""")
    Dtotal: Series = Field(description="""Cumulative deaths.""")
    # initial compartment sizes
    N1: Scalar = Field(description="""Initial population.""")
    I1: Scalar = Field(description="""Initial infectious.""")
    R1: Scalar = Field(default=0.0, description="""Initial recovered.""")
    V1: Scalar = Field(default=0.0, description="""Initial vaccinated.""")
    B1: Scalar = Field(
        default=0.0, description="""Initial vaccine-immune."""
    )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> Self:
        """Build a record from a flat mapping, ignoring unknown keys.

        Keys follow the names used by the original data files, for example
        `lambda` and `Rtotal`. Field names such as `lambda_` work too.
        """
        known = set(cls.model_fields) | {
            field.alias
            for field in cls.model_fields.values()
            if field.alias is not None
        }
        return cls.model_validate(
            {key: value for key, value in mapping.items() if key in known}
        )

    @classmethod
    def from_mappings(cls, *mappings: Mapping[str, Any]) -> Self:
        """Merge several mappings, later ones winning, then build a record.

        Typically a states mapping and a known-parameters mapping.
        """
        merged: dict[str, Any] = {}
        for mapping in mappings:
            merged.update(mapping)
        return cls.from_mapping(merged)

    def replace(self, **changes: Any) -> Self:
        """Return a validated copy with some fields replaced."""
        values = {name: getattr(self, name) for name in type(self).model_fields}
        values.update(changes)
        return type(self).model_validate(values)

    def observed_length(self) -> int:
        """Shortest length across the observed series."""
        return min(len(getattr(self, name)) for name in OBSERVED_FIELDS)

    def aligned_length(self) -> int:
        """Number of days usable when every series is consumed together.

        Observed series provide one value per day and parameter series one
        value per day interval, so the aligned day count is the minimum of
        the observed lengths and each parameter length plus one.

        Raises
        ------
        AlignmentError
            if any series is empty.
        """
        empty = [
            name
            for name in OBSERVED_FIELDS + PARAMETER_FIELDS
            if len(getattr(self, name)) == 0
        ]
        if empty:
            raise AlignmentError(
                f"Empty alignment lengths, series {empty} contain no values."
            )
        return min(
            [self.observed_length()]
            + [len(getattr(self, name)) + 1 for name in PARAMETER_FIELDS]
        )

    def truncate(self, days: int) -> Self:
        """Cut observed series to `days` values and parameters to `days - 1`."""
        if days < 1:
            raise AlignmentError(f"can not truncate to {days} days.")
        changes: dict[str, Any] = {
            name: getattr(self, name)[:days] for name in OBSERVED_FIELDS
        }
        changes.update(
            {
                name: getattr(self, name)[: days - 1]
                for name in PARAMETER_FIELDS
            }
        )
        return self.replace(**changes)

    @property
    def G(self) -> np.ndarray:
        """Non-hospitalized active cases, A - H, over the observed overlap."""
        m = min(len(self.A), len(self.H))
        return self.A[:m] - self.H[:m]

    @property
    def removed(self) -> np.ndarray:
        """Removed compartment of the SEIR reference model, Rtotal + Dtotal."""
        m = min(len(self.Rtotal), len(self.Dtotal))
        return self.Rtotal[:m] + self.Dtotal[:m]
