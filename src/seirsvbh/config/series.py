"""Closed enumeration of the series compared between model and data."""

from enum import Enum
from typing import Callable

import numpy as np

from .reported_data import ReportedData


class TrackedSeries(str, Enum):
    """A reported series that a model solution can be compared against."""

    A = "A"
    H = "H"
    RTOTAL = "Rtotal"
    HTOTAL = "Htotal"
    VTOTAL = "Vtotal"
    DTOTAL = "Dtotal"
    # Rtotal + Dtotal, the removed compartment of the SEIR reference model
    REMOVED = "R"


# how each tracked series is read from reported data
REPORTED_SERIES: dict[TrackedSeries, Callable[[ReportedData], np.ndarray]] = {
    TrackedSeries.A: lambda data: data.A,
    TrackedSeries.H: lambda data: data.H,
    TrackedSeries.RTOTAL: lambda data: data.Rtotal,
    TrackedSeries.HTOTAL: lambda data: data.Htotal,
    TrackedSeries.VTOTAL: lambda data: data.Vtotal,
    TrackedSeries.DTOTAL: lambda data: data.Dtotal,
    TrackedSeries.REMOVED: lambda data: data.removed,
}

# series summed by the SEIRSVBH evaluator, in reporting order
SEIRSVBH_TRACKED = (
    TrackedSeries.A,
    TrackedSeries.H,
    TrackedSeries.RTOTAL,
    TrackedSeries.VTOTAL,
    TrackedSeries.HTOTAL,
    TrackedSeries.DTOTAL,
)
# series summed by the SEIR reference evaluator
SEIR_TRACKED = (TrackedSeries.A, TrackedSeries.REMOVED)


def reported_series(data: ReportedData, series: TrackedSeries) -> np.ndarray:
    """Look up `series` in `data` through the explicit mapping table."""
    return REPORTED_SERIES[series](data)
