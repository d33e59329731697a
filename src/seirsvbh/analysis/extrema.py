"""Locate exact minima and maxima of relative error matrices and report them."""

import logging
from typing import Literal, Optional, Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from ..typing import ErrorMetric
from .sweep import ErrorGrid

logger = logging.getLogger("seirsvbh")


class GridPoint(BaseModel):
    """A grid cell, 0-based matrix indices plus coordinates when known."""

    model_config = ConfigDict(frozen=True)
    row: int
    col: int
    xi: Optional[float] = None
    c: Optional[float] = None


class Extremum(BaseModel):
    """Every cell attaining the NaN-omitting extremum of one matrix."""

    model_config = ConfigDict(frozen=True)
    label: str
    value: Optional[float] = Field(
        default=None, description="""None when no entry is finite."""
    )
    occurrences: list[GridPoint] = Field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.value is not None


class ExtremaSummary(BaseModel):
    """Minima of l2, linf and l2 + linf, maxima of l2 and linf, and the report."""

    model_config = ConfigDict(frozen=True)
    l2_min: Extremum
    linf_min: Extremum
    sum_min: Extremum
    l2_max: Extremum
    linf_max: Extremum
    report: str = ""

    def best_xi_c(
        self, metric: ErrorMetric = "l2"
    ) -> Optional[tuple[Optional[float], Optional[float]]]:
        """(xi, c) of the first minimum of `metric`, None if there is none."""
        extremum = {
            "l2": self.l2_min,
            "linf": self.linf_min,
            "sum": self.sum_min,
        }[metric]
        if not extremum.occurrences:
            return None
        first = extremum.occurrences[0]
        return first.xi, first.c


def find_exact_extrema(
    matrix: np.ndarray,
    label: str,
    which: Literal["min", "max"],
    xi_list: Optional[Sequence[float]] = None,
    c_list: Optional[Sequence[float]] = None,
) -> Extremum:
    """Cells equal, bit for bit, to the NaN-omitting min or max of `matrix`.

    Occurrences are listed in column-major order.
    """
    matrix = np.atleast_2d(np.asarray(matrix, dtype=np.float64))
    if matrix.size == 0 or np.all(np.isnan(matrix)):
        return Extremum(label=label)
    value = np.nanmin(matrix) if which == "min" else np.nanmax(matrix)
    # argwhere on the transpose walks columns first
    cols_rows = np.argwhere(matrix.T == value)
    occurrences = [
        GridPoint(
            row=int(row),
            col=int(col),
            xi=None if xi_list is None else float(xi_list[row]),
            c=None if c_list is None else float(c_list[col]),
        )
        for col, row in cols_rows
    ]
    return Extremum(label=label, value=float(value), occurrences=occurrences)


def _format_extremum(extremum: Extremum) -> list[str]:
    if not extremum.found:
        return [f"{extremum.label:<9} = NaN (no finite entries)"]
    lines = [
        f"{extremum.label:<9} = {extremum.value:.10g} "
        f"(occurrences: {len(extremum.occurrences)})"
    ]
    for number, point in enumerate(extremum.occurrences, start=1):
        where = f"  #{number}  (ii={point.row + 1}, jj={point.col + 1})"
        if point.xi is not None and point.c is not None:
            where += f" -> (xi={point.xi:.10g}, c={point.c:.10g})"
        lines.append(where)
    return lines


def _format_cell(value: float, centre: bool) -> str:
    text = "NaN" if np.isnan(value) else f"{value:.10g}"
    return f"  [{text}]" if centre else f"  {text:<13}"


def _c_scan(
    l2mat: np.ndarray,
    linfmat: np.ndarray,
    point: GridPoint,
    window_c: int,
    metric: str,
    value: float,
    c_list: Sequence[float],
) -> list[str]:
    """l2 and linf along c, +-window_c columns around `point`, centre bracketed."""
    lo = max(0, point.col - window_c)
    hi = min(l2mat.shape[1] - 1, point.col + window_c)
    lines = [
        "",
        f"  @ {metric} minimum: value = {value:.10g} at "
        f"(xi={point.xi:.10g}, c={point.c:.10g})",
        f"  Scan along c (±{window_c} columns) at fixed xi={point.xi:.10g}",
        "    "
        + f"{'c value →':<8}"
        + "".join(f"  {float(c_list[col]):<13.10g}" for col in range(lo, hi + 1)),
    ]
    for name, matrix in (("l2", l2mat), ("linf", linfmat)):
        lines.append(
            "    "
            + f"{name:<8}"
            + "".join(
                _format_cell(matrix[point.row, col], col == point.col)
                for col in range(lo, hi + 1)
            )
        )
    return lines


def summarize_relative_errors(
    l2mat: np.ndarray,
    linfmat: np.ndarray,
    window_c: int = 5,
    xi_list: Optional[Sequence[float]] = None,
    c_list: Optional[Sequence[float]] = None,
    silent: bool = False,
) -> ExtremaSummary:
    """Find exact extrema of the error matrices and render a text report.

    Parameters
    ----------
    l2mat, linfmat : np.ndarray
        |xi| x |c| relative error matrices, NaN for failed cells.
    window_c : int
        half width of the c scan printed around each l2 and linf minimum.
    xi_list, c_list : Sequence[float], optional
        coordinates of the rows and columns.
    silent : bool
        if True the report is neither scanned nor logged.

    Returns
    -------
    ExtremaSummary
        the extrema and the report text (empty when silent).

    Raises
    ------
    ValueError
        if a scan is due but `xi_list` or `c_list` is missing.
    """
    l2mat = np.atleast_2d(np.asarray(l2mat, dtype=np.float64))
    linfmat = np.atleast_2d(np.asarray(linfmat, dtype=np.float64))
    sum_mat = l2mat + linfmat
    summary_fields = {
        "l2_min": find_exact_extrema(l2mat, "l2  MIN", "min", xi_list, c_list),
        "l2_max": find_exact_extrema(l2mat, "l2  MAX", "max", xi_list, c_list),
        "linf_min": find_exact_extrema(
            linfmat, "linf MIN", "min", xi_list, c_list
        ),
        "linf_max": find_exact_extrema(
            linfmat, "linf MAX", "max", xi_list, c_list
        ),
        "sum_min": find_exact_extrema(
            sum_mat, "l2+linf MIN", "min", xi_list, c_list
        ),
    }
    if silent:
        return ExtremaSummary(**summary_fields)

    lines: list[str] = []
    for key in ("l2_min", "l2_max", "linf_min", "linf_max", "sum_min"):
        lines.extend(_format_extremum(summary_fields[key]))
    for metric, key in (("l2", "l2_min"), ("linf", "linf_min")):
        extremum = summary_fields[key]
        if not extremum.occurrences:
            continue
        if xi_list is None or c_list is None:
            raise ValueError(
                "Need c-grid (xi_list and c_list) to print c values."
            )
        lines.extend(
            ["", f"== Scan along c at xi where {metric} minimum occurs =="]
        )
        for point in extremum.occurrences:
            lines.extend(
                _c_scan(
                    l2mat,
                    linfmat,
                    point,
                    window_c,
                    metric,
                    extremum.value,
                    c_list,
                )
            )
    report = "\n".join(lines)
    logger.info("Relative error extrema:\n%s", report)
    return ExtremaSummary(**summary_fields, report=report)


def summarize_error_grid(
    grid: ErrorGrid, window_c: int = 5, silent: bool = False
) -> ExtremaSummary:
    """`summarize_relative_errors` on a sweep result, with its coordinates."""
    return summarize_relative_errors(
        grid.l2mat,
        grid.linfmat,
        window_c=window_c,
        xi_list=grid.xi,
        c_list=grid.c,
        silent=silent,
    )
