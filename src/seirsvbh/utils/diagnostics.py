"""Structured, non-blocking diagnostics for numerically degenerate input.

The solvers keep computing when they meet negative compartments, negative
rates or zero denominators. Each such event is recorded as a `Diagnostic`
and forwarded to the package logger so callers can inspect degeneracies
without scraping log output.
"""

import logging
from typing import Iterable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("seirsvbh")

Severity = Literal["info", "warning"]
_LEVEL = {"info": logging.INFO, "warning": logging.WARNING}


class Diagnostic(BaseModel):
    """A single non-fatal observation made during a computation."""

    model_config = ConfigDict(frozen=True)
    severity: Severity = Field(description="""How serious the event is.""")
    context: str = Field(
        description="""Name of the routine that produced the diagnostic."""
    )
    message: str = Field(description="""Human readable description.""")
    step: Optional[int] = Field(
        default=None,
        description="""1-based day index the event refers to, if any.""",
    )

    def __str__(self) -> str:
        where = f" (step {self.step})" if self.step is not None else ""
        return f"{self.severity.upper()} {self.context}{where}: {self.message}"


class DiagnosticLog:
    """Accumulates diagnostics for one computation and logs each of them."""

    def __init__(self, context: str):
        self.context = context
        self.records: list[Diagnostic] = []

    def _record(
        self, severity: Severity, message: str, step: Optional[int]
    ) -> None:
        diagnostic = Diagnostic(
            severity=severity,
            context=self.context,
            message=message,
            step=step,
        )
        self.records.append(diagnostic)
        logger.log(_LEVEL[severity], str(diagnostic))

    def info(self, message: str, step: Optional[int] = None) -> None:
        self._record("info", message, step)

    def warning(self, message: str, step: Optional[int] = None) -> None:
        self._record("warning", message, step)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        """Adopt diagnostics produced by a nested computation without re-logging."""
        self.records.extend(diagnostics)

    def warn_if_negative(
        self, name: str, value: float, step: Optional[int] = None
    ) -> None:
        if value < 0:
            self.warning(f"Negative {name}: {value:.6g}", step)

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.records if d.severity == "warning"]

    def __len__(self) -> int:
        return len(self.records)
