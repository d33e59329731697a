"""Exceptions raised for fatal input problems."""


class SeirsvbhError(Exception):
    """Base class of every error raised deliberately by seirsvbh."""

    pass


class AlignmentError(SeirsvbhError, ValueError):
    """Raised when series can not be aligned to a usable common length."""

    pass


class LengthMismatchError(SeirsvbhError, ValueError):
    """Raised when series that must have equal length differ."""

    pass


class ArtifactError(SeirsvbhError, KeyError):
    """Raised when a persisted error-grid artifact lacks a required entry."""

    pass
