# src/slbl_insar/errors.py
from __future__ import annotations


class SlblInsarError(Exception):
    """Base class for every error raised by the package."""


class DimensionMismatch(SlblInsarError, ValueError):
    """Two sequences that must be aligned have different lengths."""


class InvalidOrientation(SlblInsarError, ValueError):
    """Azimuth or incidence/dip outside of its valid range."""


class MissingParameter(SlblInsarError, ValueError):
    """A method-specific parameter is required but was not given."""


class SingularSystem(SlblInsarError, ArithmeticError):
    """The tridiagonal elimination met a zero pivot (degenerate range)."""


class NoIntersection(SlblInsarError):
    """No ground intersection was found for a pillar projection."""

    def __init__(self, index: int, message: str | None = None):
        self.index = int(index)
        super().__init__(message or f"No intersection with the topography at point {index}")


class OptimizerFailure(SlblInsarError, RuntimeError):
    """The calibration optimizer did not converge to a usable result."""
