"""
Error taxonomy for the landscape clustering pipeline.

Every error derives from TopologyError and from ValueError, so callers
that only care about bad input can keep catching ValueError.
"""

from typing import Dict


class TopologyError(ValueError):
    """Base class for all pipeline errors."""
    pass


class InsufficientLengthError(TopologyError):
    """Raised when a series is too short for the chosen dim_lag and sample_lag."""
    pass


class DegenerateCloudError(TopologyError):
    """Raised when fewer than 2 points reach the homology computation."""
    pass


class DimensionMismatchError(TopologyError):
    """Raised when landscape vectors of unequal length reach clustering."""
    pass


class InvalidMetricError(TopologyError):
    """Raised when the configured distance metric or linkage is unsupported."""
    pass


class InsufficientSeriesError(TopologyError):
    """Raised when clustering receives fewer than two landscapes."""
    pass


class ConfigurationError(TopologyError):
    """Raised when pipeline configuration is malformed or out of range."""
    pass


class SeriesFailureError(TopologyError):
    """
    Raised when one or more series fail and the run is set to abort.

    Attributes
    ----------
    failures : dict
        {label: exception} for every series that failed.
    """

    def __init__(self, failures: Dict[str, Exception]):
        self.failures = dict(failures)
        details = '; '.join(
            f"{label}: {type(exc).__name__}: {exc}"
            for label, exc in self.failures.items()
        )
        super().__init__(f"{len(self.failures)} series failed ({details})")
