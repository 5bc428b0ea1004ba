"""
Failure taxonomy for homography estimation.

Each stage of the estimation pipeline raises one of these when a guard
trips.  ``compute_homography`` is the only place they are caught; there
every one of them collapses to the identity fallback.
"""


class HomographyError(ValueError):
    """Base class for every estimation failure."""


class MissingInputError(HomographyError):
    """A corner set is absent or is not four (x, y) pairs."""


class NonFiniteCoordinateError(HomographyError):
    """An input coordinate is NaN or infinite."""


class SingularSystemError(HomographyError):
    """A pivot fell below the epsilon threshold."""


class NonFiniteSolutionError(HomographyError):
    """A solved unknown is NaN or infinite."""


class SolutionMagnitudeError(HomographyError):
    """A solved unknown exceeds the accepted coefficient magnitude."""


class NonFiniteResultError(HomographyError):
    """The assembled 3x3 matrix contains NaN or infinite entries."""
