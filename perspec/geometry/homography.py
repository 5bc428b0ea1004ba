"""
Homography estimation from four corner correspondences.

A planar homography (projective transformation) maps the four corners of a
photographed, skewed document onto the four corners of an upright rectangle.
The 3x3 matrix is estimated via the Direct Linear Transform (DLT) with the
bottom-right entry fixed to 1, and the resulting 8 x 8 system is solved by
Gaussian elimination.

``compute_homography`` never raises and never returns a degenerate matrix:
whenever a guard trips (missing or non-finite input, singular system,
non-finite or oversized solution) the identity transform is returned
instead, so a caller always receives a usable, finite transform.
"""

import logging

import numpy as np

from perspec.geometry.corners import as_corners, format_corners
from perspec.geometry.dlt import build_dlt_system
from perspec.geometry.errors import (
    HomographyError,
    NonFiniteCoordinateError,
    NonFiniteResultError,
    NonFiniteSolutionError,
    SingularSystemError,
    SolutionMagnitudeError,
)
from perspec.geometry.linear_solver import PIVOT_EPSILON, solve_linear_system
from perspec.geometry.normalization import (
    denormalize_homography,
    normalization_matrix,
    normalize_points,
)

logger = logging.getLogger(__name__)

MAX_COEFFICIENT = 1e6

IDENTITY = np.eye(3)
IDENTITY.setflags(write=False)


def compute_homography(src, dst, normalize: bool = False) -> np.ndarray:
    """Estimate the 3x3 homography mapping *src* corners onto *dst* corners.

    Parameters
    ----------
    src : array-like
        4 x 2 (x, y) source corners, ordered top-left, top-right,
        bottom-right, bottom-left.
    dst : array-like
        4 x 2 (x, y) destination corners in the same order.
    normalize : bool
        Precondition both corner sets (centroid at origin, mean distance
        sqrt(2)) before solving and map the result back afterwards.
        Off by default; it changes the intermediate numerics.

    Returns
    -------
    H : np.ndarray
        3 x 3 homography (``H[2, 2] == 1``) such that
        ``dst ≈ H @ src`` in homogeneous coordinates, or a copy of
        ``IDENTITY`` if no trustworthy result could be computed.
    """
    try:
        if logger.isEnabledFor(logging.DEBUG):
            _log_corners(src, dst)

        if normalize:
            H = _solve_normalized(src, dst)
        else:
            H = _solve(src, dst)
    except HomographyError as exc:
        logger.debug("%s: %s; returning identity matrix",
                     type(exc).__name__, exc)
        return IDENTITY.copy()

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Result matrix:\n%s", np.array2string(H, precision=6))
    return H


def _solve(src, dst) -> np.ndarray:
    A, b = build_dlt_system(src, dst)
    x = solve_linear_system(A, b)
    _check_coefficients(x)

    H = np.append(x, 1.0).reshape(3, 3)

    # Re-check the assembled matrix, independent of the checks above
    if not np.isfinite(H).all():
        raise NonFiniteResultError("assembled matrix has non-finite entries")
    return H


def _solve_normalized(src, dst) -> np.ndarray:
    src = as_corners(src)
    dst = as_corners(dst)
    if not (np.isfinite(src).all() and np.isfinite(dst).all()):
        raise NonFiniteCoordinateError("non-finite corner coordinates")

    src_n, src_scale, src_t = normalize_points(src)
    dst_n, dst_scale, dst_t = normalize_points(dst)

    H_n = _solve(src_n, dst_n)
    H = denormalize_homography(H_n,
                               normalization_matrix(src_scale, src_t),
                               normalization_matrix(dst_scale, dst_t))

    if abs(H[2, 2]) < PIVOT_EPSILON:
        raise SingularSystemError("denormalized matrix has m22 ≈ 0")
    H = H / H[2, 2]
    _check_coefficients(H.reshape(-1)[:8])

    if not np.isfinite(H).all():
        raise NonFiniteResultError("denormalized matrix has non-finite entries")
    return H


def _check_coefficients(x: np.ndarray) -> None:
    for i, value in enumerate(x):
        if not np.isfinite(value):
            raise NonFiniteSolutionError(f"unknown {i} is not finite")
        if abs(value) > MAX_COEFFICIENT:
            raise SolutionMagnitudeError(
                f"unknown {i} = {value:.3e} exceeds {MAX_COEFFICIENT:.0e}")


def _log_corners(src, dst) -> None:
    for label, corners in (("src_corners", src), ("dst_corners", dst)):
        try:
            logger.debug("%s: %s", label, format_corners(as_corners(corners)))
        except HomographyError:
            logger.debug("%s: %r", label, corners)


def apply_homography(H: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Apply a homography to a set of (x, y) points.

    Each point ``(px, py)`` maps to ``(wx / w, wy / w)`` with
    ``[wx, wy, w] = H @ [px, py, 1]``.

    Parameters
    ----------
    H : np.ndarray
        3 x 3 homography matrix.
    points : np.ndarray
        N x 2 array of (x, y) coordinates.

    Returns
    -------
    np.ndarray
        N x 2 array of transformed (x, y) coordinates.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    ones = np.ones((points.shape[0], 1))
    homog = np.hstack([points, ones]).T

    transformed = H @ homog
    transformed = transformed / transformed[2:3, :]

    return transformed[:2, :].T
