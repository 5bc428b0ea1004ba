"""
Direct Linear Transform (DLT) equation assembly.

With the bottom-right entry of the homography fixed to 1, each of the four
correspondences contributes two linear equations in the remaining eight
unknowns ``[m00, m01, m02, m10, m11, m12, m20, m21]``.  Rows 0-3 hold the
x-equations and rows 4-7 the y-equations, in tl, tr, br, bl order.
"""

import logging

import numpy as np

from perspec.geometry.corners import as_corners
from perspec.geometry.errors import NonFiniteCoordinateError

logger = logging.getLogger(__name__)


def build_dlt_system(src, dst):
    """Build the 8 x 8 DLT system mapping *src* corners onto *dst* corners.

    For a correspondence ``(sx, sy) -> (dx, dy)``::

        [sx, sy, 1,  0,  0, 0, -sx*dx, -sy*dx] . m = dx
        [ 0,  0, 0, sx, sy, 1, -sx*dy, -sy*dy] . m = dy

    Parameters
    ----------
    src, dst : array-like
        4 x 2 (x, y) corners in tl, tr, br, bl order.

    Returns
    -------
    A : np.ndarray
        8 x 8 coefficient matrix.
    b : np.ndarray
        Right-hand side of length 8.

    Raises
    ------
    MissingInputError
        If either corner set is absent or malformed.
    NonFiniteCoordinateError
        If any of the 16 coordinates is NaN, or any coordinate of a
        correspondence is infinite.  Nothing is assembled in that case.
    """
    src = as_corners(src)
    dst = as_corners(dst)

    if np.isnan(src).any() or np.isnan(dst).any():
        logger.debug("Invalid coordinates (NaN) detected")
        raise NonFiniteCoordinateError("NaN in corner coordinates")

    A = np.zeros((8, 8), dtype=float)
    b = np.zeros(8, dtype=float)

    for i in range(4):
        sx, sy = src[i]
        dx, dy = dst[i]

        if np.isinf([sx, sy, dx, dy]).any():
            logger.debug("Invalid coordinates (Inf) detected in correspondence %d", i)
            raise NonFiniteCoordinateError(f"infinite coordinate in correspondence {i}")

        A[i] = [sx, sy, 1.0, 0.0, 0.0, 0.0, -sx * dx, -sy * dx]
        b[i] = dx

        A[i + 4] = [0.0, 0.0, 0.0, sx, sy, 1.0, -sx * dy, -sy * dy]
        b[i + 4] = dy

    return A, b
