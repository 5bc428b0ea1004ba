"""
Corner-set helpers.

A corner set is four (x, y) points ordered top-left, top-right,
bottom-right, bottom-left.  The order is trusted, never re-derived.
"""

import numpy as np

from perspec.geometry.errors import MissingInputError

CORNER_NAMES = ("tl", "tr", "br", "bl")


def as_corners(points) -> np.ndarray:
    """Coerce *points* into a 4 x 2 float64 array of (x, y) corners.

    Raises
    ------
    MissingInputError
        If *points* is ``None`` or does not hold exactly four (x, y) pairs.
    """
    if points is None:
        raise MissingInputError("corner set is missing")
    try:
        corners = np.array(points, dtype=float)
    except (TypeError, ValueError) as exc:
        raise MissingInputError(f"corner set is not numeric: {exc}") from exc
    if corners.shape != (4, 2):
        raise MissingInputError(
            f"corner set must be 4 (x, y) pairs, got shape {corners.shape}")
    return corners


def format_corners(corners: np.ndarray) -> str:
    """Render a corner set as ``tl(x, y) tr(x, y) br(x, y) bl(x, y)``."""
    return " ".join(f"{name}({x:f}, {y:f})"
                    for name, (x, y) in zip(CORNER_NAMES, corners))


def target_rectangle(corners) -> np.ndarray:
    """Upright rectangle that a skewed quadrilateral is flattened onto.

    The width is the longer of the top and bottom edges, the height the
    longer of the left and right edges, so no side of the photographed
    document is shrunk.

    Parameters
    ----------
    corners : array-like
        4 x 2 (x, y) corners in tl, tr, br, bl order.

    Returns
    -------
    np.ndarray
        4 x 2 corners ``(0, 0), (w, 0), (w, h), (0, h)``.
    """
    tl, tr, br, bl = as_corners(corners)

    width = max(np.linalg.norm(tr - tl), np.linalg.norm(br - bl))
    height = max(np.linalg.norm(bl - tl), np.linalg.norm(br - tr))

    return np.array([
        [0.0,   0.0],
        [width, 0.0],
        [width, height],
        [0.0,   height],
    ])


def quad_grid(corners, steps: int = 8) -> np.ndarray:
    """Sample points on a (steps + 1) x (steps + 1) grid inside a quadrilateral.

    Points are placed by bilinear interpolation between the corners, so the
    grid lines follow the quad's edges.  Useful for checking how interior
    points move under a homography.

    Returns
    -------
    np.ndarray
        ((steps + 1) ** 2) x 2 array of (x, y) points, row by row from the
        top edge to the bottom edge.
    """
    tl, tr, br, bl = as_corners(corners)
    t = np.linspace(0.0, 1.0, steps + 1)
    u, v = np.meshgrid(t, t)
    u = u.reshape(-1, 1)
    v = v.reshape(-1, 1)

    top = tl + u * (tr - tl)
    bottom = bl + u * (br - bl)
    return top + v * (bottom - top)
