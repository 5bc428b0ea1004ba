"""
Isotropic point normalization for DLT preconditioning.

Translates a point set so its centroid sits at the origin and scales it so
the mean distance from the origin is sqrt(2).  A homography estimated on
normalized points is mapped back with ``denormalize_homography``.
"""

import numpy as np
import numpy.linalg as la

SCALE_EPSILON = 1e-10


def normalize_points(points: np.ndarray):
    """Normalize *points* to zero centroid and mean distance sqrt(2).

    Parameters
    ----------
    points : np.ndarray
        N x 2 array of (x, y) points.  Not modified.

    Returns
    -------
    normalized : np.ndarray
        N x 2 normalized copy of *points*.
    scale : float
        Uniform scale factor; 1.0 when the points all coincide.
    translation : np.ndarray
        (tx, ty), the negated centroid, applied before scaling.
    """
    points = np.asarray(points, dtype=float)
    centroid = np.mean(points, axis=0)
    avg_distance = np.mean(la.norm(points - centroid, axis=1))

    scale = np.sqrt(2.0) / avg_distance if avg_distance > SCALE_EPSILON else 1.0
    translation = -centroid

    normalized = (points + translation) * scale
    return normalized, float(scale), translation


def normalization_matrix(scale: float, translation) -> np.ndarray:
    """3 x 3 matrix form of the normalization ``p' = scale * (p + t)``."""
    tx, ty = translation
    return np.array([[scale, 0.0,   scale * tx],
                     [0.0,   scale, scale * ty],
                     [0.0,   0.0,   1.0]])


def denormalize_homography(H: np.ndarray, T_src: np.ndarray,
                           T_dst: np.ndarray) -> np.ndarray:
    """Undo normalization: ``inv(T_dst) @ H @ T_src``.  Not rescaled."""
    return la.inv(T_dst) @ H @ T_src
