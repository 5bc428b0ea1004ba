"""
Image and result I/O helpers.

Thin wrappers around Pillow and numpy for consistent image loading, matrix
output, and output directory management across the driver.
"""

import os
import numpy as np
from PIL import Image


def load_image(path: str) -> np.ndarray:
    """Load an image as a uint8 RGB array.

    Parameters
    ----------
    path : str
        File path to the image.

    Returns
    -------
    np.ndarray
        H x W x 3 uint8 array.
    """
    with Image.open(path) as img:
        return np.array(img.convert("RGB"))


def save_matrix(H: np.ndarray, job: str, base: str = "results") -> str:
    """Write *H* as three whitespace-separated rows to ``<base>/<job>/homography.txt``."""
    path = os.path.join(base, job, "homography.txt")
    np.savetxt(path, H, fmt="%.10g")
    return path


def ensure_output_dirs(jobs: list, base: str = "results") -> None:
    """Create output subdirectories for each job name.

    Parameters
    ----------
    jobs : list of str
        Job identifiers (one subdirectory is created per job).
    base : str
        Root output directory.
    """
    for job in jobs:
        os.makedirs(os.path.join(base, job), exist_ok=True)
