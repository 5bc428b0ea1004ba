"""
Visualization utilities for the corner-flattening driver.

All functions save figures to disk rather than displaying them interactively,
making the module suitable for headless execution.  Only corner overlays and
sample grids are drawn; no image is ever resampled.
"""

import os
import numpy as np
import matplotlib
matplotlib.use("Agg")          # non-interactive backend
import matplotlib.pyplot as plt

from perspec.geometry.corners import CORNER_NAMES, quad_grid
from perspec.geometry.homography import apply_homography


def _draw_quad(ax, corners: np.ndarray, style: str, label: str) -> None:
    closed = np.vstack([corners, corners[:1]])
    ax.plot(closed[:, 0], closed[:, 1], style, linewidth=2, label=label)
    for name, (x, y) in zip(CORNER_NAMES, corners):
        ax.text(x, y, name, color="yellow", fontsize=8, weight="bold",
                bbox=dict(boxstyle="round,pad=0.2", facecolor="black", alpha=0.5))


def save_quad_mapping(src: np.ndarray, dst: np.ndarray, H: np.ndarray,
                      job: str, out_dir: str, image: np.ndarray = None,
                      grid_steps: int = 8, fallback: bool = False) -> str:
    """Save a side-by-side figure of the source quad and its mapped grid.

    The left panel shows the source corners (over *image* when given) with
    an interior sample grid; the right panel shows the destination corners
    and the same grid pushed through *H*.

    Returns
    -------
    str
        Path of the written figure.
    """
    grid = quad_grid(src, grid_steps)
    mapped = apply_homography(H, grid)

    fig, axes = plt.subplots(1, 2, figsize=(14, 7))

    if image is not None:
        axes[0].imshow(image)
    _draw_quad(axes[0], src, "r-", "source")
    axes[0].plot(grid[:, 0], grid[:, 1], "c.", markersize=3)
    axes[0].set_title(f"{job} – source corners")
    axes[0].set_aspect("equal")
    if image is None:
        axes[0].invert_yaxis()

    _draw_quad(axes[1], dst, "g-", "destination")
    axes[1].plot(mapped[:, 0], mapped[:, 1], "c.", markersize=3)
    status = "identity fallback" if fallback else "mapped grid"
    axes[1].set_title(f"{job} – {status}")
    axes[1].set_aspect("equal")
    axes[1].invert_yaxis()

    for ax in axes:
        ax.legend(loc="lower right")
        ax.grid(True, alpha=0.3)

    path = os.path.join(out_dir, job, "quad_mapping.jpg")
    plt.tight_layout()
    plt.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return path
