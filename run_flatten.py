#!/usr/bin/env python3
"""
run_flatten.py – Document Corner Flattening Driver

Loads configuration from configs/default.yaml (or a user-specified file),
computes the homography that maps each job's four source corners onto its
destination corners (or onto the upright rectangle derived from the source
corners), and writes the matrix plus a corner-mapping figure per job.

Usage
-----
    python run_flatten.py
    python run_flatten.py --config configs/default.yaml
    python run_flatten.py --jobs receipt whiteboard
    python run_flatten.py --normalize --debug
    python run_flatten.py --no-plots
"""

import argparse
import logging
import os
import sys
import time

import numpy as np
import yaml

# Ensure the project root is on the Python path when invoked directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from perspec.geometry.corners import as_corners, target_rectangle
from perspec.geometry.errors import HomographyError
from perspec.geometry.homography import IDENTITY, apply_homography, compute_homography
from perspec.utils.image_io import ensure_output_dirs, load_image, save_matrix


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────

def load_config(path: str) -> dict:
    with open(path, "r") as fh:
        return yaml.safe_load(fh) or {}


def banner(text: str) -> None:
    width = 60
    print("\n" + "─" * width)
    print(f"  {text}")
    print("─" * width)


def job_corners(job_cfg: dict):
    """Return the (source, destination) corner arrays for a job.

    A missing ``destination`` means "flatten onto the upright rectangle".
    Raises ``HomographyError`` if either corner set is malformed.
    """
    src = as_corners(job_cfg.get("source"))
    if job_cfg.get("destination") is None:
        return src, target_rectangle(src)
    return src, as_corners(job_cfg["destination"])


# ──────────────────────────────────────────────────────────────────────────────
# Per-job pipeline
# ──────────────────────────────────────────────────────────────────────────────

def run_job(job_cfg: dict, cfg: dict, results_dir: str, normalize: bool,
            make_plots: bool) -> dict:
    """Compute and save the homography for a single job; return summary metrics."""
    name = job_cfg["name"]
    banner(f"Job: {name}")

    metrics = {"job": name, "identity": True, "max_error": None}

    try:
        src, dst = job_corners(job_cfg)
    except HomographyError as exc:
        print(f"  Skipped – invalid corners ({exc})")
        return metrics

    print(f"  Source      : {np.round(src, 3).tolist()}")
    print(f"  Destination : {np.round(dst, 3).tolist()}")

    H = compute_homography(src, dst, normalize=normalize)
    identity = np.array_equal(H, IDENTITY)
    metrics["identity"] = identity

    if identity:
        print("  No trustworthy transform – using identity")
    else:
        with np.errstate(all="ignore"):
            mapped = apply_homography(H, src)
        error = float(np.max(np.linalg.norm(mapped - dst, axis=1)))
        metrics["max_error"] = error
        print(f"  Corner reprojection error: {error:.3e}")

    path = save_matrix(H, name, base=results_dir)
    print(f"  Saved matrix → {path}")

    if make_plots and np.isfinite(src).all() and np.isfinite(dst).all():
        # Import lazily so --no-plots runs never touch matplotlib
        from perspec.utils.visualization import save_quad_mapping

        image = load_image(job_cfg["image"]) if job_cfg.get("image") else None
        steps = cfg.get("visualization", {}).get("grid_steps", 8)
        fig_path = save_quad_mapping(src, dst, H, name, results_dir,
                                     image=image, grid_steps=steps,
                                     fallback=identity)
        print(f"  Saved figure → {fig_path}")

    return metrics


# ──────────────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Compute perspective-correction homographies from document corners"
    )
    p.add_argument(
        "--config", default="configs/default.yaml",
        help="Path to YAML configuration file (default: configs/default.yaml)",
    )
    p.add_argument(
        "--jobs", nargs="*", default=None,
        help="Subset of job names to process (default: all jobs in config)",
    )
    p.add_argument(
        "--normalize", action="store_true",
        help="Normalize corner coordinates before solving",
    )
    p.add_argument(
        "--no-plots", action="store_true",
        help="Skip writing corner-mapping figures",
    )
    p.add_argument(
        "--debug", action="store_true",
        help="Log input corners and result matrices",
    )
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # Load configuration
    if not os.path.exists(args.config):
        print(f"[ERROR] Config file not found: {args.config}")
        sys.exit(1)
    cfg = load_config(args.config)

    if args.debug or cfg.get("logging", {}).get("debug", False):
        logging.basicConfig(level=logging.DEBUG,
                            format="%(levelname)s %(name)s: %(message)s")

    results_dir = cfg.get("results_dir", "results")
    jobs = cfg.get("jobs", [])
    normalize = args.normalize or cfg.get("homography", {}).get("normalize", False)

    # Optionally restrict to a subset of jobs
    if args.jobs:
        jobs = [j for j in jobs if j["name"] in args.jobs]
        if not jobs:
            print(f"[ERROR] No matching jobs found for: {args.jobs}")
            sys.exit(1)

    # Validate that image files exist
    for job in jobs:
        if job.get("image") and not os.path.exists(job["image"]):
            print(f"[ERROR] Image not found: {job['image']}")
            sys.exit(1)

    ensure_output_dirs([j["name"] for j in jobs], base=results_dir)

    banner("Document Corner Flattening")
    print(f"  Config   : {args.config}")
    print(f"  Jobs     : {[j['name'] for j in jobs]}")
    print(f"  Normalize: {'enabled' if normalize else 'disabled'}")
    print(f"  Output   : {results_dir}/")

    t0 = time.time()
    all_metrics = []

    for job in jobs:
        metrics = run_job(job, cfg, results_dir, normalize, not args.no_plots)
        all_metrics.append(metrics)

    # ── Summary table ──────────────────────────────────────────────────────
    banner("Results Summary")
    header = f"{'Job':<16} {'Result':>10} {'Max error':>12}"
    print(header)
    print("─" * len(header))
    for m in all_metrics:
        result = "identity" if m["identity"] else "solved"
        err = f"{m['max_error']:.2e}" if m["max_error"] is not None else "–"
        print(f"{m['job']:<16} {result:>10} {err:>12}")

    elapsed = time.time() - t0
    print(f"\nFlattening complete in {elapsed:.2f}s")
    print(f"Results saved to: {os.path.abspath(results_dir)}/")
    return all_metrics


if __name__ == "__main__":
    main()
