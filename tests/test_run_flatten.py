import os

import numpy as np
import pytest
import yaml

import run_flatten


def _write_config(tmp_path, jobs, **extra):
    cfg = {"results_dir": str(tmp_path / "results"), "jobs": jobs}
    cfg.update(extra)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(cfg))
    return str(path)


SCALE_JOB = {
    "name": "scale",
    "source": [[0, 0], [1, 0], [1, 1], [0, 1]],
    "destination": [[0, 0], [2, 0], [2, 2], [0, 2]],
}
COLLINEAR_JOB = {
    "name": "collinear",
    "source": [[0, 0], [1, 0], [1, 1], [0, 1]],
    "destination": [[0, 0], [1, 0], [2, 0], [3, 0]],
}


def test_load_config_reads_default_file():
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    cfg = run_flatten.load_config(os.path.join(root, "configs", "default.yaml"))
    assert cfg["homography"]["normalize"] is False
    assert {job["name"] for job in cfg["jobs"]} >= {"scale_check", "collinear"}


def test_job_corners_defaults_to_target_rectangle():
    src, dst = run_flatten.job_corners({"source": [[10, 20], [110, 20], [110, 70], [10, 70]]})
    np.testing.assert_allclose(dst, [[0, 0], [100, 0], [100, 50], [0, 50]])


def test_main_writes_matrices(tmp_path):
    config = _write_config(tmp_path, [SCALE_JOB, COLLINEAR_JOB])
    metrics = run_flatten.main(["--config", config, "--no-plots"])

    by_name = {m["job"]: m for m in metrics}
    assert by_name["scale"]["identity"] is False
    assert by_name["scale"]["max_error"] < 1e-9
    assert by_name["collinear"]["identity"] is True

    H = np.loadtxt(tmp_path / "results" / "scale" / "homography.txt")
    np.testing.assert_allclose(H, np.diag([2.0, 2.0, 1.0]), atol=1e-6)
    H = np.loadtxt(tmp_path / "results" / "collinear" / "homography.txt")
    np.testing.assert_array_equal(H, np.eye(3))


def test_main_job_subset_and_normalize(tmp_path):
    config = _write_config(tmp_path, [SCALE_JOB, COLLINEAR_JOB])
    metrics = run_flatten.main(["--config", config, "--no-plots",
                                "--jobs", "scale", "--normalize"])
    assert [m["job"] for m in metrics] == ["scale"]
    assert not (tmp_path / "results" / "collinear").exists()


def test_main_writes_figure(tmp_path):
    pytest.importorskip("matplotlib")
    config = _write_config(tmp_path, [SCALE_JOB], visualization={"grid_steps": 3})
    run_flatten.main(["--config", config])
    assert (tmp_path / "results" / "scale" / "quad_mapping.jpg").exists()


def test_invalid_corners_are_skipped(tmp_path):
    job = {"name": "broken", "source": [[0, 0], [1, 0]]}
    config = _write_config(tmp_path, [job])
    metrics = run_flatten.main(["--config", config, "--no-plots"])
    assert metrics == [{"job": "broken", "identity": True, "max_error": None}]


def test_missing_config_exits(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        run_flatten.main(["--config", str(tmp_path / "nope.yaml")])
    assert exc.value.code == 1
    assert "[ERROR] Config file not found" in capsys.readouterr().out


def test_missing_image_exits(tmp_path):
    job = dict(SCALE_JOB, image=str(tmp_path / "missing.png"))
    config = _write_config(tmp_path, [job])
    with pytest.raises(SystemExit):
        run_flatten.main(["--config", config])


def test_main_draws_over_image(tmp_path):
    pytest.importorskip("matplotlib")
    from PIL import Image

    image_path = tmp_path / "photo.png"
    Image.new("RGB", (40, 30), color=(200, 180, 160)).save(image_path)
    job = {"name": "photo", "image": str(image_path),
           "source": [[4, 3], [35, 5], [37, 27], [2, 25]]}
    config = _write_config(tmp_path, [job])

    metrics = run_flatten.main(["--config", config])
    assert metrics[0]["identity"] is False
    assert (tmp_path / "results" / "photo" / "quad_mapping.jpg").exists()
