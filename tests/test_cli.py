from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from drapelab.cli import app
from drapelab.imaging import save_image
from drapelab.samples import make_synthetic_face

runner = CliRunner()


def test_demo(tmp_path):
    out = tmp_path / "demo"
    result = runner.invoke(app, ["demo", "--out", str(out), "--size", "96", "--top", "3"])
    assert result.exit_code == 0, result.output
    assert (out / "drape_best.png").exists()
    assert (out / "heatmap_uv.png").exists()
    report = json.loads((out / "analysis.json").read_text())
    assert report["drape"]["metal_test"] == "gold"
    assert len(report["drape"]["best_colors"]) == 3


def test_analyze(tmp_path):
    image, landmarks = make_synthetic_face(96, 96)
    image_path = save_image(image, tmp_path / "face.png")
    points_path = tmp_path / "points.json"
    points_path.write_text(json.dumps([list(p) for p in landmarks]))
    out = tmp_path / "out"
    result = runner.invoke(app, ["analyze", str(image_path), str(points_path), "--out", str(out), "--tier", "low"])
    assert result.exit_code == 0, result.output
    assert (out / "analysis.json").exists()


def test_analyze_rejects_bad_contour(tmp_path):
    image, _ = make_synthetic_face(64, 64)
    image_path = save_image(image, tmp_path / "face.png")
    points_path = tmp_path / "points.json"
    points_path.write_text(json.dumps([[1, 1], [5, 1], [3, 4]]))
    result = runner.invoke(app, ["analyze", str(image_path), str(points_path), "--out", str(tmp_path / "out")])
    assert result.exit_code == 1


def test_analyze_custom_colors(tmp_path):
    image, landmarks = make_synthetic_face(80, 80)
    image_path = save_image(image, tmp_path / "face.png")
    points_path = tmp_path / "points.json"
    points_path.write_text(json.dumps([list(p) for p in landmarks]))
    out = tmp_path / "out"
    result = runner.invoke(app, ["analyze", str(image_path), str(points_path), "--out", str(out),
                                 "--colors", "#000080,#FFFFFF,#DC143C"])
    assert result.exit_code == 0, result.output
    report = json.loads((out / "analysis.json").read_text())
    assert set(report["drape"]["uniformity_scores"]) == {"#000080", "#FFFFFF", "#DC143C"}

    bad = runner.invoke(app, ["analyze", str(image_path), str(points_path), "--colors", "nothex"])
    assert bad.exit_code == 2


@pytest.mark.parametrize("payload", [[[1, 2], [3]], [1, 2, 3, 4], {"x": 1}, "not json"])
def test_analyze_rejects_malformed_landmarks(tmp_path, payload):
    image, _ = make_synthetic_face(64, 64)
    image_path = save_image(image, tmp_path / "face.png")
    points_path = tmp_path / "points.json"
    points_path.write_text(payload if isinstance(payload, str) else json.dumps(payload))
    result = runner.invoke(app, ["analyze", str(image_path), str(points_path), "--out", str(tmp_path / "out")])
    assert result.exit_code == 2
    assert not isinstance(result.exception, (TypeError, ValueError))
