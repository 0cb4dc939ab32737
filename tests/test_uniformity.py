from __future__ import annotations

import numpy as np
import pytest

from drapelab.errors import NoFaceRegion
from drapelab.types import PigmentMaps
from drapelab.uniformity import (
    REGION_LAYOUT,
    UniformityGrade,
    analyze_skin_uniformity,
    grade_for,
    regional_uniformity,
    uniformity_record,
)

SIZE = 40


def _flat_image(value=180):
    image = np.full((SIZE, SIZE, 4), value, dtype=np.uint8)
    image[..., 3] = 255
    return image


def _maps(melanin=None):
    zeros = np.zeros((SIZE, SIZE), dtype=np.float32)
    return PigmentMaps(melanin=zeros if melanin is None else melanin, hemoglobin=zeros, sebum=zeros)


FULL = np.full((SIZE, SIZE), 255, dtype=np.uint8)


def test_flat_face_is_excellent():
    result = analyze_skin_uniformity(_flat_image(), FULL, _maps())
    assert (result.color, result.melanin, result.hemoglobin, result.texture) == (100, 100, 100, 100)
    assert result.overall_score == 100
    assert result.grade is UniformityGrade.EXCELLENT
    assert result.spot_count == 0
    assert result.problem_areas == ()


def test_scattered_pigment_is_flagged():
    melanin = np.zeros(SIZE * SIZE, dtype=np.float32)
    melanin[::10] = 1.0
    result = analyze_skin_uniformity(_flat_image(), FULL, _maps(melanin.reshape(SIZE, SIZE)))
    assert result.melanin == 40
    assert result.overall_score == 82
    assert result.grade is UniformityGrade.GOOD
    assert result.spot_count == 2

    overall = [p for p in result.problem_areas if p.region == "overall"]
    assert [(p.kind, p.severity) for p in overall] == [("spot", 60)]
    severities = [p.severity for p in result.problem_areas]
    assert severities == sorted(severities, reverse=True)
    assert result.problem_areas[0].description in result.description


def test_synthetic_face(face_image, face_mask, pigment_analysis):
    result = analyze_skin_uniformity(face_image, face_mask, pigment_analysis.maps)
    for score in (result.overall_score, result.color, result.melanin, result.hemoglobin, result.texture):
        assert 0 <= score <= 100
    assert result.grade is grade_for(result.overall_score)


@pytest.mark.parametrize("score,grade", [
    (100, "excellent"), (85, "excellent"), (84, "good"), (70, "good"),
    (69, "fair"), (50, "fair"), (49, "poor"), (0, "poor"),
])
def test_grade_thresholds(score, grade):
    assert grade_for(score).value == grade


def test_regional_scores():
    scores = regional_uniformity(_maps(), FULL)
    assert set(scores) == set(REGION_LAYOUT)
    assert all(v == 100 for v in scores.values())

    outside = regional_uniformity(_maps(), FULL, regions={"chin": (500.0, 500.0)})
    assert outside == {"chin": 100}


def test_record_shape():
    melanin = np.zeros(SIZE * SIZE, dtype=np.float32)
    melanin[::10] = 1.0
    result = analyze_skin_uniformity(_flat_image(), FULL, _maps(melanin.reshape(SIZE, SIZE)))
    record = uniformity_record(result)
    assert record["uniformity_score"] == result.overall_score
    assert record["grade"] == "good"
    assert record["details"] == {"color": 100, "melanin": 40, "hemoglobin": 100, "texture": 100}
    assert {"type": "spot", "region": "overall", "severity": 60} in record["problem_areas"]


def test_empty_mask():
    with pytest.raises(NoFaceRegion):
        analyze_skin_uniformity(_flat_image(), np.zeros((SIZE, SIZE), dtype=np.uint8), _maps())
