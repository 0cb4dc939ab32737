from __future__ import annotations

import numpy as np
import pytest

from drapelab.errors import NoFaceRegion
from drapelab.face_mask import face_center
from drapelab.pigments import decompose_pigments, sample_region, skin_gate


def test_maps_within_unit_range_and_masked(pigment_analysis, face_mask):
    for name in ("melanin", "hemoglobin", "sebum"):
        arr = pigment_analysis.maps.get(name)
        assert arr.shape == face_mask.shape
        assert arr.min() >= 0.0 and arr.max() <= 1.0
        assert not arr[face_mask == 0].any()
        assert not arr.flags.writeable


def test_summary_within_unit_range(pigment_analysis):
    s = pigment_analysis.summary
    for value in (s.melanin_avg, s.hemoglobin_avg, s.sebum_avg):
        assert 0.0 <= value <= 1.0
    assert len(s.distribution) == 10
    assert sum(s.distribution) == pytest.approx(1.0, abs=0.06)


def test_synthetic_face_passes_skin_gate(face_image, face_mask):
    skin = skin_gate(face_image, face_mask)
    assert skin.sum() > 0.75 * (face_mask > 0).sum()


def test_landmarks_path_matches_mask_path(face_image, face_landmarks, pigment_analysis):
    other = decompose_pigments(face_image, landmarks=face_landmarks)
    assert other.summary == pigment_analysis.summary


def test_needs_mask_or_landmarks(face_image):
    with pytest.raises(ValueError):
        decompose_pigments(face_image)


def test_empty_mask(face_image):
    with pytest.raises(NoFaceRegion):
        decompose_pigments(face_image, np.zeros(face_image.shape[:2], dtype=np.uint8))


def test_mask_shape_mismatch(face_image):
    with pytest.raises(NoFaceRegion):
        decompose_pigments(face_image, np.full((10, 10), 255, dtype=np.uint8))


def test_non_skin_pixels_are_zero():
    blue = np.zeros((32, 32, 4), dtype=np.uint8)
    blue[..., 2] = 200
    blue[..., 3] = 255
    analysis = decompose_pigments(blue, np.full((32, 32), 255, dtype=np.uint8))
    assert analysis.summary.melanin_avg == 0.0
    assert analysis.summary.sebum_avg == 0.0


class HalfStrategy:
    def __init__(self):
        self.calls = 0

    def decompose(self, rgb, skin):
        self.calls += 1
        half = np.where(skin, 0.5, 0.0).astype(np.float32)
        return half, half, half


def test_pluggable_strategy(face_image, face_mask):
    strategy = HalfStrategy()
    analysis = decompose_pigments(face_image, face_mask, strategy=strategy)
    assert strategy.calls == 1
    assert 0.0 < analysis.summary.melanin_avg <= 0.5


def test_sample_region(pigment_analysis, face_mask):
    center = face_center(face_mask)
    values = sample_region(pigment_analysis.maps, face_mask, center)
    assert set(values) == {"melanin", "hemoglobin", "sebum"}
    assert all(0.0 <= v <= 1.0 for v in values.values())

    outside = sample_region(pigment_analysis.maps, face_mask, (0, 0), radius=3)
    assert outside == {"melanin": 0.0, "hemoglobin": 0.0, "sebum": 0.0}
