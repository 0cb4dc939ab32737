from __future__ import annotations

import numpy as np
import pytest

from drapelab.errors import NoFaceRegion, OutOfRange
from drapelab.heatmap import heatmap_colors, render_heatmap
from drapelab.types import LightMode


@pytest.mark.parametrize("mode", list(LightMode))
def test_zero_opacity_is_identity(face_image, face_mask, pigment_analysis, mode):
    out = render_heatmap(face_image, face_mask, pigment_analysis.maps, mode, 0.0)
    assert np.array_equal(out, face_image)


@pytest.mark.parametrize("opacity", [0.3, 1.0])
def test_normal_mode_is_identity(face_image, face_mask, pigment_analysis, opacity):
    out = render_heatmap(face_image, face_mask, pigment_analysis.maps, LightMode.NORMAL, opacity)
    assert np.array_equal(out, face_image)


@pytest.mark.parametrize("mode", [LightMode.POLARIZED, LightMode.UV, LightMode.SEBUM])
def test_outside_mask_untouched(face_image, face_mask, pigment_analysis, mode):
    out = render_heatmap(face_image, face_mask, pigment_analysis.maps, mode, 0.8)
    outside = face_mask == 0
    assert np.array_equal(out[outside], face_image[outside])
    assert not np.array_equal(out[~outside], face_image[~outside])


def test_full_opacity_shows_ramp(face_image, face_mask, pigment_analysis):
    out = render_heatmap(face_image, face_mask, pigment_analysis.maps, LightMode.UV, 1.0)
    inside = face_mask == 255
    expected = np.round(heatmap_colors(pigment_analysis.maps.hemoglobin, "red")).astype(np.uint8)
    assert np.array_equal(out[..., :3][inside], expected[inside])


def test_modes_differ(face_image, face_mask, pigment_analysis):
    uv = render_heatmap(face_image, face_mask, pigment_analysis.maps, LightMode.UV, 0.6)
    sebum = render_heatmap(face_image, face_mask, pigment_analysis.maps, LightMode.SEBUM, 0.6)
    assert not np.array_equal(uv, sebum)


@pytest.mark.parametrize("opacity", [-0.1, 1.5])
def test_opacity_out_of_range(face_image, face_mask, pigment_analysis, opacity):
    with pytest.raises(OutOfRange):
        render_heatmap(face_image, face_mask, pigment_analysis.maps, LightMode.UV, opacity)


def test_empty_mask(face_image, pigment_analysis):
    empty = np.zeros(face_image.shape[:2], dtype=np.uint8)
    with pytest.raises(NoFaceRegion):
        render_heatmap(face_image, empty, pigment_analysis.maps, LightMode.UV, 0.5)
