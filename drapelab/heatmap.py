# SPDX-License-Identifier: Apache-2.0
"""Simulated light-mode heatmaps over the face region."""
from __future__ import annotations

from typing import Dict, Tuple

import numpy as np
from matplotlib.colors import LinearSegmentedColormap

from .config import CONFIG, Config
from .errors import OutOfRange
from .face_mask import require_face_region
from .imaging import RasterSurface
from .logging_utils import get_logger
from .types import LightMode, PigmentMaps

LOGGER = get_logger(__name__)


def _ramp(name: str, *stops: Tuple[int, int, int]) -> LinearSegmentedColormap:
    return LinearSegmentedColormap.from_list(name, [tuple(c / 255.0 for c in s) for s in stops])


COLOR_RAMPS: Dict[str, LinearSegmentedColormap] = {
    "brown": _ramp("drapelab_brown", (245, 222, 179), (160, 82, 45), (70, 35, 10)),
    "red": _ramp("drapelab_red", (255, 228, 225), (220, 20, 60), (120, 0, 0)),
    "yellow": _ramp("drapelab_yellow", (255, 250, 205), (255, 215, 0), (184, 134, 11)),
}

# light mode -> (pigment map, color ramp)
MODE_SOURCES: Dict[LightMode, Tuple[str, str]] = {
    LightMode.POLARIZED: ("melanin", "brown"),
    LightMode.UV: ("hemoglobin", "red"),
    LightMode.SEBUM: ("sebum", "yellow"),
}


def heatmap_colors(values: np.ndarray, ramp: str) -> np.ndarray:
    """Map [0, 1] intensities to float32 RGB in 0..255."""
    cmap = COLOR_RAMPS[ramp]
    return (cmap(np.clip(values, 0.0, 1.0))[..., :3] * 255.0).astype(np.float32)


def render_heatmap(
    image: np.ndarray,
    mask: np.ndarray,
    maps: PigmentMaps,
    mode: LightMode = LightMode.NORMAL,
    opacity: float = CONFIG.heatmap.default_opacity,
    config: Config = CONFIG,
) -> np.ndarray:
    """Blend the pigment map selected by ``mode`` over the masked face.

    ``normal`` mode and zero opacity return the source pixels unchanged.
    Pixels outside the mask are never modified.
    """
    if not 0.0 <= opacity <= 1.0:
        raise OutOfRange(f"opacity must be within [0, 1], got {opacity}")
    require_face_region(image, mask)
    mode = LightMode(mode)

    with RasterSurface.like(image, tag="heatmap") as surface:
        pixels = surface.load(image)
        if mode is LightMode.NORMAL or opacity == 0.0:
            return surface.snapshot()

        map_name, ramp = MODE_SOURCES[mode]
        heat = heatmap_colors(maps.get(map_name), ramp)
        alpha = (opacity * mask.astype(np.float32) / 255.0)[..., None]
        inside = mask > 0
        rgb = image[..., :3].astype(np.float32) * (1.0 - alpha) + heat * alpha
        pixels[..., :3][inside] = np.round(rgb[inside]).astype(np.uint8)
        LOGGER.info("heatmap_rendered", mode=mode.value, opacity=opacity)
        return surface.snapshot()
