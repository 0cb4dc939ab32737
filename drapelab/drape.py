# SPDX-License-Identifier: Apache-2.0
"""Single-color drape compositing with simulated metal reflectance.

The drape is a flat fabric color filling the non-face frame below the jaw
line. Light bounced off the fabric and off a metal accessory lifts the
lower band of the face; that band is the only part of the face that
changes, which is what makes the uniformity score color-dependent.
"""
from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

from .config import CONFIG, Config
from .face_mask import mask_bounds, require_face_region
from .imaging import LUMA_WEIGHTS, RasterSurface, luminance
from .types import MetalType, Swatch

# brightness: additive lift in 8-bit units at full band weight
# saturation: relative chroma change (+ warmer/richer, - cooler/flatter)
METAL_REFLECTANCE: Dict[MetalType, Dict[str, object]] = {
    MetalType.GOLD: {"brightness": 8.0, "saturation": 0.10, "tint": (255, 196, 92), "tint_strength": 0.12},
    MetalType.SILVER: {"brightness": 10.0, "saturation": -0.08, "tint": (225, 232, 245), "tint_strength": 0.08},
    MetalType.ROSE_GOLD: {"brightness": 7.0, "saturation": 0.05, "tint": (236, 170, 160), "tint_strength": 0.10},
    MetalType.NONE: {"brightness": 0.0, "saturation": 0.0, "tint": (0, 0, 0), "tint_strength": 0.0},
}


def _drape_geometry(mask: np.ndarray, config: Config) -> Tuple[int, int, int]:
    top, bottom, _, _ = mask_bounds(mask)
    face_h = bottom - top + 1
    drape_top = top + int(round(config.drape.start_ratio * face_h))
    band_h = max(1, int(round(config.drape.band_ratio * face_h)))
    return drape_top, bottom, band_h


def reflectance_weights(mask: np.ndarray, config: Config = CONFIG) -> np.ndarray:
    """Per-pixel strength of bounced light: 0 at the band top, 1 at the chin."""
    _, bottom, band_h = _drape_geometry(mask, config)
    rows = np.arange(mask.shape[0], dtype=np.float32)
    ramp = np.clip((rows - (bottom - band_h)) / band_h, 0.0, 1.0)
    return ramp[:, None] * (mask.astype(np.float32) / 255.0)


def apply_reflectance(rgb: np.ndarray, weights: np.ndarray, color: Swatch, metal: MetalType,
                      strength: float) -> np.ndarray:
    """Lift ``rgb`` (float32, H x W x 3) toward the drape and metal tint."""
    w = weights[..., None]
    out = rgb * (1.0 - strength * w) + np.array(color.rgb, dtype=np.float32) * (strength * w)

    props = METAL_REFLECTANCE[MetalType(metal)]
    if props["tint_strength"]:
        t = float(props["tint_strength"]) * w
        out = out * (1.0 - t) + np.array(props["tint"], dtype=np.float32) * t
    if props["brightness"]:
        out = out + float(props["brightness"]) * w
    if props["saturation"]:
        gray = (out @ LUMA_WEIGHTS)[..., None]
        out = gray + (out - gray) * (1.0 + float(props["saturation"]) * w)
    return np.clip(out, 0.0, 255.0)


def render_drape_into(
    surface: RasterSurface,
    image: np.ndarray,
    color: Swatch,
    mask: np.ndarray,
    metal: MetalType = MetalType.NONE,
    config: Config = CONFIG,
) -> np.ndarray:
    """Composite one drape color onto ``surface``; returns the surface pixels."""
    require_face_region(image, mask)
    pixels = surface.load(image)

    drape_top, _, _ = _drape_geometry(mask, config)
    outside = 1.0 - mask.astype(np.float32) / 255.0
    outside[:drape_top] = 0.0

    rgb = image[..., :3].astype(np.float32)
    fabric = np.array(color.rgb, dtype=np.float32)
    rgb = rgb * (1.0 - outside[..., None]) + fabric * outside[..., None]

    weights = reflectance_weights(mask, config)
    rgb = np.where(weights[..., None] > 0,
                   apply_reflectance(rgb, weights, color, metal, config.drape.reflect_strength), rgb)

    pixels[..., :3] = np.round(rgb).astype(np.uint8)
    pixels[..., 3] = np.where(outside > 0, 255, image[..., 3])
    return pixels


def render_drape(
    image: np.ndarray,
    color: Swatch,
    mask: np.ndarray,
    metal: MetalType = MetalType.NONE,
    config: Config = CONFIG,
) -> np.ndarray:
    """Render a drape preview into a fresh read-only RGBA buffer.

    The source ``image`` is never written to. ``MetalType.NONE`` drops only
    the metal tint, lift and saturation shift; the chin band still picks up
    the fabric bounce (``drape.reflect_strength``) so scores differ by color.
    """
    with RasterSurface.like(image, tag="drape") as surface:
        render_drape_into(surface, image, color, mask, metal, config)
        return surface.snapshot()


def measure_uniformity(frame: np.ndarray, mask: np.ndarray, variance_scale: float = CONFIG.ranking.variance_scale) -> float:
    """Score in [0, 100] that rises as masked luminance variance falls.

    ``100 / (1 + var / variance_scale)``; an empty mask scores 0.
    """
    inside = mask > 0
    if not inside.any():
        return 0.0
    lum = luminance(frame)[inside]
    var = float(lum.var())
    return float(np.clip(100.0 / (1.0 + var / variance_scale), 0.0, 100.0))
