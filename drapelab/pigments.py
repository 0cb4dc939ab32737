# SPDX-License-Identifier: Apache-2.0
"""Pigment decomposition of the face region into melanin, hemoglobin and sebum maps.

The maps are simulated from a single RGB exposure. The channel-ratio
formulas live behind :class:`PigmentStrategy` so another derivation can be
dropped in without touching masking, normalization or summaries.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Tuple

import cv2
import numpy as np

from .config import CONFIG, Config
from .errors import NoFaceRegion
from .face_mask import build_face_mask, require_face_region
from .logging_utils import get_logger
from .types import LandmarkSet, PigmentMaps, PigmentSummary, Point

LOGGER = get_logger(__name__)

# Brown-yellowness and redness projections of normalized RGB
MELANIN_COEFF = np.array([0.333, 0.333, -0.666], dtype=np.float32)
HEMOGLOBIN_COEFF = np.array([0.666, -0.333, -0.333], dtype=np.float32)
SEBUM_MELANIN_WEIGHT = 0.7
SEBUM_HEMOGLOBIN_WEIGHT = 0.3


class PigmentStrategy(Protocol):
    def decompose(self, rgb: np.ndarray, skin: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return melanin, hemoglobin, sebum maps in [0, 1], zero where ``skin`` is False."""
        ...


def _normalize(values: np.ndarray, skin: np.ndarray) -> np.ndarray:
    out = np.zeros(values.shape, dtype=np.float32)
    if not skin.any():
        return out
    v = values[skin]
    lo, hi = float(v.min()), float(v.max())
    rng = (hi - lo) or 1.0
    out[skin] = (v - lo) / rng
    return out


class ChannelRatioStrategy:
    """Linear channel projections, min-max normalized over skin pixels."""

    def decompose(self, rgb: np.ndarray, skin: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        melanin = _normalize(rgb @ MELANIN_COEFF, skin)
        hemoglobin = _normalize(rgb @ HEMOGLOBIN_COEFF, skin)
        sebum = np.clip((1.0 - melanin) * SEBUM_MELANIN_WEIGHT + hemoglobin * SEBUM_HEMOGLOBIN_WEIGHT, 0.0, 1.0)
        sebum = np.where(skin, sebum, 0.0).astype(np.float32)
        return melanin, hemoglobin, sebum


@dataclass(frozen=True)
class PigmentAnalysis:
    maps: PigmentMaps
    summary: PigmentSummary
    mask: np.ndarray


def skin_gate(image: np.ndarray, mask: np.ndarray, config: Config = CONFIG) -> np.ndarray:
    """Mask pixels whose HSL lies in the configured skin range."""
    hls = cv2.cvtColor(np.ascontiguousarray(image[..., :3]), cv2.COLOR_RGB2HLS).astype(np.float32)
    hue = hls[..., 0] * 2.0
    light = hls[..., 1] / 255.0
    sat = hls[..., 2] / 255.0
    p = config.pigment
    return (
        (mask > 0)
        & (hue >= p.skin_hue_deg[0]) & (hue <= p.skin_hue_deg[1])
        & (sat >= p.skin_saturation[0]) & (sat <= p.skin_saturation[1])
        & (light >= p.skin_lightness[0]) & (light <= p.skin_lightness[1])
    )


def summarize_pigments(maps: PigmentMaps, mask: np.ndarray, bins: int = 10) -> PigmentSummary:
    inside = mask > 0
    count = int(inside.sum())
    if count == 0:
        raise NoFaceRegion("face mask covers zero pixels")

    def _mean(arr: np.ndarray) -> float:
        return round(float(np.clip(arr[inside].mean(), 0.0, 1.0)), 4)

    hist, _ = np.histogram(maps.melanin[inside], bins=bins, range=(0.0, 1.0))
    distribution = tuple(round(float(v) / count, 2) for v in hist)
    return PigmentSummary(
        melanin_avg=_mean(maps.melanin),
        hemoglobin_avg=_mean(maps.hemoglobin),
        sebum_avg=_mean(maps.sebum),
        distribution=distribution,
    )


def decompose_pigments(
    image: np.ndarray,
    mask: Optional[np.ndarray] = None,
    *,
    landmarks: Optional[LandmarkSet] = None,
    strategy: Optional[PigmentStrategy] = None,
    config: Config = CONFIG,
) -> PigmentAnalysis:
    """Derive pigment maps and their masked means.

    Pass either a prebuilt ``mask`` or ``landmarks`` to build one.

    Raises:
        NoFaceRegion: the mask is empty or its shape disagrees with ``image``.
        InvalidLandmarks: ``landmarks`` were given and are unusable.
    """
    if mask is None:
        if landmarks is None:
            raise ValueError("decompose_pigments needs a mask or landmarks")
        mask = build_face_mask(landmarks, image.shape[1], image.shape[0], config)
    try:
        require_face_region(image, mask)
    except NoFaceRegion as e:
        LOGGER.warning("no_face_region", reason=str(e))
        raise

    strategy = strategy or ChannelRatioStrategy()
    rgb = image[..., :3].astype(np.float32) / 255.0
    skin = skin_gate(image, mask, config)
    melanin, hemoglobin, sebum = strategy.decompose(rgb, skin)
    maps = PigmentMaps(melanin=melanin, hemoglobin=hemoglobin, sebum=sebum)
    for arr in (melanin, hemoglobin, sebum):
        arr.flags.writeable = False

    summary = summarize_pigments(maps, mask, config.pigment.histogram_bins)
    LOGGER.info(
        "pigments_decomposed",
        skin_px=int(skin.sum()),
        melanin=summary.melanin_avg,
        hemoglobin=summary.hemoglobin_avg,
        sebum=summary.sebum_avg,
    )
    return PigmentAnalysis(maps=maps, summary=summary, mask=mask)


def sample_region(maps: PigmentMaps, mask: np.ndarray, center: Point, radius: Optional[int] = None,
                  config: Config = CONFIG) -> Dict[str, float]:
    """Mean pigment values in a disc around ``center``, face pixels only."""
    radius = config.pigment.region_radius_px if radius is None else radius
    h, w = mask.shape
    cx, cy = center
    yy, xx = np.ogrid[:h, :w]
    disc = ((xx - round(cx)) ** 2 + (yy - round(cy)) ** 2 <= radius * radius) & (mask > 0)
    if not disc.any():
        return {"melanin": 0.0, "hemoglobin": 0.0, "sebum": 0.0}
    return {
        name: round(float(maps.get(name)[disc].mean()), 2)
        for name in ("melanin", "hemoglobin", "sebum")
    }
