# SPDX-License-Identifier: Apache-2.0
"""Skin tone characteristics and the gold vs silver metal test."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from .face_mask import require_face_region
from .types import MetalType, PigmentSummary

METAL_OPTICS: Dict[MetalType, Dict[str, float]] = {
    MetalType.GOLD: {"reflectance": 0.65, "warmth": 0.85},
    MetalType.SILVER: {"reflectance": 0.75, "warmth": -0.7},
}

TIE_MARGIN = 10


@dataclass(frozen=True)
class SkinTone:
    brightness: float
    warmth: float
    saturation: float
    redness: float
    melanin: float


@dataclass(frozen=True)
class MetalRecommendation:
    recommended: MetalType
    gold_score: int
    silver_score: int
    explanation: str


def extract_skin_tone(image: np.ndarray, mask: np.ndarray, summary: Optional[PigmentSummary] = None) -> SkinTone:
    """Average color character of the masked face."""
    require_face_region(image, mask)
    r, g, b = image[..., :3][mask > 0].astype(np.float64).mean(axis=0) / 255.0
    brightness = 0.299 * r + 0.587 * g + 0.114 * b
    warmth = float(np.clip((r - b) * 2.0, -1.0, 1.0))
    hi, lo = max(r, g, b), min(r, g, b)
    saturation = 0.0 if hi == 0 else (hi - lo) / hi
    return SkinTone(
        brightness=float(brightness),
        warmth=warmth,
        saturation=float(saturation),
        redness=summary.hemoglobin_avg if summary else 0.5,
        melanin=summary.melanin_avg if summary else 0.5,
    )


def metal_score(tone: SkinTone, metal: MetalType) -> int:
    optics = METAL_OPTICS[MetalType(metal)]
    warmth_match = 1 - abs(tone.warmth - optics["warmth"])
    brightness_match = 1 - abs(tone.brightness - optics["reflectance"]) * 0.3
    return int(round(warmth_match * 70 + brightness_match * 30))


def recommend_metal(tone: SkinTone) -> MetalRecommendation:
    gold = metal_score(tone, MetalType.GOLD)
    silver = metal_score(tone, MetalType.SILVER)
    recommended = MetalType.GOLD if gold > silver else MetalType.SILVER

    if abs(gold - silver) < TIE_MARGIN:
        explanation = "Gold and silver both suit you; choose by occasion."
    elif recommended is MetalType.GOLD:
        explanation = "Gold jewelry adds glow to a warm complexion."
    else:
        explanation = "Silver jewelry keeps a cool complexion clear and refined."
    return MetalRecommendation(recommended, gold, silver, explanation)
