# SPDX-License-Identifier: Apache-2.0
"""Skin uniformity report: tone evenness, pigment spots, redness and texture.

Four sub-scores (0-100, higher is more even) are combined into an overall
score and a grade:

- color: spread of BT.601 luminance over the face
- melanin / hemoglobin: spread of the pigment map plus an outlier penalty
  (outlier pixels also give a rough spot count)
- texture: mean central-difference luminance gradient

Problem areas come from the whole face and from five sampled regions
(forehead, cheeks, nose, chin) whose centers are placed from the mask
bounding box unless the caller supplies them.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np

from .config import CONFIG, Config
from .face_mask import mask_bounds, require_face_region
from .imaging import luminance
from .logging_utils import get_logger
from .types import PigmentMaps, Point

LOGGER = get_logger(__name__)

# sub-score weights of the overall score
WEIGHTS = {"color": 0.30, "melanin": 0.30, "hemoglobin": 0.25, "texture": 0.15}

# (x, y) as fractions of the mask bounding box; left/right are image sides
REGION_LAYOUT: Dict[str, Tuple[float, float]] = {
    "forehead": (0.50, 0.18),
    "left_cheek": (0.25, 0.58),
    "right_cheek": (0.75, 0.58),
    "nose": (0.50, 0.52),
    "chin": (0.50, 0.88),
}

REGION_LABELS = {
    "forehead": "forehead",
    "left_cheek": "left cheek",
    "right_cheek": "right cheek",
    "nose": "nose",
    "chin": "chin",
    "overall": "whole face",
}

OVERALL_PROBLEM_BELOW = 50
PIXELS_PER_SPOT = 100
TEXTURE_NO_DATA = 70


class UniformityGrade(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


GRADE_TEXT = {
    UniformityGrade.EXCELLENT: "Skin tone is very even; clear and healthy-looking skin.",
    UniformityGrade.GOOD: "Skin tone is mostly even; a little care would improve it further.",
    UniformityGrade.FAIR: "Skin tone is somewhat uneven; steady care is recommended.",
    UniformityGrade.POOR: "Uneven skin tone stands out; focused care is recommended.",
}


@dataclass(frozen=True)
class ProblemArea:
    kind: str  # "spot" or "redness"
    region: str
    severity: int
    description: str


@dataclass(frozen=True)
class SkinUniformity:
    overall_score: int
    color: int
    melanin: int
    hemoglobin: int
    texture: int
    spot_count: int
    problem_areas: Tuple[ProblemArea, ...]
    grade: UniformityGrade
    description: str


def _clamp_score(value: float) -> int:
    return max(0, int(round(value)))


def color_uniformity(image: np.ndarray, mask: np.ndarray) -> int:
    lum = luminance(image)[mask > 0]
    return _clamp_score(100.0 - float(lum.std()) * 2.0)


def pigment_uniformity(values: np.ndarray, mask: np.ndarray, outlier_threshold: float) -> Tuple[int, int]:
    """(uniformity, estimated spot count) for one pigment map."""
    v = values[mask > 0].astype(np.float64)
    mean, std = float(v.mean()), float(v.std())
    outliers = int(np.count_nonzero(np.abs(v - mean) > outlier_threshold + std))
    ratio = outliers / v.size
    penalty = min(30.0, std * 100.0) + min(30.0, ratio * 500.0)
    return _clamp_score(100.0 - penalty), int(round(outliers / PIXELS_PER_SPOT))


def texture_uniformity(image: np.ndarray, mask: np.ndarray) -> int:
    lum = luminance(image)
    inner = mask[1:-1, 1:-1] > 0
    gx = np.abs(lum[1:-1, 2:] - lum[1:-1, :-2])
    gy = np.abs(lum[2:, 1:-1] - lum[:-2, 1:-1])
    grad = np.hypot(gx, gy)[inner]
    if grad.size == 0:
        return TEXTURE_NO_DATA
    return _clamp_score(100.0 - float(grad.mean()) * 3.3)


def region_centers(mask: np.ndarray) -> Dict[str, Point]:
    top, bottom, left, right = mask_bounds(mask)
    return {
        name: (left + fx * (right - left), top + fy * (bottom - top))
        for name, (fx, fy) in REGION_LAYOUT.items()
    }


def _outlier_ratio(values: np.ndarray, threshold: float) -> float:
    mean, std = float(values.mean()), float(values.std())
    return float(np.count_nonzero(np.abs(values - mean) > threshold + std)) / values.size


def region_outliers(maps: PigmentMaps, mask: np.ndarray, center: Point,
                    config: Config = CONFIG) -> Tuple[float, float]:
    """(melanin, hemoglobin) outlier ratios inside a disc around ``center``."""
    u = config.uniformity
    h, w = mask.shape
    cx, cy = center
    yy, xx = np.ogrid[:h, :w]
    disc = ((xx - round(cx)) ** 2 + (yy - round(cy)) ** 2 <= u.region_radius_px ** 2) & (mask > 0)
    if not disc.any():
        return 0.0, 0.0
    return (
        _outlier_ratio(maps.melanin[disc].astype(np.float64), u.spot_threshold),
        _outlier_ratio(maps.hemoglobin[disc].astype(np.float64), u.redness_threshold),
    )


def detect_problem_areas(
    maps: PigmentMaps,
    mask: np.ndarray,
    melanin_score: int,
    hemoglobin_score: int,
    regions: Optional[Mapping[str, Point]] = None,
    config: Config = CONFIG,
) -> List[ProblemArea]:
    problems: List[ProblemArea] = []
    if melanin_score < OVERALL_PROBLEM_BELOW:
        problems.append(ProblemArea("spot", "overall", 100 - melanin_score,
                                    "Pigmentation (spots or melasma) shows across the face."))
    if hemoglobin_score < OVERALL_PROBLEM_BELOW:
        problems.append(ProblemArea("redness", "overall", 100 - hemoglobin_score,
                                    "Redness shows across the face."))

    limit = config.uniformity.outlier_ratio
    centers = regions if regions is not None else region_centers(mask)
    for name, center in centers.items():
        label = REGION_LABELS.get(name, name)
        melanin_ratio, hemoglobin_ratio = region_outliers(maps, mask, center, config)
        if melanin_ratio > limit:
            problems.append(ProblemArea("spot", name, int(round(melanin_ratio * 500)),
                                        f"Pigmentation on the {label}."))
        if hemoglobin_ratio > limit:
            problems.append(ProblemArea("redness", name, int(round(hemoglobin_ratio * 500)),
                                        f"Redness on the {label}."))
    return sorted(problems, key=lambda p: -p.severity)


def grade_for(score: float, config: Config = CONFIG) -> UniformityGrade:
    u = config.uniformity
    if score >= u.grade_excellent:
        return UniformityGrade.EXCELLENT
    if score >= u.grade_good:
        return UniformityGrade.GOOD
    if score >= u.grade_fair:
        return UniformityGrade.FAIR
    return UniformityGrade.POOR


def describe(grade: UniformityGrade, spot_count: int, problems: List[ProblemArea]) -> str:
    text = GRADE_TEXT[grade]
    if spot_count > 5:
        text += f" About {spot_count} pigmented spots were detected."
    if problems:
        text += f" {problems[0].description}"
    return text


def analyze_skin_uniformity(
    image: np.ndarray,
    mask: np.ndarray,
    maps: PigmentMaps,
    regions: Optional[Mapping[str, Point]] = None,
    config: Config = CONFIG,
) -> SkinUniformity:
    """Score how even the face looks and list its problem areas.

    Raises:
        NoFaceRegion: the mask is empty or does not match ``image``.
    """
    require_face_region(image, mask)
    u = config.uniformity
    color = color_uniformity(image, mask)
    melanin, melanin_spots = pigment_uniformity(maps.melanin, mask, u.spot_threshold)
    hemoglobin, red_spots = pigment_uniformity(maps.hemoglobin, mask, u.redness_threshold)
    texture = texture_uniformity(image, mask)

    spot_count = melanin_spots + red_spots
    problems = detect_problem_areas(maps, mask, melanin, hemoglobin, regions, config)
    overall = int(round(
        color * WEIGHTS["color"]
        + melanin * WEIGHTS["melanin"]
        + hemoglobin * WEIGHTS["hemoglobin"]
        + texture * WEIGHTS["texture"]
    ))
    grade = grade_for(overall, config)
    LOGGER.info("uniformity_analyzed", overall=overall, grade=grade.value, spots=spot_count,
                problems=len(problems))
    return SkinUniformity(
        overall_score=overall,
        color=color,
        melanin=melanin,
        hemoglobin=hemoglobin,
        texture=texture,
        spot_count=spot_count,
        problem_areas=tuple(problems),
        grade=grade,
        description=describe(grade, spot_count, problems),
    )


def regional_uniformity(
    maps: PigmentMaps,
    mask: np.ndarray,
    regions: Optional[Mapping[str, Point]] = None,
    config: Config = CONFIG,
) -> Dict[str, int]:
    """Per-region score from the mean of its melanin and hemoglobin outlier ratios."""
    centers = regions if regions is not None else region_centers(mask)
    scores = {}
    for name, center in centers.items():
        melanin_ratio, hemoglobin_ratio = region_outliers(maps, mask, center, config)
        scores[name] = _clamp_score(100.0 - (melanin_ratio + hemoglobin_ratio) / 2.0 * 500.0)
    return scores


def uniformity_record(result: SkinUniformity) -> Dict[str, Any]:
    """Flat record for storage."""
    return {
        "uniformity_score": result.overall_score,
        "grade": result.grade.value,
        "spot_count": result.spot_count,
        "details": {
            "color": result.color,
            "melanin": result.melanin,
            "hemoglobin": result.hemoglobin,
            "texture": result.texture,
        },
        "problem_areas": [
            {"type": p.kind, "region": p.region, "severity": p.severity} for p in result.problem_areas
        ],
    }
