# SPDX-License-Identifier: Apache-2.0
"""Optical drape harmony and seasonal palette analysis.

Each reference drape carries optical properties (reflectance, warmth,
saturation boost, muteness). They are matched against a :class:`SkinTone`
to score harmony and to pick the best-fitting season.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .config import CONFIG, Config
from .errors import OutOfRange
from .logging_utils import get_logger
from .skin_tone import SkinTone
from .types import Swatch

LOGGER = get_logger(__name__)

SEASON_ORDER = ("spring", "summer", "autumn", "winter")


@dataclass(frozen=True)
class DrapeOptics:
    swatch: Swatch
    season: str
    reflectance: float  # 0..1, share of light bounced onto the skin
    warmth: float  # -1 (cool) .. 1 (warm)
    saturation_boost: float  # -0.5 .. 0.5
    muteness: float  # 0 (vivid) .. 1 (muted)


def _drape(hex_code: str, name: str, season: str, reflectance: float, warmth: float,
           boost: float, muteness: float) -> DrapeOptics:
    return DrapeOptics(Swatch.from_hex(hex_code, name), season, reflectance, warmth, boost, muteness)


OPTICAL_PALETTE: Dict[str, Tuple[DrapeOptics, ...]] = {
    "spring": (
        _drape("#FFE0B2", "peach", "spring", 0.85, 0.70, 0.30, 0.10),
        _drape("#FFB74D", "apricot", "spring", 0.75, 0.80, 0.40, 0.15),
        _drape("#FFD54F", "sunflower", "spring", 0.88, 0.85, 0.35, 0.10),
        _drape("#81C784", "spring green", "spring", 0.72, 0.30, 0.25, 0.20),
        _drape("#FF8A65", "coral", "spring", 0.70, 0.75, 0.45, 0.10),
        _drape("#64B5F6", "sky blue", "spring", 0.78, -0.10, 0.20, 0.15),
        _drape("#FFA726", "mango", "spring", 0.73, 0.90, 0.50, 0.05),
        _drape("#F06292", "rose pink", "spring", 0.68, 0.20, 0.35, 0.10),
    ),
    "summer": (
        _drape("#CE93D8", "lavender", "summer", 0.72, -0.40, 0.15, 0.45),
        _drape("#90CAF9", "sky blue", "summer", 0.80, -0.35, 0.10, 0.40),
        _drape("#B2DFDB", "mint", "summer", 0.82, -0.20, 0.10, 0.50),
        _drape("#F8BBD0", "rose quartz", "summer", 0.85, -0.10, 0.20, 0.55),
        _drape("#C5CAE9", "purple grey", "summer", 0.78, -0.50, 0.05, 0.60),
        _drape("#B0BEC5", "blue grey", "summer", 0.70, -0.30, -0.10, 0.65),
        _drape("#FFCDD2", "blush", "summer", 0.88, 0.10, 0.15, 0.50),
        _drape("#81D4FA", "aqua", "summer", 0.83, -0.25, 0.20, 0.35),
    ),
    "autumn": (
        _drape("#BC8F8F", "rosy brown", "autumn", 0.55, 0.50, 0.10, 0.70),
        _drape("#CD853F", "terracotta", "autumn", 0.52, 0.85, 0.20, 0.55),
        _drape("#8FBC8F", "sage", "autumn", 0.60, 0.20, 0.05, 0.65),
        _drape("#B8860B", "mustard", "autumn", 0.50, 0.90, 0.25, 0.50),
        _drape("#A52A2A", "burgundy", "autumn", 0.35, 0.60, 0.15, 0.45),
        _drape("#8B5A2B", "camel", "autumn", 0.45, 0.80, 0.10, 0.60),
        _drape("#808000", "olive", "autumn", 0.42, 0.40, 0.00, 0.75),
        _drape("#D2691E", "cinnamon", "autumn", 0.48, 0.85, 0.30, 0.40),
    ),
    "winter": (
        _drape("#000000", "true black", "winter", 0.05, 0.00, 0.00, 0.00),
        _drape("#FFFFFF", "pure white", "winter", 0.98, 0.00, 0.00, 0.00),
        _drape("#DC143C", "crimson", "winter", 0.40, 0.30, 0.50, 0.05),
        _drape("#00008B", "navy", "winter", 0.15, -0.70, 0.20, 0.10),
        _drape("#008000", "forest green", "winter", 0.25, -0.20, 0.15, 0.20),
        _drape("#8A2BE2", "royal purple", "winter", 0.30, -0.50, 0.40, 0.10),
        _drape("#FF00FF", "magenta", "winter", 0.55, -0.30, 0.60, 0.00),
        _drape("#00FFFF", "cyan", "winter", 0.75, -0.40, 0.45, 0.00),
    ),
}

FULL_OPTICAL_PALETTE: Tuple[DrapeOptics, ...] = tuple(d for s in SEASON_ORDER for d in OPTICAL_PALETTE[s])


@dataclass(frozen=True)
class DrapeInteraction:
    drape: DrapeOptics
    harmony_score: int
    brightness_effect: int  # -50 .. 50
    vitality_effect: int  # -50 .. 50
    recommended: bool
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "color": self.drape.swatch.hex,
            "name": self.drape.swatch.name,
            "season": self.drape.season,
            "harmony_score": self.harmony_score,
            "brightness_effect": self.brightness_effect,
            "vitality_effect": self.vitality_effect,
            "recommended": self.recommended,
            "description": self.description,
        }


@dataclass(frozen=True)
class SeasonAnalysis:
    recommended_season: str
    season_scores: Dict[str, int]
    top_colors: List[DrapeInteraction]
    avoid_colors: List[DrapeInteraction]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommended_season": self.recommended_season,
            "season_scores": dict(self.season_scores),
            "top_colors": [c.to_dict() for c in self.top_colors],
            "avoid_colors": [c.to_dict() for c in self.avoid_colors],
        }


def _describe(name: str, score: int, brightness: float, vitality: float) -> str:
    effects = []
    if brightness > 15:
        effects.append("brightens the skin")
    elif brightness < -15:
        effects.append("calms the skin")
    if vitality > 15:
        effects.append("adds vitality")
    elif vitality < -15:
        effects.append("softens the look")
    effect_text = " and ".join(effects) if effects else "blends in naturally"

    if score >= 85:
        return f"{name} is a top choice: it {effect_text}."
    if score >= 70:
        return f"{name} suits you: it {effect_text}."
    if score >= 50:
        return f"{name} is a safe choice."
    return f"Better to skip {name}."


def drape_interaction(skin: SkinTone, drape: DrapeOptics, config: Config = CONFIG) -> DrapeInteraction:
    """Harmony of one drape with a skin tone; warmth match dominates."""
    brightness_match = 1.0 - abs(skin.brightness - drape.reflectance) * 0.5
    brightness_effect = (drape.reflectance - 0.5) * 50.0 * brightness_match

    warmth_score = max(0.0, 100.0 - abs(skin.warmth - drape.warmth) * 80.0)

    # flushed skin is better served by low-boost colors
    vitality_penalty = drape.saturation_boost * -30.0 if skin.redness > 0.5 else 0.0
    vitality_effect = drape.saturation_boost * 40.0 + vitality_penalty

    mute_score = (1.0 - abs(skin.melanin * 0.5 - drape.muteness)) * 30.0

    if skin.saturation > 0.5:
        saturation_match = drape.saturation_boost > 0
    else:
        saturation_match = drape.saturation_boost <= 0
    saturation_score = 20.0 if saturation_match else 0.0

    harmony = int(round(
        warmth_score * 0.40
        + brightness_match * 100.0 * 0.20
        + mute_score * 0.25
        + saturation_score * 0.15
    ))
    harmony = min(100, max(0, harmony))
    return DrapeInteraction(
        drape=drape,
        harmony_score=harmony,
        brightness_effect=int(round(brightness_effect)),
        vitality_effect=int(round(vitality_effect)),
        recommended=harmony >= config.harmony.recommend_min,
        description=_describe(drape.swatch.name, harmony, brightness_effect, vitality_effect),
    )


def _by_harmony(results: List[DrapeInteraction]) -> List[DrapeInteraction]:
    return sorted(results, key=lambda r: -r.harmony_score)


def analyze_season(skin: SkinTone, season: str, config: Config = CONFIG) -> List[DrapeInteraction]:
    """One season's drapes, best harmony first."""
    if season not in OPTICAL_PALETTE:
        raise OutOfRange(f"season must be one of {SEASON_ORDER}, got {season!r}")
    return _by_harmony([drape_interaction(skin, d, config) for d in OPTICAL_PALETTE[season]])


def analyze_full_palette(skin: SkinTone, config: Config = CONFIG) -> SeasonAnalysis:
    """Score every reference drape and recommend the best-averaging season."""
    results = [drape_interaction(skin, d, config) for d in FULL_OPTICAL_PALETTE]

    scores: Dict[str, int] = {}
    for season in SEASON_ORDER:
        values = [r.harmony_score for r in results if r.drape.season == season]
        scores[season] = int(round(sum(values) / len(values))) if values else 0
    # first season in order wins a tie
    recommended = max(SEASON_ORDER, key=lambda s: scores[s])

    ordered = _by_harmony(results)
    h = config.harmony
    LOGGER.info("season_analyzed", season=recommended, scores=scores)
    return SeasonAnalysis(
        recommended_season=recommended,
        season_scores=scores,
        top_colors=ordered[:h.top_colors],
        avoid_colors=ordered[-h.avoid_colors:] if h.avoid_colors > 0 else [],
    )
