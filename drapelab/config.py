# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

ENV_PREFIX = "DRAPELAB_"


class MaskConfig(BaseModel):
    min_points: int = 8
    min_area_px: float = 16.0
    feather_px: int = 0


class DrapeConfig(BaseModel):
    start_ratio: float = 0.85
    band_ratio: float = 0.25
    reflect_strength: float = 0.22


class RankingConfig(BaseModel):
    variance_scale: float = 400.0


class PigmentConfig(BaseModel):
    skin_hue_deg: list[float] = [0.0, 50.0]
    skin_saturation: list[float] = [0.1, 0.7]
    skin_lightness: list[float] = [0.2, 0.85]
    histogram_bins: int = 10
    region_radius_px: int = 20


class HeatmapConfig(BaseModel):
    default_opacity: float = 0.6


class SynergyConfig(BaseModel):
    redness_threshold: float = 70.0
    hydration_threshold: float = 40.0
    oiliness_threshold: float = 70.0
    boost: float = 10.0
    muted_saturation_max: float = 0.45
    bright_saturation_min: float = 0.5
    bright_value_min: float = 0.55


class UniformityConfig(BaseModel):
    spot_threshold: float = 0.25
    redness_threshold: float = 0.3
    outlier_ratio: float = 0.05
    region_radius_px: int = 30
    grade_excellent: float = 85.0
    grade_good: float = 70.0
    grade_fair: float = 50.0


class HarmonyConfig(BaseModel):
    recommend_min: float = 70.0
    top_colors: int = 8
    avoid_colors: int = 4


class DeviceConfig(BaseModel):
    palette_sizes: Dict[str, int] = {"low": 16, "mid": 64, "high": 128}


class Config(BaseModel):
    mask: MaskConfig = MaskConfig()
    drape: DrapeConfig = DrapeConfig()
    ranking: RankingConfig = RankingConfig()
    pigment: PigmentConfig = PigmentConfig()
    heatmap: HeatmapConfig = HeatmapConfig()
    synergy: SynergyConfig = SynergyConfig()
    uniformity: UniformityConfig = UniformityConfig()
    harmony: HarmonyConfig = HarmonyConfig()
    device: DeviceConfig = DeviceConfig()


def _env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    # DRAPELAB_RANKING_VARIANCE_SCALE -> data["ranking"]["variance_scale"]
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        section, _, field = key[len(ENV_PREFIX):].lower().partition("_")
        if section not in Config.model_fields or not field:
            continue
        data.setdefault(section, {})[field] = value
    return data


def load_config(path: Optional[Path] = None) -> Config:
    load_dotenv()
    path = path or Path(__file__).with_name("config.yaml")
    data: Dict[str, Any] = {}
    if path.exists():
        data = yaml.safe_load(path.read_text()) or {}
    return Config(**_env_overrides(data))


CONFIG = load_config()
