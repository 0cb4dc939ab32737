# SPDX-License-Identifier: Apache-2.0
"""Seasonal drape palette and its brightness-scaled expansions."""
from __future__ import annotations

from typing import Dict, List, Sequence

import numpy as np

from .config import CONFIG, Config
from .errors import OutOfRange
from .types import DeviceCapability, Swatch

SUPPORTED_SIZES = (16, 64, 128)

# Variants span 60%..140% of the base brightness
VARIANT_MIN_FACTOR = 0.6
VARIANT_MAX_FACTOR = 1.4

SEASONS: Dict[str, List[Swatch]] = {
    "spring": [
        Swatch.from_hex("#FFE0B2", "peach"),
        Swatch.from_hex("#FF8A65", "coral"),
        Swatch.from_hex("#FFD54F", "sunflower"),
        Swatch.from_hex("#81C784", "spring green"),
    ],
    "summer": [
        Swatch.from_hex("#CE93D8", "lavender"),
        Swatch.from_hex("#F8BBD0", "rose quartz"),
        Swatch.from_hex("#90CAF9", "sky blue"),
        Swatch.from_hex("#B0BEC5", "blue grey"),
    ],
    "autumn": [
        Swatch.from_hex("#CD853F", "terracotta"),
        Swatch.from_hex("#B8860B", "mustard"),
        Swatch.from_hex("#808000", "olive"),
        Swatch.from_hex("#A52A2A", "burgundy"),
    ],
    "winter": [
        Swatch.from_hex("#00008B", "navy"),
        Swatch.from_hex("#DC143C", "crimson"),
        Swatch.from_hex("#8A2BE2", "royal purple"),
        Swatch.from_hex("#FFFFFF", "pure white"),
    ],
}

BASE_PALETTE: tuple = tuple(s for season in SEASONS.values() for s in season)


def season_of(swatch: Swatch) -> str:
    for season, swatches in SEASONS.items():
        if swatch in swatches:
            return season
    return ""


def generate_palette(size: int) -> List[Swatch]:
    """Build a palette of exactly ``size`` swatches from the 16-color base set.

    Size 16 is the base set itself. Larger sizes give each base color
    ``size // 16`` brightness variants in equal steps, base-color major.
    """
    if size not in SUPPORTED_SIZES:
        raise OutOfRange(f"palette size must be one of {SUPPORTED_SIZES}, got {size}")
    if size == len(BASE_PALETTE):
        return list(BASE_PALETTE)

    per_color = size // len(BASE_PALETTE)
    factors = np.linspace(VARIANT_MIN_FACTOR, VARIANT_MAX_FACTOR, per_color)
    palette: List[Swatch] = []
    for base in BASE_PALETTE:
        for factor in factors:
            variant = base.scaled(float(factor))
            palette.append(Swatch(variant.r, variant.g, variant.b, f"{base.name} {int(round(factor * 100))}%"))
    return palette[:size]


def palette_size_for(capability: DeviceCapability, config: Config = CONFIG) -> int:
    if capability.palette_size is not None:
        if capability.palette_size not in SUPPORTED_SIZES:
            raise OutOfRange(f"palette size must be one of {SUPPORTED_SIZES}, got {capability.palette_size}")
        return capability.palette_size
    try:
        return config.device.palette_sizes[capability.tier]
    except KeyError:
        raise OutOfRange(f"unknown device tier {capability.tier!r}") from None


def parse_palette(values: Sequence[str]) -> List[Swatch]:
    return [Swatch.from_hex(v) for v in values]
