# SPDX-License-Identifier: Apache-2.0
"""Value types shared by every stage of the engine."""
from __future__ import annotations

import colorsys
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]
LandmarkSet = Sequence[Point]


class MetalType(str, Enum):
    GOLD = "gold"
    SILVER = "silver"
    ROSE_GOLD = "rose-gold"
    NONE = "none"


class LightMode(str, Enum):
    NORMAL = "normal"
    POLARIZED = "polarized"
    UV = "uv"
    SEBUM = "sebum"


class ColorAdjustment(str, Enum):
    MUTED = "muted"
    BRIGHT = "bright"
    NEUTRAL = "neutral"


class ReasonCode(str, Enum):
    HIGH_REDNESS = "high_redness"
    LOW_HYDRATION = "low_hydration"
    HIGH_OILINESS = "high_oiliness"
    NORMAL = "normal"


@dataclass(frozen=True)
class Swatch:
    """A single 8-bit RGB color."""
    r: int
    g: int
    b: int
    name: str = field(default="", compare=False)

    def __post_init__(self):
        for channel in (self.r, self.g, self.b):
            if not 0 <= int(channel) <= 255:
                raise ValueError(f"channel value {channel} outside 0..255")

    @classmethod
    def from_hex(cls, value: str, name: str = "") -> "Swatch":
        text = value.strip().lstrip("#")
        if len(text) != 6:
            raise ValueError(f"expected #RRGGBB, got {value!r}")
        return cls(int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16), name)

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @property
    def saturation(self) -> float:
        return colorsys.rgb_to_hsv(self.r / 255, self.g / 255, self.b / 255)[1]

    @property
    def value(self) -> float:
        return colorsys.rgb_to_hsv(self.r / 255, self.g / 255, self.b / 255)[2]

    def scaled(self, factor: float) -> "Swatch":
        """Brightness-scaled copy, clamped to the 8-bit range."""
        def _c(v: int) -> int:
            return int(min(255, max(0, round(v * factor))))
        return Swatch(_c(self.r), _c(self.g), _c(self.b), self.name)


@dataclass(frozen=True)
class DrapeResult:
    color: Swatch
    uniformity_score: float
    rank: int

    def to_dict(self) -> Dict[str, Any]:
        return {"color": self.color.hex, "uniformity_score": self.uniformity_score, "rank": self.rank}


@dataclass(frozen=True)
class PigmentMaps:
    """Per-pixel intensities in [0, 1]; zero outside the face mask."""
    melanin: np.ndarray
    hemoglobin: np.ndarray
    sebum: np.ndarray

    def get(self, name: str) -> np.ndarray:
        return getattr(self, name)


@dataclass(frozen=True)
class PigmentSummary:
    melanin_avg: float
    hemoglobin_avg: float
    sebum_avg: float
    distribution: Tuple[float, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["distribution"] = list(self.distribution)
        return data


@dataclass(frozen=True)
class SkinMetrics:
    """Externally supplied skin-analysis scores on a 0-100 scale."""
    hydration: Optional[float] = None
    oiliness: Optional[float] = None
    redness: Optional[float] = None
    sensitivity: Optional[float] = None


@dataclass(frozen=True)
class SynergyInsight:
    color_adjustment: ColorAdjustment
    message: str
    reason_code: ReasonCode
    confidence: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "color_adjustment": self.color_adjustment.value,
            "message": self.message,
            "reason_code": self.reason_code.value,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class DeviceCapability:
    """Opaque device descriptor handed in by the host application."""
    tier: str = "mid"
    palette_size: Optional[int] = None
    use_mock: bool = False


@dataclass(frozen=True)
class AdjustedRanking:
    adjusted_best_colors: List[DrapeResult]
    insight: SynergyInsight
