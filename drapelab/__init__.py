# SPDX-License-Identifier: Apache-2.0
"""Drape compositing, palette ranking and pigment analysis for face photos."""

from __future__ import annotations

from .drape import render_drape
from .errors import CancelledAnalysis, DrapeLabError, InvalidLandmarks, NoFaceRegion, OutOfRange
from .face_mask import build_face_mask
from .harmony import analyze_full_palette
from .heatmap import render_heatmap
from .palette import generate_palette
from .pigments import decompose_pigments
from .pipeline import AnalysisSession
from .ranking import CancelToken, best_colors, rank_palette
from .synergy import apply_insight, synergy_insight
from .uniformity import analyze_skin_uniformity
from .types import (
    ColorAdjustment,
    DeviceCapability,
    DrapeResult,
    LightMode,
    MetalType,
    PigmentMaps,
    PigmentSummary,
    ReasonCode,
    SkinMetrics,
    Swatch,
    SynergyInsight,
)

__all__ = [
    "AnalysisSession",
    "CancelToken",
    "CancelledAnalysis",
    "ColorAdjustment",
    "DeviceCapability",
    "DrapeLabError",
    "DrapeResult",
    "InvalidLandmarks",
    "LightMode",
    "MetalType",
    "NoFaceRegion",
    "OutOfRange",
    "PigmentMaps",
    "PigmentSummary",
    "ReasonCode",
    "SkinMetrics",
    "Swatch",
    "SynergyInsight",
    "analyze_full_palette",
    "analyze_skin_uniformity",
    "apply_insight",
    "best_colors",
    "build_face_mask",
    "decompose_pigments",
    "generate_palette",
    "rank_palette",
    "render_drape",
    "render_heatmap",
    "synergy_insight",
]
__version__ = "0.1.0"
