# SPDX-License-Identifier: Apache-2.0
"""One analysis session: image + landmarks -> mask -> drape ranking, pigments, insight."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np
from PIL import Image

from .config import CONFIG, Config
from .errors import DrapeLabError
from .face_mask import (
    EllipseMaskBuilder,
    FaceMaskBuilder,
    LandmarkProvider,
    OvalLandmarkProvider,
    PolygonMaskBuilder,
    StaticLandmarkProvider,
    face_center,
)
from .harmony import SeasonAnalysis, analyze_full_palette
from .heatmap import render_heatmap
from .imaging import as_image_buffer
from .logging_utils import get_logger
from .palette import generate_palette, palette_size_for
from .pigments import PigmentAnalysis, PigmentStrategy, decompose_pigments, sample_region
from .ranking import CancelToken, PaletteRanking, ProgressCallback, rank_palette, ranking_record
from .skin_tone import MetalRecommendation, SkinTone, extract_skin_tone, recommend_metal
from .synergy import apply_insight, synergy_insight
from .types import (
    AdjustedRanking,
    DeviceCapability,
    LandmarkSet,
    LightMode,
    MetalType,
    SkinMetrics,
    Swatch,
    SynergyInsight,
)
from .uniformity import SkinUniformity, analyze_skin_uniformity, uniformity_record

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class Components:
    landmarks: Optional[LandmarkProvider]
    mask_builder: FaceMaskBuilder
    palette_size: int


def select_components(
    capability: DeviceCapability,
    landmarks: Optional[LandmarkSet] = None,
    config: Config = CONFIG,
) -> Components:
    """Pick real or mock collaborators from the device descriptor."""
    size = palette_size_for(capability, config)
    if capability.use_mock:
        return Components(OvalLandmarkProvider(), EllipseMaskBuilder(config), size)
    provider = StaticLandmarkProvider(landmarks) if landmarks is not None else None
    return Components(provider, PolygonMaskBuilder(config), size)


class AnalysisSession:
    """Owns the face mask and cached pigment maps for one image.

    Use as a context manager; closing releases the mask and maps, after
    which every operation raises :class:`DrapeLabError`.
    """

    def __init__(
        self,
        image: Union[np.ndarray, Image.Image],
        landmarks: Optional[LandmarkSet] = None,
        capability: DeviceCapability = DeviceCapability(),
        config: Config = CONFIG,
        pigment_strategy: Optional[PigmentStrategy] = None,
    ):
        self.config = config
        self.capability = capability
        self.image = as_image_buffer(image)
        self.components = select_components(capability, landmarks, config)
        if self.components.landmarks is None:
            raise DrapeLabError("no landmarks supplied and no mock provider selected")
        self.pigment_strategy = pigment_strategy
        self._mask: Optional[np.ndarray] = None
        self._pigments: Optional[PigmentAnalysis] = None
        self._closed = False
        LOGGER.info("session_opened", width=self.width, height=self.height, tier=capability.tier)

    # ------------------------------------------------------------------ state

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    def _check_open(self) -> None:
        if self._closed:
            raise DrapeLabError("analysis session is closed")

    @property
    def mask(self) -> np.ndarray:
        self._check_open()
        if self._mask is None:
            points = self.components.landmarks.landmarks(self.image)
            self._mask = self.components.mask_builder.build(points, self.width, self.height)
        return self._mask

    def close(self) -> None:
        if not self._closed:
            self._mask = None
            self._pigments = None
            self._closed = True
            LOGGER.info("session_closed")

    def __enter__(self) -> "AnalysisSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------- operations

    def palette(self) -> list:
        return generate_palette(self.components.palette_size)

    def rank(
        self,
        metal: MetalType = MetalType.NONE,
        palette: Optional[Sequence[Swatch]] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> PaletteRanking:
        mask = self.mask
        swatches = list(palette) if palette is not None else self.palette()
        return rank_palette(self.image, mask, swatches, metal, on_progress, cancel_token, self.config)

    def pigments(self) -> PigmentAnalysis:
        self._check_open()
        if self._pigments is None:
            self._pigments = decompose_pigments(
                self.image, self.mask, strategy=self.pigment_strategy, config=self.config
            )
        return self._pigments

    def heatmap(self, mode: LightMode, opacity: Optional[float] = None) -> np.ndarray:
        analysis = self.pigments()
        if opacity is None:
            opacity = self.config.heatmap.default_opacity
        return render_heatmap(self.image, analysis.mask, analysis.maps, mode, opacity, self.config)

    def insight(self, metrics: Optional[SkinMetrics] = None) -> SynergyInsight:
        self._check_open()
        source = metrics if metrics is not None else self.pigments().summary
        return synergy_insight(source, self.config)

    def apply_insight(self, ranking: PaletteRanking, insight: Optional[SynergyInsight] = None,
                      k: Optional[int] = 5) -> AdjustedRanking:
        self._check_open()
        return apply_insight(ranking.results, insight or self.insight(), k, self.config)

    def skin_tone(self) -> SkinTone:
        return extract_skin_tone(self.image, self.mask, self.pigments().summary)

    def metal_test(self) -> MetalRecommendation:
        return recommend_metal(self.skin_tone())

    def season_analysis(self) -> SeasonAnalysis:
        return analyze_full_palette(self.skin_tone(), self.config)

    def uniformity(self) -> SkinUniformity:
        analysis = self.pigments()
        return analyze_skin_uniformity(self.image, analysis.mask, analysis.maps, config=self.config)

    def region(self, center=None, radius: Optional[int] = None) -> Dict[str, float]:
        analysis = self.pigments()
        center = center if center is not None else face_center(analysis.mask)
        return sample_region(analysis.maps, analysis.mask, center, radius, self.config)

    def report(self, metal: MetalType = MetalType.NONE, k: int = 5,
               metrics: Optional[SkinMetrics] = None,
               palette: Optional[Sequence[Swatch]] = None) -> Dict[str, Any]:
        """Run every stage and collect a JSON-ready summary."""
        ranking = self.rank(metal, palette)
        insight = self.insight(metrics)
        adjusted = self.apply_insight(ranking, insight, k)
        metal_rec = self.metal_test()
        return {
            "drape": ranking_record(ranking.results, metal, k),
            "cancelled": ranking.cancelled,
            "pigments": self.pigments().summary.to_dict(),
            "insight": insight.to_dict(),
            "adjusted_best_colors": [r.to_dict() for r in adjusted.adjusted_best_colors],
            "metal": {
                "recommended": metal_rec.recommended.value,
                "gold_score": metal_rec.gold_score,
                "silver_score": metal_rec.silver_score,
                "explanation": metal_rec.explanation,
            },
            "uniformity": uniformity_record(self.uniformity()),
            "season": self.season_analysis().to_dict(),
        }
