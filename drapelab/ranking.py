# SPDX-License-Identifier: Apache-2.0
"""Palette ranking: drape every swatch, score it, sort best-first."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from .config import CONFIG, Config
from .drape import measure_uniformity, render_drape_into
from .errors import CancelledAnalysis, OutOfRange
from .face_mask import require_face_region
from .imaging import RasterSurface
from .logging_utils import get_logger
from .types import DrapeResult, MetalType, Swatch

LOGGER = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class CancelToken:
    """Cooperative cancellation flag checked once per scored swatch."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass(frozen=True)
class PaletteRanking:
    """Sorted drape results; ``cancelled`` marks a partial subset."""
    results: List[DrapeResult]
    total: int
    cancelled: bool = False

    @property
    def completed(self) -> int:
        return len(self.results)

    def require_complete(self) -> List[DrapeResult]:
        if self.cancelled:
            raise CancelledAnalysis(self.completed, self.total)
        return self.results

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    def __getitem__(self, idx):
        return self.results[idx]


def sort_results(scored: Sequence[tuple]) -> List[DrapeResult]:
    """Order (palette_index, swatch, score) triples by score, ties by palette order."""
    ordered = sorted(scored, key=lambda item: (-item[2], item[0]))
    return [DrapeResult(color=swatch, uniformity_score=score, rank=i + 1)
            for i, (_, swatch, score) in enumerate(ordered)]


def rank_palette(
    image: np.ndarray,
    mask: np.ndarray,
    palette: Sequence[Swatch],
    metal: MetalType = MetalType.NONE,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancelToken] = None,
    config: Config = CONFIG,
) -> PaletteRanking:
    """Drape each swatch in turn and rank by uniformity score.

    After every swatch the progress callback receives
    ``(completed, total)`` and the cancel token is checked. A cancelled run
    returns the swatches scored so far, flagged as partial.
    """
    require_face_region(image, mask)
    total = len(palette)
    scored: List[tuple] = []
    cancelled = bool(cancel_token and cancel_token.cancelled)
    LOGGER.info("ranking_started", total=total, metal=MetalType(metal).value)

    with RasterSurface.like(image, tag="ranking") as surface:
        for idx, swatch in enumerate(palette):
            if cancelled:
                break
            frame = render_drape_into(surface, image, swatch, mask, metal, config)
            score = measure_uniformity(frame, mask, config.ranking.variance_scale)
            scored.append((idx, swatch, round(score, 4)))
            LOGGER.debug("ranking_progress", completed=len(scored), total=total, color=swatch.hex)

            if on_progress is not None:
                on_progress(len(scored), total)
            cancelled = bool(cancel_token and cancel_token.cancelled)

    if cancelled and len(scored) < total:
        LOGGER.info("ranking_cancelled", completed=len(scored), total=total)
    else:
        cancelled = False
        LOGGER.info("ranking_done", total=total)
    return PaletteRanking(results=sort_results(scored), total=total, cancelled=cancelled)


def best_colors(results: Sequence[DrapeResult], k: int = 5) -> List[DrapeResult]:
    """First ``k`` entries of an already sorted result sequence."""
    if k < 0:
        raise OutOfRange(f"k must be non-negative, got {k}")
    return list(results)[:k]


def ranking_record(results: Sequence[DrapeResult], metal: MetalType, k: int = 5) -> Dict[str, Any]:
    """Flat record for storage: best hex colors, all scores, metal used."""
    return {
        "best_colors": [r.color.hex for r in best_colors(results, k)],
        "uniformity_scores": {r.color.hex: r.uniformity_score for r in results},
        "metal_test": MetalType(metal).value,
    }
