# SPDX-License-Identifier: Apache-2.0
"""Synergy rules: turn skin-condition metrics into a color-adjustment directive."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .config import CONFIG, Config
from .logging_utils import get_logger
from .ranking import best_colors
from .types import (
    AdjustedRanking,
    ColorAdjustment,
    DrapeResult,
    PigmentSummary,
    ReasonCode,
    SkinMetrics,
    Swatch,
    SynergyInsight,
)

LOGGER = get_logger(__name__)

MESSAGES: Dict[ReasonCode, str] = {
    ReasonCode.HIGH_REDNESS: (
        "Redness is elevated ({value:.0f}/100). Muted, low-saturation tones calm the "
        "complexion better than vivid ones."
    ),
    ReasonCode.LOW_HYDRATION: (
        "Hydration is low ({value:.0f}/100). Brighter, clearer tones add the vitality "
        "dry skin can lack."
    ),
    ReasonCode.HIGH_OILINESS: (
        "Oiliness is high ({value:.0f}/100). Rich, deeper saturated tones balance "
        "surface shine."
    ),
    ReasonCode.NORMAL: "Skin condition is balanced. Follow your palette ranking as is.",
}


@dataclass(frozen=True)
class Rule:
    reason: ReasonCode
    adjustment: ColorAdjustment
    metric: str
    threshold_key: str
    above: bool  # True: fires at value >= threshold, False: value < threshold


# evaluated in order; the first rule that fires wins
RULES = (
    Rule(ReasonCode.HIGH_REDNESS, ColorAdjustment.MUTED, "redness", "redness_threshold", True),
    Rule(ReasonCode.LOW_HYDRATION, ColorAdjustment.BRIGHT, "hydration", "hydration_threshold", False),
    Rule(ReasonCode.HIGH_OILINESS, ColorAdjustment.BRIGHT, "oiliness", "oiliness_threshold", True),
)


# pigment summary field -> 0-100 skin metric it stands for
SUMMARY_FIELDS: Dict[str, Optional[str]] = {
    "hemoglobin_avg": "redness",
    "sebum_avg": "oiliness",
    "melanin_avg": None,
}


def metrics_from_summary(summary: PigmentSummary) -> SkinMetrics:
    """Pigment means as 0-100 scores; hydration is not observable from pigments."""
    return SkinMetrics(
        redness=summary.hemoglobin_avg * 100.0,
        oiliness=summary.sebum_avg * 100.0,
    )


def _coerce_metrics(source: Union[PigmentSummary, SkinMetrics, Mapping[str, Any]]) -> SkinMetrics:
    if isinstance(source, SkinMetrics):
        return source
    if isinstance(source, PigmentSummary):
        return metrics_from_summary(source)
    if isinstance(source, Mapping):
        recognised = set(SkinMetrics.__dataclass_fields__) | set(SUMMARY_FIELDS)
        if not recognised & set(source):
            raise TypeError(f"no skin metric or pigment summary keys in {list(source)}")
        known = {k: float(v) for k, v in source.items() if k in SkinMetrics.__dataclass_fields__ and v is not None}
        # summary-shaped mappings, e.g. PigmentSummary.to_dict()
        for key, metric in SUMMARY_FIELDS.items():
            if metric and source.get(key) is not None:
                known.setdefault(metric, float(source[key]) * 100.0)
        return SkinMetrics(**known)
    raise TypeError(f"cannot derive skin metrics from {type(source).__name__}")


def _metric_value(metrics: SkinMetrics, name: str) -> Optional[float]:
    if name == "redness":
        values = [v for v in (metrics.redness, metrics.sensitivity) if v is not None]
        return max(values) if values else None
    return getattr(metrics, name)


def synergy_insight(
    source: Union[PigmentSummary, SkinMetrics, Mapping[str, Any]],
    config: Config = CONFIG,
) -> SynergyInsight:
    """Apply the threshold table to a pigment summary or skin-metric set."""
    metrics = _coerce_metrics(source)
    thresholds = config.synergy

    for rule in RULES:
        value = _metric_value(metrics, rule.metric)
        if value is None:
            continue
        threshold = getattr(thresholds, rule.threshold_key)
        fired = value >= threshold if rule.above else value < threshold
        if fired:
            confidence = round(min(1.0, 0.5 + abs(value - threshold) / 100.0), 2)
            LOGGER.info("synergy_rule_fired", reason=rule.reason.value, value=round(value, 2))
            return SynergyInsight(
                color_adjustment=rule.adjustment,
                message=MESSAGES[rule.reason].format(value=value),
                reason_code=rule.reason,
                confidence=confidence,
            )

    return SynergyInsight(
        color_adjustment=ColorAdjustment.NEUTRAL,
        message=MESSAGES[ReasonCode.NORMAL],
        reason_code=ReasonCode.NORMAL,
    )


def matches_adjustment(color: Swatch, insight: SynergyInsight, config: Config = CONFIG) -> bool:
    s = config.synergy
    if insight.color_adjustment is ColorAdjustment.MUTED:
        return color.saturation <= s.muted_saturation_max
    if insight.color_adjustment is ColorAdjustment.BRIGHT:
        if insight.reason_code is ReasonCode.HIGH_OILINESS:
            # deep-tone leaning: saturated regardless of lightness
            return color.saturation >= s.bright_saturation_min
        return color.saturation >= s.bright_saturation_min and color.value >= s.bright_value_min
    return False


def apply_insight(
    results: Sequence[DrapeResult],
    insight: SynergyInsight,
    k: Optional[int] = 5,
    config: Config = CONFIG,
) -> AdjustedRanking:
    """Re-rank drape results, boosting colors that follow the insight.

    Scores are left untouched; only the order and ``rank`` change. Ties keep
    their incoming order. ``k=None`` returns every result.
    """
    boost = config.synergy.boost

    def _key(item):
        idx, result = item
        bonus = boost if matches_adjustment(result.color, insight, config) else 0.0
        return (-(result.uniformity_score + bonus), idx)

    ordered = [r for _, r in sorted(enumerate(results), key=_key)]
    reranked: List[DrapeResult] = [replace(r, rank=i + 1) for i, r in enumerate(ordered)]
    if k is not None:
        reranked = best_colors(reranked, k)
    return AdjustedRanking(adjusted_best_colors=reranked, insight=insight)
