from __future__ import annotations

import pytest

from drapelab.config import Config, SynergyConfig
from drapelab.synergy import apply_insight, metrics_from_summary, synergy_insight
from drapelab.types import (
    ColorAdjustment,
    DrapeResult,
    PigmentSummary,
    ReasonCode,
    SkinMetrics,
    Swatch,
)

RED = Swatch(255, 0, 0, "red")
GREY = Swatch(128, 128, 128, "grey")
MAROON = Swatch(100, 10, 10, "maroon")


def test_high_hemoglobin_calls_for_muted_colors():
    insight = synergy_insight(PigmentSummary(melanin_avg=0.3, hemoglobin_avg=0.85, sebum_avg=0.5))
    assert insight.color_adjustment is ColorAdjustment.MUTED
    assert insight.reason_code is ReasonCode.HIGH_REDNESS
    assert "85" in insight.message
    assert 0.5 <= insight.confidence <= 1.0


@pytest.mark.parametrize("hemoglobin", [0.0, 0.35, 0.69])
def test_low_hemoglobin_never_muted(hemoglobin):
    insight = synergy_insight(PigmentSummary(melanin_avg=0.5, hemoglobin_avg=hemoglobin, sebum_avg=0.2))
    assert insight.color_adjustment is not ColorAdjustment.MUTED


def test_threshold_is_inclusive():
    insight = synergy_insight(SkinMetrics(redness=70.0))
    assert insight.reason_code is ReasonCode.HIGH_REDNESS
    assert insight.confidence == 0.5


def test_low_hydration():
    insight = synergy_insight(SkinMetrics(hydration=20.0, redness=30.0))
    assert insight.color_adjustment is ColorAdjustment.BRIGHT
    assert insight.reason_code is ReasonCode.LOW_HYDRATION
    assert insight.confidence == 0.7


def test_high_oiliness():
    insight = synergy_insight({"oiliness": 85, "hydration": 60})
    assert insight.color_adjustment is ColorAdjustment.BRIGHT
    assert insight.reason_code is ReasonCode.HIGH_OILINESS


def test_sensitivity_counts_as_redness():
    insight = synergy_insight(SkinMetrics(redness=10.0, sensitivity=90.0))
    assert insight.reason_code is ReasonCode.HIGH_REDNESS


def test_redness_takes_precedence():
    insight = synergy_insight(SkinMetrics(redness=80.0, hydration=10.0, oiliness=90.0))
    assert insight.reason_code is ReasonCode.HIGH_REDNESS


def test_balanced_skin():
    insight = synergy_insight(SkinMetrics(redness=20.0, hydration=60.0, oiliness=30.0))
    assert insight.color_adjustment is ColorAdjustment.NEUTRAL
    assert insight.reason_code is ReasonCode.NORMAL
    assert insight.confidence is None


def test_thresholds_come_from_config():
    strict = Config(synergy=SynergyConfig(redness_threshold=10.0))
    insight = synergy_insight(SkinMetrics(redness=20.0), strict)
    assert insight.reason_code is ReasonCode.HIGH_REDNESS


def test_summary_has_no_hydration():
    metrics = metrics_from_summary(PigmentSummary(0.4, 0.2, 0.3))
    assert metrics.hydration is None
    assert metrics.redness == pytest.approx(20.0)
    assert metrics.oiliness == pytest.approx(30.0)


def test_unknown_source():
    with pytest.raises(TypeError):
        synergy_insight(42)


def _results(*pairs):
    return [DrapeResult(color=c, uniformity_score=s, rank=i + 1) for i, (c, s) in enumerate(pairs)]


def test_muted_insight_promotes_low_saturation():
    results = _results((RED, 60.0), (GREY, 55.0))
    insight = synergy_insight(SkinMetrics(redness=90.0))
    adjusted = apply_insight(results, insight)
    assert [r.color.name for r in adjusted.adjusted_best_colors] == ["grey", "red"]
    assert [r.rank for r in adjusted.adjusted_best_colors] == [1, 2]
    assert adjusted.adjusted_best_colors[0].uniformity_score == 55.0
    assert adjusted.insight is insight


def test_bright_insight_promotes_vivid():
    results = _results((GREY, 60.0), (MAROON, 58.0), (RED, 55.0))
    insight = synergy_insight(SkinMetrics(hydration=10.0))
    adjusted = apply_insight(results, insight, k=2)
    assert [r.color.name for r in adjusted.adjusted_best_colors] == ["red", "grey"]


def test_neutral_insight_keeps_order():
    results = _results((RED, 60.0), (GREY, 55.0), (MAROON, 50.0))
    insight = synergy_insight(SkinMetrics(redness=10.0))
    adjusted = apply_insight(results, insight, k=None)
    assert [r.color for r in adjusted.adjusted_best_colors] == [RED, GREY, MAROON]


def test_summary_mapping_matches_summary():
    summary = PigmentSummary(melanin_avg=0.3, hemoglobin_avg=0.85, sebum_avg=0.5)
    from_dict = synergy_insight(summary.to_dict())
    assert from_dict.reason_code is ReasonCode.HIGH_REDNESS
    assert from_dict == synergy_insight(summary)


def test_mapping_without_known_keys():
    with pytest.raises(TypeError):
        synergy_insight({"redness_score": 90})


def test_same_input_same_insight():
    summary = PigmentSummary(melanin_avg=0.5, hemoglobin_avg=0.72, sebum_avg=0.4)
    first, second = synergy_insight(summary), synergy_insight(summary)
    assert first.color_adjustment is second.color_adjustment
    assert first.reason_code is second.reason_code
    assert first == second
