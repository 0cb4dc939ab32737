from __future__ import annotations

import numpy as np

from drapelab.skin_tone import extract_skin_tone, metal_score, recommend_metal
from drapelab.types import MetalType, PigmentSummary


def _flat(rgb):
    image = np.zeros((24, 24, 4), dtype=np.uint8)
    image[..., :3] = rgb
    image[..., 3] = 255
    return image, np.full((24, 24), 255, dtype=np.uint8)


def test_warm_complexion_gets_gold():
    tone = extract_skin_tone(*_flat((220, 160, 120)))
    assert tone.warmth > 0
    rec = recommend_metal(tone)
    assert rec.recommended is MetalType.GOLD
    assert rec.gold_score > rec.silver_score
    assert "Gold" in rec.explanation


def test_cool_complexion_gets_silver():
    tone = extract_skin_tone(*_flat((150, 170, 220)))
    assert tone.warmth < 0
    rec = recommend_metal(tone)
    assert rec.recommended is MetalType.SILVER
    assert rec.silver_score - rec.gold_score >= 10


def test_neutral_complexion_is_a_tie():
    tone = extract_skin_tone(*_flat((185, 180, 175)))
    assert abs(tone.warmth) < 0.1
    rec = recommend_metal(tone)
    assert abs(rec.gold_score - rec.silver_score) < 10
    assert "both" in rec.explanation


def test_summary_feeds_pigment_fields():
    image, mask = _flat((200, 150, 130))
    tone = extract_skin_tone(image, mask, PigmentSummary(0.3, 0.6, 0.4))
    assert tone.melanin == 0.3
    assert tone.redness == 0.6
    assert extract_skin_tone(image, mask).melanin == 0.5


def test_score_is_integer():
    tone = extract_skin_tone(*_flat((210, 170, 150)))
    assert isinstance(metal_score(tone, MetalType.GOLD), int)
