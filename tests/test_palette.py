from __future__ import annotations

import pytest

from drapelab.config import Config
from drapelab.errors import OutOfRange
from drapelab.palette import BASE_PALETTE, SEASONS, generate_palette, palette_size_for, parse_palette, season_of
from drapelab.types import DeviceCapability


@pytest.mark.parametrize("size", [16, 64, 128])
def test_palette_has_exact_size(size):
    palette = generate_palette(size)
    assert len(palette) == size


def test_base_palette_is_seasonal_set():
    palette = generate_palette(16)
    assert palette == list(BASE_PALETTE)
    assert sum(len(v) for v in SEASONS.values()) == 16
    assert season_of(palette[0]) == "spring"


def test_variants_are_base_major():
    palette = generate_palette(64)
    assert palette[0] == BASE_PALETTE[0].scaled(0.6)
    assert palette[3] == BASE_PALETTE[0].scaled(1.4)
    assert palette[4] == BASE_PALETTE[1].scaled(0.6)
    assert palette[0].name.startswith(BASE_PALETTE[0].name)


def test_generation_is_deterministic():
    assert generate_palette(128) == generate_palette(128)


@pytest.mark.parametrize("size", [0, 15, 32, 256])
def test_unsupported_sizes(size):
    with pytest.raises(OutOfRange):
        generate_palette(size)


def test_tier_sizes():
    assert palette_size_for(DeviceCapability(tier="low")) == 16
    assert palette_size_for(DeviceCapability(tier="mid")) == 64
    assert palette_size_for(DeviceCapability(tier="high")) == 128
    assert palette_size_for(DeviceCapability(tier="low", palette_size=128)) == 128


def test_unknown_tier_or_size():
    with pytest.raises(OutOfRange):
        palette_size_for(DeviceCapability(tier="watch"), Config())
    with pytest.raises(OutOfRange):
        palette_size_for(DeviceCapability(palette_size=20))


def test_parse_palette():
    swatches = parse_palette(["#ff0000", "00FF80"])
    assert [s.hex for s in swatches] == ["#FF0000", "#00FF80"]
    with pytest.raises(ValueError):
        parse_palette(["#12345"])
