"""Tests for render settings validation."""

import pytest

from resonance.control.config import DEFAULTS
from resonance.settings import ColorMode, RenderSettings


def test_defaults_follow_config():
    s = RenderSettings()
    assert s.intensity == DEFAULTS["settings"]["intensity"]
    assert s.particle_count == DEFAULTS["settings"]["particleCount"]
    assert s.glow_enabled is True
    assert s.color_mode is ColorMode.EMOTIONAL
    assert s.animation_speed == 1.0
    assert s.show_inner_patterns is True
    assert s.dpr_clamp == 2.0
    assert s.frame_interval_ms == 16


@pytest.mark.parametrize(
    "kwargs, attr, expected",
    [
        ({"intensity": 5.0}, "intensity", 2.0),
        ({"intensity": 0.0}, "intensity", 0.1),
        ({"particle_count": -3}, "particle_count", 0),
        ({"particle_count": 999}, "particle_count", 200),
        ({"animation_speed": 0}, "animation_speed", 0.1),
        ({"dpr_clamp": 10}, "dpr_clamp", 4.0),
        ({"frame_interval_ms": 5000}, "frame_interval_ms", 1000),
        ({"frame_interval_ms": 0}, "frame_interval_ms", 0),
    ],
)
def test_direct_construction_is_clamped(kwargs, attr, expected):
    assert getattr(RenderSettings(**kwargs), attr) == expected


def test_color_mode_parsing():
    assert ColorMode.parse("ARCHETYPAL ", ColorMode.EMOTIONAL) is ColorMode.ARCHETYPAL
    assert ColorMode.parse("rainbow", ColorMode.ENERGY) is ColorMode.ENERGY
    assert RenderSettings(color_mode="monochrome").color_mode is ColorMode.MONOCHROME


class TestFromMapping:
    def test_full_state(self):
        s = RenderSettings.from_mapping({
            "settings": {"intensity": 1.5, "particleCount": 40, "colorMode": "energy", "glowEnabled": False},
            "system": {"dprClamp": 1.5, "frameIntervalMs": 33},
            "signature": {"emotional_valence": 0.2},
        })
        assert s.intensity == 1.5
        assert s.particle_count == 40
        assert s.color_mode is ColorMode.ENERGY
        assert s.glow_enabled is False
        assert s.dpr_clamp == 1.5
        assert s.frame_interval_ms == 33

    def test_flat_section_keeps_base_for_missing_keys(self):
        base = RenderSettings(intensity=0.5, particle_count=5)
        s = RenderSettings.from_mapping({"particleCount": 12}, base=base)
        assert s.particle_count == 12
        assert s.intensity == 0.5

    def test_unknown_color_mode_keeps_default(self):
        s = RenderSettings.from_mapping({"colorMode": "ultraviolet"})
        assert s.color_mode is ColorMode.EMOTIONAL

    def test_out_of_range_values_are_clamped(self):
        s = RenderSettings.from_mapping({"settings": {"intensity": 12, "animationSpeed": -1}})
        assert s.intensity == 2.0
        assert s.animation_speed == 0.1

    def test_non_mapping_returns_base(self):
        base = RenderSettings(intensity=0.7)
        assert RenderSettings.from_mapping(None, base=base) is base
        assert RenderSettings.from_mapping([1, 2], base=base) is base

    def test_to_mapping_uses_control_keys(self):
        s = RenderSettings(intensity=1.2, color_mode=ColorMode.ARCHETYPAL)
        payload = s.to_mapping()
        assert payload["settings"]["colorMode"] == "archetypal"
        assert payload["system"]["frameIntervalMs"] == 16
        assert RenderSettings.from_mapping(payload) == s
