"""Tests for the signature to draw-attributes mapping."""

import math
import random

import pytest

from resonance.mapping import (
    ARCHETYPAL_HUES,
    Rgba,
    hsl_to_rgb,
    hsla,
    map_attributes,
    vertex_count,
)
from resonance.settings import ColorMode, RenderSettings
from resonance.signature import validate


def _signature(**overrides):
    payload = {
        "emotional_valence": 0.5,
        "cognitive_complexity": 0.6,
        "energy_level": 0.5,
        "glyph_parameters": {"shape_complexity": 0.5, "color_hue": 0.25, "animation_speed": 0.5, "resonance_frequency": 3},
    }
    glyph = overrides.pop("glyph", {})
    payload.update(overrides)
    payload["glyph_parameters"].update(glyph)
    return validate(payload)


def _random_signature(rng):
    return validate({
        "emotional_valence": rng.uniform(-1, 1),
        "cognitive_complexity": rng.random(),
        "energy_level": rng.random(),
        "glyph_parameters": {
            "shape_complexity": rng.random(),
            "color_hue": rng.random(),
            "animation_speed": rng.random(),
            "resonance_frequency": rng.uniform(1, 10),
        },
    })


class TestReferenceScenario:
    def test_reference_signature_at_time_zero(self, reference_signature):
        attrs = map_attributes(reference_signature, 0.0, RenderSettings(), 400, 400)
        assert attrs.vertex_count == 12
        assert len(attrs.vertices) == 13
        assert attrs.hue == pytest.approx(180.0)
        assert attrs.saturation == pytest.approx(80.0)
        assert attrs.lightness == pytest.approx(68.0)
        assert attrs.inner_pattern_count == 5
        assert attrs.particle_count > 0
        assert attrs.glow is True

    def test_radius_equals_base_radius_at_time_zero(self, reference_signature):
        attrs = map_attributes(reference_signature, 0.0, RenderSettings(), 400, 300)
        assert attrs.base_radius == pytest.approx(90.0)
        assert attrs.radius == pytest.approx(90.0)
        assert attrs.center == (200.0, 150.0)


@pytest.mark.parametrize("shape, expected", [(0.0, 3), (0.1, 4), (0.5, 9), (1.0, 15)])
def test_vertex_count(shape, expected):
    assert vertex_count(shape) == expected


def test_vertex_floor_in_attributes():
    attrs = map_attributes(_signature(glyph={"shape_complexity": 0.0}), 1.0, RenderSettings(), 200, 200)
    assert attrs.vertex_count == 3
    assert len(attrs.vertices) == 4


def test_contour_is_closed():
    attrs = map_attributes(_signature(), 2.5, RenderSettings(), 300, 300)
    first, last = attrs.vertices[0], attrs.vertices[-1]
    assert last[0] == pytest.approx(first[0], abs=1e-6)
    assert last[1] == pytest.approx(first[1], abs=1e-6)


def test_mapping_is_deterministic():
    rng = random.Random(1234)
    for _ in range(50):
        sig = _random_signature(rng)
        t = rng.uniform(0, 100)
        settings = RenderSettings(intensity=rng.uniform(0.1, 2.0), particle_count=rng.randint(0, 200))
        assert map_attributes(sig, t, settings, 640, 480, 2.0) == map_attributes(sig, t, settings, 640, 480, 2.0)


def test_resize_keeps_relative_geometry():
    sig = _signature(cognitive_complexity=0.8)
    small = map_attributes(sig, 3.7, RenderSettings(), 400, 400)
    large = map_attributes(sig, 3.7, RenderSettings(), 800, 800)
    assert large.vertex_count == small.vertex_count
    for (sx, sy), (lx, ly), sr, lr in zip(small.vertices, large.vertices, small.vertex_radii, large.vertex_radii):
        assert lr == pytest.approx(sr * 2.0)
        small_angle = math.atan2(sy - small.center[1], sx - small.center[0])
        large_angle = math.atan2(ly - large.center[1], lx - large.center[0])
        assert large_angle == pytest.approx(small_angle, abs=1e-9)


def test_intensity_scales_lobe_depth():
    sig = _signature(cognitive_complexity=0.8)
    normal = map_attributes(sig, 0.0, RenderSettings(intensity=1.0), 400, 400)
    strong = map_attributes(sig, 0.0, RenderSettings(intensity=2.0), 400, 400)
    for r1, r2 in zip(normal.vertex_radii, strong.vertex_radii):
        assert (r2 - strong.radius) == pytest.approx(2.0 * (r1 - normal.radius))


def test_animation_speed_setting_multiplies_glyph_speed():
    sig = _signature(glyph={"animation_speed": 0.4})
    attrs = map_attributes(sig, 0.0, RenderSettings(animation_speed=2.5), 100, 100)
    assert attrs.speed == pytest.approx(1.0)


def test_stroke_width_scales_with_energy_and_dpr():
    attrs = map_attributes(_signature(energy_level=0.5), 0.0, RenderSettings(), 100, 100, scale=2.0)
    assert attrs.stroke_width == pytest.approx(7.0)


class TestInnerPatterns:
    def test_threshold_is_strict(self):
        attrs = map_attributes(_signature(cognitive_complexity=0.5), 0.0, RenderSettings(), 100, 100)
        assert attrs.inner_pattern_count == 0

    def test_count_follows_complexity(self):
        attrs = map_attributes(_signature(cognitive_complexity=1.0), 0.0, RenderSettings(), 100, 100)
        assert attrs.inner_pattern_count == 6

    def test_can_be_disabled(self):
        settings = RenderSettings(show_inner_patterns=False)
        attrs = map_attributes(_signature(cognitive_complexity=1.0), 0.0, settings, 100, 100)
        assert attrs.inner_pattern_count == 0


class TestParticles:
    def test_low_energy_has_no_particles(self):
        attrs = map_attributes(_signature(energy_level=0.3), 0.0, RenderSettings(), 100, 100)
        assert attrs.particle_count == 0

    def test_count_scales_with_energy(self):
        attrs = map_attributes(_signature(energy_level=0.5), 0.0, RenderSettings(particle_count=20), 100, 100)
        assert attrs.particle_count == 10

    def test_zero_particle_setting(self):
        attrs = map_attributes(_signature(energy_level=1.0), 0.0, RenderSettings(particle_count=0), 100, 100)
        assert attrs.particle_count == 0


class TestColorModes:
    def test_emotional_saturation_uses_absolute_valence(self):
        attrs = map_attributes(_signature(emotional_valence=-0.5), 0.0, RenderSettings(), 100, 100)
        assert attrs.saturation == pytest.approx(50.0)

    def test_energy_mode(self):
        settings = RenderSettings(color_mode=ColorMode.ENERGY)
        attrs = map_attributes(_signature(energy_level=0.75), 0.0, settings, 100, 100)
        assert attrs.saturation == pytest.approx(75.0)

    def test_monochrome_mode(self):
        settings = RenderSettings(color_mode=ColorMode.MONOCHROME)
        attrs = map_attributes(_signature(), 0.0, settings, 100, 100)
        assert attrs.saturation == 0.0
        assert attrs.color.r == attrs.color.g == attrs.color.b

    def test_archetypal_mode_snaps_hue(self):
        settings = RenderSettings(color_mode=ColorMode.ARCHETYPAL)
        attrs = map_attributes(_signature(glyph={"color_hue": 0.5}), 0.0, settings, 100, 100)
        assert attrs.hue in ARCHETYPAL_HUES
        assert attrs.hue == 200.0

    def test_hue_wraps_around(self):
        attrs = map_attributes(_signature(glyph={"color_hue": 1.0}), 0.0, RenderSettings(), 100, 100)
        assert attrs.hue == pytest.approx(0.0)


def test_color_helpers():
    assert hsla(0.0, 100.0, 50.0) == Rgba(255, 0, 0, 1.0)
    assert hsla(120.0, 100.0, 50.0, 0.5) == Rgba(0, 255, 0, 0.5)
    assert hsl_to_rgb(0.0, 0.0, 1.0) == (255, 255, 255)
    assert Rgba.from_hex("#8b5cf6") == Rgba(139, 92, 246)
    assert Rgba(1, 2, 3).with_alpha(4.0).a == 1.0
