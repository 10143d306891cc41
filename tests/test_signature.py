"""Tests for signature validation and the analysis envelope."""

import json
import logging

import pytest

from resonance.errors import GlyphError, InvalidSignature
from resonance.signature import (
    GlyphParameters,
    Signature,
    describe_complexity,
    describe_energy,
    describe_valence,
    load_analysis,
    parse_analysis,
    validate,
)


class TestValidate:
    def test_valence_is_clamped_to_its_domain(self):
        assert validate({"emotional_valence": 1.7}).emotional_valence == 1.0
        assert validate({"emotional_valence": -2}).emotional_valence == -1.0

    def test_unit_fields_are_clamped(self):
        sig = validate({
            "cognitive_complexity": 3.0,
            "energy_level": -0.5,
            "glyph_parameters": {"shape_complexity": 1.2, "color_hue": -1, "animation_speed": 9},
        })
        assert sig.cognitive_complexity == 1.0
        assert sig.energy_level == 0.0
        assert sig.glyph.shape_complexity == 1.0
        assert sig.glyph.color_hue == 0.0
        assert sig.glyph.animation_speed == 1.0

    def test_resonance_frequency_domain(self):
        assert validate({"glyph_parameters": {"resonance_frequency": 0}}).glyph.resonance_frequency == 1.0
        assert validate({"glyph_parameters": {"resonance_frequency": 25}}).glyph.resonance_frequency == 10.0
        assert validate({"glyph_parameters": {"resonance_frequency": 4}}).glyph.resonance_frequency == 4.0

    def test_empty_payload_gives_neutral_signature(self):
        assert validate({}) == Signature()
        assert validate(None) == Signature()
        assert validate("not a mapping") == Signature()

    def test_neutral_glyph_values(self):
        glyph = validate({}).glyph
        assert glyph == GlyphParameters(0.0, 0.0, 0.5, 1.0)

    @pytest.mark.parametrize("bad", ["abc", float("nan"), float("inf"), True, None, [1]])
    def test_malformed_field_falls_back_to_neutral(self, bad):
        sig = validate({"energy_level": bad, "glyph_parameters": {"animation_speed": bad}})
        assert sig.energy_level == 0.0
        assert sig.glyph.animation_speed == 0.5

    def test_numeric_strings_are_accepted(self):
        assert validate({"energy_level": "0.25"}).energy_level == 0.25

    def test_anomalies_are_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="resonance.signature"):
            validate({"emotional_valence": "oops"})
        assert "emotional_valence" in caplog.text

    def test_camel_case_payload(self):
        sig = validate({
            "emotionalValence": -0.4,
            "cognitiveComplexity": 0.3,
            "energyLevel": 0.7,
            "glyph": {"shapeComplexity": 0.5, "colorHue": 0.2, "animationSpeed": 0.9, "resonanceFrequency": 6},
        })
        assert sig.emotional_valence == -0.4
        assert sig.cognitive_complexity == 0.3
        assert sig.energy_level == 0.7
        assert sig.glyph == GlyphParameters(0.5, 0.2, 0.9, 6.0)

    def test_signature_instance_is_revalidated(self):
        raw = Signature(emotional_valence=5.0)
        assert validate(raw).emotional_valence == 1.0


def test_invalid_signature_error_carries_field():
    exc = InvalidSignature("energy_level", "x")
    assert exc.field == "energy_level"
    assert exc.value == "x"
    assert isinstance(exc, GlyphError)
    assert isinstance(exc, ValueError)


class TestAnalysisEnvelope:
    PAYLOAD = {
        "id": "a-42",
        "timestamp": "2024-05-01T12:00:00Z",
        "emotional_valence": 0.3,
        "cognitive_complexity": 0.6,
        "energy_level": 0.4,
        "glyph_parameters": {"shape_complexity": 0.2, "color_hue": 0.1, "animation_speed": 0.5, "resonance_frequency": 2},
        "archetypal_resonance": "The Sage",
        "symbolic_elements": ["spiral", None, "light"],
        "meaning_signature": "quiet insight",
        "processingTime": 123.5,
        "unexpected": {"ignored": True},
    }

    def test_parse_analysis(self):
        result = parse_analysis(self.PAYLOAD)
        assert result.id == "a-42"
        assert result.timestamp == "2024-05-01T12:00:00Z"
        assert result.archetypal_resonance == "The Sage"
        assert result.symbolic_elements == ("spiral", "light")
        assert result.meaning_signature == "quiet insight"
        assert result.processing_time == 123.5
        assert result.signature.cognitive_complexity == 0.6
        assert result.signature.glyph.resonance_frequency == 2.0

    def test_empty_symbolic_elements_are_ignored(self):
        result = parse_analysis({"id": "x", "symbolic_elements": []})
        assert result.symbolic_elements == ()
        assert result.timestamp is None
        assert result.signature == Signature()

    def test_load_analysis(self, tmp_path):
        path = tmp_path / "analysis.json"
        path.write_text(json.dumps(self.PAYLOAD), encoding="utf-8")
        result = load_analysis(path)
        assert result.id == "a-42"
        assert result.signature.energy_level == 0.4

    def test_load_analysis_propagates_json_errors(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            load_analysis(path)


@pytest.mark.parametrize(
    "valence, label",
    [(0.8, "Highly Positive"), (0.3, "Positive"), (0.0, "Neutral"), (-0.3, "Negative"), (-0.9, "Highly Negative")],
)
def test_describe_valence(valence, label):
    assert describe_valence(valence) == label


def test_describe_complexity_and_energy():
    assert describe_complexity(0.9) == "Highly Complex"
    assert describe_complexity(0.5) == "Moderate"
    assert describe_complexity(0.1) == "Simple"
    assert describe_energy(0.8) == "High Energy"
    assert describe_energy(0.5) == "Moderate"
    assert describe_energy(0.2) == "Low Energy"
