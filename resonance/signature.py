"""Signature model consumed by the glyph renderer.

The analysis service returns a JSON object describing the emotional and
cognitive profile of an input.  Only seven numeric values matter for drawing;
they are gathered in :class:`Signature` and always clamped to their domain
before the renderer sees them.  Nothing in here raises on bad payloads: a
malformed field is logged and replaced by a neutral value so that the
animation loop is never blocked by the upstream service.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple, Union

from .errors import InvalidSignature

log = logging.getLogger(__name__)

__all__ = [
    "GlyphParameters",
    "Signature",
    "AnalysisResult",
    "validate",
    "parse_analysis",
    "load_analysis",
    "describe_valence",
    "describe_complexity",
    "describe_energy",
]


# (min, max, neutral) for every field, keyed by the canonical snake_case name.
DOMAINS: Dict[str, Tuple[float, float, float]] = {
    "emotional_valence": (-1.0, 1.0, 0.0),
    "cognitive_complexity": (0.0, 1.0, 0.0),
    "energy_level": (0.0, 1.0, 0.0),
    "shape_complexity": (0.0, 1.0, 0.0),
    "color_hue": (0.0, 1.0, 0.0),
    "animation_speed": (0.0, 1.0, 0.5),
    "resonance_frequency": (1.0, 10.0, 1.0),
}

_CAMEL_ALIASES = {
    "emotional_valence": "emotionalValence",
    "cognitive_complexity": "cognitiveComplexity",
    "energy_level": "energyLevel",
    "shape_complexity": "shapeComplexity",
    "color_hue": "colorHue",
    "animation_speed": "animationSpeed",
    "resonance_frequency": "resonanceFrequency",
}


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


@dataclass(frozen=True)
class GlyphParameters:
    """Shape and motion parameters of the glyph, all normalised."""

    shape_complexity: float = 0.0
    color_hue: float = 0.0
    animation_speed: float = 0.5
    resonance_frequency: float = 1.0


@dataclass(frozen=True)
class Signature:
    """Immutable cognitive-emotional vector driving the glyph.

    Instances are replaced wholesale when a new analysis arrives.  Build them
    through :func:`validate` so that every field is guaranteed to sit inside
    its domain.
    """

    emotional_valence: float = 0.0
    cognitive_complexity: float = 0.0
    energy_level: float = 0.0
    glyph: GlyphParameters = field(default_factory=GlyphParameters)

    def as_dict(self) -> dict:
        return {
            "emotional_valence": self.emotional_valence,
            "cognitive_complexity": self.cognitive_complexity,
            "energy_level": self.energy_level,
            "glyph_parameters": {
                "shape_complexity": self.glyph.shape_complexity,
                "color_hue": self.glyph.color_hue,
                "animation_speed": self.glyph.animation_speed,
                "resonance_frequency": self.glyph.resonance_frequency,
            },
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Envelope returned by the analysis service."""

    id: str
    timestamp: Optional[str]
    signature: Signature
    archetypal_resonance: str = ""
    symbolic_elements: Tuple[str, ...] = ()
    meaning_signature: str = ""
    processing_time: float = 0.0


# ---------------------------------------------------------------------------
# Validation


def _coerce_field(name: str, value: object) -> float:
    """Return ``value`` as a finite float or raise :class:`InvalidSignature`."""

    if isinstance(value, bool) or value is None:
        raise InvalidSignature(name, value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value))
        except (TypeError, ValueError):
            raise InvalidSignature(name, value) from None
    if not math.isfinite(number):
        raise InvalidSignature(name, value)
    return number


def _lookup(source: Mapping[str, object], name: str) -> object:
    if name in source:
        return source[name]
    return source.get(_CAMEL_ALIASES[name])


def _bounded(source: Mapping[str, object], name: str) -> float:
    minimum, maximum, neutral = DOMAINS[name]
    raw = _lookup(source, name)
    try:
        number = _coerce_field(name, raw)
    except InvalidSignature as exc:
        log.warning("Signature anomaly, using %s=%s: %s", name, neutral, exc)
        return neutral
    clamped = clamp(number, minimum, maximum)
    if clamped != number:
        log.debug("Clamped %s from %s to %s", name, number, clamped)
    return clamped


def _glyph_section(raw: Mapping[str, object]) -> Mapping[str, object]:
    for key in ("glyph_parameters", "glyph", "glyphParameters"):
        section = raw.get(key)
        if isinstance(section, Mapping):
            return section
    return {}


def validate(raw: Union[Signature, Mapping[str, object], None]) -> Signature:
    """Clamp every field of ``raw`` into its declared domain.

    ``raw`` may be a :class:`Signature` or a mapping using either the
    producer's snake_case keys (``glyph_parameters.color_hue``) or the
    camelCase spelling (``glyph.colorHue``).  Missing and malformed fields
    fall back to neutral values; this function never raises.
    """

    if isinstance(raw, Signature):
        raw = raw.as_dict()
    if not isinstance(raw, Mapping):
        log.warning("Signature payload is not an object (%s), using neutral values", type(raw).__name__)
        raw = {}
    glyph = _glyph_section(raw)
    return Signature(
        emotional_valence=_bounded(raw, "emotional_valence"),
        cognitive_complexity=_bounded(raw, "cognitive_complexity"),
        energy_level=_bounded(raw, "energy_level"),
        glyph=GlyphParameters(
            shape_complexity=_bounded(glyph, "shape_complexity"),
            color_hue=_bounded(glyph, "color_hue"),
            animation_speed=_bounded(glyph, "animation_speed"),
            resonance_frequency=_bounded(glyph, "resonance_frequency"),
        ),
    )


# ---------------------------------------------------------------------------
# Producer envelope


def _as_text(value: object) -> str:
    return "" if value is None else str(value)


def parse_analysis(payload: Mapping[str, object]) -> AnalysisResult:
    """Convert a JSON object returned by the analysis service."""

    if not isinstance(payload, Mapping):
        payload = {}
    elements = payload.get("symbolic_elements")
    symbolic: List[str] = []
    if isinstance(elements, (list, tuple)):
        symbolic = [str(item) for item in elements if item is not None]
    try:
        processing_time = float(payload.get("processingTime", payload.get("processing_time", 0.0)) or 0.0)
    except (TypeError, ValueError):
        processing_time = 0.0
    timestamp = payload.get("timestamp")
    return AnalysisResult(
        id=_as_text(payload.get("id")),
        timestamp=None if timestamp is None else str(timestamp),
        signature=validate(payload),
        archetypal_resonance=_as_text(payload.get("archetypal_resonance")),
        symbolic_elements=tuple(symbolic),
        meaning_signature=_as_text(payload.get("meaning_signature")),
        processing_time=processing_time,
    )


def load_analysis(path: Union[str, Path]) -> AnalysisResult:
    """Read a producer JSON file.  I/O and JSON errors propagate."""

    with Path(path).open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return parse_analysis(payload)


# ---------------------------------------------------------------------------
# Human readable labels


def describe_valence(valence: float) -> str:
    if valence > 0.5:
        return "Highly Positive"
    if valence > 0.2:
        return "Positive"
    if valence > -0.2:
        return "Neutral"
    if valence > -0.5:
        return "Negative"
    return "Highly Negative"


def describe_complexity(complexity: float) -> str:
    if complexity > 0.7:
        return "Highly Complex"
    if complexity > 0.4:
        return "Moderate"
    return "Simple"


def describe_energy(energy: float) -> str:
    if energy > 0.7:
        return "High Energy"
    if energy > 0.4:
        return "Moderate"
    return "Low Energy"
