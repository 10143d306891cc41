"""Pure translation of a :class:`Signature` into drawable attributes.

Nothing in this module keeps state or touches Qt: the same
``(signature, t, settings, width, height, scale)`` always produces the same
:class:`DrawAttributes`, down to the last bit.  The frame composer only reads
these attributes and never recomputes geometry on its own.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from .settings import ColorMode, RenderSettings
from .signature import Signature

__all__ = [
    "Rgba",
    "DrawAttributes",
    "ARCHETYPAL_HUES",
    "hsl_to_rgb",
    "hsla",
    "vertex_count",
    "map_attributes",
]

Point = Tuple[float, float]

TAU = 2.0 * math.pi
BASE_RADIUS_RATIO = 0.3
PULSE_RATE = 5.0
PULSE_DEPTH = 0.3
LOBE_RATE = 3.0
LOBE_DEPTH = 0.4
MIN_VERTICES = 3
MAX_EXTRA_VERTICES = 12
INNER_PATTERN_THRESHOLD = 0.5
INNER_PATTERN_MAX = 6
PARTICLE_ENERGY_THRESHOLD = 0.3
ARCHETYPAL_SATURATION = 70.0

# Palette used by the "archetypal" color mode, in degrees.
ARCHETYPAL_HUES: Tuple[float, ...] = (0.0, 45.0, 120.0, 200.0, 270.0, 320.0)


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


# ---------------------------------------------------------------------------
# Colors


@dataclass(frozen=True)
class Rgba:
    """8-bit RGB color with a floating alpha in ``[0, 1]``."""

    r: int
    g: int
    b: int
    a: float = 1.0

    def with_alpha(self, alpha: float) -> "Rgba":
        return Rgba(self.r, self.g, self.b, clamp01(alpha))

    @classmethod
    def from_hex(cls, value: str, alpha: float = 1.0) -> "Rgba":
        value = value.strip().lstrip("#")
        if len(value) == 3:
            value = "".join(ch * 2 for ch in value)
        try:
            number = int(value, 16)
        except ValueError:
            return cls(0, 0, 0, clamp01(alpha))
        return cls((number >> 16) & 255, (number >> 8) & 255, number & 255, clamp01(alpha))


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[int, int, int]:
    """Convert normalised HSL (all in ``[0, 1]``) to 8-bit RGB."""

    def _hue(p: float, q: float, t: float) -> float:
        if t < 0:
            t += 1
        if t > 1:
            t -= 1
        if t < 1 / 6:
            return p + (q - p) * 6 * t
        if t < 1 / 2:
            return q
        if t < 2 / 3:
            return p + (q - p) * (2 / 3 - t) * 6
        return p

    if s == 0:
        v = int(round(l * 255))
        return v, v, v
    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q
    r = _hue(p, q, h + 1 / 3)
    g = _hue(p, q, h)
    b = _hue(p, q, h - 1 / 3)
    return int(round(r * 255)), int(round(g * 255)), int(round(b * 255))


def hsla(hue_deg: float, saturation: float, lightness: float, alpha: float = 1.0) -> Rgba:
    """CSS style ``hsla()``: hue in degrees, saturation/lightness in percent."""

    r, g, b = hsl_to_rgb(
        (hue_deg % 360.0) / 360.0,
        clamp(saturation, 0.0, 100.0) / 100.0,
        clamp(lightness, 0.0, 100.0) / 100.0,
    )
    return Rgba(r, g, b, clamp01(alpha))


def _nearest_hue(hue: float, palette: Sequence[float]) -> float:
    def _distance(candidate: float) -> float:
        delta = abs(hue - candidate) % 360.0
        return min(delta, 360.0 - delta)

    return min(palette, key=_distance)


def _color_formula(signature: Signature, mode: ColorMode) -> Tuple[float, float, float]:
    hue = (signature.glyph.color_hue * 360.0) % 360.0
    lightness = clamp(50.0 + signature.energy_level * 30.0, 0.0, 100.0)
    if mode is ColorMode.ENERGY:
        saturation = signature.energy_level * 100.0
    elif mode is ColorMode.ARCHETYPAL:
        hue = _nearest_hue(hue, ARCHETYPAL_HUES)
        saturation = ARCHETYPAL_SATURATION
    elif mode is ColorMode.MONOCHROME:
        saturation = 0.0
    else:
        saturation = abs(signature.emotional_valence) * 100.0
    return hue, saturation, lightness


# ---------------------------------------------------------------------------
# Geometry


@dataclass(frozen=True)
class DrawAttributes:
    """Everything the composer needs to draw an active glyph for one frame.

    Coordinates and lengths are expressed in device pixels.
    """

    hue: float
    saturation: float
    lightness: float
    color: Rgba
    stroke_width: float
    vertex_count: int
    base_radius: float
    radius: float
    center: Point
    speed: float
    intensity: float
    vertex_radii: Tuple[float, ...]
    vertices: Tuple[Point, ...]
    inner_pattern_count: int
    particle_count: int
    glow: bool


def vertex_count(shape_complexity: float) -> int:
    """Number of contour vertices; a glyph never has fewer than three."""

    count = int(math.floor(MIN_VERTICES + clamp01(shape_complexity) * MAX_EXTRA_VERTICES))
    return max(MIN_VERTICES, count)


def map_attributes(
    signature: Signature,
    t: float,
    settings: RenderSettings,
    width: float,
    height: float,
    scale: float = 1.0,
) -> DrawAttributes:
    """Compute the drawable attributes of ``signature`` at virtual time ``t``.

    ``width`` and ``height`` are the surface dimensions in device pixels and
    ``scale`` the device pixel ratio applied to them, used for stroke widths
    and fixed pixel offsets.
    """

    intensity = settings.intensity
    speed = signature.glyph.animation_speed * settings.animation_speed
    energy = signature.energy_level
    complexity = signature.cognitive_complexity

    hue, saturation, lightness = _color_formula(signature, settings.color_mode)

    cx = width / 2.0
    cy = height / 2.0
    base_radius = max(0.0, min(width, height)) * BASE_RADIUS_RATIO
    radius = base_radius * (1.0 + math.sin(t * speed * PULSE_RATE) * energy * PULSE_DEPTH * intensity)

    count = vertex_count(signature.glyph.shape_complexity)
    frequency = signature.glyph.resonance_frequency
    radii = []
    vertices = []
    for i in range(count + 1):
        angle = (i / count) * TAU
        variation = 1.0 + math.sin(angle * frequency + t * speed * LOBE_RATE) * complexity * LOBE_DEPTH * intensity
        r = radius * variation
        radii.append(r)
        vertices.append((cx + math.cos(angle) * r, cy + math.sin(angle) * r))

    inner = 0
    if complexity > INNER_PATTERN_THRESHOLD and settings.show_inner_patterns:
        inner = int(math.floor(complexity * INNER_PATTERN_MAX))

    particles = 0
    if energy > PARTICLE_ENERGY_THRESHOLD and settings.particle_count > 0:
        particles = int(math.floor(settings.particle_count * energy))

    return DrawAttributes(
        hue=hue,
        saturation=saturation,
        lightness=lightness,
        color=hsla(hue, saturation, lightness),
        stroke_width=(2.0 + energy * 3.0) * scale,
        vertex_count=count,
        base_radius=base_radius,
        radius=radius,
        center=(cx, cy),
        speed=speed,
        intensity=intensity,
        vertex_radii=tuple(radii),
        vertices=tuple(vertices),
        inner_pattern_count=inner,
        particle_count=particles,
        glow=settings.glow_enabled,
    )
