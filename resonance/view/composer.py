"""Frame composer: turns a render state into an ordered list of draw commands.

The composer decides *what* is drawn; :func:`resonance.view.view_widget.paint_frame`
decides *how* it is drawn with ``QPainter``.  Commands are plain frozen
dataclasses so a frame can be compared, recorded or replayed on any surface.

Layer order for an active glyph is strict: contour, inner pattern, particles,
then the optional glow overlay composited with the ``lighter`` blend.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from ..mapping import DrawAttributes, Rgba, TAU, hsla, map_attributes
from ..settings import RenderSettings
from ..signature import Signature
from .state import RenderMode, RenderState

__all__ = [
    "Clear",
    "Polygon",
    "Circle",
    "Line",
    "DrawCommand",
    "Frame",
    "compose_frame",
    "compose_idle",
    "compose_processing",
    "compose_active",
    "frame_layers",
]

BLEND_NORMAL = "source-over"
BLEND_LIGHTER = "lighter"

IDLE_COLOR = Rgba(100, 116, 139)
PROCESSING_COLOR = Rgba.from_hex("#8b5cf6")
PATTERN_COLOR = Rgba(255, 255, 255)
PROCESSING_MARKERS = 8


@dataclass(frozen=True)
class Clear:
    width: float
    height: float
    layer: str = "clear"


@dataclass(frozen=True)
class Polygon:
    points: Tuple[Tuple[float, float], ...]
    fill: Optional[Rgba] = None
    stroke: Optional[Rgba] = None
    width: float = 1.0
    layer: str = ""
    blend: str = BLEND_NORMAL


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    radius: float
    fill: Optional[Rgba] = None
    stroke: Optional[Rgba] = None
    width: float = 1.0
    layer: str = ""
    blend: str = BLEND_NORMAL


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: Rgba
    width: float = 1.0
    layer: str = ""
    blend: str = BLEND_NORMAL


DrawCommand = Union[Clear, Polygon, Circle, Line]
Frame = Tuple[DrawCommand, ...]


def frame_layers(frame: Sequence[DrawCommand]) -> List[str]:
    """Return the distinct layers of ``frame`` in paint order, ``clear`` excluded."""

    seen: List[str] = []
    for command in frame:
        if command.layer != "clear" and command.layer not in seen:
            seen.append(command.layer)
    return seen


def _base_radius(width: float, height: float) -> float:
    return max(0.0, min(width, height)) * 0.3


# ---------------------------------------------------------------------------
# Idle / processing


def compose_idle(t: float, width: float, height: float, scale: float = 1.0) -> List[DrawCommand]:
    """Low-opacity breathing circle: ready, no input yet."""

    radius = _base_radius(width, height) * (1.0 + math.sin(t * 0.5) * 0.05)
    alpha = 0.2 + math.sin(t * 0.8) * 0.1
    return [
        Circle(
            width / 2.0,
            height / 2.0,
            radius,
            fill=IDLE_COLOR.with_alpha(alpha),
            stroke=IDLE_COLOR.with_alpha(alpha * 2.5),
            width=2.0 * scale,
            layer="idle",
        )
    ]


def compose_processing(t: float, width: float, height: float, scale: float = 1.0) -> List[DrawCommand]:
    """Rotating ring of markers around a pulsing ring.  No signature involved."""

    cx = width / 2.0
    cy = height / 2.0
    radius = _base_radius(width, height)
    commands: List[DrawCommand] = []
    for i in range(PROCESSING_MARKERS):
        angle = (i / PROCESSING_MARKERS) * TAU + t * 3.0
        inner = radius * 0.5
        outer = radius * (0.8 + math.sin(t * 5.0 + i) * 0.2)
        commands.append(
            Line(
                cx + math.cos(angle) * inner,
                cy + math.sin(angle) * inner,
                cx + math.cos(angle) * outer,
                cy + math.sin(angle) * outer,
                stroke=PROCESSING_COLOR,
                width=3.0 * scale,
                layer="processing",
            )
        )
    pulse = math.sin(t * 4.0)
    commands.append(
        Circle(
            cx,
            cy,
            radius * 0.3 * (1.0 + pulse * 0.15),
            stroke=PROCESSING_COLOR.with_alpha(0.4 + pulse * 0.3),
            width=2.0 * scale,
            layer="processing",
        )
    )
    return commands


# ---------------------------------------------------------------------------
# Active glyph


def _contour(attrs: DrawAttributes) -> List[DrawCommand]:
    return [
        Polygon(
            attrs.vertices,
            fill=attrs.color.with_alpha(0.3),
            stroke=attrs.color,
            width=attrs.stroke_width,
            layer="contour",
        )
    ]


def _inner_pattern(attrs: DrawAttributes, complexity: float, t: float, scale: float) -> List[DrawCommand]:
    count = attrs.inner_pattern_count
    if count <= 0:
        return []
    cx, cy = attrs.center
    radius = attrs.radius * 0.6
    stroke = PATTERN_COLOR.with_alpha(complexity * 0.5)
    commands: List[DrawCommand] = []
    for i in range(count):
        angle = (i / count) * TAU + t * attrs.speed
        pattern_radius = radius * (0.3 + (i / count) * 0.4)
        commands.append(
            Circle(
                cx + math.cos(angle) * pattern_radius * 0.5,
                cy + math.sin(angle) * pattern_radius * 0.5,
                pattern_radius * 0.3,
                stroke=stroke,
                width=1.0 * scale,
                layer="inner",
            )
        )
    return commands


def _particles(attrs: DrawAttributes, energy: float, t: float, scale: float) -> List[DrawCommand]:
    count = attrs.particle_count
    if count <= 0:
        return []
    cx, cy = attrs.center
    speed = attrs.speed
    orbit = attrs.radius * 1.2
    saturation = 80.0 if attrs.saturation > 0 else 0.0
    commands: List[DrawCommand] = []
    for i in range(count):
        angle = (i / count) * TAU + t * speed * 2.0
        distance = orbit + math.sin(t * speed * 3.0 + i) * 20.0 * scale
        size = max(0.5, 1.0 + math.sin(t * speed * 4.0 + i) * 2.0) * scale
        alpha = energy * 0.8 * (0.75 + 0.25 * math.sin(t * speed * 5.0 + i))
        commands.append(
            Circle(
                cx + math.cos(angle) * distance,
                cy + math.sin(angle) * distance,
                size,
                fill=hsla(attrs.hue, saturation, 70.0, alpha),
                layer="particles",
            )
        )
    return commands


def _glow(attrs: DrawAttributes) -> List[DrawCommand]:
    if not attrs.glow:
        return []
    return [
        Polygon(
            attrs.vertices,
            stroke=attrs.color.with_alpha(0.25 * attrs.intensity),
            width=attrs.stroke_width * 4.0,
            layer="glow",
            blend=BLEND_LIGHTER,
        )
    ]


def compose_active(
    signature: Signature,
    attrs: DrawAttributes,
    t: float,
    scale: float = 1.0,
) -> List[DrawCommand]:
    commands: List[DrawCommand] = []
    commands.extend(_contour(attrs))
    commands.extend(_inner_pattern(attrs, signature.cognitive_complexity, t, scale))
    commands.extend(_particles(attrs, signature.energy_level, t, scale))
    commands.extend(_glow(attrs))
    return commands


def compose_frame(
    state: RenderState,
    t: float,
    width: float,
    height: float,
    settings: RenderSettings,
    scale: float = 1.0,
) -> Frame:
    """Compose one complete frame; the first command always clears the surface."""

    commands: List[DrawCommand] = [Clear(width, height)]
    if state.mode is RenderMode.PROCESSING:
        commands.extend(compose_processing(t, width, height, scale))
    elif state.mode is RenderMode.ACTIVE and state.signature is not None:
        attrs = map_attributes(state.signature, t, settings, width, height, scale)
        commands.extend(compose_active(state.signature, attrs, t, scale))
    else:
        commands.extend(compose_idle(t, width, height, scale))
    return tuple(commands)
