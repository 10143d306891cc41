"""Glyph engine and its hosts.

The Qt widgets live in :mod:`resonance.view.view_widget`; everything exported
here is free of Qt so it can run headless.
"""

from .composer import Circle, Clear, Frame, Line, Polygon, compose_frame, frame_layers
from .engine import GlyphEngine
from .runtime import EngineHandle, attach, detach
from .state import FRAME_STEP, RenderMode, RenderState, VirtualClock

__all__ = [
    "Circle",
    "Clear",
    "EngineHandle",
    "FRAME_STEP",
    "Frame",
    "GlyphEngine",
    "Line",
    "Polygon",
    "RenderMode",
    "RenderState",
    "VirtualClock",
    "attach",
    "compose_frame",
    "detach",
    "frame_layers",
]
