"""Parametric glyph rendering for cognitive-emotional signatures."""

from .errors import GlyphError, InvalidSignature, ResizeObservationFailure, SurfaceUnavailable
from .mapping import DrawAttributes, map_attributes
from .settings import ColorMode, RenderSettings
from .signature import AnalysisResult, GlyphParameters, Signature, load_analysis, parse_analysis, validate

__version__ = "0.1.0"

__all__ = [
    "AnalysisResult",
    "ColorMode",
    "DrawAttributes",
    "GlyphError",
    "GlyphParameters",
    "InvalidSignature",
    "RenderSettings",
    "ResizeObservationFailure",
    "Signature",
    "SurfaceUnavailable",
    "load_analysis",
    "map_attributes",
    "parse_analysis",
    "validate",
]
