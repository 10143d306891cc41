"""Error taxonomy shared by the glyph engine and its hosts.

Only :class:`SurfaceUnavailable` ever reaches callers.  The two other errors
are raised internally by validators and surfaces, then absorbed by the engine
(clamping or falling back to the last known dimensions).
"""

from __future__ import annotations


class GlyphError(RuntimeError):
    """Base class for every error raised by the glyph engine."""


class SurfaceUnavailable(GlyphError):
    """The drawable surface could not be acquired when attaching."""


class InvalidSignature(GlyphError, ValueError):
    """A signature field could not be read as a finite number."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"invalid value for {field!r}: {value!r}")
        self.field = field
        self.value = value


class ResizeObservationFailure(GlyphError):
    """The surface size or pixel ratio could not be read."""
