"""Glyph engine: render state machine and virtual clock.

:class:`GlyphEngine` is the Qt-free heart of the view.  Hosts push the latest
signature, the processing flag and the settings into it whenever they change,
then call :meth:`GlyphEngine.step` once per displayed frame to obtain the
commands to paint.

State machine::

    Idle ──processing──▶ Processing ──result──▶ Active(sig)
                              ▲                     │
                              └─────processing──────┘

``Idle`` is only the initial state.  Once a signature has been seen, leaving
``Processing`` goes back to ``Active`` with the previous signature; a ``None``
update (producer unavailable) never blanks the glyph.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Union

from ..settings import RenderSettings
from ..signature import Signature, validate
from .composer import Frame, compose_frame
from .state import FRAME_STEP, RenderMode, RenderState, VirtualClock

log = logging.getLogger(__name__)

__all__ = ["GlyphEngine"]

SignatureInput = Union[Signature, Mapping[str, object], None]
SettingsInput = Union[RenderSettings, Mapping[str, object], None]


class GlyphEngine:
    """Owns the render state, the settings and the virtual clock."""

    def __init__(self, settings: Optional[RenderSettings] = None, *, clock_step: float = FRAME_STEP) -> None:
        self.settings = settings or RenderSettings()
        self.clock = VirtualClock(clock_step)
        self._signature: Optional[Signature] = None
        self._processing = False
        self.frame_count = 0

    # ------------------------------------------------------------------ inputs
    @property
    def signature(self) -> Optional[Signature]:
        return self._signature

    @property
    def processing(self) -> bool:
        return self._processing

    @property
    def state(self) -> RenderState:
        if self._processing:
            return RenderState.processing()
        if self._signature is not None:
            return RenderState.active(self._signature)
        return RenderState.idle()

    @property
    def t(self) -> float:
        return self.clock.t

    def update_signature(self, signature: SignatureInput) -> None:
        """Replace the current signature.  ``None`` keeps the last one."""

        if signature is None:
            if self._signature is not None:
                log.debug("Empty signature update ignored, keeping the last result")
            return
        self._signature = validate(signature)

    def set_processing(self, processing: bool) -> None:
        processing = bool(processing)
        if processing != self._processing:
            log.debug("Processing %s", "started" if processing else "finished")
        self._processing = processing

    def update_settings(self, settings: SettingsInput) -> None:
        if isinstance(settings, RenderSettings):
            self.settings = settings
        elif isinstance(settings, Mapping):
            self.settings = RenderSettings.from_mapping(settings, base=self.settings)

    def set_params(self, payload: Mapping[str, object]) -> None:
        """Apply a control window payload (``settings``/``system``/``signature``)."""

        if not isinstance(payload, Mapping):
            return
        if "settings" in payload or "system" in payload:
            self.update_settings(payload)
        if "signature" in payload:
            self.update_signature(payload["signature"])  # type: ignore[arg-type]
        if "processing" in payload:
            self.set_processing(bool(payload["processing"]))

    # ------------------------------------------------------------------ frames
    def reset_clock(self) -> None:
        self.clock.reset()
        self.frame_count = 0

    def render(self, width: float, height: float, scale: float = 1.0) -> Frame:
        """Compose the frame for the current time without advancing it."""

        return compose_frame(self.state, self.clock.t, width, height, self.settings, scale)

    def step(self, width: float, height: float, scale: float = 1.0, dt: Optional[float] = None) -> Frame:
        """Advance the clock by one frame and compose the new frame."""

        self.clock.advance(dt)
        self.frame_count += 1
        return self.render(width, height, scale)

    @property
    def mode(self) -> RenderMode:
        return self.state.mode
