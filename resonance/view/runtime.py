"""Animation loop and lifecycle of a glyph bound to a drawable surface.

``attach`` acquires a surface, registers one resize listener and schedules the
first frame; every frame callback advances the virtual clock, paints once and
schedules the next one.  ``detach`` cancels the pending callback and removes
the listener synchronously, leaving nothing behind.

Surfaces and schedulers are duck-typed so that the loop can run on a Qt widget,
an offscreen image or a recording surface in tests.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Mapping, Optional, Protocol, Tuple, Union

from ..errors import ResizeObservationFailure, SurfaceUnavailable
from ..settings import RenderSettings
from ..signature import Signature
from .composer import Frame
from .engine import GlyphEngine
from .state import RenderState

log = logging.getLogger(__name__)

__all__ = ["DrawableSurface", "FrameScheduler", "EngineHandle", "attach", "detach"]

FrameCallback = Callable[[], None]


class DrawableSurface(Protocol):
    def open_surface(self) -> None:
        """Acquire the surface; raise :class:`SurfaceUnavailable` on failure."""

    def logical_size(self) -> Tuple[float, float]:
        ...

    def device_pixel_ratio(self) -> float:
        ...

    def present(self, frame: Frame) -> None:
        ...

    def add_resize_listener(self, callback: FrameCallback) -> None:
        ...

    def remove_resize_listener(self, callback: FrameCallback) -> None:
        ...


class FrameScheduler(Protocol):
    def request_frame(self, callback: FrameCallback) -> object:
        ...

    def cancel_frame(self, token: object) -> None:
        ...


class EngineHandle:
    """Single owner of one attached glyph: engine, surface, timer and sizing.

    Dimensions are kept twice: ``logical_width``/``logical_height`` as reported
    by the surface and ``width``/``height`` in device pixels, i.e. scaled by
    ``dpr`` (the surface pixel ratio capped by ``settings.dpr_clamp``).
    """

    def __init__(self, engine: GlyphEngine, surface: DrawableSurface, scheduler: FrameScheduler) -> None:
        self.engine = engine
        self.surface = surface
        self.scheduler = scheduler
        self.logical_width = 0.0
        self.logical_height = 0.0
        self.dpr = 1.0
        self.width = 0.0
        self.height = 0.0
        self.pending: Optional[object] = None
        self.attached = False
        self.frames_presented = 0
        self._resize_listener: Optional[FrameCallback] = None

    # ------------------------------------------------------------------ API
    @property
    def state(self) -> RenderState:
        return self.engine.state

    @property
    def t(self) -> float:
        return self.engine.t

    @property
    def settings(self) -> RenderSettings:
        return self.engine.settings

    def update_signature(self, signature: Union[Signature, Mapping[str, object], None]) -> None:
        self.engine.update_signature(signature)

    def set_processing(self, processing: bool) -> None:
        self.engine.set_processing(processing)

    def update_settings(self, settings: Union[RenderSettings, Mapping[str, object], None]) -> None:
        previous = self.engine.settings
        self.engine.update_settings(settings)
        current = self.engine.settings
        if current.dpr_clamp != previous.dpr_clamp and self.attached:
            self.observe_size()
        if current.frame_interval_ms != previous.frame_interval_ms:
            set_interval = getattr(self.scheduler, "set_interval", None)
            if callable(set_interval):
                set_interval(current.frame_interval_ms)

    def detach(self) -> None:
        detach(self)

    # ------------------------------------------------------------------ sizing
    def observe_size(self) -> bool:
        """Re-read the surface size; keep the last dimensions on failure."""

        try:
            logical_w, logical_h = self.surface.logical_size()
            ratio = float(self.surface.device_pixel_ratio())
            logical_w = float(logical_w)
            logical_h = float(logical_h)
            if not all(math.isfinite(v) for v in (logical_w, logical_h, ratio)):
                raise ResizeObservationFailure(f"non finite size {logical_w}x{logical_h}@{ratio}")
            if logical_w <= 0 or logical_h <= 0 or ratio <= 0:
                raise ResizeObservationFailure(f"empty size {logical_w}x{logical_h}@{ratio}")
        except ResizeObservationFailure as exc:
            log.warning(
                "Resize observation failed (%s), keeping %.0fx%.0f",
                exc,
                self.width,
                self.height,
            )
            return False
        dpr = min(ratio, self.engine.settings.dpr_clamp)
        self.logical_width = logical_w
        self.logical_height = logical_h
        self.dpr = dpr
        self.width = logical_w * dpr
        self.height = logical_h * dpr
        return True

    # ------------------------------------------------------------------ loop
    def _present(self, frame: Frame) -> bool:
        try:
            self.surface.present(frame)
        except SurfaceUnavailable as exc:
            log.error("Surface lost while painting, stopping the animation: %s", exc)
            detach(self)
            return False
        self.frames_presented += 1
        return True

    def _schedule(self) -> None:
        self.pending = self.scheduler.request_frame(self._on_frame)

    def _on_frame(self) -> None:
        self.pending = None
        if not self.attached:
            return
        frame = self.engine.step(self.width, self.height, self.dpr)
        if self._present(frame):
            self._schedule()

    def _on_resize(self) -> None:
        if not self.attached:
            return
        previous = (self.width, self.height)
        if self.observe_size() and (self.width, self.height) != previous:
            log.debug("Surface resized to %.0fx%.0f (dpr %.2f)", self.width, self.height, self.dpr)
            # Repaint at the same virtual time so the resize never jumps.
            self._present(self.engine.render(self.width, self.height, self.dpr))


def attach(
    surface: Optional[DrawableSurface],
    scheduler: FrameScheduler,
    settings: Optional[RenderSettings] = None,
    *,
    engine: Optional[GlyphEngine] = None,
) -> EngineHandle:
    """Bind a glyph engine to ``surface`` and start its animation loop.

    Passing an existing ``engine`` keeps its signature and settings but
    restarts its virtual clock.  Raises :class:`SurfaceUnavailable` when the
    surface cannot be acquired; in that case nothing is scheduled.
    """

    if surface is None:
        raise SurfaceUnavailable("no drawable surface")
    try:
        surface.open_surface()
    except SurfaceUnavailable:
        raise
    except RuntimeError as exc:
        raise SurfaceUnavailable(str(exc)) from exc

    if engine is None:
        engine = GlyphEngine(settings)
    else:
        if settings is not None:
            engine.update_settings(settings)
        engine.reset_clock()

    handle = EngineHandle(engine, surface, scheduler)
    if not handle.observe_size():
        raise SurfaceUnavailable("surface has no usable size")

    handle.attached = True
    handle._resize_listener = handle._on_resize
    surface.add_resize_listener(handle._resize_listener)
    set_interval = getattr(scheduler, "set_interval", None)
    if callable(set_interval):
        set_interval(engine.settings.frame_interval_ms)
    handle._schedule()
    log.info("Glyph attached to %.0fx%.0f surface (dpr %.2f)", handle.width, handle.height, handle.dpr)
    return handle


def detach(handle: EngineHandle) -> None:
    """Stop the loop of ``handle``; safe to call more than once."""

    if not handle.attached:
        return
    handle.attached = False
    if handle.pending is not None:
        handle.scheduler.cancel_frame(handle.pending)
        handle.pending = None
    if handle._resize_listener is not None:
        handle.surface.remove_resize_listener(handle._resize_listener)
        handle._resize_listener = None
    log.info("Glyph detached after %d frames", handle.frames_presented)
