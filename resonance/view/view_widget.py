"""Qt hosts for the glyph engine.

The engine (:mod:`resonance.view.engine`) only produces draw commands.  This
module provides everything Qt specific around it:

* :func:`paint_frame` replays a command list on a ``QPainter``;
* :class:`QtFrameScheduler` drives the animation loop with a single-shot
  ``QTimer`` re-armed every frame;
* :func:`GlyphViewWidget` is a factory returning an OpenGL or raster widget
  that acts as the drawable surface and attaches itself when shown;
* :class:`ImageSurface` renders into an offscreen ``QImage`` (snapshots and
  headless runs).

Commands are expressed in device pixels; the painter is scaled back by the
device pixel ratio so that Qt's high-dpi backing store receives crisp output.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from PyQt5 import QtCore, QtGui, QtWidgets, sip

from ..errors import ResizeObservationFailure, SurfaceUnavailable
from ..mapping import Rgba
from ..settings import RenderSettings
from .composer import Circle, Clear, DrawCommand, Frame, Line, Polygon
from .engine import GlyphEngine
from .runtime import EngineHandle, attach, detach

log = logging.getLogger(__name__)

__all__ = ["GlyphViewWidget", "ImageSurface", "QtFrameScheduler", "paint_frame"]

DEFAULT_BACKGROUND = QtGui.QColor("#0f172a")

ResizeListener = Callable[[], None]


def _map_blend_mode(name: Optional[str]) -> QtGui.QPainter.CompositionMode:
    mode = (name or "").lower()
    mapping = {
        "source": QtGui.QPainter.CompositionMode_Source,
        "normal": QtGui.QPainter.CompositionMode_SourceOver,
        "source-over": QtGui.QPainter.CompositionMode_SourceOver,
        "screen": QtGui.QPainter.CompositionMode_Screen,
        "lighten": QtGui.QPainter.CompositionMode_Lighten,
        "lighter": QtGui.QPainter.CompositionMode_Plus,
        "add": QtGui.QPainter.CompositionMode_Plus,
    }
    return mapping.get(mode, QtGui.QPainter.CompositionMode_SourceOver)


def _qcolor(color: Rgba) -> QtGui.QColor:
    qcolor = QtGui.QColor(color.r, color.g, color.b)
    qcolor.setAlphaF(max(0.0, min(1.0, color.a)))
    return qcolor


def _apply_style(painter: QtGui.QPainter, fill: Optional[Rgba], stroke: Optional[Rgba], width: float) -> None:
    if stroke is not None and width > 0:
        pen = QtGui.QPen(_qcolor(stroke), width)
        pen.setJoinStyle(QtCore.Qt.RoundJoin)
        pen.setCapStyle(QtCore.Qt.RoundCap)
        painter.setPen(pen)
    else:
        painter.setPen(QtCore.Qt.NoPen)
    painter.setBrush(_qcolor(fill) if fill is not None else QtCore.Qt.NoBrush)


def paint_frame(
    painter: QtGui.QPainter,
    frame: Sequence[DrawCommand],
    dpr: float = 1.0,
    background: Optional[QtGui.QColor] = None,
) -> None:
    """Replay ``frame`` on ``painter``.

    ``background`` is used for :class:`Clear` commands; ``None`` clears to full
    transparency.
    """

    painter.save()
    try:
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        if dpr > 0 and dpr != 1.0:
            painter.scale(1.0 / dpr, 1.0 / dpr)
        for command in frame:
            if isinstance(command, Clear):
                rect = QtCore.QRectF(0.0, 0.0, command.width, command.height)
                painter.setCompositionMode(QtGui.QPainter.CompositionMode_Source)
                painter.fillRect(rect, background if background is not None else QtCore.Qt.transparent)
                continue
            painter.setCompositionMode(_map_blend_mode(command.blend))
            if isinstance(command, Polygon):
                _apply_style(painter, command.fill, command.stroke, command.width)
                polygon = QtGui.QPolygonF([QtCore.QPointF(x, y) for x, y in command.points])
                painter.drawPolygon(polygon)
            elif isinstance(command, Circle):
                _apply_style(painter, command.fill, command.stroke, command.width)
                r = command.radius
                painter.drawEllipse(QtCore.QRectF(command.cx - r, command.cy - r, r * 2.0, r * 2.0))
            elif isinstance(command, Line):
                _apply_style(painter, None, command.stroke, command.width)
                painter.drawLine(QtCore.QLineF(command.x1, command.y1, command.x2, command.y2))
    finally:
        painter.restore()


# ---------------------------------------------------------------------------
# Scheduling


class QtFrameScheduler(QtCore.QObject):
    """One pending frame callback at a time, fired by a single-shot timer.

    An interval of ``0`` pauses the loop: the callback stays pending until a
    positive interval is set again.
    """

    def __init__(self, parent: Optional[QtCore.QObject] = None, interval_ms: int = 16) -> None:
        super().__init__(parent)
        self._timer = QtCore.QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setTimerType(QtCore.Qt.PreciseTimer)
        self._timer.timeout.connect(self._fire)
        self._interval_ms = max(int(interval_ms), 0)
        self._callback: Optional[Callable[[], None]] = None
        self._token = 0

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def is_pending(self) -> bool:
        return self._callback is not None

    def set_interval(self, interval_ms: int) -> None:
        interval_ms = max(int(interval_ms), 0)
        if interval_ms == self._interval_ms:
            return
        self._interval_ms = interval_ms
        if interval_ms <= 0:
            self._timer.stop()
        elif self._callback is not None:
            self._timer.start(interval_ms)

    def request_frame(self, callback: Callable[[], None]) -> int:
        self._token += 1
        self._callback = callback
        if self._interval_ms > 0:
            self._timer.start(self._interval_ms)
        return self._token

    def cancel_frame(self, token: object) -> None:
        if token != self._token:
            return
        self._timer.stop()
        self._callback = None

    def _fire(self) -> None:
        callback, self._callback = self._callback, None
        if callback is not None:
            callback()


# ---------------------------------------------------------------------------
# Surfaces


class _ResizeListeners:
    """Listener registry refusing double registration."""

    def __init__(self) -> None:
        self._listeners: List[ResizeListener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def add(self, callback: ResizeListener) -> None:
        if callback in self._listeners:
            raise ValueError("resize listener already registered")
        self._listeners.append(callback)

    def remove(self, callback: ResizeListener) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            log.debug("Resize listener was not registered")

    def notify(self) -> None:
        for callback in list(self._listeners):
            callback()


class ImageSurface:
    """Offscreen surface painting into a ``QImage``.

    Only ``QtGui`` is involved, so it works without any window (a
    ``QGuiApplication`` with the ``offscreen`` platform is enough).
    """

    def __init__(self, width: int, height: int, dpr: float = 1.0, background: Optional[QtGui.QColor] = None) -> None:
        self._dpr = float(dpr)
        self.background = QtGui.QColor(background) if background is not None else QtGui.QColor(DEFAULT_BACKGROUND)
        self._listeners = _ResizeListeners()
        self.image = self._make_image(width, height)
        self.frames_painted = 0
        self.last_frame: Frame = ()

    def _make_image(self, width: int, height: int) -> QtGui.QImage:
        w = max(0, int(round(width * self._dpr)))
        h = max(0, int(round(height * self._dpr)))
        image = QtGui.QImage(w, h, QtGui.QImage.Format_ARGB32_Premultiplied)
        if not image.isNull():
            image.fill(QtCore.Qt.transparent)
        return image

    @property
    def resize_listener_count(self) -> int:
        return len(self._listeners)

    # -- DrawableSurface
    def open_surface(self) -> None:
        if self.image.isNull():
            raise SurfaceUnavailable("offscreen image could not be allocated")

    def logical_size(self) -> Tuple[float, float]:
        if self.image.isNull():
            raise ResizeObservationFailure("offscreen image is null")
        return self.image.width() / self._dpr, self.image.height() / self._dpr

    def device_pixel_ratio(self) -> float:
        return self._dpr

    def present(self, frame: Frame) -> None:
        if self.image.isNull():
            raise SurfaceUnavailable("offscreen image is null")
        painter = QtGui.QPainter(self.image)
        try:
            # The image is already in device pixels.
            paint_frame(painter, frame, 1.0, self.background)
        finally:
            painter.end()
        self.frames_painted += 1
        self.last_frame = frame

    def add_resize_listener(self, callback: ResizeListener) -> None:
        self._listeners.add(callback)

    def remove_resize_listener(self, callback: ResizeListener) -> None:
        self._listeners.remove(callback)

    # -- helpers
    def resize(self, width: int, height: int) -> None:
        self.image = self._make_image(width, height)
        self._listeners.notify()

    def save(self, path: str) -> bool:
        return self.image.save(str(path))


class _ViewWidgetBase:
    """Common behaviour shared by both the OpenGL and raster backends.

    The widget is its own drawable surface: it attaches the engine when shown
    and detaches it when hidden, so a hidden view owns no running timer.
    """

    def _init_view_widget(self) -> None:
        self.setAttribute(QtCore.Qt.WA_NoSystemBackground, True)
        self.setAttribute(QtCore.Qt.WA_OpaquePaintEvent, False)
        self.setAutoFillBackground(False)
        self.engine = GlyphEngine()
        self.handle: Optional[EngineHandle] = None
        self._frame: Frame = ()
        self._transparent = False
        self._background = QtGui.QColor(DEFAULT_BACKGROUND)
        self._resize_listeners = _ResizeListeners()
        self._scheduler = QtFrameScheduler(self, self.engine.settings.frame_interval_ms)

    # ------------------------------------------------------------------ DrawableSurface
    def open_surface(self) -> None:
        if sip.isdeleted(self):
            raise SurfaceUnavailable("view widget has been deleted")
        if self.width() <= 0 or self.height() <= 0:
            raise SurfaceUnavailable("view widget has no area")

    def logical_size(self) -> Tuple[float, float]:
        if sip.isdeleted(self):
            raise ResizeObservationFailure("view widget has been deleted")
        return float(self.width()), float(self.height())

    def device_pixel_ratio(self) -> float:
        if sip.isdeleted(self):
            raise ResizeObservationFailure("view widget has been deleted")
        return float(self.devicePixelRatioF())

    def present(self, frame: Frame) -> None:
        if sip.isdeleted(self):
            raise SurfaceUnavailable("view widget has been deleted")
        self._frame = frame
        self.update()

    def add_resize_listener(self, callback: ResizeListener) -> None:
        self._resize_listeners.add(callback)

    def remove_resize_listener(self, callback: ResizeListener) -> None:
        self._resize_listeners.remove(callback)

    @property
    def resize_listener_count(self) -> int:
        return len(self._resize_listeners)

    # ------------------------------------------------------------------ lifecycle
    @property
    def attached(self) -> bool:
        return self.handle is not None and self.handle.attached

    def attach(self) -> EngineHandle:
        if self.attached:
            return self.handle  # type: ignore[return-value]
        self.handle = attach(self, self._scheduler, engine=self.engine)
        return self.handle

    def detach(self) -> None:
        if self.handle is not None:
            detach(self.handle)
            self.handle = None

    # ------------------------------------------------------------------ API
    def update_signature(self, signature) -> None:
        self.engine.update_signature(signature)

    def set_processing(self, processing: bool) -> None:
        self.engine.set_processing(processing)

    def update_settings(self, settings) -> None:
        if self.handle is not None:
            self.handle.update_settings(settings)
        else:
            self.engine.update_settings(settings)
            self._scheduler.set_interval(self.engine.settings.frame_interval_ms)

    def set_params(self, payload: Dict[str, object]) -> None:
        """Apply a control window payload (settings, system, signature, processing).

        Settings go through the handle so the frame interval follows them;
        signature and processing are left to :meth:`GlyphEngine.set_params`.
        """

        if not isinstance(payload, dict):
            return
        if "settings" in payload or "system" in payload:
            self.update_settings(payload)
        self.engine.set_params({k: v for k, v in payload.items() if k in ("signature", "processing")})
        system = payload.get("system")
        if isinstance(system, dict) and "transparent" in system:
            self.set_transparent(bool(system["transparent"]))

    @property
    def settings(self) -> RenderSettings:
        return self.engine.settings

    def set_transparent(self, enabled: bool) -> None:
        enabled = bool(enabled)
        if enabled == self._transparent:
            return
        self._transparent = enabled
        self.setAttribute(QtCore.Qt.WA_TranslucentBackground, enabled)
        self.update()

    def reset_visual_state(self) -> None:
        """Restart the animation from ``t = 0`` without touching the inputs."""

        self.engine.reset_clock()
        self.update()

    # ------------------------------------------------------------------ Qt events
    def _render_with_painter(self, painter: QtGui.QPainter) -> None:
        background = None if self._transparent else self._background
        if not self._frame:
            # Nothing presented yet: keep the surface clean rather than garbage.
            painter.setCompositionMode(QtGui.QPainter.CompositionMode_Source)
            painter.fillRect(self.rect(), background if background is not None else QtCore.Qt.transparent)
            return
        dpr = self.handle.dpr if self.handle is not None else 1.0
        paint_frame(painter, self._frame, dpr, background)

    def _on_show(self) -> None:
        if self.attached:
            return
        try:
            self.attach()
        except SurfaceUnavailable as exc:
            log.error("Unable to attach the glyph view: %s", exc)

    def _on_hide(self) -> None:
        self.detach()

    def _on_resize(self) -> None:
        self._resize_listeners.notify()
        # Shown with no area: attach failed earlier.
        if self.isVisible() and not self.attached and self.width() > 0 and self.height() > 0:
            self._on_show()


class _OpenGLViewWidget(QtWidgets.QOpenGLWidget, _ViewWidgetBase):
    """OpenGL-backed renderer when the system can create a GL context."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        QtWidgets.QOpenGLWidget.__init__(self, parent)
        self._init_view_widget()

    def paintGL(self) -> None:  # pragma: no cover - requires GUI context
        painter = QtGui.QPainter(self)
        try:
            self._render_with_painter(painter)
        finally:
            painter.end()

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._on_resize()

    def showEvent(self, event: QtGui.QShowEvent) -> None:  # type: ignore[override]
        super().showEvent(event)
        self._on_show()

    def hideEvent(self, event: QtGui.QHideEvent) -> None:  # type: ignore[override]
        self._on_hide()
        super().hideEvent(event)


class _RasterViewWidget(QtWidgets.QWidget, _ViewWidgetBase):
    """Fallback renderer using the traditional raster ``QWidget`` backend."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        QtWidgets.QWidget.__init__(self, parent)
        self._init_view_widget()

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        del event
        painter = QtGui.QPainter(self)
        try:
            self._render_with_painter(painter)
        finally:
            painter.end()

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._on_resize()

    def showEvent(self, event: QtGui.QShowEvent) -> None:  # type: ignore[override]
        super().showEvent(event)
        self._on_show()

    def hideEvent(self, event: QtGui.QHideEvent) -> None:  # type: ignore[override]
        self._on_hide()
        super().hideEvent(event)


def _should_use_opengl(force_backend: Optional[str]) -> bool:
    if force_backend == "raster":
        return False
    if force_backend == "opengl":
        return True

    env_backend = os.environ.get("RESONANCE_FORCE_BACKEND", "").strip().lower()
    if env_backend == "raster":
        return False
    if env_backend == "opengl":
        return True
    if QtGui.QGuiApplication.platformName() in {"offscreen", "minimal"}:
        return False
    return hasattr(QtWidgets, "QOpenGLWidget")


def GlyphViewWidget(
    parent: Optional[QtWidgets.QWidget] = None,
    *,
    force_backend: Optional[str] = None,
) -> QtWidgets.QWidget:
    """Factory returning the best available glyph widget.

    Parameters
    ----------
    parent:
        Parent widget used by Qt for ownership.
    force_backend:
        ``"opengl"`` forces the OpenGL widget while ``"raster"`` selects the
        pure QWidget implementation.  Defaults to ``RESONANCE_FORCE_BACKEND``.
    """

    if _should_use_opengl(force_backend):
        try:
            widget = _OpenGLViewWidget(parent)
            setattr(widget, "backend_name", "opengl")
            return widget
        except Exception as exc:
            log.warning("Unable to initialise OpenGL backend (%r). Using raster widget instead.", exc)
    widget = _RasterViewWidget(parent)
    setattr(widget, "backend_name", "raster")
    return widget
