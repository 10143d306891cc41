import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from resonance.errors import ResizeObservationFailure, SurfaceUnavailable
from resonance.signature import validate


class ManualScheduler:
    """Frame scheduler stepped by hand from the tests."""

    def __init__(self) -> None:
        self.callbacks = {}
        self.requested = 0
        self.cancelled = []
        self.intervals = []
        self._next = 0

    @property
    def pending(self) -> int:
        return len(self.callbacks)

    def request_frame(self, callback):
        self._next += 1
        self.requested += 1
        self.callbacks[self._next] = callback
        return self._next

    def cancel_frame(self, token):
        self.cancelled.append(token)
        self.callbacks.pop(token, None)

    def set_interval(self, interval_ms):
        self.intervals.append(interval_ms)

    def run_once(self) -> bool:
        if not self.callbacks:
            return False
        token = min(self.callbacks)
        callback = self.callbacks.pop(token)
        callback()
        return True

    def run(self, frames: int) -> int:
        ran = 0
        for _ in range(frames):
            if not self.run_once():
                break
            ran += 1
        return ran


class RecordingSurface:
    """Drawable surface recording every presented frame."""

    def __init__(self, width=400.0, height=400.0, dpr=1.0) -> None:
        self.width = width
        self.height = height
        self.dpr = dpr
        self.frames = []
        self.listeners = []
        self.fail_open = None
        self.fail_size = False
        self.fail_present = False

    def open_surface(self):
        if self.fail_open is not None:
            raise self.fail_open

    def logical_size(self):
        if self.fail_size:
            raise ResizeObservationFailure("size unavailable")
        return self.width, self.height

    def device_pixel_ratio(self):
        return self.dpr

    def present(self, frame):
        if self.fail_present:
            raise SurfaceUnavailable("surface gone")
        self.frames.append(frame)

    def add_resize_listener(self, callback):
        self.listeners.append(callback)

    def remove_resize_listener(self, callback):
        self.listeners.remove(callback)

    def resize(self, width, height):
        self.width = width
        self.height = height
        for callback in list(self.listeners):
            callback()


REFERENCE_PAYLOAD = {
    "emotional_valence": 0.8,
    "cognitive_complexity": 0.9,
    "energy_level": 0.6,
    "glyph_parameters": {
        "shape_complexity": 0.75,
        "color_hue": 0.5,
        "animation_speed": 1.0,
        "resonance_frequency": 4.0,
    },
}


@pytest.fixture
def reference_signature():
    return validate(REFERENCE_PAYLOAD)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture(scope="session")
def qapp():
    from PyQt5 import QtWidgets

    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app


@pytest.fixture
def make_surface():
    return RecordingSurface


@pytest.fixture
def reference_payload():
    return dict(REFERENCE_PAYLOAD)
