"""Render state and virtual clock of the glyph engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..signature import Signature

__all__ = ["RenderMode", "RenderState", "VirtualClock", "FRAME_STEP"]

# Advance of the virtual clock for one displayed frame.
FRAME_STEP = 0.02


class RenderMode(Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    ACTIVE = "active"


@dataclass(frozen=True)
class RenderState:
    """Exactly one of ``Idle``, ``Processing`` or ``Active(signature)``."""

    mode: RenderMode
    signature: Optional[Signature] = None

    def __post_init__(self) -> None:
        if self.mode is RenderMode.ACTIVE and self.signature is None:
            raise ValueError("an active render state needs a signature")
        if self.mode is not RenderMode.ACTIVE and self.signature is not None:
            raise ValueError(f"{self.mode.value} render state cannot carry a signature")

    @classmethod
    def idle(cls) -> "RenderState":
        return cls(RenderMode.IDLE)

    @classmethod
    def processing(cls) -> "RenderState":
        return cls(RenderMode.PROCESSING)

    @classmethod
    def active(cls, signature: Signature) -> "RenderState":
        return cls(RenderMode.ACTIVE, signature)


class VirtualClock:
    """Monotonic animation time, independent from the wall clock."""

    def __init__(self, step: float = FRAME_STEP) -> None:
        if step <= 0:
            raise ValueError("clock step must be positive")
        self.step = float(step)
        self._t = 0.0

    @property
    def t(self) -> float:
        return self._t

    def advance(self, dt: Optional[float] = None) -> float:
        """Move time forward by ``dt`` (or one frame step) and return it."""

        delta = self.step if dt is None else float(dt)
        if delta > 0:
            self._t += delta
        return self._t

    def reset(self) -> None:
        self._t = 0.0
