"""User adjustable render settings.

The control window exchanges loose dictionaries (``{"settings": {...},
"system": {...}}``) exactly like the rest of the UI.  The renderer never works
on those dictionaries directly: :meth:`RenderSettings.from_mapping` validates
and clamps them into an immutable value passed to every frame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping, Optional

from .control.config import DEFAULTS

log = logging.getLogger(__name__)

__all__ = ["ColorMode", "RenderSettings"]


class ColorMode(str, Enum):
    EMOTIONAL = "emotional"
    ARCHETYPAL = "archetypal"
    ENERGY = "energy"
    MONOCHROME = "monochrome"

    @classmethod
    def parse(cls, value: object, default: "ColorMode") -> "ColorMode":
        if isinstance(value, ColorMode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            log.warning("Unknown color mode %r, keeping %s", value, default.value)
            return default


def _float(value: object, default: float, minimum: float, maximum: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        log.warning("Ignoring non numeric setting %r", value)
        return default
    if number != number:  # NaN
        return default
    return max(minimum, min(maximum, number))


def _int(value: object, default: int, minimum: int, maximum: int) -> int:
    return int(round(_float(value, float(default), float(minimum), float(maximum))))


def _bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


_SETTINGS = DEFAULTS["settings"]
_SYSTEM = DEFAULTS["system"]


@dataclass(frozen=True)
class RenderSettings:
    """Validated render configuration.

    Attributes
    ----------
    intensity:
        Amplitude multiplier for the breathing pulse, the lobe depth and the
        glow, in ``[0.1, 2.0]``.
    particle_count:
        Maximum number of energy particles, in ``[0, 200]``.  The number drawn
        is ``floor(particle_count * energy_level)``.
    glow_enabled:
        Draw the additive glow overlay on top of the contour.
    color_mode:
        Color formula, see :class:`ColorMode`.
    animation_speed:
        Global speed multiplier applied on top of the signature speed, in
        ``[0.1, 3.0]``.
    show_inner_patterns:
        Gate for the inner resonance pattern layer.
    dpr_clamp:
        Upper bound for the device pixel ratio used to size the surface.
    frame_interval_ms:
        Delay between two frames for timer driven hosts; ``0`` pauses.
    """

    intensity: float = float(_SETTINGS["intensity"])
    particle_count: int = int(_SETTINGS["particleCount"])
    glow_enabled: bool = bool(_SETTINGS["glowEnabled"])
    color_mode: ColorMode = ColorMode(_SETTINGS["colorMode"])
    animation_speed: float = float(_SETTINGS["animationSpeed"])
    show_inner_patterns: bool = bool(_SETTINGS["showInnerPatterns"])
    dpr_clamp: float = float(_SYSTEM["dprClamp"])
    frame_interval_ms: int = int(_SYSTEM["frameIntervalMs"])

    def __post_init__(self) -> None:
        # Direct construction is validated as strictly as from_mapping().
        object.__setattr__(self, "intensity", _float(self.intensity, 1.0, 0.1, 2.0))
        object.__setattr__(self, "particle_count", _int(self.particle_count, 20, 0, 200))
        object.__setattr__(self, "glow_enabled", _bool(self.glow_enabled, True))
        object.__setattr__(self, "color_mode", ColorMode.parse(self.color_mode, ColorMode.EMOTIONAL))
        object.__setattr__(self, "animation_speed", _float(self.animation_speed, 1.0, 0.1, 3.0))
        object.__setattr__(self, "show_inner_patterns", _bool(self.show_inner_patterns, True))
        object.__setattr__(self, "dpr_clamp", _float(self.dpr_clamp, 2.0, 1.0, 4.0))
        object.__setattr__(self, "frame_interval_ms", _int(self.frame_interval_ms, 16, 0, 1000))

    @classmethod
    def from_mapping(
        cls,
        payload: Optional[Mapping[str, object]],
        base: Optional["RenderSettings"] = None,
    ) -> "RenderSettings":
        """Build settings from a UI payload, starting from ``base``.

        ``payload`` may be the full state (``{"settings": ..., "system": ...}``)
        or a flat ``settings`` section.  Keys use the camelCase spelling of the
        control window; unknown keys are ignored.
        """

        base = base or cls()
        if not isinstance(payload, Mapping):
            return base
        section = payload.get("settings", payload)
        system = payload.get("system", {})
        if not isinstance(section, Mapping):
            section = {}
        if not isinstance(system, Mapping):
            system = {}
        return replace(
            base,
            intensity=section.get("intensity", base.intensity),
            particle_count=section.get("particleCount", base.particle_count),
            glow_enabled=section.get("glowEnabled", base.glow_enabled),
            color_mode=section.get("colorMode", base.color_mode),
            animation_speed=section.get("animationSpeed", base.animation_speed),
            show_inner_patterns=section.get("showInnerPatterns", base.show_inner_patterns),
            dpr_clamp=system.get("dprClamp", base.dpr_clamp),
            frame_interval_ms=system.get("frameIntervalMs", base.frame_interval_ms),
        )

    def to_mapping(self) -> dict:
        return {
            "settings": {
                "intensity": self.intensity,
                "particleCount": self.particle_count,
                "glowEnabled": self.glow_enabled,
                "colorMode": self.color_mode.value,
                "animationSpeed": self.animation_speed,
                "showInnerPatterns": self.show_inner_patterns,
            },
            "system": {
                "dprClamp": self.dpr_clamp,
                "frameIntervalMs": self.frame_interval_ms,
            },
        }
