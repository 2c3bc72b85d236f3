from __future__ import annotations

from dataclasses import dataclass
import logging
import math
import os
from typing import Protocol


LOGGER = logging.getLogger(__name__)

DEFAULT_SCALE_ENV_VAR = "SHAPED_IMAGE_DEFAULT_SCALE"
FALLBACK_SCALE = 1.0
_REFERENCE_DPI = 96.0


class DefaultScaleProvider(Protocol):
    def current_default_scale(self) -> float:
        ...


@dataclass(frozen=True)
class FixedScaleProvider:
    scale: float = FALLBACK_SCALE

    def __post_init__(self) -> None:
        if not math.isfinite(self.scale) or self.scale <= 0:
            raise ValueError("scale must be a finite value > 0")

    def current_default_scale(self) -> float:
        return self.scale


class ScreenScaleProvider:
    """Scale derived from the primary display's DPI, 1.0 when no display is reachable."""

    def __init__(self, fallback: float = FALLBACK_SCALE) -> None:
        self._fallback = fallback

    def current_default_scale(self) -> float:
        detected = _detect_screen_scale()
        if detected is None:
            return self._fallback
        return detected


class EnvScaleProvider:
    """Reads the default scale from an environment variable on every query."""

    def __init__(
        self,
        env_var: str = DEFAULT_SCALE_ENV_VAR,
        fallback: DefaultScaleProvider | None = None,
    ) -> None:
        self.env_var = env_var
        self._fallback = fallback if fallback is not None else FixedScaleProvider()

    def current_default_scale(self) -> float:
        raw = os.getenv(self.env_var, "").strip()
        if raw == "":
            return self._fallback.current_default_scale()
        try:
            value = float(raw)
        except ValueError:
            value = math.nan
        if not math.isfinite(value) or value <= 0:
            LOGGER.warning("ignoring %s=%r; expected a positive number", self.env_var, raw)
            return self._fallback.current_default_scale()
        return value


def default_scale_provider() -> DefaultScaleProvider:
    return EnvScaleProvider(fallback=ScreenScaleProvider())


def _detect_screen_scale() -> float | None:
    try:
        import tkinter as tk

        root = tk.Tk()
        root.withdraw()
        dpi = float(root.winfo_fpixels("1i"))
        root.destroy()
    except Exception:
        return None
    if dpi <= 0:
        return None
    # Quarter steps, never below 1x.
    return max(1.0, round(dpi / _REFERENCE_DPI * 4.0) / 4.0)
