from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Sequence, TypeAlias

import numpy as np

from .errors import InputContractViolation
from .geometry.outline import Point


Color = tuple[int, int, int, int]
ColorLike: TypeAlias = Color | tuple[int, int, int] | str


def parse_color(value: ColorLike) -> Color:
    """Normalize `#RGB[A]`, `#RRGGBB[AA]`, `rgb()/rgba()` strings or int tuples to RGBA255."""

    if isinstance(value, str):
        return _parse_color_string(value)
    channels = tuple(int(c) for c in value)
    if len(channels) == 3:
        channels = channels + (255,)
    if len(channels) != 4 or any(c < 0 or c > 255 for c in channels):
        raise InputContractViolation(f"color must have 3 or 4 channels in [0, 255]: {value!r}")
    return channels  # type: ignore[return-value]


def _parse_color_string(value: str) -> Color:
    text = value.strip()
    if text.startswith("#"):
        hex_value = text[1:]
        try:
            if len(hex_value) in (3, 4):
                parts = [int(ch * 2, 16) for ch in hex_value]
            elif len(hex_value) in (6, 8):
                parts = [int(hex_value[i : i + 2], 16) for i in range(0, len(hex_value), 2)]
            else:
                parts = []
        except ValueError:
            parts = []
        if parts:
            if len(parts) == 3:
                parts.append(255)
            return (parts[0], parts[1], parts[2], parts[3])
    if text.startswith("rgb"):
        numbers = text[text.find("(") + 1 : text.find(")")].split(",")
        try:
            if len(numbers) == 3:
                return parse_color(tuple(int(n) for n in numbers))  # type: ignore[arg-type]
            if len(numbers) == 4:
                alpha = float(numbers[3])
                rgb = tuple(int(n) for n in numbers[:3])
                return parse_color(rgb + (int(round(alpha * 255)) if alpha <= 1.0 else int(alpha),))  # type: ignore[arg-type]
        except ValueError:
            pass
    raise InputContractViolation(f"unsupported color value: {value!r}")


@dataclass(frozen=True)
class GradientStop:
    offset: float
    color: Color

    def __post_init__(self) -> None:
        if not math.isfinite(self.offset) or self.offset < 0.0 or self.offset > 1.0:
            raise InputContractViolation("GradientStop offset must be in [0, 1]")
        object.__setattr__(self, "color", parse_color(self.color))


@dataclass(frozen=True)
class Gradient:
    """Ordered color ramp; stops are sorted by offset on construction."""

    stops: tuple[GradientStop, ...]

    def __post_init__(self) -> None:
        if not self.stops:
            raise InputContractViolation("Gradient requires at least one stop")
        ordered = tuple(sorted(self.stops, key=lambda stop: stop.offset))
        object.__setattr__(self, "stops", ordered)

    @classmethod
    def from_colors(cls, colors: Sequence[ColorLike], offsets: Sequence[float] | None = None) -> Gradient:
        if offsets is None:
            if len(colors) == 1:
                offsets = [0.0]
            else:
                offsets = [i / (len(colors) - 1) for i in range(len(colors))]
        if len(offsets) != len(colors):
            raise InputContractViolation("offsets and colors must have the same length")
        return cls(tuple(GradientStop(float(o), parse_color(c)) for o, c in zip(offsets, colors)))

    def evaluate(self, t: np.ndarray) -> np.ndarray:
        """Straight-alpha RGBA in [0, 1] for each ramp position, shape `t.shape + (4,)`."""

        offsets = np.asarray([stop.offset for stop in self.stops], dtype=np.float64)
        colors = np.asarray([stop.color for stop in self.stops], dtype=np.float64) / 255.0
        out = np.empty(np.shape(t) + (4,), dtype=np.float32)
        for channel in range(4):
            out[..., channel] = np.interp(t, offsets, colors[:, channel])
        return out


@dataclass(frozen=True)
class GradientOptions:
    draws_before_start: bool = False
    draws_after_end: bool = False


@dataclass(frozen=True)
class SolidFill:
    color: Color

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", parse_color(self.color))


@dataclass(frozen=True)
class LinearGradientFill:
    gradient: Gradient
    start: Point
    end: Point
    options: GradientOptions = GradientOptions()


FillSpec: TypeAlias = SolidFill | LinearGradientFill


@dataclass(frozen=True)
class BorderSpec:
    color: Color | None = None
    width: float = 0.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.width):
            raise InputContractViolation("border width must be finite")
        if self.color is not None:
            object.__setattr__(self, "color", parse_color(self.color))

    @property
    def enabled(self) -> bool:
        return self.color is not None and self.width > 0.0
