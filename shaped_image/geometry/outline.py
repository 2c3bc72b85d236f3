from __future__ import annotations

from dataclasses import dataclass
import math
from typing import TypeAlias

import numpy as np

from .polygon import winding_numbers


DEFAULT_FLATTEN_TOLERANCE = 0.05
HIT_TEST_TOLERANCE = 0.01


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def translated(self, dx: float, dy: float) -> Point:
        return Point(self.x + dx, self.y + dy)

    def scaled(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    @classmethod
    def coerce(cls, value: Size | tuple[float, float]) -> Size:
        if isinstance(value, Size):
            return value
        width, height = value
        return cls(float(width), float(height))

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_size(cls, size: Size) -> Rect:
        return cls(0.0, 0.0, size.width, size.height)

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def inset_by(self, dx: float, dy: float) -> Rect:
        """Shrink by `dx`/`dy` on every side; a collapsed axis keeps its center with zero extent."""

        width = self.width - 2.0 * dx
        height = self.height - 2.0 * dy
        x = self.x + dx
        y = self.y + dy
        if width < 0:
            x = self.x + self.width / 2.0
            width = 0.0
        if height < 0:
            y = self.y + self.height / 2.0
            height = 0.0
        return Rect(x, y, width, height)


@dataclass(frozen=True)
class LineTo:
    end: Point


@dataclass(frozen=True)
class ArcTo:
    """Circular arc from the current point, sweeping from `start_angle` to `end_angle`.

    Angles are radians in screen space (y grows downward), so an increasing
    angle sweeps clockwise on screen. `end` is stored exactly rather than
    recomputed from the angles.
    """

    center: Point
    radius: float
    start_angle: float
    end_angle: float
    end: Point

    @property
    def sweep(self) -> float:
        return self.end_angle - self.start_angle

    def point_at(self, angle: float) -> Point:
        return Point(
            self.center.x + self.radius * math.cos(angle),
            self.center.y + self.radius * math.sin(angle),
        )


Segment: TypeAlias = LineTo | ArcTo


@dataclass(frozen=True)
class Outline:
    """Immutable closed path made of straight and circular segments."""

    start: Point
    segments: tuple[Segment, ...]

    @property
    def is_closed(self) -> bool:
        if not self.segments:
            return True
        return self.segments[-1].end == self.start

    @property
    def bounds(self) -> Rect:
        xs = [self.start.x]
        ys = [self.start.y]
        for seg in self.segments:
            xs.append(seg.end.x)
            ys.append(seg.end.y)
            if isinstance(seg, ArcTo):
                for angle in _axis_angles_within(seg.start_angle, seg.end_angle):
                    p = seg.point_at(angle)
                    xs.append(p.x)
                    ys.append(p.y)
        return Rect(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

    def translated(self, dx: float, dy: float) -> Outline:
        segments: list[Segment] = []
        for seg in self.segments:
            if isinstance(seg, LineTo):
                segments.append(LineTo(seg.end.translated(dx, dy)))
            else:
                segments.append(
                    ArcTo(
                        center=seg.center.translated(dx, dy),
                        radius=seg.radius,
                        start_angle=seg.start_angle,
                        end_angle=seg.end_angle,
                        end=seg.end.translated(dx, dy),
                    )
                )
        return Outline(self.start.translated(dx, dy), tuple(segments))

    def scaled(self, factor: float) -> Outline:
        if factor <= 0:
            raise ValueError("scale factor must be > 0")
        segments: list[Segment] = []
        for seg in self.segments:
            if isinstance(seg, LineTo):
                segments.append(LineTo(seg.end.scaled(factor)))
            else:
                segments.append(
                    ArcTo(
                        center=seg.center.scaled(factor),
                        radius=seg.radius * factor,
                        start_angle=seg.start_angle,
                        end_angle=seg.end_angle,
                        end=seg.end.scaled(factor),
                    )
                )
        return Outline(self.start.scaled(factor), tuple(segments))

    def flatten(self, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> np.ndarray:
        """Polygon approximation as an `(N, 2)` float array, closing vertex not repeated.

        Arcs are subdivided so the chord never strays more than `tolerance`
        from the true curve.
        """

        if tolerance <= 0:
            raise ValueError("tolerance must be > 0")
        points: list[tuple[float, float]] = [(self.start.x, self.start.y)]
        for seg in self.segments:
            if isinstance(seg, ArcTo):
                steps = _arc_steps(seg.radius, seg.sweep, tolerance)
                for k in range(1, steps):
                    p = seg.point_at(seg.start_angle + seg.sweep * k / steps)
                    points.append((p.x, p.y))
            points.append((seg.end.x, seg.end.y))
        if len(points) > 1 and points[-1] == points[0]:
            points.pop()
        return np.asarray(points, dtype=np.float64).reshape(-1, 2)

    def contains_points(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        polygon = self.flatten(HIT_TEST_TOLERANCE)
        return winding_numbers(polygon, np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)) != 0

    def contains(self, x: float, y: float) -> bool:
        """Nonzero-winding hit test in outline coordinates."""

        return bool(self.contains_points(np.asarray([x]), np.asarray([y]))[0])

    def to_svg_path(self) -> str:
        parts = [f"M{_fmt(self.start.x)} {_fmt(self.start.y)}"]
        for seg in self.segments:
            if isinstance(seg, LineTo):
                parts.append(f"L{_fmt(seg.end.x)} {_fmt(seg.end.y)}")
            else:
                large = 1 if abs(seg.sweep) > math.pi else 0
                sweep = 1 if seg.sweep > 0 else 0
                r = _fmt(seg.radius)
                parts.append(f"A{r} {r} 0 {large} {sweep} {_fmt(seg.end.x)} {_fmt(seg.end.y)}")
        parts.append("Z")
        return " ".join(parts)


def _arc_steps(radius: float, sweep: float, tolerance: float) -> int:
    if radius <= tolerance or sweep == 0:
        return 1
    max_step = 2.0 * math.acos(1.0 - tolerance / radius)
    return max(1, int(math.ceil(abs(sweep) / max_step)))


def _axis_angles_within(a0: float, a1: float) -> list[float]:
    lo, hi = min(a0, a1), max(a0, a1)
    first = math.ceil(lo / (math.pi / 2.0))
    last = math.floor(hi / (math.pi / 2.0))
    return [k * math.pi / 2.0 for k in range(first, last + 1)]


def _fmt(value: float) -> str:
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text
