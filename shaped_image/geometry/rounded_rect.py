from __future__ import annotations

from dataclasses import dataclass
from enum import Flag
import logging
import math
from typing import Mapping, TypeAlias

from shaped_image.errors import InputContractViolation

from .outline import ArcTo, LineTo, Outline, Point, Rect, Segment, Size


LOGGER = logging.getLogger(__name__)


class RectCorner(Flag):
    TOP_LEFT = 1
    TOP_RIGHT = 2
    BOTTOM_LEFT = 4
    BOTTOM_RIGHT = 8
    ALL_CORNERS = 15

    @classmethod
    def parse(cls, value: RectCorner | str) -> RectCorner:
        if isinstance(value, RectCorner):
            return value
        key = str(value).strip().lower().replace("-", "_")
        if key in _CORNER_ALIASES:
            return _CORNER_ALIASES[key]
        raise InputContractViolation(f"unknown rect corner: {value!r}")

    @property
    def corner_count(self) -> int:
        return bin(self.value).count("1")


_CORNER_ALIASES = {
    "top_left": RectCorner.TOP_LEFT,
    "top_right": RectCorner.TOP_RIGHT,
    "bottom_left": RectCorner.BOTTOM_LEFT,
    "bottom_right": RectCorner.BOTTOM_RIGHT,
    "all": RectCorner.ALL_CORNERS,
    "all_corners": RectCorner.ALL_CORNERS,
}

CornerRadii: TypeAlias = Mapping[RectCorner | str, float]


@dataclass(frozen=True)
class ResolvedCornerRadii:
    top_left: float = 0.0
    top_right: float = 0.0
    bottom_left: float = 0.0
    bottom_right: float = 0.0

    @classmethod
    def uniform(cls, radius: float) -> ResolvedCornerRadii:
        return cls(radius, radius, radius, radius)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.top_left, self.top_right, self.bottom_left, self.bottom_right)

    def scaled(self, factor: float) -> ResolvedCornerRadii:
        return ResolvedCornerRadii(*(r * factor for r in self.as_tuple()))


def resolve_corner_radii(corner_radii: CornerRadii | None) -> ResolvedCornerRadii:
    """Expand a possibly-combined corner mapping into one radius per corner.

    Broader keys apply first so a single-corner key overrides e.g. `ALL_CORNERS`.
    Corners that no key mentions stay at 0.
    """

    values = {
        RectCorner.TOP_LEFT: 0.0,
        RectCorner.TOP_RIGHT: 0.0,
        RectCorner.BOTTOM_LEFT: 0.0,
        RectCorner.BOTTOM_RIGHT: 0.0,
    }
    if not corner_radii:
        return ResolvedCornerRadii()
    entries = [(RectCorner.parse(key), float(radius)) for key, radius in corner_radii.items()]
    entries.sort(key=lambda item: -item[0].corner_count)
    for corners, radius in entries:
        for corner in values:
            if corner in corners:
                values[corner] = radius
    return ResolvedCornerRadii(
        top_left=values[RectCorner.TOP_LEFT],
        top_right=values[RectCorner.TOP_RIGHT],
        bottom_left=values[RectCorner.BOTTOM_LEFT],
        bottom_right=values[RectCorner.BOTTOM_RIGHT],
    )


def clamp_corner_radii(width: float, height: float, radii: ResolvedCornerRadii) -> ResolvedCornerRadii:
    """Floor radii at zero and shrink them so no edge is over-subscribed.

    Every radius is multiplied by the smallest `edge / (r_a + r_b)` ratio over
    the four edges, so the most constrained edge ends up exactly covered and
    relative proportions between corners are kept.
    """

    w = width if width > 0 else 0.0
    h = height if height > 0 else 0.0
    limit = max(w, h)
    floored = []
    for r in radii.as_tuple():
        if math.isinf(r) and r > 0:
            floored.append(limit)
        elif r > 0:
            floored.append(r)
        else:
            floored.append(0.0)
    tl, tr, bl, br = floored

    factor = 1.0
    for length, a, b in ((w, tl, tr), (w, bl, br), (h, tl, bl), (h, tr, br)):
        total = a + b
        if total > length:
            factor = min(factor, length / total)
    clamped = ResolvedCornerRadii(tl, tr, bl, br)
    if factor < 1.0:
        LOGGER.debug("corner radii %s reduced by factor %.6f for %gx%g", clamped.as_tuple(), factor, w, h)
        clamped = clamped.scaled(factor)
    return clamped


def build_rounded_rect_outline(
    bounds: Rect | Size | tuple[float, float],
    corner_radii: CornerRadii | ResolvedCornerRadii | None = None,
) -> Outline:
    """Closed clockwise outline of a rect with independently rounded corners.

    The path starts at the midpoint of the top edge. Zero-radius corners become
    sharp vertices; a zero-width or zero-height rect collapses to a line or point.
    """

    rect = bounds if isinstance(bounds, Rect) else Rect.from_size(Size.coerce(bounds))
    if rect.width < 0 or rect.height < 0:
        rect = Rect(rect.x, rect.y, max(rect.width, 0.0), max(rect.height, 0.0))
    resolved = corner_radii if isinstance(corner_radii, ResolvedCornerRadii) else resolve_corner_radii(corner_radii)
    radii = clamp_corner_radii(rect.width, rect.height, resolved)

    x0, y0, x1, y1 = rect.x, rect.y, rect.max_x, rect.max_y
    half_pi = math.pi / 2.0
    start = Point(x0 + rect.width / 2.0, y0)
    builder = _SegmentBuilder(start)

    builder.line_to(Point(x1 - radii.top_right, y0))
    builder.corner(Point(x1, y0), Point(x1 - radii.top_right, y0 + radii.top_right), radii.top_right,
                   -half_pi, 0.0, Point(x1, y0 + radii.top_right))
    builder.line_to(Point(x1, y1 - radii.bottom_right))
    builder.corner(Point(x1, y1), Point(x1 - radii.bottom_right, y1 - radii.bottom_right), radii.bottom_right,
                   0.0, half_pi, Point(x1 - radii.bottom_right, y1))
    builder.line_to(Point(x0 + radii.bottom_left, y1))
    builder.corner(Point(x0, y1), Point(x0 + radii.bottom_left, y1 - radii.bottom_left), radii.bottom_left,
                   half_pi, math.pi, Point(x0, y1 - radii.bottom_left))
    builder.line_to(Point(x0, y0 + radii.top_left))
    builder.corner(Point(x0, y0), Point(x0 + radii.top_left, y0 + radii.top_left), radii.top_left,
                   math.pi, 3.0 * half_pi, Point(x0 + radii.top_left, y0))
    builder.line_to(start)
    return Outline(start=start, segments=tuple(builder.segments))


class _SegmentBuilder:
    def __init__(self, start: Point) -> None:
        self.current = start
        self.segments: list[Segment] = []

    def line_to(self, end: Point) -> None:
        if end == self.current:
            return
        self.segments.append(LineTo(end))
        self.current = end

    def corner(
        self,
        vertex: Point,
        center: Point,
        radius: float,
        start_angle: float,
        end_angle: float,
        end: Point,
    ) -> None:
        if radius <= 0:
            self.line_to(vertex)
            return
        self.segments.append(
            ArcTo(center=center, radius=radius, start_angle=start_angle, end_angle=end_angle, end=end)
        )
        self.current = end
