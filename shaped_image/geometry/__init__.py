"""Vector outlines for shaped images."""

from .outline import ArcTo, LineTo, Outline, Point, Rect, Segment, Size
from .polygon import polygon_area, winding_numbers
from .rounded_rect import (
    CornerRadii,
    RectCorner,
    ResolvedCornerRadii,
    build_rounded_rect_outline,
    clamp_corner_radii,
    resolve_corner_radii,
)

__all__ = [
    "ArcTo",
    "CornerRadii",
    "LineTo",
    "Outline",
    "Point",
    "Rect",
    "RectCorner",
    "ResolvedCornerRadii",
    "Segment",
    "Size",
    "build_rounded_rect_outline",
    "clamp_corner_radii",
    "polygon_area",
    "resolve_corner_radii",
    "winding_numbers",
]
