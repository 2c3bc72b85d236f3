from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import logging
import math
import os
from typing import ContextManager, Iterator, Protocol

import numpy as np
import torch

from shaped_image.errors import EnvironmentFailure, InputContractViolation
from shaped_image.geometry.outline import Outline, Point, Size
from shaped_image.paint import Color, Gradient, GradientOptions, parse_color

from .coverage import SampleGrid, fill_coverage, stroke_coverage


LOGGER = logging.getLogger(__name__)

SAMPLES_ENV_VAR = "SHAPED_IMAGE_SAMPLES_PER_AXIS"
DEFAULT_SAMPLES_PER_AXIS = 4
DEFAULT_MITER_LIMIT = 10.0
# Supersamples per surface, i.e. width_px * height_px * samples_per_axis ** 2.
DEFAULT_MAX_SAMPLES = 64 * 1024 * 1024
_PIXEL_EPSILON = 1e-6


class SurfaceContext(Protocol):
    """Drawing commands accepted by a scoped offscreen surface.

    Coordinates are logical units; the surface applies its own scale.
    """

    def add_path(self, outline: Outline) -> None:
        ...

    def set_fill_color(self, color: Color) -> None:
        ...

    def fill_path(self) -> None:
        ...

    def clip(self) -> None:
        ...

    def draw_linear_gradient(self, gradient: Gradient, start: Point, end: Point, options: GradientOptions) -> None:
        ...

    def set_stroke_width(self, width: float) -> None:
        ...

    def set_stroke_color(self, color: Color) -> None:
        ...

    def stroke_path(self) -> None:
        ...

    def extract_raster(self) -> torch.Tensor:
        ...


class RenderingSurface(Protocol):
    def create_offscreen_surface(self, size: Size, scale: float, opaque: bool) -> ContextManager[SurfaceContext]:
        ...


def pixel_extent(logical: float, scale: float) -> int:
    return max(0, int(math.ceil(logical * scale - _PIXEL_EPSILON)))


class RasterContext:
    """numpy-backed RGBA surface with premultiplied float32 storage.

    Fill, stroke and clip consume the current path. Clipping only narrows.
    """

    def __init__(
        self,
        width_px: int,
        height_px: int,
        scale: float,
        opaque: bool,
        *,
        samples_per_axis: int = DEFAULT_SAMPLES_PER_AXIS,
        miter_limit: float = DEFAULT_MITER_LIMIT,
        flatten_tolerance: float = 0.1,
    ) -> None:
        self.width_px = width_px
        self.height_px = height_px
        self.scale = scale
        self.opaque = opaque
        self.miter_limit = miter_limit
        self.flatten_tolerance = flatten_tolerance
        self._grid = SampleGrid(width_px, height_px, samples_per_axis)
        self._rgba: np.ndarray | None = np.zeros((height_px, width_px, 4), dtype=np.float32)
        self._clip = np.ones((height_px, width_px), dtype=np.float32)
        self._path: list[np.ndarray] = []
        self._fill_color: Color = (0, 0, 0, 255)
        self._stroke_color: Color = (0, 0, 0, 255)
        self._line_width = 1.0

    @property
    def released(self) -> bool:
        return self._rgba is None

    def release(self) -> None:
        self._rgba = None
        self._path = []

    def add_path(self, outline: Outline) -> None:
        self._require_live()
        polygon = outline.scaled(self.scale).flatten(self.flatten_tolerance)
        self._path.append(polygon)

    def set_fill_color(self, color: Color) -> None:
        self._fill_color = parse_color(color)

    def set_stroke_color(self, color: Color) -> None:
        self._stroke_color = parse_color(color)

    def set_stroke_width(self, width: float) -> None:
        if not math.isfinite(width) or width < 0:
            raise InputContractViolation("stroke width must be a finite value >= 0")
        self._line_width = float(width)

    def fill_path(self) -> None:
        self._require_live()
        coverage = fill_coverage(self._grid, self._take_path())
        self._composite_solid(self._fill_color, coverage)

    def stroke_path(self) -> None:
        self._require_live()
        coverage = stroke_coverage(
            self._grid,
            self._take_path(),
            self._line_width * self.scale,
            self.miter_limit,
        )
        self._composite_solid(self._stroke_color, coverage)

    def clip(self) -> None:
        self._require_live()
        self._clip = self._clip * fill_coverage(self._grid, self._take_path())

    def draw_linear_gradient(self, gradient: Gradient, start: Point, end: Point, options: GradientOptions) -> None:
        """Paint the clip region with a color ramp along `start` -> `end`.

        A zero-length vector paints the ramp's offset-0 color everywhere.
        """

        self._require_live()
        xs = (np.arange(self.width_px, dtype=np.float64) + 0.5) / self.scale
        ys = (np.arange(self.height_px, dtype=np.float64) + 0.5) / self.scale
        dx = end.x - start.x
        dy = end.y - start.y
        length_sq = dx * dx + dy * dy
        paint = np.ones((self.height_px, self.width_px), dtype=np.float32)
        if length_sq == 0.0:
            t = np.zeros((self.height_px, self.width_px), dtype=np.float64)
        else:
            t = ((xs[None, :] - start.x) * dx + (ys[:, None] - start.y) * dy) / length_sq
            if not options.draws_before_start:
                paint[t < 0.0] = 0.0
            if not options.draws_after_end:
                paint[t > 1.0] = 0.0
            t = np.clip(t, 0.0, 1.0)
        colors = gradient.evaluate(t)
        self._composite(colors, paint)

    def extract_raster(self) -> torch.Tensor:
        if self._rgba is None:
            raise EnvironmentFailure("surface was released before the raster was extracted")
        rgba = self._rgba.copy()
        if self.opaque:
            rgba[..., 3] = 1.0
        alpha = rgba[..., 3:4]
        straight = np.divide(rgba[..., :3], alpha, out=np.zeros_like(rgba[..., :3]), where=alpha > 0)
        rgba[..., :3] = straight
        out = np.clip(np.rint(rgba * 255.0), 0, 255).astype(np.uint8)
        return torch.from_numpy(out)

    def _take_path(self) -> list[np.ndarray]:
        path = self._path
        self._path = []
        return path

    def _composite_solid(self, color: Color, coverage: np.ndarray) -> None:
        straight = np.asarray(color, dtype=np.float32) / 255.0
        self._composite(np.broadcast_to(straight, coverage.shape + (4,)), coverage)

    def _composite(self, straight_rgba: np.ndarray, coverage: np.ndarray) -> None:
        rgba = self._require_live()
        cov = (coverage * self._clip)[..., None]
        src_alpha = straight_rgba[..., 3:4] * cov
        rgba *= 1.0 - src_alpha
        rgba[..., :3] += straight_rgba[..., :3] * src_alpha
        rgba[..., 3:4] += src_alpha

    def _require_live(self) -> np.ndarray:
        if self._rgba is None:
            raise EnvironmentFailure("drawing on a released surface")
        return self._rgba


@dataclass
class RasterSurface:
    """Default `RenderingSurface`: supersampled numpy rasterizer."""

    samples_per_axis: int = DEFAULT_SAMPLES_PER_AXIS
    miter_limit: float = DEFAULT_MITER_LIMIT
    flatten_tolerance: float = 0.1
    max_samples: int = DEFAULT_MAX_SAMPLES

    def __post_init__(self) -> None:
        if self.samples_per_axis <= 0:
            raise ValueError("samples_per_axis must be > 0")
        if self.miter_limit < 1.0:
            raise ValueError("miter_limit must be >= 1")
        if self.flatten_tolerance <= 0:
            raise ValueError("flatten_tolerance must be > 0")
        if self.max_samples <= 0:
            raise ValueError("max_samples must be > 0")

    @classmethod
    def from_env(cls, *, env_var: str = SAMPLES_ENV_VAR) -> "RasterSurface":
        raw = os.getenv(env_var, "").strip()
        if raw == "":
            return cls()
        try:
            samples = int(raw)
        except ValueError:
            samples = 0
        if samples <= 0:
            LOGGER.warning("ignoring %s=%r; expected a positive integer", env_var, raw)
            return cls()
        return cls(samples_per_axis=samples)

    @contextmanager
    def create_offscreen_surface(self, size: Size, scale: float, opaque: bool) -> Iterator[RasterContext]:
        width_px = pixel_extent(size.width, scale)
        height_px = pixel_extent(size.height, scale)
        if width_px <= 0 or height_px <= 0:
            raise EnvironmentFailure(f"cannot create a {width_px}x{height_px} raster target")
        samples = width_px * height_px * self.samples_per_axis**2
        if samples > self.max_samples:
            raise EnvironmentFailure(
                f"raster target {width_px}x{height_px} at {self.samples_per_axis}x{self.samples_per_axis}"
                f" samples needs {samples} samples, over the {self.max_samples} limit"
            )
        ctx = RasterContext(
            width_px,
            height_px,
            scale,
            opaque,
            samples_per_axis=self.samples_per_axis,
            miter_limit=self.miter_limit,
            flatten_tolerance=self.flatten_tolerance,
        )
        LOGGER.debug("acquired %dx%d surface scale=%s opaque=%s", width_px, height_px, scale, opaque)
        try:
            yield ctx
        finally:
            ctx.release()
            LOGGER.debug("released %dx%d surface", width_px, height_px)
