from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Callable, Mapping

from .errors import EnvironmentFailure, InputContractViolation
from .geometry.outline import Outline, Point, Rect, Size
from .geometry.rounded_rect import CornerRadii, RectCorner, build_rounded_rect_outline
from .image import ImageOrientation, ImageT, ImageWithOutline, ShapedImage
from .paint import (
    BorderSpec,
    Color,
    ColorLike,
    FillSpec,
    Gradient,
    GradientOptions,
    LinearGradientFill,
    SolidFill,
    parse_color,
)
from .platform.scale import DefaultScaleProvider, default_scale_provider
from .raster.surface import RasterSurface, RenderingSurface, SurfaceContext


LOGGER = logging.getLogger(__name__)

FillPainter = Callable[[SurfaceContext, Outline], None]


@dataclass(frozen=True)
class RenderConfig:
    size: Size
    corner_radii: Mapping[RectCorner | str, float] = field(default_factory=dict)
    fill: FillSpec = SolidFill((0, 0, 0, 255))
    border: BorderSpec = BorderSpec()
    opaque: bool = False
    scale: float | None = None


class ShapedImageSynthesizer:
    """Renders rounded-rect images and keeps the fill outline alongside the pixels."""

    def __init__(
        self,
        surface: RenderingSurface | None = None,
        scale_provider: DefaultScaleProvider | None = None,
    ) -> None:
        self._surface = surface if surface is not None else RasterSurface.from_env()
        self._scale_provider = scale_provider if scale_provider is not None else default_scale_provider()

    def synthesize(self, config: RenderConfig, image_type: type[ImageT] | None = None) -> ImageWithOutline:
        fill = config.fill
        if isinstance(fill, SolidFill):
            painter = _solid_painter(fill)
        elif isinstance(fill, LinearGradientFill):
            painter = _gradient_painter(fill)
        else:
            raise InputContractViolation(f"unsupported fill: {type(fill).__name__}")
        return self._render(
            size=config.size,
            corner_radii=config.corner_radii,
            painter=painter,
            border=config.border,
            opaque=config.opaque,
            scale=config.scale,
            image_type=image_type,
        )

    def synthesize_solid(
        self,
        color: ColorLike,
        size: Size | tuple[float, float],
        corner_radii: CornerRadii | None = None,
        border_color: ColorLike | None = None,
        border_width: float = 0.0,
        opaque: bool = False,
        scale: float | None = None,
        *,
        image_type: type[ImageT] | None = None,
    ) -> ImageWithOutline:
        return self._render(
            size=size,
            corner_radii=corner_radii,
            painter=_solid_painter(SolidFill(parse_color(color))),
            border=_border(border_color, border_width),
            opaque=opaque,
            scale=scale,
            image_type=image_type,
        )

    def synthesize_gradient(
        self,
        gradient: Gradient,
        start_point: Point | tuple[float, float],
        end_point: Point | tuple[float, float],
        options: GradientOptions | None,
        size: Size | tuple[float, float],
        corner_radii: CornerRadii | None = None,
        border_color: ColorLike | None = None,
        border_width: float = 0.0,
        opaque: bool = False,
        scale: float | None = None,
        *,
        image_type: type[ImageT] | None = None,
    ) -> ImageWithOutline:
        fill = LinearGradientFill(
            gradient=gradient,
            start=_point(start_point),
            end=_point(end_point),
            options=options if options is not None else GradientOptions(),
        )
        return self._render(
            size=size,
            corner_radii=corner_radii,
            painter=_gradient_painter(fill),
            border=_border(border_color, border_width),
            opaque=opaque,
            scale=scale,
            image_type=image_type,
        )

    def _render(
        self,
        *,
        size: Size | tuple[float, float],
        corner_radii: CornerRadii | None,
        painter: FillPainter,
        border: BorderSpec,
        opaque: bool,
        scale: float | None,
        image_type: type[ImageT] | None,
    ) -> ImageWithOutline:
        logical = _validate_size(Size.coerce(size))
        radii = _normalize_radii(corner_radii)
        resolved_scale = self._resolve_scale(scale)
        bounds = Rect.from_size(logical)
        target = image_type if image_type is not None else ShapedImage

        try:
            with self._surface.create_offscreen_surface(logical, resolved_scale, opaque) as ctx:
                outline = build_rounded_rect_outline(bounds, radii)
                painter(ctx, outline)
                border_color = border.color if border.enabled else None
                if border_color is not None:
                    _stroke_border(ctx, bounds, radii, border_color, border.width)
                pixels = ctx.extract_raster()
        except (InputContractViolation, EnvironmentFailure):
            raise
        except Exception as exc:  # noqa: BLE001
            raise EnvironmentFailure(f"rendering surface failed: {exc}") from exc

        if pixels is None or pixels.numel() == 0:
            raise EnvironmentFailure("rendering surface returned an empty raster")
        LOGGER.debug(
            "synthesized %gx%g image at scale %s -> %dx%d px",
            logical.width,
            logical.height,
            resolved_scale,
            int(pixels.shape[1]),
            int(pixels.shape[0]),
        )
        return target.from_raster(pixels, outline, resolved_scale, ImageOrientation.UP)

    def _resolve_scale(self, scale: float | None) -> float:
        resolved = scale if scale is not None else self._scale_provider.current_default_scale()
        if not math.isfinite(resolved) or resolved <= 0:
            raise InputContractViolation(f"scale must be a finite value > 0, got {resolved!r}")
        return float(resolved)


def _stroke_border(
    ctx: SurfaceContext,
    bounds: Rect,
    corner_radii: Mapping[RectCorner | str, float],
    color: Color,
    width: float,
) -> None:
    # The stroke is centered on a path already inset by half its width; keep
    # that geometry, images rendered elsewhere depend on it.
    inset = width / 2.0
    if 2.0 * inset > bounds.width or 2.0 * inset > bounds.height:
        LOGGER.debug(
            "skipping %g wide border on %gx%g bounds; inset rect is empty",
            width,
            bounds.width,
            bounds.height,
        )
        return
    inset_bounds = bounds.inset_by(inset, inset)
    inset_radii = {corner: max(radius - inset, 0.0) for corner, radius in corner_radii.items()}
    border_outline = build_rounded_rect_outline(inset_bounds, inset_radii)
    ctx.set_stroke_width(width)
    ctx.set_stroke_color(color)
    ctx.add_path(border_outline)
    ctx.stroke_path()


def _solid_painter(fill: SolidFill) -> FillPainter:
    def paint(ctx: SurfaceContext, outline: Outline) -> None:
        ctx.add_path(outline)
        ctx.set_fill_color(fill.color)
        ctx.fill_path()

    return paint


def _gradient_painter(fill: LinearGradientFill) -> FillPainter:
    def paint(ctx: SurfaceContext, outline: Outline) -> None:
        ctx.add_path(outline)
        ctx.clip()
        ctx.draw_linear_gradient(fill.gradient, fill.start, fill.end, fill.options)

    return paint


def _validate_size(size: Size) -> Size:
    if not (math.isfinite(size.width) and math.isfinite(size.height)):
        raise InputContractViolation(f"size must be finite, got {size.width}x{size.height}")
    if size.width < 0 or size.height < 0:
        raise InputContractViolation(f"size must be non-negative, got {size.width}x{size.height}")
    return size


def _normalize_radii(corner_radii: CornerRadii | None) -> dict[RectCorner, float]:
    radii: dict[RectCorner, float] = {}
    for key, value in (corner_radii or {}).items():
        try:
            radius = float(value)
        except (TypeError, ValueError) as exc:
            raise InputContractViolation(f"corner radius for {key!r} must be a number") from exc
        radii[RectCorner.parse(key)] = radius
    return radii


def _border(color: ColorLike | None, width: float) -> BorderSpec:
    return BorderSpec(color=parse_color(color) if color is not None else None, width=float(width))


def _point(value: Point | tuple[float, float]) -> Point:
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(float(x), float(y))


def build_outline(size: Size | tuple[float, float], corner_radii: CornerRadii | None = None) -> Outline:
    """Outline a synthesis call with the same arguments would attach to its image."""

    return build_rounded_rect_outline(Rect.from_size(_validate_size(Size.coerce(size))), corner_radii)


def synthesize_solid(
    color: ColorLike,
    size: Size | tuple[float, float],
    corner_radii: CornerRadii | None = None,
    border_color: ColorLike | None = None,
    border_width: float = 0.0,
    opaque: bool = False,
    scale: float | None = None,
    *,
    surface: RenderingSurface | None = None,
    scale_provider: DefaultScaleProvider | None = None,
    image_type: type[ImageT] | None = None,
) -> ImageWithOutline:
    synthesizer = ShapedImageSynthesizer(surface=surface, scale_provider=scale_provider)
    return synthesizer.synthesize_solid(
        color,
        size,
        corner_radii,
        border_color,
        border_width,
        opaque,
        scale,
        image_type=image_type,
    )


def synthesize_gradient(
    gradient: Gradient,
    start_point: Point | tuple[float, float],
    end_point: Point | tuple[float, float],
    options: GradientOptions | None,
    size: Size | tuple[float, float],
    corner_radii: CornerRadii | None = None,
    border_color: ColorLike | None = None,
    border_width: float = 0.0,
    opaque: bool = False,
    scale: float | None = None,
    *,
    surface: RenderingSurface | None = None,
    scale_provider: DefaultScaleProvider | None = None,
    image_type: type[ImageT] | None = None,
) -> ImageWithOutline:
    synthesizer = ShapedImageSynthesizer(surface=surface, scale_provider=scale_provider)
    return synthesizer.synthesize_gradient(
        gradient,
        start_point,
        end_point,
        options,
        size,
        corner_radii,
        border_color,
        border_width,
        opaque,
        scale,
        image_type=image_type,
    )
