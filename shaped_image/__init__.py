"""Raster images that carry the vector outline they were painted from."""

from .errors import EnvironmentFailure, InputContractViolation
from .geometry import (
    ArcTo,
    CornerRadii,
    LineTo,
    Outline,
    Point,
    Rect,
    RectCorner,
    ResolvedCornerRadii,
    Size,
    build_rounded_rect_outline,
    clamp_corner_radii,
    resolve_corner_radii,
)
from .image import ImageOrientation, ImageWithOutline, ShapedImage
from .paint import (
    BorderSpec,
    Color,
    FillSpec,
    Gradient,
    GradientOptions,
    GradientStop,
    LinearGradientFill,
    SolidFill,
    parse_color,
)
from .platform import (
    DefaultScaleProvider,
    EnvScaleProvider,
    FixedScaleProvider,
    ScreenScaleProvider,
    default_scale_provider,
)
from .raster import RasterSurface, RenderingSurface, SurfaceContext
from .synthesis import (
    RenderConfig,
    ShapedImageSynthesizer,
    build_outline,
    synthesize_gradient,
    synthesize_solid,
)

__all__ = [
    "ArcTo",
    "BorderSpec",
    "Color",
    "CornerRadii",
    "DefaultScaleProvider",
    "EnvScaleProvider",
    "EnvironmentFailure",
    "FillSpec",
    "FixedScaleProvider",
    "Gradient",
    "GradientOptions",
    "GradientStop",
    "ImageOrientation",
    "ImageWithOutline",
    "InputContractViolation",
    "LineTo",
    "LinearGradientFill",
    "Outline",
    "Point",
    "RasterSurface",
    "Rect",
    "RectCorner",
    "RenderConfig",
    "RenderingSurface",
    "ResolvedCornerRadii",
    "ScreenScaleProvider",
    "ShapedImage",
    "ShapedImageSynthesizer",
    "Size",
    "SolidFill",
    "SurfaceContext",
    "build_outline",
    "build_rounded_rect_outline",
    "clamp_corner_radii",
    "default_scale_provider",
    "parse_color",
    "resolve_corner_radii",
    "synthesize_gradient",
    "synthesize_solid",
]
