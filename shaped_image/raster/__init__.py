from .coverage import SampleGrid, fill_coverage, stroke_coverage, stroke_pieces
from .surface import RasterContext, RasterSurface, RenderingSurface, SurfaceContext, pixel_extent

__all__ = [
    "RasterContext",
    "RasterSurface",
    "RenderingSurface",
    "SampleGrid",
    "SurfaceContext",
    "fill_coverage",
    "pixel_extent",
    "stroke_coverage",
    "stroke_pieces",
]
