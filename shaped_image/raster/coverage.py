from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from shaped_image.geometry.polygon import polygon_area

# Upper bound on samples held in memory per band of pixel rows.
DEFAULT_BAND_SAMPLES = 1 << 20


class SampleGrid:
    """Regular supersampling grid over a pixel raster.

    Sample `(i, j)` sits at pixel-space `((j + 0.5) / n, (i + 0.5) / n)`;
    coverage per pixel is the fraction of its `n * n` samples that are hit.
    """

    def __init__(self, width_px: int, height_px: int, samples_per_axis: int) -> None:
        if width_px <= 0 or height_px <= 0:
            raise ValueError("grid dimensions must be > 0")
        if samples_per_axis <= 0:
            raise ValueError("samples_per_axis must be > 0")
        self.width_px = width_px
        self.height_px = height_px
        self.samples = samples_per_axis

    @property
    def shape(self) -> tuple[int, int]:
        return (self.height_px * self.samples, self.width_px * self.samples)

    @property
    def sample_count(self) -> int:
        rows, cols = self.shape
        return rows * cols

    def rows_per_band(self, band_samples: int) -> int:
        """Whole pixel rows whose samples fit in `band_samples`; at least one."""

        rows_samples = self.width_px * self.samples * self.samples
        return max(1, band_samples // rows_samples)

    def resolve(self, mask: np.ndarray) -> np.ndarray:
        """Average `n x n` sample blocks; `mask` may cover any run of whole pixel rows."""

        n = self.samples
        hits = mask.reshape(-1, n, self.width_px, n)
        return hits.mean(axis=(1, 3), dtype=np.float32)


def fill_coverage(
    grid: SampleGrid,
    polygons: Iterable[np.ndarray],
    *,
    band_samples: int = DEFAULT_BAND_SAMPLES,
) -> np.ndarray:
    """Nonzero-winding coverage of the union of all subpaths.

    Rows are processed in bands. Each band only sees the edges spanning it,
    and the winding of every sample comes from a cumulative sum over the
    edge crossings of its sample row.
    """

    coverage = np.zeros((grid.height_px, grid.width_px), dtype=np.float32)
    edges = _edge_table(polygons)
    if edges.shape[0] == 0:
        return coverage
    n = grid.samples
    cols = grid.width_px * n
    top = max(0, int(math.floor(edges[:, 1].min())))
    bottom = min(grid.height_px, int(math.ceil(edges[:, 3].max())))
    step = grid.rows_per_band(band_samples)
    for row0 in range(top, bottom, step):
        row1 = min(bottom, row0 + step)
        ys = (np.arange(row0 * n, row1 * n, dtype=np.float64) + 0.5) / n
        spanning = (edges[:, 3] > ys[0]) & (edges[:, 1] <= ys[-1])
        if not spanning.any():
            continue
        winding = _band_winding(edges[spanning], ys, cols, n)
        coverage[row0:row1] = grid.resolve(winding != 0)
    return coverage


def stroke_coverage(
    grid: SampleGrid,
    polygons: Iterable[np.ndarray],
    line_width: float,
    miter_limit: float,
    *,
    band_samples: int = DEFAULT_BAND_SAMPLES,
) -> np.ndarray:
    """Coverage of the union of the stroke pieces of every subpath.

    Pieces are convex and oriented alike, so a sample's winding counts the
    pieces covering it and a nonzero fill of all of them is their union.
    """

    if line_width <= 0:
        return np.zeros((grid.height_px, grid.width_px), dtype=np.float32)
    half = line_width / 2.0
    pieces: list[np.ndarray] = []
    for polygon in polygons:
        for piece in stroke_pieces(polygon, half, miter_limit):
            area = polygon_area(piece)
            if abs(area) <= 1e-12:
                continue
            pieces.append(piece if area > 0 else piece[::-1])
    return fill_coverage(grid, pieces, band_samples=band_samples)


def _edge_table(polygons: Iterable[np.ndarray]) -> np.ndarray:
    """Non-horizontal edges as `(x_low, y_low, x_high, y_high, direction)` rows."""

    tables = []
    for polygon in polygons:
        if polygon.shape[0] < 3:
            continue
        start = np.asarray(polygon, dtype=np.float64)
        end = np.roll(start, -1, axis=0)
        upward = end[:, 1] > start[:, 1]
        downward = end[:, 1] < start[:, 1]
        low = np.where(upward[:, None], start, end)
        high = np.where(upward[:, None], end, start)
        direction = np.where(upward, 1.0, -1.0)
        keep = upward | downward
        tables.append(np.column_stack([low, high, direction])[keep])
    if not tables:
        return np.zeros((0, 5), dtype=np.float64)
    return np.concatenate(tables, axis=0)


def _band_winding(edges: np.ndarray, ys: np.ndarray, cols: int, n: int) -> np.ndarray:
    """Winding numbers for the sample rows `ys` across `cols` sample columns.

    An edge counts for a sample when the sample row lies in `[y_low, y_high)`
    and the sample sits strictly left of the crossing.
    """

    x_low, y_low, x_high, y_high, direction = edges.T
    active = (ys[:, None] >= y_low) & (ys[:, None] < y_high)
    row_idx, edge_idx = np.nonzero(active)
    row_count = ys.shape[0]
    if row_idx.size == 0:
        return np.zeros((row_count, cols), dtype=np.float64)
    y_hit = ys[row_idx]
    slope = (x_high[edge_idx] - x_low[edge_idx]) / (y_high[edge_idx] - y_low[edge_idx])
    x_hit = x_low[edge_idx] + (y_hit - y_low[edge_idx]) * slope
    stop = np.clip(np.ceil(x_hit * n - 0.5), 0, cols).astype(np.intp)
    weight = direction[edge_idx]
    diff = np.bincount(
        row_idx * (cols + 1) + stop,
        weights=-weight,
        minlength=row_count * (cols + 1),
    ).reshape(row_count, cols + 1)
    diff[:, 0] += np.bincount(row_idx, weights=weight, minlength=row_count)
    return np.cumsum(diff, axis=1)[:, :cols]


def stroke_pieces(polygon: np.ndarray, half_width: float, miter_limit: float) -> list[np.ndarray]:
    """Convex pieces whose union is the stroke of a closed polygon.

    One quad per edge plus one join per vertex: a miter wedge, or a bevel
    triangle when the miter ratio exceeds `miter_limit`.
    """

    points = _dedupe(polygon)
    count = points.shape[0]
    if count < 2:
        return []
    pieces: list[np.ndarray] = []
    edges: list[tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]] = []
    for i in range(count):
        p0 = points[i]
        p1 = points[(i + 1) % count]
        delta = p1 - p0
        length = float(np.hypot(delta[0], delta[1]))
        if length == 0.0:
            continue
        direction = delta / length
        normal = np.array([-direction[1], direction[0]])
        offset = normal * half_width
        pieces.append(np.array([p0 + offset, p1 + offset, p1 - offset, p0 - offset]))
        edges.append((p0, p1, direction, normal))

    for k in range(len(edges)):
        _, vertex, d0, n0 = edges[k]
        _, _, d1, n1 = edges[(k + 1) % len(edges)]
        join = _join_piece(vertex, d0, n0, d1, n1, half_width, miter_limit)
        if join is not None:
            pieces.append(join)
    return pieces


def _join_piece(
    vertex: np.ndarray,
    d0: np.ndarray,
    n0: np.ndarray,
    d1: np.ndarray,
    n1: np.ndarray,
    half_width: float,
    miter_limit: float,
) -> np.ndarray | None:
    cross = float(d0[0] * d1[1] - d0[1] * d1[0])
    if abs(cross) <= 1e-12:
        return None
    side = -1.0 if cross > 0 else 1.0
    a = vertex + n0 * half_width * side
    b = vertex + n1 * half_width * side
    dot = float(np.dot(n0, n1))
    bisector_len = math.sqrt(max(0.0, 2.0 + 2.0 * dot))
    if bisector_len > 0 and 2.0 / bisector_len <= miter_limit:
        tip = vertex + (n0 + n1) * side * half_width / (1.0 + dot)
        return np.array([vertex, a, tip, b])
    return np.array([vertex, a, b])


def _dedupe(polygon: np.ndarray) -> np.ndarray:
    if polygon.shape[0] == 0:
        return polygon
    keep = [0]
    for i in range(1, polygon.shape[0]):
        if not np.array_equal(polygon[i], polygon[keep[-1]]):
            keep.append(i)
    if len(keep) > 1 and np.array_equal(polygon[keep[-1]], polygon[keep[0]]):
        keep.pop()
    return polygon[keep]
