from __future__ import annotations

import numpy as np


def winding_numbers(polygon: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Winding number of each sample point around a closed polygon.

    `polygon` is an `(N, 2)` vertex array; the closing edge back to the first
    vertex is implied. `xs`/`ys` may have any (matching) shape.
    """

    winding = np.zeros(np.shape(xs), dtype=np.int32)
    if polygon.shape[0] < 3:
        return winding
    nxt = np.roll(polygon, -1, axis=0)
    for (x0, y0), (x1, y1) in zip(polygon.tolist(), nxt.tolist()):
        if y0 == y1:
            continue
        is_left = (x1 - x0) * (ys - y0) - (xs - x0) * (y1 - y0)
        if y0 <= y1:
            crossing = (ys >= y0) & (ys < y1) & (is_left > 0)
            winding += crossing.astype(np.int32)
        else:
            crossing = (ys >= y1) & (ys < y0) & (is_left < 0)
            winding -= crossing.astype(np.int32)
    return winding


def polygon_area(polygon: np.ndarray) -> float:
    """Signed shoelace area; positive for counter-clockwise vertices in y-up space."""

    if polygon.shape[0] < 3:
        return 0.0
    x = polygon[:, 0]
    y = polygon[:, 1]
    return float(0.5 * (np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))
