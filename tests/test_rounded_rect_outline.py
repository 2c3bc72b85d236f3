from __future__ import annotations

import math
import unittest

import numpy as np

from shaped_image.errors import InputContractViolation
from shaped_image.geometry import (
    ArcTo,
    LineTo,
    Outline,
    Point,
    Rect,
    RectCorner,
    ResolvedCornerRadii,
    Size,
    build_rounded_rect_outline,
    clamp_corner_radii,
    polygon_area,
    resolve_corner_radii,
)


def _arcs(outline: Outline) -> list[ArcTo]:
    return [seg for seg in outline.segments if isinstance(seg, ArcTo)]


class RoundedRectOutlineTests(unittest.TestCase):
    def test_zero_radii_yield_plain_rectangle(self) -> None:
        outline = build_rounded_rect_outline((40.0, 20.0), {RectCorner.ALL_CORNERS: 0.0})
        self.assertEqual(outline.start, Point(20.0, 0.0))
        self.assertEqual(
            outline.segments,
            (
                LineTo(Point(40.0, 0.0)),
                LineTo(Point(40.0, 20.0)),
                LineTo(Point(0.0, 20.0)),
                LineTo(Point(0.0, 0.0)),
                LineTo(Point(20.0, 0.0)),
            ),
        )
        self.assertTrue(outline.is_closed)
        self.assertEqual(outline.bounds, Rect(0.0, 0.0, 40.0, 20.0))

    def test_missing_corners_default_to_square(self) -> None:
        outline = build_rounded_rect_outline((40.0, 20.0), {"top_left": 5.0})
        arcs = _arcs(outline)
        self.assertEqual(len(arcs), 1)
        self.assertEqual(arcs[0].center, Point(5.0, 5.0))
        self.assertEqual(arcs[0].end, Point(5.0, 0.0))
        self.assertEqual(outline.segments[-1].end, outline.start)

    def test_uniform_radii_emit_four_quarter_arcs(self) -> None:
        outline = build_rounded_rect_outline((100.0, 60.0), {RectCorner.ALL_CORNERS: 10.0})
        arcs = _arcs(outline)
        self.assertEqual(len(arcs), 4)
        for arc in arcs:
            self.assertEqual(arc.radius, 10.0)
            self.assertAlmostEqual(arc.sweep, math.pi / 2.0)
        self.assertEqual([arc.center for arc in arcs], [Point(90, 10), Point(90, 50), Point(10, 50), Point(10, 10)])
        self.assertTrue(outline.is_closed)

    def test_outline_is_clockwise_on_screen(self) -> None:
        outline = build_rounded_rect_outline((30.0, 30.0), {RectCorner.ALL_CORNERS: 6.0})
        # Shoelace area is positive for clockwise vertices when y grows downward.
        self.assertGreater(polygon_area(outline.flatten()), 0.0)

    def test_negative_radius_is_floored(self) -> None:
        outline = build_rounded_rect_outline((10.0, 10.0), {RectCorner.ALL_CORNERS: -4.0})
        self.assertEqual(_arcs(outline), [])
        self.assertEqual(len(outline.segments), 5)

    def test_over_constrained_edge_sums_to_edge_length(self) -> None:
        radii = clamp_corner_radii(
            100.0,
            60.0,
            ResolvedCornerRadii(top_left=80.0, top_right=80.0, bottom_left=0.0, bottom_right=0.0),
        )
        self.assertAlmostEqual(radii.top_left + radii.top_right, 100.0)
        self.assertLessEqual(radii.top_left + radii.bottom_left, 60.0 + 1e-9)
        self.assertLessEqual(radii.top_right + radii.bottom_right, 60.0 + 1e-9)

    def test_clamping_keeps_every_edge_within_length(self) -> None:
        cases = [
            (100.0, 60.0, ResolvedCornerRadii.uniform(45.0)),
            (20.0, 200.0, ResolvedCornerRadii(90.0, 30.0, 60.0, 5.0)),
            (50.0, 50.0, ResolvedCornerRadii(1e6, 0.0, 0.0, 1e6)),
        ]
        for width, height, raw in cases:
            r = clamp_corner_radii(width, height, raw)
            self.assertLessEqual(r.top_left + r.top_right, width + 1e-9)
            self.assertLessEqual(r.bottom_left + r.bottom_right, width + 1e-9)
            self.assertLessEqual(r.top_left + r.bottom_left, height + 1e-9)
            self.assertLessEqual(r.top_right + r.bottom_right, height + 1e-9)
            edge_sums = [
                (r.top_left + r.top_right) / width,
                (r.bottom_left + r.bottom_right) / width,
                (r.top_left + r.bottom_left) / height,
                (r.top_right + r.bottom_right) / height,
            ]
            self.assertAlmostEqual(max(edge_sums), 1.0)

    def test_large_uniform_radius_makes_a_pill_without_self_crossing(self) -> None:
        outline = build_rounded_rect_outline((100.0, 40.0), {RectCorner.ALL_CORNERS: 500.0})
        arcs = _arcs(outline)
        self.assertTrue(all(math.isclose(arc.radius, 20.0) for arc in arcs))
        polygon = outline.flatten()
        self.assertTrue(np.all(polygon[:, 0] >= -1e-9) and np.all(polygon[:, 0] <= 100.0 + 1e-9))
        self.assertTrue(np.all(polygon[:, 1] >= -1e-9) and np.all(polygon[:, 1] <= 40.0 + 1e-9))
        self.assertTrue(outline.contains(50.0, 20.0))
        self.assertFalse(outline.contains(1.0, 1.0))

    def test_infinite_radius_behaves_like_maximum_rounding(self) -> None:
        finite = build_rounded_rect_outline((30.0, 30.0), {RectCorner.ALL_CORNERS: 15.0})
        infinite = build_rounded_rect_outline((30.0, 30.0), {RectCorner.ALL_CORNERS: math.inf})
        self.assertEqual(finite, infinite)

    def test_build_is_idempotent(self) -> None:
        radii = {RectCorner.TOP_LEFT: 4.0, RectCorner.BOTTOM_RIGHT: 12.0}
        a = build_rounded_rect_outline(Size(64.0, 32.0), radii)
        b = build_rounded_rect_outline(Size(64.0, 32.0), radii)
        self.assertEqual(a, b)
        self.assertEqual(a.to_svg_path(), b.to_svg_path())

    def test_zero_size_degenerates_to_point(self) -> None:
        outline = build_rounded_rect_outline((0.0, 0.0), {RectCorner.ALL_CORNERS: 5.0})
        self.assertEqual(outline.start, Point(0.0, 0.0))
        self.assertEqual(outline.segments, ())
        self.assertTrue(outline.is_closed)

    def test_zero_width_degenerates_to_line(self) -> None:
        outline = build_rounded_rect_outline((0.0, 10.0), {RectCorner.ALL_CORNERS: 5.0})
        self.assertEqual(_arcs(outline), [])
        self.assertEqual(outline.bounds, Rect(0.0, 0.0, 0.0, 10.0))
        self.assertTrue(outline.is_closed)

    def test_rect_origin_offsets_outline(self) -> None:
        at_origin = build_rounded_rect_outline((20.0, 10.0), {RectCorner.ALL_CORNERS: 3.0})
        shifted = build_rounded_rect_outline(Rect(2.0, 4.0, 20.0, 10.0), {RectCorner.ALL_CORNERS: 3.0})
        self.assertEqual(at_origin.translated(2.0, 4.0), shifted)
        self.assertEqual(shifted.bounds, Rect(2.0, 4.0, 20.0, 10.0))

    def test_svg_path_for_square(self) -> None:
        outline = build_rounded_rect_outline((10.0, 10.0))
        self.assertEqual(outline.to_svg_path(), "M5 0 L10 0 L10 10 L0 10 L0 0 L5 0 Z")

    def test_svg_path_encodes_clockwise_arcs(self) -> None:
        outline = build_rounded_rect_outline((10.0, 10.0), {"top_right": 2.0})
        self.assertIn("A2 2 0 0 1 10 2", outline.to_svg_path())

    def test_scaled_outline_multiplies_radii(self) -> None:
        outline = build_rounded_rect_outline((10.0, 10.0), {RectCorner.ALL_CORNERS: 2.0}).scaled(3.0)
        self.assertEqual(outline, build_rounded_rect_outline((30.0, 30.0), {RectCorner.ALL_CORNERS: 6.0}))


class CornerRadiiResolutionTests(unittest.TestCase):
    def test_combined_keys_cover_each_corner(self) -> None:
        radii = resolve_corner_radii({RectCorner.TOP_LEFT | RectCorner.TOP_RIGHT: 7.0})
        self.assertEqual(radii, ResolvedCornerRadii(7.0, 7.0, 0.0, 0.0))

    def test_specific_corner_overrides_all(self) -> None:
        radii = resolve_corner_radii({RectCorner.BOTTOM_LEFT: 1.0, RectCorner.ALL_CORNERS: 9.0})
        self.assertEqual(radii, ResolvedCornerRadii(9.0, 9.0, 1.0, 9.0))

    def test_string_aliases(self) -> None:
        radii = resolve_corner_radii({"all": 2.0, "top-right": 4.0})
        self.assertEqual(radii, ResolvedCornerRadii(2.0, 4.0, 2.0, 2.0))

    def test_unknown_corner_rejected(self) -> None:
        with self.assertRaises(InputContractViolation):
            resolve_corner_radii({"middle": 2.0})


class OutlineHitTestTests(unittest.TestCase):
    def test_contains_respects_rounded_corner(self) -> None:
        outline = build_rounded_rect_outline((20.0, 20.0), {RectCorner.ALL_CORNERS: 10.0})
        self.assertTrue(outline.contains(10.0, 10.0))
        self.assertFalse(outline.contains(0.5, 0.5))
        self.assertFalse(outline.contains(25.0, 10.0))

    def test_flatten_stays_within_tolerance(self) -> None:
        outline = build_rounded_rect_outline((40.0, 40.0), {RectCorner.ALL_CORNERS: 20.0})
        polygon = outline.flatten(tolerance=0.01)
        distances = np.hypot(polygon[:, 0] - 20.0, polygon[:, 1] - 20.0)
        self.assertTrue(np.allclose(distances, 20.0, atol=1e-9))
        self.assertGreater(polygon.shape[0], 40)

    def test_flatten_rejects_non_positive_tolerance(self) -> None:
        outline = build_rounded_rect_outline((4.0, 4.0))
        with self.assertRaises(ValueError):
            outline.flatten(0.0)


if __name__ == "__main__":
    unittest.main()
