"""
Unit tests for boundary line and centroid building
"""

import sys
import unittest
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))

from borders import build_graticule, build_lines, compute_centroid, lines_to_polydata
from coord import BORDER_RADIUS, GeoPoint
from geometry import MultiPolygon, Polygon, parse_geometry


def ring(*pairs):
    return tuple(GeoPoint(lon, lat) for lon, lat in pairs)


OUTER = ring((0, 0), (0, 10), (10, 10), (10, 0), (0, 0))
HOLE = ring((4, 4), (4, 6), (6, 6), (6, 4), (4, 4))
ISLAND = ring((20, 20), (20, 30), (30, 30), (20, 20))


class TestBuildLines(unittest.TestCase):

    def test_polygon_draws_every_ring(self):
        strips = build_lines(Polygon((OUTER, HOLE)))
        self.assertEqual(len(strips), 2)
        self.assertEqual(strips[0].shape, (5, 3))
        self.assertEqual(strips[1].shape, (5, 3))

    def test_points_on_overlay_radius(self):
        for strip in build_lines(Polygon((OUTER, HOLE))):
            np.testing.assert_allclose(np.linalg.norm(strip, axis=1), BORDER_RADIUS)
        for strip in build_lines(Polygon((OUTER,)), radius=2.0):
            np.testing.assert_allclose(np.linalg.norm(strip, axis=1), 2.0)

    def test_multipolygon_concatenates(self):
        multi = MultiPolygon((Polygon((OUTER, HOLE)), Polygon((ISLAND,))))
        strips = build_lines(multi)
        self.assertEqual([len(s) for s in strips], [5, 5, 4])

    def test_ring_order_preserved(self):
        strips = build_lines(Polygon((ISLAND,)))
        np.testing.assert_allclose(strips[0][0], strips[0][-1])
        self.assertFalse(np.allclose(strips[0][0], strips[0][1]))

    def test_short_rings_still_emitted(self):
        strips = build_lines(Polygon((ring((0, 0), (1, 1)), ring((5, 5)), ())))
        self.assertEqual([len(s) for s in strips], [2, 1])


class TestCentroid(unittest.TestCase):

    def test_simple_average_of_outer_ring(self):
        # Closing vertex counts, as in a plain average of the listed points
        self.assertEqual(compute_centroid(Polygon((OUTER, HOLE))), GeoPoint(4.0, 4.0))

    def test_open_square(self):
        square = ring((0, 0), (0, 10), (10, 10), (10, 0))
        self.assertEqual(compute_centroid(Polygon((square,))), GeoPoint(5.0, 5.0))

    def test_multipolygon_uses_first_polygon(self):
        multi = MultiPolygon((Polygon((ISLAND,)), Polygon((OUTER,))))
        centroid = compute_centroid(multi)
        self.assertAlmostEqual(centroid.longitude, 22.5)
        self.assertAlmostEqual(centroid.latitude, 25.0)

    def test_empty_geometry(self):
        self.assertIsNone(compute_centroid(MultiPolygon(())))
        self.assertIsNone(compute_centroid(Polygon(())))


class TestGraticule(unittest.TestCase):

    def test_line_count(self):
        # Parallels -60..60 and meridians -180..150 at 30 degree steps
        self.assertEqual(len(build_graticule(30)), 5 + 12)

    def test_on_sphere(self):
        for strip in build_graticule(45, radius=1.5):
            np.testing.assert_allclose(np.linalg.norm(strip, axis=1), 1.5)


class TestPolyData(unittest.TestCase):

    def test_merges_drawable_strips(self):
        strips = build_lines(MultiPolygon((Polygon((OUTER, ring((1, 1)))), Polygon((ISLAND,)))))
        mesh = lines_to_polydata(strips)
        self.assertEqual(mesh.n_points, 9)
        self.assertEqual(mesh.n_lines, 2)

    def test_nothing_drawable(self):
        self.assertIsNone(lines_to_polydata([]))
        self.assertIsNone(lines_to_polydata([np.zeros((1, 3))]))


class TestParseGeometry(unittest.TestCase):

    def test_polygon(self):
        geometry = parse_geometry({"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1]]]})
        self.assertEqual(geometry.type, "Polygon")
        self.assertEqual(geometry.polygons, (geometry,))
        self.assertEqual(geometry.outer, ring((0, 0), (1, 0), (1, 1)))

    def test_multipolygon(self):
        geometry = parse_geometry({
            "type": "MultiPolygon",
            "coordinates": [[[[0, 0], [1, 0], [1, 1]]], [[[5, 5], [6, 5], [6, 6]], [[5.5, 5.2], [5.8, 5.2], [5.8, 5.5]]]],
        })
        self.assertEqual(geometry.type, "MultiPolygon")
        self.assertEqual([len(p.rings) for p in geometry.polygons], [1, 2])

    def test_extra_and_bad_coordinates(self):
        geometry = parse_geometry({
            "type": "Polygon",
            "coordinates": [[[0, 0, 120.0], ["a", 1], [1], [1, 0], [1, 1]]],
        })
        self.assertEqual(geometry.outer, ring((0, 0), (1, 0), (1, 1)))

    def test_wrong_nesting_reads_as_empty(self):
        self.assertEqual(parse_geometry({"type": "Polygon", "coordinates": [5]}), Polygon(()))
        self.assertEqual(parse_geometry({"type": "Polygon", "coordinates": "abc"}), Polygon(()))
        self.assertEqual(parse_geometry({"type": "MultiPolygon", "coordinates": 7}), MultiPolygon(()))
        self.assertEqual(parse_geometry({"type": "Polygon", "coordinates": [[4, [1, 2]]]}).outer,
                         ring((1, 2)))

    def test_unsupported(self):
        self.assertIsNone(parse_geometry({"type": ["Polygon"], "coordinates": []}))
        self.assertIsNone(parse_geometry({"type": "Point", "coordinates": [0, 0]}))
        self.assertIsNone(parse_geometry(None))
        self.assertIsNone(parse_geometry({"coordinates": []}))


if __name__ == '__main__':
    unittest.main()
