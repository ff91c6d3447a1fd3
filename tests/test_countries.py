"""
Unit tests for the country registry and point-in-polygon hit testing
"""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from coord import GeoPoint, to_sphere_point
from countries import (
    Country,
    CountryRegistry,
    point_in_geometry,
    point_in_polygon,
    point_in_ring,
)
from geometry import MultiPolygon, Polygon, parse_geometry
from labels import earth_rotation_matrix


def ring(*pairs):
    return tuple(GeoPoint(lon, lat) for lon, lat in pairs)


SQUARE = ring((0, 0), (0, 10), (10, 10), (10, 0))
HOLE = ring((4, 4), (4, 6), (6, 6), (6, 4))
FAR_SQUARE = ring((20, 20), (20, 30), (30, 30), (30, 20))


class TestPointInRing(unittest.TestCase):
    """Crossing-number test"""

    def test_inside(self):
        self.assertTrue(point_in_ring(GeoPoint(5, 5), SQUARE))

    def test_outside(self):
        self.assertFalse(point_in_ring(GeoPoint(15, 5), SQUARE))
        self.assertFalse(point_in_ring(GeoPoint(-1, 5), SQUARE))
        self.assertFalse(point_in_ring(GeoPoint(5, 11), SQUARE))

    def test_edge_points_follow_half_open_rule(self):
        # Western and southern edges count as inside, northern as outside
        self.assertIs(point_in_ring(GeoPoint(0, 5), SQUARE), True)
        self.assertIs(point_in_ring(GeoPoint(5, 0), SQUARE), True)
        self.assertIs(point_in_ring(GeoPoint(5, 10), SQUARE), False)

    def test_ray_through_vertex_counted_once(self):
        diamond = ring((0, 5), (5, 10), (10, 5), (5, 0))
        self.assertTrue(point_in_ring(GeoPoint(5, 5), diamond))
        self.assertFalse(point_in_ring(GeoPoint(-3, 5), diamond))

    def test_closed_ring_same_result(self):
        closed = SQUARE + (SQUARE[0],)
        for p in (GeoPoint(5, 5), GeoPoint(15, 5), GeoPoint(0, 5)):
            self.assertEqual(point_in_ring(p, closed), point_in_ring(p, SQUARE))

    def test_degenerate_rings_contain_nothing(self):
        self.assertFalse(point_in_ring(GeoPoint(0, 0), ()))
        self.assertFalse(point_in_ring(GeoPoint(0, 0), ring((0, 0))))
        self.assertFalse(point_in_ring(GeoPoint(5, 5), ring((0, 0), (10, 10))))

    def test_concave_ring(self):
        u_shape = ring((0, 0), (0, 10), (3, 10), (3, 3), (7, 3), (7, 10), (10, 10), (10, 0))
        self.assertTrue(point_in_ring(GeoPoint(1, 5), u_shape))
        self.assertFalse(point_in_ring(GeoPoint(5, 5), u_shape))


class TestPolygonContainment(unittest.TestCase):

    def test_hole_is_not_subtracted(self):
        polygon = Polygon((SQUARE, HOLE))
        self.assertTrue(point_in_polygon(GeoPoint(5, 5), polygon))

    def test_hole_ring_alone_does_not_widen_polygon(self):
        polygon = Polygon((SQUARE, FAR_SQUARE))
        self.assertFalse(point_in_polygon(GeoPoint(25, 25), polygon))

    def test_empty_polygon(self):
        self.assertFalse(point_in_polygon(GeoPoint(0, 0), Polygon(())))

    def test_multipolygon_union(self):
        multi = MultiPolygon((Polygon((SQUARE,)), Polygon((FAR_SQUARE,))))
        self.assertTrue(point_in_geometry(GeoPoint(5, 5), multi))
        self.assertTrue(point_in_geometry(GeoPoint(25, 25), multi))
        self.assertFalse(point_in_geometry(GeoPoint(15, 15), multi))


class TestCountryRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = CountryRegistry()
        self.registry.register(Country("Testland", Polygon((SQUARE,))))
        self.registry.register(Country("Farland", MultiPolygon((Polygon((FAR_SQUARE,)),))))

    def test_find_containing(self):
        self.assertEqual(self.registry.find_containing(GeoPoint(5, 5)), "Testland")
        self.assertEqual(self.registry.find_containing(GeoPoint(25, 25)), "Farland")

    def test_ocean_is_none(self):
        self.assertIsNone(self.registry.find_containing(GeoPoint(50, 50)))

    def test_repeated_queries_agree(self):
        results = {self.registry.find_containing(GeoPoint(5, 5)) for _ in range(5)}
        self.assertEqual(results, {"Testland"})

    def test_first_registered_wins(self):
        overlap = CountryRegistry()
        overlap.register(Country("A", Polygon((SQUARE,))))
        overlap.register(Country("B", Polygon((ring((-5, -5), (-5, 8), (8, 8), (8, -5)),))))
        self.assertEqual(overlap.find_containing(GeoPoint(5, 5)), "A")
        self.assertEqual(overlap.find_containing(GeoPoint(-2, -2)), "B")

    def test_repeated_names_allowed(self):
        self.registry.register(Country("Testland", Polygon((ring((40, 40), (40, 45), (45, 45)),))))
        self.assertEqual(len(self.registry), 3)
        self.assertEqual(self.registry.names(), ["Testland", "Farland", "Testland"])
        self.assertEqual(self.registry.find_containing(GeoPoint(41, 42)), "Testland")

    def test_empty_name_rejected(self):
        with self.assertRaises(ValueError):
            self.registry.register(Country("", Polygon((SQUARE,))))

    def test_empty_registry(self):
        self.assertIsNone(CountryRegistry().find_containing(GeoPoint(0, 0)))

    def test_parsed_geometry(self):
        geometry = parse_geometry({
            "type": "Polygon",
            "coordinates": [[[0, 0], [0, 10], [10, 10], [10, 0], [0, 0]]],
        })
        registry = CountryRegistry()
        registry.register(Country("Testland", geometry))
        self.assertEqual(registry.find_containing(GeoPoint(5, 5)), "Testland")


class TestResolveClick(unittest.TestCase):

    def setUp(self):
        self.registry = CountryRegistry()
        self.registry.register(Country("Testland", Polygon((SQUARE,))))

    def test_unrotated_surface_point(self):
        point = to_sphere_point(GeoPoint(5, 5))
        self.assertEqual(self.registry.resolve_click(point), "Testland")

    def test_point_off_unit_radius(self):
        point = to_sphere_point(GeoPoint(5, 5), 1.01)
        self.assertEqual(self.registry.resolve_click(point), "Testland")

    def test_rotation_is_undone(self):
        rotation = earth_rotation_matrix(0.4, 1.3)
        world = rotation @ list(to_sphere_point(GeoPoint(5, 5)))
        self.assertEqual(self.registry.resolve_click(world, rotation), "Testland")
        self.assertIsNone(self.registry.resolve_click(world))

    def test_pole_and_origin_do_not_crash(self):
        self.assertIsNone(self.registry.resolve_click((0.0, 1.0, 0.0)))
        self.assertIsNone(self.registry.resolve_click((0.0, 0.0, 0.0)))


if __name__ == '__main__':
    unittest.main()
