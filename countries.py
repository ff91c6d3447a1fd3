"""
Country registry and point-in-polygon hit testing.

Containment only looks at outer rings: a point inside a hole (a lake, an
enclave) still counts as inside the country.
"""

import logging
from typing import Iterator, List, NamedTuple, Optional, Sequence

import numpy as np

from coord import GeoPoint, to_geo_point
from geometry import BBox, Geometry, Polygon, bbox_contains, geometry_bbox

LOGGER = logging.getLogger(__name__)


class Country(NamedTuple):
    name: str
    geometry: Geometry


def point_in_ring(point: GeoPoint, ring: Sequence[GeoPoint]) -> bool:
    """
    Crossing-number test with a horizontal ray cast towards +longitude.

    An edge counts when exactly one endpoint lies strictly above the point's
    latitude, so a vertex on the ray is never counted twice.
    """
    n = len(ring)
    if n < 3:
        return False

    lon, lat = point
    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]
        if (yi > lat) != (yj > lat):
            if lon < (xj - xi) * (lat - yi) / (yj - yi) + xi:
                inside = not inside
        j = i
    return inside


def point_in_polygon(point: GeoPoint, polygon: Polygon) -> bool:
    return point_in_ring(point, polygon.outer)


def point_in_geometry(point: GeoPoint, geometry: Geometry) -> bool:
    return any(point_in_polygon(point, poly) for poly in geometry.polygons)


class CountryRegistry:
    """
    Countries in registration order. The first country containing a point
    wins, so overlapping territories resolve deterministically.
    """

    def __init__(self):
        self._countries: List[Country] = []
        self._bboxes: List[Optional[BBox]] = []

    def __len__(self) -> int:
        return len(self._countries)

    def __iter__(self) -> Iterator[Country]:
        return iter(self._countries)

    def names(self) -> List[str]:
        return [c.name for c in self._countries]

    def register(self, country: Country) -> None:
        if not country.name:
            raise ValueError("country name must be non-empty")
        self._countries.append(country)
        self._bboxes.append(geometry_bbox(country.geometry))

    def find_containing(self, point: GeoPoint) -> Optional[str]:
        """
        Name of the first registered country containing `point`, or None
        for ocean and unclaimed land.
        """
        for country, bbox in zip(self._countries, self._bboxes):
            if not bbox_contains(bbox, point):
                continue
            if point_in_geometry(point, country.geometry):
                return country.name
        return None

    def resolve_click(self, world_point, rotation: Optional[np.ndarray] = None) -> Optional[str]:
        """
        Country under a surface point given in world space.

        Args:
            world_point: Ray/sphere intersection in world coordinates
            rotation: 3x3 matrix currently applied to the globe, if any

        Returns:
            Country name or None
        """
        local = np.asarray(world_point, dtype=float)
        if rotation is not None:
            # Orthonormal, so the transpose undoes it
            local = np.asarray(rotation, dtype=float).T @ local
        norm = np.linalg.norm(local)
        if norm == 0:
            return None
        geo = to_geo_point(local / norm)
        name = self.find_containing(geo)
        LOGGER.debug("Click at lon=%.3f lat=%.3f -> %s", geo.longitude, geo.latitude, name)
        return name
