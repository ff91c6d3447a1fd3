"""
Boundary geometry: country outlines and grid lines traced on the sphere.

Nothing here renders; the line-strips are handed to PyVista by the caller.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
import pyvista as pv

from coord import BORDER_RADIUS, SURFACE_RADIUS, GeoPoint, to_sphere_points
from geometry import Geometry

LOGGER = logging.getLogger(__name__)


# Graticule extent (degrees)
GRATICULE_LAT_LIMIT = 60
GRATICULE_SAMPLES = 100


def build_lines(geometry: Geometry, radius: float = BORDER_RADIUS) -> List[np.ndarray]:
    """
    Project every ring of a geometry onto the sphere.

    Holes are drawn like outer rings. A MultiPolygon yields the strips of
    its polygons in order.

    Args:
        geometry: Polygon or MultiPolygon
        radius: Sphere radius for the overlay

    Returns:
        List of (N, 3) arrays, one per ring
    """
    strips = []
    for polygon in geometry.polygons:
        for ring in polygon.rings:
            if not ring:
                continue
            strips.append(to_sphere_points(ring, radius))
    return strips


def compute_centroid(geometry: Geometry) -> Optional[GeoPoint]:
    """
    Average of the first outer ring's coordinates.

    Not area weighted, only meant for placing a label.
    """
    if not geometry.polygons:
        return None
    outer = geometry.polygons[0].outer
    if not outer:
        return None
    lon = sum(p[0] for p in outer) / len(outer)
    lat = sum(p[1] for p in outer) / len(outer)
    return GeoPoint(lon, lat)


def build_graticule(step: int = 30, radius: float = SURFACE_RADIUS) -> List[np.ndarray]:
    """
    Latitude/longitude grid lines as sphere line-strips.

    Parallels run from -GRATICULE_LAT_LIMIT to +GRATICULE_LAT_LIMIT, meridians
    go pole to pole.
    """
    strips = []

    lons = np.linspace(-180.0, 180.0, 2 * GRATICULE_SAMPLES + 1)
    for lat in range(-GRATICULE_LAT_LIMIT, GRATICULE_LAT_LIMIT + 1, step):
        coords = np.column_stack([lons, np.full_like(lons, lat)])
        strips.append(to_sphere_points(coords, radius))

    lats = np.linspace(-90.0, 90.0, GRATICULE_SAMPLES)
    for lon in range(-180, 180, step):
        coords = np.column_stack([np.full_like(lats, lon), lats])
        strips.append(to_sphere_points(coords, radius))

    return strips


def lines_to_polydata(strips: Sequence[np.ndarray]) -> Optional[pv.PolyData]:
    """
    Merge line-strips into a single PyVista polyline mesh.

    Strips with fewer than 2 points cannot form a line and are skipped.

    Returns:
        PolyData with one polyline cell per strip, or None if nothing is drawable
    """
    points = []
    cells = []
    offset = 0
    for strip in strips:
        strip = np.asarray(strip, dtype=float)
        if len(strip) < 2:
            continue
        points.append(strip)
        cells.append(np.concatenate([[len(strip)], np.arange(offset, offset + len(strip))]))
        offset += len(strip)

    if not points:
        return None

    mesh = pv.PolyData()
    mesh.points = np.vstack(points)
    mesh.lines = np.concatenate(cells).astype(np.int64)
    LOGGER.debug("Merged %d strips (%d points) into one polyline mesh", len(cells), offset)
    return mesh
