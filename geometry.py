"""
Geographic shapes read from GeoJSON: rings, polygons and multipolygons.

Polygon and MultiPolygon share a `polygons` view so that code drawing or
hit-testing a country walks the same nested structure for both.
"""

import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple, Union

from coord import GeoPoint

LOGGER = logging.getLogger(__name__)

Ring = Tuple[GeoPoint, ...]
BBox = Tuple[float, float, float, float]  # (min_lon, min_lat, max_lon, max_lat)


class Polygon(NamedTuple):
    """Outer ring first, holes after."""
    rings: Tuple[Ring, ...]

    type = "Polygon"

    @property
    def polygons(self) -> Tuple["Polygon", ...]:
        return (self,)

    @property
    def outer(self) -> Ring:
        return self.rings[0] if self.rings else ()


class MultiPolygon(NamedTuple):
    polygons: Tuple[Polygon, ...]

    type = "MultiPolygon"


Geometry = Union[Polygon, MultiPolygon]


def ring_bbox(ring: Sequence[GeoPoint]) -> Optional[BBox]:
    if not ring:
        return None
    lons = [p[0] for p in ring]
    lats = [p[1] for p in ring]
    return min(lons), min(lats), max(lons), max(lats)


def geometry_bbox(geometry: Geometry) -> Optional[BBox]:
    """Bounding box of all outer rings, or None for an empty geometry."""
    boxes = [ring_bbox(poly.outer) for poly in geometry.polygons]
    boxes = [b for b in boxes if b is not None]
    if not boxes:
        return None
    return (
        min(b[0] for b in boxes),
        min(b[1] for b in boxes),
        max(b[2] for b in boxes),
        max(b[3] for b in boxes),
    )


def bbox_contains(bbox: Optional[BBox], point: GeoPoint) -> bool:
    if bbox is None:
        return False
    lon, lat = point
    return bbox[0] <= lon <= bbox[2] and bbox[1] <= lat <= bbox[3]


def _sequence(value) -> list:
    """GeoJSON arrays only; anything else reads as empty."""
    return list(value) if isinstance(value, (list, tuple)) else []


def _parse_ring(coords) -> Ring:
    points: List[GeoPoint] = []
    for pair in _sequence(coords):
        if not isinstance(pair, (list, tuple)) or len(pair) < 2:
            continue
        lon, lat = pair[0], pair[1]
        if isinstance(lon, bool) or isinstance(lat, bool):
            continue
        if not isinstance(lon, (int, float)) or not isinstance(lat, (int, float)):
            continue
        points.append(GeoPoint(float(lon), float(lat)))
    return tuple(points)


def _parse_polygon(coords) -> Polygon:
    rings = [ring for ring in _sequence(coords) if isinstance(ring, (list, tuple))]
    return Polygon(tuple(_parse_ring(ring) for ring in rings))


def _parse_multipolygon(coords) -> MultiPolygon:
    polys = [poly for poly in _sequence(coords) if isinstance(poly, (list, tuple))]
    return MultiPolygon(tuple(_parse_polygon(poly) for poly in polys))


_PARSERS = {
    "Polygon": _parse_polygon,
    "MultiPolygon": _parse_multipolygon,
}


def parse_geometry(geometry) -> Optional[Geometry]:
    """
    Build a Polygon or MultiPolygon from a GeoJSON geometry mapping.

    Args:
        geometry: GeoJSON geometry object ({"type": ..., "coordinates": ...})

    Returns:
        Parsed geometry, or None when the type is missing or unsupported
    """
    if not isinstance(geometry, dict):
        return None
    gtype = geometry.get("type")
    parser = _PARSERS.get(gtype) if isinstance(gtype, str) else None
    if parser is None:
        LOGGER.warning("Unsupported geometry type %r, skipping", gtype)
        return None
    return parser(geometry.get("coordinates"))
