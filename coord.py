"""
Spherical projection between geographic coordinates and points on the globe.

The globe is Y-up: the north pole sits at (0, R, 0), longitude 0 on the
equator maps to +X and longitude 90 maps to -Z.
"""

import math
from typing import NamedTuple

import numpy as np


# Sphere radii: surface, border overlay and label overlay (avoids z-fighting)
SURFACE_RADIUS = 1.0
BORDER_RADIUS = 1.01
LABEL_RADIUS = 1.02


class GeoPoint(NamedTuple):
    longitude: float
    latitude: float


class SpherePoint(NamedTuple):
    x: float
    y: float
    z: float

    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)


def normalize_geo(lon: float, lat: float) -> GeoPoint:
    """Wrap longitude into [-180, 180] and clamp latitude into [-90, 90]."""
    if lon < -180.0 or lon > 180.0:
        lon = (lon + 180.0) % 360.0 - 180.0
    lat = max(-90.0, min(90.0, lat))
    return GeoPoint(lon, lat)


def to_sphere_point(geo: GeoPoint, radius: float = SURFACE_RADIUS) -> SpherePoint:
    """
    Convert a geographic point to a 3D point on a sphere.

    Args:
        geo: (longitude, latitude) in degrees
        radius: Sphere radius

    Returns:
        SpherePoint at distance `radius` from the origin
    """
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")

    lon, lat = normalize_geo(geo[0], geo[1])
    phi = math.radians(90.0 - lat)
    theta = math.radians(lon + 180.0)

    x = -radius * math.sin(phi) * math.cos(theta)
    y = radius * math.cos(phi)
    z = radius * math.sin(phi) * math.sin(theta)

    return SpherePoint(x, y, z)


def to_sphere_points(coords, radius: float = SURFACE_RADIUS) -> np.ndarray:
    """
    Convert geographic coordinates to sphere points (vectorized).

    Args:
        coords: Array-like of shape (N, 2) with [lon, lat] rows in degrees
        radius: Sphere radius

    Returns:
        NumPy array of shape (N, 3) with [x, y, z] rows
    """
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")

    coords = np.asarray(coords, dtype=float).reshape(-1, 2)
    lon = coords[:, 0]
    lon = np.where((lon < -180.0) | (lon > 180.0), (lon + 180.0) % 360.0 - 180.0, lon)
    lat = np.clip(coords[:, 1], -90.0, 90.0)

    phi = np.radians(90.0 - lat)
    theta = np.radians(lon + 180.0)
    sin_phi = np.sin(phi)

    x = -radius * sin_phi * np.cos(theta)
    y = radius * np.cos(phi)
    z = radius * sin_phi * np.sin(theta)

    return np.column_stack([x, y, z])


def to_geo_point(point) -> GeoPoint:
    """
    Inverse projection of a point on the unit sphere.

    Near the poles the longitude is not well defined; whatever atan2 yields
    is returned.
    """
    x, y, z = point[0], point[1], point[2]
    y = max(-1.0, min(1.0, y))
    lat = math.degrees(math.asin(y))
    # atan2(z, -x) recovers theta = lon + 180; shift back by half a turn
    lon = math.degrees(math.atan2(-z, x))
    return GeoPoint(lon, lat)
