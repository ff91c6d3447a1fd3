"""
Mouse/keyboard interaction state for the globe, kept in one object instead
of module globals so the renderer and the label controller can share it.
"""

import math
from typing import Optional, Tuple

import numpy as np

from labels import earth_rotation_matrix


# Radians of globe rotation per pixel dragged
ROTATION_SPEED = 0.005
# Camera distance change per wheel unit
ZOOM_SPEED = 0.001
MIN_CAMERA_DISTANCE = 1.5
MAX_CAMERA_DISTANCE = 5.0
# Max pointer travel (pixels) for a press/release to count as a click
CLICK_THRESHOLD = 5.0


class InteractionState:
    def __init__(self, camera_distance: float = 3.0):
        self.dragging = False
        self.previous_position: Tuple[float, float] = (0.0, 0.0)
        self.mouse_down_position: Tuple[float, float] = (0.0, 0.0)
        self.rotation_x = 0.0
        self.rotation_y = 0.0
        self.camera_distance = camera_distance

    def press(self, x: float, y: float) -> None:
        self.dragging = True
        self.previous_position = (x, y)
        self.mouse_down_position = (x, y)

    def move(self, x: float, y: float) -> None:
        if not self.dragging:
            return
        dx = x - self.previous_position[0]
        dy = y - self.previous_position[1]
        self.rotate(dx * ROTATION_SPEED, dy * ROTATION_SPEED)
        self.previous_position = (x, y)

    def release(self, x: float, y: float) -> bool:
        """End a drag. Returns True when the gesture was a click."""
        self.dragging = False
        distance = math.hypot(x - self.mouse_down_position[0], y - self.mouse_down_position[1])
        return distance < CLICK_THRESHOLD

    def cancel(self) -> None:
        self.dragging = False

    def rotate(self, spin: float, tilt: float) -> None:
        """Spin about the polar (Y) axis and tilt about X, in radians."""
        self.rotation_y += spin
        self.rotation_x += tilt

    def zoom(self, delta: float) -> float:
        self.camera_distance += delta * ZOOM_SPEED
        self.camera_distance = max(MIN_CAMERA_DISTANCE, min(MAX_CAMERA_DISTANCE, self.camera_distance))
        return self.camera_distance

    @property
    def orientation(self) -> np.ndarray:
        return earth_rotation_matrix(self.rotation_x, self.rotation_y)


def intersect_sphere(origin, direction, radius: float = 1.0,
                     center=(0.0, 0.0, 0.0)) -> Optional[np.ndarray]:
    """
    Nearest intersection of a ray with a sphere in front of the ray origin.

    Args:
        origin: Ray origin
        direction: Ray direction (need not be unit length)
        radius: Sphere radius
        center: Sphere center

    Returns:
        Intersection point, or None if the ray misses
    """
    origin = np.asarray(origin, dtype=float)
    direction = np.asarray(direction, dtype=float)
    length = np.linalg.norm(direction)
    if length == 0:
        return None
    direction = direction / length

    oc = origin - np.asarray(center, dtype=float)
    b = np.dot(oc, direction)
    c = np.dot(oc, oc) - radius * radius
    disc = b * b - c
    if disc < 0:
        return None

    root = math.sqrt(disc)
    t = -b - root
    if t < 0:
        t = -b + root
    if t < 0:
        return None
    return origin + t * direction
