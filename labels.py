"""
Country label anchors and the per-frame visibility heuristic.

Labels are only shown once the camera is zoomed in, and then only those on
the hemisphere facing the camera. This is a dot-product test, not an
occlusion raycast, so labels near the visible rim may flicker.
"""

import math
from typing import NamedTuple, Optional, Sequence

import numpy as np

from coord import LABEL_RADIUS, GeoPoint, SpherePoint, to_sphere_point


# Show labels only when the camera is closer than this to the globe center
ZOOM_THRESHOLD = 2.5
# Minimum cosine between camera forward and direction to the label
FACING_THRESHOLD = 0.3
# Labels further than center distance + slack are on the far side
FORWARD_SLACK = 1.5


class LabelAnchor:
    """A country label pinned to the globe. Only `visible` changes."""

    __slots__ = ("country_name", "sphere_position", "visible")

    def __init__(self, country_name: str, sphere_position: SpherePoint, visible: bool = False):
        self.country_name = country_name
        self.sphere_position = sphere_position
        self.visible = visible

    @classmethod
    def at(cls, country_name: str, geo: GeoPoint, radius: float = LABEL_RADIUS) -> "LabelAnchor":
        return cls(country_name, to_sphere_point(geo, radius))

    def __repr__(self):
        return f"LabelAnchor({self.country_name!r}, visible={self.visible})"


class CameraPose(NamedTuple):
    position: np.ndarray
    forward: np.ndarray

    @classmethod
    def looking_at(cls, position, target=(0.0, 0.0, 0.0)) -> "CameraPose":
        position = np.asarray(position, dtype=float)
        forward = np.asarray(target, dtype=float) - position
        return cls(position, forward / np.linalg.norm(forward))


def earth_rotation_matrix(rotation_x: float = 0.0, rotation_y: float = 0.0) -> np.ndarray:
    """
    Local-to-world matrix for a globe spun by Euler angles in XYZ order.

    Args:
        rotation_x: Tilt about the X axis in radians
        rotation_y: Spin about the Y (polar) axis in radians

    Returns:
        3x3 rotation matrix R = Rx @ Ry
    """
    cx, sx = math.cos(rotation_x), math.sin(rotation_x)
    cy, sy = math.cos(rotation_y), math.sin(rotation_y)
    rx = np.array([[1.0, 0.0, 0.0],
                   [0.0, cx, -sx],
                   [0.0, sx, cx]])
    ry = np.array([[cy, 0.0, sy],
                   [0.0, 1.0, 0.0],
                   [-sy, 0.0, cy]])
    return rx @ ry


class LabelVisibilityController:
    def __init__(self, zoom_threshold: float = ZOOM_THRESHOLD,
                 facing_threshold: float = FACING_THRESHOLD,
                 forward_slack: float = FORWARD_SLACK,
                 earth_center=(0.0, 0.0, 0.0)):
        self.zoom_threshold = zoom_threshold
        self.facing_threshold = facing_threshold
        self.forward_slack = forward_slack
        self.earth_center = np.asarray(earth_center, dtype=float)

    def is_zoomed_in(self, camera: CameraPose) -> bool:
        distance = np.linalg.norm(np.asarray(camera.position, dtype=float) - self.earth_center)
        return distance < self.zoom_threshold

    def update(self, anchors: Sequence[LabelAnchor], camera: CameraPose,
               earth_orientation: Optional[np.ndarray] = None) -> Sequence[LabelAnchor]:
        """
        Recompute `visible` on every anchor for the current frame.

        Args:
            anchors: Label anchors in globe-local coordinates
            camera: Camera position and unit forward vector in world space
            earth_orientation: 3x3 local-to-world rotation of the globe

        Returns:
            The same anchors, updated in place
        """
        if not self.is_zoomed_in(camera):
            for anchor in anchors:
                anchor.visible = False
            return anchors

        if not anchors:
            return anchors

        cam_pos = np.asarray(camera.position, dtype=float)
        forward = np.asarray(camera.forward, dtype=float)
        rotation = np.eye(3) if earth_orientation is None else np.asarray(earth_orientation, dtype=float)

        local = np.array([a.sphere_position for a in anchors], dtype=float)
        world = local @ rotation.T + self.earth_center

        offsets = world - cam_pos
        distances = np.linalg.norm(offsets, axis=1)
        safe = np.where(distances == 0, 1.0, distances)
        facing = (offsets / safe[:, None]) @ forward

        center_distance = np.linalg.norm(self.earth_center - cam_pos)
        visible = (facing > self.facing_threshold) & (distances < center_distance + self.forward_slack)

        for anchor, flag in zip(anchors, visible):
            anchor.visible = bool(flag)
        return anchors
