#!/usr/bin/env python3
"""
Interactive 3D Globe with Country Borders
Draws GeoJSON country outlines on a sphere with PyVista, shows country
labels when zoomed in, and reports the country under a left click.

Usage:
    pip install -e .
    python globe.py
    python globe.py --source countries.geojson --no-graticule
    python globe.py --query 2.35 48.85      # headless lookup, no window
    python globe.py --list-countries

Controls:
    Left-drag:   Rotate the globe
    Left-click:  Identify country
    Hover:       Marker on the surface under the pointer
    Arrow keys:  Spin / tilt the globe
    Scroll:      Zoom in/out (labels appear when close)
    Q or ESC:    Close window
"""

import argparse
import logging
import sys
from typing import List, Optional

import numpy as np
import pyvista as pv

from borders import build_graticule, lines_to_polydata
from coord import SURFACE_RADIUS, GeoPoint
from geodata import COUNTRIES_URL, CountryDataLoader
from interaction import InteractionState, intersect_sphere
from labels import CameraPose, LabelVisibilityController
from logging_config import setup_logging

LOGGER = logging.getLogger(__name__)


# ============================================================================
# CONFIGURATION
# ============================================================================

CACHE_PATH = "countries.geojson"

SPHERE_RESOLUTION = 64
WINDOW_SIZE = (1600, 1600)
CAMERA_DISTANCE = 3.0

SPHERE_COLOR = '#1a1a2e'   # Dark blue
BORDER_COLOR = 'white'
BORDER_OPACITY = 0.3
BORDER_WIDTH = 1.0
GRID_COLOR = 'gray'
GRID_OPACITY = 0.4
GRID_STEP = 30
LABEL_COLOR = 'white'
LABEL_FONT_SIZE = 12

KEY_ROTATION_STEP = 0.05   # Radians per arrow key press
WHEEL_STEP = 100           # Zoom units per wheel notch

MARKER_COLOR = 'yellow'
MARKER_RADIUS = 0.02

# Mouse events handled here instead of by the default camera style
MOUSE_EVENTS = (
    "LeftButtonPressEvent",
    "LeftButtonReleaseEvent",
    "MouseMoveEvent",
    "MouseWheelForwardEvent",
    "MouseWheelBackwardEvent",
)


def dolly(position, focal_point, distance: float) -> np.ndarray:
    """Point at `distance` from `focal_point` along the current view line."""
    focal = np.asarray(focal_point, dtype=float)
    offset = np.asarray(position, dtype=float) - focal
    length = np.linalg.norm(offset)
    if length == 0:
        offset, length = np.array([0.0, 0.0, 1.0]), 1.0
    return focal + offset / length * distance


class GlobeViewer:
    def __init__(self, loader: CountryDataLoader, show_graticule: bool = True,
                 off_screen: bool = False):
        self.loader = loader
        self.show_graticule = show_graticule
        self.state = InteractionState(camera_distance=CAMERA_DISTANCE)
        self.visibility = LabelVisibilityController()
        self.plotter = pv.Plotter(window_size=WINDOW_SIZE, off_screen=off_screen)
        self.plotter.set_background('black')
        self.earth_actors = []
        self.marker = None
        self._shown_labels: Optional[tuple] = None

        loader.subscribe(self._on_data_loaded)

    # --- Scene -------------------------------------------------------------

    def _add_earth_mesh(self, mesh, **kwargs):
        actor = self.plotter.add_mesh(mesh, **kwargs)
        self.earth_actors.append(actor)
        return actor

    def build_scene(self) -> None:
        sphere = pv.Sphere(
            radius=SURFACE_RADIUS,
            theta_resolution=SPHERE_RESOLUTION,
            phi_resolution=SPHERE_RESOLUTION,
            direction=(0, 1, 0),
        )
        self._add_earth_mesh(sphere, color=SPHERE_COLOR, smooth_shading=True, name='sphere')

        if self.show_graticule:
            grid = lines_to_polydata(build_graticule(GRID_STEP, SURFACE_RADIUS * 1.001))
            if grid is not None:
                self._add_earth_mesh(grid, color=GRID_COLOR, opacity=GRID_OPACITY,
                                     line_width=1, name='graticule')

        self.marker = self.plotter.add_mesh(pv.Sphere(radius=MARKER_RADIUS), color=MARKER_COLOR,
                                            name='marker')
        self.marker.visibility = False

        # Y is up (north pole at top), camera on +Z looking at the center
        self.plotter.camera_position = [
            (0, 0, self.state.camera_distance),
            (0, 0, 0),
            (0, 1, 0),
        ]

    def _on_data_loaded(self, loader: CountryDataLoader) -> None:
        if loader.error is not None:
            LOGGER.warning("Continuing without borders: %s", loader.error)
            return
        borders = lines_to_polydata(loader.data.lines)
        if borders is not None:
            self._add_earth_mesh(borders, color=BORDER_COLOR, opacity=BORDER_OPACITY,
                                 line_width=BORDER_WIDTH, name='borders')
        LOGGER.info("Globe ready: %d countries, %d labels",
                    len(loader.registry), len(loader.data.anchors))

    # --- Per-frame updates -------------------------------------------------

    def camera_pose(self) -> CameraPose:
        camera = self.plotter.camera
        return CameraPose(np.array(camera.position, dtype=float),
                          np.array(camera.GetDirectionOfProjection(), dtype=float))

    def apply_rotation(self) -> None:
        matrix = np.eye(4)
        matrix[:3, :3] = self.state.orientation
        for actor in self.earth_actors:
            actor.user_matrix = matrix

    def update_labels(self) -> None:
        anchors = self.loader.data.anchors
        rotation = self.state.orientation
        self.visibility.update(anchors, self.camera_pose(), rotation)

        visible = [a for a in anchors if a.visible]
        key = (tuple(a.country_name for a in visible), self.state.rotation_x, self.state.rotation_y)
        if key == self._shown_labels:
            return
        self._shown_labels = key

        if not visible:
            self.plotter.remove_actor('labels', render=False)
            return

        points = np.array([a.sphere_position for a in visible], dtype=float) @ rotation.T
        self.plotter.add_point_labels(
            points,
            [a.country_name for a in visible],
            name='labels',
            font_size=LABEL_FONT_SIZE,
            text_color=LABEL_COLOR,
            shape=None,
            show_points=False,
            always_visible=False,
            render=False,
        )

    # --- Events ------------------------------------------------------------

    def _event_position(self):
        # VTK counts pixels from the bottom; drag deltas use screen-down y
        x, y = self.plotter.iren.get_event_position()
        return x, self.plotter.window_size[1] - y

    def _on_press(self, *args) -> None:
        self.state.press(*self._event_position())

    def _on_release(self, *args) -> None:
        x, y = self.plotter.iren.get_event_position()
        if self.state.release(*self._event_position()):
            self.identify(x, y)

    def _on_move(self, *args) -> None:
        if self.state.dragging:
            self.state.move(*self._event_position())
            self.apply_rotation()
            self.update_labels()
        else:
            x, y = self.plotter.iren.get_event_position()
            self.hover(x, y)
        self.plotter.render()

    def _on_leave(self, *args) -> None:
        self.state.cancel()
        if self.marker is not None:
            self.marker.visibility = False
        self.plotter.render()

    def _wheel(self, delta: float):
        def callback(*args):
            distance = self.state.zoom(delta)
            camera = self.plotter.camera
            camera.position = tuple(dolly(camera.position, camera.focal_point, distance))
            self.update_labels()
            self.plotter.render()
        return callback

    def _spin(self, spin: float, tilt: float):
        def callback():
            self.state.rotate(spin, tilt)
            self.apply_rotation()
            self.update_labels()
            self.plotter.render()
        return callback

    def display_ray(self, x: float, y: float):
        """World-space ray through a display pixel (near plane to far plane)."""
        renderer = self.plotter.renderer
        ends = []
        for depth in (0.0, 1.0):
            renderer.SetDisplayPoint(x, y, depth)
            renderer.DisplayToWorld()
            wx, wy, wz, w = renderer.GetWorldPoint()
            ends.append(np.array([wx, wy, wz]) / (w if w else 1.0))
        return ends[0], ends[1] - ends[0]

    def hover(self, x: float, y: float) -> Optional[np.ndarray]:
        """Move the marker to the surface point under the pointer."""
        origin, direction = self.display_ray(x, y)
        hit = intersect_sphere(origin, direction, SURFACE_RADIUS)
        if self.marker is not None:
            self.marker.visibility = hit is not None
            if hit is not None:
                self.marker.position = tuple(hit)
        return hit

    def identify(self, x: float, y: float) -> Optional[str]:
        origin, direction = self.display_ray(x, y)
        hit = intersect_sphere(origin, direction, SURFACE_RADIUS)
        if hit is None:
            return None

        name = self.loader.registry.resolve_click(hit, self.state.orientation)
        if name:
            LOGGER.info("Clicked on: %s", name)
            message = f"Country: {name}"
        else:
            LOGGER.info("Clicked on ocean or unknown area")
            message = "Ocean or unknown area"
        self.plotter.add_text(message, position='upper_left', font_size=14,
                              color='white', name='selection')
        self.plotter.render()
        return name

    def connect(self) -> None:
        """Route mouse input through InteractionState and bind the arrow keys."""
        iren = self.plotter.iren
        for event in MOUSE_EVENTS:
            iren.interactor.RemoveObservers(event)

        iren.add_observer("LeftButtonPressEvent", self._on_press)
        iren.add_observer("LeftButtonReleaseEvent", self._on_release)
        iren.add_observer("MouseMoveEvent", self._on_move)
        iren.add_observer("MouseWheelForwardEvent", self._wheel(-WHEEL_STEP))
        iren.add_observer("MouseWheelBackwardEvent", self._wheel(WHEEL_STEP))
        iren.add_observer("LeaveEvent", self._on_leave)

        self.plotter.add_key_event("Left", self._spin(-KEY_ROTATION_STEP, 0.0))
        self.plotter.add_key_event("Right", self._spin(KEY_ROTATION_STEP, 0.0))
        self.plotter.add_key_event("Up", self._spin(0.0, -KEY_ROTATION_STEP))
        self.plotter.add_key_event("Down", self._spin(0.0, KEY_ROTATION_STEP))

    def show(self) -> None:
        self.build_scene()
        self.loader.load()
        self.apply_rotation()
        self.connect()
        self.update_labels()
        self.plotter.show(title="Country Globe")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Interactive 3D globe with GeoJSON country borders',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--source', '-s',
        type=str,
        default=COUNTRIES_URL,
        help='GeoJSON URL or file path (default: geo-countries dataset)'
    )

    parser.add_argument(
        '--cache', '-c',
        type=str,
        default=CACHE_PATH,
        help=f'Where to cache a downloaded GeoJSON (default: {CACHE_PATH})'
    )

    parser.add_argument(
        '--no-graticule',
        action='store_true',
        help='Hide latitude/longitude grid lines'
    )

    parser.add_argument(
        '--query', '-q',
        type=float,
        nargs=2,
        metavar=('LON', 'LAT'),
        help='Print the country at LON LAT and exit'
    )

    parser.add_argument(
        '--list-countries',
        action='store_true',
        help='Print the loaded country names and exit'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO)'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    loader = CountryDataLoader(args.source, cache_path=args.cache or None)

    if args.query:
        lon, lat = args.query
        loader.load()
        name = loader.registry.find_containing(GeoPoint(lon, lat))
        print(name if name else "No country found")
        return 0

    if args.list_countries:
        loader.load()
        for name in loader.registry.names():
            print(name)
        return 0

    print("=" * 60)
    print("CONTROLS:")
    print("  Left-drag:  Rotate the globe")
    print("  Left-click: Identify country")
    print("  Hover:      Marker under the pointer")
    print("  Arrows:     Spin / tilt the globe")
    print("  Scroll:     Zoom in/out (labels appear when close)")
    print("  Q or ESC:   Close window")
    print("=" * 60)

    viewer = GlobeViewer(loader, show_graticule=not args.no_graticule)
    viewer.show()
    return 0


if __name__ == "__main__":
    sys.exit(main())
