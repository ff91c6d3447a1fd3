"""
Loading country boundaries from GeoJSON.

The loader starts EMPTY and moves once to LOADED or FAILED. Observers are
told about that transition; a failed load leaves an empty registry so the
globe keeps working without borders or click lookups.
"""

import json
import logging
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np
import requests

from borders import build_lines, compute_centroid
from coord import BORDER_RADIUS, LABEL_RADIUS
from countries import Country, CountryRegistry
from geometry import parse_geometry
from labels import LabelAnchor

LOGGER = logging.getLogger(__name__)


COUNTRIES_URL = "https://raw.githubusercontent.com/datasets/geo-countries/master/data/countries.geojson"
FETCH_TIMEOUT = 30

EMPTY = "empty"
LOADED = "loaded"
FAILED = "failed"


class GlobeData:
    def __init__(self, lines: Optional[List[np.ndarray]] = None,
                 registry: Optional[CountryRegistry] = None,
                 anchors: Optional[List[LabelAnchor]] = None):
        self.lines = lines if lines is not None else []
        self.registry = registry if registry is not None else CountryRegistry()
        self.anchors = anchors if anchors is not None else []


def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def fetch_geojson(source: str = COUNTRIES_URL, cache_path: Optional[str] = None,
                  timeout: float = FETCH_TIMEOUT) -> dict:
    """
    Read a GeoJSON document from a URL or a local file.

    Args:
        source: URL or file path
        cache_path: Where to keep a downloaded copy; reused when it exists
        timeout: Request timeout in seconds

    Returns:
        Decoded JSON document

    Raises:
        requests.RequestException: download failed
        OSError: file could not be read or written
        ValueError: content is not valid JSON
    """
    if not _is_url(source):
        LOGGER.info("Reading boundaries from %s", source)
        return json.loads(Path(source).read_text(encoding="utf-8"))

    if cache_path and Path(cache_path).exists():
        LOGGER.info("Using cached boundaries: %s", cache_path)
        return json.loads(Path(cache_path).read_text(encoding="utf-8"))

    LOGGER.info("Downloading boundaries from %s", source)
    response = requests.get(source, timeout=timeout)
    response.raise_for_status()
    data = response.json()

    if cache_path:
        Path(cache_path).write_text(response.text, encoding="utf-8")
        LOGGER.info("Cached boundaries to %s", cache_path)
    return data


def feature_name(feature: dict) -> Optional[str]:
    """ADMIN first, then name; empty values count as missing."""
    props = feature.get("properties")
    if not isinstance(props, dict):
        props = {}
    for key in ("ADMIN", "name"):
        value = props.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def parse_feature_collection(data: dict, border_radius: float = BORDER_RADIUS,
                             label_radius: float = LABEL_RADIUS) -> GlobeData:
    """
    Build border lines, the country registry and label anchors.

    Unnamed features are still drawn but never registered or labelled.
    """
    if not isinstance(data, dict) or not isinstance(data.get("features"), list):
        raise ValueError("not a GeoJSON FeatureCollection")

    globe = GlobeData()
    skipped = 0
    for feature in data["features"]:
        if not isinstance(feature, dict):
            skipped += 1
            continue
        geometry = parse_geometry(feature.get("geometry"))
        if geometry is None:
            skipped += 1
            continue

        globe.lines.extend(build_lines(geometry, border_radius))

        name = feature_name(feature)
        if name is None:
            LOGGER.debug("Feature without a name: drawn but not registered")
            continue

        globe.registry.register(Country(name, geometry))
        centroid = compute_centroid(geometry)
        if centroid is not None:
            globe.anchors.append(LabelAnchor.at(name, centroid, label_radius))

    LOGGER.info("Parsed %d countries, %d border lines (%d features skipped)",
                len(globe.registry), len(globe.lines), skipped)
    return globe


class CountryDataLoader:
    def __init__(self, source: str = COUNTRIES_URL, cache_path: Optional[str] = None,
                 timeout: float = FETCH_TIMEOUT):
        self.source = source
        self.cache_path = cache_path
        self.timeout = timeout
        self.state = EMPTY
        self.data = GlobeData()
        self.error: Optional[Exception] = None
        self._observers: List[Callable[["CountryDataLoader"], None]] = []

    @property
    def registry(self) -> CountryRegistry:
        return self.data.registry

    def subscribe(self, callback: Callable[["CountryDataLoader"], None]) -> None:
        """Call `callback(loader)` on the transition, or now if it already happened."""
        if self.state != EMPTY:
            callback(self)
            return
        self._observers.append(callback)

    def load(self) -> str:
        """Fetch and parse once. Returns the resulting state."""
        if self.state != EMPTY:
            return self.state

        try:
            raw = fetch_geojson(self.source, self.cache_path, self.timeout)
            self.data = parse_feature_collection(raw)
        except (requests.RequestException, OSError, ValueError) as exc:
            LOGGER.error("Error loading country borders: %s", exc)
            self.error = exc
            self.data = GlobeData()
            self.state = FAILED
        else:
            self.state = LOADED

        observers, self._observers = self._observers, []
        for callback in observers:
            callback(self)
        return self.state
