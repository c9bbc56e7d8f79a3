"""Vector geometry model and GeoJSON loading.

Geometries are a closed set of plain dataclasses (a tagged union). Code
that needs to draw them calls flatten(), which walks multi-part
geometries, collections and features recursively and yields primitive
drawables: point sets, lines and polygon rings. Coordinates are
(lon, lat) pairs in degrees, GeoJSON order.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import numpy as np

from src.geo_explorer.navigation import Extent

logger = logging.getLogger(__name__)

Coord = tuple[float, float]


@dataclass(frozen=True)
class Point:
    coord: Coord


@dataclass(frozen=True)
class MultiPoint:
    coords: tuple[Coord, ...]


@dataclass(frozen=True)
class LineString:
    coords: tuple[Coord, ...]


@dataclass(frozen=True)
class MultiLineString:
    lines: tuple[LineString, ...]


@dataclass(frozen=True)
class Polygon:
    """Polygon with an exterior ring and optional holes."""

    exterior: tuple[Coord, ...]
    holes: tuple[tuple[Coord, ...], ...] = ()


@dataclass(frozen=True)
class MultiPolygon:
    polygons: tuple[Polygon, ...]


@dataclass(frozen=True)
class GeometryCollection:
    geometries: tuple["Geometry", ...]


@dataclass(frozen=True)
class Feature:
    geometry: Optional["Geometry"]
    properties: dict = field(default_factory=dict, hash=False, compare=False)


@dataclass(frozen=True)
class FeatureCollection:
    features: tuple[Feature, ...]


Geometry = Union[
    Point,
    MultiPoint,
    LineString,
    MultiLineString,
    Polygon,
    MultiPolygon,
    GeometryCollection,
    Feature,
    FeatureCollection,
]


@dataclass
class Primitive:
    """A single drawable: kind is "points", "line" or "polygon"."""

    kind: str
    coords: np.ndarray  # Nx2 array of (lon, lat)


def flatten(geometry: Geometry) -> list[Primitive]:
    """
    Flatten any geometry into primitive drawables.

    Polygons contribute their exterior ring only. Features without a
    geometry contribute nothing.

    Raises:
        TypeError: If geometry is not one of the model's variants
    """
    if isinstance(geometry, Point):
        return [Primitive("points", _as_array([geometry.coord]))]
    if isinstance(geometry, MultiPoint):
        return [Primitive("points", _as_array(geometry.coords))]
    if isinstance(geometry, LineString):
        return [Primitive("line", _as_array(geometry.coords))]
    if isinstance(geometry, Polygon):
        return [Primitive("polygon", _as_array(geometry.exterior))]

    if isinstance(geometry, MultiLineString):
        parts: tuple = geometry.lines
    elif isinstance(geometry, MultiPolygon):
        parts = geometry.polygons
    elif isinstance(geometry, GeometryCollection):
        parts = geometry.geometries
    elif isinstance(geometry, Feature):
        parts = (geometry.geometry,) if geometry.geometry is not None else ()
    elif isinstance(geometry, FeatureCollection):
        parts = geometry.features
    else:
        raise TypeError(f"Unsupported geometry type: {type(geometry).__name__}")

    primitives: list[Primitive] = []
    for part in parts:
        primitives.extend(flatten(part))
    return primitives


def geometry_extent(geometry: Geometry) -> Optional[Extent]:
    """
    Compute the geographic bounding box of a geometry.

    Returns:
        Extent covering every coordinate, or None if the geometry is empty
    """
    arrays = [p.coords for p in flatten(geometry) if len(p.coords) > 0]
    if not arrays:
        return None

    coords = np.vstack(arrays)
    return Extent(
        lon_min=float(coords[:, 0].min()),
        lon_max=float(coords[:, 0].max()),
        lat_min=float(coords[:, 1].min()),
        lat_max=float(coords[:, 1].max()),
    )


def _as_array(coords) -> np.ndarray:
    if len(coords) == 0:
        return np.empty((0, 2))
    # Drop altitude if present
    return np.asarray([c[:2] for c in coords], dtype=float)


# ---------------------------------------------------------------------------
# GeoJSON
# ---------------------------------------------------------------------------


def _coord(raw: Any) -> Coord:
    return (float(raw[0]), float(raw[1]))


def _ring(raw: Any) -> tuple[Coord, ...]:
    return tuple(_coord(c) for c in raw)


def _polygon(raw: Any) -> Polygon:
    if not raw:
        return Polygon(exterior=())
    return Polygon(exterior=_ring(raw[0]), holes=tuple(_ring(r) for r in raw[1:]))


def from_geojson(obj: dict) -> Geometry:
    """
    Build a geometry from a parsed GeoJSON object.

    Args:
        obj: GeoJSON geometry, Feature or FeatureCollection mapping

    Returns:
        The corresponding Geometry variant

    Raises:
        ValueError: If the object type is missing or unsupported, or its
            coordinates are malformed
    """
    if not isinstance(obj, dict):
        raise ValueError(f"GeoJSON object must be a mapping, got {type(obj).__name__}")

    geom_type = obj.get("type")
    try:
        if geom_type == "Point":
            return Point(_coord(obj["coordinates"]))
        if geom_type == "MultiPoint":
            return MultiPoint(_ring(obj["coordinates"]))
        if geom_type == "LineString":
            return LineString(_ring(obj["coordinates"]))
        if geom_type == "MultiLineString":
            return MultiLineString(tuple(LineString(_ring(line)) for line in obj["coordinates"]))
        if geom_type == "Polygon":
            return _polygon(obj["coordinates"])
        if geom_type == "MultiPolygon":
            return MultiPolygon(tuple(_polygon(p) for p in obj["coordinates"]))
    except (KeyError, IndexError, TypeError) as e:
        raise ValueError(f"Malformed {geom_type} coordinates: {e}") from e

    if geom_type == "GeometryCollection":
        return GeometryCollection(tuple(from_geojson(g) for g in obj.get("geometries", [])))
    if geom_type == "Feature":
        raw_geometry = obj.get("geometry")
        return Feature(
            geometry=from_geojson(raw_geometry) if raw_geometry is not None else None,
            properties=obj.get("properties") or {},
        )
    if geom_type == "FeatureCollection":
        return FeatureCollection(tuple(from_geojson(f) for f in obj.get("features", [])))

    raise ValueError(f"Unsupported GeoJSON type: {geom_type!r}")


def load_geojson(path: str) -> Geometry:
    """
    Load a geometry from a GeoJSON file.

    Args:
        path: Path to a .geojson / .json file

    Returns:
        Parsed Geometry

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file cannot be parsed
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"GeoJSON file not found: {path}")

    with open(path, "r", encoding="utf-8") as geojson_file:
        try:
            data = json.load(geojson_file)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse GeoJSON file: {e}") from e

    geometry = from_geojson(data)
    logger.info(f"Loaded {type(geometry).__name__} from {path}: {len(flatten(geometry))} primitives")
    return geometry
