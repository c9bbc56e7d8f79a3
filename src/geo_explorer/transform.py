"""Coordinate transforms between WGS84 and Web Mercator."""

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)

# Half the equatorial circumference: +-180 degrees longitude maps to +-R
WEB_MERCATOR_MAX = 20037508.34

# Full equatorial circumference in meters, used by the tile pyramid
EARTH_CIRCUMFERENCE = 40075016.686

TILE_SIZE = 256

# Web Mercator is undefined at the poles; cursor readouts are clamped here
MAX_LATITUDE = 85.0


def wgs84_to_webmercator(lon, lat):
    """
    Convert WGS84 (lon, lat) in degrees to Web Mercator (x, y) in meters.

    Works on scalars and numpy arrays alike. The poles are not trapped:
    -90 gives -inf and +90 a value far off the map, so callers must keep
    input off the poles.

    Args:
        lon: Longitude in degrees
        lat: Latitude in degrees

    Returns:
        Tuple of (x, y) projected coordinates
    """
    x = np.multiply(lon, WEB_MERCATOR_MAX) / 180.0
    with np.errstate(divide="ignore"):
        y = np.log(np.tan((90.0 + np.asarray(lat, dtype=float)) * math.pi / 360.0)) * WEB_MERCATOR_MAX / math.pi

    if np.ndim(x) == 0 and np.ndim(y) == 0:
        return (float(x), float(y))
    return (x, y)


def webmercator_to_wgs84(x, y):
    """
    Convert Web Mercator (x, y) in meters to WGS84 (lon, lat) in degrees.

    Exact inverse of wgs84_to_webmercator for any finite input.

    Args:
        x: Projected x coordinate
        y: Projected y coordinate

    Returns:
        Tuple of (lon, lat) in degrees
    """
    lon = np.multiply(x, 180.0) / WEB_MERCATOR_MAX
    lat = np.degrees(np.arctan(np.sinh(np.multiply(y, math.pi / WEB_MERCATOR_MAX))))

    if np.ndim(lon) == 0 and np.ndim(lat) == 0:
        return (float(lon), float(lat))
    return (lon, lat)


def clamp_latitude(lat: float, limit: float = MAX_LATITUDE) -> float:
    """Clamp a latitude to [-limit, limit]."""
    return max(-limit, min(limit, lat))


def project_coords(coords) -> np.ndarray:
    """
    Project an Nx2 array of (lon, lat) pairs to Web Mercator.

    Args:
        coords: Sequence of (lon, lat) pairs

    Returns:
        Nx2 float array of (x, y) pairs
    """
    points = np.asarray(coords, dtype=float).reshape(-1, 2)
    if len(points) == 0:
        return np.empty((0, 2))

    x, y = wgs84_to_webmercator(points[:, 0], points[:, 1])
    return np.column_stack([x, y])
