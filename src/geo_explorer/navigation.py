"""View-rectangle algebra for pan, zoom, goto and fit-to-bounds navigation."""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from src.geo_explorer.transform import (
    EARTH_CIRCUMFERENCE,
    TILE_SIZE,
    clamp_latitude,
    wgs84_to_webmercator,
    webmercator_to_wgs84,
)

logger = logging.getLogger(__name__)

# Discrete navigation steps used by keyboard shortcuts and map buttons
PAN_STEP = 0.1
ZOOM_IN_FACTOR = 0.8
ZOOM_OUT_FACTOR = 1.25
DEFAULT_GOTO_ZOOM = 10
DEFAULT_VIEWPORT_SIZE = (1200, 800)

# Minimum span (degrees) substituted for zero-size data bounds
MIN_SPAN_DEGREES = 0.01

PAN_DIRECTIONS = {
    "up": (0.0, PAN_STEP),
    "down": (0.0, -PAN_STEP),
    "left": (-PAN_STEP, 0.0),
    "right": (PAN_STEP, 0.0),
}


@dataclass(frozen=True)
class Extent:
    """Geographic bounding box in degrees."""

    lon_min: float
    lon_max: float
    lat_min: float
    lat_max: float

    def __post_init__(self) -> None:
        if self.lon_min > self.lon_max or self.lat_min > self.lat_max:
            raise ValueError(
                f"Extent minimum exceeds maximum: lon=({self.lon_min}, {self.lon_max}), "
                f"lat=({self.lat_min}, {self.lat_max})"
            )

    @classmethod
    def from_bounds(cls, lon_min: float, lat_min: float, lon_max: float, lat_max: float) -> "Extent":
        """Create an extent from (west, south, east, north) bounds."""
        return cls(lon_min=lon_min, lon_max=lon_max, lat_min=lat_min, lat_max=lat_max)

    def padded(self, padding: float, min_pad: float = MIN_SPAN_DEGREES) -> "Extent":
        """
        Grow the extent by a fraction of its span on every side.

        A zero span (e.g. a single point) is padded by min_pad degrees
        instead, so the result always has a positive area.

        Args:
            padding: Fraction of the span added on each side (0.1 = 10%)
            min_pad: Padding in degrees used when an axis has zero span

        Returns:
            New padded Extent
        """
        xpad = (self.lon_max - self.lon_min) * padding
        ypad = (self.lat_max - self.lat_min) * padding
        xpad = min_pad if xpad == 0 else xpad
        ypad = min_pad if ypad == 0 else ypad
        return Extent(
            lon_min=self.lon_min - xpad,
            lon_max=self.lon_max + xpad,
            lat_min=self.lat_min - ypad,
            lat_max=self.lat_max + ypad,
        )


# Continental US, the default initial view
DEFAULT_EXTENT = Extent(lon_min=-125.0, lon_max=-65.0, lat_min=24.0, lat_max=50.0)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned data bounds in projected meters. Zero size is allowed."""

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def center(self) -> tuple[float, float]:
        return ((self.xmin + self.xmax) / 2, (self.ymin + self.ymax) / 2)

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Return the combined extent of two bounding boxes."""
        return BoundingBox(
            xmin=min(self.xmin, other.xmin),
            ymin=min(self.ymin, other.ymin),
            xmax=max(self.xmax, other.xmax),
            ymax=max(self.ymax, other.ymax),
        )

    @classmethod
    def from_points(cls, xs, ys) -> "BoundingBox":
        """Create a bounding box from arrays of x and y coordinates."""
        return cls(
            xmin=float(np.nanmin(xs)),
            ymin=float(np.nanmin(ys)),
            xmax=float(np.nanmax(xs)),
            ymax=float(np.nanmax(ys)),
        )


@dataclass(frozen=True)
class ViewRectangle:
    """Visible map region in Web Mercator meters, origin at the lower-left corner."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if not (self.width > 0 and self.height > 0):
            raise ValueError(f"View size must be positive, got {self.width} x {self.height}")

    @property
    def xmax(self) -> float:
        return self.x + self.width

    @property
    def ymax(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, bounds: BoundingBox) -> bool:
        """Check whether the bounds lie entirely inside this rectangle."""
        return (
            self.x <= bounds.xmin
            and self.y <= bounds.ymin
            and bounds.xmax <= self.xmax
            and bounds.ymax <= self.ymax
        )

    @classmethod
    def from_center(cls, center: tuple[float, float], width: float, height: float) -> "ViewRectangle":
        cx, cy = center
        return cls(x=cx - width / 2, y=cy - height / 2, width=width, height=height)


# ---------------------------------------------------------------------------
# Pure operations
# ---------------------------------------------------------------------------


def extent_to_view(extent: Extent) -> ViewRectangle:
    """
    Project a geographic extent to a view rectangle.

    Only the min and max corners are projected, so the result depends on
    nothing but the extent itself.
    """
    xmin, ymin = wgs84_to_webmercator(extent.lon_min, extent.lat_min)
    xmax, ymax = wgs84_to_webmercator(extent.lon_max, extent.lat_max)
    return ViewRectangle(x=xmin, y=ymin, width=xmax - xmin, height=ymax - ymin)


def visible_extent(rect: ViewRectangle) -> Extent:
    """Inverse-project a view rectangle to a geographic extent."""
    lon_min, lat_min = webmercator_to_wgs84(rect.x, rect.y)
    lon_max, lat_max = webmercator_to_wgs84(rect.xmax, rect.ymax)
    return Extent(lon_min=lon_min, lon_max=lon_max, lat_min=lat_min, lat_max=lat_max)


def pan(rect: ViewRectangle, dx_fraction: float, dy_fraction: float) -> ViewRectangle:
    """Shift the rectangle by fractions of its own width and height."""
    cx, cy = rect.center
    new_center = (cx + dx_fraction * rect.width, cy + dy_fraction * rect.height)
    return set_center(rect, new_center)


def zoom(rect: ViewRectangle, factor: float) -> ViewRectangle:
    """
    Scale the rectangle about its center.

    Args:
        rect: Current view
        factor: < 1 zooms in, > 1 zooms out

    Raises:
        ValueError: If factor is not positive
    """
    if factor <= 0:
        raise ValueError(f"Zoom factor must be positive, got {factor}")
    return ViewRectangle.from_center(rect.center, rect.width * factor, rect.height * factor)


def set_center(rect: ViewRectangle, center: tuple[float, float]) -> ViewRectangle:
    """Translate the rectangle so its center is at the given projected point."""
    return ViewRectangle.from_center(center, rect.width, rect.height)


def meters_per_pixel(zoom_level: int) -> float:
    """Ground resolution at the equator for a tile-pyramid zoom level."""
    return EARTH_CIRCUMFERENCE / (TILE_SIZE * 2.0 ** zoom_level)


def goto_location(
    lon: float,
    lat: float,
    zoom_level: int = DEFAULT_GOTO_ZOOM,
    viewport_width: int = DEFAULT_VIEWPORT_SIZE[0],
) -> ViewRectangle:
    """
    Build a square view centered on a geographic location.

    The half-extent is the ground resolution at zoom_level times half the
    viewport width in pixels. zoom_level is not validated.

    Args:
        lon: Longitude in degrees
        lat: Latitude in degrees
        zoom_level: Tile-pyramid zoom level (conventionally 0-20)
        viewport_width: Viewport width in pixels

    Returns:
        Square ViewRectangle of side 2 * half_extent
    """
    center = wgs84_to_webmercator(lon, lat)
    half_extent = meters_per_pixel(zoom_level) * (viewport_width / 2)
    return ViewRectangle.from_center(center, 2 * half_extent, 2 * half_extent)


def zoom_level(rect: ViewRectangle, viewport_width: int = DEFAULT_VIEWPORT_SIZE[0]) -> float:
    """Tile-pyramid zoom level at which the rectangle spans viewport_width pixels."""
    return math.log2(EARTH_CIRCUMFERENCE * viewport_width / (TILE_SIZE * rect.width))


def fit_zoom_level(rect: ViewRectangle, viewport_size: tuple[int, int]) -> float:
    """Largest zoom level at which the whole rectangle fits in the viewport."""
    width_px, height_px = viewport_size
    by_height = math.log2(EARTH_CIRCUMFERENCE * height_px / (TILE_SIZE * rect.height))
    return min(zoom_level(rect, width_px), by_height)


def fit_to_bounds(bounds: BoundingBox, target_aspect: float, padding: float = 0.1) -> ViewRectangle:
    """
    Fit a view around data bounds at a fixed aspect ratio.

    The bounds are padded by padding * width and padding * height on each
    side, then one axis is expanded (never shrunk) until
    width / height == target_aspect. The center stays fixed, so the result
    always contains the padded bounds.

    Args:
        bounds: Data bounds in projected meters
        target_aspect: Desired width / height ratio
        padding: Fraction of the data size added on each side

    Raises:
        ValueError: If the bounds have zero width or height. Callers must
            substitute a minimum size first (see ensure_min_size).
    """
    if bounds.width <= 0 or bounds.height <= 0:
        raise ValueError(f"Cannot fit zero-size bounds: {bounds}")
    if target_aspect <= 0:
        raise ValueError(f"Aspect ratio must be positive, got {target_aspect}")

    width = bounds.width * (1 + 2 * padding)
    height = bounds.height * (1 + 2 * padding)

    if width / height < target_aspect:
        width = height * target_aspect
    else:
        height = width / target_aspect

    return ViewRectangle.from_center(bounds.center, width, height)


def ensure_min_size(bounds: BoundingBox, min_degrees: float = MIN_SPAN_DEGREES) -> BoundingBox:
    """
    Replace a zero span on either axis with min_degrees around the center.

    The minimum is applied in geographic degrees and projected back, so a
    single point gets a sensible footprint at any latitude.
    """
    if bounds.width > 0 and bounds.height > 0:
        return bounds

    lon_min, lat_min = webmercator_to_wgs84(bounds.xmin, bounds.ymin)
    lon_max, lat_max = webmercator_to_wgs84(bounds.xmax, bounds.ymax)
    if bounds.width <= 0:
        lon_min -= min_degrees
        lon_max += min_degrees
    if bounds.height <= 0:
        lat_min -= min_degrees
        lat_max += min_degrees

    xmin, ymin = wgs84_to_webmercator(lon_min, lat_min)
    xmax, ymax = wgs84_to_webmercator(lon_max, lat_max)
    return BoundingBox(xmin=xmin, ymin=ymin, xmax=xmax, ymax=ymax)


def screen_to_data(
    rect: ViewRectangle,
    viewport_size: tuple[int, int],
    px: float,
    py: float,
) -> Optional[tuple[float, float]]:
    """
    Map a pixel position (origin top-left) to a projected point.

    Returns:
        (x, y) in projected meters, or None if the pixel is outside the viewport
    """
    width_px, height_px = viewport_size
    if not (0 <= px <= width_px and 0 <= py <= height_px):
        return None
    x = rect.x + px / width_px * rect.width
    y = rect.ymax - py / height_px * rect.height
    return (x, y)


def cursor_to_geographic(
    screen_to_data_fn: Callable[[tuple[float, float]], Optional[tuple[float, float]]],
    raw_position: tuple[float, float],
) -> Optional[tuple[float, float]]:
    """
    Convert a raw pointer position to (lon, lat) with latitude clamped to +-85.

    Args:
        screen_to_data_fn: Maps a raw position to projected (x, y), or None
            when the pointer is off the map
        raw_position: Raw pointer position as reported by the UI

    Returns:
        (lon, lat) in degrees, or None if the pointer is off the map
    """
    data_pos = screen_to_data_fn(raw_position)
    if data_pos is None:
        return None

    lon, lat = webmercator_to_wgs84(*data_pos)
    return (lon, clamp_latitude(lat))


# ---------------------------------------------------------------------------
# Stateful engine
# ---------------------------------------------------------------------------


class NavigationEngine:
    """
    Owns the current view rectangle and the extent it was initialized from.

    Every mutation replaces the rectangle and notifies listeners with the
    new value, which is how the renderer learns what to draw.
    """

    def __init__(
        self,
        extent: Extent = DEFAULT_EXTENT,
        viewport_size: tuple[int, int] = DEFAULT_VIEWPORT_SIZE,
    ) -> None:
        self._listeners: list[Callable[[ViewRectangle], None]] = []
        self._resize_listeners: list[Callable[[tuple[int, int]], None]] = []
        self._extent = extent
        self._viewport_size = viewport_size
        self._view = extent_to_view(extent)

    @property
    def view(self) -> ViewRectangle:
        return self._view

    @property
    def extent(self) -> Extent:
        return self._extent

    @property
    def viewport_size(self) -> tuple[int, int]:
        return self._viewport_size

    @property
    def aspect(self) -> float:
        """Viewport width / height in pixels."""
        width_px, height_px = self._viewport_size
        return width_px / height_px

    @property
    def zoom_level(self) -> int:
        """Current view expressed as a rounded tile-pyramid zoom level."""
        return round(zoom_level(self._view, self._viewport_size[0]))

    def add_listener(self, callback: Callable[[ViewRectangle], None]) -> None:
        """Register a callback invoked with the new ViewRectangle after each change."""
        self._listeners.append(callback)

    def add_resize_listener(self, callback: Callable[[tuple[int, int]], None]) -> None:
        """
        Register a callback invoked with the new (width, height) in pixels.

        Resize listeners run before the view listeners are told about the
        rectangle that goes with the new size.
        """
        self._resize_listeners.append(callback)

    def initialize(
        self,
        extent: Extent,
        viewport_size: Optional[tuple[int, int]] = None,
    ) -> ViewRectangle:
        """Replace the stored extent (and optionally viewport size) and show it."""
        self._extent = extent
        if viewport_size is not None and viewport_size != self._viewport_size:
            self._viewport_size = viewport_size
            logger.debug(f"Viewport resized to {viewport_size[0]} x {viewport_size[1]}")
            for callback in self._resize_listeners:
                callback(viewport_size)
        return self.set_view(extent_to_view(extent))

    def set_view(self, rect: ViewRectangle) -> ViewRectangle:
        """Make rect the current view and notify listeners."""
        self._view = rect
        logger.debug(
            f"View: origin=({rect.x:.1f}, {rect.y:.1f}) size={rect.width:.1f} x {rect.height:.1f}"
        )
        for callback in self._listeners:
            callback(rect)
        return rect

    def pan(self, dx_fraction: float, dy_fraction: float) -> ViewRectangle:
        return self.set_view(pan(self._view, dx_fraction, dy_fraction))

    def pan_step(self, direction: str) -> ViewRectangle:
        """
        Pan one discrete step (10% of the view) in a named direction.

        Raises:
            ValueError: If direction is not up, down, left or right
        """
        if direction not in PAN_DIRECTIONS:
            raise ValueError(f"Unknown pan direction: {direction}")
        dx, dy = PAN_DIRECTIONS[direction]
        return self.pan(dx, dy)

    def zoom(self, factor: float) -> ViewRectangle:
        return self.set_view(zoom(self._view, factor))

    def zoom_in(self) -> ViewRectangle:
        return self.zoom(ZOOM_IN_FACTOR)

    def zoom_out(self) -> ViewRectangle:
        return self.zoom(ZOOM_OUT_FACTOR)

    def set_center(self, center: tuple[float, float]) -> ViewRectangle:
        return self.set_view(set_center(self._view, center))

    def reset(self) -> ViewRectangle:
        """Return to the stored extent, independent of navigation history."""
        return self.set_view(extent_to_view(self._extent))

    def goto(self, lon: float, lat: float, zoom_level: int = DEFAULT_GOTO_ZOOM) -> ViewRectangle:
        logger.info(f"Going to ({lon:.4f}, {lat:.4f}) at zoom {zoom_level}")
        return self.set_view(goto_location(lon, lat, zoom_level, self._viewport_size[0]))

    def fit_to_bounds(
        self,
        bounds: BoundingBox,
        padding: float = 0.1,
        aspect: Optional[float] = None,
    ) -> ViewRectangle:
        """Fit the view around bounds, defaulting to the viewport's aspect ratio."""
        target = self.aspect if aspect is None else aspect
        return self.set_view(fit_to_bounds(bounds, target, padding))

    def visible_extent(self) -> Extent:
        return visible_extent(self._view)
