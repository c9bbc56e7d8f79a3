"""Plotly-based map rendering for GeoExplorer."""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Protocol

import numpy as np
import plotly.graph_objects as go

from src.geo_explorer.geometry import Primitive
from src.geo_explorer.navigation import (
    DEFAULT_VIEWPORT_SIZE,
    BoundingBox,
    ViewRectangle,
    fit_zoom_level,
)
from src.geo_explorer.providers import OPEN_STREET_MAP, TileProvider
from src.geo_explorer.transform import project_coords, webmercator_to_wgs84

logger = logging.getLogger(__name__)

# MapLibre zoom levels are defined on 512px tiles, one level below the 256px pyramid
MAPLIBRE_ZOOM_OFFSET = -1

POINT_COLOR = "red"
LINE_COLOR = "blue"
POLYGON_FILL = "rgba(0, 0, 255, 0.3)"


class Renderer(Protocol):
    """What the navigation and layer code needs from a drawing surface."""

    def draw(self, primitives: list[Primitive], name: Optional[str] = None, **style): ...

    def remove(self, handle) -> None: ...

    def set_visible(self, handle, visible: bool) -> None: ...

    def bounds(self, handle) -> Optional[BoundingBox]: ...

    def apply_view(self, rect: ViewRectangle) -> None: ...

    def resize(self, viewport_size: tuple[int, int]) -> None: ...


@dataclass
class DrawableHandle:
    """Traces drawn for one call to draw(), plus their projected coordinates."""

    uids: tuple[str, ...]
    points: np.ndarray  # Nx2 projected (x, y)


class PlotlyRenderer:
    """
    Draws primitives as Scattermap traces over a tiled basemap.

    The figure is the render surface; apply_view() converts a view
    rectangle to the map's center and zoom.
    """

    def __init__(
        self,
        provider: TileProvider = OPEN_STREET_MAP,
        viewport_size: tuple[int, int] = DEFAULT_VIEWPORT_SIZE,
        title: Optional[str] = None,
    ) -> None:
        self.provider = provider
        self.viewport_size = viewport_size
        self.figure = go.Figure()
        self.figure.update_layout(
            title=title,
            width=viewport_size[0],
            height=viewport_size[1],
            map=provider.map_layout(),
            margin=dict(l=0, r=0, t=40 if title else 0, b=0),
            showlegend=True,
            legend=dict(
                yanchor="top",
                y=0.99,
                xanchor="right",
                x=0.99,
                itemclick="toggle",
                itemdoubleclick="toggleothers",
            ),
        )

    def _trace_uids(self) -> set[str]:
        return {trace.uid for trace in self.figure.data}

    def draw(self, primitives: list[Primitive], name: Optional[str] = None, **style) -> DrawableHandle:
        """
        Add one trace per primitive.

        Args:
            primitives: Flattened geometry to draw
            name: Legend name, shared by all traces of this call
            **style: color, markersize, linewidth, fillcolor overrides

        Returns:
            Handle identifying the new traces
        """
        uids: list[str] = []
        projected: list[np.ndarray] = []
        group = name or f"drawable-{uuid.uuid4().hex[:8]}"

        for primitive in primitives:
            if len(primitive.coords) == 0:
                continue

            uid = uuid.uuid4().hex
            trace = _make_trace(primitive, style)
            trace.update(
                uid=uid,
                name=name or primitive.kind,
                legendgroup=group,
                showlegend=not uids and name is not None,
            )
            self.figure.add_trace(trace)
            uids.append(uid)
            projected.append(project_coords(primitive.coords))

        points = np.vstack(projected) if projected else np.empty((0, 2))
        logger.debug(f"Drew {len(uids)} traces for '{group}'")
        return DrawableHandle(uids=tuple(uids), points=points)

    def remove(self, handle: DrawableHandle) -> None:
        """
        Delete a handle's traces from the figure.

        Raises:
            LookupError: If none of the handle's traces are in the figure
        """
        uids = set(handle.uids)
        if uids and not uids & self._trace_uids():
            raise LookupError(f"Traces not found in figure: {sorted(uids)}")
        self.figure.data = tuple(trace for trace in self.figure.data if trace.uid not in uids)

    def set_visible(self, handle: DrawableHandle, visible: bool) -> None:
        for uid in handle.uids:
            self.figure.update_traces(visible=visible, selector=dict(uid=uid))

    def bounds(self, handle: DrawableHandle) -> Optional[BoundingBox]:
        """Projected bounds of a handle's data, or None if it has no points."""
        if len(handle.points) == 0:
            return None
        return BoundingBox.from_points(handle.points[:, 0], handle.points[:, 1])

    def resize(self, viewport_size: tuple[int, int]) -> None:
        """Match the figure size to a new viewport, in pixels."""
        self.viewport_size = viewport_size
        self.figure.update_layout(width=viewport_size[0], height=viewport_size[1])

    def apply_view(self, rect: ViewRectangle) -> None:
        """Center the map on rect, zoomed so all of it is visible."""
        lon, lat = webmercator_to_wgs84(*rect.center)
        zoom = fit_zoom_level(rect, self.viewport_size) + MAPLIBRE_ZOOM_OFFSET
        self.figure.update_layout(map=dict(center=dict(lon=lon, lat=lat), zoom=zoom))

    def show(self) -> None:
        """Display figure in browser."""
        self.figure.show()

    def export_html(self, output_path: str) -> None:
        """Export figure as standalone HTML file."""
        self.figure.write_html(output_path, include_plotlyjs=True, full_html=True)


def _make_trace(primitive: Primitive, style: dict) -> go.Scattermap:
    lon = primitive.coords[:, 0]
    lat = primitive.coords[:, 1]

    if primitive.kind == "points":
        return go.Scattermap(
            lon=lon,
            lat=lat,
            mode="markers",
            marker=dict(
                size=style.get("markersize", 10),
                color=style.get("color", POINT_COLOR),
            ),
        )

    if primitive.kind == "line":
        return go.Scattermap(
            lon=lon,
            lat=lat,
            mode="lines",
            line=dict(
                color=style.get("color", LINE_COLOR),
                width=style.get("linewidth", 2),
            ),
        )

    if primitive.kind == "polygon":
        return go.Scattermap(
            lon=lon,
            lat=lat,
            mode="lines",
            fill="toself",
            fillcolor=style.get("fillcolor", POLYGON_FILL),
            line=dict(
                color=style.get("color", LINE_COLOR),
                width=style.get("linewidth", 2),
            ),
        )

    raise ValueError(f"Unknown primitive kind: {primitive.kind}")
