"""GeoExplorer application context: navigation, layers and renderer in one place."""

import logging
from typing import Any, Callable, Optional, Union

from src.geo_explorer.geometry import Geometry, flatten, geometry_extent
from src.geo_explorer.layers import DuplicateLayerError, Layer, LayerRegistry
from src.geo_explorer.navigation import (
    DEFAULT_EXTENT,
    DEFAULT_GOTO_ZOOM,
    DEFAULT_VIEWPORT_SIZE,
    Extent,
    NavigationEngine,
    ViewRectangle,
    cursor_to_geographic,
    screen_to_data,
)
from src.geo_explorer.providers import OPEN_STREET_MAP, TileProvider
from src.geo_explorer.renderer import PlotlyRenderer, Renderer

logger = logging.getLogger(__name__)

HELP_TEXT = """Keyboard Shortcuts
Arrow Keys    Pan
+/-           Zoom
Home          Reset
Scroll        Zoom
Drag          Pan"""

# Key name -> (action, argument)
KEY_BINDINGS: dict[str, tuple[str, Any]] = {
    "up": ("pan", "up"),
    "down": ("pan", "down"),
    "left": ("pan", "left"),
    "right": ("pan", "right"),
    "equal": ("zoom_in", None),
    "=": ("zoom_in", None),
    "+": ("zoom_in", None),
    "kp_add": ("zoom_in", None),
    "minus": ("zoom_out", None),
    "-": ("zoom_out", None),
    "kp_subtract": ("zoom_out", None),
    "home": ("reset", None),
}

NAV_BUTTONS = ("zoom_in", "zoom_out", "home", "help")


class GeoExplorerApp:
    """
    Single owner of the view state, layer registry and render surface.

    Created by explore(); UI glue translates events into calls on this
    object. Every view change is pushed to the renderer through a
    navigation listener.
    """

    def __init__(
        self,
        navigation: NavigationEngine,
        renderer: Renderer,
        provider: TileProvider = OPEN_STREET_MAP,
    ) -> None:
        self.navigation = navigation
        self.renderer = renderer
        self.layers = LayerRegistry(renderer)
        self.provider = provider
        self.cursor_pos: tuple[float, float] = (0.0, 0.0)
        self.help_visible = False

        navigation.add_resize_listener(renderer.resize)
        navigation.add_listener(renderer.apply_view)
        renderer.resize(navigation.viewport_size)
        renderer.apply_view(navigation.view)

    @property
    def extent(self) -> Extent:
        return self.navigation.extent

    @property
    def view(self) -> ViewRectangle:
        return self.navigation.view

    # -- Geometry -----------------------------------------------------------

    def plot_geometry(self, geometry: Geometry, name: Optional[str] = None, **style):
        """
        Draw a geometry on the map.

        Args:
            geometry: Any geometry variant (point, line, polygon, multi-part,
                collection, feature)
            name: If given, the drawing is registered as a layer of this name
            **style: Renderer style overrides (color, markersize, ...)

        Returns:
            The renderer handle for the drawing

        Raises:
            DuplicateLayerError: If name is already taken; nothing is drawn
        """
        if name is not None and name in self.layers:
            raise DuplicateLayerError(f"Layer already exists: {name}")

        handle = self.renderer.draw(flatten(geometry), name=name, **style)
        if name is not None:
            self.layers.add(name, handle)
        return handle

    # -- Navigation ---------------------------------------------------------

    def pan(self, dx_fraction: float, dy_fraction: float) -> ViewRectangle:
        return self.navigation.pan(dx_fraction, dy_fraction)

    def zoom(self, factor: float) -> ViewRectangle:
        return self.navigation.zoom(factor)

    def zoom_in(self) -> ViewRectangle:
        return self.navigation.zoom_in()

    def zoom_out(self) -> ViewRectangle:
        return self.navigation.zoom_out()

    def set_center(self, center: tuple[float, float]) -> ViewRectangle:
        return self.navigation.set_center(center)

    def reset_view(self) -> ViewRectangle:
        return self.navigation.reset()

    def goto(self, lon: float, lat: float, zoom: int = DEFAULT_GOTO_ZOOM) -> ViewRectangle:
        return self.navigation.goto(lon, lat, zoom)

    # -- Layers -------------------------------------------------------------

    def add_layer(self, name: str, handle: Any, visible: bool = True) -> Layer:
        return self.layers.add(name, handle, visible)

    def remove_layer(self, layer_or_name: Union[Layer, str]) -> Optional[Layer]:
        return self.layers.remove(layer_or_name)

    def toggle_layer(self, layer_or_name: Union[Layer, str]) -> Optional[Layer]:
        return self.layers.toggle(layer_or_name)

    def zoom_to_layer(self, layer_or_name: Union[Layer, str], padding: float = 0.1) -> Optional[ViewRectangle]:
        return self.layers.zoom_to(layer_or_name, self.navigation, padding)

    # -- Input --------------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """
        Apply the navigation bound to a key press.

        Returns:
            True if the key is bound, False if it was ignored
        """
        binding = KEY_BINDINGS.get(key.lower())
        if binding is None:
            return False

        action, arg = binding
        if action == "pan":
            self.navigation.pan_step(arg)
        elif action == "zoom_in":
            self.navigation.zoom_in()
        elif action == "zoom_out":
            self.navigation.zoom_out()
        elif action == "reset":
            self.navigation.reset()
        return True

    def click(self, button: str) -> None:
        """
        Handle a map navigation button.

        Raises:
            ValueError: If button is not one of NAV_BUTTONS
        """
        if button == "zoom_in":
            self.navigation.zoom_in()
        elif button == "zoom_out":
            self.navigation.zoom_out()
        elif button == "home":
            self.navigation.reset()
        elif button == "help":
            self.help_visible = not self.help_visible
        else:
            raise ValueError(f"Unknown navigation button: {button}")

    def screen_to_data(self, raw_position: tuple[float, float]) -> Optional[tuple[float, float]]:
        """Map a pixel position in the viewport to projected coordinates."""
        px, py = raw_position
        return screen_to_data(self.navigation.view, self.navigation.viewport_size, px, py)

    def update_cursor(
        self,
        raw_position: tuple[float, float],
        screen_to_data_fn: Optional[Callable] = None,
    ) -> Optional[tuple[float, float]]:
        """
        Update the cursor readout from a raw pointer position.

        Positions off the map leave the readout unchanged.

        Args:
            raw_position: Pointer position as reported by the UI
            screen_to_data_fn: Converter to projected coordinates; defaults
                to the viewport mapping of the current view

        Returns:
            The new (lon, lat), or None if the pointer is off the map
        """
        pos = cursor_to_geographic(screen_to_data_fn or self.screen_to_data, raw_position)
        if pos is not None:
            self.cursor_pos = pos
        return pos

    def status_lines(self) -> list[str]:
        """Lines shown in the status box: cursor position and zoom level."""
        lon, lat = self.cursor_pos
        return [
            f"({lon:.4f}°, {lat:.4f}°)",
            f"Zoom: {self.navigation.zoom_level}",
        ]

    # -- Providers ----------------------------------------------------------

    def set_provider(self, provider: TileProvider) -> None:
        """
        Request a different basemap provider.

        The basemap can't be swapped on a running map, so this only warns.
        """
        logger.warning(
            f"Changing tile provider to '{provider.name}' requires restarting the application. "
            "Use explore(provider=...) instead."
        )


def explore(
    extent: Extent = DEFAULT_EXTENT,
    provider: TileProvider = OPEN_STREET_MAP,
    viewport_size: tuple[int, int] = DEFAULT_VIEWPORT_SIZE,
    renderer: Optional[Renderer] = None,
    title: Optional[str] = None,
) -> GeoExplorerApp:
    """
    Create a GeoExplorer application.

    Args:
        extent: Initial map extent (default: continental US)
        provider: Basemap tile provider (default: OpenStreetMap)
        viewport_size: Render surface size in pixels (width, height)
        renderer: Render surface; a PlotlyRenderer is created if omitted
        title: Figure title for the default renderer

    Returns:
        The application instance

    Example:
        app = explore()
        app = explore(extent=Extent(lon_min=-0.1, lon_max=0.1, lat_min=51.4, lat_max=51.6))
    """
    if renderer is None:
        renderer = PlotlyRenderer(provider=provider, viewport_size=viewport_size, title=title)

    navigation = NavigationEngine(extent, viewport_size)
    logger.info(f"Exploring {extent} with {provider.name} tiles")
    return GeoExplorerApp(navigation, renderer, provider)


def explore_geometry(
    geometry: Geometry,
    padding: float = 0.1,
    name: Optional[str] = None,
    **kw,
) -> GeoExplorerApp:
    """
    Create a GeoExplorer application framed around a geometry and draw it.

    The initial extent is the geometry's bounding box padded by padding
    on each side; a zero span (e.g. a single point) is padded by 0.01
    degrees.

    Args:
        geometry: Geometry to show
        padding: Fractional padding around the geometry extent
        name: Layer name for the geometry (unregistered if None)
        **kw: Passed through to explore()

    Raises:
        ValueError: If the geometry has no coordinates
    """
    ext = geometry_extent(geometry)
    if ext is None:
        raise ValueError("Cannot explore an empty geometry")

    app = explore(extent=ext.padded(padding), **kw)
    app.plot_geometry(geometry, name=name)
    return app
