"""Ordered, name-keyed registry of map overlay layers."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional, Union

from src.geo_explorer.navigation import ViewRectangle, ensure_min_size

if TYPE_CHECKING:
    from src.geo_explorer.navigation import NavigationEngine
    from src.geo_explorer.renderer import Renderer

logger = logging.getLogger(__name__)

LAYER_ADDED = "added"
LAYER_REMOVED = "removed"
LAYER_TOGGLED = "toggled"


class DuplicateLayerError(ValueError):
    """Raised when adding a layer whose name is already registered."""


@dataclass(eq=False)
class Layer:
    """A named overlay. handle refers to drawables owned by the renderer."""

    name: str
    handle: Any
    visible: bool = True


class LayerRegistry:
    """
    Layers in insertion order with unique names.

    The registry never draws. It tells the renderer to hide, show or
    dispose of a layer's handle and notifies listeners after each change.
    """

    def __init__(self, renderer: Optional["Renderer"] = None) -> None:
        self.renderer = renderer
        self._layers: list[Layer] = []
        self._listeners: list[Callable[[str, Layer], None]] = []

    def __iter__(self) -> Iterator[Layer]:
        return iter(list(self._layers))

    def __len__(self) -> int:
        return len(self._layers)

    def __contains__(self, name: object) -> bool:
        return self.get(name) is not None if isinstance(name, str) else name in self._layers

    def names(self) -> list[str]:
        return [layer.name for layer in self._layers]

    def add_listener(self, callback: Callable[[str, Layer], None]) -> None:
        """Register callback(event, layer), called after add, remove and toggle."""
        self._listeners.append(callback)

    def _notify(self, event: str, layer: Layer) -> None:
        for callback in self._listeners:
            callback(event, layer)

    def get(self, name: str) -> Optional[Layer]:
        """Return the first layer with this name, or None."""
        for layer in self._layers:
            if layer.name == name:
                return layer
        return None

    def _resolve(self, layer_or_name: Union[Layer, str]) -> Optional[Layer]:
        if isinstance(layer_or_name, Layer):
            for layer in self._layers:
                if layer is layer_or_name:
                    return layer
            return None
        return self.get(layer_or_name)

    def add(self, name: str, handle: Any, visible: bool = True) -> Layer:
        """
        Append a layer.

        Args:
            name: Unique layer name
            handle: Renderer drawable(s) making up the layer
            visible: Initial visibility

        Returns:
            The new Layer

        Raises:
            DuplicateLayerError: If a layer with this name already exists
        """
        if self.get(name) is not None:
            raise DuplicateLayerError(f"Layer already exists: {name}")

        if not visible and self.renderer is not None:
            self.renderer.set_visible(handle, False)

        layer = Layer(name=name, handle=handle, visible=visible)
        self._layers.append(layer)

        logger.info(f"Added layer '{name}' (visible={visible})")
        self._notify(LAYER_ADDED, layer)
        return layer

    def remove(self, layer_or_name: Union[Layer, str]) -> Optional[Layer]:
        """
        Remove a layer and dispose of its drawables.

        Disposal is best-effort: renderer errors are logged and the layer is
        removed anyway. Removing an unknown layer does nothing.

        Returns:
            The removed Layer, or None if it wasn't registered
        """
        layer = self._resolve(layer_or_name)
        if layer is None:
            logger.debug(f"Layer not found for removal: {layer_or_name}")
            return None

        if self.renderer is not None:
            try:
                self.renderer.remove(layer.handle)
            except Exception as e:
                logger.warning(f"Failed to dispose drawables of layer '{layer.name}': {e}")

        self._layers.remove(layer)
        logger.info(f"Removed layer '{layer.name}'")
        self._notify(LAYER_REMOVED, layer)
        return layer

    def set_visible(self, layer_or_name: Union[Layer, str], visible: bool) -> Optional[Layer]:
        """Show or hide a layer. Returns None if the layer isn't registered."""
        layer = self._resolve(layer_or_name)
        if layer is None:
            return None

        if self.renderer is not None:
            self.renderer.set_visible(layer.handle, visible)
        layer.visible = visible

        logger.debug(f"Layer '{layer.name}' visible={visible}")
        self._notify(LAYER_TOGGLED, layer)
        return layer

    def toggle(self, layer_or_name: Union[Layer, str]) -> Optional[Layer]:
        """Flip a layer's visibility. Returns None if the layer isn't registered."""
        layer = self._resolve(layer_or_name)
        if layer is None:
            return None
        return self.set_visible(layer, not layer.visible)

    def zoom_to(
        self,
        layer_or_name: Union[Layer, str],
        navigation: "NavigationEngine",
        padding: float = 0.1,
    ) -> Optional[ViewRectangle]:
        """
        Fit the view to a layer's data bounds.

        Layers that are unknown, or whose drawables report no bounds, are
        ignored.

        Returns:
            The new ViewRectangle, or None if nothing changed
        """
        layer = self._resolve(layer_or_name)
        if layer is None or self.renderer is None:
            return None

        bounds = self.renderer.bounds(layer.handle)
        if bounds is None:
            logger.debug(f"Layer '{layer.name}' has no bounds, not zooming")
            return None

        return navigation.fit_to_bounds(ensure_min_size(bounds), padding=padding)
