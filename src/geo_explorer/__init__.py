"""GeoExplorer - Interactive map exploration with toggleable vector layers."""

from src.geo_explorer.app import GeoExplorerApp, explore, explore_geometry
from src.geo_explorer.layers import DuplicateLayerError, Layer, LayerRegistry
from src.geo_explorer.navigation import BoundingBox, Extent, NavigationEngine, ViewRectangle
from src.geo_explorer.providers import available_providers
from src.geo_explorer.transform import wgs84_to_webmercator, webmercator_to_wgs84

__all__ = [
    "GeoExplorerApp",
    "explore",
    "explore_geometry",
    "DuplicateLayerError",
    "Layer",
    "LayerRegistry",
    "BoundingBox",
    "Extent",
    "NavigationEngine",
    "ViewRectangle",
    "available_providers",
    "wgs84_to_webmercator",
    "webmercator_to_wgs84",
]
