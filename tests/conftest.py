"""
Shared pytest fixtures for GeoExplorer tests.

Fixtures here are available to all test files. The renderer is an
external collaborator, so most tests use a MagicMock in its place and
check which calls the core made on it.
"""

import json

import pytest
from unittest.mock import MagicMock

from src.geo_explorer.layers import LayerRegistry
from src.geo_explorer.navigation import BoundingBox, Extent, NavigationEngine


@pytest.fixture
def boulder_extent() -> Extent:
    """Small extent around Boulder, CO."""
    return Extent(lon_min=-105.30, lon_max=-105.25, lat_min=40.00, lat_max=40.03)


@pytest.fixture
def navigation(boulder_extent) -> NavigationEngine:
    """Navigation engine with a 1200x800 viewport over Boulder."""
    return NavigationEngine(boulder_extent, viewport_size=(1200, 800))


@pytest.fixture
def mock_renderer() -> MagicMock:
    """
    Create a mock renderer.

    bounds() reports a 2000 x 1000 m box so zoom-to-layer has something
    to fit; draw() returns a fresh MagicMock handle each call.
    """
    renderer = MagicMock()
    renderer.bounds.return_value = BoundingBox(xmin=0.0, ymin=0.0, xmax=2000.0, ymax=1000.0)
    renderer.draw.side_effect = lambda *args, **kwargs: MagicMock()
    return renderer


@pytest.fixture
def registry(mock_renderer) -> LayerRegistry:
    return LayerRegistry(mock_renderer)


@pytest.fixture
def sample_geojson() -> dict:
    """FeatureCollection with a point, a line and a polygon with a hole."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"name": "Trailhead"},
                "geometry": {"type": "Point", "coordinates": [-105.28, 40.01]},
            },
            {
                "type": "Feature",
                "properties": {"name": "Trail"},
                "geometry": {
                    "type": "LineString",
                    "coordinates": [[-105.28, 40.01], [-105.27, 40.02], [-105.26, 40.02]],
                },
            },
            {
                "type": "Feature",
                "properties": {"name": "Park"},
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [
                        [[-105.30, 40.00], [-105.25, 40.00], [-105.25, 40.03], [-105.30, 40.00]],
                        [[-105.29, 40.005], [-105.28, 40.005], [-105.28, 40.01], [-105.29, 40.005]],
                    ],
                },
            },
        ],
    }


@pytest.fixture
def geojson_file(tmp_path, sample_geojson):
    """Write sample_geojson to a temporary file and return its path."""
    path = tmp_path / "sample.geojson"
    path.write_text(json.dumps(sample_geojson), encoding="utf-8")
    return str(path)
