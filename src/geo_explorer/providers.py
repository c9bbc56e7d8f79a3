"""Basemap tile providers."""

from dataclasses import dataclass
from typing import Optional

ESRI_ATTRIBUTION = "Tiles &copy; Esri"
ESRI_TILE_URL = "https://server.arcgisonline.com/ArcGIS/rest/services/{service}/MapServer/tile/{{z}}/{{y}}/{{x}}"


@dataclass(frozen=True)
class TileProvider:
    """
    A basemap source for the map renderer.

    Built-in MapLibre styles only need style. Raster XYZ sources set
    tiles to the URL template and draw on a blank "white-bg" style.
    """

    name: str
    style: str
    tiles: Optional[str] = None
    attribution: str = ""

    def map_layout(self) -> dict:
        """Return the plotly layout.map fragment that draws this basemap."""
        if self.tiles is None:
            return dict(style=self.style)

        return dict(
            style=self.style,
            layers=[
                dict(
                    below="traces",
                    sourcetype="raster",
                    sourceattribution=self.attribution,
                    source=[self.tiles],
                )
            ],
        )


def _esri(name: str, service: str) -> TileProvider:
    return TileProvider(
        name=name,
        style="white-bg",
        tiles=ESRI_TILE_URL.format(service=service),
        attribution=ESRI_ATTRIBUTION,
    )


OPEN_STREET_MAP = TileProvider(name="OpenStreetMap", style="open-street-map")

_PROVIDERS = [
    OPEN_STREET_MAP,
    _esri("Esri WorldImagery", "World_Imagery"),
    _esri("Esri WorldTopoMap", "World_Topo_Map"),
    _esri("Esri WorldStreetMap", "World_Street_Map"),
    TileProvider(name="CartoDB Positron", style="carto-positron"),
    TileProvider(name="CartoDB DarkMatter", style="carto-darkmatter"),
]


def available_providers() -> list[tuple[str, TileProvider]]:
    """
    List available tile providers as (name, provider) pairs.

    Example:
        providers = available_providers()
        app = explore(provider=providers[1][1])  # Esri WorldImagery
    """
    return [(provider.name, provider) for provider in _PROVIDERS]


def get_provider(name: str) -> TileProvider:
    """
    Look up a provider by name (case-insensitive).

    Raises:
        KeyError: If no provider has this name
    """
    for provider in _PROVIDERS:
        if provider.name.lower() == name.lower():
            return provider
    known = ", ".join(p.name for p in _PROVIDERS)
    raise KeyError(f"Unknown tile provider '{name}'. Available: {known}")
