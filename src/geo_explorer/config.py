"""Application settings loaded from the environment (and .env)."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from src.geo_explorer.navigation import DEFAULT_EXTENT, DEFAULT_VIEWPORT_SIZE, Extent

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_NAME = "OpenStreetMap"


@dataclass
class Settings:
    """Startup configuration for the explorer app."""

    provider_name: str = DEFAULT_PROVIDER_NAME
    viewport_size: tuple[int, int] = DEFAULT_VIEWPORT_SIZE
    extent: Extent = DEFAULT_EXTENT


def parse_viewport(value: str) -> tuple[int, int]:
    """
    Parse a WIDTHxHEIGHT string such as "1200x800".

    Raises:
        ValueError: If the value is malformed or not positive
    """
    try:
        width_str, height_str = value.lower().split("x")
        width, height = int(width_str), int(height_str)
    except ValueError as e:
        raise ValueError(f"Invalid viewport size '{value}', expected WIDTHxHEIGHT") from e

    if width <= 0 or height <= 0:
        raise ValueError(f"Viewport size must be positive, got {value}")
    return (width, height)


def parse_extent(value: str) -> Extent:
    """
    Parse a "lon_min,lon_max,lat_min,lat_max" string.

    Raises:
        ValueError: If the value is malformed or min exceeds max
    """
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 4:
        raise ValueError(f"Invalid extent '{value}', expected lon_min,lon_max,lat_min,lat_max")

    lon_min, lon_max, lat_min, lat_max = (float(p) for p in parts)
    return Extent(lon_min=lon_min, lon_max=lon_max, lat_min=lat_min, lat_max=lat_max)


def load_settings() -> Settings:
    """
    Read settings from GEO_EXPLORER_* environment variables.

    A .env file in the working directory is loaded first. Unset variables
    fall back to the defaults (OpenStreetMap, 1200x800, continental US).

    Raises:
        ValueError: If a variable is set but malformed
    """
    load_dotenv()

    settings = Settings(provider_name=os.getenv("GEO_EXPLORER_PROVIDER", DEFAULT_PROVIDER_NAME))

    viewport = os.getenv("GEO_EXPLORER_VIEWPORT")
    if viewport:
        settings.viewport_size = parse_viewport(viewport)

    extent = os.getenv("GEO_EXPLORER_EXTENT")
    if extent:
        settings.extent = parse_extent(extent)

    logger.debug(f"Loaded settings: {settings}")
    return settings
