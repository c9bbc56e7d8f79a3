"""Tests for environment-based settings."""

import pytest
from unittest.mock import patch

from src.geo_explorer.config import load_settings, parse_extent, parse_viewport
from src.geo_explorer.navigation import DEFAULT_EXTENT, Extent

ENV_VARS = ("GEO_EXPLORER_PROVIDER", "GEO_EXPLORER_VIEWPORT", "GEO_EXPLORER_EXTENT")


@pytest.fixture
def clean_env(monkeypatch):
    """Unset GEO_EXPLORER_* and stop load_dotenv from reading a real .env."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    with patch("src.geo_explorer.config.load_dotenv") as mock_load:
        yield mock_load


class TestParsers:
    def test_parse_viewport(self):
        assert parse_viewport("1600x900") == (1600, 900)
        assert parse_viewport("800X600") == (800, 600)

    @pytest.mark.parametrize("value", ["1600", "axb", "0x600", "100x-5", "1x2x3"])
    def test_parse_viewport_invalid(self, value):
        with pytest.raises(ValueError):
            parse_viewport(value)

    def test_parse_extent(self):
        assert parse_extent("-1, 1, 50, 52") == Extent(lon_min=-1.0, lon_max=1.0, lat_min=50.0, lat_max=52.0)

    @pytest.mark.parametrize("value", ["1,2,3", "a,b,c,d", "1,0,0,1"])
    def test_parse_extent_invalid(self, value):
        with pytest.raises(ValueError):
            parse_extent(value)


class TestLoadSettings:
    def test_defaults(self, clean_env):
        settings = load_settings()

        clean_env.assert_called_once()
        assert settings.provider_name == "OpenStreetMap"
        assert settings.viewport_size == (1200, 800)
        assert settings.extent == DEFAULT_EXTENT

    def test_from_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("GEO_EXPLORER_PROVIDER", "CartoDB Positron")
        monkeypatch.setenv("GEO_EXPLORER_VIEWPORT", "800x600")
        monkeypatch.setenv("GEO_EXPLORER_EXTENT", "2.2,2.5,48.8,48.9")

        settings = load_settings()

        assert settings.provider_name == "CartoDB Positron"
        assert settings.viewport_size == (800, 600)
        assert settings.extent.lon_max == 2.5

    def test_malformed_variable(self, clean_env, monkeypatch):
        monkeypatch.setenv("GEO_EXPLORER_VIEWPORT", "big")
        with pytest.raises(ValueError):
            load_settings()
