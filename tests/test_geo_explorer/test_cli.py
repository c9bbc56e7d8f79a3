"""Tests for the command-line entry point."""

import pytest
from unittest.mock import patch

from src.geo_explorer.cli import build_parser, main


@pytest.fixture(autouse=True)
def quiet_startup(monkeypatch):
    """Skip file logging and .env loading for CLI runs."""
    for var in ("GEO_EXPLORER_PROVIDER", "GEO_EXPLORER_VIEWPORT", "GEO_EXPLORER_EXTENT"):
        monkeypatch.delenv(var, raising=False)
    with patch("src.geo_explorer.cli.setup_logging"), patch("src.geo_explorer.config.load_dotenv"):
        yield


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.path is None
        assert args.zoom == 10
        assert args.padding == 0.1
        assert args.export is None

    def test_goto_and_extent(self):
        args = build_parser().parse_args(["--goto", "-105.27", "40.01", "--extent", "-1", "1", "50", "52"])
        assert args.goto == [-105.27, 40.01]
        assert args.extent == [-1.0, 1.0, 50.0, 52.0]


class TestMain:
    def test_list_providers(self, capsys):
        main(["--list-providers"])
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "OpenStreetMap"
        assert "Esri WorldImagery" in out

    def test_export_geojson(self, geojson_file, tmp_path, capsys):
        out = tmp_path / "map.html"
        main([geojson_file, "--export", str(out)])

        assert out.exists()
        assert "Exported to" in capsys.readouterr().out

    def test_export_with_goto(self, tmp_path):
        out = tmp_path / "map.html"
        with patch("src.geo_explorer.renderer.PlotlyRenderer.apply_view") as apply_view:
            main(["--goto", "2.35", "48.85", "--zoom", "12", "--export", str(out)])

        # Initial view, then the goto
        assert apply_view.call_count == 2
        assert out.exists()

    def test_show_opens_browser(self):
        with patch("src.geo_explorer.renderer.PlotlyRenderer.show") as show:
            main([])
        show.assert_called_once()

    def test_missing_file_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing.geojson")])

        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_unknown_provider_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--provider", "Nope"])

        assert exc_info.value.code == 1
        assert "Unknown tile provider" in capsys.readouterr().err

    def test_inverted_extent_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["--extent", "10", "0", "0", "1"])
        assert exc_info.value.code == 1
