"""Tests for the plotly renderer and tile providers."""

import math

import numpy as np
import pytest

from src.geo_explorer.geometry import LineString, MultiPoint, Point, Polygon, flatten
from src.geo_explorer.navigation import ViewRectangle, goto_location, meters_per_pixel
from src.geo_explorer.providers import available_providers, get_provider
from src.geo_explorer.renderer import PlotlyRenderer
from src.geo_explorer.transform import wgs84_to_webmercator


@pytest.fixture
def renderer() -> PlotlyRenderer:
    return PlotlyRenderer(viewport_size=(1200, 800))


class TestDraw:
    def test_one_trace_per_primitive(self, renderer):
        prims = flatten(Point((0.0, 0.0))) + flatten(LineString(((0.0, 0.0), (1.0, 1.0))))
        handle = renderer.draw(prims, name="mixed")

        assert len(handle.uids) == 2
        assert len(renderer.figure.data) == 2
        assert [t.mode for t in renderer.figure.data] == ["markers", "lines"]

    def test_default_styles(self, renderer):
        renderer.draw(flatten(Point((0.0, 0.0))))
        renderer.draw(flatten(Polygon(((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0)))))

        point, polygon = renderer.figure.data
        assert point.marker.color == "red"
        assert point.marker.size == 10
        assert polygon.fill == "toself"
        assert polygon.line.color == "blue"

    def test_style_overrides(self, renderer):
        renderer.draw(flatten(Point((0.0, 0.0))), color="green", markersize=4)
        assert renderer.figure.data[0].marker.color == "green"
        assert renderer.figure.data[0].marker.size == 4

    def test_empty_primitives_draw_nothing(self, renderer):
        handle = renderer.draw(flatten(MultiPoint(())))
        assert handle.uids == ()
        assert renderer.bounds(handle) is None


class TestRemoveAndVisibility:
    def test_remove_deletes_only_own_traces(self, renderer):
        keep = renderer.draw(flatten(Point((0.0, 0.0))), name="keep")
        drop = renderer.draw(flatten(Point((1.0, 1.0))), name="drop")

        renderer.remove(drop)

        assert [t.uid for t in renderer.figure.data] == list(keep.uids)

    def test_remove_twice_raises(self, renderer):
        handle = renderer.draw(flatten(Point((0.0, 0.0))))
        renderer.remove(handle)
        with pytest.raises(LookupError):
            renderer.remove(handle)

    def test_set_visible(self, renderer):
        handle = renderer.draw(flatten(Point((0.0, 0.0))))
        renderer.set_visible(handle, False)
        assert renderer.figure.data[0].visible is False
        renderer.set_visible(handle, True)
        assert renderer.figure.data[0].visible is True


class TestBoundsAndView:
    def test_bounds_are_projected(self, renderer):
        handle = renderer.draw(flatten(LineString(((-10.0, -5.0), (10.0, 5.0)))))
        bounds = renderer.bounds(handle)

        xmax, ymax = wgs84_to_webmercator(10.0, 5.0)
        assert bounds.xmax == pytest.approx(xmax)
        assert bounds.ymax == pytest.approx(ymax)
        assert bounds.xmin == pytest.approx(-xmax)

    def test_apply_view_sets_center_and_zoom(self, renderer):
        center = wgs84_to_webmercator(-105.27, 40.01)
        resolution = meters_per_pixel(10)
        rect = ViewRectangle.from_center(center, resolution * 1200, resolution * 800)
        renderer.apply_view(rect)

        layout_map = renderer.figure.layout.map
        assert layout_map.center.lon == pytest.approx(-105.27)
        assert layout_map.center.lat == pytest.approx(40.01)
        # 256px pyramid level 10 is MapLibre level 9
        assert layout_map.zoom == pytest.approx(9.0)

    def test_tall_view_is_not_cropped(self, renderer):
        """A square view in a 3:2 viewport is fitted by its height."""
        rect = goto_location(0.0, 0.0, zoom_level=10, viewport_width=1200)
        renderer.apply_view(rect)

        expected = 10 + math.log2(800 / 1200) - 1
        assert renderer.figure.layout.map.zoom == pytest.approx(expected)

    def test_resize_updates_figure_and_zoom(self, renderer):
        center = (0.0, 0.0)
        resolution = meters_per_pixel(10)
        rect = ViewRectangle.from_center(center, resolution * 600, resolution * 400)

        renderer.resize((600, 400))
        renderer.apply_view(rect)

        assert renderer.viewport_size == (600, 400)
        assert renderer.figure.layout.width == 600
        assert renderer.figure.layout.height == 400
        assert renderer.figure.layout.map.zoom == pytest.approx(9.0)

    def test_export_html(self, renderer, tmp_path):
        renderer.draw(flatten(Point((0.0, 0.0))), name="pt")
        out = tmp_path / "map.html"
        renderer.export_html(str(out))
        assert out.exists()
        assert "plotly" in out.read_text(encoding="utf-8").lower()


class TestProviders:
    def test_expected_providers(self):
        names = [name for name, _ in available_providers()]
        assert names == [
            "OpenStreetMap",
            "Esri WorldImagery",
            "Esri WorldTopoMap",
            "Esri WorldStreetMap",
            "CartoDB Positron",
            "CartoDB DarkMatter",
        ]

    def test_get_provider_case_insensitive(self):
        assert get_provider("cartodb positron").style == "carto-positron"

    def test_get_unknown_provider(self):
        with pytest.raises(KeyError):
            get_provider("Stamen Watercolor")

    def test_raster_provider_layout(self):
        layout = get_provider("Esri WorldImagery").map_layout()
        assert layout["style"] == "white-bg"
        source = layout["layers"][0]["source"][0]
        assert "World_Imagery" in source
        assert source.endswith("{z}/{y}/{x}")

    def test_renderer_uses_provider_style(self):
        renderer = PlotlyRenderer(provider=get_provider("CartoDB DarkMatter"))
        assert renderer.figure.layout.map.style == "carto-darkmatter"

    def test_projected_points_kept_on_handle(self, renderer):
        handle = renderer.draw(flatten(MultiPoint(((0.0, 0.0), (180.0, 0.0)))))
        assert isinstance(handle.points, np.ndarray)
        assert handle.points.shape == (2, 2)
