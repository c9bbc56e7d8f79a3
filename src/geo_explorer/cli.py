"""Command-line interface for GeoExplorer."""

import argparse
import logging
import sys

from src.logging_config import setup_logging
from src.geo_explorer.app import explore, explore_geometry
from src.geo_explorer.config import load_settings
from src.geo_explorer.geometry import load_geojson
from src.geo_explorer.navigation import DEFAULT_GOTO_ZOOM, Extent
from src.geo_explorer.providers import available_providers, get_provider


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="GeoExplorer - Interactive map exploration with vector overlays",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Open the default view (continental US) in the browser
  uv run python -m src.geo_explorer

  # Show a GeoJSON file framed to its extent
  uv run python -m src.geo_explorer data/trails.geojson

  # Satellite imagery around Boulder, CO
  uv run python -m src.geo_explorer --provider "Esri WorldImagery" --goto -105.27 40.01 --zoom 13

  # Export to HTML file
  uv run python -m src.geo_explorer data/trails.geojson --export map.html
        """,
    )

    parser.add_argument(
        "path",
        type=str,
        nargs="?",
        help="Path to a GeoJSON file to plot",
    )
    parser.add_argument(
        "--extent",
        type=float,
        nargs=4,
        metavar=("LON_MIN", "LON_MAX", "LAT_MIN", "LAT_MAX"),
        help="Initial extent in degrees (ignored when a file is given)",
    )
    parser.add_argument(
        "--provider",
        type=str,
        default=None,
        help="Basemap tile provider name (see --list-providers)",
    )
    parser.add_argument(
        "--list-providers",
        action="store_true",
        help="List available tile providers and exit",
    )
    parser.add_argument(
        "--goto",
        type=float,
        nargs=2,
        metavar=("LON", "LAT"),
        help="Center the map on a location after loading",
    )
    parser.add_argument(
        "--zoom",
        type=int,
        default=DEFAULT_GOTO_ZOOM,
        help=f"Zoom level used with --goto (default: {DEFAULT_GOTO_ZOOM})",
    )
    parser.add_argument(
        "--padding",
        type=float,
        default=0.1,
        help="Fractional padding around a plotted file's extent (default: 0.1)",
    )
    parser.add_argument(
        "--name",
        type=str,
        default=None,
        help="Layer name for the plotted file (default: file name)",
    )
    parser.add_argument(
        "--export",
        type=str,
        metavar="FILE",
        help="Export to HTML file instead of opening browser",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for GeoExplorer CLI."""
    args = build_parser().parse_args(argv)

    if args.list_providers:
        for name, _ in available_providers():
            print(name)
        return

    # Setup logging
    setup_logging()
    if args.verbose:
        logging.getLogger("src.geo_explorer").setLevel(logging.DEBUG)

    logger = logging.getLogger(__name__)

    try:
        settings = load_settings()
        provider = get_provider(args.provider or settings.provider_name)
        options = dict(provider=provider, viewport_size=settings.viewport_size)

        if args.path:
            logger.info(f"Loading geometry from {args.path}")
            geometry = load_geojson(args.path)
            name = args.name or args.path.replace("\\", "/").rsplit("/", 1)[-1]
            app = explore_geometry(geometry, padding=args.padding, name=name, title=name, **options)
        else:
            extent = Extent(*args.extent) if args.extent else settings.extent
            app = explore(extent=extent, **options)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        sys.exit(1)

    if args.goto:
        lon, lat = args.goto
        app.goto(lon, lat, args.zoom)

    # Display or export
    if args.export:
        logger.info(f"Exporting to {args.export}")
        app.renderer.export_html(args.export)
        print(f"Exported to {args.export}")
    else:
        logger.info("Opening in browser")
        app.renderer.show()


if __name__ == "__main__":
    main()
