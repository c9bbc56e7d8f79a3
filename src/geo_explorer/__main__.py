from src.geo_explorer.cli import main

main()
