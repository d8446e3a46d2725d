"""Command-line interface for the overpass correction pipeline."""
