"""Main CLI entry point.

This module defines the main CLI group and registers all commands.
"""
import click

from .commands.run import run
from .commands.catalog import catalog
from .commands.lookup import lookup


@click.group()
@click.version_option(version="1.0.0", prog_name="overpass")
def main():
    """Aqua/Terra overpass latitude-correction tool."""
    pass


main.add_command(run)
main.add_command(catalog)
main.add_command(lookup)
