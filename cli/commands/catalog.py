"""Element catalog inspection command."""
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from core.exceptions import OverpassError
from core.orbit.element_catalog import ElementCatalog


console = Console()


@click.command()
@click.argument("tle_paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--satellite", "-s", "satellite_ids", multiple=True,
              help="Satellite id for each TLE file (defaults to the file stem)")
def catalog(tle_paths, satellite_ids):
    """Summarise TLE history files."""
    if satellite_ids and len(satellite_ids) != len(tle_paths):
        raise click.UsageError("--satellite must be given once per TLE file")

    rows = []
    norad = []
    for index, path in enumerate(tle_paths):
        satellite_id = satellite_ids[index] if satellite_ids else Path(path).stem
        try:
            entries = ElementCatalog.from_tle_file(path, satellite_id)
            first, last = entries.time_range(satellite_id)
        except OverpassError as e:
            raise click.ClickException(f"{path}: {e}")
        rows.append((satellite_id, str(entries.count(satellite_id)),
                     first.isoformat(), last.isoformat()))
        norad.append(f"{satellite_id}: NORAD {entries.select(satellite_id, last).catalog_number}")

    table = Table(title="轨道根数目录", caption="; ".join(norad))
    table.add_column("卫星", style="cyan")
    table.add_column("根数数量", justify="right")
    table.add_column("最早历元")
    table.add_column("最晚历元")
    for row in rows:
        table.add_row(*row)

    console.print(table)
