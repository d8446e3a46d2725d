"""Correction table lookup command."""
import click
from rich.console import Console
from rich.table import Table

from storage.table_storage import read_correction_table


console = Console()


@click.command()
@click.argument("table_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--lat", "latitude", required=True, type=float, help="Latitude in degrees")
@click.option("--count", type=float, default=None, help="Observed count to correct")
def lookup(table_path: str, latitude: float, count):
    """Look up the correction for a latitude."""
    if not -90 <= latitude <= 90:
        raise click.BadParameter("latitude must be within [-90, 90]", param_hint="--lat")

    correction = read_correction_table(table_path)
    row = correction.lookup(latitude)
    if row is None:
        raise click.ClickException(f"No correction band near latitude {latitude}")

    table = Table(title=f"纬度 {latitude} 的修正")
    table.add_column("项目", style="cyan")
    table.add_column("值", justify="right")
    table.add_row("最近纬度带", f"{row.latitude:.2f}")
    table.add_row("平均日过境", f"{row.mean_overpasses:.4f}")
    table.add_row("最小日过境", f"{row.min_overpasses:.4f}")
    table.add_row("最大日过境", f"{row.max_overpasses:.4f}")
    if count is not None:
        corrected = correction.correct(count, latitude)
        table.add_row("修正后", "-" if corrected is None else f"{corrected:.4f}")
    console.print(table)
