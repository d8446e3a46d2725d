"""Pipeline run command."""
import click
from rich.console import Console
from rich.table import Table

from core.exceptions import OverpassError
from core.pipeline import OverpassPipeline, PipelineConfig
from utils.config_loader import ConfigLoadError, ConfigValidationError
from utils.logger import setup_logging


console = Console()


def _print_summary(summary):
    """Print rich run summary."""
    table = Table(title="运行摘要")
    table.add_column("项目", style="cyan")
    table.add_column("值", justify="right")

    table.add_row("星下点采样", str(summary["sample_count"]))
    table.add_row("足迹多边形", str(summary["footprint_count"]))
    table.add_row("丢弃足迹", str(summary["dropped_footprints"]))
    table.add_row("跳过采样", str(summary["skipped_samples"]))
    table.add_row("有观测网格", str(summary["observed_cells"]))
    table.add_row("最大日均过境", f"{summary['max_overpasses_per_day']:.3f}")
    table.add_row("修正表行数", str(summary["correction_rows"]))
    console.print(table)

    outputs = Table(title="输出文件")
    outputs.add_column("类型", style="cyan")
    outputs.add_column("路径")
    for kind, path in summary["outputs"].items():
        outputs.add_row(kind, path)
    console.print(outputs)


@click.command()
@click.option("--config", "-c", "config_path", required=True,
              type=click.Path(exists=True, dir_okay=False), help="Pipeline config (YAML/JSON)")
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Override the configured log level")
@click.option("--log-file", default=None, help="Also write logs to this file")
@click.option("--render", is_flag=True, help="Render the coverage map and correction function")
def run(config_path: str, log_level, log_file, render: bool):
    """Run the overpass correction pipeline."""
    try:
        config = PipelineConfig.load(config_path)
    except ConfigValidationError as e:
        for error in e.errors:
            console.print(f"  - {error}")
        raise click.ClickException("Invalid configuration")
    except ConfigLoadError as e:
        raise click.ClickException(str(e))

    setup_logging(
        level=log_level or config.log_level,
        log_file=log_file or config.log_file,
        format=config.log_format,
        rotation=config.log_rotation,
    )
    if render:
        config.output.render = True

    try:
        result = OverpassPipeline(config).run()
    except (OverpassError, FileNotFoundError) as e:
        raise click.ClickException(str(e))

    _print_summary(result.summary())
