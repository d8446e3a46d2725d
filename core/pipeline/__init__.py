"""过境修正流水线 - 配置与驱动"""

from .config import PipelineConfig, SatelliteSource, OutputConfig, CONFIG_SCHEMA, ENV_PREFIX
from .driver import OverpassPipeline, PipelineResult

__all__ = [
    'PipelineConfig',
    'SatelliteSource',
    'OutputConfig',
    'CONFIG_SCHEMA',
    'ENV_PREFIX',
    'OverpassPipeline',
    'PipelineResult',
]
