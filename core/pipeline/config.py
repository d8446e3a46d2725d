"""
流水线配置

从YAML/JSON文件加载，环境变量（前缀 OVERPASS_）覆盖，schema验证后
转换为 PipelineConfig。
"""

from dataclasses import dataclass, field
from datetime import datetime, date, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.coverage.footprint_calculator import FootprintOptions
from core.models.coverage_grid import GridSpec
from core.models.ground_track import OrbitNode
from core.orbit.track_sampler import PropagationErrorPolicy, check_step
from utils.config_loader import ConfigLoader, ConfigValidationError

ENV_PREFIX = "OVERPASS_"

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["satellites", "simulation"],
    "properties": {
        "satellites": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["id", "tle_path"],
                "properties": {
                    "id": {"type": "string"},
                    "tle_path": {"type": "string"},
                },
            },
        },
        "simulation": {
            "type": "object",
            "required": ["start_date"],
            "properties": {
                "period_count": {"type": "integer", "minimum": 1},
                "period_length_days": {"type": "number", "exclusiveMinimum": 0},
                "step_minutes": {"type": "number", "exclusiveMinimum": 0},
            },
        },
        "footprint": {
            "type": "object",
            "properties": {
                "nadir_only": {"type": "boolean"},
                "bowtie_flare": {"type": "boolean"},
                "inclination_offset_deg": {"type": "number"},
                "n_intermediate": {"type": "integer", "minimum": 0},
            },
        },
        "grid": {
            "type": "object",
            "properties": {
                "cell_size": {"type": "number", "exclusiveMinimum": 0},
            },
        },
        "reduction": {
            "type": "object",
            "properties": {
                "lon_step_deg": {"type": "number", "exclusiveMinimum": 0},
                "lat_step_deg": {"type": "number", "exclusiveMinimum": 0},
                "skip_unobserved": {"type": "boolean"},
            },
        },
        "execution": {
            "type": "object",
            "properties": {
                "propagation_errors": {"type": "string", "enum": ["abort", "skip"]},
                "nodes": {
                    "type": "array",
                    "minItems": 1,
                    "items": {"type": "string", "enum": ["ascending", "descending"]},
                },
            },
        },
        "output": {
            "type": "object",
            "properties": {
                "directory": {"type": "string"},
                "raster": {"type": "string"},
                "table": {"type": "string"},
                "summary": {"type": "string"},
                "render": {"type": "boolean"},
            },
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
                "file": {"type": "string"},
                "format": {"type": "string", "enum": ["text", "json"]},
                "rotation": {"type": "string", "enum": ["none", "daily", "hourly"]},
            },
        },
    },
}


def _parse_start(value: Any) -> datetime:
    """解析开始日期，统一为UTC时刻"""
    if isinstance(value, datetime):
        start = value
    elif isinstance(value, date):
        start = datetime(value.year, value.month, value.day)
    else:
        start = datetime.fromisoformat(str(value))
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    return start.astimezone(timezone.utc)


@dataclass
class SatelliteSource:
    """卫星及其TLE历史文件"""
    id: str
    tle_path: str


@dataclass
class OutputConfig:
    """输出路径配置"""
    directory: str = "analyses/analyses_output"
    raster: str = "aqua-terra-overpasses-per-day.asc"
    table: str = "aqua-terra-overpass-corrections-table.csv"
    summary: str = "run-summary.json"
    render: bool = False
    map_figure: str = "aqua-terra-overpass-corrections-map.png"
    function_figure: str = "aqua-terra-overpass-corrections-function.png"

    def path(self, name: str) -> Path:
        return Path(self.directory) / name


@dataclass
class PipelineConfig:
    """
    过境修正流水线配置

    Attributes:
        satellites: 卫星列表（默认 Aqua 和 Terra）
        start: 仿真开始时刻（UTC）
        period_count: 周期数
        period_length_days: 周期长度，默认16天（两颗卫星的重访周期）
        step_minutes: 采样步长（分钟）
        footprint: 足迹选项
        cell_size: 栅格分辨率（度）
        lon_step_deg / lat_step_deg: 纬度归约采样步长
        skip_unobserved: 归约时是否把0值网格视为无数据
        max_workers: 线程数，None为CPU核心数
        propagation_errors: 传播失败策略
        nodes: 参与统计的升降轨
        output: 输出配置
        log_level / log_file / log_format / log_rotation: 日志配置
    """
    satellites: List[SatelliteSource]
    start: datetime
    period_count: int = 3
    period_length_days: float = 16.0
    step_minutes: float = 1.0
    footprint: FootprintOptions = field(default_factory=FootprintOptions)
    cell_size: float = 0.25
    lon_step_deg: float = 5.0
    lat_step_deg: float = 0.25
    skip_unobserved: bool = True
    max_workers: Optional[int] = None
    propagation_errors: PropagationErrorPolicy = PropagationErrorPolicy.ABORT
    nodes: List[OrbitNode] = field(default_factory=lambda: [OrbitNode.ASCENDING, OrbitNode.DESCENDING])
    output: OutputConfig = field(default_factory=OutputConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = "text"
    log_rotation: str = "none"

    @property
    def elapsed_days(self) -> float:
        return self.period_count * self.period_length_days

    @property
    def satellite_ids(self) -> List[str]:
        return [s.id for s in self.satellites]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> 'PipelineConfig':
        """
        从配置字典构造

        Args:
            data: 配置字典
            base_dir: 相对路径（TLE文件、输出目录）的基准目录

        Raises:
            ConfigValidationError: 配置不合法
        """
        valid, errors = ConfigLoader().validate(data, CONFIG_SCHEMA)
        if not valid:
            raise ConfigValidationError(errors)

        def resolve(path: str) -> str:
            if base_dir is None or Path(path).is_absolute():
                return path
            return str(base_dir / path)

        simulation = data["simulation"]
        footprint = data.get("footprint", {})
        grid = data.get("grid", {})
        reduction = data.get("reduction", {})
        execution = data.get("execution", {})
        output = data.get("output", {})
        logging_cfg = data.get("logging", {})

        semantic_errors = []
        try:
            check_step(
                simulation.get("step_minutes", 1.0),
                simulation.get("period_count", 3),
                simulation.get("period_length_days", 16.0),
            )
        except ValueError as e:
            semantic_errors.append(f"字段 'root.simulation.step_minutes' 无效: {e}")
        try:
            GridSpec.global_grid(grid.get("cell_size", 0.25))
        except ValueError as e:
            semantic_errors.append(f"字段 'root.grid.cell_size' 无效: {e}")
        if semantic_errors:
            raise ConfigValidationError(semantic_errors)

        output_cfg = OutputConfig(**{k: v for k, v in output.items()
                                     if k in OutputConfig.__dataclass_fields__})
        output_cfg.directory = resolve(output_cfg.directory)

        try:
            start = _parse_start(simulation["start_date"])
        except ValueError as e:
            raise ConfigValidationError([f"字段 'root.simulation.start_date' 无法解析: {e}"]) from e

        return cls(
            satellites=[
                SatelliteSource(id=s["id"], tle_path=resolve(s["tle_path"]))
                for s in data["satellites"]
            ],
            start=start,
            period_count=simulation.get("period_count", 3),
            period_length_days=simulation.get("period_length_days", 16.0),
            step_minutes=simulation.get("step_minutes", 1.0),
            footprint=FootprintOptions(
                nadir_only=footprint.get("nadir_only", False),
                bowtie_flare=footprint.get("bowtie_flare", False),
                inclination_offset_deg=footprint.get("inclination_offset_deg", 0.0),
                n_intermediate=footprint.get("n_intermediate", 3),
            ),
            cell_size=grid.get("cell_size", 0.25),
            lon_step_deg=reduction.get("lon_step_deg", 5.0),
            lat_step_deg=reduction.get("lat_step_deg", 0.25),
            skip_unobserved=reduction.get("skip_unobserved", True),
            max_workers=execution.get("max_workers"),
            propagation_errors=PropagationErrorPolicy(execution.get("propagation_errors", "abort")),
            nodes=[OrbitNode(n) for n in execution.get("nodes", ["ascending", "descending"])],
            output=output_cfg,
            log_level=logging_cfg.get("level", "INFO"),
            log_file=logging_cfg.get("file"),
            log_format=logging_cfg.get("format", "text"),
            log_rotation=logging_cfg.get("rotation", "none"),
        )

    @classmethod
    def load(cls, path: str, env_prefix: Optional[str] = ENV_PREFIX) -> 'PipelineConfig':
        """
        加载配置文件并应用环境变量覆盖

        相对路径按配置文件所在目录解析。
        """
        loader = ConfigLoader()
        data = loader.load(path)
        if env_prefix:
            data = ConfigLoader.merge(data, loader.load_from_env(env_prefix))
        return cls.from_dict(data, base_dir=Path(path).resolve().parent)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'satellites': [{'id': s.id, 'tle_path': s.tle_path} for s in self.satellites],
            'simulation': {
                'start_date': self.start.isoformat(),
                'period_count': self.period_count,
                'period_length_days': self.period_length_days,
                'step_minutes': self.step_minutes,
            },
            'footprint': {
                'nadir_only': self.footprint.nadir_only,
                'bowtie_flare': self.footprint.bowtie_flare,
                'inclination_offset_deg': self.footprint.inclination_offset_deg,
                'n_intermediate': self.footprint.n_intermediate,
            },
            'grid': {'cell_size': self.cell_size},
            'reduction': {
                'lon_step_deg': self.lon_step_deg,
                'lat_step_deg': self.lat_step_deg,
                'skip_unobserved': self.skip_unobserved,
            },
            'execution': {
                'max_workers': self.max_workers,
                'propagation_errors': self.propagation_errors.value,
                'nodes': [n.value for n in self.nodes],
            },
        }
