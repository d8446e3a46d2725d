"""
过境修正流水线

根数目录 -> 星下点采样 -> 足迹多边形 -> 覆盖栅格 -> 纬度修正表

任一阶段出现致命错误都直接向上抛出，不会写出部分正确的修正表。
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from core.coverage.footprint_calculator import FootprintCalculator
from core.coverage.latitude_reduction import LatitudeReducer
from core.coverage.rasterizer import CoverageRasterizer
from core.models.coverage_grid import CoverageGrid, GridSpec
from core.models.ground_track import OrbitNode
from core.models.latitude_correction import LatitudeCorrection
from core.orbit.element_catalog import ElementCatalog
from core.orbit.propagator.base import GroundTrackPropagator
from core.orbit.propagator.sgp4_propagator import SGP4Propagator
from core.orbit.track_sampler import TrackSampler, filter_by_node
from storage.raster_storage import write_raster
from storage.table_storage import write_correction_table, write_run_summary
from .config import PipelineConfig

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """流水线运行结果"""
    grid: CoverageGrid
    correction: LatitudeCorrection
    sample_count: int
    footprint_count: int
    dropped_footprints: int
    skipped_samples: int
    timings: Dict[str, float] = field(default_factory=dict)
    outputs: Dict[str, str] = field(default_factory=dict)

    def summary(self) -> Dict[str, Any]:
        return {
            'sample_count': self.sample_count,
            'footprint_count': self.footprint_count,
            'dropped_footprints': self.dropped_footprints,
            'skipped_samples': self.skipped_samples,
            'observed_cells': self.grid.nonzero_cells(),
            'max_overpasses_per_day': float(self.grid.values.max()) if self.grid.values.size else 0.0,
            'correction_rows': len(self.correction),
            'timings_seconds': {k: round(v, 3) for k, v in self.timings.items()},
            'outputs': dict(self.outputs),
        }


class OverpassPipeline:
    """
    过境修正流水线驱动

    Attributes:
        config: 流水线配置
        propagator: 星下点传播器，默认SGP4
        catalog: 根数目录，None时从配置中的TLE文件加载
    """

    def __init__(
        self,
        config: PipelineConfig,
        propagator: Optional[GroundTrackPropagator] = None,
        catalog: Optional[ElementCatalog] = None
    ):
        self.config = config
        self.propagator = propagator or SGP4Propagator()
        self._catalog = catalog

    def load_catalog(self) -> ElementCatalog:
        """加载（或返回已注入的）根数目录"""
        if self._catalog is None:
            catalogs = [
                ElementCatalog.from_tle_file(source.tle_path, source.id)
                for source in self.config.satellites
            ]
            self._catalog = ElementCatalog.merge(*catalogs)
        return self._catalog

    def compute(self) -> PipelineResult:
        """
        依次执行各阶段，不写出结果

        Returns:
            PipelineResult: 栅格、修正表及统计

        Raises:
            CatalogEmpty / PropagationError / GeometryDegenerate: 致命错误
        """
        cfg = self.config
        timings: Dict[str, float] = {}

        logger.info(
            f"Overpass correction for {', '.join(cfg.satellite_ids)}: start {cfg.start.isoformat()}, "
            f"{cfg.period_count} x {cfg.period_length_days} days, step {cfg.step_minutes} min"
        )

        # 几何配置错误应在耗时的采样之前暴露
        calculator = FootprintCalculator(cfg.footprint)
        spec = GridSpec.global_grid(cfg.cell_size)

        t0 = time.perf_counter()
        catalog = self.load_catalog()
        timings['load_catalog'] = time.perf_counter() - t0

        t0 = time.perf_counter()
        sampler = TrackSampler(
            self.propagator,
            max_workers=cfg.max_workers,
            error_policy=cfg.propagation_errors,
        )
        samples = sampler.sample(
            catalog,
            cfg.satellite_ids,
            cfg.start,
            cfg.period_count,
            cfg.period_length_days,
            cfg.step_minutes,
        )
        if set(cfg.nodes) != set(OrbitNode):
            before = len(samples)
            samples = filter_by_node(samples, cfg.nodes)
            logger.info(
                f"Kept {len(samples)}/{before} samples on "
                f"{', '.join(n.value for n in cfg.nodes)} node(s)"
            )
        timings['sample'] = time.perf_counter() - t0

        t0 = time.perf_counter()
        footprints = calculator.build_all(samples)
        timings['footprints'] = time.perf_counter() - t0

        t0 = time.perf_counter()
        grid = CoverageRasterizer(max_workers=cfg.max_workers).rasterize(
            footprints, spec, cfg.elapsed_days
        )
        timings['rasterize'] = time.perf_counter() - t0

        t0 = time.perf_counter()
        correction = LatitudeReducer(
            cfg.lon_step_deg, cfg.lat_step_deg, cfg.skip_unobserved
        ).reduce(grid)
        timings['reduce'] = time.perf_counter() - t0

        return PipelineResult(
            grid=grid,
            correction=correction,
            sample_count=len(samples),
            footprint_count=len(footprints),
            dropped_footprints=len(calculator.dropped),
            skipped_samples=len(sampler.skipped),
            timings=timings,
        )

    def persist(self, result: PipelineResult) -> Dict[str, str]:
        """写出栅格、修正表、运行摘要（以及可选的图）"""
        output = self.config.output
        outputs: Dict[str, str] = {
            'raster': str(write_raster(result.grid, output.path(output.raster))),
            'table': str(write_correction_table(result.correction, output.path(output.table))),
        }

        if output.render:
            from visualization.coverage_map import CoverageMapVisualizer

            visualizer = CoverageMapVisualizer()
            outputs['map_figure'] = str(visualizer.save(
                visualizer.plot_map(result.grid), output.path(output.map_figure)
            ))
            outputs['function_figure'] = str(visualizer.save(
                visualizer.plot_function(result.correction), output.path(output.function_figure)
            ))

        result.outputs = outputs
        summary = {'config': self.config.to_dict(), **result.summary()}
        outputs['summary'] = str(write_run_summary(summary, output.path(output.summary)))
        return outputs

    def run(self) -> PipelineResult:
        """计算并写出结果"""
        t0 = time.perf_counter()
        result = self.compute()
        self.persist(result)
        logger.info(
            f"Pipeline finished in {time.perf_counter() - t0:.1f}s",
            extra={"extra_data": {"timings": result.timings, "outputs": result.outputs}},
        )
        return result
