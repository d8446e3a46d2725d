"""
覆盖栅格化

把足迹多边形累加到等经纬度网格上：网格中心点落在多边形内即计数+1
（射线投射法，按多边形外包框内的网格中心向量化计算）。各工作线程持有
自己的部分栅格，最后按元素求和合并，没有共享的累加状态。
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from typing import List, Optional, Sequence, Tuple

import numpy as np

from core.models.coverage_grid import CoverageGrid, GridSpec
from core.models.footprint import FootprintPolygon, Ring

logger = logging.getLogger(__name__)


def points_in_ring(px: np.ndarray, py: np.ndarray, ring: Ring) -> np.ndarray:
    """
    射线投射算法判断点是否在多边形内（向量化）

    Args:
        px: 点经度数组
        py: 点纬度数组（与px同形状或可广播）
        ring: 闭合环

    Returns:
        np.ndarray: 布尔数组
    """
    px, py = np.broadcast_arrays(px, py)
    inside = np.zeros(px.shape, dtype=bool)

    for i in range(len(ring) - 1):
        x1, y1 = ring[i]
        x2, y2 = ring[i + 1]
        if y1 == y2:
            continue
        # 一个端点包含、另一个不包含，避免顶点重复计数
        crosses = (y1 > py) != (y2 > py)
        x_intersect = (x2 - x1) * (py - y1) / (y2 - y1) + x1
        inside ^= crosses & (px < x_intersect)

    return inside


def _index_range(low: float, high: float, origin: float, cell: float, size: int,
                 descending: bool = False) -> Optional[Tuple[int, int]]:
    """中心点落在 [low, high] 内的网格索引范围（含两端），无则返回None"""
    if descending:
        first = int(np.ceil((origin - high) / cell - 0.5))
        last = int(np.floor((origin - low) / cell - 0.5))
    else:
        first = int(np.ceil((low - origin) / cell - 0.5))
        last = int(np.floor((high - origin) / cell - 0.5))
    first = max(first, 0)
    last = min(last, size - 1)
    if first > last:
        return None
    return first, last


def rasterize_ring(grid: CoverageGrid, ring: Ring) -> int:
    """
    把单个闭合环累加到栅格

    Returns:
        int: 被计数的网格数
    """
    spec = grid.spec
    lons = [p[0] for p in ring]
    lats = [p[1] for p in ring]

    cols = _index_range(min(lons), max(lons), spec.xmin, spec.cell_size, spec.ncols)
    rows = _index_range(min(lats), max(lats), spec.ymax, spec.cell_size, spec.nrows, descending=True)
    if cols is None or rows is None:
        return 0

    col_slice = slice(cols[0], cols[1] + 1)
    row_slice = slice(rows[0], rows[1] + 1)

    cx = spec.column_centers()[col_slice]
    cy = spec.row_centers()[row_slice]
    mask = points_in_ring(cx[np.newaxis, :], cy[:, np.newaxis], ring)

    grid.add_mask(row_slice, col_slice, mask)
    return int(mask.sum())


class CoverageRasterizer:
    """
    覆盖栅格化器

    Attributes:
        max_workers: 线程数，每个线程累加一份部分栅格
    """

    def __init__(self, max_workers: Optional[int] = None):
        self.max_workers = max_workers or (os.cpu_count() or 1)

    def accumulate(self, footprints: Sequence[FootprintPolygon], spec: GridSpec) -> CoverageGrid:
        """
        累加足迹计数（未归一化）

        足迹在日期变更线处拆分出的各部分互不重叠，分别计入各自覆盖的网格。

        Args:
            footprints: 足迹列表
            spec: 网格定义

        Returns:
            CoverageGrid: 计数栅格
        """
        if not footprints:
            return CoverageGrid(spec)

        n_chunks = min(self.max_workers, len(footprints))
        chunk_size = -(-len(footprints) // n_chunks)
        chunks = [footprints[i:i + chunk_size] for i in range(0, len(footprints), chunk_size)]

        logger.info(
            f"Rasterizing {len(footprints)} footprints onto {spec.nrows}x{spec.ncols} grid "
            f"({len(chunks)} partial grids)"
        )

        if len(chunks) == 1:
            partials = [self._accumulate_chunk(chunks[0], spec)]
        else:
            with ThreadPoolExecutor(max_workers=len(chunks),
                                    thread_name_prefix="rasterizer") as executor:
                partials = list(executor.map(lambda chunk: self._accumulate_chunk(chunk, spec), chunks))

        return reduce(lambda a, b: a.merge(b), partials)

    def rasterize(
        self,
        footprints: Sequence[FootprintPolygon],
        spec: GridSpec,
        elapsed_days: float
    ) -> CoverageGrid:
        """
        栅格化并归一化为日均过境次数

        Args:
            footprints: 足迹列表
            spec: 网格定义
            elapsed_days: 仿真天数

        Returns:
            CoverageGrid: 日均过境次数栅格
        """
        counts = self.accumulate(footprints, spec)
        grid = counts.normalized(elapsed_days)
        logger.info(
            f"Coverage grid: {grid.nonzero_cells()} observed cells, "
            f"max {grid.values.max():.3f} overpasses/day"
        )
        return grid

    @staticmethod
    def _accumulate_chunk(footprints: Sequence[FootprintPolygon], spec: GridSpec) -> CoverageGrid:
        partial = CoverageGrid(spec)
        for footprint in footprints:
            for part in footprint.parts:
                rasterize_ring(partial, part)
        return partial


def rasterize(
    footprints: Sequence[FootprintPolygon],
    spec: GridSpec,
    elapsed_days: float,
    max_workers: Optional[int] = None
) -> CoverageGrid:
    """栅格化足迹为日均过境次数"""
    return CoverageRasterizer(max_workers=max_workers).rasterize(footprints, spec, elapsed_days)


def footprint_cells(footprint: FootprintPolygon, spec: GridSpec) -> List[Tuple[int, int]]:
    """单个足迹覆盖的网格 (row, col) 列表，按行列排序"""
    grid = CoverageGrid(spec)
    for part in footprint.parts:
        rasterize_ring(grid, part)
    rows, cols = np.nonzero(grid.values)
    return sorted(zip(rows.tolist(), cols.tolist()))
