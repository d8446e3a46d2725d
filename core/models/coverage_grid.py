"""
覆盖栅格模型 - 等经纬度网格上的过境次数/频率
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Dict, Any
import math

import numpy as np


@dataclass(frozen=True)
class GridSpec:
    """
    等经纬度网格定义

    第0行为最北一行，第0列为最西一列。

    Attributes:
        cell_size: 网格分辨率（度）
        xmin, xmax: 经度范围
        ymin, ymax: 纬度范围
    """
    cell_size: float
    xmin: float = -180.0
    xmax: float = 180.0
    ymin: float = -90.0
    ymax: float = 90.0

    def __post_init__(self):
        if self.cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {self.cell_size}")
        if self.xmax <= self.xmin or self.ymax <= self.ymin:
            raise ValueError("Grid extent is empty")
        for span in (self.xmax - self.xmin, self.ymax - self.ymin):
            n = span / self.cell_size
            if abs(n - round(n)) > 1e-6:
                raise ValueError(
                    f"cell_size {self.cell_size} does not tile extent span {span}"
                )

    @classmethod
    def global_grid(cls, cell_size: float = 0.25) -> 'GridSpec':
        return cls(cell_size=cell_size)

    @property
    def ncols(self) -> int:
        return int(round((self.xmax - self.xmin) / self.cell_size))

    @property
    def nrows(self) -> int:
        return int(round((self.ymax - self.ymin) / self.cell_size))

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.nrows, self.ncols)

    def column_centers(self) -> np.ndarray:
        return self.xmin + (np.arange(self.ncols) + 0.5) * self.cell_size

    def row_centers(self) -> np.ndarray:
        return self.ymax - (np.arange(self.nrows) + 0.5) * self.cell_size

    def contains(self, lon: float, lat: float) -> bool:
        return self.xmin <= lon <= self.xmax and self.ymin <= lat <= self.ymax

    def cell_index(self, lon: float, lat: float) -> Optional[Tuple[int, int]]:
        """
        查询坐标所在网格的 (row, col)

        范围边界包含在内：位于东/南边界上的点归入最后一列/行。
        范围外返回None。
        """
        if not self.contains(lon, lat):
            return None
        col = min(int(math.floor((lon - self.xmin) / self.cell_size)), self.ncols - 1)
        row = min(int(math.floor((self.ymax - lat) / self.cell_size)), self.nrows - 1)
        return (row, col)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cell_size': self.cell_size,
            'xmin': self.xmin,
            'xmax': self.xmax,
            'ymin': self.ymin,
            'ymax': self.ymax,
        }


class CoverageGrid:
    """
    覆盖栅格

    累加阶段存放足迹计数，normalized() 之后为日均过境次数。
    """

    def __init__(self, spec: GridSpec, values: Optional[np.ndarray] = None):
        """
        Args:
            spec: 网格定义
            values: 初始数值，默认全零
        """
        self.spec = spec
        if values is None:
            values = np.zeros(spec.shape, dtype=np.float64)
        elif values.shape != spec.shape:
            raise ValueError(f"values shape {values.shape} does not match grid {spec.shape}")
        self.values = values

    def add_mask(self, row_slice: slice, col_slice: slice, mask: np.ndarray) -> None:
        """对子窗口内mask为True的网格计数+1"""
        self.values[row_slice, col_slice] += mask

    def merge(self, other: 'CoverageGrid') -> 'CoverageGrid':
        """与另一部分栅格按元素求和（满足结合律）"""
        if other.spec != self.spec:
            raise ValueError("Cannot merge grids with different specs")
        return CoverageGrid(self.spec, self.values + other.values)

    def normalized(self, elapsed_days: float) -> 'CoverageGrid':
        """除以仿真天数得到日均过境次数"""
        if elapsed_days <= 0:
            raise ValueError(f"elapsed_days must be positive, got {elapsed_days}")
        return CoverageGrid(self.spec, self.values / elapsed_days)

    def value_at(self, lon: float, lat: float) -> Optional[float]:
        """点查询，范围外返回None"""
        index = self.spec.cell_index(lon, lat)
        if index is None:
            return None
        return float(self.values[index])

    def total(self) -> float:
        return float(self.values.sum())

    def nonzero_cells(self) -> int:
        return int(np.count_nonzero(self.values))

    def __repr__(self) -> str:
        return (
            f"CoverageGrid(shape={self.spec.shape}, cell_size={self.spec.cell_size}, "
            f"max={self.values.max():.3f})"
        )
