"""
过境频率可视化

- 全球日均过境次数栅格图（经纬网叠加，不含海岸线）
- 纬度修正函数图（均值散点 + 最小/最大值带）
"""

import matplotlib
matplotlib.use('Agg')  # 使用非交互式后端
import matplotlib.pyplot as plt
import numpy as np
from pathlib import Path
from typing import List, Optional, Union

from core.models.coverage_grid import CoverageGrid
from core.models.latitude_correction import LatitudeCorrection


def function_plot_latitudes() -> List[float]:
    """
    修正函数图使用的纬度

    高纬（|lat| >= 70）保留0.25°分辨率，中低纬每1°取一个点。
    """
    south = np.arange(-83.5, -70 + 1e-9, 0.25)
    middle = np.arange(-69, 70, 1.0)
    north = np.arange(70, 83.5 + 1e-9, 0.25)
    return [round(float(v), 10) for v in np.concatenate([south, middle, north])]


def graticule_ticks(lower: float, upper: float, step: float) -> List[float]:
    """[lower, upper] 内 step 整倍数的刻度"""
    first = np.ceil(lower / step) * step
    return [float(v) for v in np.arange(first, upper + 1e-9, step)]


class CoverageMapVisualizer:
    """过境频率可视化器"""

    def __init__(self, figsize: tuple = (12, 6), cmap: str = 'viridis'):
        """
        Args:
            figsize: 图表尺寸 (宽, 高)
            cmap: 颜色表
        """
        self.figsize = figsize
        self.cmap = cmap

    def plot_map(
        self,
        grid: CoverageGrid,
        title: str = "Overpasses per day",
        graticule_step: float = 30.0
    ) -> plt.Figure:
        """
        绘制日均过境次数栅格，叠加经纬网和赤道

        Args:
            grid: 日均过境次数栅格
            title: 图表标题
            graticule_step: 经纬网间隔（度）

        Returns:
            matplotlib Figure对象
        """
        spec = grid.spec
        fig, ax = plt.subplots(figsize=self.figsize)

        # 0值网格（从未覆盖）不着色
        values = np.ma.masked_where(~(grid.values > 0), grid.values)
        image = ax.imshow(
            values,
            extent=(spec.xmin, spec.xmax, spec.ymin, spec.ymax),
            origin='upper',
            cmap=matplotlib.colormaps[self.cmap].resampled(30),
            interpolation='nearest',
        )
        fig.colorbar(image, ax=ax, shrink=0.7, label='overpasses / day')

        ax.set_xticks(graticule_ticks(spec.xmin, spec.xmax, graticule_step))
        ax.set_yticks(graticule_ticks(spec.ymin, spec.ymax, graticule_step))
        ax.grid(True, color='gray', linewidth=0.5, alpha=0.5)
        if spec.ymin < 0 < spec.ymax:
            ax.axhline(0.0, color='gray', linewidth=0.8, linestyle='--')

        ax.set_xlim(spec.xmin, spec.xmax)
        ax.set_ylim(spec.ymin, spec.ymax)
        ax.set_xlabel('Longitude (°)')
        ax.set_ylabel('Latitude (°)')
        ax.set_title(title)

        fig.tight_layout()
        return fig

    def plot_function(
        self,
        correction: LatitudeCorrection,
        latitudes: Optional[List[float]] = None,
        title: str = "Overpass correction by latitude"
    ) -> plt.Figure:
        """
        绘制纬度修正函数

        Args:
            correction: 纬度修正表
            latitudes: 只绘制这些纬度，默认 function_plot_latitudes()
            title: 图表标题

        Returns:
            matplotlib Figure对象
        """
        selected = set(latitudes if latitudes is not None else function_plot_latitudes())
        rows = [r for r in correction if round(r.latitude, 10) in selected]

        fig, ax = plt.subplots(figsize=self.figsize)
        lats = [r.latitude for r in rows]
        ax.scatter(lats, [r.mean_overpasses for r in rows], s=1.5, color='black')
        ax.fill_between(
            lats,
            [r.min_overpasses for r in rows],
            [r.max_overpasses for r in rows],
            color='red',
            alpha=0.1,
        )

        ax.set_xlabel('Latitude (°)')
        ax.set_ylabel('Mean overpasses / day')
        ax.set_title(title)
        ax.grid(True, alpha=0.3)

        fig.tight_layout()
        return fig

    def save(self, fig: plt.Figure, output_path: Union[str, Path], dpi: int = 150) -> Path:
        """保存图表并关闭"""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=dpi, bbox_inches='tight')
        plt.close(fig)
        return output_path
