"""
纬度归约

在规则经纬网格上采样覆盖栅格，按纬度分组计算日均过境次数的均值、
最小值和最大值，得到纬度到过境次数的经验函数（修正表）。
"""

import logging
from typing import Dict, List

import numpy as np

from core.models.coverage_grid import CoverageGrid
from core.models.latitude_correction import LatitudeCorrection, LatitudeCorrectionRow

logger = logging.getLogger(__name__)


def sampling_axis(start: float, stop: float, step: float) -> np.ndarray:
    """[start, stop] 上步长为step的采样点（含两端）"""
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    n = int(np.floor((stop - start) / step + 1e-9)) + 1
    # 按整数倍生成再取整，避免浮点累加误差让纬度分组错位
    return np.round(start + np.arange(n) * step, 10)


def reduce(
    grid: CoverageGrid,
    lon_step_deg: float = 5.0,
    lat_step_deg: float = 0.25,
    skip_unobserved: bool = True
) -> LatitudeCorrection:
    """
    把覆盖栅格归约为纬度修正表

    采样网格覆盖经度[-180, 180]、纬度[-90, 90]（含两端）。落在栅格范围外的
    采样点被丢弃；skip_unobserved为True时，从未被任何足迹覆盖的网格视为
    无数据一并丢弃。没有任何有效采样的纬度带不出现在结果中。

    Args:
        grid: 日均过境次数栅格
        lon_step_deg: 经度采样步长（度）
        lat_step_deg: 纬度采样步长（度）
        skip_unobserved: 是否把0值网格视为无数据

    Returns:
        LatitudeCorrection: 按纬度升序的修正表
    """
    lons = sampling_axis(-180.0, 180.0, lon_step_deg)
    lats = sampling_axis(-90.0, 90.0, lat_step_deg)

    groups: Dict[float, List[float]] = {}
    for lat in lats:
        values = []
        for lon in lons:
            value = grid.value_at(float(lon), float(lat))
            if value is None or np.isnan(value):
                continue
            if skip_unobserved and value == 0:
                continue
            values.append(value)
        if values:
            groups[float(lat)] = values

    rows = [
        LatitudeCorrectionRow(
            latitude=lat,
            mean_overpasses=float(np.mean(values)),
            min_overpasses=float(np.min(values)),
            max_overpasses=float(np.max(values)),
        )
        for lat, values in groups.items()
    ]

    logger.info(
        f"Reduced {len(lats)} latitude bands x {len(lons)} longitudes to "
        f"{len(rows)} correction rows"
    )
    return LatitudeCorrection(rows, lat_step=lat_step_deg)


class LatitudeReducer:
    """纬度归约器（持有采样配置）"""

    def __init__(self, lon_step_deg: float = 5.0, lat_step_deg: float = 0.25,
                 skip_unobserved: bool = True):
        self.lon_step_deg = lon_step_deg
        self.lat_step_deg = lat_step_deg
        self.skip_unobserved = skip_unobserved

    def reduce(self, grid: CoverageGrid) -> LatitudeCorrection:
        return reduce(grid, self.lon_step_deg, self.lat_step_deg, self.skip_unobserved)
