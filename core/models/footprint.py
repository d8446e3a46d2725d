"""
成像足迹多边形模型
"""

from dataclasses import dataclass
from typing import List, Tuple

from .ground_track import GroundTrackSample

Ring = List[Tuple[float, float]]  # [(lon, lat), ...]


@dataclass(frozen=True)
class FootprintPolygon:
    """
    单次瞬时成像足迹

    ring 为原始闭合环（首尾顶点相同，经度已归一化到[-180, 180]），
    parts 为日期变更线拆分后的各部分，每部分都不跨越±180°。

    Attributes:
        sample: 生成该足迹的星下点
        ring: 闭合顶点环
        parts: 拆分后的闭合环列表
    """
    sample: GroundTrackSample
    ring: Ring
    parts: List[Ring]

    @property
    def crosses_dateline(self) -> bool:
        return len(self.parts) > 1
