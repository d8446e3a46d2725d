"""
Footprint Calculator - MODIS Bowtie Footprint Builder

Builds the instantaneous imaging footprint ("bowtie") around each ground-track
sample: one minute of along-track motion by the full (or near-nadir) swath.
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple
import logging
import math

from core.exceptions import DatelineSplitFailure, GeometryDegenerate
from core.models.footprint import FootprintPolygon, Ring
from core.models.ground_track import GroundTrackSample
from .dateline import split_at_antimeridian
from .geodesy import destination_point, great_circle_intermediate

logger = logging.getLogger(__name__)


# 1.477 秒/扫描（Wolfe et al., 2002），每次扫描沿轨 10 km
SECONDS_PER_SCAN = 1.477
ALONG_TRACK_PER_SCAN_M = 10 * 1000
ALONG_TRACK_M_PER_MINUTE = 1 / SECONDS_PER_SCAN * 60 * ALONG_TRACK_PER_SCAN_M

SWATH_WIDTH_M = 2330 * 1000

# 扫描角：24°以内相邻扫描无重叠，视为星下点像元；55°为最大扫描角
NADIR_SCAN_ANGLE_DEG = 24.0
MAX_SCAN_ANGLE_DEG = 55.0

# 一分钟轨迹末端只多出一次扫描的蝴蝶结展宽
BOWTIE_FLARE_M = 10000.0

DEFAULT_INTERMEDIATE_POINTS = 3


@dataclass(frozen=True)
class FootprintOptions:
    """
    足迹构造选项

    Attributes:
        nadir_only: 仅保留星下点附近像元（较窄的幅宽）
        bowtie_flare: 在幅宽两端加入蝴蝶结展宽（nadir_only时无效）
        inclination_offset_deg: 轨道倾角引起的朝向偏移。固定为0时足迹为
            正南北朝向，这是一个近似
        n_intermediate: 相邻角点之间的大圆插值点数
    """
    nadir_only: bool = False
    bowtie_flare: bool = False
    inclination_offset_deg: float = 0.0
    n_intermediate: int = DEFAULT_INTERMEDIATE_POINTS


@dataclass(frozen=True)
class FootprintGeometry:
    """由选项导出的足迹尺寸（米）"""
    x_offset: float
    y_small: float
    y_large: float

    @property
    def hypotenuse(self) -> float:
        return math.sqrt(self.y_large ** 2 + self.x_offset ** 2)

    @property
    def corner_angle_deg(self) -> float:
        return math.degrees(math.atan(self.y_large / self.x_offset))


def footprint_geometry(options: FootprintOptions) -> FootprintGeometry:
    """
    计算足迹的穿轨半宽和沿轨半长

    Args:
        options: 足迹构造选项

    Returns:
        FootprintGeometry: 足迹尺寸

    Raises:
        GeometryDegenerate: 任一偏移量非正
    """
    if options.nadir_only:
        x_offset = (
            (SWATH_WIDTH_M / 2) / math.tan(math.radians(MAX_SCAN_ANGLE_DEG))
            * math.tan(math.radians(NADIR_SCAN_ANGLE_DEG))
        )
    else:
        x_offset = SWATH_WIDTH_M / 2

    y_small = ALONG_TRACK_M_PER_MINUTE / 2

    if options.bowtie_flare and not options.nadir_only:
        y_large = y_small + BOWTIE_FLARE_M
    else:
        y_large = y_small

    if x_offset <= 0 or y_small <= 0 or y_large <= 0:
        raise GeometryDegenerate(
            f"Non-positive footprint offsets: x={x_offset}, y_small={y_small}, y_large={y_large}"
        )
    if options.n_intermediate < 0:
        raise GeometryDegenerate(f"n_intermediate must be >= 0, got {options.n_intermediate}")

    return FootprintGeometry(x_offset=x_offset, y_small=y_small, y_large=y_large)


class FootprintCalculator:
    """
    蝴蝶结足迹计算器

    每个足迹由相对星下点的6个角点定义（即使不展宽、足迹为矩形也保持6个点）：
    pt1 沿轨正前方；pt2 前方偏右；pt3 后方偏右；pt4 沿轨正后方；
    pt5 后方偏左；pt6 前方偏左。该顺序保证环不自交。
    """

    def __init__(self, options: FootprintOptions = FootprintOptions()):
        """
        Args:
            options: 足迹构造选项

        Raises:
            GeometryDegenerate: 选项导出的几何尺寸退化
        """
        self.options = options
        self.geometry = footprint_geometry(options)
        self.dropped: List[Tuple[GroundTrackSample, str]] = []

    def corner_vectors(self) -> List[Tuple[float, float]]:
        """6个角点相对星下点的 (方位角, 距离)"""
        g = self.geometry
        offset = self.options.inclination_offset_deg
        angle = g.corner_angle_deg
        hyp = g.hypotenuse
        return [
            (0 - offset, g.y_small),
            (90 - offset - angle, hyp),
            (90 - offset + angle, hyp),
            (180 - offset, g.y_small),
            (270 - offset - angle, hyp),
            (270 - offset + angle, hyp),
        ]

    def build_ring(self, lon: float, lat: float) -> Ring:
        """
        构造闭合顶点环

        Args:
            lon: 星下点经度
            lat: 星下点纬度

        Returns:
            Ring: 6个角点 + 6*n_intermediate个边插值点 + 闭合点
        """
        corners = [
            destination_point(lon, lat, bearing, distance)
            for bearing, distance in self.corner_vectors()
        ]

        n = self.options.n_intermediate
        ring: Ring = []
        for i, corner in enumerate(corners):
            following = corners[(i + 1) % len(corners)]
            ring.append(corner)
            ring.extend(great_circle_intermediate(corner, following, n))
        ring.append(corners[0])

        return ring

    def build_footprint(self, sample: GroundTrackSample) -> FootprintPolygon:
        """
        构造单个足迹并在日期变更线处拆分

        Raises:
            DatelineSplitFailure: 无法拆分为合法部分
        """
        ring = self.build_ring(sample.longitude, sample.latitude)
        parts = split_at_antimeridian(ring)
        return FootprintPolygon(sample=sample, ring=ring, parts=parts)

    def build_all(self, samples: Iterable[GroundTrackSample]) -> List[FootprintPolygon]:
        """
        批量构造足迹

        单个足迹拆分失败时丢弃该足迹并记录日志；丢弃一个足迹对统计影响
        可以忽略，而错误栅格化会带来偏差。

        Args:
            samples: 星下点序列

        Returns:
            List[FootprintPolygon]: 足迹列表（保持输入顺序）
        """
        self.dropped = []
        footprints = []
        for sample in samples:
            try:
                footprints.append(self.build_footprint(sample))
            except DatelineSplitFailure as e:
                logger.warning(
                    f"Dropping footprint for {sample.satellite_id} at "
                    f"{sample.timestamp.isoformat()} ({sample.longitude:.3f}, {sample.latitude:.3f}): {e}"
                )
                self.dropped.append((sample, str(e)))

        crossing = sum(1 for fp in footprints if fp.crosses_dateline)
        logger.info(
            f"Built {len(footprints)} footprints ({crossing} split at the antimeridian, "
            f"{len(self.dropped)} dropped)"
        )
        return footprints


def build_footprint(sample: GroundTrackSample, options: FootprintOptions = FootprintOptions()) -> FootprintPolygon:
    """构造单个足迹"""
    return FootprintCalculator(options).build_footprint(sample)
