"""
星下点传播器接口

核心流程不实现轨道力学，只依赖一个窄接口：根数 + 时刻 -> 位置 + z向速度。
任何具体传播器都可以替换到该接口之后。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

from core.models.element_set import OrbitalElementSet
from core.models.ground_track import OrbitNode


@dataclass(frozen=True)
class PropagatedPosition:
    """传播结果"""
    longitude: float    # degrees
    latitude: float     # degrees
    altitude_km: float  # km
    velocity_z: float   # km/s，惯性系z分量


class GroundTrackPropagator(ABC):
    """星下点传播器抽象接口"""

    @abstractmethod
    def propagate(self, element_set: OrbitalElementSet, timestamp: datetime) -> PropagatedPosition:
        """
        传播到指定时刻

        Raises:
            PropagationError: 根数或时刻无法传播
        """
        pass


def normalize_longitude(lon: float) -> float:
    """把经度归一化到[-180, 180]"""
    if -180.0 <= lon <= 180.0:
        return lon
    lon = (lon + 180.0) % 360.0 - 180.0
    return lon


def ground_track_point(
    propagator: GroundTrackPropagator,
    element_set: OrbitalElementSet,
    timestamp: datetime
) -> Tuple[float, float, float, OrbitNode]:
    """
    计算星下点 (lon, lat, alt, node)

    z向速度为正即由南向北的升轨。
    """
    position = propagator.propagate(element_set, timestamp)
    return (
        normalize_longitude(position.longitude),
        position.latitude,
        position.altitude_km,
        OrbitNode.from_velocity_z(position.velocity_z),
    )
