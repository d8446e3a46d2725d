"""
星下点采样模型
"""

from enum import Enum
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Any


class OrbitNode(Enum):
    """升降轨枚举"""
    ASCENDING = "ascending"    # 由南向北
    DESCENDING = "descending"  # 由北向南

    @classmethod
    def from_velocity_z(cls, velocity_z: float) -> 'OrbitNode':
        """z向速度为正即为升轨"""
        return cls.ASCENDING if velocity_z > 0 else cls.DESCENDING


@dataclass(frozen=True)
class GroundTrackSample:
    """
    单颗卫星在单个时刻的星下点

    Attributes:
        satellite_id: 卫星标识
        timestamp: 采样时刻（UTC）
        longitude: 经度（度，[-180, 180]）
        latitude: 纬度（度，[-90, 90]）
        altitude_km: 轨道高度（公里）
        node: 升轨/降轨
    """
    satellite_id: str
    timestamp: datetime
    longitude: float
    latitude: float
    altitude_km: float
    node: OrbitNode

    def to_dict(self) -> Dict[str, Any]:
        return {
            'satellite_id': self.satellite_id,
            'timestamp': self.timestamp.isoformat(),
            'longitude': self.longitude,
            'latitude': self.latitude,
            'altitude_km': self.altitude_km,
            'node': self.node.value,
        }
