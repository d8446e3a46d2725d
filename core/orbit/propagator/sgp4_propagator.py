"""
SGP4轨道传播器

基于sgp4库实现星下点传播，纬度和高度相对WGS84椭球
"""

import math
import threading
from datetime import datetime, timezone
from typing import Dict, Tuple

from sgp4.api import Satrec, jday

from core.coverage.geodesy import geodetic_from_cartesian
from core.exceptions import PropagationError
from core.models.element_set import OrbitalElementSet
from .base import GroundTrackPropagator, PropagatedPosition


class SGP4Propagator(GroundTrackPropagator):
    """
    SGP4轨道传播器

    使用两行轨道根数(TLE)进行轨道传播。Satrec 在 sgp4() 调用时会写入内部
    状态，因此按线程缓存，线程池中的每个工作线程各持有一份。
    """

    def __init__(self):
        self._local = threading.local()

    def _satrec(self, element_set: OrbitalElementSet) -> Satrec:
        cache: Dict[Tuple[str, str], Satrec] = getattr(self._local, 'cache', None)
        if cache is None:
            cache = {}
            self._local.cache = cache

        key = (element_set.line1, element_set.line2)
        satrec = cache.get(key)
        if satrec is None:
            try:
                satrec = Satrec.twoline2rv(element_set.line1, element_set.line2)
            except (ValueError, IndexError) as e:
                raise PropagationError(
                    f"Invalid element set: {e}",
                    satellite_id=element_set.satellite_id,
                ) from e
            cache[key] = satrec
        return satrec

    def propagate(self, element_set: OrbitalElementSet, timestamp: datetime) -> PropagatedPosition:
        """
        传播到指定时间

        Args:
            element_set: 轨道根数
            timestamp: 目标时间（无时区时按UTC处理）

        Returns:
            PropagatedPosition: 星下点经纬高及z向速度

        Raises:
            PropagationError: SGP4返回非零错误码
        """
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(timezone.utc)

        satrec = self._satrec(element_set)
        jd, fr = jday(timestamp.year, timestamp.month, timestamp.day,
                      timestamp.hour, timestamp.minute,
                      timestamp.second + timestamp.microsecond / 1e6)

        error, position, velocity = satrec.sgp4(jd, fr)

        if error != 0:
            raise PropagationError(
                f"SGP4 propagation error code: {error}",
                satellite_id=element_set.satellite_id,
                timestamp=timestamp,
            )

        lat, lon, alt = self._eci_to_lla(position, jd, fr)

        return PropagatedPosition(
            longitude=lon,
            latitude=lat,
            altitude_km=alt,
            velocity_z=velocity[2],
        )

    def _eci_to_lla(self, position: Tuple[float, float, float],
                    jd: float, fr: float) -> Tuple[float, float, float]:
        """
        将TEME坐标转换为WGS84大地坐标

        纬度与高度只依赖于到自转轴的距离和z分量，与GMST旋转无关。

        Args:
            position: TEME坐标 (km)
            jd, fr: 儒略日整数部分与小数部分

        Returns:
            (latitude, longitude, altitude) in degrees and km
        """
        x, y, z = position

        lat, height_m = geodetic_from_cartesian(x * 1000.0, y * 1000.0, z * 1000.0)

        # 简化GMST计算
        d = jd - 2451545.0 + fr
        gmst = (18.697374558 + 24.06570982441908 * d) % 24
        gmst_deg = gmst * 15.0

        lon = (math.degrees(math.atan2(y, x)) - gmst_deg) % 360
        if lon > 180:
            lon -= 360

        return (lat, lon, height_m / 1000.0)
