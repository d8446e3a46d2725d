"""
Pytest 配置文件

定义测试共用的 fixtures：合成TLE、根数目录和不依赖真实轨道力学的假传播器
"""

from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Optional, Tuple

import pytest

from core.exceptions import PropagationError
from core.models.element_set import OrbitalElementSet
from core.orbit.element_catalog import ElementCatalog
from core.orbit.propagator.base import GroundTrackPropagator, PropagatedPosition


# sgp4 项目文档中的国际空间站根数，用于真实传播测试
ISS_LINE1 = "1 25544U 98067A   19343.69339541  .00001764  00000-0  38792-4 0  9991"
ISS_LINE2 = "2 25544  51.6439 211.2001 0007417  17.6667  85.6398 15.50103472202482"


def make_line1(epoch: str, catalog_number: str = "27424", designator: str = "02022A") -> str:
    """按TLE列宽拼接第一行，epoch形如 '19001.50000000'"""
    return f"1 {catalog_number}U {designator:<8} {epoch}  .00000071  00000-0  25840-4 0  9990"


def make_line2(catalog_number: str = "27424", mean_anomaly: str = "268.4570") -> str:
    return f"2 {catalog_number}  98.2089  68.8780 0001271  91.6780 {mean_anomaly} 14.57111232 92001"


def make_tle_text(epochs: Iterable[str], catalog_number: str = "27424") -> str:
    lines = []
    for epoch in epochs:
        lines.append(make_line1(epoch, catalog_number))
        lines.append(make_line2(catalog_number))
    return "\n".join(lines) + "\n"


class StationaryPropagator(GroundTrackPropagator):
    """
    假传播器：每颗卫星固定在一个星下点

    Args:
        positions: 卫星标识 -> (lon, lat)
        velocity_z: 常数或 timestamp -> z向速度 的函数
        fail_at: 在这些 (卫星, 时刻) 上抛出 PropagationError
    """

    def __init__(
        self,
        positions: Dict[str, Tuple[float, float]],
        velocity_z=1.0,
        fail_at: Optional[Iterable[Tuple[str, datetime]]] = None
    ):
        self.positions = positions
        self.velocity_z = velocity_z
        self.fail_at = set(fail_at or ())
        self.calls = 0

    def propagate(self, element_set: OrbitalElementSet, timestamp: datetime) -> PropagatedPosition:
        self.calls += 1
        if (element_set.satellite_id, timestamp) in self.fail_at:
            raise PropagationError("element set decayed")
        lon, lat = self.positions[element_set.satellite_id]
        vz = self.velocity_z(timestamp) if callable(self.velocity_z) else self.velocity_z
        return PropagatedPosition(longitude=lon, latitude=lat, altitude_km=705.0, velocity_z=vz)


def synthetic_catalog(satellite_ids: Iterable[str], epoch: str = "19001.00000000") -> ElementCatalog:
    """每颗卫星一组合成根数"""
    return ElementCatalog([
        OrbitalElementSet.from_tle(sid, make_line1(epoch), make_line2())
        for sid in satellite_ids
    ])


@pytest.fixture
def utc_start() -> datetime:
    return datetime(2019, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def two_satellite_catalog() -> ElementCatalog:
    return synthetic_catalog(["aqua", "terra"])


@pytest.fixture
def stationary_propagator() -> StationaryPropagator:
    return StationaryPropagator({"aqua": (2.5, 2.5), "terra": (-177.5, -42.5)})


@pytest.fixture
def propagator_factory() -> Callable[..., StationaryPropagator]:
    return StationaryPropagator
