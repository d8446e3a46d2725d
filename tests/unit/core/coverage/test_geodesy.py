"""
大地测量工具函数测试
"""

import math

import pytest

from core.coverage.geodesy import (
    central_angle,
    WGS84_A,
    WGS84_B,
    WGS84_F,
    destination_point,
    geodetic_from_cartesian,
    great_circle_intermediate,
    wrap_longitude,
)


class TestDestinationPoint:
    """Vincenty正解测试"""

    def test_zero_distance(self):
        assert destination_point(10.0, 20.0, 45.0, 0.0) == (10.0, 20.0)

    def test_due_north_along_meridian(self):
        lon, lat = destination_point(0.0, 0.0, 0.0, 110574.0)
        assert lon == pytest.approx(0.0, abs=1e-9)
        # WGS84上赤道附近1°纬度约110.574 km
        assert lat == pytest.approx(1.0, abs=1e-3)

    def test_due_east_along_equator(self):
        lon, lat = destination_point(0.0, 0.0, 90.0, 111319.49)
        assert lon == pytest.approx(1.0, abs=1e-4)
        assert lat == pytest.approx(0.0, abs=1e-9)

    def test_wraps_across_antimeridian(self):
        lon, lat = destination_point(179.5, 0.0, 90.0, 111319.49)
        assert lon == pytest.approx(-179.5, abs=1e-4)

    def test_symmetric_bearings(self):
        east = destination_point(30.0, 45.0, 80.0, 500000.0)
        west = destination_point(30.0, 45.0, 280.0, 500000.0)
        assert east[1] == pytest.approx(west[1], abs=1e-9)
        assert east[0] - 30.0 == pytest.approx(30.0 - west[0], abs=1e-9)


class TestGreatCircle:
    """大圆计算测试"""

    def test_central_angle_quarter(self):
        assert central_angle((0.0, 0.0), (90.0, 0.0)) == pytest.approx(math.pi / 2)

    def test_intermediate_points_evenly_spaced(self):
        points = great_circle_intermediate((0.0, 0.0), (4.0, 0.0), 3)
        assert len(points) == 3
        for (lon, lat), expected in zip(points, [1.0, 2.0, 3.0]):
            assert lon == pytest.approx(expected)
            assert lat == pytest.approx(0.0, abs=1e-9)

    def test_intermediate_none(self):
        assert great_circle_intermediate((0.0, 0.0), (4.0, 0.0), 0) == []

    def test_intermediate_coincident(self):
        assert great_circle_intermediate((5.0, 5.0), (5.0, 5.0), 2) == [(5.0, 5.0), (5.0, 5.0)]

    def test_intermediate_across_antimeridian(self):
        (lon, lat), = great_circle_intermediate((179.0, 0.0), (-179.0, 0.0), 1)
        assert abs(lon) == pytest.approx(180.0)


class TestWrapLongitude:
    """经度归一化测试"""

    def test_in_range_unchanged(self):
        assert wrap_longitude(180.0) == 180.0
        assert wrap_longitude(-180.0) == -180.0

    def test_wraps(self):
        assert wrap_longitude(181.0) == pytest.approx(-179.0)
        assert wrap_longitude(-181.0) == pytest.approx(179.0)


def _cartesian(lat_deg, height):
    """大地纬度/椭球高 -> 地固坐标（经度取0）"""
    e2 = WGS84_F * (2 - WGS84_F)
    lat = math.radians(lat_deg)
    n = WGS84_A / math.sqrt(1 - e2 * math.sin(lat) ** 2)
    return ((n + height) * math.cos(lat), 0.0, (n * (1 - e2) + height) * math.sin(lat))


class TestGeodeticFromCartesian:
    """地固坐标转大地坐标测试"""

    def test_equator(self):
        lat, height = geodetic_from_cartesian(WGS84_A + 705000.0, 0.0, 0.0)
        assert lat == pytest.approx(0.0, abs=1e-12)
        assert height == pytest.approx(705000.0, abs=1e-6)

    def test_pole(self):
        lat, height = geodetic_from_cartesian(0.0, 0.0, -(WGS84_B + 705000.0))
        assert lat == pytest.approx(-90.0)
        assert height == pytest.approx(705000.0, abs=1e-6)

    @pytest.mark.parametrize("lat_deg", [-81.8, -49.97, 10.0, 45.0, 70.0])
    def test_recovers_geodetic_latitude(self, lat_deg):
        lat, height = geodetic_from_cartesian(*_cartesian(lat_deg, 722600.0))
        assert lat == pytest.approx(lat_deg, abs=1e-9)
        assert height == pytest.approx(722600.0, abs=1e-3)

    def test_differs_from_geocentric_latitude(self):
        x, y, z = _cartesian(45.0, 705000.0)
        geocentric = math.degrees(math.atan2(z, math.hypot(x, y)))
        lat, _ = geodetic_from_cartesian(x, y, z)
        # 中纬度上两者相差约0.17°
        assert lat - geocentric == pytest.approx(0.17, abs=0.03)
