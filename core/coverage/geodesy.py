"""
大地测量工具函数

- 正解：给定起点、方位角和距离求终点（WGS84椭球上的Vincenty公式）
- 大圆插值：两点之间球面最短路径上的中间点
- 地固坐标转WGS84大地纬度与椭球高
"""

import math
from typing import List, Tuple

# =============================================================================
# WGS84椭球参数
# =============================================================================

WGS84_A = 6378137.0
WGS84_F = 1 / 298.257223563
WGS84_B = (1 - WGS84_F) * WGS84_A

_VINCENTY_TOLERANCE = 1e-12
_VINCENTY_MAX_ITER = 200

_GEODETIC_TOLERANCE = 1e-12
_GEODETIC_MAX_ITER = 20


def wrap_longitude(lon: float) -> float:
    """经度归一化到[-180, 180]，范围内的值原样返回"""
    if -180.0 <= lon <= 180.0:
        return lon
    return (lon + 180.0) % 360.0 - 180.0


def destination_point(
    lon: float,
    lat: float,
    bearing: float,
    distance: float
) -> Tuple[float, float]:
    """
    椭球面正解（Vincenty direct）

    Args:
        lon: 起点经度（度）
        lat: 起点纬度（度）
        bearing: 初始方位角（度，正北为0，顺时针）
        distance: 距离（米）

    Returns:
        Tuple[float, float]: 终点 (lon, lat)，经度归一化到[-180, 180]
    """
    if distance == 0:
        return (wrap_longitude(lon), lat)

    a, b, f = WGS84_A, WGS84_B, WGS84_F

    alpha1 = math.radians(bearing)
    sin_alpha1 = math.sin(alpha1)
    cos_alpha1 = math.cos(alpha1)

    tan_u1 = (1 - f) * math.tan(math.radians(lat))
    cos_u1 = 1 / math.sqrt(1 + tan_u1 * tan_u1)
    sin_u1 = tan_u1 * cos_u1

    sigma1 = math.atan2(tan_u1, cos_alpha1)
    sin_alpha = cos_u1 * sin_alpha1
    cos_sq_alpha = 1 - sin_alpha * sin_alpha
    u_sq = cos_sq_alpha * (a * a - b * b) / (b * b)
    big_a = 1 + u_sq / 16384 * (4096 + u_sq * (-768 + u_sq * (320 - 175 * u_sq)))
    big_b = u_sq / 1024 * (256 + u_sq * (-128 + u_sq * (74 - 47 * u_sq)))

    sigma = distance / (b * big_a)
    for _ in range(_VINCENTY_MAX_ITER):
        cos_2sigma_m = math.cos(2 * sigma1 + sigma)
        sin_sigma = math.sin(sigma)
        cos_sigma = math.cos(sigma)
        delta_sigma = big_b * sin_sigma * (
            cos_2sigma_m + big_b / 4 * (
                cos_sigma * (-1 + 2 * cos_2sigma_m * cos_2sigma_m)
                - big_b / 6 * cos_2sigma_m * (-3 + 4 * sin_sigma * sin_sigma)
                * (-3 + 4 * cos_2sigma_m * cos_2sigma_m)
            )
        )
        sigma_prev = sigma
        sigma = distance / (b * big_a) + delta_sigma
        if abs(sigma - sigma_prev) < _VINCENTY_TOLERANCE:
            break

    cos_2sigma_m = math.cos(2 * sigma1 + sigma)
    sin_sigma = math.sin(sigma)
    cos_sigma = math.cos(sigma)

    x = sin_u1 * sin_sigma - cos_u1 * cos_sigma * cos_alpha1
    lat2 = math.atan2(
        sin_u1 * cos_sigma + cos_u1 * sin_sigma * cos_alpha1,
        (1 - f) * math.sqrt(sin_alpha * sin_alpha + x * x)
    )
    lam = math.atan2(
        sin_sigma * sin_alpha1,
        cos_u1 * cos_sigma - sin_u1 * sin_sigma * cos_alpha1
    )
    c = f / 16 * cos_sq_alpha * (4 + f * (4 - 3 * cos_sq_alpha))
    big_l = lam - (1 - c) * f * sin_alpha * (
        sigma + c * sin_sigma * (cos_2sigma_m + c * cos_sigma * (-1 + 2 * cos_2sigma_m * cos_2sigma_m))
    )

    lon2 = lon + math.degrees(big_l)
    return (wrap_longitude(lon2), math.degrees(lat2))


def central_angle(p1: Tuple[float, float], p2: Tuple[float, float]) -> float:
    """
    两点间球心角（弧度），Haversine公式

    Args:
        p1: (lon, lat) 位置1
        p2: (lon, lat) 位置2
    """
    lat1, lon1 = math.radians(p1[1]), math.radians(p1[0])
    lat2, lon2 = math.radians(p2[1]), math.radians(p2[0])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = (math.sin(dlat / 2)**2 +
         math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2)**2)
    return 2 * math.atan2(math.sqrt(h), math.sqrt(max(0.0, 1 - h)))


def geodetic_from_cartesian(x: float, y: float, z: float) -> Tuple[float, float]:
    """
    地固直角坐标转WGS84大地纬度与椭球高

    不动点迭代 lat = atan2(z + e²·N·sin(lat), p)。

    Args:
        x, y, z: 地固坐标（米）

    Returns:
        Tuple[float, float]: (大地纬度（度）, 椭球高（米）)
    """
    e2 = WGS84_F * (2 - WGS84_F)
    p = math.hypot(x, y)
    lat = math.atan2(z, p * (1 - e2))

    for _ in range(_GEODETIC_MAX_ITER):
        sin_lat = math.sin(lat)
        n = WGS84_A / math.sqrt(1 - e2 * sin_lat * sin_lat)
        next_lat = math.atan2(z + e2 * n * sin_lat, p)
        converged = abs(next_lat - lat) < _GEODETIC_TOLERANCE
        lat = next_lat
        if converged:
            break

    sin_lat = math.sin(lat)
    # 极点附近(p -> 0)同样成立
    height = p * math.cos(lat) + z * sin_lat - WGS84_A * math.sqrt(1 - e2 * sin_lat * sin_lat)
    return math.degrees(lat), height


def great_circle_intermediate(
    p1: Tuple[float, float],
    p2: Tuple[float, float],
    n: int
) -> List[Tuple[float, float]]:
    """
    大圆路径上的n个中间点（不含端点），等间隔分布

    Args:
        p1: 起点 (lon, lat)
        p2: 终点 (lon, lat)
        n: 中间点数量

    Returns:
        List[Tuple[float, float]]: 中间点 (lon, lat)
    """
    if n <= 0:
        return []

    d = central_angle(p1, p2)
    if d < 1e-15:
        return [(p1[0], p1[1]) for _ in range(n)]

    lat1, lon1 = math.radians(p1[1]), math.radians(p1[0])
    lat2, lon2 = math.radians(p2[1]), math.radians(p2[0])
    sin_d = math.sin(d)

    points = []
    for i in range(1, n + 1):
        frac = i / (n + 1)
        a = math.sin((1 - frac) * d) / sin_d
        b = math.sin(frac * d) / sin_d
        x = a * math.cos(lat1) * math.cos(lon1) + b * math.cos(lat2) * math.cos(lon2)
        y = a * math.cos(lat1) * math.sin(lon1) + b * math.cos(lat2) * math.sin(lon2)
        z = a * math.sin(lat1) + b * math.sin(lat2)
        lat = math.atan2(z, math.sqrt(x * x + y * y))
        lon = math.atan2(y, x)
        points.append((math.degrees(lon), math.degrees(lat)))

    return points
