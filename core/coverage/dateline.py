"""
日期变更线拆分

足迹顶点的经度归一化到[-180, 180]后，跨越±180°的边会被误当作横跨整个
地球的长边。这里先把经度展开成连续值，再按 [-540,-180]、[-180,180]、
[180,540] 三个窗口裁剪，每一部分平移回[-180, 180]，得到互不重叠、
都不跨越日期变更线的若干闭合环。
"""

from typing import Callable, List, Tuple

from core.exceptions import DatelineSplitFailure

Point = Tuple[float, float]

_WINDOW_OFFSETS = (-1, 0, 1)
_MIN_PART_AREA = 1e-12


def _base_longitude(lon: float) -> float:
    """把展开后的经度映射回[-180, 180)以便与原始经度作差"""
    if -180.0 <= lon < 180.0:
        return lon
    return (lon + 180.0) % 360.0 - 180.0


def unwrap_longitudes(ring: List[Point]) -> List[Point]:
    """展开经度，使相邻顶点经度差不超过180°"""
    if not ring:
        return []
    unwrapped = [ring[0]]
    for lon, lat in ring[1:]:
        prev_lon = unwrapped[-1][0]
        delta = lon - _base_longitude(prev_lon)
        if delta > 180.0:
            delta -= 360.0
        elif delta < -180.0:
            delta += 360.0
        unwrapped.append((prev_lon + delta, lat))
    return unwrapped


def ring_area(ring: List[Point]) -> float:
    """平面鞋带公式面积（度²，取绝对值）"""
    total = 0.0
    for i in range(len(ring) - 1):
        x1, y1 = ring[i]
        x2, y2 = ring[i + 1]
        total += x1 * y2 - x2 * y1
    return abs(total) / 2.0


def _clip(
    points: List[Point],
    inside: Callable[[Point], bool],
    boundary: float
) -> List[Point]:
    """Sutherland-Hodgman：按竖直线 x=boundary 裁剪（points不含闭合点）"""

    def intersect(p: Point, q: Point) -> Point:
        t = (boundary - p[0]) / (q[0] - p[0])
        return (boundary, p[1] + t * (q[1] - p[1]))

    output: List[Point] = []
    for i in range(len(points)):
        current = points[i]
        previous = points[i - 1]
        if inside(current):
            if not inside(previous):
                output.append(intersect(previous, current))
            output.append(current)
        elif inside(previous):
            output.append(intersect(previous, current))
    return output


def _close(points: List[Point]) -> List[Point]:
    if points and points[0] != points[-1]:
        return points + [points[0]]
    return list(points)


def split_at_antimeridian(ring: List[Point]) -> List[List[Point]]:
    """
    将闭合环拆分为不跨越±180°的若干部分

    Args:
        ring: 闭合环 [(lon, lat), ...]，首尾顶点相同

    Returns:
        List[List[Point]]: 一个或多个闭合环，经度都在[-180, 180]内

    Raises:
        DatelineSplitFailure: 环包围极点（展开后无法闭合）或拆分后没有合法部分
    """
    if len(ring) < 4:
        raise DatelineSplitFailure(f"Ring has too few vertices: {len(ring)}")

    unwrapped = unwrap_longitudes(ring)

    closure = unwrapped[-1][0] - unwrapped[0][0]
    if abs(closure) > 1e-6:
        raise DatelineSplitFailure(
            f"Ring does not close after unwrapping (offset {closure:.1f} deg); it encloses a pole"
        )
    unwrapped[-1] = unwrapped[0]

    lons = [p[0] for p in unwrapped]
    min_lon, max_lon = min(lons), max(lons)
    if max_lon - min_lon >= 360.0:
        raise DatelineSplitFailure(f"Ring spans {max_lon - min_lon:.1f} deg of longitude")

    if -180.0 <= min_lon and max_lon <= 180.0:
        return [unwrapped]

    open_ring = unwrapped[:-1]
    parts: List[List[Point]] = []
    for k in _WINDOW_OFFSETS:
        lo = -180.0 + 360.0 * k
        hi = 180.0 + 360.0 * k
        if max_lon <= lo or min_lon >= hi:
            continue

        clipped = _clip(open_ring, lambda p, lo=lo: p[0] >= lo, lo)
        clipped = _clip(clipped, lambda p, hi=hi: p[0] <= hi, hi)
        if len(clipped) < 3:
            continue

        shift = 360.0 * k
        part = _close([(min(180.0, max(-180.0, lon - shift)), lat) for lon, lat in clipped])
        if ring_area(part) <= _MIN_PART_AREA:
            continue
        parts.append(part)

    if not parts:
        raise DatelineSplitFailure("Splitting at the antimeridian produced no valid parts")

    return parts
