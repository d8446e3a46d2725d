"""
纬度修正表模型 - 纬度到日均过境次数（均值/最小/最大）的经验函数
"""

import bisect
from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Tuple


@dataclass(frozen=True)
class LatitudeCorrectionRow:
    """修正表中的一行"""
    latitude: float
    mean_overpasses: float
    min_overpasses: float
    max_overpasses: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'latitude': self.latitude,
            'mean_overpasses': self.mean_overpasses,
            'min_overpasses': self.min_overpasses,
            'max_overpasses': self.max_overpasses,
        }


class LatitudeCorrection:
    """
    纬度修正表

    行按纬度升序排列，构造后不可修改。下游用于把观测计数（如火点数）
    除以当地日均过境次数。
    """

    COLUMNS = ('latitude', 'mean_overpasses', 'min_overpasses', 'max_overpasses')

    def __init__(self, rows: List[LatitudeCorrectionRow], lat_step: Optional[float] = None):
        """
        Args:
            rows: 修正表行（任意顺序）
            lat_step: 纬度带间距，默认取相邻行的最小间距；
                查询超出首尾行一个间距时视为无数据
        """
        self._rows: Tuple[LatitudeCorrectionRow, ...] = tuple(
            sorted(rows, key=lambda r: r.latitude)
        )
        self._latitudes = [r.latitude for r in self._rows]
        if lat_step is None:
            gaps = [b - a for a, b in zip(self._latitudes, self._latitudes[1:]) if b > a]
            lat_step = min(gaps) if gaps else None
        self.lat_step = lat_step

    @property
    def rows(self) -> Tuple[LatitudeCorrectionRow, ...]:
        return self._rows

    @property
    def latitudes(self) -> List[float]:
        return list(self._latitudes)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self):
        return iter(self._rows)

    def lookup(self, latitude: float) -> Optional[LatitudeCorrectionRow]:
        """
        查找最近纬度带

        距离相同时取较南的一行。表为空，或查询纬度超出首尾行一个
        lat_step 以上时返回None（单行表且未给出lat_step时不设限）。

        Args:
            latitude: 纬度（度）

        Returns:
            Optional[LatitudeCorrectionRow]: 最近的纬度带
        """
        if not self._rows:
            return None
        if self.lat_step is not None and not (
            self._latitudes[0] - self.lat_step <= latitude <= self._latitudes[-1] + self.lat_step
        ):
            return None
        idx = bisect.bisect_left(self._latitudes, latitude)
        if idx == 0:
            return self._rows[0]
        if idx == len(self._rows):
            return self._rows[-1]
        before = self._rows[idx - 1]
        after = self._rows[idx]
        if latitude - before.latitude <= after.latitude - latitude:
            return before
        return after

    def correct(self, count: float, latitude: float) -> Optional[float]:
        """
        按纬度修正观测计数：count / 日均过境次数

        纬度带缺失或均值为0时返回None。
        """
        row = self.lookup(latitude)
        if row is None or row.mean_overpasses <= 0:
            return None
        return count / row.mean_overpasses

    def to_records(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self._rows]

    @classmethod
    def from_records(cls, records: List[Dict[str, Any]]) -> 'LatitudeCorrection':
        return cls([
            LatitudeCorrectionRow(
                latitude=float(rec['latitude']),
                mean_overpasses=float(rec['mean_overpasses']),
                min_overpasses=float(rec['min_overpasses']),
                max_overpasses=float(rec['max_overpasses']),
            )
            for rec in records
        ])
