"""
轨道根数模型 - TLE两行根数及其参考时刻

TLE格式参考: https://www.celestrak.com/NORAD/documentation/tle-fmt.php
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Any
import math

from core.exceptions import CatalogFormatError


def parse_tle_epoch(line1: str) -> datetime:
    """
    从TLE第一行解析参考时刻

    第19-20列为两位年份（按2000+YY处理），第21-32列为带小数的年积日。
    小数部分先换算为整小时，剩余部分四舍五入到分钟。

    Args:
        line1: TLE第一行

    Returns:
        datetime: UTC参考时刻

    Raises:
        CatalogFormatError: 行格式不合法
    """
    if len(line1) < 32 or not line1.startswith('1'):
        raise CatalogFormatError(f"Not a TLE line 1: {line1!r}")

    year_field = line1[18:20]
    day_field = line1[20:32].strip()

    try:
        year = 2000 + int(year_field)
        doy_str, _, frac_str = day_field.partition('.')
        doy = int(doy_str)
        partial_day = float(f"0.{frac_str}") if frac_str else 0.0
    except ValueError as e:
        raise CatalogFormatError(f"Invalid epoch field in TLE line 1: {line1!r}") from e

    hour_dec = 24 * partial_day
    hour_int = math.floor(hour_dec)
    minute = round((hour_dec - hour_int) * 60)

    return (
        datetime(year, 1, 1, tzinfo=timezone.utc)
        + timedelta(days=doy - 1, hours=hour_int, minutes=minute)
    )


@dataclass(frozen=True)
class OrbitalElementSet:
    """
    单组轨道根数

    Attributes:
        satellite_id: 卫星标识（如 "aqua"）
        reference_time: 根数参考时刻（UTC）
        line1: TLE第一行
        line2: TLE第二行
    """
    satellite_id: str
    reference_time: datetime
    line1: str
    line2: str

    @classmethod
    def from_tle(cls, satellite_id: str, line1: str, line2: str) -> 'OrbitalElementSet':
        """由TLE两行构造，参考时刻取自第一行"""
        line1 = line1.rstrip()
        line2 = line2.rstrip()
        if not line2.startswith('2'):
            raise CatalogFormatError(f"Not a TLE line 2: {line2!r}")
        return cls(
            satellite_id=satellite_id,
            reference_time=parse_tle_epoch(line1),
            line1=line1,
            line2=line2,
        )

    @property
    def catalog_number(self) -> str:
        """NORAD编号"""
        return self.line1[2:7].strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'satellite_id': self.satellite_id,
            'reference_time': self.reference_time.isoformat(),
            'line1': self.line1,
            'line2': self.line2,
        }
