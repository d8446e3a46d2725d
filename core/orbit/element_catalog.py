"""
轨道根数目录

TLE历史文件是一个大文本，每组根数占两行。预测某一时刻的卫星位置时，
应使用参考时刻与该时刻最接近的那组根数。
"""

import bisect
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from core.exceptions import CatalogEmpty, CatalogFormatError
from core.models.element_set import OrbitalElementSet

logger = logging.getLogger(__name__)


def _pair_tle_lines(lines: Iterable[str]) -> List[Tuple[str, str]]:
    """按行号把TLE行配对为 (line1, line2)"""
    pairs = []
    pending: Optional[str] = None

    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip('\r\n')
        if not line.strip():
            continue

        line_number = line[0]
        if line_number == '1':
            if pending is not None:
                raise CatalogFormatError(f"Line {lineno}: TLE line 1 without a matching line 2")
            pending = line
        elif line_number == '2':
            if pending is None:
                raise CatalogFormatError(f"Line {lineno}: TLE line 2 without a preceding line 1")
            pairs.append((pending, line))
            pending = None
        else:
            raise CatalogFormatError(f"Line {lineno}: expected line number 1 or 2, got {line_number!r}")

    if pending is not None:
        raise CatalogFormatError("Trailing TLE line 1 without a matching line 2")

    return pairs


class ElementCatalog:
    """
    轨道根数目录

    支持多颗卫星。加载时按卫星分组并按参考时刻稳定排序一次，
    之后按最近时刻二分查找。加载后只读，可被多线程并发读取。
    """

    def __init__(self, element_sets: Iterable[OrbitalElementSet] = ()):
        """
        Args:
            element_sets: 根数集合，顺序即目录顺序（用于平局时的先到先得）
        """
        self._sets: List[OrbitalElementSet] = list(element_sets)
        self._index: Dict[str, Tuple[List[datetime], List[int]]] = {}
        self._build_index()

    def _build_index(self) -> None:
        by_satellite: Dict[str, List[int]] = {}
        for position, element_set in enumerate(self._sets):
            by_satellite.setdefault(element_set.satellite_id, []).append(position)

        for satellite_id, positions in by_satellite.items():
            # sorted() 是稳定排序，同一参考时刻保持目录顺序
            positions = sorted(positions, key=lambda p: self._sets[p].reference_time)
            times = [self._sets[p].reference_time for p in positions]
            self._index[satellite_id] = (times, positions)

    @classmethod
    def from_tle_text(cls, text: str, satellite_id: str) -> 'ElementCatalog':
        """
        从TLE文本构造目录

        Args:
            text: 多组TLE文本（每组两行，行首为行号1或2）
            satellite_id: 卫星标识

        Returns:
            ElementCatalog: 根数目录

        Raises:
            CatalogFormatError: 格式不合法
        """
        pairs = _pair_tle_lines(text.splitlines())
        return cls(
            OrbitalElementSet.from_tle(satellite_id, line1, line2)
            for line1, line2 in pairs
        )

    @classmethod
    def from_tle_file(cls, path: Union[str, Path], satellite_id: str) -> 'ElementCatalog':
        """从TLE文件构造目录"""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"TLE文件不存在: {path}")
        catalog = cls.from_tle_text(path.read_text(encoding='utf-8'), satellite_id)
        logger.info(f"Loaded {len(catalog)} element sets for {satellite_id} from {path}")
        return catalog

    @classmethod
    def merge(cls, *catalogs: 'ElementCatalog') -> 'ElementCatalog':
        """按给定顺序合并多个目录"""
        element_sets: List[OrbitalElementSet] = []
        for catalog in catalogs:
            element_sets.extend(catalog._sets)
        return cls(element_sets)

    def __len__(self) -> int:
        return len(self._sets)

    def __iter__(self):
        return iter(self._sets)

    def satellites(self) -> List[str]:
        """目录中的卫星（按首次出现顺序）"""
        return list(self._index.keys())

    def count(self, satellite_id: str) -> int:
        entry = self._index.get(satellite_id)
        return len(entry[1]) if entry else 0

    def time_range(self, satellite_id: str) -> Tuple[datetime, datetime]:
        """某卫星根数参考时刻的范围"""
        times, _ = self._lookup(satellite_id)
        return times[0], times[-1]

    def _lookup(self, satellite_id: str) -> Tuple[List[datetime], List[int]]:
        entry = self._index.get(satellite_id)
        if entry is None or not entry[0]:
            raise CatalogEmpty(satellite_id)
        return entry

    def select(self, satellite_id: str, timestamp: datetime) -> OrbitalElementSet:
        """
        选择参考时刻与目标时刻最接近的一组根数

        时间差相同（例如一前一后等距，或参考时刻重复）时取目录中先出现的一组。

        Args:
            satellite_id: 卫星标识
            timestamp: 目标时刻

        Returns:
            OrbitalElementSet: 最近的根数

        Raises:
            CatalogEmpty: 目录中没有该卫星的根数
        """
        times, positions = self._lookup(satellite_id)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        idx = bisect.bisect_left(times, timestamp)
        candidates = []
        if idx > 0:
            candidates.append(abs(timestamp - times[idx - 1]))
        if idx < len(times):
            candidates.append(abs(times[idx] - timestamp))
        best = min(candidates)

        # 收集所有距离等于best的根数（最多两个参考时刻，各自可能重复）
        tied: List[int] = []
        for ref_time in {timestamp - best, timestamp + best}:
            lo = bisect.bisect_left(times, ref_time)
            hi = bisect.bisect_right(times, ref_time)
            tied.extend(positions[lo:hi])

        return self._sets[min(tied)]


def select(catalog: ElementCatalog, satellite_id: str, timestamp: datetime) -> OrbitalElementSet:
    """按最近参考时刻选择根数（无副作用）"""
    return catalog.select(satellite_id, timestamp)
