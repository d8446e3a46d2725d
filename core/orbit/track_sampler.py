"""
星下点采样器

在固定步长的时间序列上，为每颗卫星选择最近的根数并传播，得到星下点序列。
传播调用数 = 卫星数 × 时刻数，是整个流程的主要耗时。每个
(卫星, 时间块) 任务相互独立，只读共享根数目录，提交到线程池并行计算。
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.exceptions import PropagationError
from core.models.ground_track import GroundTrackSample, OrbitNode
from .element_catalog import ElementCatalog
from .propagator.base import GroundTrackPropagator, ground_track_point

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


class PropagationErrorPolicy(Enum):
    """传播失败时的处理策略"""
    ABORT = "abort"  # 整个运行失败，缺失样本会让统计产生偏差
    SKIP = "skip"    # 记录日志并丢弃该样本


def check_step(step_minutes: float, period_count: int, period_length_days: float) -> int:
    """
    校验采样步长并返回窗口内的步数

    Raises:
        ValueError: 参数非正，或步长不能整除一天与仿真窗口
    """
    if period_count <= 0:
        raise ValueError(f"period_count must be positive, got {period_count}")
    if period_length_days <= 0:
        raise ValueError(f"period_length_days must be positive, got {period_length_days}")
    if step_minutes <= 0:
        raise ValueError(f"step_minutes must be positive, got {step_minutes}")

    steps_per_day = MINUTES_PER_DAY / step_minutes
    n_steps = period_count * period_length_days * steps_per_day
    if abs(steps_per_day - round(steps_per_day)) > 1e-9 or abs(n_steps - round(n_steps)) > 1e-9:
        raise ValueError(
            f"step_minutes={step_minutes} does not evenly divide a day and the simulation window"
        )
    return int(round(n_steps))


def sample_times(
    start: datetime,
    period_count: int,
    period_length_days: float,
    step_minutes: float
) -> List[datetime]:
    """
    生成采样时刻

    从 start - step 开始，到 start + period_count * period_length_days - step
    为止（含），步长 step。起点提前一个步长，避免恰好落在周期边界上。

    Args:
        start: 仿真开始时刻
        period_count: 周期数
        period_length_days: 周期长度（天）
        step_minutes: 步长（分钟）

    Returns:
        List[datetime]: 升序时刻列表
    """
    n_steps = check_step(step_minutes, period_count, period_length_days)

    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)

    step = timedelta(minutes=step_minutes)
    first = start - step
    return [first + i * step for i in range(n_steps + 1)]


def elapsed_days(period_count: int, period_length_days: float) -> float:
    """仿真窗口的天数"""
    return period_count * period_length_days


class TrackSampler:
    """
    星下点采样器

    Attributes:
        propagator: 星下点传播器
        max_workers: 线程池大小，默认CPU核心数
        error_policy: 传播失败处理策略
        block_size: 每个任务包含的时刻数
    """

    def __init__(
        self,
        propagator: GroundTrackPropagator,
        max_workers: Optional[int] = None,
        error_policy: PropagationErrorPolicy = PropagationErrorPolicy.ABORT,
        block_size: int = 1440
    ):
        self.propagator = propagator
        self.max_workers = max_workers or (os.cpu_count() or 1)
        self.error_policy = PropagationErrorPolicy(error_policy)
        self.block_size = max(1, block_size)
        self.skipped: List[Tuple[str, datetime, str]] = []

    def sample(
        self,
        catalog: ElementCatalog,
        satellites: Sequence[str],
        start: datetime,
        period_count: int,
        period_length_days: float,
        step_minutes: float
    ) -> List[GroundTrackSample]:
        """
        计算所有 (卫星, 时刻) 的星下点

        Args:
            catalog: 根数目录
            satellites: 卫星标识列表，输出按此顺序排列
            start: 仿真开始时刻
            period_count: 周期数
            period_length_days: 周期长度（天）
            step_minutes: 步长（分钟）

        Returns:
            List[GroundTrackSample]: 按 (卫星顺序, 时刻) 排序的星下点

        Raises:
            CatalogEmpty: 某颗卫星在目录中没有根数
            PropagationError: 传播失败且策略为ABORT
        """
        times = sample_times(start, period_count, period_length_days, step_minutes)

        # 提前校验，避免在任务执行中途才发现缺少卫星
        for satellite_id in satellites:
            catalog.time_range(satellite_id)

        self.skipped = []
        tasks = [
            (satellite_id, block_index, times[offset:offset + self.block_size])
            for satellite_id in satellites
            for block_index, offset in enumerate(range(0, len(times), self.block_size))
        ]

        logger.info(
            f"Sampling {len(satellites)} satellites x {len(times)} timestamps "
            f"in {len(tasks)} tasks ({self.max_workers} workers)"
        )

        blocks: Dict[Tuple[str, int], List[GroundTrackSample]] = {}

        if self.max_workers == 1 or len(tasks) == 1:
            for satellite_id, block_index, block in tasks:
                blocks[(satellite_id, block_index)] = self._sample_block(catalog, satellite_id, block)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers,
                                    thread_name_prefix="track_sampler") as executor:
                futures = {
                    executor.submit(self._sample_block, catalog, satellite_id, block):
                        (satellite_id, block_index)
                    for satellite_id, block_index, block in tasks
                }

                completed = 0
                total = len(futures)
                progress_interval = max(1, total // 10)

                for future in as_completed(futures):
                    key = futures[future]
                    try:
                        blocks[key] = future.result()
                    except PropagationError:
                        for pending in futures:
                            pending.cancel()
                        raise
                    completed += 1
                    if completed % progress_interval == 0:
                        logger.info(f"Progress: {completed}/{total} ({100 * completed // total}%)")

        samples: List[GroundTrackSample] = []
        for satellite_id, block_index, _ in tasks:
            samples.extend(blocks[(satellite_id, block_index)])

        if self.skipped:
            logger.warning(f"Skipped {len(self.skipped)} samples after propagation errors")
        logger.info(f"Produced {len(samples)} ground-track samples")
        return samples

    def _sample_block(
        self,
        catalog: ElementCatalog,
        satellite_id: str,
        times: Iterable[datetime]
    ) -> List[GroundTrackSample]:
        """计算单颗卫星一个时间块的星下点（线程池中执行）"""
        samples = []
        for timestamp in times:
            element_set = catalog.select(satellite_id, timestamp)
            try:
                lon, lat, alt, node = ground_track_point(self.propagator, element_set, timestamp)
            except PropagationError as e:
                error = e
                if e.satellite_id is None or e.timestamp is None:
                    error = PropagationError(e.reason, satellite_id=satellite_id, timestamp=timestamp)
                if self.error_policy is PropagationErrorPolicy.ABORT:
                    if error is e:
                        raise
                    raise error from e
                logger.warning(f"Skipping sample: {error}")
                self.skipped.append((satellite_id, timestamp, str(error)))
                continue

            samples.append(GroundTrackSample(
                satellite_id=satellite_id,
                timestamp=timestamp,
                longitude=lon,
                latitude=lat,
                altitude_km=alt,
                node=node,
            ))
        return samples


def filter_by_node(
    samples: Iterable[GroundTrackSample],
    nodes: Iterable[OrbitNode]
) -> List[GroundTrackSample]:
    """只保留指定升降轨的星下点（例如仅统计白天的升轨过境）"""
    allowed = {OrbitNode(n) for n in nodes}
    return [s for s in samples if s.node in allowed]
