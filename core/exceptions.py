"""
过境修正流水线异常定义

所有致命错误都继承自 OverpassError，携带足够的上下文（卫星、时刻）以便复现。
"""

from datetime import datetime
from typing import Optional


class OverpassError(Exception):
    """过境修正流水线基础异常"""
    pass


class CatalogFormatError(OverpassError):
    """TLE目录格式错误"""
    pass


class CatalogEmpty(OverpassError):
    """目录中没有所请求卫星的轨道根数"""

    def __init__(self, satellite_id: str):
        self.satellite_id = satellite_id
        super().__init__(f"No element sets found for satellite '{satellite_id}'")


# 按最近时刻查找失败时的通用名称
NotFound = CatalogEmpty


class PropagationError(OverpassError):
    """外部轨道传播器拒绝了给定的根数/时刻"""

    def __init__(
        self,
        message: str,
        satellite_id: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ):
        self.reason = message
        self.satellite_id = satellite_id
        self.timestamp = timestamp
        context = []
        if satellite_id is not None:
            context.append(f"satellite={satellite_id}")
        if timestamp is not None:
            context.append(f"timestamp={timestamp.isoformat()}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class GeometryDegenerate(OverpassError):
    """足迹几何退化（偏移或距离非正），通常是配置错误"""
    pass


class DatelineSplitFailure(OverpassError):
    """足迹多边形无法在日期变更线处拆分为合法的部分"""
    pass
