"""
核心模块 - Aqua/Terra 过境频率纬度修正

包含数据模型、轨道根数选择与传播、足迹构造、栅格化与纬度归约
"""

from .exceptions import (
    OverpassError,
    CatalogEmpty,
    CatalogFormatError,
    NotFound,
    PropagationError,
    GeometryDegenerate,
    DatelineSplitFailure,
)

__all__ = [
    'OverpassError',
    'CatalogEmpty',
    'CatalogFormatError',
    'NotFound',
    'PropagationError',
    'GeometryDegenerate',
    'DatelineSplitFailure',
]
