"""可视化模块"""

from .coverage_map import CoverageMapVisualizer, function_plot_latitudes

__all__ = [
    'CoverageMapVisualizer',
    'function_plot_latitudes',
]
