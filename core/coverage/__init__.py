"""
Coverage geometry calculation module

Provides bowtie footprint construction, antimeridian splitting, coverage
rasterization and latitude reduction for overpass correction.
"""

from .footprint_calculator import FootprintCalculator, FootprintOptions, build_footprint
from .dateline import split_at_antimeridian
from .rasterizer import CoverageRasterizer, rasterize
from .latitude_reduction import LatitudeReducer, reduce

__all__ = [
    'FootprintCalculator', 'FootprintOptions', 'build_footprint',
    'split_at_antimeridian',
    'CoverageRasterizer', 'rasterize',
    'LatitudeReducer', 'reduce',
]
