"""核心数据模型"""

from .element_set import OrbitalElementSet, parse_tle_epoch
from .ground_track import GroundTrackSample, OrbitNode
from .footprint import FootprintPolygon, Ring
from .coverage_grid import GridSpec, CoverageGrid
from .latitude_correction import LatitudeCorrection, LatitudeCorrectionRow

__all__ = [
    'OrbitalElementSet', 'parse_tle_epoch',
    'GroundTrackSample', 'OrbitNode',
    'FootprintPolygon', 'Ring',
    'GridSpec', 'CoverageGrid',
    'LatitudeCorrection', 'LatitudeCorrectionRow',
]
