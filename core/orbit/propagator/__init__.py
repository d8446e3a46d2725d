"""星下点传播器"""

from .base import GroundTrackPropagator, PropagatedPosition, ground_track_point, normalize_longitude
from .sgp4_propagator import SGP4Propagator

__all__ = [
    'GroundTrackPropagator',
    'PropagatedPosition',
    'ground_track_point',
    'normalize_longitude',
    'SGP4Propagator',
]
