"""轨道计算模块 - 包含根数目录、轨道传播器和星下点采样"""

from .element_catalog import ElementCatalog, select
from .propagator.sgp4_propagator import SGP4Propagator
from .propagator.base import GroundTrackPropagator, PropagatedPosition
from .track_sampler import TrackSampler, PropagationErrorPolicy, sample_times

__all__ = [
    'ElementCatalog',
    'select',
    'SGP4Propagator',
    'GroundTrackPropagator',
    'PropagatedPosition',
    'TrackSampler',
    'PropagationErrorPolicy',
    'sample_times',
]
