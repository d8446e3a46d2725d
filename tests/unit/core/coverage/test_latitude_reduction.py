"""
纬度归约测试
"""

import numpy as np
import pytest

from core.coverage.latitude_reduction import LatitudeReducer, reduce, sampling_axis
from core.models.coverage_grid import CoverageGrid, GridSpec


@pytest.fixture
def grid():
    g = CoverageGrid(GridSpec.global_grid(5.0))
    # 经度[0, 5)、纬度(0, 5]的网格
    g.values[17, 36] = 10.0
    return g


class TestSamplingAxis:
    """采样轴测试"""

    def test_inclusive_endpoints(self):
        axis = sampling_axis(-90.0, 90.0, 0.25)
        assert len(axis) == 721
        assert axis[0] == -90.0 and axis[-1] == 90.0

    def test_no_float_drift(self):
        axis = sampling_axis(-90.0, 90.0, 0.1)
        assert 0.3 in axis.tolist()

    def test_step_must_be_positive(self):
        with pytest.raises(ValueError):
            sampling_axis(0.0, 1.0, 0.0)


class TestReduce:
    """reduce测试"""

    def test_empty_bands_are_omitted(self, grid):
        correction = reduce(grid)
        # 纬度 0.25..5.0 落在第17行，且只有经度0落在第36列
        assert correction.latitudes[0] == 0.25
        assert correction.latitudes[-1] == 5.0
        assert len(correction) == 20
        row = correction.lookup(2.5)
        assert (row.mean_overpasses, row.min_overpasses, row.max_overpasses) == (10.0, 10.0, 10.0)

    def test_lookup_beyond_observed_bands(self, grid):
        correction = reduce(grid)
        assert correction.lat_step == 0.25
        assert correction.lookup(5.25).latitude == 5.0
        assert correction.lookup(6.0) is None
        assert correction.lookup(-1.0) is None

    def test_keep_unobserved(self, grid):
        correction = reduce(grid, skip_unobserved=False)
        assert len(correction) == 721
        row = correction.lookup(2.5)
        # 73 个经度采样点中只有1个落在有值网格上
        assert row.mean_overpasses == pytest.approx(10.0 / 73)
        assert row.min_overpasses == 0.0
        assert row.max_overpasses == 10.0
        assert correction.lookup(-60.0).mean_overpasses == 0.0

    def test_mean_min_max(self):
        g = CoverageGrid(GridSpec.global_grid(5.0))
        # 纬度 -42.5 所在行，三个不同经度的网格
        g.values[26, 0] = 2.0
        g.values[26, 10] = 4.0
        g.values[26, 20] = 9.0
        row = reduce(g).lookup(-42.5)
        assert row.mean_overpasses == pytest.approx(5.0)
        assert row.min_overpasses == 2.0
        assert row.max_overpasses == 9.0

    def test_nodata_cells_are_skipped(self, grid):
        grid.values[17, 37] = np.nan
        assert reduce(grid).lookup(2.5).mean_overpasses == 10.0

    def test_empty_grid(self):
        assert len(reduce(CoverageGrid(GridSpec.global_grid(5.0)))) == 0

    def test_partial_extent_grid(self):
        spec = GridSpec(cell_size=1.0, xmin=0, xmax=10, ymin=0, ymax=10)
        g = CoverageGrid(spec, np.ones(spec.shape))
        correction = reduce(g, lon_step_deg=5.0, lat_step_deg=1.0)
        assert correction.latitudes == [float(v) for v in range(0, 11)]
        assert all(r.mean_overpasses == 1.0 for r in correction)

    def test_reducer_class(self, grid):
        reducer = LatitudeReducer(lon_step_deg=5.0, lat_step_deg=1.0)
        correction = reducer.reduce(grid)
        assert correction.latitudes == [1.0, 2.0, 3.0, 4.0, 5.0]
