"""
纬度修正表模型测试
"""

import pytest

from core.models.latitude_correction import LatitudeCorrection, LatitudeCorrectionRow


def _row(lat, mean, low=None, high=None):
    return LatitudeCorrectionRow(
        latitude=lat,
        mean_overpasses=mean,
        min_overpasses=mean if low is None else low,
        max_overpasses=mean if high is None else high,
    )


@pytest.fixture
def table():
    return LatitudeCorrection([_row(10.0, 2.0), _row(0.0, 1.0), _row(20.0, 0.0)])


class TestLatitudeCorrection:
    """LatitudeCorrection测试"""

    def test_rows_sorted_by_latitude(self, table):
        assert table.latitudes == [0.0, 10.0, 20.0]
        assert len(table) == 3

    def test_lookup_nearest(self, table):
        assert table.lookup(8.0).latitude == 10.0
        assert table.lookup(-8.0).latitude == 0.0
        assert table.lookup(29.0).latitude == 20.0

    def test_lookup_beyond_table_is_missing(self, table):
        """超出首尾纬度带一个间距的查询没有数据"""
        assert table.lat_step == 10.0
        assert table.lookup(-50.0) is None
        assert table.lookup(85.0) is None
        assert table.correct(10, 85.0) is None

    def test_explicit_lat_step(self):
        correction = LatitudeCorrection([_row(84.0, 14.0), _row(83.75, 13.5)], lat_step=0.25)
        assert correction.lookup(84.2).latitude == 84.0
        assert correction.lookup(89.0) is None

    def test_single_row_without_step_is_unbounded(self):
        assert LatitudeCorrection([_row(0.0, 1.0)]).lookup(60.0).latitude == 0.0

    def test_lookup_tie_goes_south(self, table):
        assert table.lookup(5.0).latitude == 0.0

    def test_lookup_empty(self):
        assert LatitudeCorrection([]).lookup(0.0) is None

    def test_correct_divides_by_mean(self, table):
        assert table.correct(10, 9.0) == pytest.approx(5.0)

    def test_correct_zero_mean_is_missing(self, table):
        assert table.correct(10, 20.0) is None

    def test_records(self, table):
        records = table.to_records()
        assert list(records[0].keys()) == list(LatitudeCorrection.COLUMNS)
        rebuilt = LatitudeCorrection.from_records(records)
        assert rebuilt.rows == table.rows
