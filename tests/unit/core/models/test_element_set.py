"""
轨道根数模型测试
"""

from datetime import datetime, timezone

import pytest

from core.exceptions import CatalogFormatError
from core.models.element_set import OrbitalElementSet, parse_tle_epoch
from tests.conftest import ISS_LINE1, ISS_LINE2, make_line1, make_line2


class TestParseTleEpoch:
    """参考时刻解析测试"""

    def test_half_day(self):
        """年积日小数0.5为正午"""
        epoch = parse_tle_epoch(make_line1("19001.50000000"))
        assert epoch == datetime(2019, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_minutes_are_rounded(self):
        """小数部分换算为整小时后，余数四舍五入到分钟"""
        # 0.69339541 天 = 16.6414898 小时 -> 16:38.49 -> 16:38
        epoch = parse_tle_epoch(ISS_LINE1)
        assert epoch == datetime(2019, 12, 9, 16, 38, tzinfo=timezone.utc)

    def test_day_of_year_offset(self):
        """年积日从1开始计数"""
        epoch = parse_tle_epoch(make_line1("20060.00000000"))
        assert epoch == datetime(2020, 2, 29, tzinfo=timezone.utc)

    def test_rejects_line2(self):
        with pytest.raises(CatalogFormatError):
            parse_tle_epoch(ISS_LINE2)

    def test_rejects_garbage_epoch(self):
        line = make_line1("19001.50000000").replace("19001.50000000", "19abc.50000000")
        with pytest.raises(CatalogFormatError):
            parse_tle_epoch(line)


class TestOrbitalElementSet:
    """OrbitalElementSet测试"""

    def test_from_tle(self):
        es = OrbitalElementSet.from_tle("iss", ISS_LINE1, ISS_LINE2)
        assert es.satellite_id == "iss"
        assert es.catalog_number == "25544"
        assert es.reference_time.tzinfo is not None

    def test_trailing_whitespace_is_stripped(self):
        es = OrbitalElementSet.from_tle("aqua", make_line1("19001.00000000") + "  ", make_line2() + "\t")
        assert es.line1 == make_line1("19001.00000000")
        assert es.line2 == make_line2()

    def test_line2_must_start_with_2(self):
        with pytest.raises(CatalogFormatError):
            OrbitalElementSet.from_tle("aqua", make_line1("19001.00000000"), make_line1("19001.00000000"))

    def test_to_dict(self):
        es = OrbitalElementSet.from_tle("aqua", make_line1("19001.50000000"), make_line2())
        data = es.to_dict()
        assert data["satellite_id"] == "aqua"
        assert data["reference_time"] == "2019-01-01T12:00:00+00:00"
