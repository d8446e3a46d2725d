"""
星下点采样器测试
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import CatalogEmpty, PropagationError
from core.models.ground_track import OrbitNode
from core.orbit.track_sampler import (
    PropagationErrorPolicy,
    TrackSampler,
    elapsed_days,
    filter_by_node,
    sample_times,
)


class TestSampleTimes:
    """采样时刻生成测试"""

    def test_count_and_bounds(self, utc_start):
        times = sample_times(utc_start, 1, 1, 60)
        assert len(times) == 25
        assert times[0] == utc_start - timedelta(minutes=60)
        assert times[-1] == utc_start + timedelta(hours=23)

    def test_default_resolution(self, utc_start):
        times = sample_times(utc_start, 3, 16, 1)
        assert len(times) == 3 * 16 * 1440 + 1

    def test_step_must_divide_window(self, utc_start):
        with pytest.raises(ValueError):
            sample_times(utc_start, 1, 1, 7)

    @pytest.mark.parametrize("args", [(0, 16, 1), (1, 0, 1), (1, 16, 0)])
    def test_rejects_non_positive(self, utc_start, args):
        with pytest.raises(ValueError):
            sample_times(utc_start, *args)

    def test_naive_start_is_utc(self):
        times = sample_times(datetime(2019, 1, 1), 1, 1, 720)
        assert times[0].tzinfo == timezone.utc

    def test_elapsed_days(self):
        assert elapsed_days(3, 16) == 48


class TestTrackSampler:
    """TrackSampler测试"""

    def test_output_ordered_by_satellite_then_time(
        self, two_satellite_catalog, stationary_propagator, utc_start
    ):
        sampler = TrackSampler(stationary_propagator, max_workers=4, block_size=5)
        samples = sampler.sample(two_satellite_catalog, ["terra", "aqua"], utc_start, 1, 1, 60)

        assert len(samples) == 50
        assert [s.satellite_id for s in samples[:25]] == ["terra"] * 25
        assert [s.satellite_id for s in samples[25:]] == ["aqua"] * 25
        terra_times = [s.timestamp for s in samples[:25]]
        assert terra_times == sorted(terra_times)
        assert samples[0].longitude == -177.5
        assert samples[0].node is OrbitNode.ASCENDING

    def test_serial_matches_parallel(self, two_satellite_catalog, stationary_propagator, utc_start):
        serial = TrackSampler(stationary_propagator, max_workers=1).sample(
            two_satellite_catalog, ["aqua", "terra"], utc_start, 1, 1, 60
        )
        parallel = TrackSampler(stationary_propagator, max_workers=3, block_size=4).sample(
            two_satellite_catalog, ["aqua", "terra"], utc_start, 1, 1, 60
        )
        assert serial == parallel

    def test_missing_satellite_fails_before_propagation(
        self, two_satellite_catalog, stationary_propagator, utc_start
    ):
        sampler = TrackSampler(stationary_propagator)
        with pytest.raises(CatalogEmpty):
            sampler.sample(two_satellite_catalog, ["aqua", "modis"], utc_start, 1, 1, 60)
        assert stationary_propagator.calls == 0

    def test_abort_policy(self, two_satellite_catalog, propagator_factory, utc_start):
        bad_time = utc_start + timedelta(hours=3)
        propagator = propagator_factory(
            {"aqua": (0.0, 0.0), "terra": (10.0, 0.0)},
            fail_at=[("terra", bad_time)],
        )
        sampler = TrackSampler(propagator, max_workers=2, block_size=6)
        with pytest.raises(PropagationError) as excinfo:
            sampler.sample(two_satellite_catalog, ["aqua", "terra"], utc_start, 1, 1, 60)
        assert excinfo.value.satellite_id == "terra"
        assert excinfo.value.timestamp == bad_time

    def test_skip_policy(self, two_satellite_catalog, propagator_factory, utc_start):
        bad_time = utc_start + timedelta(hours=3)
        propagator = propagator_factory(
            {"aqua": (0.0, 0.0), "terra": (10.0, 0.0)},
            fail_at=[("terra", bad_time)],
        )
        sampler = TrackSampler(propagator, max_workers=1, error_policy="skip")
        samples = sampler.sample(two_satellite_catalog, ["aqua", "terra"], utc_start, 1, 1, 60)
        assert len(samples) == 49
        assert len(sampler.skipped) == 1
        assert sampler.skipped[0][:2] == ("terra", bad_time)
        assert bad_time not in [s.timestamp for s in samples if s.satellite_id == "terra"]

    def test_longitude_normalized(self, two_satellite_catalog, propagator_factory, utc_start):
        propagator = propagator_factory({"aqua": (190.0, 0.0), "terra": (0.0, 0.0)})
        samples = TrackSampler(propagator, max_workers=1).sample(
            two_satellite_catalog, ["aqua"], utc_start, 1, 1, 720
        )
        assert samples[0].longitude == pytest.approx(-170.0)


class TestFilterByNode:
    """升降轨过滤测试"""

    def test_keeps_requested_node(self, two_satellite_catalog, propagator_factory, utc_start):
        propagator = propagator_factory(
            {"aqua": (0.0, 0.0), "terra": (0.0, 0.0)},
            velocity_z=lambda ts: 1.0 if ts.hour % 2 == 0 else -1.0,
        )
        samples = TrackSampler(propagator, max_workers=1).sample(
            two_satellite_catalog, ["aqua"], utc_start, 1, 1, 60
        )
        ascending = filter_by_node(samples, [OrbitNode.ASCENDING])
        descending = filter_by_node(samples, ["descending"])
        assert len(ascending) + len(descending) == len(samples)
        assert all(s.timestamp.hour % 2 == 0 for s in ascending)
        assert all(s.node is OrbitNode.DESCENDING for s in descending)
