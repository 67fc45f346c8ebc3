"""
Unit tests for the analysis rate scheduler.
"""

import pytest

from utils.rate_scheduler import RateScheduler


class TestComputeDelay:
    """Tests for delay computation"""

    def test_first_cycle_runs_immediately(self):
        scheduler = RateScheduler()
        assert scheduler.compute_delay(None, now_ms=5000) == 0

    def test_waits_out_minimum_interval(self):
        scheduler = RateScheduler(min_interval_ms=2000)
        assert scheduler.compute_delay(1000, now_ms=1500) == 1500

    def test_no_delay_after_interval_elapsed(self):
        scheduler = RateScheduler(min_interval_ms=2000)
        assert scheduler.compute_delay(0, now_ms=2500) == 0

    def test_uses_injected_clock(self, fake_clock):
        scheduler = RateScheduler(min_interval_ms=2000, clock=fake_clock)
        fake_clock.advance(100)
        assert scheduler.compute_delay(0) == 1900

    def test_decision_reports_elapsed(self):
        decision = RateScheduler(min_interval_ms=2000).decide(1000, now_ms=1600)
        assert decision.first_cycle is False
        assert decision.elapsed_ms == 600
        assert decision.to_dict()["delayMs"] == 1400


class TestSchedulerConfig:
    """Tests for interval validation"""

    def test_retry_delay_is_nominal_interval(self):
        assert RateScheduler(min_interval_ms=2000, interval_ms=3000).retry_delay() == 3000

    def test_negative_minimum_rejected(self):
        with pytest.raises(ValueError):
            RateScheduler(min_interval_ms=-1)

    def test_interval_below_minimum_rejected(self):
        with pytest.raises(ValueError):
            RateScheduler(min_interval_ms=2000, interval_ms=1000)
