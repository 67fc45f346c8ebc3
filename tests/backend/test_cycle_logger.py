"""
Unit tests for cycle logging and metrics.
"""

import logging

import pytest

from services.cycle_logger import CycleLogger


class TestCycleLogger:
    def test_stage_timing_recorded(self):
        cycle_log = CycleLogger("abc", 1)
        with cycle_log.stage("capture", camera="fake") as stage:
            stage.metadata["hasFrame"] = True

        metrics = cycle_log.complete("delivered")
        assert metrics.outcome == "delivered"
        assert metrics.stages[0].stage == "capture"
        assert metrics.stages[0].success is True
        assert metrics.stages[0].metadata == {"camera": "fake", "hasFrame": True}
        assert metrics.total_duration_ms is not None

    def test_failed_stage_reraises(self):
        cycle_log = CycleLogger("abc", 2)
        with pytest.raises(RuntimeError):
            with cycle_log.stage("inference"):
                raise RuntimeError("timeout")

        assert cycle_log.metrics.failed_stage == "inference"
        assert cycle_log.metrics.stages[0].error == "timeout"

    def test_non_delivered_cycles_log_warning(self, caplog):
        cycle_log = CycleLogger("abc", 3)
        with caplog.at_level(logging.INFO, logger="shotcoach.cycle"):
            cycle_log.complete("skipped")

        record = caplog.records[0]
        assert record.levelno == logging.WARNING
        assert "[abc#3]" in record.getMessage()
        assert record.session_id == "abc"

    def test_summary_and_dict(self):
        cycle_log = CycleLogger("abc", 4)
        with cycle_log.stage("parse"):
            pass
        metrics = cycle_log.complete("delivered")

        assert "DELIVERED" in metrics.summary()
        data = metrics.to_dict()
        assert data["sessionId"] == "abc"
        assert data["stages"][0]["stage"] == "parse"


class TestConfigureLogging:
    def test_installs_single_handler(self):
        from services.cycle_logger import configure_coaching_logging

        configure_coaching_logging(level=logging.DEBUG)
        configure_coaching_logging(level=logging.DEBUG)

        cycle_logger = logging.getLogger("shotcoach.cycle")
        try:
            assert len(cycle_logger.handlers) == 1
            assert cycle_logger.level == logging.DEBUG
            assert cycle_logger.propagate is False
        finally:
            cycle_logger.handlers.clear()
            cycle_logger.propagate = True
            cycle_logger.setLevel(logging.NOTSET)
