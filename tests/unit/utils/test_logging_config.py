"""Tests for the loguru setup and stage/run context binding."""

import sys

import pytest
from loguru import logger

from patloc.utils.logging_config import (
    configure_logging_from_config,
    current_logger,
    log_with_context,
    setup_logging,
)


pytestmark = pytest.mark.fast


@pytest.fixture
def records():
    """Capture emitted records; restores the test sink afterwards."""
    captured = []
    handler = logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    logger.remove(handler)


@pytest.fixture
def restore_sink():
    yield
    logger.remove()
    logger.add(sys.stderr, level="INFO")


class TestLogContext:
    """Tests for log_with_context and current_logger."""

    def test_bound_logger(self, records):
        with log_with_context(stage="pool", run_id="abc") as log:
            log.info("inside")

        assert records[-1]["extra"]["stage"] == "pool"
        assert records[-1]["extra"]["run_id"] == "abc"

    def test_current_logger_follows_context(self, records):
        with log_with_context(stage="impute_geo", run_id="r1"):
            current_logger().info("nested")
        current_logger().info("outside")

        assert records[-2]["extra"] == {"stage": "impute_geo", "run_id": "r1"}
        assert records[-1]["extra"] == {"stage": "-", "run_id": "-"}

    def test_nested_stage_keeps_run_id(self, records):
        with log_with_context(stage="extract", run_id="r3"):
            with log_with_context(stage="bridge") as log:
                log.info("inner")
            current_logger().info("outer")

        assert records[-2]["extra"] == {"stage": "bridge", "run_id": "r3"}
        assert records[-1]["extra"] == {"stage": "extract", "run_id": "r3"}

    def test_context_reset_after_error(self, records):
        with pytest.raises(RuntimeError):
            with log_with_context(stage="impute_country", run_id="r4"):
                raise RuntimeError("boom")
        current_logger().info("after")

        assert records[-1]["extra"] == {"stage": "-", "run_id": "-"}


class TestSetupLogging:
    """Tests for sink installation."""

    def test_file_sink(self, tmp_path, restore_sink):
        log_file = tmp_path / "logs" / "patloc.log"
        setup_logging(level="DEBUG", file_path=str(log_file))

        with log_with_context(stage="bridge", run_id="r2") as log:
            log.debug("bridge built")

        text = log_file.read_text(encoding="utf-8")
        assert "bridge built" in text
        assert "bridge" in text and "r2" in text

    def test_invalid_level_falls_back(self, tmp_path, restore_sink):
        log_file = tmp_path / "patloc.log"
        setup_logging(level="LOUD", file_path=str(log_file))

        logger.debug("hidden")
        logger.info("shown")

        text = log_file.read_text(encoding="utf-8")
        assert "shown" in text
        assert "hidden" not in text
        assert "falling back to 'INFO'" in text

    def test_configure_from_config(self, tmp_path, monkeypatch, restore_sink):
        log_file = tmp_path / "run.log"
        monkeypatch.setenv("PATLOC__LOGGING__FILE_ENABLED", "true")
        monkeypatch.setenv("PATLOC__LOGGING__FILE_PATH", str(log_file))
        monkeypatch.setenv("PATLOC__LOGGING__FORMAT", "json")

        configure_logging_from_config()
        logger.info("configured")

        assert '"configured"' in log_file.read_text(encoding="utf-8")
