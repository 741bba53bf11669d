"""Tests for the log_operation helper."""

import logging

import pytest

from upbeat.infrastructure.observability import log_operation

logger = logging.getLogger("upbeat.tests.operation")


class TestLogOperation:
    async def test_logs_started_and_completed(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger=logger.name)

        async with log_operation(logger, "demo", playlist_id="p1"):
            pass

        messages = [r.getMessage() for r in caplog.records]
        assert messages == ["demo.started", "demo.completed"]
        completed = caplog.records[-1]
        assert completed.playlist_id == "p1"
        assert completed.duration_ms >= 0

    async def test_logs_failed_and_reraises(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger=logger.name)

        with pytest.raises(ValueError):
            async with log_operation(logger, "demo"):
                raise ValueError("nope")

        failed = caplog.records[-1]
        assert failed.getMessage() == "demo.failed"
        assert failed.levelno == logging.ERROR
        assert failed.error_type == "ValueError"
