"""Unit tests for LoggingTelemetry."""

import logging
from unittest.mock import MagicMock

import pytest

from prosecheck.infrastructure.telemetry import LoggingTelemetry


def test_levels_route_to_logger() -> None:
    logger = MagicMock()
    telemetry = LoggingTelemetry(logger=logger)

    telemetry.handshake()
    telemetry.step("working")
    telemetry.warning("careful")
    telemetry.error("broken")

    logger.debug.assert_called_once_with("%s online", "prosecheck")
    logger.info.assert_called_once_with("working")
    logger.warning.assert_called_once_with("careful")
    logger.error.assert_called_once_with("broken")


def test_default_logger_name(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="prosecheck.telemetry"):
        LoggingTelemetry().step("hello")
    assert [(r.name, r.getMessage()) for r in caplog.records] == [("prosecheck.telemetry", "hello")]
