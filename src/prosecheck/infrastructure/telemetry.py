"""TelemetryPort implementation on top of the logging module."""

import logging

from prosecheck.domain.constants import TOOL_NAME
from prosecheck.domain.protocols import TelemetryPort


class LoggingTelemetry(TelemetryPort):
    """Routes progress to a named logger; the CLI decides where records go."""

    def __init__(self, project_name: str = TOOL_NAME, logger: logging.Logger | None = None) -> None:
        self.project_name = project_name
        self.logger = logger or logging.getLogger(f"{TOOL_NAME}.telemetry")

    def handshake(self) -> None:
        self.logger.debug("%s online", self.project_name)

    def step(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)
