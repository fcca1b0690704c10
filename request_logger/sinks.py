from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any

from request_logger.config import Settings, settings as default_settings
from request_logger.errors import SinkNotCallableError
from request_logger.observability.logging import get_logger
from request_logger.records import Record

Sink = Callable[[Record, Any], Any]


def stderr_sink(record: Record, operation: Any = None) -> None:
    print(record.to_json(), file=sys.stderr)


class LoggingSink:
    """Send records to a logger as ``http_<type>`` events."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or get_logger(default_settings.logger_name)

    def __call__(self, record: Record, operation: Any = None) -> None:
        self.logger.log(
            self._level(record),
            f"http_{record.type}",
            extra=record.model_dump(mode="json", by_alias=True, exclude_none=True),
        )

    @staticmethod
    def _level(record: Record) -> int:
        if record.type == "error":
            return logging.ERROR
        if record.type == "request":
            return logging.INFO
        status = record.response.status_code
        if status >= 500:
            return logging.ERROR
        if status >= 400:
            return logging.WARNING
        return logging.INFO


def resolve_sink(sink: Any = None, settings: Settings = default_settings) -> Sink:
    if sink is None:
        if settings.default_sink == "logging":
            return LoggingSink(get_logger(settings.logger_name))
        return stderr_sink
    if not callable(sink):
        raise SinkNotCallableError(sink)
    return sink
