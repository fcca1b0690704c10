import json
import logging

import pytest

from request_logger.config import Settings
from request_logger.errors import SinkNotCallableError
from request_logger.records import ErrorRecord, RequestRecord, ResponseRecord, ResponseView
from request_logger.sinks import LoggingSink, resolve_sink, stderr_sink


def _response_record(status: int) -> ResponseRecord:
    return ResponseRecord(
        id="abc",
        uri="http://foo.bar/",
        response=ResponseView(headers={"content-type": "text/plain"}, statusCode=status),
        duration=2.0,
    )


def test_stderr_sink_writes_json(capsys):
    stderr_sink(RequestRecord(id="abc", method="GET", uri="http://foo.bar/", headers={}))

    payload = json.loads(capsys.readouterr().err)
    assert payload == {"type": "request", "id": "abc", "method": "GET", "uri": "http://foo.bar/", "headers": {}}


def test_resolve_sink_defaults_to_stderr():
    assert resolve_sink(None, Settings(default_sink="stderr")) is stderr_sink


def test_resolve_sink_can_default_to_logging():
    sink = resolve_sink(None, Settings(default_sink="logging", logger_name="tests.http"))

    assert isinstance(sink, LoggingSink)
    assert sink.logger.name == "tests.http"


def test_resolve_sink_rejects_non_callables():
    with pytest.raises(SinkNotCallableError) as excinfo:
        resolve_sink("foo")
    assert excinfo.value.sink == "foo"


def test_resolve_sink_keeps_callables():
    def sink(record, operation):
        return None

    assert resolve_sink(sink) is sink


@pytest.mark.parametrize(
    ("status", "level"),
    [(200, logging.INFO), (302, logging.INFO), (404, logging.WARNING), (503, logging.ERROR)],
)
def test_logging_sink_levels(caplog, status, level):
    sink = LoggingSink(logging.getLogger("tests.http"))

    with caplog.at_level(logging.INFO, logger="tests.http"):
        sink(_response_record(status))

    entry = caplog.records[-1]
    assert entry.levelno == level
    assert entry.getMessage() == "http_response"
    assert entry.id == "abc"
    assert entry.response == {"headers": {"content-type": "text/plain"}, "statusCode": status}


def test_logging_sink_logs_errors(caplog):
    sink = LoggingSink(logging.getLogger("tests.http"))
    record = ErrorRecord(
        id="abc", method="GET", uri="http://foo.bar/", headers={}, error=ValueError("boom"), duration=0.0
    )

    with caplog.at_level(logging.INFO, logger="tests.http"):
        sink(record)

    entry = caplog.records[-1]
    assert entry.levelno == logging.ERROR
    assert entry.error == "ValueError: boom"
