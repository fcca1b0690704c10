from request_logger.client import HttpClient, build_client
from request_logger.engine import CallContext, CorrelationEngine, TerminalPhase
from request_logger.errors import ConfigurationError, RequestLoggerError, SinkNotCallableError
from request_logger.interception import VERBS, Intercepted, InstrumentedClient, instrument
from request_logger.operation import PHASES, Operation
from request_logger.records import ErrorRecord, RedirectRecord, RequestRecord, ResponseRecord, ResponseView
from request_logger.sinks import LoggingSink, stderr_sink

__all__ = [
    "PHASES",
    "VERBS",
    "CallContext",
    "ConfigurationError",
    "CorrelationEngine",
    "ErrorRecord",
    "HttpClient",
    "InstrumentedClient",
    "Intercepted",
    "LoggingSink",
    "Operation",
    "RedirectRecord",
    "RequestLoggerError",
    "RequestRecord",
    "ResponseRecord",
    "ResponseView",
    "SinkNotCallableError",
    "TerminalPhase",
    "build_client",
    "instrument",
    "stderr_sink",
]
