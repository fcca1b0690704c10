"""Correlates the phases of each outbound call and logs them.

The wrapped client reports completion two ways: an optional callback given at
call time and the ``response``/``complete`` phases. Logging both would produce
two terminal records, so each call is gated at invocation: without a callback
the ``response`` phase is terminal, with one the ``complete`` phase is, and it
is the only one that carries the response body. ``redirect`` and ``error`` are
never gated.
"""
from __future__ import annotations

import enum
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from typing import Any

import httpx

from request_logger.config import Settings, settings as default_settings
from request_logger.observability.correlation import bind_correlation_id, new_correlation_id
from request_logger.observability.logging import get_logger
from request_logger.records import (
    ErrorRecord,
    RedirectRecord,
    Record,
    RequestRecord,
    ResponseRecord,
    ResponseView,
    clone_headers,
    decode_body,
    extract_uri,
)
from request_logger.sinks import Sink, resolve_sink

log = get_logger("request_logger.engine")


class TerminalPhase(str, enum.Enum):
    RESPONSE = "response"
    COMPLETE = "complete"


@dataclass(frozen=True)
class CallContext:
    id: str
    terminal_phase: TerminalPhase
    started_at: float = field(default_factory=time.perf_counter)

    @classmethod
    def for_operation(cls, id: str, operation: Any, started_at: float) -> CallContext:
        if getattr(operation, "callback", None) is None:
            return cls(id, TerminalPhase.RESPONSE, started_at)
        return cls(id, TerminalPhase.COMPLETE, started_at)

    def duration(self) -> float:
        return round((time.perf_counter() - self.started_at) * 1000, 2)


class CorrelationEngine:
    """Apply handler for the interception layer."""

    def __init__(self, sink: Sink | None = None, *, settings: Settings = default_settings):
        self.sink = resolve_sink(sink, settings)
        self.settings = settings
        log.debug("engine_configured", extra={"sink": getattr(self.sink, "__name__", type(self.sink).__name__)})

    def __call__(self, target: Callable[..., Any], args: tuple = (), kwargs: dict[str, Any] | None = None) -> Any:
        call_id = new_correlation_id()
        started_at = time.perf_counter()
        operation = target(*args, **(kwargs or {}))
        context = CallContext.for_operation(call_id, operation, started_at)

        operation.on("request", partial(self._on_request, context, operation))
        operation.on("response", partial(self._on_response, context, operation))
        operation.on("redirect", partial(self._on_redirect, context, operation))
        operation.on("complete", partial(self._on_complete, context, operation))
        operation.on("error", partial(self._on_error, context, operation))
        return operation

    def _dispatch(self, context: CallContext, record: Record, operation: Any) -> None:
        with bind_correlation_id(context.id):
            self.sink(record, operation)

    def _on_request(self, context: CallContext, operation: Any) -> None:
        record = RequestRecord(
            id=context.id,
            method=operation.method,
            uri=extract_uri(operation.uri),
            headers=clone_headers(operation.headers),
            body=decode_body(operation.body, self.settings.body_encoding),
        )
        self._dispatch(context, record, operation)

    def _on_response(self, context: CallContext, operation: Any, response: httpx.Response) -> None:
        if context.terminal_phase is not TerminalPhase.RESPONSE:
            return
        record = ResponseRecord(
            id=context.id,
            uri=extract_uri(operation.uri),
            response=ResponseView(headers=clone_headers(response.headers), statusCode=response.status_code),
            duration=context.duration(),
        )
        self._dispatch(context, record, operation)

    def _on_redirect(self, context: CallContext, operation: Any) -> None:
        response = operation.response
        record = RedirectRecord(
            id=context.id,
            uri=extract_uri(operation.uri),
            response=ResponseView(headers=clone_headers(response.headers), statusCode=response.status_code),
            duration=context.duration(),
        )
        self._dispatch(context, record, operation)

    def _on_complete(self, context: CallContext, operation: Any, response: httpx.Response) -> None:
        if context.terminal_phase is not TerminalPhase.COMPLETE:
            return
        record = ResponseRecord(
            id=context.id,
            uri=extract_uri(operation.uri),
            response=ResponseView(
                headers=clone_headers(response.headers),
                statusCode=response.status_code,
                body=response.text,
            ),
            duration=context.duration(),
        )
        self._dispatch(context, record, operation)

    def _on_error(self, context: CallContext, operation: Any, error: BaseException) -> None:
        record = ErrorRecord(
            id=context.id,
            method=operation.method.upper(),
            uri=extract_uri(operation.uri),
            headers=clone_headers(operation.headers),
            error=error,
            duration=context.duration(),
        )
        self._dispatch(context, record, operation)
