"""Correlation id for the call currently being logged."""
import contextvars
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

correlation_id_ctx_var: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    return correlation_id_ctx_var.get() or ""


def new_correlation_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def bind_correlation_id(value: str) -> Iterator[str]:
    """Expose ``value`` to log records emitted inside the block."""
    token = correlation_id_ctx_var.set(value)
    try:
        yield value
    finally:
        correlation_id_ctx_var.reset(token)


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True
