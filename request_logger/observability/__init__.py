from request_logger.observability.correlation import (
    CorrelationIdFilter,
    bind_correlation_id,
    get_correlation_id,
    new_correlation_id,
)
from request_logger.observability.logging import get_logger, setup_logging

__all__ = [
    "CorrelationIdFilter",
    "bind_correlation_id",
    "get_correlation_id",
    "get_logger",
    "new_correlation_id",
    "setup_logging",
]
