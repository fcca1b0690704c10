import logging
from logging.config import dictConfig

from request_logger.config import settings

_CONFIGURED = False


def setup_logging(level: str | None = None) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return
    _CONFIGURED = True

    level = (level or settings.log_level).upper()
    log_format = "%(asctime)s %(levelname)s %(name)s %(message)s %(correlation_id)s"

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": "pythonjsonlogger.json.JsonFormatter",
                    "fmt": log_format,
                },
            },
            "filters": {
                "correlation_id": {"()": "request_logger.observability.correlation.CorrelationIdFilter"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "filters": ["correlation_id"],
                    "level": level,
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {"handlers": ["console"], "level": level},
            "loggers": {
                "httpx": {"level": "WARNING", "propagate": True},
                "request_logger": {"level": level, "propagate": True},
            },
        }
    )
    logging.captureWarnings(True)
    logging.getLogger("request_logger").info("logging_configured", extra={"log_level": level})


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
