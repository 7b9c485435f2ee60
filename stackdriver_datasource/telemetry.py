"""Logging and tracing setup for the Stackdriver data source."""

import json
import logging
import os
import sys

from opentelemetry import trace

TRACER_NAME = "stackdriver_datasource"


def get_tracer() -> trace.Tracer:
    """Tracer used to wrap outbound backend requests in spans."""
    return trace.get_tracer(TRACER_NAME)


class JsonFormatter(logging.Formatter):
    """Basic JSON log formatter with OTel correlation."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": self.formatTime(record, self.datefmt),
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "func": record.funcName,
        }

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            log_obj["trace_id"] = format(span_context.trace_id, "032x")
            log_obj["span_id"] = format(span_context.span_id, "016x")

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj)


def setup_logging(level: int | str | None = None) -> None:
    """Configure root logging from ``LOG_LEVEL`` and ``LOG_FORMAT``.

    ``LOG_FORMAT=JSON`` switches to one JSON object per line; anything else
    keeps the plain text format.
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if isinstance(level, str):
        level = logging.getLevelName(level)
        if not isinstance(level, int):
            level = logging.INFO

    # Silence chatty transport loggers
    for logger_name in ["httpx", "httpcore", "asyncio"]:
        logging.getLogger(logger_name).setLevel(max(level, logging.INFO))

    log_format = os.environ.get("LOG_FORMAT", "TEXT").upper()
    if log_format == "JSON":
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logging.getLogger().handlers = [handler]
        logging.getLogger().setLevel(level)
    else:
        logging.basicConfig(
            stream=sys.stdout,
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            force=True,
        )
