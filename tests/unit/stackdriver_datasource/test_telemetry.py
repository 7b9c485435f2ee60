import json
import logging
import sys

from opentelemetry import trace
from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags

from stackdriver_datasource.telemetry import JsonFormatter


def _record(message="hello", exc_info=None):
    return logging.LogRecord(
        name="stackdriver_datasource.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=exc_info,
    )


def test_json_formatter_fields():
    payload = json.loads(JsonFormatter().format(_record()))

    assert payload["severity"] == "WARNING"
    assert payload["logger"] == "stackdriver_datasource.test"
    assert payload["message"] == "hello"
    assert "trace_id" not in payload


def test_json_formatter_adds_trace_context():
    context = SpanContext(
        trace_id=0x1234,
        span_id=0x56,
        is_remote=False,
        trace_flags=TraceFlags(TraceFlags.SAMPLED),
    )
    with trace.use_span(NonRecordingSpan(context)):
        payload = json.loads(JsonFormatter().format(_record()))

    assert payload["trace_id"] == format(0x1234, "032x")
    assert payload["span_id"] == format(0x56, "016x")


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad")
    except ValueError:
        record = _record(exc_info=sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))

    assert "ValueError: bad" in payload["exception"]
