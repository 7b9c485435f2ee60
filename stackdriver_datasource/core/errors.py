"""User-facing messages for data source failures.

Each error variant has its own formatter. Proxy error bodies are parsed on a
best-effort basis; anything with an unexpected shape falls back to the
generic "cannot connect" message.
"""

import json
import logging
from typing import Any

from ..exceptions import MalformedResponseError, StatusError, TransportError

logger = logging.getLogger(__name__)

MESSAGE_PREFIX = "Stackdriver: "
DEFAULT_ERROR_MESSAGE = "Cannot connect to Stackdriver API"


def _parse_json(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return value
    if not isinstance(value, str):
        return None
    try:
        return json.loads(value)
    except ValueError:
        return None


def _api_error(payload: Any) -> dict[str, Any] | None:
    """Extract ``{"code", "message"}`` from a Google API error document."""
    parsed = _parse_json(payload)
    if isinstance(parsed, dict) and isinstance(parsed.get("error"), dict):
        return parsed["error"]
    return None


def format_status_error(error: StatusError) -> str:
    message = MESSAGE_PREFIX
    if error.status_text:
        message += f"{error.status_text}: "

    data = error.data if isinstance(error.data, dict) else {}
    if data.get("error"):
        api_error = _api_error(data["error"])
        if api_error is not None:
            return message + f"{api_error.get('code')}. {api_error.get('message')}"
        return message + str(data["error"])

    if data.get("message"):
        api_error = _api_error(data["message"])
        if api_error is not None and api_error.get("message"):
            return str(api_error["message"])
        return message + str(data["message"])

    return message + DEFAULT_ERROR_MESSAGE


def format_transport_error(error: TransportError) -> str:
    return MESSAGE_PREFIX + DEFAULT_ERROR_MESSAGE


def format_malformed_response(error: MalformedResponseError) -> str:
    return f"{MESSAGE_PREFIX}Unexpected response from Stackdriver API: {error.message}"


def format_stackdriver_error(error: BaseException) -> str:
    """Format any failure of a proxy round-trip for display."""
    if isinstance(error, StatusError):
        return format_status_error(error)
    if isinstance(error, TransportError):
        return format_transport_error(error)
    if isinstance(error, MalformedResponseError):
        return format_malformed_response(error)
    logger.debug(f"Formatting unexpected error type {type(error).__name__}: {error}")
    return MESSAGE_PREFIX + DEFAULT_ERROR_MESSAGE


def format_connection_test_error(error: BaseException) -> str:
    """Message shown when the connectivity test fails.

    Status errors carry the reason phrase and, when the proxy returned a
    Google API error document, its code and message.
    """
    if isinstance(error, StatusError):
        message = MESSAGE_PREFIX + (error.status_text or DEFAULT_ERROR_MESSAGE)
        data = error.data if isinstance(error.data, dict) else {}
        api_error = data.get("error")
        if isinstance(api_error, dict) and api_error.get("code"):
            message += f": {api_error['code']}. {api_error.get('message', '')}"
        return message
    if isinstance(error, MalformedResponseError):
        return format_malformed_response(error)
    return MESSAGE_PREFIX + DEFAULT_ERROR_MESSAGE
