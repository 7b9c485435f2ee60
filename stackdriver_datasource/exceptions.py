from typing import Any

from fastapi import HTTPException


class DataSourceError(HTTPException):
    """Base exception for the Stackdriver data source.

    Subclasses map to the three failure families of a backend round-trip:
    transport failures, non-success statuses and malformed response shapes.
    """

    def __init__(self, message: str, status_code: int = 500):
        """Initialize the data source error.

        Args:
            message: The error message.
            status_code: The HTTP status code to return when surfaced by the API.
        """
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class DataSourceRequestError(DataSourceError):
    """A request to the backend proxy did not complete successfully."""


class TransportError(DataSourceRequestError):
    """The request never produced an HTTP response (DNS, connect, timeout...)."""

    def __init__(self, message: str, url: str | None = None):
        """Initialize a transport error."""
        super().__init__(message, status_code=502)
        self.url = url


class StatusError(DataSourceRequestError):
    """The backend proxy answered with a non-success status code."""

    def __init__(
        self,
        status: int,
        status_text: str = "",
        data: Any = None,
        url: str | None = None,
    ):
        """Initialize a status error.

        Args:
            status: HTTP status code returned by the proxy.
            status_text: Reason phrase of the response, if any.
            data: Decoded response body (dict when JSON, raw text otherwise).
            url: The URL that was requested.
        """
        super().__init__(
            f"{status} {status_text}".strip() if status_text else str(status),
            status_code=502,
        )
        self.status = status
        self.status_text = status_text
        self.data = data
        self.url = url


class MalformedResponseError(DataSourceError):
    """The response did not have the shape the data source expects."""

    def __init__(self, message: str, data: Any = None):
        """Initialize a malformed response error."""
        super().__init__(message, status_code=502)
        self.data = data
