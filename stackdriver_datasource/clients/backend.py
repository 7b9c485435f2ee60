"""HTTP access to the dashboard server's data source proxy.

``BackendSrv.datasource_request`` is the single outbound seam of the data
source. It turns every failure into one of the typed errors from
``stackdriver_datasource.exceptions``:

- ``TransportError`` when no response was received
- ``StatusError`` for non-2xx responses (with the decoded body attached)
- ``MalformedResponseError`` when a 2xx body is not valid JSON
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..exceptions import MalformedResponseError, StatusError, TransportError
from ..telemetry import get_tracer

logger = logging.getLogger(__name__)

TSDB_QUERY_URL = "/api/tsdb/query"


@dataclass
class BackendResponse:
    """A successful proxy response."""

    status: int
    status_text: str
    data: Any


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class BackendSrv:
    """Async client for the dashboard server that hosts the data source proxy."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def datasource_request(
        self,
        url: str,
        method: str = "GET",
        data: Any = None,
    ) -> BackendResponse:
        """Send one request through the proxy.

        Args:
            url: Absolute URL or path relative to the dashboard server.
            method: HTTP method.
            data: JSON body for POST requests.

        Returns:
            The decoded response.

        Raises:
            TransportError: The request did not produce a response.
            StatusError: The proxy answered with a non-2xx status.
            MalformedResponseError: A 2xx body could not be decoded as JSON.
        """
        with get_tracer().start_as_current_span("datasource_request") as span:
            span.set_attribute("http.method", method)
            span.set_attribute("http.url", url)
            try:
                response = await self._client.request(method, url, json=data)
            except httpx.RequestError as e:
                logger.warning(f"Transport failure for {method} {url}: {e}")
                span.set_attribute("error", True)
                raise TransportError(
                    f"Request to {url} failed: {e}", url=url
                ) from e

            span.set_attribute("http.status_code", response.status_code)
            body = _decode_body(response)

            if not response.is_success:
                logger.warning(
                    f"{method} {url} returned {response.status_code} {response.reason_phrase}"
                )
                span.set_attribute("error", True)
                raise StatusError(
                    response.status_code,
                    response.reason_phrase,
                    data=body,
                    url=url,
                )

            if isinstance(body, str):
                raise MalformedResponseError(
                    f"Expected a JSON body from {url}", data=body
                )

            logger.debug(f"{method} {url} -> {response.status_code}")
            return BackendResponse(
                status=response.status_code,
                status_text=response.reason_phrase,
                data=body,
            )
