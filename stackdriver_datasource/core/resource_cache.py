"""Memoization of resource listings (metric descriptors, services, SLOs).

Entries are owned by the data source instance and live as long as it does.
Nothing is ever invalidated or expired; a listing changes only after the
data source is recreated. Failed fetches are not stored, so the next call
for the same path fetches again.

The check-then-populate sequence spans an ``await``: two overlapping calls
for the same uncached path may both reach the network.
"""

import logging
import re
from collections.abc import Callable
from typing import Any, TypeVar

from ..clients.resource import ResourceClient
from ..events import DS_REQUEST_ERROR, AppEvents
from ..exceptions import DataSourceError, MalformedResponseError
from .errors import format_stackdriver_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LAST_SEGMENT = re.compile(r"([^/]*)/*$")


def last_path_segment(path: str) -> str:
    """Final non-empty segment of a resource path or name."""
    match = _LAST_SEGMENT.search(path)
    return match.group(1) if match else ""


class ResourceCache:
    """Fetches a resource list once per path and remembers the mapped items."""

    def __init__(self, client: ResourceClient, app_events: AppEvents) -> None:
        self.client = client
        self.app_events = app_events
        self._entries: dict[str, list[Any]] = {}

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def cached_list(self, path: str, map_fn: Callable[[Any], T]) -> list[T]:
        """Return the mapped list stored at ``path``, fetching it on first use.

        The list is read from the response key named after the path's last
        segment (``.../services`` -> ``services``). On failure an error event
        is emitted and an empty list is returned.
        """
        if path in self._entries:
            return self._entries[path]

        try:
            response = await self.client.fetch(path)
            data = response.data if isinstance(response.data, dict) else {}
            items = data.get(last_path_segment(path)) or []
            try:
                mapped = [map_fn(item) for item in items]
            except (KeyError, TypeError, ValueError) as e:
                raise MalformedResponseError(
                    f"Could not read '{path}': {e!r}", data=response.data
                ) from e
        except DataSourceError as e:
            message = format_stackdriver_error(e)
            logger.error(f"Failed to list resource '{path}': {message}")
            self.app_events.emit(
                DS_REQUEST_ERROR, {"error": {"data": {"error": message}}}
            )
            return []

        self._entries[path] = mapped
        logger.debug(f"Cached {len(mapped)} item(s) for '{path}'")
        return mapped
