"""Application event bus used to notify the dashboard of data source errors.

Usage:
    app_events = AppEvents()
    app_events.on(DS_REQUEST_ERROR, lambda payload: ...)
    app_events.emit(DS_REQUEST_ERROR, {"error": {"data": {"error": "..."}}})
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

DS_REQUEST_ERROR = "ds-request-error"

EventHandler = Callable[[Any], None]


class AppEvents:
    """Minimal synchronous publish/subscribe bus."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def on(self, event: str, handler: EventHandler) -> None:
        """Register ``handler`` for ``event``."""
        self._handlers[event].append(handler)

    def off(self, event: str, handler: EventHandler) -> None:
        """Remove a previously registered handler."""
        if handler in self._handlers.get(event, []):
            self._handlers[event].remove(handler)

    def emit(self, event: str, payload: Any = None) -> None:
        """Deliver ``payload`` to every handler of ``event``.

        A failing handler is logged and does not stop delivery to the others.
        """
        handlers = list(self._handlers.get(event, []))
        logger.debug(f"Emitting {event} to {len(handlers)} handler(s)")
        for handler in handlers:
            try:
                handler(payload)
            except Exception as e:
                logger.error(f"Event handler for {event} failed: {e}", exc_info=True)
