"""Domain events published by the auth service."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import structlog


logger = structlog.get_logger(__name__)

type Handler = Callable[[Any], Awaitable[None]]


class EventPublisher(Protocol):
    async def publish(self, event: object) -> None: ...


class InMemoryEventBus:
    """
    Dispatches events to handlers subscribed by event type.

    Note: a failing handler is logged and does not stop the others, nor the
    operation that published the event.
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = {}
        self.published: list[object] = []

    def subscribe(self, event_type: type, handler: Handler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    async def publish(self, event: object) -> None:
        self.published.append(event)
        for handler in self._handlers.get(type(event), []):
            try:
                await handler(event)
            except Exception:
                logger.exception("event_handler_failed", event=type(event).__name__)


__all__ = (
    "EventPublisher",
    "InMemoryEventBus",
)
