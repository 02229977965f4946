"""
Application — the endpoints served under one path prefix.

    app = application(prefix="/api").mount(guest, login, cart)
    for route in app.routes():
        print(route.trigger.method, route.trigger.path)
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Self

from storefront.wire._endpoint import Endpoint
from storefront.wire._types import Codec, Handler, Trigger


@dataclass(frozen=True, slots=True)
class Route:
    name: str
    handler: Handler
    trigger: Trigger
    codec: Codec


class Application:
    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix.rstrip("/")
        self.endpoints: list[Endpoint] = []
        self._taken: dict[tuple[str, str], str] = {}

    def mount(self, *endps: Endpoint) -> Self:
        """
        Add endpoints.

        Raises ValueError when two exposures share a method and path; a
        clash is a wiring bug, not something to resolve at request time.
        """
        for endp in endps:
            for trigger, _ in endp.exposures:
                key = (trigger.method, trigger.path)
                if key in self._taken:
                    raise ValueError(
                        f"{trigger.method} {trigger.path} exposed by both "
                        f"{self._taken[key]!r} and {endp.name!r}"
                    )
                self._taken[key] = endp.name
            self.endpoints.append(endp)
        return self

    def routes(self) -> Iterator[Route]:
        """Every exposure, with the prefix applied to its path."""
        for endp in self.endpoints:
            for trigger, codec in endp.exposures:
                if self.prefix:
                    trigger = dataclasses.replace(trigger, path=self.prefix + trigger.path)
                yield Route(name=endp.name, handler=endp.handler, trigger=trigger, codec=codec)


def application(prefix: str = "") -> Application:
    return Application(prefix)


__all__ = (
    "Route",
    "Application",
    "application",
)
