"""
Endpoint — one handler, exposed through any number of (trigger, codec) pairs.

    endp = endpoint(login).expose(
        HTTPRouteTrigger("POST", "/auth/login"),
        RequestResponseCodec(LoginIn, TokenGrantOut),
    )
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

from storefront.wire._types import Codec, Exposure, Handler, Trigger


@dataclass(frozen=True, slots=True)
class Endpoint:
    handler: Handler
    name: str
    exposures: tuple[Exposure, ...] = ()

    def expose(self, trigger: Trigger, codec: Codec) -> Endpoint:
        """Return a copy with one more exposure. The original is unchanged."""
        return dataclasses.replace(self, exposures=(*self.exposures, (trigger, codec)))


def endpoint(handler: Handler, name: str | None = None) -> Endpoint:
    """Wrap a handler. `name` defaults to the handler's function name."""
    return Endpoint(handler=handler, name=name or handler.__name__)
