from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from kungfu import Result

from storefront._types import AppError
from storefront.identity import SessionIdentity
from storefront.wire.codecs.rrc import RequestResponseCodec
from storefront.wire.triggers.http import HTTPRouteTrigger


@dataclass(frozen=True, slots=True)
class Caller:
    """
    Who is calling, as far as the transport could tell.

    Note: `identity` is set only on routes requiring auth. `bearer_token`
    is the raw token, if any was sent.
    """

    identity: SessionIdentity | None = None
    bearer_token: str | None = None

    def require(self) -> SessionIdentity:
        if self.identity is None:
            raise RuntimeError("Route declared without Auth.REQUIRED")
        return self.identity


type Handler = Callable[[Any, Caller], Awaitable[Result[Any, AppError]]]

# compiler supports (HTTPRouteTrigger, RequestResponseCodec) pairs
type Trigger = HTTPRouteTrigger
type Codec = RequestResponseCodec
type Exposure = tuple[Trigger, Codec]
