"""
IdentityResolver — bearer token → SessionIdentity.

The user type is derived from claims alone: no Email claim means guest.
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from storefront._types import AppError, Errors
from storefront.identity._codec import TokenCodec
from storefront.identity._types import (
    DecodeError,
    DecodeErrorKind,
    SessionIdentity,
    TokenClaims,
)


BEARER_PREFIX = "Bearer "
TOKEN_EXPIRED = "token_expired"


class IdentityResolver:
    def __init__(self, codec: TokenCodec) -> None:
        self._codec = codec

    def inspect(
        self, token: str, validate_expiry: bool = True
    ) -> Result[SessionIdentity, DecodeError]:
        """Decode and map claims, keeping the typed decode failure."""
        match self._codec.decode(token, validate_expiry=validate_expiry):
            case Ok(claims):
                return Ok(identity_from_claims(claims))
            case Error(e):
                return Error(e)

    def resolve(self, bearer_token: str) -> Result[SessionIdentity, AppError]:
        match self.inspect(bearer_token, validate_expiry=True):
            case Ok(identity):
                return Ok(identity)
            case Error(e) if e.kind is DecodeErrorKind.EXPIRED:
                return Error(Errors.authentication("Token has expired", reason=TOKEN_EXPIRED))
            case Error(_):
                return Error(Errors.authentication("Invalid token"))

    def resolve_header(self, authorization: str | None) -> Result[SessionIdentity, AppError]:
        match bearer_from_header(authorization):
            case None:
                return Error(Errors.authentication("Authentication required"))
            case token:
                return self.resolve(token)


def identity_from_claims(claims: TokenClaims) -> SessionIdentity:
    if claims.email:
        return SessionIdentity.registered(claims.subject_id, claims.email)
    return SessionIdentity.guest(claims.subject_id)


def bearer_from_header(authorization: str | None) -> str | None:
    """Extract the token from `Authorization: Bearer <token>`."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


__all__ = (
    "BEARER_PREFIX",
    "TOKEN_EXPIRED",
    "IdentityResolver",
    "identity_from_claims",
    "bearer_from_header",
)
