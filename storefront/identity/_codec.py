"""
TokenCodec — HS256 bearer tokens carrying the session identity.

Claims:
    Guid      subject id
    UserType  "guest" | "registered"
    Email     only when registered
    jti       unique per issuance
    iat, exp  integer seconds
    iss, aud  only when the matching validation is on

Note: expiry is checked here against the injected clock, not by PyJWT, so
the boundary is exact: a token is expired iff now >= exp.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from kungfu import Result, Ok, Error

from storefront._config import StorefrontConfig
from storefront._types import Clock, utc_now
from storefront.identity._types import (
    DecodeError,
    DecodeErrorKind,
    SessionIdentity,
    TokenClaims,
    UserType,
)


ALGORITHM = "HS256"

CLAIM_GUID = "Guid"
CLAIM_USER_TYPE = "UserType"
CLAIM_EMAIL = "Email"


class TokenCodec:
    """
    Encodes and decodes access tokens.

    Example:
        codec = TokenCodec(config)
        token = codec.issue(SessionIdentity.guest(uuid4()), config.access_token_ttl)

        match codec.decode(token, validate_expiry=True):
            case Ok(claims):
                print(claims.subject_id)
            case Error(e):
                print(e.kind)
    """

    def __init__(self, config: StorefrontConfig, clock: Clock = utc_now) -> None:
        self._secret = config.secret_key
        self._issuer = config.valid_issuer if config.validate_issuer else None
        self._audience = config.valid_audience if config.validate_audience else None
        self._clock = clock

    def issue(self, identity: SessionIdentity, ttl: timedelta) -> str:
        issued_at = int(self._clock().timestamp())
        payload: dict[str, Any] = {
            CLAIM_GUID: str(identity.subject_id),
            CLAIM_USER_TYPE: identity.user_type.value,
            "jti": str(uuid.uuid4()),
            "iat": issued_at,
            "exp": issued_at + int(ttl.total_seconds()),
        }
        if identity.email:
            payload[CLAIM_EMAIL] = identity.email
        if self._issuer is not None:
            payload["iss"] = self._issuer
        if self._audience is not None:
            payload["aud"] = self._audience

        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(
        self, token: str, validate_expiry: bool = True
    ) -> Result[TokenClaims, DecodeError]:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                issuer=self._issuer,
                audience=self._audience,
                options={
                    "verify_signature": True,
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                    "verify_iss": self._issuer is not None,
                    "verify_aud": self._audience is not None,
                    "require": ["exp", "iat", "jti", CLAIM_GUID],
                },
            )
        except jwt.InvalidSignatureError:
            return Error(DecodeError(DecodeErrorKind.INVALID_SIGNATURE, "Invalid token signature"))
        except jwt.MissingRequiredClaimError as e:
            return Error(_missing_claim(e.claim))
        except jwt.InvalidIssuerError:
            return Error(DecodeError(DecodeErrorKind.INVALID_ISSUER, "Invalid token issuer"))
        except jwt.InvalidAudienceError:
            return Error(DecodeError(DecodeErrorKind.INVALID_AUDIENCE, "Invalid token audience"))
        except jwt.InvalidTokenError as e:
            return Error(DecodeError(DecodeErrorKind.MALFORMED, f"Malformed token: {e}"))

        match _to_claims(payload):
            case Ok(claims):
                if validate_expiry and self._clock() >= claims.expires_at:
                    return Error(DecodeError(DecodeErrorKind.EXPIRED, "Token has expired"))
                return Ok(claims)
            case Error(e):
                return Error(e)


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def _missing_claim(claim: str) -> DecodeError:
    match claim:
        case "iss":
            return DecodeError(DecodeErrorKind.INVALID_ISSUER, "Token issuer is missing")
        case "aud":
            return DecodeError(DecodeErrorKind.INVALID_AUDIENCE, "Token audience is missing")
        case _:
            return DecodeError(DecodeErrorKind.MALFORMED, f"Token claim '{claim}' is missing")


def _to_claims(payload: dict[str, Any]) -> Result[TokenClaims, DecodeError]:
    try:
        subject_id = uuid.UUID(str(payload[CLAIM_GUID]))
        issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (KeyError, TypeError, ValueError, OverflowError) as e:
        return Error(DecodeError(DecodeErrorKind.MALFORMED, f"Malformed token claims: {e}"))

    user_type = payload.get(CLAIM_USER_TYPE, UserType.GUEST.value)
    email = payload.get(CLAIM_EMAIL) or None

    return Ok(TokenClaims(
        subject_id=subject_id,
        user_type=str(user_type),
        email=str(email) if email is not None else None,
        token_id=str(payload["jti"]),
        issued_at=issued_at,
        expires_at=expires_at,
    ))


__all__ = (
    "ALGORITHM",
    "CLAIM_GUID",
    "CLAIM_USER_TYPE",
    "CLAIM_EMAIL",
    "TokenCodec",
)
