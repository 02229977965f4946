"""
Identity types — who is calling, and what they hold.

Customer is owned by the external customer store; everything else here is
derived from it or from a bearer token and never persisted on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from uuid import UUID


# ═══════════════════════════════════════════════════════════════════════════════
# Session Identity
# ═══════════════════════════════════════════════════════════════════════════════


class UserType(Enum):
    GUEST = "guest"
    REGISTERED = "registered"


@dataclass(frozen=True, slots=True)
class SessionIdentity:
    """
    Who is making a request.

    Note: produced by IdentityResolver from validated claims. `email` is set
    iff user_type is REGISTERED.
    """

    subject_id: UUID
    user_type: UserType
    email: str | None = None

    @property
    def is_guest(self) -> bool:
        return self.user_type is UserType.GUEST

    @staticmethod
    def guest(subject_id: UUID) -> SessionIdentity:
        return SessionIdentity(subject_id, UserType.GUEST)

    @staticmethod
    def registered(subject_id: UUID, email: str) -> SessionIdentity:
        return SessionIdentity(subject_id, UserType.REGISTERED, email)


# ═══════════════════════════════════════════════════════════════════════════════
# Token Claims
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Decoded access token payload."""

    subject_id: UUID
    user_type: str
    email: str | None
    token_id: str
    issued_at: datetime
    expires_at: datetime


class DecodeErrorKind(Enum):
    EXPIRED = auto()
    INVALID_SIGNATURE = auto()
    INVALID_ISSUER = auto()
    INVALID_AUDIENCE = auto()
    MALFORMED = auto()


@dataclass(frozen=True, slots=True)
class DecodeError:
    kind: DecodeErrorKind
    message: str


# ═══════════════════════════════════════════════════════════════════════════════
# Refresh Token
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RefreshToken:
    value: str
    owner_id: UUID
    valid_to: datetime


class RefreshCheck(Enum):
    """Outcome of comparing a presented refresh token with the stored slot."""

    VALID = auto()
    MISSING = auto()
    MISMATCH = auto()
    EXPIRED = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Customer
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Customer:
    """
    Stored customer record. A guest is a customer with no email.

    Note: frozen — updates go through dataclasses.replace and store.update.
    """

    guid: UUID
    created_at: datetime
    email: str | None = None
    password_hash: str | None = None
    first_name: str = ""
    last_name: str = ""
    active: bool = True
    deleted: bool = False
    registered: bool = False
    two_factor_enabled: bool = False
    failed_login_attempts: int = 0
    locked_until: datetime | None = None
    refresh_token: RefreshToken | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class LoginOutcome(Enum):
    SUCCESSFUL = auto()
    CUSTOMER_NOT_EXIST = auto()
    DELETED = auto()
    NOT_ACTIVE = auto()
    NOT_REGISTERED = auto()
    LOCKED_OUT = auto()
    WRONG_PASSWORD = auto()
    REQUIRES_TWO_FACTOR = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Grants & Events
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CustomerInfo:
    email: str
    first_name: str
    last_name: str
    full_name: str

    @staticmethod
    def of(customer: Customer) -> CustomerInfo:
        return CustomerInfo(
            email=customer.email or "",
            first_name=customer.first_name,
            last_name=customer.last_name,
            full_name=customer.full_name,
        )


@dataclass(frozen=True, slots=True)
class TokenGrant:
    """Access + refresh pair handed to the client."""

    access_token: str
    refresh_token: str
    expires_in: int  # seconds
    user_type: UserType
    customer_guid: UUID
    customer_info: CustomerInfo | None = None


@dataclass(frozen=True, slots=True)
class CustomerRegistered:
    customer_guid: UUID
    email: str
    upgraded_from_guest: bool
    occurred_at: datetime = field(compare=False)


__all__ = (
    "UserType",
    "SessionIdentity",
    "TokenClaims",
    "DecodeErrorKind",
    "DecodeError",
    "RefreshToken",
    "RefreshCheck",
    "Customer",
    "LoginOutcome",
    "CustomerInfo",
    "TokenGrant",
    "CustomerRegistered",
)
