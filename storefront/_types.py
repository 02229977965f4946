"""
Core types for storefront.

Re-exports from kungfu + the error model shared by every component.

Every fallible operation returns Result[T, AppError]. AppError carries an
ErrorKind which knows its wire code and HTTP status, so the transport layer
never has to guess.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any

# Re-export from kungfu
from kungfu import Result, Ok, Error

# ═══════════════════════════════════════════════════════════════════════════════
# Error Kinds
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorKind(Enum):
    """Failure categories. Value is (wire code, HTTP status)."""

    VALIDATION = ("VALIDATION_ERROR", 422)
    AUTHENTICATION = ("AUTHENTICATION_ERROR", 401)
    AUTHORIZATION = ("AUTHORIZATION_ERROR", 403)
    NOT_FOUND = ("NOT_FOUND_ERROR", 404)
    CONFLICT = ("CONFLICT_ERROR", 409)
    INVALID_STATE = ("BAD_REQUEST_ERROR", 400)
    STEP_UP_REQUIRED = ("BAD_REQUEST_ERROR", 400)
    BAD_REQUEST = ("BAD_REQUEST_ERROR", 400)
    INTERNAL = ("INTERNAL_SERVER_ERROR", 500)

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def status(self) -> int:
        return self.value[1]


# ═══════════════════════════════════════════════════════════════════════════════
# AppError
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class AppError:
    """
    The only error type crossing component boundaries.

    Note: `reason` is a machine-readable tag for transport hints
    (e.g. "token_expired" adds a Token-Expired header).
    """

    kind: ErrorKind
    message: str
    details: Any = None
    reason: str | None = None

    def __str__(self) -> str:
        return f"{self.kind.code}: {self.message}"


class Errors:
    """AppError constructors, one per kind."""

    @staticmethod
    def validation(message: str, details: Any = None) -> AppError:
        return AppError(ErrorKind.VALIDATION, message, details)

    @staticmethod
    def authentication(message: str, reason: str | None = None) -> AppError:
        return AppError(ErrorKind.AUTHENTICATION, message, reason=reason)

    @staticmethod
    def authorization(message: str) -> AppError:
        return AppError(ErrorKind.AUTHORIZATION, message)

    @staticmethod
    def not_found(message: str) -> AppError:
        return AppError(ErrorKind.NOT_FOUND, message)

    @staticmethod
    def conflict(message: str) -> AppError:
        return AppError(ErrorKind.CONFLICT, message)

    @staticmethod
    def invalid_state(message: str) -> AppError:
        return AppError(ErrorKind.INVALID_STATE, message)

    @staticmethod
    def step_up_required(message: str) -> AppError:
        return AppError(ErrorKind.STEP_UP_REQUIRED, message)

    @staticmethod
    def bad_request(message: str) -> AppError:
        return AppError(ErrorKind.BAD_REQUEST, message)

    @staticmethod
    def internal(message: str, details: Any = None) -> AppError:
        return AppError(ErrorKind.INTERNAL, message, details)


# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StoreError:
    """
    Storage operation error.

    Note: `duplicate` marks a uniqueness violation (e.g. an email already
    taken); services report it as CONFLICT rather than INTERNAL.
    """

    message: str
    cause: Exception | None = None
    duplicate: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Money & Clock
# ═══════════════════════════════════════════════════════════════════════════════

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value: Decimal | int | str) -> Decimal:
    """Quantize to cents, half-up."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


type Clock = Callable[[], datetime]
"""Returns the current aware UTC datetime."""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    # Errors
    "ErrorKind",
    "AppError",
    "Errors",
    "StoreError",
    # Money & clock
    "CENTS",
    "ZERO",
    "money",
    "Clock",
    "utc_now",
)
