"""
Lift — bring collaborator calls into Result[T, AppError].

Stores return Result[T, StoreError]; providers return plain values and may
raise. Both are lifted here so services only ever see AppError.

    match await guarded("Login", lambda: customers.get_by_email(email)):
        case Ok(customer): ...
        case Error(e): ...       # e.kind is ErrorKind.INTERNAL
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog
from combinators import lift as L
from kungfu import Result, Ok, Error

from storefront._types import AppError, Errors, StoreError


logger = structlog.get_logger(__name__)


async def guarded[T](
    operation: str,
    fn: Callable[[], Awaitable[Result[T, StoreError]]],
) -> Result[T, AppError]:
    """
    Run a store call. StoreError and exceptions become INTERNAL, except a
    duplicate StoreError, which becomes CONFLICT.
    """
    result = await L.catching_async(fn, on_error=lambda e: StoreError(str(e), e))
    match result:
        case Ok(Ok(value)):
            return Ok(value)
        case Ok(Error(e)) if e.duplicate:
            logger.info("store_call_conflict", operation=operation, error=e.message)
            return Error(Errors.conflict(f"{operation} failed: {e.message}"))
        case Ok(Error(e)) | Error(e):
            logger.error("store_call_failed", operation=operation, error=e.message)
            return Error(Errors.internal(f"{operation} failed: {e.message}"))


async def catching[T](
    operation: str,
    fn: Callable[[], Awaitable[T]],
) -> Result[T, AppError]:
    """Run a provider call. Exceptions become INTERNAL."""
    result = await L.catching_async(fn, on_error=lambda e: e)
    match result:
        case Ok(value):
            return Ok(value)
        case Error(e):
            logger.error("provider_call_failed", operation=operation, error=str(e))
            return Error(Errors.internal(f"{operation} failed: {e}"))


__all__ = (
    "guarded",
    "catching",
)
