"""
RefreshTokenStore — one live refresh token per identity.

The slot lives on the customer record. Saving overwrites, so the most
recent save wins and every earlier token stops validating.
"""

from __future__ import annotations

import asyncio
import hmac
import secrets
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from uuid import UUID
from weakref import WeakValueDictionary

from kungfu import Result, Ok, Error

from storefront._types import Clock, StoreError, utc_now
from storefront.identity._store import CustomerStore
from storefront.identity._types import RefreshCheck, RefreshToken


TOKEN_BYTES = 32  # 43 url-safe characters


class RefreshTokenStore:
    """
    Example:
        store = RefreshTokenStore(customers, ttl=config.refresh_token_ttl)

        async with store.guard(owner_id):
            match await store.check(owner_id, presented):
                case Ok(RefreshCheck.VALID):
                    await store.save(owner_id, store.generate())
    """

    def __init__(
        self,
        customers: CustomerStore,
        ttl: timedelta,
        clock: Clock = utc_now,
    ) -> None:
        self._customers = customers
        self._ttl = ttl
        self._clock = clock
        self._locks: WeakValueDictionary[UUID, asyncio.Lock] = WeakValueDictionary()

    @staticmethod
    def generate() -> str:
        return secrets.token_urlsafe(TOKEN_BYTES)

    async def save(self, owner_id: UUID, value: str) -> Result[RefreshToken, StoreError]:
        token = RefreshToken(value=value, owner_id=owner_id, valid_to=self._clock() + self._ttl)
        match await self._customers.set_refresh_token(owner_id, token):
            case Ok(_):
                return Ok(token)
            case Error(e):
                return Error(e)

    async def check(self, owner_id: UUID, value: str) -> Result[RefreshCheck, StoreError]:
        """Compare a presented token with the stored slot."""
        match await self._customers.get_refresh_token(owner_id):
            case Ok(None):
                return Ok(RefreshCheck.MISSING)
            case Ok(stored):
                if not hmac.compare_digest(stored.value.encode(), value.encode()):
                    return Ok(RefreshCheck.MISMATCH)
                if self._clock() >= stored.valid_to:
                    return Ok(RefreshCheck.EXPIRED)
                return Ok(RefreshCheck.VALID)
            case Error(e):
                return Error(e)

    async def validate(self, owner_id: UUID, value: str) -> Result[bool, StoreError]:
        match await self.check(owner_id, value):
            case Ok(outcome):
                return Ok(outcome is RefreshCheck.VALID)
            case Error(e):
                return Error(e)

    async def revoke(self, owner_id: UUID) -> Result[None, StoreError]:
        return await self._customers.set_refresh_token(owner_id, None)

    @asynccontextmanager
    async def guard(self, owner_id: UUID) -> AsyncIterator[None]:
        """Serialise check-then-save for one identity within this process."""
        lock = self._locks.get(owner_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[owner_id] = lock
        async with lock:
            yield


__all__ = (
    "TOKEN_BYTES",
    "RefreshTokenStore",
)
