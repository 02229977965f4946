"""
Checkout stores — carts, checkout sessions, orders.

All methods return Result for explicit error handling. In-memory
implementations are for development and tests.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol
from uuid import UUID
from weakref import WeakValueDictionary

from kungfu import Result, Ok, Error

from storefront._types import StoreError
from storefront.checkout._types import CartItem, CheckoutSession, Order


# ═══════════════════════════════════════════════════════════════════════════════
# Protocols
# ═══════════════════════════════════════════════════════════════════════════════


class CartStore(Protocol):
    async def items(self, owner_id: UUID) -> Result[tuple[CartItem, ...], StoreError]: ...

    async def put(self, owner_id: UUID, item: CartItem) -> Result[CartItem, StoreError]:
        """Insert or replace by item id."""
        ...

    async def remove(self, owner_id: UUID, item_id: str) -> Result[bool, StoreError]:
        """Returns Ok(True) if the item existed."""
        ...

    async def clear(self, owner_id: UUID) -> Result[tuple[CartItem, ...], StoreError]:
        """Remove every item. Returns what was removed."""
        ...


class CheckoutSessionStore(Protocol):
    async def get(self, owner_id: UUID) -> Result[CheckoutSession | None, StoreError]: ...

    async def save(self, session: CheckoutSession) -> Result[None, StoreError]: ...

    async def discard(self, owner_id: UUID) -> Result[bool, StoreError]: ...

    def lock(self, owner_id: UUID) -> AbstractAsyncContextManager[None]:
        """Critical section for one identity's checkout."""
        ...


class OrderStore(Protocol):
    async def save(self, order: Order) -> Result[Order, StoreError]: ...

    async def get(self, order_id: UUID) -> Result[Order | None, StoreError]: ...

    async def delete(self, order_id: UUID) -> Result[bool, StoreError]: ...


# ═══════════════════════════════════════════════════════════════════════════════
# In-memory Stores
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCartStore:
    def __init__(self) -> None:
        self._carts: dict[UUID, dict[str, CartItem]] = {}

    async def items(self, owner_id: UUID) -> Result[tuple[CartItem, ...], StoreError]:
        return Ok(tuple(self._carts.get(owner_id, {}).values()))

    async def put(self, owner_id: UUID, item: CartItem) -> Result[CartItem, StoreError]:
        if item.quantity <= 0:
            return Error(StoreError(f"Invalid quantity for cart item {item.id}"))
        self._carts.setdefault(owner_id, {})[item.id] = item
        return Ok(item)

    async def remove(self, owner_id: UUID, item_id: str) -> Result[bool, StoreError]:
        return Ok(self._carts.get(owner_id, {}).pop(item_id, None) is not None)

    async def clear(self, owner_id: UUID) -> Result[tuple[CartItem, ...], StoreError]:
        return Ok(tuple(self._carts.pop(owner_id, {}).values()))


class MemoryCheckoutSessionStore:
    def __init__(self) -> None:
        self._sessions: dict[UUID, CheckoutSession] = {}
        self._locks: WeakValueDictionary[UUID, asyncio.Lock] = WeakValueDictionary()

    async def get(self, owner_id: UUID) -> Result[CheckoutSession | None, StoreError]:
        return Ok(self._sessions.get(owner_id))

    async def save(self, session: CheckoutSession) -> Result[None, StoreError]:
        self._sessions[session.owner_id] = session
        return Ok(None)

    async def discard(self, owner_id: UUID) -> Result[bool, StoreError]:
        return Ok(self._sessions.pop(owner_id, None) is not None)

    @asynccontextmanager
    async def lock(self, owner_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.get(owner_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[owner_id] = lock
        async with lock:
            yield


class MemoryOrderStore:
    def __init__(self) -> None:
        self._orders: dict[UUID, Order] = {}

    async def save(self, order: Order) -> Result[Order, StoreError]:
        self._orders[order.id] = order
        return Ok(order)

    async def get(self, order_id: UUID) -> Result[Order | None, StoreError]:
        return Ok(self._orders.get(order_id))

    async def delete(self, order_id: UUID) -> Result[bool, StoreError]:
        return Ok(self._orders.pop(order_id, None) is not None)

    def for_owner(self, owner_id: UUID) -> list[Order]:
        return [o for o in self._orders.values() if o.owner_id == owner_id]


__all__ = (
    "CartStore",
    "CheckoutSessionStore",
    "OrderStore",
    "MemoryCartStore",
    "MemoryCheckoutSessionStore",
    "MemoryOrderStore",
)
