"""
Customer store — typed storage protocol.

All methods return Result for explicit error handling. The refresh token
lives on the customer record as a single slot.
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Protocol
from uuid import UUID

from kungfu import Result, Ok, Error

from storefront._types import StoreError
from storefront.identity._types import Customer, RefreshToken


# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class CustomerStore(Protocol):
    """
    Customer persistence.

    Note: email lookups are case-insensitive; `insert` fails when another
    customer already holds the email.
    """

    async def get_by_guid(self, guid: UUID) -> Result[Customer | None, StoreError]:
        """Get customer. Returns Ok(None) if not found."""
        ...

    async def get_by_email(self, email: str) -> Result[Customer | None, StoreError]:
        """Get customer by email. Returns Ok(None) if not found."""
        ...

    async def insert(self, customer: Customer) -> Result[Customer, StoreError]:
        ...

    async def update(self, customer: Customer) -> Result[Customer, StoreError]:
        """Replace the stored record with the same guid. The refresh slot is kept."""
        ...

    async def get_refresh_token(
        self, guid: UUID
    ) -> Result[RefreshToken | None, StoreError]:
        ...

    async def set_refresh_token(
        self, guid: UUID, token: RefreshToken | None
    ) -> Result[None, StoreError]:
        """Overwrite the slot. None clears it."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# In-memory Store
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCustomerStore:
    """
    In-memory customer store.

    Note: for development and tests. Not shared across processes.
    """

    def __init__(self) -> None:
        self._customers: dict[UUID, Customer] = {}
        self._lock = asyncio.Lock()

    async def get_by_guid(self, guid: UUID) -> Result[Customer | None, StoreError]:
        return Ok(self._customers.get(guid))

    async def get_by_email(self, email: str) -> Result[Customer | None, StoreError]:
        needle = email.casefold()
        for customer in self._customers.values():
            if customer.email is not None and customer.email.casefold() == needle:
                return Ok(customer)
        return Ok(None)

    async def insert(self, customer: Customer) -> Result[Customer, StoreError]:
        async with self._lock:
            if customer.guid in self._customers:
                return Error(StoreError(f"Customer already exists: {customer.guid}", duplicate=True))
            if conflict := self._email_taken(customer):
                return Error(StoreError(f"Email already in use: {conflict}", duplicate=True))
            self._customers[customer.guid] = customer
            return Ok(customer)

    async def update(self, customer: Customer) -> Result[Customer, StoreError]:
        async with self._lock:
            current = self._customers.get(customer.guid)
            if current is None:
                return Error(StoreError(f"Customer not found: {customer.guid}"))
            if conflict := self._email_taken(customer):
                return Error(StoreError(f"Email already in use: {conflict}", duplicate=True))
            stored = dataclasses.replace(customer, refresh_token=current.refresh_token)
            self._customers[customer.guid] = stored
            return Ok(stored)

    async def get_refresh_token(
        self, guid: UUID
    ) -> Result[RefreshToken | None, StoreError]:
        customer = self._customers.get(guid)
        return Ok(customer.refresh_token if customer else None)

    async def set_refresh_token(
        self, guid: UUID, token: RefreshToken | None
    ) -> Result[None, StoreError]:
        async with self._lock:
            customer = self._customers.get(guid)
            if customer is None:
                return Error(StoreError(f"Customer not found: {guid}"))
            self._customers[guid] = dataclasses.replace(customer, refresh_token=token)
            return Ok(None)

    def _email_taken(self, customer: Customer) -> str | None:
        if customer.email is None:
            return None
        needle = customer.email.casefold()
        for other in self._customers.values():
            if (
                other.guid != customer.guid
                and other.email is not None
                and other.email.casefold() == needle
            ):
                return customer.email
        return None


__all__ = (
    "CustomerStore",
    "MemoryCustomerStore",
)
