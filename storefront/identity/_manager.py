"""
Customer manager — credential verification and lockout bookkeeping.

Password hashing runs in a worker thread; pbkdf2 is deliberately slow.
"""

from __future__ import annotations

import asyncio
import dataclasses
from datetime import timedelta
from typing import Protocol

from passlib.context import CryptContext

from kungfu import Result, Ok, Error

from storefront._types import Clock, StoreError, utc_now
from storefront.identity._store import CustomerStore
from storefront.identity._types import Customer, LoginOutcome


class CustomerManager(Protocol):
    async def login(self, email: str, password: str) -> Result[LoginOutcome, StoreError]:
        ...

    async def hash_password(self, password: str) -> str:
        ...


class PasswordCustomerManager:
    """
    CustomerManager over passlib.

    Example:
        manager = PasswordCustomerManager(customers, max_failed_attempts=5)
        match await manager.login("a@b.c", "secret"):
            case Ok(LoginOutcome.SUCCESSFUL):
                ...

    Note: max_failed_attempts=0 disables lockout.
    """

    def __init__(
        self,
        customers: CustomerStore,
        max_failed_attempts: int = 0,
        lockout: timedelta = timedelta(minutes=30),
        clock: Clock = utc_now,
        context: CryptContext | None = None,
    ) -> None:
        self._customers = customers
        self._max_failed_attempts = max_failed_attempts
        self._lockout = lockout
        self._clock = clock
        self._context = context or CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

    async def hash_password(self, password: str) -> str:
        return await asyncio.to_thread(self._context.hash, password)

    async def verify_password(self, password: str, password_hash: str | None) -> bool:
        if not password_hash:
            return False
        return await asyncio.to_thread(self._context.verify, password, password_hash)

    async def login(self, email: str, password: str) -> Result[LoginOutcome, StoreError]:
        match await self._customers.get_by_email(email):
            case Ok(None):
                return Ok(LoginOutcome.CUSTOMER_NOT_EXIST)
            case Ok(customer):
                pass
            case Error(e):
                return Error(e)

        if customer.deleted:
            return Ok(LoginOutcome.DELETED)
        if not customer.active:
            return Ok(LoginOutcome.NOT_ACTIVE)
        if not customer.registered:
            return Ok(LoginOutcome.NOT_REGISTERED)

        now = self._clock()
        if customer.locked_until is not None and customer.locked_until > now:
            return Ok(LoginOutcome.LOCKED_OUT)

        if not await self.verify_password(password, customer.password_hash):
            match await self._customers.update(self._record_failure(customer)):
                case Ok(_):
                    return Ok(LoginOutcome.WRONG_PASSWORD)
                case Error(e):
                    return Error(e)

        if customer.failed_login_attempts or customer.locked_until:
            reset = dataclasses.replace(customer, failed_login_attempts=0, locked_until=None)
            match await self._customers.update(reset):
                case Ok(_):
                    pass
                case Error(e):
                    return Error(e)

        if customer.two_factor_enabled:
            return Ok(LoginOutcome.REQUIRES_TWO_FACTOR)

        return Ok(LoginOutcome.SUCCESSFUL)

    def _record_failure(self, customer: Customer) -> Customer:
        attempts = customer.failed_login_attempts + 1
        if self._max_failed_attempts and attempts >= self._max_failed_attempts:
            return dataclasses.replace(
                customer,
                failed_login_attempts=0,
                locked_until=self._clock() + self._lockout,
            )
        return dataclasses.replace(customer, failed_login_attempts=attempts)


__all__ = (
    "CustomerManager",
    "PasswordCustomerManager",
)
