"""
SQLAlchemy integration — customer store backed by an async engine.

Usage:
    session_factory, engine = await create_database("sqlite+aiosqlite:///shop.db")
    store = SQLAlchemyCustomerStore(session_factory)

    auth = AuthService(config, customers=store, ...)
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Integer, String, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kungfu import Result, Ok, Error

from storefront._types import StoreError
from storefront.identity._types import Customer, RefreshToken


# ═══════════════════════════════════════════════════════════════════════════════
# Base & Table
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class CustomerTable(Base):
    """
    Customers table.

    Note: `email_key` is the case-folded email and carries the unique index.
    Guests have NULL email and NULL email_key.
    """

    __tablename__ = "customers"

    guid: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email_key: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True, index=True
    )
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    registered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    two_factor_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    failed_login_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    locked_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Refresh slot
    refresh_token: Mapped[str | None] = mapped_column(String(128), nullable=True)
    refresh_token_valid_to: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create tables and return (session_factory, engine)."""
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


# ═══════════════════════════════════════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyCustomerStore:
    """CustomerStore over SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_guid(self, guid: UUID) -> Result[Customer | None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(CustomerTable, str(guid))
                return Ok(_to_customer(row) if row else None)

        except Exception as e:
            return Error(StoreError(f"Failed to get customer: {e}", e))

    async def get_by_email(self, email: str) -> Result[Customer | None, StoreError]:
        try:
            async with self._session_factory() as session:
                stmt = select(CustomerTable).where(CustomerTable.email_key == email.casefold())
                result = await session.execute(stmt)
                row = result.scalar_one_or_none()
                return Ok(_to_customer(row) if row else None)

        except Exception as e:
            return Error(StoreError(f"Failed to get customer by email: {e}", e))

    async def insert(self, customer: Customer) -> Result[Customer, StoreError]:
        try:
            async with self._session_factory() as session:
                row = CustomerTable(guid=str(customer.guid), created_at=customer.created_at)
                _apply(row, customer)
                _apply_refresh(row, customer.refresh_token)
                session.add(row)
                await session.commit()
                return Ok(customer)

        except IntegrityError as e:
            return Error(StoreError(f"Customer or email already exists: {e.orig}", e, duplicate=True))
        except Exception as e:
            return Error(StoreError(f"Failed to insert customer: {e}", e))

    async def update(self, customer: Customer) -> Result[Customer, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(CustomerTable, str(customer.guid))
                if row is None:
                    return Error(StoreError(f"Customer not found: {customer.guid}"))

                _apply(row, customer)
                await session.commit()
                return Ok(_to_customer(row))

        except IntegrityError as e:
            return Error(StoreError(f"Email already in use: {e.orig}", e, duplicate=True))
        except Exception as e:
            return Error(StoreError(f"Failed to update customer: {e}", e))

    async def get_refresh_token(
        self, guid: UUID
    ) -> Result[RefreshToken | None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(CustomerTable, str(guid))
                return Ok(_to_refresh(row) if row else None)

        except Exception as e:
            return Error(StoreError(f"Failed to get refresh token: {e}", e))

    async def set_refresh_token(
        self, guid: UUID, token: RefreshToken | None
    ) -> Result[None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(CustomerTable, str(guid))
                if row is None:
                    return Error(StoreError(f"Customer not found: {guid}"))

                _apply_refresh(row, token)
                await session.commit()
                return Ok(None)

        except Exception as e:
            return Error(StoreError(f"Failed to set refresh token: {e}", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Mapping
# ═══════════════════════════════════════════════════════════════════════════════


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo; everything is stored as UTC.
    if value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _aware_or_none(value: datetime | None) -> datetime | None:
    return _aware(value) if value is not None else None


def _apply(row: CustomerTable, customer: Customer) -> None:
    row.email = customer.email
    row.email_key = customer.email.casefold() if customer.email else None
    row.password_hash = customer.password_hash
    row.first_name = customer.first_name
    row.last_name = customer.last_name
    row.active = customer.active
    row.deleted = customer.deleted
    row.registered = customer.registered
    row.two_factor_enabled = customer.two_factor_enabled
    row.failed_login_attempts = customer.failed_login_attempts
    row.locked_until = customer.locked_until


def _apply_refresh(row: CustomerTable, token: RefreshToken | None) -> None:
    row.refresh_token = token.value if token else None
    row.refresh_token_valid_to = token.valid_to if token else None


def _to_refresh(row: CustomerTable) -> RefreshToken | None:
    if row.refresh_token is None or row.refresh_token_valid_to is None:
        return None
    return RefreshToken(
        value=row.refresh_token,
        owner_id=UUID(row.guid),
        valid_to=_aware(row.refresh_token_valid_to),
    )


def _to_customer(row: CustomerTable) -> Customer:
    return Customer(
        guid=UUID(row.guid),
        created_at=_aware(row.created_at),
        email=row.email,
        password_hash=row.password_hash,
        first_name=row.first_name,
        last_name=row.last_name,
        active=row.active,
        deleted=row.deleted,
        registered=row.registered,
        two_factor_enabled=row.two_factor_enabled,
        failed_login_attempts=row.failed_login_attempts,
        locked_until=_aware_or_none(row.locked_until),
        refresh_token=_to_refresh(row),
    )


__all__ = (
    "Base",
    "CustomerTable",
    "create_database",
    "SQLAlchemyCustomerStore",
)
