"""Shared fixtures: a controllable clock, config, and wired services."""

import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from kungfu import Error, Ok
from passlib.context import CryptContext

from storefront import StorefrontConfig, build_services
from storefront.checkout import (
    Address,
    MemoryCartStore,
    MemoryCatalog,
    MemoryCheckoutSessionStore,
    MemoryOrderStore,
    Product,
)
from storefront.identity import (
    InMemoryEventBus,
    MemoryCustomerStore,
    PasswordCustomerManager,
)


TEST_SECRET = "storefront-test-secret-key-0123456789abcdef"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 3, 14, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def config() -> StorefrontConfig:
    return StorefrontConfig(_env_file=None, secret_key=TEST_SECRET)


@pytest.fixture
def customers() -> MemoryCustomerStore:
    return MemoryCustomerStore()


@pytest.fixture
def events() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def manager(customers, config, clock) -> PasswordCustomerManager:
    return PasswordCustomerManager(
        customers,
        max_failed_attempts=config.max_failed_login_attempts,
        lockout=config.lockout_window,
        clock=clock,
        context=CryptContext(schemes=["pbkdf2_sha256"], pbkdf2_sha256__default_rounds=1000),
    )


@pytest.fixture
def catalog() -> MemoryCatalog:
    return MemoryCatalog([
        Product(id="p-book", name="Book", price=Decimal("10.00"), sku="BK-1", stock_quantity=10),
        Product(id="p-pen", name="Pen", price=Decimal("2.50"), sku="PN-1"),
        Product(id="p-hidden", name="Hidden", price=Decimal("5.00"), published=False),
        Product(
            id="p-gift",
            name="Gift card",
            price=Decimal("25.00"),
            customer_enters_price=True,
            min_entered_price=Decimal("5.00"),
            max_entered_price=Decimal("100.00"),
        ),
    ])


@pytest.fixture
def carts() -> MemoryCartStore:
    return MemoryCartStore()


@pytest.fixture
def sessions() -> MemoryCheckoutSessionStore:
    return MemoryCheckoutSessionStore()


@pytest.fixture
def orders() -> MemoryOrderStore:
    return MemoryOrderStore()


@pytest.fixture
def services(config, customers, carts, catalog, sessions, orders, manager, events, clock):
    return build_services(
        config,
        customers=customers,
        carts=carts,
        catalog=catalog,
        sessions=sessions,
        orders=orders,
        manager=manager,
        events=events,
        clock=clock,
        rng=random.Random(7),
    )


@pytest.fixture
def auth(services):
    return services.auth


@pytest.fixture
def cart(services):
    return services.cart


@pytest.fixture
def checkout(services):
    return services.checkout


@pytest.fixture
def address() -> Address:
    return Address(
        first_name="Ann",
        last_name="Lee",
        email="ann@example.com",
        address1="1 Main St",
        city="Springfield",
        zip_postal_code="12345",
        country_id="US",
    )


def ok(result):
    """Unwrap an Ok or fail the test."""
    match result:
        case Ok(value):
            return value
        case Error(e):
            pytest.fail(f"expected Ok, got Error({e})")


def err(result):
    """Unwrap an Error or fail the test."""
    match result:
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value})")
        case Error(e):
            return e
