"""SQLAlchemyCustomerStore over an aiosqlite file database."""

import dataclasses
import uuid
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from kungfu import Error

from storefront import StorefrontConfig
from storefront.identity import (
    AuthService,
    Customer,
    RefreshToken,
    SQLAlchemyCustomerStore,
    create_database,
)

from tests.conftest import TEST_SECRET, err, ok


NOW = datetime(2025, 3, 14, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def store(tmp_path):
    session_factory, engine = await create_database(f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}")
    yield SQLAlchemyCustomerStore(session_factory)
    await engine.dispose()


def customer(email: str | None = None) -> Customer:
    return Customer(guid=uuid.uuid4(), created_at=NOW, email=email, registered=email is not None)


class TestCustomers:
    @pytest.mark.asyncio
    async def test_insert_and_get(self, store):
        ann = customer("Ann@Example.com")
        ok(await store.insert(ann))

        by_guid = ok(await store.get_by_guid(ann.guid))
        by_email = ok(await store.get_by_email("ann@example.com"))

        assert by_guid == by_email
        assert by_guid.email == "Ann@Example.com"
        assert by_guid.created_at == NOW

    @pytest.mark.asyncio
    async def test_missing(self, store):
        assert ok(await store.get_by_guid(uuid.uuid4())) is None
        assert ok(await store.get_by_email("nobody@example.com")) is None

    @pytest.mark.asyncio
    async def test_email_is_unique_ignoring_case(self, store):
        ok(await store.insert(customer("ann@example.com")))

        error = err(await store.insert(customer("ANN@example.com")))

        assert error.duplicate is True

    @pytest.mark.asyncio
    async def test_update_to_taken_email_is_duplicate(self, store):
        ok(await store.insert(customer("ann@example.com")))
        guest = customer()
        ok(await store.insert(guest))

        error = err(await store.update(dataclasses.replace(guest, email="Ann@Example.com", registered=True)))

        assert error.duplicate is True

    @pytest.mark.asyncio
    async def test_guests_share_null_email(self, store):
        ok(await store.insert(customer()))
        ok(await store.insert(customer()))

    @pytest.mark.asyncio
    async def test_update_keeps_refresh_slot(self, store):
        guest = customer()
        ok(await store.insert(guest))
        token = RefreshToken(value="r-1", owner_id=guest.guid, valid_to=NOW + timedelta(days=7))
        ok(await store.set_refresh_token(guest.guid, token))

        ok(await store.update(Customer(
            guid=guest.guid, created_at=NOW, email="ann@example.com", registered=True,
        )))

        assert ok(await store.get_refresh_token(guest.guid)) == token
        assert ok(await store.get_by_email("ann@example.com")).guid == guest.guid

    @pytest.mark.asyncio
    async def test_update_unknown(self, store):
        assert isinstance(await store.update(customer()), Error)

    @pytest.mark.asyncio
    async def test_lockout_round_trip_is_timezone_aware(self, store):
        locked = dataclasses.replace(customer("ann@example.com"), locked_until=NOW + timedelta(minutes=5))
        ok(await store.insert(locked))

        loaded = ok(await store.get_by_guid(locked.guid))

        assert loaded.locked_until == NOW + timedelta(minutes=5)
        assert loaded.locked_until.tzinfo is not None
        assert loaded.created_at.tzinfo is not None
        assert loaded.refresh_token is None


class TestRefreshSlot:
    @pytest.mark.asyncio
    async def test_round_trip_is_timezone_aware(self, store):
        guest = customer()
        ok(await store.insert(guest))
        token = RefreshToken(value="r-1", owner_id=guest.guid, valid_to=NOW + timedelta(days=7))

        ok(await store.set_refresh_token(guest.guid, token))
        loaded = ok(await store.get_refresh_token(guest.guid))

        assert loaded == token
        assert loaded.valid_to.tzinfo is not None

    @pytest.mark.asyncio
    async def test_clear(self, store):
        guest = customer()
        ok(await store.insert(guest))
        ok(await store.set_refresh_token(
            guest.guid, RefreshToken(value="r-1", owner_id=guest.guid, valid_to=NOW)
        ))

        ok(await store.set_refresh_token(guest.guid, None))

        assert ok(await store.get_refresh_token(guest.guid)) is None


class TestWithAuthService:
    @pytest.mark.asyncio
    async def test_guest_upgrade_and_refresh(self, store, clock):
        config = StorefrontConfig(_env_file=None, secret_key=TEST_SECRET)
        auth = AuthService(config, store, clock=clock)

        guest = ok(await auth.create_guest())
        registered = ok(await auth.register(
            "ann@example.com", "s3cret!", "s3cret!", bearer_token=guest.access_token
        ))
        rotated = ok(await auth.refresh(registered.access_token, registered.refresh_token))

        assert registered.customer_guid == guest.customer_guid == rotated.customer_guid
