"""RefreshTokenStore slot semantics and IdentityResolver mapping."""

import asyncio
import uuid
from datetime import timedelta

import pytest
import pytest_asyncio
from kungfu import Error, Ok

from storefront import ErrorKind
from storefront.identity import (
    TOKEN_EXPIRED,
    Customer,
    IdentityResolver,
    RefreshCheck,
    RefreshTokenStore,
    SessionIdentity,
    TokenCodec,
    UserType,
    bearer_from_header,
)

from tests.conftest import ok


@pytest_asyncio.fixture
async def owner(customers, clock):
    customer = Customer(guid=uuid.uuid4(), created_at=clock())
    await customers.insert(customer)
    return customer.guid


@pytest.fixture
def refresh(customers, clock):
    return RefreshTokenStore(customers, ttl=timedelta(days=7), clock=clock)


class TestRefreshTokenStore:
    """One live token per identity; the last save wins."""

    def test_generated_tokens_are_url_safe_and_fixed_length(self):
        tokens = {RefreshTokenStore.generate() for _ in range(20)}

        assert len(tokens) == 20
        assert all(len(t) == 43 for t in tokens)
        assert all(set(t) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_") for t in tokens)

    @pytest.mark.asyncio
    async def test_saved_token_validates(self, refresh, owner):
        await refresh.save(owner, "token-a")

        assert ok(await refresh.validate(owner, "token-a")) is True

    @pytest.mark.asyncio
    async def test_last_save_wins(self, refresh, owner):
        await refresh.save(owner, "token-a")
        await refresh.save(owner, "token-b")

        assert ok(await refresh.check(owner, "token-a")) is RefreshCheck.MISMATCH
        assert ok(await refresh.check(owner, "token-b")) is RefreshCheck.VALID

    @pytest.mark.asyncio
    async def test_expiry_boundary(self, refresh, owner, clock):
        await refresh.save(owner, "token-a")

        clock.advance(days=7, seconds=-1)
        assert ok(await refresh.check(owner, "token-a")) is RefreshCheck.VALID

        clock.advance(seconds=1)
        assert ok(await refresh.check(owner, "token-a")) is RefreshCheck.EXPIRED
        assert ok(await refresh.validate(owner, "token-a")) is False

    @pytest.mark.asyncio
    async def test_revoke_clears_slot(self, refresh, owner):
        await refresh.save(owner, "token-a")
        await refresh.revoke(owner)

        assert ok(await refresh.check(owner, "token-a")) is RefreshCheck.MISSING

    @pytest.mark.asyncio
    async def test_save_for_unknown_owner_fails(self, refresh):
        assert isinstance(await refresh.save(uuid.uuid4(), "token-a"), Error)

    @pytest.mark.asyncio
    async def test_guard_serialises_one_owner(self, refresh, owner):
        order: list[str] = []

        async def critical(name: str) -> None:
            async with refresh.guard(owner):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(critical("a"), critical("b"))

        assert order in (["a-in", "a-out", "b-in", "b-out"], ["b-in", "b-out", "a-in", "a-out"])


class TestIdentityResolver:
    """Claim presence decides the user type."""

    def test_guest_without_email(self, config, clock):
        codec = TokenCodec(config, clock)
        guid = uuid.uuid4()
        token = codec.issue(SessionIdentity.guest(guid), config.access_token_ttl)

        match IdentityResolver(codec).resolve(token):
            case Ok(identity):
                assert identity == SessionIdentity(guid, UserType.GUEST)
            case Error(e):
                pytest.fail(str(e))

    def test_registered_with_email(self, config, clock):
        codec = TokenCodec(config, clock)
        token = codec.issue(SessionIdentity.registered(uuid.uuid4(), "a@b.c"), config.access_token_ttl)

        match IdentityResolver(codec).resolve(token):
            case Ok(identity):
                assert identity.user_type is UserType.REGISTERED
                assert identity.email == "a@b.c"
            case Error(e):
                pytest.fail(str(e))

    def test_expired_token_is_tagged(self, config, clock):
        codec = TokenCodec(config, clock)
        token = codec.issue(SessionIdentity.guest(uuid.uuid4()), timedelta(minutes=1))
        clock.advance(minutes=1)

        match IdentityResolver(codec).resolve(token):
            case Ok(identity):
                pytest.fail(f"expired token resolved to {identity}")
            case Error(e):
                assert e.kind is ErrorKind.AUTHENTICATION
                assert e.reason == TOKEN_EXPIRED

    def test_header_must_be_bearer(self, config, clock):
        codec = TokenCodec(config, clock)
        token = codec.issue(SessionIdentity.guest(uuid.uuid4()), config.access_token_ttl)
        resolver = IdentityResolver(codec)

        assert isinstance(resolver.resolve_header(f"Bearer {token}"), Ok)
        assert isinstance(resolver.resolve_header(f"Token {token}"), Error)
        assert isinstance(resolver.resolve_header(token), Error)
        assert isinstance(resolver.resolve_header(None), Error)

    def test_bearer_from_header(self):
        assert bearer_from_header("Bearer abc") == "abc"
        assert bearer_from_header("Bearer ") is None
        assert bearer_from_header("bearer abc") is None
        assert bearer_from_header(None) is None
