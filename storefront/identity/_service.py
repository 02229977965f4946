"""
AuthService — guest sessions, login, registration, refresh, logout.

Every operation returns Result[T, AppError]. Collaborator exceptions and
StoreErrors are converted at this boundary into INTERNAL errors carrying the
operation name, e.g. "Login failed: connection reset". A duplicate email
rejected by the store is a CONFLICT.

Example:
    auth = AuthService(config, customers=MemoryCustomerStore())

    match await auth.create_guest():
        case Ok(grant):
            print(grant.access_token)
        case Error(e):
            print(e.message)
"""

from __future__ import annotations

import dataclasses
import uuid

import structlog
from kungfu import Result, Ok, Error

from storefront._config import StorefrontConfig
from storefront._types import AppError, Clock, ErrorKind, Errors, utc_now
from storefront.lift import catching, guarded
from storefront.identity._codec import TokenCodec
from storefront.identity._events import EventPublisher, InMemoryEventBus
from storefront.identity._manager import CustomerManager, PasswordCustomerManager
from storefront.identity._refresh import RefreshTokenStore
from storefront.identity._resolver import IdentityResolver
from storefront.identity._store import CustomerStore
from storefront.identity._types import (
    Customer,
    CustomerInfo,
    CustomerRegistered,
    LoginOutcome,
    RefreshCheck,
    SessionIdentity,
    TokenGrant,
    UserType,
)


logger = structlog.get_logger(__name__)


INVALID_CREDENTIALS = "Invalid email or password"
EMAIL_TAKEN = "Email address is already registered"

LOGIN_REJECTIONS: dict[LoginOutcome, str] = {
    LoginOutcome.CUSTOMER_NOT_EXIST: INVALID_CREDENTIALS,
    LoginOutcome.WRONG_PASSWORD: INVALID_CREDENTIALS,
    LoginOutcome.DELETED: "Account has been deleted",
    LoginOutcome.NOT_ACTIVE: "Account is not active",
    LoginOutcome.NOT_REGISTERED: "Account is not registered",
    LoginOutcome.LOCKED_OUT: "Account is locked out",
}


class AuthService:
    def __init__(
        self,
        config: StorefrontConfig,
        customers: CustomerStore,
        *,
        codec: TokenCodec | None = None,
        refresh_tokens: RefreshTokenStore | None = None,
        manager: CustomerManager | None = None,
        events: EventPublisher | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._config = config
        self._customers = customers
        self._clock = clock
        self._codec = codec or TokenCodec(config, clock)
        self._resolver = IdentityResolver(self._codec)
        self._refresh = refresh_tokens or RefreshTokenStore(
            customers, config.refresh_token_ttl, clock
        )
        self._manager = manager or PasswordCustomerManager(
            customers,
            max_failed_attempts=config.max_failed_login_attempts,
            lockout=config.lockout_window,
            clock=clock,
        )
        self._events = events or InMemoryEventBus()

    @property
    def resolver(self) -> IdentityResolver:
        return self._resolver

    # ═══════════════════════════════════════════════════════════════════════════
    # Operations
    # ═══════════════════════════════════════════════════════════════════════════

    async def create_guest(self) -> Result[TokenGrant, AppError]:
        guest = Customer(guid=uuid.uuid4(), created_at=self._clock())

        match await guarded("Guest creation", lambda: self._customers.insert(guest)):
            case Ok(customer):
                pass
            case Error(e):
                return Error(e)

        logger.info("guest_created", customer_guid=str(customer.guid))
        return await self._issue("Guest creation", customer)

    async def login(self, email: str, password: str) -> Result[TokenGrant, AppError]:
        if not email or not password:
            return Error(Errors.validation("Email and password are required"))

        match await guarded("Login", lambda: self._manager.login(email, password)):
            case Ok(outcome):
                pass
            case Error(e):
                return Error(e)

        match outcome:
            case LoginOutcome.SUCCESSFUL:
                pass
            case LoginOutcome.REQUIRES_TWO_FACTOR:
                logger.info("login_step_up_required")
                return Error(Errors.step_up_required("Two-factor authentication required"))
            case _:
                logger.info("login_rejected", outcome=outcome.name)
                return Error(Errors.authentication(LOGIN_REJECTIONS[outcome]))

        match await guarded("Login", lambda: self._customers.get_by_email(email)):
            case Ok(None):
                return Error(Errors.authentication(INVALID_CREDENTIALS))
            case Ok(customer):
                pass
            case Error(e):
                return Error(e)

        logger.info("login_succeeded", customer_guid=str(customer.guid))
        return await self._issue("Login", customer)

    async def register(
        self,
        email: str,
        password: str,
        confirm_password: str,
        first_name: str = "",
        last_name: str = "",
        bearer_token: str | None = None,
    ) -> Result[TokenGrant, AppError]:
        """
        Register an account.

        Note: a valid guest bearer token whose customer is not yet registered
        is upgraded in place, so the guest's Guid (and its cart) is kept.
        Any other token is ignored and a new customer is created.
        """
        if not email or not password:
            return Error(Errors.validation("Email and password are required"))
        if password != confirm_password:
            return Error(Errors.validation("Passwords do not match"))

        match await guarded("Registration", lambda: self._customers.get_by_email(email)):
            case Ok(None):
                pass
            case Ok(_):
                return Error(Errors.conflict(EMAIL_TAKEN))
            case Error(e):
                return Error(e)

        match await self._upgradable_guest(bearer_token):
            case Ok(guest):
                pass
            case Error(e):
                return Error(e)

        match await catching("Registration", lambda: self._manager.hash_password(password)):
            case Ok(password_hash):
                pass
            case Error(e):
                return Error(e)

        if guest is not None:
            upgraded = dataclasses.replace(
                guest,
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                registered=True,
                active=True,
            )
            stored = await guarded("Registration", lambda: self._customers.update(upgraded))
        else:
            created = Customer(
                guid=uuid.uuid4(),
                created_at=self._clock(),
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                registered=True,
            )
            stored = await guarded("Registration", lambda: self._customers.insert(created))

        match stored:
            case Ok(customer):
                pass
            case Error(e) if e.kind is ErrorKind.CONFLICT:
                # Lost a race with a concurrent registration of the same email.
                return Error(Errors.conflict(EMAIL_TAKEN))
            case Error(e):
                return Error(e)

        logger.info(
            "customer_registered",
            customer_guid=str(customer.guid),
            upgraded_from_guest=guest is not None,
        )
        await self._publish(CustomerRegistered(
            customer_guid=customer.guid,
            email=email,
            upgraded_from_guest=guest is not None,
            occurred_at=self._clock(),
        ))

        return await self._issue("Registration", customer)

    async def refresh(
        self, access_token: str, refresh_token: str
    ) -> Result[TokenGrant, AppError]:
        if not access_token or not refresh_token:
            return Error(Errors.validation("Access token and refresh token are required"))

        match self._resolver.inspect(access_token, validate_expiry=False):
            case Ok(identity):
                pass
            case Error(_):
                return Error(Errors.authentication("Invalid access token"))

        email = identity.email

        match await guarded("Token refresh", lambda: (
            self._customers.get_by_email(email)
            if email
            else self._customers.get_by_guid(identity.subject_id)
        )):
            case Ok(None):
                return Error(Errors.authentication("Customer not found"))
            case Ok(customer):
                pass
            case Error(e):
                return Error(e)

        async with self._refresh.guard(customer.guid):
            match await guarded(
                "Token refresh", lambda: self._refresh.check(customer.guid, refresh_token)
            ):
                case Ok(RefreshCheck.VALID):
                    pass
                case Ok(RefreshCheck.EXPIRED):
                    return Error(Errors.authentication("Refresh token expired"))
                case Ok(_):
                    logger.info("refresh_rejected", customer_guid=str(customer.guid))
                    return Error(Errors.authentication("Invalid refresh token"))
                case Error(e):
                    return Error(e)

            logger.info("token_refreshed", customer_guid=str(customer.guid))
            return await self._issue("Token refresh", customer)

    async def logout(self, identity: SessionIdentity) -> Result[None, AppError]:
        """Revoke the identity's refresh token. Idempotent."""
        match await guarded("Logout", lambda: self._customers.get_by_guid(identity.subject_id)):
            case Ok(None):
                return Ok(None)
            case Ok(customer):
                pass
            case Error(e):
                return Error(e)

        match await guarded("Logout", lambda: self._refresh.revoke(customer.guid)):
            case Ok(_):
                logger.info("logged_out", customer_guid=str(customer.guid))
                return Ok(None)
            case Error(e):
                return Error(e)

    # ═══════════════════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════════════════

    async def _issue(self, operation: str, customer: Customer) -> Result[TokenGrant, AppError]:
        """Save a fresh refresh token, then sign the access token."""
        if customer.email:
            identity = SessionIdentity.registered(customer.guid, customer.email)
        else:
            identity = SessionIdentity.guest(customer.guid)

        refresh_value = self._refresh.generate()
        match await guarded(operation, lambda: self._refresh.save(customer.guid, refresh_value)):
            case Ok(_):
                pass
            case Error(e):
                return Error(e)

        return Ok(TokenGrant(
            access_token=self._codec.issue(identity, self._config.access_token_ttl),
            refresh_token=refresh_value,
            expires_in=self._config.access_token_expiration * 60,
            user_type=identity.user_type,
            customer_guid=customer.guid,
            customer_info=(
                CustomerInfo.of(customer) if identity.user_type is UserType.REGISTERED else None
            ),
        ))

    async def _upgradable_guest(
        self, bearer_token: str | None
    ) -> Result[Customer | None, AppError]:
        if not bearer_token:
            return Ok(None)

        match self._resolver.inspect(bearer_token, validate_expiry=True):
            case Ok(identity) if identity.is_guest:
                pass
            case Ok(_):
                return Ok(None)
            case Error(e):
                logger.info("register_token_ignored", reason=e.kind.name)
                return Ok(None)

        match await guarded(
            "Registration", lambda: self._customers.get_by_guid(identity.subject_id)
        ):
            case Ok(customer) if customer is not None and not customer.registered:
                return Ok(customer)
            case Ok(_):
                return Ok(None)
            case Error(e):
                return Error(e)

    async def _publish(self, event: object) -> None:
        # Registration already happened; a failed publish is logged only.
        match await catching("Event publish", lambda: self._events.publish(event)):
            case Ok(_):
                pass
            case Error(e):
                logger.warning("event_publish_failed", event=type(event).__name__, error=e.message)


__all__ = (
    "INVALID_CREDENTIALS",
    "LOGIN_REJECTIONS",
    "AuthService",
)
